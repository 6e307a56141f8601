"""
Low-level geometry helpers on plain float tuples.

These run in the inner loop of the flattener, so they avoid allocating
Point objects or numpy arrays.
"""
from __future__ import annotations

from typing import List, Tuple
import math

XY = Tuple[float, float]
CubicXY = Tuple[XY, XY, XY, XY]


def point_segment_distance(p: XY, a: XY, b: XY) -> float:
    """Distance from point p to the closed segment [a, b] (point distance if a == b)."""
    px, py = p
    ax, ay = a
    dx, dy = b[0] - ax, b[1] - ay
    length_sq = dx * dx + dy * dy
    if length_sq == 0.0:
        return math.hypot(px - ax, py - ay)
    t = ((px - ax) * dx + (py - ay) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return math.hypot(px - (ax + t * dx), py - (ay + t * dy))


def lerp(p: XY, q: XY, t: float) -> XY:
    return (p[0] + (q[0] - p[0]) * t, p[1] + (q[1] - p[1]) * t)


def split_cubic(p0: XY, p1: XY, p2: XY, p3: XY, t: float = 0.5) -> Tuple[CubicXY, CubicXY]:
    """Split a cubic Bezier at t into two exact sub-curves (de Casteljau construction)."""
    p01 = lerp(p0, p1, t)
    p12 = lerp(p1, p2, t)
    p23 = lerp(p2, p3, t)
    p012 = lerp(p01, p12, t)
    p123 = lerp(p12, p23, t)
    mid = lerp(p012, p123, t)
    return (p0, p01, p012, mid), (mid, p123, p23, p3)


def cubic_point(p0: XY, p1: XY, p2: XY, p3: XY, t: float) -> XY:
    mt = 1.0 - t
    w0 = mt * mt * mt
    w1 = 3.0 * mt * mt * t
    w2 = 3.0 * mt * t * t
    w3 = t * t * t
    return (
        w0 * p0[0] + w1 * p1[0] + w2 * p2[0] + w3 * p3[0],
        w0 * p0[1] + w1 * p1[1] + w2 * p2[1] + w3 * p3[1],
    )


def cubic_derivative(p0: XY, p1: XY, p2: XY, p3: XY, t: float) -> XY:
    mt = 1.0 - t
    w0 = 3.0 * mt * mt
    w1 = 6.0 * mt * t
    w2 = 3.0 * t * t
    return (
        w0 * (p1[0] - p0[0]) + w1 * (p2[0] - p1[0]) + w2 * (p3[0] - p2[0]),
        w0 * (p1[1] - p0[1]) + w1 * (p2[1] - p1[1]) + w2 * (p3[1] - p2[1]),
    )


def cubic_extrema_parameters(a0: float, a1: float, a2: float, a3: float) -> List[float]:
    """
    Parameters t in (0, 1) where the 1-D cubic Bezier with coefficients a0..a3
    has a vanishing derivative.
    """
    # B'(t)/3 = A t^2 + B t + C
    qa = -a0 + 3.0 * a1 - 3.0 * a2 + a3
    qb = 2.0 * (a0 - 2.0 * a1 + a2)
    qc = a1 - a0

    roots: List[float] = []
    if abs(qa) < 1e-12:
        if abs(qb) > 1e-12:
            roots.append(-qc / qb)
    else:
        disc = qb * qb - 4.0 * qa * qc
        if disc >= 0.0:
            sq = math.sqrt(disc)
            roots.append((-qb + sq) / (2.0 * qa))
            roots.append((-qb - sq) / (2.0 * qa))
    return [t for t in roots if 0.0 < t < 1.0]


def elevate_quadratic(p0: XY, q: XY, p2: XY) -> Tuple[XY, XY]:
    """Exact degree elevation of a quadratic Bezier: return the two cubic control points."""
    c1 = (p0[0] + 2.0 / 3.0 * (q[0] - p0[0]), p0[1] + 2.0 / 3.0 * (q[1] - p0[1]))
    c2 = (p2[0] + 2.0 / 3.0 * (q[0] - p2[0]), p2[1] + 2.0 / 3.0 * (q[1] - p2[1]))
    return c1, c2


def signed_angle(ux: float, uy: float, vx: float, vy: float) -> float:
    """Signed angle from vector u to vector v, in (-pi, pi]."""
    return math.atan2(ux * vy - uy * vx, ux * vx + uy * vy)


def largest_singular_value(ux: float, uy: float, vx: float, vy: float) -> float:
    """Largest singular value of the 2x2 matrix with columns u and v."""
    s = ux * ux + uy * uy + vx * vx + vy * vy
    det = ux * vy - uy * vx
    disc = max(0.0, s * s - 4.0 * det * det)
    return math.sqrt((s + math.sqrt(disc)) / 2.0)


def svg_arc_to_center(
    start: XY,
    end: XY,
    rx: float,
    ry: float,
    x_axis_rotation_deg: float,
    large_arc: bool,
    sweep: bool,
) -> Tuple[XY, float, float, float, float, float]:
    """
    Convert SVG endpoint arc parameters to centre parametrisation.

    Follows SVG 1.1 appendix F.6.5 / F.6.6 (endpoint to center parameterization).
    The caller handles the degenerate cases (coincident endpoints, zero radius).

    Returns:
        (center, rx, ry, phi, theta1, delta_theta) with angles in radians and
        radii already scaled up if they were too small to span the endpoints.
    """
    rx, ry = abs(rx), abs(ry)
    phi = math.radians(x_axis_rotation_deg % 360.0)
    cos_phi, sin_phi = math.cos(phi), math.sin(phi)

    # Eq 5.1
    dx2 = (start[0] - end[0]) / 2.0
    dy2 = (start[1] - end[1]) / 2.0
    x1p = cos_phi * dx2 + sin_phi * dy2
    y1p = -sin_phi * dx2 + cos_phi * dy2

    # Radii correction (Eq 6.2 / 6.3)
    lam = (x1p / rx) ** 2 + (y1p / ry) ** 2
    if lam > 1.0:
        scale = math.sqrt(lam)
        rx *= scale
        ry *= scale

    # Eq 5.2
    rx2, ry2 = rx * rx, ry * ry
    num = rx2 * ry2 - rx2 * y1p * y1p - ry2 * x1p * x1p
    den = rx2 * y1p * y1p + ry2 * x1p * x1p
    coef = math.sqrt(max(0.0, num / den))
    if large_arc == sweep:
        coef = -coef
    cxp = coef * rx * y1p / ry
    cyp = -coef * ry * x1p / rx

    # Eq 5.3
    cx = cos_phi * cxp - sin_phi * cyp + (start[0] + end[0]) / 2.0
    cy = sin_phi * cxp + cos_phi * cyp + (start[1] + end[1]) / 2.0

    # Eq 5.5 / 5.6
    ux, uy = (x1p - cxp) / rx, (y1p - cyp) / ry
    vx, vy = (-x1p - cxp) / rx, (-y1p - cyp) / ry
    theta1 = signed_angle(1.0, 0.0, ux, uy)
    delta = signed_angle(ux, uy, vx, vy)
    if not sweep and delta > 0.0:
        delta -= 2.0 * math.pi
    elif sweep and delta < 0.0:
        delta += 2.0 * math.pi

    return (cx, cy), rx, ry, phi, theta1, delta


def arc_to_cubic_control_points(
    center: XY,
    u: XY,
    v: XY,
    theta: float,
    delta: float,
    max_segment_angle: float = math.pi / 2.0,
) -> List[CubicXY]:
    """
    Approximate the parametric arc C + u cos(t) + v sin(t), t in [theta, theta + delta],
    with cubic Beziers, one per span of at most max_segment_angle.

        P1 = P0 + alpha * A'(eta_1)
        P2 = P3 - alpha * A'(eta_2)
        alpha = sin(d) * (sqrt(4 + 3 tan(d/2)^2) - 1) / 3
    """
    def arc(a: float) -> XY:
        cos_a, sin_a = math.cos(a), math.sin(a)
        return (center[0] + u[0] * cos_a + v[0] * sin_a, center[1] + u[1] * cos_a + v[1] * sin_a)

    def arc_d(a: float) -> XY:
        cos_a, sin_a = math.cos(a), math.sin(a)
        return (-u[0] * sin_a + v[0] * cos_a, -u[1] * sin_a + v[1] * cos_a)

    count = max(1, math.ceil(abs(delta) / max_segment_angle - 1e-12))
    step = delta / count
    segments: List[CubicXY] = []
    for i in range(count):
        eta_1 = theta + i * step
        eta_2 = eta_1 + step
        alpha = math.sin(step) * (math.sqrt(4.0 + 3.0 * math.tan(step / 2.0) ** 2) - 1.0) / 3.0
        p0, p3 = arc(eta_1), arc(eta_2)
        d0, d3 = arc_d(eta_1), arc_d(eta_2)
        p1 = (p0[0] + alpha * d0[0], p0[1] + alpha * d0[1])
        p2 = (p3[0] - alpha * d3[0], p3[1] - alpha * d3[1])
        segments.append((p0, p1, p2, p3))
    return segments
