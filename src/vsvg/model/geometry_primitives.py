"""
Geometric Primitives
====================
Exact curve representations retained by the document model.

Curves are never flattened here. Every primitive supports an exact affine
transform, evaluation at a parameter t in [0, 1], and a bounding box; the
polyline approximation is produced on demand by vsvg.controller.flattener.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple, TYPE_CHECKING
import math

import numpy as np

from vsvg.errors import GeometryError
from vsvg.model import geometry_utils as gu

if TYPE_CHECKING:
    import numpy.typing as npt
    from vsvg.model.transforms import Transform


@dataclass(frozen=True)
class Vector:
    """A displacement in the plane."""
    x: float
    y: float

    def __add__(self, other: Vector) -> Vector:
        return Vector(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vector) -> Vector:
        return Vector(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> Vector:
        return Vector(self.x * scalar, self.y * scalar)

    def __neg__(self) -> Vector:
        return Vector(-self.x, -self.y)

    @property
    def magnitude(self) -> float:
        return math.hypot(self.x, self.y)

    def normalize(self) -> Vector:
        mag = self.magnitude
        if mag == 0.0:
            return Vector(0.0, 0.0)
        return Vector(self.x / mag, self.y / mag)

    def dot(self, other: Vector) -> float:
        return self.x * other.x + self.y * other.y

    def cross(self, other: Vector) -> float:
        """Z component of the 3D cross product."""
        return self.x * other.y - self.y * other.x

    def angle_to(self, other: Vector) -> float:
        """Signed angle in radians from this vector to another."""
        return gu.signed_angle(self.x, self.y, other.x, other.y)


@dataclass(frozen=True)
class Point:
    """A point with finite coordinates."""
    x: float
    y: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.x) and math.isfinite(self.y)):
            raise GeometryError(f"Point coordinates must be finite, got ({self.x}, {self.y}).")

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y

    def __add__(self, other: Vector) -> Point:
        # Point + Vector = Point (Translation)
        if isinstance(other, Vector):
            return Point(self.x + other.x, self.y + other.y)
        raise TypeError("Can only add a Vector to a Point.")

    def __sub__(self, other: Point) -> Vector:
        # Point - Point = Vector (Direction)
        if isinstance(other, Point):
            return Vector(self.x - other.x, self.y - other.y)
        raise TypeError("Can only subtract a Point from a Point.")

    @property
    def xy(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def distance_to(self, other: Point) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def lerp(self, other: Point, t: float) -> Point:
        return Point(self.x + (other.x - self.x) * t, self.y + (other.y - self.y) * t)

    def is_close(self, other: Point, rel_tol: float = 1e-9, abs_tol: float = 1e-12) -> bool:
        return (
            math.isclose(self.x, other.x, rel_tol=rel_tol, abs_tol=abs_tol)
            and math.isclose(self.y, other.y, rel_tol=rel_tol, abs_tol=abs_tol)
        )

    def to_array(self) -> npt.NDArray[np.float64]:
        return np.array([self.x, self.y])


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned bounding box."""
    x_min: float
    y_min: float
    x_max: float
    y_max: float

    def __post_init__(self) -> None:
        if self.x_min > self.x_max or self.y_min > self.y_max:
            raise GeometryError(f"Invalid bounding box {self.to_tuple()}.")

    @staticmethod
    def from_points(points: Iterable[Tuple[float, float]] | npt.ArrayLike) -> BoundingBox:
        pts = np.asarray(list(points) if not isinstance(points, np.ndarray) else points, dtype=np.float64)
        pts = pts.reshape(-1, 2)
        if len(pts) == 0:
            raise GeometryError("Cannot compute the bounding box of an empty point set.")
        x_min, y_min = pts.min(axis=0)
        x_max, y_max = pts.max(axis=0)
        return BoundingBox(float(x_min), float(y_min), float(x_max), float(y_max))

    @staticmethod
    def union_all(boxes: Iterable[Optional[BoundingBox]]) -> Optional[BoundingBox]:
        result: Optional[BoundingBox] = None
        for box in boxes:
            if box is None:
                continue
            result = box if result is None else result.union(box)
        return result

    def union(self, other: BoundingBox) -> BoundingBox:
        return BoundingBox(
            min(self.x_min, other.x_min),
            min(self.y_min, other.y_min),
            max(self.x_max, other.x_max),
            max(self.y_max, other.y_max),
        )

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    @property
    def height(self) -> float:
        return self.y_max - self.y_min

    @property
    def center(self) -> Point:
        return Point((self.x_min + self.x_max) / 2.0, (self.y_min + self.y_max) / 2.0)

    def contains(self, point: Point, tolerance: float = 0.0) -> bool:
        return (
            self.x_min - tolerance <= point.x <= self.x_max + tolerance
            and self.y_min - tolerance <= point.y <= self.y_max + tolerance
        )

    def contains_box(self, other: BoundingBox, tolerance: float = 0.0) -> bool:
        return (
            self.x_min - tolerance <= other.x_min
            and self.y_min - tolerance <= other.y_min
            and other.x_max <= self.x_max + tolerance
            and other.y_max <= self.y_max + tolerance
        )

    def to_tuple(self) -> Tuple[float, float, float, float]:
        return (self.x_min, self.y_min, self.x_max, self.y_max)


# ------------------------------------------------------------------------------
# Curve primitives
# ------------------------------------------------------------------------------
class CurvePrimitive(ABC):
    """
    Common interface of LineSegment, CubicBezier and EllipticalArc.

    Primitives are immutable; transform() and flatten() return new values.
    """

    @abstractmethod
    def start_point(self) -> Point: ...

    @abstractmethod
    def end_point(self) -> Point: ...

    @abstractmethod
    def point_at(self, t: float) -> Point: ...

    @abstractmethod
    def tangent_at(self, t: float) -> Vector:
        """Derivative with respect to t (not normalized)."""

    @abstractmethod
    def transform(self, transform: Transform) -> CurvePrimitive: ...

    @abstractmethod
    def bounding_box(self) -> BoundingBox: ...

    @abstractmethod
    def reversed(self) -> CurvePrimitive: ...

    def tight_bounding_box(self) -> BoundingBox:
        return self.bounding_box()

    def flatten(self, tolerance: float, max_depth: Optional[int] = None) -> npt.NDArray[np.float64]:
        """Polyline approximation within tolerance, as an (N, 2) array."""
        from vsvg.controller.flattener import flatten_primitive
        return flatten_primitive(self, tolerance, max_depth=max_depth)

    def length(self, tolerance: float) -> float:
        from vsvg.controller.measure import length
        return length(self, tolerance)


def _check_parameter(t: float) -> float:
    if not (0.0 <= t <= 1.0):
        raise GeometryError(f"Curve parameter must lie in [0, 1], got {t}.")
    return t


@dataclass(frozen=True)
class LineSegment(CurvePrimitive):
    """A straight line between two points."""
    start: Point
    end: Point

    def start_point(self) -> Point:
        return self.start

    def end_point(self) -> Point:
        return self.end

    def point_at(self, t: float) -> Point:
        t = _check_parameter(t)
        if t == 0.0:
            return self.start
        if t == 1.0:
            return self.end
        return self.start.lerp(self.end, t)

    def tangent_at(self, t: float) -> Vector:
        _check_parameter(t)
        return self.end - self.start

    def transform(self, transform: Transform) -> LineSegment:
        return LineSegment(transform.apply(self.start), transform.apply(self.end))

    def bounding_box(self) -> BoundingBox:
        return BoundingBox(
            min(self.start.x, self.end.x),
            min(self.start.y, self.end.y),
            max(self.start.x, self.end.x),
            max(self.start.y, self.end.y),
        )

    def reversed(self) -> LineSegment:
        return LineSegment(self.end, self.start)

    @property
    def exact_length(self) -> float:
        return self.start.distance_to(self.end)

    @property
    def is_degenerate(self) -> bool:
        return self.start == self.end


@dataclass(frozen=True)
class CubicBezier(CurvePrimitive):
    """A cubic Bezier segment defined by its four control points."""
    start: Point
    c1: Point
    c2: Point
    end: Point

    @staticmethod
    def from_quadratic(start: Point, control: Point, end: Point) -> CubicBezier:
        """Exact degree elevation of a quadratic Bezier."""
        c1, c2 = gu.elevate_quadratic(start.xy, control.xy, end.xy)
        return CubicBezier(start, Point(*c1), Point(*c2), end)

    def control_points(self) -> Tuple[Point, Point, Point, Point]:
        return (self.start, self.c1, self.c2, self.end)

    def _xy(self) -> gu.CubicXY:
        return (self.start.xy, self.c1.xy, self.c2.xy, self.end.xy)

    def start_point(self) -> Point:
        return self.start

    def end_point(self) -> Point:
        return self.end

    def point_at(self, t: float) -> Point:
        t = _check_parameter(t)
        if t == 0.0:
            return self.start
        if t == 1.0:
            return self.end
        return Point(*gu.cubic_point(*self._xy(), t))

    def tangent_at(self, t: float) -> Vector:
        t = _check_parameter(t)
        return Vector(*gu.cubic_derivative(*self._xy(), t))

    def split(self, t: float = 0.5) -> Tuple[CubicBezier, CubicBezier]:
        """Split into two exact sub-curves at parameter t (de Casteljau)."""
        t = _check_parameter(t)
        left, right = gu.split_cubic(*self._xy(), t)
        mid = Point(*left[3])
        return (
            CubicBezier(self.start, Point(*left[1]), Point(*left[2]), mid),
            CubicBezier(mid, Point(*right[1]), Point(*right[2]), self.end),
        )

    def transform(self, transform: Transform) -> CubicBezier:
        # Exact: affine maps commute with the Bernstein basis
        return CubicBezier(
            transform.apply(self.start),
            transform.apply(self.c1),
            transform.apply(self.c2),
            transform.apply(self.end),
        )

    def bounding_box(self) -> BoundingBox:
        """Box of the control polygon; encloses the curve (convex hull property)."""
        return BoundingBox.from_points([p.xy for p in self.control_points()])

    def tight_bounding_box(self) -> BoundingBox:
        """Exact box from the end points and the derivative roots."""
        p0, p1, p2, p3 = self._xy()
        ts = gu.cubic_extrema_parameters(p0[0], p1[0], p2[0], p3[0])
        ts += gu.cubic_extrema_parameters(p0[1], p1[1], p2[1], p3[1])
        points = [p0, p3] + [gu.cubic_point(p0, p1, p2, p3, t) for t in ts]
        return BoundingBox.from_points(points)

    def reversed(self) -> CubicBezier:
        return CubicBezier(self.end, self.c2, self.c1, self.start)

    @property
    def is_degenerate(self) -> bool:
        return self.start == self.c1 == self.c2 == self.end


@dataclass(frozen=True)
class EllipticalArc(CurvePrimitive):
    """
    An elliptical arc in centre-parametric form.

        P(theta) = center + axis_u * cos(theta) + axis_v * sin(theta)
        theta(t) = start_angle + t * sweep_angle

    axis_u and axis_v are conjugate semi-axes, so an affine transform maps the
    arc onto an arc of the same form without approximation. start and end are
    kept explicitly so that chained primitives share bit-identical points.
    """
    start: Point
    end: Point
    center: Point
    axis_u: Vector
    axis_v: Vector
    start_angle: float
    sweep_angle: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.start_angle) and math.isfinite(self.sweep_angle)):
            raise GeometryError("Arc angles must be finite.")

    # --------------------------------------------------------------------------
    # Constructors
    # --------------------------------------------------------------------------
    @staticmethod
    def from_center(
        center: Point,
        rx: float,
        ry: float,
        start_angle: float,
        sweep_angle: float,
        rotation: float = 0.0,
    ) -> EllipticalArc:
        """
        Arc of the ellipse with radii rx, ry rotated by `rotation` radians.
        Angles are in radians.
        """
        cos_r, sin_r = math.cos(rotation), math.sin(rotation)
        u = Vector(rx * cos_r, rx * sin_r)
        v = Vector(-ry * sin_r, ry * cos_r)
        start = EllipticalArc._evaluate(center, u, v, start_angle)
        end = EllipticalArc._evaluate(center, u, v, start_angle + sweep_angle)
        return EllipticalArc(start, end, center, u, v, start_angle, sweep_angle)

    @staticmethod
    def from_svg(
        start: Point,
        end: Point,
        rx: float,
        ry: float,
        x_axis_rotation: float,
        large_arc: bool,
        sweep: bool,
    ) -> Optional[CurvePrimitive]:
        """
        Build the primitive for an SVG arc command (rotation in degrees).

        Returns None when the end points coincide (the arc is omitted) and a
        LineSegment when either radius is zero.
        """
        if start == end:
            return None
        if rx == 0.0 or ry == 0.0:
            return LineSegment(start, end)
        (cx, cy), rx, ry, phi, theta1, delta = gu.svg_arc_to_center(
            start.xy, end.xy, rx, ry, x_axis_rotation, large_arc, sweep
        )
        cos_phi, sin_phi = math.cos(phi), math.sin(phi)
        u = Vector(rx * cos_phi, rx * sin_phi)
        v = Vector(-ry * sin_phi, ry * cos_phi)
        return EllipticalArc(start, end, Point(cx, cy), u, v, theta1, delta)

    @staticmethod
    def _evaluate(center: Point, u: Vector, v: Vector, angle: float) -> Point:
        cos_a, sin_a = math.cos(angle), math.sin(angle)
        return Point(center.x + u.x * cos_a + v.x * sin_a, center.y + u.y * cos_a + v.y * sin_a)

    # --------------------------------------------------------------------------
    # Queries
    # --------------------------------------------------------------------------
    def start_point(self) -> Point:
        return self.start

    def end_point(self) -> Point:
        return self.end

    def angle_at(self, t: float) -> float:
        return self.start_angle + t * self.sweep_angle

    def point_at(self, t: float) -> Point:
        t = _check_parameter(t)
        if t == 0.0:
            return self.start
        if t == 1.0:
            return self.end
        return self._evaluate(self.center, self.axis_u, self.axis_v, self.angle_at(t))

    def tangent_at(self, t: float) -> Vector:
        t = _check_parameter(t)
        angle = self.angle_at(t)
        cos_a, sin_a = math.cos(angle), math.sin(angle)
        u, v = self.axis_u, self.axis_v
        return Vector(
            (-u.x * sin_a + v.x * cos_a) * self.sweep_angle,
            (-u.y * sin_a + v.y * cos_a) * self.sweep_angle,
        )

    @property
    def max_radius(self) -> float:
        """Largest distance from the centre to the full ellipse."""
        u, v = self.axis_u, self.axis_v
        return gu.largest_singular_value(u.x, u.y, v.x, v.y)

    def _angle_in_sweep(self, angle: float) -> bool:
        if abs(self.sweep_angle) >= 2.0 * math.pi:
            return True
        if self.sweep_angle >= 0.0:
            offset = (angle - self.start_angle) % (2.0 * math.pi)
        else:
            offset = (self.start_angle - angle) % (2.0 * math.pi)
        return offset <= abs(self.sweep_angle)

    def bounding_box(self) -> BoundingBox:
        """Exact box: end points plus the axis-extreme angles inside the sweep."""
        u, v = self.axis_u, self.axis_v
        points: List[Tuple[float, float]] = [self.start.xy, self.end.xy]
        for ax, bx in ((u.x, v.x), (u.y, v.y)):
            if ax == 0.0 and bx == 0.0:
                continue
            extreme = math.atan2(bx, ax)
            for angle in (extreme, extreme + math.pi):
                if self._angle_in_sweep(angle):
                    points.append(self._evaluate(self.center, u, v, angle).xy)
        return BoundingBox.from_points(points)

    # --------------------------------------------------------------------------
    # Operations
    # --------------------------------------------------------------------------
    def transform(self, transform: Transform) -> EllipticalArc:
        return EllipticalArc(
            start=transform.apply(self.start),
            end=transform.apply(self.end),
            center=transform.apply(self.center),
            axis_u=transform.apply_vector(self.axis_u),
            axis_v=transform.apply_vector(self.axis_v),
            start_angle=self.start_angle,
            sweep_angle=self.sweep_angle,
        )

    def reversed(self) -> EllipticalArc:
        return EllipticalArc(
            start=self.end,
            end=self.start,
            center=self.center,
            axis_u=self.axis_u,
            axis_v=self.axis_v,
            start_angle=self.start_angle + self.sweep_angle,
            sweep_angle=-self.sweep_angle,
        )

    def to_cubics(self) -> List[CubicBezier]:
        """Approximate with cubic Beziers (at most a quarter turn each)."""
        segments = gu.arc_to_cubic_control_points(
            self.center.xy, (self.axis_u.x, self.axis_u.y), (self.axis_v.x, self.axis_v.y),
            self.start_angle, self.sweep_angle,
        )
        cubics: List[CubicBezier] = []
        previous_end = self.start
        for i, (_, p1, p2, p3) in enumerate(segments):
            end = self.end if i == len(segments) - 1 else Point(*p3)
            cubics.append(CubicBezier(previous_end, Point(*p1), Point(*p2), end))
            previous_end = end
        return cubics

    @property
    def is_degenerate(self) -> bool:
        return self.start == self.end and (
            self.sweep_angle == 0.0 or (self.axis_u.magnitude == 0.0 and self.axis_v.magnitude == 0.0)
        )
