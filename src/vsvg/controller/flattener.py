"""
Adaptive Flattener
==================
Converts curve primitives, Paths, Layers and Documents into polylines whose
maximum deviation from the exact curve is bounded by a tolerance.

Why is this file needed?
------------------------
1. Adaptivity: nearly straight curves terminate after one test, so the point
   count follows the local curvature instead of a fixed sampling step.
2. Safety: tolerance and depth are validated up front and subdivision runs on
   an explicit, depth-capped work stack.

Algorithms:
    Line:  the two end points.
    Cubic: de Casteljau subdivision at t = 0.5. The error estimate is the
           largest distance of the inner control points to the chord; the
           curve lies in the control hull, so this bounds the true deviation.
    Arc:   closed form. A chord spanning angle h on an ellipse with largest
           semi-axis sigma deviates at most sigma * (1 - cos(h / 2)), so the
           step is 2 * acos(1 - tolerance / sigma), capped at a quarter turn.
"""
from __future__ import annotations

import logging
import math
from typing import List, Optional, Tuple, TYPE_CHECKING

import numpy as np

from vsvg.config import MAX_SUBDIVISION_DEPTH, validate_tolerance
from vsvg.errors import GeometryError
from vsvg.model import geometry_utils as gu
from vsvg.model.document import Document, Layer
from vsvg.model.flattened import FlattenedDocument, FlattenedLayer, Polyline
from vsvg.model.geometry_primitives import CubicBezier, CurvePrimitive, EllipticalArc, LineSegment
from vsvg.model.path import Path

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


def _validate_depth(max_depth: Optional[int]) -> int:
    if max_depth is None:
        return MAX_SUBDIVISION_DEPTH
    if isinstance(max_depth, bool) or not isinstance(max_depth, int) or max_depth < 0:
        raise GeometryError(f"max_depth must be a non-negative integer, got {max_depth!r}.")
    return max_depth


def _collapse_repeats(points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Drop points exactly equal to their predecessor."""
    if len(points) < 2:
        return points
    keep = np.ones(len(points), dtype=bool)
    keep[1:] = np.any(points[1:] != points[:-1], axis=1)
    return points[keep]


# ------------------------------------------------------------------------------
# Per-primitive kernels
# ------------------------------------------------------------------------------
def cubic_deviation(p0: gu.XY, p1: gu.XY, p2: gu.XY, p3: gu.XY) -> float:
    """Upper bound of the distance between a cubic Bezier and its chord p0 -> p3."""
    return max(gu.point_segment_distance(p1, p0, p3), gu.point_segment_distance(p2, p0, p3))


def _flatten_cubic(cubic: CubicBezier, tolerance: float, max_depth: int) -> List[gu.XY]:
    p0, p1, p2, p3 = (p.xy for p in cubic.control_points())
    points: List[gu.XY] = [p0]

    # Right half is pushed first so the left half is processed first
    stack: List[Tuple[gu.XY, gu.XY, gu.XY, gu.XY, int]] = [(p0, p1, p2, p3, 0)]
    while stack:
        q0, q1, q2, q3, depth = stack.pop()
        if depth >= max_depth or cubic_deviation(q0, q1, q2, q3) <= tolerance:
            points.append(q3)
            continue
        left, right = gu.split_cubic(q0, q1, q2, q3, 0.5)
        stack.append((*right, depth + 1))
        stack.append((*left, depth + 1))
    return points


def arc_segment_count(arc: EllipticalArc, tolerance: float) -> int:
    """Number of chords needed to keep an arc within tolerance."""
    sweep = abs(arc.sweep_angle)
    if sweep == 0.0:
        return 1
    sigma = arc.max_radius
    step = math.pi / 2.0
    if tolerance < sigma:
        step = min(step, 2.0 * math.acos(1.0 - tolerance / sigma))
    return max(1, math.ceil(sweep / step))


def _flatten_arc(arc: EllipticalArc, tolerance: float) -> npt.NDArray[np.float64]:
    count = arc_segment_count(arc, tolerance)
    angles = np.linspace(arc.start_angle, arc.start_angle + arc.sweep_angle, count + 1)
    u = np.array([arc.axis_u.x, arc.axis_u.y])
    v = np.array([arc.axis_v.x, arc.axis_v.y])
    points = arc.center.to_array() + np.outer(np.cos(angles), u) + np.outer(np.sin(angles), v)
    points[0] = arc.start.xy
    points[-1] = arc.end.xy
    return points


def flatten_primitive(
    primitive: CurvePrimitive,
    tolerance: float,
    max_depth: Optional[int] = None,
) -> npt.NDArray[np.float64]:
    """
    Flatten a single curve primitive.

    Args:
        primitive: Line, cubic or arc.
        tolerance: Maximum deviation between polyline and curve (> 0).
        max_depth: Subdivision cap for cubics; the chord is emitted once reached.

    Returns:
        (N, 2) float64 array, N >= 1. A fully degenerate primitive yields one point.

    Raises:
        GeometryError: Non-positive or non-finite tolerance, invalid max_depth.
    """
    tolerance = validate_tolerance(tolerance)
    depth = _validate_depth(max_depth)

    match primitive:
        case LineSegment():
            points = np.array([primitive.start.xy, primitive.end.xy], dtype=np.float64)
        case CubicBezier():
            points = np.array(_flatten_cubic(primitive, tolerance, depth), dtype=np.float64)
        case EllipticalArc():
            points = _flatten_arc(primitive, tolerance)
        case _:
            raise TypeError(f"Cannot flatten object of type {type(primitive).__name__}.")

    return _collapse_repeats(points)


# ------------------------------------------------------------------------------
# Containers
# ------------------------------------------------------------------------------
def flatten_path(path: Path, tolerance: float, max_depth: Optional[int] = None) -> npt.NDArray[np.float64]:
    """
    Concatenate the flattened primitives of a path.

    The shared boundary point between consecutive primitives appears once:
    the first point of every primitive after the first is dropped.
    """
    tolerance = validate_tolerance(tolerance)
    depth = _validate_depth(max_depth)

    chunks = []
    for i, primitive in enumerate(path.primitives):
        points = flatten_primitive(primitive, tolerance, depth)
        chunks.append(points if i == 0 else points[1:])
    return np.concatenate(chunks, axis=0)


def flatten(
    obj: CurvePrimitive | Path,
    tolerance: float,
    max_depth: int = MAX_SUBDIVISION_DEPTH,
) -> npt.NDArray[np.float64]:
    """Flatten a curve primitive or a Path into an (N, 2) point array."""
    match obj:
        case Path():
            return flatten_path(obj, tolerance, max_depth)
        case CurvePrimitive():
            return flatten_primitive(obj, tolerance, max_depth)
        case _:
            raise TypeError(f"Expected a curve primitive or a Path, got {type(obj).__name__}.")


def flatten_layer(layer: Layer, tolerance: float, max_depth: Optional[int] = None) -> FlattenedLayer:
    tolerance = validate_tolerance(tolerance)
    polylines = tuple(
        Polyline(
            flatten_path(path, tolerance, max_depth),
            color=path.color,
            stroke_width=path.stroke_width,
            closed=path.closed,
        )
        for path in layer.paths
    )
    return FlattenedLayer(id=layer.id, name=layer.name, polylines=polylines, visible=layer.visible)


def flatten_document(document: Document, tolerance: float, max_depth: Optional[int] = None) -> FlattenedDocument:
    """Flatten every layer of a document; the source document is left untouched."""
    tolerance = validate_tolerance(tolerance)
    layers = {layer.id: flatten_layer(layer, tolerance, max_depth) for layer in document.layers}
    result = FlattenedDocument(layers=layers, page_size=document.page_size, tolerance=tolerance)
    logger.debug(
        f"Flattened {document.path_count} paths in {len(layers)} layers "
        f"to {result.point_count} points (tolerance={tolerance})."
    )
    return result
