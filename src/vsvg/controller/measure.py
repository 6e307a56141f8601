"""
Bounding boxes and lengths over the retained curve model.

bounding_box() never under-approximates: it is exact for lines and arcs and
uses the control polygon for Beziers. tight_bounding_box() is exact for all
primitives. Curve lengths are measured on the flattened polyline, so the
result depends on (and is reported for) the tolerance passed in.
"""
from __future__ import annotations

from typing import Optional

import numpy as np
import numpy.typing as npt

from vsvg.config import validate_tolerance
from vsvg.controller.flattener import flatten_path, flatten_primitive
from vsvg.model.document import Document, Layer
from vsvg.model.flattened import FlattenedDocument, FlattenedLayer, Polyline
from vsvg.model.geometry_primitives import BoundingBox, CurvePrimitive, LineSegment
from vsvg.model.path import Path


def bounding_box(obj, visible_only: bool = True) -> Optional[BoundingBox]:
    """
    Axis-aligned box of a primitive, Path, Layer, Document or flattened result.

    Returns None for containers without geometry. For documents only visible
    layers count unless visible_only is False.
    """
    match obj:
        case CurvePrimitive() | Path() | Layer() | Polyline() | FlattenedLayer():
            return obj.bounding_box()
        case Document() | FlattenedDocument():
            return obj.bounding_box(visible_only=visible_only)
        case _:
            raise TypeError(f"Cannot compute the bounding box of {type(obj).__name__}.")


def tight_bounding_box(obj: CurvePrimitive | Path) -> BoundingBox:
    match obj:
        case CurvePrimitive() | Path():
            return obj.tight_bounding_box()
        case _:
            raise TypeError(f"Cannot compute the tight bounding box of {type(obj).__name__}.")


def polyline_length(points: npt.ArrayLike) -> float:
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    if len(pts) < 2:
        return 0.0
    return float(np.hypot(*np.diff(pts, axis=0).T).sum())


def length(obj: CurvePrimitive | Path, tolerance: float, max_depth: Optional[int] = None) -> float:
    """
    Length of a primitive or Path.

    Line segments are measured exactly. Anything else is measured on
    flatten(obj, tolerance); that polyline is inscribed in the curve, so the
    result never exceeds the true length and converges as tolerance -> 0.
    """
    tolerance = validate_tolerance(tolerance)
    match obj:
        case LineSegment():
            return obj.exact_length
        case Path() if all(isinstance(p, LineSegment) for p in obj.primitives):
            return sum(p.exact_length for p in obj.primitives)
        case Path():
            return polyline_length(flatten_path(obj, tolerance, max_depth))
        case CurvePrimitive():
            return polyline_length(flatten_primitive(obj, tolerance, max_depth))
        case _:
            raise TypeError(f"Cannot measure the length of {type(obj).__name__}.")
