"""
Basic Shapes
============
Converts <rect>, <circle>, <ellipse>, <line>, <polyline> and <polygon>
into sub-paths of exact primitives (lines and quarter arcs), following the
equivalent-path definitions of SVG 1.1 chapter 9.

Zero-sized shapes produce no geometry; negative sizes raise ShapeError.
"""
from __future__ import annotations

import math
from typing import Callable, Dict, List, Mapping, Optional

from vsvg.errors import ShapeError
from vsvg.importer.path_data import Subpath
from vsvg.importer.units import parse_length, parse_number_list
from vsvg.model.geometry_primitives import CurvePrimitive, EllipticalArc, LineSegment, Point, Vector


def _length(attributes: Mapping[str, str], name: str, default: Optional[float] = 0.0) -> Optional[float]:
    value = attributes.get(name)
    if value is not None and value.strip() == "auto":
        if default is not None:
            raise ShapeError(f"'auto' is not a valid value for {name!r}.")
        return None
    return parse_length(value, default)


def _quarter_arc(center: Point, rx: float, ry: float, start_angle: float, start: Point, end: Point) -> EllipticalArc:
    """Axis-aligned quarter arc with exact, caller-supplied end points."""
    return EllipticalArc(
        start=start,
        end=end,
        center=center,
        axis_u=Vector(rx, 0.0),
        axis_v=Vector(0.0, ry),
        start_angle=start_angle,
        sweep_angle=math.pi / 2.0,
    )


def _ellipse_subpath(cx: float, cy: float, rx: float, ry: float) -> Subpath:
    # Starts at the rightmost point and runs clockwise on screen (positive angles, y down)
    center = Point(cx, cy)
    points = [Point(cx + rx, cy), Point(cx, cy + ry), Point(cx - rx, cy), Point(cx, cy - ry)]
    arcs: List[CurvePrimitive] = [
        _quarter_arc(center, rx, ry, i * math.pi / 2.0, points[i], points[(i + 1) % 4]) for i in range(4)
    ]
    return Subpath(arcs, closed=True)


def rect_subpaths(attributes: Mapping[str, str]) -> List[Subpath]:
    x = _length(attributes, "x")
    y = _length(attributes, "y")
    width = _length(attributes, "width")
    height = _length(attributes, "height")
    if width is None or height is None or width < 0.0 or height < 0.0:
        raise ShapeError(f"Rectangle width and height must be non-negative, got {width} x {height}.")
    if width == 0.0 or height == 0.0:
        return []

    rx = _length(attributes, "rx", None)
    ry = _length(attributes, "ry", None)
    if (rx is not None and rx < 0.0) or (ry is not None and ry < 0.0):
        raise ShapeError("Rectangle corner radii must be non-negative.")
    if rx is None:
        rx = ry
    if ry is None:
        ry = rx
    rx = min(rx or 0.0, width / 2.0)
    ry = min(ry or 0.0, height / 2.0)

    if rx == 0.0 or ry == 0.0:
        corners = [Point(x, y), Point(x + width, y), Point(x + width, y + height), Point(x, y + height)]
        edges: List[CurvePrimitive] = [LineSegment(corners[i], corners[(i + 1) % 4]) for i in range(4)]
        return [Subpath(edges, closed=True)]

    right, bottom = x + width, y + height
    # Edge end points, clockwise from the end of the top-left corner
    top_start, top_end = Point(x + rx, y), Point(right - rx, y)
    right_start, right_end = Point(right, y + ry), Point(right, bottom - ry)
    bottom_start, bottom_end = Point(right - rx, bottom), Point(x + rx, bottom)
    left_start, left_end = Point(x, bottom - ry), Point(x, y + ry)

    sections = [
        LineSegment(top_start, top_end),
        _quarter_arc(Point(right - rx, y + ry), rx, ry, -math.pi / 2.0, top_end, right_start),
        LineSegment(right_start, right_end),
        _quarter_arc(Point(right - rx, bottom - ry), rx, ry, 0.0, right_end, bottom_start),
        LineSegment(bottom_start, bottom_end),
        _quarter_arc(Point(x + rx, bottom - ry), rx, ry, math.pi / 2.0, bottom_end, left_start),
        LineSegment(left_start, left_end),
        _quarter_arc(Point(x + rx, y + ry), rx, ry, math.pi, left_end, top_start),
    ]
    # Fully rounded sides leave zero-length edges behind
    primitives = [s for s in sections if not (isinstance(s, LineSegment) and s.is_degenerate)]
    return [Subpath(primitives, closed=True)]


def circle_subpaths(attributes: Mapping[str, str]) -> List[Subpath]:
    r = _length(attributes, "r")
    if r is None or r < 0.0:
        raise ShapeError(f"Circle radius must be non-negative, got {r}.")
    if r == 0.0:
        return []
    return [_ellipse_subpath(_length(attributes, "cx"), _length(attributes, "cy"), r, r)]


def ellipse_subpaths(attributes: Mapping[str, str]) -> List[Subpath]:
    rx = _length(attributes, "rx", None)
    ry = _length(attributes, "ry", None)
    if rx is None:
        rx = ry
    if ry is None:
        ry = rx
    if rx is None or ry is None:
        return []
    if rx < 0.0 or ry < 0.0:
        raise ShapeError(f"Ellipse radii must be non-negative, got {rx}, {ry}.")
    if rx == 0.0 or ry == 0.0:
        return []
    return [_ellipse_subpath(_length(attributes, "cx"), _length(attributes, "cy"), rx, ry)]


def line_subpaths(attributes: Mapping[str, str]) -> List[Subpath]:
    start = Point(_length(attributes, "x1"), _length(attributes, "y1"))
    end = Point(_length(attributes, "x2"), _length(attributes, "y2"))
    return [Subpath([LineSegment(start, end)])]


def _point_list(attributes: Mapping[str, str]) -> List[Point]:
    values = parse_number_list(attributes.get("points"))
    if len(values) % 2:
        raise ShapeError(f"The points attribute needs an even number of coordinates, got {len(values)}.")
    return [Point(values[i], values[i + 1]) for i in range(0, len(values), 2)]


def polyline_subpaths(attributes: Mapping[str, str], closed: bool = False) -> List[Subpath]:
    points = _point_list(attributes)
    if len(points) < 2:
        return []
    segments: List[CurvePrimitive] = [LineSegment(a, b) for a, b in zip(points[:-1], points[1:])]
    if closed and points[-1] != points[0]:
        segments.append(LineSegment(points[-1], points[0]))
    return [Subpath(segments, closed=closed)]


def polygon_subpaths(attributes: Mapping[str, str]) -> List[Subpath]:
    return polyline_subpaths(attributes, closed=True)


SHAPE_BUILDERS: Dict[str, Callable[[Mapping[str, str]], List[Subpath]]] = {
    "rect": rect_subpaths,
    "circle": circle_subpaths,
    "ellipse": ellipse_subpaths,
    "line": line_subpaths,
    "polyline": polyline_subpaths,
    "polygon": polygon_subpaths,
}
