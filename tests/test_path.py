"""
Tests for Path construction and value operations.
"""
import math

import pytest

from vsvg.errors import ConstructionError, GeometryError
from vsvg.model.color import Color
from vsvg.model.geometry_primitives import CubicBezier, LineSegment, Point
from vsvg.model.path import Path, PathStyle
from vsvg.model.transforms import Transform


def _square() -> Path:
    return Path.from_points([(0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (0.0, 10.0)], closed=True)


class TestConstruction:
    def test_connected_chain_builds(self):
        """Primitives that share end points form a Path."""
        a = LineSegment(Point(0.0, 0.0), Point(1.0, 0.0))
        b = CubicBezier(Point(1.0, 0.0), Point(2.0, 1.0), Point(3.0, 1.0), Point(4.0, 0.0))
        path = Path((a, b))
        assert len(path) == 2
        assert path.start_point() == Point(0.0, 0.0)
        assert path.end_point() == Point(4.0, 0.0)

    def test_broken_chain_is_rejected(self):
        """A gap between primitives raises ConstructionError, it is never repaired."""
        a = LineSegment(Point(0.0, 0.0), Point(1.0, 0.0))
        b = LineSegment(Point(1.5, 0.0), Point(2.0, 0.0))
        with pytest.raises(ConstructionError):
            Path((a, b))

    def test_float_noise_is_tolerated(self):
        """End points differing only by round-off still connect."""
        a = LineSegment(Point(0.0, 0.0), Point(0.1 + 0.2, 0.0))
        b = LineSegment(Point(0.3, 0.0), Point(1.0, 0.0))
        assert len(Path((a, b))) == 2

    def test_gap_at_large_coordinates_is_rejected(self):
        """Far from the origin a unit gap is still a gap, while a few ULPs are not."""
        a = LineSegment(Point(0.0, 0.0), Point(1e9, 0.0))
        with pytest.raises(ConstructionError):
            Path((a, LineSegment(Point(1e9 + 1.0, 0.0), Point(2e9, 0.0))))
        nudged = math.nextafter(1e9, math.inf)
        assert len(Path((a, LineSegment(Point(nudged, 0.0), Point(2e9, 0.0))))) == 2

    def test_empty_path_is_rejected(self):
        """A Path needs at least one primitive."""
        with pytest.raises(ConstructionError):
            Path(())

    def test_closed_path_must_end_at_start(self):
        """closed=True on an open chain is a construction error."""
        with pytest.raises(ConstructionError):
            Path((LineSegment(Point(0.0, 0.0), Point(1.0, 0.0)),), closed=True)

    def test_non_primitive_items_are_rejected(self):
        """Only curve primitives may be chained."""
        with pytest.raises(ConstructionError):
            Path(((0.0, 0.0),))

    def test_from_points_closes_polygon(self):
        """A closed polyline gets the closing edge."""
        square = _square()
        assert square.closed
        assert len(square) == 4
        assert square.end_point() == square.start_point()

    def test_negative_stroke_width_is_rejected(self):
        """Stroke widths are never clamped."""
        with pytest.raises(GeometryError):
            PathStyle(stroke_width=-1.0)


class TestOperations:
    def test_transform_returns_new_path(self):
        """transform() leaves the source untouched."""
        square = _square()
        moved = square.transform(Transform.translate(5.0, 5.0))
        assert moved.start_point() == Point(5.0, 5.0)
        assert square.start_point() == Point(0.0, 0.0)

    def test_transform_scales_stroke_width(self):
        """Stroke width follows the transform's mean scale."""
        path = _square().with_style(PathStyle(Color(255, 0, 0), 2.0))
        scaled = path.transform(Transform.scale(3.0))
        assert scaled.stroke_width == pytest.approx(6.0)
        assert scaled.color == Color(255, 0, 0)
        assert path.transform(Transform.scale(3.0), scale_stroke=False).stroke_width == 2.0

    def test_reversed(self):
        """Reversing a path reverses its primitive order and direction."""
        path = Path.from_points([(0.0, 0.0), (1.0, 0.0), (1.0, 1.0)])
        back = path.reversed()
        assert back.start_point() == Point(1.0, 1.0)
        assert back.end_point() == Point(0.0, 0.0)

    def test_bounding_box(self):
        """The path box is the union of its primitive boxes."""
        assert _square().bounding_box().to_tuple() == (0.0, 0.0, 10.0, 10.0)

    def test_paths_are_immutable(self):
        """Paths cannot be mutated in place."""
        path = _square()
        with pytest.raises(AttributeError):
            path.closed = False
