"""
Tests for the SVG path data parser.
"""
import pytest

from vsvg.errors import PathDataError
from vsvg.importer.path_data import parse_path_data, path_data_to_paths
from vsvg.model.geometry_primitives import CubicBezier, EllipticalArc, LineSegment, Point


def _single(data: str):
    subpaths = parse_path_data(data)
    assert len(subpaths) == 1
    return subpaths[0]


def _end_points(subpath):
    return [p.end_point().xy for p in subpath.primitives]


class TestCommands:
    def test_blank_data_yields_nothing(self):
        """Empty or missing data is not an error."""
        assert parse_path_data("") == []
        assert parse_path_data("   ") == []
        assert parse_path_data(None) == []

    def test_implicit_line_to_after_move_to(self):
        """Extra pairs after M are line-to commands."""
        subpath = _single("M10 10 20 20 30 10")
        assert all(isinstance(p, LineSegment) for p in subpath.primitives)
        assert _end_points(subpath) == [(20.0, 20.0), (30.0, 10.0)]

    def test_relative_move_to_repeats_as_relative_line_to(self):
        """m with extra pairs continues with relative l."""
        subpath = _single("m10 10 5 5 5 0")
        assert subpath.primitives[0].start == Point(10.0, 10.0)
        assert _end_points(subpath) == [(15.0, 15.0), (20.0, 15.0)]

    def test_horizontal_and_vertical(self):
        """H/V keep the other coordinate; lower case is relative."""
        subpath = _single("M0 0 H10 V10 h-5 v-5")
        assert _end_points(subpath) == [(10.0, 0.0), (10.0, 10.0), (5.0, 10.0), (5.0, 5.0)]

    def test_compact_number_syntax(self):
        """Numbers may run together when the grammar is unambiguous."""
        subpath = _single("M.5.5L1e1-2")
        assert subpath.primitives[0].start == Point(0.5, 0.5)
        assert subpath.primitives[0].end == Point(10.0, -2.0)

    def test_smooth_cubic_reflects_control_point(self):
        """S mirrors the previous second control point about the current point."""
        subpath = _single("M0 0 C10 10 20 10 30 0 S50 -10 60 0")
        second = subpath.primitives[1]
        assert isinstance(second, CubicBezier)
        assert second.c1 == Point(40.0, -10.0)

    def test_smooth_cubic_without_predecessor(self):
        """Without a preceding C/S the first control point is the current point."""
        subpath = _single("M5 5 S20 20 30 5")
        assert subpath.primitives[0].c1 == Point(5.0, 5.0)

    def test_quadratic_is_elevated(self):
        """Q becomes the equivalent cubic."""
        cubic = _single("M0 0 Q50 100 100 0").primitives[0]
        assert isinstance(cubic, CubicBezier)
        assert cubic.c1.x == pytest.approx(100.0 / 3.0)
        assert cubic.c1.y == pytest.approx(200.0 / 3.0)
        assert cubic.c2.x == pytest.approx(200.0 / 3.0)
        assert cubic.end == Point(100.0, 0.0)

    def test_smooth_quadratic_reflects_control_point(self):
        """T reuses the mirrored quadratic control point."""
        subpath = _single("M0 0 Q10 10 20 0 T40 0")
        reflected = CubicBezier.from_quadratic(Point(20.0, 0.0), Point(30.0, -10.0), Point(40.0, 0.0))
        assert subpath.primitives[1] == reflected

    def test_arc_with_compact_flags(self):
        """Arc flags may be written without separators."""
        arc = _single("M0 0 a10 10 0 0120 0").primitives[0]
        assert isinstance(arc, EllipticalArc)
        assert arc.end == Point(20.0, 0.0)
        assert arc.point_at(0.5).y == pytest.approx(-10.0)

    def test_arc_with_coincident_end_points_is_omitted(self):
        """A zero-length arc contributes nothing but the path continues."""
        subpath = _single("M0 0 A5 5 0 0 1 0 0 L1 1")
        assert len(subpath.primitives) == 1
        assert isinstance(subpath.primitives[0], LineSegment)


class TestSubpaths:
    def test_close_adds_closing_segment(self):
        """Z draws back to the sub-path start."""
        subpath = _single("M0 0 L10 0 L10 10 Z")
        assert subpath.closed
        assert len(subpath.primitives) == 3
        assert subpath.primitives[-1].end == Point(0.0, 0.0)

    def test_close_at_start_adds_nothing(self):
        """No zero-length closing edge when already at the start."""
        subpath = _single("M0 0 L10 0 L0 0 Z")
        assert subpath.closed
        assert len(subpath.primitives) == 2

    def test_drawing_after_close_starts_at_old_start(self):
        """A command after Z without M begins a new sub-path at the previous start."""
        subpaths = parse_path_data("M1 1 L10 1 L10 10 Z L5 5")
        assert len(subpaths) == 2
        assert subpaths[1].primitives[0].start == Point(1.0, 1.0)
        assert not subpaths[1].closed

    def test_relative_move_after_close(self):
        """After Z, relative coordinates are measured from the sub-path start."""
        subpaths = parse_path_data("M10 10 l5 0 l0 5 z m1 1 l1 0")
        assert subpaths[1].primitives[0].start == Point(11.0, 11.0)

    def test_every_move_to_starts_a_sub_path(self):
        """One attribute can yield several paths."""
        paths = path_data_to_paths("M0 0 L1 1 M5 5 L6 6")
        assert len(paths) == 2
        assert paths[1].start_point() == Point(5.0, 5.0)

    def test_move_only_sub_paths_are_dropped(self):
        """A bare move-to draws nothing."""
        assert len(parse_path_data("M0 0 M5 5 L6 6")) == 1
        assert parse_path_data("M0 0") == []

    def test_subpaths_build_valid_paths(self):
        """Mixed commands always produce a connected chain."""
        paths = path_data_to_paths("M0 0 C0 10 10 10 10 0 Q15 -5 20 0 A5 5 0 0 1 30 0 Z")
        assert len(paths) == 1
        assert paths[0].closed
        assert paths[0].end_point() == paths[0].start_point()


class TestErrors:
    @pytest.mark.parametrize(
        "data",
        [
            "L10 10",               # must start with a move-to
            "M0 0 L10",             # missing coordinate
            "M0 0 X5 5",            # unknown command
            "M0 0 L5 5 Z 3",        # number after close-path
            "M0 0 A10 10 0 2 1 5 5",  # invalid arc flag
            "M0 0 L1e400 0",        # overflow to infinity
            "M0 0 C1 1 2 2",        # truncated curve
        ],
    )
    def test_malformed_data_raises(self, data):
        """Grammar errors reject the whole attribute."""
        with pytest.raises(PathDataError):
            parse_path_data(data)
