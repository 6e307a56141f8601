"""
Tests for 2-D affine transforms.
"""
import math

import numpy as np
import pytest

from vsvg.errors import GeometryError
from vsvg.model.geometry_primitives import CubicBezier, EllipticalArc, LineSegment, Point, Vector
from vsvg.model.transforms import Transform

SAMPLE_TRANSFORMS = [
    Transform.translate(3.0, -2.0),
    Transform.scale(2.0, 0.5),
    Transform.rotate(30.0),
    Transform.rotate(45.0, 10.0, 5.0),
    Transform.skew_x(20.0),
    Transform.skew_y(-15.0),
    Transform(1.5, 0.2, -0.3, 0.8, 4.0, 7.0),
]


def _points_close(p: Point, q: Point, eps: float = 1e-9) -> bool:
    return abs(p.x - q.x) <= eps and abs(p.y - q.y) <= eps


class TestConstruction:
    def test_identity_leaves_points_alone(self):
        """The identity maps every point onto itself."""
        assert Transform.identity().apply(Point(3.0, 4.0)) == Point(3.0, 4.0)
        assert Transform.identity().is_identity

    def test_translate(self):
        """translate(tx, ty) moves points by (tx, ty); ty defaults to 0."""
        assert Transform.translate(1.0, 2.0).apply(Point(1.0, 1.0)) == Point(2.0, 3.0)
        assert Transform.translate(5.0).apply(Point(0.0, 0.0)) == Point(5.0, 0.0)

    def test_uniform_and_non_uniform_scale(self):
        """scale(s) is uniform, scale(sx, sy) is not."""
        assert Transform.scale(2.0).apply(Point(1.0, 3.0)) == Point(2.0, 6.0)
        assert Transform.scale(2.0, -1.0).apply(Point(1.0, 3.0)) == Point(2.0, -3.0)

    def test_rotate_uses_svg_orientation(self):
        """rotate(90) maps +x onto +y (clockwise on a y-down screen)."""
        p = Transform.rotate(90.0).apply(Point(1.0, 0.0))
        assert _points_close(p, Point(0.0, 1.0))

    def test_rotate_about_center_keeps_center_fixed(self):
        """The rotation centre is a fixed point."""
        p = Transform.rotate(73.0, 4.0, -2.0).apply(Point(4.0, -2.0))
        assert _points_close(p, Point(4.0, -2.0))

    def test_skew_x(self):
        """skewX(45) shifts x by y."""
        p = Transform.skew_x(45.0).apply(Point(0.0, 2.0))
        assert _points_close(p, Point(2.0, 2.0))

    def test_array_round_trip(self):
        """to_array / from_array preserve the coefficients."""
        t = Transform(1.0, 2.0, 3.0, 4.0, 5.0, 6.0)
        assert Transform.from_array(t.to_array()).coefficients == t.coefficients

    def test_from_array_rejects_bad_shape(self):
        """Only 3x3 and 2x3 matrices are accepted."""
        with pytest.raises(GeometryError):
            Transform.from_array(np.eye(4))

    @pytest.mark.parametrize("build", [Transform.rotate, Transform.skew_x, Transform.skew_y])
    @pytest.mark.parametrize("angle", [math.inf, -math.inf, math.nan])
    def test_non_finite_angle_is_rejected(self, build, angle):
        """Angles must be finite numbers of degrees."""
        with pytest.raises(GeometryError):
            build(angle)


class TestComposition:
    @pytest.mark.parametrize("a", SAMPLE_TRANSFORMS)
    @pytest.mark.parametrize("b", SAMPLE_TRANSFORMS)
    def test_apply_a_then_b_equals_composed(self, a, b):
        """Applying A then B to a cubic equals applying B o A directly."""
        cubic = CubicBezier(Point(0.0, 0.0), Point(1.0, 5.0), Point(4.0, -3.0), Point(6.0, 1.0))
        step_by_step = cubic.transform(a).transform(b)
        composed = cubic.transform(b @ a)
        for p, q in zip(step_by_step.control_points(), composed.control_points()):
            assert _points_close(p, q)

    def test_then_reads_left_to_right(self):
        """a.then(b) is b @ a."""
        a, b = Transform.translate(1.0, 0.0), Transform.scale(2.0)
        assert a.then(b).coefficients == (b @ a).coefficients
        assert a.then(b).apply(Point(0.0, 0.0)) == Point(2.0, 0.0)

    def test_composition_is_associative(self):
        """(A @ B) @ C == A @ (B @ C)."""
        a, b, c = SAMPLE_TRANSFORMS[2], SAMPLE_TRANSFORMS[4], SAMPLE_TRANSFORMS[6]
        assert ((a @ b) @ c).almost_equal(a @ (b @ c))

    def test_arc_transform_matches_point_transform(self):
        """An arc maps exactly: transformed evaluation equals evaluation of the transformed arc."""
        arc = EllipticalArc.from_center(Point(2.0, 3.0), 5.0, 2.0, 0.3, 2.0, rotation=0.4)
        t = Transform(1.2, 0.3, -0.7, 0.9, 3.0, -1.0)
        moved = arc.transform(t)
        for s in (0.0, 0.25, 0.5, 0.9, 1.0):
            assert _points_close(moved.point_at(s), t.apply(arc.point_at(s)))


class TestInverse:
    @pytest.mark.parametrize("t", SAMPLE_TRANSFORMS)
    def test_inverse_undoes_transform(self, t):
        """T^-1 @ T is the identity."""
        assert (t.inverse() @ t).almost_equal(Transform.identity())

    def test_singular_transform_is_signalled(self):
        """Inverting a singular transform raises GeometryError."""
        with pytest.raises(GeometryError):
            Transform.scale(0.0, 1.0).inverse()

    def test_non_finite_transform_is_signalled(self):
        """A transform with a NaN coefficient cannot be inverted."""
        with pytest.raises(GeometryError):
            Transform(math.nan, 0.0, 0.0, 1.0, 0.0, 0.0).inverse()


class TestApplication:
    def test_apply_vector_ignores_translation(self):
        """Vectors only see the linear part."""
        t = Transform.translate(10.0, 10.0) @ Transform.scale(2.0)
        assert t.apply_vector(Vector(1.0, 1.0)) == Vector(2.0, 2.0)

    def test_apply_array_matches_apply(self):
        """The vectorised path agrees with the per-point path."""
        t = SAMPLE_TRANSFORMS[6]
        pts = np.array([[0.0, 0.0], [1.0, 2.0], [-3.0, 4.5]])
        out = t.apply_array(pts)
        for row, (x, y) in zip(out, pts):
            expected = t.apply(Point(x, y))
            assert row[0] == pytest.approx(expected.x)
            assert row[1] == pytest.approx(expected.y)

    def test_mean_scale(self):
        """mean_scale is sqrt(|det|)."""
        assert Transform.scale(4.0, 1.0).mean_scale == pytest.approx(2.0)
        assert Transform.scale(1.0, -1.0).mean_scale == pytest.approx(1.0)

    def test_line_transform(self):
        """Line segments map end point by end point."""
        line = LineSegment(Point(0.0, 0.0), Point(1.0, 0.0)).transform(Transform.scale(3.0))
        assert line.end == Point(3.0, 0.0)
