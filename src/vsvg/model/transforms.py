"""
2-D Affine Transforms
=====================
Represented by the six SVG matrix coefficients [a, b, c, d, e, f]:

    | a  c  e |   | x |
    | b  d  f | x | y |
    | 0  0  1 |   | 1 |

Composition follows the usual matrix convention: ``A @ B`` applies B first,
then A. ``A.then(B)`` reads left-to-right and equals ``B @ A``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, TYPE_CHECKING
import math

import numpy as np

from vsvg.config import SINGULAR_EPSILON
from vsvg.errors import GeometryError
from vsvg.model.geometry_primitives import Point, Vector

if TYPE_CHECKING:
    import numpy.typing as npt


def _radians(angle_deg: float) -> float:
    if not math.isfinite(angle_deg):
        raise GeometryError(f"Angle must be finite, got {angle_deg!r}.")
    return math.radians(angle_deg)


@dataclass(frozen=True)
class Transform:
    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    e: float = 0.0
    f: float = 0.0

    # --------------------------------------------------------------------------
    # Constructors
    # --------------------------------------------------------------------------
    @staticmethod
    def identity() -> Transform:
        return Transform()

    @staticmethod
    def translate(tx: float, ty: float = 0.0) -> Transform:
        return Transform(1.0, 0.0, 0.0, 1.0, float(tx), float(ty))

    @staticmethod
    def scale(sx: float, sy: Optional[float] = None) -> Transform:
        sy = sx if sy is None else sy
        return Transform(float(sx), 0.0, 0.0, float(sy), 0.0, 0.0)

    @staticmethod
    def rotate(angle_deg: float, cx: float = 0.0, cy: float = 0.0) -> Transform:
        """Rotation by angle_deg degrees (SVG orientation) about (cx, cy)."""
        angle = _radians(angle_deg)
        cos_a, sin_a = math.cos(angle), math.sin(angle)
        return Transform(
            cos_a, sin_a,
            -sin_a, cos_a,
            cx - cx * cos_a + cy * sin_a,
            cy - cx * sin_a - cy * cos_a,
        )

    @staticmethod
    def skew_x(angle_deg: float) -> Transform:
        return Transform(1.0, 0.0, math.tan(_radians(angle_deg)), 1.0, 0.0, 0.0)

    @staticmethod
    def skew_y(angle_deg: float) -> Transform:
        return Transform(1.0, math.tan(_radians(angle_deg)), 0.0, 1.0, 0.0, 0.0)

    @staticmethod
    def from_array(matrix: npt.ArrayLike) -> Transform:
        """Build from a 3x3 (or 2x3) homogeneous matrix."""
        m = np.asarray(matrix, dtype=np.float64)
        if m.shape not in ((3, 3), (2, 3)):
            raise GeometryError(f"Expected a 3x3 or 2x3 matrix, got shape {m.shape}.")
        return Transform(m[0, 0], m[1, 0], m[0, 1], m[1, 1], m[0, 2], m[1, 2])

    # --------------------------------------------------------------------------
    # Algebra
    # --------------------------------------------------------------------------
    def __matmul__(self, other: Transform) -> Transform:
        """Return self o other (other applied first, then self)."""
        a1, b1, c1, d1, e1, f1 = self.coefficients
        a2, b2, c2, d2, e2, f2 = other.coefficients
        return Transform(
            a1 * a2 + c1 * b2,
            b1 * a2 + d1 * b2,
            a1 * c2 + c1 * d2,
            b1 * c2 + d1 * d2,
            a1 * e2 + c1 * f2 + e1,
            b1 * e2 + d1 * f2 + f1,
        )

    def then(self, other: Transform) -> Transform:
        """Apply self first, then other."""
        return other @ self

    @property
    def coefficients(self) -> Tuple[float, float, float, float, float, float]:
        return (self.a, self.b, self.c, self.d, self.e, self.f)

    @property
    def determinant(self) -> float:
        return self.a * self.d - self.b * self.c

    @property
    def mean_scale(self) -> float:
        """Geometric mean of the axis scale factors, used to scale stroke widths."""
        return math.sqrt(abs(self.determinant))

    @property
    def is_identity(self) -> bool:
        return self.coefficients == (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)

    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in self.coefficients)

    def inverse(self) -> Transform:
        """
        Return the inverse transform.

        Raises:
            GeometryError: If the transform is singular or not finite.
        """
        det = self.determinant
        if not self.is_finite() or not math.isfinite(det) or abs(det) <= SINGULAR_EPSILON:
            raise GeometryError(f"Cannot invert singular transform {self.coefficients} (det={det}).")
        a, b, c, d, e, f = self.coefficients
        return Transform(
            d / det,
            -b / det,
            -c / det,
            a / det,
            (c * f - d * e) / det,
            (b * e - a * f) / det,
        )

    def almost_equal(self, other: Transform, tolerance: float = 1e-9) -> bool:
        return all(abs(p - q) <= tolerance for p, q in zip(self.coefficients, other.coefficients))

    # --------------------------------------------------------------------------
    # Application
    # --------------------------------------------------------------------------
    def apply_xy(self, x: float, y: float) -> Tuple[float, float]:
        return (self.a * x + self.c * y + self.e, self.b * x + self.d * y + self.f)

    def apply(self, point: Point) -> Point:
        return Point(*self.apply_xy(point.x, point.y))

    def apply_vector(self, vector: Vector) -> Vector:
        """Apply the linear part only (no translation)."""
        return Vector(self.a * vector.x + self.c * vector.y, self.b * vector.x + self.d * vector.y)

    def apply_array(self, points: npt.ArrayLike) -> npt.NDArray[np.float64]:
        """Transform an (N, 2) array of points."""
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        if len(pts) == 0:
            return pts
        m = self.to_array()
        return pts @ m[:2, :2].T + m[:2, 2]

    def to_array(self) -> npt.NDArray[np.float64]:
        return np.array([
            [self.a, self.c, self.e],
            [self.b, self.d, self.f],
            [0.0, 0.0, 1.0],
        ])
