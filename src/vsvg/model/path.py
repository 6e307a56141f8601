"""
Path (Data Model)
=================
An immutable, connected chain of curve primitives with its stroke style.

A Path never repairs a broken chain: each primitive must start where the
previous one ended, otherwise construction fails with ConstructionError.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from functools import reduce
from typing import Iterable, Iterator, Optional, Sequence, Tuple, TYPE_CHECKING
import math

import numpy as np

from vsvg.config import CHAIN_ABS_TOLERANCE, CHAIN_MAX_ULPS
from vsvg.errors import ConstructionError, GeometryError
from vsvg.model.color import BLACK, Color
from vsvg.model.geometry_primitives import BoundingBox, CurvePrimitive, LineSegment, Point

if TYPE_CHECKING:
    import numpy.typing as npt
    from vsvg.model.transforms import Transform


@dataclass(frozen=True)
class PathStyle:
    color: Color = BLACK
    stroke_width: float = 1.0

    def __post_init__(self) -> None:
        if not math.isfinite(self.stroke_width) or self.stroke_width < 0.0:
            raise GeometryError(f"Stroke width must be finite and non-negative, got {self.stroke_width!r}.")


def _coordinates_match(a: float, b: float) -> bool:
    limit = max(CHAIN_ABS_TOLERANCE, CHAIN_MAX_ULPS * math.ulp(max(abs(a), abs(b))))
    return abs(a - b) <= limit


def _connected(previous: Point, following: Point) -> bool:
    return _coordinates_match(previous.x, following.x) and _coordinates_match(previous.y, following.y)


@dataclass(frozen=True)
class Path:
    """
    Attributes:
        primitives: Connected curve primitives, in drawing order.
        closed: True if the path ends where it starts (SVG 'Z').
        style: Stroke colour and width.
    """
    primitives: Tuple[CurvePrimitive, ...]
    closed: bool = False
    style: PathStyle = field(default_factory=PathStyle)

    def __post_init__(self) -> None:
        primitives = tuple(self.primitives)
        object.__setattr__(self, "primitives", primitives)

        if not primitives:
            raise ConstructionError("A Path needs at least one primitive.")
        for i, primitive in enumerate(primitives):
            if not isinstance(primitive, CurvePrimitive):
                raise ConstructionError(f"Item {i} is not a curve primitive: {primitive!r}.")

        for i in range(1, len(primitives)):
            previous_end = primitives[i - 1].end_point()
            current_start = primitives[i].start_point()
            if not _connected(previous_end, current_start):
                raise ConstructionError(
                    f"Primitive {i} starts at {current_start.xy} but primitive {i - 1} ends at {previous_end.xy}."
                )

        if self.closed and not _connected(primitives[-1].end_point(), primitives[0].start_point()):
            raise ConstructionError("A closed Path must end at its start point.")

    # --------------------------------------------------------------------------
    # Construction helpers
    # --------------------------------------------------------------------------
    @staticmethod
    def from_points(
        points: Iterable[Tuple[float, float]] | Sequence[Point],
        closed: bool = False,
        style: Optional[PathStyle] = None,
    ) -> Path:
        """Polyline path through the given points; closing adds the final edge."""
        pts = [p if isinstance(p, Point) else Point(float(p[0]), float(p[1])) for p in points]
        if len(pts) < 2:
            raise ConstructionError("A polyline Path needs at least two points.")
        segments = [LineSegment(a, b) for a, b in zip(pts[:-1], pts[1:])]
        if closed and pts[-1] != pts[0]:
            segments.append(LineSegment(pts[-1], pts[0]))
        return Path(tuple(segments), closed=closed, style=style or PathStyle())

    # --------------------------------------------------------------------------
    # Queries
    # --------------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self.primitives)

    def __iter__(self) -> Iterator[CurvePrimitive]:
        return iter(self.primitives)

    def start_point(self) -> Point:
        return self.primitives[0].start_point()

    def end_point(self) -> Point:
        return self.primitives[-1].end_point()

    @property
    def color(self) -> Color:
        return self.style.color

    @property
    def stroke_width(self) -> float:
        return self.style.stroke_width

    def bounding_box(self) -> BoundingBox:
        return reduce(BoundingBox.union, (p.bounding_box() for p in self.primitives))

    def tight_bounding_box(self) -> BoundingBox:
        return reduce(BoundingBox.union, (p.tight_bounding_box() for p in self.primitives))

    # --------------------------------------------------------------------------
    # Value-returning operations
    # --------------------------------------------------------------------------
    def transform(self, transform: Transform, scale_stroke: bool = True) -> Path:
        """Return the transformed path; the stroke width follows the mean scale."""
        style = self.style
        if scale_stroke:
            style = replace(style, stroke_width=style.stroke_width * transform.mean_scale)
        return Path(
            tuple(p.transform(transform) for p in self.primitives),
            closed=self.closed,
            style=style,
        )

    def reversed(self) -> Path:
        return Path(
            tuple(p.reversed() for p in reversed(self.primitives)),
            closed=self.closed,
            style=self.style,
        )

    def with_style(self, style: PathStyle) -> Path:
        return replace(self, style=style)

    def flatten(self, tolerance: float, max_depth: Optional[int] = None) -> npt.NDArray[np.float64]:
        from vsvg.controller.flattener import flatten_path
        return flatten_path(self, tolerance, max_depth=max_depth)

    def length(self, tolerance: float) -> float:
        from vsvg.controller.measure import length
        return length(self, tolerance)
