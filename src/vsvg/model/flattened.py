"""
Flattened Document
==================
Polyline snapshot of a Document, produced by Document.flatten(tolerance).

This is what viewers and exporters consume: every curve has already been
linearized, so consumers only deal with (N, 2) point arrays.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Tuple, TYPE_CHECKING

import numpy as np

from vsvg.model.color import BLACK, Color
from vsvg.model.geometry_primitives import BoundingBox
from vsvg.model.transforms import Transform

if TYPE_CHECKING:
    import numpy.typing as npt
    from vsvg.model.document import LayerID, PageSize


@dataclass(frozen=True)
class Polyline:
    """Flattened path: an (N, 2) read-only point array plus its stroke style."""
    points: npt.NDArray[np.float64]
    color: Color = BLACK
    stroke_width: float = 1.0
    closed: bool = False

    def __post_init__(self) -> None:
        pts = np.array(self.points, dtype=np.float64).reshape(-1, 2)
        pts.flags.writeable = False
        object.__setattr__(self, "points", pts)

    def __len__(self) -> int:
        return len(self.points)

    def transform(self, transform: Transform) -> Polyline:
        return Polyline(
            transform.apply_array(self.points),
            color=self.color,
            stroke_width=self.stroke_width * transform.mean_scale,
            closed=self.closed,
        )

    def bounding_box(self) -> Optional[BoundingBox]:
        if len(self.points) == 0:
            return None
        return BoundingBox.from_points(self.points)

    @property
    def length(self) -> float:
        if len(self.points) < 2:
            return 0.0
        return float(np.hypot(*np.diff(self.points, axis=0).T).sum())


@dataclass(frozen=True)
class FlattenedLayer:
    id: LayerID
    name: Optional[str] = None
    polylines: Tuple[Polyline, ...] = ()
    visible: bool = True

    def transform(self, transform: Transform) -> FlattenedLayer:
        return FlattenedLayer(
            id=self.id,
            name=self.name,
            polylines=tuple(p.transform(transform) for p in self.polylines),
            visible=self.visible,
        )

    def bounding_box(self) -> Optional[BoundingBox]:
        return BoundingBox.union_all(p.bounding_box() for p in self.polylines)

    @property
    def point_count(self) -> int:
        return sum(len(p) for p in self.polylines)


@dataclass(frozen=True)
class FlattenedDocument:
    """
    Attributes:
        layers: Flattened layers keyed by LayerID, in drawing order.
        page_size: Page size of the source document (not affected by transforms).
        tolerance: Tolerance the curves were flattened with.
    """
    layers: Dict[LayerID, FlattenedLayer] = field(default_factory=dict)
    page_size: Optional[PageSize] = None
    tolerance: Optional[float] = None

    def __iter__(self) -> Iterator[FlattenedLayer]:
        return iter(self.layers.values())

    def polylines(self, visible_only: bool = False) -> Iterator[Polyline]:
        for layer in self.layers.values():
            if visible_only and not layer.visible:
                continue
            yield from layer.polylines

    def transform(self, transform: Transform) -> FlattenedDocument:
        return FlattenedDocument(
            layers={lid: layer.transform(transform) for lid, layer in self.layers.items()},
            page_size=self.page_size,
            tolerance=self.tolerance,
        )

    def scale_non_uniform(self, sx: float, sy: float) -> FlattenedDocument:
        """E.g. scale_non_uniform(1.0, -1.0) flips to a y-up plotting frame."""
        return self.transform(Transform.scale(sx, sy))

    def bounding_box(self, visible_only: bool = True) -> Optional[BoundingBox]:
        return BoundingBox.union_all(p.bounding_box() for p in self.polylines(visible_only))

    @property
    def point_count(self) -> int:
        return sum(layer.point_count for layer in self.layers.values())
