"""
Document State (Data Model)
===========================
This module defines the retained geometric model produced by the importer.

Why is this file needed?
------------------------
1. Ownership: a Document owns its Layers and a Layer owns its Paths; nothing
   is shared between Documents.
2. Identity: Layer IDs are assigned by the Document at creation time from a
   counter and are never reused within the Document's lifetime.
3. Concurrency: Paths are immutable. Layer mutations swap the path sequence
   under a per-layer lock, so readers (flatten, measure) always see a
   consistent snapshot without taking any lock themselves.

Classes:
    Metadata: Copy-on-write mapping handle shared by a Document and its Layers.
    PageSize: Page dimensions in document units.
    Layer: Ordered, identified group of Paths.
    Document: Ordered collection of Layers plus page geometry.
"""
from __future__ import annotations

from collections.abc import MutableMapping
from dataclasses import dataclass
import logging
import math
import threading
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, TYPE_CHECKING

from vsvg.config import DEFAULT_TOLERANCE
from vsvg.errors import GeometryError
from vsvg.model.geometry_primitives import BoundingBox
from vsvg.model.path import Path
from vsvg.model.transforms import Transform

if TYPE_CHECKING:
    from vsvg.model.flattened import FlattenedDocument, FlattenedLayer

logger = logging.getLogger(__name__)

LayerID = int


class _MetadataStore:
    __slots__ = ("data", "owners")

    def __init__(self, data: Dict[str, Any]):
        self.data = data
        self.owners = 1


class Metadata(MutableMapping):
    """
    Mapping handle with copy-on-write semantics.

    share() returns a second handle onto the same storage. The first write
    through a shared handle clones the storage for that handle only, so the
    other handles keep seeing the original values.
    """

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self._store = _MetadataStore(dict(data or {}))

    def share(self) -> Metadata:
        handle = Metadata.__new__(Metadata)
        self._store.owners += 1
        handle._store = self._store
        return handle

    @property
    def is_shared(self) -> bool:
        return self._store.owners > 1

    def _detach(self) -> None:
        if self._store.owners > 1:
            self._store.owners -= 1
            self._store = _MetadataStore(dict(self._store.data))

    def __getitem__(self, key: str) -> Any:
        return self._store.data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._detach()
        self._store.data[key] = value

    def __delitem__(self, key: str) -> None:
        self._detach()
        del self._store.data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._store.data)

    def __len__(self) -> int:
        return len(self._store.data)

    def __repr__(self) -> str:
        return f"Metadata({self._store.data!r})"


@dataclass(frozen=True)
class PageSize:
    width: float
    height: float

    def __post_init__(self) -> None:
        for value in (self.width, self.height):
            if not math.isfinite(value) or value <= 0.0:
                raise GeometryError(f"Page dimensions must be finite and positive, got {self.width} x {self.height}.")


class Layer:
    """
    An ordered, identified group of Paths.

    Layers are created through Document.new_layer(), which assigns the ID.
    """

    def __init__(self, layer_id: LayerID, name: Optional[str] = None, metadata: Optional[Metadata] = None):
        self._id = layer_id
        self.name = name
        self.visible = True
        self.metadata = metadata if metadata is not None else Metadata()
        self._paths: List[Path] = []
        self._snapshot: Optional[Tuple[Path, ...]] = ()
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"Layer(id={self._id}, name={self.name!r}, paths={len(self)})"

    @property
    def id(self) -> LayerID:
        return self._id

    @property
    def paths(self) -> Tuple[Path, ...]:
        """Immutable snapshot of the current paths."""
        snapshot = self._snapshot
        if snapshot is None:
            with self._lock:
                if self._snapshot is None:
                    self._snapshot = tuple(self._paths)
                snapshot = self._snapshot
        return snapshot

    def __len__(self) -> int:
        return len(self.paths)

    def __iter__(self) -> Iterator[Path]:
        return iter(self.paths)

    @property
    def is_empty(self) -> bool:
        return len(self) == 0

    # --------------------------------------------------------------------------
    # Append / replace (exclusive writer)
    # --------------------------------------------------------------------------
    @staticmethod
    def _check_path(path: Path) -> Path:
        if not isinstance(path, Path):
            raise TypeError(f"Layers hold Path objects, got {type(path).__name__}.")
        return path

    def append(self, path: Path) -> None:
        self._check_path(path)
        with self._lock:
            self._paths.append(path)
            self._snapshot = None

    def extend(self, paths: Iterable[Path]) -> None:
        new_paths = [self._check_path(p) for p in paths]
        with self._lock:
            self._paths.extend(new_paths)
            self._snapshot = None

    def replace_path(self, index: int, path: Path) -> None:
        self._check_path(path)
        with self._lock:
            self._paths[index] = path
            self._snapshot = None

    def replace_paths(self, paths: Iterable[Path]) -> None:
        new_paths = [self._check_path(p) for p in paths]
        with self._lock:
            self._paths = new_paths
            self._snapshot = None

    def transform(self, transform: Transform) -> None:
        """Replace every path by its transformed copy."""
        self.replace_paths(p.transform(transform) for p in self.paths)

    # --------------------------------------------------------------------------
    # Queries
    # --------------------------------------------------------------------------
    def bounding_box(self) -> Optional[BoundingBox]:
        return BoundingBox.union_all(p.bounding_box() for p in self.paths)

    def flatten(self, tolerance: float = DEFAULT_TOLERANCE) -> FlattenedLayer:
        from vsvg.controller.flattener import flatten_layer
        return flatten_layer(self, tolerance)


class Document:
    """
    Ordered collection of Layers (insertion order is drawing order) with the
    page geometry of the source SVG.

    Attributes:
        page_size: Page size in document units, or None for viewport-less SVGs.
        source_transform: Accumulated viewBox-to-page transform applied at import.
        metadata: Document-wide values, shared copy-on-write with new layers.
    """

    def __init__(
        self,
        page_size: Optional[PageSize] = None,
        source_transform: Optional[Transform] = None,
        metadata: Optional[Metadata] = None,
    ):
        self.page_size = page_size
        self.source_transform = source_transform if source_transform is not None else Transform.identity()
        self.metadata = metadata if metadata is not None else Metadata()
        self._layers: Dict[LayerID, Layer] = {}
        self._next_layer_id: LayerID = 0
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"Document(page_size={self.page_size}, layers={len(self._layers)}, paths={self.path_count})"

    # --------------------------------------------------------------------------
    # Layers
    # --------------------------------------------------------------------------
    def new_layer(self, name: Optional[str] = None) -> Layer:
        """Create an empty layer on top of the existing ones."""
        with self._lock:
            layer_id = self._next_layer_id
            self._next_layer_id += 1
            layer = Layer(layer_id, name=name, metadata=self.metadata.share())
            self._layers[layer_id] = layer
        logger.debug(f"Created layer {layer_id} ({name!r}).")
        return layer

    def layer(self, layer_id: LayerID) -> Layer:
        try:
            return self._layers[layer_id]
        except KeyError:
            raise KeyError(f"Document has no layer with id {layer_id}.") from None

    @property
    def layers(self) -> Tuple[Layer, ...]:
        return tuple(self._layers.values())

    @property
    def layer_ids(self) -> Tuple[LayerID, ...]:
        return tuple(self._layers.keys())

    def __len__(self) -> int:
        return len(self._layers)

    def __iter__(self) -> Iterator[Layer]:
        return iter(self.layers)

    def __contains__(self, layer_id: object) -> bool:
        return layer_id in self._layers

    def replace_layer(self, layer_id: LayerID, paths: Iterable[Path]) -> Layer:
        """Replace the content of an existing layer wholesale."""
        layer = self.layer(layer_id)
        layer.replace_paths(paths)
        return layer

    # --------------------------------------------------------------------------
    # Queries
    # --------------------------------------------------------------------------
    @property
    def path_count(self) -> int:
        return sum(len(layer) for layer in self._layers.values())

    def paths(self) -> Iterator[Path]:
        for layer in self.layers:
            yield from layer.paths

    def bounding_box(self, visible_only: bool = True) -> Optional[BoundingBox]:
        """Union over all (visible) layers; None if there is no geometry."""
        return BoundingBox.union_all(
            layer.bounding_box() for layer in self.layers if layer.visible or not visible_only
        )

    def transform(self, transform: Transform) -> None:
        """Transform every layer in place and record it in source_transform."""
        for layer in self.layers:
            layer.transform(transform)
        self.source_transform = transform @ self.source_transform

    def flatten(self, tolerance: float = DEFAULT_TOLERANCE) -> FlattenedDocument:
        from vsvg.controller.flattener import flatten_document
        return flatten_document(self, tolerance)
