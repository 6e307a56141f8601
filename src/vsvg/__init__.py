"""
vsvg
====
SVG import into an exact curve model, plus tolerance-bounded flattening.

Typical use:
    >>> from vsvg import import_svg
    >>> result = import_svg(svg_text)
    >>> flat = result.document.flatten(tolerance=0.05)
"""
from vsvg.config import DEFAULT_TOLERANCE, GroupPolicy, VsvgConfig
from vsvg.controller.flattener import flatten
from vsvg.controller.measure import bounding_box, length, tight_bounding_box
from vsvg.errors import (
    ConstructionError,
    GeometryError,
    PathSkipped,
    SvgImportError,
    VsvgError,
)
from vsvg.importer.svg_importer import ImportResult, SvgImporter, import_svg
from vsvg.model.color import Color
from vsvg.model.document import Document, Layer, LayerID, Metadata, PageSize
from vsvg.model.flattened import FlattenedDocument, FlattenedLayer, Polyline
from vsvg.model.geometry_primitives import (
    BoundingBox,
    CubicBezier,
    CurvePrimitive,
    EllipticalArc,
    LineSegment,
    Point,
    Vector,
)
from vsvg.model.path import Path, PathStyle
from vsvg.model.transforms import Transform

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_TOLERANCE", "GroupPolicy", "VsvgConfig",
    "flatten", "bounding_box", "tight_bounding_box", "length",
    "VsvgError", "SvgImportError", "PathSkipped", "GeometryError", "ConstructionError",
    "ImportResult", "SvgImporter", "import_svg",
    "Color", "Document", "Layer", "LayerID", "Metadata", "PageSize",
    "FlattenedDocument", "FlattenedLayer", "Polyline",
    "BoundingBox", "CubicBezier", "CurvePrimitive", "EllipticalArc", "LineSegment", "Point", "Vector",
    "Path", "PathStyle", "Transform",
]
