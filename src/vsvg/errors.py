"""
Error Taxonomy
==============
Every exception raised by vsvg derives from VsvgError.

Document-level import failures abort the import (SvgImportError). Element
level failures are isolated by the importer and reported as PathSkipped
records next to the otherwise successful Document. Geometry and construction
errors are local to the call that raised them.
"""
from __future__ import annotations

from typing import Optional


class VsvgError(Exception):
    """Base class for all vsvg errors."""


class SvgImportError(VsvgError):
    """Fatal, document-level import failure (no partial Document is returned)."""


class PathSkipped(VsvgError):
    """A single element could not be imported; the rest of the document was."""

    def __init__(self, tag: str, reason: str, element_id: Optional[str] = None):
        self.tag = tag
        self.reason = reason
        self.element_id = element_id
        label = f"<{tag} id={element_id!r}>" if element_id else f"<{tag}>"
        super().__init__(f"{label} skipped: {reason}")


class PathDataError(VsvgError):
    """Malformed SVG path data (the 'd' attribute)."""


class TransformSyntaxError(VsvgError):
    """Malformed SVG 'transform' attribute."""


class LengthError(VsvgError):
    """Malformed length or unrecognized unit."""


class ViewportError(VsvgError):
    """Malformed 'viewBox' or 'preserveAspectRatio' attribute."""


class ShapeError(VsvgError):
    """Invalid attributes on a basic shape (negative radius, odd point list, ...)."""


class GeometryError(VsvgError, ValueError):
    """Invalid numeric input to a geometric operation."""


class ConstructionError(VsvgError, ValueError):
    """A Path was built from an invalid primitive chain."""
