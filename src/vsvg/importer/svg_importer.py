"""
SVG Document Import
===================
Walks an SVG element tree (lxml) and fills a Document.

Why is this file needed?
------------------------
1. Resolution: every element's transform is composed top-down with the
   viewBox-to-page transform, and the resulting matrix is applied to the
   element's primitives, so the Document stores document-space geometry.
2. Layers: the GroupPolicy decides which groups become Layers (see below).
3. Error isolation: a failure inside one element produces exactly one
   PathSkipped record and the walk continues. Only problems with the
   document as a whole (not XML, not SVG, broken root viewport) raise
   SvgImportError.

Group policies:
    TOP_LEVEL: each <g> directly under the root becomes a Layer; deeper groups
               are flattened into their layer. Other top-level content goes to
               a default layer created on first use.
    SINGLE:    everything goes to one Layer.
    INKSCAPE:  like TOP_LEVEL, but only groups with inkscape:groupmode="layer".
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
import logging
from typing import Callable, Dict, List, Optional, Tuple, Union

from lxml import etree

from vsvg.config import GroupPolicy, VsvgConfig
from vsvg.errors import PathSkipped, SvgImportError, VsvgError
from vsvg.importer.path_data import parse_path_data
from vsvg.importer.shapes import SHAPE_BUILDERS
from vsvg.importer.styles import StyleState
from vsvg.importer.transform_parser import parse_transform
from vsvg.importer.units import (
    parse_length,
    parse_preserve_aspect_ratio,
    parse_viewbox,
    parse_viewport_length,
    resolve_viewport,
)
from vsvg.model.document import Document, Layer, PageSize
from vsvg.model.transforms import Transform

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"
INKSCAPE_NS = "http://www.inkscape.org/namespaces/inkscape"

CONTAINER_TAGS = frozenset({"g", "a", "switch"})
SHAPE_TAGS = frozenset({"path"}) | frozenset(SHAPE_BUILDERS)

# Never rendered directly; silently ignored
IGNORED_TAGS = frozenset({
    "defs", "symbol", "clipPath", "mask", "marker", "pattern",
    "linearGradient", "radialGradient", "style", "script", "title", "desc",
    "metadata", "filter", "animate", "animateMotion", "animateTransform",
    "set", "mpath", "view", "cursor",
})

_PARSER_OPTIONS = dict(
    huge_tree=True,
    resolve_entities=False,
    no_network=True,
    remove_comments=True,
    remove_pis=True,
)

LayerTarget = Callable[[], Layer]


@dataclass
class ImportResult:
    """
    Attributes:
        document: The imported document.
        skipped: One record per element that could not be imported.
        warnings: Human-readable notes (unsupported elements, unresolved references).
    """
    document: Document
    skipped: List[PathSkipped] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


class _ImportContext:
    """Mutable state of one import run."""

    def __init__(self, document: Document, ids: Dict[str, etree._Element]):
        self.document = document
        self.ids = ids
        self.skipped: List[PathSkipped] = []
        self.warnings: List[str] = []
        self.use_stack: List[str] = []
        self._default_layer: Optional[Layer] = None

    def default_layer(self) -> Layer:
        if self._default_layer is None:
            self._default_layer = self.document.new_layer()
        return self._default_layer

    def skip(self, element: etree._Element, reason: str) -> None:
        record = PathSkipped(_local_name(element), reason, element.get("id"))
        self.skipped.append(record)
        logger.warning(str(record))

    def warn(self, message: str) -> None:
        self.warnings.append(message)
        logger.warning(message)


def _local_name(element: etree._Element) -> str:
    return etree.QName(element).localname


def _is_svg_element(element) -> bool:
    # Comments, processing instructions and entities have a non-string tag
    if not isinstance(element.tag, str):
        return False
    return etree.QName(element).namespace in (None, SVG_NS)


def _parse_xml(source: Union[str, bytes]) -> etree._Element:
    if isinstance(source, str):
        data = source.encode("utf-8")
    elif isinstance(source, (bytes, bytearray)):
        data = bytes(source)
    else:
        raise TypeError(f"SVG source must be str or bytes, got {type(source).__name__}.")

    parser = etree.XMLParser(**_PARSER_OPTIONS)
    try:
        root = etree.fromstring(data, parser=parser)
    except etree.XMLSyntaxError as e:
        raise SvgImportError(f"Input is not well-formed XML: {e}") from e

    if root is None or not _is_svg_element(root) or _local_name(root) != "svg":
        raise SvgImportError("Root element is not <svg>.")
    return root


class SvgImporter:
    """
    Reusable importer bound to a configuration.

    Example:
        >>> result = SvgImporter(VsvgConfig(group_policy="single")).import_svg(text)
        >>> result.document.path_count
    """

    def __init__(self, config: Optional[VsvgConfig] = None):
        self.config = config or VsvgConfig()

    # --------------------------------------------------------------------------
    # Entry point
    # --------------------------------------------------------------------------
    def import_svg(self, source: Union[str, bytes]) -> ImportResult:
        """
        Import a complete SVG document held in memory.

        Raises:
            SvgImportError: The input is not an SVG document or its root
                viewport cannot be resolved. No partial Document is returned.
        """
        root = _parse_xml(source)
        logger.info(f"Importing SVG document ({len(source)} characters, policy={self.config.group_policy}).")

        page_size, viewport = self._root_viewport(root)
        try:
            root_transform = viewport @ parse_transform(root.get("transform"))
            root_style = StyleState.initial(self.config.default_stroke_width).derive(root.attrib)
        except VsvgError as e:
            raise SvgImportError(f"Invalid attribute on the root <svg>: {e}") from e

        document = Document(page_size=page_size, source_transform=viewport)
        title = self._title(root)
        if title:
            document.metadata["title"] = title

        ids = {el.get("id"): el for el in root.iter(etree.Element) if el.get("id")}
        ctx = _ImportContext(document, ids)

        if root_style.displayed or not self.config.skip_hidden:
            for child in root:
                self._visit_top_level(ctx, child, root_transform, root_style)
        else:
            ctx.warn("Root <svg> has display:none; nothing imported.")

        logger.info(
            f"Imported {document.path_count} paths in {len(document)} layers "
            f"({len(ctx.skipped)} skipped, {len(ctx.warnings)} warnings)."
        )
        return ImportResult(document=document, skipped=ctx.skipped, warnings=ctx.warnings)

    # --------------------------------------------------------------------------
    # Document level
    # --------------------------------------------------------------------------
    @staticmethod
    def _root_viewport(root: etree._Element) -> Tuple[Optional[PageSize], Transform]:
        try:
            width = parse_viewport_length(root.get("width"))
            height = parse_viewport_length(root.get("height"))
            viewbox = parse_viewbox(root.get("viewBox"))
            aspect = parse_preserve_aspect_ratio(root.get("preserveAspectRatio"))
            size, transform = resolve_viewport(width, height, viewbox, aspect)
            page_size = PageSize(*size) if size is not None else None
        except VsvgError as e:
            raise SvgImportError(f"Invalid root viewport: {e}") from e
        logger.debug(f"Page size {page_size}, viewBox transform {transform.coefficients}.")
        return page_size, transform

    @staticmethod
    def _title(root: etree._Element) -> Optional[str]:
        for child in root:
            if _is_svg_element(child) and _local_name(child) == "title":
                return (child.text or "").strip() or None
        return None

    def _is_layer_group(self, element: etree._Element) -> bool:
        if not _is_svg_element(element) or _local_name(element) != "g":
            return False
        match self.config.group_policy:
            case GroupPolicy.TOP_LEVEL:
                return True
            case GroupPolicy.INKSCAPE:
                return element.get(f"{{{INKSCAPE_NS}}}groupmode") == "layer"
            case _:
                return False

    def _visit_top_level(
        self, ctx: _ImportContext, element: etree._Element, transform: Transform, style: StyleState
    ) -> None:
        if self._is_layer_group(element):
            self._visit_layer_group(ctx, element, transform, style)
        else:
            self._visit(ctx, element, transform, style, ctx.default_layer)

    def _visit_layer_group(
        self, ctx: _ImportContext, element: etree._Element, transform: Transform, style: StyleState
    ) -> None:
        try:
            local_style, local_transform = self._resolve(element, transform, style)
        except VsvgError as e:
            ctx.skip(element, str(e))
            return

        element_id = element.get("id")
        layer = ctx.document.new_layer(name=element.get(f"{{{INKSCAPE_NS}}}label") or element_id)
        if element_id:
            layer.metadata["id"] = element_id

        # A hidden layer keeps its geometry and is only marked invisible
        layer.visible = not local_style.hidden
        child_style = replace(local_style, visible=True, displayed=True)
        for child in element:
            self._visit(ctx, child, local_transform, child_style, lambda: layer)

    # --------------------------------------------------------------------------
    # Element level
    # --------------------------------------------------------------------------
    @staticmethod
    def _resolve(
        element: etree._Element, transform: Transform, style: StyleState
    ) -> Tuple[StyleState, Transform]:
        return style.derive(element.attrib), transform @ parse_transform(element.get("transform"))

    def _visit(
        self,
        ctx: _ImportContext,
        element: etree._Element,
        transform: Transform,
        style: StyleState,
        target: LayerTarget,
    ) -> None:
        if not _is_svg_element(element):
            # Foreign namespaces (inkscape:*, sodipodi:*, ...) carry no SVG geometry
            return
        tag = _local_name(element)
        if tag in IGNORED_TAGS:
            return
        if tag not in CONTAINER_TAGS and tag not in SHAPE_TAGS and tag not in ("svg", "use"):
            ctx.warn(f"Unsupported element <{tag}> ignored.")
            return

        try:
            local_style, local_transform = self._resolve(element, transform, style)
        except VsvgError as e:
            ctx.skip(element, str(e))
            return

        if not local_style.displayed and self.config.skip_hidden:
            logger.debug(f"Skipping hidden <{tag}> (id={element.get('id')!r}).")
            return

        match tag:
            case "g" | "a":
                for child in element:
                    self._visit(ctx, child, local_transform, local_style, target)
            case "switch":
                # Conditional attributes are not evaluated: the first child wins
                for child in element:
                    if _is_svg_element(child):
                        self._visit(ctx, child, local_transform, local_style, target)
                        break
            case "svg":
                self._visit_nested_svg(ctx, element, local_transform, local_style, target)
            case "use":
                self._visit_use(ctx, element, local_transform, local_style, target)
            case _:
                if local_style.hidden and self.config.skip_hidden:
                    logger.debug(f"Skipping invisible <{tag}> (id={element.get('id')!r}).")
                    return
                self._import_shape(ctx, element, tag, local_transform, local_style, target)

    def _import_shape(
        self,
        ctx: _ImportContext,
        element: etree._Element,
        tag: str,
        transform: Transform,
        style: StyleState,
        target: LayerTarget,
    ) -> None:
        try:
            if tag == "path":
                subpaths = parse_path_data(element.get("d"))
            else:
                subpaths = SHAPE_BUILDERS[tag](element.attrib)
            path_style = style.path_style()
            paths = [subpath.to_path(path_style).transform(transform) for subpath in subpaths]
        except VsvgError as e:
            ctx.skip(element, str(e))
            return

        if not paths:
            logger.debug(f"<{tag}> (id={element.get('id')!r}) has no geometry.")
            return
        target().extend(paths)

    def _visit_nested_svg(
        self,
        ctx: _ImportContext,
        element: etree._Element,
        transform: Transform,
        style: StyleState,
        target: LayerTarget,
    ) -> None:
        try:
            x = parse_length(element.get("x"), 0.0)
            y = parse_length(element.get("y"), 0.0)
            width = parse_viewport_length(element.get("width"))
            height = parse_viewport_length(element.get("height"))
            viewbox = parse_viewbox(element.get("viewBox"))
            aspect = parse_preserve_aspect_ratio(element.get("preserveAspectRatio"))
            _, viewport = resolve_viewport(width, height, viewbox, aspect)
        except VsvgError as e:
            ctx.skip(element, str(e))
            return

        inner = transform @ Transform.translate(x, y) @ viewport
        for child in element:
            self._visit(ctx, child, inner, style, target)

    def _visit_use(
        self,
        ctx: _ImportContext,
        element: etree._Element,
        transform: Transform,
        style: StyleState,
        target: LayerTarget,
    ) -> None:
        href = element.get("href") or element.get(f"{{{XLINK_NS}}}href")
        if not href or not href.startswith("#"):
            ctx.warn(f"<use> without a local reference ({href!r}) ignored.")
            return
        ref_id = href[1:]
        referenced = ctx.ids.get(ref_id)
        if referenced is None:
            ctx.warn(f"<use> references unknown id {ref_id!r}.")
            return
        if ref_id in ctx.use_stack:
            ctx.skip(element, f"circular reference to {ref_id!r}")
            return

        try:
            x = parse_length(element.get("x"), 0.0)
            y = parse_length(element.get("y"), 0.0)
        except VsvgError as e:
            ctx.skip(element, str(e))
            return

        use_transform = transform @ Transform.translate(x, y)
        ctx.use_stack.append(ref_id)
        try:
            if _is_svg_element(referenced) and _local_name(referenced) == "symbol":
                self._visit_symbol(ctx, referenced, element, use_transform, style, target)
            else:
                self._visit(ctx, referenced, use_transform, style, target)
        finally:
            ctx.use_stack.pop()

    def _visit_symbol(
        self,
        ctx: _ImportContext,
        symbol: etree._Element,
        use: etree._Element,
        transform: Transform,
        style: StyleState,
        target: LayerTarget,
    ) -> None:
        """A <symbol> instantiated by <use>: its viewBox maps onto the use's width/height."""
        try:
            symbol_style = style.derive(symbol.attrib)
            width = parse_viewport_length(use.get("width") or symbol.get("width"))
            height = parse_viewport_length(use.get("height") or symbol.get("height"))
            viewbox = parse_viewbox(symbol.get("viewBox"))
            aspect = parse_preserve_aspect_ratio(symbol.get("preserveAspectRatio"))
            _, viewport = resolve_viewport(width, height, viewbox, aspect)
        except VsvgError as e:
            ctx.skip(use, str(e))
            return

        inner = transform @ viewport
        for child in symbol:
            self._visit(ctx, child, inner, symbol_style, target)


def import_svg(source: Union[str, bytes], config: Optional[VsvgConfig] = None) -> ImportResult:
    """Import an SVG document; see SvgImporter.import_svg."""
    return SvgImporter(config).import_svg(source)
