"""
Presentation Attributes
=======================
Resolves the handful of style properties that matter for stroked geometry.

Priority per element: 'style' attribute > presentation attribute > inherited
value. Fill, filters and the CSS cascade from <style> sheets are not
evaluated.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
import logging
import re
from typing import Dict, Mapping, Optional

from vsvg.errors import LengthError
from vsvg.importer.units import parse_length
from vsvg.model.color import BLACK, TRANSPARENT, Color, parse_color
from vsvg.model.path import PathStyle

logger = logging.getLogger(__name__)

STYLE_PROPERTIES = ("stroke", "stroke-width", "stroke-opacity", "opacity", "color", "display", "visibility")
_URL_PAINT_RE = re.compile(r"^url\([^)]*\)\s*(.*)$")


def parse_style_attribute(text: Optional[str]) -> Dict[str, str]:
    """Parse an inline 'style' attribute into a {property: value} dict."""
    result: Dict[str, str] = {}
    if not text:
        return result
    for item in text.split(";"):
        name, sep, value = item.partition(":")
        if not sep:
            continue
        value = value.replace("!important", "").strip()
        result[name.strip().lower()] = value
    return result


def element_declarations(attributes: Mapping[str, str]) -> Dict[str, str]:
    """Relevant declarations of one element, style attribute winning."""
    declarations = {name: attributes[name].strip() for name in STYLE_PROPERTIES if name in attributes}
    for name, value in parse_style_attribute(attributes.get("style")).items():
        if name in STYLE_PROPERTIES:
            declarations[name] = value
    return declarations


def _parse_opacity(text: str) -> Optional[float]:
    text = text.strip()
    try:
        value = float(text[:-1]) / 100.0 if text.endswith("%") else float(text)
    except ValueError:
        return None
    # CSS clamps alpha values into [0, 1]
    return min(1.0, max(0.0, value))


@dataclass(frozen=True)
class StyleState:
    """
    Computed style of an element.

    Attributes:
        stroke: Stroke colour, None for stroke="none".
        stroke_current_color: Stroke is 'currentColor' (resolved against color).
        stroke_width: In the element's local units (scaled later by the CTM).
        stroke_opacity: Inherited stroke opacity.
        opacity: Product of the element's and its ancestors' group opacity.
        color: Value of the 'color' property.
        visible: Inherited 'visibility'.
        displayed: The element's own 'display' (not inherited).
    """
    stroke: Optional[Color] = BLACK
    stroke_current_color: bool = False
    stroke_width: float = 1.0
    stroke_opacity: float = 1.0
    opacity: float = 1.0
    color: Color = BLACK
    visible: bool = True
    displayed: bool = True

    @staticmethod
    def initial(default_stroke_width: float = 1.0) -> StyleState:
        return StyleState(stroke_width=default_stroke_width)

    @property
    def hidden(self) -> bool:
        return not (self.visible and self.displayed)

    def derive(self, attributes: Mapping[str, str]) -> StyleState:
        """
        Compute the style of a child element.

        Raises:
            LengthError: Malformed or negative stroke-width.
        """
        declarations = element_declarations(attributes)
        changes: Dict[str, object] = {"displayed": True}

        def declared(name: str) -> Optional[str]:
            value = declarations.get(name)
            if value is None or value == "inherit" or value == "":
                return None
            return value

        value = declared("color")
        if value is not None:
            color = parse_color(value)
            if color is not None:
                changes["color"] = color

        value = declared("stroke")
        if value is not None:
            changes.update(self._stroke_changes(value))

        value = declared("stroke-width")
        if value is not None:
            width = parse_length(value)
            if width < 0.0:
                raise LengthError(f"Negative stroke-width {value!r}.")
            changes["stroke_width"] = width

        value = declared("stroke-opacity")
        if value is not None:
            opacity = _parse_opacity(value)
            if opacity is not None:
                changes["stroke_opacity"] = opacity

        value = declared("opacity")
        if value is not None:
            opacity = _parse_opacity(value)
            if opacity is not None:
                changes["opacity"] = self.opacity * opacity

        value = declared("visibility")
        if value is not None:
            changes["visible"] = value not in ("hidden", "collapse")

        if declared("display") == "none":
            changes["displayed"] = False

        return replace(self, **changes)

    def _stroke_changes(self, value: str) -> Dict[str, object]:
        if value == "none":
            return {"stroke": None, "stroke_current_color": False}
        if value == "currentColor":
            return {"stroke_current_color": True}

        # Paint servers are not evaluated: use the fallback colour, else black
        url = _URL_PAINT_RE.match(value)
        if url is not None:
            fallback = url.group(1).strip()
            if fallback == "none":
                return {"stroke": None, "stroke_current_color": False}
            return {"stroke": parse_color(fallback) or BLACK, "stroke_current_color": False}

        color = parse_color(value)
        if color is None:
            logger.debug(f"Ignoring unrecognized stroke value {value!r}.")
            return {}
        return {"stroke": color, "stroke_current_color": False}

    def effective_color(self) -> Color:
        base = self.color if self.stroke_current_color else self.stroke
        if base is None:
            return TRANSPARENT
        return base.with_opacity(self.stroke_opacity * self.opacity)

    def path_style(self) -> PathStyle:
        return PathStyle(color=self.effective_color(), stroke_width=self.stroke_width)
