"""
Lengths, Units and Viewports
============================
Normalizes SVG lengths to document units (CSS px) and resolves the
viewBox / width / height / preserveAspectRatio attributes of an <svg>
element into a page size plus a viewBox-to-page transform.

Why is this file needed?
------------------------
1. Units: every recognized unit is converted with the fixed factors from
   vsvg.config.UNIT_FACTORS; an unrecognized unit is an error, never guessed.
2. Viewports: the root and nested <svg> elements share one resolution
   routine, so both follow the same aspect-ratio rules.
"""
from __future__ import annotations

from dataclasses import dataclass
import math
import re
from typing import List, Optional, Tuple

from vsvg.config import UNIT_FACTORS
from vsvg.errors import LengthError, ViewportError
from vsvg.model.transforms import Transform

_LENGTH_RE = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)\s*([a-zA-Z%]*)\s*$")
_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
_LIST_SEPARATOR_RE = re.compile(r"\s*,\s*|\s+")
_ALIGN_VALUES = {
    f"x{x}Y{y}" for x in ("Min", "Mid", "Max") for y in ("Min", "Mid", "Max")
}


def parse_length(text: Optional[str], default: Optional[float] = None) -> Optional[float]:
    """
    Convert an SVG length to document units.

    Args:
        text: Attribute value such as "10", "2.5mm" or "1in".
        default: Returned when the attribute is missing.

    Raises:
        LengthError: Malformed number, percentage or unrecognized unit.
    """
    if text is None:
        return default
    match = _LENGTH_RE.match(text)
    if match is None:
        raise LengthError(f"Malformed length {text!r}.")
    value, unit = float(match.group(1)), match.group(2).lower()
    if unit == "%":
        raise LengthError(f"Percentage lengths are not supported here: {text!r}.")
    factor = UNIT_FACTORS.get(unit)
    if factor is None:
        raise LengthError(f"Unrecognized unit {unit!r} in length {text!r}.")
    result = value * factor
    if not math.isfinite(result):
        raise LengthError(f"Length {text!r} is not finite.")
    return result


def parse_viewport_length(text: Optional[str]) -> Optional[float]:
    """Like parse_length, but a percentage counts as 'not specified' (None)."""
    if text is not None and text.strip().endswith("%"):
        return None
    return parse_length(text)


def parse_number_list(text: Optional[str]) -> List[float]:
    """Parse a comma and/or whitespace separated list of plain numbers."""
    if text is None or not text.strip():
        return []
    values: List[float] = []
    for token in _LIST_SEPARATOR_RE.split(text.strip()):
        if not _NUMBER_RE.fullmatch(token):
            raise LengthError(f"Invalid number {token!r} in list {text!r}.")
        value = float(token)
        if not math.isfinite(value):
            raise LengthError(f"Non-finite number {token!r} in list {text!r}.")
        values.append(value)
    return values


# ------------------------------------------------------------------------------
# viewBox / preserveAspectRatio
# ------------------------------------------------------------------------------
@dataclass(frozen=True)
class ViewBox:
    min_x: float
    min_y: float
    width: float
    height: float


@dataclass(frozen=True)
class PreserveAspectRatio:
    align: str = "xMidYMid"   # "none" or x{Min,Mid,Max}Y{Min,Mid,Max}
    slice: bool = False       # False = "meet"


def parse_viewbox(text: Optional[str]) -> Optional[ViewBox]:
    """
    Returns None when the attribute is absent.

    Raises:
        ViewportError: Not four numbers, or non-positive width/height.
    """
    if text is None:
        return None
    try:
        values = parse_number_list(text)
    except LengthError as e:
        raise ViewportError(f"Malformed viewBox {text!r}: {e}") from e
    if len(values) != 4:
        raise ViewportError(f"viewBox needs four numbers, got {text!r}.")
    min_x, min_y, width, height = values
    if width <= 0.0 or height <= 0.0:
        raise ViewportError(f"viewBox width and height must be positive, got {text!r}.")
    return ViewBox(min_x, min_y, width, height)


def parse_preserve_aspect_ratio(text: Optional[str]) -> PreserveAspectRatio:
    if text is None or not text.strip():
        return PreserveAspectRatio()
    tokens = text.split()
    if tokens[0] == "defer":
        tokens = tokens[1:]
    if not tokens or len(tokens) > 2:
        raise ViewportError(f"Malformed preserveAspectRatio {text!r}.")
    align = tokens[0]
    if align != "none" and align not in _ALIGN_VALUES:
        raise ViewportError(f"Unknown preserveAspectRatio alignment {align!r}.")
    mode = tokens[1] if len(tokens) == 2 else "meet"
    if mode not in ("meet", "slice"):
        raise ViewportError(f"Unknown preserveAspectRatio mode {mode!r}.")
    return PreserveAspectRatio(align=align, slice=mode == "slice")


def viewbox_transform(
    viewbox: ViewBox,
    width: float,
    height: float,
    aspect: Optional[PreserveAspectRatio] = None,
) -> Transform:
    """Map the viewBox onto a width x height viewport (SVG 1.1 section 7.8)."""
    aspect = aspect or PreserveAspectRatio()
    sx = width / viewbox.width
    sy = height / viewbox.height
    if aspect.align != "none":
        sx = sy = max(sx, sy) if aspect.slice else min(sx, sy)

    tx = -viewbox.min_x * sx
    ty = -viewbox.min_y * sy
    if aspect.align != "none":
        x_align, y_align = aspect.align[1:4], aspect.align[5:8]
        free_x = width - viewbox.width * sx
        free_y = height - viewbox.height * sy
        tx += {"Min": 0.0, "Mid": free_x / 2.0, "Max": free_x}[x_align]
        ty += {"Min": 0.0, "Mid": free_y / 2.0, "Max": free_y}[y_align]
    return Transform(sx, 0.0, 0.0, sy, tx, ty)


def resolve_viewport(
    width: Optional[float],
    height: Optional[float],
    viewbox: Optional[ViewBox],
    aspect: Optional[PreserveAspectRatio] = None,
) -> Tuple[Optional[Tuple[float, float]], Transform]:
    """
    Resolve an <svg> viewport.

    Returns:
        ((width, height) or None, viewBox-to-viewport transform).
        A missing dimension is derived from the viewBox aspect ratio; with
        neither dimension the viewBox size is used at scale 1. Without a
        viewBox the transform is the identity and the size is only known
        when both dimensions are given.

    Raises:
        ViewportError: Non-positive width or height.
    """
    for name, value in (("width", width), ("height", height)):
        if value is not None and value <= 0.0:
            raise ViewportError(f"Viewport {name} must be positive, got {value}.")

    if viewbox is None:
        if width is not None and height is not None:
            return (width, height), Transform.identity()
        return None, Transform.identity()

    if width is None and height is None:
        width, height = viewbox.width, viewbox.height
    elif width is None:
        width = height * viewbox.width / viewbox.height
    elif height is None:
        height = width * viewbox.height / viewbox.width
    return (width, height), viewbox_transform(viewbox, width, height, aspect)
