"""
Configuration & Global Constants
================================
This module serves as the central registry for numeric constants and for the
caller-facing configuration of the importer and the flattener.

Why is this file needed?
------------------------
1. Abstraction: tolerances and unit factors are not scattered as magic
   numbers across the importer and the flattener.
2. Configuration: callers hand a single VsvgConfig to the importer instead of
   a growing list of keyword arguments.

Exports:
    DEFAULT_TOLERANCE (float): Default flattening tolerance in document units (px).
    MAX_SUBDIVISION_DEPTH (int): Recursion cap of the adaptive flattener.
    UNIT_FACTORS (dict): Length unit -> px conversion factors.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict
from enum import StrEnum
from typing import Any, Dict
import math

from vsvg.errors import GeometryError

# Flattening
DEFAULT_TOLERANCE: float = 0.1
MAX_SUBDIVISION_DEPTH: int = 18

# Path chain continuity: a gap may span at most this many ULPs of the larger
# coordinate, or the absolute floor near zero
CHAIN_MAX_ULPS: int = 64
CHAIN_ABS_TOLERANCE: float = 1e-12

# Transforms with |det| below this are treated as singular
SINGULAR_EPSILON: float = 1e-12

# CSS reference pixel: 96 px per inch
PX_PER_INCH: float = 96.0
UNIT_FACTORS: Dict[str, float] = {
    "": 1.0,  # user units
    "px": 1.0,
    "in": PX_PER_INCH,
    "cm": PX_PER_INCH / 2.54,
    "mm": PX_PER_INCH / 25.4,
    "pt": PX_PER_INCH / 72.0,
    "pc": PX_PER_INCH / 6.0,
}


class GroupPolicy(StrEnum):
    """How the importer maps SVG groups onto Layers."""
    TOP_LEVEL = "top-level"   # direct <g> children of the root become Layers
    SINGLE = "single"         # everything lands in one Layer
    INKSCAPE = "inkscape"     # only top-level inkscape:groupmode="layer" groups


def validate_tolerance(tolerance: float) -> float:
    """Return the tolerance as float, or raise GeometryError if it is not finite and positive."""
    try:
        value = float(tolerance)
    except (TypeError, ValueError):
        raise GeometryError(f"Tolerance must be a number, got {tolerance!r}.") from None
    if not math.isfinite(value) or value <= 0.0:
        raise GeometryError(f"Tolerance must be a finite positive number, got {tolerance!r}.")
    return value


@dataclass(frozen=True)
class VsvgConfig:
    """
    Caller-facing configuration.

    Attributes:
        tolerance: Default flattening tolerance (document units).
        group_policy: Group-to-layer mapping used by the importer.
        default_stroke_width: Stroke width used when an element specifies none.
        skip_hidden: Drop elements with display:none during import.
    """
    tolerance: float = DEFAULT_TOLERANCE
    group_policy: GroupPolicy = GroupPolicy.TOP_LEVEL
    default_stroke_width: float = 1.0
    skip_hidden: bool = True

    def __post_init__(self) -> None:
        validate_tolerance(self.tolerance)
        if not math.isfinite(self.default_stroke_width) or self.default_stroke_width < 0.0:
            raise GeometryError(
                f"Default stroke width must be finite and non-negative, got {self.default_stroke_width!r}."
            )
        # Accept plain strings ("single") as well as enum members
        object.__setattr__(self, "group_policy", GroupPolicy(self.group_policy))

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["group_policy"] = self.group_policy.value
        return data

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> VsvgConfig:
        return VsvgConfig(**data)
