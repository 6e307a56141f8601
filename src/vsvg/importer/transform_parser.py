"""
Parser for the SVG 'transform' attribute.

A transform list applies right to left: "translate(10) scale(2)" scales
first, then translates, so the result is translate @ scale.
"""
from __future__ import annotations

import math
import re
from typing import List, Optional

from vsvg.errors import TransformSyntaxError
from vsvg.model.transforms import Transform

_FUNCTION_RE = re.compile(r"[\s,]*(matrix|translate|scale|rotate|skewX|skewY)\s*\(([^)]*)\)[\s,]*")
_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
_ARG_SEPARATOR_RE = re.compile(r"\s*,\s*|\s+")

# Accepted argument counts per function
_ARITY = {
    "matrix": (6,),
    "translate": (1, 2),
    "scale": (1, 2),
    "rotate": (1, 3),
    "skewX": (1,),
    "skewY": (1,),
}


def _parse_arguments(name: str, text: str) -> List[float]:
    text = text.strip()
    if not text:
        raise TransformSyntaxError(f"{name}() needs arguments.")
    args: List[float] = []
    for token in _ARG_SEPARATOR_RE.split(text):
        if not _NUMBER_RE.fullmatch(token):
            raise TransformSyntaxError(f"Invalid number {token!r} in {name}().")
        value = float(token)
        if not math.isfinite(value):
            raise TransformSyntaxError(f"Non-finite number {token!r} in {name}().")
        args.append(value)
    if len(args) not in _ARITY[name]:
        expected = " or ".join(str(n) for n in _ARITY[name])
        raise TransformSyntaxError(f"{name}() takes {expected} arguments, got {len(args)}.")
    return args


def _function_transform(name: str, args: List[float]) -> Transform:
    match name:
        case "matrix":
            return Transform(*args)
        case "translate":
            return Transform.translate(*args)
        case "scale":
            return Transform.scale(*args)
        case "rotate":
            return Transform.rotate(*args)
        case "skewX":
            return Transform.skew_x(args[0])
        case "skewY":
            return Transform.skew_y(args[0])
    raise TransformSyntaxError(f"Unknown transform function {name!r}.")


def parse_transform(text: Optional[str]) -> Transform:
    """
    Parse a transform list into a single Transform.

    Returns the identity for None or blank input.

    Raises:
        TransformSyntaxError: On unknown functions, bad numbers, wrong argument
            counts or trailing garbage.
    """
    if text is None or not text.strip():
        return Transform.identity()

    result = Transform.identity()
    pos = 0
    while pos < len(text):
        match = _FUNCTION_RE.match(text, pos)
        if match is None:
            raise TransformSyntaxError(f"Cannot parse transform at offset {pos}: {text[pos:pos + 20]!r}.")
        name, arg_text = match.groups()
        result = result @ _function_transform(name, _parse_arguments(name, arg_text))
        pos = match.end()

    if not result.is_finite():
        raise TransformSyntaxError(f"Transform {text!r} has non-finite coefficients.")
    return result
