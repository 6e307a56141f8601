"""
SVG Path Data
=============
Parser for the 'd' attribute mini-language (SVG 1.1 section 8.3).

The parser is strict: any grammar error raises PathDataError for the whole
attribute, and the importer skips that element. Curves are kept exact:
quadratics are degree-elevated to cubics, arcs stay EllipticalArcs.

Each sub-path (everything between two move-to commands) becomes one Subpath,
so one 'd' attribute may yield several Paths.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
import re
from typing import List, Optional

from vsvg.errors import GeometryError, PathDataError
from vsvg.model.geometry_primitives import CubicBezier, CurvePrimitive, EllipticalArc, LineSegment, Point
from vsvg.model.path import Path, PathStyle

logger = logging.getLogger(__name__)

_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
_SEPARATORS = " \t\r\n\f,"
_WHITESPACE = " \t\r\n\f"
COMMANDS = "MmZzLlHhVvCcSsQqTtAa"

# Number of arguments consumed by one repetition of each command
_ARITY = {"M": 2, "L": 2, "H": 1, "V": 1, "C": 6, "S": 4, "Q": 4, "T": 2, "A": 7, "Z": 0}


@dataclass
class Subpath:
    """Primitives of one sub-path in local (untransformed) coordinates."""
    primitives: List[CurvePrimitive] = field(default_factory=list)
    closed: bool = False

    def to_path(self, style: Optional[PathStyle] = None) -> Path:
        return Path(tuple(self.primitives), closed=self.closed, style=style or PathStyle())


class _Scanner:
    """Character-level cursor over path data."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def skip_whitespace(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos] in _WHITESPACE:
            self.pos += 1

    def skip_separators(self) -> None:
        """Whitespace with at most one comma."""
        self.skip_whitespace()
        if self.pos < len(self.text) and self.text[self.pos] == ",":
            self.pos += 1
            self.skip_whitespace()

    def at_end(self) -> bool:
        self.skip_whitespace()
        return self.pos >= len(self.text)

    def peek(self) -> Optional[str]:
        self.skip_whitespace()
        return self.text[self.pos] if self.pos < len(self.text) else None

    def starts_number(self) -> bool:
        char = self.peek()
        return char is not None and (char.isdigit() or char in "+-.")

    def command(self) -> str:
        char = self.peek()
        if char is None or char not in COMMANDS:
            raise PathDataError(f"Expected a path command at offset {self.pos}, found {char!r}.")
        self.pos += 1
        return char

    def number(self) -> float:
        self.skip_whitespace()
        match = _NUMBER_RE.match(self.text, self.pos)
        if match is None:
            found = self.text[self.pos:self.pos + 10] or "end of data"
            raise PathDataError(f"Expected a number at offset {self.pos}, found {found!r}.")
        self.pos = match.end()
        value = float(match.group(0))
        self.skip_separators()
        return value

    def flag(self) -> bool:
        """Arc flags are single characters and need no separator ('a1 1 0 00 1 1')."""
        char = self.peek()
        if char not in ("0", "1"):
            raise PathDataError(f"Expected an arc flag (0 or 1) at offset {self.pos}, found {char!r}.")
        self.pos += 1
        self.skip_separators()
        return char == "1"


class _PathBuilder:
    """Tracks the current point and assembles sub-paths."""

    def __init__(self):
        self.subpaths: List[Subpath] = []
        self.current: Optional[Subpath] = None
        self.position = Point(0.0, 0.0)
        self.subpath_start = Point(0.0, 0.0)
        # Reflection sources for S/T; reset by any other command
        self.last_cubic_control: Optional[Point] = None
        self.last_quad_control: Optional[Point] = None

    def _finish(self) -> None:
        if self.current is not None and self.current.primitives:
            self.subpaths.append(self.current)
        self.current = None

    def _active(self) -> Subpath:
        # Drawing after 'Z' without a move-to starts a new sub-path at the old start
        if self.current is None:
            self.current = Subpath()
            self.position = self.subpath_start
        return self.current

    def move_to(self, point: Point) -> None:
        self._finish()
        self.current = Subpath()
        self.position = point
        self.subpath_start = point

    def add(self, primitive: Optional[CurvePrimitive]) -> None:
        subpath = self._active()
        if primitive is None:
            return
        subpath.primitives.append(primitive)
        self.position = primitive.end_point()

    def line_to(self, point: Point) -> None:
        self._active()
        self.add(LineSegment(self.position, point))

    def cubic_to(self, c1: Point, c2: Point, end: Point) -> None:
        self._active()
        self.add(CubicBezier(self.position, c1, c2, end))
        self.last_cubic_control = c2

    def quad_to(self, control: Point, end: Point) -> None:
        self._active()
        self.add(CubicBezier.from_quadratic(self.position, control, end))
        self.last_quad_control = control

    def arc_to(self, rx: float, ry: float, rotation: float, large: bool, sweep: bool, end: Point) -> None:
        self._active()
        self.add(EllipticalArc.from_svg(self.position, end, rx, ry, rotation, large, sweep))
        # An omitted arc (coincident end points) still moves the pen
        self.position = end

    def close(self) -> None:
        subpath = self.current
        if subpath is None:
            # 'Z' right after 'Z' (or before any drawing) is a no-op
            return
        if subpath.primitives:
            if self.position != self.subpath_start:
                subpath.primitives.append(LineSegment(self.position, self.subpath_start))
            subpath.closed = True
        self.position = self.subpath_start
        self._finish()

    def reflected(self, control: Optional[Point]) -> Point:
        if control is None:
            return self.position
        return Point(2.0 * self.position.x - control.x, 2.0 * self.position.y - control.y)

    def result(self) -> List[Subpath]:
        self._finish()
        return self.subpaths


def parse_path_data(data: Optional[str]) -> List[Subpath]:
    """
    Parse SVG path data into sub-paths.

    Args:
        data: Value of a 'd' attribute. None or blank yields an empty list.

    Returns:
        One Subpath per drawn sub-path. Sub-paths consisting only of a move-to
        are dropped.

    Raises:
        PathDataError: On any grammar error or non-finite coordinate.
    """
    if data is None or not data.strip():
        return []

    scanner = _Scanner(data)
    builder = _PathBuilder()

    first = scanner.command()
    if first not in "Mm":
        raise PathDataError(f"Path data must begin with a move-to command, found {first!r}.")

    command = first
    try:
        while True:
            _execute(command, scanner, builder)
            if scanner.at_end():
                break
            if scanner.starts_number():
                if command in "Zz":
                    raise PathDataError(f"Unexpected number after close-path at offset {scanner.pos}.")
                # Implicit repetition; a repeated move-to continues as line-to
                if command == "M":
                    command = "L"
                elif command == "m":
                    command = "l"
                continue
            command = scanner.command()
    except GeometryError as e:
        raise PathDataError(f"Invalid geometry in path data: {e}") from e

    return builder.result()


def _execute(command: str, scanner: _Scanner, builder: _PathBuilder) -> None:
    """Run one repetition of a command, consuming its arguments."""
    upper = command.upper()
    relative = command != upper
    origin = builder.position

    def point() -> Point:
        x = scanner.number()
        y = scanner.number()
        if relative:
            return Point(origin.x + x, origin.y + y)
        return Point(x, y)

    if upper != "Z" and not scanner.starts_number():
        raise PathDataError(
            f"Command {command!r} expects {_ARITY[upper]} arguments at offset {scanner.pos}."
        )

    match upper:
        case "M":
            builder.move_to(point())
        case "L":
            builder.line_to(point())
        case "H":
            x = scanner.number()
            builder.line_to(Point(origin.x + x if relative else x, origin.y))
        case "V":
            y = scanner.number()
            builder.line_to(Point(origin.x, origin.y + y if relative else y))
        case "C":
            c1, c2, end = point(), point(), point()
            builder.cubic_to(c1, c2, end)
        case "S":
            c1 = builder.reflected(builder.last_cubic_control)
            c2, end = point(), point()
            builder.cubic_to(c1, c2, end)
        case "Q":
            control, end = point(), point()
            builder.quad_to(control, end)
        case "T":
            control = builder.reflected(builder.last_quad_control)
            builder.quad_to(control, point())
        case "A":
            rx = scanner.number()
            ry = scanner.number()
            rotation = scanner.number()
            large = scanner.flag()
            sweep = scanner.flag()
            builder.arc_to(rx, ry, rotation, large, sweep, point())
        case "Z":
            builder.close()

    if upper not in "CS":
        builder.last_cubic_control = None
    if upper not in "QT":
        builder.last_quad_control = None


def path_data_to_paths(data: Optional[str], style: Optional[PathStyle] = None) -> List[Path]:
    """Convenience wrapper: parse and build one Path per sub-path."""
    return [subpath.to_path(style) for subpath in parse_path_data(data)]
