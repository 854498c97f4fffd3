"""Parsing and validation of ``.cub`` scene descriptions."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

__all__ = [
    "SceneError",
    "Elements",
    "GameMap",
    "Scene",
    "check_extension",
    "line_length",
    "validate_color",
    "convert_color",
    "parse_identifier",
    "check_identifiers",
    "is_enclosed",
    "check_map",
    "parse_scene_text",
    "parse_scene",
]

MAP_CHARS = frozenset("01NSWE ")
PLAYER_CHARS = frozenset("NSWE")

_IDENTIFIERS = (
    ("NO", "north"),
    ("SO", "south"),
    ("WE", "west"),
    ("EA", "east"),
    ("F", "floor"),
    ("C", "ceiling"),
)
_COLOR_IDS = frozenset({"F", "C"})
_TEXTURE_FIELDS = ("north", "south", "west", "east")
_NUMBER = re.compile(r"\s*([+-]?\d+)")


class SceneError(ValueError):
    """Raised when a scene file is invalid."""


@dataclass
class Elements:
    """Texture paths and colour strings named in the scene header."""

    north: str | None = None
    south: str | None = None
    west: str | None = None
    east: str | None = None
    floor: str | None = None
    ceiling: str | None = None


@dataclass(frozen=True)
class GameMap:
    """A validated grid; the player's cell is stored as floor ``'0'``."""

    rows: tuple[str, ...]
    width: int
    height: int
    player_x: int
    player_y: int
    player_dir: str


@dataclass(frozen=True)
class Scene:
    """Everything a scene file describes."""

    elements: Elements
    map: GameMap
    floor: int
    ceiling: int


def _split(text: str, separator: str) -> list[str]:
    return [part for part in text.split(separator) if part]


def _atoi(text: str) -> int:
    match = _NUMBER.match(text)
    return int(match.group(1)) if match else 0


def check_extension(path: str | os.PathLike[str]) -> bool:
    """Tell whether everything from the first dot of ``path`` is ``.cub``."""
    text = os.fspath(path)
    dot = text.find(".")
    return dot != -1 and text[dot:] == ".cub"


def line_length(line: str) -> int:
    """Length of ``line`` up to its first newline."""
    return len(line.split("\n", 1)[0])


def validate_color(color: str | None) -> bool:
    """Tell whether ``color`` is three comma separated values from 0 to 255."""
    if not color:
        return False
    parts = _split(color, ",")
    if len(parts) != 3:
        return False
    for part in parts:
        if any(char != " " and not char.isdigit() for char in part):
            return False
        if not 0 <= _atoi(part) <= 255:
            return False
    return True


def convert_color(rgb: str) -> int:
    """Turn ``"r,g,b"`` into an integer colour.

    The hexadecimal digits of each channel are joined without padding,
    so channels below 16 take up a single digit.
    """
    digits = "".join(format(_atoi(part) & 0xFFFFFFFF, "x") for part in _split(rgb, ","))
    return int(digits, 16) & 0xFFFFFFFF if digits else 0


def _identifier_value(ident: str, line: str) -> str:
    trimmed = line.strip(" ")
    if ident in _COLOR_IDS:
        if trimmed.split("\n", 1)[0].count(",") != 2:
            raise SceneError(f"Invalid identifiers: {ident} needs three colour values")
        return trimmed.strip(ident).strip("\n")
    words = _split(trimmed, " ")
    if len(words) != 2 or words[0] != ident:
        raise SceneError(f"Invalid identifiers: malformed {ident} line")
    return words[1].strip("\n")


def parse_identifier(elements: Elements, line: str) -> bool:
    """Store the element named on ``line`` into ``elements``.

    Returns False when the line names no element and raises SceneError
    when it names one but is malformed.
    """
    for ident, attribute in _IDENTIFIERS:
        if ident in line:
            setattr(elements, attribute, _identifier_value(ident, line))
            return True
    return False


def _can_open(path: str | None) -> bool:
    if not path:
        return False
    try:
        descriptor = os.open(path, os.O_RDONLY)
    except OSError:
        return False
    os.close(descriptor)
    return True


def check_identifiers(elements: Elements) -> bool:
    """Tell whether all four textures open and both colours are valid."""
    return all(_can_open(getattr(elements, name)) for name in _TEXTURE_FIELDS) and (
        validate_color(elements.floor) and validate_color(elements.ceiling)
    )


def is_enclosed(rows, x: int, y: int) -> bool:
    """Flood fill from ``(x, y)``; False when an open edge is reached."""
    grid = list(rows)
    pending = [(x, y)]
    visited: set[tuple[int, int]] = set()
    while pending:
        px, py = pending.pop()
        if px < 0 or py < 0:
            continue
        if py >= len(grid) or px >= len(grid[py]):
            return False
        cell = grid[py][px]
        if cell in " \n":
            return False
        if cell == "1" or (px, py) in visited:
            continue
        visited.add((px, py))
        pending.extend(((px, py - 1), (px, py + 1), (px - 1, py), (px + 1, py)))
    return True


def check_map(rows) -> GameMap:
    """Validate map rows and return the map with the player located."""
    grid = [row[:line_length(row)] for row in rows]
    for number, row in enumerate(grid):
        if not row.strip(" "):
            raise SceneError(f"Invalid map: empty line {number}")
        unknown = set(row) - MAP_CHARS
        if unknown:
            raise SceneError(f"Invalid map: unexpected characters {''.join(sorted(unknown))!r}")
    ground = sum(row.count("0") + row.count("1") for row in grid)
    if ground == 0:
        raise SceneError("Invalid map: no floor or walls")
    players = [
        (px, py, char)
        for py, row in enumerate(grid)
        for px, char in enumerate(row)
        if char in PLAYER_CHARS
    ]
    if len(players) != 1:
        raise SceneError(f"Invalid map: expected one player, found {len(players)}")
    px, py, direction = players[0]
    grid[py] = grid[py][:px] + "0" + grid[py][px + 1:]
    if not is_enclosed(grid, px, py):
        raise SceneError("Invalid map: not enclosed by walls")
    return GameMap(
        rows=tuple(grid),
        width=max(len(row) for row in grid),
        height=len(grid),
        player_x=px,
        player_y=py,
        player_dir=direction,
    )


def _lines(text: str) -> list[str]:
    parts = text.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def parse_scene_text(text: str, base_dir: str | os.PathLike[str] = ".") -> Scene:
    """Parse scene text; relative texture paths are taken from ``base_dir``."""
    elements = Elements()
    lines = _lines(text)
    map_start = None
    for index, line in enumerate(lines):
        if line == "\n":
            continue
        if not parse_identifier(elements, line):
            map_start = index
            break
    if map_start is None:
        raise SceneError("Invalid identifiers: no map found")
    base = Path(base_dir)
    for name in _TEXTURE_FIELDS:
        value = getattr(elements, name)
        if value:
            setattr(elements, name, str(base / value))
    if not check_identifiers(elements):
        raise SceneError("Invalid identifiers")
    game_map = check_map(lines[map_start:])
    return Scene(
        elements=elements,
        map=game_map,
        floor=convert_color(elements.floor),
        ceiling=convert_color(elements.ceiling),
    )


def parse_scene(path: str | os.PathLike[str]) -> Scene:
    """Read and parse a ``.cub`` file; texture paths are relative to the working directory."""
    if not check_extension(path):
        raise SceneError("Invalid map extension")
    try:
        text = Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise SceneError("Opening file") from exc
    return parse_scene_text(text, Path.cwd())