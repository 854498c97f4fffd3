"""Reading of XPM pixmaps into plain grids of 0xRRGGBB pixels."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from cubraycast.colornames import NONE_COLOR, lookup_color

__all__ = [
    "TRANSPARENT",
    "XpmError",
    "XpmImage",
    "split_words",
    "strip_comments",
    "text_to_rgb",
    "parse_xpm_lines",
    "parse_xpm",
    "load_xpm",
]

TRANSPARENT = 0xFF000000
"""Pixel value stored for the colour ``none``."""

_WORD_SEPARATOR = re.compile(r"[ \t]+")
_QUOTED = re.compile(r'"([^"]*)"')
_DECIMAL = re.compile(r"\s*([+-]?\d+)")
_HEXADECIMAL = re.compile(r"\s*([+-]?)(?:0[xX](?=[0-9a-fA-F]))?([0-9a-fA-F]+)")
_MAX_NAME = 63


class XpmError(ValueError):
    """Raised when XPM data cannot be read or parsed."""


@dataclass(frozen=True)
class XpmImage:
    """A decoded pixmap: pixels are stored row by row."""

    width: int
    height: int
    pixels: tuple[int, ...]

    def pixel(self, x: int, y: int) -> int:
        """Return the colour at column ``x`` of row ``y``."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height} image")
        return self.pixels[y * self.width + x]


def split_words(text: str) -> list[str]:
    """Split ``text`` into words separated by spaces and tabs."""
    return [word for word in _WORD_SEPARATOR.split(text) if word]


def _blank_comments(text: str, opener: str, closer: str) -> str:
    parts: list[str] = []
    quoted = False
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if char == '"':
            quoted = not quoted
        elif not quoted and text.startswith(opener, index):
            end = text.find(closer, index + len(opener))
            stop = length if end == -1 else end + len(closer)
            parts.append(" " * (stop - index))
            index = stop
            continue
        parts.append(char)
        index += 1
    return "".join(parts)


def strip_comments(text: str) -> str:
    """Replace ``/* */`` and ``//`` comments outside quotes with spaces.

    The length of the text is kept, so positions stay the same.
    """
    return _blank_comments(_blank_comments(text, "/*", "*/"), "//", "\n")


def text_to_rgb(name: str, end: str | None = None) -> int:
    """Turn a colour specification into a 0xRRGGBB value.

    ``#rrggbb`` is read as hexadecimal; otherwise ``name`` (joined with
    ``end`` when given) is looked up among the colour names. Unknown
    names give 0.
    """
    if name.startswith("#"):
        match = _HEXADECIMAL.match(name, 1)
        if match is None:
            return 0
        value = int(match.group(2), 16)
        return -value if match.group(1) == "-" else value
    if end is not None:
        name = f"{name} {end}"[:_MAX_NAME]
    try:
        return lookup_color(name)
    except KeyError:
        return 0


def _atoi(word: str) -> int:
    match = _DECIMAL.match(word)
    return int(match.group(1)) if match else 0


def parse_xpm_lines(lines: Iterable[str]) -> XpmImage:
    """Decode the quoted strings of an XPM: header, colours, then pixel rows."""
    source = iter(lines)

    def next_line(what: str) -> str:
        try:
            return next(source)
        except StopIteration:
            raise XpmError(f"missing {what}") from None

    header = split_words(next_line("header"))
    if len(header) < 4:
        raise XpmError("header needs width, height, colour count and chars per pixel")
    width, height, ncolors, cpp = (_atoi(word) for word in header[:4])
    if min(width, height, ncolors, cpp) <= 0:
        raise XpmError("header values must be positive numbers")

    # Short keys go into a direct table where later entries replace earlier
    # ones; longer keys are searched and the first definition wins.
    direct = cpp <= 2
    palette: dict[str, int] = {}
    for _ in range(ncolors):
        line = next_line("colour definition")
        words = split_words(line[cpp:])
        try:
            position = words.index("c") + 1
        except ValueError:
            raise XpmError(f"colour definition without 'c' key: {line!r}") from None
        if position >= len(words):
            raise XpmError(f"colour definition without a colour: {line!r}")
        following = words[position + 1] if position + 1 < len(words) else None
        color = text_to_rgb(words[position], following)
        key = line[:cpp]
        if direct:
            palette[key] = color
        else:
            palette.setdefault(key, color)

    pixels: list[int] = []
    for _ in range(height):
        row = next_line("pixel row")
        for start in range(0, width * cpp, cpp):
            color = palette.get(row[start:start + cpp], 0)
            pixels.append(TRANSPARENT if color == NONE_COLOR else color & 0xFFFFFFFF)
    return XpmImage(width, height, tuple(pixels))


def parse_xpm(text: str) -> XpmImage:
    """Decode the text of an XPM file."""
    return parse_xpm_lines(_QUOTED.findall(strip_comments(text)))


def load_xpm(path: str | os.PathLike[str]) -> XpmImage:
    """Read and decode an XPM file."""
    try:
        text = Path(path).read_text(encoding="latin-1")
    except OSError as exc:
        raise XpmError(f"cannot read {os.fspath(path)!r}: {exc.strerror}") from exc
    return parse_xpm(text)