"""Ray casting, texture sampling and the frame buffer."""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Sequence

from cubraycast.player import Camera
from cubraycast.xpm import XpmImage

__all__ = [
    "WIN_WIDTH",
    "WIN_HEIGHT",
    "WALL_SIZE",
    "Face",
    "RayHit",
    "FrameBuffer",
    "cast_ray",
    "texture_column",
    "draw_column",
    "texture_array",
    "render_walls",
]

WIN_WIDTH = 900
WIN_HEIGHT = 610
WALL_SIZE = 64
_FAR = 1e30


class Face(IntEnum):
    """Wall texture slots."""

    NO = 0
    WE = 1
    SO = 2
    EA = 3


@dataclass(frozen=True)
class RayHit:
    """Where one screen column's ray met a wall and how tall to draw it."""

    pos_x: float
    pos_y: float
    ray_dir_x: float
    ray_dir_y: float
    map_x: int
    map_y: int
    side: int
    perp_wall_dist: float
    face: Face
    line_height: int
    draw_start: int
    draw_end: int


@dataclass
class FrameBuffer:
    """A block of 0xRRGGBB pixels stored row by row."""

    width: int = WIN_WIDTH
    height: int = WIN_HEIGHT
    pixels: list[int] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.pixels = [0] * (self.width * self.height)

    def _index(self, x: int, y: int) -> int:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height} frame")
        return y * self.width + x

    def put_pixel(self, x: int, y: int, color: int) -> None:
        """Set the pixel at ``(x, y)``."""
        self.pixels[self._index(x, y)] = color & 0xFFFFFFFF

    def get_pixel(self, x: int, y: int) -> int:
        """Return the pixel at ``(x, y)``."""
        return self.pixels[self._index(x, y)]

    def fill_background(self, ceiling: int, floor: int) -> None:
        """Paint the upper half with ``ceiling`` and the rest with ``floor``."""
        split = (self.height // 2) * self.width
        self.pixels[:split] = [ceiling & 0xFFFFFFFF] * split
        self.pixels[split:] = [floor & 0xFFFFFFFF] * (len(self.pixels) - split)

    def draw_line(self, x1: float, y1: float, x2: float, y2: float, color: int) -> None:
        """Draw a straight line of ``color`` from ``(x1, y1)`` towards ``(x2, y2)``."""
        delta_x = x2 - x1
        delta_y = y2 - y1
        count = int(math.sqrt(delta_x * delta_x + delta_y * delta_y))
        if count == 0:
            return
        delta_x /= count
        delta_y /= count
        px, py = x1, y1
        for _ in range(count):
            self.put_pixel(int(px), int(py), color)
            px += delta_x
            py += delta_y

    def to_bytes(self) -> bytes:
        """Pixels as little-endian 32-bit words (B, G, R, X order)."""
        return struct.pack(f"<{len(self.pixels)}I", *self.pixels)


def _is_wall(grid: Sequence[str], x: int, y: int) -> bool:
    if y < 0 or y >= len(grid) or x < 0 or x >= len(grid[y]):
        return True
    return grid[y][x] == "1"


def cast_ray(camera: Camera, grid: Sequence[str], x: int) -> RayHit:
    """Cast the ray for screen column ``x`` through ``grid`` until it meets a wall."""
    camera_x = 2 * x / WIN_WIDTH - 1
    ray_dir_x = camera.dir_x + camera.plane_x * camera_x
    ray_dir_y = camera.dir_y + camera.plane_y * camera_x
    map_x = int(camera.pos_x)
    map_y = int(camera.pos_y)

    delta_x = _FAR if ray_dir_x == 0 else abs(1 / ray_dir_x)
    delta_y = _FAR if ray_dir_y == 0 else abs(1 / ray_dir_y)

    if ray_dir_x < 0:
        step_x = -1
        dist_x = (camera.pos_x - map_x) * delta_x
    else:
        step_x = 1
        dist_x = (map_x + 1.0 - camera.pos_x) * delta_x
    if ray_dir_y < 0:
        step_y = -1
        dist_y = (camera.pos_y - map_y) * delta_y
    else:
        step_y = 1
        dist_y = (map_y + 1.0 - camera.pos_y) * delta_y

    while True:
        if dist_x < dist_y:
            dist_x += delta_x
            map_x += step_x
            side = 0
        else:
            dist_y += delta_y
            map_y += step_y
            side = 1
        if _is_wall(grid, map_x, map_y):
            break

    if side == 0:
        perp = dist_x - delta_x
        face = Face.EA if ray_dir_x > 0 else Face.WE
    else:
        perp = dist_y - delta_y
        face = Face.NO if ray_dir_y > 0 else Face.SO

    line_height = int(WIN_HEIGHT / perp) if perp > 0 else WIN_HEIGHT
    half = WIN_HEIGHT // 2
    draw_start = max(0, -(line_height // 2) + half)
    draw_end = min(line_height // 2 + half, WIN_HEIGHT - 1)
    return RayHit(
        pos_x=camera.pos_x,
        pos_y=camera.pos_y,
        ray_dir_x=ray_dir_x,
        ray_dir_y=ray_dir_y,
        map_x=map_x,
        map_y=map_y,
        side=side,
        perp_wall_dist=perp,
        face=face,
        line_height=line_height,
        draw_start=draw_start,
        draw_end=draw_end,
    )


def texture_column(hit: RayHit) -> int:
    """Column of the wall texture the ray struck."""
    if hit.side == 0:
        wall_x = hit.pos_y + hit.perp_wall_dist * hit.ray_dir_y
    else:
        wall_x = hit.pos_x + hit.perp_wall_dist * hit.ray_dir_x
    wall_x -= math.floor(wall_x)
    column = int(wall_x * WALL_SIZE)
    if (hit.side == 0 and hit.ray_dir_x > 0) or (hit.side == 1 and hit.ray_dir_y < 0):
        column = WALL_SIZE - column - 1
    return column


def draw_column(frame: FrameBuffer, hit: RayHit, texture: Sequence[int], x: int) -> None:
    """Paint the textured wall slice for ``hit`` into column ``x``."""
    if hit.line_height <= 0:
        return
    column = texture_column(hit)
    step = WALL_SIZE / hit.line_height
    tex_pos = (hit.draw_start - WIN_HEIGHT // 2 + hit.line_height // 2) * step
    for y in range(hit.draw_start, hit.draw_end):
        row = int(tex_pos) & (WALL_SIZE - 1)
        tex_pos += step
        frame.put_pixel(x, y, texture[WALL_SIZE * row + column])


def texture_array(image: XpmImage) -> list[int]:
    """Copy an image into a WALL_SIZE x WALL_SIZE texture table."""
    size = WALL_SIZE * WALL_SIZE
    table = [0] * size
    for y in range(image.height):
        for x in range(image.width):
            index = image.height * y + x
            if index < size and index < len(image.pixels):
                table[index] = image.pixels[index]
    return table


def render_walls(
    frame: FrameBuffer,
    camera: Camera,
    grid: Sequence[str],
    textures: Sequence[Sequence[int]],
) -> None:
    """Cast one ray per column and draw the textured walls."""
    for x in range(frame.width):
        hit = cast_ray(camera, grid, x)
        draw_column(frame, hit, textures[hit.face], x)