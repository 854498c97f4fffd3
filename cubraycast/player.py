"""Player camera, movement, rotation and keyboard state."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

__all__ = [
    "MOVE_SPEED",
    "ROTATION_SPEED",
    "Key",
    "KeyState",
    "Camera",
    "camera_for",
    "apply_keys",
]

PI = 3.1415926535
MOVE_SPEED = 2.0
"""Movement speed, in map cells per second."""
ROTATION_SPEED = 30 * PI / 180
"""Rotation speed, in radians per second."""

# Direction and camera plane for each starting orientation.
_ORIENTATIONS = {
    "N": (0.0, -1.0, 0.6, 0.0),
    "E": (1.0, 0.0, 0.0, 0.6),
    "S": (0.0, 1.0, -0.6, 0.0),
    "W": (-1.0, 0.0, 0.0, -0.6),
}


class Key(Enum):
    """Keys the game reacts to."""

    ESC = "esc"
    W = "w"
    A = "a"
    S = "s"
    D = "d"
    LEFT = "left"
    RIGHT = "right"


@dataclass
class KeyState:
    """The set of keys currently held down."""

    pressed: set[Key] = field(default_factory=set)

    def press(self, key: Key) -> None:
        """Mark ``key`` as held down."""
        self.pressed.add(key)

    def release(self, key: Key) -> None:
        """Mark ``key`` as released."""
        self.pressed.discard(key)

    def __contains__(self, key: object) -> bool:
        return key in self.pressed


def _blocked(grid: Sequence[str], x: int, y: int) -> bool:
    if y < 0 or y >= len(grid) or x < 0 or x >= len(grid[y]):
        return True
    return grid[y][x] == "1"


@dataclass
class Camera:
    """Position, view direction and camera plane of the player."""

    pos_x: float
    pos_y: float
    dir_x: float
    dir_y: float
    plane_x: float
    plane_y: float
    move_speed: float = 0.0
    rot_ang: float = 0.0

    def _step(self, grid: Sequence[str], dx: float, dy: float) -> None:
        if not _blocked(grid, int(self.pos_x + dx), int(self.pos_y)):
            self.pos_x += dx
        if not _blocked(grid, int(self.pos_x), int(self.pos_y + dy)):
            self.pos_y += dy

    def move_up(self, grid: Sequence[str]) -> None:
        """Move forward along the view direction unless a wall is in the way."""
        speed = self.move_speed
        self._step(grid, self.dir_x * speed, self.dir_y * speed)

    def move_down(self, grid: Sequence[str]) -> None:
        """Move backward along the view direction unless a wall is in the way."""
        speed = self.move_speed
        self._step(grid, -self.dir_x * speed, -self.dir_y * speed)

    def move_right(self, grid: Sequence[str]) -> None:
        """Strafe to the right unless a wall is in the way."""
        speed = self.move_speed
        self._step(grid, -self.dir_y * speed, self.dir_x * speed)

    def move_left(self, grid: Sequence[str]) -> None:
        """Strafe to the left unless a wall is in the way."""
        speed = self.move_speed
        self._step(grid, self.dir_y * speed, -self.dir_x * speed)

    def _rotate(self, angle: float) -> None:
        cos_a, sin_a = math.cos(angle), math.sin(angle)
        self.dir_x, self.dir_y = (
            self.dir_x * cos_a - self.dir_y * sin_a,
            self.dir_y * cos_a + self.dir_x * sin_a,
        )
        self.plane_x, self.plane_y = (
            self.plane_x * cos_a - self.plane_y * sin_a,
            self.plane_y * cos_a + self.plane_x * sin_a,
        )

    def rotate_left(self) -> None:
        """Turn counter-clockwise on screen by ``rot_ang``."""
        self._rotate(-self.rot_ang)

    def rotate_right(self) -> None:
        """Turn clockwise on screen by ``rot_ang``."""
        self._rotate(self.rot_ang)


def camera_for(x: int, y: int, direction: str) -> Camera:
    """Camera centred in cell ``(x, y)`` facing ``N``, ``E``, ``S`` or ``W``."""
    try:
        dir_x, dir_y, plane_x, plane_y = _ORIENTATIONS[direction]
    except KeyError:
        raise ValueError(f"unknown player direction: {direction!r}") from None
    return Camera(x + 0.5, y + 0.5, dir_x, dir_y, plane_x, plane_y)


def apply_keys(keys: KeyState, camera: Camera, grid: Sequence[str]) -> bool:
    """Move and turn the camera for the held keys.

    Returns False, leaving the camera alone, when escape is held.
    """
    if Key.ESC in keys:
        return False
    actions = (
        (Key.W, camera.move_up),
        (Key.D, camera.move_right),
        (Key.S, camera.move_down),
        (Key.A, camera.move_left),
    )
    for key, action in actions:
        if key in keys:
            action(grid)
    if Key.LEFT in keys:
        camera.rotate_left()
    if Key.RIGHT in keys:
        camera.rotate_right()
    return True