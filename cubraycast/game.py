"""The game loop: frame timing, rendering, input and the command entry point."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Sequence

from cubraycast.player import (
    MOVE_SPEED,
    ROTATION_SPEED,
    Camera,
    Key,
    KeyState,
    apply_keys,
    camera_for,
)
from cubraycast.raycast import WIN_HEIGHT, WIN_WIDTH, Face, FrameBuffer, render_walls, texture_array
from cubraycast.scene import Scene, SceneError, line_length, parse_scene
from cubraycast.xpm import XpmError, load_xpm

__all__ = [
    "GAME_NAME",
    "MAX_SAMPLES",
    "PURPLE_INT",
    "MINIMAP_FLOOR",
    "FrameTimer",
    "Game",
    "draw_minimap",
    "main",
]

GAME_NAME = "|--cub3D--|"
MAX_SAMPLES = 60
PURPLE_INT = 3093151
MINIMAP_FLOOR = 0xFFFFF
_MINIMAP_CELL = 9

_RED = "\033[0;31m"
_YELLOW = "\033[0;33m"
_RESET = "\033[0m"
_USAGE = "Try this: cubraycast [map.cub]"


@dataclass
class FrameTimer:
    """Running average of the last ``MAX_SAMPLES`` tick values."""

    ticks: list[int] = field(default_factory=lambda: [0] * MAX_SAMPLES)
    total: float = 0.0
    index: int = 0

    def tick(self, new_tick: int) -> float:
        """Record ``new_tick`` and return the average over the window."""
        self.total += new_tick - self.ticks[self.index]
        self.ticks[self.index] = new_tick
        self.index = (self.index + 1) % MAX_SAMPLES
        return self.total / MAX_SAMPLES


def _fill_cell(frame: FrameBuffer, left: int, top: int, color: int) -> None:
    for y in range(max(top, 0), min(top + _MINIMAP_CELL, frame.height)):
        for x in range(max(left, 0), min(left + _MINIMAP_CELL, frame.width)):
            frame.put_pixel(x, y, color)


def draw_minimap(frame: FrameBuffer, grid: Sequence[str]) -> None:
    """Draw a small top-down view of ``grid`` in the corner of ``frame``."""
    cell_w = WIN_WIDTH // 100
    cell_h = WIN_HEIGHT // 100
    for y, row in enumerate(grid):
        for x, char in enumerate(row[:line_length(row)]):
            if char == "1":
                _fill_cell(frame, x * cell_w + 1, y * cell_h - 1, PURPLE_INT)
            elif char != " ":
                _fill_cell(frame, x * cell_w + 1, y * cell_h - 1, MINIMAP_FLOOR)


def _game_message(message: str) -> None:
    sys.stdout.write(f"{_YELLOW}{message}{_RESET}")
    sys.stdout.flush()


def _error_message(message: str) -> None:
    sys.stderr.write(f"{_RED}Error\n{message}\n{_RESET}")
    sys.stderr.flush()


class Game:
    """One running scene: camera, held keys, textures and the frame being drawn."""

    def __init__(
        self,
        scene: Scene,
        textures: Sequence[Sequence[int]],
        show_minimap: bool = False,
    ) -> None:
        if len(textures) != len(Face):
            raise ValueError(f"expected {len(Face)} textures, got {len(textures)}")
        self.scene = scene
        self.grid = scene.map.rows
        self.textures = [list(texture) for texture in textures]
        self.camera: Camera = camera_for(
            scene.map.player_x, scene.map.player_y, scene.map.player_dir
        )
        self.keys = KeyState()
        self.frame = FrameBuffer()
        self.timer = FrameTimer()
        self.tick = 0
        self.show_minimap = show_minimap

    @classmethod
    def load(cls, scene: Scene, show_minimap: bool = False) -> Game:
        """Build a game, reading the four wall textures the scene names."""
        paths = {
            Face.NO: scene.elements.north,
            Face.WE: scene.elements.west,
            Face.SO: scene.elements.south,
            Face.EA: scene.elements.east,
        }
        textures = []
        for face in Face:
            path = paths[face]
            if not path:
                raise SceneError("Failed to open image")
            try:
                textures.append(texture_array(load_xpm(path)))
            except XpmError as exc:
                raise SceneError("Failed to open image") from exc
        return cls(scene, textures, show_minimap)

    def render_frame(self) -> bool:
        """Draw one frame and apply held keys; False once escape is held."""
        average = int(self.timer.tick(self.tick))
        elapsed = (self.tick - average) / 1000.0
        self.camera.move_speed = elapsed * MOVE_SPEED
        self.camera.rot_ang = elapsed * ROTATION_SPEED
        self.frame.fill_background(self.scene.ceiling, self.scene.floor)
        render_walls(self.frame, self.camera, self.grid, self.textures)
        if self.show_minimap:
            draw_minimap(self.frame, self.grid)
        keep_running = apply_keys(self.keys, self.camera, self.grid)
        self.tick += 2
        return keep_running

    def handle_key(self, key: Key) -> bool:
        """Act on a single key press at once; False for escape."""
        if key is Key.ESC:
            return False
        actions = {
            Key.W: lambda: self.camera.move_up(self.grid),
            Key.S: lambda: self.camera.move_down(self.grid),
            Key.A: lambda: self.camera.move_left(self.grid),
            Key.D: lambda: self.camera.move_right(self.grid),
            Key.LEFT: self.camera.rotate_left,
            Key.RIGHT: self.camera.rotate_right,
        }
        action = actions.get(key)
        if action is not None:
            action()
        return True

    def run(self) -> None:
        """Open a window and play until it is closed or escape is pressed."""
        import pygame

        pygame.init()
        try:
            size = (self.frame.width, self.frame.height)
            screen = pygame.display.set_mode(size)
            pygame.display.set_caption(GAME_NAME)
            surface = pygame.Surface(size, 0, 32, (0xFF0000, 0x00FF00, 0x0000FF, 0))
            key_map = {
                pygame.K_ESCAPE: Key.ESC,
                pygame.K_w: Key.W,
                pygame.K_a: Key.A,
                pygame.K_s: Key.S,
                pygame.K_d: Key.D,
                pygame.K_LEFT: Key.LEFT,
                pygame.K_RIGHT: Key.RIGHT,
            }
            while True:
                for event in pygame.event.get():
                    if event.type == pygame.QUIT:
                        return
                    if event.type == pygame.KEYDOWN and event.key in key_map:
                        self.keys.press(key_map[event.key])
                    elif event.type == pygame.KEYUP and event.key in key_map:
                        self.keys.release(key_map[event.key])
                if not self.render_frame():
                    _game_message("Quit\n")
                    return
                buffer = surface.get_buffer()
                buffer.write(self.frame.to_bytes(), 0)
                del buffer
                screen.blit(surface, (0, 0))
                pygame.display.flip()
        finally:
            pygame.quit()


def main(argv: Sequence[str] | None = None) -> int:
    """Command entry point: play the scene file named by the only argument."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) < 1:
        _error_message(f"Too few arguments. {_USAGE}")
        return 1
    if len(args) > 1:
        _error_message(f"Too many arguments. {_USAGE}")
        return 1
    try:
        scene = parse_scene(args[0])
        game = Game.load(scene)
    except SceneError as exc:
        _error_message(str(exc))
        return 1
    game.run()
    return 0