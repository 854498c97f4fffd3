"""A grid-based raycasting game driven by .cub scene files and XPM textures."""

__version__ = "0.1.0"

__all__ = ["colornames", "xpm", "scene", "player", "raycast", "game"]