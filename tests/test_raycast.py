import struct

import pytest

from cubraycast.player import camera_for
from cubraycast.raycast import (
    WALL_SIZE,
    WIN_HEIGHT,
    WIN_WIDTH,
    Face,
    FrameBuffer,
    cast_ray,
    draw_column,
    render_walls,
    texture_array,
    texture_column,
)
from cubraycast.xpm import XpmImage

ROOM = ["11111", "10001", "10001", "10001", "11111"]


def solid(color):
    return [color] * (WALL_SIZE * WALL_SIZE)


@pytest.mark.parametrize(
    "direction, face, slot",
    [("N", Face.SO, 2), ("S", Face.NO, 0), ("E", Face.EA, 3), ("W", Face.WE, 1)],
)
def test_face_slots_for_each_direction(direction, face, slot):
    hit = cast_ray(camera_for(2, 2, direction), ROOM, WIN_WIDTH // 2)
    assert hit.face == face
    assert int(hit.face) == slot


def test_cast_ray_center_facing_north():
    hit = cast_ray(camera_for(2, 2, "N"), ROOM, WIN_WIDTH // 2)
    assert hit.side == 1
    assert hit.face == Face.SO
    assert (hit.map_x, hit.map_y) == (2, 0)
    assert hit.perp_wall_dist == pytest.approx(1.5)


def test_cast_ray_facing_east_hits_east_face():
    hit = cast_ray(camera_for(2, 2, "E"), ROOM, WIN_WIDTH // 2)
    assert hit.side == 0
    assert hit.face == Face.EA
    assert hit.map_x == 4


@pytest.mark.parametrize("x", [0, 100, 450, 899])
def test_cast_ray_draw_range_within_window(x):
    hit = cast_ray(camera_for(1, 1, "S"), ROOM, x)
    assert 0 <= hit.draw_start <= hit.draw_end < WIN_HEIGHT
    assert 0 <= texture_column(hit) < WALL_SIZE
    assert ROOM[hit.map_y][hit.map_x] == "1"


def test_frame_put_get_round_trip():
    frame = FrameBuffer(4, 3)
    frame.put_pixel(3, 2, 0x123456)
    assert frame.get_pixel(3, 2) == 0x123456
    assert frame.get_pixel(0, 0) == 0


def test_frame_out_of_range():
    frame = FrameBuffer(4, 3)
    with pytest.raises(IndexError):
        frame.put_pixel(4, 0, 1)
    with pytest.raises(IndexError):
        frame.get_pixel(0, -1)


def test_fill_background():
    frame = FrameBuffer(3, 4)
    frame.fill_background(0xAA, 0xBB)
    assert frame.get_pixel(2, 1) == 0xAA
    assert frame.get_pixel(0, 2) == 0xBB
    assert frame.get_pixel(1, 3) == 0xBB


def test_to_bytes_little_endian():
    frame = FrameBuffer(2, 1)
    frame.put_pixel(0, 0, 0x00112233)
    data = frame.to_bytes()
    assert len(data) == 8
    assert struct.unpack("<I", data[:4])[0] == 0x00112233


def test_draw_line_horizontal():
    frame = FrameBuffer(10, 2)
    frame.draw_line(0, 0, 5, 0, 7)
    assert all(frame.get_pixel(x, 0) == 7 for x in range(5))
    assert frame.get_pixel(5, 0) == 0
    assert frame.get_pixel(0, 1) == 0


def test_draw_line_zero_length_draws_nothing():
    frame = FrameBuffer(3, 3)
    frame.draw_line(1, 1, 1, 1, 9)
    assert set(frame.pixels) == {0}


def test_draw_column_uniform_texture():
    frame = FrameBuffer()
    hit = cast_ray(camera_for(2, 2, "N"), ROOM, 10)
    draw_column(frame, hit, solid(0x00FF00), 10)
    column = [frame.get_pixel(10, y) for y in range(WIN_HEIGHT)]
    assert set(column[hit.draw_start:hit.draw_end]) == {0x00FF00}
    assert set(column[:hit.draw_start] + column[hit.draw_end:]) == {0}


def test_texture_array_copies_square_image():
    pixels = tuple(range(WALL_SIZE * WALL_SIZE))
    table = texture_array(XpmImage(WALL_SIZE, WALL_SIZE, pixels))
    assert table == list(pixels)


def test_texture_array_pads_small_image():
    table = texture_array(XpmImage(2, 2, (1, 2, 3, 4)))
    assert len(table) == WALL_SIZE * WALL_SIZE
    assert table[:4] == [1, 2, 3, 4]
    assert set(table[4:]) == {0}


def test_render_walls_uses_face_textures():
    frame = FrameBuffer()
    textures = [solid(10), solid(20), solid(30), solid(40)]
    camera = camera_for(2, 2, "N")
    render_walls(frame, camera, ROOM, textures)
    hit = cast_ray(camera, ROOM, WIN_WIDTH // 2)
    assert frame.get_pixel(WIN_WIDTH // 2, WIN_HEIGHT // 2) == textures[hit.face][0]
    assert hit.face == Face.SO