from pathlib import Path

import pytest

from cubraycast.scene import (
    Elements,
    SceneError,
    check_extension,
    check_identifiers,
    check_map,
    convert_color,
    is_enclosed,
    line_length,
    parse_identifier,
    parse_scene,
    parse_scene_text,
    validate_color,
)

SCENE = """NO ./north.xpm
SO ./south.xpm
WE ./west.xpm
EA ./east.xpm

F 220,100,0
C 225,30,0

111111
100001
10N001
111111
"""

CLOSED = ["111111", "100001", "10N001", "111111"]


@pytest.fixture
def textures(tmp_path):
    for name in ("north", "south", "west", "east"):
        (tmp_path / f"{name}.xpm").write_text("")
    return tmp_path


def test_check_extension():
    assert check_extension("map.cub")
    assert check_extension("maps/level.cub")
    assert not check_extension("map.cu")
    assert not check_extension("map")
    assert not check_extension("./map.cub")
    assert not check_extension("a.b.cub")


def test_line_length():
    assert line_length("abc\ndef") == 3
    assert line_length("abcd") == 4


@pytest.mark.parametrize("color", ["220,100,0", " 1, 2 ,3", "0,0,255"])
def test_validate_color_accepts(color):
    assert validate_color(color) is True


@pytest.mark.parametrize("color", [None, "", "256,0,0", "1,2", "a,1,2", "1,2,3,4", "-1,0,0"])
def test_validate_color_rejects(color):
    assert validate_color(color) is False


def test_convert_color():
    assert convert_color("255,255,255") == 0xFFFFFF
    assert convert_color("0,0,0") == 0
    assert convert_color("16,32,48") == 0x102030


def test_parse_identifier_texture():
    elements = Elements()
    assert parse_identifier(elements, "NO ./n.xpm\n") is True
    assert elements.north == "./n.xpm"


def test_parse_identifier_color_keeps_leading_space():
    elements = Elements()
    assert parse_identifier(elements, "F 220,100,0\n") is True
    assert elements.floor == " 220,100,0"
    assert validate_color(elements.floor)


def test_parse_identifier_no_identifier():
    elements = Elements()
    assert parse_identifier(elements, "1111\n") is False
    assert elements == Elements()


@pytest.mark.parametrize("line", ["NO a b\n", "F 1,2\n", "SO ./NORTH.xpm\n"])
def test_parse_identifier_malformed(line):
    with pytest.raises(SceneError):
        parse_identifier(Elements(), line)


def _elements(base: Path) -> Elements:
    return Elements(
        north=str(base / "north.xpm"),
        south=str(base / "south.xpm"),
        west=str(base / "west.xpm"),
        east=str(base / "east.xpm"),
        floor="1,2,3",
        ceiling="4,5,6",
    )


def test_check_identifiers(textures):
    assert check_identifiers(_elements(textures)) is True


def test_check_identifiers_missing_texture(textures):
    elements = _elements(textures)
    elements.east = str(textures / "absent.xpm")
    assert check_identifiers(elements) is False


def test_check_identifiers_bad_color(textures):
    elements = _elements(textures)
    elements.ceiling = "300,0,0"
    assert check_identifiers(elements) is False


def test_is_enclosed():
    rows = ["1111", "1001", "1111"]
    assert is_enclosed(rows, 1, 1) is True
    assert is_enclosed(["1111", "100", "1111"], 1, 1) is False
    assert is_enclosed(["1111", "10 1", "1111"], 1, 1) is False


def test_check_map_valid():
    game_map = check_map(CLOSED)
    assert (game_map.player_x, game_map.player_y, game_map.player_dir) == (2, 2, "N")
    assert game_map.rows[2] == "100001"
    assert (game_map.width, game_map.height) == (6, 4)


def test_check_map_accepts_newline_rows():
    assert check_map([row + "\n" for row in CLOSED]) == check_map(CLOSED)


@pytest.mark.parametrize(
    "rows",
    [
        ["1111", "1NS1", "1111"],
        ["1111", "1001", "1111"],
        ["1111", "1N21", "1111"],
        ["1111", "1N01", "", "1111"],
        ["1111", "1N0", "1111"],
        [],
    ],
)
def test_check_map_errors(rows):
    with pytest.raises(SceneError):
        check_map(rows)


def test_parse_scene_text(textures):
    scene = parse_scene_text(SCENE, textures)
    assert Path(scene.elements.north) == textures / "north.xpm"
    assert scene.floor == convert_color("220,100,0")
    assert scene.ceiling == convert_color("225,30,0")
    assert scene.map == check_map(CLOSED)


def test_parse_scene_text_missing_identifier(textures):
    text = SCENE.replace("EA ./east.xpm\n", "")
    with pytest.raises(SceneError):
        parse_scene_text(text, textures)


def test_parse_scene_text_without_map(textures):
    header = SCENE.split("\n\n111111")[0] + "\n"
    with pytest.raises(SceneError):
        parse_scene_text(header, textures)


def test_parse_scene_text_map_before_header(textures):
    text = "111\n" + SCENE
    with pytest.raises(SceneError):
        parse_scene_text(text, textures)


def test_parse_scene_file(textures, monkeypatch):
    (textures / "level.cub").write_text(SCENE)
    monkeypatch.chdir(textures)
    scene = parse_scene("level.cub")
    assert scene == parse_scene_text(SCENE, textures)


def test_parse_scene_bad_extension(textures, monkeypatch):
    (textures / "level.txt").write_text(SCENE)
    monkeypatch.chdir(textures)
    with pytest.raises(SceneError, match="extension"):
        parse_scene("level.txt")


def test_parse_scene_missing_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SceneError, match="Opening file"):
        parse_scene("absent.cub")