import pytest

from cubraycast.xpm import (
    TRANSPARENT,
    XpmError,
    load_xpm,
    parse_xpm,
    parse_xpm_lines,
    split_words,
    strip_comments,
    text_to_rgb,
)


def test_split_words_spaces_and_tabs():
    assert split_words("  a\tb   c ") == ["a", "b", "c"]


def test_split_words_keeps_newlines_inside_words():
    assert split_words("a\nb c") == ["a\nb", "c"]


def test_strip_comments_block_keeps_length():
    text = '/* header */"1 1 1 1"'
    out = strip_comments(text)
    assert len(out) == len(text)
    assert "header" not in out
    assert out.endswith('"1 1 1 1"')


def test_strip_comments_ignores_quoted_markers():
    text = '"a /* b */ c"'
    assert strip_comments(text) == text


def test_strip_comments_line_comment():
    out = strip_comments('// note\n"x"')
    assert "note" not in out
    assert out.strip() == '"x"'


def test_text_to_rgb_hex_and_names():
    assert text_to_rgb("#FF0000") == 0xFF0000
    assert text_to_rgb("red") == 0xFF0000
    assert text_to_rgb("dark", "grey") == 0xA9A9A9
    assert text_to_rgb("None") == -1
    assert text_to_rgb("nosuchcolour") == 0


def test_parse_lines_single_char_keys():
    image = parse_xpm_lines(["2 2 2 1", ". c #FF0000", "# c blue", ".#", "#."])
    assert (image.width, image.height) == (2, 2)
    assert image.pixel(0, 0) == 0xFF0000
    assert image.pixel(1, 0) == text_to_rgb("blue")
    assert image.pixel(0, 1) == image.pixel(1, 0)
    assert image.pixel(1, 1) == image.pixel(0, 0)


def test_parse_lines_transparent_colour():
    image = parse_xpm_lines(["1 1 1 1", "a c None", "a"])
    assert image.pixel(0, 0) == TRANSPARENT == 0xFF000000


def test_short_keys_last_definition_wins():
    image = parse_xpm_lines(["1 1 2 1", "a c red", "a c blue", "a"])
    assert image.pixel(0, 0) == text_to_rgb("blue")


def test_long_keys_first_definition_wins():
    image = parse_xpm_lines(["1 1 2 3", "aaa c red", "aaa c blue", "aaa"])
    assert image.pixel(0, 0) == text_to_rgb("red")


def test_unknown_key_gives_black():
    image = parse_xpm_lines(["2 1 1 1", "a c red", "a"])
    assert image.pixel(1, 0) == 0


@pytest.mark.parametrize(
    "lines",
    [
        ["0 1 1 1", "a c red", "a"],
        ["1 1 1"],
        ["1 1 1 1", "a x red", "a"],
        ["1 1 1 1", "a c", "a"],
        ["1 2 1 1", "a c red", "a"],
        [],
    ],
)
def test_parse_lines_errors(lines):
    with pytest.raises(XpmError):
        parse_xpm_lines(lines)


XPM_TEXT = """/* XPM */
static char *tex[] = {
/* columns rows colors chars-per-pixel */
"2 1 2 1",
"a c #00FF00",
// transparent
"b c None",
"ab"
};
"""


def test_parse_xpm_text():
    image = parse_xpm(XPM_TEXT)
    assert image.pixels == (0x00FF00, TRANSPARENT)


def test_load_xpm_round_trip(tmp_path):
    path = tmp_path / "tex.xpm"
    path.write_text(XPM_TEXT)
    assert load_xpm(path) == parse_xpm(XPM_TEXT)


def test_load_xpm_missing_file(tmp_path):
    with pytest.raises(XpmError):
        load_xpm(tmp_path / "absent.xpm")


def test_pixel_out_of_range():
    image = parse_xpm(XPM_TEXT)
    with pytest.raises(IndexError):
        image.pixel(2, 0)