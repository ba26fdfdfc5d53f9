from PIL import Image

from petmood.compositor import (
    compose,
    draw_text_inside,
    fit_font_size,
    load_font,
    right_column_width,
    wrap_text,
)


def _photo(width=200, height=200, color=(200, 30, 30)):
    return Image.new("RGB", (width, height), color)


def test_layout_without_captions_is_photo_plus_padding():
    base = _photo()
    result = compose(base, None, None)

    assert result.size == (216, 200)
    assert result.crop((0, 0, 200, 200)).tobytes() == base.convert("RGBA").tobytes()
    alpha = result.crop((200, 0, 216, 200)).getchannel("A")
    assert alpha.getextrema() == (0, 0)


def test_empty_captions_draw_no_backdrops():
    base = _photo()
    result = compose(base, "", "", draw_user_text=True)

    assert result.size == (200 + 16 + int(right_column_width(200)), 200)
    assert result.crop((0, 0, 200, 200)).tobytes() == base.convert("RGBA").tobytes()
    assert result.crop((200, 0, result.width, 200)).getchannel("A").getextrema() == (0, 0)


def test_short_photo_is_scaled_to_min_height():
    result = compose(_photo(100, 50), None, None)
    assert result.size == (320 + 16, 160)


def test_assistant_caption_is_deterministic():
    base = _photo(400, 300, (255, 255, 255))
    first = compose(base, "Good pace, keep it up, meow", None)
    second = compose(base, "Good pace, keep it up, meow", None)
    assert first.tobytes() == second.tobytes()


def test_assistant_backdrop_darkens_bottom_left():
    base = _photo(400, 300, (255, 255, 255))
    result = compose(base, "Hello, meow", None)

    r, g, b, a = result.getpixel((20, 296))
    assert r < 200 and g < 200 and b < 200
    assert result.getpixel((20, 10)) == (255, 255, 255, 255)


def test_user_caption_sits_in_right_column():
    base = _photo(400, 300)
    result = compose(base, None, "Ate breakfast", draw_user_text=True)

    right = int(right_column_width(400))
    assert result.size == (400 + 16 + right, 300)
    box_x = 400 + 16
    max_width = right - 2 * 16
    assert result.getpixel((box_x + max_width + 4, 16 + 4)) == (255, 255, 255, 255)
    assert result.getpixel((box_x + 4, 290)) == (0, 0, 0, 0)


def test_user_caption_ignored_unless_requested():
    base = _photo()
    assert compose(base, None, "hello").size == (216, 200)


def test_zero_size_image_short_circuits():
    empty = Image.new("RGB", (0, 0))
    assert compose(empty, "hi", "there", draw_user_text=True).size == (0, 0)


def test_wrap_text_respects_width():
    font = load_font(16)
    lines = wrap_text("the cat sat on the warm windowsill all afternoon", font, 120)
    assert len(lines) > 1
    assert all(font.getlength(line) <= 120 for line in lines)


def test_wrap_text_breaks_text_without_spaces():
    font = load_font(16)
    word = "meow" * 12
    lines = wrap_text(word, font, 60)
    assert len(lines) > 1
    assert "".join(lines) == word


def test_fit_font_size_shrinks_long_text():
    short = fit_font_size("Hi", 400)
    long = fit_font_size("A very long caption that will not fit at the start size", 400)
    assert short == 32
    assert 8 <= long < short


def test_draw_text_inside_keeps_size():
    base = _photo(300, 200)
    result = draw_text_inside(base, "Tama 2026-10-17")
    assert result.size == base.size
    assert result.tobytes() != base.convert("RGBA").tobytes()


def test_blank_captions_draw_no_backdrops():
    base = _photo()
    assert compose(base, "   ", None).tobytes() == compose(base, None, None).tobytes()
    padded = compose(base, "\n ", " \t", draw_user_text=True)
    assert padded.tobytes() == compose(base, "", "", draw_user_text=True).tobytes()
