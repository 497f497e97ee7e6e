import io

import pytest

from poltools.fontdat import (
    CHARACTER_HEIGHT,
    CHARACTER_WIDTHS,
    CHARACTERS,
    MINIMUM_IMAGE_DIMENSIONS,
    Fontdat,
    character_index,
    character_rect,
)
from poltools.image13h import Image13h


def dummy_font_dat():
    # Every character filled with color equal to the character's index + 100.
    image = Image13h.empty(*MINIMUM_IMAGE_DIMENSIONS)
    for i in range(CHARACTERS):
        rect = character_rect(i)
        image.blit(rect, Image13h.filled(rect.width, rect.height, 100 + i))
    return image.to_bytes()


def test_loading_and_saving_works():
    data = dummy_font_dat()
    fontdat = Fontdat.load(data)
    expected = Fontdat.empty()
    for i in range(CHARACTERS):
        expected.glyph(i).fill(100 + i)
    assert fontdat == expected

    buf = io.BytesIO()
    fontdat.save(buf)
    assert buf.getvalue() == data
    assert Fontdat.load(buf.getvalue()) == fontdat


def test_empty_font_has_decoded_dimensions():
    fontdat = Fontdat.empty()
    for i in range(CHARACTERS):
        glyph = fontdat.glyph(i)
        assert (glyph.width, glyph.height) == (CHARACTER_WIDTHS[i], CHARACTER_HEIGHT)
        assert glyph.data == bytes(glyph.width * glyph.height)


def test_too_small_image_is_rejected():
    w, h = MINIMUM_IMAGE_DIMENSIONS
    assert Fontdat.load(Image13h.empty(w - 1, h).to_bytes()) is None
    assert Fontdat.load(Image13h.empty(w + 10, h - 1).to_bytes()) is None
    assert Fontdat.load(b"not an image") is None
    assert Fontdat.load(Image13h.empty(w + 1, h + 1).to_bytes()) is not None


def test_character_rects_stay_inside_minimum_image():
    w, h = MINIMUM_IMAGE_DIMENSIONS
    rects = [character_rect(i) for i in range(CHARACTERS)]
    assert all(r.within(w, h) for r in rects)
    assert max(r.right for r in rects) == w
    assert max(r.bottom for r in rects) == h
    with pytest.raises(IndexError):
        character_rect(CHARACTERS)


def test_character_mapping():
    assert character_index(" ") == 0
    assert character_index("A") == 33
    assert CHARACTER_WIDTHS[character_index("W")] == 11
    assert CHARACTER_WIDTHS[character_index("m")] == 8
    assert character_index("z") == CHARACTERS - 1
    with pytest.raises(KeyError):
        character_index("{")


def test_render_text():
    data = dummy_font_dat()
    fontdat = Fontdat.load(data)
    assert fontdat.text_width("") == 0
    assert fontdat.text_width("AB") == 8 + 1 + 7
    image = fontdat.render_text("AB")
    assert (image.width, image.height) == (16, CHARACTER_HEIGHT)
    assert image.line(0) == bytes([133] * 8 + [0] + [134] * 7)


def test_render_text_in_color():
    fontdat = Fontdat.load(dummy_font_dat())
    image = fontdat.render_text("AB", color=5)
    assert image.line(0) == bytes([5] * 8 + [0] + [5] * 7)
    image = fontdat.render_text("A", background=133)
    assert image.line(0) == bytes([133] * 8)


def test_glyph_index_out_of_range():
    fontdat = Fontdat.empty()
    assert fontdat.glyph(CHARACTERS - 1) == Image13h.empty(character_rect(CHARACTERS - 1).width, CHARACTER_HEIGHT)
    with pytest.raises(IndexError):
        fontdat.glyph(-1)
    with pytest.raises(IndexError):
        fontdat.glyph(CHARACTERS)
