"""
FONT.DAT bitmap font.

FONT.DAT is a single image13h image holding three rows of 13 pixel high
characters (positions are 0-based):

- row 1: line 8, column 7, 33 characters
- row 2: line 32, column 8, 31 characters
- row 3: line 56, column 7, 27 characters

Character widths and x positions are not stored in the file, they are the
tables below. The 91 glyphs are the printable ASCII range from " " to "z".
"""

from __future__ import annotations

import logging
from typing import BinaryIO, List, Optional, Tuple

import numpy as np

from .image13h import Image13h, Rect, Source

logger = logging.getLogger(__name__)

ROWS = 3
CHARACTERS = 91
CHARACTER_HEIGHT = 13
FIRST_CHARACTER = " "
# Blank columns between glyphs when rendering text.
CHARACTER_SPACING = 1

# (x, y) of the first character of each row.
ROW_OFFSETS: Tuple[Tuple[int, int], ...] = ((7, 8), (8, 32), (7, 56))
ROW_CHARACTERS: Tuple[int, ...] = (33, 31, 27)

# Smallest image able to hold every glyph.
MINIMUM_IMAGE_DIMENSIONS = (223, 69)

CHARACTER_WIDTHS: Tuple[int, ...] = (
    # row 1
    4, 2, 4, 6, 6, 6, 6, 6, 4, 4, 6, 6, 2, 4, 2, 6, 6, 5, 6, 6, 6, 6, 6, 6, 6, 6, 2, 2, 8, 6, 8, 6, 7,
    # row 2
    8, 7, 7, 7, 6, 6, 8, 7, 2, 5, 7, 6, 8, 7, 8, 6, 8, 7, 7, 6, 7, 8, 11, 7, 8, 7, 7, 7, 7, 6, 7,
    # row 3
    4, 6, 6, 6, 6, 6, 4, 6, 6, 2, 2, 5, 2, 8, 6, 6, 6, 6, 4, 6, 3, 6, 6, 10, 6, 6, 6,
)

CHARACTER_X_POSITIONS: Tuple[int, ...] = (
    # row 1
    7, 11, 13, 17, 23, 29, 35, 41, 47, 51, 55, 61, 67, 69, 73, 75, 81, 87, 92, 98, 104, 110, 116,
    122, 128, 134, 140, 142, 144, 152, 158, 166, 172,
    # row 2
    8, 16, 23, 30, 37, 43, 49, 57, 64, 66, 71, 78, 84, 92, 99, 107, 113, 121, 128, 135, 141, 148,
    156, 167, 174, 182, 189, 196, 203, 210, 216,
    # row 3
    7, 11, 17, 23, 29, 35, 41, 45, 51, 57, 59, 61, 66, 68, 76, 82, 88, 94, 100, 104, 110, 113, 119,
    125, 135, 141, 147,
)


def character_row(character: int) -> int:
    if not 0 <= character < CHARACTERS:
        raise IndexError(f"character {character} out of range (have {CHARACTERS})")
    first = 0
    for row, count in enumerate(ROW_CHARACTERS):
        if character < first + count:
            return row
        first += count
    raise AssertionError("unreachable")


def character_rect(character: int) -> Rect:
    y = ROW_OFFSETS[character_row(character)][1]
    return Rect(CHARACTER_X_POSITIONS[character], y, CHARACTER_WIDTHS[character], CHARACTER_HEIGHT)


def character_index(ch: str) -> int:
    index = ord(ch) - ord(FIRST_CHARACTER)
    if not 0 <= index < CHARACTERS:
        raise KeyError(f"no glyph for {ch!r}")
    return index


class Fontdat:
    def __init__(self, glyphs: List[Image13h]) -> None:
        if len(glyphs) != CHARACTERS:
            raise ValueError(f"expected {CHARACTERS} glyphs, got {len(glyphs)}")
        for i, glyph in enumerate(glyphs):
            rect = character_rect(i)
            if (glyph.width, glyph.height) != (rect.width, rect.height):
                raise ValueError(f"glyph {i} must be {rect.width}x{rect.height}, got {glyph.width}x{glyph.height}")
        self._glyphs = glyphs

    @classmethod
    def load(cls, source: Source) -> Optional["Fontdat"]:
        """None if the image can't be loaded or is smaller than MINIMUM_IMAGE_DIMENSIONS."""
        image = Image13h.load(source)
        if image is None:
            return None
        min_w, min_h = MINIMUM_IMAGE_DIMENSIONS
        if image.width < min_w or image.height < min_h:
            logger.debug("fontdat: %dx%d image is too small", image.width, image.height)
            return None
        return cls([image.subimage(character_rect(c)) for c in range(CHARACTERS)])

    @classmethod
    def empty(cls) -> "Fontdat":
        """All glyphs filled with color 0."""
        glyphs = []
        for character in range(CHARACTERS):
            rect = character_rect(character)
            glyphs.append(Image13h.empty(rect.width, rect.height))
        return cls(glyphs)

    def to_image(self) -> Image13h:
        image = Image13h.empty(*MINIMUM_IMAGE_DIMENSIONS)
        for character, glyph in enumerate(self._glyphs):
            image.blit(character_rect(character), glyph)
        return image

    def save(self, writer: BinaryIO) -> None:
        self.to_image().save(writer)

    def glyph(self, character: int) -> Image13h:
        if not 0 <= character < len(self._glyphs):
            raise IndexError(f"character {character} out of range (have {len(self._glyphs)})")
        return self._glyphs[character]

    def glyphs(self) -> List[Image13h]:
        return list(self._glyphs)

    def text_width(self, text: str) -> int:
        if not text:
            return 0
        widths = [CHARACTER_WIDTHS[character_index(ch)] for ch in text]
        return sum(widths) + CHARACTER_SPACING * (len(widths) - 1)

    def render_text(self, text: str, color: Optional[int] = None, background: int = 0) -> Image13h:
        """Draw `text` on a single line over `background`.

        Glyph pixels equal to `background` are transparent. With `color` set,
        every other glyph pixel is drawn in that color instead of its own.
        """
        image = Image13h.filled(max(1, self.text_width(text)), CHARACTER_HEIGHT, background)
        x = 0
        for ch in text:
            glyph = self._glyphs[character_index(ch)]
            if color is not None:
                ink = np.where(glyph.pixels != background, color, background).astype(np.uint8)
                glyph = Image13h(glyph.width, glyph.height, ink.tobytes())
            image.blit_with_transparency(Rect(x, 0, glyph.width, glyph.height), glyph, background)
            x += glyph.width + CHARACTER_SPACING
        return image

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Fontdat):
            return NotImplemented
        return self._glyphs == other._glyphs
