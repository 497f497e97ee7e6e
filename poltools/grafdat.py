"""
GRAF.DAT sprite atlas.

The file holds 30 image13h images stored at 33 000 byte increments. Their
6-byte headers are invalid and ignored, the dimensions are hardcoded: the
first 15 images are 319x100, the next 15 are 319x99. The rest of each segment
is unused.

The 30 images are really 15 images split in halves: logical image i is image
i on top of image i + 15, except that images 9 and 10 have their second
halves swapped.

Decoded composites are then carved into the sprite catalogue described in
`grafdat_layout`.
"""

from __future__ import annotations

import logging
from typing import BinaryIO, Dict, List, Optional, Sequence, Union

from . import grafdat_layout as layout
from .grafdat_layout import Kind
from .image13h import HEADER_SIZE, Image13h, Rect, Source, as_reader, read_exact

logger = logging.getLogger(__name__)

SEGMENT_SIZE = 33_000
SEGMENTS = 30
FILE_SIZE = SEGMENT_SIZE * SEGMENTS
IMAGES = layout.COMPOSITES
FIRST_HALF_DIMENSIONS = (319, 100)
SECOND_HALF_DIMENSIONS = (319, 99)
IMAGE_DIMENSIONS = (layout.COMPOSITE_WIDTH, layout.COMPOSITE_HEIGHT)

# Lower-half segment for the two images that break the i + IMAGES rule.
SWAPPED_SECOND_HALVES: Dict[int, int] = {9: 25, 10: 24}

_FIRST_HALF_SIZE = FIRST_HALF_DIMENSIONS[0] * FIRST_HALF_DIMENSIONS[1]
_SECOND_HALF_SIZE = SECOND_HALF_DIMENSIONS[0] * SECOND_HALF_DIMENSIONS[1]


def second_half_segment(image: int) -> int:
    return SWAPPED_SECOND_HALVES.get(image, image + IMAGES)


def decode_images(source: Source) -> Optional[List[Image13h]]:
    """Split the raw file into the 15 composite images. None on a short read."""
    data = read_exact(as_reader(source), FILE_SIZE)
    if data is None:
        logger.debug("grafdat: fewer than %d bytes available", FILE_SIZE)
        return None
    w, h = IMAGE_DIMENSIONS
    images = []
    for i in range(IMAGES):
        offset1 = i * SEGMENT_SIZE + HEADER_SIZE
        offset2 = second_half_segment(i) * SEGMENT_SIZE + HEADER_SIZE
        pixels = data[offset1 : offset1 + _FIRST_HALF_SIZE] + data[offset2 : offset2 + _SECOND_HALF_SIZE]
        images.append(Image13h(w, h, pixels))
    return images


def encode_images(images: Sequence[Image13h], writer: BinaryIO) -> None:
    _check_images(images)
    header = bytes(HEADER_SIZE)
    first_filler = bytes(SEGMENT_SIZE - HEADER_SIZE - _FIRST_HALF_SIZE)
    second_filler = bytes(SEGMENT_SIZE - HEADER_SIZE - _SECOND_HALF_SIZE)
    # Inverse of second_half_segment: which image owns each lower-half segment.
    owners = {second_half_segment(i): i for i in range(IMAGES)}

    for image in images:
        writer.write(header)
        writer.write(image.data[:_FIRST_HALF_SIZE])
        writer.write(first_filler)
    for segment in range(IMAGES, SEGMENTS):
        writer.write(header)
        writer.write(images[owners[segment]].data[_FIRST_HALF_SIZE:])
        writer.write(second_filler)


def _check_images(images: Sequence[Image13h]) -> None:
    if len(images) != IMAGES:
        raise ValueError(f"expected {IMAGES} images, got {len(images)}")
    for i, image in enumerate(images):
        if (image.width, image.height) != IMAGE_DIMENSIONS:
            raise ValueError(f"image {i} is {image.width}x{image.height}, expected {IMAGE_DIMENSIONS}")


def split_sprites(images: Sequence[Image13h]) -> List[Image13h]:
    _check_images(images)
    return [images[entry.image].subimage(entry.rect) for entry in layout.SPRITES]


def join_sprites(sprites: Sequence[Image13h]) -> List[Image13h]:
    """Rebuild composites from the catalogue. Pixels no sprite covers are 0."""
    if len(sprites) != layout.SPRITE_COUNT:
        raise ValueError(f"expected {layout.SPRITE_COUNT} sprites, got {len(sprites)}")
    images = [Image13h.empty(*IMAGE_DIMENSIONS) for _ in range(IMAGES)]
    for entry, sprite in zip(layout.SPRITES, sprites):
        images[entry.image].blit(entry.rect, sprite)
    return images


class Grafdat:
    """Decoded composites plus the sprite catalogue carved from them.

    `to_images` returns the composites as decoded, uncovered pixels included.
    `save` rebuilds the composites from the catalogue, so pixels outside every
    sprite rect are written as 0.
    """

    def __init__(self, images: Sequence[Image13h], sprites: List[Image13h]) -> None:
        _check_images(images)
        if len(sprites) != layout.SPRITE_COUNT:
            raise ValueError(f"expected {layout.SPRITE_COUNT} sprites, got {len(sprites)}")
        self._images = [Image13h(image.width, image.height, image.data) for image in images]
        self._sprites = sprites

    @classmethod
    def empty(cls) -> "Grafdat":
        """All composites and sprites filled with color 0."""
        return cls.from_images([Image13h.empty(*IMAGE_DIMENSIONS) for _ in range(IMAGES)])

    @classmethod
    def load(cls, source: Source) -> Optional["Grafdat"]:
        images = decode_images(source)
        if images is None:
            return None
        return cls.from_images(images)

    @classmethod
    def from_images(cls, images: Sequence[Image13h]) -> "Grafdat":
        """Build from 15 composites of IMAGE_DIMENSIONS."""
        return cls(images, split_sprites(images))

    @classmethod
    def from_sprites(cls, sprites: Sequence[Image13h]) -> "Grafdat":
        grafdat = cls.empty()
        if len(sprites) != len(grafdat):
            raise ValueError(f"expected {len(grafdat)} sprites, got {len(sprites)}")
        for i, sprite in enumerate(sprites):
            grafdat.set_sprite(i, sprite)
        return grafdat

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._sprites):
            raise IndexError(f"sprite {index} out of range (have {len(self._sprites)})")

    def set_sprite(self, index: int, sprite: Image13h) -> None:
        self._check_index(index)
        entry = layout.SPRITES[index]
        rect = entry.rect
        if (sprite.width, sprite.height) != (rect.width, rect.height):
            raise ValueError(
                f"sprite {index} must be {rect.width}x{rect.height}, got {sprite.width}x{sprite.height}"
            )
        self._sprites[index] = sprite
        self._images[entry.image].blit(rect, sprite)

    def save(self, writer: BinaryIO) -> None:
        encode_images(join_sprites(self._sprites), writer)

    def to_images(self) -> List[Image13h]:
        return [Image13h(image.width, image.height, image.data) for image in self._images]

    def __len__(self) -> int:
        return len(self._sprites)

    def sprites(self) -> List[Image13h]:
        return list(self._sprites)

    def sprite(self, index: int) -> Image13h:
        self._check_index(index)
        return self._sprites[index]

    def sprite_rect(self, index: int) -> Rect:
        self._check_index(index)
        return layout.SPRITES[index].rect

    def sprites_of(self, kind: Union[Kind, str]) -> List[Image13h]:
        return [self._sprites[i] for i in layout.BY_KIND[Kind(kind)]]

    def sprite_of(self, kind: Union[Kind, str], index: int) -> Image13h:
        return self._sprites[layout.sprite_index(Kind(kind), index)]

    def main_menu(self) -> Image13h:
        return self._sprites[layout.MAIN_MENU]

    def cursor(self, index: int) -> Image13h:
        return self.sprite_of(Kind.CURSOR, index)

    def button(self, index: int) -> Image13h:
        return self.sprite_of(Kind.BUTTON, index)

    def __eq__(self, other: object) -> bool:
        # Catalogue equality; filler outside the sprite rects is not compared.
        if not isinstance(other, Grafdat):
            return NotImplemented
        return self._sprites == other._sprites
