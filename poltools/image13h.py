"""
image13h indexed-color images.

The game draws in VGA mode 13h and ships its own "image13h" module, so the
naming is kept here.

On-disk layout (all integers little-endian):

    [ u16 width ] [ u16 height ] [ 01 00 ] [ width * height bytes ]

- width and height must both be non-zero.
- The two marker bytes must be exactly 1, 0. Their meaning is unknown, they
  are checked as a magic value and nothing more.
- The data bytes are palette indices stored row by row.
"""

from __future__ import annotations

import dataclasses
import io
import logging
import struct
from typing import BinaryIO, Optional, Union

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)

HEADER_SIZE = 6
MARKER = b"\x01\x00"
COLORS = 256
SCREEN_WIDTH = 320
SCREEN_HEIGHT = 200
SCREEN_PIXELS = SCREEN_WIDTH * SCREEN_HEIGHT
# Index skipped by blit_with_transparency (cursor overlays).
TRANSPARENT_COLOR = 0

Source = Union[bytes, bytearray, memoryview, BinaryIO]


def read_exact(reader: BinaryIO, size: int) -> Optional[bytes]:
    """Read exactly `size` bytes or return None if the stream ends early."""
    chunks = []
    remaining = size
    while remaining > 0:
        chunk = reader.read(remaining)
        if not chunk:
            return None
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def as_reader(source: Source) -> BinaryIO:
    if isinstance(source, (bytes, bytearray, memoryview)):
        return io.BytesIO(bytes(source))
    return source


def read_all(source: Source) -> bytes:
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)
    return source.read()


@dataclasses.dataclass(frozen=True)
class Rect:
    left: int
    top: int
    width: int
    height: int

    @classmethod
    def from_ranges(cls, xs: range, ys: range) -> "Rect":
        return cls(xs.start, ys.start, len(xs), len(ys))

    @property
    def right(self) -> int:
        return self.left + self.width

    @property
    def bottom(self) -> int:
        return self.top + self.height

    def contains(self, x: int, y: int) -> bool:
        return self.left <= x < self.right and self.top <= y < self.bottom

    def within(self, width: int, height: int) -> bool:
        """True if the rect fits inside a width x height image."""
        return (
            self.left >= 0
            and self.top >= 0
            and self.width >= 0
            and self.height >= 0
            and self.right <= width
            and self.bottom <= height
        )

    def overlaps(self, other: "Rect") -> bool:
        return (
            self.left < other.right
            and other.left < self.right
            and self.top < other.bottom
            and other.top < self.bottom
        )


def _as_u8(buf) -> np.ndarray:
    if isinstance(buf, np.ndarray):
        return buf.astype(np.uint8, copy=False).reshape(-1)
    return np.frombuffer(bytes(buf), dtype=np.uint8)


def _palette_table(palette) -> np.ndarray:
    table = _as_u8(palette)
    if table.size < COLORS * 3:
        raise ValueError(f"palette holds {table.size // 3} colors, {COLORS} required")
    return table[: COLORS * 3].reshape(COLORS, 3)


def indices_to_rgb(indices, palette) -> bytes:
    """Map every palette index in `indices` to its 3-byte RGB color."""
    return _palette_table(palette)[_as_u8(indices)].tobytes()


class Image13h:
    """A width x height plane of palette indices."""

    def __init__(self, width: int, height: int, data: Optional[bytes] = None) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"invalid image dimensions {width}x{height}")
        if data is None:
            self._pixels = np.zeros((height, width), dtype=np.uint8)
        else:
            if len(data) != width * height:
                raise ValueError(f"expected {width * height} data bytes, got {len(data)}")
            self._pixels = np.frombuffer(bytes(data), dtype=np.uint8).reshape(height, width).copy()

    @classmethod
    def empty(cls, width: int, height: int) -> "Image13h":
        return cls(width, height)

    @classmethod
    def filled(cls, width: int, height: int, color: int) -> "Image13h":
        image = cls(width, height)
        image.fill(color)
        return image

    @classmethod
    def empty_screen_sized(cls) -> "Image13h":
        return cls(SCREEN_WIDTH, SCREEN_HEIGHT)

    @classmethod
    def _from_array(cls, pixels: np.ndarray) -> "Image13h":
        h, w = pixels.shape
        image = cls(w, h)
        image._pixels[:, :] = pixels
        return image

    @classmethod
    def load(cls, source: Source) -> Optional["Image13h"]:
        """Load an image from bytes or a binary reader.

        Returns None for short reads, a zero dimension or a bad marker. Content
        after the pixel data is left unread/ignored.
        """
        reader = as_reader(source)
        header = read_exact(reader, HEADER_SIZE)
        if header is None:
            logger.debug("image13h: truncated header")
            return None
        width, height = struct.unpack_from("<HH", header, 0)
        if width == 0 or height == 0:
            logger.debug("image13h: zero dimension %dx%d", width, height)
            return None
        if header[4:6] != MARKER:
            logger.debug("image13h: bad marker %s", header[4:6].hex())
            return None
        data = read_exact(reader, width * height)
        if data is None:
            logger.debug("image13h: truncated pixel data for %dx%d", width, height)
            return None
        return cls(width, height, data)

    @classmethod
    def from_pil(cls, image: Image.Image) -> "Image13h":
        """Take palette indices (mode P) or gray levels (mode L) verbatim."""
        if image.mode not in ("P", "L"):
            raise ValueError(f"expected a palettized (P) or L image, got mode {image.mode}")
        return cls._from_array(np.array(image, dtype=np.uint8))

    def save(self, writer: BinaryIO) -> None:
        writer.write(struct.pack("<HH", self.width, self.height))
        writer.write(MARKER)
        writer.write(self._pixels.tobytes())

    def to_bytes(self) -> bytes:
        return struct.pack("<HH", self.width, self.height) + MARKER + self._pixels.tobytes()

    @property
    def width(self) -> int:
        return int(self._pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self._pixels.shape[0])

    @property
    def pixels(self) -> np.ndarray:
        """Read-only (height, width) view of the indices."""
        view = self._pixels.view()
        view.flags.writeable = False
        return view

    @property
    def data(self) -> bytes:
        return self._pixels.tobytes()

    def line(self, line: int) -> bytes:
        if not 0 <= line < self.height:
            raise IndexError(f"line {line} out of range for height {self.height}")
        return self._pixels[line].tobytes()

    def rect(self) -> Rect:
        return Rect(0, 0, self.width, self.height)

    def _check_rect(self, rect: Rect) -> None:
        if not rect.within(self.width, self.height) or rect.width == 0 or rect.height == 0:
            raise ValueError(f"{rect} is out of range for a {self.width}x{self.height} image")

    def subimage(self, rect: Rect) -> "Image13h":
        self._check_rect(rect)
        return Image13h._from_array(self._pixels[rect.top : rect.bottom, rect.left : rect.right])

    def _source_for(self, rect: Rect, source: "Image13h") -> np.ndarray:
        self._check_rect(rect)
        if (source.width, source.height) != (rect.width, rect.height):
            raise ValueError(
                f"source is {source.width}x{source.height}, destination rect is {rect.width}x{rect.height}"
            )
        return source._pixels

    def blit(self, rect: Rect, source: "Image13h") -> None:
        src = self._source_for(rect, source)
        self._pixels[rect.top : rect.bottom, rect.left : rect.right] = src

    def blit_with_transparency(self, rect: Rect, source: "Image13h", transparent: int = TRANSPARENT_COLOR) -> None:
        src = self._source_for(rect, source)
        dst = self._pixels[rect.top : rect.bottom, rect.left : rect.right]
        np.copyto(dst, src, where=src != transparent)

    def fill(self, color: int) -> None:
        self._pixels.fill(color)

    def indices_to_rgb(self, palette) -> bytes:
        return indices_to_rgb(self._pixels, palette)

    def to_pil(self, palette) -> Image.Image:
        img = Image.frombytes("P", (self.width, self.height), self._pixels.tobytes())
        img.putpalette(_palette_table(palette).tobytes())
        return img

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Image13h):
            return NotImplemented
        return self._pixels.shape == other._pixels.shape and bool(np.array_equal(self._pixels, other._pixels))

    def __repr__(self) -> str:
        return f"Image13h({self.width}x{self.height})"

