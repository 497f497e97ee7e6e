"""
PAL.DAT palette store.

The file is a plain concatenation of 768-byte palettes; each palette holds
256 RGB colors, one unsigned byte per channel.

VGA mode 13h only has 6 bits per channel and the game shifts the stored
values right by two before programming the DAC. The values are kept at full
8-bit precision here.
"""

from __future__ import annotations

import logging
from typing import BinaryIO, Optional

import numpy as np
from PIL import Image

from .image13h import COLORS, Source, read_all

logger = logging.getLogger(__name__)

PALETTE_SIZE_IN_BYTES = 768
COLORS_PER_PALETTE = COLORS
# Palette the main menu screen is drawn with.
MAIN_MENU_PALETTE = 2


class Paldat:
    def __init__(self, data: bytes) -> None:
        if len(data) % PALETTE_SIZE_IN_BYTES != 0:
            raise ValueError(f"palette data size {len(data)} is not a multiple of {PALETTE_SIZE_IN_BYTES}")
        self._data = bytes(data)

    @classmethod
    def load(cls, source: Source) -> Optional["Paldat"]:
        """Read the whole store. None if the size is not a multiple of 768 bytes."""
        data = read_all(source)
        if len(data) % PALETTE_SIZE_IN_BYTES != 0:
            logger.debug("paldat: %d bytes is not a whole number of palettes", len(data))
            return None
        return cls(data)

    def save(self, writer: BinaryIO) -> None:
        writer.write(self._data)

    def palettes(self) -> int:
        return len(self._data) // PALETTE_SIZE_IN_BYTES

    def palette_data(self, palette: int) -> bytes:
        if not 0 <= palette < self.palettes():
            raise IndexError(f"palette {palette} out of range (have {self.palettes()})")
        start = palette * PALETTE_SIZE_IN_BYTES
        return self._data[start : start + PALETTE_SIZE_IN_BYTES]

    def palette_array(self, palette: int) -> np.ndarray:
        return np.frombuffer(self.palette_data(palette), dtype=np.uint8).reshape(COLORS_PER_PALETTE, 3)

    def swatch(self, palette: int) -> Image.Image:
        """16x16 RGB image, one pixel per color, row-major."""
        return Image.frombytes("RGB", (16, 16), self.palette_data(palette))
