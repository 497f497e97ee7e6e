"""
SOUND.DAT clip container.

Layout: N sounds back to back, then N little-endian u32 sizes, the nth size
belonging to the nth sound:

    [ sound 0 ] [ sound 1 ] ... [ sound N-1 ] [ size 0 ] [ size 1 ] ... [ size N-1 ]

N is not stored anywhere (the game hardcodes it). It is recovered by reading
sizes backwards from the end of the file and summing them until the sum equals
B - 4 * n, B being the file size and n the number of sizes read so far. The
CD release SOUND.DAT (3 681 170 bytes) holds 183 sounds this way.

Sounds are raw unsigned 8-bit mono samples at 22 050 Hz.
"""

from __future__ import annotations

import logging
import pathlib
import struct
import wave
from typing import BinaryIO, List, Optional, Sequence, Union

from .image13h import Source, read_all

logger = logging.getLogger(__name__)

ENTRY_SIZE = 4
SAMPLE_RATE = 22_050
CHANNELS = 1
SAMPLE_WIDTH = 1


def detect_sizes(data: bytes) -> Optional[List[int]]:
    """Recover the clip sizes, in file order, from the trailing size table."""
    total_bytes = len(data)
    data_bytes = total_bytes
    accumulator = 0
    sizes: List[int] = []
    while True:
        offset = total_bytes - ENTRY_SIZE * (len(sizes) + 1)
        if offset < 0:
            logger.debug("sounddat: ran out of size entries after %d", len(sizes))
            return None
        entry = struct.unpack_from("<I", data, offset)[0]
        data_bytes -= ENTRY_SIZE
        sizes.append(entry)
        accumulator += entry
        if accumulator > data_bytes:
            logger.debug("sounddat: sizes overshoot data after %d entries", len(sizes))
            return None
        if accumulator == data_bytes:
            break
    sizes.reverse()
    return sizes


class Sounddat:
    def __init__(self, data: bytes, sizes: Sequence[int]) -> None:
        self._data = data
        self._sizes = list(sizes)
        self._offsets: List[int] = []
        offset = 0
        for size in self._sizes:
            self._offsets.append(offset)
            offset += size
        if offset > len(data):
            raise ValueError(f"sizes add up to {offset}, only {len(data)} data bytes")

    @classmethod
    def load(cls, source: Source) -> Optional["Sounddat"]:
        """Read the whole container. None if the clip count cannot be detected."""
        data = read_all(source)
        sizes = detect_sizes(data)
        if sizes is None:
            return None
        return cls(data, sizes)

    @classmethod
    def from_clips(cls, clips: Sequence[bytes]) -> "Sounddat":
        """Pack clips in order. At least one clip is needed for the size table to be found again."""
        if not clips:
            raise ValueError("a sound container needs at least one clip")
        return cls(b"".join(bytes(c) for c in clips), [len(c) for c in clips])


    def save(self, writer: BinaryIO) -> None:
        writer.write(self._data[: sum(self._sizes)])
        writer.write(struct.pack(f"<{len(self._sizes)}I", *self._sizes))

    def sounds(self) -> int:
        return len(self._sizes)

    def sound_data(self, sound: int) -> bytes:
        if not 0 <= sound < len(self._sizes):
            raise IndexError(f"sound {sound} out of range (have {len(self._sizes)})")
        offset = self._offsets[sound]
        return self._data[offset : offset + self._sizes[sound]]

    def into_clips(self) -> List[bytes]:
        """Independent per-sound buffers; the container's copy is released."""
        clips = [self.sound_data(i) for i in range(len(self._sizes))]
        self._data = b""
        self._sizes = []
        self._offsets = []
        return clips


def load_intro_audio(source: Source) -> Optional[bytes]:
    """Read an intro soundtrack file (I000.DAT etc.): u32 length, then samples."""
    data = read_all(source)
    if len(data) < ENTRY_SIZE:
        return None
    expected = struct.unpack_from("<I", data, 0)[0]
    samples = data[ENTRY_SIZE:]
    if len(samples) != expected:
        logger.debug("intro audio: header says %d bytes, file has %d", expected, len(samples))
        return None
    return samples


def write_wav(path: Union[str, pathlib.Path], clip: bytes, sample_rate: int = SAMPLE_RATE) -> None:
    # 8-bit WAV samples are unsigned, matching the game's data as-is.
    with wave.open(str(path), "wb") as wf:
        wf.setnchannels(CHANNELS)
        wf.setsampwidth(SAMPLE_WIDTH)
        wf.setframerate(max(1, int(sample_rate)))
        wf.writeframes(clip)


def read_wav(path: Union[str, pathlib.Path]) -> bytes:
    with wave.open(str(path), "rb") as wf:
        if wf.getnchannels() != CHANNELS or wf.getsampwidth() != SAMPLE_WIDTH:
            raise ValueError(f"{path}: expected 8-bit mono audio")
        return wf.readframes(wf.getnframes())
