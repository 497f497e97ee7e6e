import io
import struct

import pytest

from poltools.paldat import PALETTE_SIZE_IN_BYTES, Paldat
from poltools.sounddat import Sounddat, load_intro_audio, read_wav, write_wav


def _palette_store_bytes():
    return bytes((v >> 3) & 0xFF for v in range(PALETTE_SIZE_IN_BYTES * 2))


def test_paldat_loading_works():
    data = _palette_store_bytes()
    paldat = Paldat.load(data)
    assert paldat.palettes() == 2
    assert paldat.palette_data(0) == data[:768]
    assert paldat.palette_data(1) == data[768:1536]


def test_paldat_loads_from_reader():
    data = _palette_store_bytes()
    paldat = Paldat.load(io.BytesIO(data))
    buf = io.BytesIO()
    paldat.save(buf)
    assert buf.getvalue() == data


def test_paldat_rejects_partial_palette():
    assert Paldat.load(bytes(767)) is None
    assert Paldat.load(bytes(768 + 1)) is None
    assert Paldat.load(b"").palettes() == 0


def test_paldat_index_out_of_range():
    paldat = Paldat.load(bytes(768))
    with pytest.raises(IndexError):
        paldat.palette_data(1)


def test_paldat_array_and_swatch():
    data = _palette_store_bytes()
    paldat = Paldat.load(data)
    colors = paldat.palette_array(1)
    assert colors.shape == (256, 3)
    assert bytes(colors[5]) == data[768 + 15 : 768 + 18]
    swatch = paldat.swatch(1)
    assert swatch.size == (16, 16)
    assert swatch.getpixel((5, 0)) == tuple(data[768 + 15 : 768 + 18])


def test_sounddat_loading_works():
    data = bytes([1, 2, 3, 4, 5, 6, 4, 0, 0, 0, 2, 0, 0, 0])
    sounddat = Sounddat.load(data)
    assert sounddat.sounds() == 2
    assert sounddat.sound_data(0) == bytes([1, 2, 3, 4])
    assert sounddat.sound_data(1) == bytes([5, 6])


def test_sounddat_overshoot_fails():
    # The last size claims more than the data in front of it.
    assert Sounddat.load(bytes([1, 2, 3, 4, 5, 6, 4, 0, 0, 0, 9, 0, 0, 0])) is None
    # Sizes that never add up exactly run out of entries.
    assert Sounddat.load(bytes([1, 2, 3])) is None
    assert Sounddat.load(b"") is None


def test_sounddat_clip_index_out_of_range():
    sounddat = Sounddat.load(bytes([1, 2, 3, 4, 5, 6, 4, 0, 0, 0, 2, 0, 0, 0]))
    with pytest.raises(IndexError):
        sounddat.sound_data(2)


def test_sounddat_into_clips():
    sounddat = Sounddat.load(io.BytesIO(bytes([1, 2, 3, 4, 5, 6, 4, 0, 0, 0, 2, 0, 0, 0])))
    assert sounddat.into_clips() == [bytes([1, 2, 3, 4]), bytes([5, 6])]


def test_sounddat_from_clips_save_is_lossless():
    clips = [bytes([128] * 10), b"", bytes(range(37)), bytes([7])]
    buf = io.BytesIO()
    Sounddat.from_clips(clips).save(buf)
    data = buf.getvalue()
    assert len(data) == sum(len(c) for c in clips) + 4 * len(clips)
    assert data[-16:] == struct.pack("<4I", 10, 0, 37, 1)
    loaded = Sounddat.load(data)
    assert loaded.into_clips() == clips


def test_sounddat_from_no_clips_is_rejected():
    # An empty file has no size table, so load could never read it back.
    assert Sounddat.load(b"") is None
    with pytest.raises(ValueError):
        Sounddat.from_clips([])


def test_intro_audio():
    samples = bytes([128, 129, 130])
    assert load_intro_audio(struct.pack("<I", 3) + samples) == samples
    assert load_intro_audio(struct.pack("<I", 4) + samples) is None
    assert load_intro_audio(b"\x01") is None


def test_wav_round_trip(tmp_path):
    clip = bytes(range(0, 256, 3))
    path = tmp_path / "clip.wav"
    write_wav(path, clip)
    assert read_wav(path) == clip
