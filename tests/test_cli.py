import json
import struct

import pytest

from poltools import pol_extract, pol_pack
from poltools.fontdat import CHARACTERS, MINIMUM_IMAGE_DIMENSIONS, Fontdat, character_rect
from poltools.grafdat import IMAGES, SEGMENT_SIZE, Grafdat
from poltools.grafdat_layout import SPRITE_COUNT
from poltools.image13h import Image13h, Rect
from poltools.sounddat import Sounddat


def _write_game_dir(root):
    (root / "DATA").mkdir(parents=True)
    (root / "PAL.DAT").write_bytes(bytes(range(256)) * 3 * 3)
    first = b"".join(bytes([i]) * SEGMENT_SIZE for i in range(IMAGES))
    second = b"".join(bytes([{9: 10, 10: 9}.get(i, i)]) * SEGMENT_SIZE for i in range(IMAGES))
    (root / "GRAF.DAT").write_bytes(first + second)
    (root / "DATA" / "SOUND.DAT").write_bytes(bytes([1, 2, 3, 4, 5, 6, 4, 0, 0, 0, 2, 0, 0, 0]))
    font = Image13h.empty(*MINIMUM_IMAGE_DIMENSIONS)
    for i in range(CHARACTERS):
        rect = character_rect(i)
        font.blit(rect, Image13h.filled(rect.width, rect.height, 100 + i))
    (root / "FONT.DAT").write_bytes(font.to_bytes())
    return root


@pytest.fixture
def game_dir(tmp_path):
    return _write_game_dir(tmp_path / "game")


def _last_json(capsys):
    return json.loads(capsys.readouterr().out)


def test_palette_info(game_dir, tmp_path, capsys):
    assert pol_extract.main(["palette-info", "--paldat", str(game_dir / "PAL.DAT")]) == 0
    assert _last_json(capsys)["palettes"] == 3
    out = tmp_path / "pal.bin"
    pol_extract.main(["palette-info", "--paldat", str(game_dir / "PAL.DAT"), "--index", "1", "--out", str(out)])
    assert out.read_bytes() == bytes(range(256)) * 3


def test_invalid_file_exits(tmp_path):
    bad = tmp_path / "PAL.DAT"
    bad.write_bytes(bytes(10))
    with pytest.raises(SystemExit):
        pol_extract.main(["palette-info", "--paldat", str(bad)])


def test_sound_roundtrip_through_wav(game_dir, tmp_path, capsys):
    wav_dir = tmp_path / "sounds"
    pol_extract.main(["sound-extract-wav", "--sounddat", str(game_dir / "DATA" / "SOUND.DAT"), "--outdir", str(wav_dir)])
    assert _last_json(capsys)["count"] == 2
    out = tmp_path / "SOUND.DAT"
    pol_pack.main(["sound-pack", "--clips", str(wav_dir), "--out", str(out)])
    assert out.read_bytes() == (game_dir / "DATA" / "SOUND.DAT").read_bytes()


def test_sound_info_dump(game_dir, tmp_path, capsys):
    out = tmp_path / "clip.raw"
    pol_extract.main(
        ["sound-info", "--sounddat", str(game_dir / "DATA" / "SOUND.DAT"), "--index", "1", "--out", str(out)]
    )
    assert out.read_bytes() == bytes([5, 6])


def test_intro_audio_wav(tmp_path, capsys):
    src = tmp_path / "I000.DAT"
    src.write_bytes(struct.pack("<I", 3) + bytes([127, 128, 129]))
    out = tmp_path / "intro.wav"
    assert pol_extract.main(["intro-audio-wav", "--input", str(src), "--out", str(out)]) == 0
    assert _last_json(capsys)["samples"] == 3


def test_graf_sprites_roundtrip_through_png(game_dir, tmp_path, capsys):
    sprite_dir = tmp_path / "sprites"
    pol_extract.main(
        [
            "graf-extract-sprites",
            "--grafdat", str(game_dir / "GRAF.DAT"),
            "--paldat", str(game_dir / "PAL.DAT"),
            "--outdir", str(sprite_dir),
        ]
    )
    assert _last_json(capsys)["count"] == SPRITE_COUNT
    out = tmp_path / "GRAF.DAT"
    pol_pack.main(["graf-pack", "--sprites", str(sprite_dir), "--out", str(out)])
    original = Grafdat.load((game_dir / "GRAF.DAT").read_bytes())
    assert Grafdat.load(out.read_bytes()) == original


def test_graf_to_image13h_and_convert(game_dir, tmp_path, capsys):
    stacked = tmp_path / "all.img"
    pol_extract.main(["graf-to-image13h", "--grafdat", str(game_dir / "GRAF.DAT"), "--out", str(stacked)])
    assert _last_json(capsys)["height"] == 199 * IMAGES
    image = Image13h.load(stacked.read_bytes())
    for i in range(IMAGES):
        band = image.subimage(Rect(0, i * 199, 319, 199))
        assert band == Image13h.filled(319, 199, i)

    ppm = tmp_path / "all.ppm"
    pol_extract.main(
        ["image13h-convert", "--input", str(stacked), "--paldat", str(game_dir / "PAL.DAT"), "--palette", "0", "--out", str(ppm)]
    )
    capsys.readouterr()
    assert ppm.read_text(encoding="ascii").startswith(f"P3\n319 {199 * IMAGES}\n255\n")

    png = tmp_path / "all.png"
    pol_extract.main(
        ["image13h-convert", "--input", str(stacked), "--paldat", str(game_dir / "PAL.DAT"), "--palette", "0", "--out", str(png)]
    )
    capsys.readouterr()
    packed = tmp_path / "back.img"
    pol_pack.main(["image13h-pack", "--input", str(png), "--out", str(packed)])
    assert packed.read_bytes() == stacked.read_bytes()


def test_font_roundtrip_through_png(game_dir, tmp_path, capsys):
    glyph_dir = tmp_path / "font"
    pol_extract.main(
        ["font-extract", "--fontdat", str(game_dir / "FONT.DAT"), "--paldat", str(game_dir / "PAL.DAT"), "--outdir", str(glyph_dir)]
    )
    assert _last_json(capsys)["count"] == CHARACTERS
    out = tmp_path / "FONT.DAT"
    pol_pack.main(["font-pack", "--glyphs", str(glyph_dir), "--out", str(out)])
    assert out.read_bytes() == (game_dir / "FONT.DAT").read_bytes()
    assert Fontdat.load(out.read_bytes()).glyph(0).data[0] == 100


@pytest.mark.parametrize("suffix", [".json", ".yaml"])
def test_extract_all_from_config(game_dir, tmp_path, capsys, suffix):
    cfg = {"root": str(game_dir), "palette": "0x1", "composites": True}
    path = tmp_path / f"config{suffix}"
    if suffix == ".json":
        path.write_text(json.dumps(cfg), encoding="utf-8")
    else:
        path.write_text("".join(f"{k}: {json.dumps(v)}\n" for k, v in cfg.items()), encoding="utf-8")
    out_dir = tmp_path / "out"
    assert pol_extract.main(["extract-all", "--config", str(path), "--outdir", str(out_dir)]) == 0
    summary = _last_json(capsys)
    assert summary["sprites"] == SPRITE_COUNT
    assert summary["sounds"] == 2
    assert summary["glyphs"] == CHARACTERS
    assert (out_dir / "composites.png").exists()
    assert Sounddat.load((game_dir / "DATA" / "SOUND.DAT").read_bytes()).sounds() == 2
