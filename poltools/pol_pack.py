#!/usr/bin/env python3
"""
Pack edited assets back into Polanie data files.

Inputs are the folders written by pol_extract (PNG/WAV files plus
manifest.json):
- graf-pack: sprite PNGs -> GRAF.DAT (segments, swapped halves and all)
- font-pack: glyph PNGs -> FONT.DAT
- sound-pack: WAV or raw clips -> SOUND.DAT
- image13h-pack: one palettized PNG -> image13h

PNGs must be palettized (mode P) or 8-bit grayscale; pixel values are taken
as palette indices without any color matching.
"""

from __future__ import annotations

import argparse
import json
import logging
import pathlib
from typing import Any, Dict, List, Optional, Sequence

from PIL import Image

from .fontdat import Fontdat
from .grafdat import Grafdat
from .image13h import Image13h
from .sounddat import Sounddat, read_wav

logger = logging.getLogger(__name__)


def _load_indexed(path: pathlib.Path) -> Image13h:
    with Image.open(path) as img:
        img.load()
        if img.mode not in ("P", "L"):
            raise ValueError(f"{path} is not a palettized image (mode {img.mode}).")
        return Image13h.from_pil(img)


def _load_manifest(folder: pathlib.Path, key: str) -> List[Dict[str, Any]]:
    path = folder / "manifest.json"
    if not path.exists():
        raise FileNotFoundError(f"Manifest not found: {path}")
    data = json.loads(path.read_text(encoding="utf-8"))
    recs = data.get(key)
    if not isinstance(recs, list):
        raise ValueError(f"{path}: '{key}' must be a list")
    return sorted(recs, key=lambda r: int(r["index"]))


def _check_indices(recs: Sequence[Dict[str, Any]], expected: int, what: str) -> None:
    indices = [int(r["index"]) for r in recs]
    if indices != list(range(expected)):
        raise ValueError(f"Expected {what} 0..{expected - 1} in manifest, got {len(indices)} entries.")


def pack_grafdat(folder: pathlib.Path) -> Grafdat:
    recs = _load_manifest(folder, "sprites")
    _check_indices(recs, len(Grafdat.empty()), "sprites")
    return Grafdat.from_sprites([_load_indexed(folder / r["png"]) for r in recs])


def pack_fontdat(folder: pathlib.Path) -> Fontdat:
    recs = _load_manifest(folder, "glyphs")
    return Fontdat([_load_indexed(folder / r["png"]) for r in recs])


def pack_sounddat(folder: pathlib.Path) -> Sounddat:
    clips: List[bytes] = []
    for rec in _load_manifest(folder, "sounds"):
        name = rec.get("wav") or rec.get("raw")
        if not name:
            raise ValueError(f"Sound {rec['index']} has no 'wav' or 'raw' file.")
        path = folder / name
        clips.append(read_wav(path) if path.suffix.lower() == ".wav" else path.read_bytes())
    return Sounddat.from_clips(clips)


def _write(path: pathlib.Path, obj) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as f:
        obj.save(f)


def cmd_graf_pack(args: argparse.Namespace) -> int:
    out = pathlib.Path(args.out)
    grafdat = pack_grafdat(pathlib.Path(args.sprites))
    _write(out, grafdat)
    print(json.dumps({"out": str(out), "sprites": len(grafdat)}, indent=2))
    return 0


def cmd_font_pack(args: argparse.Namespace) -> int:
    out = pathlib.Path(args.out)
    fontdat = pack_fontdat(pathlib.Path(args.glyphs))
    _write(out, fontdat)
    print(json.dumps({"out": str(out), "glyphs": len(fontdat.glyphs())}, indent=2))
    return 0


def cmd_sound_pack(args: argparse.Namespace) -> int:
    out = pathlib.Path(args.out)
    sounddat = pack_sounddat(pathlib.Path(args.clips))
    _write(out, sounddat)
    print(json.dumps({"out": str(out), "sounds": sounddat.sounds()}, indent=2))
    return 0


def cmd_image13h_pack(args: argparse.Namespace) -> int:
    src = pathlib.Path(args.input)
    if not src.exists():
        raise FileNotFoundError(f"Input file not found: {src}")
    out = pathlib.Path(args.out)
    image = _load_indexed(src)
    _write(out, image)
    print(json.dumps({"out": str(out), "width": image.width, "height": image.height}, indent=2))
    return 0


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Pack extracted PNG/WAV assets into Polanie data files.")
    p.add_argument("--verbose", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    pg = sub.add_parser("graf-pack", help="Rebuild GRAF.DAT from a graf-extract-sprites folder")
    pg.add_argument("--sprites", required=True, help="Folder with sprite PNGs + manifest.json")
    pg.add_argument("--out", required=True, help="Output GRAF.DAT path")
    pg.set_defaults(func=cmd_graf_pack)

    pf = sub.add_parser("font-pack", help="Rebuild FONT.DAT from a font-extract folder")
    pf.add_argument("--glyphs", required=True, help="Folder with glyph PNGs + manifest.json")
    pf.add_argument("--out", required=True, help="Output FONT.DAT path")
    pf.set_defaults(func=cmd_font_pack)

    ps = sub.add_parser("sound-pack", help="Rebuild SOUND.DAT from a sound-extract-wav folder")
    ps.add_argument("--clips", required=True, help="Folder with WAV/raw clips + manifest.json")
    ps.add_argument("--out", required=True, help="Output SOUND.DAT path")
    ps.set_defaults(func=cmd_sound_pack)

    pi = sub.add_parser("image13h-pack", help="Convert a palettized PNG to image13h")
    pi.add_argument("--input", required=True, help="Input PNG path")
    pi.add_argument("--out", required=True, help="Output image13h path")
    pi.set_defaults(func=cmd_image13h_pack)
    return p.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
