#!/usr/bin/env python3
"""
Polanie data extraction helpers.

Current capabilities:
- Report and dump palettes from PAL.DAT (raw or as a PNG swatch).
- Report, dump and WAV-export sounds from SOUND.DAT and intro soundtracks.
- Stack GRAF.DAT composites into one image13h file, or export every sprite of
  the catalogue to PNG with a manifest that pol_pack can rebuild from.
- Convert image13h images to PPM/PNG with a chosen palette.
- Export FONT.DAT glyphs.
- Config-driven batch export of a whole game directory (JSON/YAML).
"""

from __future__ import annotations

import argparse
import json
import logging
import pathlib
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .fontdat import CHARACTERS, FIRST_CHARACTER, Fontdat
from .grafdat import IMAGE_DIMENSIONS, IMAGES, Grafdat
from .grafdat_layout import SPRITES
from .image13h import Image13h, Rect
from .paldat import MAIN_MENU_PALETTE, Paldat
from .ppm import write_ppm
from .sounddat import SAMPLE_RATE, Sounddat, load_intro_audio, write_wav

logger = logging.getLogger(__name__)

DEFAULT_FILES = {
    "paldat": "PAL.DAT",
    "grafdat": "GRAF.DAT",
    "sounddat": "DATA/SOUND.DAT",
    "fontdat": "FONT.DAT",
}


def _load_or_exit(loader, path: pathlib.Path, what: str):
    with path.open("rb") as f:
        obj = loader(f)
    if obj is None:
        raise SystemExit(f"{path}: not a valid {what} file")
    return obj


def _load_paldat(path) -> Paldat:
    return _load_or_exit(Paldat.load, pathlib.Path(path), "palette")


def _load_grafdat(path) -> Grafdat:
    return _load_or_exit(Grafdat.load, pathlib.Path(path), "graf.dat")


def _load_sounddat(path) -> Sounddat:
    return _load_or_exit(Sounddat.load, pathlib.Path(path), "sound.dat")


def _load_fontdat(path) -> Fontdat:
    return _load_or_exit(Fontdat.load, pathlib.Path(path), "font.dat")


def _load_image13h(path) -> Image13h:
    return _load_or_exit(Image13h.load, pathlib.Path(path), "image13h")


def _load_config(path: pathlib.Path) -> Dict[str, Any]:
    ext = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if ext == ".json":
        data = json.loads(text)
    else:
        data = yaml.safe_load(text)
    if not isinstance(data, dict):
        raise ValueError("Config root must be a mapping/object")
    return data


def _to_int(v: Any) -> int:
    if isinstance(v, bool):
        raise ValueError("Expected int-like value, got: bool")
    if isinstance(v, int):
        return int(v)
    if isinstance(v, str):
        return int(v, 0)
    raise ValueError(f"Expected int-like value, got: {type(v).__name__}")


def _save_png(img, out: pathlib.Path) -> None:
    out.parent.mkdir(parents=True, exist_ok=True)
    img.save(out)


def export_sprites(grafdat: Grafdat, palette: bytes, out_dir: pathlib.Path) -> Dict[str, Any]:
    out_dir.mkdir(parents=True, exist_ok=True)
    recs: List[Dict[str, Any]] = []
    for i, entry in enumerate(SPRITES):
        path = out_dir / f"{entry.name}.png"
        grafdat.sprite(i).to_pil(palette).save(path)
        r = entry.rect
        recs.append(
            {
                "index": i,
                "kind": entry.kind.value,
                "kind_index": entry.index,
                "image": entry.image,
                "rect": [r.left, r.top, r.width, r.height],
                "png": path.name,
            }
        )
    manifest = {"count": len(recs), "sprites": recs}
    (out_dir / "manifest.json").write_text(json.dumps(manifest, indent=2), encoding="utf-8")
    return manifest


def export_sounds(sounddat: Sounddat, out_dir: pathlib.Path) -> Dict[str, Any]:
    out_dir.mkdir(parents=True, exist_ok=True)
    recs: List[Dict[str, Any]] = []
    for i in range(sounddat.sounds()):
        clip = sounddat.sound_data(i)
        path = out_dir / f"sound_{i:03d}.wav"
        write_wav(path, clip)
        recs.append({"index": i, "size": len(clip), "wav": path.name})
    manifest = {"count": len(recs), "sample_rate": SAMPLE_RATE, "sounds": recs}
    (out_dir / "manifest.json").write_text(json.dumps(manifest, indent=2), encoding="utf-8")
    return manifest


def export_glyphs(fontdat: Fontdat, palette: bytes, out_dir: pathlib.Path) -> Dict[str, Any]:
    out_dir.mkdir(parents=True, exist_ok=True)
    recs: List[Dict[str, Any]] = []
    for i in range(CHARACTERS):
        path = out_dir / f"glyph_{i:02d}.png"
        fontdat.glyph(i).to_pil(palette).save(path)
        recs.append({"index": i, "char": chr(ord(FIRST_CHARACTER) + i), "png": path.name})
    manifest = {"count": len(recs), "glyphs": recs}
    (out_dir / "manifest.json").write_text(json.dumps(manifest, indent=2), encoding="utf-8")
    return manifest


def stack_composites(grafdat: Grafdat) -> Image13h:
    w, h = IMAGE_DIMENSIONS
    out = Image13h.empty(w, h * IMAGES)
    for i, image in enumerate(grafdat.to_images()):
        out.blit(Rect(0, i * h, w, h), image)
    return out


def cmd_palette_info(args: argparse.Namespace) -> int:
    paldat = _load_paldat(args.paldat)
    if args.index is None:
        print(json.dumps({"paldat": args.paldat, "palettes": paldat.palettes()}, indent=2))
        return 0
    index = _to_int(args.index)
    if not args.out:
        raise ValueError("--index requires --out")
    out = pathlib.Path(args.out)
    if out.suffix.lower() == ".png":
        _save_png(paldat.swatch(index), out)
    else:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_bytes(paldat.palette_data(index))
    print(json.dumps({"out": str(out), "palette": index}, indent=2))
    return 0


def cmd_sound_info(args: argparse.Namespace) -> int:
    sounddat = _load_sounddat(args.sounddat)
    if args.index is None:
        print(json.dumps({"sounddat": args.sounddat, "sounds": sounddat.sounds()}, indent=2))
        return 0
    if not args.out:
        raise ValueError("--index requires --out")
    index = _to_int(args.index)
    clip = sounddat.sound_data(index)
    out = pathlib.Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)
    if out.suffix.lower() == ".wav":
        write_wav(out, clip)
    else:
        out.write_bytes(clip)
    print(json.dumps({"out": str(out), "sound": index, "size": len(clip)}, indent=2))
    return 0


def cmd_sound_extract_wav(args: argparse.Namespace) -> int:
    sounddat = _load_sounddat(args.sounddat)
    out_dir = pathlib.Path(args.outdir)
    manifest = export_sounds(sounddat, out_dir)
    print(json.dumps({"manifest": str(out_dir / "manifest.json"), "count": manifest["count"]}, indent=2))
    return 0


def cmd_intro_audio_wav(args: argparse.Namespace) -> int:
    path = pathlib.Path(args.input)
    samples = load_intro_audio(path.read_bytes())
    if samples is None:
        raise SystemExit(f"{path}: not a valid intro audio file")
    out = pathlib.Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)
    write_wav(out, samples)
    print(json.dumps({"out": str(out), "samples": len(samples), "sample_rate": SAMPLE_RATE}, indent=2))
    return 0


def cmd_graf_to_image13h(args: argparse.Namespace) -> int:
    grafdat = _load_grafdat(args.grafdat)
    image = stack_composites(grafdat)
    out = pathlib.Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)
    with out.open("wb") as f:
        image.save(f)
    print(json.dumps({"out": str(out), "width": image.width, "height": image.height}, indent=2))
    return 0


def cmd_graf_extract_sprites(args: argparse.Namespace) -> int:
    grafdat = _load_grafdat(args.grafdat)
    paldat = _load_paldat(args.paldat)
    out_dir = pathlib.Path(args.outdir)
    manifest = export_sprites(grafdat, paldat.palette_data(_to_int(args.palette)), out_dir)
    print(json.dumps({"manifest": str(out_dir / "manifest.json"), "count": manifest["count"]}, indent=2))
    return 0


def cmd_image13h_convert(args: argparse.Namespace) -> int:
    image = _load_image13h(args.input)
    palette = _load_paldat(args.paldat).palette_data(_to_int(args.palette))
    out = pathlib.Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)
    if out.suffix.lower() == ".png":
        image.to_pil(palette).save(out)
    else:
        with out.open("w", encoding="ascii", newline="\n") as f:
            write_ppm(image.width, image.height, image.indices_to_rgb(palette), f)
    print(json.dumps({"out": str(out), "width": image.width, "height": image.height}, indent=2))
    return 0


def cmd_font_extract(args: argparse.Namespace) -> int:
    fontdat = _load_fontdat(args.fontdat)
    paldat = _load_paldat(args.paldat)
    out_dir = pathlib.Path(args.outdir)
    manifest = export_glyphs(fontdat, paldat.palette_data(_to_int(args.palette)), out_dir)
    print(json.dumps({"manifest": str(out_dir / "manifest.json"), "count": manifest["count"]}, indent=2))
    return 0


def _config_path(cfg: Dict[str, Any], root: pathlib.Path, key: str) -> pathlib.Path:
    return root / str(cfg.get(key, DEFAULT_FILES[key]))


def cmd_extract_all(args: argparse.Namespace) -> int:
    cfg = _load_config(pathlib.Path(args.config))
    root = pathlib.Path(str(cfg.get("root", ".")))
    out_dir = pathlib.Path(args.outdir)
    out_dir.mkdir(parents=True, exist_ok=True)
    palette_index = _to_int(cfg.get("palette", MAIN_MENU_PALETTE))

    report: Dict[str, Any] = {"config": args.config, "root": str(root), "outdir": str(out_dir)}
    paldat = _load_paldat(_config_path(cfg, root, "paldat"))
    palette = paldat.palette_data(palette_index)
    report["palettes"] = paldat.palettes()

    if cfg.get("sprites", True) or cfg.get("composites", False):
        grafdat = _load_grafdat(_config_path(cfg, root, "grafdat"))
        if cfg.get("sprites", True):
            report["sprites"] = export_sprites(grafdat, palette, out_dir / "sprites")["count"]
        if cfg.get("composites", False):
            stacked = stack_composites(grafdat)
            _save_png(stacked.to_pil(palette), out_dir / "composites.png")
            report["composites"] = IMAGES
    if cfg.get("sounds", True):
        report["sounds"] = export_sounds(_load_sounddat(_config_path(cfg, root, "sounddat")), out_dir / "sounds")["count"]
    if cfg.get("font", True):
        report["glyphs"] = export_glyphs(_load_fontdat(_config_path(cfg, root, "fontdat")), palette, out_dir / "font")["count"]

    out_manifest = out_dir / "manifest.json"
    out_manifest.write_text(json.dumps(report, indent=2), encoding="utf-8")
    logger.info("extracted %s into %s", root, out_dir)
    print(json.dumps({"manifest": str(out_manifest), **{k: v for k, v in report.items() if isinstance(v, int)}}, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Polanie data extraction helper")
    p.add_argument("--verbose", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    ppi = sub.add_parser("palette-info", help="Report palette count or dump one palette")
    ppi.add_argument("--paldat", required=True, help="Path to PAL.DAT")
    ppi.add_argument("--index", help="0-based palette index to dump")
    ppi.add_argument("--out", help="Output path (.png for a 16x16 swatch, raw bytes otherwise)")
    ppi.set_defaults(func=cmd_palette_info)

    psi = sub.add_parser("sound-info", help="Report sound count or dump one sound")
    psi.add_argument("--sounddat", required=True, help="Path to SOUND.DAT")
    psi.add_argument("--index", help="0-based sound index to dump")
    psi.add_argument("--out", help="Output path (.wav for WAV, raw unsigned 8-bit otherwise)")
    psi.set_defaults(func=cmd_sound_info)

    psw = sub.add_parser("sound-extract-wav", help="Export every sound to WAV + manifest")
    psw.add_argument("--sounddat", required=True, help="Path to SOUND.DAT")
    psw.add_argument("--outdir", required=True, help="Output folder")
    psw.set_defaults(func=cmd_sound_extract_wav)

    pia = sub.add_parser("intro-audio-wav", help="Convert an intro soundtrack (I00x.DAT) to WAV")
    pia.add_argument("--input", required=True, help="Path to I00x.DAT")
    pia.add_argument("--out", required=True, help="Output WAV path")
    pia.set_defaults(func=cmd_intro_audio_wav)

    pgi = sub.add_parser("graf-to-image13h", help="Stack all GRAF.DAT composites into one image13h file")
    pgi.add_argument("--grafdat", required=True, help="Path to GRAF.DAT")
    pgi.add_argument("--out", required=True, help="Output image13h path")
    pgi.set_defaults(func=cmd_graf_to_image13h)

    pgs = sub.add_parser("graf-extract-sprites", help="Export the GRAF.DAT sprite catalogue to PNG + manifest")
    pgs.add_argument("--grafdat", required=True, help="Path to GRAF.DAT")
    pgs.add_argument("--paldat", required=True, help="Path to PAL.DAT")
    pgs.add_argument("--palette", default=str(MAIN_MENU_PALETTE), help=f"Palette index (default: {MAIN_MENU_PALETTE})")
    pgs.add_argument("--outdir", required=True, help="Output folder")
    pgs.set_defaults(func=cmd_graf_extract_sprites)

    pic = sub.add_parser("image13h-convert", help="Convert an image13h image to PPM or PNG")
    pic.add_argument("--input", required=True, help="image13h file")
    pic.add_argument("--paldat", required=True, help="Path to PAL.DAT")
    pic.add_argument("--palette", required=True, help="Palette index")
    pic.add_argument("--out", required=True, help="Output path (.png or .ppm)")
    pic.set_defaults(func=cmd_image13h_convert)

    pfe = sub.add_parser("font-extract", help="Export FONT.DAT glyphs to PNG + manifest")
    pfe.add_argument("--fontdat", required=True, help="Path to FONT.DAT")
    pfe.add_argument("--paldat", required=True, help="Path to PAL.DAT")
    pfe.add_argument("--palette", default=str(MAIN_MENU_PALETTE), help=f"Palette index (default: {MAIN_MENU_PALETTE})")
    pfe.add_argument("--outdir", required=True, help="Output folder")
    pfe.set_defaults(func=cmd_font_extract)

    pea = sub.add_parser("extract-all", help="Config-driven export of a game directory (JSON/YAML)")
    pea.add_argument("--config", required=True, help="Config file (.json/.yaml/.yml)")
    pea.add_argument("--outdir", required=True, help="Output folder")
    pea.set_defaults(func=cmd_extract_all)
    return p


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
