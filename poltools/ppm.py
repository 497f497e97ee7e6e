from __future__ import annotations

from typing import TextIO


def write_ppm(width: int, height: int, rgb: bytes, writer: TextIO) -> None:
    """Write `width * height` RGB triples as a plain-text (P3) PPM image."""
    if len(rgb) < width * height * 3:
        raise ValueError(f"need {width * height * 3} RGB bytes, got {len(rgb)}")
    writer.write(f"P3\n{width} {height}\n255\n")
    for y in range(height):
        row = rgb[y * width * 3 : (y + 1) * width * 3]
        writer.write("".join(f"{row[i]} {row[i + 1]} {row[i + 2]} " for i in range(0, len(row), 3)))
        writer.write("\n")
    writer.flush()
