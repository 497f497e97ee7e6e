"""
Sprite catalogue of GRAF.DAT.

GRAF.DAT decodes into 15 composite 319x199 images. Every sprite the game
draws lives at a fixed rectangle inside one of them; nothing in the file
describes where. `SPRITES` is the table of those rectangles, in catalogue
order. Entries are grouped by `Kind` and numbered from 0 inside each kind.

Composite usage:

    0       main menu screen
    1       in-game frame screen
    2       UI chrome: borders, wood trim, secondary button bar
    3       action buttons, mouse cursor frames
    4       16x16 map tiles: terrain, resources, water, roads, bridges
    5       tree growth stages, unit death frames, hit flashes
    6, 7    building construction stages
    8       completed buildings, ruins
    9       palisade segments
    10..14  remaining full-screen layouts
"""

from __future__ import annotations

import enum
from typing import Dict, List, NamedTuple, Tuple

from .image13h import Rect

COMPOSITES = 15
COMPOSITE_WIDTH = 319
COMPOSITE_HEIGHT = 199
TILE_SIZE = 16


class Kind(str, enum.Enum):
    SCREEN = "screen"
    BORDER = "border"
    WOOD_TRIM = "wood_trim"
    BUTTON_BAR = "button_bar"
    BUTTON = "button"
    CURSOR = "cursor"
    TERRAIN = "terrain"
    RESOURCE = "resource"
    WATER = "water"
    ROAD = "road"
    BRIDGE = "bridge"
    TREE = "tree"
    UNIT_DEATH = "unit_death"
    HIT_FLASH = "hit_flash"
    BUILDING_CONSTRUCTION = "building_construction"
    BUILDING_COMPLETE = "building_complete"
    RUIN = "ruin"
    PALISADE = "palisade"


class SpriteEntry(NamedTuple):
    kind: Kind
    index: int
    image: int
    rect: Rect

    @property
    def name(self) -> str:
        return f"{self.kind.value}_{self.index:03d}"


def _grid(
    kind: Kind,
    image: int,
    left: int,
    top: int,
    width: int,
    height: int,
    columns: int,
    count: int,
    gap: int = 0,
    first: int = 0,
) -> List[SpriteEntry]:
    out = []
    for n in range(count):
        col, row = n % columns, n // columns
        rect = Rect(left + col * (width + gap), top + row * (height + gap), width, height)
        out.append(SpriteEntry(kind, first + n, image, rect))
    return out


def _single(kind: Kind, index: int, image: int, left: int, top: int, width: int, height: int) -> SpriteEntry:
    return SpriteEntry(kind, index, image, Rect(left, top, width, height))


def _full_screen(index: int, image: int) -> SpriteEntry:
    return _single(Kind.SCREEN, index, image, 0, 0, COMPOSITE_WIDTH, COMPOSITE_HEIGHT)


def _build() -> Tuple[SpriteEntry, ...]:
    t = TILE_SIZE
    entries: List[SpriteEntry] = [
        _full_screen(0, 0),
        _full_screen(1, 1),
        # Image 2
        _single(Kind.BORDER, 0, 2, 0, 0, 319, 8),
        _single(Kind.BORDER, 1, 2, 0, 8, 319, 8),
        _single(Kind.BORDER, 2, 2, 0, 16, 8, 183),
        _single(Kind.BORDER, 3, 2, 8, 16, 8, 183),
        _single(Kind.WOOD_TRIM, 0, 2, 16, 16, 303, 12),
        _single(Kind.WOOD_TRIM, 1, 2, 16, 28, 12, 100),
        _single(Kind.WOOD_TRIM, 2, 2, 28, 28, 12, 100),
        _single(Kind.BUTTON_BAR, 0, 2, 40, 28, 279, 24),
    ]
    entries += _grid(Kind.BUTTON_BAR, 2, 40, 52, 32, 20, columns=8, count=8, gap=2, first=1)
    # Image 3
    entries += _grid(Kind.BUTTON, 3, 0, 0, 38, 30, columns=8, count=32, gap=1)
    entries += _grid(Kind.CURSOR, 3, 0, 130, t, t, columns=16, count=16)
    # Image 4, 19 tiles per row
    entries += _grid(Kind.TERRAIN, 4, 0, 0, t, t, columns=19, count=57)
    entries += _grid(Kind.RESOURCE, 4, 0, 3 * t, t, t, columns=19, count=38)
    entries += _grid(Kind.WATER, 4, 0, 5 * t, t, t, columns=19, count=38)
    entries += _grid(Kind.ROAD, 4, 0, 7 * t, t, t, columns=19, count=38)
    entries += _grid(Kind.BRIDGE, 4, 0, 9 * t, t, t, columns=19, count=19)
    # Image 5, four tree species with six growth stages each
    entries += _grid(Kind.TREE, 5, 0, 0, 20, 30, columns=12, count=24)
    entries += _grid(Kind.UNIT_DEATH, 5, 0, 60, 24, 24, columns=12, count=24)
    entries += _grid(Kind.HIT_FLASH, 5, 0, 108, t, t, columns=16, count=8)
    # Images 6 and 7, twelve buildings with four construction stages each
    entries += _grid(Kind.BUILDING_CONSTRUCTION, 6, 0, 0, 48, 48, columns=6, count=24)
    entries += _grid(Kind.BUILDING_CONSTRUCTION, 7, 0, 0, 48, 48, columns=6, count=24, first=24)
    # Image 8
    entries += _grid(Kind.BUILDING_COMPLETE, 8, 0, 0, 48, 48, columns=6, count=12)
    entries += _grid(Kind.RUIN, 8, 0, 96, 48, 48, columns=6, count=6)
    # Image 9
    entries += _grid(Kind.PALISADE, 9, 0, 0, 32, 32, columns=8, count=16)
    for n, image in enumerate(range(10, COMPOSITES)):
        entries.append(_full_screen(2 + n, image))
    return tuple(entries)


SPRITES: Tuple[SpriteEntry, ...] = _build()
SPRITE_COUNT = len(SPRITES)
MAIN_MENU = 0
# The main menu borrows its pointer from the button sheet.
MAIN_MENU_CURSOR = (Kind.BUTTON, 6)


def _index_by_kind() -> Dict[Kind, Tuple[int, ...]]:
    out: Dict[Kind, List[int]] = {}
    for i, entry in enumerate(SPRITES):
        out.setdefault(entry.kind, []).append(i)
    return {k: tuple(v) for k, v in out.items()}


BY_KIND: Dict[Kind, Tuple[int, ...]] = _index_by_kind()


def sprite_index(kind: Kind, index: int) -> int:
    """Catalogue position of the `index`-th sprite of `kind`."""
    positions = BY_KIND[Kind(kind)]
    if not 0 <= index < len(positions):
        raise IndexError(f"{Kind(kind).value} {index} out of range (have {len(positions)})")
    return positions[index]


def entries_for_image(image: int) -> List[Tuple[int, SpriteEntry]]:
    return [(i, e) for i, e in enumerate(SPRITES) if e.image == image]
