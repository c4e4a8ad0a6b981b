from __future__ import annotations

from enum import IntEnum
from typing import Dict, Tuple

Coord = Tuple[int, int]


class TileType(IntEnum):
    """Tile kinds of a dungeon level.

    The integer value is the persisted discriminant; do not reorder.
    """

    FLOOR = 0
    WALL = 1
    WATER = 2
    STAIR_UP = 3
    STAIR_DOWN = 4

    @property
    def is_walkable(self) -> bool:
        return self in _WALKABLE

    @property
    def is_stair(self) -> bool:
        return self in (TileType.STAIR_UP, TileType.STAIR_DOWN)

    @property
    def glyph(self) -> str:
        return _GLYPHS[self]

    @classmethod
    def from_glyph(cls, ch: str) -> "TileType":
        try:
            return _BY_GLYPH[ch]
        except KeyError:
            raise ValueError(f"Unknown tile glyph: {ch!r}") from None


_WALKABLE = frozenset({TileType.FLOOR, TileType.STAIR_UP, TileType.STAIR_DOWN})

_GLYPHS: Dict[TileType, str] = {
    TileType.FLOOR: ".",
    TileType.WALL: "#",
    TileType.WATER: "~",
    TileType.STAIR_UP: "<",
    TileType.STAIR_DOWN: ">",
}
_BY_GLYPH: Dict[str, TileType] = {v: k for k, v in _GLYPHS.items()}


def manhattan(a: Coord, b: Coord) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


__all__ = ["Coord", "TileType", "manhattan"]
