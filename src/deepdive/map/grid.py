from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence
import logging

from deepdive.map.tiles import Coord, TileType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Size:
    width: int
    height: int


class GameMap:
    """
    Flat tile grid of one dungeon level.

    - Tiles are stored row-major in a single list, index ``y * width + x``.
    - Coordinate system is 0-based: x in [0, width), y in [0, height),
      (0, 0) is the top-left corner and y grows downward.
    - Reads and writes are bounds-checked; an out-of-range coordinate is a
      caller bug and raises IndexError.
    """

    def __init__(self, width: int, height: int, fill: TileType = TileType.WALL) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("GameMap width/height must be > 0")
        self._size = Size(width, height)
        self.tiles: List[TileType] = [fill] * (width * height)
        self.stair_up_pos: Optional[Coord] = None
        self.stair_down_pos: Optional[Coord] = None

    @property
    def size(self) -> Size:
        return self._size

    @property
    def width(self) -> int:
        return self._size.width

    @property
    def height(self) -> int:
        return self._size.height

    def is_within_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def idx(self, x: int, y: int) -> int:
        if not self.is_within_bounds(x, y):
            raise IndexError(f"Tile out of bounds: ({x},{y}) not in [0,{self.width})x[0,{self.height})")
        return y * self.width + x

    def get(self, x: int, y: int) -> TileType:
        return self.tiles[self.idx(x, y)]

    def set(self, x: int, y: int, tile: TileType) -> None:
        self.tiles[self.idx(x, y)] = TileType(tile)

    def is_walkable(self, x: int, y: int) -> bool:
        return self.is_within_bounds(x, y) and self.tiles[y * self.width + x].is_walkable

    def has_wall_below(self, x: int, y: int) -> bool:
        """True when the tile directly below (y + 1) is a wall; False on the bottom row."""
        if y + 1 >= self.height:
            return False
        return self.get(x, y + 1) == TileType.WALL

    def neighbors4(self, x: int, y: int) -> Iterator[Coord]:
        for dx, dy in ((1, 0), (-1, 0), (0, 1), (0, -1)):
            nx, ny = x + dx, y + dy
            if self.is_within_bounds(nx, ny):
                yield nx, ny

    def positions(self) -> Iterator[Coord]:
        for y in range(self.height):
            for x in range(self.width):
                yield x, y

    def floor_positions(self) -> List[Coord]:
        w = self.width
        return [(i % w, i // w) for i, t in enumerate(self.tiles) if t == TileType.FLOOR]

    def count(self, tile: TileType) -> int:
        return sum(1 for t in self.tiles if t == tile)

    def find_nearby_floor(self, x: int, y: int, max_radius: int) -> Optional[Coord]:
        """Closest FLOOR tile searching outward in square rings up to ``max_radius``."""
        for radius in range(max_radius + 1):
            for dy in range(-radius, radius + 1):
                for dx in range(-radius, radius + 1):
                    if max(abs(dx), abs(dy)) != radius:
                        continue
                    nx, ny = x + dx, y + dy
                    if self.is_within_bounds(nx, ny) and self.tiles[ny * self.width + nx] == TileType.FLOOR:
                        return nx, ny
        return None

    @classmethod
    def from_ascii(cls, rows: Sequence[str]) -> "GameMap":
        """
        Build a GameMap from ASCII rows for tests/tools.
        Glyphs: '.' floor, '#' wall, '~' water, '<' stair up, '>' stair down.
        """
        if not rows:
            raise ValueError("rows must not be empty")
        height = len(rows)
        width = len(rows[0])
        for r in rows:
            if len(r) != width:
                raise ValueError("All rows must be same width")
        grid = cls(width, height)
        for y, row in enumerate(rows):
            for x, ch in enumerate(row):
                tile = TileType.from_glyph(ch)
                grid.set(x, y, tile)
                if tile == TileType.STAIR_UP:
                    grid.stair_up_pos = (x, y)
                elif tile == TileType.STAIR_DOWN:
                    grid.stair_down_pos = (x, y)
        return grid

    def to_ascii(self) -> List[str]:
        w = self.width
        return ["".join(t.glyph for t in self.tiles[y * w:(y + 1) * w]) for y in range(self.height)]

    def copy(self) -> "GameMap":
        clone = GameMap(self.width, self.height)
        clone.tiles = list(self.tiles)
        clone.stair_up_pos = self.stair_up_pos
        clone.stair_down_pos = self.stair_down_pos
        return clone

    def __repr__(self) -> str:
        return f"GameMap({self.width}x{self.height})"
