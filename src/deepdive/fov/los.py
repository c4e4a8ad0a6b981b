from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple
import logging
import sys

from deepdive.map.grid import GameMap
from deepdive.map.tiles import Coord, TileType

logger = logging.getLogger(__name__)

CacheKey = Tuple[int, int, int, int]


def bresenham_line(x0: int, y0: int, x1: int, y1: int) -> List[Coord]:
    """
    Bresenham's line algorithm. Returns the list of points from (x0, y0) to (x1, y1) inclusive.
    """
    points: List[Coord] = []

    dx = abs(x1 - x0)
    dy = -abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx + dy

    x, y = x0, y0
    while True:
        points.append((x, y))
        if x == x1 and y == y1:
            break
        e2 = 2 * err
        if e2 > dy:
            err += dy
            x += sx
        if e2 < dx:
            err += dx
            y += sy

    return points


def has_line_of_sight(grid: GameMap, x0: int, y0: int, x1: int, y1: int) -> bool:
    """
    True if no wall lies strictly between (x0, y0) and (x1, y1).

    The origin tile is never tested and a wall at the target does not block
    sight to it, so wall faces are visible. Only WALL is opaque; water does
    not block sight.
    """
    line = bresenham_line(x0, y0, x1, y1)
    for x, y in line[1:-1]:
        if grid.is_within_bounds(x, y) and grid.get(x, y) == TileType.WALL:
            logger.debug("LoS blocked at (%d,%d) between (%d,%d)->(%d,%d)", x, y, x0, y0, x1, y1)
            return False
    return True


@dataclass(frozen=True)
class CacheStats:
    size: int
    hits: int
    misses: int
    hit_rate: float
    approx_memory_bytes: int

    def format_lines(self) -> List[str]:
        if self.hits + self.misses == 0:
            return ["No LOS cache statistics available yet"]
        return [
            "LOS cache statistics:",
            f"  Cache size: {self.size} entries",
            f"  Hits: {self.hits}, Misses: {self.misses}",
            f"  Hit rate: {self.hit_rate * 100.0:.1f}%",
            f"  Memory usage: ~{self.approx_memory_bytes // 1024} KB",
        ]


class LosCache:
    """Memoises line-of-sight results for one grid.

    Keys are the endpoint pair in sorted order, so A->B and B->A share an
    entry. Entries stay valid until the grid changes; call ``clear`` then.
    """

    def __init__(self) -> None:
        self._entries: Dict[CacheKey, bool] = {}
        self.hits = 0
        self.misses = 0

    @staticmethod
    def key(x0: int, y0: int, x1: int, y1: int) -> CacheKey:
        if (x0, y0) <= (x1, y1):
            return (x0, y0, x1, y1)
        return (x1, y1, x0, y0)

    def __len__(self) -> int:
        return len(self._entries)

    def lookup(self, grid: GameMap, x0: int, y0: int, x1: int, y1: int) -> bool:
        k = self.key(x0, y0, x1, y1)
        cached = self._entries.get(k)
        if cached is not None:
            self.hits += 1
            return cached
        self.misses += 1
        result = has_line_of_sight(grid, x0, y0, x1, y1)
        self._entries[k] = result
        return result

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def stats(self) -> CacheStats:
        total = self.hits + self.misses
        size = len(self._entries)
        # Rough footprint: dict slot plus a 4-tuple key per entry
        per_entry = sys.getsizeof((0, 0, 0, 0)) + 2 * sys.getsizeof(0)
        return CacheStats(
            size=size,
            hits=self.hits,
            misses=self.misses,
            hit_rate=(self.hits / total) if total else 0.0,
            approx_memory_bytes=sys.getsizeof(self._entries) + size * per_entry,
        )
