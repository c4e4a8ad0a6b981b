from __future__ import annotations

import logging
from collections import deque
from typing import Collection, Optional

from deepdive.fov.fog_of_war import FogOfWar, VisibilityState
from deepdive.map.grid import GameMap
from deepdive.map.tiles import Coord, TileType, manhattan

logger = logging.getLogger(__name__)


def find_nearest_unexplored(
    grid: GameMap,
    fog: FogOfWar,
    start: Coord,
    exclude: Collection[Coord] = (),
) -> Optional[Coord]:
    """Breadth-first search over non-wall tiles for the closest UNSEEN floor tile.

    ``start`` itself is never returned. Tiles in ``exclude`` are walked
    through but not chosen. Returns None when nothing is left to explore.
    """
    seen = {start}
    q = deque([start])
    while q:
        x, y = q.popleft()
        for nxt in grid.neighbors4(x, y):
            if nxt in seen:
                continue
            seen.add(nxt)
            tile = grid.get(*nxt)
            if tile == TileType.WALL:
                continue
            if (
                tile == TileType.FLOOR
                and nxt not in exclude
                and fog.get_state(*nxt) == VisibilityState.UNSEEN
            ):
                return nxt
            q.append(nxt)
    return None


def find_nearest_discovered_stairwell(
    grid: GameMap,
    fog: FogOfWar,
    start: Coord,
    stair_type: TileType,
) -> Optional[Coord]:
    """Closest already-discovered stair of ``stair_type`` by Manhattan distance.

    Undiscovered stairs are ignored even though the map knows where they
    are. Ties go to the first candidate in row-major order.
    """
    best: Optional[Coord] = None
    best_dist = 0
    for x, y in grid.positions():
        if grid.get(x, y) != stair_type or not fog.is_discovered(x, y):
            continue
        d = manhattan(start, (x, y))
        if best is None or d < best_dist:
            best, best_dist = (x, y), d
    return best


def count_unexplored(grid: GameMap, fog: FogOfWar) -> int:
    return sum(
        1
        for x, y in grid.positions()
        if grid.get(x, y) == TileType.FLOOR and fog.get_state(x, y) == VisibilityState.UNSEEN
    )
