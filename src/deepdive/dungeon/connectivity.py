"""Flood-fill region labelling and tunnel repair for generated levels."""
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from ..map.grid import GameMap
from ..map.mask import BoundaryMask
from ..map.tiles import Coord, TileType

logger = logging.getLogger(__name__)

Region = List[Coord]


def find_regions(grid: GameMap) -> List[Region]:
    """Label every walkable tile into maximal 4-connected regions.

    Regions are returned in discovery order (row-major seed cell), each as a
    list of coordinates in visit order, so the result only depends on the
    tile contents.
    """
    w, h = grid.width, grid.height
    tiles = grid.tiles
    visited = [False] * (w * h)
    regions: List[Region] = []
    for i, tile in enumerate(tiles):
        if visited[i] or not tile.is_walkable:
            continue
        region: Region = []
        stack = [i]
        visited[i] = True
        while stack:
            j = stack.pop()
            x, y = j % w, j // w
            region.append((x, y))
            for nx, ny in ((x, y + 1), (x + 1, y), (x, y - 1), (x - 1, y)):
                if 0 <= nx < w and 0 <= ny < h:
                    k = ny * w + nx
                    if not visited[k] and tiles[k].is_walkable:
                        visited[k] = True
                        stack.append(k)
        regions.append(region)
    return regions


def is_fully_connected(grid: GameMap) -> bool:
    return len(find_regions(grid)) <= 1


def closest_pair(a: Region, b: Region) -> Tuple[Coord, Coord]:
    """Exhaustive scan for the pair (one cell from each region) with the smallest Euclidean distance."""
    best: Optional[Tuple[Coord, Coord]] = None
    best_d = None
    for ax, ay in a:
        for bx, by in b:
            d = (ax - bx) * (ax - bx) + (ay - by) * (ay - by)
            if best_d is None or d < best_d:
                best_d = d
                best = ((ax, ay), (bx, by))
                if d == 1:
                    return best
    if best is None:
        raise ValueError("closest_pair needs two non-empty regions")
    return best


def carve_tunnel(grid: GameMap, mask: BoundaryMask, start: Coord, end: Coord) -> int:
    """Carve an L-shaped FLOOR tunnel from ``start`` to ``end``.

    Moves along x first, then y. If that corner would fall outside the mask
    the y-first L is used instead. Only in-mask cells are written. Returns
    the number of cells turned into floor.
    """
    sx, sy = start
    ex, ey = end
    x_first = mask.contains(ex, sy) or not mask.contains(sx, ey)
    if x_first:
        legs = [((1 if ex > sx else -1), 0, abs(ex - sx)), (0, (1 if ey > sy else -1), abs(ey - sy))]
    else:
        legs = [(0, (1 if ey > sy else -1), abs(ey - sy)), ((1 if ex > sx else -1), 0, abs(ex - sx))]

    carved = 0
    x, y = sx, sy
    for dx, dy, steps in legs:
        for _ in range(steps):
            x += dx
            y += dy
            if mask.contains(x, y) and grid.get(x, y) != TileType.FLOOR and not grid.get(x, y).is_stair:
                grid.set(x, y, TileType.FLOOR)
                carved += 1
    return carved


def ensure_connected(grid: GameMap, mask: BoundaryMask) -> int:
    """Merge every walkable region into the largest one with straight tunnels.

    Returns the number of tunnels carved. A level that still has several
    regions afterwards is logged, not raised; tests assert connectivity.
    """
    regions = find_regions(grid)
    if len(regions) <= 1:
        return 0

    anchor_index = max(range(len(regions)), key=lambda i: len(regions[i]))
    anchor = regions[anchor_index]
    logger.debug(
        "Connectivity repair: %d regions, anchor has %d cells", len(regions), len(anchor)
    )
    tunnels = 0
    for i, region in enumerate(regions):
        if i == anchor_index:
            continue
        src, dst = closest_pair(region, anchor)
        carved = carve_tunnel(grid, mask, src, dst)
        tunnels += 1
        logger.debug("Tunnel %s -> %s carved %d cells", src, dst, carved)

    remaining = len(find_regions(grid))
    if remaining > 1:
        logger.warning("Connectivity repair left %d regions; keeping partial tunnels", remaining)
    return tunnels


def enforce_mask(grid: GameMap, mask: BoundaryMask) -> int:
    """Force every cell outside the mask back to WALL; returns cells changed."""
    changed = 0
    for x, y in mask.outside_cells():
        if grid.get(x, y) != TileType.WALL:
            grid.set(x, y, TileType.WALL)
            changed += 1
    if changed:
        logger.debug("enforce_mask reset %d out-of-mask cells to wall", changed)
    return changed
