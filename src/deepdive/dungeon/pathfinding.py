from __future__ import annotations

import heapq
import itertools
import logging
from collections import deque
from typing import Dict, List, Set

from ..map.grid import GameMap
from ..map.tiles import Coord, manhattan

logger = logging.getLogger(__name__)


def find_path(start: Coord, goal: Coord, grid: GameMap) -> List[Coord]:
    """A* shortest path over walkable tiles with 4-directional unit-cost moves.

    Returns the steps after ``start`` up to and including ``goal``. An empty
    list means there is nothing to do: start == goal, the goal is not
    walkable, or no route exists. The start tile itself need not be walkable.
    """
    if start == goal:
        return []
    if not grid.is_within_bounds(*start) or not grid.is_walkable(*goal):
        return []

    counter = itertools.count()
    open_heap = [(manhattan(start, goal), 0, next(counter), start)]
    came_from: Dict[Coord, Coord] = {}
    g_score: Dict[Coord, int] = {start: 0}
    closed: Set[Coord] = set()

    while open_heap:
        _, g, _, current = heapq.heappop(open_heap)
        if current in closed:
            continue
        if current == goal:
            path = [current]
            while path[-1] in came_from:
                path.append(came_from[path[-1]])
            path.pop()  # start
            path.reverse()
            return path
        closed.add(current)
        for nxt in grid.neighbors4(*current):
            if nxt in closed or not grid.is_walkable(*nxt):
                continue
            tentative = g + 1
            if tentative < g_score.get(nxt, tentative + 1):
                g_score[nxt] = tentative
                came_from[nxt] = current
                heapq.heappush(open_heap, (tentative + manhattan(nxt, goal), tentative, next(counter), nxt))

    logger.debug("No path from %s to %s (expanded %d nodes)", start, goal, len(closed))
    return []


def flood_fill_reachable(grid: GameMap, start: Coord) -> Set[Coord]:
    """Every walkable tile 4-connected to ``start`` (start included when walkable)."""
    if not grid.is_walkable(*start):
        return set()
    seen = {start}
    q = deque([start])
    while q:
        x, y = q.popleft()
        for nx, ny in grid.neighbors4(x, y):
            if (nx, ny) not in seen and grid.is_walkable(nx, ny):
                seen.add((nx, ny))
                q.append((nx, ny))
    return seen


def find_path_bfs(grid: GameMap, start: Coord, goal: Coord) -> int | None:
    """Breadth-first shortest path length over walkable tiles; None when unreachable."""
    if not grid.is_walkable(*start) or not grid.is_walkable(*goal):
        return None
    q = deque([(start, 0)])
    seen = {start}
    while q:
        pos, d = q.popleft()
        if pos == goal:
            return d
        for nxt in grid.neighbors4(*pos):
            if nxt not in seen and grid.is_walkable(*nxt):
                seen.add(nxt)
                q.append((nxt, d + 1))
    return None
