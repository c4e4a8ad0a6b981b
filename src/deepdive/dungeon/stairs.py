from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Optional

from ..map.grid import GameMap
from ..map.tiles import Coord, TileType, manhattan

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 50
DEFAULT_MIN_SEPARATION = 5
DEFAULT_MAX_ATTEMPTS = 100


@dataclass(frozen=True)
class StairPlacement:
    up: Optional[Coord]
    down: Optional[Coord]
    attempts: int = 0
    separated: bool = True


def place_stairs(
    grid: GameMap,
    depth: int,
    rng: random.Random,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    min_separation: int = DEFAULT_MIN_SEPARATION,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> StairPlacement:
    """Put up/down stairs on random floor tiles.

    Depth 0 (the surface) gets no up stairs and ``max_depth`` gets no down
    stairs. The down stairs are re-sampled until their Manhattan distance to
    the up stairs exceeds ``min_separation``; after ``max_attempts`` samples
    the last one is kept anyway. That keeps generation from ever failing on
    cramped levels, at the cost of stairs that may sit close together.
    """
    up: Optional[Coord] = None
    down: Optional[Coord] = None
    attempts = 0
    separated = True

    if depth > 0:
        floors = grid.floor_positions()
        if floors:
            up = rng.choice(floors)
            grid.set(up[0], up[1], TileType.STAIR_UP)
        else:
            logger.warning("No floor tile for up stairs at depth %d", depth)

    if depth < max_depth:
        floors = grid.floor_positions()
        if floors:
            while attempts < max_attempts:
                attempts += 1
                down = rng.choice(floors)
                if up is None or manhattan(up, down) > min_separation:
                    break
            if up is not None and manhattan(up, down) <= min_separation:
                separated = False
                logger.warning(
                    "Stairs at depth %d only %d apart after %d attempts; keeping %s",
                    depth,
                    manhattan(up, down),
                    attempts,
                    down,
                )
            grid.set(down[0], down[1], TileType.STAIR_DOWN)
        else:
            logger.warning("No floor tile for down stairs at depth %d", depth)

    grid.stair_up_pos = up
    grid.stair_down_pos = down
    logger.debug("Stairs at depth %d: up=%s down=%s", depth, up, down)
    return StairPlacement(up=up, down=down, attempts=attempts, separated=separated)
