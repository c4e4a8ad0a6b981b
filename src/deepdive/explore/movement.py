from __future__ import annotations

import logging
from typing import Optional

from deepdive.map.grid import GameMap
from deepdive.map.tiles import Coord, TileType

logger = logging.getLogger(__name__)


def try_step(grid: GameMap, position: Coord, dx: int, dy: int) -> Optional[Coord]:
    """Attempt a single manual step by (dx, dy).

    The step is rejected if the target is out-of-bounds or a wall. Never
    raises due to index errors.

    Returns:
        The new position, or None if blocked.
    """
    tx, ty = position[0] + dx, position[1] + dy
    if not grid.is_within_bounds(tx, ty):
        logger.debug("Blocked step from %s: target (%d,%d) out of bounds", position, tx, ty)
        return None
    if grid.get(tx, ty) == TileType.WALL:
        logger.debug("Blocked step from %s: target (%d,%d) is a wall", position, tx, ty)
        return None
    return tx, ty
