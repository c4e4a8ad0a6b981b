from __future__ import annotations
import logging
import random
from typing import List

from ..biome import MapGenParams
from ...map.mask import boundary_mask
from ...map.tiles import TileType
from .base import MapGenerator

logger = logging.getLogger(__name__)


class OpenRoomGenerator(MapGenerator):
    """One open hall filling the whole boundary mask.

    No randomness is consumed; useful for debugging visibility and movement.
    """

    name = "open"

    def generate(self, width: int, height: int, params: MapGenParams, rng: random.Random) -> List[TileType]:
        mask = boundary_mask(width, height)
        tiles = [TileType.WALL] * (width * height)
        for y in range(height):
            for x in range(width):
                if mask.contains(x, y):
                    tiles[y * width + x] = TileType.FLOOR
        logger.debug("OpenRoomGenerator: %dx%d hall with %d floor cells", width, height, mask.cell_count)
        return tiles
