from __future__ import annotations
from abc import ABC, abstractmethod
import random
from typing import List

from ..biome import MapGenParams
from ...map.tiles import TileType


class MapGenerator(ABC):
    """Abstract base for level layout generators."""

    name: str = "base"

    @abstractmethod
    def generate(self, width: int, height: int, params: MapGenParams, rng: random.Random) -> List[TileType]:
        """Return a flat, row-major tile list of ``width * height`` entries."""
        raise NotImplementedError
