from __future__ import annotations
import logging
import random
from typing import Optional

from ..config import GenerationSettings
from ..map.grid import GameMap
from .biome import BiomeType, MapGenParams
from .generator import CompactOrganicGenerator, MapGenerator, OpenRoomGenerator
from .stairs import StairPlacement, place_stairs

logger = logging.getLogger(__name__)


def build_generator(algorithm: Optional[str]) -> MapGenerator:
    """Map an algorithm name onto one of the known generator variants.

    Unknown names fall back to the organic generator.
    """
    algo = (algorithm or "organic").lower()
    if algo in ("organic", "compact", "compact_organic"):
        logger.debug("Using CompactOrganicGenerator (algorithm=%s)", algo)
        return CompactOrganicGenerator()
    elif algo in ("open", "open_room", "hall"):
        logger.debug("Using OpenRoomGenerator (algorithm=%s)", algo)
        return OpenRoomGenerator()
    else:
        logger.warning("Unknown algorithm '%s', falling back to CompactOrganicGenerator", algo)
        return CompactOrganicGenerator()


def params_for(settings: GenerationSettings, biome: BiomeType, depth: int) -> MapGenParams:
    return MapGenParams.for_level(
        biome,
        depth,
        min_cells=settings.boundary_min_cells,
        max_cells=settings.boundary_max_cells,
        compact_radius=settings.compact_radius,
        accept_probability=settings.accept_probability,
    )


def generate_level(
    settings: GenerationSettings,
    depth: int,
    rng: random.Random,
    biome: BiomeType = BiomeType.CAVERNS,
) -> GameMap:
    """Generate the layout of one level (no stairs yet)."""
    gen = build_generator(settings.algorithm)
    tiles = gen.generate(settings.width, settings.height, params_for(settings, biome, depth), rng)
    grid = GameMap(settings.width, settings.height)
    grid.tiles = list(tiles)
    logger.debug("Generated depth %d with %s: %d floor tiles", depth, gen.name, len(grid.floor_positions()))
    return grid


def generate_level_with_stairs(
    settings: GenerationSettings,
    depth: int,
    rng: random.Random,
    biome: BiomeType = BiomeType.CAVERNS,
) -> tuple[GameMap, StairPlacement]:
    grid = generate_level(settings, depth, rng, biome)
    placement = place_stairs(
        grid,
        depth,
        rng,
        max_depth=settings.max_depth,
        min_separation=settings.stair_min_separation,
        max_attempts=settings.stair_max_attempts,
    )
    return grid, placement
