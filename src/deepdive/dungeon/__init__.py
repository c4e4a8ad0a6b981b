from .biome import BiomeType, MapGenParams, next_debug_biome
from .connectivity import ensure_connected, find_regions, is_fully_connected
from .factory import build_generator, generate_level, generate_level_with_stairs
from .pathfinding import find_path, flood_fill_reachable
from .stairs import StairPlacement, place_stairs

__all__ = [
    "BiomeType",
    "MapGenParams",
    "next_debug_biome",
    "ensure_connected",
    "find_regions",
    "is_fully_connected",
    "build_generator",
    "generate_level",
    "generate_level_with_stairs",
    "find_path",
    "flood_fill_reachable",
    "StairPlacement",
    "place_stairs",
]
