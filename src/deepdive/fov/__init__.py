from .los import CacheStats, LosCache, bresenham_line, has_line_of_sight
from .fog_of_war import FogOfWar, FovSettings, VisibilityState

__all__ = [
    "CacheStats",
    "LosCache",
    "bresenham_line",
    "has_line_of_sight",
    "FogOfWar",
    "FovSettings",
    "VisibilityState",
]
