from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging

logger = logging.getLogger(__name__)


class BiomeType(str, Enum):
    """Biome tag of a level. Opaque to generation; carried for persistence and presentation."""

    CAVERNS = "caverns"
    UNDERGLADE = "underglade"
    FUNGAL_DEEP = "fungal_deep"
    CINDER_GAOL = "cinder_gaol"
    ABYSSAL_HOLD = "abyssal_hold"
    NETHER_GRANGE = "nether_grange"
    CHTHONIC_CRYPTS = "chthonic_crypts"
    HYPOGEAL_KNOT = "hypogeal_knot"
    STYGIAN_POOL = "stygian_pool"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()


# Biomes with finished tile sets; the debug cycle only visits these.
_DEBUG_CYCLE = (BiomeType.CAVERNS, BiomeType.CINDER_GAOL, BiomeType.UNDERGLADE)


def next_debug_biome(current: BiomeType) -> BiomeType:
    """Caverns -> Cinder Gaol -> Underglade -> Caverns; anything else restarts at Caverns."""
    try:
        i = _DEBUG_CYCLE.index(current)
    except ValueError:
        return BiomeType.CAVERNS
    return _DEBUG_CYCLE[(i + 1) % len(_DEBUG_CYCLE)]


@dataclass(frozen=True)
class MapGenParams:
    """Per-level knobs handed to a generator."""

    max_divisions: int = 3
    min_cells: int = 300
    max_cells: int = 400
    compact_radius: float = 12.0
    accept_probability: float = 0.7

    @classmethod
    def for_level(cls, biome: BiomeType, depth: int, **overrides) -> "MapGenParams":
        # All biomes share the same layout rules; deeper levels get a few more walls.
        params = cls(max_divisions=3 + min(depth // 5, 2), **overrides)
        logger.debug("MapGenParams for %s depth=%d: %s", biome.value, depth, params)
        return params
