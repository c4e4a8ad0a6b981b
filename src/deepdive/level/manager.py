from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Dict, Mapping, Optional, Tuple

from deepdive.config import GenerationSettings
from deepdive.dungeon.biome import BiomeType
from deepdive.dungeon.factory import generate_level_with_stairs
from deepdive.fov.fog_of_war import VisibilityState
from deepdive.level.saved import SavedLevel
from deepdive.map.grid import GameMap
from deepdive.map.tiles import Coord, TileType
from deepdive.rng import RNGManager

if TYPE_CHECKING:
    from deepdive.save.store import LevelStore

logger = logging.getLogger(__name__)

SPAWN_SEARCH_RADIUS = 10

Visibility = Dict[Coord, VisibilityState]


class SpawnPosition(str, Enum):
    STAIR_UP = "stair_up"
    STAIR_DOWN = "stair_down"
    CENTER = "center"


def resolve_spawn(grid: GameMap, spawn: SpawnPosition) -> Coord:
    """Where the player appears on ``grid``.

    Stair spawns land on the stair itself. A missing stair or a centre that
    is not plain floor falls back to the nearest floor within
    SPAWN_SEARCH_RADIUS of the centre, and finally to the centre itself.
    """
    center = (grid.width // 2, grid.height // 2)
    if spawn == SpawnPosition.STAIR_UP and grid.stair_up_pos is not None:
        return grid.stair_up_pos
    if spawn == SpawnPosition.STAIR_DOWN and grid.stair_down_pos is not None:
        return grid.stair_down_pos
    if grid.get(*center) == TileType.FLOOR:
        return center
    nearby = grid.find_nearby_floor(center[0], center[1], SPAWN_SEARCH_RADIUS)
    if nearby is None:
        logger.warning("No floor within %d of the centre; spawning at %s", SPAWN_SEARCH_RADIUS, center)
        return center
    return nearby


class LevelManager:
    """
    Keeps every visited level so that returning to a depth restores its
    layout and explored state.

    Levels live in memory keyed by depth. With a LevelStore attached, each
    remembered level is also written to disk and levels missing from memory
    are looked up there before generating a new one.
    """

    def __init__(
        self,
        settings: GenerationSettings,
        rngm: RNGManager,
        store: Optional[LevelStore] = None,
    ) -> None:
        self.settings = settings
        self.rngm = rngm
        self.store = store
        self.levels: Dict[int, SavedLevel] = {}
        self._generations: Dict[int, int] = {}

    def __contains__(self, depth: int) -> bool:
        return depth in self.levels

    def biome_of(self, depth: int) -> Optional[BiomeType]:
        level = self.levels.get(depth)
        if level is None:
            return None
        try:
            return BiomeType(level.biome)
        except ValueError:
            logger.warning("Unknown biome tag %r at depth %d; using caverns", level.biome, depth)
            return BiomeType.CAVERNS

    def _lookup(self, depth: int) -> Optional[SavedLevel]:
        level = self.levels.get(depth)
        if level is None and self.store is not None:
            level = self.store.load(depth)
            if level is not None:
                self.levels[depth] = level
                logger.debug("Depth %d restored from %s", depth, self.store.base_dir)
        return level

    def _build(self, depth: int, biome: BiomeType, generation: int) -> GameMap:
        rng = self.rngm.level_rng(depth, generation)
        grid, _ = generate_level_with_stairs(self.settings, depth, rng, biome)
        return grid

    def enter(
        self,
        depth: int,
        spawn: SpawnPosition = SpawnPosition.CENTER,
        biome: BiomeType = BiomeType.CAVERNS,
    ) -> Tuple[GameMap, Visibility, Coord]:
        """Load (or generate) ``depth`` and pick the spawn tile.

        ``biome`` only applies when the level is generated here; a stored
        level keeps its own tag (see ``biome_of``).
        """
        if depth < 0:
            raise ValueError("depth must be >= 0")
        saved = self._lookup(depth)
        if saved is not None:
            grid = saved.to_map()
            visibility = dict(saved.visibility)
        else:
            grid = self._build(depth, biome, self._generations.get(depth, 0))
            visibility = {}
            self.remember(depth, grid, visibility, biome)
        pos = resolve_spawn(grid, spawn)
        logger.info("Entered depth %d (%s) at %s", depth, self.biome_of(depth).value, pos)
        return grid, visibility, pos

    def remember(
        self,
        depth: int,
        grid: GameMap,
        visibility: Mapping[Coord, VisibilityState],
        biome: BiomeType | str = BiomeType.CAVERNS,
    ) -> SavedLevel:
        tag = biome.value if isinstance(biome, BiomeType) else str(biome)
        level = SavedLevel.from_map(grid, tag, visibility)
        self.levels[depth] = level
        if self.store is not None:
            self.store.save(depth, level)
        return level

    def regenerate(
        self, depth: int, biome: BiomeType = BiomeType.CAVERNS
    ) -> Tuple[GameMap, Visibility, Coord]:
        """Replace ``depth`` with a freshly generated layout and forget its explored state."""
        generation = self._generations.get(depth, 0) + 1
        self._generations[depth] = generation
        grid = self._build(depth, biome, generation)
        self.remember(depth, grid, {}, biome)
        pos = resolve_spawn(grid, SpawnPosition.CENTER)
        logger.info("Regenerated depth %d (%s, generation %d)", depth, biome.value, generation)
        return grid, {}, pos
