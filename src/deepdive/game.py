from __future__ import annotations

import logging
from typing import List, Optional, Union

from .config import Settings
from .dungeon.biome import BiomeType, next_debug_biome
from .dungeon.pathfinding import find_path
from .explore.controllers import (
    AutoexploreController,
    ExploreState,
    StairTravelController,
    TravelState,
)
from .explore.movement import try_step
from .explore.targets import count_unexplored, find_nearest_discovered_stairwell, find_nearest_unexplored
from .fov.fog_of_war import FogOfWar, VisibilityState
from .fov.los import CacheStats
from .level.manager import LevelManager, SpawnPosition
from .map.grid import GameMap
from .map.tiles import Coord, TileType
from .rng import RNGManager
from .save.store import LevelStore

logger = logging.getLogger(__name__)

Controller = Union[AutoexploreController, StairTravelController]


class GameSession:
    """Single entry point for the input and presentation layers.

    Owns the current level, its fog of war, the player position and at most
    one active movement controller. Every request runs to completion
    synchronously.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        store: Optional[LevelStore] = None,
        depth: int = 0,
        biome: BiomeType = BiomeType.CAVERNS,
    ) -> None:
        self.settings = settings or Settings()
        self.rngm = RNGManager(self.settings.generation.seed)
        if store is None:
            store = LevelStore(self.settings.save_dir)
        self.levels = LevelManager(self.settings.generation, self.rngm, store)
        self.depth = depth
        self.controller: Optional[Controller] = None
        grid, visibility, pos = self.levels.enter(depth, SpawnPosition.CENTER, biome)
        self.biome = self.levels.biome_of(depth) or biome
        self.grid: GameMap = grid
        self.fog = FogOfWar(grid, self.settings.fov, visibility)
        self.player: Coord = pos
        self.fog.update(self.player)

    # --- presentation queries ---------------------------------------------

    def get_tile(self, x: int, y: int) -> TileType:
        return self.grid.get(x, y)

    def is_within_bounds(self, x: int, y: int) -> bool:
        return self.grid.is_within_bounds(x, y)

    def visibility(self, x: int, y: int) -> VisibilityState:
        return self.fog.get_state(x, y)

    def has_wall_below(self, x: int, y: int) -> bool:
        return self.grid.has_wall_below(x, y)

    # --- searches -----------------------------------------------------------

    def find_path(self, start: Coord, goal: Coord) -> List[Coord]:
        return find_path(start, goal, self.grid)

    def find_nearest_unexplored(self, origin: Optional[Coord] = None) -> Optional[Coord]:
        return find_nearest_unexplored(self.grid, self.fog, origin or self.player)

    def find_nearest_discovered_stairwell(
        self, origin: Optional[Coord] = None, stair_type: TileType = TileType.STAIR_DOWN
    ) -> Optional[Coord]:
        return find_nearest_discovered_stairwell(self.grid, self.fog, origin or self.player, stair_type)

    # --- debug ----------------------------------------------------------------

    def toggle_debug_reveal(self) -> bool:
        enabled = self.fog.toggle_debug_reveal()
        self.fog.update(self.player)
        return enabled

    def cache_stats(self) -> CacheStats:
        return self.fog.stats()

    def report_cache_stats(self) -> List[str]:
        self.fog.report_cache_stats()
        return self.fog.format_report()

    # --- player actions -------------------------------------------------------

    def _step_to(self, pos: Coord) -> None:
        self.player = pos
        self.fog.update(pos)

    def move(self, dx: int, dy: int) -> bool:
        """Manual step; cancels any running controller first."""
        self.cancel()
        new_pos = try_step(self.grid, self.player, dx, dy)
        if new_pos is None:
            return False
        self._step_to(new_pos)
        return True

    def cancel(self) -> None:
        if self.controller is not None:
            self.controller.cancel()
            self.controller = None

    def _change_level(self, depth: int, spawn: SpawnPosition) -> None:
        self.levels.remember(self.depth, self.grid, self.fog.capture(), self.biome)
        grid, visibility, pos = self.levels.enter(depth, spawn, self.biome)
        self.depth = depth
        self.biome = self.levels.biome_of(depth) or self.biome
        self.grid = grid
        self.fog.on_map_changed(grid, visibility)
        self._step_to(pos)
        logger.info("Now at depth %d", depth)

    def use_stairs(self) -> bool:
        """Take the stairs under the player, if any.

        Going down lands on the next level's up stairs and vice versa.
        """
        tile = self.grid.get(*self.player)
        if tile == TileType.STAIR_DOWN:
            target, spawn = self.depth + 1, SpawnPosition.STAIR_UP
        elif tile == TileType.STAIR_UP and self.depth > 0:
            target, spawn = self.depth - 1, SpawnPosition.STAIR_DOWN
        else:
            logger.debug("No usable stairs at %s", self.player)
            return False
        self.cancel()
        self._change_level(target, spawn)
        return True

    def start_autoexplore(self) -> bool:
        self.cancel()
        remaining = count_unexplored(self.grid, self.fog)
        if remaining == 0:
            logger.info("Map fully explored!")
            return False
        self.controller = AutoexploreController(self.grid, self.fog)
        logger.info("Autoexplore enabled - %d tiles to explore", remaining)
        return True

    def travel_to_stairs(self, stair_type: TileType = TileType.STAIR_DOWN) -> TravelState:
        self.cancel()
        controller = StairTravelController(self.grid, self.fog, stair_type)
        state = controller.start(self.player)
        if state == TravelState.TRAVELLING:
            self.controller = controller
        return state

    def tick(self) -> bool:
        """Advance the active controller by one step; True if the player moved."""
        controller = self.controller
        if controller is None:
            return False
        step = controller.tick(self.player)
        if step is not None:
            self._step_to(step)
        if isinstance(controller, AutoexploreController):
            done = controller.state == ExploreState.EXHAUSTED
        else:
            done = controller.state in (TravelState.ARRIVED, TravelState.FAILED)
        if done:
            self.controller = None
        return step is not None

    # --- level control --------------------------------------------------------

    def regenerate(self) -> None:
        self.cancel()
        grid, visibility, pos = self.levels.regenerate(self.depth, self.biome)
        self.grid = grid
        self.fog.on_map_changed(grid, visibility)
        self._step_to(pos)

    def cycle_biome(self) -> BiomeType:
        self.biome = next_debug_biome(self.biome)
        logger.info("Biome switched to %s", self.biome.display_name)
        self.regenerate()
        return self.biome
