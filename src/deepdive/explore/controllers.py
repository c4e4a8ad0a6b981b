from __future__ import annotations

import logging
from collections import deque
from enum import Enum
from typing import Deque, Optional, Set

from deepdive.dungeon.pathfinding import find_path
from deepdive.explore.targets import find_nearest_discovered_stairwell, find_nearest_unexplored
from deepdive.fov.fog_of_war import FogOfWar, VisibilityState
from deepdive.map.grid import GameMap
from deepdive.map.tiles import Coord, TileType

logger = logging.getLogger(__name__)


class ExploreState(str, Enum):
    IDLE = "idle"             # no plan; next tick picks a target
    ACTIVE = "active"         # walking a path towards an unexplored tile
    EXHAUSTED = "exhausted"   # nothing reachable is left unexplored


class TravelState(str, Enum):
    IDLE = "idle"
    TRAVELLING = "travelling"
    ARRIVED = "arrived"
    FAILED = "failed"


class TravelFailure(str, Enum):
    NOT_FOUND = "not_found"
    NO_PATH = "no_path"
    BLOCKED = "blocked"


class AutoexploreController:
    """
    Walks towards the nearest unexplored floor tile, one step per tick.

    The controller only reads the grid and the fog; the caller applies the
    returned step and updates the fog before the next tick. Dropping the
    controller at any point is a complete cancellation.
    """

    def __init__(self, grid: GameMap, fog: FogOfWar) -> None:
        self.grid = grid
        self.fog = fog
        self.state = ExploreState.IDLE
        self.target: Optional[Coord] = None
        self.path: Deque[Coord] = deque()
        self.excluded: Set[Coord] = set()
        self.steps_taken = 0

    def cancel(self) -> None:
        self.target = None
        self.path.clear()
        if self.state == ExploreState.ACTIVE:
            self.state = ExploreState.IDLE

    def _acquire(self, position: Coord) -> bool:
        while True:
            target = find_nearest_unexplored(self.grid, self.fog, position, self.excluded)
            if target is None:
                return False
            path = find_path(position, target, self.grid)
            if path:
                self.target = target
                self.path = deque(path)
                logger.debug("Autoexplore target %s (%d steps)", target, len(path))
                return True
            logger.debug("Autoexplore target %s unreachable; excluding it", target)
            self.excluded.add(target)

    def tick(self, position: Coord) -> Optional[Coord]:
        """Next tile to step onto, or None when idle-blocked or exhausted."""
        if self.state == ExploreState.EXHAUSTED:
            return None

        # The target may have been revealed from a distance since the last tick
        if self.target is not None and self.fog.get_state(*self.target) != VisibilityState.UNSEEN:
            self.cancel()

        if not self.path:
            if not self._acquire(position):
                self.state = ExploreState.EXHAUSTED
                self.target = None
                logger.info("Autoexplore finished after %d steps", self.steps_taken)
                return None
            self.state = ExploreState.ACTIVE

        step = self.path[0]
        if not self.grid.is_walkable(*step):
            logger.debug("Autoexplore step %s blocked; re-targeting next tick", step)
            self.cancel()
            return None

        self.path.popleft()
        self.steps_taken += 1
        if not self.path:
            self.target = None
            self.state = ExploreState.IDLE
        return step


class StairTravelController:
    """Paths to the nearest discovered stair of one type and walks it step by step."""

    def __init__(self, grid: GameMap, fog: FogOfWar, stair_type: TileType) -> None:
        if not stair_type.is_stair:
            raise ValueError(f"{stair_type!r} is not a stair tile")
        self.grid = grid
        self.fog = fog
        self.stair_type = stair_type
        self.state = TravelState.IDLE
        self.failure: Optional[TravelFailure] = None
        self.destination: Optional[Coord] = None
        self.path: Deque[Coord] = deque()

    def _fail(self, reason: TravelFailure) -> TravelState:
        self.state = TravelState.FAILED
        self.failure = reason
        self.path.clear()
        logger.info("Travel to %s failed: %s", self.stair_type.name, reason.value)
        return self.state

    def start(self, position: Coord) -> TravelState:
        self.failure = None
        self.destination = find_nearest_discovered_stairwell(self.grid, self.fog, position, self.stair_type)
        if self.destination is None:
            return self._fail(TravelFailure.NOT_FOUND)
        if self.destination == position:
            self.state = TravelState.ARRIVED
            return self.state
        path = find_path(position, self.destination, self.grid)
        if not path:
            return self._fail(TravelFailure.NO_PATH)
        self.path = deque(path)
        self.state = TravelState.TRAVELLING
        logger.info("Travelling to %s at %s (%d steps)", self.stair_type.name, self.destination, len(path))
        return self.state

    def tick(self, position: Coord) -> Optional[Coord]:
        if self.state != TravelState.TRAVELLING:
            return None
        step = self.path[0]
        if not self.grid.is_walkable(*step):
            self._fail(TravelFailure.BLOCKED)
            return None
        self.path.popleft()
        if not self.path:
            self.state = TravelState.ARRIVED
        return step

    def cancel(self) -> None:
        self.path.clear()
        if self.state == TravelState.TRAVELLING:
            self.state = TravelState.IDLE
