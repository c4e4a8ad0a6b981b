from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Mapping, Optional, Set
import logging

from deepdive.fov.los import CacheStats, LosCache
from deepdive.map.grid import GameMap
from deepdive.map.tiles import Coord

logger = logging.getLogger(__name__)


class VisibilityState(str, Enum):
    UNSEEN = "unseen"         # never seen
    SEEN = "seen"             # seen before but not currently visible
    VISIBLE = "visible"       # currently visible


@dataclass
class FovSettings:
    radius: int = 20

    def __post_init__(self) -> None:
        if self.radius < 0:
            raise ValueError("radius must be >= 0")


class FogOfWar:
    """
    Per-tile visibility and memory over a GameMap.

    Responsibilities:
    - Marks tiles within a Euclidean radius and clear line of sight VISIBLE.
    - Downgrades tiles that drop out of view from VISIBLE to SEEN; a tile
      returns to UNSEEN only when a new grid is attached via on_map_changed.
    - Recomputes only when the viewer moved, the grid changed or a debug
      toggle is pending. A plain move scans just the bounding box of the
      old and new radius windows.
    - Memoises line-of-sight results in a symmetric LosCache that lives
      as long as the current grid.
    """

    def __init__(
        self,
        grid: GameMap,
        settings: Optional[FovSettings] = None,
        visibility: Optional[Mapping[Coord, VisibilityState]] = None,
    ) -> None:
        self.grid = grid
        self.settings = settings or FovSettings()
        self.cache = LosCache()
        self.debug_reveal_all = False
        self._debug_applied = False
        self._needs_full = True
        self._last_pos: Optional[Coord] = None
        self._states: List[VisibilityState] = []
        self._load(visibility)
        logger.debug(
            "FogOfWar initialized: %dx%d radius=%d", grid.width, grid.height, self.settings.radius
        )

    # --- state -----------------------------------------------------------

    def _load(self, visibility: Optional[Mapping[Coord, VisibilityState]]) -> None:
        self._states = [VisibilityState.UNSEEN] * (self.grid.width * self.grid.height)
        for (x, y), state in (visibility or {}).items():
            if self.grid.is_within_bounds(x, y):
                self._states[y * self.grid.width + x] = VisibilityState(state)
            else:
                logger.warning("Dropping visibility entry outside the map: (%d,%d)", x, y)

    def get_state(self, x: int, y: int) -> VisibilityState:
        if not self.grid.is_within_bounds(x, y):
            raise IndexError("Tile out of bounds")
        return self._states[y * self.grid.width + x]

    def is_discovered(self, x: int, y: int) -> bool:
        return self.get_state(x, y) != VisibilityState.UNSEEN

    def visible_tiles(self) -> Set[Coord]:
        w = self.grid.width
        return {(i % w, i // w) for i, s in enumerate(self._states) if s == VisibilityState.VISIBLE}

    def capture(self) -> Dict[Coord, VisibilityState]:
        """Sparse snapshot: only tiles that are not UNSEEN."""
        w = self.grid.width
        return {(i % w, i // w): s for i, s in enumerate(self._states) if s != VisibilityState.UNSEEN}

    # --- recomputation ---------------------------------------------------

    def update(self, viewer: Coord) -> bool:
        """
        Bring visibility up to date for a viewer standing at ``viewer``.

        Returns True when anything was recomputed, False when nothing had
        changed since the previous call.
        """
        if not self.grid.is_within_bounds(*viewer):
            raise ValueError("viewer out of bounds")

        if self.debug_reveal_all:
            if self._debug_applied:
                self._last_pos = viewer
                return False
            self._states = [VisibilityState.VISIBLE] * (self.grid.width * self.grid.height)
            self._debug_applied = True
            self._needs_full = False
            self._last_pos = viewer
            logger.debug("FogOfWar debug reveal applied to %d tiles", len(self._states))
            return True

        if not self._needs_full and viewer == self._last_pos:
            return False

        r = self.settings.radius
        vx, vy = viewer
        w, h = self.grid.width, self.grid.height
        if self._needs_full or self._last_pos is None:
            x0, y0, x1, y1 = 0, 0, w - 1, h - 1
        else:
            ox, oy = self._last_pos
            x0 = max(0, min(ox, vx) - r)
            y0 = max(0, min(oy, vy) - r)
            x1 = min(w - 1, max(ox, vx) + r)
            y1 = min(h - 1, max(oy, vy) + r)

        self._scan(viewer, x0, y0, x1, y1)
        logger.debug(
            "FOV recomputed at %s over (%d,%d)-(%d,%d)%s",
            viewer,
            x0,
            y0,
            x1,
            y1,
            " [full]" if self._needs_full else "",
        )
        self._last_pos = viewer
        self._needs_full = False
        return True

    def _scan(self, viewer: Coord, x0: int, y0: int, x1: int, y1: int) -> None:
        vx, vy = viewer
        r2 = self.settings.radius ** 2
        w = self.grid.width
        states = self._states
        for y in range(y0, y1 + 1):
            for x in range(x0, x1 + 1):
                i = y * w + x
                in_view = (x - vx) ** 2 + (y - vy) ** 2 <= r2 and self.cache.lookup(self.grid, vx, vy, x, y)
                if in_view:
                    states[i] = VisibilityState.VISIBLE
                elif states[i] == VisibilityState.VISIBLE:
                    states[i] = VisibilityState.SEEN

    def toggle_debug_reveal(self) -> bool:
        """Flip reveal-all; turning it off resumes normal FOV with a full recompute."""
        self.debug_reveal_all = not self.debug_reveal_all
        self._debug_applied = False
        self._needs_full = True
        logger.info("FOV debug reveal: %s", "ON" if self.debug_reveal_all else "OFF")
        return self.debug_reveal_all

    def on_map_changed(
        self, new_grid: GameMap, visibility: Optional[Mapping[Coord, VisibilityState]] = None
    ) -> None:
        """
        Replace the underlying grid (e.g. when switching levels).

        The LOS cache belongs to the old grid, so it is reported and
        dropped. ``visibility`` restores a remembered sparse snapshot.
        """
        self.report_cache_stats()
        self.cache.clear()
        self.grid = new_grid
        self._load(visibility)
        self._last_pos = None
        self._needs_full = True
        self._debug_applied = False
        logger.debug("FogOfWar map changed to %dx%d", new_grid.width, new_grid.height)

    # --- diagnostics -----------------------------------------------------

    def stats(self) -> CacheStats:
        return self.cache.stats()

    def format_report(self) -> List[str]:
        return self.stats().format_lines()

    def report_cache_stats(self) -> CacheStats:
        stats = self.stats()
        for line in stats.format_lines():
            logger.info("%s", line)
        return stats
