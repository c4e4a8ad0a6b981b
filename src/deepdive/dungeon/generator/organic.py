from __future__ import annotations
import logging
import math
import random
from dataclasses import dataclass
from typing import Dict, List, Sequence

from ..biome import MapGenParams
from ..connectivity import enforce_mask, ensure_connected
from ...map.grid import GameMap
from ...map.mask import BoundaryMask, boundary_mask
from ...map.tiles import Coord, TileType
from .base import MapGenerator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoundingBox:
    x: int
    y: int
    width: int
    height: int

    @classmethod
    def around(cls, cells: Sequence[Coord]) -> "BoundingBox":
        xs = [c[0] for c in cells]
        ys = [c[1] for c in cells]
        return cls(min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys))


@dataclass(frozen=True)
class WallDivision:
    start: Coord
    end: Coord
    is_horizontal: bool

    @property
    def length(self) -> int:
        if self.is_horizontal:
            return self.end[0] - self.start[0]
        return self.end[1] - self.start[1]

    def cells(self) -> List[Coord]:
        if self.is_horizontal:
            y = self.start[1]
            return [(x, y) for x in range(self.start[0], self.end[0] + 1)]
        x = self.start[0]
        return [(x, y) for y in range(self.start[1], self.end[1] + 1)]


def grow_boundary(
    width: int,
    height: int,
    mask: BoundaryMask,
    rng: random.Random,
    *,
    min_cells: int = 300,
    max_cells: int = 400,
    compact_radius: float = 12.0,
    accept_probability: float = 0.7,
    sample_size: int = 8,
) -> List[Coord]:
    """Grow an organic blob of cells outward from the grid centre.

    Each step samples up to ``sample_size`` frontier cells and picks one.
    Cells closer than ``compact_radius`` to the centre are always accepted,
    farther ones only with ``accept_probability``, which keeps the blob round.
    Growth stops at a target size drawn from [min_cells, max_cells) or when
    the frontier runs dry. The frontier never leaves the mask nor touches
    the outer frame.
    """
    if accept_probability <= 0.0:
        raise ValueError("accept_probability must be > 0")
    cx, cy = width // 2, height // 2
    target = rng.randrange(min_cells, max_cells) if max_cells > min_cells else min_cells

    active: Dict[Coord, None] = {(cx, cy): None}
    frontier: Dict[Coord, None] = {}

    def extend_frontier(x: int, y: int) -> None:
        for dx, dy in ((0, 1), (1, 0), (0, -1), (-1, 0)):
            nx, ny = x + dx, y + dy
            if 0 < nx < width - 1 and 0 < ny < height - 1 and mask.contains(nx, ny):
                if (nx, ny) not in active:
                    frontier[(nx, ny)] = None

    extend_frontier(cx, cy)
    while len(active) < target and frontier:
        candidates = list(frontier)
        sample = rng.sample(candidates, min(sample_size, len(candidates)))
        nx, ny = sample[rng.randrange(len(sample))]
        dist = math.hypot(nx - cx, ny - cy)
        if dist < compact_radius or rng.random() < accept_probability:
            active[(nx, ny)] = None
            del frontier[(nx, ny)]
            extend_frontier(nx, ny)

    logger.debug("Boundary grown to %d cells (target %d)", len(active), target)
    return list(active)


def plan_divisions(cells: Sequence[Coord], count: int, rng: random.Random) -> List[WallDivision]:
    """Pick ``count`` straight walls across the blob's bounding box, each at least 3 cells from its edges."""
    bbox = BoundingBox.around(cells)
    divisions: List[WallDivision] = []
    for _ in range(count):
        is_horizontal = rng.random() < 0.5
        if is_horizontal:
            lo, hi = bbox.y + 3, bbox.y + bbox.height - 3
            if hi <= lo:
                continue
            y = rng.randrange(lo, hi)
            divisions.append(WallDivision((bbox.x, y), (bbox.x + bbox.width, y), True))
        else:
            lo, hi = bbox.x + 3, bbox.x + bbox.width - 3
            if hi <= lo:
                continue
            x = rng.randrange(lo, hi)
            divisions.append(WallDivision((x, bbox.y), (x, bbox.y + bbox.height), False))
    return divisions


def apply_divisions(grid: GameMap, divisions: Sequence[WallDivision]) -> int:
    """Write WALL along each division, over existing FLOOR only."""
    walled = 0
    for division in divisions:
        for x, y in division.cells():
            if grid.is_within_bounds(x, y) and grid.get(x, y) == TileType.FLOOR:
                grid.set(x, y, TileType.WALL)
                walled += 1
    return walled


def punch_doorways(
    grid: GameMap,
    divisions: Sequence[WallDivision],
    blob: Dict[Coord, None],
    rng: random.Random,
) -> int:
    """Punch 1-2 doorways of width 1-3 through every division.

    Doorways start at least 2 cells from either end of the wall. Only cells
    that belong to the blob are turned back into floor.
    """
    opened = 0
    for division in divisions:
        line = division.cells()
        for _ in range(rng.randint(1, 2)):
            door_width = rng.randint(1, 3)
            hi = division.length - (door_width + 2)
            if hi <= 2:
                continue
            offset = rng.randrange(2, hi)
            for x, y in line[offset:offset + door_width]:
                if (x, y) in blob and grid.get(x, y) == TileType.WALL:
                    grid.set(x, y, TileType.FLOOR)
                    opened += 1
    return opened


class CompactOrganicGenerator(MapGenerator):
    """Organic blob sliced by a few interior walls, repaired to a single region.

    Algorithm:
    - Grow a round-ish blob from the centre inside the boundary mask.
    - Fill the blob with floor.
    - Slice it with 2-4 straight walls, then punch doorways through them.
    - Tunnel every leftover region into the largest one.
    - Force everything outside the mask back to wall.
    """

    name = "organic"

    def generate(self, width: int, height: int, params: MapGenParams, rng: random.Random) -> List[TileType]:
        mask = boundary_mask(width, height)
        grid = GameMap(width, height)

        cells = grow_boundary(
            width,
            height,
            mask,
            rng,
            min_cells=params.min_cells,
            max_cells=params.max_cells,
            compact_radius=params.compact_radius,
            accept_probability=params.accept_probability,
        )
        blob = dict.fromkeys(cells)
        for x, y in cells:
            grid.set(x, y, TileType.FLOOR)

        count = min(rng.randint(2, 4), params.max_divisions)
        divisions = plan_divisions(cells, count, rng)
        walled = apply_divisions(grid, divisions)
        opened = punch_doorways(grid, divisions, blob, rng)

        tunnels = ensure_connected(grid, mask)
        enforce_mask(grid, mask)

        logger.debug(
            "CompactOrganicGenerator: %d cells, %d divisions (%d walled, %d reopened), %d tunnels",
            len(cells),
            len(divisions),
            walled,
            opened,
            tunnels,
        )
        return grid.tiles
