from __future__ import annotations

from functools import lru_cache
from typing import Iterator, Tuple
import logging

from deepdive.map.tiles import Coord

logger = logging.getLogger(__name__)


class BoundaryMask:
    """Elliptical playable area for a given map size.

    A cell is inside when its centre lies within the ellipse centred on the
    grid with semi-axes ``width/2 - 1`` and ``height/2 - 1``; the outer
    frame of the grid is therefore always outside. Instances are immutable;
    use :func:`boundary_mask` to get the shared one for a size.
    """

    def __init__(self, width: int, height: int) -> None:
        if width < 3 or height < 3:
            raise ValueError("BoundaryMask needs at least a 3x3 grid")
        self.width = width
        self.height = height
        cx = (width - 1) / 2.0
        cy = (height - 1) / 2.0
        rx = max(width / 2.0 - 1.0, 0.5)
        ry = max(height / 2.0 - 1.0, 0.5)
        inside = []
        for y in range(height):
            for x in range(width):
                nx = (x - cx) / rx
                ny = (y - cy) / ry
                inside.append(nx * nx + ny * ny <= 1.0)
        self._inside: Tuple[bool, ...] = tuple(inside)
        self.cell_count = sum(self._inside)
        logger.debug("BoundaryMask built: %dx%d, %d cells inside", width, height, self.cell_count)

    def contains(self, x: int, y: int) -> bool:
        if not (0 <= x < self.width and 0 <= y < self.height):
            return False
        return self._inside[y * self.width + x]

    def outside_cells(self) -> Iterator[Coord]:
        w = self.width
        for i, inside in enumerate(self._inside):
            if not inside:
                yield i % w, i // w

    def __repr__(self) -> str:
        return f"BoundaryMask({self.width}x{self.height}, inside={self.cell_count})"


@lru_cache(maxsize=8)
def boundary_mask(width: int, height: int) -> BoundaryMask:
    """Mask for a map size, built once and reused."""
    return BoundaryMask(width, height)
