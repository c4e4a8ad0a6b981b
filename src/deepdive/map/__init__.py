from .tiles import Coord, TileType, manhattan
from .grid import GameMap
from .mask import BoundaryMask, boundary_mask

__all__ = ["Coord", "TileType", "manhattan", "GameMap", "BoundaryMask", "boundary_mask"]
