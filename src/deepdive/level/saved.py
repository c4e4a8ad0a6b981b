from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from deepdive.exceptions import LevelDecodeError
from deepdive.fov.fog_of_war import VisibilityState
from deepdive.map.grid import GameMap
from deepdive.map.tiles import Coord, TileType

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


def _coord_or_none(value: Any) -> Optional[Coord]:
    if value is None:
        return None
    x, y = value
    return int(x), int(y)


@dataclass
class SavedLevel:
    """Everything needed to restore one level exactly as the player left it.

    ``biome`` is an opaque tag here; ``visibility`` only holds tiles that are
    not UNSEEN.
    """

    width: int
    height: int
    tiles: List[int]
    stair_up_pos: Optional[Coord] = None
    stair_down_pos: Optional[Coord] = None
    biome: str = "caverns"
    visibility: Dict[Coord, VisibilityState] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if len(self.tiles) != self.width * self.height:
            raise ValueError(
                f"tiles has {len(self.tiles)} entries, expected {self.width}x{self.height}"
            )

    @classmethod
    def from_map(
        cls,
        grid: GameMap,
        biome: str,
        visibility: Optional[Mapping[Coord, VisibilityState]] = None,
    ) -> "SavedLevel":
        sparse = {
            pos: VisibilityState(state)
            for pos, state in (visibility or {}).items()
            if state != VisibilityState.UNSEEN
        }
        return cls(
            width=grid.width,
            height=grid.height,
            tiles=[int(t) for t in grid.tiles],
            stair_up_pos=grid.stair_up_pos,
            stair_down_pos=grid.stair_down_pos,
            biome=str(biome),
            visibility=sparse,
        )

    def to_map(self) -> GameMap:
        grid = GameMap(self.width, self.height)
        grid.tiles = [TileType(t) for t in self.tiles]
        grid.stair_up_pos = self.stair_up_pos
        grid.stair_down_pos = self.stair_down_pos
        return grid

    def to_dict(self) -> Dict[str, Any]:
        vis = sorted(self.visibility.items())
        return {
            "schema_version": SCHEMA_VERSION,
            "width": self.width,
            "height": self.height,
            "tiles": list(self.tiles),
            "stair_up_pos": list(self.stair_up_pos) if self.stair_up_pos else None,
            "stair_down_pos": list(self.stair_down_pos) if self.stair_down_pos else None,
            "biome": self.biome,
            "visibility": [[x, y, state.value] for (x, y), state in vis],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SavedLevel":
        if not isinstance(data, Mapping):
            raise LevelDecodeError("Saved level must be a JSON object")
        version = data.get("schema_version")
        if version != SCHEMA_VERSION:
            raise LevelDecodeError(f"Unsupported schema_version: {version!r}")
        try:
            width = int(data["width"])
            height = int(data["height"])
            tiles = [int(TileType(int(t))) for t in data["tiles"]]
            visibility = {
                (int(x), int(y)): VisibilityState(state) for x, y, state in data.get("visibility", [])
            }
            return cls(
                width=width,
                height=height,
                tiles=tiles,
                stair_up_pos=_coord_or_none(data.get("stair_up_pos")),
                stair_down_pos=_coord_or_none(data.get("stair_down_pos")),
                biome=str(data.get("biome", "caverns")),
                visibility=visibility,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise LevelDecodeError(f"Malformed saved level: {e}") from e
