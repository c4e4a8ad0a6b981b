from .base import MapGenerator
from .organic import CompactOrganicGenerator
from .open_room import OpenRoomGenerator

__all__ = ["MapGenerator", "CompactOrganicGenerator", "OpenRoomGenerator"]
