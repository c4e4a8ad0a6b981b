from .saved import SavedLevel, SCHEMA_VERSION
from .manager import LevelManager, SpawnPosition, resolve_spawn

__all__ = ["SavedLevel", "SCHEMA_VERSION", "LevelManager", "SpawnPosition", "resolve_spawn"]
