from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

from platformdirs import PlatformDirs

from deepdive.exceptions import LevelDecodeError, LevelStoreError
from deepdive.level.saved import SavedLevel
from deepdive.utils.fs import atomic_write_json, ensure_dir

logger = logging.getLogger(__name__)

ENV_SAVE_DIR = "DEEPDIVE_SAVE_DIR"

__all__ = ["LevelStore", "LevelStoreError", "LevelDecodeError", "default_save_dir"]


def default_save_dir() -> Path:
    """DEEPDIVE_SAVE_DIR if set, else the platform user data dir + /levels."""
    override = os.environ.get(ENV_SAVE_DIR)
    if override:
        return Path(override)
    d = PlatformDirs(appname="deepdive", appauthor=False)
    return Path(d.user_data_dir) / "levels"


class LevelStore:
    """One JSON file per depth under ``base_dir``.

    Writes are atomic, so a crash mid-save leaves the previous file intact.
    """

    def __init__(self, base_dir: Optional[Path | str] = None) -> None:
        self.base_dir = Path(base_dir) if base_dir is not None else default_save_dir()
        logger.debug("LevelStore at %s", self.base_dir)

    def path_for(self, depth: int) -> Path:
        if depth < 0:
            raise ValueError("depth must be >= 0")
        return self.base_dir / f"level_{depth:03d}.json"

    def has(self, depth: int) -> bool:
        return self.path_for(depth).exists()

    def save(self, depth: int, level: SavedLevel) -> Path:
        path = self.path_for(depth)
        try:
            ensure_dir(self.base_dir)
            atomic_write_json(path, level.to_dict())
        except OSError as e:
            raise LevelStoreError(f"Failed to write level {depth} to {path}: {e}") from e
        logger.debug("Saved depth %d to %s", depth, path)
        return path

    def load(self, depth: int) -> Optional[SavedLevel]:
        path = self.path_for(depth)
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise LevelStoreError(f"Failed to read level {depth} from {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise LevelDecodeError(f"Level file {path} is not valid JSON") from e
        level = SavedLevel.from_dict(data)
        logger.debug("Loaded depth %d from %s", depth, path)
        return level

    def clear(self) -> int:
        """Delete every saved level; returns how many files were removed."""
        if not self.base_dir.exists():
            return 0
        removed = 0
        for path in sorted(self.base_dir.glob("level_*.json")):
            try:
                path.unlink()
                removed += 1
            except OSError as e:
                raise LevelStoreError(f"Failed to remove {path}: {e}") from e
        logger.info("Cleared %d saved levels from %s", removed, self.base_dir)
        return removed
