import sys
from pathlib import Path

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from deepdive.map.grid import GameMap  # noqa: E402
from deepdive.map.tiles import TileType  # noqa: E402


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    # Keep developer shells from leaking overrides into tests; saves go to tmp
    for key in ("DEEPDIVE_ALGO", "DEEPDIVE_WIDTH", "DEEPDIVE_HEIGHT", "DEEPDIVE_SEED", "DEEPDIVE_FOV_RADIUS"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("DEEPDIVE_SAVE_DIR", str(tmp_path / "levels"))


@pytest.fixture
def open_grid():
    def make(width: int = 10, height: int = 10) -> GameMap:
        return GameMap(width, height, fill=TileType.FLOOR)

    return make
