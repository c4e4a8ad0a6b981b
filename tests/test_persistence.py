import json

import pytest

from deepdive.exceptions import LevelDecodeError, LevelStoreError
from deepdive.fov.fog_of_war import VisibilityState
from deepdive.level.saved import SCHEMA_VERSION, SavedLevel
from deepdive.map.grid import GameMap
from deepdive.map.tiles import TileType
from deepdive.save.store import LevelStore, default_save_dir


def sample_level():
    grid = GameMap.from_ascii([
        "#####",
        "#<.>#",
        "#.~.#",
        "#####",
    ])
    vis = {
        (1, 1): VisibilityState.VISIBLE,
        (2, 1): VisibilityState.SEEN,
        (3, 3): VisibilityState.UNSEEN,
    }
    return grid, SavedLevel.from_map(grid, "cinder_gaol", vis)


def test_from_map_keeps_only_discovered_tiles():
    _, level = sample_level()
    assert set(level.visibility) == {(1, 1), (2, 1)}
    assert level.stair_up_pos == (1, 1)
    assert level.stair_down_pos == (3, 1)
    assert level.tiles[6] == int(TileType.STAIR_UP)


def test_dict_form_matches_documented_layout():
    _, level = sample_level()
    data = level.to_dict()
    assert data["schema_version"] == SCHEMA_VERSION == 1
    assert data["width"] == 5 and data["height"] == 4
    assert data["stair_up_pos"] == [1, 1]
    assert data["biome"] == "cinder_gaol"
    assert data["visibility"] == [[1, 1, "visible"], [2, 1, "seen"]]
    # JSON-safe
    json.dumps(data)


def test_restored_map_equals_original():
    grid, level = sample_level()
    restored = SavedLevel.from_dict(json.loads(json.dumps(level.to_dict())))
    assert restored == level
    again = restored.to_map()
    assert again.to_ascii() == grid.to_ascii()
    assert again.stair_down_pos == (3, 1)


@pytest.mark.parametrize(
    "mutate",
    [
        lambda d: d.update(schema_version=2),
        lambda d: d.pop("tiles"),
        lambda d: d.update(tiles=[0, 1]),
        lambda d: d.update(tiles=[9] * 20),
        lambda d: d.update(visibility=[[1, 1, "glowing"]]),
        lambda d: d.update(stair_up_pos=[1]),
    ],
)
def test_malformed_payloads_raise_decode_error(mutate):
    _, level = sample_level()
    data = level.to_dict()
    mutate(data)
    with pytest.raises(LevelDecodeError):
        SavedLevel.from_dict(data)


def test_decode_error_is_a_store_error():
    assert issubclass(LevelDecodeError, LevelStoreError)
    with pytest.raises(LevelStoreError):
        SavedLevel.from_dict([1, 2, 3])


def test_store_save_load_clear(tmp_path):
    store = LevelStore(tmp_path / "levels")
    _, level = sample_level()
    assert store.load(3) is None
    assert not store.has(3)

    path = store.save(3, level)
    assert path.name == "level_003.json"
    assert store.has(3)
    assert store.load(3) == level
    # No stray temp files from the atomic write
    assert [p.name for p in (tmp_path / "levels").iterdir()] == ["level_003.json"]

    store.save(4, level)
    assert store.clear() == 2
    assert store.load(3) is None


def test_store_rejects_corrupt_file(tmp_path):
    store = LevelStore(tmp_path)
    store.path_for(1).write_text("{not json", encoding="utf-8")
    with pytest.raises(LevelDecodeError):
        store.load(1)


def test_store_rejects_negative_depth(tmp_path):
    with pytest.raises(ValueError):
        LevelStore(tmp_path).path_for(-1)


def test_default_dir_honours_env(monkeypatch, tmp_path):
    monkeypatch.setenv("DEEPDIVE_SAVE_DIR", str(tmp_path / "custom"))
    assert default_save_dir() == tmp_path / "custom"
    assert LevelStore().base_dir == tmp_path / "custom"


def test_default_dir_uses_platform_data_dir(monkeypatch):
    monkeypatch.delenv("DEEPDIVE_SAVE_DIR", raising=False)
    path = default_save_dir()
    assert path.name == "levels"
    assert "deepdive" in str(path)
