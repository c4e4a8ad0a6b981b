from deepdive.config import GenerationSettings, Settings, load_settings
from deepdive.dungeon.biome import BiomeType
from deepdive.explore.controllers import TravelState
from deepdive.fov.fog_of_war import FovSettings, VisibilityState
from deepdive.fov.los import CacheStats
from deepdive.game import GameSession
from deepdive.map.tiles import TileType
from deepdive.save.store import LevelStore


def make_session(seed=5150, depth=1, **kwargs):
    settings = Settings(generation=GenerationSettings(seed=seed), fov=FovSettings(radius=6))
    return GameSession(settings, depth=depth, **kwargs)


def test_session_starts_with_visible_player_tile():
    session = make_session()
    x, y = session.player
    assert session.is_within_bounds(x, y)
    assert session.get_tile(x, y).is_walkable
    assert session.visibility(x, y) == VisibilityState.VISIBLE
    assert isinstance(session.has_wall_below(x, y), bool)


def test_manual_move_updates_fog_and_cancels_controller():
    session = make_session()
    session.start_autoexplore()
    assert session.controller is not None
    moved = False
    for dx, dy in ((1, 0), (-1, 0), (0, 1), (0, -1)):
        if session.move(dx, dy):
            moved = True
            break
    assert moved
    assert session.controller is None
    assert session.visibility(*session.player) == VisibilityState.VISIBLE


def test_autoexplore_until_exhausted_then_reports_explored():
    session = make_session()
    assert session.start_autoexplore()
    ticks = 0
    while session.controller is not None and ticks < 5000:
        session.tick()
        ticks += 1
    assert session.controller is None
    assert session.find_nearest_unexplored() is None
    assert not session.start_autoexplore()


def test_travel_to_discovered_stairs_and_descend():
    session = make_session(depth=1)
    session.toggle_debug_reveal()
    state = session.travel_to_stairs(TileType.STAIR_DOWN)
    assert state == TravelState.TRAVELLING
    while session.controller is not None:
        session.tick()
    assert session.player == session.grid.stair_down_pos

    first_level = session.grid.tiles
    assert session.use_stairs()
    assert session.depth == 2
    assert session.player == session.grid.stair_up_pos
    assert session.grid.tiles != first_level

    # Going back up restores the level and lands on its down stairs
    assert session.use_stairs()
    assert session.depth == 1
    assert session.grid.tiles == first_level
    assert session.player == session.grid.stair_down_pos


def test_debug_reveal_round_trip():
    session = make_session()
    assert session.toggle_debug_reveal() is True
    w, h = session.grid.width, session.grid.height
    assert session.visibility(w - 1, h - 1) == VisibilityState.VISIBLE
    assert session.toggle_debug_reveal() is False
    assert session.visibility(w - 1, h - 1) == VisibilityState.SEEN


def test_cache_stats_and_report():
    session = make_session()
    stats = session.cache_stats()
    assert isinstance(stats, CacheStats)
    assert stats.misses > 0
    lines = session.report_cache_stats()
    assert lines[0] == "LOS cache statistics:"


def test_use_stairs_off_stairs_does_nothing():
    session = make_session()
    # Centre spawns always land on plain floor
    assert session.get_tile(*session.player) == TileType.FLOOR
    assert not session.use_stairs()
    assert session.depth == 1


def test_regenerate_and_cycle_biome():
    session = make_session()
    before = list(session.grid.tiles)
    session.regenerate()
    assert session.grid.tiles != before
    # Memory of the old layout is gone; only what is in view now counts
    assert all(state == VisibilityState.VISIBLE for state in session.fog.capture().values())

    assert session.cycle_biome() == BiomeType.CINDER_GAOL
    assert session.levels.biome_of(session.depth) == BiomeType.CINDER_GAOL


def test_path_and_search_requests():
    session = make_session()
    start = session.player
    assert session.find_path(start, start) == []
    target = session.find_nearest_unexplored()
    assert target is not None
    path = session.find_path(start, target)
    assert path and path[-1] == target
    assert session.find_nearest_discovered_stairwell(start, TileType.STAIR_UP) in (None, session.grid.stair_up_pos)


def test_session_writes_levels_to_store(tmp_path):
    store = LevelStore(tmp_path)
    session = make_session(store=store)
    assert store.has(1)
    session.toggle_debug_reveal()
    session.travel_to_stairs(TileType.STAIR_DOWN)
    while session.controller is not None:
        session.tick()
    session.use_stairs()
    saved = store.load(1)
    assert saved is not None
    assert saved.visibility


def test_configured_save_dir_receives_levels(tmp_path):
    path = tmp_path / "settings.yaml"
    save_dir = tmp_path / "mysaves"
    path.write_text(
        f"generation:\n  seed: 77\n  width: 40\n  height: 30\nsave_dir: {save_dir.as_posix()}\n",
        encoding="utf-8",
    )
    session = GameSession(load_settings(path, apply_env=False), depth=2)
    assert session.levels.store is not None
    assert session.levels.store.base_dir == save_dir
    assert (save_dir / "level_002.json").exists()


def test_default_store_follows_save_dir_env(tmp_path):
    session = make_session()
    # conftest points DEEPDIVE_SAVE_DIR at tmp_path / "levels"
    assert session.levels.store.base_dir == tmp_path / "levels"
    assert session.levels.store.has(1)
