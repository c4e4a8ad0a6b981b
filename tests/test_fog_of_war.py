import pytest

from deepdive.fov.fog_of_war import FogOfWar, FovSettings, VisibilityState
from deepdive.map.grid import GameMap
from deepdive.map.tiles import TileType


def test_fov_open_room_visibility(open_grid):
    grid = open_grid(9, 9)
    fow = FogOfWar(grid, FovSettings(radius=3))

    player = (4, 4)
    assert fow.update(player)

    # All tiles within Euclidean distance <= 3 are visible, the rest unseen
    for y in range(grid.height):
        for x in range(grid.width):
            d2 = (x - player[0]) ** 2 + (y - player[1]) ** 2
            expected = VisibilityState.VISIBLE if d2 <= 9 else VisibilityState.UNSEEN
            assert fow.get_state(x, y) == expected


def test_fov_wall_blocks_sight_and_wall_is_visible():
    rows = [
        "..#....",
        "..#....",
        "..#....",
        "..#....",
        "..#....",
    ]
    grid = GameMap.from_ascii(rows)

    fow = FogOfWar(grid, FovSettings(radius=10))
    fow.update((1, 2))

    # The wall tile in direct line should be visible
    assert fow.get_state(2, 2) == VisibilityState.VISIBLE

    # Tiles behind the wall on same row should be unseen (blocked)
    assert fow.get_state(4, 2) == VisibilityState.UNSEEN
    assert fow.get_state(6, 2) == VisibilityState.UNSEEN


def test_visibility_sequence_unseen_visible_seen_visible(open_grid):
    grid = open_grid(20, 5)
    fow = FogOfWar(grid, FovSettings(radius=3))
    tile = (10, 2)

    fow.update((0, 2))
    assert fow.get_state(*tile) == VisibilityState.UNSEEN

    fow.update((8, 2))
    assert fow.get_state(*tile) == VisibilityState.VISIBLE

    fow.update((19, 2))
    assert fow.get_state(*tile) == VisibilityState.SEEN

    fow.update((0, 2))
    assert fow.get_state(*tile) == VisibilityState.SEEN

    fow.update((11, 2))
    assert fow.get_state(*tile) == VisibilityState.VISIBLE


def test_seen_tiles_never_revert_to_unseen(open_grid):
    grid = open_grid(7, 7)
    fow = FogOfWar(grid, FovSettings(radius=2))

    fow.update((3, 3))
    assert fow.get_state(5, 3) == VisibilityState.VISIBLE

    fow.update((0, 0))
    assert fow.get_state(5, 3) == VisibilityState.SEEN
    assert fow.get_state(6, 6) == VisibilityState.UNSEEN

    for pos in ((0, 6), (6, 6), (6, 0), (0, 0)):
        fow.update(pos)
        assert fow.get_state(5, 3) != VisibilityState.UNSEEN


def test_update_only_when_something_changed(open_grid):
    fow = FogOfWar(open_grid(10, 10), FovSettings(radius=4))
    assert fow.update((5, 5))
    assert not fow.update((5, 5))
    assert fow.update((5, 6))


def test_incremental_update_matches_full_recompute():
    grid = GameMap.from_ascii([
        "....................",
        "......#.............",
        "......#.....###.....",
        "......#.............",
        ".............~......",
        "....####............",
        "....................",
        "..........#.........",
    ])
    walk = [(1, 1), (2, 1), (3, 2), (8, 3), (9, 4), (15, 6), (15, 7), (2, 7)]
    incremental = FogOfWar(grid, FovSettings(radius=5))
    full = FogOfWar(grid, FovSettings(radius=5))
    for pos in walk:
        incremental.update(pos)
        # Re-attaching the grid forces a whole-map scan
        full.on_map_changed(grid, full.capture())
        full.update(pos)
        assert full.capture() == incremental.capture()


def test_debug_reveal_toggle(open_grid):
    grid = open_grid(30, 30)
    fow = FogOfWar(grid, FovSettings(radius=2))
    fow.update((1, 1))
    misses = fow.stats().misses

    assert fow.toggle_debug_reveal() is True
    assert fow.update((1, 1))
    assert len(fow.visible_tiles()) == 30 * 30
    # Reveal-all does not touch the LOS cache
    assert fow.stats().misses == misses
    assert not fow.update((1, 1))

    assert fow.toggle_debug_reveal() is False
    assert fow.update((1, 1))
    assert fow.get_state(29, 29) == VisibilityState.SEEN
    assert fow.get_state(1, 1) == VisibilityState.VISIBLE


def test_cache_hits_accumulate_on_revisit(open_grid):
    fow = FogOfWar(open_grid(15, 15), FovSettings(radius=4))
    fow.update((7, 7))
    first = fow.stats()
    assert first.misses > 0 and first.hits == 0
    fow.update((7, 8))
    fow.update((7, 7))
    assert fow.stats().hits > 0
    assert any("Hit rate" in line for line in fow.format_report())


def test_on_map_changed_restores_sparse_visibility(open_grid):
    fow = FogOfWar(open_grid(4, 4), FovSettings(radius=1))
    fow.update((1, 1))
    assert fow.stats().size > 0

    grid2 = open_grid(6, 3)
    fow.on_map_changed(grid2, {(5, 2): VisibilityState.SEEN, (9, 9): VisibilityState.SEEN})
    assert fow.stats().size == 0
    assert fow.stats().hits == 0 and fow.stats().misses == 0
    assert fow.get_state(5, 2) == VisibilityState.SEEN
    assert fow.get_state(0, 0) == VisibilityState.UNSEEN
    with pytest.raises(IndexError):
        fow.get_state(5, 4)

    assert fow.update((0, 0))
    assert fow.get_state(0, 0) == VisibilityState.VISIBLE


def test_capture_only_holds_discovered_tiles(open_grid):
    fow = FogOfWar(open_grid(10, 1), FovSettings(radius=2))
    fow.update((0, 0))
    snap = fow.capture()
    assert set(snap) == {(0, 0), (1, 0), (2, 0)}
    assert all(state == VisibilityState.VISIBLE for state in snap.values())


def test_invalid_parameters():
    with pytest.raises(ValueError):
        FovSettings(radius=-1)

    fow = FogOfWar(GameMap(3, 3))
    with pytest.raises(ValueError):
        fow.update((-1, 0))


def test_walls_block_but_water_does_not():
    grid = GameMap.from_ascii([
        ".~.#..",
    ])
    fow = FogOfWar(grid, FovSettings(radius=10))
    fow.update((0, 0))
    assert fow.get_state(2, 0) == VisibilityState.VISIBLE
    assert fow.get_state(3, 0) == VisibilityState.VISIBLE
    assert fow.get_state(4, 0) == VisibilityState.UNSEEN
    assert grid.get(1, 0) == TileType.WATER
