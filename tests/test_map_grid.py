import pytest

from deepdive.map.grid import GameMap
from deepdive.map.tiles import TileType, manhattan


def test_tile_walkability_and_glyphs():
    assert TileType.FLOOR.is_walkable
    assert TileType.STAIR_UP.is_walkable
    assert TileType.STAIR_DOWN.is_walkable
    assert not TileType.WALL.is_walkable
    assert not TileType.WATER.is_walkable

    assert "".join(t.glyph for t in TileType) == ".#~<>"
    assert TileType.from_glyph("~") == TileType.WATER
    with pytest.raises(ValueError):
        TileType.from_glyph("?")


def test_tile_discriminants_are_stable():
    assert [int(t) for t in TileType] == [0, 1, 2, 3, 4]


def test_default_fill_is_wall_and_indexing_is_row_major():
    grid = GameMap(4, 3)
    assert all(t == TileType.WALL for t in grid.tiles)
    grid.set(3, 1, TileType.FLOOR)
    assert grid.tiles[1 * 4 + 3] == TileType.FLOOR
    assert grid.idx(3, 1) == 7


def test_out_of_bounds_access_raises_index_error():
    grid = GameMap(4, 3)
    with pytest.raises(IndexError):
        grid.get(4, 0)
    with pytest.raises(IndexError):
        grid.set(0, -1, TileType.FLOOR)
    # Queries stay safe
    assert not grid.is_within_bounds(-1, 0)
    assert not grid.is_walkable(10, 10)


def test_invalid_size():
    with pytest.raises(ValueError):
        GameMap(0, 3)
    with pytest.raises(ValueError):
        GameMap(3, 0)


def test_has_wall_below():
    grid = GameMap.from_ascii([
        "...",
        ".#.",
        "...",
    ])
    assert grid.has_wall_below(1, 0)
    assert not grid.has_wall_below(0, 0)
    # Bottom row has nothing below
    assert not grid.has_wall_below(1, 2)


def test_ascii_round_trip_sets_stairs():
    rows = [
        "#####",
        "#<.>#",
        "#.~.#",
        "#####",
    ]
    grid = GameMap.from_ascii(rows)
    assert grid.stair_up_pos == (1, 1)
    assert grid.stair_down_pos == (3, 1)
    assert grid.to_ascii() == rows
    assert grid.count(TileType.FLOOR) == 3

    with pytest.raises(ValueError):
        GameMap.from_ascii(["..", "."])


def test_find_nearby_floor_searches_rings():
    grid = GameMap.from_ascii([
        "#####",
        "#####",
        "####.",
        "#####",
    ])
    assert grid.find_nearby_floor(2, 2, 10) == (4, 2)
    assert grid.find_nearby_floor(2, 2, 1) is None


def test_neighbors_and_copy():
    grid = GameMap(3, 3, fill=TileType.FLOOR)
    assert sorted(grid.neighbors4(0, 0)) == [(0, 1), (1, 0)]
    clone = grid.copy()
    clone.set(1, 1, TileType.WALL)
    assert grid.get(1, 1) == TileType.FLOOR
    assert manhattan((0, 0), (2, 1)) == 3
