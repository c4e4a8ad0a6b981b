from deepdive.explore.movement import try_step
from deepdive.map.grid import GameMap


def test_move_within_bounds_and_walls():
    grid = GameMap.from_ascii([
        "..#",
        "~..",
    ])
    assert try_step(grid, (0, 0), 1, 0) == (1, 0)
    # Wall blocks
    assert try_step(grid, (1, 0), 1, 0) is None
    # Out of bounds blocks
    assert try_step(grid, (0, 0), -1, 0) is None
    assert try_step(grid, (0, 1), 0, 1) is None
    # Only walls refuse a manual step
    assert try_step(grid, (0, 0), 0, 1) == (0, 1)
