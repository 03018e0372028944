import numpy as np

from labyrinth.world.grid_index import GridIndex, GridSet
from labyrinth.world.position import Dim, Pos


def all_positions(dim):
    return [Pos(x, y) for y in range(dim.h) for x in range(dim.w)]


def test_new_index_holds_default_everywhere():
    for dim in (Dim(1, 1), Dim(7, 8), Dim(13, 4)):
        index = GridIndex(dim, 42, dtype=np.int32)
        assert all(index.get(p) == 42 for p in all_positions(dim))


def test_set_get_and_remove():
    index = GridIndex(Dim(5, 4), -1, dtype=np.int32)
    index.set(Pos(3, 2), 7)
    assert index.get(Pos(3, 2)) == 7
    assert index.get(Pos(2, 3)) == -1
    assert index.remove(Pos(3, 2)) == 7
    assert index.get(Pos(3, 2)) == -1
    assert index.remove(Pos(3, 2)) == -1


def test_clear_resets_to_default():
    index = GridIndex(Dim(4, 4), 0, dtype=np.int32)
    for p in all_positions(index.dim):
        index.set(p, 9)
    index.clear()
    assert not index.values.any()


def test_index_layout_is_row_major():
    index = GridIndex(Dim(5, 3), 0, dtype=np.int32)
    index.set(Pos(4, 1), 1)
    assert index.values[4 + 5 * 1] == 1
    grid = index.as_grid()
    assert grid.shape == (3, 5)
    assert grid[1, 4] == 1


def test_as_grid_is_a_view():
    grid_set = GridSet(Dim(4, 4))
    grid_set.as_grid()[2, 1] = True
    assert Pos(1, 2) in grid_set


def test_grid_set_membership():
    grid_set = GridSet(Dim(6, 6))
    assert grid_set.is_empty()
    assert not grid_set.is_not_empty()
    grid_set.set(Pos(5, 0), True)
    grid_set.set(Pos(0, 5), True)
    assert Pos(5, 0) in grid_set
    assert Pos(0, 0) not in grid_set
    assert grid_set.is_not_empty()
    assert grid_set.count() == 2
    assert list(grid_set.positions()) == [Pos(5, 0), Pos(0, 5)]
    assert grid_set.remove(Pos(5, 0)) is True
    assert grid_set.remove(Pos(5, 0)) is False
    assert grid_set.count() == 1
