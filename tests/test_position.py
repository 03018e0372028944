import pytest

from labyrinth.constants import MIN_DIM
from labyrinth.world.position import Dim, Direction, Pos
from labyrinth.world.specs import twist


def test_twist_known_value():
    assert twist(1, 12) == 3


def test_twist_zero_max():
    for seed in (0, 1, 17, 1000):
        assert twist(seed, 0) == 0


def test_twist_is_bounded():
    for seed in range(50):
        for max_value in range(1, 20):
            assert 0 <= twist(seed, max_value) < max_value


def test_distances():
    a, b = Pos(1, 2), Pos(4, 6)
    assert a.manhattan_distance(b) == 7
    assert a.sq_euclidean_distance(b) == 25
    assert a.euclidean_distance(b) == 5.0


def test_adjacency_and_directions():
    p = Pos(3, 3)
    assert p.is_adjacent(Pos(3, 2))
    assert not p.is_adjacent(Pos(4, 4))
    assert not p.is_adjacent(p)
    assert p.dir_to(Pos(3, 0)) is Direction.UP
    assert p.dir_to(Pos(9, 3)) is Direction.RIGHT
    assert p.dir_to(Pos(4, 4)) is None
    assert p.step_dir_to(Pos(2, 3)) is Direction.LEFT
    assert p.step_dir_to(Pos(3, 5)) is None


def test_in_dir_stops_at_negative_coordinates():
    assert Pos(0, 0).in_dir(Direction.UP) is None
    assert Pos(0, 0).in_dir(Direction.LEFT) is None
    assert Pos(0, 0).in_dir(Direction.DOWN) == Pos(0, 1)
    assert Pos(2, 2).in_dir(Direction.RIGHT) == Pos(3, 2)


def test_direction_parse():
    assert Direction.parse("Up") is Direction.UP
    with pytest.raises(ValueError):
        Direction.parse("north")


def test_dim_helpers():
    dim = Dim(9, 11)
    assert dim.even_height() == Dim(9, 10)
    assert dim.pos(dim.idx(Pos(4, 7))) == Pos(4, 7)
    assert dim.contains(Pos(8, 10))
    assert not dim.contains(Pos(9, 0))
    assert dim.is_border(Pos(0, 5))
    assert dim.is_border(Pos(4, 10))
    assert not dim.is_border(Pos(4, 5))


def test_verticalized_keeps_a_playable_width():
    assert Dim(40, 31).verticalized() == Dim(15, 71)
    assert Dim(30, 8).verticalized() == Dim(MIN_DIM, 38)
