import pytest

from game_rng import GameRNG


def test_same_seed_same_draws():
    a, b = GameRNG(42), GameRNG(42)
    assert [a.get_int(0, 100) for _ in range(20)] == [b.get_int(0, 100) for _ in range(20)]


def test_unseeded_generator_keeps_its_seed():
    rng = GameRNG()
    replay = GameRNG(rng.initial_seed)
    assert rng.get_randrange(1000) == replay.get_randrange(1000)


def test_get_int_is_inclusive():
    rng = GameRNG(1)
    draws = {rng.get_int(3, 5) for _ in range(200)}
    assert draws == {3, 4, 5}


def test_get_randrange_excludes_stop():
    rng = GameRNG(1)
    assert {rng.get_randrange(3) for _ in range(200)} == {0, 1, 2}
    assert {rng.get_randrange(8, 10) for _ in range(200)} == {8, 9}


def test_invalid_ranges_raise():
    rng = GameRNG(1)
    with pytest.raises(ValueError):
        rng.get_int(5, 4)
    with pytest.raises(ValueError):
        rng.get_randrange(0)
    with pytest.raises(ValueError):
        rng.get_float(1.0, 0.0)
    with pytest.raises(ValueError):
        rng.chance(1.5)
    with pytest.raises(ValueError):
        rng.choice([])


def test_get_float_and_chance():
    rng = GameRNG(1)
    assert all(2.0 <= rng.get_float(2.0, 3.0) < 3.0 for _ in range(50))
    assert rng.chance(1.0)
    assert not rng.chance(0.0)


def test_choice():
    rng = GameRNG(1)
    assert rng.choice(["only"]) == "only"
    assert {rng.choice("abc") for _ in range(100)} == {"a", "b", "c"}


def test_state_rewinds_the_generator():
    rng = GameRNG(9)
    state = rng.get_state()
    first = [rng.get_randrange(1000) for _ in range(5)]
    rng.set_state(state)
    assert [rng.get_randrange(1000) for _ in range(5)] == first


def test_reset():
    rng = GameRNG(9)
    first = rng.get_randrange(1000)
    rng.get_randrange(1000)
    rng.reset(9)
    assert rng.initial_seed == 9
    assert rng.get_randrange(1000) == first
