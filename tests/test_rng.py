from lizard.utils.rng import SeededRNG


def test_same_seed_gives_same_draws():
    first, second = SeededRNG(42), SeededRNG(42)
    assert [first.random() for _ in range(5)] == [second.random() for _ in range(5)]
    assert [first.randint(0, 3) for _ in range(20)] == [second.randint(0, 3) for _ in range(20)]


def test_randint_is_inclusive():
    rng = SeededRNG(0)
    assert {rng.randint(0, 3) for _ in range(200)} == {0, 1, 2, 3}
