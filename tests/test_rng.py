import pytest

from ldbkit.rng import Random


def test_first_value_from_seed_one():
    assert Random(1).next() == 16807


def test_deterministic():
    a, b = Random(301), Random(301)
    assert [a.next() for _ in range(50)] == [b.next() for _ in range(50)]


@pytest.mark.parametrize("seed", [0, 2147483647])
def test_degenerate_seeds_become_one(seed):
    a, b = Random(seed), Random(1)
    assert [a.next() for _ in range(10)] == [b.next() for _ in range(10)]


def test_high_bit_ignored():
    a, b = Random(301 | 0x80000000), Random(301)
    assert [a.next() for _ in range(10)] == [b.next() for _ in range(10)]


def test_next_range():
    rnd = Random(42)
    assert all(1 <= rnd.next() <= 2147483646 for _ in range(10000))


def test_uniform_range():
    rnd = Random(7)
    values = [rnd.uniform(10) for _ in range(5000)]
    assert set(values) == set(range(10))


def test_one_in_one_always_true():
    rnd = Random(9)
    assert all(rnd.one_in(1) for _ in range(100))


def test_skewed_range():
    rnd = Random(11)
    assert all(0 <= rnd.skewed(5) < 2**5 for _ in range(5000))