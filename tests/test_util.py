import random

import pytest

from gbsplayer.util import rand_long, shuffle


class _FixedRandom:
    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value


def test_rand_long_stays_in_range():
    rng = random.Random(1)
    values = [rand_long(rng, 10) for _ in range(2000)]
    assert all(0 <= v < 10 for v in values)
    assert set(values) == set(range(10))


def test_rand_long_bounds_from_generator():
    assert rand_long(_FixedRandom(0.0), 7) == 0
    assert rand_long(_FixedRandom(0.999999), 7) == 6


def test_rand_long_zero_maximum():
    assert rand_long(random.Random(3), 0) == 0


@pytest.mark.parametrize("seed", range(20))
def test_shuffle_is_permutation_without_fixed_points(seed):
    items = list(range(9))
    shuffle(items, random.Random(seed))
    assert sorted(items) == list(range(9))
    assert all(value != index for index, value in enumerate(items))


def test_shuffle_is_reproducible():
    first = list(range(1, 10))
    second = list(range(1, 10))
    shuffle(first, random.Random(42))
    shuffle(second, random.Random(42))
    assert first == second


@pytest.mark.parametrize("items", [[], [5]])
def test_shuffle_short_sequences_unchanged(items):
    copy = list(items)
    shuffle(copy, random.Random(0))
    assert copy == items