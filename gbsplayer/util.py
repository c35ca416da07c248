"""Random helpers used for subsong ordering."""

from __future__ import annotations

import random
from collections.abc import MutableSequence
from typing import Any


def rand_long(rng: random.Random, maximum: int) -> int:
    """Return a random integer in [0, maximum)."""
    return int(maximum * rng.random())


def shuffle(items: MutableSequence[Any], rng: random.Random) -> None:
    """Shuffle ``items`` in place.

    The swap partner is always drawn from strictly earlier positions, so
    every element leaves its original place.
    """
    for i in range(len(items) - 1, 0, -1):
        j = rand_long(rng, i)
        items[i], items[j] = items[j], items[i]