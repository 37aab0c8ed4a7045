"""Generation policy for scaling Bloom filters.

Generation ``i`` is sized for ``2 ** (i - 1) * capacity`` elements. A new
generation starts once the insertion counter exceeds the cumulative capacity
of the previous ones; queries OR across every generation.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from .parameters import LN2, optimal_parameters


@dataclass(frozen=True)
class Generation:
    """One fixed-size tier of a scaling filter."""

    index: int
    scale: int
    bits: int
    hashes: int

    def key(self, key_name: str) -> str:
        return generation_key(key_name, self.index)


def count_key(key_name: str) -> str:
    return f"{key_name}:count"


def generation_key(key_name: str, index: int) -> str:
    return f"{key_name}:{index}"


def generation_index(capacity: int, count: int) -> int:
    """
    Return the number of generations needed for ``count`` insertions.

    Args:
        capacity: Originally configured capacity
        count: Value of the insertion counter

    Returns:
        Current generation index, at least 1
    """
    factor = math.ceil((capacity + count) / capacity)
    return max(1, math.ceil(math.log(factor) / LN2))


def generation(capacity: int, error_rate: float, index: int) -> Generation:
    scale = 2 ** (index - 1) * capacity
    bits, hashes = optimal_parameters(scale, error_rate, index)
    return Generation(index=index, scale=scale, bits=bits, hashes=hashes)


def generations(capacity: int, error_rate: float, count: int) -> list[Generation]:
    """All generations for a counter value, newest first (query order)."""
    newest = generation_index(capacity, count)
    return [generation(capacity, error_rate, i) for i in range(newest, 0, -1)]
