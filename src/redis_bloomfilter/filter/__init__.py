"""Pure Bloom filter math: sizing, hashing and the scaling policy."""

from .hashing import Element, base_hashes, encode_element, offsets_for
from .parameters import LN2, LN2_SQUARED, optimal_parameters
from .scaling import (
    Generation,
    count_key,
    generation,
    generation_index,
    generation_key,
    generations,
)

__all__ = [
    "Element",
    "Generation",
    "LN2",
    "LN2_SQUARED",
    "base_hashes",
    "count_key",
    "encode_element",
    "generation",
    "generation_index",
    "generation_key",
    "generations",
    "offsets_for",
    "optimal_parameters",
]
