"""Bit-vector sizing for a single filter generation."""

from __future__ import annotations

import math

from ..core.errors import ConfigurationError

# Truncated constants shared with the Lua scripts so both sides floor identically.
LN2 = 0.69314718055995
LN2_SQUARED = 0.4804530139182

# SETBIT offsets are limited to 2^32 - 1.
MAX_BITS = 2**32


def raw_parameters(capacity: float, error_rate: float, generation: int) -> tuple[int, int]:
    """Unchecked sizing formula; may return zero bits or hashes."""
    bits = math.floor(-(capacity * math.log(error_rate * math.pow(0.5, generation))) / LN2_SQUARED)
    return bits, math.floor(LN2 * bits / capacity)


def optimal_parameters(capacity: float, error_rate: float, generation: int = 0) -> tuple[int, int]:
    """
    Compute the bit-vector length and hash count for one generation.

    The error-rate budget is discounted by ``0.5 ** generation`` so the
    compounded false-positive probability of a scaling filter stays bounded
    by ``error_rate``. Generation 0 gives the undiscounted textbook sizing.

    Args:
        capacity: Number of elements the generation is sized for
        error_rate: Target false-positive probability (0 < p < 1)
        generation: Generation index, 0 for the nominal sizing

    Returns:
        Tuple of (bits, hashes)

    Raises:
        ConfigurationError: If the inputs produce a degenerate filter
    """
    if capacity <= 0:
        raise ConfigurationError("capacity must be positive", {"capacity": capacity})
    if error_rate <= 0 or error_rate >= 1:
        raise ConfigurationError(
            "error_rate must be between 0 and 1", {"error_rate": error_rate}
        )
    if generation < 0:
        raise ConfigurationError("generation must be >= 0", {"generation": generation})

    bits, hashes = raw_parameters(capacity, error_rate, generation)
    if bits < 1 or hashes < 1:
        raise ConfigurationError(
            "capacity and error_rate produce an empty filter",
            {"capacity": capacity, "error_rate": error_rate, "bits": bits, "hashes": hashes},
        )
    return bits, hashes
