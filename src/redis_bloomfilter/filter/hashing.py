"""Double-hashing index generation.

Offsets are derived from a single SHA-1 digest following "Less Hashing, Same
Performance: Building a Better Bloom Filter" (Kirsch & Mitzenmacher). The
Lua scripts in ``redis_bloomfilter/scripts`` implement the same formula, so a
filter written by one backend can be read by the other.
"""

from __future__ import annotations

import hashlib
from typing import Iterator, Union

from ..core.errors import ConfigurationError

Element = Union[bytes, bytearray, memoryview, str, int, float]


def encode_element(element: Element) -> bytes:
    """Encode an element exactly as redis-py sends it as a command argument."""
    if isinstance(element, (bytes, bytearray, memoryview)):
        return bytes(element)
    if isinstance(element, bool):
        # redis-py refuses booleans; keep both backends consistent
        raise ConfigurationError("boolean elements are not supported", {"element": element})
    if isinstance(element, int):
        return str(element).encode("utf-8")
    if isinstance(element, float):
        return repr(element).encode("utf-8")
    if isinstance(element, str):
        return element.encode("utf-8")
    raise ConfigurationError(
        f"unsupported element type: {type(element).__name__}",
        {"type": type(element).__name__},
    )


def base_hashes(element: Element) -> tuple[int, int, int, int]:
    """Split the first 32 hex chars of the SHA-1 digest into four 32-bit ints."""
    digest = hashlib.sha1(encode_element(element)).hexdigest()
    return (
        int(digest[0:8], 16),
        int(digest[8:16], 16),
        int(digest[16:24], 16),
        int(digest[24:32], 16),
    )


def iter_offsets(hashes: tuple[int, int, int, int], bits: int, k: int) -> Iterator[int]:
    for i in range(1, k + 1):
        yield (hashes[i % 2] + i * hashes[2 + ((i + i % 2) % 4) // 2]) % bits


def offsets_for(element: Element, bits: int, k: int) -> list[int]:
    """
    Compute the ``k`` bit offsets of an element in a vector of ``bits`` bits.

    Args:
        element: Value to hash
        bits: Length of the target bit vector
        k: Number of hash functions

    Returns:
        List of ``k`` offsets in ``[0, bits)``
    """
    return list(iter_offsets(base_hashes(element), bits, k))
