"""Hashing layer shared by every sketch.

A value takes part in a sketch through its byte representation
(:func:`bytes_of`). The bytes are hashed to an unsigned 64-bit integer, by
default with MurmurHash3 (the first 64-bit word of the x64/128 variant).

Additional hash functions are derived from a single base hash by recombining
its two 32-bit halves with a multiplicative seed::

    derived(v) = hi(h) + lo(h) * seed  (mod 2**64),  h = base(v)

The derived functions are treated as independent enough for the error bounds
of Count-Min Sketch and Bloom filters. That is an assumption carried over from
the literature, not something this module proves.

Extending to new types:
    Either define ``__bytes__`` on the class, or register an encoder::

        @bytes_of.register(UUID)
        def _(value: UUID) -> bytes:
            return value.bytes
"""

from __future__ import annotations

import struct
from functools import partial, singledispatch
from typing import Any, Callable, Protocol, runtime_checkable

import mmh3
import xxhash

MASK32 = 0xFFFFFFFF
MASK64 = 0xFFFFFFFFFFFFFFFF

HashFunc = Callable[[Any], int]
"""Maps a byte-representable value to an unsigned 64-bit integer."""


@runtime_checkable
class ByteRepresentable(Protocol):
    """Any object that can describe its identity as bytes."""

    def __bytes__(self) -> bytes:
        ...


# =============================================================================
# Byte representation
# =============================================================================


@singledispatch
def bytes_of(value: Any) -> bytes:
    """Return the byte representation of ``value``.

    Args:
        value: A value of a registered type, or any object defining
            ``__bytes__``

    Returns:
        Deterministic bytes identifying the value

    Raises:
        TypeError: If the value has no byte representation
    """
    if isinstance(value, ByteRepresentable):
        return bytes(value)
    raise TypeError(
        f"{type(value).__name__!r} has no byte representation; "
        f"define __bytes__ or register it with bytes_of.register"
    )


@bytes_of.register(bytes)
@bytes_of.register(bytearray)
@bytes_of.register(memoryview)
def _bytes_of_buffer(value: bytes | bytearray | memoryview) -> bytes:
    return bytes(value)


@bytes_of.register(str)
def _bytes_of_str(value: str) -> bytes:
    return value.encode("utf-8")


@bytes_of.register(int)
def _bytes_of_int(value: int) -> bytes:
    # Signed big-endian, never shorter than 8 bytes
    length = max(8, (value.bit_length() + 8) // 8)
    return value.to_bytes(length, "big", signed=True)


@bytes_of.register(float)
def _bytes_of_float(value: float) -> bytes:
    return struct.pack(">d", value)


@bytes_of.register(tuple)
def _bytes_of_tuple(value: tuple) -> bytes:
    parts = []
    for item in value:
        encoded = bytes_of(item)
        parts.append(struct.pack(">I", len(encoded)))
        parts.append(encoded)
    return b"".join(parts)


# =============================================================================
# Base hashes
# =============================================================================


def hash64(value: Any, seed: int = 0) -> int:
    """Hash a value to an unsigned 64-bit integer with MurmurHash3.

    Args:
        value: Byte-representable value
        seed: Murmur seed (0 is the reference hash)

    Returns:
        Integer in ``[0, 2**64)``
    """
    return mmh3.hash64(bytes_of(value), seed=seed, signed=False)[0]


def murmur(seed: int = 0) -> HashFunc:
    """Return :func:`hash64` bound to ``seed``."""
    if seed == 0:
        return hash64
    return partial(hash64, seed=seed)


def xxhash64(seed: int = 0) -> HashFunc:
    """Return an xxHash64-based hash function.

    Useful for building explicit hash-function lists, e.g. one per seed.
    """

    def _xxhash64(value: Any) -> int:
        return xxhash.xxh64(bytes_of(value), seed=seed).intdigest()

    return _xxhash64


# =============================================================================
# Derived family
# =============================================================================


def split64(h: int) -> tuple[int, int]:
    """Split a 64-bit hash into its ``(lo, hi)`` 32-bit halves."""
    return h & MASK32, (h >> 32) & MASK32


def combine(h: int, seed: int) -> int:
    """Recombine the halves of ``h`` with ``seed``: ``hi + lo * seed``."""
    lo, hi = split64(h)
    return (hi + lo * seed) & MASK64


def derive(seed: int, base: HashFunc = hash64) -> HashFunc:
    """Derive a new hash function from ``base``.

    The input is hashed once with ``base``; no further hashing of the value's
    bytes takes place.

    Args:
        seed: Multiplier applied to the low half of the base hash
        base: Base hash function

    Returns:
        Hash function producing ``hi + lo * seed (mod 2**64)``
    """

    def _derived(value: Any) -> int:
        return combine(base(value), seed)

    return _derived
