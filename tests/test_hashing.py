"""Tests for the hashing layer shared by all sketches.

This module tests:
    - Byte representations of built-in and user types
    - The MurmurHash3 and xxHash64 base hashes
    - The derived hash family
"""

import struct

import mmh3
import pytest
import xxhash

from maybe.hashing import (
    MASK32,
    MASK64,
    ByteRepresentable,
    bytes_of,
    combine,
    derive,
    hash64,
    murmur,
    split64,
    xxhash64,
)
from tests.values import Int32, Word


# ============================================================================
# Byte representation
# ============================================================================


class TestBytesOf:
    """Tests for bytes_of."""

    def test_str_is_utf8(self):
        assert bytes_of("abc") == b"abc"
        assert bytes_of("héllo") == "héllo".encode("utf-8")

    def test_buffers_pass_through(self):
        assert bytes_of(b"\x00\x01") == b"\x00\x01"
        assert bytes_of(bytearray(b"xy")) == b"xy"
        assert bytes_of(memoryview(b"zz")) == b"zz"

    def test_int_is_signed_big_endian(self):
        assert bytes_of(1) == b"\x00" * 7 + b"\x01"
        assert bytes_of(-1) == b"\xff" * 8
        assert bytes_of(0) == b"\x00" * 8

    def test_large_int_does_not_collide(self):
        """2**64 - 1 and -1 must not share a representation."""
        assert len(bytes_of(2**63)) == 9
        assert bytes_of(2**64 - 1) != bytes_of(-1)

    def test_float(self):
        assert bytes_of(1.5) == struct.pack(">d", 1.5)
        assert bytes_of(1.0) != bytes_of(1)

    def test_tuple_is_length_prefixed(self):
        assert bytes_of(("ab", "c")) != bytes_of(("a", "bc"))
        assert bytes_of(("a", 1)) == (
            struct.pack(">I", 1) + b"a" + struct.pack(">I", 8) + bytes_of(1)
        )

    def test_dunder_bytes(self):
        assert isinstance(Word("abc"), ByteRepresentable)
        assert bytes_of(Word("abc")) == b"abc"
        assert bytes_of(Int32(258)) == b"\x00\x00\x01\x02"

    def test_register_new_type(self):
        class Point:
            def __init__(self, x: int, y: int) -> None:
                self.x, self.y = x, y

        @bytes_of.register(Point)
        def _(value: Point) -> bytes:
            return bytes_of((value.x, value.y))

        assert bytes_of(Point(1, 2)) == bytes_of((1, 2))

    @pytest.mark.parametrize("value", [None, object(), [1, 2], {"a": 1}])
    def test_unsupported_types_raise(self, value):
        with pytest.raises(TypeError, match="no byte representation"):
            bytes_of(value)


# ============================================================================
# Base hashes
# ============================================================================


class TestBaseHashes:
    """Tests for the MurmurHash3 and xxHash64 base hashes."""

    def test_hash64_matches_murmur3_first_word(self):
        expected = mmh3.hash64(b"abc", seed=0, signed=False)[0]
        assert hash64("abc") == expected

    def test_hash64_is_deterministic_and_unsigned(self):
        for value in ["a", "b", 42, -7, 3.14, b"raw"]:
            h = hash64(value)
            assert h == hash64(value)
            assert 0 <= h <= MASK64

    def test_identical_bytes_hash_identically(self):
        assert hash64(Word("hello")) == hash64("hello") == hash64(b"hello")

    def test_seeded_murmur(self):
        assert murmur() is hash64
        assert murmur(7)("abc") == hash64("abc", seed=7)
        assert murmur(7)("abc") != hash64("abc")

    def test_xxhash64(self):
        fn = xxhash64(seed=3)
        assert fn("abc") == xxhash.xxh64(b"abc", seed=3).intdigest()
        assert 0 <= fn(12345) <= MASK64


# ============================================================================
# Derived family
# ============================================================================


class TestDerivedFamily:
    """Tests for split64, combine and derive."""

    def test_split64(self):
        lo, hi = split64(0x1234567890ABCDEF)
        assert lo == 0x90ABCDEF
        assert hi == 0x12345678

    def test_combine(self):
        h = (5 << 32) | 7
        assert combine(h, 3) == 5 + 7 * 3

    def test_combine_wraps_at_64_bits(self):
        h = MASK64
        assert combine(h, 2**33) == (MASK32 + MASK32 * 2**33) & MASK64

    def test_derive_recombines_base_hash(self):
        h = hash64("value")
        for seed in range(1, 6):
            expected = ((h >> 32) + (h & MASK32) * seed) & MASK64
            assert derive(seed)("value") == expected

    def test_derived_functions_differ(self):
        outputs = {derive(seed)("value") for seed in range(1, 6)}
        assert len(outputs) == 5

    def test_derive_from_custom_base(self):
        fn = derive(2, base=lambda value: (1 << 32) | 10)
        assert fn("anything") == 1 + 10 * 2
