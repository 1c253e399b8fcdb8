"""Bloom Filter for set membership testing.

A Bloom filter is a space-efficient probabilistic data structure for
testing whether an element is a member of a set. False positive matches
are possible, but false negatives are not.

Properties:
    - Space: m bits, fixed at construction
    - Query time: O(k) where k = number of hash positions
    - Insert time: O(k)
    - No false negatives
    - False positives occur with probability ~ fill_ratio^k
    - No deletion: bits are only ever set

Two hashing modes are supported:
    - Double hashing (default): one 64-bit MurmurHash3 value is split into
      32-bit halves and position i (1..k) is ((lo + i*hi) mod 2^32) mod m.
    - Multi-hash: a caller supplied list of hash functions, one position per
      function, hash_i(value) mod m.

Reference:
    Bloom, B. H. (1970). "Space/time trade-offs in hash coding with
    allowable errors."
    Kirsch, A., & Mitzenmacher, M. (2006). "Less hashing, same performance:
    building a better Bloom filter."
"""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Iterator, Sequence

from maybe.errors import InvalidConfigurationError
from maybe.hashing import MASK32, HashFunc, murmur, split64
from maybe.protocols import BloomFilterConfig, SketchMetrics

logger = logging.getLogger(__name__)


class BloomFilter:
    """Bloom Filter for probabilistic set membership testing.

    Never produces false negatives, but may produce false positives. Not
    thread-safe: guard shared instances with an external lock.

    Example:
        bf = BloomFilter(BloomFilterConfig(size=1 << 20, num_hashes=7))

        for item in items:
            bf.add(item)

        if bf.has(query_item):
            print("Item possibly in set")
        else:
            print("Item definitely not in set")

    Attributes:
        config: BloomFilter configuration
    """

    def __init__(
        self,
        config: BloomFilterConfig | None = None,
        *,
        hashes: Sequence[HashFunc] | None = None,
    ) -> None:
        """Initialize BloomFilter with configuration.

        Args:
            config: BloomFilter configuration. If None, uses defaults.
            hashes: Explicit hash functions (multi-hash mode). When omitted the
                filter double-hashes a single MurmurHash3 value
                ``config.num_hashes`` times.

        Raises:
            InvalidConfigurationError: If ``hashes`` is given but empty
        """
        self.config = config or BloomFilterConfig()

        if hashes is None:
            self._hashes: tuple[HashFunc, ...] = (murmur(self.config.seed),)
            self._double_hashing = True
            self._hash_count = self.config.num_hashes
        else:
            if len(hashes) == 0:
                raise InvalidConfigurationError(
                    "you should provide at least one hash function",
                    sketch="bloom",
                    context={"size": self.config.size},
                )
            self._hashes = tuple(hashes)
            self._double_hashing = False
            self._hash_count = len(self._hashes)

        self._size: int = self.config.size
        self._bits: bytearray = bytearray((self._size + 7) // 8)

        logger.debug(
            "Created BloomFilter(size=%d, hashes=%d, mode=%s)",
            self._size,
            self._hash_count,
            "double" if self._double_hashing else "multi",
        )

    @classmethod
    def with_hashes(
        cls,
        size: int,
        hashes: Sequence[HashFunc],
        name: str = "",
    ) -> "BloomFilter":
        """Create a filter that uses caller supplied hash functions.

        Args:
            size: Number of bits
            hashes: One hash function per bit position

        Raises:
            InvalidConfigurationError: If ``hashes`` is empty or size invalid
        """
        if len(hashes) == 0:
            raise InvalidConfigurationError(
                "you should provide at least one hash function",
                sketch="bloom",
                context={"size": size},
            )
        config = BloomFilterConfig(size=size, num_hashes=len(hashes), name=name)
        return cls(config, hashes=hashes)

    def _positions(self, value: Any) -> Iterator[int]:
        """Yield the bit positions of a value."""
        if self._double_hashing:
            lo, hi = split64(self._hashes[0](value))
            for i in range(1, self._hash_count + 1):
                yield ((lo + i * hi) & MASK32) % self._size
        else:
            for fn in self._hashes:
                yield fn(value) % self._size

    def _set_bit(self, bit_idx: int) -> None:
        """Set a bit in the bit array."""
        self._bits[bit_idx >> 3] |= 1 << (bit_idx & 7)

    def _get_bit(self, bit_idx: int) -> bool:
        """Get a bit from the bit array."""
        return bool(self._bits[bit_idx >> 3] & (1 << (bit_idx & 7)))

    def add(self, value: Any) -> None:
        """Add a value to the filter.

        Args:
            value: Any byte-representable value
        """
        for bit_idx in self._positions(value):
            self._set_bit(bit_idx)

    def add_batch(self, values: Iterable[Any]) -> None:
        """Add multiple values, skipping ``None``.

        Args:
            values: Iterable of byte-representable values
        """
        for value in values:
            if value is not None:
                self.add(value)

    def has(self, value: Any) -> bool:
        """Test if a value might be in the set.

        Args:
            value: Value to test

        Returns:
            True if possibly present (may be false positive)
            False if definitely not present (no false negatives)
        """
        return all(self._get_bit(bit_idx) for bit_idx in self._positions(value))

    def __contains__(self, value: Any) -> bool:
        """Enable 'in' operator support."""
        return self.has(value)

    @property
    def size(self) -> int:
        """Number of bits in the filter."""
        return self._size

    @property
    def hash_count(self) -> int:
        """Number of bit positions per value."""
        return self._hash_count

    @property
    def set_bits(self) -> int:
        """Number of bits currently set."""
        return sum(bin(byte).count("1") for byte in self._bits)

    @property
    def fill_ratio(self) -> float:
        """Return the ratio of set bits to total bits."""
        return self.set_bits / self._size

    def false_positive_rate(self) -> float:
        """Estimate the current false positive probability.

        A value not in the set is reported present only if all of its k bits
        happen to be set, so the rate is approximately fill_ratio^k.

        Returns:
            Estimated false positive rate
        """
        return self.fill_ratio**self._hash_count

    def approximate_count(self) -> int:
        """Estimate how many distinct values have been added.

        Uses the Swamidass-Baldi estimate: n ~ -(m/k) * ln(1 - X/m), where X
        is the number of set bits.

        Returns:
            Estimated number of distinct insertions (``size`` once saturated)
        """
        set_bits = self.set_bits
        if set_bits >= self._size:
            return self._size
        estimate = -(self._size / self._hash_count) * math.log(1.0 - set_bits / self._size)
        return int(round(estimate))

    def memory_bytes(self) -> int:
        """Return memory usage in bytes.

        Returns:
            Size of bit array in bytes
        """
        return len(self._bits)

    def metrics(self) -> SketchMetrics:
        """Get current metrics about the filter.

        Returns:
            SketchMetrics with current state
        """
        return SketchMetrics(
            elements_added=self.approximate_count(),
            memory_bytes=self.memory_bytes(),
            estimated_error=self.false_positive_rate(),
            fill_ratio=self.fill_ratio,
        )

    def __repr__(self) -> str:
        return (
            f"BloomFilter(size={self._size:,}, hashes={self._hash_count}, "
            f"fp_rate={self.false_positive_rate():.2%})"
        )


def create_bloom_filter(
    size: int,
    num_hashes: int,
    seed: int = 0,
) -> BloomFilter:
    """Factory function for creating BloomFilter instances.

    The filter double-hashes one MurmurHash3 value ``num_hashes`` times.

    Args:
        size: Number of bits
        num_hashes: Bit positions set per value
        seed: Hash seed

    Returns:
        Configured BloomFilter instance

    Raises:
        InvalidConfigurationError: If size or num_hashes is out of range
    """
    config = BloomFilterConfig(size=size, num_hashes=num_hashes, seed=seed)
    return BloomFilter(config)
