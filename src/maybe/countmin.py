"""Count-Min Sketch for frequency estimation.

Count-Min Sketch is a probabilistic data structure for estimating
frequencies of elements in a data stream with limited memory.

Properties:
    - Space: O(width × depth) = O(1/ε × log(1/δ))
    - Query time: O(depth)
    - Update time: O(depth)
    - Never underestimates true count
    - May overestimate by at most εN with probability 1-δ

Row i (0-based) hashes with the derived function ``derive(i + 1)`` of a single
MurmurHash3 base. Each value is hashed once per update or query and the row
columns are obtained by recombining the two 32-bit halves of that hash.

Reference:
    Cormode, G., & Muthukrishnan, S. (2005). "An improved data stream summary:
    the count-min sketch and its applications."
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from maybe.hashing import HashFunc, bytes_of, combine, derive, murmur
from maybe.protocols import CountMinSketchConfig, SketchMetrics

logger = logging.getLogger(__name__)


class CountMinSketch:
    """Count-Min Sketch for frequency estimation.

    Provides sub-linear space frequency estimation with configurable accuracy.
    Counters only grow, so a reported count is never below the true count.
    Not thread-safe: guard shared instances with an external lock.

    Example:
        cms = CountMinSketch(CountMinSketchConfig(width=2000, depth=5))
        for item in stream:
            cms.increment(item)

        freq = cms.count("popular_item")

    Attributes:
        config: CountMinSketch configuration
    """

    def __init__(self, config: CountMinSketchConfig | None = None) -> None:
        """Initialize CountMinSketch with configuration.

        Args:
            config: CountMinSketch configuration. If None, uses defaults.
        """
        self.config = config or CountMinSketchConfig()
        self._table: list[list[int]] = [
            [0] * self.config.width for _ in range(self.config.depth)
        ]
        self._base: HashFunc = murmur(self.config.seed)
        self._seeds: tuple[int, ...] = tuple(range(1, self.config.depth + 1))
        self._total_count: int = 0

        logger.debug(
            "Created CountMinSketch(width=%d, depth=%d)",
            self.config.width,
            self.config.depth,
        )

    @property
    def hashes(self) -> list[HashFunc]:
        """The row hash functions, ``derive(i + 1)`` for row i."""
        return [derive(seed, self._base) for seed in self._seeds]

    def _columns(self, value: Any) -> list[int]:
        """Column index of ``value`` in every row."""
        h = self._base(value)
        width = self.config.width
        return [combine(h, seed) % width for seed in self._seeds]

    def increment(self, value: Any) -> None:
        """Record a single occurrence of ``value``."""
        self.add(value, 1)

    def add(self, value: Any, count: int = 1) -> None:
        """Add ``count`` occurrences of a value to the sketch.

        Every row is updated.

        Args:
            value: Any byte-representable value
            count: Number of occurrences to add (default: 1)

        Raises:
            ValueError: If count is not a non-negative integer
        """
        if isinstance(count, bool) or not isinstance(count, int):
            raise ValueError(f"count must be an integer, got {count!r}")
        if count < 0:
            raise ValueError(f"count must be non-negative, got {count}")

        for row, column in zip(self._table, self._columns(value)):
            row[column] += count
        self._total_count += count

    def add_batch(self, values: Iterable[Any]) -> None:
        """Add multiple values, skipping ``None``.

        Args:
            values: Iterable of byte-representable values
        """
        # Keyed by byte identity: 1 and 1.0 are equal dict keys but hash apart
        counts: dict[bytes, list] = {}
        for value in values:
            if value is None:
                continue
            entry = counts.setdefault(bytes_of(value), [value, 0])
            entry[1] += 1

        for value, count in counts.values():
            self.add(value, count)

    def count(self, value: Any) -> int:
        """Estimate the frequency of a value.

        Returns the minimum count across all rows, which is guaranteed to
        never underestimate the true count.

        Args:
            value: Value to estimate frequency for

        Returns:
            Estimated count (may overestimate, never underestimates)
        """
        return min(
            row[column] for row, column in zip(self._table, self._columns(value))
        )

    @property
    def total_count(self) -> int:
        """Return total number of occurrences added."""
        return self._total_count

    @property
    def error_bound(self) -> float:
        """Return the error bound as fraction of total count.

        With high probability, estimates are within:
            true_count <= estimate <= true_count + error_bound * total_count
        """
        return self.config.expected_error

    @property
    def confidence(self) -> float:
        """Return the confidence level for error bounds."""
        return self.config.confidence

    def memory_bytes(self) -> int:
        """Return memory usage in bytes.

        Returns:
            Approximate memory usage (assuming 8 bytes per counter)
        """
        return self.config.width * self.config.depth * 8

    def metrics(self) -> SketchMetrics:
        """Get current metrics about the sketch.

        Returns:
            SketchMetrics with current state
        """
        non_zero = sum(1 for row in self._table for cell in row if cell > 0)
        total_cells = self.config.width * self.config.depth

        return SketchMetrics(
            elements_added=self._total_count,
            memory_bytes=self.memory_bytes(),
            estimated_error=self.error_bound,
            fill_ratio=non_zero / total_cells,
        )

    def __repr__(self) -> str:
        return (
            f"CountMinSketch(width={self.config.width}, depth={self.config.depth}, "
            f"total={self._total_count:,}, error=ε={self.error_bound:.4f})"
        )


def create_countmin(
    width: int = 2000,
    depth: int = 5,
    epsilon: float | None = None,
    delta: float | None = None,
    seed: int = 0,
) -> CountMinSketch:
    """Factory function for creating CountMinSketch instances.

    Args:
        width: Number of counters per row
        depth: Number of rows (hash functions)
        epsilon: If provided with delta, calculates optimal dimensions
        delta: Probability of exceeding epsilon error
        seed: Hash seed

    Returns:
        Configured CountMinSketch instance
    """
    if epsilon is not None and delta is not None:
        config = CountMinSketchConfig.for_error_and_confidence(
            epsilon=epsilon, delta=delta, seed=seed
        )
    else:
        config = CountMinSketchConfig(width=width, depth=depth, seed=seed)
    return CountMinSketch(config)
