"""Factory for creating probabilistic data structures.

Provides a unified interface for creating sketches with appropriate
configurations for different use cases.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import Any, Sequence

from maybe.bloom import BloomFilter, create_bloom_filter
from maybe.countmin import CountMinSketch, create_countmin
from maybe.errors import InvalidConfigurationError
from maybe.hashing import HashFunc
from maybe.hyperloglog import HyperLogLog, create_hyperloglog
from maybe.protocols import (
    BloomFilterConfig,
    CountMinSketchConfig,
    HyperLogLogConfig,
    Sketch,
    SketchConfig,
)


class SketchType(Enum):
    """Available sketch types."""

    HYPERLOGLOG = auto()
    COUNTMIN = auto()
    BLOOM = auto()


class SketchPreset(Enum):
    """Preset configurations for common use cases."""

    # Low memory, lower accuracy
    MINIMAL = auto()
    # Balanced memory/accuracy
    STANDARD = auto()
    # Higher memory, better accuracy
    HIGH_ACCURACY = auto()
    # Maximum accuracy, most memory
    MAXIMUM = auto()


# Preset configurations for each sketch type
_PRESETS: dict[SketchType, dict[SketchPreset, SketchConfig]] = {
    SketchType.HYPERLOGLOG: {
        SketchPreset.MINIMAL: HyperLogLogConfig(precision=10),  # ~1KB, ±3.25%
        SketchPreset.STANDARD: HyperLogLogConfig(precision=12),  # ~4KB, ±1.63%
        SketchPreset.HIGH_ACCURACY: HyperLogLogConfig(precision=14),  # ~16KB, ±0.81%
        SketchPreset.MAXIMUM: HyperLogLogConfig(precision=16),  # ~64KB, ±0.41%
    },
    SketchType.COUNTMIN: {
        SketchPreset.MINIMAL: CountMinSketchConfig(width=500, depth=3),
        SketchPreset.STANDARD: CountMinSketchConfig(width=2000, depth=5),
        SketchPreset.HIGH_ACCURACY: CountMinSketchConfig(width=10000, depth=7),
        SketchPreset.MAXIMUM: CountMinSketchConfig(width=50000, depth=10),
    },
    SketchType.BLOOM: {
        SketchPreset.MINIMAL: BloomFilterConfig.for_capacity(100_000, 0.1),
        SketchPreset.STANDARD: BloomFilterConfig.for_capacity(1_000_000, 0.01),
        SketchPreset.HIGH_ACCURACY: BloomFilterConfig.for_capacity(10_000_000, 0.001),
        SketchPreset.MAXIMUM: BloomFilterConfig.for_capacity(100_000_000, 0.0001),
    },
}


def preset_config(sketch_type: SketchType, preset: SketchPreset) -> SketchConfig:
    """Return the configuration behind a preset."""
    return _PRESETS[sketch_type][preset]


class SketchFactory:
    """Factory for creating sketch data structures.

    Example:
        factory = SketchFactory()

        # Create with preset
        hll = factory.create(SketchType.HYPERLOGLOG, preset=SketchPreset.STANDARD)

        # Create with explicit dimensions
        cms = factory.create_countmin(width=5000, depth=7)

        # Size for a use case
        hll = factory.for_cardinality(error_rate=0.01)
        cms = factory.for_frequency(epsilon=0.001, delta=0.01)
        bf = factory.for_membership(capacity=1_000_000)
    """

    def create(
        self,
        sketch_type: SketchType,
        preset: SketchPreset | None = None,
        config: SketchConfig | None = None,
        **kwargs: Any,
    ) -> Sketch:
        """Create a sketch of the specified type.

        Args:
            sketch_type: Type of sketch to create
            preset: Optional preset configuration
            config: Optional custom configuration
            **kwargs: Dimensions passed to the type specific creator

        Returns:
            Configured sketch instance

        Raises:
            InvalidConfigurationError: If the configuration is invalid
        """
        if config is None and preset is not None:
            config = _PRESETS[sketch_type][preset]

        if sketch_type == SketchType.HYPERLOGLOG:
            return self._create_hyperloglog(config, **kwargs)
        elif sketch_type == SketchType.COUNTMIN:
            return self._create_countmin(config, **kwargs)
        elif sketch_type == SketchType.BLOOM:
            return self._create_bloom(config, **kwargs)
        else:
            raise InvalidConfigurationError(f"Unknown sketch type: {sketch_type}")

    def _create_hyperloglog(
        self,
        config: SketchConfig | None = None,
        precision: int = 12,
        target_error: float | None = None,
        seed: int = 0,
    ) -> HyperLogLog:
        if config is not None:
            if isinstance(config, HyperLogLogConfig):
                return HyperLogLog(config)
            raise InvalidConfigurationError(
                f"Expected HyperLogLogConfig, got {type(config).__name__}",
                sketch="hyperloglog",
            )
        return self.create_hyperloglog(
            precision=precision, target_error=target_error, seed=seed
        )

    def _create_countmin(
        self,
        config: SketchConfig | None = None,
        width: int = 2000,
        depth: int = 5,
        epsilon: float | None = None,
        delta: float | None = None,
        seed: int = 0,
    ) -> CountMinSketch:
        if config is not None:
            if isinstance(config, CountMinSketchConfig):
                return CountMinSketch(config)
            raise InvalidConfigurationError(
                f"Expected CountMinSketchConfig, got {type(config).__name__}",
                sketch="countmin",
            )
        return self.create_countmin(
            width=width, depth=depth, epsilon=epsilon, delta=delta, seed=seed
        )

    def _create_bloom(
        self,
        config: SketchConfig | None = None,
        size: int | None = None,
        num_hashes: int = 7,
        capacity: int | None = None,
        error_rate: float = 0.01,
        hashes: Sequence[HashFunc] | None = None,
        seed: int = 0,
    ) -> BloomFilter:
        if config is not None:
            if isinstance(config, BloomFilterConfig):
                return BloomFilter(config, hashes=hashes)
            raise InvalidConfigurationError(
                f"Expected BloomFilterConfig, got {type(config).__name__}",
                sketch="bloom",
            )
        if capacity is not None and hashes is None:
            return self.for_membership(capacity=capacity, error_rate=error_rate, seed=seed)
        if size is None:
            size = 1 << 23
        if hashes is not None:
            return self.create_bloom_with_hashes(size=size, hashes=hashes)
        return self.create_bloom(size=size, num_hashes=num_hashes, seed=seed)

    # Convenience methods for specific sketch types

    def create_hyperloglog(
        self,
        precision: int = 12,
        target_error: float | None = None,
        seed: int = 0,
    ) -> HyperLogLog:
        """Create a HyperLogLog for cardinality estimation.

        Args:
            precision: Number of precision bits (0-32)
            target_error: If provided, calculates optimal precision
            seed: Hash seed

        Returns:
            Configured HyperLogLog instance
        """
        return create_hyperloglog(
            precision=precision, target_error=target_error, seed=seed
        )

    def create_countmin(
        self,
        width: int = 2000,
        depth: int = 5,
        epsilon: float | None = None,
        delta: float | None = None,
        seed: int = 0,
    ) -> CountMinSketch:
        """Create a CountMinSketch for frequency estimation.

        Args:
            width: Number of counters per row
            depth: Number of rows (hash functions)
            epsilon: Error bound (as fraction of total count)
            delta: Failure probability
            seed: Hash seed

        Returns:
            Configured CountMinSketch instance
        """
        return create_countmin(
            width=width, depth=depth, epsilon=epsilon, delta=delta, seed=seed
        )

    def create_bloom(
        self,
        size: int = 1 << 23,
        num_hashes: int = 7,
        seed: int = 0,
    ) -> BloomFilter:
        """Create a double-hashing BloomFilter.

        Args:
            size: Number of bits
            num_hashes: Bit positions set per value
            seed: Hash seed

        Returns:
            Configured BloomFilter instance
        """
        return create_bloom_filter(size, num_hashes, seed=seed)

    def create_bloom_with_hashes(
        self,
        size: int,
        hashes: Sequence[HashFunc],
    ) -> BloomFilter:
        """Create a BloomFilter using caller supplied hash functions."""
        return BloomFilter.with_hashes(size, hashes)

    # Use-case oriented factory methods

    def for_cardinality(
        self,
        error_rate: float = 0.01,
        seed: int = 0,
    ) -> HyperLogLog:
        """Create a HyperLogLog sized for a target standard error."""
        return self.create_hyperloglog(target_error=error_rate, seed=seed)

    def for_frequency(
        self,
        epsilon: float = 0.001,
        delta: float = 0.01,
        seed: int = 0,
    ) -> CountMinSketch:
        """Create a CountMinSketch sized for an error bound and failure probability."""
        return self.create_countmin(epsilon=epsilon, delta=delta, seed=seed)

    def for_membership(
        self,
        capacity: int,
        error_rate: float = 0.01,
        seed: int = 0,
    ) -> BloomFilter:
        """Create a BloomFilter sized for ``capacity`` elements.

        Args:
            capacity: Expected number of elements
            error_rate: Target false positive rate
            seed: Hash seed

        Returns:
            BloomFilter configured for target accuracy
        """
        config = BloomFilterConfig.for_capacity(capacity, error_rate, seed=seed)
        return BloomFilter(config)


# Module-level factory instance for convenience
_factory = SketchFactory()


def create_sketch(
    sketch_type: SketchType | str,
    preset: SketchPreset | str | None = None,
    **kwargs: Any,
) -> Sketch:
    """Create a sketch data structure.

    Convenience function for creating sketches without instantiating the factory.

    Args:
        sketch_type: Type of sketch ("hyperloglog", "countmin", "bloom")
        preset: Preset configuration ("minimal", "standard", "high_accuracy", "maximum")
        **kwargs: Additional configuration options

    Returns:
        Configured sketch instance

    Raises:
        InvalidConfigurationError: If the type or preset name is unknown

    Example:
        hll = create_sketch("hyperloglog", precision=14)
        cms = create_sketch("countmin", epsilon=0.001, delta=0.01)
        bf = create_sketch("bloom", size=1 << 20, num_hashes=7)
    """
    if isinstance(sketch_type, str):
        try:
            sketch_type = SketchType[sketch_type.upper()]
        except KeyError:
            raise InvalidConfigurationError(
                f"Unknown sketch type: {sketch_type!r}"
            ) from None

    if isinstance(preset, str):
        try:
            preset = SketchPreset[preset.upper()]
        except KeyError:
            raise InvalidConfigurationError(f"Unknown preset: {preset!r}") from None

    return _factory.create(sketch_type, preset=preset, **kwargs)
