"""Protocol definitions and configuration for the sketches.

The protocols describe what each family of structure offers so that callers
can depend on a capability instead of a concrete class. The configuration
dataclasses are frozen and validated on construction; an invalid config is
never returned.
"""

from __future__ import annotations

import math
from abc import abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable, Protocol, runtime_checkable

from maybe.errors import InvalidConfigurationError

# Double hashing works on 32-bit halves, so positions never exceed this.
MAX_BLOOM_BITS = 1 << 32
MAX_PRECISION = 32


@dataclass(frozen=True)
class SketchConfig:
    """Base configuration for sketch data structures.

    Attributes:
        seed: Seed of the base MurmurHash3 function (0 = reference hash)
        name: Optional name for identification
    """

    seed: int = 0
    name: str = ""


@runtime_checkable
class Sketch(Protocol):
    """Base protocol for all probabilistic data structures.

    Sketches are not thread-safe. Callers sharing one across threads must
    serialize access themselves, e.g. with a lock around the instance.
    """

    @abstractmethod
    def add(self, value: Any) -> None:
        """Add a value to the sketch."""
        ...

    @abstractmethod
    def add_batch(self, values: Iterable[Any]) -> None:
        """Add multiple values, skipping ``None``."""
        ...

    @abstractmethod
    def memory_bytes(self) -> int:
        """Return memory usage in bytes."""
        ...


@runtime_checkable
class MembershipTester(Protocol):
    """Protocol for structures that test set membership.

    Examples: Bloom Filter
    """

    @abstractmethod
    def has(self, value: Any) -> bool:
        """Test if a value might be in the set.

        Returns:
            True if possibly present, False if definitely absent
        """
        ...

    @abstractmethod
    def false_positive_rate(self) -> float:
        """Return the current false positive probability."""
        ...


@runtime_checkable
class FrequencyEstimator(Protocol):
    """Protocol for structures that estimate element frequencies.

    Examples: Count-Min Sketch
    """

    @abstractmethod
    def increment(self, value: Any) -> None:
        """Record one occurrence of ``value``."""
        ...

    @abstractmethod
    def count(self, value: Any) -> int:
        """Estimate the frequency of a specific value.

        Returns:
            Estimated count (may overestimate, never underestimates)
        """
        ...


@runtime_checkable
class CardinalityEstimator(Protocol):
    """Protocol for structures that estimate distinct element count.

    Examples: HyperLogLog
    """

    @abstractmethod
    def cardinality(self) -> int:
        """Estimate the number of distinct elements."""
        ...

    @abstractmethod
    def standard_error(self) -> float:
        """Return the standard error as a ratio (e.g., 0.01 = 1%)."""
        ...


@dataclass(frozen=True)
class SketchMetrics:
    """Metrics about a sketch's state and accuracy.

    Attributes:
        elements_added: Total (or estimated) elements added
        memory_bytes: Current memory usage
        estimated_error: Estimated error rate
        fill_ratio: How full the structure is
    """

    elements_added: int = 0
    memory_bytes: int = 0
    estimated_error: float = 0.0
    fill_ratio: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "elements_added": self.elements_added,
            "memory_bytes": self.memory_bytes,
            "estimated_error": self.estimated_error,
            "fill_ratio": self.fill_ratio,
        }


@dataclass(frozen=True)
class BloomFilterConfig(SketchConfig):
    """Configuration for Bloom Filter membership tester.

    Attributes:
        size: Number of bits in the filter, in ``(0, 2**32]``
        num_hashes: Bit positions set per value (double-hashing mode)
    """

    size: int = 1 << 23
    num_hashes: int = 7

    def __post_init__(self) -> None:
        if not 0 < self.size <= MAX_BLOOM_BITS:
            raise InvalidConfigurationError(
                f"size must be in (0, {MAX_BLOOM_BITS}], got {self.size}",
                sketch="bloom",
                context={"size": self.size},
            )
        if self.num_hashes < 1:
            raise InvalidConfigurationError(
                f"num_hashes must be at least 1, got {self.num_hashes}",
                sketch="bloom",
                context={"num_hashes": self.num_hashes},
            )

    @classmethod
    def for_capacity(
        cls,
        capacity: int,
        error_rate: float = 0.01,
        seed: int = 0,
    ) -> "BloomFilterConfig":
        """Create config sized for ``capacity`` elements at ``error_rate``.

        Optimal bit array size: -n*ln(p) / (ln(2)^2)
        Optimal number of hash functions: (m/n) * ln(2)

        Args:
            capacity: Expected number of elements
            error_rate: Target false positive rate, in (0, 1)
            seed: Hash seed

        Returns:
            BloomFilterConfig with appropriate size and hash count
        """
        if capacity <= 0:
            raise InvalidConfigurationError(
                f"capacity must be positive, got {capacity}",
                sketch="bloom",
                context={"capacity": capacity},
            )
        if not 0 < error_rate < 1:
            raise InvalidConfigurationError(
                f"error_rate must be (0, 1), got {error_rate}",
                sketch="bloom",
                context={"error_rate": error_rate},
            )

        size = int(math.ceil(-capacity * math.log(error_rate) / (math.log(2) ** 2)))
        num_hashes = max(1, int((size / capacity) * math.log(2)))
        return cls(size=size, num_hashes=num_hashes, seed=seed)


@dataclass(frozen=True)
class CountMinSketchConfig(SketchConfig):
    """Configuration for Count-Min Sketch frequency estimator.

    Attributes:
        width: Number of counters per row (affects accuracy)
        depth: Number of hash functions/rows (affects confidence)
    """

    width: int = 2000
    depth: int = 5

    def __post_init__(self) -> None:
        if self.width <= 0:
            raise InvalidConfigurationError(
                f"width must be positive, got {self.width}",
                sketch="countmin",
                context={"width": self.width},
            )
        if self.depth <= 0:
            raise InvalidConfigurationError(
                f"depth must be positive, got {self.depth}",
                sketch="countmin",
                context={"depth": self.depth},
            )

    @property
    def expected_error(self) -> float:
        """Expected error rate: e/width."""
        return math.e / self.width

    @property
    def confidence(self) -> float:
        """Confidence level: 1 - (1/e)^depth."""
        return 1.0 - math.exp(-self.depth)

    @classmethod
    def for_error_and_confidence(
        cls,
        epsilon: float = 0.001,
        delta: float = 0.01,
        seed: int = 0,
    ) -> "CountMinSketchConfig":
        """Create config for target error rate and confidence.

        Args:
            epsilon: Maximum overestimate error (as ratio of total count)
            delta: Probability of exceeding epsilon error
            seed: Hash seed

        Returns:
            CountMinSketchConfig with appropriate dimensions
        """
        if not 0 < epsilon < 1 or not 0 < delta < 1:
            raise InvalidConfigurationError(
                "epsilon and delta must both be in (0, 1)",
                sketch="countmin",
                context={"epsilon": epsilon, "delta": delta},
            )

        width = int(math.ceil(math.e / epsilon))
        depth = int(math.ceil(math.log(1.0 / delta)))
        return cls(width=width, depth=depth, seed=seed)


@dataclass(frozen=True)
class HyperLogLogConfig(SketchConfig):
    """Configuration for HyperLogLog cardinality estimator.

    Attributes:
        precision: Number of hash bits used for register indexing (0-32).
                   Higher = more accuracy, more memory.
                   Memory = 2^precision bytes
    """

    precision: int = 12

    def __post_init__(self) -> None:
        if not 0 <= self.precision <= MAX_PRECISION:
            raise InvalidConfigurationError(
                f"precision must be 0-{MAX_PRECISION}, got {self.precision}; "
                f"cannot create more than 2**{MAX_PRECISION} registers",
                sketch="hyperloglog",
                context={"precision": self.precision},
            )

    @property
    def num_registers(self) -> int:
        return 1 << self.precision

    @property
    def expected_error(self) -> float:
        """Expected standard error based on precision."""
        return 1.04 / (self.num_registers**0.5)

    @classmethod
    def for_error_rate(cls, target_error: float, seed: int = 0) -> "HyperLogLogConfig":
        """Create config that achieves target error rate.

        Args:
            target_error: Desired standard error (e.g., 0.01 for 1%)
            seed: Hash seed

        Returns:
            HyperLogLogConfig with the smallest sufficient precision
        """
        if target_error <= 0:
            raise InvalidConfigurationError(
                f"target_error must be positive, got {target_error}",
                sketch="hyperloglog",
                context={"target_error": target_error},
            )

        # Error = 1.04 / sqrt(m), so m = (1.04 / error)^2
        required_registers = (1.04 / target_error) ** 2
        precision = max(4, int(math.ceil(math.log2(required_registers))))
        return cls(precision=min(precision, MAX_PRECISION), seed=seed)
