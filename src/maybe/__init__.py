"""maybe - probabilistic data structures for approximate analytics.

Key Data Structures:
    - BloomFilter: Set membership testing (no false negatives)
    - CountMinSketch: Frequency estimation (never underestimates)
    - HyperLogLog: Cardinality (distinct count) estimation

All three share one hashing layer: values take part through their byte
representation (``maybe.hashing.bytes_of``) and are hashed with MurmurHash3.

Thread safety:
    None of the structures lock internally. Callers sharing an instance
    across threads must serialize access, e.g. with a ``threading.Lock``
    around every call, or keep one instance per thread.

Usage:
    from maybe import create_bloom_filter, create_countmin, create_hyperloglog

    bf = create_bloom_filter(size=1 << 20, num_hashes=7)
    bf.add("alice")
    bf.has("alice")        # True
    bf.has("bob")          # False (definitely absent) or a false positive

    cms = create_countmin(width=2000, depth=5)
    cms.increment("alice")
    cms.add("alice", 10)
    cms.count("alice")     # >= 11

    hll = create_hyperloglog(precision=12)
    for user_id in user_ids:
        hll.add(user_id)
    hll.cardinality()
"""

from maybe.errors import (
    SketchError,
    InvalidConfigurationError,
    UnsupportedColumnError,
)
from maybe.hashing import (
    ByteRepresentable,
    HashFunc,
    bytes_of,
    derive,
    hash64,
    murmur,
    xxhash64,
)
from maybe.protocols import (
    Sketch,
    CardinalityEstimator,
    FrequencyEstimator,
    MembershipTester,
    SketchConfig,
    SketchMetrics,
    BloomFilterConfig,
    CountMinSketchConfig,
    HyperLogLogConfig,
)
from maybe.bloom import BloomFilter, create_bloom_filter
from maybe.countmin import CountMinSketch, create_countmin
from maybe.hyperloglog import HyperLogLog, create_hyperloglog
from maybe.factory import (
    create_sketch,
    SketchType,
    SketchPreset,
    SketchFactory,
)

__version__ = "0.1.0"

__all__ = [
    # Errors
    "SketchError",
    "InvalidConfigurationError",
    "UnsupportedColumnError",
    # Hashing
    "ByteRepresentable",
    "HashFunc",
    "bytes_of",
    "derive",
    "hash64",
    "murmur",
    "xxhash64",
    # Protocols and configuration
    "Sketch",
    "CardinalityEstimator",
    "FrequencyEstimator",
    "MembershipTester",
    "SketchConfig",
    "SketchMetrics",
    "BloomFilterConfig",
    "CountMinSketchConfig",
    "HyperLogLogConfig",
    # Implementations
    "BloomFilter",
    "CountMinSketch",
    "HyperLogLog",
    "create_bloom_filter",
    "create_countmin",
    "create_hyperloglog",
    # Factory
    "create_sketch",
    "SketchType",
    "SketchPreset",
    "SketchFactory",
]
