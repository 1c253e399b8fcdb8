"""Tests for the Bloom filter membership tester."""

import pytest

from maybe import InvalidConfigurationError
from maybe.bloom import BloomFilter, create_bloom_filter
from maybe.hashing import MASK32, hash64, split64, xxhash64
from maybe.protocols import BloomFilterConfig, MembershipTester, Sketch, SketchMetrics
from tests.values import Word


class TestBloomFilter:
    """Tests for double-hashing mode."""

    def test_stream_has_no_false_negatives(self, rand_word):
        """Small filter, long stream: a seen word is never reported absent."""
        bf = create_bloom_filter(size=100, num_hashes=7)
        seen: set[str] = set()

        for _ in range(100_000):
            word = rand_word(5)
            if not bf.has(word) and word in seen:
                pytest.fail(f"Could not find word {word!r} while it should have")
            seen.add(word)
            bf.add(word)

    def test_no_false_negatives(self):
        bf = create_bloom_filter(size=1 << 16, num_hashes=7)

        items = [f"item_{i}" for i in range(5000)]
        bf.add_batch(items)

        for item in items:
            assert bf.has(item), f"False negative for {item}"

    def test_basic_membership(self):
        bf = BloomFilter(BloomFilterConfig.for_capacity(10000, 0.01))

        for i in range(1000):
            bf.add(f"item_{i}")

        false_positives = sum(1 for i in range(1000, 2000) if bf.has(f"item_{i}"))
        assert false_positives / 1000 < 0.05

    def test_empty_filter_has_nothing(self):
        bf = create_bloom_filter(size=1024, num_hashes=3)
        assert not bf.has("anything")
        assert bf.set_bits == 0

    def test_positions_follow_double_hashing(self):
        size, k = 1000, 5
        bf = create_bloom_filter(size=size, num_hashes=k)
        bf.add("value")

        lo, hi = split64(hash64("value"))
        expected = {((lo + i * hi) & MASK32) % size for i in range(1, k + 1)}

        assert bf.set_bits == len(expected)
        for position in expected:
            assert bf._get_bit(position)

    def test_readding_changes_no_bits(self):
        bf = create_bloom_filter(size=4096, num_hashes=7)
        bf.add("repeat")
        before = bytes(bf._bits)

        for _ in range(10):
            bf.add("repeat")

        assert bytes(bf._bits) == before

    def test_same_bytes_same_membership(self):
        bf = create_bloom_filter(size=4096, num_hashes=7)
        bf.add(Word("hello"))
        assert bf.has("hello")
        assert bf.has(b"hello")

    def test_in_operator(self):
        bf = create_bloom_filter(size=4096, num_hashes=4)
        bf.add("test_item")
        assert "test_item" in bf

    def test_batch_skips_none(self):
        bf = create_bloom_filter(size=4096, num_hashes=4)
        bf.add_batch([None, "a", None, "b"])
        assert bf.has("a") and bf.has("b")

    def test_seed_changes_positions(self):
        bf1 = BloomFilter(BloomFilterConfig(size=1 << 16, num_hashes=4, seed=0))
        bf2 = BloomFilter(BloomFilterConfig(size=1 << 16, num_hashes=4, seed=1))
        bf1.add("x")
        bf2.add("x")
        assert bytes(bf1._bits) != bytes(bf2._bits)

    def test_protocols(self):
        bf = create_bloom_filter(size=64, num_hashes=2)
        assert isinstance(bf, Sketch)
        assert isinstance(bf, MembershipTester)


class TestBloomFilterMultiHash:
    """Tests for caller supplied hash functions."""

    def test_one_position_per_function(self):
        hashes = [xxhash64(seed) for seed in range(3)]
        bf = BloomFilter.with_hashes(1024, hashes)
        bf.add("value")

        expected = {fn("value") % 1024 for fn in hashes}
        assert bf.hash_count == 3
        assert bf.set_bits == len(expected)
        assert bf.has("value")

    def test_no_false_negatives(self):
        bf = BloomFilter.with_hashes(2048, [xxhash64(0), xxhash64(1), hash64])
        items = [f"k{i}" for i in range(300)]
        bf.add_batch(items)
        assert all(bf.has(item) for item in items)

    def test_empty_hash_list_fails(self):
        with pytest.raises(InvalidConfigurationError, match="at least one hash"):
            BloomFilter.with_hashes(100, [])

    def test_empty_hash_list_with_config_fails(self):
        with pytest.raises(InvalidConfigurationError):
            BloomFilter(BloomFilterConfig(size=100, num_hashes=1), hashes=[])

    def test_error_is_value_error(self):
        with pytest.raises(ValueError):
            BloomFilter.with_hashes(100, [])


class TestBloomFilterConfig:
    """Tests for configuration and diagnostics."""

    @pytest.mark.parametrize(
        "size,num_hashes",
        [(0, 7), (-1, 7), (2**32 + 1, 7), (100, 0)],
    )
    def test_invalid_config(self, size, num_hashes):
        with pytest.raises(InvalidConfigurationError):
            create_bloom_filter(size=size, num_hashes=num_hashes)

    def test_error_context(self):
        with pytest.raises(InvalidConfigurationError) as excinfo:
            BloomFilterConfig(size=0)
        assert excinfo.value.context == {"size": 0}
        assert excinfo.value.to_dict()["sketch"] == "bloom"

    def test_for_capacity(self):
        config = BloomFilterConfig.for_capacity(10000, 0.01)
        assert 95_000 < config.size < 96_000
        assert config.num_hashes == 6

    def test_for_capacity_validation(self):
        with pytest.raises(InvalidConfigurationError):
            BloomFilterConfig.for_capacity(0)
        with pytest.raises(InvalidConfigurationError):
            BloomFilterConfig.for_capacity(100, error_rate=1.5)

    def test_false_positive_rate(self):
        bf = BloomFilter(BloomFilterConfig.for_capacity(10000, 0.01))
        assert bf.false_positive_rate() == 0.0

        for i in range(5000):
            bf.add(f"item_{i}")

        assert 0 < bf.false_positive_rate() < 0.05

    def test_fill_ratio(self):
        bf = create_bloom_filter(size=10000, num_hashes=5)
        assert bf.fill_ratio == 0.0

        for i in range(100):
            bf.add(i)

        assert 0 < bf.fill_ratio < 1.0

    def test_approximate_count(self):
        bf = create_bloom_filter(size=1 << 16, num_hashes=7)
        for i in range(1000):
            bf.add(f"user_{i}")

        assert abs(bf.approximate_count() - 1000) < 100

    def test_approximate_count_saturated(self):
        bf = create_bloom_filter(size=8, num_hashes=7)
        for i in range(1000):
            bf.add(i)

        assert bf.fill_ratio == 1.0
        assert bf.approximate_count() == 8

    def test_metrics(self):
        bf = create_bloom_filter(size=8192, num_hashes=3)
        bf.add("a")

        metrics = bf.metrics()
        assert isinstance(metrics, SketchMetrics)
        assert metrics.memory_bytes == 1024
        assert metrics.elements_added == 1
        assert set(metrics.to_dict()) == {
            "elements_added",
            "memory_bytes",
            "estimated_error",
            "fill_ratio",
        }

    def test_repr(self):
        assert repr(create_bloom_filter(size=100, num_hashes=7)).startswith(
            "BloomFilter(size=100, hashes=7"
        )
