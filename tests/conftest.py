"""Common pytest configuration for the sketch tests.

Usage:
    pytest tests/ -v
    pytest tests/ -v --skip-slow
"""

from __future__ import annotations

import random
import string
from typing import Callable

import pytest


def pytest_addoption(parser: pytest.Parser) -> None:
    """Add command line options for the sketch tests."""
    parser.addoption(
        "--skip-slow",
        action="store_true",
        default=False,
        help="Skip slow tests (> 30 seconds)",
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register markers."""
    config.addinivalue_line(
        "markers",
        "slow: marks test as slow (> 30 seconds)",
    )


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    if not config.getoption("--skip-slow"):
        return
    skip_slow = pytest.mark.skip(reason="--skip-slow given")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def rng() -> random.Random:
    """Seeded random generator for reproducible streams."""
    return random.Random(42)


@pytest.fixture
def rand_word(rng: random.Random) -> Callable[[int], str]:
    """Generate random lowercase words of a given length."""

    def _rand_word(size: int) -> str:
        return "".join(rng.choice(string.ascii_lowercase) for _ in range(size))

    return _rand_word
