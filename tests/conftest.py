"""Pytest configuration and shared fixtures for optdrive tests.

This module provides a deterministic RNG fixture so tests that draw random
starting points are reproducible.
"""

import os

import numpy as np
import pytest


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    This ensures tests are reproducible while allowing override for debugging.
    """
    seed = int(os.environ.get("TEST_RNG_SEED", "0"))
    return np.random.default_rng(seed)


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds() -> None:
    """Seed numpy's legacy global RNG for every test."""
    np.random.seed(int(os.environ.get("TEST_RNG_SEED", "0")))
