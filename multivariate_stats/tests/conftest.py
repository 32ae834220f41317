"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest

from multivariate_stats import (
    MultivariateSummaryStatistics,
    SynchronizedMultivariateSummaryStatistics,
)


@pytest.fixture
def example_vectors():
    """Three 2-D vectors with mean (3, 4) and every covariance entry equal to 4."""
    return [[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]]


@pytest.fixture
def example_stats(example_vectors):
    """Bias-corrected accumulator fed with ``example_vectors``."""
    stats = MultivariateSummaryStatistics(2, bias_corrected=True)
    for vector in example_vectors:
        stats.add_value(vector)
    return stats


@pytest.fixture
def random_vectors():
    """Reproducible strictly positive 3-D sample."""
    rng = np.random.default_rng(42)
    return rng.uniform(0.5, 10.0, size=(200, 3))


@pytest.fixture
def synchronized_stats():
    """Empty thread-safe 3-D accumulator."""
    return SynchronizedMultivariateSummaryStatistics(3)
