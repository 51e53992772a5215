"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np

from pydenselinalg.core.compute.parallel import parallel_policy
from pydenselinalg.kernels.backends import use_backend


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture(params=['portable', 'accelerated'])
def backend(request):
    """Run the test once per kernel backend."""
    with use_backend(request.param) as impl:
        yield impl


@pytest.fixture
def threaded():
    """Force every parallel loop onto the thread pool, whatever the size."""
    with parallel_policy(linear_threshold=0, quadratic_threshold=0,
                         cubic_threshold=0, block_size=4, max_workers=4) as policy:
        yield policy


@pytest.fixture
def spd_matrix(rng):
    """Random 12x12 symmetric positive-definite matrix as a 2D array."""
    B = rng.standard_normal((12, 12))
    return B @ B.T + 12 * np.eye(12)


@pytest.fixture
def square_matrix(rng):
    """Random, well-conditioned 10x10 matrix as a 2D array."""
    return rng.standard_normal((10, 10)) + 10 * np.eye(10)
