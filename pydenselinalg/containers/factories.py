"""
Factory functions for common matrices.
"""

from typing import Sequence

import numpy as np
from numpy.typing import DTypeLike

from pydenselinalg.containers.matrix import Matrix
from pydenselinalg.core.compute.parallel import get_parallel_policy
from pydenselinalg.core.dtypes import DEFAULT_DTYPE, check_numeric_dtype
from pydenselinalg.core.validation import check_permutation, check_positive_dims


def identity_matrix(n: int, dtype: DTypeLike = DEFAULT_DTYPE) -> Matrix:
    """n x n identity matrix."""
    check_positive_dims(n, message="Matrix dimensions must be greater than zero.")
    result = Matrix(n, n, dtype=dtype)
    result.data[::n + 1] = 1
    return result


def ones(rows: int, cols: int, dtype: DTypeLike = DEFAULT_DTYPE) -> Matrix:
    """rows x cols matrix filled with ones."""
    result = Matrix(rows, cols, dtype=dtype)
    result.fill(1)
    return result


def permutation_matrix(perm: Sequence[int], dtype: DTypeLike = DEFAULT_DTYPE) -> Matrix:
    """
    Permutation matrix P with ``P[i, perm[i]] = 1``.

    With the permutation returned by plu(), ``P @ A`` reorders the rows
    of A so that row i of the product is row ``perm[i]`` of A.

    Raises:
        ValidationError: If perm is not a permutation of 0..n-1
    """
    indices = check_permutation(perm)
    dtype = check_numeric_dtype(dtype)
    n = indices.size
    flat = np.zeros(n * n, dtype=dtype)
    policy = get_parallel_policy()

    def body(start: int, stop: int) -> None:
        rows = np.arange(start, stop)
        flat[rows * n + indices[start:stop]] = 1

    policy.parallel_for(n, body, work=n * n, threshold=policy.quadratic_threshold)
    return Matrix.adopt(n, n, flat)
