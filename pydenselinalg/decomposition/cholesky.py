"""
Cholesky decomposition A = L L^T for symmetric positive-definite A.

Blocked Cholesky-Crout: for each block of ``block_size`` columns, the
diagonal and sub-diagonal entries inside the block are computed from the
columns already finished, then the rows below the block are filled in.
Those rows are independent of each other, so they are processed as
parallel row chunks once the trailing region is large enough.
"""

import numpy as np
from numpy.typing import DTypeLike

from pydenselinalg.containers.matrix import Matrix
from pydenselinalg.core.capabilities import CAPABILITY_CHOLESKY
from pydenselinalg.core.compute.parallel import get_parallel_policy
from pydenselinalg.core.compute.timing import phase
from pydenselinalg.core.dtypes import float_promote
from pydenselinalg.core.exceptions import (
    NotPositiveDefiniteError,
    NotSymmetricError,
    ValidationError,
)
from pydenselinalg.kernels.backends import active_backend

_NOT_PD = "Matrix is not positive definite!"


def _check_input(A: Matrix) -> None:
    if not isinstance(A, Matrix):
        raise ValidationError(f"A: expected Matrix, got {type(A).__name__}")
    if not A.is_symmetric():
        asymmetry = None
        if A.is_square():
            grid = A.to_numpy(copy=False).astype(np.float64)
            asymmetry = float(np.max(np.abs(grid - grid.T)))
        raise NotSymmetricError(
            "Matrix must be symmetric to try Cholesky decomposition!",
            max_asymmetry=asymmetry,
        )


def _cholesky_blocked(a: np.ndarray) -> np.ndarray:
    n = a.shape[0]
    policy = get_parallel_policy()
    bs = policy.block_size
    L = np.zeros_like(a)

    for jb in range(0, n, bs):
        je = min(jb + bs, n)

        with phase('panel'):
            for j in range(jb, je):
                diag = a[j, j] - np.einsum('k,k->', L[j, :j], L[j, :j])
                if not diag > 0:
                    raise NotPositiveDefiniteError(_NOT_PD, column=j,
                                                   diagonal_value=float(diag))
                L[j, j] = np.sqrt(diag)
                if j + 1 < je:
                    L[j + 1:je, j] = (
                        a[j + 1:je, j] - np.einsum('ik,k->i', L[j + 1:je, :j], L[j, :j])
                    ) / L[j, j]

        if je >= n:
            continue

        def trailing(start: int, stop: int) -> None:
            rows = slice(je + start, je + stop)
            for j in range(jb, je):
                L[rows, j] = (
                    a[rows, j] - np.einsum('ik,k->i', L[rows, :j], L[j, :j])
                ) / L[j, j]

        with phase('trailing_update'):
            policy.parallel_for(n - je, trailing, work=(n - je) * n,
                                threshold=policy.cubic_threshold)

    return L


def cholesky(A: Matrix, dtype: DTypeLike | None = None) -> Matrix:
    """
    Lower-triangular L with A = L L^T.

    Args:
        A: Symmetric positive-definite matrix
        dtype: Floating result type. Defaults to A's type for floating
            input and float64 for integral input.

    Returns:
        L as a new Matrix

    Raises:
        NotSymmetricError: If A is not symmetric (within EPSILON)
        NotPositiveDefiniteError: If a diagonal entry of L would be the
            square root of a non-positive number
        ValidationError: If dtype is not floating
    """
    _check_input(A)
    n = A.row_count
    work_dtype = float_promote(A.dtype, dtype)
    a = A.to_numpy().astype(work_dtype, copy=False)
    backend = active_backend()

    if backend.supports(CAPABILITY_CHOLESKY) and backend.accelerates(work_dtype):
        with phase('vendor_cholesky'):
            return Matrix.adopt(n, n, backend.cholesky_factor(a))
    return Matrix.adopt(n, n, _cholesky_blocked(a))
