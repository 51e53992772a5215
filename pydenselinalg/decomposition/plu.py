"""
PLU decomposition with partial pivoting.

Blocked right-looking algorithm with panels of ``block_size`` columns:

    1. Factor the panel column by column: pick the largest remaining
       entry as pivot, swap it into place, record the multipliers in L
       and eliminate within the panel's columns only (a ger update).
    2. Compute the block of U right of the panel by forward substitution
       with the panel's unit lower triangle.
    3. Subtract L21 @ U12 from the trailing submatrix, in parallel over
       row chunks.

The permutation vector follows one convention throughout: ``p[i]`` is
the index of the ORIGINAL row of A that ends up in row i, so that
``A[p] == L @ U``.
"""

import numpy as np
from numpy.typing import DTypeLike

from pydenselinalg.containers.factories import identity_matrix
from pydenselinalg.containers.matrix import Matrix
from pydenselinalg.containers.views import VectorView
from pydenselinalg.core.capabilities import CAPABILITY_LU
from pydenselinalg.core.compute.parallel import get_parallel_policy
from pydenselinalg.core.compute.precision import PIVOT_TOLERANCE
from pydenselinalg.core.compute.timing import phase
from pydenselinalg.core.dtypes import float_promote
from pydenselinalg.core.exceptions import SingularMatrixError, ValidationError
from pydenselinalg.core.validation import check_square
from pydenselinalg.decomposition.solution import PLUResult
from pydenselinalg.kernels.backends import active_backend
from pydenselinalg.kernels.blas import ger

_SINGULAR = "Matrix is singular; pivot is near zero."


def _check_input(A: Matrix) -> None:
    if not isinstance(A, Matrix):
        raise ValidationError(f"A: expected Matrix, got {type(A).__name__}")
    check_square(A.row_count, A.column_count, "Matrix must be square for PLU decomposition!")


def _check_pivots(upper: np.ndarray) -> None:
    diagonal = np.abs(np.diagonal(upper))
    small = np.flatnonzero(diagonal < PIVOT_TOLERANCE)
    if small.size:
        i = int(small[0])
        raise SingularMatrixError(_SINGULAR, pivot_index=i, pivot_value=float(diagonal[i]))


def _plu_blocked(work: Matrix) -> tuple[np.ndarray, Matrix, np.ndarray]:
    n = work.row_count
    policy = get_parallel_policy()
    bs = policy.block_size
    u = work.to_numpy(copy=False)
    lower = identity_matrix(n, dtype=work.dtype)
    l = lower.to_numpy(copy=False)
    perm = np.arange(n)

    for ib in range(0, n, bs):
        be = min(ib + bs, n)

        # === Panel factorization ===
        with phase('panel'):
            for i in range(ib, min(be, n - 1)):
                column = np.abs(u[i:, i])
                offset = int(np.argmax(column))
                if column[offset] < PIVOT_TOLERANCE:
                    raise SingularMatrixError(_SINGULAR, pivot_index=i,
                                              pivot_value=float(column[offset]))
                p = i + offset
                if p != i:
                    perm[[i, p]] = perm[[p, i]]
                    u[[i, p]] = u[[p, i]]
                    l[[i, p], :i] = l[[p, i], :i]

                l[i + 1:, i] = u[i + 1:, i] / u[i, i]
                if i + 1 < be:
                    multipliers = VectorView(lower.data, n - i - 1, inc=n,
                                             offset=(i + 1) * n + i)
                    pivot_row = VectorView(work.data, be - i - 1, offset=i * n + i + 1)
                    ger(work.view(i + 1, i + 1, n - i - 1, be - i - 1),
                        multipliers, pivot_row, 1)

        if be >= n:
            continue

        # === U12 = L11^-1 A12, column chunks are independent ===
        def solve(start: int, stop: int) -> None:
            cols = slice(be + start, be + stop)
            for i in range(ib + 1, be):
                u[i, cols] -= np.einsum('k,kj->j', l[i, ib:i], u[ib:i, cols])

        with phase('triangular_solve'):
            policy.parallel_for(n - be, solve, work=(be - ib) * (n - be),
                                threshold=policy.cubic_threshold)

        # === A22 -= L21 U12, row chunks are independent ===
        def update(start: int, stop: int) -> None:
            rows = slice(be + start, be + stop)
            u[rows, be:] -= np.einsum('ik,kj->ij', l[rows, ib:be], u[ib:be, be:])

        with phase('trailing_update'):
            policy.parallel_for(n - be, update, work=(n - be) * (n - be),
                                threshold=policy.cubic_threshold)

    if abs(u[n - 1, n - 1]) < PIVOT_TOLERANCE:
        raise SingularMatrixError(_SINGULAR, pivot_index=n - 1,
                                  pivot_value=float(abs(u[n - 1, n - 1])))
    return perm, lower, np.triu(u)


def plu(A: Matrix, dtype: DTypeLike | None = None) -> PLUResult:
    """
    Factor a square matrix as P A = L U.

    Args:
        A: Square matrix
        dtype: Floating result type. Defaults to A's type for floating
            input and float64 for integral input.

    Returns:
        PLUResult(p, L, U)

    Raises:
        ValidationError: If A is not square or dtype is not floating
        SingularMatrixError: If a pivot is smaller than PIVOT_TOLERANCE
    """
    _check_input(A)
    n = A.row_count
    work_dtype = float_promote(A.dtype, dtype)
    backend = active_backend()

    if backend.supports(CAPABILITY_LU) and backend.accelerates(work_dtype):
        with phase('vendor_lu'):
            perm, lower, upper = backend.lu_factor(A.to_numpy().astype(work_dtype, copy=False))
        _check_pivots(upper)
        return PLUResult(perm, Matrix.adopt(n, n, lower), Matrix.adopt(n, n, upper))

    perm, lower, upper = _plu_blocked(A.cast(work_dtype))
    return PLUResult(perm, lower, Matrix.adopt(n, n, upper))
