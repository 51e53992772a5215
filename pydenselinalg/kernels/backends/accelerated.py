"""
Vendor-accelerated kernel backend built on SciPy's BLAS and LAPACK wrappers.

The vendor routines are column-major. A row-major ``m x n`` array is the
same memory as a column-major ``n x m`` array holding its transpose, so
the wrappers are handed ``a.T`` and the transpose flag is flipped:

    y = A x      ->  gemv(A^T, trans=1)
    y = A^T x    ->  gemv(A^T, trans=0)
    A -= a x y^T ->  ger(-a, y, x, A^T)
    C = A B      ->  gemm(B^T, A^T) = C^T

Only float32 and float64 are handled natively. Every other operand set
(integer operands, mixed precisions) is forwarded to the portable
backend, which is the same precision check a compiled dispatch would
make.
"""

from typing import Any

import numpy as np
from scipy.linalg.blas import get_blas_funcs
from scipy.linalg.lapack import get_lapack_funcs

from pydenselinalg.core.capabilities import ACCELERATED_DTYPES, ALL_CAPABILITIES
from pydenselinalg.core.exceptions import NotPositiveDefiniteError, NumericalError
from pydenselinalg.kernels.backends.portable import PortableBackend


def _workspace_size(name: str, routine, *args: Any) -> int:
    # lwork=-1 asks LAPACK for the optimal workspace; it comes back in work[0]
    result = routine(*args, lwork=-1)
    work, info = result[-2], result[-1]
    if info != 0:
        raise NumericalError(f"{name}: workspace query failed with info={info}")
    return max(1, int(np.asarray(work).ravel()[0].real))


def _check_info(name: str, info: int) -> None:
    if info < 0:
        raise NumericalError(f"{name}: argument {-info} had an illegal value")


class AcceleratedBackend:
    """
    Kernel and factorization backend delegating to the vendor library.

    Args:
        fallback: Backend used for operand types the vendor library
            does not cover. Defaults to a PortableBackend.
    """

    def __init__(self, fallback: PortableBackend | None = None):
        self._fallback = fallback or PortableBackend()

    @property
    def name(self) -> str:
        return 'accelerated'

    @property
    def fallback(self) -> PortableBackend:
        return self._fallback

    def supports(self, capability: str) -> bool:
        return capability in ALL_CAPABILITIES

    def accelerates(self, *dtypes: np.dtype) -> bool:
        if not dtypes:
            return False
        first = np.dtype(dtypes[0])
        return first in ACCELERATED_DTYPES and all(np.dtype(d) == first for d in dtypes)

    # === Level 1-3 kernels ===

    def gemv(self, a: np.ndarray, x: np.ndarray, trans: bool) -> np.ndarray:
        if not self.accelerates(a.dtype, x.dtype):
            return self._fallback.gemv(a, x, trans)
        gemv = get_blas_funcs('gemv', dtype=a.dtype)
        return gemv(1.0, a.T, x, trans=0 if trans else 1)

    def ger(self, a: np.ndarray, x: np.ndarray, y: np.ndarray, alpha: Any) -> None:
        if not self.accelerates(a.dtype, x.dtype, y.dtype):
            self._fallback.ger(a, x, y, alpha)
            return
        ger = get_blas_funcs('ger', dtype=a.dtype)
        updated = ger(-alpha, y, x, a=a.T, overwrite_a=1)
        # No-op when ger worked in place; otherwise copies back into the view
        a[...] = updated.T

    def dot(self, x: np.ndarray, y: np.ndarray) -> Any:
        if not self.accelerates(x.dtype, y.dtype):
            return self._fallback.dot(x, y)
        dot = get_blas_funcs('dot', dtype=x.dtype)
        return x.dtype.type(dot(x, y))

    def gemm(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        if not self.accelerates(a.dtype, b.dtype):
            return self._fallback.gemm(a, b)
        gemm = get_blas_funcs('gemm', dtype=a.dtype)
        return np.ascontiguousarray(gemm(1.0, b.T, a.T).T)

    # === Factorizations ===

    def lu_factor(self, a: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Partial-pivoting LU via getrf.

        Returns:
            (perm, L, U) with ``a[perm] == L @ U``. A zero pivot is not
            an error here; callers apply their own pivot tolerance to U.
        """
        getrf = get_lapack_funcs('getrf', dtype=a.dtype)
        lu, piv, info = getrf(np.array(a, order='F'), overwrite_a=1)
        _check_info('getrf', info)
        n = a.shape[0]
        # piv lists the row swapped with row i at step i; replay the swaps
        perm = np.arange(n)
        for i, p in enumerate(piv):
            if p != i:
                perm[i], perm[p] = perm[p], perm[i]
        lower = np.tril(lu, -1)
        lower[np.diag_indices(n)] = 1
        upper = np.triu(lu)
        return perm, np.ascontiguousarray(lower), np.ascontiguousarray(upper)

    def cholesky_factor(self, a: np.ndarray) -> np.ndarray:
        """
        Lower Cholesky factor via potrf.

        Raises:
            NotPositiveDefiniteError: If a leading minor is not positive definite
        """
        potrf = get_lapack_funcs('potrf', dtype=a.dtype)
        factor, info = potrf(np.array(a, order='F'), lower=1, clean=1, overwrite_a=1)
        _check_info('potrf', info)
        if info > 0:
            raise NotPositiveDefiniteError(
                "Matrix is not positive definite!",
                column=info - 1,
            )
        return np.ascontiguousarray(factor)

    def qr_factor(self, a: np.ndarray, full_q: bool, full_r: bool) -> tuple[np.ndarray, np.ndarray]:
        """
        Householder QR via geqrf, with Q rebuilt from the reflectors by orgqr.

        Both calls are preceded by a workspace-size query.
        """
        geqrf, orgqr = get_lapack_funcs(('geqrf', 'orgqr'), dtype=a.dtype)
        m, n = a.shape
        k = min(m, n)
        packed = np.array(a, order='F')

        lwork = _workspace_size('geqrf', geqrf, packed)
        packed, tau, _, info = geqrf(packed, lwork=lwork, overwrite_a=1)
        _check_info('geqrf', info)

        r = np.triu(packed[:m if full_r else k, :])

        q_cols = m if full_q else k
        if q_cols > n:
            reflectors = np.zeros((m, q_cols), dtype=a.dtype, order='F')
            reflectors[:, :n] = packed
        else:
            reflectors = np.array(packed[:, :q_cols], order='F')

        lwork = _workspace_size('orgqr', orgqr, reflectors, tau)
        q, _, info = orgqr(reflectors, tau, lwork=lwork, overwrite_a=1)
        _check_info('orgqr', info)
        return np.ascontiguousarray(q), np.ascontiguousarray(r)
