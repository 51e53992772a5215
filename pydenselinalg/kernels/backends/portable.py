"""
Portable kernel backend: vectorized numpy loops, threaded above thresholds.

Every kernel promotes its operands to their common type, then splits the
output into disjoint chunks (rows of y for gemv, columns of y for the
transposed gemv, rows of A for ger, row blocks of C for gemm). Reductions
(dot) produce one partial sum per chunk and add them afterwards.

The loops use ``np.einsum`` rather than ``@``/``np.dot`` so that this
path never routes through the vendor BLAS numpy was built against.
"""

from typing import Any

import numpy as np

from pydenselinalg.core.capabilities import (
    CAPABILITY_DOT,
    CAPABILITY_GEMM,
    CAPABILITY_GEMV,
    CAPABILITY_GER,
)
from pydenselinalg.core.compute.parallel import get_parallel_policy
from pydenselinalg.core.dtypes import promote


class PortableBackend:
    """
    Kernel backend with no dependency beyond numpy.

    Handles every arithmetic element type. It has no whole-matrix
    factorization routines; the decomposition module runs its own
    blocked algorithms on top of these kernels instead.
    """

    _CAPABILITIES = frozenset({
        CAPABILITY_DOT,
        CAPABILITY_GEMV,
        CAPABILITY_GER,
        CAPABILITY_GEMM,
    })

    @property
    def name(self) -> str:
        return 'portable'

    def supports(self, capability: str) -> bool:
        return capability in self._CAPABILITIES

    def accelerates(self, *dtypes: np.dtype) -> bool:
        return False

    def gemv(self, a: np.ndarray, x: np.ndarray, trans: bool) -> np.ndarray:
        policy = get_parallel_policy()
        dtype = promote(a, x)
        rows, cols = a.shape
        a = a.astype(dtype, copy=False)
        x = x.astype(dtype, copy=False)

        if trans:
            y = np.empty(cols, dtype=dtype)

            def body(start: int, stop: int) -> None:
                y[start:stop] = np.einsum('ij,i->j', a[:, start:stop], x)

            policy.parallel_for(cols, body, work=rows * cols,
                                threshold=policy.quadratic_threshold)
        else:
            y = np.empty(rows, dtype=dtype)

            def body(start: int, stop: int) -> None:
                y[start:stop] = np.einsum('ij,j->i', a[start:stop], x)

            policy.parallel_for(rows, body, work=rows * cols,
                                threshold=policy.quadratic_threshold)
        return y

    def ger(self, a: np.ndarray, x: np.ndarray, y: np.ndarray, alpha: Any) -> None:
        policy = get_parallel_policy()
        dtype = promote(a, x, y)
        rows, cols = a.shape
        alpha = dtype.type(alpha)
        x = x.astype(dtype, copy=False)
        y = y.astype(dtype, copy=False)

        def body(start: int, stop: int) -> None:
            update = alpha * np.multiply.outer(x[start:stop], y)
            np.subtract(a[start:stop], update, out=a[start:stop], casting='unsafe')

        policy.parallel_for(rows, body, work=rows * cols,
                            threshold=policy.quadratic_threshold)

    def dot(self, x: np.ndarray, y: np.ndarray) -> Any:
        policy = get_parallel_policy()
        dtype = promote(x, y)
        n = x.shape[0]
        x = x.astype(dtype, copy=False)
        y = y.astype(dtype, copy=False)

        def partial(start: int, stop: int):
            return np.einsum('i,i->', x[start:stop], y[start:stop])

        total = policy.parallel_sum(n, partial, work=n, threshold=policy.linear_threshold)
        return dtype.type(total)

    def gemm(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        policy = get_parallel_policy()
        dtype = promote(a, b)
        m, k = a.shape
        n = b.shape[1]
        bs = policy.block_size
        a = a.astype(dtype, copy=False)
        b = b.astype(dtype, copy=False)
        c = np.zeros((m, n), dtype=dtype)
        n_row_blocks = -(-m // bs)

        # Each worker owns whole row blocks of c
        def body(start: int, stop: int) -> None:
            for ib in range(start * bs, min(stop * bs, m), bs):
                ie = min(ib + bs, m)
                for kb in range(0, k, bs):
                    ke = min(kb + bs, k)
                    a_tile = a[ib:ie, kb:ke]
                    for jb in range(0, n, bs):
                        je = min(jb + bs, n)
                        c[ib:ie, jb:je] += np.einsum('ik,kj->ij', a_tile, b[kb:ke, jb:je])

        policy.parallel_for(n_row_blocks, body, work=m * n, threshold=policy.cubic_threshold)
        return c

    def lu_factor(self, a: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        raise NotImplementedError("portable backend has no vendor LU routine")

    def cholesky_factor(self, a: np.ndarray) -> np.ndarray:
        raise NotImplementedError("portable backend has no vendor Cholesky routine")

    def qr_factor(self, a: np.ndarray, full_q: bool, full_r: bool) -> tuple[np.ndarray, np.ndarray]:
        raise NotImplementedError("portable backend has no vendor QR routine")
