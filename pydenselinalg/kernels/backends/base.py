"""
Structural interface every kernel backend satisfies.

A backend works on plain numpy arrays: 2D arrays may be strided windows
(MatrixView.array()) and 1D arrays may carry an increment
(VectorView.array()). Writes to ``a`` in ``ger`` must land in the
caller's buffer.

We use Protocol (structural typing) rather than ABC so that a test
double or a third-party vendor wrapper can be injected with
set_backend() without inheriting from anything here.
"""

from typing import Any, Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class KernelBackend(Protocol):
    """
    Protocol for kernel backends.

    Backends are stateless; thresholds and thread counts come from the
    active ParallelPolicy at call time.
    """

    @property
    def name(self) -> str:
        """
        Backend identifier.

        Examples: 'portable', 'accelerated'
        """
        ...

    def supports(self, capability: str) -> bool:
        """
        Check if this backend provides a capability natively.

        Note:
            Unknown capabilities MUST return False, never raise.
        """
        ...

    def accelerates(self, *dtypes: np.dtype) -> bool:
        """
        True when all operand dtypes are one identical vendor-supported type.

        This is the only per-call decision a backend makes.
        """
        ...

    def gemv(self, a: np.ndarray, x: np.ndarray, trans: bool) -> np.ndarray:
        """y = a @ x, or a.T @ x when ``trans``."""
        ...

    def ger(self, a: np.ndarray, x: np.ndarray, y: np.ndarray, alpha: Any) -> None:
        """In place: a -= alpha * outer(x, y)."""
        ...

    def dot(self, x: np.ndarray, y: np.ndarray) -> Any:
        """Inner product of two equal-length vectors."""
        ...

    def gemm(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        """c = a @ b."""
        ...

    def lu_factor(self, a: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """(perm, L, U) with a[perm] == L @ U."""
        ...

    def cholesky_factor(self, a: np.ndarray) -> np.ndarray:
        """Lower-triangular L with a == L @ L.T."""
        ...

    def qr_factor(self, a: np.ndarray, full_q: bool, full_r: bool) -> tuple[np.ndarray, np.ndarray]:
        """(Q, R) with a == Q @ R."""
        ...
