"""
Result types returned by the factorizations.

Both are NamedTuples, so they unpack directly:

    p, L, U = plu(A)
    Q, R = QR_decomposition(A)
"""

from typing import NamedTuple

import numpy as np

from pydenselinalg.containers.factories import permutation_matrix
from pydenselinalg.containers.matrix import Matrix


class PLUResult(NamedTuple):
    """
    Result of PLU decomposition.

    Attributes:
        p: Permutation vector; row i of P A is row ``p[i]`` of A
        L: Unit lower-triangular factor
        U: Upper-triangular factor

    The identity ``A.to_numpy()[p] == L @ U`` holds up to rounding.
    """
    p: np.ndarray
    L: Matrix
    U: Matrix

    def permutation_matrix(self) -> Matrix:
        """P as a matrix, such that P @ A == L @ U."""
        return permutation_matrix(self.p, dtype=self.L.dtype)


class QRResult(NamedTuple):
    """
    Result of QR decomposition of an m x n matrix, k = min(m, n).

    Attributes:
        Q: Orthonormal columns; m x k (thin) or m x m (full)
        R: Upper triangular; k x n (thin) or m x n (full)
    """
    Q: Matrix
    R: Matrix
