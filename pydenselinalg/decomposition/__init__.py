"""
Matrix factorizations: PLU, Cholesky and Householder QR.

Each factorization runs a blocked algorithm built on the kernels, or,
when the active backend can accelerate the working type, hands the
whole matrix to the vendor library.
"""

from pydenselinalg.decomposition.solution import PLUResult, QRResult
from pydenselinalg.decomposition.plu import plu
from pydenselinalg.decomposition.cholesky import cholesky
from pydenselinalg.decomposition.qr import QR_decomposition, qr
from pydenselinalg.decomposition.solvers import decompose, MethodChoice

__all__ = [
    "PLUResult",
    "QRResult",
    "plu",
    "cholesky",
    "QR_decomposition",
    "qr",
    "decompose",
    "MethodChoice",
]
