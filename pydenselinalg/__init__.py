"""
pydenselinalg: dense linear algebra with owning containers, strided views,
BLAS-style kernels and blocked factorizations.

Every kernel and factorization has two execution paths: a portable one
(numpy loops, threaded above size thresholds) and an accelerated one
(SciPy BLAS/LAPACK for float32 and float64). The path is chosen once by
configuration, see ``pydenselinalg.kernels.set_backend``.

Quick start:
    >>> from pydenselinalg import Matrix, plu, cholesky, QR_decomposition
    >>> A = Matrix.from_rows([[4, 12, -16], [12, 37, -43], [-16, -43, 98]])
    >>> cholesky(A).to_numpy()
    array([[ 2.,  0.,  0.],
           [ 6.,  1.,  0.],
           [-8.,  5.,  3.]])
"""

__version__ = "0.1.0"

from pydenselinalg.core import (
    Result,
    attempt,
    LinalgError,
    ValidationError,
    InvalidConstructionError,
    DimensionError,
    NotSymmetricError,
    OutOfRangeError,
    NumericalError,
    SingularMatrixError,
    NotPositiveDefiniteError,
)
from pydenselinalg.containers import (
    Vector,
    Orientation,
    ROW,
    COLUMN,
    Matrix,
    VectorView,
    MatrixView,
    identity_matrix,
    ones,
    permutation_matrix,
    loosely_equal,
)
from pydenselinalg.kernels import Op, gemv, ger, dot, outer, gemm, set_backend, use_backend
from pydenselinalg.decomposition import (
    PLUResult,
    QRResult,
    plu,
    cholesky,
    QR_decomposition,
    qr,
    decompose,
)

__all__ = [
    "__version__",
    # Result / errors
    "Result",
    "attempt",
    "LinalgError",
    "ValidationError",
    "InvalidConstructionError",
    "DimensionError",
    "NotSymmetricError",
    "OutOfRangeError",
    "NumericalError",
    "SingularMatrixError",
    "NotPositiveDefiniteError",
    # Containers
    "Vector",
    "Orientation",
    "ROW",
    "COLUMN",
    "Matrix",
    "VectorView",
    "MatrixView",
    "identity_matrix",
    "ones",
    "permutation_matrix",
    "loosely_equal",
    # Kernels
    "Op",
    "gemv",
    "ger",
    "dot",
    "outer",
    "gemm",
    "set_backend",
    "use_backend",
    # Factorizations
    "PLUResult",
    "QRResult",
    "plu",
    "cholesky",
    "QR_decomposition",
    "qr",
    "decompose",
]
