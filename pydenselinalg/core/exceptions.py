"""
Exception hierarchy for pydenselinalg.

All exceptions inherit from LinalgError to allow catching any
library-specific error. The hierarchy mirrors the failure kinds of the
engine: invalid construction, dimension mismatch, out-of-range access,
singular matrices and Cholesky precondition failures.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages state the offending values and the violated constraint
    - Failures propagate synchronously; nothing is retried or salvaged
    - Argument errors also derive from ValueError, index errors from IndexError
"""


class LinalgError(Exception):
    """Base exception for all pydenselinalg errors."""
    pass


class ValidationError(LinalgError, ValueError):
    """
    Input validation failed.

    Raised when a caller-provided argument is not acceptable (the
    "invalid argument" kind).
    """
    pass


class InvalidConstructionError(ValidationError):
    """
    A container or view could not be constructed.

    Raised for zero dimensions, a missing source buffer, or a source whose
    size differs from the declared size.
    """
    pass


class DimensionError(ValidationError):
    """
    Operand shapes or orientations are incompatible.

    Raised by arithmetic operators and kernels when the dimensions or the
    row/column orientation of the operands do not line up.
    """
    pass


class NotSymmetricError(ValidationError):
    """
    Matrix is not symmetric.

    Raised by Cholesky decomposition before any factorization work starts.

    Attributes:
        max_asymmetry: Largest |A[i, j] - A[j, i]| found, if computed
    """

    def __init__(self, message: str, max_asymmetry: float | None = None):
        super().__init__(message)
        self.max_asymmetry = max_asymmetry


class OutOfRangeError(LinalgError, IndexError):
    """
    Bounds-checked access or a view window fell outside the logical extent.

    Attributes:
        index: The offending index (or index tuple), if known
        bounds: The extent it was checked against, if known
    """

    def __init__(
        self,
        message: str,
        index: int | tuple[int, ...] | None = None,
        bounds: int | tuple[int, ...] | None = None,
    ):
        super().__init__(message)
        self.index = index
        self.bounds = bounds


class NumericalError(LinalgError):
    """
    Numerical computation failed.

    Base class for errors arising from the values of the input rather
    than from its shape.
    """
    pass


class SingularMatrixError(NumericalError, ValueError):
    """
    Matrix is singular or numerically singular.

    Raised by PLU decomposition when no usable pivot can be found.
    Partial factors are never returned alongside this error.

    Attributes:
        pivot_index: Column at which elimination broke down
        pivot_value: Magnitude of the best pivot candidate in that column
    """

    def __init__(
        self,
        message: str,
        pivot_index: int | None = None,
        pivot_value: float | None = None,
    ):
        super().__init__(message)
        self.pivot_index = pivot_index
        self.pivot_value = pivot_value


class NotPositiveDefiniteError(NumericalError, ValueError):
    """
    Matrix is not positive definite.

    Raised by Cholesky decomposition when a computed diagonal entry is
    not strictly positive before its square root is taken.

    Attributes:
        column: Column whose diagonal entry failed
        diagonal_value: The non-positive value that was computed
    """

    def __init__(
        self,
        message: str,
        column: int | None = None,
        diagonal_value: float | None = None,
    ):
        super().__init__(message)
        self.column = column
        self.diagonal_value = diagonal_value
