"""
Owning, row-major dense matrix.

The matrix keeps one flat contiguous buffer of ``rows * cols`` elements.
Element (i, j) lives at ``data[i * cols + j]``. Sub-blocks are exposed
as MatrixView windows over that buffer, which is how the kernels and
the factorizations work on parts of a matrix without copying.
"""

from typing import Any, Generic, Sequence

import numpy as np
from numpy.typing import ArrayLike, DTypeLike

from pydenselinalg.containers._elementwise import apply_binary, apply_unary
from pydenselinalg.containers.vector import COLUMN, Vector, loosely_equal_vectors
from pydenselinalg.containers.views import MatrixView
from pydenselinalg.core.compute.parallel import get_parallel_policy
from pydenselinalg.core.compute.precision import EPSILON, is_close
from pydenselinalg.core.dtypes import (
    DEFAULT_DTYPE,
    ScalarT,
    check_numeric_dtype,
    is_scalar,
    promote,
    promote_division,
)
from pydenselinalg.core.exceptions import (
    DimensionError,
    InvalidConstructionError,
    NotPositiveDefiniteError,
    NotSymmetricError,
    OutOfRangeError,
    SingularMatrixError,
    ValidationError,
)
from pydenselinalg.core.validation import (
    check_buffer,
    check_index,
    check_positive_dims,
    check_same_shape,
    check_source_size,
    check_square,
)

_DIMS_MESSAGE = "Matrix dimensions must be greater than zero."


def _as_source(data: Any, rows: int, cols: int) -> np.ndarray:
    if isinstance(data, Matrix):
        source = data.data
    elif isinstance(data, MatrixView):
        source = data.array()
    else:
        try:
            source = np.asarray(data)
        except (ValueError, TypeError) as e:
            # ragged nested sequences end up here
            raise InvalidConstructionError(
                f"Matrix: cannot convert data to a {rows}x{cols} array: {e}"
            ) from e
    if source.ndim == 2:
        if source.shape != (rows, cols):
            raise InvalidConstructionError(
                f"Data size does not match matrix size. (got shape {source.shape}, "
                f"expected {(rows, cols)})"
            )
    elif source.ndim == 1:
        check_source_size(source.size, rows * cols, "Matrix")
    else:
        raise InvalidConstructionError(
            f"Matrix: expected flat or nested data, got shape {source.shape}"
        )
    return source


class Matrix(Generic[ScalarT]):
    """
    Contiguous, owning, row-major matrix of numeric elements.

    Args:
        rows: Number of rows (must be positive)
        cols: Number of columns (must be positive)
        data: Optional source to copy: a flat sequence of rows*cols values,
            a nested sequence of ``rows`` rows of ``cols`` values, a 2D
            numpy array, a Matrix or a MatrixView. None gives zeros.
        dtype: Element type. Defaults to the source's dtype, or float64.

    Raises:
        InvalidConstructionError: If a dimension is zero or data has the
            wrong size
        ValidationError: If the dtype is not an arithmetic type

    Examples:
        >>> A = Matrix(2, 2, [[4, 1], [1, 3]], dtype=np.float64)
        >>> A.is_symmetric()
        True
        >>> A.view(0, 1, 2, 1)           # second column, no copy
        MatrixView(rows=2, cols=1, stride=2, offset=1, dtype=float64)
    """

    __slots__ = ('_rows', '_cols', '_data')

    # Make numpy defer to our reflected operators
    __array_ufunc__ = None

    def __init__(
        self,
        rows: int,
        cols: int,
        data: ArrayLike | None = None,
        *,
        dtype: DTypeLike | None = None,
    ):
        check_positive_dims(rows, cols, message=_DIMS_MESSAGE)
        if data is None:
            dtype = check_numeric_dtype(DEFAULT_DTYPE if dtype is None else dtype)
            self._data = np.zeros(rows * cols, dtype=dtype)
        else:
            source = _as_source(data, rows, cols)
            dtype = check_numeric_dtype(source.dtype if dtype is None else dtype)
            self._data = np.array(source, dtype=dtype, order='C').reshape(-1)
        self._rows = int(rows)
        self._cols = int(cols)

    # === Alternative constructors ===

    @classmethod
    def _wrap(cls, rows: int, cols: int, flat: np.ndarray) -> 'Matrix':
        obj = cls.__new__(cls)
        obj._rows = rows
        obj._cols = cols
        obj._data = flat
        return obj

    @classmethod
    def from_buffer(
        cls,
        rows: int,
        cols: int,
        buffer: ArrayLike,
        *,
        dtype: DTypeLike | None = None,
    ) -> 'Matrix':
        """Copy the first ``rows * cols`` elements of ``buffer`` (row-major)."""
        check_positive_dims(rows, cols, message=_DIMS_MESSAGE)
        source = check_buffer(buffer, "Matrix")
        if source.size < rows * cols:
            raise InvalidConstructionError(
                f"Matrix: buffer holds {source.size} elements, {rows * cols} requested"
            )
        return cls(rows, cols, source[:rows * cols], dtype=dtype)

    @classmethod
    def adopt(cls, rows: int, cols: int, array: np.ndarray) -> 'Matrix':
        """
        Take over ``array`` (flat or rows x cols) as the buffer without copying.
        """
        check_positive_dims(rows, cols, message=_DIMS_MESSAGE)
        if not isinstance(array, np.ndarray):
            raise InvalidConstructionError("Matrix.adopt: expected a numpy array")
        check_source_size(array.size, rows * cols, "Matrix")
        if array.ndim == 2 and array.shape != (rows, cols):
            raise InvalidConstructionError(
                f"Data size does not match matrix size. (got shape {array.shape})"
            )
        check_numeric_dtype(array.dtype)
        return cls._wrap(int(rows), int(cols), np.ascontiguousarray(array).reshape(-1))

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[Any]], *,
                  dtype: DTypeLike | None = None) -> 'Matrix':
        """Build a matrix from a literal list of rows; dimensions are inferred."""
        if len(rows) == 0 or len(rows[0]) == 0:
            raise InvalidConstructionError(_DIMS_MESSAGE)
        return cls(len(rows), len(rows[0]), rows, dtype=dtype)

    # === Shape ===

    @property
    def row_count(self) -> int:
        return self._rows

    @property
    def column_count(self) -> int:
        return self._cols

    @property
    def shape(self) -> tuple[int, int]:
        return (self._rows, self._cols)

    @property
    def size(self) -> int:
        return self._data.size

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    @property
    def data(self) -> np.ndarray:
        """The raw flat row-major buffer (shared, not a copy)."""
        return self._data

    def _grid(self) -> np.ndarray:
        return self._data.reshape(self._rows, self._cols)

    def to_numpy(self, copy: bool = True) -> np.ndarray:
        """The matrix as a 2D array; with copy=False it shares the buffer."""
        grid = self._grid()
        return grid.copy() if copy else grid

    def __array__(self, dtype=None, copy=None):
        grid = self._grid()
        if copy:
            return np.array(grid, dtype=dtype)
        if dtype is None:
            return grid
        return grid.astype(dtype)

    # === Access ===

    def __getitem__(self, key):
        # m[i] is row i, m[i, j] is one element; no bounds checks
        return self._grid()[key]

    def __setitem__(self, key, value) -> None:
        self._grid()[key] = value

    def at(self, row: int, col: int):
        """Bounds-checked read."""
        check_index(row, self._rows, "Index out of bounds.")
        check_index(col, self._cols, "Index out of bounds.")
        return self._data[row * self._cols + col]

    def set_at(self, row: int, col: int, value) -> None:
        """Bounds-checked write."""
        check_index(row, self._rows, "Index out of bounds.")
        check_index(col, self._cols, "Index out of bounds.")
        self._data[row * self._cols + col] = value

    def row_span(self, row: int) -> np.ndarray:
        """Row ``row`` as a writable 1D array."""
        check_index(row, self._rows, "Index out of bounds.")
        start = row * self._cols
        return self._data[start:start + self._cols]

    def view(
        self,
        row: int = 0,
        col: int = 0,
        height: int | None = None,
        width: int | None = None,
    ) -> MatrixView:
        """
        Window of ``height`` x ``width`` starting at (row, col).

        Omitted extents run to the edge of the matrix.

        Raises:
            ValidationError: If an extent is zero
            OutOfRangeError: If the window leaves the matrix
        """
        if not (0 <= row < self._rows and 0 <= col < self._cols):
            raise OutOfRangeError(
                f"Requested view exceeds matrix dimensions. (origin ({row}, {col}), "
                f"matrix {self._rows}x{self._cols})",
                index=(row, col),
                bounds=self.shape,
            )
        if height is None:
            height = self._rows - row
        if width is None:
            width = self._cols - col
        if height <= 0 or width <= 0:
            raise ValidationError("View dimensions must be greater than zero.")
        if row + height > self._rows or col + width > self._cols:
            raise OutOfRangeError(
                f"Requested view exceeds matrix dimensions. (window at ({row}, {col}) "
                f"of {height}x{width}, matrix {self._rows}x{self._cols})",
                index=(row, col),
                bounds=self.shape,
            )
        return MatrixView(self._data, height, width, self._cols, offset=row * self._cols + col)

    # === Methods ===

    def cast(self, dtype: DTypeLike) -> 'Matrix':
        """Copy converted to ``dtype``."""
        return Matrix(self._rows, self._cols, self._data, dtype=dtype)

    def fill(self, value) -> None:
        self._data.fill(value)

    def make_identity(self) -> None:
        """Overwrite with the identity matrix."""
        check_square(self._rows, self._cols, "Only square matrices can be set to identity!")
        self._data.fill(0)
        self._data[::self._cols + 1] = 1

    def transpose(self) -> None:
        """
        Transpose in place by swapping tiles across the diagonal.

        Raises:
            ValidationError: If the matrix is not square
        """
        check_square(self._rows, self._cols, "Matrix must be square to transpose in-place.")
        policy = get_parallel_policy()
        n = self._rows
        bs = policy.block_size
        grid = self._grid()
        n_blocks = -(-n // bs)

        # Block row ib owns tile pairs (ib, jb) and (jb, ib) for jb >= ib,
        # so different block rows never touch the same tile.
        def body(start: int, stop: int) -> None:
            for ib in range(start * bs, min(stop * bs, n), bs):
                ie = min(ib + bs, n)
                diag = grid[ib:ie, ib:ie]
                diag[...] = diag.T.copy()
                for jb in range(ie, n, bs):
                    je = min(jb + bs, n)
                    upper = grid[ib:ie, jb:je].copy()
                    grid[ib:ie, jb:je] = grid[jb:je, ib:ie].T
                    grid[jb:je, ib:ie] = upper.T

        policy.parallel_for(n_blocks, body, work=n * n, threshold=policy.quadratic_threshold)

    def transposed(self) -> 'Matrix':
        """New cols x rows matrix holding the transpose."""
        policy = get_parallel_policy()
        source = self._grid()
        out = np.empty((self._cols, self._rows), dtype=self.dtype)

        def body(start: int, stop: int) -> None:
            out[start:stop] = source[:, start:stop].T

        policy.parallel_for(self._cols, body, work=self.size,
                            threshold=policy.quadratic_threshold)
        return Matrix._wrap(self._cols, self._rows, out.reshape(-1))

    # === Checkers ===

    def is_square(self) -> bool:
        return self._rows == self._cols

    def is_symmetric(self) -> bool:
        """Square and A[i, j] within EPSILON of A[j, i] everywhere."""
        if not self.is_square():
            return False
        grid = self._grid()
        return bool(np.all(is_close(grid, grid.T, EPSILON)))

    def is_upper_triangular(self) -> bool:
        if not self.is_square():
            return False
        return bool(np.all(is_close(np.tril(self._grid(), -1), 0)))

    def is_lower_triangular(self) -> bool:
        if not self.is_square():
            return False
        return bool(np.all(is_close(np.triu(self._grid(), 1), 0)))

    def is_diagonal(self) -> bool:
        return self.is_upper_triangular() and self.is_lower_triangular()

    def is_singular(self) -> bool:
        """Non-square, or PLU decomposition finds no usable pivot."""
        from pydenselinalg.decomposition.plu import plu
        if not self.is_square():
            return True
        try:
            plu(self)
        except SingularMatrixError:
            return True
        return False

    def is_positive_definite(self) -> bool:
        """Symmetric and Cholesky decomposition succeeds."""
        from pydenselinalg.decomposition.cholesky import cholesky
        try:
            cholesky(self)
        except (NotSymmetricError, NotPositiveDefiniteError):
            return False
        return True

    # === Operators ===

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self._data, other._data))

    __hash__ = None

    def __neg__(self) -> 'Matrix':
        out = np.empty_like(self._data)
        return Matrix._wrap(self._rows, self._cols, apply_unary(np.negative, self._data, out))

    def _reject_vector(self, other: Any, verb: str) -> None:
        if isinstance(other, Vector):
            raise DimensionError(
                f"Cannot {verb} a Matrix and a Vector elementwise; "
                f"convert one operand first"
            )

    def _elementwise(self, ufunc, other: Any, dtype: np.dtype, message: str,
                     reflected: bool = False) -> 'Matrix':
        if isinstance(other, Matrix):
            check_same_shape(self.shape, other.shape, message)
            other = other._data
        out = np.empty(self.size, dtype=dtype)
        left, right = (other, self._data) if reflected else (self._data, other)
        return Matrix._wrap(self._rows, self._cols, apply_binary(ufunc, left, right, out))

    def _inplace(self, ufunc, other: Any, message: str) -> 'Matrix':
        if isinstance(other, Matrix):
            check_same_shape(self.shape, other.shape, message)
            other = other._data
        apply_binary(ufunc, self._data, other, self._data)
        return self

    def __add__(self, other):
        self._reject_vector(other, "add")
        if not isinstance(other, Matrix) and not is_scalar(other):
            return NotImplemented
        return self._elementwise(np.add, other, promote(self, other),
                                 "Matrices have to be of same dimensions for addition!")

    def __radd__(self, other):
        if not is_scalar(other):
            return NotImplemented
        return self._elementwise(np.add, other, promote(other, self), "", reflected=True)

    def __sub__(self, other):
        self._reject_vector(other, "subtract")
        if not isinstance(other, Matrix) and not is_scalar(other):
            return NotImplemented
        return self._elementwise(np.subtract, other, promote(self, other),
                                 "Matrices have to be of same dimensions for subtraction!")

    def __rsub__(self, other):
        if not is_scalar(other):
            return NotImplemented
        return self._elementwise(np.subtract, other, promote(other, self), "", reflected=True)

    def __mul__(self, other):
        from pydenselinalg.kernels import blas

        if is_scalar(other):
            return self._elementwise(np.multiply, other, promote(self, other), "")
        if isinstance(other, Matrix):
            if self._cols != other._rows:
                raise DimensionError(
                    f"Matrix inner dimensions do not match for multiplication! "
                    f"(got {self._rows}x{self._cols} and {other._rows}x{other._cols})"
                )
            return blas.gemm(self.view(), other.view())
        if isinstance(other, Vector):
            if other.orientation is not COLUMN:
                raise DimensionError(
                    "Invalid multiplication: matrix * row vector. "
                    "Did you mean Vector * Matrix?"
                )
            if other.size != self._cols:
                raise DimensionError(
                    f"Dimension mismatch in Matrix * Vector multiplication. "
                    f"(matrix {self._rows}x{self._cols}, vector size {other.size})"
                )
            return blas.gemv(blas.Op.NO_TRANS, self.view(), other.view())
        return NotImplemented

    def __rmul__(self, other):
        if not is_scalar(other):
            return NotImplemented
        return self._elementwise(np.multiply, other, promote(other, self), "", reflected=True)

    def __matmul__(self, other):
        if is_scalar(other):
            return NotImplemented
        return self.__mul__(other)

    def __truediv__(self, other):
        if not is_scalar(other):
            return NotImplemented
        return self._elementwise(np.divide, other, promote_division(self, other), "")

    def __rtruediv__(self, other):
        if not is_scalar(other):
            return NotImplemented
        return self._elementwise(np.divide, other, promote_division(other, self), "",
                                 reflected=True)

    def __iadd__(self, other):
        self._reject_vector(other, "add")
        if not isinstance(other, Matrix) and not is_scalar(other):
            return NotImplemented
        return self._inplace(np.add, other,
                             "Matrices have to be of same dimensions for addition!")

    def __isub__(self, other):
        self._reject_vector(other, "subtract")
        if not isinstance(other, Matrix) and not is_scalar(other):
            return NotImplemented
        return self._inplace(np.subtract, other,
                             "Matrices have to be of same dimensions for subtraction!")

    def __imul__(self, other):
        if not is_scalar(other):
            return NotImplemented
        return self._inplace(np.multiply, other, "")

    def __itruediv__(self, other):
        if not is_scalar(other):
            return NotImplemented
        return self._inplace(np.divide, other, "")

    def __repr__(self) -> str:
        return f"Matrix(rows={self._rows}, cols={self._cols}, dtype={self.dtype})"


def loosely_equal(first: Any, second: Any, epsilon: float = EPSILON) -> bool:
    """
    Tolerance-based equality for matrices or vectors.

    Returns False on any shape (or vector orientation) mismatch instead
    of raising.
    """
    if isinstance(first, Vector) and isinstance(second, Vector):
        return loosely_equal_vectors(first, second, epsilon)
    if isinstance(first, Matrix) and isinstance(second, Matrix):
        if first.shape != second.shape:
            return False
        return bool(np.all(is_close(first.data, second.data, epsilon)))
    raise ValidationError(
        f"loosely_equal: expected two matrices or two vectors, got "
        f"{type(first).__name__} and {type(second).__name__}"
    )
