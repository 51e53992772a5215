"""
Owning one-dimensional container with a row/column orientation.

The orientation decides which products are legal:

    row    * column  -> scalar dot product
    column * row     -> outer product Matrix
    row    * Matrix  -> row Vector
    Matrix * column  -> column Vector (see Matrix)

Elementwise addition and subtraction require the same orientation and
the same size.
"""

import warnings
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, Sequence

import numpy as np
from numpy.typing import ArrayLike, DTypeLike

from pydenselinalg.containers._elementwise import apply_binary, apply_unary
from pydenselinalg.containers.views import VectorView
from pydenselinalg.core.compute.parallel import get_parallel_policy
from pydenselinalg.core.compute.precision import EPSILON, is_close
from pydenselinalg.core.dtypes import (
    DEFAULT_DTYPE,
    ScalarT,
    check_numeric_dtype,
    float_promote,
    is_scalar,
    promote,
    promote_division,
)
from pydenselinalg.core.exceptions import (
    DimensionError,
    InvalidConstructionError,
    NumericalError,
    ValidationError,
)
from pydenselinalg.core.validation import check_buffer, check_index, check_source_size

if TYPE_CHECKING:
    from pydenselinalg.containers.matrix import Matrix


class Orientation(Enum):
    """Whether a Vector is a row or a column."""
    ROW = 'row'
    COLUMN = 'column'

    def flipped(self) -> 'Orientation':
        return Orientation.COLUMN if self is Orientation.ROW else Orientation.ROW


ROW = Orientation.ROW
COLUMN = Orientation.COLUMN

_SAME_SHAPE = "Vectors must be same orientation and size!"


def _as_source(data: Any, name: str) -> np.ndarray:
    if isinstance(data, Vector):
        return data.data
    if isinstance(data, VectorView):
        return data.array()
    try:
        array = np.asarray(data)
    except (ValueError, TypeError) as e:
        raise InvalidConstructionError(f"{name}: cannot convert data to an array: {e}") from e
    if array.ndim != 1:
        raise InvalidConstructionError(f"{name}: expected 1D data, got shape {array.shape}")
    return array


class Vector(Generic[ScalarT]):
    """
    Contiguous, owning vector of numeric elements.

    Args:
        size: Number of elements (must be positive)
        data: Optional source to copy (sequence, numpy array, Vector or
            VectorView) of exactly ``size`` elements. None gives zeros.
        orientation: ROW or COLUMN. Defaults to the source Vector's
            orientation when copying one, else COLUMN.
        dtype: Element type. Defaults to the source's dtype, or float64.

    Raises:
        InvalidConstructionError: If size is zero or data has the wrong size
        ValidationError: If the dtype is not an arithmetic type

    Examples:
        >>> v = Vector(3, [1.0, 2.0, 3.0])
        >>> r = v.transposed()           # row vector
        >>> r * v                        # dot product
        14.0
    """

    __slots__ = ('_data', '_orientation')

    # Make numpy defer to our reflected operators
    __array_ufunc__ = None

    def __init__(
        self,
        size: int,
        data: ArrayLike | None = None,
        *,
        orientation: Orientation | None = None,
        dtype: DTypeLike | None = None,
    ):
        if int(size) <= 0:
            raise InvalidConstructionError("Vector size must be greater than zero.")
        if orientation is None:
            orientation = data.orientation if isinstance(data, Vector) else COLUMN
        if not isinstance(orientation, Orientation):
            raise ValidationError(f"orientation: expected Orientation, got {orientation!r}")

        if data is None:
            dtype = check_numeric_dtype(DEFAULT_DTYPE if dtype is None else dtype)
            self._data = np.zeros(size, dtype=dtype)
        else:
            source = _as_source(data, "Vector")
            check_source_size(source.size, size, "Vector")
            dtype = check_numeric_dtype(source.dtype if dtype is None else dtype)
            self._data = np.array(source, dtype=dtype)
        self._orientation = orientation

    # === Alternative constructors ===

    @classmethod
    def _wrap(cls, data: np.ndarray, orientation: Orientation) -> 'Vector':
        obj = cls.__new__(cls)
        obj._data = data
        obj._orientation = orientation
        return obj

    @classmethod
    def from_buffer(
        cls,
        size: int,
        buffer: ArrayLike,
        *,
        orientation: Orientation = COLUMN,
        dtype: DTypeLike | None = None,
    ) -> 'Vector':
        """Copy the first ``size`` elements of ``buffer``."""
        if int(size) <= 0:
            raise InvalidConstructionError("Vector size must be greater than zero.")
        source = check_buffer(buffer, "Vector")
        if source.size < size:
            raise InvalidConstructionError(
                f"Vector: buffer holds {source.size} elements, {size} requested"
            )
        return cls(size, source[:size], orientation=orientation, dtype=dtype)

    @classmethod
    def adopt(cls, array: np.ndarray, *, orientation: Orientation = COLUMN) -> 'Vector':
        """
        Take over ``array`` as the vector's buffer without copying.

        The caller gives up the array: later writes through other
        references show up in the Vector.
        """
        if not isinstance(array, np.ndarray) or array.ndim != 1:
            raise InvalidConstructionError("Vector.adopt: expected a 1D numpy array")
        if array.size == 0:
            raise InvalidConstructionError("Vector size must be greater than zero.")
        check_numeric_dtype(array.dtype)
        return cls._wrap(np.ascontiguousarray(array), orientation)

    @classmethod
    def of(cls, *values: Any, orientation: Orientation = COLUMN,
           dtype: DTypeLike | None = None) -> 'Vector':
        """Build a vector from literal values: ``Vector.of(1, 2, 3)``."""
        return cls(len(values), values, orientation=orientation, dtype=dtype)

    # === Shape ===

    @property
    def size(self) -> int:
        return self._data.size

    @property
    def orientation(self) -> Orientation:
        return self._orientation

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    @property
    def data(self) -> np.ndarray:
        """The raw contiguous buffer (shared, not a copy)."""
        return self._data

    def __len__(self) -> int:
        return self._data.size

    def to_numpy(self, copy: bool = True) -> np.ndarray:
        return self._data.copy() if copy else self._data

    def __array__(self, dtype=None, copy=None):
        if copy:
            return np.array(self._data, dtype=dtype)
        if dtype is None:
            return self._data
        return self._data.astype(dtype)

    # === Access ===

    def __getitem__(self, index):
        return self._data[index]

    def __setitem__(self, index, value) -> None:
        self._data[index] = value

    def at(self, index: int):
        """Bounds-checked read."""
        check_index(index, self.size, "Index out of bounds.")
        return self._data[index]

    def set_at(self, index: int, value) -> None:
        """Bounds-checked write."""
        check_index(index, self.size, "Index out of bounds.")
        self._data[index] = value

    def view(self, offset: int = 0, size: int | None = None, inc: int = 1) -> VectorView:
        """
        Strided window over this vector's buffer.

        An omitted size runs to the end of the vector.

        Raises:
            OutOfRangeError: If offset lies outside the vector or the
                window runs past its end
            ValidationError: If size or inc is not positive
        """
        check_index(offset, self.size, "View offset out of bounds.")
        if size is None:
            size = len(range(offset, self.size, inc)) if inc > 0 else 0
        return VectorView(self._data, size, inc, offset)

    # === Methods ===

    def cast(self, dtype: DTypeLike) -> 'Vector':
        """Copy converted to ``dtype``."""
        return Vector(self.size, self._data, orientation=self._orientation, dtype=dtype)

    def fill(self, value) -> None:
        self._data.fill(value)

    def is_null(self) -> bool:
        """True when every element is within EPSILON of zero."""
        return bool(np.all(is_close(self._data, 0)))

    def norm(self):
        """Euclidean norm, in the floating type of the elements."""
        work = float_promote(self.dtype)
        policy = get_parallel_policy()
        data = self._data

        def partial(start: int, stop: int):
            chunk = data[start:stop].astype(work, copy=False)
            return np.einsum('i,i->', chunk, chunk)

        total = policy.parallel_sum(self.size, partial, work=self.size,
                                    threshold=policy.linear_threshold)
        return work.type(np.sqrt(total))

    def normalize(self) -> None:
        """
        Scale in place to unit norm.

        Raises:
            ValidationError: For integral element types
            NumericalError: For a null vector
        """
        if self.dtype.kind != 'f':
            raise ValidationError(
                f"normalize requires a floating dtype, got {self.dtype}; use cast() first"
            )
        n = self.norm()
        if n == 0:
            raise NumericalError("Cannot normalize a null vector.")
        apply_binary(np.divide, self._data, n, self._data)

    def transpose(self) -> None:
        """Flip orientation in place."""
        self._orientation = self._orientation.flipped()

    def transposed(self) -> 'Vector':
        return Vector._wrap(self._data.copy(), self._orientation.flipped())

    def dot_product(self, other: 'Vector') -> Any:
        """
        Dot product regardless of orientation.

        Raises:
            DimensionError: If sizes differ
        """
        from pydenselinalg.kernels import blas
        if self.size != other.size:
            raise DimensionError(f"Vectors must be of same size! (got {self.size} and {other.size})")
        return blas.dot(self.view(), other.view())

    def outer_product(self, other: 'Vector') -> 'Matrix':
        """
        Outer product self * other^T.

        A column times a row gives an n x m Matrix. Two same-orientation
        vectors of size 1 give a 1x1 Matrix. A row times a column of the
        same size gives a 1x1 Matrix holding their dot product.

        Raises:
            DimensionError: For any other combination
        """
        from pydenselinalg.containers.matrix import Matrix
        from pydenselinalg.kernels import blas

        if self._orientation is other._orientation:
            if self.size == 1 and other.size == 1:
                return blas.outer(self.view(), other.view())
            raise DimensionError("Vector dimensions do not match!")
        if self._orientation is COLUMN:
            return blas.outer(self.view(), other.view())
        if self.size != other.size:
            raise DimensionError("Vector dimensions do not match!")
        warnings.warn(
            "outer_product of a row and a column vector is their dot product; "
            "returning a 1x1 matrix",
            UserWarning,
            stacklevel=2,
        )
        value = blas.dot(self.view(), other.view())
        return Matrix(1, 1, [value])

    # === Operators ===

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vector):
            return NotImplemented
        return (self._orientation is other._orientation
                and self.size == other.size
                and bool(np.array_equal(self._data, other._data)))

    __hash__ = None

    def __neg__(self) -> 'Vector':
        out = np.empty_like(self._data)
        return Vector._wrap(apply_unary(np.negative, self._data, out), self._orientation)

    def _check_same_shape(self, other: 'Vector') -> None:
        if self._orientation is not other._orientation or self.size != other.size:
            raise DimensionError(_SAME_SHAPE)

    def _reject_matrix(self, other: Any, verb: str) -> None:
        from pydenselinalg.containers.matrix import Matrix
        if isinstance(other, Matrix):
            raise DimensionError(
                f"Cannot {verb} a Vector and a Matrix elementwise; "
                f"convert one operand first"
            )

    def _elementwise(self, ufunc, other: Any, dtype: np.dtype, reflected: bool = False):
        if isinstance(other, Vector):
            self._check_same_shape(other)
            other = other._data
        elif not is_scalar(other):
            return NotImplemented
        out = np.empty(self.size, dtype=dtype)
        left, right = (other, self._data) if reflected else (self._data, other)
        return Vector._wrap(apply_binary(ufunc, left, right, out), self._orientation)

    def _inplace(self, ufunc, other: Any) -> 'Vector':
        if isinstance(other, Vector):
            self._check_same_shape(other)
            other = other._data
        elif not is_scalar(other):
            return NotImplemented
        apply_binary(ufunc, self._data, other, self._data)
        return self

    def __add__(self, other):
        self._reject_matrix(other, "add")
        if not isinstance(other, Vector) and not is_scalar(other):
            return NotImplemented
        return self._elementwise(np.add, other, promote(self, other))

    def __radd__(self, other):
        if not is_scalar(other):
            return NotImplemented
        return self._elementwise(np.add, other, promote(other, self), reflected=True)

    def __sub__(self, other):
        self._reject_matrix(other, "subtract")
        if not isinstance(other, Vector) and not is_scalar(other):
            return NotImplemented
        return self._elementwise(np.subtract, other, promote(self, other))

    def __rsub__(self, other):
        if not is_scalar(other):
            return NotImplemented
        return self._elementwise(np.subtract, other, promote(other, self), reflected=True)

    def __mul__(self, other):
        from pydenselinalg.containers.matrix import Matrix
        from pydenselinalg.kernels import blas

        if is_scalar(other):
            return self._elementwise(np.multiply, other, promote(self, other))
        if isinstance(other, Vector):
            if self._orientation is ROW and other._orientation is COLUMN:
                if self.size != other.size:
                    raise DimensionError(
                        f"Vectors must be of same size! (got {self.size} and {other.size})"
                    )
                return blas.dot(self.view(), other.view())
            if self._orientation is COLUMN and other._orientation is ROW:
                return blas.outer(self.view(), other.view())
            raise DimensionError(
                "Invalid vector product: only row * column (dot product) and "
                "column * row (outer product) are defined; use dot_product() "
                "or outer_product() explicitly"
            )
        if isinstance(other, Matrix):
            if self._orientation is not ROW:
                raise DimensionError(
                    "Invalid multiplication: column Vector * Matrix. "
                    "Did you mean Matrix * Vector?"
                )
            if self.size != other.row_count:
                raise DimensionError(
                    f"Dimensions do not match! (vector size {self.size}, "
                    f"matrix {other.row_count}x{other.column_count})"
                )
            return blas.gemv(blas.Op.TRANS, other.view(), self.view())
        return NotImplemented

    def __rmul__(self, other):
        if not is_scalar(other):
            return NotImplemented
        return self._elementwise(np.multiply, other, promote(other, self), reflected=True)

    def __matmul__(self, other):
        if is_scalar(other):
            return NotImplemented
        return self.__mul__(other)

    def __truediv__(self, other):
        if not is_scalar(other):
            return NotImplemented
        return self._elementwise(np.divide, other, promote_division(self, other))

    def __rtruediv__(self, other):
        if not is_scalar(other):
            return NotImplemented
        return self._elementwise(np.divide, other, promote_division(other, self),
                                 reflected=True)

    def __iadd__(self, other):
        self._reject_matrix(other, "add")
        return self._inplace(np.add, other)

    def __isub__(self, other):
        self._reject_matrix(other, "subtract")
        return self._inplace(np.subtract, other)

    def __imul__(self, other):
        if not is_scalar(other):
            return NotImplemented
        return self._inplace(np.multiply, other)

    def __itruediv__(self, other):
        if not is_scalar(other):
            return NotImplemented
        return self._inplace(np.divide, other)

    def __repr__(self) -> str:
        return (f"Vector(size={self.size}, orientation={self._orientation.name}, "
                f"dtype={self.dtype}, data={self._data.tolist()})")


def loosely_equal_vectors(first: Vector, second: Vector, epsilon: float = EPSILON) -> bool:
    """Elementwise comparison within ``epsilon``; size or orientation mismatch is False."""
    if first.size != second.size or first.orientation is not second.orientation:
        return False
    return bool(np.all(is_close(first.data, second.data, epsilon)))
