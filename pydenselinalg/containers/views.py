"""
Non-owning strided windows over a one-dimensional buffer.

A view is described the same way a BLAS routine sees its operand: a
buffer, an offset into it, a logical extent and a stride. For a
VectorView the stride is the increment between consecutive logical
elements; for a MatrixView it is the distance between the starts of
consecutive rows (at least the view's own column count, so a view can
describe a sub-block of a larger row-major matrix).

Views never copy. Reads and writes through a view land in the owner's
buffer, which is what lets the factorizations update sub-blocks in
place.

Lifetime contract:
    The owner's buffer must not be replaced or resized while a view is
    in use. NumPy keeps the memory itself alive, but a view taken before
    an owner swaps its buffer keeps pointing at the old one.

Aliasing:
    Nothing stops two overlapping views from being passed to one
    parallel kernel. Code that parallelizes over views must hand each
    worker a disjoint region.
"""

from typing import TYPE_CHECKING, Any, Generic

import numpy as np
from numpy.lib.stride_tricks import as_strided

from pydenselinalg.core.dtypes import ScalarT, check_numeric_dtype
from pydenselinalg.core.exceptions import (
    InvalidConstructionError,
    OutOfRangeError,
    ValidationError,
)
from pydenselinalg.core.validation import check_index

if TYPE_CHECKING:
    from pydenselinalg.containers.matrix import Matrix
    from pydenselinalg.containers.vector import Orientation, Vector


def _check_view_buffer(buffer: Any, kind: str) -> np.ndarray:
    if buffer is None:
        raise InvalidConstructionError(f"{kind}: data buffer cannot be None")
    if not isinstance(buffer, np.ndarray) or buffer.ndim != 1:
        raise InvalidConstructionError(
            f"{kind}: expected a 1D numpy buffer, got {type(buffer).__name__}"
        )
    check_numeric_dtype(buffer.dtype, f"{kind} buffer")
    return buffer


class VectorView(Generic[ScalarT]):
    """
    Strided, non-owning window of ``size`` elements.

    Element i lives at ``buffer[offset + i * inc]``.

    Args:
        buffer: 1D numpy array the view refers to
        size: Number of logical elements
        inc: Increment between logical elements (positive)
        offset: Index of element 0 within ``buffer``

    Raises:
        InvalidConstructionError: If buffer is None or not a 1D array
        ValidationError: If size or inc is not positive
        OutOfRangeError: If the window does not fit inside the buffer
    """

    __slots__ = ('_buffer', '_offset', '_size', '_inc', '_array')

    def __init__(self, buffer: np.ndarray, size: int, inc: int = 1, offset: int = 0):
        buffer = _check_view_buffer(buffer, "VectorView")
        if size <= 0:
            raise ValidationError("View dimensions must be greater than zero.")
        if inc <= 0:
            raise ValidationError(f"VectorView increment must be positive, got {inc}")
        last = offset + (size - 1) * inc
        if offset < 0 or last >= buffer.size:
            raise OutOfRangeError(
                f"VectorView exceeds its buffer (elements {offset}..{last}, "
                f"buffer length {buffer.size})",
                index=last,
                bounds=buffer.size,
            )
        self._buffer = buffer
        self._offset = offset
        self._size = size
        self._inc = inc
        self._array = buffer[offset:last + 1:inc]

    # === Shape ===

    @property
    def size(self) -> int:
        return self._size

    @property
    def increment(self) -> int:
        return self._inc

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def buffer(self) -> np.ndarray:
        """The underlying buffer (not just the window)."""
        return self._buffer

    @property
    def dtype(self) -> np.dtype:
        return self._buffer.dtype

    def __len__(self) -> int:
        return self._size

    # === Access ===

    def array(self) -> np.ndarray:
        """The window as a strided numpy array sharing the buffer."""
        return self._array

    def __getitem__(self, index):
        return self._array[index]

    def __setitem__(self, index, value) -> None:
        self._array[index] = value

    def at(self, index: int):
        """Bounds-checked read."""
        check_index(index, self._size, "VectorView index out of bounds")
        return self._array[index]

    def set_at(self, index: int, value) -> None:
        """Bounds-checked write."""
        check_index(index, self._size, "VectorView index out of bounds")
        self._array[index] = value

    def to_vector(self, orientation: 'Orientation | None' = None) -> 'Vector':
        """Copy the window into a new owning Vector."""
        from pydenselinalg.containers.vector import Orientation, Vector
        return Vector(self._size, self._array,
                      orientation=orientation or Orientation.COLUMN)

    # === Products ===

    def __matmul__(self, other):
        """``x @ A`` reads x as a row vector: y = A^T x, returned as a row Vector."""
        from pydenselinalg.kernels import blas
        if not isinstance(other, MatrixView):
            return NotImplemented
        return blas.gemv(blas.Op.TRANS, other, self)

    __mul__ = __matmul__

    def __repr__(self) -> str:
        return (f"VectorView(size={self._size}, inc={self._inc}, "
                f"offset={self._offset}, dtype={self.dtype})")


class MatrixView(Generic[ScalarT]):
    """
    Strided, non-owning ``rows`` x ``cols`` window.

    Element (i, j) lives at ``buffer[offset + i * stride + j]``.

    Args:
        buffer: 1D numpy array the view refers to
        rows: Number of rows in the window
        cols: Number of columns in the window
        stride: Distance between the starts of consecutive rows (>= cols)
        offset: Index of element (0, 0) within ``buffer``

    Raises:
        InvalidConstructionError: If buffer is None or not a 1D array
        ValidationError: If an extent is zero or stride < cols
        OutOfRangeError: If the window does not fit inside the buffer
    """

    __slots__ = ('_buffer', '_offset', '_rows', '_cols', '_stride', '_array')

    def __init__(
        self,
        buffer: np.ndarray,
        rows: int,
        cols: int,
        stride: int,
        offset: int = 0,
    ):
        buffer = _check_view_buffer(buffer, "MatrixView")
        if rows <= 0 or cols <= 0:
            raise ValidationError("View dimensions must be greater than zero.")
        if stride < cols:
            raise ValidationError(
                f"MatrixView stride ({stride}) must be at least the column count ({cols})"
            )
        last = offset + (rows - 1) * stride + cols - 1
        if offset < 0 or last >= buffer.size:
            raise OutOfRangeError(
                f"MatrixView exceeds its buffer (last element {last}, "
                f"buffer length {buffer.size})",
                index=last,
                bounds=buffer.size,
            )
        self._buffer = buffer
        self._offset = offset
        self._rows = rows
        self._cols = cols
        self._stride = stride
        item = buffer.strides[0]
        self._array = as_strided(
            buffer[offset:],
            shape=(rows, cols),
            strides=(stride * item, item),
        )

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
        return self._rows * self._cols

    @property
    def stride(self) -> int:
        return self._stride

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def buffer(self) -> np.ndarray:
        """The underlying buffer (not just the window)."""
        return self._buffer

    @property
    def dtype(self) -> np.dtype:
        return self._buffer.dtype

    # === Access ===

    def array(self) -> np.ndarray:
        """The window as a 2D strided numpy array sharing the buffer."""
        return self._array

    def __getitem__(self, key):
        # view[i] is row i, view[i, j] is one element; no bounds checks
        return self._array[key]

    def __setitem__(self, key, value) -> None:
        self._array[key] = value

    def at(self, row: int, col: int):
        """Bounds-checked read."""
        check_index(row, self._rows, "View index out of bounds")
        check_index(col, self._cols, "View index out of bounds")
        return self._array[row, col]

    def set_at(self, row: int, col: int, value) -> None:
        """Bounds-checked write."""
        check_index(row, self._rows, "View index out of bounds")
        check_index(col, self._cols, "View index out of bounds")
        self._array[row, col] = value

    def row_span(self, row: int) -> np.ndarray:
        """Row ``row`` of the window as a writable 1D array."""
        check_index(row, self._rows, "View index out of bounds")
        return self._array[row]

    def to_matrix(self) -> 'Matrix':
        """Copy the window into a new owning Matrix."""
        from pydenselinalg.containers.matrix import Matrix
        return Matrix(self._rows, self._cols, self._array)

    # === Products ===

    def __matmul__(self, other):
        from pydenselinalg.containers.vector import Vector
        from pydenselinalg.kernels import blas

        if isinstance(other, (VectorView, Vector)):
            return blas.gemv(blas.Op.NO_TRANS, self, other)
        if isinstance(other, MatrixView):
            return blas.gemm(self, other)
        return NotImplemented

    __mul__ = __matmul__

    def __repr__(self) -> str:
        return (f"MatrixView(rows={self._rows}, cols={self._cols}, "
                f"stride={self._stride}, offset={self._offset}, dtype={self.dtype})")
