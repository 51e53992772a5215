"""
BLAS-style kernels over views.

These are the primitives the containers and the factorizations are
built from. Each function validates shapes, then hands the strided
numpy windows to the active backend. Owning containers are accepted
and viewed in full.

Results come back as new owning containers; ``ger`` is the only kernel
that writes through its argument.
"""

from enum import Enum
from typing import Any

import numpy as np

from pydenselinalg.containers.matrix import Matrix
from pydenselinalg.containers.vector import COLUMN, ROW, Vector
from pydenselinalg.containers.views import MatrixView, VectorView
from pydenselinalg.core.compute.parallel import get_parallel_policy
from pydenselinalg.core.dtypes import promote
from pydenselinalg.core.exceptions import DimensionError, ValidationError
from pydenselinalg.kernels.backends import active_backend


class Op(Enum):
    """Whether gemv uses A or its transpose."""
    NO_TRANS = 'N'
    TRANS = 'T'


def _matrix_view(a: Matrix | MatrixView, name: str) -> MatrixView:
    if isinstance(a, Matrix):
        return a.view()
    if isinstance(a, MatrixView):
        return a
    raise ValidationError(f"{name}: expected Matrix or MatrixView, got {type(a).__name__}")


def _vector_view(x: Vector | VectorView, name: str) -> VectorView:
    if isinstance(x, Vector):
        return x.view()
    if isinstance(x, VectorView):
        return x
    raise ValidationError(f"{name}: expected Vector or VectorView, got {type(x).__name__}")


def gemv(op: Op, a: Matrix | MatrixView, x: Vector | VectorView) -> Vector:
    """
    General matrix-vector product.

    Args:
        op: Op.NO_TRANS for y = A x, Op.TRANS for y = A^T x
        a: Matrix operand
        x: Vector operand (orientation is ignored)

    Returns:
        New Vector of the promoted type; COLUMN for NO_TRANS, ROW for TRANS

    Raises:
        DimensionError: If x does not match the contracted dimension of A
    """
    a = _matrix_view(a, "gemv A")
    x = _vector_view(x, "gemv x")
    trans = op is Op.TRANS
    expected = a.row_count if trans else a.column_count
    if x.size != expected:
        raise DimensionError(
            f"gemv: vector size {x.size} does not match "
            f"{'rows' if trans else 'columns'} of a {a.row_count}x{a.column_count} matrix"
        )
    y = active_backend().gemv(a.array(), x.array(), trans)
    return Vector.adopt(y, orientation=ROW if trans else COLUMN)


def ger(a: Matrix | MatrixView, x: Vector | VectorView, y: Vector | VectorView, alpha: Any) -> None:
    """
    In-place rank-1 update A <- A - alpha * x * y^T.

    Pass a negative ``alpha`` to add the outer product instead. The
    update is computed in the promoted type and stored in A's type.

    Raises:
        DimensionError: If x does not match A's rows or y A's columns
    """
    a = _matrix_view(a, "ger A")
    x = _vector_view(x, "ger x")
    y = _vector_view(y, "ger y")
    if x.size != a.row_count or y.size != a.column_count:
        raise DimensionError(
            f"ger: vectors of size {x.size} and {y.size} do not match a "
            f"{a.row_count}x{a.column_count} matrix"
        )
    active_backend().ger(a.array(), x.array(), y.array(), alpha)


def dot(x: Vector | VectorView, y: Vector | VectorView) -> Any:
    """
    Inner product in the promoted type of x and y.

    Raises:
        DimensionError: If sizes differ
    """
    x = _vector_view(x, "dot x")
    y = _vector_view(y, "dot y")
    if x.size != y.size:
        raise DimensionError(
            f"Vectors must be of same size for dot product! (got {x.size} and {y.size})"
        )
    return active_backend().dot(x.array(), y.array())


def outer(x: Vector | VectorView, y: Vector | VectorView) -> Matrix:
    """New |x| x |y| matrix with entries x[i] * y[j]."""
    x = _vector_view(x, "outer x")
    y = _vector_view(y, "outer y")
    policy = get_parallel_policy()
    dtype = promote(x, y)
    rows, cols = x.size, y.size
    xs = x.array().astype(dtype, copy=False)
    ys = y.array().astype(dtype, copy=False)
    out = np.empty((rows, cols), dtype=dtype)

    def body(start: int, stop: int) -> None:
        np.multiply.outer(xs[start:stop], ys, out=out[start:stop])

    policy.parallel_for(rows, body, work=rows * cols, threshold=policy.quadratic_threshold)
    return Matrix.adopt(rows, cols, out)


def gemm(a: Matrix | MatrixView, b: Matrix | MatrixView) -> Matrix:
    """
    Cache-blocked matrix product A B.

    Raises:
        DimensionError: If A's column count differs from B's row count
    """
    a = _matrix_view(a, "gemm A")
    b = _matrix_view(b, "gemm B")
    if a.column_count != b.row_count:
        raise DimensionError(
            f"Matrix inner dimensions do not match for multiplication! "
            f"(got {a.row_count}x{a.column_count} and {b.row_count}x{b.column_count})"
        )
    c = active_backend().gemm(a.array(), b.array())
    return Matrix.adopt(a.row_count, b.column_count, c)
