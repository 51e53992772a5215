"""
Tests for the BLAS-style kernels.

Every kernel is run against both backends and compared with a plain
numpy reference.
"""

import numpy as np
import pytest

from pydenselinalg.containers.matrix import Matrix
from pydenselinalg.containers.vector import COLUMN, ROW, Vector
from pydenselinalg.containers.views import VectorView
from pydenselinalg.core.exceptions import DimensionError, ValidationError
from pydenselinalg.kernels.blas import Op, dot, gemm, gemv, ger, outer


# ═══════════════════════════════════════════════════════════════════════
# gemv
# ═══════════════════════════════════════════════════════════════════════


class TestGemv:

    def test_no_trans(self, backend, rng):
        a = rng.standard_normal((5, 3))
        x = rng.standard_normal(3)
        y = gemv(Op.NO_TRANS, Matrix(5, 3, a), Vector(3, x))
        assert y.orientation is COLUMN
        np.testing.assert_allclose(y.data, a @ x, rtol=1e-12)

    def test_trans(self, backend, rng):
        a = rng.standard_normal((5, 3))
        x = rng.standard_normal(5)
        y = gemv(Op.TRANS, Matrix(5, 3, a), Vector(5, x))
        assert y.orientation is ROW
        np.testing.assert_allclose(y.data, a.T @ x, rtol=1e-12)

    def test_on_sub_view(self, backend, rng):
        a = rng.standard_normal((6, 6))
        A = Matrix(6, 6, a)
        x = rng.standard_normal(3)
        y = gemv(Op.NO_TRANS, A.view(1, 2, 4, 3), Vector(3, x))
        np.testing.assert_allclose(y.data, a[1:5, 2:5] @ x, rtol=1e-12)

    def test_strided_vector(self, backend, rng):
        a = rng.standard_normal((3, 3))
        buffer = rng.standard_normal(9)
        x = VectorView(buffer, 3, inc=3)
        y = gemv(Op.NO_TRANS, Matrix(3, 3, a), x)
        np.testing.assert_allclose(y.data, a @ buffer[::3], rtol=1e-12)

    def test_integer_operands(self, backend):
        A = Matrix.from_rows([[1, 2], [3, 4]])
        y = gemv(Op.NO_TRANS, A, Vector.of(1, 1))
        assert y.dtype.kind == 'i'
        np.testing.assert_array_equal(y.data, [3, 7])

    def test_mixed_precision(self, backend):
        A = Matrix(2, 2, [[1, 2], [3, 4]], dtype=np.float32)
        x = Vector(2, [1, 1], dtype=np.float64)
        y = gemv(Op.NO_TRANS, A, x)
        assert y.dtype == np.float64

    def test_threaded(self, threaded, backend, rng):
        a = rng.standard_normal((9, 7))
        x = rng.standard_normal(9)
        y = gemv(Op.TRANS, Matrix(9, 7, a), Vector(9, x))
        np.testing.assert_allclose(y.data, a.T @ x, rtol=1e-12)

    @pytest.mark.parametrize("op,size", [(Op.NO_TRANS, 2), (Op.TRANS, 3)])
    def test_size_mismatch(self, op, size):
        with pytest.raises(DimensionError, match="does not match"):
            gemv(op, Matrix(2, 3), Vector(size))

    def test_rejects_arrays(self):
        with pytest.raises(ValidationError, match="expected Matrix or MatrixView"):
            gemv(Op.NO_TRANS, np.eye(2), Vector(2))


# ═══════════════════════════════════════════════════════════════════════
# ger
# ═══════════════════════════════════════════════════════════════════════


class TestGer:
    """ger subtracts alpha * x * y^T from A in place."""

    def test_update(self, backend, rng):
        a = rng.standard_normal((4, 3))
        x = rng.standard_normal(4)
        y = rng.standard_normal(3)
        A = Matrix(4, 3, a)
        ger(A, Vector(4, x), Vector(3, y), 2.0)
        np.testing.assert_allclose(A.to_numpy(), a - 2.0 * np.outer(x, y), rtol=1e-12)

    def test_negative_alpha_adds(self, backend):
        A = Matrix(2, 2)
        ger(A, Vector.of(1.0, 2.0), Vector.of(3.0, 4.0), -1.0)
        np.testing.assert_allclose(A.to_numpy(), [[3.0, 4.0], [6.0, 8.0]])

    def test_sub_view_only(self, backend, rng):
        a = rng.standard_normal((5, 5))
        A = Matrix(5, 5, a)
        x = rng.standard_normal(2)
        y = rng.standard_normal(3)
        ger(A.view(2, 1, 2, 3), Vector(2, x), Vector(3, y), 1.0)
        expected = a.copy()
        expected[2:4, 1:4] -= np.outer(x, y)
        np.testing.assert_allclose(A.to_numpy(), expected, rtol=1e-12)

    def test_strided_column_vector(self, backend):
        # multipliers taken straight from a column of another matrix
        source = Matrix.from_rows([[1.0, 0.0], [2.0, 0.0], [3.0, 0.0]])
        column = VectorView(source.data, 3, inc=2)
        A = Matrix(3, 2)
        ger(A, column, Vector.of(1.0, 10.0), -1.0)
        np.testing.assert_allclose(A.to_numpy(), [[1.0, 10.0], [2.0, 20.0], [3.0, 30.0]])

    def test_integer_matrix_keeps_type(self, backend):
        A = Matrix.from_rows([[10, 10], [10, 10]])
        ger(A, Vector.of(1, 2), Vector.of(1, 1), 3)
        assert A.dtype.kind == 'i'
        np.testing.assert_array_equal(A.to_numpy(), [[7, 7], [4, 4]])

    def test_threaded(self, threaded, backend, rng):
        a = rng.standard_normal((11, 6))
        x = rng.standard_normal(11)
        y = rng.standard_normal(6)
        A = Matrix(11, 6, a)
        ger(A, Vector(11, x), Vector(6, y), 0.5)
        np.testing.assert_allclose(A.to_numpy(), a - 0.5 * np.outer(x, y), rtol=1e-12)

    def test_size_mismatch(self):
        with pytest.raises(DimensionError, match="do not match"):
            ger(Matrix(2, 3), Vector(3), Vector(3), 1.0)


# ═══════════════════════════════════════════════════════════════════════
# dot, outer, gemm
# ═══════════════════════════════════════════════════════════════════════


class TestDot:

    def test_dot(self, backend, rng):
        x = rng.standard_normal(7)
        y = rng.standard_normal(7)
        assert dot(Vector(7, x), Vector(7, y)) == pytest.approx(x @ y)

    def test_strided(self, backend):
        buffer = np.arange(6.0)
        x = VectorView(buffer, 3, inc=2)      # 0, 2, 4
        y = VectorView(buffer, 3, offset=3)   # 3, 4, 5
        assert dot(x, y) == pytest.approx(0 * 3 + 2 * 4 + 4 * 5)

    def test_threaded(self, threaded, backend, rng):
        x = rng.standard_normal(101)
        y = rng.standard_normal(101)
        assert dot(Vector(101, x), Vector(101, y)) == pytest.approx(x @ y)

    def test_result_type(self, backend):
        result = dot(Vector(2, [1, 2], dtype=np.float32), Vector(2, [3, 4], dtype=np.float32))
        assert isinstance(result, np.float32)

    def test_size_mismatch(self):
        with pytest.raises(DimensionError, match="same size for dot product"):
            dot(Vector(2), Vector(3))


class TestOuter:

    def test_outer(self, rng):
        x = rng.standard_normal(4)
        y = rng.standard_normal(3)
        M = outer(Vector(4, x), Vector(3, y))
        assert M.shape == (4, 3)
        np.testing.assert_allclose(M.to_numpy(), np.outer(x, y))

    def test_threaded(self, threaded, rng):
        x = rng.standard_normal(9)
        y = rng.standard_normal(5)
        np.testing.assert_allclose(outer(Vector(9, x), Vector(5, y)).to_numpy(),
                                   np.outer(x, y))

    def test_promotes(self):
        M = outer(Vector(2, np.array([1, 2], dtype=np.int32)), Vector.of(0.5))
        assert M.dtype == np.float64


class TestGemm:

    @pytest.mark.parametrize("m,k,n", [(1, 1, 1), (3, 4, 2), (7, 1, 5), (2, 9, 2)])
    def test_shapes(self, backend, rng, m, k, n):
        a = rng.standard_normal((m, k))
        b = rng.standard_normal((k, n))
        C = gemm(Matrix(m, k, a), Matrix(k, n, b))
        assert C.shape == (m, n)
        np.testing.assert_allclose(C.to_numpy(), a @ b, rtol=1e-12, atol=1e-12)

    def test_blocked_threaded(self, threaded, backend, rng):
        a = rng.standard_normal((10, 9))
        b = rng.standard_normal((9, 11))
        C = gemm(Matrix(10, 9, a), Matrix(9, 11, b))
        np.testing.assert_allclose(C.to_numpy(), a @ b, rtol=1e-12, atol=1e-12)

    def test_views(self, backend, rng):
        a = rng.standard_normal((5, 5))
        A = Matrix(5, 5, a)
        C = gemm(A.view(0, 0, 2, 3), A.view(2, 1, 3, 4))
        np.testing.assert_allclose(C.to_numpy(), a[:2, :3] @ a[2:, 1:5], rtol=1e-12)

    def test_float32(self, backend, rng):
        a = rng.standard_normal((3, 3)).astype(np.float32)
        C = gemm(Matrix(3, 3, a), Matrix(3, 3, a))
        assert C.dtype == np.float32
        np.testing.assert_allclose(C.to_numpy(), a @ a, rtol=1e-5)

    def test_inner_mismatch(self):
        with pytest.raises(DimensionError, match="inner dimensions"):
            gemm(Matrix(2, 3), Matrix(2, 3))
