"""
Tests for the Vector container.

Covers construction, bounds-checked access, orientation rules for the
products, elementwise arithmetic with type promotion, and the
norm/normalize helpers.
"""

import numpy as np
import pytest

from pydenselinalg.containers.matrix import Matrix
from pydenselinalg.containers.vector import (
    COLUMN,
    ROW,
    Orientation,
    Vector,
    loosely_equal_vectors,
)
from pydenselinalg.core.exceptions import (
    DimensionError,
    InvalidConstructionError,
    NumericalError,
    OutOfRangeError,
    ValidationError,
)


# ═══════════════════════════════════════════════════════════════════════
# Construction
# ═══════════════════════════════════════════════════════════════════════


class TestConstruction:

    def test_zeros_by_default(self):
        v = Vector(4)
        assert v.size == 4
        assert v.dtype == np.float64
        assert v.orientation is COLUMN
        np.testing.assert_array_equal(v.data, np.zeros(4))

    def test_from_sequence_keeps_dtype(self):
        v = Vector(3, np.array([1, 2, 3], dtype=np.int32))
        assert v.dtype == np.int32

    def test_explicit_dtype(self):
        v = Vector(2, [1, 2], dtype=np.float32)
        assert v.dtype == np.float32

    def test_copy_is_independent(self):
        source = np.array([1.0, 2.0])
        v = Vector(2, source)
        source[0] = 99.0
        assert v[0] == 1.0

    def test_copy_of_vector_keeps_orientation(self):
        r = Vector(2, [1.0, 2.0], orientation=ROW)
        copy = Vector(2, r)
        assert copy.orientation is ROW
        assert copy == r
        assert copy.data is not r.data

    @pytest.mark.parametrize("size", [0, -3])
    def test_non_positive_size(self, size):
        with pytest.raises(InvalidConstructionError, match="greater than zero"):
            Vector(size)

    def test_size_mismatch(self):
        with pytest.raises(InvalidConstructionError, match="does not match declared size"):
            Vector(3, [1.0, 2.0])

    def test_nested_data_rejected(self):
        with pytest.raises(InvalidConstructionError, match="1D data"):
            Vector(2, [[1.0, 2.0]])

    def test_bool_dtype_rejected(self):
        with pytest.raises(ValidationError, match="not an arithmetic type"):
            Vector(2, [True, False])

    def test_bad_orientation(self):
        with pytest.raises(ValidationError, match="orientation"):
            Vector(2, orientation='row')

    def test_of(self):
        v = Vector.of(1.0, 2.0, 3.0, orientation=ROW)
        assert v.size == 3
        assert v.orientation is ROW

    def test_from_buffer_takes_prefix(self):
        v = Vector.from_buffer(2, np.arange(5.0))
        np.testing.assert_array_equal(v.data, [0.0, 1.0])

    def test_from_buffer_too_short(self):
        with pytest.raises(InvalidConstructionError, match="requested"):
            Vector.from_buffer(6, np.arange(5.0))

    def test_from_buffer_none(self):
        with pytest.raises(InvalidConstructionError, match="cannot be None"):
            Vector.from_buffer(2, None)

    def test_adopt_shares_memory(self):
        array = np.arange(3.0)
        v = Vector.adopt(array)
        array[1] = 7.0
        assert v[1] == 7.0

    def test_adopt_rejects_2d(self):
        with pytest.raises(InvalidConstructionError):
            Vector.adopt(np.zeros((2, 2)))


# ═══════════════════════════════════════════════════════════════════════
# Access
# ═══════════════════════════════════════════════════════════════════════


class TestAccess:

    def test_at_and_set_at(self):
        v = Vector(3)
        v.set_at(2, 5.0)
        assert v.at(2) == 5.0

    @pytest.mark.parametrize("index", [-1, 3])
    def test_at_out_of_range(self, index):
        v = Vector(3)
        with pytest.raises(OutOfRangeError, match="Index out of bounds"):
            v.at(index)

    def test_out_of_range_is_index_error(self):
        with pytest.raises(IndexError):
            Vector(3).set_at(3, 1.0)

    def test_unchecked_indexing(self):
        v = Vector.of(1.0, 2.0, 3.0)
        v[0] = 10.0
        assert v[-1] == 3.0
        np.testing.assert_array_equal(v[1:], [2.0, 3.0])

    def test_len(self):
        assert len(Vector(7)) == 7

    def test_view_writes_through(self):
        v = Vector(5, np.arange(5.0))
        window = v.view(1, 2, inc=2)
        window[1] = -1.0
        assert v[3] == -1.0

    def test_view_runs_to_end(self):
        v = Vector(5, np.arange(5.0))
        np.testing.assert_array_equal(v.view(1, inc=2).array(), [1.0, 3.0])

    @pytest.mark.parametrize("offset", [3, 7, -1])
    def test_view_offset_outside(self, offset):
        with pytest.raises(OutOfRangeError, match="View offset out of bounds"):
            Vector(3).view(offset)

    def test_view_past_end(self):
        with pytest.raises(OutOfRangeError, match="exceeds its buffer"):
            Vector(3).view(1, 3)

    def test_to_numpy_copies(self):
        v = Vector.of(1.0, 2.0)
        out = v.to_numpy()
        out[0] = 9.0
        assert v[0] == 1.0

    def test_asarray(self):
        v = Vector.of(1.0, 2.0)
        np.testing.assert_array_equal(np.asarray(v), [1.0, 2.0])

    def test_cast(self):
        v = Vector.of(1.7, 2.2).cast(np.int32)
        assert v.dtype == np.int32
        np.testing.assert_array_equal(v.data, [1, 2])

    def test_fill(self):
        v = Vector(3)
        v.fill(4)
        np.testing.assert_array_equal(v.data, [4.0, 4.0, 4.0])


# ═══════════════════════════════════════════════════════════════════════
# Orientation and products
# ═══════════════════════════════════════════════════════════════════════


class TestOrientation:

    def test_transpose_in_place(self):
        v = Vector(2)
        v.transpose()
        assert v.orientation is ROW
        v.transpose()
        assert v.orientation is COLUMN

    def test_transposed_copies(self):
        v = Vector.of(1.0, 2.0)
        t = v.transposed()
        assert t.orientation is ROW
        assert v.orientation is COLUMN
        t[0] = 5.0
        assert v[0] == 1.0

    def test_flipped(self):
        assert Orientation.ROW.flipped() is Orientation.COLUMN


class TestProducts:

    def test_row_times_column_is_dot(self, backend):
        r = Vector.of(1.0, 2.0, 3.0, orientation=ROW)
        c = Vector.of(4.0, 5.0, 6.0)
        assert r * c == pytest.approx(32.0)
        assert r @ c == pytest.approx(32.0)

    def test_column_times_row_is_outer(self, backend):
        c = Vector.of(1.0, 2.0)
        r = Vector.of(3.0, 4.0, 5.0, orientation=ROW)
        result = c * r
        assert isinstance(result, Matrix)
        np.testing.assert_array_equal(result.to_numpy(), [[3, 4, 5], [6, 8, 10]])

    def test_same_orientation_product_rejected(self):
        a = Vector.of(1.0, 2.0)
        with pytest.raises(DimensionError, match="Invalid vector product"):
            a * a

    def test_dot_size_mismatch(self):
        r = Vector.of(1.0, 2.0, orientation=ROW)
        c = Vector.of(1.0, 2.0, 3.0)
        with pytest.raises(DimensionError, match="same size"):
            r * c

    def test_dot_product_ignores_orientation(self, backend):
        a = Vector.of(1.0, 2.0)
        b = Vector.of(3.0, 4.0)
        assert a.dot_product(b) == pytest.approx(11.0)

    def test_dot_product_mismatch(self):
        with pytest.raises(DimensionError, match="same size"):
            Vector(2).dot_product(Vector(3))

    def test_dot_promotes_int_and_float(self, backend):
        a = Vector(2, np.array([1, 2], dtype=np.int32), orientation=ROW)
        b = Vector.of(0.5, 0.25)
        assert a * b == pytest.approx(1.0)

    def test_outer_product_column_row(self):
        c = Vector.of(1, 2, 3)
        r = Vector.of(1, 10, orientation=ROW)
        result = c.outer_product(r)
        assert result.shape == (3, 2)
        np.testing.assert_array_equal(result.to_numpy(), [[1, 10], [2, 20], [3, 30]])

    def test_outer_product_single_elements(self):
        a = Vector.of(3.0)
        b = Vector.of(4.0)
        result = a.outer_product(b)
        assert result.shape == (1, 1)
        assert result.at(0, 0) == 12.0

    def test_outer_product_same_orientation_rejected(self):
        with pytest.raises(DimensionError, match="Vector dimensions do not match"):
            Vector(2).outer_product(Vector(2))

    def test_outer_product_row_column_warns(self):
        r = Vector.of(1.0, 2.0, orientation=ROW)
        c = Vector.of(3.0, 4.0)
        with pytest.warns(UserWarning, match="dot product"):
            result = r.outer_product(c)
        assert result.shape == (1, 1)
        assert result.at(0, 0) == pytest.approx(11.0)

    def test_outer_product_row_column_size_mismatch(self):
        r = Vector.of(1.0, 2.0, orientation=ROW)
        with pytest.raises(DimensionError, match="Vector dimensions do not match"):
            r.outer_product(Vector(3))

    def test_row_vector_times_matrix(self, backend):
        r = Vector.of(1.0, 2.0, orientation=ROW)
        A = Matrix(2, 3, [[1, 2, 3], [4, 5, 6]], dtype=np.float64)
        result = r * A
        assert result.orientation is ROW
        np.testing.assert_allclose(result.data, [9.0, 12.0, 15.0])

    def test_column_vector_times_matrix_rejected(self):
        A = Matrix(2, 2)
        with pytest.raises(DimensionError, match="Did you mean Matrix"):
            Vector(2) * A

    def test_row_vector_times_matrix_mismatch(self):
        A = Matrix(3, 2)
        with pytest.raises(DimensionError, match="Dimensions do not match"):
            Vector(2, orientation=ROW) * A


# ═══════════════════════════════════════════════════════════════════════
# Elementwise arithmetic
# ═══════════════════════════════════════════════════════════════════════


class TestArithmetic:

    def test_add_subtract(self):
        a = Vector.of(1.0, 2.0)
        b = Vector.of(10.0, 20.0)
        np.testing.assert_array_equal((a + b).data, [11.0, 22.0])
        np.testing.assert_array_equal((b - a).data, [9.0, 18.0])

    def test_orientation_mismatch(self):
        a = Vector.of(1.0, 2.0)
        with pytest.raises(DimensionError, match="same orientation and size"):
            a + a.transposed()

    def test_size_mismatch(self):
        with pytest.raises(DimensionError, match="same orientation and size"):
            Vector(2) - Vector(3)

    def test_result_keeps_orientation(self):
        r = Vector.of(1.0, 2.0, orientation=ROW)
        assert (r * 2).orientation is ROW
        assert (-r).orientation is ROW

    def test_scalar_forms(self):
        v = Vector.of(1.0, 2.0, 4.0)
        np.testing.assert_array_equal((v + 1).data, [2.0, 3.0, 5.0])
        np.testing.assert_array_equal((1 + v).data, [2.0, 3.0, 5.0])
        np.testing.assert_array_equal((10 - v).data, [9.0, 8.0, 6.0])
        np.testing.assert_array_equal((v * 3).data, [3.0, 6.0, 12.0])
        np.testing.assert_array_equal((3 * v).data, [3.0, 6.0, 12.0])
        np.testing.assert_array_equal((v / 2).data, [0.5, 1.0, 2.0])
        np.testing.assert_array_equal((4 / v).data, [4.0, 2.0, 1.0])

    def test_numpy_scalar_on_left(self):
        v = Vector.of(1.0, 2.0)
        result = np.float64(2.0) * v
        assert isinstance(result, Vector)
        np.testing.assert_array_equal(result.data, [2.0, 4.0])

    def test_numpy_array_operand_rejected(self):
        v = Vector.of(1.0, 2.0)
        with pytest.raises(TypeError):
            v + np.array([1.0, 2.0])

    def test_int_plus_float_promotes(self):
        a = Vector(2, np.array([1, 2], dtype=np.int32))
        b = Vector(2, [0.5, 0.5], dtype=np.float64)
        assert (a + b).dtype == np.float64

    def test_int_plus_int_scalar_stays_int(self):
        a = Vector(2, np.array([1, 2], dtype=np.int32))
        assert (a + 1).dtype == np.int32

    def test_float32_and_float64(self):
        a = Vector(2, [1, 2], dtype=np.float32)
        b = Vector(2, [1, 2], dtype=np.float64)
        assert (a * 1 + b).dtype == np.float64

    def test_integer_division_is_double(self):
        a = Vector(2, np.array([1, 3], dtype=np.int32))
        result = a / 2
        assert result.dtype == np.float64
        np.testing.assert_array_equal(result.data, [0.5, 1.5])

    def test_inplace_keeps_dtype(self):
        a = Vector(2, np.array([1, 2], dtype=np.int64))
        a += 1.5
        assert a.dtype == np.int64
        np.testing.assert_array_equal(a.data, [2, 3])

    def test_inplace_vector(self):
        a = Vector.of(1.0, 2.0)
        before = a.data
        a -= Vector.of(1.0, 1.0)
        assert a.data is before
        np.testing.assert_array_equal(a.data, [0.0, 1.0])

    def test_inplace_mismatch(self):
        a = Vector.of(1.0, 2.0)
        with pytest.raises(DimensionError):
            a += Vector.of(1.0, 2.0, orientation=ROW)

    def test_matrix_operand_rejected(self):
        v = Vector(2)
        A = Matrix(2, 1)
        with pytest.raises(DimensionError, match="Vector and a Matrix"):
            v + A
        with pytest.raises(DimensionError, match="Vector and a Matrix"):
            v - A
        with pytest.raises(DimensionError, match="Vector and a Matrix"):
            v -= A

    def test_threaded_path_matches(self, threaded, rng):
        a = Vector(1000, rng.standard_normal(1000))
        b = Vector(1000, rng.standard_normal(1000))
        np.testing.assert_allclose((a + b).data, a.data + b.data)
        np.testing.assert_allclose((a * 2.5).data, a.data * 2.5)


# ═══════════════════════════════════════════════════════════════════════
# Equality, norms
# ═══════════════════════════════════════════════════════════════════════


class TestEquality:

    def test_equal(self):
        assert Vector.of(1.0, 2.0) == Vector.of(1.0, 2.0)

    def test_orientation_matters(self):
        v = Vector.of(1.0, 2.0)
        assert v != v.transposed()

    def test_size_matters(self):
        assert Vector.of(1.0, 2.0) != Vector.of(1.0, 2.0, 3.0)

    def test_unhashable(self):
        with pytest.raises(TypeError):
            hash(Vector(2))

    def test_loosely_equal(self):
        a = Vector.of(1.0, 2.0)
        b = Vector.of(1.0 + 1e-8, 2.0)
        assert loosely_equal_vectors(a, b)
        assert not loosely_equal_vectors(a, Vector.of(1.1, 2.0))
        assert not loosely_equal_vectors(a, a.transposed())


class TestNorm:

    def test_norm(self):
        assert Vector.of(3.0, 4.0).norm() == pytest.approx(5.0)

    def test_norm_of_integers_is_double(self):
        n = Vector(2, np.array([3, 4], dtype=np.int32)).norm()
        assert isinstance(n, np.float64)
        assert n == pytest.approx(5.0)

    def test_norm_keeps_float32(self):
        n = Vector(2, [3, 4], dtype=np.float32).norm()
        assert isinstance(n, np.float32)

    def test_norm_threaded(self, threaded, rng):
        data = rng.standard_normal(1001)
        assert Vector(1001, data).norm() == pytest.approx(np.linalg.norm(data))

    def test_normalize(self):
        v = Vector.of(3.0, 4.0)
        v.normalize()
        np.testing.assert_allclose(v.data, [0.6, 0.8])
        assert v.norm() == pytest.approx(1.0)

    def test_normalize_null_vector(self):
        with pytest.raises(NumericalError, match="null vector"):
            Vector(3).normalize()

    def test_normalize_integral(self):
        with pytest.raises(ValidationError, match="floating dtype"):
            Vector(2, np.array([3, 4])).normalize()

    def test_is_null(self):
        assert Vector(3).is_null()
        assert Vector.of(1e-8, 0.0).is_null()
        assert not Vector.of(1e-3, 0.0).is_null()
