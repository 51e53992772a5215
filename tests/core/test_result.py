"""
Tests for the tagged Result[P] envelope and attempt().
"""

from dataclasses import FrozenInstanceError

import pytest

from pydenselinalg.containers import Matrix
from pydenselinalg.core.exceptions import (
    InvalidConstructionError,
    OutOfRangeError,
    SingularMatrixError,
)
from pydenselinalg.core.result import Result, attempt


# ═══════════════════════════════════════════════════════════════════════
# Construction and tagging
# ═══════════════════════════════════════════════════════════════════════


class TestResult:
    """Success and failure results."""

    def test_success(self):
        result = Result(params=42, info={"method": "test"}, timing=None,
                        backend_name="portable_plu")
        assert result.ok
        assert result.error is None
        assert result.unwrap() == 42
        assert result.warnings == ()

    def test_failure(self):
        error = SingularMatrixError("singular", pivot_index=1)
        result = Result.failure(error, backend_name="portable_plu", info={"method": "plu"})
        assert not result.ok
        assert result.params is None
        assert result.error is error
        assert result.info == {"method": "plu"}

    def test_unwrap_failure_raises_original_error(self):
        error = SingularMatrixError("singular", pivot_index=1)
        result = Result.failure(error, backend_name="x")
        with pytest.raises(SingularMatrixError) as excinfo:
            result.unwrap()
        assert excinfo.value is error

    def test_frozen(self):
        result = Result(params=1, info={}, timing=None, backend_name="x")
        with pytest.raises(FrozenInstanceError):
            result.params = 2

    def test_has_warning(self):
        result = Result(params=1, info={}, timing=None, backend_name="x",
                        warnings=("fell back to portable path",))
        assert result.has_warning("portable")
        assert not result.has_warning("gpu")


# ═══════════════════════════════════════════════════════════════════════
# attempt()
# ═══════════════════════════════════════════════════════════════════════


class TestAttempt:
    """attempt() turns library errors into failed results."""

    def test_successful_construction(self):
        result = attempt(Matrix, 2, 3)
        assert result.ok
        assert result.params.shape == (2, 3)
        assert result.info["operation"] == "Matrix"

    def test_failed_construction(self):
        result = attempt(Matrix, 0, 3)
        assert not result.ok
        assert isinstance(result.error, InvalidConstructionError)

    def test_failed_access(self):
        m = Matrix(2, 2)
        result = attempt(m.at, 5, 0)
        assert isinstance(result.error, OutOfRangeError)

    def test_kwargs_forwarded(self):
        result = attempt(Matrix, 1, 2, dtype="int32")
        assert result.params.dtype == "int32"

    def test_non_library_errors_propagate(self):
        def broken():
            raise KeyError("not ours")

        with pytest.raises(KeyError):
            attempt(broken)
