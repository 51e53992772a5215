"""
Core infrastructure for pydenselinalg.

This module provides shared abstractions and utilities used by the
containers, the kernels and the factorizations.

Key components:
    result: Tagged Result[P] envelope and attempt()
    exceptions: Exception hierarchy
    validation: Input validators
    dtypes: Element type constraint and promotion rules
    capabilities: Backend capability strings
    compute: Parallel scheduling, precision, timing
"""

from pydenselinalg.core.result import Result, attempt
from pydenselinalg.core.exceptions import (
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

__all__ = [
    # Result
    "Result",
    "attempt",
    # Exceptions
    "LinalgError",
    "ValidationError",
    "InvalidConstructionError",
    "DimensionError",
    "NotSymmetricError",
    "OutOfRangeError",
    "NumericalError",
    "SingularMatrixError",
    "NotPositiveDefiniteError",
]
