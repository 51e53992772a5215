"""
Input validation utilities for pydenselinalg.

These validators follow the "fail fast, fail loud" principle. They raise
immediately with clear error messages rather than silently correcting
or making assumptions about caller intent.

Design principles:
    - Each function validates ONE thing
    - Error messages include the offending values
    - Parameter names included in error messages where there is one
"""

from typing import Any

import numpy as np

from pydenselinalg.core.exceptions import (
    DimensionError,
    InvalidConstructionError,
    OutOfRangeError,
    ValidationError,
)


def check_positive_dims(*dims: int, message: str) -> None:
    """
    Verify every dimension is a positive integer.

    Raises:
        InvalidConstructionError: If any dimension is zero or negative
    """
    for d in dims:
        if int(d) <= 0:
            raise InvalidConstructionError(f"{message} (got {tuple(dims)})")


def check_buffer(buffer: Any, name: str) -> np.ndarray:
    """
    Verify a source buffer exists and is a one-dimensional array.

    Returns:
        The buffer as an ``np.ndarray`` (no copy for arrays)

    Raises:
        InvalidConstructionError: If buffer is None or not 1-D
    """
    if buffer is None:
        raise InvalidConstructionError(f"{name}: data buffer cannot be None")
    array = np.asarray(buffer)
    if array.ndim != 1:
        raise InvalidConstructionError(
            f"{name}: expected a 1D buffer, got shape {array.shape}"
        )
    return array


def check_source_size(actual: int, expected: int, name: str) -> None:
    """
    Verify a source container holds exactly the declared number of elements.

    Raises:
        InvalidConstructionError: If the sizes differ
    """
    if actual != expected:
        raise InvalidConstructionError(
            f"{name}: data size does not match declared size "
            f"(got {actual}, expected {expected})"
        )


def check_index(index: int, bound: int, message: str) -> None:
    """
    Verify ``0 <= index < bound``.

    Raises:
        OutOfRangeError: If the index lies outside the extent
    """
    if not 0 <= index < bound:
        raise OutOfRangeError(f"{message} (index {index}, extent {bound})",
                              index=index, bounds=bound)


def check_same_shape(left: tuple[int, ...], right: tuple[int, ...], message: str) -> None:
    """
    Verify two operands have identical shapes.

    Raises:
        DimensionError: If shapes differ
    """
    if tuple(left) != tuple(right):
        raise DimensionError(f"{message} (got {tuple(left)} and {tuple(right)})")


def check_square(rows: int, cols: int, message: str) -> None:
    """
    Verify a matrix is square.

    Raises:
        ValidationError: If rows != cols
    """
    if rows != cols:
        raise ValidationError(f"{message} (got {rows}x{cols})")


def check_permutation(perm: Any, name: str = "perm") -> np.ndarray:
    """
    Verify ``perm`` lists each of 0..n-1 exactly once.

    Returns:
        The permutation as an intp array

    Raises:
        ValidationError: If perm is empty, not integral or not a permutation
    """
    array = np.asarray(perm)
    if array.ndim != 1 or array.size == 0:
        raise ValidationError(f"{name}: expected a non-empty 1D sequence, got shape {array.shape}")
    if array.dtype.kind not in 'iu':
        raise ValidationError(f"{name}: expected integer indices, got dtype {array.dtype}")
    n = array.size
    if array.min() < 0 or array.max() >= n or np.unique(array).size != n:
        raise ValidationError(f"{name}: not a permutation of 0..{n - 1}: {array.tolist()}")
    return array.astype(np.intp)
