"""
Element-type rules shared by containers, kernels and factorizations.

Every container is generic over a NumPy scalar type. Only real arithmetic
types are admitted: signed and unsigned integers and real floating point.

Promotion rules:
    - A binary operation between T and U yields NumPy's common type R.
      Python scalars are "weak" and do not widen a container's dtype.
    - Division with two integral operands yields float64.
    - Factorizations work in floating point: integral input becomes
      float64, floating input keeps its precision unless a floating
      target is requested explicitly.
"""

from numbers import Integral, Real
from typing import Any, TypeVar

import numpy as np
from numpy.typing import DTypeLike

from pydenselinalg.core.exceptions import ValidationError

ScalarT = TypeVar('ScalarT', bound=np.generic)

# dtype.kind codes accepted as element types
NUMERIC_KINDS = frozenset('iuf')

DEFAULT_DTYPE = np.dtype(np.float64)


def check_numeric_dtype(dtype: DTypeLike, name: str = "dtype") -> np.dtype:
    """
    Validate that ``dtype`` is a real arithmetic element type.

    Args:
        dtype: Anything accepted by ``np.dtype``
        name: Parameter name for error messages

    Returns:
        The normalized ``np.dtype``

    Raises:
        ValidationError: If dtype is bool, complex, object, text, etc.
    """
    try:
        result = np.dtype(dtype)
    except TypeError as e:
        raise ValidationError(f"{name}: not a dtype: {dtype!r}") from e
    if result.kind not in NUMERIC_KINDS:
        raise ValidationError(
            f"{name}: {result} is not an arithmetic type "
            f"(expected integer or real floating point)"
        )
    return result


def is_scalar(value: Any) -> bool:
    """True for real numeric scalars (Python or NumPy), excluding bool."""
    if isinstance(value, (bool, np.bool_)):
        return False
    return isinstance(value, (Real, np.integer, np.floating))


def is_integral(value: Any) -> bool:
    """True for integral dtypes, integer arrays and integer scalars."""
    if isinstance(value, (bool, np.bool_)):
        return False
    if isinstance(value, (Integral, np.integer)):
        return True
    if isinstance(value, (Real, np.floating)):
        return False
    dtype = getattr(value, 'dtype', value)
    return np.dtype(dtype).kind in 'iu'


def _operand(value: Any) -> Any:
    # Containers and views expose .dtype; result_type understands dtypes
    # and scalars directly.
    if is_scalar(value):
        return value
    return getattr(value, 'dtype', value)


def promote(*operands: Any) -> np.dtype:
    """
    Common promoted type of the given operands.

    Args:
        *operands: dtypes, arrays, containers, views or scalars

    Returns:
        The NumPy result type
    """
    return np.result_type(*(_operand(op) for op in operands))


def promote_division(left: Any, right: Any) -> np.dtype:
    """
    Result type for ``left / right``.

    Two integral operands divide in float64; otherwise this is ``promote``.
    """
    if is_integral(left) and is_integral(right):
        return np.dtype(np.float64)
    return promote(left, right)


def float_promote(dtype: DTypeLike, target: DTypeLike | None = None) -> np.dtype:
    """
    Working type for a factorization.

    Args:
        dtype: Element type of the input matrix
        target: Explicitly requested result type, or None

    Returns:
        ``target`` when given, float64 for integral input, else ``dtype``

    Raises:
        ValidationError: If ``target`` is not a floating type
    """
    if target is not None:
        result = check_numeric_dtype(target, "target dtype")
        if result.kind != 'f':
            raise ValidationError(
                f"target dtype: factorization results must be floating point, got {result}"
            )
        return result
    source = check_numeric_dtype(dtype)
    if source.kind == 'f':
        return source
    return np.dtype(np.float64)
