"""
Chunked elementwise loops shared by Vector and Matrix.

Both containers keep a flat contiguous buffer, so every elementwise
operator reduces to one ufunc call over [0, n), split into disjoint
chunks above the linear threshold.
"""

from typing import Any, Callable

import numpy as np

from pydenselinalg.core.compute.parallel import get_parallel_policy


def apply_binary(
    ufunc: Callable[..., Any],
    left: Any,
    right: Any,
    out: np.ndarray,
) -> np.ndarray:
    """
    ``out[:] = ufunc(left, right)`` with either operand a flat array or a scalar.

    Results are cast into ``out``'s dtype, which is how compound
    assignment keeps the left operand's element type.
    """
    policy = get_parallel_policy()
    n = out.size
    left_chunked = isinstance(left, np.ndarray)
    right_chunked = isinstance(right, np.ndarray)

    def body(start: int, stop: int) -> None:
        a = left[start:stop] if left_chunked else left
        b = right[start:stop] if right_chunked else right
        ufunc(a, b, out=out[start:stop], casting='unsafe')

    policy.parallel_for(n, body, work=n, threshold=policy.linear_threshold)
    return out


def apply_unary(ufunc: Callable[..., Any], source: np.ndarray, out: np.ndarray) -> np.ndarray:
    """``out[:] = ufunc(source)`` over disjoint chunks."""
    policy = get_parallel_policy()
    n = out.size

    def body(start: int, stop: int) -> None:
        ufunc(source[start:stop], out=out[start:stop], casting='unsafe')

    policy.parallel_for(n, body, work=n, threshold=policy.linear_threshold)
    return out
