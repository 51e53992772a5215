"""
Numerical comparison constants.

EPSILON drives the structural checks (symmetry, triangularity, null
vectors) and loosely_equal; PIVOT_TOLERANCE decides when PLU treats a
pivot as zero.
"""

from typing import Any

import numpy as np
from numpy.typing import NDArray

# Absolute tolerance for symmetry/triangularity checks and loosely_equal
EPSILON: float = 1e-6

# Pivot magnitudes below this are treated as zero by PLU
PIVOT_TOLERANCE: float = 1e-9


def is_close(
    a: float | NDArray[Any],
    b: float | NDArray[Any],
    epsilon: float = EPSILON,
) -> bool | NDArray[np.bool_]:
    """
    Absolute-tolerance comparison: |a - b| < epsilon.

    Operands are compared in float64 so that unsigned integer inputs
    cannot wrap around.
    """
    diff = np.abs(np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64))
    result = diff < epsilon
    if result.ndim == 0:
        return bool(result)
    return result
