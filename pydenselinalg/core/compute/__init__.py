"""
Shared compute infrastructure for pydenselinalg.

Submodules:
    parallel: Size-threshold parallel loop scheduling policy
    precision: Comparison and pivot tolerances
    timing: Per-phase timing of the factorizations
"""

from pydenselinalg.core.compute.parallel import (
    ParallelPolicy,
    get_parallel_policy,
    set_parallel_policy,
    parallel_policy,
)
from pydenselinalg.core.compute.precision import EPSILON, PIVOT_TOLERANCE, is_close
from pydenselinalg.core.compute.timing import Timer, active_timer, phase

__all__ = [
    # Parallel scheduling
    "ParallelPolicy",
    "get_parallel_policy",
    "set_parallel_policy",
    "parallel_policy",
    # Precision
    "EPSILON",
    "PIVOT_TOLERANCE",
    "is_close",
    # Timing
    "Timer",
    "active_timer",
    "phase",
]
