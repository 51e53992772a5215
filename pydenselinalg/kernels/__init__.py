"""
BLAS-style kernels and their backends.

Kernels:
    gemv: matrix-vector product, optionally transposed
    ger: rank-1 update
    dot: inner product
    outer: outer product
    gemm: matrix-matrix product

Backends:
    portable: numpy loops, threaded above size thresholds
    accelerated: SciPy BLAS/LAPACK for float32 and float64
"""

from pydenselinalg.kernels.blas import Op, gemv, ger, dot, outer, gemm
from pydenselinalg.kernels.backends import (
    BackendChoice,
    KernelBackend,
    PortableBackend,
    AcceleratedBackend,
    active_backend,
    set_backend,
    use_backend,
)

__all__ = [
    # Kernels
    "Op",
    "gemv",
    "ger",
    "dot",
    "outer",
    "gemm",
    # Backends
    "BackendChoice",
    "KernelBackend",
    "PortableBackend",
    "AcceleratedBackend",
    "active_backend",
    "set_backend",
    "use_backend",
]
