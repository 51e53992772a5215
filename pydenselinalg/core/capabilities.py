"""
Capability string constants for pydenselinalg backends.

This module is the SINGLE SOURCE OF TRUTH for capability strings.
Import from here, never use raw strings.

Usage:
    from pydenselinalg.core.capabilities import CAPABILITY_QR

    backend = active_backend()
    if backend.supports(CAPABILITY_QR) and backend.accelerates(dtype):
        Q, R = backend.qr_factor(a, full_q, full_r)
"""

import numpy as np

# Level-1: dot product
CAPABILITY_DOT = 'dot'

# Level-2: matrix-vector product (plain and transposed)
CAPABILITY_GEMV = 'gemv'

# Level-2: rank-1 update
CAPABILITY_GER = 'ger'

# Level-3: matrix-matrix product
CAPABILITY_GEMM = 'gemm'

# Whole-matrix factorizations delegated to the vendor library
CAPABILITY_LU = 'lu_factorization'
CAPABILITY_CHOLESKY = 'cholesky_factorization'
CAPABILITY_QR = 'qr_factorization'

# Element types a vendor library accepts
ACCELERATED_DTYPES = frozenset({np.dtype(np.float32), np.dtype(np.float64)})

# Capabilities as frozensets for validation
KERNEL_CAPABILITIES = frozenset({
    CAPABILITY_DOT,
    CAPABILITY_GEMV,
    CAPABILITY_GER,
    CAPABILITY_GEMM,
})

FACTORIZATION_CAPABILITIES = frozenset({
    CAPABILITY_LU,
    CAPABILITY_CHOLESKY,
    CAPABILITY_QR,
})

ALL_CAPABILITIES = KERNEL_CAPABILITIES | FACTORIZATION_CAPABILITIES

__all__ = [
    'CAPABILITY_DOT',
    'CAPABILITY_GEMV',
    'CAPABILITY_GER',
    'CAPABILITY_GEMM',
    'CAPABILITY_LU',
    'CAPABILITY_CHOLESKY',
    'CAPABILITY_QR',
    'ACCELERATED_DTYPES',
    'KERNEL_CAPABILITIES',
    'FACTORIZATION_CAPABILITIES',
    'ALL_CAPABILITIES',
]
