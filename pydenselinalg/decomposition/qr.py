"""
Householder QR decomposition.

Column j of the working matrix is reflected onto a multiple of e_j. The
reflector v = [1, v_tail] is stored packed: v_tail overwrites the
sub-diagonal of column j and its scale tau goes to a side array. The
trailing columns are updated with one transposed gemv and one ger:

    w = B^T v
    B <- B - tau v w^T

Q is rebuilt afterwards by applying the reflectors to the identity in
reverse order.
"""

import numpy as np

from pydenselinalg.containers.factories import identity_matrix
from pydenselinalg.containers.matrix import Matrix
from pydenselinalg.containers.vector import Vector
from pydenselinalg.containers.views import VectorView
from pydenselinalg.core.capabilities import CAPABILITY_QR
from pydenselinalg.core.compute.timing import phase
from pydenselinalg.core.dtypes import float_promote
from pydenselinalg.core.exceptions import OutOfRangeError, ValidationError
from pydenselinalg.decomposition.solution import QRResult
from pydenselinalg.kernels.backends import active_backend
from pydenselinalg.kernels.blas import Op, dot, gemv, ger


def _column_tail(work: Matrix, j: int) -> VectorView | None:
    m, n = work.shape
    if j + 1 >= m:
        return None
    return VectorView(work.data, m - j - 1, inc=n, offset=(j + 1) * n + j)


def _householder_column(work: Matrix, j: int):
    """
    Turn column j into a reflector in place and return its tau.

    A column whose sub-diagonal is already zero gets tau = 0 and is
    left untouched.
    """
    m = work.row_count
    if j >= m:
        raise OutOfRangeError("Householder column index out of range!", index=j, bounds=m)
    zero = work.dtype.type(0)
    tail = _column_tail(work, j)
    if tail is None:
        return zero
    sigma = dot(tail, tail)
    if sigma == 0:
        return zero

    alpha = work[j, j]
    normx = np.sqrt(alpha * alpha + sigma)
    # Sign chosen so that alpha - beta never cancels
    beta = normx if alpha <= 0 else -normx
    tail.array()[...] *= 1 / (alpha - beta)
    work[j, j] = beta

    vtv = 1 + dot(tail, tail)
    return work.dtype.type(2) / vtv


def _load_reflector(work: Matrix, j: int) -> Vector:
    m = work.row_count
    v = Vector(m - j, dtype=work.dtype)
    v[0] = 1
    tail = _column_tail(work, j)
    if tail is not None:
        v[1:] = tail.array()
    return v


def QR_decomposition(A: Matrix, full_q: bool = False, full_r: bool = False) -> QRResult:
    """
    Factor an m x n matrix as A = Q R.

    Args:
        A: Matrix to factor
        full_q: Return the full m x m Q instead of the thin m x k one
        full_r: Return the full m x n R instead of the thin k x n one

    Returns:
        QRResult(Q, R) in float64 for integral input, else in A's type

    Note:
        When full_q and full_r disagree on a tall matrix the shapes do
        not conform, and Q @ R is not defined.
    """
    if not isinstance(A, Matrix):
        raise ValidationError(f"A: expected Matrix, got {type(A).__name__}")
    m, n = A.shape
    k = min(m, n)
    work_dtype = float_promote(A.dtype)
    backend = active_backend()

    if backend.supports(CAPABILITY_QR) and backend.accelerates(work_dtype):
        with phase('vendor_qr'):
            q, r = backend.qr_factor(A.to_numpy().astype(work_dtype, copy=False), full_q, full_r)
        return QRResult(Matrix.adopt(*q.shape, q), Matrix.adopt(*r.shape, r))

    work = A.cast(work_dtype)
    tau = np.zeros(k, dtype=work_dtype)

    # === Factor ===
    for j in range(k):
        with phase('householder'):
            tau[j] = _householder_column(work, j)
        if tau[j] == 0 or j + 1 >= n:
            continue
        with phase('trailing_update'):
            v = _load_reflector(work, j)
            block = work.view(j, j + 1, m - j, n - j - 1)
            w = gemv(Op.TRANS, block, v)
            ger(block, v, w, tau[j])

    r_rows = m if full_r else k
    R = Matrix.adopt(r_rows, n, np.triu(work.to_numpy(copy=False)[:r_rows]))

    # === Accumulate Q ===
    Q = identity_matrix(m, dtype=work_dtype)
    with phase('accumulate_q'):
        for j in reversed(range(k)):
            if tau[j] == 0:
                continue
            v = _load_reflector(work, j)
            block = Q.view(j, j, m - j, m - j)
            w = gemv(Op.TRANS, block, v)
            ger(block, v, w, tau[j])

    q_cols = m if full_q else k
    if q_cols < m:
        Q = Q.view(0, 0, m, q_cols).to_matrix()
    return QRResult(Q, R)


qr = QR_decomposition
