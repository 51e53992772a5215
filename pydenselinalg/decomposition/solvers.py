"""
Tagged-result entry point for the factorizations.

plu(), cholesky() and QR_decomposition() raise on failure. decompose()
runs the same factorizations but reports the outcome as a Result, so a
caller can branch on ``result.ok`` instead of catching exceptions.
"""

import warnings
from contextlib import nullcontext
from typing import Any, Literal

from numpy.typing import DTypeLike

from pydenselinalg.containers.matrix import Matrix
from pydenselinalg.core.capabilities import (
    CAPABILITY_CHOLESKY,
    CAPABILITY_LU,
    CAPABILITY_QR,
)
from pydenselinalg.core.compute.timing import Timer
from pydenselinalg.core.dtypes import float_promote
from pydenselinalg.core.exceptions import LinalgError, ValidationError
from pydenselinalg.core.result import Result
from pydenselinalg.decomposition.cholesky import cholesky
from pydenselinalg.decomposition.plu import plu
from pydenselinalg.decomposition.qr import QR_decomposition
from pydenselinalg.kernels.backends import (
    BackendChoice,
    KernelBackend,
    active_backend,
    use_backend,
)

MethodChoice = Literal['plu', 'cholesky', 'qr']

_CAPABILITY = {
    'plu': CAPABILITY_LU,
    'cholesky': CAPABILITY_CHOLESKY,
    'qr': CAPABILITY_QR,
}

_OUTER_SECTIONS = ('validate', 'factorize')


def _phase_counts(timer: Timer) -> dict[str, int]:
    return {name: count for name, count in timer.counts().items()
            if name not in _OUTER_SECTIONS}


def decompose(
    A: Matrix,
    method: MethodChoice = 'plu',
    *,
    backend: BackendChoice | KernelBackend = 'auto',
    dtype: DTypeLike | None = None,
    full_q: bool = False,
    full_r: bool = False,
) -> Result[Any]:
    """
    Factor ``A`` and report the outcome as a tagged Result.

    Args:
        A: Matrix to factor
        method: 'plu', 'cholesky' or 'qr'
        backend: 'auto' keeps the configured backend; 'portable',
            'accelerated' or a KernelBackend instance is used for this
            call only
        dtype: Floating result type for 'plu' and 'cholesky'
        full_q: Full Q for 'qr'
        full_r: Full R for 'qr'

    Returns:
        Result whose params is a PLUResult, a Matrix (L) or a QRResult on
        success; on failure ``ok`` is False and ``error`` holds the
        LinalgError. ``info['path']`` says whether the vendor library or
        the portable algorithm ran. ``info['phases']`` counts the
        phases the factorization went through (panels, trailing updates,
        or one vendor call) and ``timing`` holds their seconds.

    Raises:
        ValueError: If method or backend is unknown. These are caller
            bugs, not properties of A, so they are not folded into the
            Result.
    """
    # === Input Validation ===
    if method not in _CAPABILITY:
        raise ValueError(f"Unknown method: {method!r}")
    context = nullcontext() if backend == 'auto' else use_backend(backend)

    timer = Timer()
    timer.start()
    notes: list[str] = []
    info: dict[str, Any] = {'method': method}

    with context:
        backend_impl = active_backend()
        try:
            with timer.section('validate'):
                if not isinstance(A, Matrix):
                    raise ValidationError(f"A: expected Matrix, got {type(A).__name__}")
                work_dtype = float_promote(A.dtype, dtype if method != 'qr' else None)
                info.update(shape=A.shape, input_dtype=str(A.dtype), dtype=str(work_dtype))

            # === Select Path ===
            accelerated = (backend_impl.supports(_CAPABILITY[method])
                           and backend_impl.accelerates(work_dtype))
            if backend_impl.supports(_CAPABILITY[method]) and not accelerated:
                note = (f"{backend_impl.name} backend cannot accelerate {work_dtype}; "
                        f"using the portable {method} algorithm")
                notes.append(note)
                warnings.warn(note, UserWarning, stacklevel=2)
            info['path'] = 'accelerated' if accelerated else 'portable'

            # === Factorize ===
            with timer.section('factorize'), timer.activate():
                if method == 'plu':
                    params = plu(A, dtype=dtype)
                elif method == 'cholesky':
                    params = cholesky(A, dtype=dtype)
                else:
                    params = QR_decomposition(A, full_q=full_q, full_r=full_r)
        except LinalgError as e:
            timer.stop()
            info['phases'] = _phase_counts(timer)
            return Result.failure(
                e,
                backend_name=f"{info.get('path', backend_impl.name)}_{method}",
                info=info,
                timing=timer.result(),
                warnings=tuple(notes),
            )

    timer.stop()
    info['phases'] = _phase_counts(timer)
    return Result(
        params=params,
        info=info,
        timing=timer.result(),
        backend_name=f"{info['path']}_{method}",
        warnings=tuple(notes),
    )
