"""
Kernel backend selection.

The backend is chosen once, at configuration time, and every kernel
call site asks ``active_backend()`` for it. It is never re-selected per
call.

Selection sources, in order:
    1. set_backend() / use_backend() (dependency injection)
    2. The PYDENSELINALG_BACKEND environment variable, read at import
    3. 'auto', which resolves to the accelerated backend
"""

import os
from contextlib import contextmanager
from typing import Iterator, Literal

from pydenselinalg.kernels.backends.accelerated import AcceleratedBackend
from pydenselinalg.kernels.backends.base import KernelBackend
from pydenselinalg.kernels.backends.portable import PortableBackend

BackendChoice = Literal['auto', 'portable', 'accelerated']

ENV_BACKEND = 'PYDENSELINALG_BACKEND'


def create_backend(choice: BackendChoice | KernelBackend) -> KernelBackend:
    """
    Build the backend named by ``choice``, or pass an instance through.

    Raises:
        ValueError: If choice is not a known name or a KernelBackend
    """
    if isinstance(choice, KernelBackend):
        return choice
    if choice == 'auto' or choice == 'accelerated':
        return AcceleratedBackend()
    if choice == 'portable':
        return PortableBackend()
    raise ValueError(f"Unknown backend: {choice!r}")


_active: KernelBackend = create_backend(os.environ.get(ENV_BACKEND, 'auto').strip() or 'auto')


def active_backend() -> KernelBackend:
    """The backend every kernel and factorization currently dispatches to."""
    return _active


def set_backend(choice: BackendChoice | KernelBackend) -> KernelBackend:
    """
    Install a backend for all subsequent calls.

    Returns:
        The previously active backend
    """
    global _active
    previous, _active = _active, create_backend(choice)
    return previous


@contextmanager
def use_backend(choice: BackendChoice | KernelBackend) -> Iterator[KernelBackend]:
    """
    Temporarily install a backend.

    Usage:
        with use_backend('portable'):
            Q, R = QR_decomposition(A)
    """
    previous = set_backend(choice)
    try:
        yield _active
    finally:
        set_backend(previous)


__all__ = [
    "BackendChoice",
    "KernelBackend",
    "PortableBackend",
    "AcceleratedBackend",
    "create_backend",
    "active_backend",
    "set_backend",
    "use_backend",
]
