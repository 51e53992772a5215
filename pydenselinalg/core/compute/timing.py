"""
Phase timing for the factorizations.

decompose() activates a Timer for one call. While it is active, the
blocked algorithms report their phases through phase(): one entry per
panel, triangular solve or trailing update, or a single vendor call on
the accelerated path. Outside an active timer phase() does nothing, so
the factorizations pay no bookkeeping when called directly.

    timer = Timer()
    timer.start()
    with timer.activate():
        plu(A)
    timer.stop()
    timer.result()   # {'total_seconds': ..., 'panel': ..., 'trailing_update': ...}
    timer.counts()   # {'panel': 2, 'triangular_solve': 1, 'trailing_update': 1}
"""

import time
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

_ACTIVE: ContextVar['Timer | None'] = ContextVar('pydenselinalg_timer', default=None)


class Timer:
    """Wall-clock total plus accumulated seconds and entry counts per phase."""

    def __init__(self):
        self._seconds: dict[str, float] = {}
        self._counts: dict[str, int] = {}
        self._start_time: float | None = None
        self._total: float | None = None

    def start(self) -> None:
        self._start_time = time.perf_counter()

    def stop(self) -> None:
        if self._start_time is None:
            raise RuntimeError("Timer.stop() called before start()")
        self._total = time.perf_counter() - self._start_time

    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        """Time one entry of phase ``name``; repeated entries accumulate."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self._seconds[name] = self._seconds.get(name, 0.0) + time.perf_counter() - start
            self._counts[name] = self._counts.get(name, 0) + 1

    @contextmanager
    def activate(self) -> Iterator['Timer']:
        """Make this timer the one phase() reports to, for the current context."""
        token = _ACTIVE.set(self)
        try:
            yield self
        finally:
            _ACTIVE.reset(token)

    def counts(self) -> dict[str, int]:
        """How many times each phase was entered."""
        return dict(self._counts)

    def result(self) -> dict[str, float]:
        """
        Seconds per phase plus ``total_seconds``.

        Raises:
            RuntimeError: If called before stop()
        """
        if self._total is None:
            raise RuntimeError("Timer.result() called before stop()")
        result = {'total_seconds': self._total}
        result.update(self._seconds)
        return result


def active_timer() -> Timer | None:
    """The timer activated for the current context, if any."""
    return _ACTIVE.get()


@contextmanager
def phase(name: str) -> Iterator[None]:
    """Report a factorization phase to the active timer, if there is one."""
    timer = _ACTIVE.get()
    if timer is None:
        yield
        return
    with timer.section(name):
        yield
