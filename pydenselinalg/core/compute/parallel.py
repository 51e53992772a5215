"""
Size-threshold parallel loop scheduling.

Parallelism in pydenselinalg is strictly intra-call and data-parallel:
a loop over [0, n) is cut into disjoint contiguous chunks and each chunk
is handed to a worker thread. The chunk bodies do vectorized NumPy work,
which releases the GIL, so threads give real speedups on large inputs.

Below a threshold the whole range runs as a single sequential call.
There are three thresholds, one per complexity class of the operation:

    linear      O(n) elementwise operations (scaling, addition, ...)
    quadratic   O(n^2) operations (gemv, ger, outer product, transpose)
    cubic       O(n^3) operations (matrix product, factorization updates)

The thresholds are configuration, not constants baked into call sites:
use set_parallel_policy() or the parallel_policy() context manager.
"""

import operator
import os
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass, replace
from functools import reduce
from typing import Any, Callable, Iterator, TypeVar

from pydenselinalg.core.exceptions import ValidationError

T = TypeVar('T')

ENV_NUM_THREADS = 'PYDENSELINALG_NUM_THREADS'


@dataclass(frozen=True)
class ParallelPolicy:
    """
    Scheduling policy for data-parallel loops.

    Attributes:
        linear_threshold: Element count above which O(n) loops run in parallel
        quadratic_threshold: Element count above which O(n^2) loops run in parallel
        cubic_threshold: Element count above which O(n^3) loops run in parallel
        block_size: Tile width used by blocked algorithms
        max_workers: Thread count, or None for os.cpu_count()
    """
    linear_threshold: int = 500_000
    quadratic_threshold: int = 500 * 500
    cubic_threshold: int = 50 * 50
    block_size: int = 64
    max_workers: int | None = None

    def __post_init__(self):
        for name in ('linear_threshold', 'quadratic_threshold', 'cubic_threshold'):
            if getattr(self, name) < 0:
                raise ValidationError(f"{name}: must be non-negative, got {getattr(self, name)}")
        if self.block_size < 1:
            raise ValidationError(f"block_size: must be positive, got {self.block_size}")
        if self.max_workers is not None and self.max_workers < 1:
            raise ValidationError(f"max_workers: must be positive, got {self.max_workers}")

    @property
    def workers(self) -> int:
        """Effective number of worker threads."""
        return self.max_workers or os.cpu_count() or 1

    def should_parallelize(self, work: int, threshold: int) -> bool:
        """True when ``work`` exceeds ``threshold`` and more than one worker exists."""
        return work > threshold and self.workers > 1

    def chunks(self, n: int) -> list[tuple[int, int]]:
        """Split [0, n) into at most ``workers`` disjoint, contiguous ranges."""
        count = max(1, min(self.workers, n))
        base, extra = divmod(n, count)
        ranges = []
        start = 0
        for i in range(count):
            stop = start + base + (1 if i < extra else 0)
            ranges.append((start, stop))
            start = stop
        return ranges

    def parallel_for(
        self,
        n: int,
        body: Callable[[int, int], Any],
        *,
        work: int,
        threshold: int,
    ) -> None:
        """
        Run ``body(start, stop)`` over disjoint chunks covering [0, n).

        Each chunk must write only to memory owned by its own index range.

        Args:
            n: Number of loop iterations
            body: Callable processing iterations [start, stop)
            work: Element count of the operation, compared to ``threshold``
            threshold: One of this policy's thresholds

        Raises:
            Whatever ``body`` raises; the first failing chunk wins.
        """
        if n <= 0:
            return
        if not self.should_parallelize(work, threshold) or n == 1:
            body(0, n)
            return
        ranges = self.chunks(n)
        with ThreadPoolExecutor(max_workers=len(ranges)) as pool:
            futures = [pool.submit(body, start, stop) for start, stop in ranges]
            for future in futures:
                future.result()

    def parallel_sum(
        self,
        n: int,
        body: Callable[[int, int], T],
        *,
        work: int,
        threshold: int,
    ) -> T:
        """
        Reduce partial results of ``body(start, stop)`` over [0, n) by addition.

        Every chunk produces its own partial sum; partials are combined
        afterwards in chunk order, so no accumulator is ever shared
        between threads.
        """
        if n <= 0:
            raise ValidationError(f"parallel_sum: empty range (n={n})")
        if not self.should_parallelize(work, threshold) or n == 1:
            return body(0, n)
        ranges = self.chunks(n)
        with ThreadPoolExecutor(max_workers=len(ranges)) as pool:
            partials = list(pool.map(lambda r: body(*r), ranges))
        return reduce(operator.add, partials)


def _workers_from_env() -> int | None:
    raw = os.environ.get(ENV_NUM_THREADS, '').strip()
    if not raw:
        return None
    try:
        value = int(raw)
    except ValueError as e:
        raise ValidationError(f"{ENV_NUM_THREADS}: expected an integer, got {raw!r}") from e
    if value < 1:
        raise ValidationError(f"{ENV_NUM_THREADS}: must be positive, got {value}")
    return value


_policy = ParallelPolicy(max_workers=_workers_from_env())


def get_parallel_policy() -> ParallelPolicy:
    """Return the policy used by all kernels and containers."""
    return _policy


def set_parallel_policy(policy: ParallelPolicy) -> ParallelPolicy:
    """
    Replace the active policy.

    Returns:
        The previously active policy
    """
    global _policy
    if not isinstance(policy, ParallelPolicy):
        raise ValidationError(f"policy: expected ParallelPolicy, got {type(policy).__name__}")
    previous, _policy = _policy, policy
    return previous


@contextmanager
def parallel_policy(**overrides: Any) -> Iterator[ParallelPolicy]:
    """
    Temporarily override fields of the active policy.

    Usage:
        with parallel_policy(linear_threshold=0, max_workers=4):
            c = a + b   # always takes the threaded path
    """
    previous = set_parallel_policy(replace(_policy, **overrides))
    try:
        yield _policy
    finally:
        set_parallel_policy(previous)
