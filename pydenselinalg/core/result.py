"""
Generic result container for pydenselinalg computations.

The Result class provides a standardized envelope for factorizations and
any other fallible operation whose failure should be visible at the call
site as a value instead of an exception.

Design decisions:
    - Generic over parameter payload P for type safety
    - Tagged: exactly one of params / error is meaningful (see ``ok``)
    - info dict for flexible metadata (method, dtype, shape)
    - timing is optional (don't burden unit tests)
    - Immutable (frozen=True) for reproducibility
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Generic, TypeVar

from pydenselinalg.core.exceptions import LinalgError

P = TypeVar('P')  # Parameter payload type


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable, tagged result envelope.

    Type Parameters:
        P: The operation-specific payload type

    Attributes:
        params: Payload of a successful call (None on failure)
        info: Structured metadata (method, dtype, shape)
        timing: Execution timing breakdown, or None if not measured
        backend_name: Identifier of the backend that produced this result
        warnings: Non-fatal issues encountered during computation
        error: The library error that ended the call, or None on success

    Examples:
        >>> res = decompose(A, 'cholesky')
        >>> if res.ok:
        ...     L = res.params
        ... else:
        ...     print(type(res.error).__name__, res.error)
    """
    params: P | None
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)
    error: LinalgError | None = None

    @classmethod
    def failure(
        cls,
        error: LinalgError,
        backend_name: str,
        info: dict[str, Any] | None = None,
        timing: dict[str, float] | None = None,
        warnings: tuple[str, ...] = (),
    ) -> 'Result[P]':
        """Build a failed result carrying ``error``."""
        return cls(
            params=None,
            info=dict(info or {}),
            timing=timing,
            backend_name=backend_name,
            warnings=tuple(warnings),
            error=error,
        )

    @property
    def ok(self) -> bool:
        """True when the call succeeded."""
        return self.error is None

    def unwrap(self) -> P:
        """
        Return the payload or raise the recorded error.

        Raises:
            LinalgError: The error carried by a failed result
        """
        if self.error is not None:
            raise self.error
        return self.params

    def has_warning(self, substring: str) -> bool:
        """Check if any warning contains the given substring."""
        return any(substring in w for w in self.warnings)


def attempt(
    operation: Callable[..., P],
    *args: Any,
    backend_name: str = 'none',
    **kwargs: Any,
) -> Result[P]:
    """
    Run a fallible library call and report its outcome as a Result.

    Only LinalgError subclasses are captured. Anything else (programming
    errors, KeyboardInterrupt) propagates unchanged.

    Args:
        operation: Callable to invoke, e.g. ``Matrix`` or ``plu``
        *args: Positional arguments for the call
        backend_name: Recorded on the returned Result
        **kwargs: Keyword arguments for the call

    Returns:
        Successful Result holding the return value, or a failed Result
        holding the raised error.
    """
    info = {'operation': getattr(operation, '__name__', repr(operation))}
    try:
        value = operation(*args, **kwargs)
    except LinalgError as e:
        return Result.failure(e, backend_name=backend_name, info=info)
    return Result(params=value, info=info, timing=None, backend_name=backend_name)
