"""The two outcomes that flow through a composition: ``Ok`` and ``Error``."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from .errors import ResultTypeError, UnwrapError


@dataclass(frozen=True)
class Ok:
    """Successful outcome carrying the (new) state."""

    value: Any

    @property
    def is_ok(self) -> bool:
        return True

    @property
    def is_error(self) -> bool:
        return False


@dataclass(frozen=True)
class Error:
    """Failed outcome carrying a caller-defined reason."""

    reason: Any

    @property
    def is_ok(self) -> bool:
        return False

    @property
    def is_error(self) -> bool:
        return True


Result = Ok | Error


def bind(result: Result, fn: Callable[[Any], Result]) -> Result:
    """Feed the value of an ``Ok`` into *fn*; pass an ``Error`` through untouched.

    *fn* is never called for an ``Error``.  This is the only propagation
    mechanism inside a composed pipeline.
    """
    if isinstance(result, Ok):
        return fn(result.value)
    if isinstance(result, Error):
        return result
    raise ResultTypeError(
        f"Expected Ok or Error, got {type(result).__name__}: {result!r}"
    )


def unwrap(result: Result) -> Any:
    """Return the value of an ``Ok`` or raise :class:`UnwrapError`."""
    if isinstance(result, Ok):
        return result.value
    if isinstance(result, Error):
        raise UnwrapError(result.reason)
    raise ResultTypeError(
        f"Expected Ok or Error, got {type(result).__name__}: {result!r}"
    )
