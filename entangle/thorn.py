"""Thorns: middleware wrapped around branches (per step) or around a whole
composition (as roots).

A thorn receives the continuation it wraps, ``next``, and returns a new
continuation.  It may call ``next`` as is, call it with a modified state,
transform its result, or skip it and answer with its own ``Result``::

    class CapAtTen(Thorn):
        def run(self, next):
            def wrapped(state):
                return next(state) if state <= 10 else Ok(state)
            return wrapped

    grow(cap_at_ten, layers=["test"])
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from .branch import Branch, InlineBranch, parse_options
from .errors import PipelineConfigError
from .layers import WILDCARD, LayerSpec, normalize_layers
from .protocol import Continuation, ThornProtocol


class Thorn:
    """Base class for named, reusable thorns.

    The default :meth:`run` hands back ``next`` untouched.
    """

    layers: frozenset[str] | str = WILDCARD

    def __init_subclass__(cls, layers: LayerSpec = None, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        declared = layers if layers is not None else cls.layers
        # a layers() method is resolved per instance by filter.layers_of
        if not callable(declared):
            cls.layers = normalize_layers(declared)

    def run(self, next: Continuation) -> Continuation:
        return next

    def __repr__(self) -> str:
        return f"{type(self).__name__}(layers={self.layers!r})"


@dataclass(frozen=True)
class InlineThorn:
    """A raw ``next -> continuation`` function paired with its options."""

    fun: Callable[[Continuation], Continuation]
    layers: frozenset[str] | str = WILDCARD

    def __post_init__(self) -> None:
        if not callable(self.fun):
            raise PipelineConfigError(
                f"Thorn function must be callable, got {type(self.fun).__name__}"
            )
        object.__setattr__(self, "layers", normalize_layers(self.layers))

    def run(self, next: Continuation) -> Continuation:
        return self.fun(next)


def grow(
    fun: Callable[[Continuation], Continuation] | None = None,
    *,
    layers: LayerSpec = WILDCARD,
) -> Any:
    """Create a thorn from a plain function; without *fun*, return a decorator."""
    if fun is None:
        return lambda f: InlineThorn(f, layers)
    return InlineThorn(fun, layers)


def as_thorn(obj: Any) -> ThornProtocol:
    """Normalise any accepted thorn declaration.

    Raises:
        PipelineConfigError: *obj* cannot be used as a thorn.
    """
    if isinstance(obj, type):
        if issubclass(obj, Thorn):
            return obj()
        raise PipelineConfigError(f"Class {obj.__name__} is not a Thorn subclass")
    if isinstance(obj, (Thorn, InlineThorn)):
        return obj
    if isinstance(obj, InlineBranch):
        # branch(fun) and grow(fun) pairs are interchangeable here
        return InlineThorn(obj.fun, obj.layers)
    if isinstance(obj, Branch):
        raise PipelineConfigError(f"{obj!r} is a Branch and cannot be used as a thorn")
    if isinstance(obj, tuple):
        if len(obj) != 2:
            raise PipelineConfigError(
                f"Inline thorns are (function, options) pairs, got {len(obj)} items"
            )
        fun, options = obj
        return InlineThorn(fun, parse_options(options, "thorn"))
    if isinstance(obj, ThornProtocol):
        return obj
    if callable(obj):
        return InlineThorn(obj)
    raise PipelineConfigError(f"Cannot use {obj!r} as a thorn")
