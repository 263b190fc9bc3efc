"""Branches: the units of domain logic a pipeline is composed from.

A branch is either a reusable class::

    class AddTest(Branch, layers=["test"]):
        def run(self, state):
            return Ok(state + 1)

or a plain function paired with its options on the spot::

    branch(add, layers=["test", "dev"])

Both forms are interchangeable in the list passed to
:func:`~entangle.entangler.entangle`.  A ``(function, {"layers": [...]})``
tuple and a bare function (always active) are accepted too.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable

from .errors import PipelineConfigError
from .layers import WILDCARD, LayerSpec, normalize_layers
from .protocol import BranchProtocol
from .result import Ok, Result

_OPTION_KEYS = frozenset({"layers"})


def parse_options(options: Any, kind: str) -> frozenset[str] | str:
    """Validate an inline option mapping and return its normalised layers."""
    if options is None:
        return WILDCARD
    if not isinstance(options, Mapping):
        raise PipelineConfigError(
            f"{kind} options must be a mapping, got {type(options).__name__}"
        )
    unknown = set(options) - _OPTION_KEYS
    if unknown:
        raise PipelineConfigError(
            f"Unknown {kind} option(s): {', '.join(sorted(map(str, unknown)))}"
        )
    return normalize_layers(options.get("layers"))


class Branch:
    """Base class for named, reusable branches.

    Declare layers with a class keyword; without one the branch is attached
    to every layer.  Subclasses override :meth:`run`.
    """

    layers: frozenset[str] | str = WILDCARD

    def __init_subclass__(cls, layers: LayerSpec = None, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        declared = layers if layers is not None else cls.layers
        # a layers() method is resolved per instance by filter.layers_of
        if not callable(declared):
            cls.layers = normalize_layers(declared)

    def run(self, state: Any) -> Result:
        return Ok(state)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(layers={self.layers!r})"


@dataclass(frozen=True)
class InlineBranch:
    """A raw ``state -> Result`` function paired with its options."""

    fun: Callable[[Any], Result]
    layers: frozenset[str] | str = WILDCARD

    def __post_init__(self) -> None:
        if not callable(self.fun):
            raise PipelineConfigError(
                f"Branch function must be callable, got {type(self.fun).__name__}"
            )
        object.__setattr__(self, "layers", normalize_layers(self.layers))

    def run(self, state: Any) -> Result:
        return self.fun(state)

    def __call__(self, state: Any) -> Result:
        return self.fun(state)


def branch(
    fun: Callable[[Any], Result] | None = None, *, layers: LayerSpec = WILDCARD
) -> Any:
    """Create a branch from a plain function.

    Called without *fun* it returns a decorator, so both spellings work::

        calculate = [branch(add), branch(divide, layers=["test"])]

        @branch(layers=["prod"])
        def subtract(x):
            return Ok(x - 1)
    """
    if fun is None:
        return lambda f: InlineBranch(f, layers)
    return InlineBranch(fun, layers)


def as_branch(obj: Any) -> BranchProtocol:
    """Normalise any accepted branch declaration.

    Raises:
        PipelineConfigError: *obj* cannot be used as a branch.
    """
    # Imported here: thorn depends on this module for parse_options.
    from .thorn import InlineThorn, Thorn

    if isinstance(obj, type):
        if issubclass(obj, Branch):
            return obj()
        raise PipelineConfigError(f"Class {obj.__name__} is not a Branch subclass")
    if isinstance(obj, (Branch, InlineBranch)):
        return obj
    if isinstance(obj, (Thorn, InlineThorn)):
        raise PipelineConfigError(f"{obj!r} is a Thorn and cannot be used as a branch")
    if isinstance(obj, tuple):
        if len(obj) != 2:
            raise PipelineConfigError(
                f"Inline branches are (function, options) pairs, got {len(obj)} items"
            )
        fun, options = obj
        return InlineBranch(fun, parse_options(options, "branch"))
    if isinstance(obj, BranchProtocol):
        return obj
    if callable(obj):
        return InlineBranch(obj)
    raise PipelineConfigError(f"Cannot use {obj!r} as a branch")
