"""Entangler: composes branches and thorns into a single pipeline function.

Composition rules
-----------------
- Branches run left to right.  Each one receives the state produced by the
  previous one; the first ``Error`` ends the run and every later branch is
  skipped.
- Every seed ``thorn`` is wrapped around *each* branch on its own: the thorns
  see one branch's input and result, and run once per branch.  The first
  thorn in the list is the outermost.
- Every seed ``root`` is wrapped *once* around the whole chain and sees the
  pipeline's input and final result, ``Error`` included.
- Branches, thorns and roots attached to an inactive layer are left out.

Example::

    calculations = (
        Entangler(seed=settings)
        .entangle("calculate", [branch(add), branch(add), branch(multiply)])
    )
    calculations.calculate(1)   # Ok(value=6)
"""

from __future__ import annotations

import keyword
import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .branch import as_branch
from .errors import PipelineConfigError, ResultTypeError
from .filter import filter_enabled
from .protocol import BranchProtocol, Continuation, ThornProtocol
from .result import Error, Ok, Result, bind
from .seed import Seed, SeedBuilder

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------


def compose_thorns(thorns: Iterable[ThornProtocol], fun: Continuation) -> Continuation:
    """Wrap *fun* in *thorns*; the first thorn becomes the outermost call.

    Raises:
        PipelineConfigError: A thorn did not return a callable continuation.
    """
    composition = fun
    for thorn in reversed(tuple(thorns)):
        composition = thorn.run(composition)
        if not callable(composition):
            raise PipelineConfigError(
                f"{thorn!r} must return a callable continuation, "
                f"got {type(composition).__name__}"
            )
    return composition


def _chain(run: Continuation, rest: Continuation) -> Continuation:
    def chained(state: Any) -> Result:
        return bind(run(state), rest)

    return chained


def compose_branches(
    branches: Iterable[BranchProtocol],
    thorns: Iterable[ThornProtocol] = (),
    roots: Iterable[ThornProtocol] = (),
) -> Continuation:
    """Fold already filtered branches into one ``state -> Result`` function.

    Without branches the result is ``Ok`` itself, still wrapped by *roots*.
    """
    thorns = tuple(thorns)
    composition: Continuation = Ok
    for unit in reversed(tuple(branches)):
        composition = _chain(compose_thorns(thorns, unit.run), composition)
    return compose_thorns(roots, composition)


def resolve_seed(seed: Any = None) -> Seed:
    if seed is None:
        return Seed.default()
    if isinstance(seed, Seed):
        return seed
    if isinstance(seed, SeedBuilder):
        return seed.build()
    raise PipelineConfigError(
        f"Expected a Seed or SeedBuilder, got {type(seed).__name__}"
    )


@dataclass(frozen=True)
class Pipeline:
    """A composed, layer-filtered pipeline.  Call it with an initial state."""

    name: str
    branches: tuple[BranchProtocol, ...] = ()
    thorns: tuple[ThornProtocol, ...] = ()
    roots: tuple[ThornProtocol, ...] = ()
    composition: Continuation = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "composition",
            compose_branches(self.branches, self.thorns, self.roots),
        )

    def __call__(self, state: Any) -> Result:
        result = self.composition(state)
        if not isinstance(result, (Ok, Error)):
            raise ResultTypeError(
                f"Pipeline {self.name!r} produced {type(result).__name__} "
                f"instead of Ok or Error: {result!r}"
            )
        logger.debug("Pipeline %r finished with %s", self.name, type(result).__name__)
        return result


def entangle(name: str, branches: Iterable[Any], seed: Any = None) -> Pipeline:
    """Build a named pipeline from *branches* using the settings in *seed*.

    Raises:
        PipelineConfigError: A branch or thorn declaration is malformed.
    """
    if isinstance(branches, (str, bytes)) or not isinstance(branches, Iterable):
        raise PipelineConfigError(
            f"Branches of {name!r} must be a list, got {type(branches).__name__}"
        )
    seed = resolve_seed(seed)
    declared = tuple(as_branch(b) for b in branches)

    pipeline = Pipeline(
        name=name,
        branches=filter_enabled(declared, seed.layer_mask, seed.layers),
        thorns=filter_enabled(seed.thorns, seed.layer_mask, seed.layers),
        roots=filter_enabled(seed.roots, seed.layer_mask, seed.layers),
    )
    logger.debug(
        "Entangled %r: %d/%d branches, %d thorns, %d roots (active layers: %s)",
        name,
        len(pipeline.branches),
        len(declared),
        len(pipeline.thorns),
        len(pipeline.roots),
        seed.active_layers,
    )
    return pipeline


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class Entangler:
    """Immutable collection of named pipelines sharing one seed.

    :meth:`entangle` returns a new ``Entangler``; the original is unchanged.
    Pipelines are reachable as attributes or by name::

        compositions = Entangler(seed=settings).entangle("add2", [AddTest, Add])
        compositions.add2(1)
        compositions["add2"](1)

    Args:
        seed: A :class:`Seed`, a :class:`SeedBuilder` (built immediately), or
            *None* for the default settings.
        settings: Alias of *seed*; pass one or the other.
    """

    __slots__ = ("_seed", "_pipelines")

    def __init__(self, seed: Any = None, *, settings: Any = None) -> None:
        if seed is not None and settings is not None:
            raise PipelineConfigError("Pass either seed or settings, not both")
        object.__setattr__(self, "_seed", resolve_seed(seed if seed is not None else settings))
        object.__setattr__(self, "_pipelines", MappingProxyType({}))

    @classmethod
    def _with_pipelines(cls, seed: Seed, pipelines: Mapping[str, Pipeline]) -> "Entangler":
        entangler = cls(seed)
        object.__setattr__(entangler, "_pipelines", MappingProxyType(dict(pipelines)))
        return entangler

    @property
    def seed(self) -> Seed:
        return self._seed

    @property
    def pipelines(self) -> Mapping[str, Pipeline]:
        return self._pipelines

    def entangle(self, name: str, branches: Iterable[Any]) -> "Entangler":
        """Return a new entangler that also holds the pipeline *name*.

        Raises:
            PipelineConfigError: *name* is invalid or already taken, or a
                branch declaration is malformed.
        """
        self._check_name(name)
        pipeline = entangle(name, branches, self._seed)
        return self._with_pipelines(self._seed, {**self._pipelines, name: pipeline})

    def _check_name(self, name: str) -> None:
        if not isinstance(name, str) or not name.isidentifier() or keyword.iskeyword(name):
            raise PipelineConfigError(f"Pipeline name must be an identifier, got {name!r}")
        if name.startswith("_") or hasattr(type(self), name):
            raise PipelineConfigError(f"Pipeline name {name!r} is reserved")
        if name in self._pipelines:
            raise PipelineConfigError(f"Pipeline {name!r} is already entangled")

    def __getattr__(self, name: str) -> Pipeline:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._pipelines[name]
        except KeyError:
            raise AttributeError(
                f"{type(self).__name__} has no pipeline {name!r}"
            ) from None

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __getitem__(self, name: str) -> Pipeline:
        return self._pipelines[name]

    def __contains__(self, name: object) -> bool:
        return name in self._pipelines

    def __iter__(self) -> Iterator[str]:
        return iter(self._pipelines)

    def __len__(self) -> int:
        return len(self._pipelines)

    def __repr__(self) -> str:
        return f"Entangler(pipelines={list(self._pipelines)!r}, seed={self._seed!r})"
