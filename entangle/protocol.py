"""Structural protocols for branches and thorns."""

from __future__ import annotations

from collections.abc import Set as AbstractSet
from typing import Any, Callable, Protocol, runtime_checkable

from .result import Result

# ``state -> Result``: a branch's run function, and what every thorn wraps.
Continuation = Callable[[Any], Result]


@runtime_checkable
class BranchProtocol(Protocol):
    """Structural protocol every branch must satisfy.

    ``layers`` is either the wildcard ``"*"`` or a set of layer names, given
    as an attribute or returned by a ``layers()`` method.
    ``@runtime_checkable`` lets :func:`~entangle.branch.as_branch` reject
    objects that are missing either member when a pipeline is declared.
    """

    layers: str | AbstractSet[str]

    def run(self, state: Any) -> Result: ...


@runtime_checkable
class ThornProtocol(Protocol):
    """Structural protocol every thorn must satisfy.

    ``run`` receives the continuation it wraps (``next``) and returns a new
    continuation.  The thorn decides whether and how to call ``next``.
    """

    layers: str | AbstractSet[str]

    def run(self, next: Continuation) -> Continuation: ...
