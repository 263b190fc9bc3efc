"""Construction-time errors.

At run time a pipeline reports failure through :class:`~entangle.result.Error`,
never through an exception.  The classes below are raised while seeds and
pipelines are being declared, so that a misconfigured composition is rejected
before it can be invoked.
"""

from __future__ import annotations

from typing import Any


class EntangleError(Exception):
    """Base class for every error raised by the package."""


class PipelineConfigError(EntangleError):
    """Raised when a branch, thorn or pipeline declaration is malformed."""


class LayerConfigError(EntangleError, ValueError):
    """Raised when a layer catalog is declared incorrectly."""


class UnknownLayerError(LayerConfigError):
    """Raised when enabling a layer that is not part of the catalog."""

    def __init__(self, layer: str, catalog: Any) -> None:
        self.layer = layer
        self.catalog = catalog
        super().__init__(
            f"Layer {layer!r} is not declared. Declared layers: {tuple(catalog)!r}"
        )


class ResultTypeError(EntangleError, TypeError):
    """Raised when a branch or thorn returns something that is not a Result."""


class UnwrapError(EntangleError):
    """Raised by :func:`~entangle.result.unwrap` on an ``Error`` result."""

    def __init__(self, reason: Any) -> None:
        self.reason = reason
        super().__init__(f"Called unwrap on an Error result: {reason!r}")
