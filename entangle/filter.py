"""Layer filtering for branches and thorns."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, TypeVar

from .errors import PipelineConfigError
from .layers import WILDCARD, LayerCatalog, LayerMask, is_enabled, normalize_layers

logger = logging.getLogger(__name__)

UnitT = TypeVar("UnitT")


def layers_of(unit: Any) -> frozenset[str] | str:
    """Return the normalised layer declaration of a branch or thorn.

    ``layers`` may be a plain value or a method returning one.

    Raises:
        PipelineConfigError: The declaration is not a layer name, a
            collection of names, the wildcard or ``None``.
    """
    layers = getattr(unit, "layers", WILDCARD)
    if callable(layers):
        layers = layers()
    if layers is not None and not isinstance(layers, (str, Iterable)):
        raise PipelineConfigError(
            f"{unit!r} declares invalid layers {layers!r}"
        )
    return normalize_layers(layers)


def layer_enabled(unit: Any, layer_mask: LayerMask, layers: LayerCatalog | Iterable[str]) -> bool:
    return is_enabled(layers, layer_mask, layers_of(unit))


def filter_enabled(
    units: Iterable[UnitT], layer_mask: LayerMask, layers: LayerCatalog | Iterable[str]
) -> tuple[UnitT, ...]:
    """Keep the units attached to an active layer, preserving order.

    Disabled units are dropped outright; nothing takes their place.
    """
    layers = LayerCatalog.of(layers)
    kept = []
    for unit in units:
        if layer_enabled(unit, layer_mask, layers):
            kept.append(unit)
        else:
            logger.debug("Skipping %r: layers %r are not active", unit, layers_of(unit))
    return tuple(kept)
