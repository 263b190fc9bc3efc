"""Layer catalog and active-layer bitmask.

A catalog is the ordered set of layer names a seed may use.  Each name owns
one bit of an integer mask; a mask records which layers are active.  The rest
of the package only ever goes through :func:`enable` and :func:`is_enabled`,
so the bit layout is private to this module.

Example::

    catalog = LayerCatalog(["dev", "test", "prod"])
    mask = enable(catalog, new_mask(), "test")
    is_enabled(catalog, mask, {"test", "dev"})   # True
    is_enabled(catalog, mask, {"prod"})          # False
    is_enabled(catalog, mask, "*")               # True
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Set as AbstractSet
from dataclasses import dataclass

from .errors import LayerConfigError, UnknownLayerError

logger = logging.getLogger(__name__)

WILDCARD = "*"

LayerMask = int

# What a branch or thorn may declare: the wildcard, nothing, or a set of names.
LayerSpec = str | AbstractSet[str] | Iterable[str] | None


@dataclass(frozen=True, init=False)
class LayerCatalog:
    """Immutable, ordered collection of unique layer names."""

    names: tuple[str, ...] = ()

    def __init__(self, names: Iterable[str] = ()) -> None:
        if isinstance(names, str):
            names = (names,)
        names = tuple(names)
        seen: set[str] = set()
        for name in names:
            if not isinstance(name, str) or not name:
                raise LayerConfigError(f"Layer names must be non-empty strings, got {name!r}")
            if name == WILDCARD:
                raise LayerConfigError(f"{WILDCARD!r} is reserved and cannot be declared as a layer")
            if name in seen:
                raise LayerConfigError(f"Layer {name!r} is declared more than once")
            seen.add(name)
        object.__setattr__(self, "names", names)

    @classmethod
    def of(cls, catalog: "LayerCatalog | Iterable[str]") -> "LayerCatalog":
        if isinstance(catalog, LayerCatalog):
            return catalog
        return cls(catalog)

    def bit(self, name: str) -> int:
        try:
            return 1 << self.names.index(name)
        except ValueError:
            raise UnknownLayerError(name, self.names) from None

    def __contains__(self, name: object) -> bool:
        return name in self.names

    def __iter__(self) -> Iterator[str]:
        return iter(self.names)

    def __len__(self) -> int:
        return len(self.names)


def new_mask() -> LayerMask:
    """Return a mask with no active layers."""
    return 0


def enable(catalog: LayerCatalog | Iterable[str], mask: LayerMask, layer: str) -> LayerMask:
    """Return *mask* with *layer* switched on.

    Raises:
        UnknownLayerError: *layer* is not in *catalog*.
    """
    return mask | LayerCatalog.of(catalog).bit(layer)


def make_layer_mask(
    catalog: LayerCatalog | Iterable[str], active_layers: Iterable[str]
) -> LayerMask:
    """Build a mask with every layer in *active_layers* switched on."""
    catalog = LayerCatalog.of(catalog)
    mask = new_mask()
    for layer in active_layers:
        mask = enable(catalog, mask, layer)
    return mask


def normalize_layers(layers: LayerSpec) -> frozenset[str] | str:
    """Coerce a layer declaration to ``WILDCARD`` or a ``frozenset`` of names.

    ``None``, an empty collection and any collection containing the wildcard
    all mean "always active".
    """
    if layers is None or layers == WILDCARD:
        return WILDCARD
    if isinstance(layers, str):
        return frozenset({layers})
    names = frozenset(layers)
    if not names or WILDCARD in names:
        return WILDCARD
    return names


def is_enabled(
    catalog: LayerCatalog | Iterable[str], mask: LayerMask, layers: LayerSpec
) -> bool:
    """Return True when *layers* intersects the active layers of *mask*.

    The wildcard (or no declaration at all) is always enabled.  Names missing
    from *catalog* can never be active.
    """
    layers = normalize_layers(layers)
    if layers == WILDCARD:
        return True
    catalog = LayerCatalog.of(catalog)
    for name in layers:
        if name not in catalog:
            logger.debug("Layer %r is not declared in %r; treating as inactive", name, catalog.names)
            continue
        if mask & catalog.bit(name):
            return True
    return False


def active_layers(catalog: LayerCatalog | Iterable[str], mask: LayerMask) -> tuple[str, ...]:
    """List the names switched on in *mask*, in catalog order."""
    catalog = LayerCatalog.of(catalog)
    return tuple(name for name in catalog if mask & catalog.bit(name))
