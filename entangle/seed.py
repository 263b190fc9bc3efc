"""Seeds: reusable settings shared by many compositions.

A seed bundles the layer catalog, the active-layer mask and two thorn lists:

- ``thorns`` wrap every branch of a composition, one branch at a time;
- ``roots`` wrap the composition as a whole, once per invocation.

Build one with :class:`SeedBuilder`::

    settings = (
        SeedBuilder()
        .layers(["dev", "test", "prod"])
        .active_layer("test")
        .thorn(LogThorn)
        .root(LogThorn)
        .build()
    )

Thorns and roots attached to inactive layers are dropped when the seed is
built, so a seed only ever carries middleware that will run.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Self

from .filter import filter_enabled
from .layers import LayerCatalog, LayerMask, make_layer_mask, new_mask
from .layers import active_layers as list_active_layers
from .protocol import ThornProtocol
from .thorn import as_thorn

if TYPE_CHECKING:
    from .config import SeedConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Seed:
    """Frozen settings consumed by :func:`~entangle.entangler.entangle`.

    Raw thorn declarations are normalised on construction, so a malformed
    thorn is rejected here rather than when a pipeline runs.
    """

    layers: LayerCatalog = field(default_factory=LayerCatalog)
    layer_mask: LayerMask = field(default_factory=new_mask)
    thorns: tuple[ThornProtocol, ...] = ()
    roots: tuple[ThornProtocol, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "layers", LayerCatalog.of(self.layers))
        object.__setattr__(self, "thorns", tuple(as_thorn(t) for t in self.thorns))
        object.__setattr__(self, "roots", tuple(as_thorn(r) for r in self.roots))

    @classmethod
    def default(cls) -> "Seed":
        """No layers and no middleware."""
        return cls()

    @property
    def active_layers(self) -> tuple[str, ...]:
        return list_active_layers(self.layers, self.layer_mask)

    def replace(self, **changes: Any) -> Self:
        """Return a new seed with the given fields replaced."""
        return dataclasses.replace(self, **changes)


def default_settings() -> Seed:
    return Seed.default()


@dataclass(frozen=True)
class SeedBuilder:
    """Immutable, fluent collector of seed declarations.

    Every declaration method returns a new builder; :meth:`build` turns the
    declarations into a :class:`Seed`.
    """

    declared_layers: tuple[str, ...] = ()
    declared_active_layers: tuple[str, ...] = ()
    declared_thorns: tuple[ThornProtocol, ...] = ()
    declared_roots: tuple[ThornProtocol, ...] = ()

    @classmethod
    def from_config(cls, config: "SeedConfig") -> "SeedBuilder":
        return cls().layers(config.layers).active_layers(config.active_layers)

    # ------------------------------------------------------------------
    # Layers
    # ------------------------------------------------------------------

    def layer(self, layer: str) -> "SeedBuilder":
        """Declare one layer."""
        return self.layers([layer])

    def layers(self, layers: Iterable[str]) -> "SeedBuilder":
        """Declare several layers at once, in order.

        A bare string declares a single layer.
        """
        if isinstance(layers, str):
            layers = [layers]
        return dataclasses.replace(
            self, declared_layers=self.declared_layers + tuple(layers)
        )

    def active_layer(self, layer: str) -> "SeedBuilder":
        """Flag a declared layer as active."""
        return self.active_layers([layer])

    def active_layers(self, layers: Iterable[str]) -> "SeedBuilder":
        if isinstance(layers, str):
            layers = [layers]
        return dataclasses.replace(
            self, declared_active_layers=self.declared_active_layers + tuple(layers)
        )

    # ------------------------------------------------------------------
    # Middleware
    # ------------------------------------------------------------------

    def thorn(self, thorn: Any) -> "SeedBuilder":
        """Register middleware that wraps every branch of a composition."""
        return self.thorns([thorn])

    def thorns(self, thorns: Iterable[Any]) -> "SeedBuilder":
        return dataclasses.replace(
            self,
            declared_thorns=self.declared_thorns + tuple(as_thorn(t) for t in thorns),
        )

    def root(self, root: Any) -> "SeedBuilder":
        """Register middleware that wraps a composition as a whole."""
        return self.roots([root])

    def roots(self, roots: Iterable[Any]) -> "SeedBuilder":
        return dataclasses.replace(
            self,
            declared_roots=self.declared_roots + tuple(as_thorn(r) for r in roots),
        )

    # ------------------------------------------------------------------
    # Finalisation
    # ------------------------------------------------------------------

    def build(self) -> Seed:
        """Resolve the active layers and drop middleware on inactive layers.

        Raises:
            LayerConfigError: A layer is declared twice or is malformed.
            UnknownLayerError: An active layer was never declared.
        """
        catalog = LayerCatalog(self.declared_layers)
        mask = make_layer_mask(catalog, self.declared_active_layers)

        seed = Seed(
            layers=catalog,
            layer_mask=mask,
            thorns=filter_enabled(self.declared_thorns, mask, catalog),
            roots=filter_enabled(self.declared_roots, mask, catalog),
        )
        logger.debug(
            "Built seed: layers=%s active=%s thorns=%d/%d roots=%d/%d",
            catalog.names,
            seed.active_layers,
            len(seed.thorns),
            len(self.declared_thorns),
            len(seed.roots),
            len(self.declared_roots),
        )
        return seed
