"""Validated layer configuration for seeds.

Projects usually pick the active layer from their environment (``dev`` on a
laptop, ``test`` under pytest, ``prod`` when deployed).  :class:`SeedConfig`
holds that choice and can be read from environment variables or a ``.env``
file::

    # .env
    ENTANGLE_LAYERS=dev,test,prod
    ENTANGLE_ACTIVE_LAYERS=test

    config = SeedConfig.from_env(dotenv_path=".env")
    seed = SeedBuilder.from_config(config).thorn(LogThorn).build()
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Mapping

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .layers import WILDCARD

logger = logging.getLogger(__name__)

DEFAULT_ENV_PREFIX = "ENTANGLE_"


def _split(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


class SeedConfig(BaseModel):
    """Declared layers and the subset of them that is active."""

    model_config = ConfigDict(frozen=True)

    layers: list[str] = Field(
        default_factory=list, description="Layer catalog, in declaration order"
    )
    active_layers: list[str] = Field(
        default_factory=list, description="Layers switched on for this process"
    )

    @field_validator("layers")
    @classmethod
    def _check_layers(cls, value: list[str]) -> list[str]:
        seen = set()
        for name in value:
            if not name:
                raise ValueError("layer names must be non-empty")
            if name == WILDCARD:
                raise ValueError(f"{WILDCARD!r} is reserved and cannot be declared")
            if name in seen:
                raise ValueError(f"layer {name!r} is declared more than once")
            seen.add(name)
        return value

    @model_validator(mode="after")
    def _check_active_layers(self) -> "SeedConfig":
        undeclared = [name for name in self.active_layers if name not in self.layers]
        if undeclared:
            raise ValueError(
                f"active layers {undeclared!r} are not declared in {self.layers!r}"
            )
        return self

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SeedConfig":
        return cls.model_validate(dict(data))

    @classmethod
    def from_env(
        cls,
        prefix: str = DEFAULT_ENV_PREFIX,
        dotenv_path: str | Path | None = None,
    ) -> "SeedConfig":
        """Read ``{prefix}LAYERS`` and ``{prefix}ACTIVE_LAYERS`` (comma separated).

        When *dotenv_path* is given the file is loaded first; variables that
        are already set in the environment win.
        """
        if dotenv_path is not None:
            loaded = load_dotenv(dotenv_path)
            logger.debug("Loaded %s: %s", dotenv_path, loaded)

        config = cls(
            layers=_split(os.environ.get(f"{prefix}LAYERS")),
            active_layers=_split(os.environ.get(f"{prefix}ACTIVE_LAYERS")),
        )
        logger.debug(
            "Seed config from environment: layers=%s active=%s",
            config.layers,
            config.active_layers,
        )
        return config
