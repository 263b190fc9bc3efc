"""Compose functions (branches) into pipelines, wrap them with middleware
(thorns and roots), and switch any of them on or off per layer.

Public surface::

    from entangle import (
        Ok, Error, Result, bind, unwrap,
        Branch, branch, Thorn, grow,
        Seed, SeedBuilder, SeedConfig,
        Entangler, Pipeline, entangle,
        LayerCatalog, WILDCARD,
        EntangleError, PipelineConfigError, LayerConfigError,
        UnknownLayerError, ResultTypeError, UnwrapError,
    )
"""

from .branch import Branch, InlineBranch, as_branch, branch
from .config import SeedConfig
from .entangler import Entangler, Pipeline, compose_branches, compose_thorns, entangle
from .errors import (
    EntangleError,
    LayerConfigError,
    PipelineConfigError,
    ResultTypeError,
    UnknownLayerError,
    UnwrapError,
)
from .layers import WILDCARD, LayerCatalog
from .protocol import BranchProtocol, Continuation, ThornProtocol
from .result import Error, Ok, Result, bind, unwrap
from .seed import Seed, SeedBuilder, default_settings
from .thorn import InlineThorn, Thorn, as_thorn, grow

__version__ = "0.1.0"

__all__ = [
    # Results
    "Ok",
    "Error",
    "Result",
    "bind",
    "unwrap",
    # Branches and thorns
    "Branch",
    "InlineBranch",
    "branch",
    "as_branch",
    "Thorn",
    "InlineThorn",
    "grow",
    "as_thorn",
    "BranchProtocol",
    "ThornProtocol",
    "Continuation",
    # Settings
    "Seed",
    "SeedBuilder",
    "SeedConfig",
    "default_settings",
    "LayerCatalog",
    "WILDCARD",
    # Composition
    "Entangler",
    "Pipeline",
    "entangle",
    "compose_branches",
    "compose_thorns",
    # Errors
    "EntangleError",
    "PipelineConfigError",
    "LayerConfigError",
    "UnknownLayerError",
    "ResultTypeError",
    "UnwrapError",
]
