"""neuronets public API."""

from .core import activations  # noqa: F401
from .core import types  # noqa: F401
from .core.activations import Activation
from .core.exceptions import (
    DimensionMismatchError,
    InvalidConfigurationError,
    NetworkError,
    UnknownTagError,
)
from .core.layer import Layer
from .core.losses import ErrorFunction
from .core.network import Network
from .core.serialization import dumps, from_record, load, loads, save, to_record
from .core.types import Sample
from .training.pipelines import load_preset, presets, run_pipeline

__all__ = [
    "Activation",
    "DimensionMismatchError",
    "ErrorFunction",
    "InvalidConfigurationError",
    "Layer",
    "Network",
    "NetworkError",
    "Sample",
    "UnknownTagError",
    "activations",
    "dumps",
    "from_record",
    "load",
    "load_preset",
    "loads",
    "presets",
    "run_pipeline",
    "save",
    "to_record",
    "types",
]
