"""Core numerical primitives for neuronets."""

from . import activations, exceptions, layer, losses, network, serialization, types

__all__ = [
    "activations",
    "exceptions",
    "layer",
    "losses",
    "network",
    "serialization",
    "types",
]
