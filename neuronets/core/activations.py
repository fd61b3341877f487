"""Activation functions for neuronets.

Every activation is evaluated on a layer's *pre-activation* vector, both for
the forward form and for the derivative.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Dict

import numpy as np

from .exceptions import UnknownTagError
from .types import Array

ActivationFn = Callable[[Array], Array]


def sigmoid(x: Array) -> Array:
    """Return the logistic sigmoid of ``x``."""

    with np.errstate(over="ignore"):
        return 1.0 / (1.0 + np.exp(-x))


def sigmoid_deriv(x: Array) -> Array:
    s = sigmoid(x)
    return s * (1.0 - s)


def tanh(x: Array) -> Array:
    return np.tanh(x)


def tanh_deriv(x: Array) -> Array:
    return 1.0 - np.tanh(x) ** 2


def relu(x: Array) -> Array:
    """Return the ReLU activation."""

    return np.maximum(x, 0.0)


def relu_deriv(x: Array) -> Array:
    return (x > 0).astype(np.float64)


def softmax(x: Array) -> Array:
    """Max-shifted softmax.

    A vector whose shifted exponentials do not sum to a finite positive value
    (all ``-inf``, ``nan`` or ``+inf`` entries) maps to all zeros.
    """

    with np.errstate(invalid="ignore", over="ignore"):
        shifted = x - np.max(x)
        exp = np.nan_to_num(np.exp(shifted), nan=0.0)
    total = float(np.sum(exp))
    if total == 0.0:
        return np.zeros_like(x, dtype=np.float64)
    return exp / total


def softmax_deriv(x: Array) -> Array:
    """Diagonal of the softmax Jacobian, ``s * (1 - s)``."""

    s = softmax(x)
    return s * (1.0 - s)


class Activation(str, Enum):
    """Closed set of element-wise nonlinearities, tagged by their record name."""

    SIGMOID = "sigmoid"
    TANH = "tanh"
    RELU = "relu"
    SOFTMAX = "softmax"

    def f(self, x: Array) -> Array:
        return _FORWARD[self](x)

    def df(self, x: Array) -> Array:
        return _DERIVATIVE[self](x)

    @classmethod
    def parse(cls, tag: "Activation | str") -> "Activation":
        if isinstance(tag, cls):
            return tag
        try:
            return cls(str(tag))
        except ValueError:
            raise UnknownTagError("activation", tag, names()) from None


_FORWARD: Dict[Activation, ActivationFn] = {
    Activation.SIGMOID: sigmoid,
    Activation.TANH: tanh,
    Activation.RELU: relu,
    Activation.SOFTMAX: softmax,
}

_DERIVATIVE: Dict[Activation, ActivationFn] = {
    Activation.SIGMOID: sigmoid_deriv,
    Activation.TANH: tanh_deriv,
    Activation.RELU: relu_deriv,
    Activation.SOFTMAX: softmax_deriv,
}


def names() -> list[str]:
    return [member.value for member in Activation]


__all__ = [
    "Activation",
    "names",
    "relu",
    "relu_deriv",
    "sigmoid",
    "sigmoid_deriv",
    "softmax",
    "softmax_deriv",
    "tanh",
    "tanh_deriv",
]
