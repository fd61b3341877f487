"""A single fully connected layer with per-batch gradient accumulation."""

from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np

from .activations import Activation
from .exceptions import DimensionMismatchError
from .types import Array, as_vector


class Layer:
    """Weights, bias and activation of one network stage.

    ``weights`` has shape ``(n, m)`` where ``n`` is this layer's neuron count and
    ``m`` the previous layer's. The input layer has ``m == 0`` and is only ever
    fed through :meth:`feed`.

    Besides the parameters the layer keeps the state of the last call
    (``raw_input``, ``pre_activation``, ``output``, ``gradient``) and two
    per-batch histories that :meth:`correct` consumes and clears.
    """

    def __init__(
        self,
        weights: Array | Sequence[Sequence[float]],
        bias: Array | Sequence[float],
        activation: Activation | str = Activation.SIGMOID,
    ) -> None:
        bias = np.array(bias, dtype=np.float64).reshape(-1)
        weights = np.array(weights, dtype=np.float64)
        if weights.size == 0:
            weights = weights.reshape(bias.shape[0], 0)
        if weights.ndim != 2 or weights.shape[0] != bias.shape[0]:
            raise DimensionMismatchError(
                f"weights of shape {weights.shape} do not match {bias.shape[0]} biases"
            )
        self.weights = weights
        self.bias = bias
        self.activation = Activation.parse(activation)

        n, m = weights.shape
        self.raw_input = np.zeros(m if m else n, dtype=np.float64)
        self.pre_activation = np.zeros(n, dtype=np.float64)
        self.output = np.zeros(n, dtype=np.float64)
        self.gradient = np.zeros(n, dtype=np.float64)
        self.history_of_outputs: List[Array] = []
        self.history_of_gradients: List[Array] = []

    @classmethod
    def input(cls, size: int, activation: Activation | str = Activation.SIGMOID) -> "Layer":
        """Return a parameterless pass-through layer of ``size`` neurons."""

        return cls(np.zeros((size, 0)), np.zeros(size), activation)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(size={self.size}, fan_in={self.fan_in}, "
            f"activation={self.activation.value!r})"
        )

    @property
    def size(self) -> int:
        return int(self.bias.shape[0])

    @property
    def fan_in(self) -> int:
        return int(self.weights.shape[1])

    @property
    def is_input(self) -> bool:
        return self.fan_in == 0

    @property
    def parameter_count(self) -> int:
        if self.is_input:
            return 0
        return int(self.weights.size + self.bias.size)

    # ------------------------------------------------------------------
    # Propagation

    def feed(self, values: Array) -> Array:
        """Identity pass used by the input layer."""

        values = as_vector(values)
        self.raw_input = values.copy()
        self.pre_activation = values.copy()
        self.output = values.copy()
        self.history_of_outputs.append(self.output.copy())
        return self.output

    def forward(self, inputs: Array) -> Array:
        inputs = as_vector(inputs)
        if inputs.shape[0] != self.fan_in:
            raise DimensionMismatchError(
                f"layer expects {self.fan_in} inputs, got {inputs.shape[0]}"
            )
        self.raw_input = inputs
        self.pre_activation = self.weights @ inputs + self.bias
        self.output = self.activation.f(self.pre_activation)
        self.history_of_outputs.append(self.output.copy())
        return self.output

    def backward(self, next_gradient: Array, next_weights: Array) -> Tuple[Array, Array]:
        """Propagate the next layer's gradient through its weights.

        Returns this layer's gradient together with this layer's weights, which
        is exactly what the previous layer needs for its own call.
        """

        if next_weights.shape != (next_gradient.shape[0], self.size):
            raise DimensionMismatchError(
                f"cannot propagate a gradient of {next_gradient.shape[0]} through "
                f"weights of shape {next_weights.shape} into {self.size} neurons"
            )
        propagated = next_weights.T @ next_gradient
        self.gradient = propagated * self.activation.df(self.pre_activation)
        self.history_of_gradients.append(self.gradient.copy())
        return self.gradient, self.weights

    def seed_gradient(self, gradient: Array) -> None:
        """Record a gradient computed outside the layer (the output layer)."""

        self.gradient = as_vector(gradient)
        self.history_of_gradients.append(self.gradient.copy())

    # ------------------------------------------------------------------
    # Batch correction

    def correct(self, previous_outputs: Sequence[Array], learning_rate: float) -> None:
        """Apply one averaged gradient-descent step and clear the histories.

        ``previous_outputs`` is the previous layer's ``history_of_outputs``; it is
        empty for the input layer, which owns no parameters.
        """

        if len(previous_outputs) == 0 or not self.history_of_gradients:
            self.clear()
            return
        if len(previous_outputs) != len(self.history_of_gradients):
            raise DimensionMismatchError(
                f"{len(self.history_of_gradients)} recorded gradients but "
                f"{len(previous_outputs)} previous outputs"
            )
        gradients = np.stack(self.history_of_gradients)
        outputs = np.stack(previous_outputs)
        batch_count = gradients.shape[0]
        self.weights -= learning_rate * (gradients.T @ outputs) / batch_count
        self.bias -= learning_rate * gradients.sum(axis=0) / batch_count
        self.clear()

    def clear(self) -> None:
        self.history_of_outputs.clear()
        self.history_of_gradients.clear()


__all__ = ["Layer"]
