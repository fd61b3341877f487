"""Feed-forward network trained with mini-batch gradient descent."""

from __future__ import annotations

import logging
import math
from numbers import Integral
from typing import Callable, Iterable, List, Mapping, Sequence

import numpy as np

from .activations import Activation
from .exceptions import DimensionMismatchError, InvalidConfigurationError
from .layer import Layer
from .losses import ErrorFunction
from .types import Array, Batch, Sample, SampleLike, TrainingSummary, as_sample, as_vector

logger = logging.getLogger(__name__)

INITIAL_BIAS = 0.001
DEFAULT_BATCH_SIZE = 1
DEFAULT_EPOCH_COUNT = 100

EpochCallback = Callable[[int, Mapping[str, float]], None]


def glorot_uniform(rng: np.random.Generator, size: int, fan_in: int) -> Array:
    """Draw a ``(size, fan_in)`` matrix from the Glorot/Xavier uniform range."""

    bound = math.sqrt(6.0) / math.sqrt(size + fan_in)
    return rng.uniform(-bound, bound, size=(size, fan_in))


def _positive_int(value: object, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral) or value < 1:
        raise InvalidConfigurationError(f"{name} must be a positive integer, got {value!r}")
    return int(value)


class Network:
    """Multi-layer perceptron.

    Layer 0 is a parameterless pass-through of the input; every following layer
    is trainable. Weights are drawn once at construction from ``rng`` (or from
    ``np.random.default_rng(seed)``), so a fixed seed gives reproducible runs.

    Example::

        net = Network([2, 6, 2], seed=0).with_epoch(10000)
        net.train(samples, learning_rate=0.1)
        net.solve([1.0, 0.0])
    """

    def __init__(
        self,
        layer_sizes: Sequence[int],
        *,
        seed: int | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        sizes = list(layer_sizes)
        if len(sizes) < 2:
            raise InvalidConfigurationError(
                f"a network needs at least two layer sizes, got {len(sizes)}"
            )
        sizes = [_positive_int(size, f"layer size #{idx}") for idx, size in enumerate(sizes)]
        rng = rng if rng is not None else np.random.default_rng(seed)

        layers = [Layer.input(sizes[0])]
        for fan_in, size in zip(sizes[:-1], sizes[1:]):
            weights = glorot_uniform(rng, size, fan_in)
            layers.append(Layer(weights, np.full(size, INITIAL_BIAS)))
        self._setup(layers, DEFAULT_BATCH_SIZE, DEFAULT_EPOCH_COUNT, ErrorFunction.SIMPLE)

    @classmethod
    def from_layers(
        cls,
        layers: Sequence[Layer],
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        epoch_count: int = DEFAULT_EPOCH_COUNT,
        error_function: ErrorFunction | str = ErrorFunction.SIMPLE,
    ) -> "Network":
        """Assemble a network from existing layers without random initialisation."""

        layers = list(layers)
        if len(layers) < 2:
            raise InvalidConfigurationError(
                f"a network needs at least two layers, got {len(layers)}"
            )
        if not layers[0].is_input:
            raise DimensionMismatchError("layer 0 must be a parameterless input layer")
        for idx in range(1, len(layers)):
            if layers[idx].fan_in != layers[idx - 1].size:
                raise DimensionMismatchError(
                    f"layer {idx} expects {layers[idx].fan_in} inputs but layer "
                    f"{idx - 1} has {layers[idx - 1].size} neurons"
                )
        network = cls.__new__(cls)
        network._setup(
            layers,
            _positive_int(batch_size, "batch_size"),
            _positive_int(epoch_count, "epoch_count"),
            ErrorFunction.parse(error_function),
        )
        return network

    def _setup(
        self,
        layers: List[Layer],
        batch_size: int,
        epoch_count: int,
        error_function: ErrorFunction,
    ) -> None:
        self.layers = layers
        self.batch_size = batch_size
        self.epoch_count = epoch_count
        self.error_function = error_function

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(layer_sizes={self.layer_sizes}, "
            f"activations={[a.value for a in self.activations]}, "
            f"error={self.error_function.value!r}, batch_size={self.batch_size}, "
            f"epoch_count={self.epoch_count})"
        )

    @property
    def layer_sizes(self) -> List[int]:
        return [layer.size for layer in self.layers]

    @property
    def activations(self) -> List[Activation]:
        return [layer.activation for layer in self.layers[1:]]

    @property
    def input_size(self) -> int:
        return self.layers[0].size

    @property
    def output_size(self) -> int:
        return self.layers[-1].size

    def parameter_count(self) -> int:
        return sum(layer.parameter_count for layer in self.layers)

    # ------------------------------------------------------------------
    # Builder-style configuration

    def with_activation(self, activation: Activation | str) -> "Network":
        """Use ``activation`` on every layer."""

        activation = Activation.parse(activation)
        for layer in self.layers:
            layer.activation = activation
        return self

    def with_last_activation(self, activation: Activation | str) -> "Network":
        """Use ``activation`` on the output layer only."""

        self.layers[-1].activation = Activation.parse(activation)
        return self

    def with_error(self, error_function: ErrorFunction | str) -> "Network":
        self.error_function = ErrorFunction.parse(error_function)
        return self

    def with_epoch(self, epoch_count: int) -> "Network":
        self.epoch_count = _positive_int(epoch_count, "epoch_count")
        return self

    def with_batch_size(self, batch_size: int) -> "Network":
        self.batch_size = _positive_int(batch_size, "batch_size")
        return self

    # ------------------------------------------------------------------
    # Propagation

    def forward(self, inputs: Array | Sequence[float]) -> Array:
        output = self.layers[0].feed(inputs)
        for layer in self.layers[1:]:
            output = layer.forward(output)
        return output

    def backward(self, targets: Array | Sequence[float]) -> float:
        """Back-propagate the error against ``targets`` through all layers.

        Returns the sum of the output layer's gradient components. This is a
        progress diagnostic, not a loss value.
        """

        last = self.layers[-1]
        targets = as_vector(targets)
        if targets.shape != last.output.shape:
            raise DimensionMismatchError(
                f"expected {last.size} targets, got {targets.shape[0]}"
            )
        gradient = self.error_function.df(last.output, targets) * last.activation.df(
            last.pre_activation
        )
        last.seed_gradient(gradient)
        weights = last.weights
        for layer in reversed(self.layers[1:-1]):
            gradient, weights = layer.backward(gradient, weights)
        return float(np.sum(last.gradient))

    def correct(self, learning_rate: float) -> None:
        """Apply the accumulated batch to every trainable layer, first to last.

        Output histories are snapshotted up front: correcting a layer clears its
        own history, which the following layer still needs.
        """

        histories = [list(layer.history_of_outputs) for layer in self.layers[:-1]]
        for previous_outputs, layer in zip(histories, self.layers[1:]):
            layer.correct(previous_outputs, learning_rate)
        self.layers[0].correct([], learning_rate)

    def clear(self) -> None:
        for layer in self.layers:
            layer.clear()

    # ------------------------------------------------------------------
    # Training and inference

    def batches(self, samples: Iterable[SampleLike]) -> List[Batch]:
        """Partition ``samples`` into batches; the last one may be shorter."""

        items = [as_sample(sample) for sample in samples]
        return [
            Batch(samples=tuple(items[start : start + self.batch_size]))
            for start in range(0, len(items), self.batch_size)
        ]

    def train(
        self,
        samples: Iterable[SampleLike],
        learning_rate: float,
        *,
        callbacks: Sequence[object] | None = None,
    ) -> TrainingSummary:
        """Run ``epoch_count`` epochs of mini-batch gradient descent.

        After every epoch each callback receives ``(epoch, {"cost", "loss"})``
        through its ``on_epoch`` method (or its ``__call__``). ``cost`` sums the
        diagnostic values returned by :meth:`backward`; ``loss`` sums the error
        function over all outputs.
        """

        items = [as_sample(sample) for sample in samples]
        for idx, sample in enumerate(items):
            self._check_sample(sample, idx)
        batches = self.batches(items)
        callbacks = list(callbacks or [])

        self.clear()
        corrections = 0
        cost = loss = 0.0
        for epoch in range(1, self.epoch_count + 1):
            cost = loss = 0.0
            for batch in batches:
                for sample in batch:
                    output = self.forward(sample.inputs)
                    loss += self.error_function.total(output, sample.targets)
                    cost += self.backward(sample.targets)
                self.correct(learning_rate)
                corrections += 1
            metrics = {"cost": cost, "loss": loss}
            logger.debug("epoch %d/%d cost=%.6f loss=%.6f", epoch, self.epoch_count, cost, loss)
            self._emit_epoch(callbacks, epoch, metrics)

        return TrainingSummary(
            epochs=self.epoch_count, corrections=corrections, cost=cost, loss=loss
        )

    def solve(self, inputs: Array | Sequence[float]) -> Array:
        """Return the network's output for ``inputs`` without touching weights."""

        inputs = as_vector(inputs)
        if inputs.shape[0] != self.input_size:
            raise DimensionMismatchError(
                f"expected an input of length {self.input_size}, got {inputs.shape[0]}"
            )
        output = self.forward(inputs).copy()
        self.clear()
        return output

    # ------------------------------------------------------------------
    # Internal helpers

    def _check_sample(self, sample: Sample, index: int) -> None:
        if sample.inputs.shape[0] != self.input_size:
            raise DimensionMismatchError(
                f"sample {index} has {sample.inputs.shape[0]} inputs, "
                f"expected {self.input_size}"
            )
        if sample.targets.shape[0] != self.output_size:
            raise DimensionMismatchError(
                f"sample {index} has {sample.targets.shape[0]} targets, "
                f"expected {self.output_size}"
            )

    @staticmethod
    def _emit_epoch(
        callbacks: Sequence[object], epoch: int, metrics: Mapping[str, float]
    ) -> None:
        for callback in callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(epoch, metrics)


__all__ = ["Network", "glorot_uniform", "INITIAL_BIAS"]
