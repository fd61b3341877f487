"""Core typing contracts for neuronets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Sequence, Tuple, Union

import numpy as np

Array = np.ndarray


def as_vector(values: Sequence[float] | Array) -> Array:
    """Return ``values`` as a flat ``float64`` vector."""

    return np.asarray(values, dtype=np.float64).reshape(-1)


@dataclass(frozen=True)
class Sample:
    """One training example: an input vector and the desired output."""

    inputs: Array
    targets: Array

    def __post_init__(self) -> None:
        object.__setattr__(self, "inputs", as_vector(self.inputs))
        object.__setattr__(self, "targets", as_vector(self.targets))


SampleLike = Union[Sample, Tuple[Sequence[float], Sequence[float]]]


def as_sample(item: SampleLike) -> Sample:
    if isinstance(item, Sample):
        return item
    inputs, targets = item
    return Sample(inputs=inputs, targets=targets)


@dataclass(frozen=True)
class Batch:
    """A group of samples whose gradients are averaged into one update."""

    samples: Tuple[Sample, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.samples)

    def __iter__(self) -> Iterator[Sample]:
        return iter(self.samples)


@dataclass(frozen=True)
class TrainingSummary:
    """Summary returned by :meth:`neuronets.core.network.Network.train`."""

    epochs: int
    corrections: int
    cost: float = 0.0
    loss: float = 0.0


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`neuronets.training.pipelines.run_pipeline`."""

    steps: int
    metrics_path: str
    manifest_path: str
    summary_path: str = ""
    model_path: str = ""
