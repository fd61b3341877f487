"""Evaluation metrics computed from stacked network outputs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Sequence

import numpy as np

from ..core.network import Network
from ..core.types import Array, Sample


@dataclass(frozen=True)
class MetricResult:
    name: str
    value: float


def default_metrics(task_type: str) -> List[str]:
    if task_type == "regression":
        return ["mae", "rmse", "r2"]
    if task_type == "multiclass":
        return ["accuracy"]
    raise ValueError(f"Unknown task type: {task_type}")


def compute_metric(name: str, predictions: Array, targets: Array) -> MetricResult:
    key = name.lower()
    preds = predictions
    targs = targets
    if key == "mae":
        value = float(np.mean(np.abs(preds - targs)))
    elif key == "rmse":
        value = float(np.sqrt(np.mean((preds - targs) ** 2)))
    elif key == "r2":
        mean = np.mean(targs, axis=0, keepdims=True)
        ss_res = float(np.sum((targs - preds) ** 2))
        ss_tot = float(np.sum((targs - mean) ** 2))
        value = 1.0 if ss_tot == 0 else float(1 - ss_res / (ss_tot + 1e-9))
    elif key == "accuracy":
        value = float(np.mean(np.argmax(preds, axis=1) == np.argmax(targs, axis=1)))
    else:
        raise KeyError(f"Unknown metric: {name}")
    return MetricResult(name=key, value=value)


def compute_metrics(
    names: Iterable[str], predictions: Array, targets: Array
) -> Mapping[str, float]:
    results: Dict[str, float] = {}
    for name in names:
        metric = compute_metric(name, predictions, targets)
        results[metric.name] = metric.value
    return results


def evaluate(
    network: Network, samples: Sequence[Sample], names: Iterable[str]
) -> Mapping[str, float]:
    """Solve every sample and score the outputs; empty splits give ``{}``."""

    if not samples:
        return {}
    predictions = np.stack([network.solve(sample.inputs) for sample in samples])
    targets = np.stack([sample.targets for sample in samples])
    loss = sum(network.error_function.total(p, t) for p, t in zip(predictions, targets))
    results = {"loss": float(loss)}
    results.update(compute_metrics(names, predictions, targets))
    return results


__all__ = ["MetricResult", "compute_metric", "compute_metrics", "default_metrics", "evaluate"]
