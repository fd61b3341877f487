"""Lossless conversion between networks and plain persisted records.

The record layout is::

    {"layers": [{"basis": [...], "weights": [[...], ...], "activation": "sigmoid"}, ...],
     "batch_size": 1, "epoch_amount": 100, "error_func": "simple"}

Floats are stored as ``float64`` and written by :mod:`json` with ``repr``
precision, so ``loads(dumps(net))`` reproduces every parameter bit for bit.
"""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence

import numpy as np

from .activations import Activation
from .exceptions import DimensionMismatchError, InvalidConfigurationError
from .layer import Layer
from .losses import ErrorFunction
from .network import Network

logger = logging.getLogger(__name__)

_NETWORK_KEYS = ("layers", "batch_size", "epoch_amount", "error_func")
_LAYER_KEYS = ("basis", "weights", "activation")


def to_record(network: Network) -> Dict[str, Any]:
    return {
        "layers": [
            {
                "basis": layer.bias.tolist(),
                "weights": layer.weights.tolist(),
                "activation": layer.activation.value,
            }
            for layer in network.layers
        ],
        "batch_size": int(network.batch_size),
        "epoch_amount": int(network.epoch_count),
        "error_func": network.error_function.value,
    }


def from_record(record: Mapping[str, Any]) -> Network:
    """Rebuild a :class:`Network` from ``record`` without random initialisation."""

    if not isinstance(record, Mapping):
        raise InvalidConfigurationError("a network record must be a mapping")
    missing = [key for key in _NETWORK_KEYS if key not in record]
    if missing:
        raise InvalidConfigurationError(f"network record is missing {', '.join(missing)}")

    error_function = ErrorFunction.parse(record["error_func"])
    layer_records = record["layers"]
    if not isinstance(layer_records, (list, tuple)) or len(layer_records) < 2:
        raise InvalidConfigurationError("a network record needs at least two layers")

    layers = [_layer_from_record(idx, item) for idx, item in enumerate(layer_records)]
    return Network.from_layers(
        layers,
        batch_size=record["batch_size"],
        epoch_count=record["epoch_amount"],
        error_function=error_function,
    )


def _real_numbers(values: Sequence[Any], index: int, field: str) -> List[float]:
    """Return ``values`` as floats; every entry must be a finite real number."""

    numbers = []
    for value in values:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidConfigurationError(
                f"layer {index} {field} holds a non-numeric entry {value!r}"
            )
        try:
            number = float(value)
        except OverflowError:
            number = math.inf
        if not math.isfinite(number):
            raise InvalidConfigurationError(
                f"layer {index} {field} holds a non-finite entry {value!r}"
            )
        numbers.append(number)
    return numbers


def _layer_from_record(index: int, item: Mapping[str, Any]) -> Layer:
    if not isinstance(item, Mapping):
        raise InvalidConfigurationError(f"layer record {index} must be a mapping")
    missing = [key for key in _LAYER_KEYS if key not in item]
    if missing:
        raise InvalidConfigurationError(
            f"layer record {index} is missing {', '.join(missing)}"
        )
    activation = Activation.parse(item["activation"])
    basis = item["basis"]
    if not isinstance(basis, (list, tuple)) or not basis:
        raise InvalidConfigurationError(f"layer {index} needs a non-empty basis vector")
    bias = np.array(_real_numbers(basis, index, "basis"), dtype=np.float64)

    rows = item["weights"]
    if not isinstance(rows, (list, tuple)) or not all(
        isinstance(row, (list, tuple)) for row in rows
    ):
        raise InvalidConfigurationError(f"layer {index} weights must be a list of rows")
    if index == 0:
        if any(len(row) for row in rows):
            raise DimensionMismatchError("the input layer cannot own weights")
        return Layer(np.zeros((bias.shape[0], 0)), bias, activation)

    widths = {len(row) for row in rows}
    if len(rows) != bias.shape[0] or len(widths) != 1 or 0 in widths:
        raise DimensionMismatchError(
            f"layer {index} weights must be a {bias.shape[0]}-row rectangular matrix"
        )
    weights = [_real_numbers(row, index, "weights") for row in rows]
    return Layer(np.array(weights, dtype=np.float64), bias, activation)


def dumps(network: Network, **json_kwargs: Any) -> str:
    return json.dumps(to_record(network), **json_kwargs)


def loads(text: str) -> Network:
    return from_record(json.loads(text))


def save(network: Network, path: str | Path) -> Path:
    """Write ``network`` as a JSON record to ``path``."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps(network), encoding="utf-8")
    logger.debug("saved network %s to %s", network.layer_sizes, path)
    return path


def load(path: str | Path) -> Network:
    path = Path(path)
    network = loads(path.read_text(encoding="utf-8"))
    logger.debug("loaded network %s from %s", network.layer_sizes, path)
    return network


__all__ = ["to_record", "from_record", "dumps", "loads", "save", "load"]
