import json

import numpy as np
import pytest

from neuronets.core import serialization
from neuronets.core.activations import Activation
from neuronets.core.exceptions import (
    DimensionMismatchError,
    InvalidConfigurationError,
    UnknownTagError,
)
from neuronets.core.network import Network


def _trained_network():
    net = (
        Network([2, 5, 3], seed=21)
        .with_activation("tanh")
        .with_last_activation("softmax")
        .with_batch_size(2)
        .with_epoch(3)
    )
    samples = [([0.1, 0.9], [1.0, 0.0, 0.0]), ([0.8, 0.2], [0.0, 1.0, 0.0]), ([0.5, 0.5], [0.0, 0.0, 1.0])]
    net.train(samples, 0.3)
    return net


def test_record_layout():
    record = serialization.to_record(Network([2, 3, 1], seed=0))
    assert set(record) == {"layers", "batch_size", "epoch_amount", "error_func"}
    assert record["error_func"] == "simple"
    assert record["batch_size"] == 1
    assert record["epoch_amount"] == 100
    assert record["layers"][0]["weights"] == [[], []]
    assert len(record["layers"][1]["weights"]) == 3
    assert len(record["layers"][1]["weights"][0]) == 2
    assert record["layers"][2]["activation"] == "sigmoid"


def test_round_trip_is_exact():
    net = _trained_network()
    text = serialization.dumps(net)
    clone = serialization.loads(text)

    assert serialization.dumps(clone) == text
    assert clone.layer_sizes == net.layer_sizes
    assert clone.batch_size == 2
    assert clone.epoch_count == 3
    assert clone.activations == [Activation.TANH, Activation.SOFTMAX]
    for a, b in zip(net.layers, clone.layers):
        assert np.array_equal(a.weights, b.weights)
        assert np.array_equal(a.bias, b.bias)
    x = [0.3, 0.4]
    assert np.array_equal(net.solve(x), clone.solve(x))


def test_save_and_load(tmp_path):
    net = _trained_network()
    path = serialization.save(net, tmp_path / "nested" / "model.json")
    assert path.exists()
    clone = serialization.load(path)
    assert serialization.to_record(clone) == serialization.to_record(net)


def test_unknown_tags_are_rejected():
    record = serialization.to_record(Network([2, 2], seed=0))
    bad_activation = json.loads(json.dumps(record))
    bad_activation["layers"][1]["activation"] = "gelu"
    with pytest.raises(UnknownTagError):
        serialization.from_record(bad_activation)

    bad_error = json.loads(json.dumps(record))
    bad_error["error_func"] = "hinge"
    with pytest.raises(UnknownTagError):
        serialization.from_record(bad_error)


@pytest.mark.parametrize("key,value", [("batch_size", 0), ("epoch_amount", 0)])
def test_invalid_counts(key, value):
    record = serialization.to_record(Network([2, 2], seed=0))
    record[key] = value
    with pytest.raises(InvalidConfigurationError):
        serialization.from_record(record)


def test_malformed_records():
    record = serialization.to_record(Network([2, 3, 1], seed=0))
    with pytest.raises(InvalidConfigurationError):
        serialization.from_record({"layers": record["layers"]})

    short = dict(record, layers=record["layers"][:1])
    with pytest.raises(InvalidConfigurationError):
        serialization.from_record(short)

    ragged = json.loads(json.dumps(record))
    ragged["layers"][1]["weights"][0].append(0.5)
    with pytest.raises(DimensionMismatchError):
        serialization.from_record(ragged)

    inconsistent = json.loads(json.dumps(record))
    inconsistent["layers"][2]["weights"] = [[0.1, 0.2]]
    with pytest.raises(DimensionMismatchError):
        serialization.from_record(inconsistent)


@pytest.mark.parametrize(
    "field,position,value",
    [
        ("weights", (1, 0, 0), None),
        ("weights", (1, 0, 1), "abc"),
        ("weights", (1, 1, 0), [0.2]),
        ("weights", (2, 0, 2), True),
        ("weights", (2, 0, 0), float("nan")),
        ("basis", (1, 0), "abc"),
        ("basis", (2, 0), None),
        ("basis", (0, 1), float("inf")),
    ],
)
def test_non_numeric_entries_are_rejected(field, position, value):
    record = json.loads(serialization.dumps(Network([2, 3, 1], seed=0)))
    target = record["layers"][position[0]][field]
    for idx in position[1:-1]:
        target = target[idx]
    target[position[-1]] = value
    with pytest.raises(InvalidConfigurationError):
        serialization.from_record(record)


def test_basis_must_be_a_list():
    record = serialization.to_record(Network([2, 2], seed=0))
    record["layers"][1]["basis"] = 0.5
    with pytest.raises(InvalidConfigurationError):
        serialization.from_record(record)
