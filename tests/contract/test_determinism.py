from pathlib import Path

import numpy as np

from neuronets.core import serialization
from neuronets.core.network import Network
from neuronets.data import get_dataset
from neuronets.training import pipelines


def _train(seed):
    samples = get_dataset("blobs", n_points=24, seed=2).samples("train")
    net = Network([2, 5, 3], seed=seed).with_activation("tanh").with_batch_size(4).with_epoch(15)
    net.train(samples, 0.3)
    return net


def test_same_seed_gives_identical_weights():
    a, b = _train(9), _train(9)
    for la, lb in zip(a.layers, b.layers):
        assert np.array_equal(la.weights, lb.weights)
        assert np.array_equal(la.bias, lb.bias)
    assert serialization.dumps(a) == serialization.dumps(b)


def test_different_seeds_differ():
    a, b = _train(9), _train(10)
    assert not np.array_equal(a.layers[1].weights, b.layers[1].weights)


def test_pipeline_artifacts_are_deterministic(tmp_path):
    config = pipelines.load_preset("blobs-minibatch")
    config["train"].update({"epochs": 20, "log_every": 5, "run_dir": str(tmp_path / "run_a")})

    first = pipelines.run_pipeline(config)
    config["train"]["run_dir"] = str(tmp_path / "run_b")
    second = pipelines.run_pipeline(config)

    assert Path(first.metrics_path).read_bytes() == Path(second.metrics_path).read_bytes()
    assert Path(first.summary_path).read_bytes() == Path(second.summary_path).read_bytes()
    assert Path(first.model_path).read_bytes() == Path(second.model_path).read_bytes()
