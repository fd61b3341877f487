from __future__ import annotations

import json
from pathlib import Path

import pytest

from neuronets.core import serialization
from neuronets.core.exceptions import DimensionMismatchError, InvalidConfigurationError
from neuronets.data import get_dataset
from neuronets.training import pipelines


def _xnor_config(run_dir: Path, **train) -> dict:
    config = pipelines.load_preset("xnor-sigmoid")
    config["train"].update({"epochs": 10, "log_every": 1, "run_dir": str(run_dir)})
    config["train"].update(train)
    return config


def test_run_pipeline_writes_artifacts(tmp_path):
    result = pipelines.run_pipeline(_xnor_config(tmp_path / "run"))

    run_dir = tmp_path / "run"
    for name in (
        "metrics.jsonl",
        "metrics.csv",
        "metrics_eval.json",
        "model.json",
        "manifest.json",
        "summary.json",
        "config.json",
    ):
        assert (run_dir / name).exists(), name
    assert result.steps == 40
    assert Path(result.model_path) == run_dir / "model.json"

    manifest = json.loads(Path(result.manifest_path).read_text())
    assert manifest["network"]["layer_sizes"] == [2, 6, 2]
    assert manifest["dataset"]["type"] == "xnor"

    evaluation = json.loads((run_dir / "metrics_eval.json").read_text())
    assert evaluation["val"] == {}
    assert set(evaluation["test"]) == {"loss", "accuracy"}


def test_log_every_throttles_metrics(tmp_path):
    result = pipelines.run_pipeline(_xnor_config(tmp_path / "run", epochs=200, log_every=50))
    lines = Path(result.metrics_path).read_text().splitlines()
    assert [json.loads(line)["epoch"] for line in lines] == [50, 100, 150, 200]
    assert {"cost", "loss"} <= set(json.loads(lines[0]))


def test_final_epoch_is_always_logged(tmp_path):
    result = pipelines.run_pipeline(_xnor_config(tmp_path / "run", epochs=7, log_every=5))
    lines = Path(result.metrics_path).read_text().splitlines()
    assert [json.loads(line)["epoch"] for line in lines] == [5, 7]


def test_full_batch_gives_one_correction_per_epoch(tmp_path):
    config = pipelines.load_preset("blobs-full-batch")
    config["train"].update({"epochs": 6, "run_dir": str(tmp_path / "run")})
    result = pipelines.run_pipeline(config)
    assert result.steps == 6
    model = serialization.load(result.model_path)
    train = get_dataset("blobs", **config["data"]["options"]).samples("train")
    assert model.batch_size == len(train)


def test_training_continues_from_saved_model(tmp_path):
    first = pipelines.run_pipeline(_xnor_config(tmp_path / "first"))
    saved = serialization.load(first.model_path)

    config = _xnor_config(tmp_path / "second")
    config["model"] = {"load": first.model_path}
    second = pipelines.run_pipeline(config)

    assert second.steps == 40
    resumed = serialization.load(second.model_path)
    assert resumed.layer_sizes == saved.layer_sizes
    assert serialization.dumps(resumed) != serialization.dumps(saved)


def test_loaded_model_must_fit_dataset(tmp_path):
    first = pipelines.run_pipeline(_xnor_config(tmp_path / "first"))
    config = pipelines.load_preset("blobs-minibatch")
    config["model"] = {"load": first.model_path}
    config["train"].update({"epochs": 1, "run_dir": str(tmp_path / "second")})
    with pytest.raises(DimensionMismatchError):
        pipelines.run_pipeline(config)


def test_invalid_model_config(tmp_path):
    config = _xnor_config(tmp_path / "run")
    config["model"]["d_in"] = 3
    with pytest.raises(DimensionMismatchError):
        pipelines.run_pipeline(config)

    config = _xnor_config(tmp_path / "run", batch_size=0)
    with pytest.raises(InvalidConfigurationError):
        pipelines.run_pipeline(config)


def test_presets_include_file_presets():
    names = set(pipelines.presets())
    assert {"xnor-sigmoid", "xnor-relu-softmax", "blobs-minibatch", "blobs-full-batch"} <= names
    assert "xnor-tanh" in names
    config = pipelines.load_preset("xnor-tanh")
    assert config["model"]["activation"] == "tanh"
    assert config["train"]["batch_size"] == 2
    with pytest.raises(KeyError):
        pipelines.load_preset("does-not-exist")


def test_read_config_file(tmp_path):
    path = tmp_path / "override.json"
    path.write_text(json.dumps({"train": {"lr": 0.3}}))
    assert pipelines.read_config_file(path) == {"train": {"lr": 0.3}}
    toml = tmp_path / "config.toml"
    toml.write_text("[train]\n")
    with pytest.raises(ValueError):
        pipelines.read_config_file(toml)
