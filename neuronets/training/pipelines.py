"""Pipeline assembly: dataset -> network -> training run -> artifacts."""

from __future__ import annotations

import json
import logging
import time
from copy import deepcopy
from pathlib import Path
from typing import Dict, List, Mapping

from ..core import serialization
from ..core.exceptions import DimensionMismatchError, InvalidConfigurationError
from ..core.network import Network
from ..core.types import RunResult
from ..data import registry
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.summary import write_summary
from .metrics import default_metrics, evaluate

logger = logging.getLogger(__name__)

_PRESETS: Dict[str, Mapping[str, object]] = {
    "xnor-sigmoid": {
        "data": {"name": "xnor", "options": {}},
        "model": {"hidden": [6], "activation": "sigmoid", "error": "simple"},
        "train": {
            "epochs": 10000,
            "batch_size": 1,
            "lr": 0.1,
            "seed": 0,
            "log_every": 100,
            "run_dir": "runs/xnor-sigmoid",
        },
    },
    "xnor-relu-softmax": {
        "data": {"name": "xnor", "options": {}},
        "model": {
            "hidden": [8],
            "activation": "relu",
            "last_activation": "softmax",
            "error": "simple",
        },
        "train": {
            "epochs": 3000,
            "batch_size": 1,
            "lr": 0.1,
            "seed": 1,
            "log_every": 50,
            "run_dir": "runs/xnor-relu-softmax",
        },
    },
    "blobs-minibatch": {
        "data": {"name": "blobs", "options": {"n_points": 90, "n_classes": 3, "seed": 0}},
        "model": {"hidden": [8], "activation": "tanh", "last_activation": "sigmoid"},
        "train": {
            "epochs": 200,
            "batch_size": 8,
            "lr": 0.5,
            "seed": 3,
            "log_every": 10,
            "run_dir": "runs/blobs-minibatch",
        },
    },
    "blobs-full-batch": {
        "data": {"name": "blobs", "options": {"n_points": 90, "n_classes": 3, "seed": 0}},
        "model": {"hidden": [8], "activation": "sigmoid"},
        "train": {
            "epochs": 500,
            "batch_size": "full",
            "lr": 2.0,
            "seed": 3,
            "log_every": 25,
            "run_dir": "runs/blobs-full-batch",
        },
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
_FILE_PRESETS_CACHE: Dict[str, Mapping[str, object]] | None = None


def read_config_file(path: Path) -> Mapping[str, object]:
    """Decode a JSON or YAML config file into a mapping."""

    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        try:
            import yaml  # type: ignore
        except ImportError as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("PyYAML is required to load YAML configs") from exc
        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported config file type: {path.suffix}")

    if not isinstance(data, Mapping):
        raise TypeError(f"Config {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    global _FILE_PRESETS_CACHE
    if _FILE_PRESETS_CACHE is None:
        found: Dict[str, Mapping[str, object]] = {}
        if _PRESET_DIR.exists():
            for file in sorted(_PRESET_DIR.iterdir()):
                if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
                    continue
                data = read_config_file(file)
                missing = {"data", "model", "train"} - set(data)
                if missing:
                    raise KeyError(
                        f"Preset {file.name} is missing required sections: "
                        f"{', '.join(sorted(missing))}"
                    )
                found[file.stem] = json.loads(json.dumps(data))
        _FILE_PRESETS_CACHE = found
    return {name: deepcopy(cfg) for name, cfg in _FILE_PRESETS_CACHE.items()}


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {}
    combined.update({name: deepcopy(cfg) for name, cfg in _PRESETS.items()})
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Mapping[str, object]:
    file_overrides = _file_presets()
    if name in file_overrides:
        return file_overrides[name]
    try:
        return deepcopy(_PRESETS[name])
    except KeyError:
        available = ", ".join(sorted(presets()))
        raise KeyError(f"Unknown preset {name!r}. Available presets: {available}") from None


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    """Train a network as described by ``config`` and write its artifacts."""

    data_cfg = dict(config["data"])
    model_cfg = dict(config.get("model", {}))
    train_cfg = dict(config.get("train", {}))

    dataset = registry.get_dataset(str(data_cfg["name"]), **dict(data_cfg.get("options", {})))
    data_spec = dataset.data_spec
    train_samples = dataset.samples("train")

    seed = int(train_cfg.get("seed", 0))
    epochs = int(train_cfg.get("epochs", 100))
    lr = float(train_cfg.get("lr", 0.1))
    batch_size = _resolve_batch_size(train_cfg.get("batch_size", 1), len(train_samples))

    network = _build_network(model_cfg, data_spec, seed)
    network.with_epoch(epochs).with_batch_size(batch_size)

    run_dir = _resolve_run_dir(train_cfg, dataset.name)
    run_dir.mkdir(parents=True, exist_ok=True)
    _log_startup_summary(dataset.name, network, lr, len(train_samples))

    every = max(1, int(train_cfg.get("log_every", 1)))
    jsonl = JsonlSink(
        run_dir / "metrics.jsonl", split="train", every=every, last_epoch=epochs, seed=seed
    )
    csv_sink = CsvSink(run_dir / "metrics.csv", split="train", every=every, last_epoch=epochs)

    started = time.perf_counter()
    summary = network.train(train_samples, lr, callbacks=[jsonl, csv_sink])
    logger.info(
        "trained %d epochs (%d corrections) in %.2fs, final loss %.6f",
        summary.epochs,
        summary.corrections,
        time.perf_counter() - started,
        summary.loss,
    )

    metric_names = _resolve_metrics(train_cfg.get("metrics", "default"), data_spec.task_type)
    evaluation = {
        split: evaluate(network, dataset.samples(split), metric_names)
        for split in ("train", "val", "test")
    }
    (run_dir / "metrics_eval.json").write_text(json.dumps(evaluation, indent=2, sort_keys=True))

    model_path = serialization.save(network, run_dir / "model.json")
    safe_config = json.loads(json.dumps(config))
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=safe_config,
        dataset_provenance=dataset.provenance,
        network={
            "layer_sizes": network.layer_sizes,
            "activations": [a.value for a in network.activations],
            "error_func": network.error_function.value,
            "parameters": network.parameter_count(),
        },
    )
    summary_path = write_summary(
        jsonl.path, run_dir / "summary.json", tail=int(train_cfg.get("summary_tail", 32))
    )
    (run_dir / "config.json").write_text(json.dumps(safe_config, indent=2))
    logger.info("artifacts written to %s", run_dir)

    return RunResult(
        steps=summary.corrections,
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
        summary_path=summary_path,
        model_path=str(model_path),
    )


def _build_network(
    model_cfg: Mapping[str, object], data_spec: registry.DataSpec, seed: int
) -> Network:
    if model_cfg.get("load"):
        network = serialization.load(Path(str(model_cfg["load"])))
        if network.input_size != data_spec.d_in or network.output_size != data_spec.d_out:
            raise DimensionMismatchError(
                f"loaded network {network.layer_sizes} does not fit dataset "
                f"d_in={data_spec.d_in}, d_out={data_spec.d_out}"
            )
    else:
        network = Network(_build_dims(model_cfg, data_spec), seed=seed)
        network.with_activation(str(model_cfg.get("activation", "sigmoid")))
    if model_cfg.get("last_activation"):
        network.with_last_activation(str(model_cfg["last_activation"]))
    if model_cfg.get("error"):
        network.with_error(str(model_cfg["error"]))
    return network


def _build_dims(model_cfg: Mapping[str, object], data_spec: registry.DataSpec) -> List[int]:
    d_in = int(model_cfg.get("d_in", data_spec.d_in))
    d_out = int(model_cfg.get("d_out", data_spec.d_out))
    if d_in != data_spec.d_in:
        raise DimensionMismatchError(
            f"Configured d_in={d_in} but the dataset has {data_spec.d_in}"
        )
    if d_out != data_spec.d_out:
        raise DimensionMismatchError(
            f"Configured d_out={d_out} but the dataset has {data_spec.d_out}"
        )
    hidden = model_cfg.get("hidden", [])
    if not isinstance(hidden, (list, tuple)):
        raise InvalidConfigurationError("model.hidden must be a list of layer sizes")
    return [d_in, *(int(h) for h in hidden), d_out]


def _resolve_batch_size(value: object, n_samples: int) -> int:
    """``"full"`` trains on the whole split per correction."""

    if value == "full":
        return max(1, n_samples)
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise InvalidConfigurationError(f"Invalid batch_size: {value!r}")
    try:
        return int(value)
    except ValueError:
        raise InvalidConfigurationError(f"Invalid batch_size: {value!r}") from None


def _resolve_metrics(value: object, task_type: str) -> List[str]:
    if isinstance(value, str):
        if value.strip() in {"", "default"}:
            return default_metrics(task_type)
        return [name.strip() for name in value.split(",") if name.strip()]
    return [str(name) for name in value]  # type: ignore[union-attr]


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str) -> Path:
    if "run_dir" in train_cfg:
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset


def _log_startup_summary(dataset: str, network: Network, lr: float, n_samples: int) -> None:
    logger.info("=== neuronets run ===")
    logger.info("Dataset       : %s (%d training samples)", dataset, n_samples)
    logger.info("Layers        : %s", network.layer_sizes)
    logger.info("Activations   : %s", [a.value for a in network.activations])
    logger.info("Error         : %s", network.error_function.value)
    logger.info("Epochs        : %d", network.epoch_count)
    logger.info("Batch size    : %d", network.batch_size)
    logger.info("Learning rate : %g", lr)
    logger.info("Parameters    : %d", network.parameter_count())


__all__ = ["load_preset", "presets", "read_config_file", "run_pipeline"]
