"""CSV-backed sample sets for regression and classification."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
from sklearn.preprocessing import LabelEncoder

from .registry import DatasetSpec, DataSpec, register_dataset
from .utils import deterministic_split, one_hot, split_samples, standardize


def _load_csv(path: Path, target_col: str) -> tuple[np.ndarray, np.ndarray]:
    df = pd.read_csv(path)
    if target_col not in df.columns:
        raise KeyError(f"Target column {target_col!r} not found in CSV")
    y = df.pop(target_col).to_numpy()
    X = df.to_numpy(dtype=np.float64)
    return X, y


def _require_path(csv_path: str | Path | None) -> Path:
    if csv_path is None:
        raise ValueError("csv datasets require a `csv_path` option")
    path = Path(csv_path)
    if not path.exists():
        raise FileNotFoundError(f"CSV file not found: {path}")
    return path


@register_dataset("csv_regression")
def load_csv_regression(
    *,
    csv_path: str | Path | None = None,
    target_col: str = "target",
    val_split: float = 0.1,
    test_split: float = 0.2,
    seed: int = 0,
    standardize_inputs: bool = True,
    standardize_targets: bool = True,
    **_: object,
) -> DatasetSpec:
    """Load a regression dataset from a CSV file."""

    path = _require_path(csv_path)
    X, y_raw = _load_csv(path, target_col)
    y = np.asarray(y_raw, dtype=np.float64).reshape(-1, 1)

    normalization: dict[str, dict[str, list[float]]] = {}
    if standardize_inputs:
        X, mean, std = standardize(X)
        normalization["inputs"] = {
            "mean": mean.flatten().tolist(),
            "std": std.flatten().tolist(),
        }
    if standardize_targets:
        y, t_mean, t_std = standardize(y)
        normalization["targets"] = {
            "mean": t_mean.flatten().tolist(),
            "std": t_std.flatten().tolist(),
        }

    splits = deterministic_split(
        X.shape[0], val_split=val_split, test_split=test_split, seed=seed
    )

    data_spec = DataSpec(
        d_in=int(X.shape[1]),
        d_out=int(y.shape[1]),
        task_type="regression",
        normalization=normalization,
    )

    provenance = {
        "path": str(path),
        "val_split": val_split,
        "test_split": test_split,
        "seed": seed,
        "target_col": target_col,
        "standardize_inputs": standardize_inputs,
        "standardize_targets": standardize_targets,
    }

    return DatasetSpec(
        name="csv_regression",
        splits=split_samples(X, y, splits),
        data_spec=data_spec,
        provenance=provenance,
    )


@register_dataset("csv_classification")
def load_csv_classification(
    *,
    csv_path: str | Path | None = None,
    target_col: str = "target",
    val_split: float = 0.1,
    test_split: float = 0.2,
    seed: int = 0,
    standardize_inputs: bool = False,
    **_: object,
) -> DatasetSpec:
    """Load a classification dataset from a CSV file with one-hot targets."""

    path = _require_path(csv_path)
    X, y_raw = _load_csv(path, target_col)
    normalization: dict[str, dict[str, list[float]]] = {}
    if standardize_inputs:
        X, mean, std = standardize(X)
        normalization["inputs"] = {
            "mean": mean.flatten().tolist(),
            "std": std.flatten().tolist(),
        }
    encoder = LabelEncoder()
    y_encoded = encoder.fit_transform(y_raw)
    num_classes = int(np.max(y_encoded)) + 1
    y = one_hot(y_encoded, num_classes)

    splits = deterministic_split(
        X.shape[0], val_split=val_split, test_split=test_split, seed=seed
    )

    data_spec = DataSpec(
        d_in=int(X.shape[1]),
        d_out=num_classes,
        task_type="multiclass",
        num_classes=num_classes,
        normalization=normalization,
    )

    provenance = {
        "path": str(path),
        "val_split": val_split,
        "test_split": test_split,
        "seed": seed,
        "target_col": target_col,
        "classes": encoder.classes_.tolist(),
    }

    return DatasetSpec(
        name="csv_classification",
        splits=split_samples(X, y, splits),
        data_spec=data_spec,
        provenance=provenance,
    )


__all__ = ["load_csv_regression", "load_csv_classification"]
