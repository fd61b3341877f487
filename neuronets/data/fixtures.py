"""Pure in-memory sample sets."""

from __future__ import annotations

import numpy as np

from .registry import DatasetSpec, DataSpec, register_dataset
from .utils import deterministic_split, one_hot, split_samples, to_samples

# Equal bits map to class 0, differing bits to class 1.
XNOR_INPUTS = np.array([[1.0, 1.0], [1.0, 0.0], [0.0, 1.0], [0.0, 0.0]])
XNOR_TARGETS = np.array([[1.0, 0.0], [0.0, 1.0], [0.0, 1.0], [1.0, 0.0]])


@register_dataset("xnor")
def make_xnor(**_: object) -> DatasetSpec:
    """The four two-bit patterns; every split is the full set."""

    samples = to_samples(XNOR_INPUTS, XNOR_TARGETS)
    return DatasetSpec(
        name="xnor",
        splits={"train": samples, "val": [], "test": list(samples)},
        data_spec=DataSpec(d_in=2, d_out=2, task_type="multiclass", num_classes=2),
        provenance={"type": "xnor", "samples": len(samples)},
    )


def _make_blobs(
    n_points: int, n_classes: int, d_in: int, spread: float, seed: int
) -> tuple[np.ndarray, np.ndarray]:
    rng = np.random.default_rng(seed)
    centers = rng.uniform(-1.0, 1.0, size=(n_classes, d_in))
    labels = np.arange(n_points) % n_classes
    inputs = centers[labels] + spread * rng.standard_normal((n_points, d_in))
    order = rng.permutation(n_points)
    return inputs[order], labels[order]


@register_dataset("blobs")
def make_blobs(
    *,
    n_points: int = 90,
    n_classes: int = 3,
    d_in: int = 2,
    spread: float = 0.15,
    seed: int = 0,
    val_split: float = 0.1,
    test_split: float = 0.2,
    **_: object,
) -> DatasetSpec:
    """Seeded Gaussian clusters with one-hot targets."""

    inputs, labels = _make_blobs(n_points, n_classes, d_in, spread, seed)
    targets = one_hot(labels, n_classes)
    splits = deterministic_split(
        n_points, val_split=val_split, test_split=test_split, seed=seed
    )
    provenance = {
        "type": "blobs",
        "n_points": n_points,
        "n_classes": n_classes,
        "d_in": d_in,
        "spread": spread,
        "seed": seed,
        "val_split": val_split,
        "test_split": test_split,
    }
    return DatasetSpec(
        name="blobs",
        splits=split_samples(inputs, targets, splits),
        data_spec=DataSpec(
            d_in=d_in, d_out=n_classes, task_type="multiclass", num_classes=n_classes
        ),
        provenance=provenance,
    )


__all__ = ["XNOR_INPUTS", "XNOR_TARGETS", "make_blobs", "make_xnor"]
