"""Dataset registry and sample helpers."""

# Ensure built-in datasets register themselves when the package is imported.
from . import csv_samples as _csv_samples  # noqa: F401
from . import fixtures as _fixtures  # noqa: F401
from .registry import (
    DatasetSpec,
    DataSpec,
    available_datasets,
    get_dataset,
    register_dataset,
)

__all__ = [
    "DataSpec",
    "DatasetSpec",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
