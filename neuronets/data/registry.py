"""Dataset registry and metadata contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, MutableMapping

from ..core.types import Sample

TASK_TYPES = ("regression", "multiclass")
SPLITS = ("train", "val", "test")


@dataclass(frozen=True)
class DataSpec:
    """Structural information about a dataset.

    Attributes
    ----------
    d_in:
        Length of every sample's input vector; the network's input layer size.
    d_out:
        Length of every sample's target vector; the network's output layer size.
    task_type:
        One of ``{"regression", "multiclass"}``.
    num_classes:
        Number of classes when ``task_type`` is ``"multiclass"``.
    normalization:
        Metadata describing scaling applied to inputs or targets. The registry
        does not interpret it, it only travels into the run manifest.
    """

    d_in: int
    d_out: int
    task_type: str
    num_classes: int | None = None
    normalization: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DatasetSpec:
    """Samples of a registered dataset grouped by split."""

    name: str
    splits: Mapping[str, List[Sample]]
    data_spec: DataSpec
    provenance: Dict[str, Any]

    def samples(self, split: str = "train") -> List[Sample]:
        if split not in SPLITS:
            raise ValueError(f"Unsupported split: {split}")
        return list(self.splits.get(split, []))

    @property
    def sizes(self) -> Dict[str, int]:
        return {split: len(self.splits.get(split, [])) for split in SPLITS}


DatasetFactory = Callable[..., DatasetSpec]


_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(
    name: str | None = None,
    factory: DatasetFactory | None = None,
) -> Callable[[DatasetFactory], DatasetFactory] | DatasetFactory:
    """Register a dataset factory.

    ``register_dataset`` can be used both as a decorator::

        @register_dataset("xnor")
        def make_xnor(**kwargs):
            ...

    or directly::

        register_dataset("xnor", make_xnor)
    """

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    if factory is not None:
        return _decorator(factory)
    if name is None:
        raise TypeError("register_dataset requires a name when used without a decorator")
    return _decorator


def get_dataset(dataset: str, /, **options: Any) -> DatasetSpec:
    """Build the :class:`DatasetSpec` registered under ``dataset``."""

    if dataset not in _REGISTRY:
        available = ", ".join(sorted(_REGISTRY))
        raise KeyError(f"Unknown dataset {dataset!r}. Available datasets: {available}")

    spec = _REGISTRY[dataset](**options)
    _validate_spec(spec)
    return spec


def available_datasets() -> Iterable[str]:
    """Return the sorted list of available dataset identifiers."""

    return sorted(_REGISTRY)


def _validate_spec(spec: DatasetSpec) -> None:
    data_spec = spec.data_spec
    if data_spec.task_type not in TASK_TYPES:
        raise ValueError(f"Invalid task type: {data_spec.task_type}")
    if data_spec.task_type == "multiclass" and data_spec.num_classes is None:
        raise ValueError("Multiclass datasets must define num_classes")
    unknown = set(spec.splits) - set(SPLITS)
    if unknown:
        raise ValueError(f"Unsupported splits: {', '.join(sorted(unknown))}")
    if not spec.splits.get("train"):
        raise ValueError(f"Dataset {spec.name!r} has no training samples")
    for split, samples in spec.splits.items():
        for sample in samples:
            if sample.inputs.shape[0] != data_spec.d_in:
                raise ValueError(f"Split {split!r} holds an input of the wrong length")
            if sample.targets.shape[0] != data_spec.d_out:
                raise ValueError(f"Split {split!r} holds a target of the wrong length")


__all__ = [
    "DataSpec",
    "DatasetSpec",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
