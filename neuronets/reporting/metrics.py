"""Per-epoch training records written as JSON lines or CSV rows.

Both sinks share one fixed schema, ``epoch``, ``split`` and the values
:meth:`neuronets.core.network.Network.train` reports (``cost`` and ``loss``),
and both can be throttled to every ``n``-th epoch. The final epoch is always
kept when ``last_epoch`` is given.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Dict, Mapping

from .artifacts import git_sha

EPOCH_FIELDS = ("cost", "loss")


class _EpochSink:
    def __init__(
        self,
        path: str | Path,
        *,
        split: str = "train",
        every: int = 1,
        last_epoch: int | None = None,
    ) -> None:
        if every < 1:
            raise ValueError(f"every must be at least 1, got {every}")
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.split = split
        self.every = every
        self.last_epoch = last_epoch
        self.written = 0

    def keeps(self, epoch: int) -> bool:
        return epoch % self.every == 0 or epoch == self.last_epoch

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        if not self.keeps(epoch):
            return
        missing = [name for name in EPOCH_FIELDS if name not in metrics]
        if missing:
            raise KeyError(f"epoch {epoch} metrics lack {', '.join(missing)}")
        row: Dict[str, object] = {"epoch": int(epoch), "split": self.split}
        row.update({name: float(metrics[name]) for name in EPOCH_FIELDS})
        self._write(row)
        self.written += 1

    __call__ = on_epoch

    def _write(self, row: Dict[str, object]) -> None:
        raise NotImplementedError


class JsonlSink(_EpochSink):
    """One JSON object per kept epoch, stamped with the run seed and git sha."""

    def __init__(
        self,
        path: str | Path,
        *,
        split: str = "train",
        every: int = 1,
        last_epoch: int | None = None,
        seed: int | None = None,
        sha: str | None = None,
    ) -> None:
        super().__init__(path, split=split, every=every, last_epoch=last_epoch)
        self.seed = seed
        self.sha = sha or git_sha()
        self.path.write_text("")

    def _write(self, row: Dict[str, object]) -> None:
        row.update(seed=self.seed, sha=self.sha)
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(row) + "\n")


class CsvSink(_EpochSink):
    """CSV rows under a header written when the sink is created."""

    columns = ("epoch", "split", *EPOCH_FIELDS)

    def __init__(
        self,
        path: str | Path,
        *,
        split: str = "train",
        every: int = 1,
        last_epoch: int | None = None,
    ) -> None:
        super().__init__(path, split=split, every=every, last_epoch=last_epoch)
        with self.path.open("w", encoding="utf-8", newline="") as handle:
            csv.writer(handle).writerow(self.columns)

    def _write(self, row: Dict[str, object]) -> None:
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            csv.DictWriter(handle, fieldnames=self.columns).writerow(row)


__all__ = ["EPOCH_FIELDS", "CsvSink", "JsonlSink"]
