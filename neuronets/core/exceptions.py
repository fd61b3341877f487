"""Error kinds raised by the network engine."""

from __future__ import annotations

from typing import Iterable


class NetworkError(ValueError):
    """Base class for every error raised at the engine's call boundary."""


class DimensionMismatchError(NetworkError):
    """A vector or matrix does not match the shape the network expects."""


class InvalidConfigurationError(NetworkError):
    """Layer sizes, batch size or epoch count are out of range."""


class UnknownTagError(NetworkError, KeyError):
    """An activation or error-function tag is outside the closed vocabulary."""

    def __init__(self, kind: str, name: object, available: Iterable[str]) -> None:
        self.kind = kind
        self.name = name
        self.available = sorted(available)
        message = f"Unknown {kind} {name!r}. Available: {', '.join(self.available)}"
        super().__init__(message)

    def __str__(self) -> str:
        return str(self.args[0])


__all__ = [
    "NetworkError",
    "DimensionMismatchError",
    "InvalidConfigurationError",
    "UnknownTagError",
]
