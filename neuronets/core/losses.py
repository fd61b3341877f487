"""Error functions seeding the output layer's gradient."""

from __future__ import annotations

from enum import Enum
from typing import Callable, Dict

import numpy as np

from .exceptions import UnknownTagError
from .types import Array

ErrorFn = Callable[[Array, Array], Array]


def _simple(output: Array, target: Array) -> Array:
    return np.square(output - target) / 2.0


def _simple_deriv(output: Array, target: Array) -> Array:
    return output - target


class ErrorFunction(str, Enum):
    """Closed set of per-output loss terms, tagged by their record name."""

    SIMPLE = "simple"

    def f(self, output: Array, target: Array) -> Array:
        """Per-output loss values."""

        return _VALUE[self](output, target)

    def df(self, output: Array, target: Array) -> Array:
        """Derivative of :meth:`f` with respect to ``output``."""

        return _DERIVATIVE[self](output, target)

    def total(self, output: Array, target: Array) -> float:
        return float(np.sum(self.f(output, target)))

    @classmethod
    def parse(cls, tag: "ErrorFunction | str") -> "ErrorFunction":
        if isinstance(tag, cls):
            return tag
        try:
            return cls(str(tag))
        except ValueError:
            raise UnknownTagError("error function", tag, names()) from None


_VALUE: Dict[ErrorFunction, ErrorFn] = {
    ErrorFunction.SIMPLE: _simple,
}

_DERIVATIVE: Dict[ErrorFunction, ErrorFn] = {
    ErrorFunction.SIMPLE: _simple_deriv,
}


def names() -> list[str]:
    return [member.value for member in ErrorFunction]


__all__ = ["ErrorFunction", "names"]
