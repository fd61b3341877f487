import numpy as np
import pytest

from neuronets.core.exceptions import UnknownTagError
from neuronets.core.losses import ErrorFunction


def test_simple_error_value_and_derivative():
    output = np.array([0.8, 0.1])
    target = np.array([1.0, 0.0])
    assert np.allclose(ErrorFunction.SIMPLE.f(output, target), [0.02, 0.005])
    assert np.allclose(ErrorFunction.SIMPLE.df(output, target), [-0.2, 0.1])
    assert np.isclose(ErrorFunction.SIMPLE.total(output, target), 0.025)


def test_error_tags():
    assert ErrorFunction.parse("simple") is ErrorFunction.SIMPLE
    with pytest.raises(UnknownTagError):
        ErrorFunction.parse("cross_entropy")
