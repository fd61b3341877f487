import numpy as np
import pytest

from neuronets.core.activations import (
    Activation,
    relu,
    sigmoid,
    sigmoid_deriv,
    softmax,
    softmax_deriv,
    tanh_deriv,
)
from neuronets.core.exceptions import UnknownTagError


def test_sigmoid_and_derivative():
    x = np.array([-2.0, 0.0, 3.0])
    s = sigmoid(x)
    assert np.allclose(s, 1.0 / (1.0 + np.exp(-x)))
    assert np.isclose(s[1], 0.5)
    assert np.allclose(sigmoid_deriv(x), s * (1.0 - s))


def test_sigmoid_saturates_without_nan():
    out = sigmoid(np.array([-1000.0, 1000.0]))
    assert np.all(np.isfinite(out))
    assert np.allclose(out, [0.0, 1.0])


def test_tanh_derivative_uses_pre_activation():
    x = np.array([-1.0, 0.5])
    assert np.allclose(tanh_deriv(x), 1.0 - np.tanh(x) ** 2)
    assert np.allclose(Activation.TANH.df(x), tanh_deriv(x))


def test_relu_and_step_derivative():
    x = np.array([-1.0, 0.0, 2.5])
    assert np.allclose(relu(x), [0.0, 0.0, 2.5])
    assert np.array_equal(Activation.RELU.df(x), np.array([0.0, 0.0, 1.0]))


@pytest.mark.parametrize(
    "vector",
    [
        np.array([1.0, 2.0, 3.0]),
        np.array([-5.0, 0.0, 5.0, 10.0]),
        np.array([1000.0, 1000.0]),
        np.array([0.0]),
    ],
)
def test_softmax_normalises(vector):
    out = softmax(vector)
    assert np.all(np.isfinite(out))
    assert abs(float(out.sum()) - 1.0) < 1e-5


def test_softmax_is_shift_invariant():
    x = np.array([0.1, 0.7, -0.3])
    assert np.allclose(softmax(x), softmax(x + 500.0))


def test_softmax_degenerate_input_returns_zeros():
    out = softmax(np.full(3, -np.inf))
    assert np.array_equal(out, np.zeros(3))
    assert not np.any(np.isnan(out))


def test_softmax_derivative_is_elementwise_diagonal():
    x = np.array([0.2, -1.0, 0.5])
    s = softmax(x)
    assert np.allclose(softmax_deriv(x), s * (1.0 - s))


def test_tags_are_a_closed_bijection():
    names = [member.value for member in Activation]
    assert names == ["sigmoid", "tanh", "relu", "softmax"]
    for name in names:
        assert Activation.parse(name).value == name
    assert Activation.parse(Activation.RELU) is Activation.RELU


def test_unknown_activation_tag():
    with pytest.raises(UnknownTagError) as excinfo:
        Activation.parse("gelu")
    assert "gelu" in str(excinfo.value)
    assert "sigmoid" in str(excinfo.value)
    assert isinstance(excinfo.value, KeyError)
