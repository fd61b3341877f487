import numpy as np
import pytest

from neuronets.core.layer import Layer
from neuronets.core.network import Network
from neuronets.data.fixtures import XNOR_INPUTS, XNOR_TARGETS


def _xnor_samples():
    return list(zip(XNOR_INPUTS.tolist(), XNOR_TARGETS.tolist()))


@pytest.mark.slow
def test_xnor_sigmoid_converges():
    net = Network([2, 6, 2], seed=0).with_epoch(10000).with_batch_size(1)
    net.train(_xnor_samples(), 0.1)
    for inputs, targets in _xnor_samples():
        out = net.solve(inputs)
        assert int(np.argmax(out)) == int(np.argmax(targets))


def test_loss_decreases_on_xnor():
    net = Network([2, 6, 2], seed=0).with_epoch(300)
    losses = []
    net.train(_xnor_samples(), 0.5, callbacks=[lambda epoch, m: losses.append(m["loss"])])
    assert len(losses) == 300
    assert losses[-1] < losses[0]


def test_correction_count_follows_batches(monkeypatch):
    calls = []
    original = Network.correct

    def counting(self, learning_rate):
        calls.append(len(self.layers[-1].history_of_gradients))
        original(self, learning_rate)

    monkeypatch.setattr(Network, "correct", counting)
    samples = [([float(i), 1.0], [0.0]) for i in range(5)]
    net = Network([2, 3, 1], seed=0).with_batch_size(2).with_epoch(4)
    summary = net.train(samples, 0.1)

    assert summary.corrections == 12
    assert len(calls) == 12
    assert calls[:3] == [2, 2, 1]


def test_callbacks_receive_cost_and_loss():
    class Recorder:
        def __init__(self):
            self.seen = []

        def on_epoch(self, epoch, metrics):
            self.seen.append((epoch, dict(metrics)))

    recorder = Recorder()
    net = Network([2, 3, 2], seed=1).with_epoch(3)
    summary = net.train(_xnor_samples(), 0.1, callbacks=[recorder])

    assert [epoch for epoch, _ in recorder.seen] == [1, 2, 3]
    assert set(recorder.seen[0][1]) == {"cost", "loss"}
    assert recorder.seen[-1][1]["loss"] == pytest.approx(summary.loss)
    assert recorder.seen[-1][1]["cost"] == pytest.approx(summary.cost)


def test_full_batch_equals_averaged_single_step():
    samples = _xnor_samples()
    net = Network([2, 3, 2], seed=4).with_batch_size(4).with_epoch(1)
    expected = Network.from_layers(
        [Layer(layer.weights, layer.bias, layer.activation) for layer in net.layers]
    )
    net.train(samples, 0.2)

    grads_w = {idx: np.zeros_like(expected.layers[idx].weights) for idx in (1, 2)}
    grads_b = {idx: np.zeros_like(expected.layers[idx].bias) for idx in (1, 2)}
    for inputs, targets in samples:
        expected.forward(inputs)
        expected.backward(targets)
        for idx in (1, 2):
            layer, previous = expected.layers[idx], expected.layers[idx - 1]
            grads_w[idx] += np.outer(layer.gradient, previous.output)
            grads_b[idx] += layer.gradient
    expected.clear()

    for idx in (1, 2):
        before = expected.layers[idx]
        assert not np.allclose(net.layers[idx].weights, before.weights)
        assert np.allclose(net.layers[idx].weights, before.weights - 0.2 * grads_w[idx] / 4)
        assert np.allclose(net.layers[idx].bias, before.bias - 0.2 * grads_b[idx] / 4)


def test_input_layer_is_never_updated():
    net = Network([2, 4, 2], seed=0).with_epoch(5)
    net.train(_xnor_samples(), 0.5)
    assert net.layers[0].weights.shape == (2, 0)
    assert np.array_equal(net.layers[0].bias, np.zeros(2))
    assert all(layer.history_of_gradients == [] for layer in net.layers)
