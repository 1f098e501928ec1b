import numpy as np
import pytest

from approx_mlp import (
    MSE,
    SGD,
    Adam,
    ConfigurationError,
    GradientAccumulator,
    Layer,
    NeuralNetwork,
    RangeError,
    ReLU,
)

X = [0.5, 1.0]
Y = [1.0, 0.5]


def _network():
    l = Layer(2, 2, ReLU())
    l.set([[1.0, 0.5], [2.0, 2.5]], [0.0, 0.0])
    return NeuralNetwork([l])


def _learn(network, trainer, times=1):
    for _ in range(times):
        network.predict(X)
        trainer.learn(X, Y)


# ============================================================================
# GRADIENT ACCUMULATOR
# ============================================================================

def test_accumulator_shapes_follow_layers(two_layer_network):
    acc = GradientAccumulator(two_layer_network)
    assert [g.shape for g in acc.gradient_weights] == [(2, 1), (1, 2)]
    assert [g.shape for g in acc.gradient_biases] == [(2,), (1,)]
    assert acc.count == 0


def test_accumulator_average_and_discard():
    network = _network()
    trainer = SGD(network, 1.0)
    network.setup(trainer, MSE())
    _learn(network, trainer, times=3)

    acc = trainer.accumulator
    assert acc.count == 3
    (gw, gb), = acc.averaged()
    np.testing.assert_allclose(gw, [[0.0, 0.0], [1.5, 3.0]])
    np.testing.assert_allclose(gb, [0.0, 3.0])

    acc.discard()
    assert acc.count == 0
    assert not acc.gradient_weights[0].any()
    with pytest.raises(RangeError):
        acc.averaged()


# ============================================================================
# SGD
# ============================================================================

def test_learn_requires_loss():
    network = _network()
    trainer = SGD(network, 1.0)
    network.predict(X)
    with pytest.raises(ConfigurationError):
        trainer.learn(X, Y)


def test_sgd_single_sample_step():
    network = _network()
    trainer = SGD(network, 1.0)
    network.setup(trainer, MSE())

    _learn(network, trainer)
    trainer.step()

    layer = network.layers[0]
    np.testing.assert_allclose(layer.weights, [[1.0, 0.5], [0.5, -0.5]])
    np.testing.assert_allclose(layer.biases, [0.0, -3.0])
    assert trainer.count == 0


def test_sgd_averages_over_batch():
    network = _network()
    trainer = SGD(network, 1.0)
    network.setup(trainer, MSE())

    # the same sample twice averages to the single-sample gradient
    _learn(network, trainer, times=2)
    trainer.step()

    np.testing.assert_allclose(network.layers[0].weights, [[1.0, 0.5], [0.5, -0.5]])


def test_sgd_step_without_samples_is_noop():
    network = _network()
    trainer = SGD(network, 1.0)
    network.setup(trainer, MSE())
    before = network.layers[0].get_weights()

    trainer.step()

    after = network.layers[0].get_weights()
    np.testing.assert_array_equal(before[0], after[0])
    np.testing.assert_array_equal(before[1], after[1])


def test_sgd_reset_discards_gradients():
    network = _network()
    trainer = SGD(network, 1.0)
    network.setup(trainer, MSE())
    _learn(network, trainer)

    trainer.reset()
    trainer.step()

    np.testing.assert_allclose(network.layers[0].weights, [[1.0, 0.5], [2.0, 2.5]])


# ============================================================================
# ADAM
# ============================================================================

def test_adam_defaults():
    adam = Adam(_network())
    assert (adam.learning_rate, adam.beta1, adam.beta2, adam.epsilon) == (1e-3, 0.9, 0.999, 1e-7)
    assert adam.t == 0


def test_adam_first_step_matches_bias_corrected_update():
    network = _network()
    adam = Adam(network, learning_rate=0.1)
    network.setup(adam, MSE())

    _learn(network, adam)
    adam.step()

    # at t=1 the bias-corrected moments are g and g^2, so the step is lr * g / (|g| + eps)
    g_w = np.array([[0.0, 0.0], [1.5, 3.0]])
    g_b = np.array([0.0, 3.0])
    expected_w = np.array([[1.0, 0.5], [2.0, 2.5]]) - 0.1 * g_w / (np.abs(g_w) + 1e-7)
    expected_b = -0.1 * g_b / (np.abs(g_b) + 1e-7)

    layer = network.layers[0]
    np.testing.assert_allclose(layer.weights, expected_w, rtol=1e-12)
    np.testing.assert_allclose(layer.biases, expected_b, rtol=1e-12)
    assert adam.t == 1
    np.testing.assert_allclose(adam.m_weights[0], 0.1 * g_w)
    np.testing.assert_allclose(adam.v_weights[0], 0.001 * g_w ** 2)


def test_adam_moments_persist_across_steps():
    network = _network()
    adam = Adam(network)
    network.setup(adam, MSE())

    _learn(network, adam)
    adam.step()
    m_after_first = adam.m_biases[0].copy()

    _learn(network, adam)
    adam.step()

    assert adam.t == 2
    assert adam.count == 0
    # a second step with a gradient of the same sign grows the first moment
    assert adam.m_biases[0][1] > m_after_first[1] > 0


def test_adam_step_without_samples_is_noop():
    network = _network()
    adam = Adam(network)
    network.setup(adam, MSE())
    _learn(network, adam)
    adam.step()

    weights = network.layers[0].weights.copy()
    m = [a.copy() for a in adam.m_weights]
    v = [a.copy() for a in adam.v_weights]

    adam.step()

    assert adam.t == 1
    np.testing.assert_array_equal(network.layers[0].weights, weights)
    np.testing.assert_array_equal(adam.m_weights[0], m[0])
    np.testing.assert_array_equal(adam.v_weights[0], v[0])
