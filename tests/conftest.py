# tests/conftest.py
import numpy as np
import pytest

from approx_mlp import MSE, SGD, Layer, NeuralNetwork, ReLU


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


@pytest.fixture
def layer() -> Layer:
    """
    Layer(2, 2, ReLU) with W = [[1.0, 0.5], [2.0, 2.5]] and b = [0, 0].
    """
    l = Layer(2, 2, ReLU())
    l.set([[1.0, 0.5], [2.0, 2.5]], [0.0, 0.0])
    return l


@pytest.fixture
def single_layer_network(layer) -> NeuralNetwork:
    nn = NeuralNetwork([layer])
    nn.setup(SGD(nn, 1.0), MSE())
    return nn


@pytest.fixture
def two_layer_network() -> NeuralNetwork:
    """
    Layer(1, 2, ReLU) W=[[1.0],[2.0]], then Layer(2, 1, ReLU) W=[[0.5, 1.0]], zero biases.
    """
    l1 = Layer(1, 2, ReLU())
    l1.set([[1.0], [2.0]], [0.0, 0.0])
    l2 = Layer(2, 1, ReLU())
    l2.set([[0.5, 1.0]], [0.0])
    return NeuralNetwork([l1, l2])
