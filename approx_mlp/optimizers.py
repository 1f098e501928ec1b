import numpy as np
from typing import List, Optional, Tuple
import logging

from .backprop import Backpropagation
from .errors import ConfigurationError, RangeError
from .validation import ArrayLike, require_not_none


class GradientAccumulator:
    """
    Per-layer gradient sums for the current mini-batch.

    Holds one weight-gradient matrix and one bias-gradient vector per layer,
    shaped like the layer's parameters, plus the number of samples added.
    """

    def __init__(self, network):
        self.network = require_not_none(network, "network")
        self.gradient_weights: List[np.ndarray] = [np.zeros_like(layer.weights) for layer in network.layers]
        self.gradient_biases: List[np.ndarray] = [np.zeros_like(layer.biases) for layer in network.layers]
        self.count = 0

    def accumulate(self, backprop: Backpropagation, inputs: ArrayLike, expected: ArrayLike):
        """Add one sample's gradient contribution (the network must have just predicted `inputs`)."""
        backprop.compute(inputs, expected, self.gradient_weights, self.gradient_biases)
        self.count += 1

    def averaged(self) -> List[Tuple[np.ndarray, np.ndarray]]:
        """Batch-mean (weights, biases) gradient per layer. Requires count > 0."""
        if self.count == 0:
            raise RangeError("Cannot average an empty gradient accumulator")
        scale = 1.0 / self.count
        return [(gw * scale, gb * scale) for gw, gb in zip(self.gradient_weights, self.gradient_biases)]

    def discard(self):
        """Zero every buffer and the sample count."""
        for gw, gb in zip(self.gradient_weights, self.gradient_biases):
            gw.fill(0.0)
            gb.fill(0.0)
        self.count = 0


class Trainable:
    """
    Base class for optimizers.

    An optimizer is driven once per sample through `learn`, which accumulates that
    sample's gradients, and once per mini-batch through `step`, which applies the
    batch-averaged gradient to every layer and clears the accumulator.
    """

    def __init__(self, network):
        self.network = require_not_none(network, "network")
        self.accumulator = GradientAccumulator(network)
        self.backprop: Optional[Backpropagation] = None

    @property
    def count(self) -> int:
        """Number of samples accumulated since the last step."""
        return self.accumulator.count

    def set_loss(self, loss):
        """Bind the loss function; called by `NeuralNetwork.setup`."""
        self.backprop = Backpropagation(self.network, loss)

    def learn(self, inputs: ArrayLike, expected: ArrayLike):
        """Accumulate the gradient of one sample. `network.predict(inputs)` must run first."""
        if self.backprop is None:
            raise ConfigurationError(
                f"{self.__class__.__name__}: no loss function bound; call network.setup() first"
            )
        self.accumulator.accumulate(self.backprop, inputs, expected)

    def step(self):
        """Apply the accumulated batch gradient and reset. A no-op when nothing was accumulated."""
        if self.accumulator.count == 0:
            return
        self._apply(self.accumulator.averaged())
        self.reset()

    def reset(self):
        """Discard accumulated gradients."""
        self.accumulator.discard()

    def _apply(self, gradients: List[Tuple[np.ndarray, np.ndarray]]):
        raise NotImplementedError


class SGD(Trainable):
    """Plain mini-batch gradient descent with a fixed learning rate."""

    def __init__(self, network, learning_rate: float = 0.01):
        super().__init__(network)
        self.learning_rate = learning_rate
        logging.debug(f"SGD created: learning_rate={learning_rate}")

    def _apply(self, gradients):
        for layer, (gw, gb) in zip(self.network.layers, gradients):
            layer.update_from_gradients(self.learning_rate, gw, gb)

    def __repr__(self):
        return f"SGD(learning_rate={self.learning_rate})"


class Adam(Trainable):
    """
    Adam optimizer (Kingma & Ba).

    For every parameter, with g the batch-averaged gradient and t the number of
    steps taken so far (including this one):

        m = beta1 * m + (1 - beta1) * g
        v = beta2 * v + (1 - beta2) * g^2
        m_hat = m / (1 - beta1^t)
        v_hat = v / (1 - beta2^t)
        param -= learning_rate * m_hat / (sqrt(v_hat) + epsilon)

    Moment estimates persist for the lifetime of the optimizer; only the gradient
    accumulator is cleared after each step.
    """

    def __init__(
        self,
        network,
        learning_rate: float = 1e-3,
        beta1: float = 0.9,
        beta2: float = 0.999,
        epsilon: float = 1e-7,
    ):
        super().__init__(network)
        self.learning_rate = learning_rate
        self.beta1 = beta1
        self.beta2 = beta2
        self.epsilon = epsilon

        self.m_weights = [np.zeros_like(layer.weights) for layer in network.layers]
        self.v_weights = [np.zeros_like(layer.weights) for layer in network.layers]
        self.m_biases = [np.zeros_like(layer.biases) for layer in network.layers]
        self.v_biases = [np.zeros_like(layer.biases) for layer in network.layers]
        self.t = 0

        logging.debug(
            f"Adam created: learning_rate={learning_rate}, beta1={beta1}, "
            f"beta2={beta2}, epsilon={epsilon}"
        )

    def _moment_step(self, g, m, v, bias_corr1, bias_corr2):
        # m and v are updated in place
        m *= self.beta1
        m += (1.0 - self.beta1) * g
        v *= self.beta2
        v += (1.0 - self.beta2) * g * g
        m_hat = m / bias_corr1
        v_hat = v / bias_corr2
        return self.learning_rate * m_hat / (np.sqrt(v_hat) + self.epsilon)

    def _apply(self, gradients):
        self.t += 1
        bias_corr1 = 1.0 - self.beta1 ** self.t
        bias_corr2 = 1.0 - self.beta2 ** self.t

        for l, (layer, (gw, gb)) in enumerate(zip(self.network.layers, gradients)):
            step_w = self._moment_step(gw, self.m_weights[l], self.v_weights[l], bias_corr1, bias_corr2)
            step_b = self._moment_step(gb, self.m_biases[l], self.v_biases[l], bias_corr1, bias_corr2)
            layer.update_from_gradients(1.0, step_w, step_b)

    def __repr__(self):
        return (f"Adam(learning_rate={self.learning_rate}, beta1={self.beta1}, "
                f"beta2={self.beta2}, epsilon={self.epsilon})")
