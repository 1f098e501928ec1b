from typing import List, Sequence

import numpy as np

from .validation import ArrayLike, require_not_none, require_vector


class Backpropagation:
    """
    Computes per-sample deltas and gradient contributions for a network.

    Relies on the activations each layer cached during the last `predict`, so
    `network.predict(x)` must be called for the same sample right before
    `compute_deltas`/`compute`.
    """

    def __init__(self, network, loss):
        self.network = require_not_none(network, "network")
        self.loss = require_not_none(loss, "loss")

    def compute_deltas(self, expected: ArrayLike) -> List[np.ndarray]:
        """
        Deltas (dL/dz) for every layer, walking from the output layer back to the first.

        Args:
            expected: Target vector for the current sample.

        Returns:
            A list with one delta vector per layer, in forward order.

        Raises:
            DimensionMismatch: If expected does not match the last layer's output size.
        """
        layers = self.network.layers
        last = layers[-1]
        expected = require_vector(expected, last.output_size, "expected")

        deltas: List[np.ndarray] = [None] * len(layers)
        deltas[-1] = last.backward_output(expected, self.loss)

        for l in range(len(layers) - 2, -1, -1):
            deltas[l] = layers[l].backward_hidden(deltas[l + 1], layers[l + 1])

        return deltas

    def compute(
        self,
        inputs: ArrayLike,
        expected: ArrayLike,
        gradient_weights: Sequence[np.ndarray],
        gradient_biases: Sequence[np.ndarray],
    ) -> None:
        """
        Add one sample's gradients into caller-owned buffers.

        gradient_weights[l] += outer(delta[l], previous_activation)
        gradient_biases[l]  += delta[l]

        previous_activation is the sample input for layer 0 and the cached
        activation of layer l-1 otherwise. The buffers are only ever added to.
        """
        require_not_none(inputs, "input")
        require_not_none(expected, "expected")
        require_not_none(gradient_weights, "gradient_weights")
        require_not_none(gradient_biases, "gradient_biases")

        layers = self.network.layers
        deltas = self.compute_deltas(expected)
        previous_activation = require_vector(inputs, layers[0].input_size, "input")

        for l, layer in enumerate(layers):
            gradient_weights[l] += np.outer(deltas[l], previous_activation)
            gradient_biases[l] += deltas[l]
            previous_activation = layer.state
