import numpy as np
from typing import Optional, Tuple, Union
import logging

from .activations import Activation, get_activation
from .errors import ConfigurationError, LayerMismatch, RangeError
from .initializers import Initializer, XavierInitializer
from .losses import LossFunction
from .validation import ArrayLike, require_matrix, require_not_none, require_vector

class Layer:
    """
    A fully connected layer: one affine transform followed by an activation.

    The layer processes one sample at a time. `forward` computes
    z = W @ x + b and a = activation(z) and caches both; the backward methods
    read that cache. For a given sample, `forward` must immediately precede the
    matching backward call on the same instance: a second `forward` in between
    overwrites z and a, and the deltas would silently be computed for the wrong
    sample. A Layer instance is therefore not safe to share between samples in
    flight (threads, pipelining).

    Key Attributes:
        weights (np.ndarray): Weight matrix of shape (output_size, input_size). Row j
                              holds the weights of output unit j.
        biases (np.ndarray): Bias vector of shape (output_size,).
        activation_fn (Activation): Activation applied element-wise to z.
        z_values (np.ndarray): Pre-activation values of the most recent sample. Shape: (output_size,).
        activations (np.ndarray): Activations of the most recent sample. Shape: (output_size,).
    """

    def __init__(
        self,
        input_size: int,
        output_size: int,
        activation: Union[str, Activation] = 'linear',
        initializer: Optional[Initializer] = None,
        id: int = 0,
    ):
        """
        Initializes the layer.

        Args:
            input_size: Number of input features (output size of the previous layer).
            output_size: Number of output units.
            activation: Activation identifier (e.g. 'relu', 'sigmoid') or an Activation instance.
            initializer: Initializer used to draw the starting weights. Defaults to Xavier
                         with a freshly seeded numpy Generator; pass one bound to your own
                         Generator for reproducible runs.
            id: An identifier for the layer (for logging/debugging).

        Raises:
            RangeError: If input_size or output_size is not a positive integer.
            NullInputError: If activation is None.
            ConfigurationError: If activation is neither a name nor an Activation instance.
        """
        if not isinstance(input_size, (int, np.integer)) or not isinstance(output_size, (int, np.integer)):
            raise RangeError(f"Layer {id}: input_size and output_size must be integers, "
                             f"got {input_size!r} and {output_size!r}")
        if input_size < 1 or output_size < 1:
            raise RangeError(f"Layer {id}: input_size and output_size must be > 0, "
                             f"got {input_size} and {output_size}")

        self.input_size = int(input_size)
        self.output_size = int(output_size)
        self.id = id

        require_not_none(activation, "activation")
        if isinstance(activation, str):
            self.activation_fn = get_activation(activation)
        elif isinstance(activation, Activation):
            self.activation_fn = activation
        else:
            raise ConfigurationError(
                f"Layer {id}: invalid activation type '{type(activation).__name__}'; "
                f"expected a name or an Activation instance"
            )

        self.weights = np.zeros((self.output_size, self.input_size), dtype=float)
        self.biases = np.zeros(self.output_size, dtype=float)

        # Per-sample cache written by forward()
        self.z_values    = np.zeros(self.output_size, dtype=float)
        self.activations = np.zeros(self.output_size, dtype=float)

        if initializer is None:
            initializer = XavierInitializer(np.random.default_rng())
        initializer.initialize(self)

        logging.debug(
            f"Layer #{self.id} created: input_size={self.input_size}, "
            f"output_size={self.output_size}, activation={self.activation_fn.__class__.__name__}, "
            f"initializer={initializer.__class__.__name__}, weight_shape={self.weights.shape}"
        )

    def forward(self, inputs: ArrayLike) -> np.ndarray:
        """
        Performs the forward pass for a single sample.

        Computes z = W @ x + b, followed by a = activation_fn(z), and caches both.

        Args:
            inputs: Input vector of shape (input_size,).

        Returns:
            A copy of the activation vector, shape (output_size,).

        Raises:
            NullInputError: If inputs is None.
            DimensionMismatch: If inputs does not have input_size elements.
        """
        inputs = require_vector(inputs, self.input_size, "input")

        self.z_values = self.weights @ inputs + self.biases
        self.activations = np.asarray(self.activation_fn.forward(self.z_values), dtype=float)

        return self.activations.copy()

    def backward_output(self, expected: ArrayLike, loss: LossFunction) -> np.ndarray:
        """
        Backward pass for the output layer.

        delta[j] = dL/da[j] * da[j]/dz[j] = loss.derivative(a[j], expected[j]) * f'(z[j])

        Args:
            expected: Target vector of shape (output_size,).
            loss: Loss function providing the per-element derivative.

        Returns:
            delta (dL/dz) of shape (output_size,).
        """
        expected = require_vector(expected, self.output_size, "expected")
        require_not_none(loss, "loss")

        dc_da = loss.derivative(self.activations, expected)
        da_dz = self.activation_fn.backward(self.z_values)
        return np.asarray(dc_da * da_dz, dtype=float)

    def backward_hidden(self, next_delta: ArrayLike, next_layer: 'Layer') -> np.ndarray:
        """
        Backward pass for a hidden layer.

        delta[j] = (Σ_k next_delta[k] * W_next[k][j]) * f'(z[j])

        Args:
            next_delta: Delta of the following layer, shape (next_layer.output_size,).
            next_layer: The layer this one feeds into.

        Returns:
            delta (dL/dz) of shape (output_size,).

        Raises:
            DimensionMismatch: If next_delta does not match next_layer.output_size.
            LayerMismatch: If this layer's output_size differs from next_layer.input_size.
        """
        require_not_none(next_layer, "next_layer")
        next_delta = require_vector(next_delta, next_layer.output_size, "next_delta")

        if self.output_size != next_layer.input_size:
            raise LayerMismatch(
                f"Layer size mismatch: this.output_size={self.output_size}, "
                f"next.input_size={next_layer.input_size}"
            )

        dc_da = next_layer.weights.T @ next_delta
        da_dz = self.activation_fn.backward(self.z_values)
        return np.asarray(dc_da * da_dz, dtype=float)

    def backward(self, target: ArrayLike, other: Union[LossFunction, 'Layer']) -> np.ndarray:
        """Dispatch to `backward_output` (other is a loss) or `backward_hidden` (other is a Layer)."""
        require_not_none(other, "other")
        if isinstance(other, Layer):
            return self.backward_hidden(target, other)
        return self.backward_output(target, other)

    def update_from_delta(self, learning_rate: float, delta: ArrayLike, previous_activation: ArrayLike):
        """
        Gradient-descent step from a single sample's delta.

        W[j][i] -= learning_rate * delta[j] * previous_activation[i]
        b[j]    -= learning_rate * delta[j]
        """
        delta = require_vector(delta, self.output_size, "delta")
        previous_activation = require_vector(previous_activation, self.input_size, "previous_activation")

        self.weights -= learning_rate * np.outer(delta, previous_activation)
        self.biases -= learning_rate * delta

    def update_from_gradients(self, learning_rate: float, gradient_weights: ArrayLike, gradient_biases: ArrayLike):
        """
        Gradient-descent step from already aggregated gradients.

        This is the form the optimizers use: SGD passes averaged batch gradients and
        its learning rate, Adam passes its final step with learning_rate=1.0.

        W -= learning_rate * gradient_weights
        b -= learning_rate * gradient_biases
        """
        gradient_weights = require_matrix(gradient_weights, self.output_size, self.input_size, "gradient_weights")
        gradient_biases = require_vector(gradient_biases, self.output_size, "gradient_biases")

        grad_norm = np.linalg.norm(gradient_weights)
        if grad_norm > 1e6:
            logging.warning(f"Layer {self.id}: Large gradient norm detected ({grad_norm:.2e}) before update.")

        self.weights -= learning_rate * gradient_weights
        self.biases -= learning_rate * gradient_biases

    def update(self, learning_rate: float, first: ArrayLike, second: ArrayLike):
        """
        Apply a parameter update.

        `update(rate, delta, previous_activation)` when `first` is a 1D delta vector,
        `update(rate, gradient_weights, gradient_biases)` when `first` is a 2D matrix.
        """
        require_not_none(first, "first")
        if np.ndim(first) == 2:
            self.update_from_gradients(learning_rate, first, second)
        else:
            self.update_from_delta(learning_rate, first, second)

    def set(self, weights: ArrayLike, biases: ArrayLike):
        """
        Replace weights and biases wholesale.

        Raises:
            NullInputError: If either argument is None.
            DimensionMismatch: If shapes are not (output_size, input_size) and (output_size,).
        """
        weights = require_matrix(weights, self.output_size, self.input_size, "weights")
        biases = require_vector(biases, self.output_size, "biases")

        self.weights = np.array(weights, dtype=float)
        self.biases = np.array(biases, dtype=float)

    @property
    def state(self) -> np.ndarray:
        """The cached activation vector of the most recent forward pass."""
        return self.activations

    def get_weights(self) -> Tuple[np.ndarray, np.ndarray]:
        """Returns copies of the current weights and biases of the layer."""
        return self.weights.copy(), self.biases.copy()

    def summary(self) -> str:
        """Returns a string summary of the layer's configuration."""
        params = self.weights.size + self.biases.size
        return (
            f"Layer Summary (id={self.id}):\n"
            f"  Type: Fully Connected\n"
            f"  Input size: {self.input_size}\n"
            f"  Output size: {self.output_size}\n"
            f"  Activation: {self.activation_fn.__class__.__name__}\n"
            f"  Weights shape: {self.weights.shape}\n"
            f"  Biases shape: {self.biases.shape}\n"
            f"  Parameters: {params:,} parameters\n"
        )

    def __repr__(self):
        return (f"Layer(id={self.id}, input_size={self.input_size}, "
                f"output_size={self.output_size}, "
                f"activation={self.activation_fn.__class__.__name__})")
