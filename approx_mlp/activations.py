import numpy as np
from typing import Union
import logging

class Activation:
    """Base class for all activation functions."""

    def forward(self, x: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """Compute the activation function value.

        Args:
            x: Pre-activation value(s) 'z' (scalar or numpy array).

        Returns:
            Activated output.
        """
        raise NotImplementedError

    def backward(self, x: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """Compute the derivative of the activation function with respect to its input.
           Note: 'x' here is the *input* to the activation function ('z'), not its output.

        Args:
            x: Pre-activation value(s) where the derivative is evaluated.

        Returns:
            Derivative of the activation function evaluated at x.
        """
        raise NotImplementedError

    def __repr__(self):
        return f"{self.__class__.__name__}()"


class Linear(Activation):
    """Linear activation function (identity).

    Mathematical form:
        forward: f(x) = x
        backward: f'(x) = 1
    """

    def forward(self, x: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """Compute linear activation (identity)"""
        return np.asarray(x, dtype=float)

    def backward(self, x: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """Compute linear derivative (always 1)"""
        return np.ones_like(x, dtype=float)


class ReLU(Activation):
    """Rectified Linear Unit activation function.

    Mathematical form:
        forward: f(x) = max(0, x)
        backward: f'(x) = 1 if x > 0 else 0
    """

    def forward(self, x: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """Compute ReLU activation: max(0, x)"""
        result = np.maximum(0.0, x)
        logging.debug(f"ReLU forward - output shape: {np.shape(result)}")
        return result

    def backward(self, x: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """Compute ReLU derivative: 1 if x > 0 else 0"""
        return np.where(np.asarray(x) > 0, 1.0, 0.0)


class LeakyReLU(Activation):
    """Leaky ReLU: a ReLU that keeps a small slope for negative inputs.

    Mathematical form:
        forward: f(x) = x if x > 0 else alpha * x
        backward: f'(x) = 1 if x > 0 else alpha
    """

    def __init__(self, alpha: float = 0.01):
        self.alpha = alpha

    def forward(self, x: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        x = np.asarray(x, dtype=float)
        return np.where(x > 0, x, self.alpha * x)

    def backward(self, x: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        return np.where(np.asarray(x) > 0, 1.0, self.alpha)

    def __repr__(self):
        return f"LeakyReLU(alpha={self.alpha})"


class Sigmoid(Activation):
    """Sigmoid activation function.

    Mathematical form:
        forward: f(x) = 1 / (1 + e^-x)
        backward: f'(x) = f(x) * (1 - f(x))
    """

    def forward(self, x: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """Compute sigmoid activation with clipping for numerical stability."""
        # exp(-x) overflows float64 for x below roughly -709
        clipped_x = np.clip(x, -500, 500)
        return 1.0 / (1.0 + np.exp(-clipped_x))

    def backward(self, x: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """Compute sigmoid derivative from the recomputed activation."""
        sig = self.forward(x)
        return sig * (1.0 - sig)


# Dictionary mapping activation function names to their classes
ACTIVATION_FUNCTIONS = {
    'linear': Linear,
    'relu': ReLU,
    'leaky_relu': LeakyReLU,
    'sigmoid': Sigmoid,
}

def get_activation(name: str, **kwargs) -> Activation:
    """Factory function to get an activation function instance by name.

    Args:
        name: Name of the activation function (case-insensitive).
        **kwargs: Additional arguments for the constructor (e.g. 'alpha' for LeakyReLU).

    Returns:
        An instance of the requested Activation class.

    Raises:
        ValueError: If the activation function name is not recognized.
    """
    name_lower = name.lower()
    if name_lower not in ACTIVATION_FUNCTIONS:
        raise ValueError(
            f"Unknown activation function '{name}'. "
            f"Available functions: {list(ACTIVATION_FUNCTIONS.keys())}"
        )
    return ACTIVATION_FUNCTIONS[name_lower](**kwargs)
