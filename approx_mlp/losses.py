import numpy as np
from typing import Dict, Type, Union
import logging

from .errors import DimensionMismatch


class LossFunction:
    """Base class for loss functions.

    A loss aggregates a whole prediction vector into one scalar, while its
    derivative is taken per element: dL/dp_i for a single prediction/target pair.
    """

    def loss(self, predicted: np.ndarray, expected: np.ndarray) -> float:
        raise NotImplementedError

    def derivative(self, predicted: Union[float, np.ndarray], expected: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        raise NotImplementedError

    def _errors(self, predicted, expected) -> np.ndarray:
        predicted = np.asarray(predicted, dtype=float)
        expected = np.asarray(expected, dtype=float)
        if predicted.shape != expected.shape:
            raise DimensionMismatch(
                f"{self.__class__.__name__} loss: predicted shape {predicted.shape} "
                f"must match expected shape {expected.shape}"
            )
        return predicted - expected

    def __repr__(self):
        return f"{self.__class__.__name__}()"


class MSE(LossFunction):
    """
    Mean Squared Error with a 1/2 factor.

    Loss = (1/N) * Σ 0.5 * (p_i - e_i)^2
    Derivative (dL/dp_i) = p_i - e_i

    The derivative deliberately omits the 1/N factor: it is applied per sample
    and the optimizers already average over the batch.
    """

    def loss(self, predicted: np.ndarray, expected: np.ndarray) -> float:
        error = self._errors(predicted, expected)
        if error.size == 0:
            return 0.0
        value = float(np.mean(0.5 * error ** 2))
        if not np.isfinite(value):
            logging.warning(f"MSE loss is not finite ({value}); check learning rate and inputs")
        return value

    def derivative(self, predicted, expected):
        return np.asarray(predicted, dtype=float) - np.asarray(expected, dtype=float)


class Quadratic(LossFunction):
    """
    Quadratic (sum of squares) loss.

    Loss = Σ 0.5 * (p_i - e_i)^2
    Derivative (dL/dp_i) = p_i - e_i
    """

    def loss(self, predicted: np.ndarray, expected: np.ndarray) -> float:
        error = self._errors(predicted, expected)
        value = float(np.sum(0.5 * error ** 2))
        if not np.isfinite(value):
            logging.warning(f"Quadratic loss is not finite ({value}); check learning rate and inputs")
        return value

    def derivative(self, predicted, expected):
        return np.asarray(predicted, dtype=float) - np.asarray(expected, dtype=float)


# Dictionary mapping loss names to their classes
LOSS_FUNCTIONS: Dict[str, Type[LossFunction]] = {
    "mse": MSE,
    "quadratic": Quadratic,
}

def get_loss(name: str) -> LossFunction:
    """Return a loss function instance by (case-insensitive) name.

    Raises:
        ValueError: If the name is not recognized.
    """
    name_lower = name.lower()
    if name_lower not in LOSS_FUNCTIONS:
        raise ValueError(f"Unsupported loss '{name}'. "
                         f"Valid options: {list(LOSS_FUNCTIONS.keys())}")
    return LOSS_FUNCTIONS[name_lower]()
