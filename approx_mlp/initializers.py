import numpy as np
from typing import Dict, Optional, Type
import logging

from .validation import require_not_none


class Initializer:
    """Produces the initial weights and biases of a layer.

    Subclasses implement `sample_weights`; `initialize` writes the result into
    the layer through `Layer.set`, so the usual shape checks apply. The random
    source is always supplied by the caller.
    """

    def __init__(self, rng: np.random.Generator):
        self.rng = require_not_none(rng, "rng")

    def sample_weights(self, input_size: int, output_size: int) -> np.ndarray:
        raise NotImplementedError

    def initialize(self, layer) -> None:
        weights = self.sample_weights(layer.input_size, layer.output_size)
        biases = np.zeros(layer.output_size, dtype=float)
        layer.set(weights, biases)
        logging.debug(
            f"{self.__class__.__name__}: initialized weights {weights.shape}, "
            f"std={weights.std():.4f}"
        )


class XavierInitializer(Initializer):
    """Xavier/Glorot normal initialization: W ~ N(0, sqrt(2 / (fan_in + fan_out)))."""

    def sample_weights(self, input_size: int, output_size: int) -> np.ndarray:
        std = np.sqrt(2.0 / (input_size + output_size))
        return self.rng.standard_normal((output_size, input_size)) * std


class HeInitializer(Initializer):
    """He normal initialization: W ~ N(0, sqrt(2 / fan_in)). Suited to ReLU layers."""

    def sample_weights(self, input_size: int, output_size: int) -> np.ndarray:
        std = np.sqrt(2.0 / input_size)
        return self.rng.standard_normal((output_size, input_size)) * std


INITIALIZERS: Dict[str, Type[Initializer]] = {
    'xavier': XavierInitializer,
    'he': HeInitializer,
}

def get_initializer(name: str, rng: Optional[np.random.Generator] = None) -> Initializer:
    """Return an initializer by name, bound to `rng` (a fresh Generator if omitted)."""
    name_lower = name.lower()
    if name_lower not in INITIALIZERS:
        raise ValueError(
            f"Unknown initializer '{name}'. "
            f"Available initializers: {list(INITIALIZERS.keys())}"
        )
    if rng is None:
        rng = np.random.default_rng()
    return INITIALIZERS[name_lower](rng)
