import math

import numpy as np
import logging

from .errors import DimensionMismatch
from .validation import ArrayLike, as_rows, require_not_none, require_probability


class Dataset:
    """
    A fixed train/validation split of (x, y) samples.

    The first floor(n * (1 - split)) rows become the training partition and the
    remaining rows the validation partition. Both are copied once at construction.
    `shuffle` permutes the training rows in place (x and y in lockstep) and never
    touches the validation rows.
    """

    def __init__(self, x: ArrayLike, y: ArrayLike, split: float, rng: np.random.Generator):
        """
        Args:
            x: Inputs, shape (n_samples, input_dim); a 1D array is one scalar feature per row.
            y: Targets, shape (n_samples, output_dim); a 1D array is one scalar target per row.
            split: Validation share in [0, 1).
            rng: Random source used by `shuffle`.

        Raises:
            DimensionMismatch: If x and y have a different number of rows.
            RangeError: If split is outside [0, 1).
        """
        x = as_rows(x, "x")
        y = as_rows(y, "y")
        if x.shape[0] != y.shape[0]:
            raise DimensionMismatch(f"x and y must have the same number of rows, got {x.shape[0]} and {y.shape[0]}")
        split = require_probability(split, "split")
        self.rng = require_not_none(rng, "rng")

        n = x.shape[0]
        idx = math.floor(n * (1.0 - split))

        self._train_x = x[:idx].copy()
        self._train_y = y[:idx].copy()
        self._val_x = x[idx:].copy()
        self._val_y = y[idx:].copy()

        logging.debug(f"Dataset split: {idx} training rows, {n - idx} validation rows (split={split})")

    @property
    def train_x(self) -> np.ndarray:
        return self._train_x

    @property
    def train_y(self) -> np.ndarray:
        return self._train_y

    @property
    def val_x(self) -> np.ndarray:
        return self._val_x

    @property
    def val_y(self) -> np.ndarray:
        return self._val_y

    def shuffle(self):
        """Fisher-Yates shuffle of the training rows, keeping each x row paired with its y row."""
        for i in range(len(self._train_x) - 1, 0, -1):
            j = int(self.rng.integers(0, i + 1))
            self._train_x[[i, j]] = self._train_x[[j, i]]
            self._train_y[[i, j]] = self._train_y[[j, i]]

    def __len__(self):
        return len(self._train_x) + len(self._val_x)

    def __repr__(self):
        return (f"Dataset(train={len(self._train_x)}, val={len(self._val_x)}, "
                f"input_dim={self._train_x.shape[1]}, output_dim={self._train_y.shape[1]})")
