import numpy as np
from typing import Iterator, NamedTuple, Type
import logging

from .config import SessionConfig
from .dataset import Dataset
from .errors import DimensionMismatch, RangeError
from .initializers import get_initializer
from .layer import Layer
from .losses import get_loss
from .network import NeuralNetwork
from .optimizers import Adam
from .validation import ArrayLike, require_not_none, require_positive


class EpochSnapshot(NamedTuple):
    """Progress report emitted by `TrainingSession.snapshots`."""

    epoch: int
    x: np.ndarray
    predictions: np.ndarray
    loss: float
    val_loss: float


class TrainingSession:
    """
    Fits a one-dimensional function y = f(x) from sampled points, one epoch at a time.

    The session owns the network, its optimizer and a fixed train/validation split
    of the samples. Callers that report progress (e.g. a streaming endpoint) call
    `next_epoch` repeatedly, or iterate `snapshots`, and read the losses between
    epochs.
    """

    def __init__(
        self,
        x: ArrayLike,
        y: ArrayLike,
        rng: np.random.Generator,
        config: Type[SessionConfig] = SessionConfig,
    ):
        """
        Args:
            x: Sampled inputs, one scalar per sample.
            y: Sampled targets, same length as x.
            rng: Random source for weight initialization and shuffling.
            config: Settings class (see `approx_mlp.config.SessionConfig`).

        Raises:
            DimensionMismatch: If x and y are empty, not 1D, or differ in length.
        """
        require_not_none(x, "x")
        require_not_none(y, "y")
        self.rng = require_not_none(rng, "rng")
        self.config = config

        self.x = np.asarray(x, dtype=float)
        y = np.asarray(y, dtype=float)
        if self.x.ndim != 1 or y.ndim != 1:
            raise DimensionMismatch(f"x and y must be 1D sequences of scalars, got shapes {self.x.shape} and {y.shape}")
        if self.x.shape[0] == 0 or self.x.shape[0] != y.shape[0]:
            raise DimensionMismatch(f"x and y must be non-empty and of equal length, got {self.x.shape[0]} and {y.shape[0]}")

        self.network = self._build_network()
        self.dataset = Dataset(self.x, y, config.split, rng)
        self.epoch = 0

        logging.info(f"Training session ready: {self.dataset!r}")

    def _build_network(self) -> NeuralNetwork:
        cfg = self.config
        initializer = get_initializer(cfg.initializer, self.rng)
        sizes = [cfg.input_size, *cfg.hidden_sizes, cfg.output_size]

        layers = []
        for i in range(len(sizes) - 1):
            is_output = i == len(sizes) - 2
            activation = cfg.output_activation if is_output else cfg.hidden_activation
            layers.append(Layer(sizes[i], sizes[i + 1], activation, initializer, id=i))

        network = NeuralNetwork(layers)
        adam = cfg.adam
        network.setup(
            Adam(network, adam.learning_rate, adam.beta1, adam.beta2, adam.epsilon),
            get_loss(cfg.loss),
        )
        return network

    def next_epoch(self) -> int:
        """Train for one more epoch and return the number of epochs completed."""
        self.network.fit_next(self.dataset, self.config.batch_size)
        self.epoch += 1
        return self.epoch

    def predict(self, xs: ArrayLike) -> np.ndarray:
        """Predict y for every scalar in xs."""
        xs = np.asarray(require_not_none(xs, "xs"), dtype=float).reshape(-1)
        return np.array([self.network.predict([value])[0] for value in xs])

    def train_loss(self) -> float:
        return self.network.calculate_loss(self.dataset.train_x, self.dataset.train_y)

    def val_loss(self) -> float:
        """Loss on the held-out validation rows.

        Raises:
            RangeError: If the split left no validation rows.
        """
        if len(self.dataset.val_x) == 0:
            raise RangeError("The validation partition is empty; use a larger split or more samples")
        return self.network.calculate_loss(self.dataset.val_x, self.dataset.val_y)

    def snapshots(self, epochs: int, interval: int) -> Iterator[EpochSnapshot]:
        """
        Train for `epochs` more epochs, yielding a snapshot every `interval` epochs.

        Each snapshot carries the predictions over all sampled x together with the
        current training and validation loss. Stopping iteration early leaves the
        network in a consistent state after the last completed epoch.

        Arguments are checked here, before any training happens.

        Raises:
            RangeError: If epochs or interval is not a positive integer, or the
                        validation partition is empty.
        """
        require_positive(epochs, "epochs")
        require_positive(interval, "interval")
        if len(self.dataset.val_x) == 0:
            raise RangeError("The validation partition is empty; use a larger split or more samples")

        return self._iter_snapshots(epochs, interval)

    def _iter_snapshots(self, epochs: int, interval: int) -> Iterator[EpochSnapshot]:
        for _ in range(epochs):
            epoch = self.next_epoch()
            if epoch % interval == 0:
                yield EpochSnapshot(
                    epoch=epoch,
                    x=self.x,
                    predictions=self.predict(self.x),
                    loss=self.train_loss(),
                    val_loss=self.val_loss(),
                )
