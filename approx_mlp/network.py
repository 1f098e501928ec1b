import numpy as np
from typing import Dict, List, Optional, Sequence
import logging
import time

from .dataset import Dataset
from .errors import ConfigurationError, DimensionMismatch, UnsupportedOperation
from .layer import Layer
from .losses import LossFunction
from .optimizers import Trainable
from .validation import (
    ArrayLike,
    as_rows,
    require_not_none,
    require_positive,
    require_probability,
    require_vector,
)

# Epoch 1 and every LOG_EVERY epochs are reported by fit()
LOG_EVERY = 100

class NeuralNetwork:
    """
    A feedforward neural network (multilayer perceptron) built from independent layers.

    Manages the layer sequence, single-sample prediction, loss evaluation and the
    epoch loop. Gradients are computed by the bound optimizer (a `Trainable`), which
    must be attached with `setup` before any training call.
    """

    def __init__(self, layers: Sequence[Layer]):
        """
        Args:
            layers: Ordered layers; layers[i].output_size must equal layers[i+1].input_size.

        Raises:
            NullInputError: If layers is None.
            ConfigurationError: If the list is empty or two adjacent layers are not connected.
        """
        require_not_none(layers, "layers")
        layers = list(layers)
        if len(layers) == 0:
            raise ConfigurationError("At least one trainable layer is required.")

        for i in range(len(layers) - 1):
            if layers[i].output_size != layers[i + 1].input_size:
                raise ConfigurationError(
                    f"Layers are not connected: layer {i} outputs {layers[i].output_size}, "
                    f"layer {i + 1} expects {layers[i + 1].input_size} inputs."
                )

        self.layers: List[Layer] = layers
        self.trainer: Optional[Trainable] = None
        self.loss: Optional[LossFunction] = None

        architecture = [layers[0].input_size] + [l.output_size for l in layers]
        logging.info(f"Created neural network with architecture: {architecture}")
        logging.info(f"Layer activations: {[l.activation_fn.__class__.__name__ for l in self.layers]}")

    @property
    def num_layers(self) -> int:
        return len(self.layers)

    def setup(self, trainer: Trainable, loss: LossFunction):
        """
        Bind the optimizer and loss function. Must be called before `fit`/`fit_next`.

        The optimizer is told about the loss so it can build its backpropagation.
        """
        require_not_none(trainer, "trainer")
        require_not_none(loss, "loss")

        self.trainer = trainer
        self.loss = loss
        trainer.set_loss(loss)
        logging.debug(f"Network setup: trainer={trainer!r}, loss={loss!r}")

    def predict(self, inputs: ArrayLike) -> np.ndarray:
        """
        Forward pass of one sample through all layers.

        Also refreshes every layer's z/a cache, which the optimizer's `learn` reads.

        Args:
            inputs: Input vector of shape (input_size of the first layer,).

        Returns:
            Output vector of the last layer.

        Raises:
            DimensionMismatch: If the input length does not match the first layer.
        """
        output = require_vector(inputs, self.layers[0].input_size, "input")
        for layer in self.layers:
            output = layer.forward(output)
        return output

    def calculate_loss(self, x: ArrayLike, y: ArrayLike) -> float:
        """
        Loss of the network's predictions on every row of x against y.

        Predictions and targets are flattened into single vectors before the loss
        is applied, so MSE averages over all output elements of all rows.
        """
        if self.loss is None:
            raise ConfigurationError("A LossFunction must be set (network.setup) before calculating loss.")
        x = as_rows(x, "x")
        y = as_rows(y, "y")
        if x.shape[0] != y.shape[0]:
            raise DimensionMismatch(f"x and y must have the same number of rows, got {x.shape[0]} and {y.shape[0]}")

        predictions = np.array([self.predict(row) for row in x]).reshape(-1)
        return self.loss.loss(predictions, y.reshape(-1))

    def fit_next(self, dataset: Dataset, batch_size: int):
        """
        Advance training by exactly one epoch.

        The training partition is shuffled, then walked in contiguous mini-batches of
        `batch_size` rows (the last one may be smaller). Each row is predicted and its
        gradient accumulated; after the last row of a batch the optimizer steps.
        """
        require_not_none(dataset, "dataset")
        require_positive(batch_size, "batch_size")
        self._require_setup()

        dataset.shuffle()
        x_train, y_train = dataset.train_x, dataset.train_y

        for start in range(0, len(x_train), batch_size):
            end = min(start + batch_size, len(x_train))
            for i in range(start, end):
                self.predict(x_train[i])
                self.trainer.learn(x_train[i], y_train[i])
            self.trainer.step()

    def fit(
        self,
        x: ArrayLike,
        y: ArrayLike,
        split: float = 0.0,
        epochs: int = 100,
        batch_size: int = 32,
        verbose: bool = True,
        rng: Optional[np.random.Generator] = None,
    ) -> Dict[str, List]:
        """
        Train the network with mini-batches for a number of epochs.

        Args:
            x: Inputs (n_samples, input_dim); a 1D array is treated as scalar inputs.
            y: Targets (n_samples, output_dim); a 1D array is treated as scalar targets.
            split: Validation share in [0, 1); the last rows are held out.
            epochs: Number of epochs.
            batch_size: Mini-batch size.
            verbose: Log progress on epoch 1 and every LOG_EVERY epochs.
            rng: Random source for the per-epoch shuffle. A fresh Generator is used if None.

        Returns:
            History of the reported epochs ('epoch', 'loss', 'val_loss', 'time_per_epoch').

        Raises:
            ConfigurationError: If setup() has not been called.
            RangeError: If split is outside [0, 1) or epochs/batch_size are not positive.
            DimensionMismatch: If x and y are empty or differ in length.
        """
        require_not_none(x, "x")
        require_not_none(y, "y")
        split = require_probability(split, "split")
        require_positive(epochs, "epochs")
        require_positive(batch_size, "batch_size")

        x = as_rows(x, "x")
        y = as_rows(y, "y")
        if x.shape[0] == 0 or y.shape[0] == 0:
            raise DimensionMismatch("x and y must not be empty")
        if x.shape[0] != y.shape[0]:
            raise DimensionMismatch(f"x and y must have same length, got {x.shape[0]} and {y.shape[0]}")
        self._require_setup()

        if rng is None:
            logging.debug("No random source given to fit(); using a freshly seeded Generator.")
            rng = np.random.default_rng()

        dataset = Dataset(x, y, split, rng)
        logging.info(f"Training on {len(dataset.train_x)} samples, validating on {len(dataset.val_x)} samples.")

        history: Dict[str, List] = {
            'epoch': [],
            'loss': [],
            'val_loss': [],
            'time_per_epoch': [],
        }

        for epoch in range(1, epochs + 1):
            epoch_start_time = time.time()
            self.fit_next(dataset, batch_size)
            epoch_time = time.time() - epoch_start_time

            if epoch == 1 or epoch % LOG_EVERY == 0:
                train_loss = self.calculate_loss(dataset.train_x, dataset.train_y)
                # TODO: report the held-out rows here once callers stop relying on
                # val_loss tracking the training partition (TrainingSession.val_loss
                # already uses the validation rows).
                val_loss = self.calculate_loss(dataset.train_x, dataset.train_y)

                history['epoch'].append(epoch)
                history['loss'].append(train_loss)
                history['val_loss'].append(val_loss)
                history['time_per_epoch'].append(epoch_time)

                if verbose:
                    logging.info(f"Epoch {epoch}/{epochs} - loss: {train_loss:.5f} - val_loss: {val_loss:.5f} - time: {epoch_time:.2f}s")

        logging.info("Training finished.")
        return history

    def save(self, filename: str):
        """Saving network parameters is not supported."""
        raise UnsupportedOperation("NeuralNetwork.save is not implemented")

    def load(self, filename: str):
        """Loading network parameters is not supported."""
        raise UnsupportedOperation("NeuralNetwork.load is not implemented")

    def _require_setup(self):
        if self.trainer is None or self.loss is None:
            raise ConfigurationError("Trainer and LossFunction must be set (network.setup) before training.")

    def summary(self) -> str:
        """
        Generates a text summary of the network architecture and parameters.
        """
        summary_str = "\n" + "="*50 + "\n"
        summary_str += "Neural Network Summary\n"
        summary_str += "="*50 + "\n"
        total_params = 0
        for i, layer in enumerate(self.layers):
            layer_params = layer.weights.size + layer.biases.size
            total_params += layer_params
            summary_str += f"Layer {i}: {layer.__class__.__name__} (ID: {layer.id})\n"
            summary_str += f"  Input Shape: ({layer.input_size},)\n"
            summary_str += f"  Output Shape: ({layer.output_size},)\n"
            summary_str += f"  Activation: {layer.activation_fn.__class__.__name__}\n"
            summary_str += f"  Parameters: {layer_params}\n"
            summary_str += "-"*50 + "\n"

        summary_str += f"Trainer: {self.trainer!r}\n"
        summary_str += f"Loss: {self.loss!r}\n"
        summary_str += f"Total Parameters: {total_params}\n"
        summary_str += "="*50 + "\n"
        return summary_str
