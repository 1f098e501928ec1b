from .activations import LeakyReLU, Linear, ReLU, Sigmoid, get_activation
from .backprop import Backpropagation
from .dataset import Dataset
from .errors import (
    ConfigurationError,
    DimensionMismatch,
    LayerMismatch,
    NetworkError,
    NullInputError,
    RangeError,
    UnsupportedOperation,
)
from .initializers import HeInitializer, XavierInitializer, get_initializer
from .layer import Layer
from .losses import MSE, Quadratic, get_loss
from .network import NeuralNetwork
from .optimizers import SGD, Adam, GradientAccumulator, Trainable
from .trainer import EpochSnapshot, TrainingSession

__version__ = "1.0.0"
