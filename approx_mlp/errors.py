"""Exception types raised by the training engine.

Every error derives from `NetworkError` and from the builtin exception a
caller would naturally expect, so `except ValueError` keeps working.
"""


class NetworkError(Exception):
    """Base class for all engine errors."""


class NullInputError(NetworkError, TypeError):
    """A required argument is None."""


class DimensionMismatch(NetworkError, ValueError):
    """A vector or matrix argument has the wrong shape."""


class ConfigurationError(NetworkError, ValueError):
    """Structural misuse: empty or disconnected layers, training before setup."""


class RangeError(NetworkError, ValueError):
    """A scalar parameter is outside its valid domain."""


class LayerMismatch(NetworkError, ValueError):
    """Hidden-layer backward called against an incompatible next layer."""


class UnsupportedOperation(NetworkError, NotImplementedError):
    """The operation exists in the interface but is not implemented."""
