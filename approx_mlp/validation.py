import math
from typing import Any, Sequence, Union

import numpy as np

from .errors import DimensionMismatch, NullInputError, RangeError

ArrayLike = Union[Sequence[float], np.ndarray]


def require_not_none(value: Any, name: str) -> Any:
    if value is None:
        raise NullInputError(f"{name} must not be None")
    return value


def require_vector(value: ArrayLike, length: int, name: str) -> np.ndarray:
    """Return `value` as a 1D float array of exactly `length` elements.

    Raises:
        NullInputError: If value is None.
        DimensionMismatch: If value is not 1D or has the wrong length.
    """
    require_not_none(value, name)
    vector = np.asarray(value, dtype=float)
    if vector.ndim != 1:
        raise DimensionMismatch(f"{name} must be a 1D vector, got shape {vector.shape}")
    if vector.shape[0] != length:
        raise DimensionMismatch(f"{name} length {vector.shape[0]} != expected {length}")
    return vector


def require_matrix(value: ArrayLike, rows: int, cols: int, name: str) -> np.ndarray:
    """Return `value` as a 2D float array of shape (rows, cols)."""
    require_not_none(value, name)
    matrix = np.asarray(value, dtype=float)
    if matrix.shape != (rows, cols):
        raise DimensionMismatch(
            f"{name} shape {matrix.shape} != expected {shape(rows, cols)}"
        )
    return matrix


def require_probability(value: float, name: str) -> float:
    """Check `value` is finite and in [0, 1)."""
    if value is None or not math.isfinite(value) or value < 0.0 or value >= 1.0:
        raise RangeError(f"{name} must be in [0, 1); got {value}")
    return float(value)


def require_positive(value: int, name: str) -> int:
    """Check `value` is an integer greater than zero."""
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise RangeError(f"{name} must be a positive integer; got {value!r}")
    if value <= 0:
        raise RangeError(f"{name} must be > 0; got {value}")
    return value


def as_rows(value: ArrayLike, name: str) -> np.ndarray:
    """Return samples as a 2D (n_samples, n_features) float array.

    A 1D sequence is read as one scalar feature per sample.
    """
    require_not_none(value, name)
    rows = np.asarray(value, dtype=float)
    if rows.ndim == 1:
        rows = rows.reshape(-1, 1)
    elif rows.ndim != 2:
        raise DimensionMismatch(f"{name} must be a 1D or 2D array, got {rows.ndim}D")
    return rows


def shape(rows: int, cols: int) -> str:
    return f"({rows}x{cols})"
