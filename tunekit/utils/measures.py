"""
Performance measures for resampling-based evaluation.

Each measure is a small callable object ``measure(yhat, y, w=None)`` that
returns a scalar, together with the metadata the tuner needs: a short
``name``, an ``orientation`` (``"loss"`` is minimised, ``"score"`` is
maximised) and whether observation weights are honoured.

The plain functions (MAE, MSE, RMSE, RSE) follow the Time-Series-Library
conventions used elsewhere in the project, extended with optional
per-observation weights.
"""
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence, Union

import numpy as np
import numpy.typing as npt


def _weighted_mean(values: npt.NDArray[np.float64], w: Optional[npt.ArrayLike]) -> float:
    if w is None:
        return float(np.mean(values))
    w = np.asarray(w, dtype=float)
    return float(np.sum(values * w) / np.sum(w))


def MAE(
    pred: npt.NDArray[np.float64],
    true: npt.NDArray[np.float64],
    w: Optional[npt.ArrayLike] = None,
) -> float:
    """
    Mean Absolute Error.

    Average absolute difference between predictions and true values.
    Lower is better. Same scale as the data.

    Args:
        pred: Predicted values, shape (n_samples,)
        true: True values, shape (n_samples,)
        w: Optional per-observation weights, shape (n_samples,)

    Returns:
        MAE value (float)

    Example:
        >>> pred = np.array([1.0, 2.0, 3.0])
        >>> true = np.array([1.1, 2.1, 2.9])
        >>> mae = MAE(pred, true)  # ~0.1
    """
    return _weighted_mean(np.abs(np.asarray(true) - np.asarray(pred)), w)


def MSE(
    pred: npt.NDArray[np.float64],
    true: npt.NDArray[np.float64],
    w: Optional[npt.ArrayLike] = None,
) -> float:
    """
    Mean Squared Error.

    Average squared difference between predictions and true values.
    Lower is better. Penalizes large errors more than MAE.

    Args:
        pred: Predicted values, shape (n_samples,)
        true: True values, shape (n_samples,)
        w: Optional per-observation weights, shape (n_samples,)

    Returns:
        MSE value (float)
    """
    return _weighted_mean((np.asarray(true) - np.asarray(pred)) ** 2, w)


def RMSE(
    pred: npt.NDArray[np.float64],
    true: npt.NDArray[np.float64],
    w: Optional[npt.ArrayLike] = None,
) -> float:
    """
    Root Mean Squared Error.

    Square root of MSE. Same scale as the data.
    Lower is better.
    """
    return float(np.sqrt(MSE(pred, true, w)))


def RSE(pred: npt.NDArray[np.float64], true: npt.NDArray[np.float64]) -> float:
    """
    Root Relative Squared Error.

    Measures prediction error relative to the variance of the true values.
    Lower is better.
    """
    true = np.asarray(true, dtype=float)
    numerator = np.sqrt(np.sum((true - np.asarray(pred)) ** 2))
    denominator = np.sqrt(np.sum((true - true.mean()) ** 2))
    return float(numerator / denominator)


class Measure(ABC):
    """Base class for measures used by the tuner.

    Measures carry no parameters, so two measures compare equal when they
    are of the same type.
    """

    name: str = "measure"
    orientation: str = "loss"
    supports_weights: bool = False

    @abstractmethod
    def __call__(
        self, yhat: npt.ArrayLike, y: npt.ArrayLike, w: Optional[npt.ArrayLike] = None
    ) -> float:
        """Value of the measure for predictions *yhat* against targets *y*."""

    def __eq__(self, other: Any) -> bool:
        return type(self) is type(other)

    def __hash__(self) -> int:
        return hash(type(self).__name__)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class MeanAbsoluteError(Measure):
    name = "mae"
    orientation = "loss"
    supports_weights = True

    def __call__(self, yhat, y, w=None) -> float:
        return MAE(yhat, y, w)


class MeanSquaredError(Measure):
    name = "mse"
    orientation = "loss"
    supports_weights = True

    def __call__(self, yhat, y, w=None) -> float:
        return MSE(yhat, y, w)


class RootMeanSquaredError(Measure):
    name = "rmse"
    orientation = "loss"
    supports_weights = True

    def __call__(self, yhat, y, w=None) -> float:
        return RMSE(yhat, y, w)


class RootRelativeSquaredError(Measure):
    name = "rse"
    orientation = "loss"

    def __call__(self, yhat, y, w=None) -> float:
        return RSE(yhat, y)


class RSquared(Measure):
    """Coefficient of determination; higher is better."""

    name = "r2"
    orientation = "score"

    def __call__(self, yhat, y, w=None) -> float:
        return 1.0 - RSE(yhat, y) ** 2


MEASURES = {
    m.name: m
    for m in (
        MeanAbsoluteError,
        MeanSquaredError,
        RootMeanSquaredError,
        RootRelativeSquaredError,
        RSquared,
    )
}


def get_measure(name: str) -> Measure:
    """Instantiate a measure from its short name (e.g. ``"rmse"``).

    Raises:
        KeyError: If *name* is not a known measure.
    """
    try:
        return MEASURES[name]()
    except KeyError:
        raise KeyError(f"Unknown measure '{name}'. Valid: {sorted(MEASURES)}") from None


def as_measure_list(measure: Union[None, Measure, str, Sequence[Any]]) -> List[Measure]:
    """Normalise a measure specification into a list of :class:`Measure`."""
    if measure is None:
        return []
    if isinstance(measure, (Measure, str)):
        measure = [measure]
    return [get_measure(m) if isinstance(m, str) else m for m in measure]


def orientation_sign(measure: Measure) -> float:
    """``+1`` for losses and ``-1`` for scores, so smaller is always better.

    Plain callables without an ``orientation`` attribute count as losses.
    """
    return -1.0 if getattr(measure, "orientation", "loss") == "score" else 1.0
