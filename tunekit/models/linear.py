"""Linear and neighbourhood regressors with tunable hyperparameters.

Both models are pure numpy so that tuning runs stay dependency-light and
pickle cleanly into worker processes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import numpy as np

from tunekit.models.base import Model, as_matrix


@dataclass
class RidgeRegressor(Model):
    """L2-regularised least squares, solved in closed form.

    Attributes:
        lambda_: Regularisation strength (``>= 0``).
        fit_intercept: Whether to learn an unpenalised intercept.
    """

    lambda_: float = 1.0
    fit_intercept: bool = True

    default_measure = "rmse"
    supports_weights = True

    def __post_init__(self) -> None:
        if self.lambda_ < 0:
            raise ValueError(f"RidgeRegressor: lambda_ must be >= 0, got {self.lambda_}")
        self.coef_: Optional[np.ndarray] = None
        self.intercept_: float = 0.0
        self._n_train = 0

    def fit(self, X: Any, y: Any, w: Optional[Any] = None) -> "RidgeRegressor":
        A = as_matrix(X)
        y = np.asarray(y, dtype=float)
        w = np.ones(len(y)) if w is None else np.asarray(w, dtype=float)

        if self.fit_intercept:
            x_mean = np.average(A, axis=0, weights=w)
            y_mean = float(np.average(y, weights=w))
        else:
            x_mean = np.zeros(A.shape[1])
            y_mean = 0.0
        Ac = A - x_mean
        yc = y - y_mean

        sw = np.sqrt(w)
        Aw = Ac * sw[:, None]
        gram = Aw.T @ Aw + self.lambda_ * np.eye(A.shape[1])
        self.coef_ = np.linalg.solve(gram, Aw.T @ (yc * sw))
        self.intercept_ = y_mean - float(x_mean @ self.coef_)
        self._n_train = len(y)
        return self

    def predict(self, X: Any) -> np.ndarray:
        if self.coef_ is None:
            raise RuntimeError("RidgeRegressor must be fitted before predict()")
        return as_matrix(X) @ self.coef_ + self.intercept_

    def report(self) -> Dict[str, Any]:
        return {"n_train": self._n_train}

    def fitted_params(self) -> Dict[str, Any]:
        return {"coef": self.coef_, "intercept": self.intercept_}


@dataclass
class KNNRegressor(Model):
    """k-nearest-neighbour regression with Euclidean distance.

    Attributes:
        K: Number of neighbours.
        weights: ``"uniform"`` or ``"distance"`` (inverse-distance voting).
    """

    K: int = 5
    weights: str = "uniform"

    default_measure = "rmse"

    def __post_init__(self) -> None:
        if self.K < 1:
            raise ValueError(f"KNNRegressor: K must be >= 1, got {self.K}")
        if self.weights not in ("uniform", "distance"):
            raise ValueError(f"KNNRegressor: unknown weights '{self.weights}'")
        self.X_: Optional[np.ndarray] = None
        self.y_: Optional[np.ndarray] = None

    def fit(self, X: Any, y: Any, w: Optional[Any] = None) -> "KNNRegressor":
        self.X_ = as_matrix(X)
        self.y_ = np.asarray(y, dtype=float)
        return self

    def predict(self, X: Any) -> np.ndarray:
        if self.X_ is None:
            raise RuntimeError("KNNRegressor must be fitted before predict()")
        Q = as_matrix(X)
        k = min(self.K, len(self.y_))
        dist = np.sqrt(((Q[:, None, :] - self.X_[None, :, :]) ** 2).sum(axis=2))
        idx = np.argsort(dist, axis=1, kind="stable")[:, :k]
        neighbours = self.y_[idx]
        if self.weights == "uniform":
            return neighbours.mean(axis=1)
        d = np.take_along_axis(dist, idx, axis=1)
        inv = 1.0 / np.maximum(d, 1e-12)
        return (neighbours * inv).sum(axis=1) / inv.sum(axis=1)

    def fitted_params(self) -> Dict[str, Any]:
        return {"n_reference": 0 if self.y_ is None else len(self.y_)}
