"""Model — unified abstract interface for every tunable model.

Hyperparameters are declared as dataclass fields, learned state lives in
ordinary attributes set by :meth:`Model.fit`.  That split lets strategies
derive new configurations with :meth:`Model.clone` and lets the tuner
compare configurations field by field.
"""

from __future__ import annotations

import copy
import dataclasses
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import numpy as np


class Model(ABC):
    """Abstract base class for all models.

    Subclasses must be dataclasses and implement :meth:`fit` and
    :meth:`predict`.  The default :meth:`report`, :meth:`fitted_params`
    and :meth:`capabilities` methods can be overridden as needed.

    Attributes:
        default_measure: Short name of the measure used when the tuner is
            given none (see :func:`tunekit.utils.measures.get_measure`).
        supports_weights: Whether :meth:`fit` honours observation weights.
    """

    default_measure: Optional[str] = None
    supports_weights: bool = False

    @abstractmethod
    def fit(self, X: Any, y: Any, w: Optional[Any] = None) -> "Model":
        """Learn from ``(X, y)`` and return ``self``.

        Args:
            X: Feature table, one row per observation.
            y: Target vector.
            w: Optional observation weights; ignored unless
                :attr:`supports_weights` is set.
        """

    @abstractmethod
    def predict(self, X: Any) -> np.ndarray:
        """Predict targets for the rows of *X*."""

    def params(self) -> Dict[str, Any]:
        """Hyperparameters as a ``{name: value}`` dictionary."""
        return {f.name: getattr(self, f.name) for f in dataclasses.fields(self)}

    def clone(self, **overrides: Any) -> "Model":
        """Fresh, unfitted copy with some hyperparameters replaced.

        Raises:
            ValueError: If an override names an unknown hyperparameter.
        """
        unknown = set(overrides) - set(self.params())
        if unknown:
            raise ValueError(
                f"{type(self).__name__} has no hyperparameter(s) {sorted(unknown)}"
            )
        return dataclasses.replace(self, **overrides)

    def report(self) -> Dict[str, Any]:
        """Training report produced by the last :meth:`fit`.

        The default implementation returns an empty dict.
        """
        return {}

    def fitted_params(self) -> Dict[str, Any]:
        """Learned parameters after :meth:`fit`."""
        return {}

    def capabilities(self) -> Dict[str, bool]:
        """Declare what this model supports.

        Returns:
            Dictionary of capability flags.
        """
        return {"deterministic": True, "weights": self.supports_weights}


def as_matrix(X: Any) -> np.ndarray:
    """Features as a 2-D float array (a 1-D input becomes one column)."""
    arr = np.asarray(X, dtype=float)
    if arr.ndim == 1:
        arr = arr.reshape(-1, 1)
    return arr


def fresh_copy(model: Any) -> Any:
    """Unfitted copy of *model* (via :meth:`Model.clone` when available)."""
    if hasattr(model, "clone"):
        return model.clone()
    return copy.deepcopy(model)
