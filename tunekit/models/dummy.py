"""ConstantRegressor — summary-statistic baseline.

This model serves two purposes:

1. **Testing baseline** — exercises the full tuning pipeline (strategy →
   evaluation → history → finalisation) with negligible compute.
2. **Model contract reference** — demonstrates the minimal contract every
   tunable model must satisfy.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import numpy as np

from tunekit.models.base import Model


@dataclass
class ConstantRegressor(Model):
    """Predicts one training-set statistic for every row.

    Attributes:
        statistic: ``"mean"``, ``"median"`` or ``"quantile"``.
        quantile: Quantile level used when ``statistic == "quantile"``.
    """

    statistic: str = "mean"
    quantile: float = 0.5

    default_measure = "rmse"
    supports_weights = True

    def __post_init__(self) -> None:
        if self.statistic not in ("mean", "median", "quantile"):
            raise ValueError(
                f"ConstantRegressor: unknown statistic '{self.statistic}'"
            )
        self.value_: Optional[float] = None

    def fit(self, X: Any, y: Any, w: Optional[Any] = None) -> "ConstantRegressor":
        y = np.asarray(y, dtype=float)
        if self.statistic == "mean":
            self.value_ = float(np.average(y, weights=w))
        elif self.statistic == "median":
            self.value_ = float(np.median(y))
        else:
            self.value_ = float(np.quantile(y, self.quantile))
        return self

    def predict(self, X: Any) -> np.ndarray:
        if self.value_ is None:
            raise RuntimeError("ConstantRegressor must be fitted before predict()")
        return np.full(len(X), self.value_)

    def fitted_params(self) -> Dict[str, Any]:
        return {"value": self.value_}
