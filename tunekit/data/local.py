"""Helpers for loading or generating regression data.

Provides a CSV reader (via pandas) and a deterministic synthetic
regression generator, both returning a :class:`Dataset`.
"""

from __future__ import annotations

import os
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from tunekit.data.base import Dataset


def load_csv(
    path: str,
    target: str,
    features: Optional[Sequence[str]] = None,
    weights: Optional[str] = None,
) -> Dataset:
    """Read a CSV file into a :class:`Dataset`.

    Args:
        path: Path to the CSV file.
        target: Name of the target column.
        features: Feature columns; defaults to every remaining column.
        weights: Optional column holding training weights.

    Raises:
        FileNotFoundError: If *path* does not exist.
        KeyError: If a named column is missing.
    """
    if not os.path.isfile(path):
        raise FileNotFoundError(f"CSV file not found: {path}")
    frame = pd.read_csv(path)
    missing = [c for c in [target, weights, *(features or [])] if c and c not in frame]
    if missing:
        raise KeyError(f"Columns {missing} not found in {path}")
    if features is None:
        features = [c for c in frame.columns if c not in (target, weights)]
    w = frame[weights].to_numpy(dtype=float) if weights else None
    return Dataset(frame[list(features)], frame[target].to_numpy(dtype=float), w)


def synthetic_regression(
    n_rows: int = 200,
    n_features: int = 3,
    noise: float = 0.1,
    seed: int = 0,
) -> Dataset:
    """Linear target with Gaussian noise.

    Coefficients are ``1, 2, ..., n_features`` so results are easy to
    check by eye.
    """
    rng = np.random.default_rng(seed)
    X = rng.normal(size=(n_rows, n_features))
    coef = np.arange(1, n_features + 1, dtype=float)
    y = X @ coef + noise * rng.normal(size=n_rows)
    return Dataset(X, y)
