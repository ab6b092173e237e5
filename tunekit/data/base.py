"""Dataset container shared by resampling, evaluation and final training.

A :class:`Dataset` bundles the feature table ``X``, the target ``y`` and
optional per-observation training weights ``w``.  Rows can be selected
by integer index whether the features are numpy arrays or pandas
DataFrames.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

import numpy as np
import pandas as pd


def select_rows(table: Any, rows: Sequence[int]) -> Any:
    """Return the rows of *table* at integer positions *rows*.

    Args:
        table: numpy array, pandas DataFrame / Series, or ``None``.
        rows: Integer row positions.

    Returns:
        An object of the same kind as *table* (``None`` stays ``None``).
    """
    if table is None:
        return None
    if isinstance(table, (pd.DataFrame, pd.Series)):
        return table.iloc[list(rows)]
    return np.asarray(table)[np.asarray(rows, dtype=int)]


class Dataset:
    """Training data for a tuning run.

    Attributes:
        X: Feature table with one row per observation.
        y: Target vector.
        w: Optional training weights, one per observation.
    """

    def __init__(self, X: Any, y: Any, w: Optional[Any] = None) -> None:
        if len(X) != len(y):
            raise ValueError(
                f"X and y have different numbers of rows: {len(X)} != {len(y)}"
            )
        if w is not None and len(w) != len(y):
            raise ValueError(
                f"w must have one weight per observation: {len(w)} != {len(y)}"
            )
        self.X = X
        self.y = y
        self.w = w

    def subset(self, rows: Sequence[int]) -> "Dataset":
        """Return a new :class:`Dataset` restricted to *rows*."""
        return Dataset(
            select_rows(self.X, rows),
            select_rows(self.y, rows),
            select_rows(self.w, rows),
        )

    def __len__(self) -> int:
        return len(self.y)

    def __repr__(self) -> str:
        weighted = ", weighted" if self.w is not None else ""
        return f"Dataset(rows={len(self)}{weighted})"
