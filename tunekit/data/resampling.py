"""Resampling plans — how rows are split into train / test folds.

Every plan implements :meth:`ResamplingStrategy.train_test_pairs`, which
maps a number of rows to a list of ``(train_rows, test_rows)`` integer
index arrays.  Plans are plain dataclasses so that two plans with the
same settings compare equal, which the resume check relies on.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

import numpy as np

from tunekit.utils.helpers import fresh_generator

TrainTestPair = Tuple[np.ndarray, np.ndarray]
Seed = Union[None, int, np.random.Generator]


class ResamplingStrategy(ABC):
    """Abstract resampling plan."""

    shuffle: bool = False
    rng: Seed = None

    @abstractmethod
    def train_test_pairs(self, n_rows: int, rows: Optional[np.ndarray] = None) -> List[TrainTestPair]:
        """Split *n_rows* observations into train / test index pairs.

        Args:
            n_rows: Number of observations.
            rows: Optional row order to split instead of ``arange(n_rows)``;
                used for repeated resampling.

        Returns:
            List of ``(train_rows, test_rows)`` integer arrays.
        """

    def repeated_pairs(self, n_rows: int, repeats: int = 1) -> List[TrainTestPair]:
        """Train / test pairs for *repeats* independent repetitions.

        The first repetition uses the plan as configured.  Each further
        repetition splits a freshly shuffled row order, drawn from a
        generator seeded by ``rng``, so results stay reproducible.
        """
        if repeats <= 1:
            return self.train_test_pairs(n_rows)
        gen = fresh_generator(self.rng)
        first = gen.permutation(n_rows) if self.shuffle else None
        pairs = self.train_test_pairs(n_rows, rows=first)
        for _ in range(repeats - 1):
            pairs.extend(self.train_test_pairs(n_rows, rows=gen.permutation(n_rows)))
        return pairs

    def _row_order(self, n_rows: int, rows: Optional[np.ndarray]) -> np.ndarray:
        if rows is not None:
            return np.asarray(rows, dtype=int)
        if self.shuffle:
            return fresh_generator(self.rng).permutation(n_rows)
        return np.arange(n_rows)


@dataclass
class Holdout(ResamplingStrategy):
    """Single train / test split.

    Attributes:
        fraction_train: Share of rows used for training, in ``(0, 1)``.
        shuffle: Whether to shuffle rows before splitting.
        rng: Seed or generator used when shuffling.
    """

    fraction_train: float = 0.7
    shuffle: bool = False
    rng: Seed = None

    def __post_init__(self) -> None:
        if not 0.0 < self.fraction_train < 1.0:
            raise ValueError(
                f"Holdout: fraction_train must be in (0, 1), got {self.fraction_train}"
            )

    def train_test_pairs(self, n_rows: int, rows: Optional[np.ndarray] = None) -> List[TrainTestPair]:
        order = self._row_order(n_rows, rows)
        n_train = int(round(self.fraction_train * n_rows))
        n_train = min(max(n_train, 1), n_rows - 1)
        return [(order[:n_train], order[n_train:])]


@dataclass
class CV(ResamplingStrategy):
    """K-fold cross-validation over contiguous folds.

    Attributes:
        nfolds: Number of folds (at least 2).
        shuffle: Whether to shuffle rows before folding.
        rng: Seed or generator used when shuffling.
    """

    nfolds: int = 6
    shuffle: bool = False
    rng: Seed = None

    def __post_init__(self) -> None:
        if self.nfolds < 2:
            raise ValueError(f"CV: nfolds must be >= 2, got {self.nfolds}")

    def train_test_pairs(self, n_rows: int, rows: Optional[np.ndarray] = None) -> List[TrainTestPair]:
        if n_rows < self.nfolds:
            raise ValueError(
                f"CV: cannot split {n_rows} rows into {self.nfolds} folds"
            )
        order = self._row_order(n_rows, rows)
        folds = np.array_split(order, self.nfolds)
        pairs = []
        for k, test in enumerate(folds):
            train = np.concatenate([f for i, f in enumerate(folds) if i != k])
            pairs.append((train, test))
        return pairs


RESAMPLING = {"holdout": Holdout, "cv": CV}
