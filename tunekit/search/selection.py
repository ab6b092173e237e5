"""Selection heuristics — how the winning history entry is chosen."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from tunekit.errors import EmptyHistoryError
from tunekit.search.history import History, HistoryEntry
from tunekit.utils.measures import orientation_sign


class SelectionHeuristic(ABC):
    """Picks the best entry of a history and scores each entry as a loss."""

    @abstractmethod
    def losses(self, history: History) -> List[float]:
        """One scalar loss per entry, smaller is better."""

    @abstractmethod
    def best(self, history: History) -> HistoryEntry:
        """The entry judged best.  Must be deterministic given *history*."""


@dataclass
class NaiveSelection(SelectionHeuristic):
    """Choose the entry with the smallest loss.

    Without weights only the first measure counts: it is minimised when it
    is a loss and maximised when it is a score.  With weights, the
    weighted sum of the orientation-signed measurements is minimised.
    Ties go to the earliest entry.

    Attributes:
        weights: Optional weight per measure.
    """

    weights: Optional[Sequence[float]] = None

    def _loss(self, entry: HistoryEntry) -> float:
        signed = [
            orientation_sign(m) * float(v)
            for m, v in zip(entry.measure, entry.measurement)
        ]
        if self.weights is None:
            return signed[0]
        if len(self.weights) != len(signed):
            raise ValueError(
                f"NaiveSelection has {len(self.weights)} weights "
                f"but entries carry {len(signed)} measures"
            )
        return float(np.dot(self.weights, signed))

    def losses(self, history: History) -> List[float]:
        return [self._loss(entry) for entry in history or []]

    def best(self, history: History) -> HistoryEntry:
        if not history:
            raise EmptyHistoryError("Cannot select a best entry from an empty history")
        return history[int(np.argmin(self.losses(history)))]


def training_losses(heuristic: SelectionHeuristic, history: History) -> Optional[List[float]]:
    """Running minimum of the heuristic's losses.

    Position ``i`` holds the smallest loss among entries ``0..i``, so the
    curve never increases.

    Returns:
        A list as long as *history*, or ``None`` when there is no history.
    """
    if not history:
        return None
    losses = np.asarray(heuristic.losses(history), dtype=float)
    return [float(v) for v in np.minimum.accumulate(losses)]
