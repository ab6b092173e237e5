"""Base tuning-strategy interface and report container.

Every candidate-generation strategy (explicit lists, grids, random
search, ...) implements :class:`TuningStrategy` so the search loop can
drive it uniformly.  The loop treats the strategy's state as opaque: it
only passes the value returned by one call into the next.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from tunekit.search.history import History
from tunekit.search.selection import NaiveSelection, SelectionHeuristic

DEFAULT_BUDGET = 10


@dataclass
class TuningReport:
    """Outcome of a tuning run.

    Attributes:
        best_model: Configuration of the best entry (unfitted).
        best_history_entry: User-visible form of the best entry.
        best_report: Training report of the model refitted on all data,
            or ``None`` when refitting was skipped.
        history: User-visible form of every entry, in evaluation order.
        summary: Strategy-specific report fields.
    """

    best_model: Any
    best_history_entry: Dict[str, Any]
    best_report: Optional[Dict[str, Any]]
    history: List[Dict[str, Any]] = field(default_factory=list)
    summary: Dict[str, Any] = field(default_factory=dict)

    @property
    def n_evaluated(self) -> int:
        return len(self.history)

    def to_frame(self) -> pd.DataFrame:
        """One row per history entry: hyperparameters then measurements.

        Measurement columns are named after the measures (``"rmse"``,
        ``"r2"``, ...).
        """
        rows = []
        for record in self.history:
            config = record["configuration"]
            row: Dict[str, Any] = {"model": type(config).__name__}
            if hasattr(config, "params"):
                row.update(config.params())
            for m, value in zip(record["measure"], record["measurement"]):
                row[getattr(m, "name", repr(m))] = value
            rows.append(row)
        return pd.DataFrame(rows)


class TuningStrategy(ABC):
    """Abstract base class for candidate-generation strategies.

    Subclasses must implement :meth:`setup` and :meth:`generate`; the other
    hooks have sensible defaults.
    """

    @abstractmethod
    def setup(self, model: Any, range: Any, n: int, verbosity: int) -> Any:
        """Build the initial generator state for a fresh search.

        Args:
            model: Base configuration that candidates are derived from.
            range: Strategy-specific search domain.
            n: Total evaluation budget.
            verbosity: Verbosity level.

        Returns:
            Opaque state handed to the first :meth:`generate` call.
        """

    @abstractmethod
    def generate(
        self,
        model: Any,
        history: History,
        state: Any,
        n_remaining: int,
        verbosity: int,
    ) -> Tuple[List[Any], Any]:
        """Propose the next batch of candidates.

        Strategies should return at most *n_remaining* candidates but may
        return more; the surplus is buffered and evaluated later.  An
        empty batch signals that the strategy is exhausted.

        Returns:
            ``(candidates, new_state)``.  Candidates are configurations or
            :class:`~tunekit.search.candidate.Candidate` objects.
        """

    def default_budget(self, range: Any) -> int:
        """Number of evaluations used when the tuner is given no ``n``."""
        return DEFAULT_BUDGET

    def extras(self, history: History, state: Any, evaluation: Any) -> Dict[str, Any]:
        """Extra fields stored on the entry for *evaluation*."""
        return {}

    def summary(self, history: History, state: Any) -> Dict[str, Any]:
        """Strategy-specific fields added to the final report."""
        return {}

    def supports(self, heuristic: SelectionHeuristic) -> bool:
        """Whether *heuristic* can be used with this strategy."""
        return isinstance(heuristic, NaiveSelection)

    def clean(self) -> str:
        """Normalise invalid settings in place.

        Returns:
            A message describing what was changed (empty if nothing).
        """
        return ""
