"""LoggerInterface — what a :class:`TunedModel` reports while it searches.

A tuner given ``exp_logger=...`` calls the logger once per new history
entry and once per saved meta-state:

* :meth:`LoggerInterface.log_metrics` with the entry's aggregated
  measurements, keyed by measure name;
* :meth:`LoggerInterface.log_params` with the entry's hyperparameters;
* :meth:`LoggerInterface.log_artifact` with the path of a meta-state
  written by :meth:`TunedModel.save_meta_state`.

Steps are 1-based history positions, so a resumed search continues the
numbering of the search it extends instead of restarting at 1.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class LoggerInterface(ABC):
    """Sink for per-entry tuning records.

    Subclasses must implement :meth:`log_metrics` and :meth:`log_artifact`.
    """

    @abstractmethod
    def log_metrics(self, step: int, metrics: Dict[str, float]) -> None:
        """Record the measurements of history entry *step*.

        Args:
            step: 1-based position of the entry in the history.
            metrics: Measure name (``"rmse"``, ``"r2"``, ...) → value
                averaged over the resampling folds.
        """

    @abstractmethod
    def log_artifact(
        self, path: str, metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        """Record a saved meta-state.

        Args:
            path: File written by :meth:`TunedModel.save_meta_state`.
            metadata: Run facts at save time, e.g. ``{"n_evaluated": 12}``.
        """

    def log_params(self, step: int, params: Dict[str, Any]) -> None:
        """Record the hyperparameters of history entry *step*.

        Only called for configurations exposing ``params()``; a no-op
        unless overridden.
        """

    def finish(self) -> None:
        """Close the session once no further search will be logged.

        A no-op unless the backend needs explicit teardown.
        """
