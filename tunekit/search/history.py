"""History — the append-only log of evaluated candidates.

A history is modelled as ``Optional[List[HistoryEntry]]``: ``None`` means
no search has produced anything yet, which strategies use to detect their
first call.  All helpers treat ``None`` as the empty prefix, so
``extend_history(None, delta) == delta``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence


@dataclass(frozen=True)
class HistoryEntry:
    """Result of evaluating one candidate.

    Attributes:
        configuration: The evaluated configuration.
        measure: Measures applied, in evaluation order.
        measurement: Aggregated value per measure.
        per_fold: Per-fold values, one list per measure.
        annotation: Strategy-private annotation carried by the candidate.
        extras: Strategy-specific fields computed when the entry was made.
    """

    configuration: Any
    measure: List[Any]
    measurement: List[float]
    per_fold: List[List[float]]
    annotation: Any = None
    extras: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self, include_annotation: bool = False) -> Dict[str, Any]:
        """Flatten the entry into a plain dictionary.

        The strategy annotation is internal and is only included on
        request.  Strategy extras are merged in as top-level keys.

        Args:
            include_annotation: Whether to keep the ``"annotation"`` key.

        Returns:
            Dictionary with ``"configuration"``, ``"measure"``,
            ``"measurement"``, ``"per_fold"`` and any extras.
        """
        record: Dict[str, Any] = {
            "configuration": self.configuration,
            "measure": list(self.measure),
            "measurement": list(self.measurement),
            "per_fold": [list(v) for v in self.per_fold],
        }
        if include_annotation:
            record["annotation"] = self.annotation
        for key, value in self.extras.items():
            record.setdefault(key, value)
        return record


History = Optional[List[HistoryEntry]]


def history_length(history: History) -> int:
    """Number of entries in *history* (``0`` when absent)."""
    if history is None:
        return 0
    return len(history)


def extend_history(history: History, delta: Sequence[HistoryEntry]) -> List[HistoryEntry]:
    """Return a new history with *delta* appended.

    Neither argument is mutated.
    """
    if history is None:
        return list(delta)
    return list(history) + list(delta)


def user_history(history: History) -> List[Dict[str, Any]]:
    """User-visible view of *history* with annotations stripped."""
    if history is None:
        return []
    return [entry.to_dict() for entry in history]
