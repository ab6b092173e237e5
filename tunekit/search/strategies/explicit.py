"""Explicit — evaluate a user-supplied list of models in order."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from tunekit.search.base import TuningStrategy
from tunekit.search.history import History


@dataclass
class Explicit(TuningStrategy):
    """Search over an explicit sequence of configurations.

    The ``range`` passed to the tuner is the sequence itself; the base
    model is ignored.
    """

    def setup(self, model: Any, range: Any, n: int, verbosity: int) -> Dict[str, Any]:
        return {"models": list(range), "next": 0}

    def generate(
        self,
        model: Any,
        history: History,
        state: Dict[str, Any],
        n_remaining: int,
        verbosity: int,
    ) -> Tuple[List[Any], Dict[str, Any]]:
        start = state["next"]
        batch = state["models"][start:start + n_remaining]
        return batch, {"models": state["models"], "next": start + len(batch)}

    def default_budget(self, range: Any) -> int:
        return len(list(range))
