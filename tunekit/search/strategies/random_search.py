"""RandomSearch — independent uniform draws from each range."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from tunekit.search.base import TuningStrategy
from tunekit.search.history import History
from tunekit.search.ranges import as_range_list
from tunekit.utils.helpers import fresh_generator


@dataclass
class RandomSearch(TuningStrategy):
    """Random search.

    The generator lives in the search state, so the strategy object itself
    is never mutated and a resumed search continues the same stream.

    Attributes:
        rng: Seed or generator.
    """

    rng: Any = None

    def setup(self, model: Any, range: Any, n: int, verbosity: int) -> Dict[str, Any]:
        ranges = as_range_list(range)
        if not ranges:
            raise ValueError("RandomSearch needs at least one range")
        return {"ranges": ranges, "rng": fresh_generator(self.rng)}

    def generate(
        self,
        model: Any,
        history: History,
        state: Dict[str, Any],
        n_remaining: int,
        verbosity: int,
    ) -> Tuple[List[Any], Dict[str, Any]]:
        rng = copy.deepcopy(state["rng"])
        ranges = state["ranges"]
        candidates = [
            model.clone(**{r.field: r.sample(rng) for r in ranges})
            for _ in range(n_remaining)
        ]
        return candidates, {"ranges": ranges, "rng": rng}
