"""Grid — exhaustive search over the Cartesian product of ranges.

The whole grid is returned by the first :meth:`Grid.generate` call; the
search loop evaluates what the budget allows and buffers the rest, so a
resumed search continues exactly where the previous one stopped.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from tunekit.search.base import TuningStrategy
from tunekit.search.candidate import Candidate
from tunekit.search.history import History
from tunekit.search.ranges import with_resolutions
from tunekit.utils.helpers import fresh_generator

logger = logging.getLogger(__name__)


@dataclass
class Grid(TuningStrategy):
    """Grid search.

    Attributes:
        resolution: Points per numeric range (``(range, resolution)``
            tuples in the tuner's ``range`` override it per range).
        shuffle: Evaluate grid points in random order.
        rng: Seed or generator used when shuffling.
    """

    resolution: int = 10
    shuffle: bool = False
    rng: Any = None

    def clean(self) -> str:
        if self.resolution < 1:
            self.resolution = 10
            return "resolution must be positive. Resetting to resolution=10. "
        return ""

    def _points(self, range: Any) -> Tuple[List[str], List[Tuple[Any, ...]]]:
        pairs = with_resolutions(range, self.resolution)
        fields = [r.field for r, _ in pairs]
        axes = [r.iterator(res) for r, res in pairs]
        return fields, list(itertools.product(*axes))

    def setup(self, model: Any, range: Any, n: int, verbosity: int) -> Dict[str, Any]:
        fields, points = self._points(range)
        if self.shuffle:
            order = fresh_generator(self.rng).permutation(len(points))
            points = [points[i] for i in order]
        if verbosity > 1:
            logger.info("Grid of %d points over %s", len(points), fields)
        return {"fields": fields, "points": points, "emitted": False}

    def generate(
        self,
        model: Any,
        history: History,
        state: Dict[str, Any],
        n_remaining: int,
        verbosity: int,
    ) -> Tuple[List[Any], Dict[str, Any]]:
        if state["emitted"]:
            return [], state
        fields = state["fields"]
        candidates = [
            Candidate.annotated(model.clone(**dict(zip(fields, point))), point)
            for point in state["points"]
        ]
        return candidates, {**state, "emitted": True}

    def default_budget(self, range: Any) -> int:
        return len(self._points(range)[1])

    def summary(self, history: History, state: Dict[str, Any]) -> Dict[str, Any]:
        entries = history or []
        return {
            "grid_size": len(state["points"]),
            "plotting": {
                "parameter_names": list(state["fields"]),
                "parameter_values": [list(e.annotation) for e in entries],
                "measurements": [e.measurement[0] for e in entries],
            },
        }
