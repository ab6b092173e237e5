"""Evaluation unit — resampling-based performance estimate of one candidate.

An :class:`EvaluationContext` holds everything that stays fixed during a
search: the data, the resampling plan (materialised once as train / test
row pairs), the measures and the measure weights.  Its ``model``
attribute is swapped for every evaluated configuration, which is why a
context must never be shared between concurrently running workers; use
:meth:`EvaluationContext.clone` instead.
"""

from __future__ import annotations

import copy
import functools
import logging
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

import numpy as np

from tunekit.data.base import Dataset, select_rows
from tunekit.data.resampling import ResamplingStrategy
from tunekit.models.base import fresh_copy
from tunekit.runtime.resources import CPU1, Resource
from tunekit.search.candidate import annotation, configuration
from tunekit.search.history import History, HistoryEntry

logger = logging.getLogger(__name__)


@dataclass
class PerformanceEvaluation:
    """Result of evaluating one configuration.

    Attributes:
        measure: Measures applied.
        measurement: Mean over folds, one value per measure.
        per_fold: Fold values, one list per measure.
    """

    measure: List[Any]
    measurement: List[float]
    per_fold: List[List[float]]


def _evaluate_fold(
    model: Any,
    data: Dataset,
    measures: Sequence[Any],
    weights: Optional[Any],
    pair: Any,
) -> List[float]:
    """Fit a fresh copy of *model* on one train split and score it."""
    train_rows, test_rows = pair
    train = data.subset(train_rows)
    test = data.subset(test_rows)
    w = train.w if getattr(model, "supports_weights", False) else None

    fitted = fresh_copy(model).fit(train.X, train.y, w)
    yhat = fitted.predict(test.X)
    y = np.asarray(test.y, dtype=float)
    measure_w = select_rows(weights, test_rows) if weights is not None else None

    values = []
    for m in measures:
        if measure_w is not None and getattr(m, "supports_weights", False):
            values.append(float(m(yhat, y, measure_w)))
        else:
            values.append(float(m(yhat, y)))
    return values


class EvaluationContext:
    """Fixed evaluation setup plus the configuration currently evaluated.

    Attributes:
        model: Active configuration; replaced by every :meth:`evaluate`.
        resampling: Resampling plan.
        measures: Measures, in report order.
        weights: Optional per-observation measure weights.
        repeats: Number of resampling repetitions.
        acceleration: Resource used to evaluate the folds.
        data: The training data.
    """

    def __init__(
        self,
        model: Any,
        resampling: ResamplingStrategy,
        measures: Sequence[Any],
        data: Dataset,
        weights: Optional[Any] = None,
        repeats: int = 1,
        acceleration: Optional[Resource] = None,
    ) -> None:
        if not measures:
            raise ValueError("EvaluationContext needs at least one measure")
        if weights is not None and len(weights) != len(data):
            raise ValueError(
                f"weights must have one entry per observation: {len(weights)} != {len(data)}"
            )
        self.model = model
        self.resampling = resampling
        self.measures = list(measures)
        self.weights = weights
        self.repeats = repeats
        self.acceleration = acceleration or CPU1()
        self.data = data
        self.pairs = resampling.repeated_pairs(len(data), repeats)

    def evaluate(self, configuration: Any) -> PerformanceEvaluation:
        """Estimate the performance of *configuration*.

        Sets :attr:`model` to *configuration*, then fits and scores a
        fresh copy of it on every train / test pair.
        """
        self.model = configuration
        fold = functools.partial(
            _evaluate_fold, self.model, self.data, self.measures, self.weights
        )
        kind = self.acceleration.kind
        workers = min(self.acceleration.resolve(), len(self.pairs))
        if kind == "threads" and workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                rows = list(pool.map(fold, self.pairs))
        elif kind == "processes" and workers > 1:
            with ProcessPoolExecutor(max_workers=workers) as pool:
                rows = list(pool.map(fold, self.pairs))
        else:
            rows = [fold(pair) for pair in self.pairs]

        per_fold = [[row[i] for row in rows] for i in range(len(self.measures))]
        measurement = [float(np.mean(values)) for values in per_fold]
        return PerformanceEvaluation(list(self.measures), measurement, per_fold)

    def clone(self) -> "EvaluationContext":
        """Independent context sharing the read-only data and plan."""
        other = copy.copy(self)
        other.model = fresh_copy(self.model)
        return other

    def __repr__(self) -> str:
        return (
            f"EvaluationContext(model={type(self.model).__name__}, "
            f"folds={len(self.pairs)}, measures={[getattr(m, 'name', m) for m in self.measures]})"
        )


def evaluate_candidate(
    candidate: Any,
    context: EvaluationContext,
    strategy: Any,
    history: History,
    state: Any,
    verbosity: int,
) -> HistoryEntry:
    """Evaluate one candidate and build its history entry.

    Evaluation errors are not caught; no entry exists for a failed
    candidate.
    """
    config = configuration(candidate)
    evaluation = context.evaluate(config)

    if verbosity > 2:
        params = config.params() if hasattr(config, "params") else config
        logger.info("hyperparameters: %s", params)
    if verbosity > 1:
        logger.info(
            "measurement: %s",
            dict(zip([getattr(m, "name", repr(m)) for m in evaluation.measure],
                     evaluation.measurement)),
        )

    extras = strategy.extras(history, state, evaluation)
    return HistoryEntry(
        configuration=config,
        measure=evaluation.measure,
        measurement=evaluation.measurement,
        per_fold=evaluation.per_fold,
        annotation=annotation(candidate),
        extras=dict(extras),
    )
