"""Finalizer — pick the winner, refit it and package the results.

Besides the report, finalisation produces the :class:`MetaState`: the
minimum needed to extend the same search later without re-evaluating
anything.  Meta-states can be written to disk with
:func:`save_meta_state` and restored with :func:`load_meta_state`.
"""

from __future__ import annotations

import logging
import os
import pickle
from dataclasses import dataclass
from typing import Any, Tuple

from tunekit.data.base import Dataset
from tunekit.errors import MetaStateError
from tunekit.models.base import fresh_copy
from tunekit.runtime.evaluation import EvaluationContext
from tunekit.search.base import TuningReport
from tunekit.search.buffer import ModelBuffer
from tunekit.search.history import History, user_history

logger = logging.getLogger(__name__)


@dataclass
class MetaState:
    """Everything a later call needs to resume a search.

    Attributes:
        history: Entries evaluated so far.
        snapshot: Copy of the tuner settings the history was produced with.
        buffer: Generated candidates not yet evaluated.
        state: Generator state after the last batch.
        context: Evaluation context (data, plan, measures).
    """

    history: History
    snapshot: Any
    buffer: ModelBuffer
    state: Any
    context: EvaluationContext


def finalize(
    tuned_model: Any,
    buffer: ModelBuffer,
    history: History,
    state: Any,
    verbosity: int,
    context: EvaluationContext,
    data: Dataset,
) -> Tuple[Any, MetaState, TuningReport]:
    """Select the best entry and assemble the outputs of a search.

    Args:
        tuned_model: The tuner; supplies the heuristic, the strategy and
            the ``train_best`` flag.
        buffer: Model supply buffer after the search.
        history: Complete history.
        state: Final generator state.
        verbosity: Verbosity level.
        context: Evaluation context used by the search.
        data: Full training data.

    Returns:
        ``(fitresult, meta_state, report)``.  *fitresult* is the best
        configuration refitted on *data*, or its unfitted copy when
        ``train_best`` is off.

    Raises:
        EmptyHistoryError: If nothing was evaluated.
    """
    entry = tuned_model.selection_heuristic.best(history)
    best_model = fresh_copy(entry.configuration)

    if tuned_model.train_best:
        if verbosity > 0:
            logger.info("Retraining on all provided data.")
        w = data.w if getattr(best_model, "supports_weights", False) else None
        fitresult = fresh_copy(best_model).fit(data.X, data.y, w)
        best_report = fitresult.report()
    else:
        fitresult = best_model
        best_report = None

    report = TuningReport(
        best_model=best_model,
        best_history_entry=entry.to_dict(),
        best_report=best_report,
        history=user_history(history),
        summary=tuned_model.tuning.summary(history, state),
    )
    meta_state = MetaState(
        history=history,
        snapshot=tuned_model.snapshot(),
        buffer=buffer,
        state=state,
        context=context,
    )
    return fitresult, meta_state, report


def save_meta_state(meta_state: MetaState, path: str) -> str:
    """Pickle *meta_state* to *path* (parent directories are created)."""
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, "wb") as fh:
        pickle.dump(meta_state, fh)
    logger.info("Meta-state saved to %s", path)
    return path


def load_meta_state(path: str) -> MetaState:
    """Restore a meta-state written by :func:`save_meta_state`.

    Raises:
        MetaStateError: If the file does not hold a meta-state.
    """
    try:
        with open(path, "rb") as fh:
            obj = pickle.load(fh)
    except (pickle.UnpicklingError, EOFError, AttributeError) as exc:
        raise MetaStateError(f"Cannot read meta-state from {path}: {exc}") from exc
    if not isinstance(obj, MetaState):
        raise MetaStateError(f"{path} holds a {type(obj).__name__}, not a MetaState")
    return obj
