"""Search loop — drive a strategy until the budget is spent or it runs dry."""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Tuple

from tunekit.runtime.dispatcher import assemble_entries
from tunekit.runtime.evaluation import EvaluationContext
from tunekit.runtime.resources import Resource
from tunekit.search.buffer import ModelBuffer
from tunekit.search.history import History, HistoryEntry, extend_history, history_length

logger = logging.getLogger(__name__)

BatchCallback = Callable[[List[HistoryEntry], int], None]


def build(
    history: History,
    n: int,
    strategy: Any,
    model: Any,
    buffer: ModelBuffer,
    state: Any,
    verbosity: int,
    acceleration: Resource,
    context: EvaluationContext,
    on_batch: Optional[BatchCallback] = None,
) -> Tuple[History, Any]:
    """Grow *history* to *n* entries, or until the strategy is exhausted.

    Buffered candidates are evaluated before the strategy is asked for new
    ones.  When the strategy returns more candidates than the remaining
    budget, the surplus goes to *buffer* for a later call.  The history
    never holds more than *n* entries on return.

    The call is all-or-nothing for *buffer*: it is updated only once every
    batch has been evaluated, so an evaluation error leaves it exactly as
    it was alongside the unchanged *history* and *state* of the caller.

    Args:
        history: Existing history, ``None`` for a fresh search.
        n: Target number of entries.
        strategy: Tuning strategy.
        model: Base configuration passed to the strategy.
        buffer: Surplus candidates; consumed and refilled in place on success.
        state: Generator state.
        verbosity: Verbosity level.
        acceleration: Backend for the evaluation batches.
        context: Evaluation context.
        on_batch: Called as ``on_batch(entries, start_index)`` after each
            batch has been appended.

    Returns:
        ``(history, state)`` after the last batch.
    """
    j = history_length(history)
    pending = buffer.copy()

    def dispatch(batch: List[Any]) -> int:
        nonlocal history
        start = history_length(history)
        delta = assemble_entries(
            batch, context, verbosity, strategy, history, state, acceleration
        )
        history = extend_history(history, delta)
        if on_batch is not None:
            on_batch(delta, start)
        return len(delta)

    if pending.is_ready() and j < n:
        j += dispatch(pending.take_many(n - j))

    while j < n:
        candidates, state = strategy.generate(model, history, state, n - j, verbosity)
        candidates = list(candidates)
        if not candidates:
            if verbosity > -1:
                logger.warning("Only %d (of %d) models evaluated.", j, n)
            break
        if verbosity > 0:
            logger.info("Attempting to evaluate %d models.", min(len(candidates), n - j))
        remaining = n - j
        if len(candidates) > remaining:
            pending.put_many(candidates[remaining:])
            candidates = candidates[:remaining]
        j += dispatch(candidates)

    buffer.replace(pending)
    return history, state
