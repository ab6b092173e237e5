"""Evaluation dispatcher — run a batch of candidates on one backend.

Whatever the backend, :func:`assemble_entries` returns one history entry
per candidate in input order.  Both parallel backends split the batch
into contiguous chunks and concatenate chunk results in chunk order, so
completion order never leaks into the history.

Progress from worker threads or processes travels over a bounded queue
to a single consumer thread that drives the ``tqdm`` bar.  Signals that
do not fit are dropped; evaluation never waits on the progress bar.
"""

from __future__ import annotations

import logging
import multiprocessing
import queue
import threading
from concurrent.futures import Future, ProcessPoolExecutor, ThreadPoolExecutor
from typing import Any, List, Optional, Sequence

from tqdm import tqdm

from tunekit.runtime.evaluation import EvaluationContext, evaluate_candidate
from tunekit.runtime.resources import CPU1, Resource
from tunekit.search.history import History, HistoryEntry
from tunekit.utils.helpers import partition

logger = logging.getLogger(__name__)

PROGRESS_QUEUE_SIZE = 256


# ----------------------------------------------------------------------
# Progress relay
# ----------------------------------------------------------------------


def _signal_progress(channel: Any) -> None:
    """Post one progress tick, dropping it when the channel is full."""
    try:
        channel.put_nowait(1)
    except queue.Full:
        pass  # drop-new on overflow
    except (EOFError, ConnectionError) as exc:
        # manager already gone; only the bar is affected
        logger.debug("Progress channel unavailable: %s", exc)


class _ProgressRelay:
    """Consumer thread that advances a progress bar from a queue."""

    def __init__(self, channel: Any, total: int, verbosity: int, desc: str) -> None:
        self.channel = channel
        self.bar = tqdm(total=total, desc=desc, disable=verbosity < 1)
        self._thread = threading.Thread(target=self._run, daemon=True)

    def _run(self) -> None:
        while True:
            tick = self.channel.get()
            if tick is None:
                break
            self.bar.update(tick)

    def start(self) -> "_ProgressRelay":
        self._thread.start()
        return self

    def stop(self) -> None:
        self.channel.put(None)
        self._thread.join()
        self.bar.close()


# ----------------------------------------------------------------------
# Workers
# ----------------------------------------------------------------------


def _evaluate_chunk(
    candidates: Sequence[Any],
    context: EvaluationContext,
    strategy: Any,
    history: History,
    state: Any,
    verbosity: int,
    channel: Optional[Any] = None,
) -> List[HistoryEntry]:
    """Evaluate *candidates* in order with one context."""
    entries = []
    for candidate in candidates:
        entries.append(
            evaluate_candidate(candidate, context, strategy, history, state, verbosity)
        )
        if channel is not None:
            _signal_progress(channel)
    return entries


def _gather(futures: List[Future]) -> List[Any]:
    """Results in submission order; the first failure cancels the rest."""
    try:
        return [f.result() for f in futures]
    except BaseException:
        for f in futures:
            f.cancel()
        raise


# ----------------------------------------------------------------------
# Backends
# ----------------------------------------------------------------------


def _assemble_sequential(
    candidates: Sequence[Any],
    context: EvaluationContext,
    verbosity: int,
    strategy: Any,
    history: History,
    state: Any,
) -> List[HistoryEntry]:
    entries = []
    with tqdm(
        total=len(candidates), desc="Evaluating over 1 worker", disable=verbosity < 1
    ) as bar:
        for candidate in candidates:
            entries.append(
                evaluate_candidate(candidate, context, strategy, history, state, verbosity)
            )
            bar.update(1)
    return entries


def _assemble_processes(
    candidates: Sequence[Any],
    context: EvaluationContext,
    verbosity: int,
    strategy: Any,
    history: History,
    state: Any,
    n_workers: int,
) -> List[HistoryEntry]:
    chunks = partition(len(candidates), n_workers)
    if verbosity > 0:
        logger.info("Distributing evaluations among %d workers.", len(chunks))

    with multiprocessing.Manager() as manager:
        channel = manager.Queue(maxsize=PROGRESS_QUEUE_SIZE)
        relay = _ProgressRelay(
            channel, len(candidates), verbosity,
            f"Evaluating over {len(chunks)} workers",
        ).start()
        try:
            with ProcessPoolExecutor(max_workers=len(chunks)) as pool:
                futures = [
                    pool.submit(
                        _evaluate_chunk,
                        [candidates[i] for i in chunk],
                        context, strategy, history, state, verbosity, channel,
                    )
                    for chunk in chunks
                ]
                results = _gather(futures)
        finally:
            relay.stop()

    return [entry for chunk in results for entry in chunk]


def _assemble_threads(
    candidates: Sequence[Any],
    context: EvaluationContext,
    verbosity: int,
    strategy: Any,
    history: History,
    state: Any,
    n_threads: int,
) -> List[HistoryEntry]:
    chunks = partition(len(candidates), n_threads)
    if verbosity > 0:
        logger.info("Distributing evaluations among %d threads.", len(chunks))

    # one context per chunk; chunk 0 keeps the original
    contexts = [context] + [context.clone() for _ in chunks[1:]]
    slots: List[Optional[List[HistoryEntry]]] = [None] * len(chunks)
    channel: "queue.Queue[Optional[int]]" = queue.Queue(maxsize=PROGRESS_QUEUE_SIZE)

    def work(k: int) -> None:
        slots[k] = _evaluate_chunk(
            [candidates[i] for i in chunks[k]],
            contexts[k], strategy, history, state, verbosity, channel,
        )

    relay = _ProgressRelay(
        channel, len(candidates), verbosity, f"Evaluating over {len(chunks)} threads"
    ).start()
    try:
        with ThreadPoolExecutor(max_workers=len(chunks)) as pool:
            _gather([pool.submit(work, k) for k in range(len(chunks))])
    finally:
        relay.stop()

    return [entry for chunk in slots for entry in chunk]


def assemble_entries(
    candidates: Sequence[Any],
    context: EvaluationContext,
    verbosity: int,
    strategy: Any,
    history: History,
    state: Any,
    acceleration: Optional[Resource] = None,
) -> List[HistoryEntry]:
    """Evaluate a batch of candidates and return their entries in order.

    Args:
        candidates: Candidates or bare configurations.
        context: Evaluation context (cloned or pickled per worker).
        verbosity: Verbosity level; ``>= 1`` shows a progress bar.
        strategy: Strategy providing the ``extras`` hook.
        history: History before this batch.
        state: Current generator state.
        acceleration: Backend; defaults to :class:`CPU1`.

    Returns:
        One :class:`HistoryEntry` per candidate, in input order.
    """
    if not candidates:
        return []
    acceleration = acceleration or CPU1()
    workers = min(acceleration.resolve(), len(candidates))

    if acceleration.kind == "processes":
        return _assemble_processes(
            candidates, context, verbosity, strategy, history, state, workers
        )
    if acceleration.kind == "threads" and workers > 1:
        return _assemble_threads(
            candidates, context, verbosity, strategy, history, state, workers
        )
    return _assemble_sequential(candidates, context, verbosity, strategy, history, state)
