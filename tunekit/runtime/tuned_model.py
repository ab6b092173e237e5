"""TunedModel — a model wrapper that tunes its hyperparameters on fit.

:class:`TunedModel` wires a base model, a search strategy, a resampling
plan, measures and a selection heuristic together, then drives the
search loop and finalisation::

    tuned = TunedModel(model=RidgeRegressor(), range=r, tuning=Grid(resolution=5))
    tuned.fit(X, y)                 # evaluates the grid, refits the winner
    tuned.n = 40
    tuned.fit(X, y)                 # extends the same search to 40 models
    tuned.predict(X_new)

A second :meth:`TunedModel.fit` reuses the previous search when only
``n`` changed (and did not shrink) and the data is the same; any other
change starts a fresh search.
"""

from __future__ import annotations

import copy
import logging
import pickle
from typing import Any, Callable, Dict, List, Optional

from tunekit.data.base import Dataset
from tunekit.data.resampling import Holdout
from tunekit.errors import MetaStateError
from tunekit.loggers.interface import LoggerInterface
from tunekit.runtime.evaluation import EvaluationContext
from tunekit.runtime.finalizer import MetaState, finalize, save_meta_state
from tunekit.runtime.resources import CPU1
from tunekit.runtime.search_loop import build
from tunekit.search.base import TuningReport
from tunekit.search.buffer import ModelBuffer
from tunekit.search.history import HistoryEntry
from tunekit.search.selection import NaiveSelection, training_losses
from tunekit.search.strategies.explicit import Explicit
from tunekit.search.strategies.grid import Grid
from tunekit.utils.helpers import is_same_except, values_equal
from tunekit.utils.measures import as_measure_list, get_measure

logger = logging.getLogger(__name__)


class TunedModel:
    """Hyperparameter-tuning wrapper around a model.

    Attributes:
        model: Base model; candidates are derived from it.
        tuning: Search strategy (default :class:`Grid`).
        resampling: Resampling plan (default :class:`Holdout`).
        measure: Measures, the first one drives selection by default.
        weights: Per-observation weights passed to the measures.
        range: Search domain; for :class:`Explicit` a list of models.
        selection_heuristic: Picks the best entry (default
            :class:`NaiveSelection`).
        train_best: Refit the best configuration on all data.
        repeats: Resampling repetitions per evaluation.
        n: Evaluation budget; ``None`` uses the strategy's default.
        acceleration: Backend for evaluating candidates.
        acceleration_resampling: Backend for evaluating folds.
        exp_logger: Optional logger receiving every new entry.
    """

    iteration_parameter = "n"

    SETTINGS = (
        "model",
        "tuning",
        "resampling",
        "measure",
        "weights",
        "range",
        "selection_heuristic",
        "train_best",
        "repeats",
        "n",
        "acceleration",
        "acceleration_resampling",
    )

    def __init__(
        self,
        model: Any = None,
        tuning: Any = None,
        resampling: Any = None,
        measure: Any = None,
        weights: Optional[Any] = None,
        range: Any = None,
        selection_heuristic: Any = None,
        train_best: bool = True,
        repeats: int = 1,
        n: Optional[int] = None,
        acceleration: Any = None,
        acceleration_resampling: Any = None,
        exp_logger: Optional[LoggerInterface] = None,
    ) -> None:
        self.model = model
        self.tuning = tuning
        self.resampling = resampling
        self.measure = measure
        self.weights = weights
        self.range = range
        self.selection_heuristic = selection_heuristic
        self.train_best = train_best
        self.repeats = repeats
        self.n = n
        self.acceleration = acceleration
        self.acceleration_resampling = acceleration_resampling
        self.exp_logger = exp_logger

        self._callbacks: Dict[str, List[Callable[..., Any]]] = {
            "on_batch_end": [],
            "on_fit_end": [],
        }
        self._fitresult: Any = None
        self._meta_state: Optional[MetaState] = None
        self._report: Optional[TuningReport] = None

        message = self.clean()
        if message:
            logger.warning(message)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def clean(self) -> str:
        """Validate and normalise the settings in place.

        Returns:
            Warning text for every setting that was reset or looks
            questionable (empty when all is well).

        Raises:
            ValueError: For settings that cannot be repaired.
        """
        message = ""
        if self.tuning is None:
            self.tuning = Grid()
        if self.model is None and not isinstance(self.tuning, Explicit):
            raise ValueError("No model specified. Specify `model=...`.")
        if self.range is None:
            raise ValueError("You need to specify `range=...`.")
        if self.model is None:
            self.model = next(iter(self.range))
        if self.resampling is None:
            self.resampling = Holdout()

        self.measure = as_measure_list(self.measure)
        if not self.measure:
            default = getattr(self.model, "default_measure", None)
            if default is None:
                raise ValueError(
                    "Unable to deduce a default measure for the model. "
                    "Specify `measure=...`."
                )
            self.measure = [get_measure(default)]

        if self.n is not None and self.n < 0:
            raise ValueError(f"n must be non-negative, got {self.n}")
        if self.repeats < 1:
            message += "repeats must be at least 1. Resetting to repeats=1. "
            self.repeats = 1

        message += self.tuning.clean()

        if self.selection_heuristic is None:
            self.selection_heuristic = NaiveSelection()
        if not self.tuning.supports(self.selection_heuristic):
            message += (
                f"{type(self.tuning).__name__} does not support "
                f"{type(self.selection_heuristic).__name__}. "
                "Resetting to NaiveSelection(). "
            )
            self.selection_heuristic = NaiveSelection()

        if self.acceleration is None:
            self.acceleration = CPU1()
        if self.acceleration_resampling is None:
            self.acceleration_resampling = CPU1()
        outer = self.acceleration.kind
        inner = self.acceleration_resampling.kind
        if outer == "processes" and inner == "processes":
            message += (
                "Process-level parallelism both across models and within "
                "resampling is generally suboptimal. "
            )
        elif outer == "threads" and inner == "processes":
            message += (
                "Thread-level parallelism across models combined with "
                "process-level parallelism within resampling is not recommended. "
            )

        if self.weights is not None:
            unweighted = [
                m.name for m in self.measure if not getattr(m, "supports_weights", False)
            ]
            if unweighted:
                message += f"Measures {unweighted} ignore observation weights. "
        return message.strip()

    def budget(self) -> int:
        """The evaluation budget, resolving ``n=None`` via the strategy."""
        if self.n is not None:
            return self.n
        return self.tuning.default_budget(self.range)

    def snapshot(self) -> "TunedModel":
        """Deep copy of the settings, without fitted state or callbacks."""
        snap = object.__new__(type(self))
        for name in self.SETTINGS:
            setattr(snap, name, copy.deepcopy(getattr(self, name)))
        return snap

    # ------------------------------------------------------------------
    # Callback registration
    # ------------------------------------------------------------------

    def register_callback(self, event: str, fn: Callable[..., Any]) -> None:
        """Register a callback for *event*.

        Args:
            event: ``"on_batch_end"`` (called with ``entries`` and
                ``start``) or ``"on_fit_end"`` (called with ``report``).
            fn: Callable invoked when the event fires.

        Raises:
            KeyError: If *event* is not recognised.
        """
        if event not in self._callbacks:
            raise KeyError(f"Unknown event '{event}'. Valid: {list(self._callbacks)}")
        self._callbacks[event].append(fn)

    def _fire(self, event: str, **kwargs: Any) -> None:
        """Invoke all callbacks registered for *event*."""
        for fn in self._callbacks.get(event, []):
            fn(**kwargs)

    def _on_batch(self, entries: List[HistoryEntry], start: int) -> None:
        if self.exp_logger is not None:
            for offset, entry in enumerate(entries):
                step = start + offset + 1
                self.exp_logger.log_metrics(
                    step,
                    {
                        getattr(m, "name", repr(m)): value
                        for m, value in zip(entry.measure, entry.measurement)
                    },
                )
                config = entry.configuration
                if hasattr(config, "params"):
                    self.exp_logger.log_params(step, config.params())
        self._fire("on_batch_end", entries=entries, start=start)

    # ------------------------------------------------------------------
    # Fitting
    # ------------------------------------------------------------------

    def fit(
        self,
        X: Any,
        y: Any,
        w: Optional[Any] = None,
        verbosity: int = 1,
        force: bool = False,
    ) -> "TunedModel":
        """Tune on ``(X, y)`` and refit the best model.

        When a previous search exists (and *force* is off) the call is
        routed through :meth:`update`, which extends that search if
        possible.

        Args:
            X: Features.
            y: Target.
            w: Optional training weights.
            verbosity: ``-1`` silences warnings, ``0`` is quiet, ``1``
                shows progress, ``2`` and ``3`` log every evaluation.
            force: Always start a fresh search.

        Returns:
            ``self``.
        """
        data = Dataset(X, y, w)
        message = self.clean()
        if message and verbosity > -1:
            logger.warning(message)
        if self._meta_state is not None and not force:
            return self.update(verbosity, self._meta_state, data)
        return self._fresh_fit(data, verbosity)

    def update(self, verbosity: int, old_meta_state: MetaState, data: Dataset) -> "TunedModel":
        """Extend *old_meta_state*'s search, or start over.

        The old search is extended when the settings equal the snapshot
        in every field except ``n``, the budget did not shrink and the
        data is unchanged.
        """
        old = old_meta_state
        n = self.budget()
        n_old = old.snapshot.budget()
        extendable = (
            is_same_except(self, old.snapshot, "n", fields=self.SETTINGS)
            and n >= n_old
            and self._same_data(old.context.data, data)
        )
        if not extendable:
            if verbosity > 0:
                logger.info("Settings changed; starting a fresh search.")
            return self._fresh_fit(data, verbosity)

        if verbosity > 0:
            done = len(old.history or [])
            logger.info("Extending search from %d to %d models.", done, n)
        history, state = build(
            old.history, n, self.tuning, self.model, old.buffer, old.state,
            verbosity, self.acceleration, old.context, on_batch=self._on_batch,
        )
        return self._finalize(old.buffer, history, state, verbosity, old.context, data)

    @staticmethod
    def _same_data(old: Dataset, new: Dataset) -> bool:
        return (
            values_equal(old.X, new.X)
            and values_equal(old.y, new.y)
            and values_equal(old.w, new.w)
        )

    def _fresh_fit(self, data: Dataset, verbosity: int) -> "TunedModel":
        n = self.budget()
        context = EvaluationContext(
            self.model,
            self.resampling,
            self.measure,
            data,
            weights=self.weights,
            repeats=self.repeats,
            acceleration=self.acceleration_resampling,
        )
        state = self.tuning.setup(self.model, self.range, n, verbosity)
        buffer = ModelBuffer()
        history, state = build(
            None, n, self.tuning, self.model, buffer, state,
            verbosity, self.acceleration, context, on_batch=self._on_batch,
        )
        return self._finalize(buffer, history, state, verbosity, context, data)

    def _finalize(self, buffer, history, state, verbosity, context, data) -> "TunedModel":
        self._fitresult, self._meta_state, self._report = finalize(
            self, buffer, history, state, verbosity, context, data
        )
        self._fire("on_fit_end", report=self._report)
        return self

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    def _check_fitted(self) -> None:
        if self._report is None:
            raise RuntimeError("TunedModel must be fitted first; call fit().")

    @property
    def report(self) -> Optional[TuningReport]:
        return self._report

    @property
    def meta_state(self) -> Optional[MetaState]:
        return self._meta_state

    @property
    def fitresult(self) -> Any:
        return self._fitresult

    def predict(self, X: Any) -> Any:
        """Predict with the best model refitted on all data."""
        self._check_fitted()
        if not self.train_best:
            raise RuntimeError("predict() needs train_best=True")
        return self._fitresult.predict(X)

    def fitted_params(self) -> Dict[str, Any]:
        self._check_fitted()
        best_fitted = self._fitresult.fitted_params() if self.train_best else None
        return {"best_model": self._report.best_model, "best_fitted_params": best_fitted}

    def training_losses(self) -> Optional[List[float]]:
        """Running-minimum loss per evaluated model, or ``None`` if unfitted."""
        if self._meta_state is None:
            return None
        return training_losses(self.selection_heuristic, self._meta_state.history)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save_meta_state(self, path: str) -> str:
        """Write the meta-state to *path* and log it as an artifact."""
        self._check_fitted()
        save_meta_state(self._meta_state, path)
        if self.exp_logger is not None:
            self.exp_logger.log_artifact(path, {"n_evaluated": self._report.n_evaluated})
        return path

    def restore(self, meta_state: MetaState) -> "TunedModel":
        """Attach a previously saved meta-state so the next fit can extend it."""
        self._meta_state = meta_state
        return self

    def __getstate__(self) -> Dict[str, Any]:
        state = self.__dict__.copy()
        if "_callbacks" in state:
            state["_callbacks"] = {event: [] for event in state["_callbacks"]}
        return state

    def save(self, path: str) -> str:
        """Pickle the tuner, fitted state included (callbacks are dropped)."""
        with open(path, "wb") as fh:
            pickle.dump(self, fh)
        return path

    @classmethod
    def load(cls, path: str) -> "TunedModel":
        """Load a tuner written by :meth:`save`.

        Raises:
            MetaStateError: If the file does not hold a :class:`TunedModel`.
        """
        try:
            with open(path, "rb") as fh:
                obj = pickle.load(fh)
        except (pickle.UnpicklingError, EOFError, AttributeError) as exc:
            raise MetaStateError(f"Cannot read TunedModel from {path}: {exc}") from exc
        if not isinstance(obj, cls):
            raise MetaStateError(f"{path} holds a {type(obj).__name__}, not a TunedModel")
        return obj

    def __repr__(self) -> str:
        return (
            f"TunedModel(model={self.model!r}, tuning={self.tuning!r}, "
            f"n={self.n}, measure={self.measure})"
        )
