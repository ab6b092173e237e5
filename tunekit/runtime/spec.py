"""TuningSpec — serialisable description of a tuning run.

A :class:`TuningSpec` is a plain-data snapshot of every setting that
defines a run: data source, model, strategy, ranges, resampling,
measures and backends.  It is persisted as YAML and turned into live
objects with :meth:`TuningSpec.build`.

Example YAML::

    name: ridge-demo
    data: {source: synthetic, n_rows: 200, n_features: 3, seed: 0}
    model: {name: ridge}
    tuning: {name: grid, params: {resolution: 8}}
    range:
      - {field: lambda_, lower: 0.001, upper: 100.0, scale: log}
    resampling: {name: cv, params: {nfolds: 5}}
    measure: [rmse, mae]
    n: 8
    acceleration: {name: threads, workers: 4}
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

import yaml

from tunekit.data.base import Dataset
from tunekit.data.local import load_csv, synthetic_regression
from tunekit.data.resampling import RESAMPLING
from tunekit.models import MODELS
from tunekit.runtime.resources import get_resource
from tunekit.runtime.tuned_model import TunedModel
from tunekit.search.ranges import NominalRange, NumericRange
from tunekit.search.selection import NaiveSelection
from tunekit.search.strategies import STRATEGIES


def _lookup(registry: Dict[str, Any], name: str, kind: str) -> Any:
    if name not in registry:
        raise KeyError(f"Unknown {kind} '{name}'. Valid: {sorted(registry)}")
    return registry[name]


def build_model(cfg: Dict[str, Any]) -> Any:
    """Instantiate ``{name: ..., params: {...}}`` from the model registry."""
    return _lookup(MODELS, cfg["name"], "model")(**cfg.get("params", {}))


def build_range(cfg: Dict[str, Any]) -> Any:
    """A nominal range when *cfg* has ``values``, a numeric one otherwise.

    A ``resolution`` key yields a ``(range, resolution)`` pair for grids.
    """
    cfg = dict(cfg)
    resolution = cfg.pop("resolution", None)
    if "values" in cfg:
        r: Any = NominalRange(**cfg)
    else:
        r = NumericRange(**cfg)
    return (r, resolution) if resolution is not None else r


@dataclass
class TuningSpec:
    """Specification for a single tuning run.

    Attributes:
        name: Human-readable run identifier.
        range: Range configurations, or model configurations for the
            ``explicit`` strategy.
        model: Model configuration (registry name + hyperparameters);
            unused by the ``explicit`` strategy.
        data: Data source configuration (``synthetic`` or ``csv``).
        tuning: Strategy configuration.
        resampling: Resampling configuration.
        measure: Measure names.
        selection_weights: Optional per-measure selection weights.
        n: Evaluation budget.
        repeats: Resampling repetitions.
        train_best: Refit the best model on all data.
        acceleration: Backend across models (``name`` + ``workers``).
        acceleration_resampling: Backend across folds.
        output_dir: Where logs and meta-states are written.
        metadata: Free-form metadata (notes, tags, etc.).
    """

    name: str
    range: List[Dict[str, Any]]
    model: Optional[Dict[str, Any]] = None
    data: Dict[str, Any] = field(default_factory=lambda: {"source": "synthetic"})
    tuning: Dict[str, Any] = field(default_factory=lambda: {"name": "grid"})
    resampling: Dict[str, Any] = field(default_factory=lambda: {"name": "holdout"})
    measure: List[str] = field(default_factory=list)
    selection_weights: Optional[List[float]] = None
    n: Optional[int] = None
    repeats: int = 1
    train_best: bool = True
    acceleration: Dict[str, Any] = field(default_factory=lambda: {"name": "cpu1"})
    acceleration_resampling: Dict[str, Any] = field(default_factory=lambda: {"name": "cpu1"})
    output_dir: str = "artifacts/tuning"
    metadata: Optional[Dict[str, Any]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the spec to a plain dictionary.

        Returns:
            Serialisable dictionary.
        """
        return asdict(self)

    def to_yaml(self, path: str) -> None:
        """Write the spec to a YAML file.

        Args:
            path: Target file path.
        """
        with open(path, "w", encoding="utf-8") as fh:
            yaml.dump(self.to_dict(), fh, default_flow_style=False, sort_keys=False)

    @classmethod
    def from_yaml(cls, path: str) -> "TuningSpec":
        """Load a :class:`TuningSpec` from a YAML file.

        Args:
            path: Path to the YAML file.

        Returns:
            Reconstructed :class:`TuningSpec`.
        """
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        return cls(**data)

    # ------------------------------------------------------------------
    # Construction of live objects
    # ------------------------------------------------------------------

    def load_data(self) -> Dataset:
        """Build the training data described by :attr:`data`."""
        cfg = dict(self.data)
        source = cfg.pop("source", "synthetic")
        if source == "synthetic":
            return synthetic_regression(**cfg)
        if source == "csv":
            return load_csv(**cfg)
        raise ValueError(f"Unknown data source '{source}'. Valid: ['csv', 'synthetic']")

    def build(self, **overrides: Any) -> TunedModel:
        """Construct the :class:`TunedModel` this spec describes.

        Keyword arguments override the constructed settings (e.g. an
        ``exp_logger``).
        """
        tuning_name = self.tuning.get("name", "grid")
        tuning = _lookup(STRATEGIES, tuning_name, "strategy")(**self.tuning.get("params", {}))
        if tuning_name == "explicit":
            model = None
            range_: Any = [build_model(m) for m in self.range]
        else:
            if self.model is None:
                raise ValueError(f"TuningSpec '{self.name}': no model configured")
            model = build_model(self.model)
            range_ = [build_range(r) for r in self.range]

        resampling_cls = _lookup(RESAMPLING, self.resampling.get("name", "holdout"), "resampling")
        settings: Dict[str, Any] = dict(
            model=model,
            tuning=tuning,
            resampling=resampling_cls(**self.resampling.get("params", {})),
            measure=list(self.measure) or None,
            range=range_,
            selection_heuristic=NaiveSelection(self.selection_weights),
            train_best=self.train_best,
            repeats=self.repeats,
            n=self.n,
            acceleration=get_resource(
                self.acceleration.get("name", "cpu1"), self.acceleration.get("workers")
            ),
            acceleration_resampling=get_resource(
                self.acceleration_resampling.get("name", "cpu1"),
                self.acceleration_resampling.get("workers"),
            ),
        )
        settings.update(overrides)
        return TunedModel(**settings)
