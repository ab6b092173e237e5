"""Tests for TuningSpec and the text report helpers."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from tunekit.data.resampling import CV, Holdout
from tunekit.models import KNNRegressor, RidgeRegressor
from tunekit.runtime.resources import CPU1, CPUProcesses, CPUThreads
from tunekit.runtime.spec import TuningSpec, build_model, build_range
from tunekit.search.ranges import NominalRange, NumericRange
from tunekit.search.strategies import Explicit, Grid, RandomSearch
from tunekit.utils.measures import MeanAbsoluteError, RootMeanSquaredError
from tunekit.viz.tables import best_measurements, format_metrics_table, format_report, summary_lines

CONFIG_DIR = Path(__file__).resolve().parents[1] / "examples" / "configs"


def _ridge_spec(**overrides) -> TuningSpec:
    settings = dict(
        name="ridge-test",
        data={"source": "synthetic", "n_rows": 50, "n_features": 2, "seed": 3},
        model={"name": "ridge"},
        range=[{"field": "lambda_", "lower": 0.01, "upper": 10.0, "scale": "log", "resolution": 4}],
        resampling={"name": "cv", "params": {"nfolds": 3}},
        measure=["rmse", "mae"],
    )
    settings.update(overrides)
    return TuningSpec(**settings)


class TestRegistryHelpers:
    def test_build_model(self) -> None:
        assert build_model({"name": "knn", "params": {"K": 3}}) == KNNRegressor(K=3)
        with pytest.raises(KeyError, match="Unknown model"):
            build_model({"name": "svm"})

    def test_build_range(self) -> None:
        numeric = build_range({"field": "K", "lower": 1, "upper": 9, "integer": True})
        assert numeric == NumericRange("K", lower=1, upper=9, integer=True)
        nominal = build_range({"field": "weights", "values": ["uniform", "distance"]})
        assert isinstance(nominal, NominalRange)
        r, resolution = build_range({"field": "lambda_", "lower": 0.1, "upper": 1.0, "resolution": 3})
        assert isinstance(r, NumericRange) and resolution == 3


class TestTuningSpec:
    def test_yaml_roundtrip(self, tmp_path) -> None:
        spec = _ridge_spec(metadata={"note": "demo"})
        path = tmp_path / "spec.yaml"
        spec.to_yaml(str(path))
        assert TuningSpec.from_yaml(str(path)) == spec
        assert yaml.safe_load(path.read_text())["name"] == "ridge-test"

    def test_build(self) -> None:
        tuned = _ridge_spec(
            tuning={"name": "grid", "params": {"shuffle": True, "rng": 1}},
            acceleration={"name": "threads", "workers": 2},
        ).build()
        assert tuned.model == RidgeRegressor()
        assert tuned.tuning == Grid(shuffle=True, rng=1)
        assert tuned.resampling == CV(nfolds=3)
        assert tuned.measure == [RootMeanSquaredError(), MeanAbsoluteError()]
        assert tuned.acceleration == CPUThreads(2)
        assert tuned.acceleration_resampling == CPU1()
        assert tuned.budget() == 4

    def test_build_overrides(self) -> None:
        tuned = _ridge_spec().build(n=2, train_best=False)
        assert tuned.n == 2
        assert tuned.train_best is False

    def test_build_explicit(self) -> None:
        spec = TuningSpec(
            name="explicit",
            tuning={"name": "explicit"},
            range=[{"name": "ridge", "params": {"lambda_": 0.1}}, {"name": "knn"}],
        )
        tuned = spec.build()
        assert isinstance(tuned.tuning, Explicit)
        assert tuned.range == [RidgeRegressor(lambda_=0.1), KNNRegressor()]
        assert tuned.model == RidgeRegressor(lambda_=0.1)
        assert isinstance(tuned.resampling, Holdout)

    def test_build_needs_model(self) -> None:
        with pytest.raises(ValueError, match="no model"):
            _ridge_spec(model=None).build()

    def test_unknown_strategy(self) -> None:
        with pytest.raises(KeyError, match="Unknown strategy"):
            _ridge_spec(tuning={"name": "bayes"}).build()

    def test_load_data(self, tmp_path) -> None:
        data = _ridge_spec().load_data()
        assert data.X.shape == (50, 2)

        csv = tmp_path / "d.csv"
        csv.write_text("a,b,t\n1,2,3\n4,5,6\n7,8,9\n")
        data = _ridge_spec(data={"source": "csv", "path": str(csv), "target": "t"}).load_data()
        assert len(data) == 3

        with pytest.raises(ValueError, match="Unknown data source"):
            _ridge_spec(data={"source": "parquet"}).load_data()

    @pytest.mark.parametrize("config", ["ridge_grid.yaml", "knn_random.yaml"])
    def test_shipped_configs_build(self, config) -> None:
        tuned = TuningSpec.from_yaml(str(CONFIG_DIR / config)).build()
        assert isinstance(tuned.tuning, (Grid, RandomSearch))
        assert isinstance(tuned.acceleration, (CPUThreads, CPUProcesses))


class TestTables:
    def test_metrics_table(self) -> None:
        text = format_metrics_table({"rmse": 0.5}, title="Best")
        assert text.splitlines()[0] == "Best"
        assert "0.500000" in text
        assert format_metrics_table({}) == "Metrics: (no metrics)"

    def test_format_report(self) -> None:
        spec = _ridge_spec()
        tuned = spec.build()
        data = spec.load_data()
        tuned.fit(data.X, data.y, verbosity=0)
        report = tuned.report

        assert set(best_measurements(report)) == {"rmse", "mae"}
        text = format_report(report, top=2)
        assert text.startswith("Best model: RidgeRegressor(")
        assert "Evaluated: 4" in text
        # header plus two leaderboard rows
        assert len(text.split("\n\n")[-1].splitlines()) == 3
        assert "grid_size: 4" in summary_lines(report.summary)
