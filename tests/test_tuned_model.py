"""Tests for TunedModel: validation, fitting, resumption and persistence."""

from __future__ import annotations

import pickle

import numpy as np
import pytest

from stubs import ScoredModel, TokenRandomSearch
from tunekit.data.resampling import CV, Holdout
from tunekit.errors import MetaStateError
from tunekit.loggers import LocalFileLogger
from tunekit.models import KNNRegressor, RidgeRegressor
from tunekit.runtime.resources import CPU1, CPUProcesses, CPUThreads
from tunekit.runtime.tuned_model import TunedModel
from tunekit.search.ranges import NumericRange
from tunekit.search.selection import NaiveSelection
from tunekit.search.strategies import Explicit, Grid, RandomSearch
from tunekit.utils.measures import MeanAbsoluteError, RootMeanSquaredError


def _lambdas(history) -> list:
    return [e.configuration.lambda_ for e in history]


def _token(tuned: TunedModel) -> str:
    return tuned.meta_state.state["token"]


class TestClean:
    def test_defaults(self, lambda_range) -> None:
        tuned = TunedModel(model=RidgeRegressor(), range=lambda_range)
        assert tuned.tuning == Grid()
        assert isinstance(tuned.resampling, Holdout)
        assert tuned.measure == [RootMeanSquaredError()]
        assert isinstance(tuned.selection_heuristic, NaiveSelection)
        assert tuned.acceleration == CPU1()
        assert tuned.acceleration_resampling == CPU1()

    def test_measure_names(self, lambda_range) -> None:
        tuned = TunedModel(model=RidgeRegressor(), range=lambda_range, measure=["mae", "rmse"])
        assert tuned.measure == [MeanAbsoluteError(), RootMeanSquaredError()]

    def test_missing_model(self, lambda_range) -> None:
        with pytest.raises(ValueError, match="No model"):
            TunedModel(range=lambda_range)

    def test_missing_range(self) -> None:
        with pytest.raises(ValueError, match="range"):
            TunedModel(model=RidgeRegressor())

    def test_no_default_measure(self, lambda_range) -> None:
        with pytest.raises(ValueError, match="default measure"):
            TunedModel(model=ScoredModel("a", 1.0), range=lambda_range)

    def test_negative_budget(self, lambda_range) -> None:
        with pytest.raises(ValueError):
            TunedModel(model=RidgeRegressor(), range=lambda_range, n=-1)

    def test_repairs_are_reported(self, lambda_range, caplog) -> None:
        tuned = TunedModel(
            model=RidgeRegressor(), range=lambda_range, repeats=0, tuning=Grid(resolution=0)
        )
        assert tuned.repeats == 1
        assert tuned.tuning.resolution == 10
        assert "repeats=1" in caplog.text
        assert "resolution=10" in caplog.text

    def test_nested_processes_warn_only(self, lambda_range, caplog) -> None:
        tuned = TunedModel(
            model=RidgeRegressor(), range=lambda_range,
            acceleration=CPUProcesses(2), acceleration_resampling=CPUProcesses(2),
        )
        assert "generally suboptimal" in caplog.text
        assert tuned.acceleration == CPUProcesses(2)
        assert tuned.acceleration_resampling == CPUProcesses(2)

    def test_threads_over_processes_warn(self, lambda_range, caplog) -> None:
        TunedModel(
            model=RidgeRegressor(), range=lambda_range,
            acceleration=CPUThreads(2), acceleration_resampling=CPUProcesses(2),
        )
        assert "not recommended" in caplog.text

    def test_weights_with_unweighted_measure(self, lambda_range, caplog) -> None:
        TunedModel(
            model=RidgeRegressor(), range=lambda_range, measure=["rmse", "r2"],
            weights=np.ones(10),
        )
        assert "ignore observation weights" in caplog.text

    def test_budget_defaults_to_strategy(self, lambda_range) -> None:
        tuned = TunedModel(model=RidgeRegressor(), range=lambda_range, tuning=Grid(resolution=4))
        assert tuned.budget() == 4
        tuned.n = 7
        assert tuned.budget() == 7


class TestFit:
    @pytest.fixture
    def tuned(self, regression_data, lambda_range, cv3) -> TunedModel:
        return TunedModel(
            model=RidgeRegressor(), range=lambda_range, tuning=Grid(resolution=5),
            resampling=cv3, measure=["rmse", "mae"],
        ).fit(regression_data.X, regression_data.y, verbosity=0)

    def test_report(self, tuned) -> None:
        report = tuned.report
        assert report.n_evaluated == 5
        scores = [record["measurement"][0] for record in report.history]
        best = report.history[int(np.argmin(scores))]["configuration"]
        assert report.best_model == best
        assert report.summary["grid_size"] == 5
        assert list(report.to_frame().columns) == ["model", "lambda_", "fit_intercept", "rmse", "mae"]

    def test_predict(self, tuned, regression_data) -> None:
        yhat = tuned.predict(regression_data.X)
        assert yhat.shape == (len(regression_data),)
        np.testing.assert_allclose(yhat, tuned.fitresult.predict(regression_data.X))

    def test_fitted_params(self, tuned) -> None:
        params = tuned.fitted_params()
        assert params["best_model"] == tuned.report.best_model
        assert set(params["best_fitted_params"]) == {"coef", "intercept"}

    def test_training_losses(self, tuned) -> None:
        losses = tuned.training_losses()
        assert len(losses) == 5
        assert all(b <= a for a, b in zip(losses, losses[1:]))
        assert losses[-1] == pytest.approx(min(r["measurement"][0] for r in tuned.report.history))

    def test_unfitted(self, lambda_range) -> None:
        tuned = TunedModel(model=RidgeRegressor(), range=lambda_range)
        assert tuned.training_losses() is None
        assert tuned.report is None
        with pytest.raises(RuntimeError):
            tuned.predict(np.zeros((1, 3)))

    def test_without_training(self, regression_data, lambda_range) -> None:
        tuned = TunedModel(
            model=RidgeRegressor(), range=lambda_range, tuning=Grid(resolution=3), train_best=False
        ).fit(regression_data.X, regression_data.y, verbosity=0)
        assert tuned.report.best_report is None
        assert tuned.fitted_params()["best_fitted_params"] is None
        with pytest.raises(RuntimeError, match="train_best"):
            tuned.predict(regression_data.X)

    def test_budget_larger_than_grid(self, regression_data, lambda_range, caplog) -> None:
        tuned = TunedModel(
            model=RidgeRegressor(), range=lambda_range, tuning=Grid(resolution=3), n=8
        ).fit(regression_data.X, regression_data.y, verbosity=0)
        assert tuned.report.n_evaluated == 3
        assert "Only 3 (of 8) models evaluated" in caplog.text

    def test_explicit_without_model(self, regression_data, cv3) -> None:
        models = [RidgeRegressor(lambda_=1e3), RidgeRegressor(lambda_=1e-3), KNNRegressor(K=3)]
        tuned = TunedModel(tuning=Explicit(), range=models, resampling=cv3)
        assert tuned.model is models[0]
        tuned.fit(regression_data.X, regression_data.y, verbosity=0)
        assert [r["configuration"] for r in tuned.report.history] == models
        assert tuned.report.best_model == RidgeRegressor(lambda_=1e-3)

    def test_weighted_measures(self, weighted_data, lambda_range) -> None:
        tuned = TunedModel(
            model=RidgeRegressor(), range=lambda_range, tuning=Grid(resolution=3),
            weights=weighted_data.w,
        ).fit(weighted_data.X, weighted_data.y, weighted_data.w, verbosity=0)
        plain = TunedModel(
            model=RidgeRegressor(), range=lambda_range, tuning=Grid(resolution=3),
        ).fit(weighted_data.X, weighted_data.y, weighted_data.w, verbosity=0)
        assert [r["measurement"] for r in tuned.report.history] != [
            r["measurement"] for r in plain.report.history
        ]

    @pytest.mark.parametrize("acceleration", [CPUThreads(3), CPUProcesses(2)])
    def test_backends_agree(self, regression_data, lambda_range, cv3, acceleration) -> None:
        runs = []
        for resource in (CPU1(), acceleration):
            tuned = TunedModel(
                model=RidgeRegressor(), range=lambda_range, tuning=Grid(resolution=6),
                resampling=cv3, acceleration=resource,
            ).fit(regression_data.X, regression_data.y, verbosity=0)
            runs.append([(r["configuration"], r["measurement"]) for r in tuned.report.history])
        assert runs[0] == runs[1]


class TestResume:
    def _grid_tuner(self, lambda_range, n) -> TunedModel:
        return TunedModel(
            model=RidgeRegressor(), range=lambda_range, tuning=Grid(resolution=5), n=n
        )

    def test_extends_history(self, regression_data, lambda_range) -> None:
        tuned = self._grid_tuner(lambda_range, 3).fit(regression_data.X, regression_data.y, verbosity=0)
        first = list(tuned.meta_state.history)
        assert len(tuned.meta_state.buffer) == 2

        starts = []
        tuned.register_callback("on_batch_end", lambda entries, start: starts.append(start))
        tuned.n = 5
        tuned.fit(regression_data.X, regression_data.y, verbosity=0)

        history = tuned.meta_state.history
        assert len(history) == 5
        assert all(a is b for a, b in zip(history, first))
        assert starts == [3]
        assert len(tuned.meta_state.buffer) == 0

    def test_matches_single_run(self, regression_data, lambda_range) -> None:
        at_once = self._grid_tuner(lambda_range, 5).fit(regression_data.X, regression_data.y, verbosity=0)
        stepwise = self._grid_tuner(lambda_range, 2).fit(regression_data.X, regression_data.y, verbosity=0)
        stepwise.n = 5
        stepwise.fit(regression_data.X, regression_data.y, verbosity=0)
        assert _lambdas(stepwise.meta_state.history) == _lambdas(at_once.meta_state.history)

    def test_random_search_continues_stream(self, regression_data, lambda_range) -> None:
        def tuner(n):
            return TunedModel(
                model=RidgeRegressor(), range=lambda_range, tuning=RandomSearch(rng=11), n=n
            )

        at_once = tuner(6).fit(regression_data.X, regression_data.y, verbosity=0)
        stepwise = tuner(3).fit(regression_data.X, regression_data.y, verbosity=0)
        stepwise.n = 6
        stepwise.fit(regression_data.X, regression_data.y, verbosity=0)
        assert _lambdas(stepwise.meta_state.history) == _lambdas(at_once.meta_state.history)

    def _token_tuner(self, lambda_range, n) -> TunedModel:
        return TunedModel(
            model=RidgeRegressor(), range=lambda_range, tuning=TokenRandomSearch(rng=5), n=n
        )

    def test_same_search_keeps_state(self, regression_data, lambda_range) -> None:
        tuned = self._token_tuner(lambda_range, 3).fit(regression_data.X, regression_data.y, verbosity=0)
        token = _token(tuned)
        tuned.n = 4
        tuned.fit(regression_data.X, regression_data.y, verbosity=0)
        assert _token(tuned) == token
        assert len(tuned.meta_state.history) == 4

    def test_smaller_budget_starts_over(self, regression_data, lambda_range) -> None:
        tuned = self._token_tuner(lambda_range, 4).fit(regression_data.X, regression_data.y, verbosity=0)
        token = _token(tuned)
        tuned.n = 2
        tuned.fit(regression_data.X, regression_data.y, verbosity=0)
        assert _token(tuned) != token
        assert len(tuned.meta_state.history) == 2

    def test_other_setting_starts_over(self, regression_data, lambda_range) -> None:
        tuned = self._token_tuner(lambda_range, 3).fit(regression_data.X, regression_data.y, verbosity=0)
        token = _token(tuned)
        tuned.resampling = CV(nfolds=3)
        tuned.n = 5
        tuned.fit(regression_data.X, regression_data.y, verbosity=0)
        assert _token(tuned) != token
        assert len(tuned.meta_state.history) == 5

    def test_changed_range_starts_over(self, regression_data, lambda_range) -> None:
        tuned = self._token_tuner(lambda_range, 3).fit(regression_data.X, regression_data.y, verbosity=0)
        token = _token(tuned)
        tuned.range = NumericRange("lambda_", lower=1e-2, upper=1e2, scale="log")
        tuned.fit(regression_data.X, regression_data.y, verbosity=0)
        assert _token(tuned) != token

    def test_force(self, regression_data, lambda_range) -> None:
        tuned = self._token_tuner(lambda_range, 3).fit(regression_data.X, regression_data.y, verbosity=0)
        token = _token(tuned)
        tuned.fit(regression_data.X, regression_data.y, verbosity=0, force=True)
        assert _token(tuned) != token

    def test_new_data_starts_over(self, regression_data, lambda_range) -> None:
        tuned = self._token_tuner(lambda_range, 3).fit(regression_data.X, regression_data.y, verbosity=0)
        token = _token(tuned)
        tuned.n = 4
        tuned.fit(regression_data.X, regression_data.y + 1.0, verbosity=0)
        assert _token(tuned) != token
        assert len(tuned.meta_state.history) == 4

    def test_restore_from_disk(self, tmp_path, regression_data, lambda_range) -> None:
        first = self._grid_tuner(lambda_range, 2).fit(regression_data.X, regression_data.y, verbosity=0)
        path = first.save_meta_state(str(tmp_path / "meta_state.pkl"))

        from tunekit.runtime.finalizer import load_meta_state

        second = self._grid_tuner(lambda_range, 4).restore(load_meta_state(path))
        second.fit(regression_data.X, regression_data.y, verbosity=0)
        assert _lambdas(second.meta_state.history)[:2] == _lambdas(first.meta_state.history)
        assert len(second.meta_state.history) == 4


class TestCallbacksAndLogging:
    def test_unknown_event(self, lambda_range) -> None:
        tuned = TunedModel(model=RidgeRegressor(), range=lambda_range)
        with pytest.raises(KeyError, match="Unknown event"):
            tuned.register_callback("on_epoch_end", print)

    def test_events(self, regression_data, lambda_range) -> None:
        tuned = TunedModel(model=RidgeRegressor(), range=lambda_range, tuning=Grid(resolution=4))
        batches, reports = [], []
        tuned.register_callback("on_batch_end", lambda entries, start: batches.append((start, len(entries))))
        tuned.register_callback("on_fit_end", lambda report: reports.append(report))
        tuned.fit(regression_data.X, regression_data.y, verbosity=0)
        assert batches == [(0, 4)]
        assert reports == [tuned.report]

    def test_exp_logger_steps(self, tmp_path, regression_data, lambda_range) -> None:
        exp_logger = LocalFileLogger(str(tmp_path))
        tuned = TunedModel(
            model=RidgeRegressor(), range=lambda_range, tuning=Grid(resolution=5), n=3,
            measure=["rmse", "mae"], exp_logger=exp_logger,
        )
        tuned.fit(regression_data.X, regression_data.y, verbosity=0)
        tuned.n = 5
        tuned.fit(regression_data.X, regression_data.y, verbosity=0)

        metrics = exp_logger.read_metrics()
        assert [m["step"] for m in metrics] == [1, 2, 3, 4, 5]
        assert set(metrics[0]) == {"step", "rmse", "mae"}
        params = exp_logger.read_params()
        assert [p["lambda_"] for p in params] == pytest.approx(_lambdas(tuned.meta_state.history))

    def test_meta_state_artifact(self, tmp_path, regression_data, lambda_range) -> None:
        run_dir = tmp_path / "run"
        tuned = TunedModel(
            model=RidgeRegressor(), range=lambda_range, tuning=Grid(resolution=2),
            exp_logger=LocalFileLogger(str(run_dir)),
        ).fit(regression_data.X, regression_data.y, verbosity=0)
        tuned.save_meta_state(str(tmp_path / "meta_state.pkl"))
        assert (run_dir / "meta_state.pkl").is_file()
        assert (run_dir / "meta_state.pkl.meta.json").read_text().strip() == '{"n_evaluated": 2}'


class TestPersistence:
    def test_save_and_load(self, tmp_path, regression_data, lambda_range) -> None:
        tuned = TunedModel(model=RidgeRegressor(), range=lambda_range, tuning=Grid(resolution=3))
        tuned.register_callback("on_fit_end", lambda report: None)
        tuned.fit(regression_data.X, regression_data.y, verbosity=0)
        path = tuned.save(str(tmp_path / "tuned.pkl"))

        loaded = TunedModel.load(path)
        np.testing.assert_allclose(loaded.predict(regression_data.X), tuned.predict(regression_data.X))
        assert loaded._callbacks == {"on_batch_end": [], "on_fit_end": []}
        assert len(tuned._callbacks["on_fit_end"]) == 1

    def test_load_wrong_payload(self, tmp_path) -> None:
        path = tmp_path / "other.pkl"
        path.write_bytes(pickle.dumps([1, 2, 3]))
        with pytest.raises(MetaStateError):
            TunedModel.load(str(path))

    def test_snapshot_is_detached(self, lambda_range) -> None:
        tuned = TunedModel(model=RidgeRegressor(), range=lambda_range, n=3)
        snap = tuned.snapshot()
        tuned.model.lambda_ = 9.0
        assert snap.model.lambda_ == 1.0
        assert snap.budget() == 3
        assert not hasattr(snap, "_callbacks")
