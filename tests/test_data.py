"""Unit tests for the data layer: datasets, loaders and resampling."""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from tunekit.data.base import Dataset, select_rows
from tunekit.data.local import load_csv, synthetic_regression
from tunekit.data.resampling import CV, Holdout


class TestDataset:
    def test_length_mismatch(self) -> None:
        with pytest.raises(ValueError):
            Dataset(np.zeros((3, 2)), np.zeros(4))
        with pytest.raises(ValueError):
            Dataset(np.zeros((3, 2)), np.zeros(3), w=np.ones(2))

    def test_subset_numpy(self) -> None:
        ds = Dataset(np.arange(10).reshape(5, 2), np.arange(5), np.arange(5) + 1.0)
        sub = ds.subset([4, 0])
        assert sub.X.tolist() == [[8, 9], [0, 1]]
        assert sub.y.tolist() == [4, 0]
        assert sub.w.tolist() == [5.0, 1.0]
        assert len(sub) == 2

    def test_select_rows_pandas(self) -> None:
        frame = pd.DataFrame({"a": [1, 2, 3]}, index=[10, 20, 30])
        assert select_rows(frame, [2, 0])["a"].tolist() == [3, 1]
        assert select_rows(None, [0]) is None


class TestLoaders:
    def test_synthetic_is_deterministic(self) -> None:
        a = synthetic_regression(n_rows=20, n_features=2, seed=4)
        b = synthetic_regression(n_rows=20, n_features=2, seed=4)
        assert np.array_equal(a.X, b.X)
        assert a.X.shape == (20, 2)

    def test_load_csv(self, tmp_path) -> None:
        path = tmp_path / "data.csv"
        pd.DataFrame({"x1": [1.0, 2.0], "x2": [3.0, 4.0], "y": [5.0, 6.0], "w": [1.0, 2.0]}).to_csv(
            path, index=False
        )
        ds = load_csv(str(path), target="y", weights="w")
        assert list(ds.X.columns) == ["x1", "x2"]
        assert ds.y.tolist() == [5.0, 6.0]
        assert ds.w.tolist() == [1.0, 2.0]

    def test_load_csv_missing(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            load_csv(str(tmp_path / "nope.csv"), target="y")
        path = tmp_path / "data.csv"
        pd.DataFrame({"x": [1.0]}).to_csv(path, index=False)
        with pytest.raises(KeyError):
            load_csv(str(path), target="y")


class TestHoldout:
    def test_split_sizes(self) -> None:
        [(train, test)] = Holdout(fraction_train=0.8).train_test_pairs(10)
        assert train.tolist() == list(range(8))
        assert test.tolist() == [8, 9]

    def test_invalid_fraction(self) -> None:
        with pytest.raises(ValueError):
            Holdout(fraction_train=1.0)

    def test_shuffle_reproducible(self) -> None:
        plan = Holdout(shuffle=True, rng=3)
        assert np.array_equal(plan.train_test_pairs(20)[0][0], plan.train_test_pairs(20)[0][0])


class TestCV:
    def test_folds_cover_all_rows(self) -> None:
        pairs = CV(nfolds=3).train_test_pairs(10)
        assert len(pairs) == 3
        tests = np.concatenate([test for _, test in pairs])
        assert sorted(tests.tolist()) == list(range(10))
        for train, test in pairs:
            assert not set(train) & set(test)

    def test_too_few_rows(self) -> None:
        with pytest.raises(ValueError):
            CV(nfolds=5).train_test_pairs(3)

    def test_invalid_nfolds(self) -> None:
        with pytest.raises(ValueError):
            CV(nfolds=1)

    def test_repeated_pairs(self) -> None:
        plan = CV(nfolds=3, rng=0)
        pairs = plan.repeated_pairs(12, repeats=3)
        assert len(pairs) == 9
        # the first repetition is the unshuffled plan
        assert pairs[0][1].tolist() == [0, 1, 2, 3]
        assert pairs[3][1].tolist() != pairs[6][1].tolist()
        again = plan.repeated_pairs(12, repeats=3)
        assert all(np.array_equal(a[1], b[1]) for a, b in zip(pairs, again))

    def test_equal_plans_compare_equal(self) -> None:
        assert CV(nfolds=4, shuffle=True, rng=1) == CV(nfolds=4, shuffle=True, rng=1)
