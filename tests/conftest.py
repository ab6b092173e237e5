"""Shared test fixtures for the tunekit test suite."""

from __future__ import annotations

import numpy as np
import pytest

from tunekit.data.base import Dataset
from tunekit.data.local import synthetic_regression
from tunekit.data.resampling import CV
from tunekit.models import RidgeRegressor
from tunekit.search.ranges import NumericRange


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def regression_data() -> Dataset:
    """Small deterministic linear-regression dataset."""
    return synthetic_regression(n_rows=60, n_features=3, noise=0.3, seed=0)


@pytest.fixture
def weighted_data(regression_data: Dataset) -> Dataset:
    """The regression data with positive training weights."""
    w = np.linspace(0.5, 1.5, len(regression_data))
    return Dataset(regression_data.X, regression_data.y, w)


@pytest.fixture
def ridge_model() -> RidgeRegressor:
    return RidgeRegressor()


@pytest.fixture
def lambda_range() -> NumericRange:
    """Ridge penalty range on a log scale."""
    return NumericRange("lambda_", lower=1e-3, upper=1e3, scale="log")


@pytest.fixture
def cv3() -> CV:
    return CV(nfolds=3)
