"""Quick-start demo for tunekit.

This script demonstrates the full pipeline end-to-end:
  Data → Model → Ranges → TunedModel → Report → Resume

Run it with:
    python examples/quick_run.py
"""

from __future__ import annotations

import logging

from tunekit.data import CV, synthetic_regression
from tunekit.loggers import LocalFileLogger
from tunekit.models import RidgeRegressor
from tunekit.runtime import CPUThreads, TunedModel
from tunekit.search import Grid, NumericRange
from tunekit.viz import format_report


def main() -> None:
    """Tune the ridge penalty on synthetic data, then extend the search."""
    logging.basicConfig(level=logging.INFO, format="%(name)s %(message)s")

    # 1. Synthetic regression data (no files required)
    data = synthetic_regression(n_rows=300, n_features=5, noise=0.5, seed=1)

    # 2. Search domain: the ridge penalty on a log scale
    penalty = NumericRange("lambda_", lower=1e-3, upper=1e3, scale="log")

    # 3. Tuner: 20-point grid, 5-fold CV, evaluate 8 models across threads
    tuned = TunedModel(
        model=RidgeRegressor(),
        tuning=Grid(resolution=20),
        resampling=CV(nfolds=5, shuffle=True, rng=0),
        range=penalty,
        measure=["rmse", "mae"],
        n=8,
        acceleration=CPUThreads(4),
        exp_logger=LocalFileLogger(run_dir="artifacts/quick_demo"),
    )

    print("=" * 60)
    print("tunekit — Quick Start Demo")
    print("=" * 60)

    tuned.fit(data.X, data.y)
    print(format_report(tuned.report, top=5))

    # 4. Raise the budget: the 12 buffered grid points are evaluated next
    tuned.n = 20
    tuned.fit(data.X, data.y)
    print()
    print(format_report(tuned.report, top=5))
    print()
    print("Training losses:", [round(v, 4) for v in tuned.training_losses()])


if __name__ == "__main__":
    main()
