"""Data layer — datasets, loaders and resampling plans."""

from tunekit.data.base import Dataset, select_rows
from tunekit.data.local import load_csv, synthetic_regression
from tunekit.data.resampling import CV, Holdout, ResamplingStrategy

__all__ = [
    "CV",
    "Dataset",
    "Holdout",
    "ResamplingStrategy",
    "load_csv",
    "select_rows",
    "synthetic_regression",
]
