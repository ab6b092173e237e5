"""Models — tunable model contract and numpy reference implementations."""

from tunekit.models.base import Model
from tunekit.models.dummy import ConstantRegressor
from tunekit.models.linear import KNNRegressor, RidgeRegressor

MODELS = {
    "constant": ConstantRegressor,
    "ridge": RidgeRegressor,
    "knn": KNNRegressor,
}

__all__ = ["Model", "ConstantRegressor", "KNNRegressor", "RidgeRegressor", "MODELS"]
