"""Candidate-generation strategies."""

from tunekit.search.strategies.explicit import Explicit
from tunekit.search.strategies.grid import Grid
from tunekit.search.strategies.random_search import RandomSearch

STRATEGIES = {"explicit": Explicit, "grid": Grid, "random": RandomSearch}

__all__ = ["Explicit", "Grid", "RandomSearch", "STRATEGIES"]
