"""Search layer — candidates, history, buffer, strategies and selection."""

from tunekit.search.base import TuningReport, TuningStrategy
from tunekit.search.buffer import ModelBuffer
from tunekit.search.candidate import Candidate, annotation, as_candidate, configuration
from tunekit.search.history import HistoryEntry, extend_history, history_length
from tunekit.search.ranges import NominalRange, NumericRange
from tunekit.search.selection import NaiveSelection, SelectionHeuristic, training_losses
from tunekit.search.strategies import Explicit, Grid, RandomSearch

__all__ = [
    "Candidate",
    "Explicit",
    "Grid",
    "HistoryEntry",
    "ModelBuffer",
    "NaiveSelection",
    "NominalRange",
    "NumericRange",
    "RandomSearch",
    "SelectionHeuristic",
    "TuningReport",
    "TuningStrategy",
    "annotation",
    "as_candidate",
    "configuration",
    "extend_history",
    "history_length",
    "training_losses",
]
