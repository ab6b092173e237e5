"""Runtime layer — evaluation, dispatch, search loop and the tuner."""

from tunekit.runtime.dispatcher import assemble_entries
from tunekit.runtime.evaluation import EvaluationContext, PerformanceEvaluation, evaluate_candidate
from tunekit.runtime.finalizer import MetaState, finalize, load_meta_state, save_meta_state
from tunekit.runtime.resources import CPU1, CPUProcesses, CPUThreads
from tunekit.runtime.search_loop import build
from tunekit.runtime.spec import TuningSpec
from tunekit.runtime.tuned_model import TunedModel

__all__ = [
    "CPU1",
    "CPUProcesses",
    "CPUThreads",
    "EvaluationContext",
    "MetaState",
    "PerformanceEvaluation",
    "TunedModel",
    "TuningSpec",
    "assemble_entries",
    "build",
    "evaluate_candidate",
    "finalize",
    "load_meta_state",
    "save_meta_state",
]
