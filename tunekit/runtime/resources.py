"""Compute resources — which concurrency backend runs a batch of work.

The same three resources configure both the outer axis (evaluating many
candidates) and the inner axis (evaluating the folds of one candidate).
They are passed explicitly down the call chain; nothing is global.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


def available_cpus() -> int:
    """Number of CPUs visible to this process (at least 1)."""
    return os.cpu_count() or 1


class Resource:
    """Base class for compute resources."""

    kind: str = "cpu1"

    def resolve(self) -> int:
        """Number of workers this resource will use."""
        return 1


@dataclass
class CPU1(Resource):
    """Sequential evaluation on the calling thread."""

    kind = "cpu1"


@dataclass
class CPUThreads(Resource):
    """Thread pool.

    Attributes:
        n_threads: Number of threads; ``None`` means one per CPU.
    """

    n_threads: Optional[int] = None
    kind = "threads"

    def resolve(self) -> int:
        return max(1, self.n_threads or available_cpus())


@dataclass
class CPUProcesses(Resource):
    """Process pool.

    Attributes:
        n_workers: Number of worker processes; ``None`` means one per CPU.
    """

    n_workers: Optional[int] = None
    kind = "processes"

    def resolve(self) -> int:
        return max(1, self.n_workers or available_cpus())


RESOURCES = {"cpu1": CPU1, "threads": CPUThreads, "processes": CPUProcesses}


def get_resource(name: str, workers: Optional[int] = None) -> Resource:
    """Build a resource from its short name.

    Raises:
        KeyError: If *name* is unknown.
    """
    if name not in RESOURCES:
        raise KeyError(f"Unknown resource '{name}'. Valid: {sorted(RESOURCES)}")
    if name == "cpu1":
        return CPU1()
    return RESOURCES[name](workers)


def default_resource() -> Resource:
    return CPU1()
