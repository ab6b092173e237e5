"""Candidate — a configuration proposed by a tuning strategy.

Strategies may hand back bare configurations (typically model instances)
or :class:`Candidate` objects carrying an opaque annotation that only the
strategy itself interprets (e.g. the grid coordinates a point came from).
The accessors below treat both forms uniformly so the scheduler never has
to care which one it received.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Candidate:
    """A configuration plus an optional strategy-private annotation.

    Attributes:
        configuration: The configuration to evaluate (usually a model).
        annotation: Opaque blob attached by the generating strategy.
            ``None`` for plain candidates.
    """

    configuration: Any
    annotation: Any = None

    @classmethod
    def plain(cls, configuration: Any) -> "Candidate":
        """Wrap a configuration without annotation."""
        return cls(configuration=configuration)

    @classmethod
    def annotated(cls, configuration: Any, annotation: Any) -> "Candidate":
        """Wrap a configuration together with a strategy annotation."""
        return cls(configuration=configuration, annotation=annotation)

    @property
    def is_annotated(self) -> bool:
        return self.annotation is not None


def as_candidate(obj: Any) -> Candidate:
    """Normalise a strategy output item into a :class:`Candidate`.

    Args:
        obj: A :class:`Candidate` or a bare configuration.

    Returns:
        ``obj`` itself if it already is a :class:`Candidate`, otherwise a
        plain candidate wrapping it.
    """
    if isinstance(obj, Candidate):
        return obj
    return Candidate.plain(obj)


def configuration(candidate: Any) -> Any:
    """Return the configuration held by *candidate*."""
    if isinstance(candidate, Candidate):
        return candidate.configuration
    return candidate


def annotation(candidate: Any, default: Any = None) -> Any:
    """Return the strategy annotation of *candidate*, or *default*."""
    if isinstance(candidate, Candidate) and candidate.annotation is not None:
        return candidate.annotation
    return default
