"""Exceptions raised by tunekit."""


class TuningError(Exception):
    """Base class for tunekit errors."""


class EmptyHistoryError(TuningError):
    """Raised when a best entry is requested from an empty history."""


class MetaStateError(TuningError):
    """Raised when a saved meta-state cannot be restored."""


__all__ = ["TuningError", "EmptyHistoryError", "MetaStateError"]
