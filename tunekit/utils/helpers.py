"""General-purpose helper utilities used across tunekit modules."""

from __future__ import annotations

import copy
import dataclasses
import os
from datetime import datetime
from typing import Any, Iterable, List

import numpy as np
import pandas as pd


def timestamp_id() -> str:
    """Return a compact timestamp string suitable for directory or run naming.

    Returns:
        A string like ``20260206_143021``.
    """
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def ensure_dir(path: str) -> str:
    """Create *path* (and parents) if it does not exist yet.

    Args:
        path: Directory path to create.

    Returns:
        The same *path* for chaining convenience.
    """
    os.makedirs(path, exist_ok=True)
    return path


def values_equal(a: Any, b: Any) -> bool:
    """Structural equality that tolerates numpy arrays and nested objects.

    Dataclasses and plain objects are compared attribute by attribute, so
    two separately constructed but identically configured models compare
    equal.  Random generators compare by their bit-generator state.
    """
    if a is b:
        return True
    if type(a) is not type(b):
        return False
    if isinstance(a, (pd.DataFrame, pd.Series)):
        return bool(a.equals(b))
    if isinstance(a, np.ndarray):
        return a.shape == b.shape and bool(np.array_equal(a, b))
    if isinstance(a, np.random.Generator):
        return values_equal(a.bit_generator.state, b.bit_generator.state)
    if isinstance(a, (list, tuple)):
        return len(a) == len(b) and all(values_equal(x, y) for x, y in zip(a, b))
    if isinstance(a, dict):
        return a.keys() == b.keys() and all(values_equal(a[k], b[k]) for k in a)
    if dataclasses.is_dataclass(a):
        return all(
            values_equal(getattr(a, f.name), getattr(b, f.name))
            for f in dataclasses.fields(a)
        )
    if hasattr(a, "__dict__") and type(a).__eq__ is object.__eq__:
        return values_equal(vars(a), vars(b))
    return bool(a == b)


def is_same_except(a: Any, b: Any, *exceptions: str, fields: Iterable[str] = ()) -> bool:
    """Whether *a* and *b* agree on every field except those named.

    Args:
        a: First object.
        b: Second object.
        *exceptions: Field names excluded from the comparison.
        fields: Fields to compare.  Defaults to the dataclass fields of
            *a*, or its public instance attributes.

    Returns:
        ``True`` if both objects have the same type and all compared
        fields are :func:`values_equal`.
    """
    if type(a) is not type(b):
        return False
    names: List[str] = list(fields)
    if not names:
        if dataclasses.is_dataclass(a):
            names = [f.name for f in dataclasses.fields(a)]
        else:
            names = [k for k in vars(a) if not k.startswith("_")]
    return all(
        values_equal(getattr(a, name), getattr(b, name))
        for name in names
        if name not in exceptions
    )


def partition(n: int, k: int) -> List[range]:
    """Split ``range(n)`` into at most *k* contiguous, non-empty chunks.

    Chunk sizes differ by at most one and earlier chunks are the larger
    ones, e.g. ``partition(7, 3) == [range(0, 3), range(3, 5), range(5, 7)]``.
    """
    if n <= 0:
        return []
    k = max(1, min(k, n))
    size, extra = divmod(n, k)
    chunks = []
    start = 0
    for i in range(k):
        stop = start + size + (1 if i < extra else 0)
        chunks.append(range(start, stop))
        start = stop
    return chunks


def fresh_generator(rng: Any = None) -> np.random.Generator:
    """Independent generator for *rng* that leaves the argument untouched.

    Args:
        rng: ``None``, an integer seed or a :class:`numpy.random.Generator`.
            Generators are deep-copied so repeated calls replay the same
            stream.
    """
    if isinstance(rng, np.random.Generator):
        return copy.deepcopy(rng)
    return np.random.default_rng(rng)
