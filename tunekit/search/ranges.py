"""Hyperparameter ranges — the one-dimensional domains strategies search.

A range names the model field it controls and knows how to enumerate
itself at a given resolution (for grids) and how to draw one value from
a random generator (for random search).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Sequence, Tuple, Union

import numpy as np


@dataclass
class NumericRange:
    """Bounded numeric domain.

    Attributes:
        field: Name of the model hyperparameter.
        lower: Lower bound (inclusive).
        upper: Upper bound (inclusive).
        scale: ``"linear"`` or ``"log"`` spacing.
        integer: Round values to integers.
    """

    field: str
    lower: float
    upper: float
    scale: str = "linear"
    integer: bool = False

    def __post_init__(self) -> None:
        if self.lower > self.upper:
            raise ValueError(
                f"NumericRange '{self.field}': lower ({self.lower}) > upper ({self.upper})"
            )
        if self.scale not in ("linear", "log"):
            raise ValueError(f"NumericRange '{self.field}': unknown scale '{self.scale}'")
        if self.scale == "log" and self.lower <= 0:
            raise ValueError(
                f"NumericRange '{self.field}': log scale needs a positive lower bound"
            )

    def iterator(self, resolution: int) -> List[Any]:
        """Evenly spaced values from ``lower`` to ``upper``.

        Integer ranges drop duplicates created by rounding, so the result
        may be shorter than *resolution*.
        """
        if resolution < 1:
            raise ValueError(f"resolution must be >= 1, got {resolution}")
        if self.scale == "log":
            values = np.exp(np.linspace(np.log(self.lower), np.log(self.upper), resolution))
        else:
            values = np.linspace(self.lower, self.upper, resolution)
        if not self.integer:
            return [float(v) for v in values]
        out: List[Any] = []
        for v in values:
            i = int(round(v))
            if i not in out:
                out.append(i)
        return out

    def sample(self, rng: np.random.Generator) -> Any:
        """Draw one value, uniformly on the range's scale."""
        if self.scale == "log":
            value = float(np.exp(rng.uniform(np.log(self.lower), np.log(self.upper))))
        else:
            value = float(rng.uniform(self.lower, self.upper))
        if self.integer:
            return int(round(value))
        return value


@dataclass
class NominalRange:
    """Finite set of admissible values.

    Attributes:
        field: Name of the model hyperparameter.
        values: Admissible values, in enumeration order.
    """

    field: str
    values: Sequence[Any]

    def __post_init__(self) -> None:
        self.values = list(self.values)
        if not self.values:
            raise ValueError(f"NominalRange '{self.field}': values must not be empty")

    def iterator(self, resolution: int = 0) -> List[Any]:
        """All values; *resolution* is ignored for nominal ranges."""
        return list(self.values)

    def sample(self, rng: np.random.Generator) -> Any:
        return self.values[int(rng.integers(len(self.values)))]


Range = Union[NumericRange, NominalRange]


def as_range_list(range_: Any) -> List[Range]:
    """Normalise a single range or a sequence of ranges into a list."""
    if range_ is None:
        return []
    if isinstance(range_, (NumericRange, NominalRange)):
        return [range_]
    return [r[0] if isinstance(r, tuple) else r for r in range_]


def with_resolutions(range_: Any, default: int) -> List[Tuple[Range, int]]:
    """Pair every range with a resolution.

    Entries may be given as ``(range, resolution)`` tuples to override
    *default* for that range.
    """
    if isinstance(range_, (NumericRange, NominalRange)):
        return [(range_, default)]
    pairs = []
    for item in range_:
        if isinstance(item, tuple):
            pairs.append((item[0], int(item[1])))
        else:
            pairs.append((item, default))
    return pairs
