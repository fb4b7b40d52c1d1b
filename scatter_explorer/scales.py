"""Linear and ordinal scales used by the renderer."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Sequence

import numpy as np
from plotly.colors import qualitative

TABLEAU10: tuple[str, ...] = tuple(qualitative.T10)

_E10 = math.sqrt(50)
_E5 = math.sqrt(10)
_E2 = math.sqrt(2)


def tick_increment(start: float, stop: float, count: int) -> float:
    """Step between round ticks, negative for inverse powers of ten.

    Returns ``0`` when the span is empty, not finite, or too small for the
    step to be represented as a float.
    """
    if count <= 0:
        return 0
    step = (stop - start) / count
    if not math.isfinite(step) or step <= 0:
        return 0
    power = math.floor(math.log10(step))
    try:
        error = step / 10.0**power
        if error >= _E10:
            factor = 10
        elif error >= _E5:
            factor = 5
        elif error >= _E2:
            factor = 2
        else:
            factor = 1
        if power >= 0:
            return factor * 10**power
        return -(10.0**-power) / factor
    except (OverflowError, ZeroDivisionError):
        return 0


def nice(start: float, stop: float, count: int = 10) -> tuple[float, float]:
    """Extend ``[start, stop]`` outward to round tick boundaries.

    The domain is left as given when the step never settles.
    """
    original = (float(start), float(stop))
    previous = None
    for _ in range(10):
        step = tick_increment(start, stop, count)
        if step == previous:
            return float(start), float(stop)
        if step > 0:
            start = math.floor(start / step) * step
            stop = math.ceil(stop / step) * step
        elif step < 0:
            start = math.ceil(start * step) / step
            stop = math.floor(stop * step) / step
        else:
            break
        previous = step
    return original


@dataclass
class LinearScale:
    domain: tuple[float, float]
    range: tuple[float, float]
    clamp: bool = True

    @classmethod
    def from_values(
        cls, values: Sequence[float], output: tuple[float, float], count: int = 10
    ) -> "LinearScale":
        """Scale over the niced extent of ``values``; ``(0, 1)`` when empty."""
        if len(values) == 0:
            return cls(domain=(0.0, 1.0), range=output)
        low, high = float(np.min(values)), float(np.max(values))
        return cls(domain=nice(low, high, count), range=output)

    def __call__(self, values):
        d0, d1 = self.domain
        r0, r1 = self.range
        points = np.asarray(values, dtype=float)
        if d1 == d0:
            t = np.full(points.shape, 0.5)
        else:
            t = (points - d0) / (d1 - d0)
        if self.clamp:
            t = np.clip(t, 0.0, 1.0)
        out = r0 + t * (r1 - r0)
        return float(out) if out.ndim == 0 else out


@dataclass
class OrdinalScale:
    """Maps categories to palette swatches, wrapping past the palette length.

    Values outside the domain are appended to it on first lookup.
    """

    domain: list[Any]
    palette: Sequence[str] = TABLEAU10
    _index: dict[Any, int] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        self.domain = list(self.domain)
        for position, value in enumerate(self.domain):
            self._index.setdefault(value, position)

    def __call__(self, value: Any) -> str:
        position = self._index.get(value)
        if position is None:
            position = len(self.domain)
            self.domain.append(value)
            self._index[value] = position
        return self.palette[position % len(self.palette)]
