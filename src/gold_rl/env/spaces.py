"""Action and observation spaces.

Spaces only describe what the agent may send and receive: the number of
discrete actions, and the shape and bounds of observations.
"""

from __future__ import annotations

import equinox as eqx
import numpy as np


class Discrete(eqx.Module):
    """Actions ``0, 1, ..., n-1``."""

    n: int = eqx.field(static=True)

    def __check_init__(self) -> None:
        if self.n < 1:
            raise ValueError(f"Discrete needs n >= 1, got {self.n}")

    def contains(self, action: int) -> bool:
        return 0 <= int(action) < self.n


class Box(eqx.Module):
    """Observations of a fixed *shape* with every entry in ``[low, high]``."""

    low: float = eqx.field(static=True)
    high: float = eqx.field(static=True)
    shape: tuple[int, ...] = eqx.field(static=True, converter=tuple)

    def __check_init__(self) -> None:
        if self.low > self.high:
            raise ValueError(f"Box low {self.low} exceeds high {self.high}")

    def contains(self, x: np.ndarray) -> bool:
        x = np.asarray(x)
        return x.shape == self.shape and bool(np.all((x >= self.low) & (x <= self.high)))
