"""Exploration-rate schedules.

Two flavours live here:

* ``linear_schedule`` - a pure ``step -> value`` function, safe inside
  ``jax.jit``.
* ``DecaySchedule`` - the stateful epsilon schedule driven by the
  training loop.  Its value is a deterministic function of the
  configuration and the number of ``advance()`` calls; there is no
  randomness and no hidden clock.

Advancement contract: the schedule is advanced exactly once per consumed
timestep, by the episode iterator (see ``gold_rl.episode``).  Action
selection only *reads* ``value()``.

Usage::

    from gold_rl.schedule import DecaySchedule

    eps = DecaySchedule(initial_rate=1.0, decay_rate=0.99)
    eps.value()     # 1.0
    eps.advance()   # 0.99
"""

from __future__ import annotations

import enum
from collections.abc import Callable

import jax.numpy as jnp
import numpy as np

Schedule = Callable[[int | jnp.ndarray], jnp.ndarray]

# Lower bound of DecaySchedule values; keeps a zero floor from being reached.
SMALLEST_RATE = float(np.finfo(np.float64).tiny)


def linear_schedule(
    start: float,
    end: float,
    steps: int,
) -> Schedule:
    """Return a pure function that linearly interpolates from *start* to *end*.

    Parameters
    ----------
    start:
        Value at step 0.
    end:
        Value at step *steps* (and beyond).
    steps:
        Number of steps over which to interpolate.  ``0`` is treated as 1.
    """
    _start = jnp.float32(start)
    _end = jnp.float32(end)
    _steps = jnp.float32(max(steps, 1))

    def _schedule(step: int | jnp.ndarray) -> jnp.ndarray:
        frac = jnp.clip(jnp.float32(step) / _steps, 0.0, 1.0)
        return _start + frac * (_end - _start)

    return _schedule


class DecayMode(enum.Enum):
    EXPONENTIAL = "exponential"
    LINEAR = "linear"


class DecaySchedule:
    """Monotonically non-increasing rate with a floor.

    Parameters
    ----------
    initial_rate:
        Starting value, in ``(0, 1]``.
    decay_rate:
        Multiplicative factor per step for ``EXPONENTIAL`` mode, in
        ``(0, 1]``.  Ignored by ``LINEAR`` mode.
    min_rate:
        Floor, in ``[0, initial_rate]``.  The rate never goes below it.
        A floor of 0 is approached but never reached: the rate stays at
        least ``SMALLEST_RATE``.
    mode:
        ``EXPONENTIAL``: ``rate = max(min_rate, rate * decay_rate)``.
        ``LINEAR``: interpolate from *initial_rate* to *min_rate* over
        *decay_steps* steps.
    decay_steps:
        Horizon for ``LINEAR`` mode.
    """

    def __init__(
        self,
        initial_rate: float = 1.0,
        decay_rate: float = 0.997,
        min_rate: float = 0.0,
        *,
        mode: DecayMode = DecayMode.EXPONENTIAL,
        decay_steps: int = 10_000,
    ) -> None:
        if not 0.0 < initial_rate <= 1.0:
            raise ValueError(f"initial_rate must be in (0, 1], got {initial_rate}")
        if not 0.0 < decay_rate <= 1.0:
            raise ValueError(f"decay_rate must be in (0, 1], got {decay_rate}")
        if not 0.0 <= min_rate <= initial_rate:
            raise ValueError(
                f"min_rate must be in [0, initial_rate={initial_rate}], got {min_rate}"
            )
        if decay_steps < 1:
            raise ValueError(f"decay_steps must be >= 1, got {decay_steps}")
        self.initial_rate = float(initial_rate)
        self.decay_rate = float(decay_rate)
        self.min_rate = float(min_rate)
        self.mode = mode
        self.decay_steps = int(decay_steps)
        self._linear = linear_schedule(self.initial_rate, self.min_rate, self.decay_steps)
        self._rate = self.initial_rate
        self._step = 0

    def value(self) -> float:
        """Current rate."""
        return self._rate

    def advance(self) -> float:
        """Apply one decay step and return the new rate."""
        self._step += 1
        if self.mode is DecayMode.EXPONENTIAL:
            rate = max(self.min_rate, self._rate * self.decay_rate)
        else:
            rate = max(self.min_rate, float(self._linear(self._step)))
        # float32 interpolation must not round upwards past the previous value
        self._rate = max(min(self._rate, rate), SMALLEST_RATE)
        return self._rate

    def reset(self) -> None:
        self._rate = self.initial_rate
        self._step = 0

    @property
    def step(self) -> int:
        """Number of ``advance()`` calls since construction or ``reset()``."""
        return self._step

    def __repr__(self) -> str:
        return (
            f"DecaySchedule(rate={self._rate:.4g}, step={self._step}, "
            f"mode={self.mode.value}, min_rate={self.min_rate})"
        )


def default_decay_schedule(**overrides: object) -> DecaySchedule:
    """Fresh schedule with the stock settings: 1.0 decaying by 0.997 to 0.01.

    Any ``DecaySchedule`` argument can be overridden::

        eps = default_decay_schedule(decay_rate=0.9995)
    """
    kwargs: dict[str, object] = {"initial_rate": 1.0, "decay_rate": 0.997, "min_rate": 0.01}
    kwargs.update(overrides)
    return DecaySchedule(**kwargs)  # type: ignore[arg-type]
