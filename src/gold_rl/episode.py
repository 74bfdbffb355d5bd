"""Lazy episode / timestep iteration for the training loop.

``make_episodes(n)`` yields exactly *n* ``Episode`` handles.  Each
episode yields at most ``max_steps`` ``Timestep`` handles, once::

    for episode in make_episodes(10, tracker=tracker):
        score = episode.track_scalar("score", 0, Aggregator.MAX)
        for timestep in episode.steps(env.max_steps()):
            outcome = env.step(action)
            timestep.observe(outcome)
            score.inc(outcome.reward)
            if outcome.done:
                break

Per-episode state machine::

    CREATED -> RUNNING -> COMPLETED   (a timestep observed done)
                       -> TRUNCATED   (max_steps reached, or the loop was
                                       left without observing done)

An episode whose timesteps were never requested is logged as CREATED.

The timestep sequence stops by itself right after a timestep that
observed ``done``, so the ``break`` above is optional.  When the
sequence ends the episode flushes its tracked scalars through
``log()``; the flush happens at most once, and any later ``inc`` on
the episode's scalar handles raises ``RuntimeError``.  Record per-step
values inside the timestep loop.

A timestep counts as consumed when the loop asks for the next one, or
when the loop is left after the timestep observed an outcome.  The
``on_step`` hook runs once per consumed timestep; the agent uses it to
advance its exploration schedule.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Generator, Iterator
from typing import Any

from gold_rl.metrics import log_episode
from gold_rl.track import Aggregator, TrackedScalar, Tracker
from gold_rl.types import Outcome

logger = logging.getLogger(__name__)


class EpisodeStatus(enum.Enum):
    CREATED = "created"
    RUNNING = "running"
    COMPLETED = "completed"
    TRUNCATED = "truncated"


class Timestep:
    """Handle for one step of an episode."""

    def __init__(self, i: int) -> None:
        self.i = i
        self.reward: float | None = None
        self.done = False
        self.observed = False

    def observe(self, outcome: Outcome) -> None:
        """Record the environment outcome for this timestep."""
        self.reward = float(outcome.reward)
        self.done = bool(outcome.done)
        self.observed = True

    def __repr__(self) -> str:
        return f"Timestep(i={self.i}, done={self.done})"


class Episode:
    """One trajectory from reset to termination or truncation."""

    def __init__(
        self,
        i: int,
        *,
        tracker: Tracker | None = None,
        on_step: Callable[[], Any] | None = None,
    ) -> None:
        self.i = i
        self._tracker = tracker
        self._on_step = on_step
        self._status = EpisodeStatus.CREATED
        self._scalars: dict[str, TrackedScalar] = {}
        self._length = 0
        self._last: Timestep | None = None
        self._steps: Generator[Timestep, None, None] | None = None
        self._record: dict[str, Any] | None = None

    # -- tracking ----------------------------------------------------------

    def track_scalar(
        self,
        name: str,
        initial: float = 0.0,
        aggregator: Aggregator = Aggregator.SUM,
    ) -> TrackedScalar:
        """Register an episode-scoped scalar and return its handle."""
        if self._record is not None:
            raise RuntimeError(f"episode {self.i} is already logged")
        if name in self._scalars:
            raise ValueError(f"scalar {name!r} is already tracked in episode {self.i}")
        scalar = TrackedScalar(name, initial, aggregator)
        self._scalars[name] = scalar
        return scalar

    def scalars(self) -> dict[str, float]:
        return {name: s.value for name, s in self._scalars.items()}

    def log(self) -> None:
        """Flush tracked scalars and close their handles.  Later calls are no-ops."""
        if self._record is not None:
            return
        self._record = {
            "episode": self.i,
            "status": self._status.value,
            "steps": self._length,
            **self.scalars(),
        }
        for scalar in self._scalars.values():
            scalar.close()
        if self._tracker is not None:
            self._tracker.submit(self._record)
        else:
            log_episode(self.i, self._record)

    @property
    def record(self) -> dict[str, Any] | None:
        """The flushed record, or ``None`` before ``log()``."""
        return self._record

    # -- iteration ---------------------------------------------------------

    def steps(self, max_steps: int) -> Iterator[Timestep]:
        """Single-pass sequence of at most *max_steps* timesteps."""
        if self._steps is not None or self._status is not EpisodeStatus.CREATED:
            raise RuntimeError(f"episode {self.i} steps can only be iterated once")
        if max_steps < 1:
            raise ValueError(f"max_steps must be >= 1, got {max_steps}")
        self._steps = self._run(max_steps)
        return self._steps

    def _run(self, max_steps: int) -> Generator[Timestep, None, None]:
        self._status = EpisodeStatus.RUNNING
        try:
            for i in range(max_steps):
                timestep = Timestep(i)
                try:
                    yield timestep
                except GeneratorExit:
                    if timestep.observed:
                        self._consume(timestep)
                    raise
                self._consume(timestep)
                if timestep.done:
                    return
        finally:
            self._finish()

    def _consume(self, timestep: Timestep) -> None:
        self._length = timestep.i + 1
        self._last = timestep
        if self._on_step is not None:
            self._on_step()

    def _finish(self) -> None:
        if self._status is EpisodeStatus.RUNNING:
            if self._last is not None and self._last.done:
                self._status = EpisodeStatus.COMPLETED
            else:
                self._status = EpisodeStatus.TRUNCATED
        self.log()

    def end(self) -> None:
        """Close the timestep sequence (if any) and flush."""
        if self._steps is not None:
            self._steps.close()
        if self._record is None:
            self._finish()

    # -- introspection -----------------------------------------------------

    @property
    def status(self) -> EpisodeStatus:
        return self._status

    @property
    def length(self) -> int:
        """Number of consumed timesteps."""
        return self._length

    def __repr__(self) -> str:
        return f"Episode(i={self.i}, status={self._status.value}, length={self._length})"


def make_episodes(
    n: int,
    *,
    tracker: Tracker | None = None,
    on_step: Callable[[], Any] | None = None,
    start: int = 0,
) -> Iterator[Episode]:
    """Yield exactly *n* episodes, each ended before the next is created."""
    if n < 0:
        raise ValueError(f"number of episodes must be >= 0, got {n}")
    return _episodes(n, tracker, on_step, start)


def _episodes(
    n: int,
    tracker: Tracker | None,
    on_step: Callable[[], Any] | None,
    start: int,
) -> Generator[Episode, None, None]:
    for i in range(start, start + n):
        episode = Episode(i, tracker=tracker, on_step=on_step)
        try:
            yield episode
        finally:
            episode.end()
