"""Agent contract for the episodic training loop.

Any class providing these methods can be driven by the same control
loop (see ``scripts/train.py``); no inheritance required::

    for episode in agent.make_episodes(n):
        ...
        action = agent.action(state)
        agent.remember(event)
        agent.learn()
    agent.wait()
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, Protocol, runtime_checkable

import jax

from gold_rl.episode import Episode
from gold_rl.types import Action, Event


@runtime_checkable
class Agent(Protocol):
    """Structural typing protocol for a learning agent."""

    def action(self, state: jax.Array) -> Action:
        """Choose an action for a single observation.

        Must not advance the exploration schedule.
        """
        ...

    def remember(self, event: Event) -> None:
        """Record one transition."""
        ...

    def learn(self) -> Any:
        """Take one learn step, or do nothing when there is not enough data."""
        ...

    def make_episodes(self, n: int) -> Iterator[Episode]:
        """Yield exactly *n* single-pass episodes."""
        ...

    def view(self) -> None:
        """Log a description of the policy without changing any state."""
        ...

    def wait(self) -> None:
        """Block until all background work has finished."""
        ...
