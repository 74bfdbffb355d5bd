"""Stateful environment contract consumed by the agent.

The agent only talks to an environment through this interface: it never
inspects transport or simulator internals, and every state change goes
through ``reset`` / ``step``.

Implementations report their own failures as :class:`~gold_rl.errors.EnvError`
(or let them propagate); the training loop does not swallow them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import jax

from gold_rl.env.spaces import Box, Discrete
from gold_rl.types import Action, Outcome


class Environment(ABC):
    """Abstract base for environments driven by the training loop.

    Lifecycle::

        obs = env.reset()
        for _ in range(env.max_steps()):
            outcome = env.step(action)
            if outcome.done:
                break
        env.end()
    """

    observation_space: Box
    action_space: Discrete

    @abstractmethod
    def reset(self) -> jax.Array:
        """Start a new episode and return the initial observation."""
        ...

    @abstractmethod
    def step(self, action: Action) -> Outcome:
        """Apply *action* and return ``Outcome(observation, reward, done)``."""
        ...

    @abstractmethod
    def max_steps(self) -> int:
        """Upper bound on timesteps per episode."""
        ...

    def render(self, target: str = "log") -> None:
        """Render the current state to *target*.  Default: nothing to render."""

    def end(self) -> None:
        """Release resources held by the environment."""

    @property
    def name(self) -> str:
        return self.__class__.__name__
