"""Pure-JAX environment dynamics.

Built-in simulators are written gymnax-style: every function is pure and
jit-compatible, and state is threaded explicitly::

    env = Catch()
    params = env.default_params()
    obs, state = env.reset(key, params)
    obs, state, reward, done, info = env.step(key, state, action, params)

``FunctionalEnvAdapter`` (see ``gold_rl.env.adapter``) wraps one of these
into the stateful :class:`~gold_rl.env.base.Environment` the agent drives.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import equinox as eqx
import jax

from gold_rl.env.spaces import Box, Discrete


class EnvState(eqx.Module):
    """Base class for environment states (immutable pytrees)."""

    time: jax.Array  # current timestep within the episode


class EnvParams(eqx.Module):
    """Base class for environment parameters.

    Every environment exposes ``max_steps`` so the adapter can report
    the episode horizon.
    """

    max_steps: int = eqx.field(static=True, default=100)


class FunctionalEnv(ABC):
    """Abstract base for pure-JAX environments."""

    @abstractmethod
    def reset(
        self,
        key: jax.Array,
        params: EnvParams,
    ) -> tuple[jax.Array, EnvState]:
        """Reset the environment and return ``(obs, state)``."""
        ...

    @abstractmethod
    def step(
        self,
        key: jax.Array,
        state: EnvState,
        action: jax.Array,
        params: EnvParams,
    ) -> tuple[jax.Array, EnvState, jax.Array, jax.Array, dict[str, Any]]:
        """Advance one timestep.

        Returns:
            ``(obs, state, reward, done, info)`` where *done* merges
            terminated and truncated into a single flag.
        """
        ...

    @abstractmethod
    def default_params(self) -> EnvParams:
        ...

    @abstractmethod
    def observation_space(self, params: EnvParams) -> Box:
        ...

    @abstractmethod
    def action_space(self, params: EnvParams) -> Discrete:
        ...

    def describe(self, state: EnvState, params: EnvParams) -> str:
        """Short human-readable rendering of *state*."""
        return f"{self.name}(t={int(state.time)})"

    @property
    def name(self) -> str:
        return self.__class__.__name__
