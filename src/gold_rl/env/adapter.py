"""Drive a pure-JAX environment through the stateful ``Environment`` API."""

from __future__ import annotations

import logging

import jax
import jax.numpy as jnp

from gold_rl.env.base import Environment
from gold_rl.env.functional import EnvParams, EnvState, FunctionalEnv
from gold_rl.errors import EnvError
from gold_rl.seeding import make_rng, split_key
from gold_rl.types import Action, Outcome

logger = logging.getLogger(__name__)


class FunctionalEnvAdapter(Environment):
    """Hold the state and PRNG key of a :class:`FunctionalEnv`.

    ``reset`` and ``step`` are jit-compiled once per adapter.  Failures
    inside the wrapped dynamics are re-raised as :class:`EnvError`.

    Args:
        env: The pure-JAX environment.
        params: Environment parameters; ``env.default_params()`` if ``None``.
        seed: Seed for the adapter's PRNG key.
    """

    def __init__(
        self,
        env: FunctionalEnv,
        params: EnvParams | None = None,
        *,
        seed: int = 0,
    ) -> None:
        self.env = env
        self.params = params if params is not None else env.default_params()
        self.observation_space = env.observation_space(self.params)
        self.action_space = env.action_space(self.params)
        self._rng = make_rng(seed)
        self._state: EnvState | None = None
        self._reset_fn = jax.jit(env.reset)
        self._step_fn = jax.jit(env.step)

    def reset(self) -> jax.Array:
        self._rng, key = split_key(self._rng)
        try:
            obs, self._state = self._reset_fn(key, self.params)
        except Exception as exc:
            raise EnvError(f"{self.name} reset failed: {exc}") from exc
        return obs

    def step(self, action: Action) -> Outcome:
        if self._state is None:
            raise EnvError(f"{self.name}.step called before reset")
        action = int(action)
        if not self.action_space.contains(action):
            raise EnvError(f"action {action} outside Discrete({self.action_space.n})")
        self._rng, key = split_key(self._rng)
        try:
            obs, self._state, reward, done, _info = self._step_fn(
                key, self._state, jnp.int32(action), self.params,
            )
        except Exception as exc:
            raise EnvError(f"{self.name} step failed: {exc}") from exc
        return Outcome(observation=obs, reward=float(reward), done=bool(done))

    def max_steps(self) -> int:
        return int(self.params.max_steps)

    def render(self, target: str = "log") -> None:
        if target != "log":
            raise ValueError(f"{self.name} can only render to 'log', got {target!r}")
        if self._state is None:
            raise EnvError(f"{self.name}.render called before reset")
        logger.info("%s\n%s", self.name, self.env.describe(self._state, self.params))

    def end(self) -> None:
        self._state = None

    @property
    def name(self) -> str:
        return self.env.name
