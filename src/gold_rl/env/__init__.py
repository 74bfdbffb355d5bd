"""Environments.

Quick start::

    from gold_rl.env import make

    env = make("Catch-v0", seed=0)
    obs = env.reset()
    outcome = env.step(1)
"""

from gold_rl.env.adapter import FunctionalEnvAdapter
from gold_rl.env.base import Environment
from gold_rl.env.catch import Catch, CatchParams, CatchState
from gold_rl.env.functional import EnvParams, EnvState, FunctionalEnv
from gold_rl.env.spaces import Box, Discrete

# ---- Registry ----

_REGISTRY: dict[str, type[FunctionalEnv]] = {
    "Catch-v0": Catch,
}


def register(name: str, cls: type[FunctionalEnv]) -> None:
    """Register a custom pure-JAX environment class under *name*."""
    _REGISTRY[name] = cls


def make(name: str, *, seed: int = 0, params: EnvParams | None = None) -> Environment:
    """Create a ready-to-drive environment by name.

    Built-in names: ``"Catch-v0"``.
    """
    if name not in _REGISTRY:
        available = ", ".join(sorted(_REGISTRY))
        raise KeyError(f"Unknown environment {name!r}. Available: {available}")
    return FunctionalEnvAdapter(_REGISTRY[name](), params, seed=seed)


__all__ = [
    # Base
    "Environment",
    "FunctionalEnv",
    "FunctionalEnvAdapter",
    "EnvState",
    "EnvParams",
    # Spaces
    "Box",
    "Discrete",
    # Environments
    "Catch",
    "CatchParams",
    "CatchState",
    # Registry
    "make",
    "register",
]
