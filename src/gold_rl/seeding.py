"""PRNG management for gold_rl.

Device-side randomness (parameter initialization) flows through explicit
JAX keys; host-side randomness (exploration draws, replay sampling) uses
seeded ``numpy.random.Generator`` instances.  Nothing touches global RNG
state.

Usage::

    from gold_rl.seeding import make_rng, split_keys

    rng = make_rng(42)
    rng, policy_key, env_key = split_keys(rng, n=2)
"""

from __future__ import annotations

import jax
import numpy as np


def make_rng(seed: int) -> jax.Array:
    """Create a JAX PRNG key from an integer seed."""
    return jax.random.PRNGKey(seed)


def split_key(rng: jax.Array) -> tuple[jax.Array, jax.Array]:
    """Split *rng* into ``(new_rng, subkey)``."""
    return tuple(jax.random.split(rng))  # type: ignore[return-value]


def split_keys(rng: jax.Array, n: int) -> tuple[jax.Array, ...]:
    """Split *rng* into ``n + 1`` keys: ``(new_rng, key_1, ..., key_n)``."""
    return tuple(jax.random.split(rng, n + 1))  # type: ignore[return-value]


def host_rng(seed: int, stream: int = 0) -> np.random.Generator:
    """Return an independent numpy generator for host-side sampling.

    Distinct *stream* values give statistically independent generators
    for the same *seed*, e.g. one for exploration and one for replay.
    """
    return np.random.default_rng([seed, stream])
