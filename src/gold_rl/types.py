"""Core type definitions for gold_rl.

Experience containers are NamedTuples: immutable once recorded and,
once stacked, plain JAX pytrees.
"""

from __future__ import annotations

from typing import Any, NamedTuple, TypeAlias

import chex

# ---------------------------------------------------------------------------
# Scalar / array type aliases
# ---------------------------------------------------------------------------
Observation: TypeAlias = chex.Array
Action: TypeAlias = int
Shape: TypeAlias = tuple[int, ...]

Params: TypeAlias = Any  # equinox model pytree
OptState: TypeAlias = Any  # optax optimizer state pytree


# ---------------------------------------------------------------------------
# Experience containers
# ---------------------------------------------------------------------------
class Outcome(NamedTuple):
    """Result of one ``Environment.step`` call."""

    observation: chex.Array
    reward: float
    done: bool


class Event(NamedTuple):
    """A single (state, action, outcome) transition."""

    state: chex.Array
    action: Action
    outcome: Outcome


class EventBatch(NamedTuple):
    """Stacked events with a leading batch dimension.

    Fields:
        states:      (B, *obs_shape) float32
        actions:     (B,) int32
        rewards:     (B,) float32
        next_states: (B, *obs_shape) float32
        dones:       (B,) float32, 1.0 where the episode ended
        indices:     (B,) store slots the rows came from
        weights:     (B,) importance weights (all ones for uniform sampling)
    """

    states: chex.Array
    actions: chex.Array
    rewards: chex.Array
    next_states: chex.Array
    dones: chex.Array
    indices: chex.Array
    weights: chex.Array


class LearnBatch(NamedTuple):
    """Supervised batch consumed by ``Policy.learn``.

    ``inputs`` has shape ``(B, *input_shape)`` and ``targets`` matches the
    policy output ``(B, n_outputs)``.
    """

    inputs: chex.Array
    targets: chex.Array


class Metrics(NamedTuple):
    """Metrics returned by one learn step."""

    loss: float
    q_mean: float
    epsilon: float
