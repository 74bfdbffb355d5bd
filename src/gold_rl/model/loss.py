"""Loss functions selectable from configuration."""

from __future__ import annotations

import enum
from typing import Callable

import jax
import jax.numpy as jnp
import optax

LossFn = Callable[[jax.Array, jax.Array], jax.Array]

_EPS = 1e-7


class Loss(enum.Enum):
    MSE = "mse"
    CROSS_ENTROPY = "cross_entropy"
    HUBER = "huber"


def mse(pred: jax.Array, target: jax.Array) -> jax.Array:
    return jnp.mean((pred - target) ** 2)


def cross_entropy(pred: jax.Array, target: jax.Array) -> jax.Array:
    """Categorical cross-entropy on probabilities (e.g. a softmax output)."""
    probs = jnp.clip(pred, _EPS, 1.0 - _EPS)
    return -jnp.mean(jnp.sum(target * jnp.log(probs), axis=-1))


def huber(pred: jax.Array, target: jax.Array) -> jax.Array:
    return jnp.mean(optax.losses.huber_loss(pred, target, delta=1.0))


_LOSSES: dict[Loss, LossFn] = {
    Loss.MSE: mse,
    Loss.CROSS_ENTROPY: cross_entropy,
    Loss.HUBER: huber,
}


def loss_fn(kind: Loss) -> LossFn:
    """Return the pure ``(pred, target) -> scalar`` function for *kind*."""
    return _LOSSES[kind]
