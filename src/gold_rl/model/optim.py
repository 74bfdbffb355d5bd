"""Optax optimizers selectable from configuration."""

from __future__ import annotations

import enum

import optax


class Optimizer(enum.Enum):
    ADAM = "adam"
    RMSPROP = "rmsprop"
    SGD = "sgd"


def make_optimizer(
    kind: Optimizer,
    learning_rate: float,
    max_grad_norm: float | None = None,
) -> optax.GradientTransformation:
    """Build the optax transformation for *kind*.

    When *max_grad_norm* is set, gradients are clipped by global norm
    before the optimizer update.
    """
    if kind is Optimizer.ADAM:
        tx = optax.adam(learning_rate)
    elif kind is Optimizer.RMSPROP:
        tx = optax.rmsprop(learning_rate)
    elif kind is Optimizer.SGD:
        tx = optax.sgd(learning_rate)
    else:
        raise ValueError(f"Unknown optimizer {kind!r}")
    if max_grad_norm is None:
        return tx
    return optax.chain(optax.clip_by_global_norm(max_grad_norm), tx)
