"""Activation functions as a closed set of immutable equinox modules.

Every activation satisfies the same small contract:

* ``fwd(x)``         - pure transform, no hidden state
* ``learnables()``   - always empty
* ``compile(shape)`` - no-op, returns ``self``
* ``clone()``        - a new, independent instance with the same settings

There are no shared default instances.  Use the factory functions
(``relu()``, ``softmax(axis=-1)``, ...) to get a fresh activation per
call site.

``Softmax`` has no default axis: the normalization axes must be given
explicitly.  With batched input ``(B, n)`` the usual choice is
``softmax(axis=-1)``.
"""

from __future__ import annotations

import operator
from typing import Sequence

import equinox as eqx
import jax
import jax.numpy as jnp

from gold_rl.errors import ShapeError
from gold_rl.types import Shape


class Activation(eqx.Module):
    """Base class for the fixed set of activation variants."""

    def fwd(self, x: jax.Array) -> jax.Array:
        raise NotImplementedError

    def __call__(self, x: jax.Array) -> jax.Array:
        return self.fwd(x)

    def learnables(self) -> list[jax.Array]:
        return []

    def compile(self, input_shape: Shape | None = None) -> Activation:
        return self

    def clone(self) -> Activation:
        raise NotImplementedError

    @property
    def name(self) -> str:
        return type(self).__name__.lower()


class Sigmoid(Activation):
    def fwd(self, x: jax.Array) -> jax.Array:
        return jax.nn.sigmoid(x)

    def clone(self) -> Sigmoid:
        return Sigmoid()


class Tanh(Activation):
    def fwd(self, x: jax.Array) -> jax.Array:
        return jnp.tanh(x)

    def clone(self) -> Tanh:
        return Tanh()


class ReLU(Activation):
    def fwd(self, x: jax.Array) -> jax.Array:
        return jax.nn.relu(x)

    def clone(self) -> ReLU:
        return ReLU()


class LeakyReLU(Activation):
    """``x`` for positive inputs, ``alpha * x`` otherwise."""

    alpha: float = eqx.field(static=True)

    def __init__(self, alpha: float = 0.01) -> None:
        self.alpha = float(alpha)

    def fwd(self, x: jax.Array) -> jax.Array:
        return jax.nn.leaky_relu(x, negative_slope=self.alpha)

    def clone(self) -> LeakyReLU:
        return LeakyReLU(self.alpha)


class Softmax(Activation):
    """Softmax normalized over an explicit set of axes."""

    axis: tuple[int, ...] = eqx.field(static=True)

    def __init__(self, axis: int | Sequence[int]) -> None:
        if isinstance(axis, Sequence):
            axes = tuple(operator.index(a) for a in axis)
        else:
            axes = (operator.index(axis),)
        if not axes:
            raise ValueError("Softmax needs at least one axis")
        self.axis = axes

    def fwd(self, x: jax.Array) -> jax.Array:
        resolved = []
        for a in self.axis:
            if not -x.ndim <= a < x.ndim:
                raise ShapeError(
                    f"softmax axis {a} out of range for input of shape {x.shape}"
                )
            resolved.append(a % x.ndim)
        if len(set(resolved)) != len(resolved):
            raise ShapeError(f"softmax axes {self.axis} repeat a dimension")
        return jax.nn.softmax(x, axis=tuple(resolved))

    def clone(self) -> Softmax:
        return Softmax(self.axis)


class Linear(Activation):
    """Identity."""

    def fwd(self, x: jax.Array) -> jax.Array:
        return x

    def clone(self) -> Linear:
        return Linear()


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def sigmoid() -> Sigmoid:
    return Sigmoid()


def tanh() -> Tanh:
    return Tanh()


def relu() -> ReLU:
    return ReLU()


def leaky_relu(alpha: float = 0.01) -> LeakyReLU:
    return LeakyReLU(alpha)


def softmax(axis: int | Sequence[int]) -> Softmax:
    return Softmax(axis)


def linear() -> Linear:
    return Linear()


_FACTORIES = {
    "sigmoid": sigmoid,
    "tanh": tanh,
    "relu": relu,
    "leaky_relu": leaky_relu,
    "softmax": softmax,
    "linear": linear,
}


def make_activation(kind: str, **kwargs: object) -> Activation:
    """Create an activation by name.

    Args:
        kind: One of ``"sigmoid"``, ``"tanh"``, ``"relu"``,
            ``"leaky_relu"``, ``"softmax"``, ``"linear"``.
        **kwargs: Forwarded to the factory (``alpha`` for leaky_relu,
            ``axis`` for softmax).
    """
    try:
        factory = _FACTORIES[kind.lower()]
    except KeyError:
        choices = ", ".join(repr(k) for k in _FACTORIES)
        raise ValueError(f"Unknown activation {kind!r}. Choose from {choices}.") from None
    return factory(**kwargs)  # type: ignore[operator]
