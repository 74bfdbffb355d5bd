"""Ordered composition of layers."""

from __future__ import annotations

from typing import NamedTuple, Sequence

import equinox as eqx
import jax

from gold_rl.errors import NotCompiledError
from gold_rl.model.initializers import Initializer
from gold_rl.model.layers import Layer
from gold_rl.types import Shape


class LayerSummary(NamedTuple):
    name: str
    output_shape: Shape
    num_params: int


def _describe(layer: Layer) -> str:
    activation = getattr(layer, "activation", None)
    if activation is None:
        return layer.name
    return f"{layer.name}[{activation.name}]"


class Sequential(eqx.Module):
    """Layers evaluated in insertion order.

    Like the layers it holds, a ``Sequential`` is immutable: ``compile``
    returns a compiled copy.  The learnables of the model are the
    concatenation of every layer's learnables, in layer order.
    """

    layers: tuple[Layer, ...]
    input_shape: Shape | None = eqx.field(static=True)

    def __init__(self, layers: Sequence[Layer], *, input_shape: Shape | None = None) -> None:
        if not layers:
            raise ValueError("Sequential needs at least one layer")
        self.layers = tuple(layers)
        self.input_shape = None if input_shape is None else tuple(input_shape)

    def compile(
        self,
        input_shape: Shape,
        *,
        key: jax.Array,
        initializer: Initializer = Initializer.GLOROT_UNIFORM,
    ) -> Sequential:
        """Allocate parameters for every layer, threading shapes through."""
        input_shape = tuple(input_shape)
        keys = jax.random.split(key, len(self.layers))
        shape = input_shape
        compiled = []
        for layer, k in zip(self.layers, keys):
            layer = layer.compile(shape, key=k, initializer=initializer)
            shape = layer.output_shape()
            compiled.append(layer)
        return Sequential(compiled, input_shape=input_shape)

    def fwd(self, x: jax.Array) -> jax.Array:
        if self.input_shape is None:
            raise NotCompiledError("Sequential used before compile")
        for layer in self.layers:
            x = layer.fwd(x)
        return x

    def __call__(self, x: jax.Array) -> jax.Array:
        return self.fwd(x)

    def learnables(self) -> list[jax.Array]:
        return [p for layer in self.layers for p in layer.learnables()]

    def clone(self) -> Sequential:
        return Sequential([layer.clone() for layer in self.layers], input_shape=self.input_shape)

    @property
    def compiled(self) -> bool:
        return self.input_shape is not None

    def output_shape(self) -> Shape:
        return self.layers[-1].output_shape()

    def summary(self) -> list[LayerSummary]:
        """One row per layer: name, per-sample output shape, parameter count."""
        if self.input_shape is None:
            raise NotCompiledError("Sequential has no shapes before compile")
        return [
            LayerSummary(
                name=_describe(layer),
                output_shape=layer.output_shape(),
                num_params=layer.num_params(),
            )
            for layer in self.layers
        ]
