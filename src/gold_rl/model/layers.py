"""Layers: parametric transforms followed by an activation.

Layers are immutable equinox modules.  A layer is created *uncompiled*
(it only knows its hyperparameters); ``compile(input_shape, key=...)``
returns a new layer with parameters allocated for that input shape.
Evaluating an uncompiled layer raises :class:`NotCompiledError`.

Shapes given to ``compile`` are per-sample; ``fwd`` always receives a
leading batch axis::

    layer = FC(64, activation=relu()).compile((4,), key=key)
    y = layer.fwd(jnp.zeros((32, 4)))   # (32, 64)

Image layers use NCHW inputs and OIHW kernels.
"""

from __future__ import annotations

import math

import equinox as eqx
import jax
import jax.numpy as jnp

from gold_rl.errors import NotCompiledError, ShapeError
from gold_rl.model.activations import Activation, Linear
from gold_rl.model.initializers import Initializer
from gold_rl.types import Shape


def _copy(a: jax.Array | None) -> jax.Array | None:
    return None if a is None else jnp.array(a, copy=True)


def _pair(v: int | tuple[int, int]) -> tuple[int, int]:
    return (v, v) if isinstance(v, int) else (int(v[0]), int(v[1]))


class Layer(eqx.Module):
    """Common contract for every layer.

    Subclasses implement ``compile``, ``fwd`` and ``clone``.  Parameters
    are the array leaves of the module, so ``learnables`` is derived from
    the field order and stays stable across clones.
    """

    input_shape: Shape | None = eqx.field(static=True)

    def compile(
        self,
        input_shape: Shape,
        *,
        key: jax.Array,
        initializer: Initializer = Initializer.GLOROT_UNIFORM,
    ) -> Layer:
        raise NotImplementedError

    def fwd(self, x: jax.Array) -> jax.Array:
        raise NotImplementedError

    def clone(self) -> Layer:
        raise NotImplementedError

    def __call__(self, x: jax.Array) -> jax.Array:
        return self.fwd(x)

    @property
    def compiled(self) -> bool:
        return self.input_shape is not None

    @property
    def name(self) -> str:
        return type(self).__name__

    def learnables(self) -> list[jax.Array]:
        return jax.tree.leaves(eqx.filter(self, eqx.is_array))

    def num_params(self) -> int:
        return sum(int(a.size) for a in self.learnables())

    def output_shape(self) -> Shape:
        """Per-sample output shape, derived without running the layer."""
        if self.input_shape is None:
            raise NotCompiledError(f"{self.name} has no shape before compile")
        dummy = jax.ShapeDtypeStruct((1, *self.input_shape), jnp.float32)
        return tuple(jax.eval_shape(self.fwd, dummy).shape[1:])

    def _check_input(self, x: jax.Array) -> None:
        if self.input_shape is None:
            raise NotCompiledError(f"{self.name} used before compile")
        if x.ndim != len(self.input_shape) + 1 or tuple(x.shape[1:]) != self.input_shape:
            raise ShapeError(
                f"{self.name} compiled for per-sample shape {self.input_shape}, "
                f"got batched input of shape {tuple(x.shape)}"
            )


class FC(Layer):
    """Fully connected layer: ``activation(x @ weight + bias)``."""

    units: int = eqx.field(static=True)
    use_bias: bool = eqx.field(static=True)
    activation: Activation
    weight: jax.Array | None
    bias: jax.Array | None

    def __init__(
        self,
        units: int,
        activation: Activation | None = None,
        *,
        use_bias: bool = True,
        weight: jax.Array | None = None,
        bias: jax.Array | None = None,
        input_shape: Shape | None = None,
    ) -> None:
        if units <= 0:
            raise ValueError(f"units must be positive, got {units}")
        self.units = int(units)
        self.use_bias = use_bias
        self.activation = activation if activation is not None else Linear()
        self.weight = weight
        self.bias = bias
        self.input_shape = None if input_shape is None else tuple(input_shape)

    def compile(
        self,
        input_shape: Shape,
        *,
        key: jax.Array,
        initializer: Initializer = Initializer.GLOROT_UNIFORM,
    ) -> FC:
        input_shape = tuple(input_shape)
        if len(input_shape) != 1:
            raise ShapeError(f"FC expects flat per-sample input, got shape {input_shape}")
        weight = initializer.build()(key, (input_shape[0], self.units), jnp.float32)
        bias = jnp.zeros((self.units,), dtype=jnp.float32) if self.use_bias else None
        return FC(
            self.units,
            self.activation.compile(input_shape),
            use_bias=self.use_bias,
            weight=weight,
            bias=bias,
            input_shape=input_shape,
        )

    def fwd(self, x: jax.Array) -> jax.Array:
        self._check_input(x)
        y = x @ self.weight
        if self.bias is not None:
            y = y + self.bias
        return self.activation(y)

    def clone(self) -> FC:
        return FC(
            self.units,
            self.activation.clone(),
            use_bias=self.use_bias,
            weight=_copy(self.weight),
            bias=_copy(self.bias),
            input_shape=self.input_shape,
        )


class Conv2D(Layer):
    """2-D convolution over NCHW input."""

    filters: int = eqx.field(static=True)
    kernel_size: tuple[int, int] = eqx.field(static=True)
    strides: tuple[int, int] = eqx.field(static=True)
    padding: str = eqx.field(static=True)
    use_bias: bool = eqx.field(static=True)
    activation: Activation
    weight: jax.Array | None
    bias: jax.Array | None

    def __init__(
        self,
        filters: int,
        kernel_size: int | tuple[int, int],
        *,
        strides: int | tuple[int, int] = 1,
        padding: str = "VALID",
        activation: Activation | None = None,
        use_bias: bool = True,
        weight: jax.Array | None = None,
        bias: jax.Array | None = None,
        input_shape: Shape | None = None,
    ) -> None:
        if padding not in ("VALID", "SAME"):
            raise ValueError(f"padding must be 'VALID' or 'SAME', got {padding!r}")
        self.filters = int(filters)
        self.kernel_size = _pair(kernel_size)
        self.strides = _pair(strides)
        self.padding = padding
        self.use_bias = use_bias
        self.activation = activation if activation is not None else Linear()
        self.weight = weight
        self.bias = bias
        self.input_shape = None if input_shape is None else tuple(input_shape)

    def compile(
        self,
        input_shape: Shape,
        *,
        key: jax.Array,
        initializer: Initializer = Initializer.GLOROT_UNIFORM,
    ) -> Conv2D:
        input_shape = tuple(input_shape)
        if len(input_shape) != 3:
            raise ShapeError(f"Conv2D expects (C, H, W) input, got shape {input_shape}")
        kh, kw = self.kernel_size
        shape = (self.filters, input_shape[0], kh, kw)
        weight = initializer.build(in_axis=1, out_axis=0)(key, shape, jnp.float32)
        bias = jnp.zeros((self.filters,), dtype=jnp.float32) if self.use_bias else None
        return Conv2D(
            self.filters,
            self.kernel_size,
            strides=self.strides,
            padding=self.padding,
            activation=self.activation.compile(input_shape),
            use_bias=self.use_bias,
            weight=weight,
            bias=bias,
            input_shape=input_shape,
        )

    def fwd(self, x: jax.Array) -> jax.Array:
        self._check_input(x)
        y = jax.lax.conv_general_dilated(
            x,
            self.weight,
            window_strides=self.strides,
            padding=self.padding,
            dimension_numbers=("NCHW", "OIHW", "NCHW"),
        )
        if self.bias is not None:
            y = y + self.bias[None, :, None, None]
        return self.activation(y)

    def clone(self) -> Conv2D:
        return Conv2D(
            self.filters,
            self.kernel_size,
            strides=self.strides,
            padding=self.padding,
            activation=self.activation.clone(),
            use_bias=self.use_bias,
            weight=_copy(self.weight),
            bias=_copy(self.bias),
            input_shape=self.input_shape,
        )


class MaxPooling2D(Layer):
    """Max pooling over the spatial axes of NCHW input."""

    pool_size: tuple[int, int] = eqx.field(static=True)
    strides: tuple[int, int] = eqx.field(static=True)

    def __init__(
        self,
        pool_size: int | tuple[int, int] = 2,
        *,
        strides: int | tuple[int, int] | None = None,
        input_shape: Shape | None = None,
    ) -> None:
        self.pool_size = _pair(pool_size)
        self.strides = self.pool_size if strides is None else _pair(strides)
        self.input_shape = None if input_shape is None else tuple(input_shape)

    def compile(
        self,
        input_shape: Shape,
        *,
        key: jax.Array,
        initializer: Initializer = Initializer.GLOROT_UNIFORM,
    ) -> MaxPooling2D:
        input_shape = tuple(input_shape)
        if len(input_shape) != 3:
            raise ShapeError(f"MaxPooling2D expects (C, H, W) input, got shape {input_shape}")
        return MaxPooling2D(self.pool_size, strides=self.strides, input_shape=input_shape)

    def fwd(self, x: jax.Array) -> jax.Array:
        self._check_input(x)
        return jax.lax.reduce_window(
            x,
            -jnp.inf,
            jax.lax.max,
            window_dimensions=(1, 1, *self.pool_size),
            window_strides=(1, 1, *self.strides),
            padding="VALID",
        )

    def clone(self) -> MaxPooling2D:
        return MaxPooling2D(self.pool_size, strides=self.strides, input_shape=self.input_shape)


class Flatten(Layer):
    """Collapse every per-sample axis into one."""

    def __init__(self, *, input_shape: Shape | None = None) -> None:
        self.input_shape = None if input_shape is None else tuple(input_shape)

    def compile(
        self,
        input_shape: Shape,
        *,
        key: jax.Array,
        initializer: Initializer = Initializer.GLOROT_UNIFORM,
    ) -> Flatten:
        return Flatten(input_shape=tuple(input_shape))

    def fwd(self, x: jax.Array) -> jax.Array:
        self._check_input(x)
        return x.reshape(x.shape[0], math.prod(self.input_shape))

    def clone(self) -> Flatten:
        return Flatten(input_shape=self.input_shape)
