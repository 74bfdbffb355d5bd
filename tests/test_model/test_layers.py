"""Tests for gold_rl.model.layers."""

from __future__ import annotations

import equinox as eqx
import jax
import jax.numpy as jnp
import pytest

from gold_rl.errors import NotCompiledError, ShapeError
from gold_rl.model.activations import Linear, relu, sigmoid
from gold_rl.model.initializers import Initializer
from gold_rl.model.layers import FC, Conv2D, Flatten, MaxPooling2D


class TestFC:
    def test_uncompiled_raises(self) -> None:
        with pytest.raises(NotCompiledError):
            FC(3).fwd(jnp.zeros((1, 4)))

    def test_compile_shapes(self, key) -> None:
        layer = FC(3).compile((4,), key=key)
        assert layer.compiled
        assert layer.weight.shape == (4, 3)
        assert layer.bias.shape == (3,)
        assert layer.output_shape() == (3,)

    def test_compile_returns_new_layer(self, key) -> None:
        layer = FC(3)
        compiled = layer.compile((4,), key=key)
        assert not layer.compiled
        assert compiled is not layer

    def test_forward_batch(self, key) -> None:
        layer = FC(5, relu()).compile((4,), key=key)
        y = layer.fwd(jnp.ones((7, 4)))
        assert y.shape == (7, 5)
        assert jnp.all(y >= 0)

    def test_default_activation_is_linear(self) -> None:
        assert isinstance(FC(2).activation, Linear)

    def test_activation_applied(self, key) -> None:
        layer = FC(3, sigmoid()).compile((2,), key=key, initializer=Initializer.ZEROS)
        assert jnp.allclose(layer.fwd(jnp.ones((1, 2))), 0.5)

    def test_shape_mismatch(self, key) -> None:
        layer = FC(3).compile((4,), key=key)
        with pytest.raises(ShapeError):
            layer.fwd(jnp.ones((2, 5)))

    def test_missing_batch_axis(self, key) -> None:
        layer = FC(3).compile((4,), key=key)
        with pytest.raises(ShapeError):
            layer.fwd(jnp.ones(4))

    def test_compile_rejects_images(self, key) -> None:
        with pytest.raises(ShapeError):
            FC(3).compile((1, 4, 4), key=key)

    def test_invalid_units(self) -> None:
        with pytest.raises(ValueError):
            FC(0)

    def test_learnables(self, key) -> None:
        layer = FC(3).compile((4,), key=key)
        params = layer.learnables()
        assert [p.shape for p in params] == [(4, 3), (3,)]
        assert layer.num_params() == 15

    def test_no_bias(self, key) -> None:
        layer = FC(3, use_bias=False).compile((4,), key=key)
        assert layer.bias is None
        assert layer.num_params() == 12

    def test_deterministic_init(self) -> None:
        a = FC(3).compile((4,), key=jax.random.PRNGKey(7))
        b = FC(3).compile((4,), key=jax.random.PRNGKey(7))
        assert jnp.array_equal(a.weight, b.weight)

    def test_jit_compatible(self, key) -> None:
        layer = FC(3, relu()).compile((4,), key=key)
        y = eqx.filter_jit(lambda m, x: m(x))(layer, jnp.ones((2, 4)))
        assert jnp.allclose(y, layer(jnp.ones((2, 4))))


class TestFCClone:
    def test_clone_equal_values(self, key) -> None:
        layer = FC(3, relu()).compile((4,), key=key)
        clone = layer.clone()
        assert jnp.array_equal(clone.weight, layer.weight)
        assert jnp.array_equal(clone.bias, layer.bias)
        assert clone.input_shape == layer.input_shape

    def test_clone_does_not_alias(self, key) -> None:
        layer = FC(3, relu()).compile((4,), key=key)
        clone = layer.clone()
        assert clone.weight is not layer.weight
        assert clone.activation is not layer.activation

    def test_updating_clone_leaves_original(self, key) -> None:
        layer = FC(3).compile((4,), key=key)
        before = jnp.array(layer.weight)
        clone = layer.clone()
        clone = eqx.tree_at(lambda m: m.weight, clone, clone.weight + 1.0)
        assert jnp.array_equal(layer.weight, before)
        assert not jnp.array_equal(clone.weight, layer.weight)

    def test_clone_uncompiled(self) -> None:
        clone = FC(3).clone()
        assert not clone.compiled


class TestConv2D:
    def test_output_shape_valid(self, key) -> None:
        layer = Conv2D(8, 3).compile((1, 10, 10), key=key)
        assert layer.weight.shape == (8, 1, 3, 3)
        assert layer.output_shape() == (8, 8, 8)

    def test_output_shape_same(self, key) -> None:
        layer = Conv2D(4, 3, padding="SAME").compile((2, 6, 6), key=key)
        assert layer.fwd(jnp.zeros((3, 2, 6, 6))).shape == (3, 4, 6, 6)

    def test_strides(self, key) -> None:
        layer = Conv2D(32, 8, strides=4).compile((4, 84, 84), key=key)
        assert layer.output_shape() == (32, 20, 20)

    def test_bad_padding(self) -> None:
        with pytest.raises(ValueError):
            Conv2D(4, 3, padding="FULL")

    def test_requires_chw(self, key) -> None:
        with pytest.raises(ShapeError):
            Conv2D(4, 3).compile((16,), key=key)

    def test_uncompiled_raises(self) -> None:
        with pytest.raises(NotCompiledError):
            Conv2D(4, 3).fwd(jnp.zeros((1, 1, 5, 5)))

    def test_clone_does_not_alias(self, key) -> None:
        layer = Conv2D(4, 3).compile((1, 5, 5), key=key)
        clone = layer.clone()
        assert clone.weight is not layer.weight
        assert jnp.array_equal(clone.weight, layer.weight)


class TestMaxPooling2D:
    def test_halves_spatial(self, key) -> None:
        layer = MaxPooling2D(2).compile((3, 8, 8), key=key)
        assert layer.output_shape() == (3, 4, 4)

    def test_takes_max(self, key) -> None:
        layer = MaxPooling2D(2).compile((1, 2, 2), key=key)
        x = jnp.array([[[[1.0, 5.0], [-3.0, 2.0]]]])
        assert float(layer.fwd(x)[0, 0, 0, 0]) == 5.0

    def test_no_learnables(self, key) -> None:
        assert MaxPooling2D(2).compile((1, 4, 4), key=key).learnables() == []


class TestFlatten:
    def test_flattens(self, key) -> None:
        layer = Flatten().compile((2, 3, 4), key=key)
        assert layer.fwd(jnp.zeros((5, 2, 3, 4))).shape == (5, 24)
        assert layer.output_shape() == (24,)

    def test_uncompiled_raises(self) -> None:
        with pytest.raises(NotCompiledError):
            Flatten().fwd(jnp.zeros((1, 2, 2)))
