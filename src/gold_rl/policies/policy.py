"""Trainable Q-network wrapper.

``Policy`` pairs a compiled :class:`~gold_rl.model.Sequential` with its
optax optimizer state.  Forward passes and learn steps are jit-compiled;
the wrapper itself is an ordinary mutable object owned by the agent.

A learn step is all-or-nothing: model and optimizer state are replaced
together, and only once the compiled step has returned.  A failing step
leaves the policy exactly as it was.

Usage::

    from gold_rl.policies import PolicyConfig, make_policy

    policy = make_policy(PolicyConfig(), obs_shape=(4,), n_actions=2, key=key)
    q_values = policy.fwd(obs_batch)               # (B, 2)
    loss = policy.learn(LearnBatch(inputs, targets))
    target = policy.clone()                         # parameter-disjoint copy
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Callable

import equinox as eqx
import jax
import jax.numpy as jnp
import optax

from gold_rl.errors import EmptyBatchError, NotCompiledError, ShapeError
from gold_rl.model.loss import LossFn, loss_fn
from gold_rl.model.optim import make_optimizer
from gold_rl.model.sequential import LayerSummary, Sequential
from gold_rl.policies.policy_config import LayerBuilder, PolicyConfig
from gold_rl.types import LearnBatch, OptState, Shape

logger = logging.getLogger(__name__)

Observer = Callable[[dict[str, Any]], None]


@eqx.filter_jit
def _forward(model: Sequential, x: jax.Array) -> jax.Array:
    return model.fwd(x)


@eqx.filter_jit
def _learn_step(
    model: Sequential,
    opt_state: OptState,
    inputs: jax.Array,
    targets: jax.Array,
    loss: LossFn,
    tx: optax.GradientTransformation,
) -> tuple[Sequential, OptState, jax.Array]:
    def compute_loss(m: Sequential) -> jax.Array:
        return loss(m.fwd(inputs), targets)

    value, grads = eqx.filter_value_and_grad(compute_loss)(model)
    updates, new_opt_state = tx.update(grads, opt_state, eqx.filter(model, eqx.is_array))
    new_model = eqx.apply_updates(model, updates)
    return new_model, new_opt_state, value


def _copy_arrays(tree: Any) -> Any:
    """Copy every array leaf of *tree* into new storage."""
    return jax.tree.map(lambda a: jnp.array(a, copy=True) if eqx.is_array(a) else a, tree)


class Policy:
    """A compiled model, its loss and its optimizer.

    Args:
        model: A compiled ``Sequential``.
        config: Loss, optimizer and batch settings.
        observer: Optional callable receiving ``{"loss", "step"}`` after
            every learn step when ``config.track`` is set.
        name: Label used in logs and summaries.
    """

    def __init__(
        self,
        model: Sequential,
        config: PolicyConfig,
        *,
        observer: Observer | None = None,
        name: str = "policy",
    ) -> None:
        if not model.compiled:
            raise NotCompiledError("Policy needs a compiled model")
        self.model = model
        self.config = config
        self.observer = observer
        self.name = name
        self._loss_fn = loss_fn(config.loss)
        self._tx = make_optimizer(config.optimizer, config.learning_rate, config.max_grad_norm)
        self.opt_state = self._tx.init(eqx.filter(model, eqx.is_array))
        self.steps = 0

    @property
    def batch_size(self) -> int:
        return self.config.batch_size

    @property
    def input_shape(self) -> Shape:
        return self.model.input_shape  # type: ignore[return-value]

    @property
    def output_shape(self) -> Shape:
        return self.model.output_shape()

    def fwd(self, x: jax.Array) -> jax.Array:
        """Evaluate the model on a batch ``(B, *input_shape)``."""
        return _forward(self.model, jnp.asarray(x, dtype=jnp.float32))

    def __call__(self, x: jax.Array) -> jax.Array:
        return self.fwd(x)

    def learn(self, batch: LearnBatch) -> float:
        """One optimizer step towards ``batch.targets``; returns the loss."""
        inputs = jnp.asarray(batch.inputs, dtype=jnp.float32)
        targets = jnp.asarray(batch.targets, dtype=jnp.float32)
        if inputs.ndim == 0 or inputs.shape[0] == 0:
            raise EmptyBatchError(f"{self.name}.learn called with an empty batch")
        if targets.ndim == 0 or targets.shape[0] != inputs.shape[0]:
            raise ShapeError(
                f"{inputs.shape[0]} inputs but targets of shape {targets.shape}"
            )
        if tuple(inputs.shape[1:]) != tuple(self.input_shape):
            raise ShapeError(
                f"{self.name} expects inputs of shape {self.input_shape}, got {inputs.shape[1:]}"
            )
        if tuple(targets.shape[1:]) != tuple(self.output_shape):
            raise ShapeError(
                f"{self.name} outputs {self.output_shape} per sample, "
                f"targets have shape {targets.shape[1:]}"
            )

        model, opt_state, loss = _learn_step(
            self.model, self.opt_state, inputs, targets, self._loss_fn, self._tx,
        )
        loss = float(loss)
        self.model, self.opt_state = model, opt_state
        self.steps += 1

        if self.config.track and self.observer is not None:
            self.observer({"loss": loss, "step": self.steps})
        return loss

    def learnables(self) -> list[jax.Array]:
        return self.model.learnables()

    def clone(self) -> Policy:
        """Structurally identical copy with its own parameter and optimizer storage."""
        other = copy.copy(self)
        other.model = self.model.clone()
        other.opt_state = _copy_arrays(self.opt_state)
        return other

    def summary(self) -> list[LayerSummary]:
        return self.model.summary()

    def describe(self) -> str:
        """Multi-line table of the model graph."""
        rows = self.summary()
        width = max(len(r.name) for r in rows)
        lines = [f"{self.name}: input {self.input_shape}"]
        for r in rows:
            lines.append(f"  {r.name:<{width}}  -> {str(r.output_shape):<16} params={r.num_params}")
        lines.append(f"  total params={sum(r.num_params for r in rows)}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"Policy(name={self.name!r}, input={self.input_shape}, "
            f"output={self.output_shape}, steps={self.steps})"
        )


def make_policy(
    config: PolicyConfig,
    obs_shape: Shape,
    n_actions: int,
    *,
    key: jax.Array,
    layer_builder: LayerBuilder | None = None,
    observer: Observer | None = None,
    name: str = "policy",
) -> Policy:
    """Build, compile and wrap a Q-network.

    Args:
        config: Policy settings.
        obs_shape: Per-sample observation shape.
        n_actions: Size of the discrete action space (output width).
        key: PRNG key for parameter initialization.
        layer_builder: Overrides ``config.architecture`` when given.
        observer: Receives learn-step records, see :class:`Policy`.
        name: Label for logs.
    """
    builder = layer_builder if layer_builder is not None else config.layer_builder()
    model = Sequential(builder(tuple(obs_shape), n_actions))
    model = model.compile(tuple(obs_shape), key=key, initializer=config.initializer)
    return Policy(model, config, observer=observer, name=name)
