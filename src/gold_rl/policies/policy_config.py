"""Policy configuration and layer builders.

A layer builder maps ``(obs_shape, n_actions)`` to the uncompiled layers
of a Q-network.  ``PolicyConfig.architecture`` picks one of the built-in
builders; a custom builder can be passed to ``make_policy`` directly.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Callable

from gold_rl.model.activations import linear, make_activation, relu
from gold_rl.model.initializers import Initializer
from gold_rl.model.layers import FC, Conv2D, Flatten, Layer
from gold_rl.model.loss import Loss
from gold_rl.model.optim import Optimizer
from gold_rl.types import Shape

LayerBuilder = Callable[[Shape, int], list[Layer]]


class Architecture(enum.Enum):
    MLP = "mlp"
    ATARI = "atari"


def mlp_layers(
    obs_shape: Shape,
    n_actions: int,
    hidden_sizes: tuple[int, ...] = (24, 24),
    activation: str = "relu",
) -> list[Layer]:
    """Fully connected stack ending in a linear Q-value head.

    Multi-dimensional observations are flattened first.
    """
    layers: list[Layer] = []
    if len(obs_shape) != 1:
        layers.append(Flatten())
    for width in hidden_sizes:
        layers.append(FC(width, make_activation(activation)))
    layers.append(FC(n_actions, linear()))
    return layers


def atari_layers(obs_shape: Shape, n_actions: int) -> list[Layer]:
    """Nature-DQN convolutional stack for ``(C, H, W)`` frames."""
    if len(obs_shape) != 3:
        raise ValueError(f"atari layers need (C, H, W) observations, got {obs_shape}")
    return [
        Conv2D(32, 8, strides=4, activation=relu()),
        Conv2D(64, 4, strides=2, activation=relu()),
        Conv2D(64, 3, strides=1, activation=relu()),
        Flatten(),
        FC(512, relu()),
        FC(n_actions, linear()),
    ]


@dataclass(frozen=True)
class PolicyConfig:
    """Everything needed to build and train a policy network."""

    # Network
    architecture: Architecture = Architecture.MLP
    hidden_sizes: tuple[int, ...] = (24, 24)
    activation: str = "relu"
    initializer: Initializer = Initializer.GLOROT_UNIFORM

    # Optimization
    loss: Loss = Loss.MSE
    optimizer: Optimizer = Optimizer.ADAM
    learning_rate: float = 1e-3
    max_grad_norm: float | None = 10.0
    batch_size: int = 32

    # Report the loss of every learn step to the injected observer
    track: bool = True

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {self.batch_size}")
        if self.learning_rate <= 0:
            raise ValueError(f"learning_rate must be > 0, got {self.learning_rate}")
        if any(h < 1 for h in self.hidden_sizes):
            raise ValueError(f"hidden_sizes must be positive, got {self.hidden_sizes}")

    def layer_builder(self) -> LayerBuilder:
        """The builder selected by ``architecture``."""
        if self.architecture is Architecture.ATARI:
            return atari_layers
        hidden, activation = self.hidden_sizes, self.activation
        return lambda obs_shape, n_actions: mlp_layers(obs_shape, n_actions, hidden, activation)
