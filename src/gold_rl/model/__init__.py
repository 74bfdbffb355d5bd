"""Model building blocks: activations, layers, sequential models, losses, optimizers."""

from gold_rl.model.activations import (
    Activation,
    LeakyReLU,
    Linear,
    ReLU,
    Sigmoid,
    Softmax,
    Tanh,
    leaky_relu,
    linear,
    make_activation,
    relu,
    sigmoid,
    softmax,
    tanh,
)
from gold_rl.model.initializers import Initializer
from gold_rl.model.layers import FC, Conv2D, Flatten, Layer, MaxPooling2D
from gold_rl.model.loss import Loss, loss_fn
from gold_rl.model.optim import Optimizer, make_optimizer
from gold_rl.model.sequential import LayerSummary, Sequential

__all__ = [
    # Activations
    "Activation",
    "LeakyReLU",
    "Linear",
    "ReLU",
    "Sigmoid",
    "Softmax",
    "Tanh",
    "leaky_relu",
    "linear",
    "make_activation",
    "relu",
    "sigmoid",
    "softmax",
    "tanh",
    # Layers
    "Conv2D",
    "FC",
    "Flatten",
    "Initializer",
    "Layer",
    "LayerSummary",
    "MaxPooling2D",
    "Sequential",
    # Training
    "Loss",
    "Optimizer",
    "loss_fn",
    "make_optimizer",
]
