"""Preset configuration registry for gold_rl experiments."""

from gold_rl.configs.presets import PRESETS, TrainConfig, cli

__all__ = [
    "PRESETS",
    "TrainConfig",
    "cli",
]
