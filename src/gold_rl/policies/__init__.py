"""Policy networks: configuration, layer builders and the trainable wrapper."""

from gold_rl.policies.policy import Policy, make_policy
from gold_rl.policies.policy_config import (
    Architecture,
    LayerBuilder,
    PolicyConfig,
    atari_layers,
    mlp_layers,
)

__all__ = [
    "Architecture",
    "LayerBuilder",
    "Policy",
    "PolicyConfig",
    "atari_layers",
    "make_policy",
    "mlp_layers",
]
