"""Preset experiment configurations.

Each preset bundles an environment, agent settings and the episode
budget.  :func:`cli` lets a script pick a preset and override any field::

    python scripts/train.py catch_deepq --agent.gamma 0.95
    python scripts/train.py catch_deepq_per --episodes 1000
"""

from __future__ import annotations

from dataclasses import dataclass, field

import tyro

from gold_rl.algorithms.deepq.config import AgentConfig, ScheduleConfig
from gold_rl.policies.policy_config import PolicyConfig

# ---------------------------------------------------------------------------
# Unified training config
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TrainConfig:
    """Full training configuration: environment + agent + loop budget."""

    env_id: str = "Catch-v0"
    agent: AgentConfig = field(default_factory=AgentConfig)
    episodes: int = 200

    # Log the policy graph before training
    view: bool = True

    # Save the trained policy here (equinox leaves); None disables
    save_path: str | None = None

    def __post_init__(self) -> None:
        if self.episodes < 0:
            raise ValueError(f"episodes must be >= 0, got {self.episodes}")


# ---------------------------------------------------------------------------
# Preset registry
# ---------------------------------------------------------------------------

PRESETS: dict[str, tuple[str, TrainConfig]] = {
    "catch_deepq": (
        "Deep Q-learning on Catch-v0",
        TrainConfig(
            env_id="Catch-v0",
            agent=AgentConfig(
                policy=PolicyConfig(hidden_sizes=(64, 64), learning_rate=1e-3, batch_size=32),
                epsilon=ScheduleConfig(decay_rate=0.999, min_rate=0.05),
                gamma=0.99,
                update_target_steps=100,
                buffer_size=10_000,
            ),
            episodes=500,
        ),
    ),
    "catch_deepq_per": (
        "Deep Q-learning on Catch-v0 with prioritized replay",
        TrainConfig(
            env_id="Catch-v0",
            agent=AgentConfig(
                policy=PolicyConfig(hidden_sizes=(64, 64), learning_rate=1e-3, batch_size=32),
                epsilon=ScheduleConfig(decay_rate=0.999, min_rate=0.05),
                gamma=0.99,
                update_target_steps=100,
                buffer_size=10_000,
                prioritized=True,
            ),
            episodes=500,
        ),
    ),
    "catch_deepq_smoke": (
        "A few episodes of Catch-v0 on a tiny network (sanity check)",
        TrainConfig(
            env_id="Catch-v0",
            agent=AgentConfig(
                policy=PolicyConfig(hidden_sizes=(16,), batch_size=16),
                epsilon=ScheduleConfig(decay_rate=0.99, min_rate=0.1),
                update_target_steps=20,
                buffer_size=1_000,
            ),
            episodes=20,
            view=False,
        ),
    ),
}


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def cli(
    args: list[str] | None = None,
    **kwargs: object,
) -> TrainConfig:
    """Parse a preset + overrides from the command line.

    Usage::

        config = cli()                                          # sys.argv
        config = cli(["catch_deepq", "--episodes", "10"])      # explicit
    """
    return tyro.extras.overridable_config_cli(
        PRESETS,
        args=args,
        use_underscores=True,
        **kwargs,  # type: ignore[arg-type]
    )
