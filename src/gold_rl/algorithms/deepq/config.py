"""Deep Q-learning hyperparameters."""

from __future__ import annotations

from dataclasses import dataclass, field

from gold_rl.policies.policy_config import PolicyConfig
from gold_rl.schedule import DecayMode, DecaySchedule


@dataclass(frozen=True)
class ScheduleConfig:
    """Settings for the epsilon ``DecaySchedule``."""

    initial_rate: float = 1.0
    decay_rate: float = 0.997
    min_rate: float = 0.01
    mode: DecayMode = DecayMode.EXPONENTIAL
    decay_steps: int = 10_000

    def build(self) -> DecaySchedule:
        """Fresh schedule instance; validation happens in ``DecaySchedule``."""
        return DecaySchedule(
            self.initial_rate,
            self.decay_rate,
            self.min_rate,
            mode=self.mode,
            decay_steps=self.decay_steps,
        )


@dataclass(frozen=True)
class AgentConfig:
    """All deep Q-learning settings in one place.

    Frozen dataclass, so it can be shared between agents and logged
    verbatim.
    """

    # Network and optimizer
    policy: PolicyConfig = field(default_factory=PolicyConfig)

    # Exploration
    epsilon: ScheduleConfig = field(default_factory=ScheduleConfig)

    # Q-learning
    gamma: float = 0.9
    update_target_steps: int = 100

    # Experience store; None = unbounded
    buffer_size: int | None = 1_000_000
    prioritized: bool = False

    seed: int = 0

    # Diagnostics
    render_target: str | None = None  # e.g. "log"; None disables rendering
    metrics_path: str | None = None  # JSONL file for episode records

    def __post_init__(self) -> None:
        if not 0.0 <= self.gamma <= 1.0:
            raise ValueError(f"gamma must be in [0, 1], got {self.gamma}")
        if self.update_target_steps < 1:
            raise ValueError(f"update_target_steps must be >= 1, got {self.update_target_steps}")
        if self.buffer_size is not None and self.buffer_size < 1:
            raise ValueError(f"buffer_size must be >= 1 or None, got {self.buffer_size}")
        if self.prioritized and self.buffer_size is None:
            raise ValueError("prioritized replay needs a bounded buffer_size")
