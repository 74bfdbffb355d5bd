"""gold_rl: deep Q-learning agents on JAX."""

from gold_rl.agent.base import Agent
from gold_rl.algorithms.deepq import AgentConfig, DeepQAgent, ScheduleConfig
from gold_rl.checkpoint import load_eqx, load_policy, save_eqx, save_policy
from gold_rl.env import make
from gold_rl.episode import Episode, EpisodeStatus, Timestep, make_episodes
from gold_rl.errors import (
    EmptyBatchError,
    EnvError,
    GoldError,
    InsufficientDataError,
    NotCompiledError,
    ShapeError,
)
from gold_rl.memory import ExperienceStore, PrioritizedExperienceStore
from gold_rl.metrics import MetricsLogger, setup_logging
from gold_rl.policies import Policy, PolicyConfig, make_policy
from gold_rl.schedule import DecaySchedule, default_decay_schedule, linear_schedule
from gold_rl.seeding import make_rng, split_key, split_keys
from gold_rl.track import Aggregator, TrackedScalar, Tracker
from gold_rl.types import Event, EventBatch, LearnBatch, Metrics, Outcome

__all__ = [
    "Agent",
    "AgentConfig",
    "Aggregator",
    "DecaySchedule",
    "DeepQAgent",
    "EmptyBatchError",
    "EnvError",
    "Episode",
    "EpisodeStatus",
    "Event",
    "EventBatch",
    "ExperienceStore",
    "GoldError",
    "InsufficientDataError",
    "LearnBatch",
    "Metrics",
    "MetricsLogger",
    "NotCompiledError",
    "Outcome",
    "Policy",
    "PolicyConfig",
    "PrioritizedExperienceStore",
    "ScheduleConfig",
    "ShapeError",
    "Timestep",
    "TrackedScalar",
    "Tracker",
    "default_decay_schedule",
    "linear_schedule",
    "load_eqx",
    "load_policy",
    "make",
    "make_episodes",
    "make_policy",
    "make_rng",
    "save_eqx",
    "save_policy",
    "setup_logging",
    "split_key",
    "split_keys",
]
