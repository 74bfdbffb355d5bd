"""Deep Q-learning agent.

The agent owns its policy, a target-network clone, the epsilon schedule
and the experience store.  It drives nothing by itself: the caller runs
the control loop::

    agent = DeepQAgent(AgentConfig(), env)
    for episode in agent.make_episodes(200):
        state = env.reset()
        score = episode.track_scalar("score", 0, Aggregator.MAX)
        for timestep in episode.steps(env.max_steps()):
            action = agent.action(state)
            outcome = env.step(action)
            timestep.observe(outcome)
            score.inc(outcome.reward)
            agent.remember(Event(state, action, outcome))
            agent.learn()
            if outcome.done:
                break
            state = outcome.observation
    agent.wait()

Ordering inside a timestep is strict: ``learn`` may sample the event that
``remember`` just stored.  The epsilon schedule is advanced once per
consumed timestep by the episode iterator; ``action`` only reads it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

import equinox as eqx
import jax
import jax.numpy as jnp
import numpy as np

from gold_rl.algorithms.deepq.config import AgentConfig
from gold_rl.env.base import Environment
from gold_rl.episode import Episode, make_episodes
from gold_rl.errors import EmptyBatchError, InsufficientDataError, ShapeError
from gold_rl.memory import ExperienceStore, PrioritizedExperienceStore
from gold_rl.metrics import MetricsLogger
from gold_rl.model.sequential import Sequential
from gold_rl.policies.policy import make_policy
from gold_rl.policies.policy_config import LayerBuilder
from gold_rl.schedule import DecaySchedule
from gold_rl.seeding import host_rng, make_rng, split_key
from gold_rl.track import Tracker
from gold_rl.types import Action, Event, EventBatch, LearnBatch, Metrics

logger = logging.getLogger(__name__)


@eqx.filter_jit
def _q_targets(
    model: Sequential,
    target_model: Sequential,
    batch: EventBatch,
    gamma: float,
) -> tuple[LearnBatch, jax.Array, jax.Array]:
    """Regression targets for one DQN step.

    The target vector equals the live Q-values except at the taken
    action, where it is ``r + gamma * max_a' Q_target(s', a') * (1 - done)``.

    Returns ``(learn_batch, td_errors, q_mean)``.
    """
    q_all = model.fwd(batch.states)  # (B, n_actions)
    next_q = target_model.fwd(batch.next_states)
    target = batch.rewards + gamma * jnp.max(next_q, axis=-1) * (1.0 - batch.dones)

    rows = jnp.arange(q_all.shape[0])
    q_sa = q_all[rows, batch.actions]
    y = q_all.at[rows, batch.actions].set(target)
    return LearnBatch(batch.states, jax.lax.stop_gradient(y)), target - q_sa, jnp.mean(q_sa)


class DeepQAgent:
    """Epsilon-greedy DQN agent with experience replay and a target network.

    Args:
        config: Agent settings.
        env: Environment the agent acts in.  Its spaces size the policy;
            the agent itself only uses it for rendering.
        layer_builder: Custom network layout, overriding
            ``config.policy.architecture``.
        tracker: Sink for episode records.  By default a tracker writing
            to ``config.metrics_path`` (if set) is created and owned.
    """

    def __init__(
        self,
        config: AgentConfig,
        env: Environment,
        *,
        layer_builder: LayerBuilder | None = None,
        tracker: Tracker | None = None,
    ) -> None:
        self.config = config
        self.env = env
        self.obs_shape = tuple(env.observation_space.shape)
        self.n_actions = int(env.action_space.n)

        rng = make_rng(config.seed)
        _, policy_key = split_key(rng)
        self.policy = make_policy(
            config.policy,
            self.obs_shape,
            self.n_actions,
            key=policy_key,
            layer_builder=layer_builder,
            observer=self._on_learn,
        )
        if tuple(self.policy.output_shape) != (self.n_actions,):
            raise ShapeError(
                f"policy outputs {self.policy.output_shape} per sample, "
                f"the action space needs ({self.n_actions},)"
            )
        self.target_policy = self.policy.clone()
        self.target_policy.name = "target"

        if tracker is None:
            sink = MetricsLogger(config.metrics_path) if config.metrics_path else None
            tracker = Tracker(sink)
        self.tracker = tracker

        self.epsilon: DecaySchedule = config.epsilon.build()

        if config.prioritized:
            self.memory: ExperienceStore = PrioritizedExperienceStore(
                config.buffer_size, seed=config.seed,  # type: ignore[arg-type]
            )
        else:
            self.memory = ExperienceStore(config.buffer_size, seed=config.seed)

        self._explore_rng = host_rng(config.seed, stream=1)
        self.learn_steps = 0
        self.last_loss: float | None = None
        self._episodes_made = 0

    # -- acting ------------------------------------------------------------

    def action(self, state: jax.Array) -> Action:
        """Epsilon-greedy action for a single observation."""
        if self._explore_rng.uniform() < self.epsilon.value():
            return int(self._explore_rng.integers(self.n_actions))
        q_values = self.policy.fwd(jnp.asarray(state, dtype=jnp.float32)[None, ...])
        return int(jnp.argmax(q_values[0]))

    def remember(self, event: Event) -> None:
        self.memory.remember(event)

    # -- learning ----------------------------------------------------------

    def learn(self) -> Metrics | None:
        """Sample a batch and take one learn step.

        Returns ``None`` without touching the policy when the store does
        not hold a full batch yet.  Any other error propagates.
        """
        try:
            batch = self.memory.sample(self.policy.batch_size)
        except InsufficientDataError as exc:
            logger.debug("skipping learn step: %s", exc)
            return None

        learn_batch, td_errors, q_mean = _q_targets(
            self.policy.model, self.target_policy.model, batch, self.config.gamma,
        )
        try:
            loss = self.policy.learn(learn_batch)
        except EmptyBatchError as exc:
            logger.debug("skipping learn step: %s", exc)
            return None

        if isinstance(self.memory, PrioritizedExperienceStore):
            self.memory.update_priorities(np.asarray(batch.indices), np.asarray(td_errors))

        self.learn_steps += 1
        if self.learn_steps % self.config.update_target_steps == 0:
            self.update_target()

        return Metrics(loss=loss, q_mean=float(q_mean), epsilon=self.epsilon.value())

    def update_target(self) -> None:
        """Replace the target network with a fresh clone of the live policy."""
        self.target_policy = self.policy.clone()
        self.target_policy.name = "target"
        logger.debug("target network synced at learn step %d", self.learn_steps)

    def _on_learn(self, record: dict[str, Any]) -> None:
        self.last_loss = record["loss"]

    # -- episodes ----------------------------------------------------------

    def make_episodes(self, n: int) -> Iterator[Episode]:
        """Yield *n* episodes reporting to this agent's tracker.

        Each consumed timestep advances ``self.epsilon`` once.
        """
        episodes = make_episodes(
            n, tracker=self.tracker, on_step=self._advance_epsilon, start=self._episodes_made,
        )
        self._episodes_made += n
        return episodes

    def _advance_epsilon(self) -> None:
        self.epsilon.advance()

    # -- diagnostics -------------------------------------------------------

    def render(self, env: Environment | None = None) -> None:
        """Render *env* (default: the agent's env) if ``render_target`` is set."""
        if self.config.render_target is None:
            return
        (env if env is not None else self.env).render(self.config.render_target)

    def view(self) -> None:
        """Log the policy graph."""
        logger.info("\n%s", self.policy.describe())

    def wait(self) -> None:
        """Block until all background tracking work has drained."""
        self.tracker.wait()

    def close(self) -> None:
        self.tracker.close()

    def __enter__(self) -> DeepQAgent:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"DeepQAgent(obs_shape={self.obs_shape}, n_actions={self.n_actions}, "
            f"learn_steps={self.learn_steps}, epsilon={self.epsilon.value():.4g})"
        )
