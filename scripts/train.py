#!/usr/bin/env python3
"""Unified training script with preset selection.

Select a preset configuration and optionally override any field::

    python scripts/train.py catch_deepq
    python scripts/train.py catch_deepq --agent.gamma 0.95
    python scripts/train.py catch_deepq_per --episodes 1000 --save_path runs/catch.eqx
    python scripts/train.py catch_deepq --help
"""

from __future__ import annotations

import logging

from gold_rl.algorithms.deepq import DeepQAgent
from gold_rl.checkpoint import save_policy
from gold_rl.configs import TrainConfig, cli
from gold_rl.env import make
from gold_rl.metrics import setup_logging
from gold_rl.track import Aggregator
from gold_rl.types import Event

logger = logging.getLogger("gold_rl.train")


def main(config: TrainConfig) -> None:
    env = make(config.env_id, seed=config.agent.seed)
    scores: list[float] = []

    with DeepQAgent(config.agent, env) as agent:
        if config.view:
            agent.view()

        for episode in agent.make_episodes(config.episodes):
            state = env.reset()
            score = episode.track_scalar("score", 0.0, Aggregator.SUM)
            loss = episode.track_scalar("loss", 0.0, Aggregator.MEAN)
            epsilon = episode.track_scalar("epsilon", agent.epsilon.value(), Aggregator.LAST)

            for timestep in episode.steps(env.max_steps()):
                epsilon.inc(agent.epsilon.value())
                action = agent.action(state)
                outcome = env.step(action)
                timestep.observe(outcome)
                score.inc(outcome.reward)

                agent.remember(Event(state, action, outcome))
                metrics = agent.learn()
                if metrics is not None:
                    loss.inc(metrics.loss)

                agent.render()
                if outcome.done:
                    break
                state = outcome.observation

            scores.append(score.value)

        agent.wait()

        if config.save_path is not None:
            save_policy(config.save_path, agent.policy)

    env.end()

    last = scores[-10:]
    mean_score = sum(last) / len(last) if last else 0.0
    print(
        f"Training complete | "
        f"episodes={len(scores)} | "
        f"mean_score(last 10)={mean_score:.2f}"
    )


if __name__ == "__main__":
    setup_logging()
    main(cli())
