"""Train a deep Q-learning agent on Catch.

Runs the explicit control loop without presets, logs each catch as it
happens, and writes episode records to ``runs/deepq_catch/metrics.jsonl``.
"""

import logging

from gold_rl.algorithms.deepq import AgentConfig, DeepQAgent, ScheduleConfig
from gold_rl.env import make
from gold_rl.metrics import read_metrics, setup_logging
from gold_rl.policies import PolicyConfig
from gold_rl.track import Aggregator
from gold_rl.types import Event

logger = logging.getLogger("gold_rl.examples.catch")


def main() -> None:
    setup_logging()

    env = make("Catch-v0", seed=42)
    config = AgentConfig(
        policy=PolicyConfig(hidden_sizes=(64, 64), learning_rate=1e-3, batch_size=32),
        epsilon=ScheduleConfig(decay_rate=0.999, min_rate=0.05),
        gamma=0.99,
        update_target_steps=100,
        buffer_size=10_000,
        seed=42,
        metrics_path="runs/deepq_catch/metrics.jsonl",
    )

    with DeepQAgent(config, env) as agent:
        agent.view()
        for episode in agent.make_episodes(300):
            state = env.reset()
            score = episode.track_scalar("score", 0.0, Aggregator.MAX)
            for timestep in episode.steps(env.max_steps()):
                action = agent.action(state)
                outcome = env.step(action)
                timestep.observe(outcome)
                score.inc(outcome.reward)
                agent.remember(Event(state, action, outcome))
                agent.learn()
                if outcome.done:
                    if outcome.reward > 0:
                        logger.debug("episode %d caught after %d steps", episode.i, timestep.i + 1)
                    break
                state = outcome.observation
        agent.wait()

    env.end()
    records = read_metrics(config.metrics_path)
    last = records[-100:]
    caught = sum(r["score"] > 0 for r in last)
    print(f"Training complete. Caught {caught}/{len(last)} balls in the last {len(last)} episodes.")


if __name__ == "__main__":
    main()
