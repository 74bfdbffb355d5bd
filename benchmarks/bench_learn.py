"""Benchmark: policy learn-step and agent timestep throughput.

Times the jitted ``Policy.learn`` for a few network widths, then the
full per-timestep cost (act + env step + remember + learn) of a
``DeepQAgent`` on Catch.

Usage::

    python benchmarks/bench_learn.py
"""

from __future__ import annotations

import time

import jax

from gold_rl.algorithms.deepq import AgentConfig, DeepQAgent
from gold_rl.env import make
from gold_rl.policies import PolicyConfig, make_policy
from gold_rl.types import Event, LearnBatch


def _time_fn(fn, *args, warmup: int = 3, repeats: int = 50) -> float:
    """Seconds per call, excluding warmup (which includes compilation)."""
    for _ in range(warmup):
        fn(*args)
    start = time.perf_counter()
    for _ in range(repeats):
        fn(*args)
    return (time.perf_counter() - start) / repeats


# ── Policy learn step ────────────────────────────────────────────────


def bench_policy_learn() -> None:
    print("=" * 60)
    print("Policy.learn (batch 64, obs 4, 2 actions)")
    print("=" * 60)

    k1, k2, k3 = jax.random.split(jax.random.PRNGKey(0), 3)
    batch = LearnBatch(
        inputs=jax.random.normal(k1, (64, 4)),
        targets=jax.random.normal(k2, (64, 2)),
    )
    for hidden in ((24, 24), (128, 128), (512, 512)):
        policy = make_policy(
            PolicyConfig(hidden_sizes=hidden, batch_size=64), (4,), 2, key=k3,
        )
        t = _time_fn(policy.learn, batch)
        print(f"  hidden={str(hidden):<12} {t * 1000:8.3f} ms/step")
    print()


# ── Agent timestep ───────────────────────────────────────────────────


def bench_agent_timestep(n_steps: int = 2_000) -> None:
    print("=" * 60)
    print(f"DeepQAgent timestep on Catch-v0 ({n_steps} steps)")
    print("=" * 60)

    env = make("Catch-v0")
    config = AgentConfig(policy=PolicyConfig(hidden_sizes=(64, 64), batch_size=32))
    with DeepQAgent(config, env) as agent:
        state = env.reset()
        start = time.perf_counter()
        for _ in range(n_steps):
            action = agent.action(state)
            outcome = env.step(action)
            agent.remember(Event(state, action, outcome))
            agent.learn()
            state = env.reset() if outcome.done else outcome.observation
        elapsed = time.perf_counter() - start

    print(f"  {elapsed / n_steps * 1000:8.3f} ms/timestep (includes compilation)")
    print(f"  learn steps: {agent.learn_steps}")
    print()


# ── Main ─────────────────────────────────────────────────────────────


def main() -> None:
    print(f"JAX backend: {jax.default_backend()}")
    print(f"Devices: {jax.devices()}")
    print()

    bench_policy_learn()
    bench_agent_timestep()

    print("Benchmark complete.")


if __name__ == "__main__":
    main()
