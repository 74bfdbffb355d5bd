from gold_rl.agent.base import Agent

__all__ = ["Agent"]
