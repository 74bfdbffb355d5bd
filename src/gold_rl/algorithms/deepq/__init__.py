from gold_rl.algorithms.deepq.agent import DeepQAgent
from gold_rl.algorithms.deepq.config import AgentConfig, ScheduleConfig

__all__ = ["AgentConfig", "DeepQAgent", "ScheduleConfig"]
