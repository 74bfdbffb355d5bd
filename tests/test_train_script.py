"""Tests for scripts/train.py driven with a tiny in-process config."""

from __future__ import annotations

import importlib.util
from pathlib import Path

import pytest

from gold_rl.algorithms.deepq import AgentConfig, ScheduleConfig
from gold_rl.configs import TrainConfig
from gold_rl.metrics import read_metrics
from gold_rl.policies import PolicyConfig

_SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "train.py"


def _load_script():
    spec = importlib.util.spec_from_file_location("gold_rl_train_script", _SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def config(tmp_path: Path) -> TrainConfig:
    return TrainConfig(
        env_id="Catch-v0",
        agent=AgentConfig(
            policy=PolicyConfig(hidden_sizes=(8,), batch_size=4),
            epsilon=ScheduleConfig(decay_rate=0.9, min_rate=0.0),
            buffer_size=100,
            metrics_path=str(tmp_path / "metrics.jsonl"),
        ),
        episodes=3,
        view=False,
        save_path=str(tmp_path / "policy.eqx"),
    )


class TestTrainScript:
    def test_records_every_episode(self, config: TrainConfig, capsys) -> None:
        _load_script().main(config)

        records = read_metrics(config.agent.metrics_path)
        assert [r["episode"] for r in records] == [0, 1, 2]
        assert all(r["status"] == "completed" and r["steps"] == 9 for r in records)
        assert all(r["score"] in (1.0, -1.0) for r in records)
        assert Path(config.save_path).exists()
        assert "episodes=3" in capsys.readouterr().out

    def test_epsilon_is_value_used_on_last_step(self, config: TrainConfig) -> None:
        _load_script().main(config)

        records = read_metrics(config.agent.metrics_path)
        # Catch episodes last 9 steps; the last one acts after 9k + 8 decays
        for k, r in enumerate(records):
            assert r["epsilon"] == pytest.approx(0.9 ** (9 * k + 8), rel=1e-6)
