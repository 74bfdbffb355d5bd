"""Tests for preset configuration registry and CLI."""

from __future__ import annotations

import pytest

from gold_rl.algorithms.deepq.config import AgentConfig
from gold_rl.configs.presets import PRESETS, TrainConfig, cli
from gold_rl.env import make


class TestPresetRegistry:
    """Verify that all presets are well-formed."""

    def test_presets_non_empty(self) -> None:
        assert len(PRESETS) > 0

    @pytest.mark.parametrize("name", list(PRESETS.keys()))
    def test_preset_structure(self, name: str) -> None:
        desc, config = PRESETS[name]
        assert isinstance(desc, str) and len(desc) > 0
        assert isinstance(config, TrainConfig)
        assert isinstance(config.agent, AgentConfig)

    @pytest.mark.parametrize("name", list(PRESETS.keys()))
    def test_preset_env_exists(self, name: str) -> None:
        _, config = PRESETS[name]
        make(config.env_id)

    def test_expected_presets_exist(self) -> None:
        assert {"catch_deepq", "catch_deepq_per"}.issubset(PRESETS)

    def test_negative_episodes(self) -> None:
        with pytest.raises(ValueError):
            TrainConfig(episodes=-1)


class TestCLI:
    """Verify overridable_config_cli integration."""

    def test_select_preset(self) -> None:
        config = cli(["catch_deepq"])
        assert config.env_id == "Catch-v0"

    def test_override_agent_field(self) -> None:
        config = cli(["catch_deepq", "--agent.gamma", "0.5"])
        assert config.agent.gamma == pytest.approx(0.5)

    def test_override_nested_field(self) -> None:
        config = cli(["catch_deepq_per", "--agent.policy.learning_rate", "3e-4"])
        assert config.agent.policy.learning_rate == pytest.approx(3e-4)

    def test_override_episodes(self) -> None:
        config = cli(["catch_deepq", "--episodes", "7"])
        assert config.episodes == 7

    def test_override_env_id(self) -> None:
        config = cli(["catch_deepq", "--env_id", "WideCatch-v0"])
        assert config.env_id == "WideCatch-v0"

    def test_prioritized_preset(self) -> None:
        assert cli(["catch_deepq_per"]).agent.prioritized
        assert not cli(["catch_deepq"]).agent.prioritized

    def test_smoke_preset_is_quiet(self) -> None:
        config = cli(["catch_deepq_smoke"])
        assert not config.view
        assert config.episodes == 20
