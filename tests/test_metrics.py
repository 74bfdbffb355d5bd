"""Tests for gold_rl.metrics."""

from __future__ import annotations

import logging
from pathlib import Path

import jax.numpy as jnp
import numpy as np
import pytest

from gold_rl.metrics import (
    MetricsLogger,
    _TrainFormatter,
    format_record,
    log_episode,
    read_metrics,
    setup_logging,
)


class TestMetricsLogger:
    def test_write_and_read(self, tmp_path: Path) -> None:
        path = tmp_path / "metrics.jsonl"
        with MetricsLogger(path) as logger:
            logger.write({"episode": 0, "score": 0.5})
            logger.write({"episode": 1, "score": 0.3, "steps": 42})

        records = read_metrics(path)
        assert len(records) == 2
        assert records[0]["episode"] == 0
        assert records[0]["score"] == 0.5
        assert records[1]["steps"] == 42

    def test_auto_wall_time(self, tmp_path: Path) -> None:
        path = tmp_path / "metrics.jsonl"
        with MetricsLogger(path) as logger:
            logger.write({"episode": 1})
        assert isinstance(read_metrics(path)[0]["wall_time"], float)

    def test_explicit_wall_time_not_overwritten(self, tmp_path: Path) -> None:
        path = tmp_path / "metrics.jsonl"
        with MetricsLogger(path) as logger:
            logger.write({"episode": 1, "wall_time": 99.9})
        assert read_metrics(path)[0]["wall_time"] == 99.9

    def test_jax_and_numpy_scalars(self, tmp_path: Path) -> None:
        path = tmp_path / "metrics.jsonl"
        with MetricsLogger(path) as logger:
            logger.write({"a": jnp.float32(1.5), "b": np.int64(3), "c": np.float32(0.25)})
        record = read_metrics(path)[0]
        assert record["a"] == 1.5
        assert record["b"] == 3
        assert record["c"] == 0.25

    def test_creates_parent_dirs(self, tmp_path: Path) -> None:
        path = tmp_path / "a" / "b" / "metrics.jsonl"
        with MetricsLogger(path) as logger:
            logger.write({"episode": 0})
        assert path.exists()

    def test_appends(self, tmp_path: Path) -> None:
        path = tmp_path / "metrics.jsonl"
        for i in range(2):
            with MetricsLogger(path) as logger:
                logger.write({"episode": i})
        assert len(read_metrics(path)) == 2

    def test_close_idempotent(self, tmp_path: Path) -> None:
        logger = MetricsLogger(tmp_path / "metrics.jsonl")
        logger.close()
        logger.close()

    def test_read_missing_file(self, tmp_path: Path) -> None:
        assert read_metrics(tmp_path / "missing.jsonl") == []


class TestFormatting:
    def test_format_record(self) -> None:
        assert format_record({"score": 1.0, "steps": 3}) == "score=1 steps=3"

    def test_format_record_skips_wall_time(self) -> None:
        assert format_record({"score": 0.5, "wall_time": 1.2}) == "score=0.5"

    def test_log_episode(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="gold_rl.episode"):
            log_episode(3, {"episode": 3, "status": "completed", "score": 1.0})
        assert "episode 3 | status=completed score=1" in caplog.text

    def test_train_formatter(self) -> None:
        record = logging.LogRecord(
            "gold_rl.agent", logging.WARNING, __file__, 1, "hello %s", ("world",), None
        )
        line = _TrainFormatter().format(record)
        assert line.startswith("W ")
        assert line.endswith("[gold_rl.agent] hello world")


class TestSetupLogging:
    def test_installs_single_handler(self) -> None:
        logger = logging.getLogger("gold_rl")
        handlers, level, propagate = logger.handlers[:], logger.level, logger.propagate
        try:
            setup_logging(logging.DEBUG)
            setup_logging(logging.DEBUG)
            assert len(logger.handlers) == 1
            assert isinstance(logger.handlers[0].formatter, _TrainFormatter)
            assert logger.level == logging.DEBUG
        finally:
            logger.handlers[:] = handlers
            logger.setLevel(level)
            logger.propagate = propagate
