"""Tests for gold_rl.episode."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from gold_rl.episode import Episode, EpisodeStatus, make_episodes
from gold_rl.metrics import MetricsLogger, read_metrics
from gold_rl.track import Aggregator, Tracker
from gold_rl.types import Outcome


def _outcome(reward: float = 0.0, done: bool = False) -> Outcome:
    return Outcome(observation=np.zeros(2, dtype=np.float32), reward=reward, done=done)


class TestMakeEpisodes:
    def test_exactly_n(self) -> None:
        episodes = list(make_episodes(5))
        assert [e.i for e in episodes] == [0, 1, 2, 3, 4]

    def test_zero(self) -> None:
        assert list(make_episodes(0)) == []

    def test_negative(self) -> None:
        with pytest.raises(ValueError):
            make_episodes(-1)

    def test_start_offset(self) -> None:
        assert [e.i for e in make_episodes(2, start=10)] == [10, 11]

    def test_unused_episode_is_ended(self) -> None:
        episodes = list(make_episodes(2))
        assert all(e.record is not None for e in episodes)
        assert all(e.status is EpisodeStatus.CREATED for e in episodes)
        assert all(e.length == 0 for e in episodes)

    def test_previous_episode_ended_before_next(self) -> None:
        it = make_episodes(2)
        first = next(it)
        assert first.record is None
        next(it)
        assert first.record is not None


class TestEpisodeSteps:
    def test_runs_to_max_steps(self) -> None:
        episode = Episode(0)
        seen = [t.i for t in episode.steps(4)]
        assert seen == [0, 1, 2, 3]
        assert episode.length == 4
        assert episode.status is EpisodeStatus.TRUNCATED

    def test_stops_after_done(self) -> None:
        episode = Episode(0)
        seen = []
        for t in episode.steps(10):
            seen.append(t.i)
            t.observe(_outcome(done=t.i == 2))
        assert seen == [0, 1, 2]
        assert episode.length == 3
        assert episode.status is EpisodeStatus.COMPLETED

    def test_break_after_done(self) -> None:
        episode = Episode(0)
        for t in episode.steps(10):
            t.observe(_outcome(done=t.i == 1))
            if t.done:
                break
        episode.end()
        assert episode.length == 2
        assert episode.status is EpisodeStatus.COMPLETED

    def test_break_without_done_truncates(self) -> None:
        episode = Episode(0)
        for t in episode.steps(10):
            t.observe(_outcome())
            if t.i == 2:
                break
        episode.end()
        assert episode.length == 3
        assert episode.status is EpisodeStatus.TRUNCATED

    def test_done_on_last_step_completes(self) -> None:
        episode = Episode(0)
        for t in episode.steps(3):
            t.observe(_outcome(done=t.i == 2))
        assert episode.status is EpisodeStatus.COMPLETED

    def test_single_pass(self) -> None:
        episode = Episode(0)
        list(episode.steps(2))
        with pytest.raises(RuntimeError):
            episode.steps(2)

    def test_invalid_max_steps(self) -> None:
        with pytest.raises(ValueError):
            Episode(0).steps(0)

    def test_status_running(self) -> None:
        episode = Episode(0)
        assert episode.status is EpisodeStatus.CREATED
        steps = episode.steps(3)
        next(steps)
        assert episode.status is EpisodeStatus.RUNNING
        episode.end()

    def test_on_step_once_per_consumed_timestep(self) -> None:
        calls = []
        episode = Episode(0, on_step=lambda: calls.append(1))
        for t in episode.steps(10):
            t.observe(_outcome(done=t.i == 3))
        assert len(calls) == 4

    def test_on_step_counts_observed_step_on_break(self) -> None:
        calls = []
        episode = Episode(0, on_step=lambda: calls.append(1))
        for t in episode.steps(10):
            t.observe(_outcome(done=True))
            break
        episode.end()
        assert len(calls) == 1

    def test_unobserved_step_on_break_not_counted(self) -> None:
        calls = []
        episode = Episode(0, on_step=lambda: calls.append(1))
        for _ in episode.steps(10):
            break
        episode.end()
        assert calls == []
        assert episode.length == 0


class TestEpisodeTracking:
    def test_duplicate_scalar(self) -> None:
        episode = Episode(0)
        episode.track_scalar("score")
        with pytest.raises(ValueError):
            episode.track_scalar("score")

    def test_record_contents(self) -> None:
        episode = Episode(3)
        score = episode.track_scalar("score", 0.0, Aggregator.MAX)
        for t in episode.steps(5):
            t.observe(_outcome(reward=1.0, done=t.i == 1))
            score.inc(1.0)
        assert episode.record == {
            "episode": 3,
            "status": "completed",
            "steps": 2,
            "score": 1.0,
        }

    def test_log_once(self, tmp_path: Path) -> None:
        path = tmp_path / "metrics.jsonl"
        with Tracker(MetricsLogger(path)) as tracker:
            episode = Episode(0, tracker=tracker)
            episode.track_scalar("score").inc(2.0)
            list(episode.steps(2))
            episode.log()
            episode.end()
        records = read_metrics(path)
        assert len(records) == 1
        assert records[0]["score"] == 2.0

    def test_inc_after_flush_raises(self) -> None:
        episode = Episode(0)
        eps = episode.track_scalar("eps", 1.0, Aggregator.LAST)
        for t in episode.steps(2):
            eps.inc(0.9 - 0.1 * t.i)
            t.observe(_outcome())
        assert episode.record is not None
        assert episode.record["eps"] == pytest.approx(0.8)
        assert eps.closed
        with pytest.raises(RuntimeError):
            eps.inc(0.5)
        assert episode.record["eps"] == pytest.approx(0.8)

    def test_inc_after_end_raises(self) -> None:
        episode = Episode(0)
        eps = episode.track_scalar("eps", 1.0, Aggregator.LAST)
        for t in episode.steps(5):
            eps.inc(0.7)
            t.observe(_outcome())
            break
        episode.end()
        with pytest.raises(RuntimeError):
            eps.inc(0.5)
        assert episode.record["eps"] == pytest.approx(0.7)

    def test_no_tracking_after_log(self) -> None:
        episode = Episode(0)
        episode.end()
        with pytest.raises(RuntimeError):
            episode.track_scalar("late")

    def test_logs_without_tracker(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level("INFO", logger="gold_rl.episode"):
            episode = Episode(7)
            episode.track_scalar("score").inc(1.0)
            episode.end()
        assert "episode 7" in caplog.text

    def test_every_episode_reaches_tracker(self, tmp_path: Path) -> None:
        path = tmp_path / "metrics.jsonl"
        with Tracker(MetricsLogger(path)) as tracker:
            for episode in make_episodes(3, tracker=tracker):
                for t in episode.steps(2):
                    t.observe(_outcome())
            tracker.wait()
        assert [r["episode"] for r in read_metrics(path)] == [0, 1, 2]
