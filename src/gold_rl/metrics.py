"""Structured logging and JSONL metrics for gold_rl.

Console output goes through the standard ``logging`` tree under the
``gold_rl`` logger; :func:`setup_logging` installs a compact formatter.
Per-episode records can additionally be appended to a JSONL file with
:class:`MetricsLogger`, one self-describing JSON object per line.

Usage::

    from gold_rl.metrics import MetricsLogger, setup_logging

    setup_logging()
    with MetricsLogger("runs/catch/metrics.jsonl") as metrics:
        metrics.write({"episode": 0, "score": 1.0})
"""

from __future__ import annotations

import json
import logging
import threading
import time
from pathlib import Path
from typing import IO, Any

import jax.numpy as jnp
import numpy as np

# ---------------------------------------------------------------------------
# Structured console logging
# ---------------------------------------------------------------------------

_LEVEL_ABBREV = {
    logging.DEBUG: "D",
    logging.INFO: "I",
    logging.WARNING: "W",
    logging.ERROR: "E",
    logging.CRITICAL: "C",
}


class _TrainFormatter(logging.Formatter):
    """Compact formatter: abbreviated level + millisecond timestamp.

    Example output::

        I 2026-02-15 14:30:22.123 [gold_rl.episode] episode 3 | steps=12 score=1
    """

    def format(self, record: logging.LogRecord) -> str:
        lvl = _LEVEL_ABBREV.get(record.levelno, "?")
        ts = self.formatTime(record, "%Y-%m-%d %H:%M:%S")
        ms = int(record.msecs)
        msg = record.getMessage()
        return f"{lvl} {ts}.{ms:03d} [{record.name}] {msg}"


def setup_logging(level: int = logging.INFO) -> None:
    """Configure the ``gold_rl`` logger with compact formatting.

    Safe to call multiple times; existing handlers are replaced.
    """
    logger = logging.getLogger("gold_rl")
    logger.setLevel(level)

    for h in logger.handlers[:]:
        logger.removeHandler(h)

    handler = logging.StreamHandler()
    handler.setFormatter(_TrainFormatter())
    logger.addHandler(handler)
    logger.propagate = False


def format_record(record: dict[str, Any], skip: tuple[str, ...] = ("wall_time",)) -> str:
    """Render ``{"score": 1.0, "steps": 3}`` as ``score=1 steps=3``."""
    parts = []
    for k, v in record.items():
        if k in skip:
            continue
        v = _to_python(v)
        parts.append(f"{k}={v:.4g}" if isinstance(v, float) else f"{k}={v}")
    return " ".join(parts)


def log_episode(
    episode: int,
    record: dict[str, Any],
    logger_name: str = "gold_rl.episode",
) -> None:
    """Log a one-line episode summary.

    Example output::

        I 2026-02-15 14:30:22.123 [gold_rl.episode] episode 3 | status=completed steps=12 score=1
    """
    line = f"episode {episode}"
    kv = format_record({k: v for k, v in record.items() if k != "episode"})
    if kv:
        line = f"{line} | {kv}"
    logging.getLogger(logger_name).info(line)


# ---------------------------------------------------------------------------
# JSONL metrics file
# ---------------------------------------------------------------------------


class MetricsLogger:
    """Append-only JSONL logger.

    Writes may come from the tracker's background worker, so each line
    is written under a lock.

    Parameters
    ----------
    path:
        Path to the JSONL file.  Parent directories are created
        automatically.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._file: IO[str] = open(self._path, "a")  # noqa: SIM115
        self._start_time = time.monotonic()
        self._lock = threading.Lock()

    def write(self, record: dict[str, Any]) -> None:
        """Write one record as a JSON line.

        Adds ``wall_time`` (seconds since logger creation) unless present.
        JAX/numpy scalars are converted to Python numbers.
        """
        row = {k: _to_python(v) for k, v in record.items()}
        if "wall_time" not in row:
            row["wall_time"] = round(time.monotonic() - self._start_time, 3)
        line = json.dumps(row, default=str) + "\n"
        with self._lock:
            self._file.write(line)
            self._file.flush()

    def close(self) -> None:
        with self._lock:
            if not self._file.closed:
                self._file.close()

    @property
    def path(self) -> Path:
        return self._path

    def __enter__(self) -> MetricsLogger:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"MetricsLogger({self._path})"


def read_metrics(path: str | Path) -> list[dict[str, Any]]:
    """Read all records from a JSONL metrics file."""
    p = Path(path)
    if not p.exists():
        return []
    records = []
    for line in p.read_text().splitlines():
        line = line.strip()
        if line:
            records.append(json.loads(line))
    return records


def _to_python(val: Any) -> Any:
    """Convert JAX/numpy scalars to plain Python types for JSON."""
    if isinstance(val, (jnp.ndarray, np.ndarray)):
        return val.item()
    if isinstance(val, (np.integer, np.floating)):
        return val.item()
    return val
