"""Episode-scoped scalar tracking and background metric emission.

``TrackedScalar`` folds values into a running aggregate.  ``Tracker``
owns a small worker pool that emits finished episode records (console
log plus optional JSONL file) off the training thread.  Workers only
read the record they were handed; they never touch the experience store
or policy parameters.

``Tracker.wait()`` is a full barrier: it returns once every submitted
record has been emitted, and re-raises the first failure.
"""

from __future__ import annotations

import enum
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

from gold_rl.metrics import MetricsLogger, log_episode

logger = logging.getLogger(__name__)


class Aggregator(enum.Enum):
    SUM = "sum"
    MAX = "max"
    MIN = "min"
    MEAN = "mean"
    LAST = "last"


class TrackedScalar:
    """A named scalar updated through an aggregator.

    ``MEAN`` averages the values passed to ``inc``; *initial* only
    serves as the value reported before the first ``inc``.  Once the
    owning episode has flushed, the handle is closed and ``inc`` raises.
    """

    def __init__(
        self,
        name: str,
        initial: float = 0.0,
        aggregator: Aggregator = Aggregator.SUM,
    ) -> None:
        self.name = name
        self.aggregator = aggregator
        self._value = float(initial)
        self._count = 0
        self._closed = False

    def inc(self, value: float) -> float:
        """Fold *value* into the aggregate and return the new aggregate."""
        if self._closed:
            raise RuntimeError(f"scalar {self.name!r} was already flushed with its episode")
        value = float(value)
        agg = self.aggregator
        if agg is Aggregator.SUM:
            self._value += value
        elif agg is Aggregator.MAX:
            self._value = value if self._count == 0 else max(self._value, value)
        elif agg is Aggregator.MIN:
            self._value = value if self._count == 0 else min(self._value, value)
        elif agg is Aggregator.MEAN:
            self._value = (self._value * self._count + value) / (self._count + 1)
        else:
            self._value = value
        self._count += 1
        return self._value

    @property
    def value(self) -> float:
        return self._value

    @property
    def count(self) -> int:
        return self._count

    def close(self) -> None:
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def __repr__(self) -> str:
        return f"TrackedScalar({self.name!r}, {self.aggregator.value}={self._value:.4g})"


class Tracker:
    """Emit episode records on a background worker pool.

    Parameters
    ----------
    metrics_logger:
        Optional JSONL sink; every record is also logged to the console.
    max_workers:
        Pool size.  The default single worker keeps records in order.
    """

    def __init__(
        self,
        metrics_logger: MetricsLogger | None = None,
        *,
        max_workers: int = 1,
    ) -> None:
        self.metrics_logger = metrics_logger
        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="gold-track")
        self._pending: list[Future[None]] = []
        self._error: BaseException | None = None
        self._lock = threading.Lock()
        self._closed = False

    def submit(self, record: dict[str, Any]) -> Future[None]:
        """Schedule *record* for emission.  The record is copied first."""
        if self._closed:
            raise RuntimeError("Tracker is closed")
        future = self._pool.submit(self._emit, dict(record))
        with self._lock:
            self._prune()
            self._pending.append(future)
        return future

    def _prune(self) -> None:
        # caller holds self._lock; finished futures leave only their first error
        running = []
        for future in self._pending:
            if not future.done():
                running.append(future)
            elif self._error is None:
                self._error = future.exception()
        self._pending = running

    @property
    def pending(self) -> int:
        """Number of submitted records not yet known to be emitted."""
        with self._lock:
            return len(self._pending)

    def _emit(self, record: dict[str, Any]) -> None:
        log_episode(int(record.get("episode", -1)), record)
        if self.metrics_logger is not None:
            self.metrics_logger.write(record)

    def wait(self) -> None:
        """Block until all submitted records are emitted."""
        with self._lock:
            pending, self._pending = self._pending, []
            error, self._error = self._error, None
        for future in pending:
            exc = future.exception()
            if exc is not None and error is None:
                error = exc
        if error is not None:
            raise error

    def close(self) -> None:
        """Drain outstanding work, stop the pool and close the sink."""
        if self._closed:
            return
        try:
            self.wait()
        finally:
            self._closed = True
            self._pool.shutdown(wait=True)
            if self.metrics_logger is not None:
                self.metrics_logger.close()

    def __enter__(self) -> Tracker:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
