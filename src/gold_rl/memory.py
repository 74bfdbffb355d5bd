"""Experience storage for off-policy learning.

The store lives outside any compiled code: events are kept as host-side
Python objects and only the sampled batch is converted to jax arrays,
ready for the jitted learn step.

Two stores share one interface (``remember`` / ``sample`` / ``len``):

* ``ExperienceStore`` - uniform sampling without replacement.  Unbounded
  by default; with a ``capacity`` it is a ring buffer that evicts the
  oldest event first.
* ``PrioritizedExperienceStore`` - proportional prioritization
  (Schaul et al., 2015) over a sum tree, with importance weights.

Sampling draws from a seeded ``numpy.random.Generator``, so a fixed seed
and the same sequence of calls give the same batches.

Typical usage::

    store = ExperienceStore(capacity=100_000, seed=0)
    store.remember(Event(state, action, outcome))
    try:
        batch = store.sample(32)        # EventBatch of jax arrays
    except InsufficientDataError:
        pass                            # not enough data yet, skip learning
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence

import jax.numpy as jnp
import numpy as np

from gold_rl.errors import InsufficientDataError
from gold_rl.types import Event, EventBatch


def stack_events(
    events: Sequence[Event],
    indices: np.ndarray,
    weights: np.ndarray | None = None,
) -> EventBatch:
    """Stack events into an ``EventBatch`` of jax arrays."""
    if weights is None:
        weights = np.ones(len(events), dtype=np.float32)
    return EventBatch(
        states=jnp.asarray(np.stack([np.asarray(e.state, dtype=np.float32) for e in events])),
        actions=jnp.asarray(np.array([e.action for e in events], dtype=np.int32)),
        rewards=jnp.asarray(np.array([e.outcome.reward for e in events], dtype=np.float32)),
        next_states=jnp.asarray(
            np.stack([np.asarray(e.outcome.observation, dtype=np.float32) for e in events])
        ),
        dones=jnp.asarray(np.array([e.outcome.done for e in events], dtype=np.float32)),
        indices=jnp.asarray(np.asarray(indices, dtype=np.int32)),
        weights=jnp.asarray(weights.astype(np.float32)),
    )


class ExperienceStore:
    """Event store with FIFO eviction and uniform sampling.

    Single-writer, single-reader: the owning agent's loop is the only
    caller, so there is no locking.
    """

    def __init__(self, capacity: int | None = None, *, seed: int = 0) -> None:
        if capacity is not None and capacity < 1:
            raise ValueError(f"capacity must be >= 1 or None, got {capacity}")
        self.capacity = capacity
        self._events: list[Event] = []
        self._ptr = 0
        self._rng = np.random.default_rng(seed)

    def remember(self, event: Event) -> None:
        """Store one event, evicting the oldest when full."""
        if self.capacity is None or len(self._events) < self.capacity:
            self._events.append(event)
        else:
            self._events[self._ptr] = event
            self._ptr = (self._ptr + 1) % self.capacity

    def sample(self, batch_size: int) -> EventBatch:
        """Uniformly sample *batch_size* distinct events."""
        self._check_available(batch_size)
        indices = self._rng.choice(len(self._events), size=batch_size, replace=False)
        return stack_events([self._events[i] for i in indices], indices)

    def clear(self) -> None:
        self._events.clear()
        self._ptr = 0

    def _check_available(self, batch_size: int) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        if len(self._events) < batch_size:
            raise InsufficientDataError(batch_size, len(self._events))

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[Event]:
        """Events from oldest to newest."""
        yield from self._events[self._ptr:]
        yield from self._events[: self._ptr]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(size={len(self)}, capacity={self.capacity})"


class SumTree:
    """Binary tree where parent = sum of children.  O(log n) proportional lookup."""

    def __init__(self, capacity: int) -> None:
        self.capacity = capacity
        self.tree = np.zeros(2 * capacity - 1, dtype=np.float64)

    def update(self, data_idx: int, priority: float) -> None:
        tree_idx = data_idx + self.capacity - 1
        delta = priority - self.tree[tree_idx]
        self.tree[tree_idx] = priority
        while tree_idx > 0:
            tree_idx = (tree_idx - 1) // 2
            self.tree[tree_idx] += delta

    def get(self, value: float) -> int:
        """Leaf data index whose cumulative range covers *value*."""
        idx = 0
        while idx < self.capacity - 1:
            left = 2 * idx + 1
            if value <= self.tree[left]:
                idx = left
            else:
                value -= self.tree[left]
                idx = left + 1
        return idx - (self.capacity - 1)

    def priority(self, data_idx: int) -> float:
        return float(self.tree[data_idx + self.capacity - 1])

    @property
    def total(self) -> float:
        return float(self.tree[0])


class PrioritizedExperienceStore(ExperienceStore):
    """Bounded store sampling events in proportion to their priority.

    New events enter with the current maximum priority so that each is
    sampled at least once.  ``beta`` anneals from *beta_start* to 1 over
    *beta_frames* sample calls; the returned ``weights`` are normalized
    importance-sampling corrections.
    """

    def __init__(
        self,
        capacity: int,
        *,
        alpha: float = 0.6,
        beta_start: float = 0.4,
        beta_frames: int = 100_000,
        epsilon: float = 1e-6,
        seed: int = 0,
    ) -> None:
        if capacity is None:
            raise ValueError("PrioritizedExperienceStore requires a capacity")
        super().__init__(capacity, seed=seed)
        self.alpha = alpha
        self.beta_start = beta_start
        self.beta_frames = beta_frames
        self.epsilon = epsilon
        self._tree = SumTree(capacity)
        self._max_priority = 1.0
        self._frame = 0
        self._write = 0

    def remember(self, event: Event) -> None:
        slot = self._write
        if len(self._events) < self.capacity:
            self._events.append(event)
        else:
            self._events[slot] = event
            self._ptr = (self._ptr + 1) % self.capacity
        self._tree.update(slot, self._max_priority**self.alpha)
        self._write = (self._write + 1) % self.capacity

    def sample(self, batch_size: int) -> EventBatch:
        """Stratified proportional sample; rows may repeat."""
        self._check_available(batch_size)
        self._frame += 1
        beta = min(
            1.0, self.beta_start + self._frame * (1.0 - self.beta_start) / self.beta_frames
        )

        indices = np.zeros(batch_size, dtype=np.int64)
        priorities = np.zeros(batch_size, dtype=np.float64)
        segment = self._tree.total / batch_size
        for i in range(batch_size):
            value = self._rng.uniform(segment * i, segment * (i + 1))
            idx = min(self._tree.get(value), len(self._events) - 1)
            indices[i] = idx
            priorities[i] = self._tree.priority(idx)

        probs = priorities / self._tree.total
        weights = (len(self._events) * probs) ** (-beta)
        weights /= weights.max()
        return stack_events([self._events[i] for i in indices], indices, weights)

    def update_priorities(self, indices: np.ndarray, td_errors: np.ndarray) -> None:
        """Reset priorities of sampled slots from their absolute TD errors."""
        priorities = np.abs(np.asarray(td_errors)) + self.epsilon
        for idx, p in zip(np.asarray(indices), priorities):
            self._tree.update(int(idx), float(p) ** self.alpha)
            self._max_priority = max(self._max_priority, float(p))

    def clear(self) -> None:
        super().clear()
        self._tree = SumTree(self.capacity)
        self._max_priority = 1.0
        self._write = 0
