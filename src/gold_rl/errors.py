"""Error taxonomy for gold_rl.

Every error derives from :class:`GoldError` and from the closest builtin,
so callers can catch either the library-wide base or the usual
``ValueError`` / ``RuntimeError``.

Only :class:`InsufficientDataError` and :class:`EmptyBatchError` are
recoverable inside the training loop: ``DeepQAgent.learn`` turns them
into a skipped step.  Everything else propagates to the caller.
"""

from __future__ import annotations


class GoldError(Exception):
    """Base class for all gold_rl errors."""


class ShapeError(GoldError, ValueError):
    """Input rank or shape is incompatible with a layer or activation."""


class NotCompiledError(GoldError, RuntimeError):
    """A layer or model was evaluated before ``compile``."""


class InsufficientDataError(GoldError, ValueError):
    """The experience store holds fewer events than requested."""

    def __init__(self, requested: int, available: int) -> None:
        super().__init__(
            f"cannot sample {requested} events, store holds {available}"
        )
        self.requested = requested
        self.available = available


class EmptyBatchError(GoldError, ValueError):
    """``Policy.learn`` was called with a batch of zero rows."""


class EnvError(GoldError, RuntimeError):
    """Failure surfaced by an environment implementation."""
