"""Policy persistence via Equinox serialization.

gold_rl owns no file format: parameters and optimizer state are written
with ``equinox.tree_serialise_leaves`` and read back into a policy of the
same structure.

Usage::

    from gold_rl.checkpoint import load_policy, save_policy

    save_policy("runs/catch/policy.eqx", agent.policy)
    restored = load_policy("runs/catch/policy.eqx", like=fresh_policy)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, TypeVar

import equinox as eqx

from gold_rl.policies.policy import Policy

T = TypeVar("T")

logger = logging.getLogger(__name__)


def save_eqx(path: str | Path, pytree: Any) -> Path:
    """Save any pytree with Equinox's leaf serialization.

    Returns the path that was written; parent directories are created.
    """
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    eqx.tree_serialise_leaves(str(p), pytree)
    return p


def load_eqx(path: str | Path, like: T) -> T:
    """Load a pytree saved with :func:`save_eqx` into the structure of *like*."""
    return eqx.tree_deserialise_leaves(str(path), like)


def save_policy(path: str | Path, policy: Policy) -> Path:
    """Write the model and optimizer state of *policy*."""
    p = save_eqx(path, (policy.model, policy.opt_state))
    logger.info("Saved %s (%d learn steps) to %s", policy.name, policy.steps, p)
    return p


def load_policy(path: str | Path, like: Policy) -> Policy:
    """Return a clone of *like* carrying the parameters stored at *path*.

    *like* must have the same architecture as the saved policy; it is
    not modified.
    """
    policy = like.clone()
    policy.model, policy.opt_state = load_eqx(path, (policy.model, policy.opt_state))
    return policy
