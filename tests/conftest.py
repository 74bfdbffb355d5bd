"""Shared test fixtures.

Pins JAX to the CPU backend *before* JAX is imported anywhere so test
runs behave the same on GPU machines.  This must live in conftest.py
(loaded by pytest before any test module) because setting the variable
after JAX's backend initialises has no effect.
"""

import os

os.environ.setdefault("JAX_PLATFORMS", "cpu")

import jax  # noqa: E402
import pytest  # noqa: E402


@pytest.fixture
def key() -> jax.Array:
    return jax.random.PRNGKey(0)
