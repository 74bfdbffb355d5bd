"""Tests for gold_rl.schedule."""

from __future__ import annotations

import jax
import jax.numpy as jnp
import pytest

from gold_rl.schedule import (
    SMALLEST_RATE,
    DecayMode,
    DecaySchedule,
    default_decay_schedule,
    linear_schedule,
)


class TestLinearSchedule:
    def test_start_value(self) -> None:
        sched = linear_schedule(start=1.0, end=0.0, steps=100)
        assert float(sched(0)) == 1.0

    def test_end_value(self) -> None:
        sched = linear_schedule(start=1.0, end=0.0, steps=100)
        assert float(sched(100)) == 0.0

    def test_midpoint(self) -> None:
        sched = linear_schedule(start=1.0, end=0.0, steps=100)
        assert abs(float(sched(50)) - 0.5) < 1e-5

    def test_clamps_beyond_steps(self) -> None:
        sched = linear_schedule(start=1.0, end=0.1, steps=100)
        assert float(sched(200)) == float(sched(100))

    def test_jit_compatible(self) -> None:
        sched = linear_schedule(start=1.0, end=0.0, steps=100)
        val = float(jax.jit(sched)(jnp.int32(50)))
        assert abs(val - 0.5) < 1e-5

    def test_zero_steps_does_not_crash(self) -> None:
        sched = linear_schedule(start=1.0, end=0.0, steps=0)
        assert float(sched(1)) == 0.0


class TestDecaySchedule:
    def test_initial_value(self) -> None:
        assert DecaySchedule(initial_rate=0.8).value() == 0.8

    def test_value_does_not_advance(self) -> None:
        sched = DecaySchedule(1.0, 0.5)
        sched.value()
        sched.value()
        assert sched.value() == 1.0
        assert sched.step == 0

    def test_exponential(self) -> None:
        sched = DecaySchedule(1.0, 0.99)
        sched.advance()
        assert sched.value() == pytest.approx(0.99)
        sched.advance()
        assert sched.value() == pytest.approx(0.99**2)

    def test_floor(self) -> None:
        sched = DecaySchedule(1.0, 0.5, min_rate=0.2)
        for _ in range(10):
            sched.advance()
        assert sched.value() == 0.2

    def test_zero_floor_is_never_reached(self) -> None:
        for mode in DecayMode:
            sched = DecaySchedule(1.0, 0.5, min_rate=0.0, mode=mode, decay_steps=4)
            for _ in range(2000):
                sched.advance()
            assert sched.value() == SMALLEST_RATE
            assert sched.value() > 0.0

    def test_monotone_non_increasing(self) -> None:
        for mode in DecayMode:
            sched = DecaySchedule(1.0, 0.9, 0.05, mode=mode, decay_steps=20)
            values = [sched.value()] + [sched.advance() for _ in range(50)]
            assert all(b <= a for a, b in zip(values, values[1:]))
            assert values[-1] == pytest.approx(0.05)

    def test_linear_mode(self) -> None:
        sched = DecaySchedule(1.0, min_rate=0.0, mode=DecayMode.LINEAR, decay_steps=4)
        assert sched.advance() == pytest.approx(0.75)
        assert sched.advance() == pytest.approx(0.5)

    def test_decay_rate_one_is_constant(self) -> None:
        sched = DecaySchedule(0.3, 1.0)
        for _ in range(5):
            sched.advance()
        assert sched.value() == 0.3

    def test_deterministic(self) -> None:
        a, b = DecaySchedule(1.0, 0.97, 0.1), DecaySchedule(1.0, 0.97, 0.1)
        assert [a.advance() for _ in range(30)] == [b.advance() for _ in range(30)]

    def test_reset(self) -> None:
        sched = DecaySchedule(1.0, 0.5)
        sched.advance()
        sched.reset()
        assert sched.value() == 1.0
        assert sched.step == 0

    @pytest.mark.parametrize(
        "args",
        [
            (0.0, 0.9, 0.0),
            (1.5, 0.9, 0.0),
            (1.0, 0.0, 0.0),
            (1.0, 1.1, 0.0),
            (0.5, 0.9, 0.6),
            (1.0, 0.9, -0.1),
        ],
    )
    def test_validation(self, args: tuple) -> None:
        with pytest.raises(ValueError):
            DecaySchedule(*args)

    def test_default(self) -> None:
        sched = default_decay_schedule()
        assert sched.value() == 1.0
        assert sched.decay_rate == 0.997
        assert sched.min_rate == 0.01

    def test_default_overrides(self) -> None:
        assert default_decay_schedule(decay_rate=0.9).decay_rate == 0.9
