"""Catch: a one-ball, one-paddle miniature of Pong.

A ball appears in a random column of the top row and falls one row per
step.  The paddle lives on the bottom row and moves left, stays, or
moves right.  When the ball reaches the paddle row the episode ends with
reward ``+1`` for a catch and ``-1`` for a miss; every earlier step pays
nothing.

Observations are the ``(rows, columns)`` board with ``1.0`` at the ball
and the paddle; the default MLP flattens them.
"""

from __future__ import annotations

from typing import Any

import equinox as eqx
import jax
import jax.numpy as jnp

from gold_rl.env.functional import EnvParams, EnvState, FunctionalEnv
from gold_rl.env.spaces import Box, Discrete

LEFT, STAY, RIGHT = 0, 1, 2


class CatchState(EnvState):
    ball_row: jax.Array
    ball_col: jax.Array
    paddle_col: jax.Array


class CatchParams(EnvParams):
    rows: int = eqx.field(static=True, default=10)
    columns: int = eqx.field(static=True, default=5)
    # the ball lands after rows - 1 steps
    max_steps: int = eqx.field(static=True, default=9)

    def __check_init__(self) -> None:
        if self.rows < 2 or self.columns < 1:
            raise ValueError(
                f"Catch needs at least 2 rows and 1 column, got {self.rows}x{self.columns}"
            )


class Catch(FunctionalEnv):
    """Move the paddle under the falling ball.

    Actions: ``LEFT``, ``STAY``, ``RIGHT``.  The paddle stops at the
    walls.  If ``max_steps`` is shorter than the fall, the episode is cut
    off with reward 0 and ``info["truncated"]`` set.
    """

    def default_params(self) -> CatchParams:
        return CatchParams()

    def reset(
        self,
        key: jax.Array,
        params: CatchParams,
    ) -> tuple[jax.Array, CatchState]:
        state = CatchState(
            ball_row=jnp.int32(0),
            ball_col=jax.random.randint(key, (), 0, params.columns, dtype=jnp.int32),
            paddle_col=jnp.int32(params.columns // 2),
            time=jnp.int32(0),
        )
        return self._board(state, params), state

    def step(
        self,
        key: jax.Array,
        state: CatchState,
        action: jax.Array,
        params: CatchParams,
    ) -> tuple[jax.Array, CatchState, jax.Array, jax.Array, dict[str, Any]]:
        paddle = jnp.clip(state.paddle_col + action - STAY, 0, params.columns - 1)
        new_state = CatchState(
            ball_row=jnp.minimum(state.ball_row + 1, params.rows - 1),
            ball_col=state.ball_col,
            paddle_col=paddle,
            time=state.time + 1,
        )

        landed = new_state.ball_row == params.rows - 1
        caught = landed & (paddle == state.ball_col)
        reward = jnp.where(landed, jnp.where(caught, 1.0, -1.0), 0.0).astype(jnp.float32)
        truncated = ~landed & (new_state.time >= params.max_steps)

        info = {"terminated": landed, "truncated": truncated, "caught": caught}
        return self._board(new_state, params), new_state, reward, landed | truncated, info

    def observation_space(self, params: CatchParams) -> Box:
        return Box(low=0.0, high=1.0, shape=(params.rows, params.columns))

    def action_space(self, params: CatchParams) -> Discrete:
        return Discrete(n=3)

    def describe(self, state: CatchState, params: CatchParams) -> str:
        """Board as text: ``o`` ball, ``=`` paddle, ``@`` ball on paddle."""
        board = [["."] * params.columns for _ in range(params.rows)]
        board[-1][int(state.paddle_col)] = "="
        r, c = int(state.ball_row), int(state.ball_col)
        board[r][c] = "@" if board[r][c] == "=" else "o"
        return "\n".join("".join(row) for row in board)

    @staticmethod
    def _board(state: CatchState, params: CatchParams) -> jax.Array:
        board = jnp.zeros((params.rows, params.columns), dtype=jnp.float32)
        board = board.at[params.rows - 1, state.paddle_col].set(1.0)
        return board.at[state.ball_row, state.ball_col].set(1.0)
