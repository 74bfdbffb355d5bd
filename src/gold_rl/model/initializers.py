"""Weight initialization schemes selectable from configuration."""

from __future__ import annotations

import enum
from typing import Callable

import jax

InitFn = Callable[..., jax.Array]


class Initializer(enum.Enum):
    GLOROT_UNIFORM = "glorot_uniform"
    GLOROT_NORMAL = "glorot_normal"
    HE_UNIFORM = "he_uniform"
    HE_NORMAL = "he_normal"
    LECUN_NORMAL = "lecun_normal"
    ZEROS = "zeros"

    def build(self, in_axis: int = -2, out_axis: int = -1) -> InitFn:
        """Return a ``jax.nn.initializers`` function ``(key, shape, dtype)``.

        *in_axis* / *out_axis* locate the fan-in and fan-out dimensions of
        the weight tensor (``(in, out)`` for dense, ``OIHW`` for conv).
        """
        init = jax.nn.initializers
        if self is Initializer.ZEROS:
            return init.zeros
        scaled = {
            Initializer.GLOROT_UNIFORM: init.glorot_uniform,
            Initializer.GLOROT_NORMAL: init.glorot_normal,
            Initializer.HE_UNIFORM: init.he_uniform,
            Initializer.HE_NORMAL: init.he_normal,
            Initializer.LECUN_NORMAL: init.lecun_normal,
        }[self]
        return scaled(in_axis=in_axis, out_axis=out_axis)
