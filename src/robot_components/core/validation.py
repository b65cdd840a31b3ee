"""Argument checks shared by the model constructors."""

from typing import Sequence, Tuple

import jax
import jax.numpy as jnp

Array = jax.Array


def check_limits(limits: Sequence[float], what: str) -> Tuple[float, float]:
    """Return `limits` as a (lower, upper) float pair, rejecting inverted intervals."""
    lower, upper = (float(v) for v in limits)
    if lower > upper:
        raise ValueError(f"{what}: lower limit {lower} exceeds upper limit {upper}")
    return lower, upper


def check_axis(axis, what: str) -> Array:
    axis = jnp.asarray(axis, dtype=jnp.float64)
    if axis.shape != (3,) or float(jnp.linalg.norm(axis)) < 1e-12:
        raise ValueError(f"{what}: axis must be a non-zero 3D vector")
    return axis
