"""Linear interpolation of axis value vectors.

Interpolation is linear in the stored axis value domain; rotational values
are not wrapped onto the shortest arc.
"""

import jax
import jax.numpy as jnp

from ..errors import DimensionMismatchError

Array = jax.Array


def _parameters(count: int) -> Array:
    if count < 0:
        raise ValueError(f"Interpolation count must be non-negative, got {count}")
    return jnp.arange(1, count + 1, dtype=jnp.float64) / max(count, 1)


def interpolate(from_values, to_values, count: int) -> Array:
    """Evenly spaced vectors from `from_values` (excluded) to `to_values` (included).

    Sample k of `count` sits at t = k / count. The last sample is `to_values`
    itself, not the result of the arithmetic, so it carries no rounding error.

    Args:
        from_values: (n,) start vector
        to_values: (n,) end vector
        count: Number of samples

    Returns:
        Array of shape (count, n)

    Raises:
        DimensionMismatchError: If the two vectors differ in length
    """
    a = jnp.asarray(from_values, dtype=jnp.float64).reshape(-1)
    b = jnp.asarray(to_values, dtype=jnp.float64).reshape(-1)
    if a.shape != b.shape:
        raise DimensionMismatchError("Interpolation end vector", a.shape[0], b.shape[0])

    t = _parameters(count)
    samples = a[None, :] + t[:, None] * (b - a)[None, :]
    if count:
        samples = samples.at[-1].set(b)
    return samples
