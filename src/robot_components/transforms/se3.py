"""SE(3) rigid body transforms in JAX.

Transforms are 4x4 homogeneous matrices; twists are 6D vectors
[vx, vy, vz, wx, wy, wz]. Lengths are millimetres throughout the library,
so translations here are too.
"""

import jax
import jax.numpy as jnp

from . import so3

Array = jax.Array


def from_position_and_rotation(p: Array, R: Array) -> Array:
    """
    Construct SE(3) transform from position and rotation.

    Args:
        p: (..., 3) position vector
        R: (..., 3, 3) rotation matrix

    Returns:
        (..., 4, 4) homogeneous transformation matrix
    """
    batch_shape = jnp.broadcast_shapes(p.shape[:-1], R.shape[:-2])
    p = jnp.broadcast_to(p, batch_shape + (3,))
    R = jnp.broadcast_to(R, batch_shape + (3, 3))

    T = jnp.zeros(batch_shape + (4, 4), dtype=p.dtype)
    T = T.at[..., :3, :3].set(R)
    T = T.at[..., :3, 3].set(p)
    T = T.at[..., 3, 3].set(1.0)

    return T


def identity() -> Array:
    """The (4, 4) identity transform."""
    return jnp.eye(4, dtype=jnp.float64)


def translation(v: Array) -> Array:
    """Pure translation by the (3,) vector `v`."""
    v = jnp.asarray(v, dtype=jnp.float64)
    return from_position_and_rotation(v, jnp.eye(3, dtype=v.dtype))


def rotation_about_axis(point: Array, axis: Array, degrees) -> Array:
    """
    Rotation of `degrees` about the line through `point` along `axis`.

    Args:
        point: (3,) point on the rotation axis
        axis: (3,) axis direction
        degrees: rotation angle in degrees

    Returns:
        (4, 4) transformation matrix
    """
    point = jnp.asarray(point, dtype=jnp.float64)
    R = so3.from_axis_angle(axis, degrees)
    # x' = R (x - p) + p
    return from_position_and_rotation(point - R @ point, R)


def twist(axis: Array, point: Array, prismatic: bool = False) -> Array:
    """
    Unit twist of a joint given its axis and a point on it.

    Revolute joints yield [-w x p, w], prismatic joints [v, 0].

    Args:
        axis: (3,) joint axis direction, normalized here
        point: (3,) point on the axis (ignored for prismatic joints)
        prismatic: whether the joint translates along its axis

    Returns:
        (6,) twist vector
    """
    axis = jnp.asarray(axis, dtype=jnp.float64)
    axis = axis / jnp.linalg.norm(axis)
    if prismatic:
        return jnp.concatenate([axis, jnp.zeros(3)])
    point = jnp.asarray(point, dtype=jnp.float64)
    return jnp.concatenate([-jnp.cross(axis, point), axis])


def exp(twist: Array) -> Array:
    """
    SE(3) exponential map: convert twist to transformation matrix.

    Small rotation angles fall back to Taylor expansions of the V matrix
    coefficients, so pure translations are exact.

    Args:
        twist: (..., 6) array of twists [vx, vy, vz, wx, wy, wz].

    Returns:
        (..., 4, 4) array of transformation matrices.
    """
    v, w = twist[..., :3], twist[..., 3:]
    angle = jnp.linalg.norm(w, axis=-1, keepdims=True)
    angle_sq = angle * angle
    is_small_angle = angle < 1e-6

    # Guarded denominators keep the unused branch of jnp.where finite
    safe_sq = jnp.where(is_small_angle, 1.0, angle_sq)
    safe_angle = jnp.where(is_small_angle, 1.0, angle)

    # A = (1 - cos(theta)) / theta^2, B = (theta - sin(theta)) / theta^3
    A = jnp.where(is_small_angle, 0.5 - angle_sq / 24.0, (1.0 - jnp.cos(angle)) / safe_sq)
    B = jnp.where(is_small_angle, 1.0 / 6.0 - angle_sq / 120.0,
                  (angle - jnp.sin(angle)) / (safe_sq * safe_angle))

    K = so3.skew_symmetric(w)
    I = jnp.broadcast_to(jnp.eye(3, dtype=twist.dtype), K.shape)

    V = I + A[..., None] * K + B[..., None] * jnp.matmul(K, K)
    t = jnp.einsum("...ij,...j->...i", V, v)

    return from_position_and_rotation(t, so3.exp(w))


def multiply(T1: Array, T2: Array) -> Array:
    """
    Compose two transforms, T1 @ T2 (apply T2 first).

    Args:
        T1: (..., 4, 4) first transformation matrix
        T2: (..., 4, 4) second transformation matrix

    Returns:
        (..., 4, 4) result of T1 @ T2
    """
    return jnp.matmul(T1, T2)


def inverse(T: Array) -> Array:
    """
    Inverse of an SE(3) transform, [[R^T, -R^T t], [0, 1]].

    Args:
        T: (..., 4, 4) transformation matrix

    Returns:
        (..., 4, 4) inverse transformation matrix
    """
    R_inv = jnp.swapaxes(T[..., :3, :3], -1, -2)
    t_inv = -jnp.einsum("...ij,...j->...i", R_inv, T[..., :3, 3])
    return from_position_and_rotation(t_inv, R_inv)


def apply(T: Array, points: Array) -> Array:
    """
    Apply SE(3) transformation to points.

    Args:
        T: (4, 4) transformation matrix
        points: (3,) or (N, 3) points to transform

    Returns:
        (3,) or (N, 3) transformed points
    """
    return points @ T[:3, :3].T + T[:3, 3]


def get_position(T: Array) -> Array:
    """(..., 3) translation part of `T`."""
    return T[..., :3, 3]


def get_rotation(T: Array) -> Array:
    """(..., 3, 3) rotation part of `T`."""
    return T[..., :3, :3]
