"""SO(3) rotation helpers in JAX.

Rotations are stored as 3x3 matrices. Axis-angle vectors (so(3)) carry the
angle in radians as their magnitude; the degree-based helpers at the bottom
of the module are what the robot-facing code uses, since axis values of
rotational joints are expressed in degrees.
"""

import jax
import jax.numpy as jnp

Array = jax.Array


def exp(log_r: Array) -> Array:
    """
    SO(3) exponential map (Rodrigues' formula).

    Args:
        log_r: (..., 3) axis-angle vectors, angle in radians

    Returns:
        (..., 3, 3) rotation matrices
    """
    angle = jnp.linalg.norm(log_r, axis=-1, keepdims=True)
    small_angle = angle < 1e-8

    cos_angle = jnp.where(small_angle, 1.0 - 0.5 * angle**2, jnp.cos(angle))
    sin_angle = jnp.where(small_angle, angle - angle**3 / 6.0, jnp.sin(angle))

    axis = jnp.where(small_angle, log_r, log_r / jnp.where(small_angle, 1.0, angle))
    K = skew_symmetric(axis)

    I = jnp.broadcast_to(jnp.eye(3, dtype=log_r.dtype), log_r.shape[:-1] + (3, 3))
    return I + sin_angle[..., None] * K + (1.0 - cos_angle)[..., None] * jnp.matmul(K, K)


def log(R: Array) -> Array:
    """
    SO(3) logarithm map, the inverse of exp().

    Args:
        R: (..., 3, 3) rotation matrices

    Returns:
        (..., 3) axis-angle vectors
    """
    trace = jnp.trace(R, axis1=-2, axis2=-1)
    angle = jnp.arccos(jnp.clip((trace - 1.0) / 2.0, -1.0, 1.0))

    small_angle = angle < 1e-8
    near_pi = jnp.abs(angle - jnp.pi) < 1e-6

    skew_part = jnp.stack([
        R[..., 2, 1] - R[..., 1, 2],
        R[..., 0, 2] - R[..., 2, 0],
        R[..., 1, 0] - R[..., 0, 1]
    ], axis=-1)

    sin_angle = jnp.where(small_angle, 1.0, jnp.sin(angle))
    axis_general = skew_part / (2.0 * sin_angle[..., None])

    # Near pi the skew part vanishes; take the dominant column of (R + I) / 2
    B = (R + jnp.eye(3, dtype=R.dtype)) / 2.0
    max_idx = jnp.argmax(jnp.diagonal(B, axis1=-2, axis2=-1), axis=-1)
    axis_pi = jnp.take_along_axis(B, max_idx[..., None, None], axis=-1)[..., 0]
    axis_pi = axis_pi / jnp.linalg.norm(axis_pi, axis=-1, keepdims=True)

    axis = jnp.where(near_pi[..., None], axis_pi, axis_general)
    return jnp.where(small_angle[..., None], skew_part / 2.0, angle[..., None] * axis)


def skew_symmetric(v: Array) -> Array:
    """
    Cross-product matrix of a 3D vector.

    Args:
        v: (..., 3) vector

    Returns:
        (..., 3, 3) skew-symmetric matrix
    """
    zeros = jnp.zeros(v.shape[:-1], dtype=v.dtype)

    return jnp.stack([
        jnp.stack([zeros, -v[..., 2], v[..., 1]], axis=-1),
        jnp.stack([v[..., 2], zeros, -v[..., 0]], axis=-1),
        jnp.stack([-v[..., 1], v[..., 0], zeros], axis=-1)
    ], axis=-2)


def from_axis_angle(axis: Array, degrees) -> Array:
    """
    Rotation of `degrees` about `axis`.

    Args:
        axis: (3,) direction, need not be normalized
        degrees: rotation angle in degrees

    Returns:
        (3, 3) rotation matrix
    """
    axis = jnp.asarray(axis, dtype=jnp.float64)
    unit = axis / jnp.linalg.norm(axis)
    return exp(unit * jnp.deg2rad(degrees))


def from_quaternion(quaternions: Array) -> Array:
    """
    Convert (w, x, y, z) quaternions to rotation matrices.

    Args:
        quaternions: (..., 4) quaternions, normalized on the way in

    Returns:
        (..., 3, 3) rotation matrices
    """
    quaternions = quaternions / jnp.linalg.norm(quaternions, axis=-1, keepdims=True)
    w, x, y, z = jnp.moveaxis(quaternions, -1, 0)

    xx, yy, zz = x*x, y*y, z*z
    wx, wy, wz = w*x, w*y, w*z
    xy, xz, yz = x*y, x*z, y*z

    return jnp.stack([
        jnp.stack([1 - 2*(yy + zz), 2*(xy - wz), 2*(xz + wy)], axis=-1),
        jnp.stack([2*(xy + wz), 1 - 2*(xx + zz), 2*(yz - wx)], axis=-1),
        jnp.stack([2*(xz - wy), 2*(yz + wx), 1 - 2*(xx + yy)], axis=-1)
    ], axis=-2)


def to_quaternion(matrix: Array) -> Array:
    """
    Convert rotation matrices to (w, x, y, z) quaternions with w >= 0.

    Args:
        matrix: (..., 3, 3) rotation matrices

    Returns:
        (..., 4) unit quaternions
    """
    m00, m01, m02 = matrix[..., 0, 0], matrix[..., 0, 1], matrix[..., 0, 2]
    m10, m11, m12 = matrix[..., 1, 0], matrix[..., 1, 1], matrix[..., 1, 2]
    m20, m21, m22 = matrix[..., 2, 0], matrix[..., 2, 1], matrix[..., 2, 2]

    trace = m00 + m11 + m22
    eps = jnp.finfo(matrix.dtype).eps

    candidates = [
        (jnp.stack([trace + 1.0, m21 - m12, m02 - m20, m10 - m01], axis=-1),
         1.0 + trace),
        (jnp.stack([m21 - m12, m00 - m11 - m22 + 1.0, m01 + m10, m02 + m20], axis=-1),
         1.0 + m00 - m11 - m22),
        (jnp.stack([m02 - m20, m01 + m10, m11 - m00 - m22 + 1.0, m12 + m21], axis=-1),
         1.0 + m11 - m00 - m22),
        (jnp.stack([m10 - m01, m02 + m20, m12 + m21, m22 - m00 - m11 + 1.0], axis=-1),
         1.0 + m22 - m00 - m11),
    ]
    scaled = [0.5 * q / jnp.sqrt(jnp.maximum(s, eps))[..., None] for q, s in candidates]

    mask0 = trace > 0
    mask1 = (~mask0) & (m00 > m11) & (m00 > m22)
    mask2 = (~mask0) & (~mask1) & (m11 > m22)
    mask3 = (~mask0) & (~mask1) & (~mask2)

    quaternion = sum(
        jnp.where(mask[..., None], q, 0.0)
        for mask, q in zip((mask0, mask1, mask2, mask3), scaled)
    )

    quaternion = jnp.where(quaternion[..., 0:1] < 0, -quaternion, quaternion)
    return quaternion / jnp.linalg.norm(quaternion, axis=-1, keepdims=True)
