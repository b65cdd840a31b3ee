"""Oriented planes (frames) and their conversion to homogeneous matrices.

A plane is an origin with two orthonormal in-plane axes; the normal is the
cross product of the two. Robot targets, tool frames, work objects and
attachment frames are all planes.
"""

import jax
import jax.numpy as jnp
from flax import struct

from . import se3, so3

Array = jax.Array


@struct.dataclass
class Plane:
    """Immutable oriented plane.

    Attributes:
        origin: (3,) origin in millimetres.
        x_axis: (3,) unit x-axis.
        y_axis: (3,) unit y-axis, orthogonal to x_axis.
    """
    origin: Array
    x_axis: Array
    y_axis: Array

    @property
    def z_axis(self) -> Array:
        return jnp.cross(self.x_axis, self.y_axis)

    @classmethod
    def world_xy(cls) -> "Plane":
        return cls(
            origin=jnp.zeros(3),
            x_axis=jnp.array([1.0, 0.0, 0.0]),
            y_axis=jnp.array([0.0, 1.0, 0.0]),
        )

    @classmethod
    def create(cls, origin, x_axis=(1.0, 0.0, 0.0), y_axis=(0.0, 1.0, 0.0)) -> "Plane":
        """Build a plane from possibly non-orthonormal axes.

        The x-axis is normalized and the y-axis is made orthogonal to it
        (Gram-Schmidt), the way a plane through three points is built.
        """
        origin = jnp.asarray(origin, dtype=jnp.float64)
        x = jnp.asarray(x_axis, dtype=jnp.float64)
        y = jnp.asarray(y_axis, dtype=jnp.float64)

        x_norm = float(jnp.linalg.norm(x))
        if x_norm < 1e-12:
            raise ValueError("Plane x-axis must be non-zero")
        x = x / x_norm
        y = y - jnp.dot(y, x) * x
        y_norm = float(jnp.linalg.norm(y))
        if y_norm < 1e-12:
            raise ValueError("Plane axes must not be parallel")

        return cls(origin=origin, x_axis=x, y_axis=y / y_norm)

    @classmethod
    def from_matrix(cls, T: Array) -> "Plane":
        """Plane whose axes are the columns of the rotation part of `T`."""
        return cls(origin=T[:3, 3], x_axis=T[:3, 0], y_axis=T[:3, 1])

    @classmethod
    def from_quaternion(cls, origin, quaternion) -> "Plane":
        """Plane from a position and a (w, x, y, z) orientation quaternion."""
        R = so3.from_quaternion(jnp.asarray(quaternion, dtype=jnp.float64))
        return cls(origin=jnp.asarray(origin, dtype=jnp.float64), x_axis=R[:, 0], y_axis=R[:, 1])

    def to_matrix(self) -> Array:
        """The (4, 4) transform mapping world XY onto this plane."""
        R = jnp.stack([self.x_axis, self.y_axis, self.z_axis], axis=-1)
        return se3.from_position_and_rotation(self.origin, R)

    def transform(self, T: Array) -> "Plane":
        """This plane moved by the transform `T`."""
        return Plane.from_matrix(se3.multiply(T, self.to_matrix()))

    def quaternion(self) -> Array:
        """Orientation as a (w, x, y, z) quaternion."""
        return so3.to_quaternion(se3.get_rotation(self.to_matrix()))


def orient(source: Plane, target: Plane) -> Array:
    """Transform that maps `source` onto `target`."""
    return se3.multiply(target.to_matrix(), se3.inverse(source.to_matrix()))


def relative(plane: Plane, reference: Plane) -> Array:
    """`plane` expressed in the coordinates of `reference`, as a matrix."""
    return se3.multiply(se3.inverse(reference.to_matrix()), plane.to_matrix())
