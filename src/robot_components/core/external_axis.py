"""External axes: linear tracks and rotational positioners.

An external axis maps a single scalar axis value onto a rigid transform.
The transform is applied to the axis' moving link meshes and attachment
plane; a linear track additionally carries the robot, so its posed
attachment plane becomes the robot's base plane.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple

import jax
import jax.numpy as jnp
from flax import struct

from ..transforms import Plane, se3
from .mesh import Mesh
from .validation import check_axis, check_limits

Array = jax.Array


@struct.dataclass
class ExternalAxis(ABC):
    """Common state of external axes.

    Attributes:
        attachment_plane: Plane, in world coordinates, the axis moves.
        axis: (3,) axis direction in world coordinates.
        base_meshes: Fixed geometry of the axis.
        link_meshes: Geometry moved by the axis.
        name: Unique axis name. Static.
        limits: (min, max) axis value interval. Static.
        moves_robot: Whether the robot is mounted on the attachment plane. Static.
    """
    attachment_plane: Plane
    axis: Array
    base_meshes: Tuple[Mesh, ...]
    link_meshes: Tuple[Mesh, ...]
    name: str = struct.field(pytree_node=False)
    limits: Tuple[float, float] = struct.field(pytree_node=False)
    moves_robot: bool = struct.field(pytree_node=False, default=True)

    @abstractmethod
    def transform(self, value: float) -> Array:
        """(4, 4) world transform of the moving part at `value`."""

    def in_limits(self, value: float) -> bool:
        return self.limits[0] <= value <= self.limits[1]

    def posed_plane(self, value: float) -> Plane:
        return self.attachment_plane.transform(self.transform(value))

    def posed_meshes(self, value: float) -> List[Mesh]:
        """Base meshes as they are, followed by the link meshes at `value`."""
        T = self.transform(value)
        return list(self.base_meshes) + [mesh.transform(T) for mesh in self.link_meshes]


def _build(cls, name: str, attachment_plane: Plane, axis, limits,
           base_meshes: Sequence[Mesh], link_meshes: Sequence[Mesh],
           moves_robot: Optional[bool]):
    kwargs = {}
    if moves_robot is not None:
        kwargs["moves_robot"] = moves_robot
    return cls(
        attachment_plane=attachment_plane,
        axis=check_axis(axis, f"External axis '{name}'"),
        base_meshes=tuple(base_meshes),
        link_meshes=tuple(link_meshes),
        name=name,
        limits=check_limits(limits, f"External axis '{name}'"),
        **kwargs,
    )


@struct.dataclass
class ExternalLinearAxis(ExternalAxis):
    """Track translating its attachment plane along `axis` (value in mm)."""

    @classmethod
    def create(cls, name: str, attachment_plane: Plane, axis, limits,
               base_meshes: Sequence[Mesh] = (), link_meshes: Sequence[Mesh] = (),
               moves_robot: Optional[bool] = None) -> "ExternalLinearAxis":
        return _build(cls, name, attachment_plane, axis, limits, base_meshes, link_meshes, moves_robot)

    def transform(self, value: float) -> Array:
        unit = self.axis / jnp.linalg.norm(self.axis)
        return se3.translation(unit * value)


@struct.dataclass
class ExternalRotationalAxis(ExternalAxis):
    """Positioner rotating about `axis` through its attachment plane origin (value in degrees)."""
    moves_robot: bool = struct.field(pytree_node=False, default=False)

    @classmethod
    def create(cls, name: str, attachment_plane: Plane, axis, limits,
               base_meshes: Sequence[Mesh] = (), link_meshes: Sequence[Mesh] = (),
               moves_robot: Optional[bool] = None) -> "ExternalRotationalAxis":
        return _build(cls, name, attachment_plane, axis, limits, base_meshes, link_meshes, moves_robot)

    def transform(self, value: float) -> Array:
        return se3.rotation_about_axis(self.attachment_plane.origin, self.axis, value)
