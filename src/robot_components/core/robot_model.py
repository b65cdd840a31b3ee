"""Immutable PyTree descriptions of a robot, its tools and work objects.

A robot is described at its home configuration: every link carries its
rotation (or translation) axis and the plane the axis is attached to, both
expressed in the robot's base frame with all axis values at zero. Posing the
robot is then a product of exponentials over the chain (see
`robot_components.kinematics`).
"""

from enum import Enum
from typing import Optional, Sequence, Tuple

import jax
import jax.numpy as jnp
from flax import struct

from ..transforms import Plane, relative, se3
from .external_axis import ExternalAxis
from .mesh import Mesh, join_meshes
from .validation import check_axis, check_limits

Array = jax.Array


class AxisType(Enum):
    ROTATIONAL = "rotational"
    PRISMATIC = "prismatic"


@struct.dataclass
class Link:
    """One joint of the robot chain together with the mesh it moves.

    Attributes:
        axis: (3,) axis direction in the base frame at home.
        attachment_plane: Plane the axis passes through, base frame at home.
        mesh: Link geometry at home, base frame.
        limits: (min, max) in degrees for rotational, millimetres for
                prismatic links. Static.
        axis_type: Rotational or prismatic. Static.
        index: Position in the chain. Static.
    """
    axis: Array
    attachment_plane: Plane
    mesh: Mesh
    limits: Tuple[float, float] = struct.field(pytree_node=False)
    axis_type: AxisType = struct.field(pytree_node=False, default=AxisType.ROTATIONAL)
    index: int = struct.field(pytree_node=False, default=0)

    @classmethod
    def create(cls, axis, attachment_plane: Plane, limits, mesh: Optional[Mesh] = None,
               axis_type: AxisType = AxisType.ROTATIONAL, index: int = 0) -> "Link":
        return cls(
            axis=check_axis(axis, f"Link {index}"),
            attachment_plane=attachment_plane,
            mesh=Mesh.empty() if mesh is None else mesh,
            limits=check_limits(limits, f"Link {index}"),
            axis_type=axis_type,
            index=index,
        )

    @property
    def is_prismatic(self) -> bool:
        return self.axis_type is AxisType.PRISMATIC

    @property
    def twist(self) -> Array:
        """Unit twist of this joint at the home configuration."""
        return se3.twist(self.axis, self.attachment_plane.origin, self.is_prismatic)

    def in_limits(self, value: float) -> bool:
        return self.limits[0] <= value <= self.limits[1]


@struct.dataclass
class RobotTool:
    """End-effector mounted on the robot flange.

    The tool plane is expressed relative to the attachment plane; when the
    attachment plane coincides with the flange, the tool plane is the TCP.
    """
    attachment_plane: Plane
    tool_plane: Plane
    mesh: Mesh
    name: str = struct.field(pytree_node=False, default="tool0")

    @classmethod
    def default(cls) -> "RobotTool":
        return cls(attachment_plane=Plane.world_xy(), tool_plane=Plane.world_xy(),
                   mesh=Mesh.empty(), name="tool0")

    @classmethod
    def from_planes(cls, name: str, attachment_plane: Plane, tool_plane: Plane,
                    meshes: Sequence[Mesh] = ()) -> "RobotTool":
        """Tool defined by its attachment plane and TCP plane.

        Multiple meshes are joined into one.
        """
        return cls(attachment_plane=attachment_plane, tool_plane=tool_plane,
                   mesh=join_meshes(meshes), name=name)

    @classmethod
    def from_quaternion(cls, name: str, position, quaternion,
                        meshes: Sequence[Mesh] = ()) -> "RobotTool":
        """Tool defined by a TCP position and orientation relative to the flange."""
        return cls.from_planes(name, Plane.world_xy(),
                               Plane.from_quaternion(position, quaternion), meshes)

    @property
    def transform(self) -> Array:
        """(4, 4) flange-to-TCP transform."""
        return relative(self.tool_plane, self.attachment_plane)


@struct.dataclass
class WorkObject:
    """Coordinate system Cartesian targets are expressed in.

    Attributes:
        user_frame: User frame in world coordinates.
        object_frame: Object frame relative to the user frame.
        name: Static.
        external_axis_name: Name of the external axis that carries this
                            work object, if any. Static.
    """
    user_frame: Plane
    object_frame: Plane
    name: str = struct.field(pytree_node=False, default="wobj0")
    external_axis_name: Optional[str] = struct.field(pytree_node=False, default=None)

    @classmethod
    def world(cls) -> "WorkObject":
        return cls(user_frame=Plane.world_xy(), object_frame=Plane.world_xy())

    @property
    def is_movable(self) -> bool:
        return self.external_axis_name is not None

    def global_frame(self, axis_transform: Optional[Array] = None) -> Array:
        """(4, 4) frame of this work object in world coordinates.

        Args:
            axis_transform: Transform of the carrying external axis at its
                            current value; ignored for fixed work objects.
        """
        T = se3.multiply(self.user_frame.to_matrix(), self.object_frame.to_matrix())
        if axis_transform is not None and self.is_movable:
            T = se3.multiply(axis_transform, T)
        return T


@struct.dataclass
class KinematicModel:
    """Immutable PyTree representation of a robot and its external axes.

    Attributes:
        base_plane: Robot position in the world.
        mounting_frame: Flange plane at home, in the base frame.
        tool: Default tool.
        links: Chain of links in order from base to flange.
        external_axes: Auxiliary linear / rotational axes.
        base_mesh: Geometry of the fixed robot base, base frame.
        home_values: Default internal axis values. Static; empty means zeros.
        name: Static.
    """
    base_plane: Plane
    mounting_frame: Plane
    tool: RobotTool
    links: Tuple[Link, ...]
    external_axes: Tuple[ExternalAxis, ...] = ()
    base_mesh: Mesh = struct.field(default_factory=Mesh.empty)
    home_values: Tuple[float, ...] = struct.field(pytree_node=False, default=())
    name: str = struct.field(pytree_node=False, default="robot")

    @classmethod
    def create(cls, links: Sequence[Link], mounting_frame: Plane,
               base_plane: Optional[Plane] = None, tool: Optional[RobotTool] = None,
               external_axes: Sequence[ExternalAxis] = (), base_mesh: Optional[Mesh] = None,
               home_values: Sequence[float] = (), name: str = "robot") -> "KinematicModel":
        links = tuple(link.replace(index=i) for i, link in enumerate(links))
        home_values = tuple(float(v) for v in home_values)
        if home_values and len(home_values) != len(links):
            raise ValueError(
                f"home_values has {len(home_values)} entries but the robot has {len(links)} links"
            )

        names = [axis.name for axis in external_axes]
        if len(set(names)) != len(names):
            raise ValueError(f"External axis names must be unique, got {names}")

        return cls(
            base_plane=Plane.world_xy() if base_plane is None else base_plane,
            mounting_frame=mounting_frame,
            tool=RobotTool.default() if tool is None else tool,
            links=links,
            external_axes=tuple(external_axes),
            base_mesh=Mesh.empty() if base_mesh is None else base_mesh,
            home_values=home_values,
            name=name,
        )

    @property
    def num_axes(self) -> int:
        return len(self.links)

    @property
    def num_external_axes(self) -> int:
        return len(self.external_axes)

    @property
    def home(self) -> Array:
        if self.home_values:
            return jnp.array(self.home_values, dtype=jnp.float64)
        return jnp.zeros(self.num_axes)

    @property
    def twists(self) -> Array:
        """(num_axes, 6) unit twists of the chain."""
        if not self.links:
            return jnp.zeros((0, 6))
        return jnp.stack([link.twist for link in self.links])

    @property
    def value_scales(self) -> Array:
        """Factor turning each axis value into a twist coordinate (rad or mm)."""
        return jnp.array(
            [1.0 if link.is_prismatic else jnp.pi / 180.0 for link in self.links],
            dtype=jnp.float64,
        )

    @property
    def axis_limits(self) -> Tuple[Tuple[float, float], ...]:
        return tuple(link.limits for link in self.links)

    def external_axis(self, name: str) -> ExternalAxis:
        for axis in self.external_axes:
            if axis.name == name:
                return axis
        raise ValueError(f"External axis '{name}' not found in robot model")
