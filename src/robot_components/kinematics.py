"""Forward kinematics of a robot with optional external axes.

Every link's home-pose axis and attachment point define a unit twist; the
pose of link i is the product of the exponentials of the twists of links
0..i scaled by their axis values, left-multiplied by the robot base plane.
External axes are resolved first, since a linear track moves the base plane
the chain starts from.
"""

import logging
from typing import Optional, Sequence, Tuple

import jax
import jax.numpy as jnp
from flax import struct

from .core import KinematicModel, Mesh, RobotTool
from .errors import DimensionMismatchError
from .transforms import Plane, se3

Array = jax.Array

logger = logging.getLogger(__name__)


@jax.jit
def chain_transforms(twists: Array, values: Array) -> Array:
    """Accumulated transforms of a serial chain relative to its base.

    Args:
        twists: (num_axes, 6) unit twists at the home configuration
        values: (num_axes,) twist coordinates (radians or millimetres)

    Returns:
        Array of shape (num_axes, 4, 4); entry i is exp(S_0 q_0) ... exp(S_i q_i)
    """
    def scan_body(carry, xs):
        twist, value = xs
        carry = se3.multiply(carry, se3.exp(twist * value))
        return carry, carry

    _, transforms = jax.lax.scan(scan_body, jnp.eye(4, dtype=twists.dtype), (twists, values))
    return transforms


@struct.dataclass
class Pose:
    """One fully resolved robot configuration.

    Attributes:
        link_transforms: (num_axes, 4, 4) world transforms applied to each link.
        posed_meshes: Link meshes in world coordinates, parallel to the links.
        posed_base_mesh: Robot base mesh in world coordinates.
        external_axis_meshes: Per external axis, its base and posed link meshes.
        external_axis_planes: Posed attachment plane of each external axis.
        base_plane: Effective robot base plane (moved by a linear track).
        flange_plane: Mounting frame in world coordinates.
        tcp_plane: Tool center point in world coordinates.
        internal_axis_values: (num_axes,) robot joint values.
        external_axis_values: (num_external_axes,) external joint values,
                              zero padded.
        internal_in_limits: Per internal axis limit check. Static.
        external_in_limits: Per external axis limit check; padded values
                            always pass. Static.
    """
    link_transforms: Array
    posed_meshes: Tuple[Mesh, ...]
    posed_base_mesh: Mesh
    external_axis_meshes: Tuple[Tuple[Mesh, ...], ...]
    external_axis_planes: Tuple[Plane, ...]
    base_plane: Plane
    flange_plane: Plane
    tcp_plane: Plane
    internal_axis_values: Array
    external_axis_values: Array
    internal_in_limits: Tuple[bool, ...] = struct.field(pytree_node=False)
    external_in_limits: Tuple[bool, ...] = struct.field(pytree_node=False)

    @property
    def in_limits(self) -> bool:
        return all(self.internal_in_limits) and all(self.external_in_limits)


def _internal_values(model: KinematicModel, values) -> Array:
    values = jnp.asarray(values, dtype=jnp.float64).reshape(-1)
    if values.shape[0] != model.num_axes:
        raise DimensionMismatchError("Internal axis values", model.num_axes, values.shape[0])
    return values


def _external_values(model: KinematicModel, values) -> Tuple[Array, int]:
    """Zero pad or truncate to the external axis count.

    Returns the padded values and how many of them were supplied.
    """
    values = [float(v) for v in values]
    supplied = values[:model.num_external_axes]
    if len(supplied) != len(values):
        logger.debug("Ignoring %d surplus external axis values", len(values) - len(supplied))
    padded = supplied + [0.0] * (model.num_external_axes - len(supplied))
    return jnp.array(padded, dtype=jnp.float64), len(supplied)


def forward_kinematics(model: KinematicModel, internal_axis_values,
                       external_axis_values: Sequence[float] = (),
                       tool: Optional[RobotTool] = None,
                       hide_mesh: bool = False) -> Pose:
    """Pose the robot for the given axis values.

    Out-of-range values still produce a Pose; the limit checks are reported
    through `Pose.in_limits`.

    Args:
        model: Robot description
        internal_axis_values: One value per link, degrees or millimetres
        external_axis_values: One value per external axis; missing values are
                              treated as zero, surplus values are dropped
        tool: Tool to use instead of the model's default tool
        hide_mesh: Skip posing meshes; transforms and planes are still computed

    Returns:
        The resolved Pose

    Raises:
        DimensionMismatchError: If the internal value count differs from the
                                number of links
    """
    q = _internal_values(model, internal_axis_values)
    e, num_supplied = _external_values(model, external_axis_values)
    tool = model.tool if tool is None else tool

    # External axes
    base_plane = model.base_plane
    external_planes = []
    external_meshes = []
    external_in_limits = []
    moved_base = False
    for i, axis in enumerate(model.external_axes):
        value = float(e[i])
        posed_plane = axis.posed_plane(value)
        external_planes.append(posed_plane)
        external_meshes.append(() if hide_mesh else tuple(axis.posed_meshes(value)))
        external_in_limits.append(i >= num_supplied or axis.in_limits(value))
        if axis.moves_robot and not moved_base:
            base_plane = posed_plane
            moved_base = True

    # Internal chain
    B = base_plane.to_matrix()
    if model.num_axes:
        G = chain_transforms(model.twists, q * model.value_scales)
        link_transforms = se3.multiply(B, G)
        G_end = G[-1]
    else:
        link_transforms = jnp.zeros((0, 4, 4))
        G_end = se3.identity()

    flange = se3.multiply(B, se3.multiply(G_end, model.mounting_frame.to_matrix()))
    tcp = se3.multiply(flange, tool.transform)

    if hide_mesh:
        posed_meshes = ()
        posed_base_mesh = Mesh.empty()
    else:
        posed_meshes = tuple(link.mesh.transform(link_transforms[i]) for i, link in enumerate(model.links))
        posed_base_mesh = model.base_mesh.transform(B)

    values = [float(v) for v in q]
    internal_in_limits = tuple(link.in_limits(values[i]) for i, link in enumerate(model.links))

    return Pose(
        link_transforms=link_transforms,
        posed_meshes=posed_meshes,
        posed_base_mesh=posed_base_mesh,
        external_axis_meshes=tuple(external_meshes),
        external_axis_planes=tuple(external_planes),
        base_plane=base_plane,
        flange_plane=Plane.from_matrix(flange),
        tcp_plane=Plane.from_matrix(tcp),
        internal_axis_values=q,
        external_axis_values=e,
        internal_in_limits=internal_in_limits,
        external_in_limits=tuple(external_in_limits),
    )


class ForwardKinematics:
    """Forward kinematics solver bound to one robot.

    The solver keeps the last computed Pose and returns it again when asked
    for the exact same axis values and tool.
    """

    def __init__(self, model: KinematicModel, hide_mesh: bool = False):
        self.model = model
        self.hide_mesh = hide_mesh
        self._last_key = None
        self._last_tool = None
        self._last_pose: Optional[Pose] = None

    def calculate(self, internal_axis_values, external_axis_values: Sequence[float] = (),
                  tool: Optional[RobotTool] = None) -> Pose:
        key = (
            tuple(float(v) for v in jnp.asarray(internal_axis_values, dtype=jnp.float64).reshape(-1)),
            tuple(float(v) for v in jnp.asarray(external_axis_values, dtype=jnp.float64).reshape(-1)),
            self.hide_mesh,
        )
        if self._last_pose is not None and key == self._last_key and tool is self._last_tool:
            return self._last_pose

        pose = forward_kinematics(self.model, internal_axis_values, external_axis_values,
                                  tool=tool, hide_mesh=self.hide_mesh)
        self._last_key = key
        self._last_tool = tool
        self._last_pose = pose
        return pose
