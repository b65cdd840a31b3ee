"""URDF loader producing KinematicModel instances.

Only serial chains are supported. Joint origins are accumulated from the
root link to place every actuated joint's axis in the base frame at the
home configuration; fixed joints are folded into the chain. URDF radians
and metres become degrees and millimetres.
"""

from typing import Dict, List, Optional, Sequence

import jax.numpy as jnp
import numpy as np
from lxml import etree

from robot_components.constants import M_TO_MM, RAD_TO_DEG
from robot_components.core import AxisType, ExternalAxis, KinematicModel, Link, RobotTool
from robot_components.transforms import Plane

ACTUATED_TYPES = ("revolute", "continuous", "prismatic")


def load_urdf(urdf_path: str, base_plane: Optional[Plane] = None,
              tool: Optional[RobotTool] = None,
              external_axes: Sequence[ExternalAxis] = ()) -> KinematicModel:
    """Load a URDF file and convert it to a KinematicModel.

    Args:
        urdf_path: Path to the URDF file to load.
        base_plane: Robot position in the world; world XY by default.
        tool: Default tool; a tool at the flange by default.
        external_axes: External axes to attach to the model.

    Returns:
        KinematicModel: The robot, with empty link meshes.
    """
    tree = etree.parse(urdf_path)
    root = tree.getroot()

    all_links = {link.get('name') for link in root.findall('link')}
    joints_by_parent: Dict[str, List] = {}
    child_links = set()
    for joint in root.findall('joint'):
        parent_elem = joint.find('parent')
        child_elem = joint.find('child')
        if parent_elem is None or child_elem is None:
            continue
        joints_by_parent.setdefault(parent_elem.get('link'), []).append(joint)
        child_links.add(child_elem.get('link'))

    root_links = all_links - child_links
    if len(root_links) != 1:
        raise ValueError(f"Expected exactly one root link, found: {root_links}")

    # Walk the chain from the root, accumulating the home transform
    current = root_links.pop()
    T = np.eye(4)
    links: List[Link] = []
    while current in joints_by_parent:
        joints = joints_by_parent[current]
        if len(joints) > 1:
            raise ValueError(f"Link '{current}' has {len(joints)} child joints; only serial chains are supported")
        joint = joints[0]
        T = T @ _origin_transform(joint)

        joint_type = joint.get('type')
        if joint_type in ACTUATED_TYPES:
            links.append(_link_from_joint(joint, joint_type, T, len(links)))
        elif joint_type != 'fixed':
            raise ValueError(f"Unsupported joint type '{joint_type}' for joint '{joint.get('name')}'")

        current = joint.find('child').get('link')

    return KinematicModel.create(
        links=links,
        mounting_frame=Plane.from_matrix(jnp.asarray(T)),
        base_plane=base_plane,
        tool=tool,
        external_axes=external_axes,
        name=root.get('name', 'robot'),
    )


def _origin_transform(joint) -> np.ndarray:
    """Joint origin as a 4x4 transform in millimetres."""
    T = np.eye(4)
    origin_elem = joint.find('origin')
    if origin_elem is not None:
        xyz = np.array([float(x) for x in origin_elem.get('xyz', '0 0 0').split()])
        rpy = np.array([float(x) for x in origin_elem.get('rpy', '0 0 0').split()])
        T[:3, :3] = _rpy_to_rotation_matrix(rpy)
        T[:3, 3] = xyz * M_TO_MM
    return T


def _link_from_joint(joint, joint_type: str, T: np.ndarray, index: int) -> Link:
    axis_elem = joint.find('axis')
    axis_local = np.array([0.0, 0.0, 1.0])
    if axis_elem is not None:
        axis_local = np.array([float(x) for x in axis_elem.get('xyz', '0 0 1').split()])

    prismatic = joint_type == 'prismatic'
    scale = M_TO_MM if prismatic else RAD_TO_DEG

    limit_elem = joint.find('limit')
    if joint_type == 'continuous':
        limits = (-np.inf, np.inf)
    elif limit_elem is None:
        raise ValueError(f"Joint '{joint.get('name')}' of type '{joint_type}' has no limit element")
    else:
        limits = (float(limit_elem.get('lower', '0')) * scale,
                  float(limit_elem.get('upper', '0')) * scale)

    return Link.create(
        axis=jnp.asarray(T[:3, :3] @ axis_local),
        attachment_plane=Plane.from_matrix(jnp.asarray(T)),
        limits=limits,
        axis_type=AxisType.PRISMATIC if prismatic else AxisType.ROTATIONAL,
        index=index,
    )


def _rpy_to_rotation_matrix(rpy: np.ndarray) -> np.ndarray:
    """Convert roll-pitch-yaw angles to rotation matrix.

    Args:
        rpy: Array of [roll, pitch, yaw] angles in radians.

    Returns:
        3x3 rotation matrix, R = R_z * R_y * R_x.
    """
    roll, pitch, yaw = rpy

    R_x = np.array([
        [1, 0, 0],
        [0, np.cos(roll), -np.sin(roll)],
        [0, np.sin(roll), np.cos(roll)]
    ])

    R_y = np.array([
        [np.cos(pitch), 0, np.sin(pitch)],
        [0, 1, 0],
        [-np.sin(pitch), 0, np.cos(pitch)]
    ])

    R_z = np.array([
        [np.cos(yaw), -np.sin(yaw), 0],
        [np.sin(yaw), np.cos(yaw), 0],
        [0, 0, 1]
    ])

    return R_z @ R_y @ R_x
