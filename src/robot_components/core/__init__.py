"""Robot description data structures.

Robots, external axes, tools and work objects are immutable PyTrees; they
are built once per robot definition and read by the kinematics and path
engines without modification.
"""

from .mesh import Mesh, join_meshes
from .external_axis import ExternalAxis, ExternalLinearAxis, ExternalRotationalAxis
from .robot_model import AxisType, KinematicModel, Link, RobotTool, WorkObject

__all__ = [
    "AxisType",
    "ExternalAxis",
    "ExternalLinearAxis",
    "ExternalRotationalAxis",
    "KinematicModel",
    "Link",
    "Mesh",
    "RobotTool",
    "WorkObject",
    "join_meshes",
]
