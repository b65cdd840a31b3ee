"""
Robot Components: forward kinematics and path preview for robot programs.

The library poses a robot (with optional external axes) for given axis
values and turns a program of robot Actions into an interpolated tool path
with limit checks.
"""

import jax
jax.config.update("jax_enable_x64", True)

from . import transforms
from . import core
from . import io
from .actions import (
    CodeLine,
    Comment,
    DigitalOutput,
    JointMovement,
    Movement,
    MovementType,
    OverrideRobotTool,
    OverrideWorkObject,
    SpeedData,
    WaitTime,
    ZoneData,
)
from .errors import DimensionMismatchError, PathWarning, WarningKind
from .kinematics import ForwardKinematics, Pose, forward_kinematics
from .path import PathGenerator, PathResult, Polyline, interpolate
from .preview import PreviewFrame, PreviewOptions, preview_frame
from .registry import NameRegistry, validate_rapid_name

__version__ = "0.1.0"
__all__ = [
    "transforms",
    "core",
    "io",
    "CodeLine",
    "Comment",
    "DigitalOutput",
    "DimensionMismatchError",
    "ForwardKinematics",
    "JointMovement",
    "Movement",
    "MovementType",
    "NameRegistry",
    "OverrideRobotTool",
    "OverrideWorkObject",
    "PathGenerator",
    "PathResult",
    "PathWarning",
    "Polyline",
    "Pose",
    "PreviewFrame",
    "PreviewOptions",
    "SpeedData",
    "WaitTime",
    "WarningKind",
    "ZoneData",
    "forward_kinematics",
    "interpolate",
    "preview_frame",
    "validate_rapid_name",
]
