"""Actions that make up a robot motion program.

Only movements and tool / work object overrides affect the path; the
remaining actions (speed and zone data, digital outputs, waits, code lines
and comments) pass through the path generator untouched.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence, Tuple

from .core import RobotTool, WorkObject
from .transforms import Plane


def _as_values(values: Optional[Sequence[float]]) -> Optional[Tuple[float, ...]]:
    if values is None:
        return None
    return tuple(float(v) for v in values)


class Action:
    """Base class of all program entries."""
    name: str = ""


@dataclass(frozen=True)
class SpeedData(Action):
    """Velocities for TCP, reorientation, linear and rotational external axes."""
    name: str = "v1000"
    v_tcp: float = 1000.0
    v_ori: float = 500.0
    v_leax: float = 5000.0
    v_reax: float = 1000.0


@dataclass(frozen=True)
class ZoneData(Action):
    """Corner blending of a movement; `fine` means a stop point."""
    name: str = "z1"
    fine: bool = False
    p_zone_tcp: float = 1.0
    p_zone_ori: float = 1.0
    p_zone_eax: float = 1.0
    zone_ori: float = 0.1
    zone_leax: float = 1.0
    zone_reax: float = 0.1


@dataclass(frozen=True)
class JointMovement(Action):
    """Movement to directly specified axis values (MoveAbsJ).

    With `relative` set, the values are added to the current axis values.
    External axis values left as None keep the external axes where they are.
    """
    internal_axis_values: Tuple[float, ...]
    external_axis_values: Optional[Tuple[float, ...]] = None
    relative: bool = False
    speed: Optional[SpeedData] = None
    zone: Optional[ZoneData] = None
    name: str = ""

    def __post_init__(self):
        object.__setattr__(self, "internal_axis_values", _as_values(self.internal_axis_values))
        object.__setattr__(self, "external_axis_values", _as_values(self.external_axis_values))


class MovementType(Enum):
    LINEAR = "MoveL"
    JOINT = "MoveJ"


@dataclass(frozen=True, eq=False)
class Movement(Action):
    """Cartesian movement to a target plane expressed in a work object.

    Attributes:
        target: Target TCP plane relative to the work object.
        movement_type: MoveL or MoveJ.
        axis_values: Internal axis values reaching the target, when known.
        external_axis_values: External axis values at the target.
        configuration: Robot configuration data (cf1, cf4, cf6, cfx).
        tool: Tool for this movement only; None uses the active tool.
        work_object: Work object for this movement only; None uses the
                     active work object.
    """
    target: Plane
    movement_type: MovementType = MovementType.JOINT
    axis_values: Optional[Tuple[float, ...]] = None
    external_axis_values: Optional[Tuple[float, ...]] = None
    configuration: Tuple[int, int, int, int] = (0, 0, 0, 0)
    tool: Optional[RobotTool] = None
    work_object: Optional[WorkObject] = None
    speed: Optional[SpeedData] = None
    zone: Optional[ZoneData] = None
    name: str = ""

    def __post_init__(self):
        object.__setattr__(self, "axis_values", _as_values(self.axis_values))
        object.__setattr__(self, "external_axis_values", _as_values(self.external_axis_values))
        object.__setattr__(self, "configuration", tuple(int(c) for c in self.configuration))


@dataclass(frozen=True, eq=False)
class OverrideRobotTool(Action):
    """Makes `tool` the active tool for all following movements."""
    tool: RobotTool = field(default_factory=RobotTool.default)

    @property
    def name(self) -> str:
        return self.tool.name


@dataclass(frozen=True, eq=False)
class OverrideWorkObject(Action):
    """Makes `work_object` the active work object for all following movements."""
    work_object: WorkObject = field(default_factory=WorkObject.world)

    @property
    def name(self) -> str:
        return self.work_object.name


@dataclass(frozen=True)
class DigitalOutput(Action):
    name: str = "do1"
    is_active: bool = False


@dataclass(frozen=True)
class WaitTime(Action):
    duration: float = 0.0


@dataclass(frozen=True)
class CodeLine(Action):
    code: str = ""


@dataclass(frozen=True)
class Comment(Action):
    text: str = ""
