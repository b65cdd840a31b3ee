"""Approximate tool path of a motion program.

The generator walks the program once, carrying the current axis values and
the active tool and work object. Every movement that yields target axis
values is interpolated from the current values in joint space and each
sample is posed with forward kinematics, giving the TCP planes, the axis
values for animation and one polyline per movement. Problems that do not
invalidate the program (unreachable limits, Cartesian targets without axis
values) are collected as warnings instead of aborting the run.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Set, Tuple

import jax
import jax.numpy as jnp
from flax import struct

from ..actions import Action, JointMovement, Movement, OverrideRobotTool, OverrideWorkObject
from ..constants import DEFAULT_INTERPOLATIONS, TARGET_TOLERANCE
from ..core import KinematicModel, RobotTool, WorkObject
from ..errors import DimensionMismatchError, PathWarning, WarningKind
from ..kinematics import Pose, forward_kinematics
from ..transforms import Plane, se3
from .interpolation import interpolate

Array = jax.Array

logger = logging.getLogger(__name__)


@struct.dataclass
class Polyline:
    """Open polyline through (N, 3) points."""
    points: Array

    @property
    def start(self) -> Array:
        return self.points[0]

    @property
    def end(self) -> Array:
        return self.points[-1]

    @property
    def length(self) -> float:
        return float(jnp.sum(jnp.linalg.norm(jnp.diff(self.points, axis=0), axis=-1)))


@struct.dataclass
class PathResult:
    """Everything one path generator run produces.

    Attributes:
        planes: TCP plane of every sample.
        paths: One polyline per movement, starting at the TCP before it.
        internal_axis_values: (num_samples, num_axes) robot axis values.
        external_axis_values: (num_samples, num_external_axes) external axis values.
        tools: Tool active at every sample.
        in_limits: Limit check of every sample. Static.
        warnings: Non-fatal problems in program order. Static.
    """
    planes: Tuple[Plane, ...]
    paths: Tuple[Polyline, ...]
    internal_axis_values: Array
    external_axis_values: Array
    tools: Tuple[RobotTool, ...]
    in_limits: Tuple[bool, ...] = struct.field(pytree_node=False)
    warnings: Tuple[PathWarning, ...] = struct.field(pytree_node=False)

    @property
    def num_samples(self) -> int:
        return len(self.planes)

    @property
    def error_text(self) -> List[str]:
        return [warning.message for warning in self.warnings]


@dataclass
class _State:
    """Interpreter state threaded through the program."""
    internal: Array
    external: Array
    tool: RobotTool
    work_object: WorkObject


def _label(index: int, action: Action) -> str:
    name = getattr(action, "name", "")
    kind = type(action).__name__
    return f"{kind} {index} ({name})" if name else f"{kind} {index}"


class PathGenerator:
    """Path generator bound to one robot.

    The results of the last `calculate()` call stay available as attributes
    (`planes`, `paths`, `internal_axis_values`, `external_axis_values`,
    `error_text`) for callers that sample them later, e.g. from an
    animation slider.
    """

    def __init__(self, model: KinematicModel):
        self.model = model
        self.result: Optional[PathResult] = None

    @property
    def planes(self) -> List[Plane]:
        return list(self.result.planes) if self.result else []

    @property
    def paths(self) -> List[Polyline]:
        return list(self.result.paths) if self.result else []

    @property
    def internal_axis_values(self) -> List[Array]:
        return list(self.result.internal_axis_values) if self.result else []

    @property
    def external_axis_values(self) -> List[Array]:
        return list(self.result.external_axis_values) if self.result else []

    @property
    def error_text(self) -> List[str]:
        return self.result.error_text if self.result else []

    def initial_state(self) -> _State:
        """Home axis values, default tool and the world work object.

        External axes start at zero, or at the limit closest to zero when
        zero lies outside their range.
        """
        external = [min(max(0.0, axis.limits[0]), axis.limits[1]) for axis in self.model.external_axes]
        return _State(
            internal=self.model.home,
            external=jnp.array(external, dtype=jnp.float64),
            tool=self.model.tool,
            work_object=WorkObject.world(),
        )

    def calculate(self, actions: Sequence[Action], interpolations: int = DEFAULT_INTERPOLATIONS) -> PathResult:
        """Generate the path of `actions`.

        Args:
            actions: Motion program
            interpolations: Samples inserted between two consecutive targets (5 by default)

        Returns:
            The PathResult, also stored as `self.result`

        Raises:
            DimensionMismatchError: If an action carries the wrong number of
                                    internal axis values
            ValueError: If `interpolations` is negative
        """
        if interpolations < 0:
            raise ValueError(f"Interpolation count must be non-negative, got {interpolations}")

        state = self.initial_state()
        start = forward_kinematics(self.model, state.internal, state.external, tool=state.tool, hide_mesh=True)

        planes: List[Plane] = []
        paths: List[Polyline] = []
        internal: List[Array] = []
        external: List[Array] = []
        in_limits: List[bool] = []
        tools: List[RobotTool] = []
        warnings: List[PathWarning] = []
        last_point = start.tcp_plane.origin

        for index, action in enumerate(actions):
            if isinstance(action, OverrideRobotTool):
                state.tool = action.tool
                continue
            if isinstance(action, OverrideWorkObject):
                state.work_object = action.work_object
                continue

            if isinstance(action, JointMovement):
                target = self._joint_target(index, action, state)
            elif isinstance(action, Movement):
                target = self._movement_target(index, action, state, warnings)
            else:
                continue
            if target is None:
                continue

            target_internal, target_external, tool = target
            internal_samples = interpolate(state.internal, target_internal, interpolations + 1)
            external_samples = interpolate(state.external, target_external, interpolations + 1)

            points = [last_point]
            reported: Set[Tuple[bool, int]] = set()
            for k in range(interpolations + 1):
                pose = forward_kinematics(self.model, internal_samples[k], external_samples[k],
                                          tool=tool, hide_mesh=True)
                planes.append(pose.tcp_plane)
                internal.append(internal_samples[k])
                external.append(external_samples[k])
                in_limits.append(pose.in_limits)
                tools.append(tool)
                points.append(pose.tcp_plane.origin)
                if not pose.in_limits:
                    warnings.extend(self._limit_warnings(index, action, pose, reported))

            paths.append(Polyline(points=jnp.stack(points)))
            last_point = points[-1]
            state.internal = target_internal
            state.external = target_external

        if not planes:
            planes.append(start.tcp_plane)
            internal.append(state.internal)
            external.append(state.external)
            in_limits.append(start.in_limits)
            tools.append(state.tool)

        for warning in warnings:
            logger.debug(warning.message)
        logger.debug("Generated %d samples and %d path segments with %d warnings",
                     len(planes), len(paths), len(warnings))

        self.result = PathResult(
            planes=tuple(planes),
            paths=tuple(paths),
            internal_axis_values=jnp.stack(internal),
            external_axis_values=jnp.stack(external),
            tools=tuple(tools),
            in_limits=tuple(in_limits),
            warnings=tuple(warnings),
        )
        return self.result

    def _internal_target(self, index: int, values: Sequence[float]) -> Array:
        values = jnp.asarray(values, dtype=jnp.float64).reshape(-1)
        if values.shape[0] != self.model.num_axes:
            raise DimensionMismatchError(f"Action {index} internal axis values",
                                         self.model.num_axes, values.shape[0])
        return values

    def _external_target(self, values: Optional[Sequence[float]], state: _State,
                         relative: bool = False) -> Array:
        """Target external values; entries not supplied keep their current value."""
        if values is None:
            return state.external
        n = self.model.num_external_axes
        supplied = jnp.asarray(values[:n], dtype=jnp.float64)
        count = supplied.shape[0]
        if relative:
            supplied = supplied + state.external[:count]
        return state.external.at[:count].set(supplied)

    def _joint_target(self, index: int, action: JointMovement,
                      state: _State) -> Tuple[Array, Array, RobotTool]:
        target = self._internal_target(index, action.internal_axis_values)
        if action.relative:
            target = state.internal + target
        external = self._external_target(action.external_axis_values, state, action.relative)
        return target, external, state.tool

    def _movement_target(self, index: int, action: Movement, state: _State,
                         warnings: List[PathWarning]) -> Optional[Tuple[Array, Array, RobotTool]]:
        """Resolve a Cartesian movement to axis values.

        There is no inverse kinematics: only axis values supplied with the
        movement are used. Without them the robot holds its position.
        """
        tool = state.tool if action.tool is None else action.tool
        work_object = state.work_object if action.work_object is None else action.work_object
        external = self._external_target(action.external_axis_values, state)

        if action.axis_values is None:
            warnings.append(PathWarning(
                kind=WarningKind.UNRESOLVED_TARGET,
                action_index=index,
                message=f"{_label(index, action)}: no axis values available for the "
                        f"Cartesian target, the robot holds its position.",
            ))
            return None

        internal = self._internal_target(index, action.axis_values)
        pose = forward_kinematics(self.model, internal, external, tool=tool, hide_mesh=True)
        target = se3.multiply(self._work_object_frame(work_object, external), action.target.to_matrix())
        deviation = float(jnp.linalg.norm(pose.tcp_plane.origin - se3.get_position(target)))
        if deviation > TARGET_TOLERANCE:
            warnings.append(PathWarning(
                kind=WarningKind.INCONSISTENT_TARGET,
                action_index=index,
                message=f"{_label(index, action)}: the supplied axis values place the TCP "
                        f"{deviation:.3f} mm away from the target.",
                value=deviation,
            ))
        return internal, external, tool

    def _work_object_frame(self, work_object: WorkObject, external: Array) -> Array:
        if not work_object.is_movable:
            return work_object.global_frame()
        for i, axis in enumerate(self.model.external_axes):
            if axis.name == work_object.external_axis_name:
                return work_object.global_frame(axis.transform(float(external[i])))
        raise ValueError(
            f"Work object '{work_object.name}' is attached to unknown external axis "
            f"'{work_object.external_axis_name}'"
        )

    def _limit_warnings(self, index: int, action: Action, pose: Pose,
                        reported: Set[Tuple[bool, int]]) -> List[PathWarning]:
        """One warning per offending axis of an action."""
        found = []
        checks = [(False, self.model.links, pose.internal_in_limits, pose.internal_axis_values),
                  (True, self.model.external_axes, pose.external_in_limits, pose.external_axis_values)]
        for is_external, axes, flags, values in checks:
            for i, ok in enumerate(flags):
                if ok or (is_external, i) in reported:
                    continue
                reported.add((is_external, i))
                value = float(values[i])
                lower, upper = axes[i].limits
                bound, side = (upper, "upper") if value > upper else (lower, "lower")
                what = f"external axis {axes[i].name}" if is_external else f"robot axis {i + 1}"
                found.append(PathWarning(
                    kind=WarningKind.AXIS_LIMIT_EXCEEDED,
                    action_index=index,
                    message=f"{_label(index, action)}: the value {value:.2f} of {what} "
                            f"exceeds its {side} limit {bound:.2f}.",
                    axis=i,
                    external=is_external,
                    value=value,
                    bound=bound,
                ))
        return found
