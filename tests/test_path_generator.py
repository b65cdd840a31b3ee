"""Tests for tool path generation."""

import logging
from pathlib import Path

import jax.numpy as jnp
import numpy as np
import pytest

from robot_components.actions import (
    CodeLine,
    Comment,
    DigitalOutput,
    JointMovement,
    Movement,
    OverrideRobotTool,
    OverrideWorkObject,
    SpeedData,
    WaitTime,
    ZoneData,
)
from robot_components.core import (
    ExternalLinearAxis,
    ExternalRotationalAxis,
    KinematicModel,
    Link,
    RobotTool,
    WorkObject,
)
from robot_components.errors import DimensionMismatchError, WarningKind
from robot_components.io import load_urdf
from robot_components.path import PathGenerator
from robot_components.transforms import Plane

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def single_axis_model():
    """One rotational link about world Z, limits [-180, 180], flange 100 mm along X."""
    link = Link.create(axis=[0.0, 0.0, 1.0], attachment_plane=Plane.world_xy(), limits=(-180.0, 180.0))
    return KinematicModel.create(links=[link], mounting_frame=Plane.create([100.0, 0.0, 0.0]))


@pytest.fixture
def irb120():
    return load_urdf(str(FIXTURES / "irb120.urdf"))


def test_empty_program(single_axis_model):
    result = PathGenerator(single_axis_model).calculate([], 5)

    assert result.num_samples == 1
    assert result.paths == ()
    assert result.warnings == ()
    np.testing.assert_allclose(result.planes[0].origin, jnp.array([100.0, 0.0, 0.0]), atol=1e-9)
    np.testing.assert_allclose(result.internal_axis_values, jnp.zeros((1, 1)))


def test_single_joint_movement(single_axis_model):
    result = PathGenerator(single_axis_model).calculate([JointMovement([90.0])], 3)

    assert result.num_samples == 4
    np.testing.assert_allclose(result.internal_axis_values[:, 0], jnp.array([22.5, 45.0, 67.5, 90.0]))
    assert result.warnings == ()
    assert all(result.in_limits)

    assert len(result.paths) == 1
    path = result.paths[0]
    assert path.points.shape == (5, 3)
    np.testing.assert_allclose(path.start, jnp.array([100.0, 0.0, 0.0]), atol=1e-9)
    np.testing.assert_allclose(path.end, jnp.array([0.0, 100.0, 0.0]), atol=1e-9)
    # Chords of a quarter circle of radius 100
    assert path.length == pytest.approx(4 * 200.0 * np.sin(np.pi / 16))


def test_out_of_limits_target(single_axis_model):
    result = PathGenerator(single_axis_model).calculate([JointMovement([200.0])], 3)

    assert result.in_limits[-1] is False
    assert result.in_limits[:3] == (True, True, True)
    assert len(result.warnings) == 1

    warning = result.warnings[0]
    assert warning.kind is WarningKind.AXIS_LIMIT_EXCEEDED
    assert warning.action_index == 0
    assert warning.axis == 0
    assert not warning.external
    assert warning.value == pytest.approx(200.0)
    assert warning.bound == pytest.approx(180.0)
    assert "robot axis 1" in warning.message
    assert "upper limit 180.00" in warning.message
    assert result.error_text == [warning.message]


def test_limit_warning_reported_once_per_axis(single_axis_model):
    """Several offending samples of one movement give a single warning."""
    actions = [JointMovement([-170.0]), JointMovement([-300.0])]

    result = PathGenerator(single_axis_model).calculate(actions, 4)

    assert len(result.warnings) == 1
    assert result.warnings[0].action_index == 1
    assert "lower limit -180.00" in result.warnings[0].message


def test_deterministic(irb120):
    actions = [
        JointMovement([10.0, 20.0, -30.0, 0.0, 45.0, 0.0]),
        JointMovement([-60.0, 0.0, 0.0, 90.0, -45.0, 180.0]),
    ]
    generator = PathGenerator(irb120)

    first = generator.calculate(actions, 5)
    second = generator.calculate(actions, 5)

    assert first.num_samples == second.num_samples == 12
    np.testing.assert_array_equal(first.internal_axis_values, second.internal_axis_values)
    for a, b in zip(first.planes, second.planes):
        np.testing.assert_array_equal(a.to_matrix(), b.to_matrix())
    for a, b in zip(first.paths, second.paths):
        np.testing.assert_array_equal(a.points, b.points)
    assert first.in_limits == second.in_limits
    assert first.warnings == second.warnings


def test_generator_keeps_last_result(single_axis_model):
    generator = PathGenerator(single_axis_model)
    assert generator.planes == []
    assert generator.error_text == []

    result = generator.calculate([JointMovement([90.0])], 1)

    assert generator.result is result
    assert len(generator.planes) == 2
    assert len(generator.paths) == 1
    assert len(generator.internal_axis_values) == 2
    assert len(generator.external_axis_values) == 2


def test_zero_interpolations(single_axis_model):
    actions = [JointMovement([30.0]), JointMovement([60.0])]

    result = PathGenerator(single_axis_model).calculate(actions, 0)

    np.testing.assert_allclose(result.internal_axis_values[:, 0], jnp.array([30.0, 60.0]))
    assert [p.points.shape[0] for p in result.paths] == [2, 2]
    np.testing.assert_allclose(result.paths[1].start, result.paths[0].end)


def test_negative_interpolations_rejected(single_axis_model):
    with pytest.raises(ValueError, match="non-negative"):
        PathGenerator(single_axis_model).calculate([JointMovement([90.0])], -1)


def test_wrong_axis_count_rejected(single_axis_model):
    with pytest.raises(DimensionMismatchError, match="Action 1"):
        PathGenerator(single_axis_model).calculate([JointMovement([10.0]), JointMovement([1.0, 2.0])], 2)


def test_relative_joint_movement(single_axis_model):
    actions = [JointMovement([30.0]), JointMovement([15.0], relative=True)]

    result = PathGenerator(single_axis_model).calculate(actions, 0)

    np.testing.assert_allclose(result.internal_axis_values[:, 0], jnp.array([30.0, 45.0]))


def test_pass_through_actions(single_axis_model):
    actions = [
        SpeedData(),
        ZoneData(fine=True),
        DigitalOutput("do_gripper", True),
        WaitTime(0.5),
        CodeLine("! custom"),
        Comment("approach"),
        JointMovement([90.0]),
    ]

    result = PathGenerator(single_axis_model).calculate(actions, 3)

    assert result.num_samples == 4
    assert result.warnings == ()


def test_tool_override(single_axis_model):
    pen = RobotTool.from_quaternion("pen", [0.0, 0.0, 50.0], [1.0, 0.0, 0.0, 0.0])
    actions = [JointMovement([0.0]), OverrideRobotTool(pen), JointMovement([90.0])]

    result = PathGenerator(single_axis_model).calculate(actions, 0)

    assert result.tools[0].name == "tool0"
    assert result.tools[1] is pen
    np.testing.assert_allclose(result.planes[0].origin, jnp.array([100.0, 0.0, 0.0]), atol=1e-9)
    np.testing.assert_allclose(result.planes[1].origin, jnp.array([0.0, 100.0, 50.0]), atol=1e-9)


def test_unresolved_cartesian_target(single_axis_model):
    """Without axis values the robot holds its position and a warning is given."""
    actions = [
        JointMovement([45.0]),
        Movement(Plane.create([0.0, 100.0, 0.0]), name="p10"),
    ]

    result = PathGenerator(single_axis_model).calculate(actions, 2)

    assert result.num_samples == 3
    assert len(result.paths) == 1
    assert len(result.warnings) == 1
    warning = result.warnings[0]
    assert warning.kind is WarningKind.UNRESOLVED_TARGET
    assert warning.action_index == 1
    assert warning.message.startswith("Movement 1 (p10)")


def test_cartesian_target_with_axis_values(single_axis_model):
    target = Plane.create([0.0, 100.0, 0.0], x_axis=[0.0, 1.0, 0.0], y_axis=[-1.0, 0.0, 0.0])
    actions = [Movement(target, axis_values=[90.0])]

    result = PathGenerator(single_axis_model).calculate(actions, 1)

    assert result.warnings == ()
    np.testing.assert_allclose(result.planes[-1].origin, target.origin, atol=1e-9)


def test_inconsistent_cartesian_target(single_axis_model):
    actions = [Movement(Plane.create([0.0, 100.0, 0.0]), axis_values=[0.0])]

    result = PathGenerator(single_axis_model).calculate(actions, 1)

    assert len(result.warnings) == 1
    warning = result.warnings[0]
    assert warning.kind is WarningKind.INCONSISTENT_TARGET
    assert warning.value == pytest.approx(100.0 * np.sqrt(2.0))
    # The supplied axis values are still followed
    np.testing.assert_allclose(result.planes[-1].origin, jnp.array([100.0, 0.0, 0.0]), atol=1e-9)


def test_work_object_override(single_axis_model):
    """Targets are expressed in the active work object."""
    wobj = WorkObject(user_frame=Plane.create([0.0, 50.0, 0.0]), object_frame=Plane.create([0.0, 50.0, 0.0]),
                      name="table")
    actions = [
        OverrideWorkObject(wobj),
        Movement(Plane.world_xy(), axis_values=[90.0]),
    ]

    result = PathGenerator(single_axis_model).calculate(actions, 0)

    assert result.warnings == ()
    np.testing.assert_allclose(result.planes[0].origin, jnp.array([0.0, 100.0, 0.0]), atol=1e-9)


def test_work_object_on_unknown_axis(single_axis_model):
    wobj = WorkObject(user_frame=Plane.world_xy(), object_frame=Plane.world_xy(),
                      name="fixture", external_axis_name="turntable")
    actions = [Movement(Plane.world_xy(), axis_values=[0.0], work_object=wobj)]

    with pytest.raises(ValueError, match="unknown external axis 'turntable'"):
        PathGenerator(single_axis_model).calculate(actions, 1)


def test_external_axes_interpolated():
    track = ExternalLinearAxis.create("track", Plane.world_xy(), [1.0, 0.0, 0.0], (0.0, 1000.0))
    link = Link.create(axis=[0.0, 0.0, 1.0], attachment_plane=Plane.world_xy(), limits=(-180.0, 180.0))
    model = KinematicModel.create(links=[link], mounting_frame=Plane.create([100.0, 0.0, 0.0]),
                                  external_axes=[track])

    actions = [
        JointMovement([0.0], [400.0]),
        JointMovement([90.0]),
        JointMovement([0.0], [1200.0]),
    ]
    result = PathGenerator(model).calculate(actions, 1)

    np.testing.assert_allclose(result.external_axis_values[:, 0],
                               jnp.array([200.0, 400.0, 400.0, 400.0, 800.0, 1200.0]))
    np.testing.assert_allclose(result.planes[1].origin, jnp.array([500.0, 0.0, 0.0]), atol=1e-9)
    np.testing.assert_allclose(result.planes[3].origin, jnp.array([400.0, 100.0, 0.0]), atol=1e-9)

    assert len(result.warnings) == 1
    warning = result.warnings[0]
    assert warning.external
    assert warning.action_index == 2
    assert "external axis track" in warning.message


def test_initial_external_value_clamped():
    positioner = ExternalRotationalAxis.create("turntable", Plane.world_xy(), [0.0, 0.0, 1.0], (10.0, 90.0))
    link = Link.create(axis=[0.0, 0.0, 1.0], attachment_plane=Plane.world_xy(), limits=(-180.0, 180.0))
    model = KinematicModel.create(links=[link], mounting_frame=Plane.create([100.0, 0.0, 0.0]),
                                  external_axes=[positioner])

    result = PathGenerator(model).calculate([], 3)

    np.testing.assert_allclose(result.external_axis_values, jnp.array([[10.0]]))
    assert result.in_limits == (True,)


def test_movable_work_object():
    """A work object carried by a positioner follows the positioner's value."""
    positioner = ExternalRotationalAxis.create("turntable", Plane.world_xy(), [0.0, 0.0, 1.0], (-180.0, 180.0))
    link = Link.create(axis=[0.0, 0.0, 1.0], attachment_plane=Plane.world_xy(), limits=(-180.0, 180.0))
    model = KinematicModel.create(links=[link], mounting_frame=Plane.create([100.0, 0.0, 0.0]),
                                  external_axes=[positioner])
    wobj = WorkObject(user_frame=Plane.world_xy(), object_frame=Plane.world_xy(),
                      name="fixture", external_axis_name="turntable")

    # The target at (100, 0, 0) on the table ends up at (0, 100, 0) with the table at 90 degrees
    actions = [Movement(Plane.create([100.0, 0.0, 0.0]), axis_values=[90.0], external_axis_values=[90.0],
                        work_object=wobj)]
    result = PathGenerator(model).calculate(actions, 0)

    assert result.warnings == ()
    np.testing.assert_allclose(result.planes[0].origin, jnp.array([0.0, 100.0, 0.0]), atol=1e-9)


def test_warnings_logged(single_axis_model, caplog):
    with caplog.at_level(logging.DEBUG, logger="robot_components.path.generator"):
        PathGenerator(single_axis_model).calculate([JointMovement([200.0])], 1)

    assert any("exceeds its upper limit" in record.getMessage() for record in caplog.records)


def test_default_interpolations(single_axis_model):
    result = PathGenerator(single_axis_model).calculate([JointMovement([60.0])])

    np.testing.assert_allclose(result.internal_axis_values[:, 0],
                               jnp.array([10.0, 20.0, 30.0, 40.0, 50.0, 60.0]), atol=1e-12)
