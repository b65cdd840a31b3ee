"""Sampling a generated path for display.

A preview shows one sample of a PathResult, chosen with a slider in
[0, 1], posed with forward kinematics, together with the tool path and the
warnings of the run.
"""

from dataclasses import dataclass
from typing import Tuple

from .constants import LIMIT_CHECK_NOTICE, MAX_DISPLAYED_WARNINGS
from .kinematics import ForwardKinematics, Pose
from .path import PathResult, Polyline


@dataclass(frozen=True)
class PreviewOptions:
    """Display toggles.

    Attributes:
        preview_mesh: Pose and show the robot meshes.
        preview_curve: Show the tool path polylines.
        max_warnings: Warnings shown at most, below the notice line.
    """
    preview_mesh: bool = True
    preview_curve: bool = True
    max_warnings: int = MAX_DISPLAYED_WARNINGS


@dataclass(frozen=True, eq=False)
class PreviewFrame:
    index: int
    pose: Pose
    paths: Tuple[Polyline, ...]
    messages: Tuple[str, ...]

    @property
    def in_limits(self) -> bool:
        return self.pose.in_limits


def sample_index(num_samples: int, slider: float) -> int:
    """Index of the sample a slider position in [0, 1] points at."""
    if not 0.0 <= slider <= 1.0:
        raise ValueError(f"Slider value must lie in [0, 1], got {slider}")
    return int((num_samples - 1) * slider)


def preview_frame(result: PathResult, solver: ForwardKinematics, slider: float,
                  options: PreviewOptions = PreviewOptions()) -> PreviewFrame:
    """Pose the robot at the sample selected by `slider`.

    Args:
        result: Output of a path generator run
        solver: Solver bound to the robot the path was generated for
        slider: Position in the program, 0 is the first and 1 the last sample
        options: Display toggles

    Returns:
        The frame to display
    """
    index = sample_index(result.num_samples, slider)

    solver.hide_mesh = not options.preview_mesh
    pose = solver.calculate(result.internal_axis_values[index], result.external_axis_values[index],
                            tool=result.tools[index])

    messages: Tuple[str, ...] = ()
    if result.warnings:
        messages = (LIMIT_CHECK_NOTICE,) + tuple(result.error_text[:options.max_warnings])

    return PreviewFrame(
        index=index,
        pose=pose,
        paths=result.paths if options.preview_curve else (),
        messages=messages,
    )
