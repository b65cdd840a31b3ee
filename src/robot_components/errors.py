"""Errors and non-fatal warnings raised by the kinematics and path engines."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class DimensionMismatchError(ValueError):
    """A value vector does not have the number of entries the model expects."""

    def __init__(self, what: str, expected: int, actual: int):
        self.what = what
        self.expected = expected
        self.actual = actual
        super().__init__(f"{what}: expected {expected} values, got {actual}")


class WarningKind(Enum):
    UNRESOLVED_TARGET = "unresolved_target"
    AXIS_LIMIT_EXCEEDED = "axis_limit_exceeded"
    INCONSISTENT_TARGET = "inconsistent_target"


@dataclass(frozen=True)
class PathWarning:
    """One warning produced while generating a path.

    Attributes:
        kind: What went wrong.
        action_index: Index of the offending Action in the program.
        message: Human-readable text, as shown to the user.
        axis: Zero-based axis index for limit warnings.
        external: Whether `axis` refers to an external axis.
        value: The offending axis value.
        bound: The exceeded limit.
    """
    kind: WarningKind
    action_index: int
    message: str
    axis: Optional[int] = None
    external: bool = False
    value: Optional[float] = None
    bound: Optional[float] = None

    def __str__(self) -> str:
        return self.message
