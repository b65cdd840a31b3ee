"""
Spatial transforms for robot kinematics.

- SO(3) rotations (so3 module)
- SE(3) rigid body transforms (se3 module)
- Oriented planes / frames (plane module)

All functions are pure and stateless.
"""

from . import so3
from . import se3
from .plane import Plane, orient, relative

__all__ = [
    "so3",
    "se3",
    "Plane",
    "orient",
    "relative",
]
