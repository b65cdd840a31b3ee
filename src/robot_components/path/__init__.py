"""Path generation over motion programs.

This module interpolates axis values between consecutive targets and
collects the resulting TCP planes, tool path polylines and warnings.
"""

from .generator import PathGenerator, PathResult, Polyline
from .interpolation import interpolate

__all__ = ["PathGenerator", "PathResult", "Polyline", "interpolate"]
