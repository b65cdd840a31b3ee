"""Loading robot descriptions from files.

URDF chains are converted into KinematicModel instances.
"""

from .urdf_parser import load_urdf

__all__ = ["load_urdf"]
