"""Library-wide defaults."""

# Intermediate samples generated between two consecutive targets
DEFAULT_INTERPOLATIONS = 5

# Warnings surfaced to the user beyond this count are dropped
MAX_DISPLAYED_WARNINGS = 30

# Notice shown above path warnings
LIMIT_CHECK_NOTICE = "Only axis values of movements with known axis values are checked."

# RAPID variable names
RAPID_NAME_MAX_LENGTH = 32

# Allowed distance (mm) between a Cartesian target and the TCP reached with
# the axis values supplied alongside it
TARGET_TOLERANCE = 1e-3

# Degrees / millimetres per URDF radian / metre
RAD_TO_DEG = 57.29577951308232
M_TO_MM = 1000.0
