"""
Constants and numeric thresholds for mlmath.

Centralizes magic numbers so every algorithm uses the same edge-case bounds.
The thresholds are part of the numeric contract of the library: changing one
changes which branch an operation takes near a degenerate input.
"""

from __future__ import annotations

import math

import numpy as np

# =============================================================================
# Storage
# =============================================================================

DTYPE = np.float32  # All vectors, quaternions and matrices are 32-bit floats

# =============================================================================
# Scalar Constants
# =============================================================================

SCALAR_ZERO = 0.0
SCALAR_ONE = 1.0
SCALAR_HALF = 0.5
SCALAR_TWO = 2.0
SCALAR_PI = math.pi
SCALAR_TWO_PI = 2.0 * math.pi
SCALAR_PI_HALF = 0.5 * math.pi
SCALAR_PI_FOURTH = 0.25 * math.pi
SCALAR_EPSILON = 1.0e-7  # Unit of absolute error for equal_abs_err
SCALAR_MAX = 1.0e38

# =============================================================================
# Angle Constants (normalized units, one full turn = 1.0)
# =============================================================================

ANGLE_ZERO = 0.0
ANGLE_TWO_PI = 1.0
ANGLE_PI = 0.5
ANGLE_PI_HALF = 0.25
ANGLE_PI_FOURTH = 0.125

# Conversion factors
DEGREES_PER_ANGLE = 360.0
RADIANS_PER_ANGLE = SCALAR_TWO_PI
ANGLES_PER_DEGREE = 2.77777777777777777e-3  # 1/360
ANGLES_PER_RADIAN = 0.15915494309189533619  # 1/(2*pi)

# =============================================================================
# Vector Constants
# =============================================================================

# approximate_length: 0.9375*max + 0.375*(sum of the other two)
APPROX_LENGTH_MAJOR_WEIGHT = 0.9375
APPROX_LENGTH_MINOR_WEIGHT = 0.375

# Starting best-dot value for get_closest_axis (below any unit dot product)
CLOSEST_AXIS_FLOOR = -21.234

# =============================================================================
# Rotation Thresholds
# =============================================================================

ROTATION_PARALLEL_THRESHOLD = 0.99999  # |cos| above this: same or opposite direction
ROTATION_AXIS_EPSILON = 1.0e-5  # Vector part shorter than this has no usable axis
SLERP_EPSILON = 1.0e-5  # 1 - cos(omega) below this: blend linearly

# =============================================================================
# Transform Thresholds
# =============================================================================

FACTOR_SINGULAR_EPSILON = 1.0e-12  # |det| below this: factor refuses
INVERSE_SINGULAR_EPSILON = 1.0e-15  # |det / (pos - neg)| below this: no inverse
GIMBAL_LOCK_EPSILON = 0.001  # |row2.x - 1| below this: Euler Z collapses

# Jacobi eigen-decomposition
JACOBI_MAX_SWEEPS = 50
JACOBI_THRESHOLD_SWEEPS = 3  # Sweeps that use a non-zero rotation threshold
JACOBI_THRESHOLD_FACTOR = 0.022222222222  # 0.2 / (3 * 3)
JACOBI_DEFLATE_FACTOR = 100.0

# =============================================================================
# General Constants
# =============================================================================

TRANSFORM_SHAPE = (4, 3)  # 3x3 linear block + translation row

IDENTITY_QUATERNION = (0.0, 0.0, 0.0, 1.0)
DEFAULT_AXIS = (0.0, 0.0, 1.0)  # Axis reported for an identity rotation
