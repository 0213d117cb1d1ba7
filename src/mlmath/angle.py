"""
Angle-unit conversions and trigonometry.

mlmath measures angles in a normalized unit where one full turn is 1.0
(so pi radians is 0.5). These helpers move between that unit, degrees and
radians, and evaluate trigonometric functions directly in angle units.

Example:
    >>> angle_to_degrees(0.25)
    90.0
    >>> round(sin_angle(0.25), 6)
    1.0
"""

from __future__ import annotations

import math

from mlmath.constants import (
    ANGLES_PER_DEGREE,
    ANGLES_PER_RADIAN,
    DEGREES_PER_ANGLE,
    RADIANS_PER_ANGLE,
)

# =============================================================================
# Unit Conversions
# =============================================================================


def angle_to_degrees(a: float) -> float:
    """Convert a normalized angle to degrees."""
    return DEGREES_PER_ANGLE * a


def angle_to_radians(a: float) -> float:
    """Convert a normalized angle to radians."""
    return RADIANS_PER_ANGLE * a


def degrees_to_angle(s: float) -> float:
    """Convert degrees to a normalized angle."""
    return s * ANGLES_PER_DEGREE


def radians_to_angle(s: float) -> float:
    """Convert radians to a normalized angle."""
    return s * ANGLES_PER_RADIAN


# =============================================================================
# Trigonometry in Angle Units
# =============================================================================


def sin_angle(a: float) -> float:
    """Sine of a normalized angle."""
    return math.sin(angle_to_radians(a))


def cos_angle(a: float) -> float:
    """Cosine of a normalized angle."""
    return math.cos(angle_to_radians(a))


def tan_angle(a: float) -> float:
    """Tangent of a normalized angle."""
    return math.tan(angle_to_radians(a))


def asin_angle(s: float) -> float:
    """
    Arc sine returning a normalized angle.

    Args:
        s: Sine value, clamped to [-1, 1]

    Returns:
        Angle in [-0.25, 0.25]
    """
    return radians_to_angle(math.asin(clamp_unit(s)))


def acos_angle(s: float) -> float:
    """
    Arc cosine returning a normalized angle.

    Args:
        s: Cosine value, clamped to [-1, 1]

    Returns:
        Angle in [0, 0.5]
    """
    return radians_to_angle(math.acos(clamp_unit(s)))


def atan2_angle(y: float, x: float) -> float:
    """Two-argument arc tangent returning a normalized angle in [-0.5, 0.5]."""
    return radians_to_angle(math.atan2(y, x))


def clamp_unit(s: float) -> float:
    """Clamp a value into [-1, 1] before an inverse sine/cosine."""
    if s > 1.0:
        return 1.0
    if s < -1.0:
        return -1.0
    return s
