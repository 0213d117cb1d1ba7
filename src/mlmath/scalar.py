"""
Scalar helpers shared by the vector, rotation and transform types.
"""

from __future__ import annotations

from mlmath.constants import SCALAR_EPSILON


def sign(x: float) -> float:
    """Return 0.0 for zero, otherwise +1.0 or -1.0."""
    if x == 0.0:
        return 0.0
    return 1.0 if x > 0.0 else -1.0


def equal_abs_err(x: float, y: float, tol_magnitude: int) -> bool:
    """
    Compare two scalars with an absolute error bound.

    The bound is ``SCALAR_EPSILON * 2**tol_magnitude``, so each increment of
    ``tol_magnitude`` doubles the accepted difference.

    Args:
        x: First scalar
        y: Second scalar
        tol_magnitude: Non-negative power of two applied to the epsilon

    Returns:
        True if |x - y| is within the bound

    Raises:
        ValueError: If tol_magnitude is negative

    Example:
        >>> equal_abs_err(1.0, 1.0 + 5e-7, 3)
        True
    """
    if tol_magnitude < 0:
        raise ValueError(
            f"tol_magnitude={tol_magnitude} must be >= 0. "
            "Use 0 for a single epsilon, larger values to widen the bound."
        )
    return abs(x - y) <= SCALAR_EPSILON * (1 << tol_magnitude)


def pow_int(x: float, i: int) -> float:
    """Raise a scalar to an integer power (negative powers use the reciprocal)."""
    if i < 0:
        return 1.0 / pow_int(x, -i)

    result = 1.0
    base = x
    while i:
        if i & 1:
            result *= base
        base *= base
        i >>= 1
    return result
