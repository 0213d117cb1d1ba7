"""
Array-level quaternion and affine-matrix functions.

CPU-optimized using NumPy and Numba. These functions are the single
implementation behind the Rotation and Transform classes and can also be
used directly on plain arrays.

Conventions:
- Quaternions are float32 arrays [4] in (x, y, z, w) order
- Affine matrices are float32 arrays [4, 3]: rows 0-2 are the linear block,
  row 3 the translation, and points are row vectors (p' = p * M + t)
- Euler angles are in degrees, applied about fixed axes Z, then Y, then X

Functions:
- Quaternion utilities: normalize, multiply, invert, slerp, axis-angle and
  rotate-between-vectors construction
- Conversions between quaternions, matrices and Euler angles
- Batch point/direction transforms (Numba parallel kernels)
"""

from __future__ import annotations

import logging
import math

from typing import TypeAlias

import numpy as np

from mlmath.angle import (
    angle_to_degrees,
    asin_angle,
    atan2_angle,
    clamp_unit,
    cos_angle,
    degrees_to_angle,
    sin_angle,
)
from mlmath.constants import (
    DEFAULT_AXIS,
    DTYPE,
    GIMBAL_LOCK_EPSILON,
    IDENTITY_QUATERNION,
    ROTATION_AXIS_EPSILON,
    ROTATION_PARALLEL_THRESHOLD,
    SLERP_EPSILON,
    TRANSFORM_SHAPE,
)

# Import Numba kernels at module level - Numba is required
from mlmath.transform.kernels import (
    affine_multiply_numba,
    quaternion_multiply_batched_numba,
    quaternion_multiply_single_numba,
    transform_directions_numba,
    transform_points_numba,
)

logger = logging.getLogger(__name__)

# Type aliases for better readability
ArrayLike: TypeAlias = np.ndarray | tuple | list

# ============================================================================
# Helpers
# ============================================================================


def _identity_matrix_numpy() -> np.ndarray:
    """Build a 4x3 identity affine matrix."""
    m = np.zeros(TRANSFORM_SHAPE, dtype=DTYPE)
    m[0, 0] = m[1, 1] = m[2, 2] = 1.0
    return m


def _unit_vector_numpy(v: ArrayLike) -> np.ndarray:
    """Return a normalized float64 copy of a 3-vector (zero stays zero)."""
    v = np.array(v, dtype=np.float64)
    length = math.sqrt(float(np.dot(v, v)))
    if length != 0.0:
        v /= length
    return v


# ============================================================================
# Quaternion Operations (NumPy)
# ============================================================================


def _quaternion_normalize_numpy(q: ArrayLike) -> np.ndarray:
    """
    Rescale a quaternion to unit length.

    A quaternion with zero norm has no direction and is returned unchanged.
    """
    q = np.array(q, dtype=np.float64)
    norm = float(np.dot(q, q))
    if norm != 0.0:
        q *= 1.0 / math.sqrt(norm)
    return q.astype(DTYPE)


def _quaternion_multiply_numpy(a: np.ndarray, q: np.ndarray) -> np.ndarray:
    """
    Compose two rotations: ``a`` first, then ``q``.

    Computes the Hamilton product q (x) a and renormalizes it.
    """
    a0, a1, a2, a3 = (float(c) for c in a)
    q0, q1, q2, q3 = (float(c) for c in q)

    p = np.array(
        [
            q3 * a0 + q0 * a3 + q1 * a2 - q2 * a1,
            q3 * a1 + q1 * a3 + q2 * a0 - q0 * a2,
            q3 * a2 + q2 * a3 + q0 * a1 - q1 * a0,
            q3 * a3 - q0 * a0 - q1 * a1 - q2 * a2,
        ]
    )
    return _quaternion_normalize_numpy(p)


def _quaternion_invert_numpy(q: np.ndarray) -> np.ndarray:
    """Conjugate divided by the squared norm. A zero quaternion is returned unchanged."""
    q = np.asarray(q, dtype=np.float64)
    norm_sq = float(np.dot(q, q))
    if norm_sq == 0.0:
        return q.astype(DTYPE)
    inv_norm = 1.0 / norm_sq
    return np.array(
        [-q[0] * inv_norm, -q[1] * inv_norm, -q[2] * inv_norm, q[3] * inv_norm], dtype=DTYPE
    )


def _quaternion_to_matrix_numpy(q: np.ndarray) -> np.ndarray:
    """NumPy implementation of quaternion to 4x3 rotation matrix (zero translation)."""
    x, y, z, w = (float(c) for c in q)

    m = np.zeros(TRANSFORM_SHAPE, dtype=DTYPE)

    m[0, 0] = 1.0 - 2.0 * (y * y + z * z)
    m[0, 1] = 2.0 * (x * y + z * w)
    m[0, 2] = 2.0 * (z * x - y * w)

    m[1, 0] = 2.0 * (x * y - z * w)
    m[1, 1] = 1.0 - 2.0 * (z * z + x * x)
    m[1, 2] = 2.0 * (y * z + x * w)

    m[2, 0] = 2.0 * (z * x + y * w)
    m[2, 1] = 2.0 * (y * z - x * w)
    m[2, 2] = 1.0 - 2.0 * (y * y + x * x)

    return m


def _matrix_to_quaternion_numpy(m: np.ndarray) -> np.ndarray:
    """
    NumPy implementation of rotation matrix to quaternion.

    Solves first for whichever of x, y, z, w is largest, picked by comparing
    the diagonal entries and the trace, then derives the other three from
    off-diagonal sums/differences. An all-zero matrix maps to the identity.
    """
    m = np.asarray(m, dtype=np.float64)
    if not m.any():
        return np.array(IDENTITY_QUATERNION, dtype=DTYPE)

    if m[0, 0] > m[1, 1]:
        i = 0 if m[0, 0] > m[2, 2] else 2
    else:
        i = 1 if m[1, 1] > m[2, 2] else 2

    quat = np.zeros(4)
    trace = m[0, 0] + m[1, 1] + m[2, 2]
    if trace > m[i, i]:
        quat[3] = math.sqrt(trace + 1.0) * 0.5
        quat[0] = (m[1, 2] - m[2, 1]) / (4.0 * quat[3])
        quat[1] = (m[2, 0] - m[0, 2]) / (4.0 * quat[3])
        quat[2] = (m[0, 1] - m[1, 0]) / (4.0 * quat[3])
    else:
        j = (i + 1) % 3
        k = (i + 2) % 3

        quat[i] = math.sqrt(m[i, i] - m[j, j] - m[k, k] + 1.0) * 0.5
        quat[j] = (m[i, j] + m[j, i]) / (4.0 * quat[i])
        quat[k] = (m[i, k] + m[k, i]) / (4.0 * quat[i])
        quat[3] = (m[j, k] - m[k, j]) / (4.0 * quat[i])

    return _quaternion_normalize_numpy(quat)


def _axis_angle_to_quaternion_numpy(axis: ArrayLike, radians: float) -> np.ndarray:
    """NumPy implementation of axis + angle (radians) to quaternion."""
    unit = _unit_vector_numpy(axis)
    half = 0.5 * radians
    sin_half = math.sin(half)
    return np.array(
        [unit[0] * sin_half, unit[1] * sin_half, unit[2] * sin_half, math.cos(half)], dtype=DTYPE
    )


def _quaternion_to_axis_angle_numpy(q: np.ndarray) -> tuple[np.ndarray, float]:
    """
    NumPy implementation of quaternion to axis + angle (radians).

    A vector part shorter than ROTATION_AXIS_EPSILON has no usable axis; the
    result is then the Z axis with a zero angle.
    """
    q = np.asarray(q, dtype=np.float64)
    length = math.sqrt(float(np.dot(q[:3], q[:3])))

    if length > ROTATION_AXIS_EPSILON:
        axis = (q[:3] / length).astype(DTYPE)
        radians = 2.0 * math.acos(clamp_unit(float(q[3])))
    else:
        axis = np.array(DEFAULT_AXIS, dtype=DTYPE)
        radians = 0.0
    return axis, radians


def _quaternion_from_vectors_numpy(rotate_from: ArrayLike, rotate_to: ArrayLike) -> np.ndarray:
    """
    NumPy implementation of the rotation taking one direction onto another.

    Nearly parallel directions give the identity. Nearly opposite directions
    give a half turn about an axis perpendicular to ``rotate_from``: its cross
    product with +X, or with +Y when that one is too short.
    """
    rotate_from = np.asarray(rotate_from, dtype=np.float64)
    rotate_to = np.asarray(rotate_to, dtype=np.float64)
    from_unit = _unit_vector_numpy(rotate_from)
    to_unit = _unit_vector_numpy(rotate_to)

    cost = float(np.dot(from_unit, to_unit))

    if cost > ROTATION_PARALLEL_THRESHOLD:
        logger.debug("[Rotation] Directions are parallel, using identity")
        return np.array(IDENTITY_QUATERNION, dtype=DTYPE)

    if cost < -ROTATION_PARALLEL_THRESHOLD:
        logger.debug("[Rotation] Directions are opposite, picking a perpendicular axis")
        tmp = np.cross(from_unit, (1.0, 0.0, 0.0))
        if math.sqrt(float(np.dot(tmp, tmp))) < ROTATION_AXIS_EPSILON:
            tmp = np.cross(from_unit, (0.0, 1.0, 0.0))
        # Quaternion of a half turn: sin(pi/2) = 1, cos(pi/2) = 0
        tmp = _unit_vector_numpy(tmp)
        return np.array([tmp[0], tmp[1], tmp[2], 0.0], dtype=DTYPE)

    axis = _unit_vector_numpy(np.cross(rotate_from, rotate_to))
    axis *= math.sqrt(0.5 * (1.0 - cost))
    w = math.sqrt(0.5 * (1.0 + cost))
    return _quaternion_normalize_numpy([axis[0], axis[1], axis[2], w])


def _quaternion_slerp_numpy(q0: np.ndarray, q1: np.ndarray, t: float) -> np.ndarray:
    """
    NumPy implementation of spherical linear interpolation.

    Takes the shorter arc by flipping q1 when the dot product is negative,
    falls back to a linear blend when the quaternions are within SLERP_EPSILON
    of each other. The result is NOT renormalized.
    """
    q0 = np.asarray(q0, dtype=np.float64)
    q1 = np.asarray(q1, dtype=np.float64)

    cosom = float(np.dot(q0, q1))
    if cosom < 0.0:
        cosom = -cosom
        q1 = -q1

    if (1.0 - cosom) > SLERP_EPSILON:
        omega = math.acos(clamp_unit(cosom))
        sinom = math.sin(omega)
        scale0 = math.sin((1.0 - t) * omega) / sinom
        scale1 = math.sin(t * omega) / sinom
    else:
        scale0 = 1.0 - t
        scale1 = t

    return (scale0 * q0 + scale1 * q1).astype(DTYPE)


# ============================================================================
# Euler Angle Operations (NumPy)
# ============================================================================


def _axis_rotation_matrix_numpy(axis: int, degrees: float) -> np.ndarray:
    """Build the 4x3 matrix rotating by ``degrees`` about a fixed principal axis (0=X, 1=Y, 2=Z)."""
    angle = degrees_to_angle(degrees)
    s = sin_angle(angle)
    c = cos_angle(angle)

    m = _identity_matrix_numpy()
    if axis == 2:
        m[0, 0] = c
        m[0, 1] = s
        m[1, 0] = -s
        m[1, 1] = c
    elif axis == 1:
        m[0, 0] = c
        m[0, 2] = -s
        m[2, 0] = s
        m[2, 2] = c
    elif axis == 0:
        m[1, 1] = c
        m[1, 2] = s
        m[2, 1] = -s
        m[2, 2] = c
    else:
        raise ValueError(f"axis={axis} is not valid. Use 0 (X), 1 (Y) or 2 (Z).")
    return m


def _apply_euler_numpy(m: np.ndarray, degrees: ArrayLike) -> np.ndarray:
    """
    Right-multiply m (in place) by fixed-axis rotations Z, then Y, then X.

    Axes whose angle is exactly zero are skipped.
    """
    for axis in (2, 1, 0):
        angle = float(degrees[axis])
        if angle != 0.0:
            affine_multiply_numba(m, _axis_rotation_matrix_numpy(axis, angle), m)
    return m


def _matrix_to_euler_numpy(m: np.ndarray) -> np.ndarray:
    """
    NumPy implementation of matrix to fixed-axis Euler angles (degrees).

    Rows of the linear block are normalized first (zero rows are left as is).
    When row2.x is within GIMBAL_LOCK_EPSILON of 1 the Z angle cannot be
    separated from X; the rotation is then expressed about X alone and Z is 0.
    Angles are returned in [0, 360).
    """
    t = np.array(np.asarray(m, dtype=np.float64)[:3, :3])
    for i in range(3):
        total = float(np.dot(t[i], t[i]))
        if total != 0.0:
            t[i] /= math.sqrt(total)

    rotation = np.zeros(3)
    rotation[1] = angle_to_degrees(asin_angle(t[2, 0]))

    if abs(t[2, 0] - 1.0) > GIMBAL_LOCK_EPSILON:
        rotation[0] = angle_to_degrees(atan2_angle(-t[2, 1], t[2, 2]))
        rotation[2] = angle_to_degrees(atan2_angle(-t[1, 0], t[0, 0]))
    else:
        logger.debug("[Transform] Gimbal lock in Euler extraction, collapsing to X rotation")
        rotation[0] = angle_to_degrees(atan2_angle(t[0, 1], t[2, 1]))
        rotation[2] = 0.0

    rotation[rotation < 0.0] += 360.0
    rotation = rotation.astype(DTYPE)
    # float32 rounding can carry a tiny negative angle up to 360
    rotation[rotation >= 360.0] -= 360.0
    return rotation


# ============================================================================
# Public API - Quaternion Utilities
# ============================================================================


def quaternion_normalize(q: ArrayLike) -> np.ndarray:
    """Rescale a quaternion (x, y, z, w) to unit length."""
    return _quaternion_normalize_numpy(q)


def quaternion_multiply(q1: ArrayLike, q2: ArrayLike) -> np.ndarray:
    """
    Compose rotations: q1 first, then q2.

    Args:
        q1: First quaternion(s) [4] or [N, 4] (x, y, z, w)
        q2: Second quaternion(s) [4] or [N, 4] (x, y, z, w)

    Returns:
        Normalized product quaternion(s) q2 (x) q1, [4] if both inputs are
        single quaternions, otherwise [N, 4]

    Example:
        >>> quarter_z = axis_angle_to_quaternion([0, 0, 1], np.pi / 2)
        >>> half_z = quaternion_multiply(quarter_z, quarter_z)
    """
    q1 = np.asarray(q1, dtype=DTYPE)
    q2 = np.asarray(q2, dtype=DTYPE)

    if q1.ndim == 1 and q2.ndim == 1:
        return _quaternion_multiply_numpy(q1, q2)

    if q2.ndim == 1:
        out = np.empty_like(q1)
        quaternion_multiply_single_numba(np.ascontiguousarray(q1), np.ascontiguousarray(q2), out)
        return out

    q1, q2 = np.broadcast_arrays(np.atleast_2d(q1), q2)
    q1 = np.ascontiguousarray(q1)
    q2 = np.ascontiguousarray(q2)
    out = np.empty_like(q2)
    quaternion_multiply_batched_numba(q1, q2, out)
    return out


def quaternion_invert(q: ArrayLike) -> np.ndarray:
    """Inverse rotation: conjugate divided by the squared norm."""
    return _quaternion_invert_numpy(q)


def quaternion_to_matrix(q: ArrayLike) -> np.ndarray:
    """Convert a quaternion (x, y, z, w) to a 4x3 rotation matrix."""
    return _quaternion_to_matrix_numpy(q)


def matrix_to_quaternion(m: ArrayLike) -> np.ndarray:
    """Convert the rotation block of a 4x3 (or 3x3) matrix to a unit quaternion (x, y, z, w)."""
    return _matrix_to_quaternion_numpy(m)


def axis_angle_to_quaternion(axis: ArrayLike, radians: float) -> np.ndarray:
    """Convert an axis (normalized internally) and angle in radians to a quaternion."""
    return _axis_angle_to_quaternion_numpy(axis, radians)


def quaternion_to_axis_angle(q: ArrayLike) -> tuple[np.ndarray, float]:
    """Convert a quaternion to (unit axis [3], angle in radians)."""
    return _quaternion_to_axis_angle_numpy(q)


def quaternion_from_vectors(rotate_from: ArrayLike, rotate_to: ArrayLike) -> np.ndarray:
    """Quaternion rotating direction ``rotate_from`` onto direction ``rotate_to``."""
    return _quaternion_from_vectors_numpy(rotate_from, rotate_to)


def quaternion_slerp(q0: ArrayLike, q1: ArrayLike, t: float) -> np.ndarray:
    """
    Spherical linear interpolation from q0 (t=0) to q1 (t=1).

    Args:
        q0: Start quaternion [4]
        q1: End quaternion [4]
        t: Interpolation parameter

    Returns:
        Interpolated quaternion [4], not renormalized
    """
    return _quaternion_slerp_numpy(q0, q1, t)


# ============================================================================
# Public API - Matrix Utilities
# ============================================================================


def euler_to_matrix(degrees: ArrayLike) -> np.ndarray:
    """
    Build a 4x3 rotation matrix from fixed-axis Euler angles.

    Args:
        degrees: Rotation about X, Y, Z in degrees [3], applied Z first, then Y, then X

    Returns:
        4x3 rotation matrix with zero translation
    """
    return _apply_euler_numpy(_identity_matrix_numpy(), np.asarray(degrees, dtype=DTYPE))


def matrix_to_euler(m: ArrayLike) -> np.ndarray:
    """Extract fixed-axis Euler angles (degrees, each in [0, 360)) from a 4x3 matrix."""
    return _matrix_to_euler_numpy(m)


def transform_points(points: ArrayLike, m: ArrayLike, out: np.ndarray | None = None) -> np.ndarray:
    """
    Transform row-vector points by an affine matrix (rotation, scale and translation).

    Args:
        points: Input points [N, 3] or [3]
        m: Affine matrix [4, 3]
        out: Optional pre-allocated output buffer [N, 3]

    Returns:
        Transformed points (same as `out` if provided)
    """
    points = np.asarray(points, dtype=DTYPE)
    single = points.ndim == 1
    points = np.ascontiguousarray(np.atleast_2d(points))
    m = np.ascontiguousarray(m, dtype=DTYPE)

    if out is None:
        out = np.empty_like(points)
    transform_points_numba(points, m, out)
    return out[0] if single else out


def transform_directions(
    directions: ArrayLike, m: ArrayLike, out: np.ndarray | None = None
) -> np.ndarray:
    """
    Transform row-vector directions by the linear block of an affine matrix (no translation).

    Args:
        directions: Input directions [N, 3] or [3]
        m: Affine matrix [4, 3]
        out: Optional pre-allocated output buffer [N, 3]

    Returns:
        Transformed directions (same as `out` if provided)
    """
    directions = np.asarray(directions, dtype=DTYPE)
    single = directions.ndim == 1
    directions = np.ascontiguousarray(np.atleast_2d(directions))
    m = np.ascontiguousarray(m, dtype=DTYPE)

    if out is None:
        out = np.empty_like(directions)
    transform_directions_numba(directions, m, out)
    return out[0] if single else out
