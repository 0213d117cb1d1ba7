"""
Numba-optimized kernels for affine transform and quaternion operations.

Provides JIT-compiled kernels for the numerically heavy parts of the
Transform type (determinant, affine product, block inverse, Jacobi
eigen-decomposition) and parallel batch kernels that apply one transform or
rotation to many points/quaternions at once.

Matrices are 4x3 row-vector affine matrices: rows 0-2 hold the linear block,
row 3 the translation. Quaternions are stored (x, y, z, w).
"""

from __future__ import annotations

import math
from typing import Any

import numpy as np
from numba import njit, prange
from numpy.typing import NDArray

from mlmath.constants import (
    INVERSE_SINGULAR_EPSILON,
    JACOBI_DEFLATE_FACTOR,
    JACOBI_MAX_SWEEPS,
    JACOBI_THRESHOLD_FACTOR,
    JACOBI_THRESHOLD_SWEEPS,
)

# ============================================================================
# Determinant and Affine Product
# ============================================================================


@njit(cache=True, nogil=True)
def det3_numba(m: NDArray[np.float32], r1: int, r2: int, r3: int) -> float:
    """
    Determinant of the 3x3 matrix built from rows r1, r2, r3 of m.

    Args:
        m: Affine matrix [4, 3]
        r1, r2, r3: Row indices (0-3)

    Returns:
        Cofactor-expansion determinant
    """
    return (
        m[r1, 0] * m[r2, 1] * m[r3, 2]
        + m[r1, 1] * m[r2, 2] * m[r3, 0]
        + m[r1, 2] * m[r2, 0] * m[r3, 1]
        - m[r1, 0] * m[r2, 2] * m[r3, 1]
        - m[r1, 1] * m[r2, 0] * m[r3, 2]
        - m[r1, 2] * m[r2, 1] * m[r3, 0]
    )


@njit(fastmath=True, cache=True, nogil=True)
def affine_multiply_numba(
    a: NDArray[np.float32], b: NDArray[np.float32], out: NDArray[np.float32]
) -> None:
    """
    Affine product out = a * b with the implicit [0, 0, 0, 1] fourth column.

    Args:
        a: Left matrix [4, 3]
        b: Right matrix [4, 3]
        out: Output matrix [4, 3] (may alias a or b)
    """
    tmp = np.empty((4, 3))
    for i in range(3):
        for j in range(3):
            tmp[i, j] = a[i, 0] * b[0, j] + a[i, 1] * b[1, j] + a[i, 2] * b[2, j]
    for j in range(3):
        tmp[3, j] = a[3, 0] * b[0, j] + a[3, 1] * b[1, j] + a[3, 2] * b[2, j] + b[3, j]

    for i in range(4):
        for j in range(3):
            out[i, j] = tmp[i, j]


# ============================================================================
# Affine Inverse
# ============================================================================


@njit(cache=True, nogil=True)
def affine_inverse_numba(m: NDArray[np.float32], out: NDArray[np.float32]) -> bool:
    """
    Block inverse of an affine matrix.

    The 3x3 determinant is accumulated as separate positive and negative sums;
    the matrix is judged singular when |det / (pos - neg)| falls below
    INVERSE_SINGULAR_EPSILON.

    Args:
        m: Affine matrix [4, 3]
        out: Output inverse [4, 3], untouched when m is singular

    Returns:
        False if m is singular, True otherwise
    """
    pos = 0.0
    neg = 0.0

    temp = m[0, 0] * m[1, 1] * m[2, 2]
    if temp >= 0.0:
        pos += temp
    else:
        neg += temp
    temp = m[0, 1] * m[1, 2] * m[2, 0]
    if temp >= 0.0:
        pos += temp
    else:
        neg += temp
    temp = m[0, 2] * m[1, 0] * m[2, 1]
    if temp >= 0.0:
        pos += temp
    else:
        neg += temp
    temp = -m[0, 2] * m[1, 1] * m[2, 0]
    if temp >= 0.0:
        pos += temp
    else:
        neg += temp
    temp = -m[0, 1] * m[1, 0] * m[2, 2]
    if temp >= 0.0:
        pos += temp
    else:
        neg += temp
    temp = -m[0, 0] * m[1, 2] * m[2, 1]
    if temp >= 0.0:
        pos += temp
    else:
        neg += temp

    det = pos + neg
    if pos - neg == 0.0 or abs(det / (pos - neg)) < INVERSE_SINGULAR_EPSILON:
        return False

    inv = np.empty((4, 3))
    inv[0, 0] = (m[1, 1] * m[2, 2] - m[1, 2] * m[2, 1]) / det
    inv[1, 0] = -(m[1, 0] * m[2, 2] - m[1, 2] * m[2, 0]) / det
    inv[2, 0] = (m[1, 0] * m[2, 1] - m[1, 1] * m[2, 0]) / det
    inv[0, 1] = -(m[0, 1] * m[2, 2] - m[0, 2] * m[2, 1]) / det
    inv[1, 1] = (m[0, 0] * m[2, 2] - m[0, 2] * m[2, 0]) / det
    inv[2, 1] = -(m[0, 0] * m[2, 1] - m[0, 1] * m[2, 0]) / det
    inv[0, 2] = (m[0, 1] * m[1, 2] - m[0, 2] * m[1, 1]) / det
    inv[1, 2] = -(m[0, 0] * m[1, 2] - m[0, 2] * m[1, 0]) / det
    inv[2, 2] = (m[0, 0] * m[1, 1] - m[0, 1] * m[1, 0]) / det

    for j in range(3):
        inv[3, j] = -(m[3, 0] * inv[0, j] + m[3, 1] * inv[1, j] + m[3, 2] * inv[2, j])

    for i in range(4):
        for j in range(3):
            out[i, j] = inv[i, j]
    return True


# ============================================================================
# Jacobi Eigen-decomposition (symmetric 3x3)
# ============================================================================


# No fastmath: the deflation tests compare |x| + g == |x| exactly.
@njit(cache=True, nogil=True)
def jacobi3_numba(
    m: NDArray[np.float32], evalues: NDArray[np.float32], evectors: NDArray[np.float32]
) -> int:
    """
    Diagonalize the symmetric upper-left 3x3 block of m by cyclic Jacobi rotations.

    Runs at most JACOBI_MAX_SWEEPS sweeps and stops as soon as the sum of
    absolute off-diagonal entries is exactly zero. The first
    JACOBI_THRESHOLD_SWEEPS sweeps skip rotations below a threshold; sweeps
    past index 3 zero off-diagonals too small to change either eigenvalue.

    Args:
        m: Matrix whose upper-left 3x3 block is symmetric [4, 3] or [3, 3]
        evalues: Output eigenvalues [3]
        evectors: Output eigenvectors [3, 3], column k pairs with evalues[k]

    Returns:
        Number of (p, q) pairs visited
    """
    a = np.empty((3, 3))
    v = np.zeros((3, 3))
    d = np.empty(3)
    b = np.empty(3)
    z = np.zeros(3)

    for i in range(3):
        b[i] = m[i, i]
        d[i] = m[i, i]
        v[i, i] = 1.0
        for j in range(3):
            a[i, j] = m[i, j]

    rots = 0
    for sweep in range(JACOBI_MAX_SWEEPS):
        sm = abs(a[0, 1]) + abs(a[0, 2]) + abs(a[1, 2])
        if sm == 0.0:
            break

        thresh = sm * JACOBI_THRESHOLD_FACTOR if sweep < JACOBI_THRESHOLD_SWEEPS else 0.0

        for p in range(2):
            for q in range(p + 1, 3):
                g = JACOBI_DEFLATE_FACTOR * abs(a[p, q])

                if sweep > 3 and abs(d[p]) + g == abs(d[p]) and abs(d[q]) + g == abs(d[q]):
                    a[p, q] = 0.0
                elif abs(a[p, q]) > thresh:
                    h = d[q] - d[p]

                    if abs(h) + g == abs(h):
                        t = a[p, q] / h
                    else:
                        theta = 0.5 * h / a[p, q]
                        t = 1.0 / (abs(theta) + math.sqrt(1.0 + theta * theta))
                        if theta < 0.0:
                            t = -t

                    c = 1.0 / math.sqrt(1.0 + t * t)
                    s = t * c
                    tau = s / (1.0 + c)
                    h = t * a[p, q]
                    z[p] -= h
                    z[q] += h
                    d[p] -= h
                    d[q] += h
                    a[p, q] = 0.0

                    for j in range(p):
                        g = a[j, p]
                        h = a[j, q]
                        a[j, p] = g - s * (h + g * tau)
                        a[j, q] = h + s * (g - h * tau)

                    for j in range(p + 1, q):
                        g = a[p, j]
                        h = a[j, q]
                        a[p, j] = g - s * (h + g * tau)
                        a[j, q] = h + s * (g - h * tau)

                    for j in range(q + 1, 3):
                        g = a[p, j]
                        h = a[q, j]
                        a[p, j] = g - s * (h + g * tau)
                        a[q, j] = h + s * (g - h * tau)

                    for j in range(3):
                        g = v[j, p]
                        h = v[j, q]
                        v[j, p] = g - s * (h + g * tau)
                        v[j, q] = h + s * (g - h * tau)
                rots += 1

        for p in range(3):
            b[p] += z[p]
            d[p] = b[p]
            z[p] = 0.0

    for i in range(3):
        evalues[i] = d[i]
        for j in range(3):
            evectors[i, j] = v[i, j]
    return rots


# ============================================================================
# Batch Kernels
# ============================================================================


@njit(parallel=True, fastmath=True, cache=True, nogil=True)
def transform_points_numba(
    points: NDArray[np.float32], m: NDArray[np.float32], out: NDArray[np.float32]
) -> None:
    """
    Transform row-vector points by an affine matrix: out[i] = points[i] * M + t.

    Args:
        points: Input points [N, 3]
        m: Affine matrix [4, 3]
        out: Output array [N, 3] (pre-allocated, may alias points)
    """
    N = points.shape[0]
    for i in prange(N):
        x, y, z = points[i, 0], points[i, 1], points[i, 2]
        for j in range(3):
            out[i, j] = x * m[0, j] + y * m[1, j] + z * m[2, j] + m[3, j]


@njit(parallel=True, fastmath=True, cache=True, nogil=True)
def transform_directions_numba(
    directions: NDArray[np.float32], m: NDArray[np.float32], out: NDArray[np.float32]
) -> None:
    """
    Transform row-vector directions by the linear block only: out[i] = d[i] * M.

    Args:
        directions: Input directions [N, 3]
        m: Affine matrix [4, 3]
        out: Output array [N, 3] (pre-allocated, may alias directions)
    """
    N = directions.shape[0]
    for i in prange(N):
        x, y, z = directions[i, 0], directions[i, 1], directions[i, 2]
        for j in range(3):
            out[i, j] = x * m[0, j] + y * m[1, j] + z * m[2, j]


@njit(nogil=True, cache=True)
def _compose_quaternion(
    a0: float, a1: float, a2: float, a3: float,
    q0: float, q1: float, q2: float, q3: float,
    out: NDArray[np.float32], i: int,
) -> None:
    # out[i] = normalize(q (x) a)
    p0 = q3 * a0 + q0 * a3 + q1 * a2 - q2 * a1
    p1 = q3 * a1 + q1 * a3 + q2 * a0 - q0 * a2
    p2 = q3 * a2 + q2 * a3 + q0 * a1 - q1 * a0
    p3 = q3 * a3 - q0 * a0 - q1 * a1 - q2 * a2

    norm = p0 * p0 + p1 * p1 + p2 * p2 + p3 * p3
    if norm > 0.0:
        inv = 1.0 / math.sqrt(norm)
        p0 *= inv
        p1 *= inv
        p2 *= inv
        p3 *= inv

    out[i, 0] = p0
    out[i, 1] = p1
    out[i, 2] = p2
    out[i, 3] = p3


@njit(parallel=True, cache=True, nogil=True)
def quaternion_multiply_single_numba(
    quats: NDArray[np.float32], q: NDArray[np.float32], out: NDArray[np.float32]
) -> None:
    """
    Compose every quaternion in an array with one rotation.

    out[i] is quats[i] followed by q, i.e. the normalized product q (x) quats[i],
    the same result as Rotation(quats[i]).mul(Rotation(q)).

    Args:
        quats: Array of quaternions [N, 4] (x, y, z, w)
        q: Single quaternion [4] (x, y, z, w)
        out: Output array [N, 4] (pre-allocated, may alias quats)
    """
    q0, q1, q2, q3 = q[0], q[1], q[2], q[3]

    N = quats.shape[0]
    for i in prange(N):
        _compose_quaternion(quats[i, 0], quats[i, 1], quats[i, 2], quats[i, 3], q0, q1, q2, q3, out, i)


@njit(parallel=True, cache=True, nogil=True)
def quaternion_multiply_batched_numba(
    q1: NDArray[np.float32], q2: NDArray[np.float32], out: NDArray[np.float32]
) -> None:
    """
    Compose two arrays of quaternions element-wise: out[i] = normalize(q2[i] (x) q1[i]).

    Args:
        q1: Array of quaternions [N, 4] applied first
        q2: Array of quaternions [N, 4] applied second
        out: Output array [N, 4] (pre-allocated)
    """
    N = q1.shape[0]
    for i in prange(N):
        _compose_quaternion(
            q1[i, 0], q1[i, 1], q1[i, 2], q1[i, 3], q2[i, 0], q2[i, 1], q2[i, 2], q2[i, 3], out, i
        )


# ============================================================================
# Helper Functions
# ============================================================================


def get_numba_status() -> dict[str, Any]:
    """
    Get information about Numba availability and configuration.

    Returns:
        Dictionary with Numba status information
    """
    import numba

    return {
        "available": True,
        "version": numba.__version__,
        "num_threads": numba.config.NUMBA_NUM_THREADS,
        "threading_layer": numba.config.THREADING_LAYER,
    }


def warmup_transform_kernels() -> None:
    """
    Warm up Numba JIT compilation for transform kernels.

    Call this once at import time to avoid first-call compilation overhead.
    """
    m = np.zeros((4, 3), dtype=np.float32)
    m[0, 0] = m[1, 1] = m[2, 2] = 1.0
    out_m = np.empty((4, 3), dtype=np.float32)
    evalues = np.empty(3, dtype=np.float32)
    evectors = np.empty((3, 3), dtype=np.float32)

    det3_numba(m, 0, 1, 2)
    affine_multiply_numba(m, m, out_m)
    affine_inverse_numba(m, out_m)
    jacobi3_numba(m, evalues, evectors)

    points = np.zeros((8, 3), dtype=np.float32)
    out_p = np.empty((8, 3), dtype=np.float32)
    transform_points_numba(points, m, out_p)
    transform_directions_numba(points, m, out_p)

    quats = np.zeros((8, 4), dtype=np.float32)
    quats[:, 3] = 1.0
    out_q = np.empty((8, 4), dtype=np.float32)
    quaternion_multiply_single_numba(quats, quats[0], out_q)
    quaternion_multiply_batched_numba(quats, quats, out_q)


# Warmup on import to avoid first-call overhead
warmup_transform_kernels()
