"""
Tests for the array-level quaternion and matrix functions.
"""

import math

import numpy as np
import pytest

from mlmath.transform import (
    Rotation,
    Transform,
    axis_angle_to_quaternion,
    euler_to_matrix,
    matrix_to_euler,
    matrix_to_quaternion,
    quaternion_from_vectors,
    quaternion_invert,
    quaternion_multiply,
    quaternion_normalize,
    quaternion_slerp,
    quaternion_to_axis_angle,
    quaternion_to_matrix,
    transform_directions,
    transform_points,
)
from mlmath.transform.api import _axis_rotation_matrix_numpy


@pytest.fixture
def unit_quaternions():
    """Seeded random unit quaternions [N, 4]."""
    rng = np.random.default_rng(42)
    q = rng.standard_normal((100, 4)).astype(np.float32)
    return q / np.linalg.norm(q, axis=1, keepdims=True)


# ============================================================================
# Quaternion Operations Tests
# ============================================================================


def test_quaternion_normalize():
    """Test quaternion normalization."""
    np.testing.assert_allclose(quaternion_normalize([0, 0, 2, 0]), [0, 0, 1, 0])
    np.testing.assert_array_equal(quaternion_normalize([0, 0, 0, 0]), [0, 0, 0, 0])


def test_quaternion_multiply_identity():
    """Test that the identity is neutral on both sides."""
    q = quaternion_normalize([0.1, 0.2, 0.3, 0.9])
    identity = np.array([0, 0, 0, 1], dtype=np.float32)

    np.testing.assert_allclose(quaternion_multiply(identity, q), q, atol=1e-6)
    np.testing.assert_allclose(quaternion_multiply(q, identity), q, atol=1e-6)


def test_quaternion_multiply_order():
    """Test that q1 is applied first, then q2."""
    qx = axis_angle_to_quaternion([1, 0, 0], math.pi / 2)
    qz = axis_angle_to_quaternion([0, 0, 1], math.pi / 2)

    composed = quaternion_multiply(qx, qz)
    expected = (Rotation(qx) * Rotation(qz)).get_value()
    np.testing.assert_allclose(composed, expected, atol=1e-6)

    # (0, 1, 0) --x--> (0, 0, 1) --z--> (0, 0, 1)
    m = quaternion_to_matrix(composed)
    np.testing.assert_allclose(transform_points([0, 1, 0], m), [0, 0, 1], atol=1e-6)


def test_quaternion_multiply_batched(unit_quaternions):
    """Test [N, 4] x [4] and [N, 4] x [N, 4] against the single form."""
    q2 = unit_quaternions[0]
    single = quaternion_multiply(unit_quaternions, q2)
    batched = quaternion_multiply(unit_quaternions, unit_quaternions[::-1].copy())
    broadcast = quaternion_multiply(q2, unit_quaternions)

    assert single.shape == (100, 4)
    for i in range(0, 100, 10):
        np.testing.assert_allclose(single[i], quaternion_multiply(unit_quaternions[i], q2), atol=1e-6)
        np.testing.assert_allclose(
            batched[i], quaternion_multiply(unit_quaternions[i], unit_quaternions[99 - i]), atol=1e-6
        )
        np.testing.assert_allclose(broadcast[i], quaternion_multiply(q2, unit_quaternions[i]), atol=1e-6)


def test_quaternion_invert(unit_quaternions):
    """Test that q * q^-1 is the identity."""
    for q in unit_quaternions[:10]:
        product = quaternion_multiply(q, quaternion_invert(q))
        assert abs(abs(product[3]) - 1.0) < 1e-5


def test_quaternion_invert_divides_by_norm():
    """Test inversion of a non-unit quaternion."""
    np.testing.assert_allclose(quaternion_invert([0, 0, 2, 0]), [0, 0, -0.5, 0])


def test_quaternion_invert_zero():
    """Test that a zero quaternion is returned unchanged."""
    np.testing.assert_array_equal(quaternion_invert([0, 0, 0, 0]), [0, 0, 0, 0])


def test_quaternion_to_matrix_identity():
    """Test identity quaternion conversion."""
    m = quaternion_to_matrix([0, 0, 0, 1])
    assert m.shape == (4, 3)
    np.testing.assert_array_equal(m[:3], np.eye(3))
    np.testing.assert_array_equal(m[3], [0, 0, 0])


def test_matrix_to_quaternion_identity():
    """Test identity matrix conversion (3x3 or 4x3)."""
    np.testing.assert_allclose(matrix_to_quaternion(np.eye(3)), [0, 0, 0, 1], atol=1e-7)
    np.testing.assert_allclose(matrix_to_quaternion(Transform.identity().get_value()), [0, 0, 0, 1])


def test_matrix_to_quaternion_zero():
    """Test that the zero matrix maps to the identity."""
    np.testing.assert_array_equal(matrix_to_quaternion(np.zeros((4, 3))), [0, 0, 0, 1])


def test_quaternion_rotation_roundtrip(unit_quaternions):
    """Test quaternion <-> rotation matrix roundtrip."""
    for q in unit_quaternions:
        q_reconstructed = matrix_to_quaternion(quaternion_to_matrix(q))

        # Quaternions q and -q represent same rotation
        assert np.allclose(q_reconstructed, q, atol=1e-5) or np.allclose(q_reconstructed, -q, atol=1e-5)


def test_quaternion_to_matrix_is_orthonormal(unit_quaternions):
    """Test that the rotation block is orthonormal with determinant 1."""
    for q in unit_quaternions[:10]:
        block = quaternion_to_matrix(q)[:3].astype(np.float64)
        np.testing.assert_allclose(block @ block.T, np.eye(3), atol=1e-5)
        assert np.linalg.det(block) == pytest.approx(1.0, abs=1e-5)


def test_axis_angle_90_degrees():
    """Test 90 degree rotation around Z axis."""
    q = axis_angle_to_quaternion([0, 0, 5], math.pi / 2)
    expected = np.array([0, 0, math.sin(math.pi / 4), math.cos(math.pi / 4)])
    np.testing.assert_allclose(q, expected, atol=1e-6)


def test_axis_angle_roundtrip():
    """Test axis-angle -> quaternion -> axis-angle."""
    axis, radians = quaternion_to_axis_angle(axis_angle_to_quaternion([1, -2, 2], 1.2))
    np.testing.assert_allclose(axis, np.array([1, -2, 2]) / 3.0, atol=1e-6)
    assert radians == pytest.approx(1.2, abs=1e-5)


def test_quaternion_to_axis_angle_identity():
    """Test that a rotation without a usable axis reports Z and zero."""
    axis, radians = quaternion_to_axis_angle([0, 0, 0, 1])
    np.testing.assert_array_equal(axis, [0, 0, 1])
    assert radians == 0.0


def test_quaternion_from_vectors():
    """Test the rotate-between-directions constructor and its degenerate cases."""
    q = quaternion_from_vectors([0, 0, 3], [0, 2, 0])
    np.testing.assert_allclose(transform_points([0, 0, 1], quaternion_to_matrix(q)), [0, 1, 0], atol=1e-6)

    np.testing.assert_array_equal(quaternion_from_vectors([1, 2, 3], [2, 4, 6]), [0, 0, 0, 1])

    opposite = quaternion_from_vectors([0, 0, 1], [0, 0, -1])
    np.testing.assert_allclose(opposite, [0, 1, 0, 0], atol=1e-7)


def test_quaternion_slerp():
    """Test slerp endpoints, midpoint and the linear fallback."""
    q0 = np.array([0, 0, 0, 1], dtype=np.float32)
    q1 = axis_angle_to_quaternion([0, 1, 0], 1.0)

    np.testing.assert_allclose(quaternion_slerp(q0, q1, 0.0), q0, atol=1e-6)
    np.testing.assert_allclose(quaternion_slerp(q0, q1, 1.0), q1, atol=1e-6)
    np.testing.assert_allclose(quaternion_slerp(q0, q1, 0.5), axis_angle_to_quaternion([0, 1, 0], 0.5), atol=1e-6)
    np.testing.assert_allclose(quaternion_slerp(q1, q1, 0.7), q1, atol=1e-6)


def test_quaternion_slerp_not_renormalized():
    """Test that the linear fallback returns the weighted sum as computed."""
    q = np.array([0, 0, 0, 2], dtype=np.float32)
    np.testing.assert_allclose(quaternion_slerp(q, q, 0.5), [0, 0, 0, 2])


# ============================================================================
# Euler Angle Tests
# ============================================================================


@pytest.mark.parametrize("axis", [0, 1, 2])
def test_axis_rotation_matrix(axis):
    """Test single-axis rotation matrices against the quaternion form."""
    unit = np.zeros(3)
    unit[axis] = 1.0
    expected = quaternion_to_matrix(axis_angle_to_quaternion(unit, math.radians(30)))
    np.testing.assert_allclose(_axis_rotation_matrix_numpy(axis, 30.0), expected, atol=1e-6)


def test_axis_rotation_matrix_invalid_axis():
    with pytest.raises(ValueError, match="axis"):
        _axis_rotation_matrix_numpy(3, 10.0)


def test_euler_to_matrix_zero_is_identity():
    np.testing.assert_array_equal(euler_to_matrix([0, 0, 0]), Transform.identity().get_value())


def test_euler_roundtrip():
    """Test Euler -> matrix -> Euler."""
    rng = np.random.default_rng(42)
    for angles in rng.uniform(0.0, 85.0, size=(20, 3)):
        np.testing.assert_allclose(matrix_to_euler(euler_to_matrix(angles)), angles, atol=1e-2)


def test_matrix_to_euler_ignores_scale():
    m = euler_to_matrix([20, 30, 40])
    m[:3] *= np.array([[2.0], [3.0], [4.0]], dtype=np.float32)
    np.testing.assert_allclose(matrix_to_euler(m), [20, 30, 40], atol=1e-3)


# ============================================================================
# Point Transform Tests
# ============================================================================


def test_transform_points_and_directions():
    """Test batch transforms against the matrix product."""
    rng = np.random.default_rng(42)
    points = rng.standard_normal((500, 3)).astype(np.float32)
    m = euler_to_matrix([10, 20, 30])
    m[3] = [1, 2, 3]

    np.testing.assert_allclose(transform_points(points, m), points @ m[:3] + m[3], atol=1e-5)
    np.testing.assert_allclose(transform_directions(points, m), points @ m[:3], atol=1e-5)


def test_transform_points_single_and_out():
    """Test the single-point form and a pre-allocated output buffer."""
    m = Transform.identity().get_value()
    m[3] = [1, 1, 1]
    assert transform_points([1, 2, 3], m).shape == (3,)

    points = np.ones((4, 3), dtype=np.float32)
    out = np.empty_like(points)
    result = transform_points(points, m, out=out)
    assert result is out
    np.testing.assert_array_equal(out, 2.0)
