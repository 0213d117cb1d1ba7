"""Tests for Rotation (unit quaternion x, y, z, w)."""

import copy
import math

import numpy as np
import pytest

from mlmath import Rotation, Transform, Vector3


@pytest.fixture
def random_rotations():
    """Seeded random unit rotations."""
    rng = np.random.default_rng(42)
    return [Rotation(q) for q in rng.standard_normal((20, 4))]


def assert_same_rotation(q1, q2, atol=1e-5):
    """Quaternions q and -q describe the same rotation."""
    q1 = np.asarray(q1)
    q2 = np.asarray(q2)
    assert np.allclose(q1, q2, atol=atol) or np.allclose(q1, -q2, atol=atol)


class TestConstruction:
    """Test constructors and getters."""

    def test_default_is_identity(self):
        r = Rotation()
        np.testing.assert_array_equal(r.get_value(), [0, 0, 0, 1])
        assert r == Rotation.identity()

    def test_identity_axis_angle(self):
        axis, radians = Rotation().get_axis_angle()
        assert axis == Vector3(0, 0, 1)
        assert radians == 0.0

    def test_identity_matrix(self):
        m = Rotation().get_matrix()
        assert isinstance(m, Transform)
        assert m.is_identity()

    def test_components_are_normalized(self):
        r = Rotation(1, 2, 3, 4)
        assert np.linalg.norm(r.get_value()) == pytest.approx(1.0, abs=1e-6)
        np.testing.assert_allclose(r.get_value(), np.array([1, 2, 3, 4]) / math.sqrt(30), atol=1e-6)
        assert Rotation([1, 2, 3, 4]) == r

    def test_axis_angle(self):
        r = Rotation([0, 0, 2], math.pi / 2)
        np.testing.assert_allclose(r.get_value(), [0, 0, math.sin(math.pi / 4), math.cos(math.pi / 4)], atol=1e-6)

        axis, radians = Rotation(Vector3(1, 2, 3), 0.7).get_axis_angle()
        np.testing.assert_allclose(np.asarray(axis), np.array([1, 2, 3]) / math.sqrt(14), atol=1e-5)
        assert radians == pytest.approx(0.7, abs=1e-5)

    def test_axis_angle_near_identity(self):
        """A vector part shorter than 1e-5 reports the Z axis and a zero angle."""
        axis, radians = Rotation([1, 0, 0], 1e-6).get_axis_angle()
        assert axis == Vector3(0, 0, 1)
        assert radians == 0.0

    def test_from_transform(self, random_rotations):
        for r in random_rotations:
            assert_same_rotation(Rotation(r.get_matrix()), r)

    def test_from_zero_transform_is_identity(self):
        assert Rotation(Transform()) == Rotation.identity()

    @pytest.mark.parametrize("axis", [(1, 0, 0), (0, 1, 0), (0, 0, 1), (1, 1, 0)])
    def test_from_half_turn_matrix(self, axis):
        """Half turns exercise the dominant-diagonal branches of the matrix conversion."""
        r = Rotation(axis, math.pi)
        assert_same_rotation(Rotation(r.get_matrix()), r)

    @pytest.mark.parametrize("shape", [(4, 3), (4, 4), (3, 3)])
    def test_from_matrix_array(self, shape):
        r = Rotation([0, 1, 0], 0.7)
        m = np.zeros(shape, dtype=np.float32)
        m[:3, :3] = np.asarray(r.get_matrix())[:3, :3]
        assert_same_rotation(Rotation(m), r)

    def test_copies_are_independent(self):
        r = Rotation([0, 1, 0], 0.3)
        for other in (r.copy(), copy.copy(r), copy.deepcopy(r)):
            other.invert()
            assert r == Rotation([0, 1, 0], 0.3)

    def test_invalid_arguments(self):
        with pytest.raises(TypeError):
            Rotation(1, 2, 3)
        with pytest.raises(ValueError, match="shape"):
            Rotation([1, 2])
        with pytest.raises(ValueError, match="axis"):
            Rotation([1, 2], 0.5)

    def test_repr(self):
        assert repr(Rotation()) == "Rotation(0, 0, 0, 1)"

    def test_return_annotations(self):
        assert Rotation.get_matrix.__annotations__["return"] == "Transform"
        assert Rotation.__iter__.__annotations__["return"] == "Iterator[float]"
        assert list(Rotation()) == [0.0, 0.0, 0.0, 1.0]


class TestFromVectors:
    """Test the rotate-one-direction-onto-another constructor."""

    def test_quarter_turn(self):
        r = Rotation.from_vectors(Vector3(1, 0, 0), Vector3(0, 1, 0))
        np.testing.assert_allclose(np.asarray(r.mult_vec(Vector3(1, 0, 0))), [0, 1, 0], atol=1e-6)

    def test_maps_direction(self):
        rng = np.random.default_rng(42)
        for a, b in rng.standard_normal((20, 2, 3)):
            r = Rotation(Vector3(a), Vector3(b))
            rotated = np.asarray(r.mult_vec(Vector3(a)))
            expected = b / np.linalg.norm(b) * np.linalg.norm(a)
            np.testing.assert_allclose(rotated, expected, atol=1e-4)

    def test_parallel_is_identity(self):
        assert Rotation.from_vectors([1, 0, 0], [2, 0, 0]) == Rotation.identity()
        assert Rotation.from_vectors([1, 1, 1], [1, 1, 1.000001]) == Rotation.identity()

    def test_opposite_uses_x_cross(self):
        r = Rotation.from_vectors([0, 1, 0], [0, -1, 0])
        np.testing.assert_allclose(r.get_value(), [0, 0, -1, 0], atol=1e-7)

    def test_opposite_falls_back_to_y_cross(self):
        """The cross product with +X vanishes, so the axis comes from +Y."""
        r = Rotation.from_vectors([1, 0, 0], [-1, 0, 0])
        np.testing.assert_allclose(r.get_value(), [0, 0, 1, 0], atol=1e-7)
        np.testing.assert_allclose(np.asarray(r.mult_vec([1, 0, 0])), [-1, 0, 0], atol=1e-6)


class TestComposition:
    """Test mul, inversion and angle scaling."""

    def test_multiplication(self):
        r = Rotation(0, 0, 0, 1)
        r *= Rotation(0, 1, 0, 0.035)
        np.testing.assert_allclose(r.get_value(), [0.0, 0.9993880987, 0.0, 0.0349785835], atol=1e-6)

    def test_mul_in_place(self):
        r = Rotation([0, 0, 1], 0.25)
        result = r.mul(Rotation([0, 0, 1], 0.5))
        assert result is r
        axis, radians = r.get_axis_angle()
        assert radians == pytest.approx(0.75, abs=1e-5)

    def test_binary_matches_matrix_product(self, random_rotations):
        """r1 * r2 applies r1 first, like the row-vector matrix product."""
        for r1, r2 in zip(random_rotations[::2], random_rotations[1::2]):
            product = r1 * r2
            expected = r1.get_matrix() * r2.get_matrix()
            assert product.get_matrix().equals(expected, 1e-5)

            v = Vector3(1, 2, 3)
            np.testing.assert_allclose(
                np.asarray(product.mult_vec(v)), np.asarray(r2.mult_vec(r1.mult_vec(v))), atol=1e-4
            )

    def test_binary_is_pure(self):
        r1 = Rotation([1, 0, 0], 0.5)
        r2 = Rotation([0, 1, 0], 0.5)
        r1 * r2
        assert r1 == Rotation([1, 0, 0], 0.5)

    def test_product_stays_normalized(self, random_rotations):
        r = Rotation()
        for other in random_rotations:
            r.mul(other)
            assert np.linalg.norm(r.get_value()) == pytest.approx(1.0, abs=1e-6)

    def test_mul_requires_rotation(self):
        with pytest.raises(TypeError, match="Rotation"):
            Rotation().mul([0, 0, 0, 1])
        with pytest.raises(TypeError):
            Rotation() * 2

    def test_inverse(self, random_rotations):
        for r in random_rotations:
            assert_same_rotation(r * r.inverse(), Rotation.identity())
            q = r.get_value()
            np.testing.assert_allclose(r.inverse().get_value(), [-q[0], -q[1], -q[2], q[3]], atol=1e-6)

    def test_zero_quaternion_inverse_is_zero(self):
        """A zero quaternion survives inversion unchanged, as it does normalization."""
        r = Rotation(0, 0, 0, 0)
        np.testing.assert_array_equal(r.inverse().get_value(), [0, 0, 0, 0])
        r.invert()
        np.testing.assert_array_equal(r.get_value(), [0, 0, 0, 0])

    def test_invert_in_place(self):
        r = Rotation([0, 0, 1], 0.4)
        r.invert()
        axis, radians = r.get_axis_angle()
        np.testing.assert_allclose(np.asarray(axis), [0, 0, -1], atol=1e-6)
        assert radians == pytest.approx(0.4, abs=1e-5)

    def test_scale_angle(self):
        r = Rotation([0, 1, 0], 1.0)
        r.scale_angle(0.5)
        axis, radians = r.get_axis_angle()
        np.testing.assert_allclose(np.asarray(axis), [0, 1, 0], atol=1e-6)
        assert radians == pytest.approx(0.5, abs=1e-5)

    def test_mult_vec(self):
        r = Rotation([0, 0, 1], math.pi / 2)
        np.testing.assert_allclose(np.asarray(r.mult_vec(Vector3(1, 0, 0))), [0, 1, 0], atol=1e-6)


class TestSlerp:
    """Test spherical linear interpolation."""

    def test_endpoints(self, random_rotations):
        r0, r1 = random_rotations[0], random_rotations[1]
        assert_same_rotation(Rotation.slerp(r0, r1, 0.0), r0)
        assert_same_rotation(Rotation.slerp(r0, r1, 1.0), r1)

    def test_midpoint(self):
        r = Rotation.slerp(Rotation(), Rotation([0, 0, 1], math.pi / 2), 0.5)
        assert_same_rotation(r, Rotation([0, 0, 1], math.pi / 4))

    def test_takes_shorter_arc(self):
        """A negated end quaternion gives the same path."""
        end = Rotation([0, 0, 1], math.pi / 2)
        flipped = Rotation(-end.get_value())
        np.testing.assert_allclose(
            Rotation.slerp(Rotation(), flipped, 0.3).get_value(),
            Rotation.slerp(Rotation(), end, 0.3).get_value(),
            atol=1e-6,
        )

    def test_near_parallel_blends_linearly(self):
        r = Rotation([1, 0, 0], 0.5)
        np.testing.assert_allclose(Rotation.slerp(r, r, 0.3).get_value(), r.get_value(), atol=1e-6)


class TestEquality:
    """Test exact and tolerance equality."""

    def test_exact(self):
        assert Rotation([0, 1, 0], 0.5) == Rotation([0, 1, 0], 0.5)
        assert Rotation([0, 1, 0], 0.5) != Rotation([0, 1, 0], 0.6)

    def test_tolerance_is_squared_distance(self):
        a = Rotation()
        b = Rotation([0, 0, 1], 0.2)
        distance_sq = float(np.sum((a.get_value() - b.get_value()) ** 2))
        assert a.equals(b, distance_sq * 1.01)
        assert not a.equals(b, distance_sq * 0.99)

    def test_negative_tolerance(self):
        with pytest.raises(ValueError, match="non-negative"):
            Rotation().equals(Rotation(), -0.1)

    def test_indexing(self):
        r = Rotation(0, 0, 1, 0)
        assert r[2] == 1.0
        assert list(r) == [0.0, 0.0, 1.0, 0.0]
        np.testing.assert_array_equal(np.asarray(r), [0, 0, 1, 0])
