"""Tests for the argument-validation decorators."""

import numpy as np
import pytest

from mlmath import Vector3
from mlmath.validators import (
    check_shape,
    validate_components,
    validate_non_negative,
    validate_shape,
    validate_type,
)


class Target:
    """Small class exercising each decorator."""

    @validate_components(3, "translation")
    def translate(self, translation):
        return translation

    @validate_shape([(4, 3), (4, 4)], "matrix")
    def load(self, matrix=None):
        return matrix

    @validate_non_negative("tolerance", 2)
    def compare(self, other, tolerance):
        return tolerance

    @validate_type(Vector3, "v")
    def accept(self, v):
        return v


@pytest.fixture
def target():
    return Target()


class TestCheckShape:
    """Test the shape check used by every array-like argument."""

    def test_accepts_sequences_arrays_and_vectors(self):
        check_shape([1, 2, 3], (3,))
        check_shape(np.zeros(3), (3,))
        check_shape(Vector3(), (3,))
        check_shape(np.zeros((4, 4)), [(4, 3), (4, 4)])

    def test_rejects_wrong_shape(self):
        with pytest.raises(ValueError, match=r"points has shape \(2,\), expected \(3,\)"):
            check_shape([1, 2], (3,), "points")

    @pytest.mark.parametrize("value", [1.0, 3, "abc", None])
    def test_rejects_scalars(self, value):
        with pytest.raises(TypeError, match="array-like"):
            check_shape(value, (3,))


class TestDecorators:
    """Test positional and keyword lookup in each decorator."""

    def test_validate_components(self, target):
        assert target.translate([1, 2, 3]) == [1, 2, 3]
        assert target.translate(translation=(1, 2, 3)) == (1, 2, 3)
        with pytest.raises(ValueError, match="translation"):
            target.translate([1, 2])
        with pytest.raises(ValueError, match="translation"):
            target.translate(translation=[1, 2, 3, 4])

    def test_validate_shape_skips_missing_and_none(self, target):
        assert target.load() is None
        assert target.load(None) is None
        with pytest.raises(ValueError, match="matrix"):
            target.load(np.eye(3))

    def test_validate_non_negative(self, target):
        assert target.compare(None, 0.0) == 0.0
        assert target.compare(None, tolerance=np.float32(0.5)) == np.float32(0.5)
        with pytest.raises(ValueError, match="Use 0.0 for exact comparison"):
            target.compare(None, -1e-9)
        with pytest.raises(TypeError, match="must be a number"):
            target.compare(None, "0.1")
        with pytest.raises(TypeError, match="must be a number"):
            target.compare(None, True)

    def test_validate_type(self, target):
        v = Vector3()
        assert target.accept(v) is v
        with pytest.raises(TypeError, match="v must be Vector3, got list"):
            target.accept([0, 0, 0])

    def test_validate_type_tuple(self):
        @validate_type((int, float), "value", 0)
        def identity(value):
            return value

        assert identity(3) == 3
        with pytest.raises(TypeError, match=r"one of \(int, float\)"):
            identity("3")

    def test_preserves_metadata(self):
        assert Target.translate.__name__ == "translate"
