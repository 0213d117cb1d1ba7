"""
Rotation: a unit quaternion stored as (x, y, z, w).

The quaternion is renormalized whenever it is set from components or
composed with another rotation, so it stays a unit quaternion. The only
exception is ``Rotation.slerp``, whose weighted sum is returned as computed.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any, Self

import numpy as np

from mlmath.constants import DTYPE, IDENTITY_QUATERNION
from mlmath.transform.api import (
    _axis_angle_to_quaternion_numpy,
    _matrix_to_quaternion_numpy,
    _quaternion_from_vectors_numpy,
    _quaternion_invert_numpy,
    _quaternion_multiply_numpy,
    _quaternion_normalize_numpy,
    _quaternion_slerp_numpy,
    _quaternion_to_axis_angle_numpy,
    _quaternion_to_matrix_numpy,
    transform_points,
)
from mlmath.validators import check_shape, validate_components, validate_non_negative
from mlmath.vector import Vector3, Vector4, _is_number

if TYPE_CHECKING:
    from mlmath.transform.affine import Transform


class Rotation:
    """
    Rotation in 3D space, stored as a unit quaternion (x, y, z, w).

    Constructors:
    - ``Rotation()``: identity
    - ``Rotation(x, y, z, w)`` or ``Rotation([x, y, z, w])``: normalized components
    - ``Rotation(axis, radians)``: rotation about an axis
    - ``Rotation(rotate_from, rotate_to)``: rotation taking one direction onto another
    - ``Rotation(transform)``: rotation part of a Transform or a 4x3/4x4/3x3 array

    Composition follows the row-vector convention of Transform: ``r1 * r2``
    applies r1 first, then r2, and matches ``r1.get_matrix() * r2.get_matrix()``.

    Example:
        >>> quarter = Rotation([0, 0, 1], np.pi / 2)
        >>> half = quarter * quarter
        >>> axis, radians = half.get_axis_angle()
    """

    __slots__ = ("_q",)

    def __init__(self, *args: Any):
        """
        Initialize the rotation.

        Raises:
            TypeError: If the arguments match none of the constructor forms
            ValueError: If a sequence has the wrong number of components
        """
        self._q = np.array(IDENTITY_QUATERNION, dtype=DTYPE)
        if not args:
            return

        if len(args) == 4:
            self.set_value(*args)
        elif len(args) == 2:
            first, second = args
            if _is_number(second):
                self.set_axis_angle(first, second)
            else:
                self.set_vectors(first, second)
        elif len(args) == 1:
            source = args[0]
            if isinstance(source, Rotation):
                self._q[:] = source._q
            elif _is_transform(source) or np.ndim(source) == 2:
                self.set_matrix(source)
            else:
                self.set_value(source)
        else:
            raise TypeError(
                f"Rotation() takes 0, 1, 2 or 4 arguments, got {len(args)}. "
                "Use components, (axis, radians), (rotate_from, rotate_to) or a Transform."
            )

    @classmethod
    def identity(cls) -> Self:
        """Return the identity rotation (0, 0, 0, 1)."""
        return cls()

    @classmethod
    def from_vectors(cls, rotate_from: Any, rotate_to: Any) -> Self:
        """Return the rotation taking direction ``rotate_from`` onto ``rotate_to``."""
        rotation = cls()
        rotation.set_vectors(rotate_from, rotate_to)
        return rotation

    # -------------------------------------------------------------------------
    # Getters
    # -------------------------------------------------------------------------

    def get_value(self) -> np.ndarray:
        """Return a float32 copy of the quaternion [x, y, z, w]."""
        return self._q.copy()

    def get_axis_angle(self) -> tuple[Vector3, float]:
        """
        Return the rotation as (unit axis, angle in radians).

        A rotation too close to the identity to have a usable axis returns
        the Z axis and a zero angle.
        """
        axis, radians = _quaternion_to_axis_angle_numpy(self._q)
        return Vector3(axis), radians

    def get_matrix(self) -> Transform:
        """Return the rotation as a Transform (zero translation)."""
        from mlmath.transform.affine import Transform

        return Transform(_quaternion_to_matrix_numpy(self._q))

    # -------------------------------------------------------------------------
    # Setters
    # -------------------------------------------------------------------------

    def set_value(self, *values: Any) -> None:
        """
        Set the quaternion from four components or a 4-sequence, then normalize.

        Raises:
            TypeError: If a single non-sequence argument is given
            ValueError: If the component count is not 4
        """
        if len(values) == 1:
            source = values[0]
            if isinstance(source, Rotation):
                source = source._q
        else:
            source = values
        check_shape(source, (4,), "values")
        self._q[:] = _quaternion_normalize_numpy(np.asarray(source, dtype=np.float64))

    @validate_components(3, "axis")
    def set_axis_angle(self, axis: Any, radians: float) -> None:
        """Set from an axis (normalized internally) and an angle in radians."""
        self._q[:] = _axis_angle_to_quaternion_numpy(np.asarray(axis, dtype=np.float64), float(radians))

    def set_matrix(self, transform: Any) -> None:
        """Set from the rotation part of a Transform or a 4x3/4x4/3x3 array."""
        m = np.asarray(transform, dtype=np.float64)
        check_shape(m, [(4, 3), (4, 4), (3, 3)], "transform")
        self._q[:] = _matrix_to_quaternion_numpy(m[:3, :3])

    @validate_components(3, "rotate_from")
    @validate_components(3, "rotate_to", 2)
    def set_vectors(self, rotate_from: Any, rotate_to: Any) -> None:
        """Set to the rotation taking direction ``rotate_from`` onto ``rotate_to``."""
        self._q[:] = _quaternion_from_vectors_numpy(
            np.asarray(rotate_from, dtype=np.float64), np.asarray(rotate_to, dtype=np.float64)
        )

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def mul(self, q: Rotation) -> Self:
        """
        Compose in place: this rotation first, then ``q``.

        Computes the Hamilton product q (x) self and renormalizes.

        Raises:
            TypeError: If q is not a Rotation
        """
        if not isinstance(q, Rotation):
            raise TypeError(f"q must be Rotation, got {type(q).__name__}")
        self._q[:] = _quaternion_multiply_numpy(self._q, q._q)
        return self

    def __imul__(self, q: Rotation) -> Self:
        if not isinstance(q, Rotation):
            return NotImplemented
        return self.mul(q)

    def __mul__(self, q: Rotation) -> Rotation:
        if not isinstance(q, Rotation):
            return NotImplemented
        return self.copy().mul(q)

    def invert(self) -> Self:
        """Invert in place (conjugate divided by the squared norm)."""
        self._q[:] = _quaternion_invert_numpy(self._q)
        return self

    def inverse(self) -> Rotation:
        """Return the inverse rotation."""
        return self.copy().invert()

    def mult_vec(self, v: Any) -> Vector3:
        """Rotate a vector, treated as a row vector times the rotation matrix."""
        check_shape(v, (3,), "v")
        return Vector3(transform_points(np.asarray(v, dtype=DTYPE), _quaternion_to_matrix_numpy(self._q)))

    def scale_angle(self, factor: float) -> None:
        """Keep the axis, multiply the angle by ``factor``."""
        axis, radians = _quaternion_to_axis_angle_numpy(self._q)
        self._q[:] = _axis_angle_to_quaternion_numpy(axis, radians * factor)

    @classmethod
    def slerp(cls, rot0: Rotation, rot1: Rotation, t: float) -> Rotation:
        """
        Spherical linear interpolation along the shorter arc.

        Args:
            rot0: Rotation at t=0
            rot1: Rotation at t=1
            t: Interpolation parameter

        Returns:
            New rotation; the quaternion is not renormalized
        """
        return cls._new(_quaternion_slerp_numpy(rot0._q, rot1._q, t))

    @validate_non_negative("tolerance", 2)
    def equals(self, r: Rotation, tolerance: float) -> bool:
        """True if the squared distance between the quaternions is within ``tolerance``."""
        return Vector4(self._q).equals(Vector4(r._q), tolerance)

    def __eq__(self, other: object) -> bool:
        """Exact component-wise equality."""
        if not isinstance(other, Rotation):
            return NotImplemented
        return bool(np.array_equal(self._q, other._q))

    __hash__ = None  # mutable

    def __getitem__(self, index: int) -> float:
        return float(self._q[index])

    def __len__(self) -> int:
        return 4

    def __iter__(self) -> Iterator[float]:
        return (float(c) for c in self._q)

    def __array__(self, dtype: Any = None, copy: bool | None = None) -> np.ndarray:
        if dtype is None:
            return self._q.copy()
        return self._q.astype(dtype)

    # -------------------------------------------------------------------------
    # Copy / repr
    # -------------------------------------------------------------------------

    def copy(self) -> Rotation:
        """Return an independent copy."""
        return Rotation._new(self._q)

    def __copy__(self) -> Rotation:
        return self.copy()

    def __deepcopy__(self, memo: dict[int, Any]) -> Rotation:
        return self.copy()

    def __repr__(self) -> str:
        fields = ", ".join(f"{float(c):.6g}" for c in self._q)
        return f"Rotation({fields})"

    @classmethod
    def _new(cls, q: np.ndarray) -> Self:
        obj = cls.__new__(cls)
        obj._q = np.array(q, dtype=DTYPE)
        return obj


def _is_transform(value: Any) -> bool:
    from mlmath.transform.affine import Transform

    return isinstance(value, Transform)
