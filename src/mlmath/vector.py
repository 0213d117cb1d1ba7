"""
Fixed-size float vectors: Vector2, Vector3 and Vector4.

Vectors are mutable value types backed by a float32 NumPy array. Every
arithmetic operation comes in two kinds:

- in-place mutators (``+=``, ``-=``, ``*=``, ``/=``, ``negate``, ``normalize``)
  that change the receiver
- pure operators (``+``, ``-``, ``*``, ``/``, unary ``-``, ``cross``) that
  return a new vector and leave their operands untouched

Example:
    >>> v = Vector3(1, 0, 0).cross(Vector3(0, 1, 0))
    >>> v == Vector3(0, 0, 1)
    True
    >>> v *= 2.0
    >>> v.normalize()
    2.0
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from typing import Any, Self

import numpy as np

from mlmath.constants import (
    APPROX_LENGTH_MAJOR_WEIGHT,
    APPROX_LENGTH_MINOR_WEIGHT,
    CLOSEST_AXIS_FLOOR,
    DTYPE,
)
from mlmath.validators import check_shape, validate_non_negative


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, np.floating, np.integer)) and not isinstance(value, bool)


class _Vector:
    """Shared storage and arithmetic for the fixed-size vector types."""

    __slots__ = ("_v",)

    _SIZE = 0

    def __init__(self, *values: Any):
        """
        Initialize the vector.

        Args:
            *values: Nothing (zero vector), one component per axis, or a
                single sequence/vector holding all components
        """
        self._v = np.zeros(self._SIZE, dtype=DTYPE)
        if values:
            self.set_value(*values)

    @classmethod
    def zero(cls) -> Self:
        """Return a new all-zero vector."""
        return cls()

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    def get_value(self) -> np.ndarray:
        """Return a float32 copy of the components."""
        return self._v.copy()

    def set_value(self, *values: Any) -> None:
        """
        Set all components.

        Args:
            *values: One number per component, or a single sequence/vector

        Raises:
            TypeError: If a single non-sequence argument is given
            ValueError: If the component count does not match the vector size
        """
        if len(values) == 1:
            source = values[0]
            if isinstance(source, _Vector):
                source = source._v
        else:
            source = values
        check_shape(source, (self._SIZE,), "values")
        self._v[:] = np.asarray(source, dtype=DTYPE)

    def __getitem__(self, index: int) -> float:
        return float(self._v[index])

    def __setitem__(self, index: int, value: float) -> None:
        self._v[index] = value

    def __iter__(self) -> Iterator[float]:
        return (float(c) for c in self._v)

    def __len__(self) -> int:
        return self._SIZE

    def __array__(self, dtype: Any = None, copy: bool | None = None) -> np.ndarray:
        if dtype is None:
            return self._v.copy()
        return self._v.astype(dtype)

    @property
    def x(self) -> float:
        return float(self._v[0])

    @x.setter
    def x(self, value: float) -> None:
        self._v[0] = value

    @property
    def y(self) -> float:
        return float(self._v[1])

    @y.setter
    def y(self, value: float) -> None:
        self._v[1] = value

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def is_zero(self) -> bool:
        """True if every component is exactly zero."""
        return not self._v.any()

    def dot(self, v: Self) -> float:
        """Dot product with another vector of the same size."""
        return float(np.dot(self._v, self._other(v)._v))

    def length(self) -> float:
        """Euclidean length."""
        return math.sqrt(float(np.dot(self._v, self._v)))

    def get_scale(self) -> tuple[float, float]:
        """
        Return ``(scale, recip_scale)`` that brings the largest component into range.

        Floating-point storage never needs range scaling, so this is always ``(1.0, 1.0)``.
        """
        return 1.0, 1.0

    @validate_non_negative("tolerance", 2)
    def equals(self, v: Self, tolerance: float) -> bool:
        """
        Compare with a tolerance on the squared distance.

        Args:
            v: Vector to compare against
            tolerance: Bound on the SQUARED Euclidean distance (square a linear tolerance first)

        Returns:
            True if (self - v) . (self - v) <= tolerance
        """
        diff = self._v - self._other(v)._v
        return float(np.dot(diff, diff)) <= tolerance

    # -------------------------------------------------------------------------
    # In-place Mutators
    # -------------------------------------------------------------------------

    def normalize(self) -> float:
        """
        Scale the vector to unit length.

        Returns:
            The length before normalization; 0.0 for an exactly-zero vector,
            which is left unchanged
        """
        if self.is_zero():
            return 0.0

        length = self.length()
        if length != 0.0:
            self._v *= DTYPE(1.0 / length)
        else:
            self._v[:] = 0.0
        return length

    def negate(self) -> None:
        """Negate every component in place."""
        np.negative(self._v, out=self._v)

    def scale_to(self, new_scale: float) -> None:
        """Rescale to the given length (no-op for a zero-length vector)."""
        old_scale = self.length()
        if old_scale != 0.0:
            self._v *= DTYPE(new_scale / old_scale)

    def __iadd__(self, v: Self) -> Self:
        self._v += self._other(v)._v
        return self

    def __isub__(self, v: Self) -> Self:
        self._v -= self._other(v)._v
        return self

    def __imul__(self, d: float) -> Self:
        if not _is_number(d):
            return NotImplemented
        self._v *= DTYPE(d)
        return self

    def __itruediv__(self, d: float) -> Self:
        if not _is_number(d):
            return NotImplemented
        self._v /= DTYPE(d)
        return self

    # -------------------------------------------------------------------------
    # Pure Operators
    # -------------------------------------------------------------------------

    def __neg__(self) -> Self:
        return self._new(-self._v)

    def __add__(self, v: Self) -> Self:
        if not isinstance(v, type(self)):
            return NotImplemented
        return self._new(self._v + v._v)

    def __sub__(self, v: Self) -> Self:
        if not isinstance(v, type(self)):
            return NotImplemented
        return self._new(self._v - v._v)

    def __mul__(self, d: float) -> Self:
        if not _is_number(d):
            return NotImplemented
        return self._new(self._v * DTYPE(d))

    __rmul__ = __mul__

    def __truediv__(self, d: float) -> Self:
        if not _is_number(d):
            return NotImplemented
        return self._new(self._v / DTYPE(d))

    def __eq__(self, other: object) -> bool:
        """Exact component-wise equality."""
        if not isinstance(other, type(self)):
            return NotImplemented
        return bool(np.array_equal(self._v, other._v))

    __hash__ = None  # mutable

    @classmethod
    def interpolate(cls, weight: float, v0: Self, v1: Self) -> Self:
        """
        Linear interpolation from ``v0`` (weight 0) to ``v1`` (weight 1).

        Returns:
            New vector ``v0 * (1 - weight) + v1 * weight``
        """
        return (cls._coerce(v0) * (1.0 - weight)) + (cls._coerce(v1) * weight)

    # -------------------------------------------------------------------------
    # Copy / repr
    # -------------------------------------------------------------------------

    def copy(self) -> Self:
        """Return an independent copy."""
        return self._new(self._v)

    def __copy__(self) -> Self:
        return self.copy()

    def __deepcopy__(self, memo: dict[int, Any]) -> Self:
        return self.copy()

    def __repr__(self) -> str:
        fields = ", ".join(f"{float(c):.6g}" for c in self._v)
        return f"{type(self).__name__}({fields})"

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    @classmethod
    def _new(cls, array: np.ndarray) -> Self:
        obj = cls.__new__(cls)
        obj._v = np.array(array, dtype=DTYPE)
        return obj

    @classmethod
    def _coerce(cls, v: Any) -> Self:
        if isinstance(v, cls):
            return v
        return cls(v)

    def _other(self, v: Any) -> Self:
        if isinstance(v, type(self)):
            return v
        if isinstance(v, _Vector):
            raise TypeError(f"v must be {type(self).__name__}, got {type(v).__name__}")
        return type(self)(v)


class Vector2(_Vector):
    """
    Two-component float vector.

    Example:
        >>> Vector2(3, 4).length()
        5.0
    """

    __slots__ = ()
    _SIZE = 2


class Vector3(_Vector):
    """
    Three-component float vector.

    Adds the right-handed cross product, a fast approximate length, the
    barycentric setter and the closest-principal-axis query.

    Example:
        >>> Vector3(0.2, -0.9, 0.1).get_closest_axis()
        Vector3(0, -1, 0)
    """

    __slots__ = ()
    _SIZE = 3

    @property
    def z(self) -> float:
        return float(self._v[2])

    @z.setter
    def z(self, value: float) -> None:
        self._v[2] = value

    def cross(self, v: Vector3) -> Vector3:
        """Right-handed cross product, returned as a new vector."""
        v = self._other(v)
        x1, y1, z1 = self._v
        x2, y2, z2 = v._v
        return Vector3(
            y1 * z2 - z1 * y2,
            z1 * x2 - x1 * z2,
            x1 * y2 - y1 * x2,
        )

    def approximate_length(self) -> float:
        """
        Fast approximation of the Euclidean length (max error about 7.7%).

        Uses ``0.9375 * a + 0.375 * (b + c)`` where ``a`` is the largest of the
        absolute components and ``b``, ``c`` are the other two.
        """
        a, b, c = (abs(float(s)) for s in self._v)
        if a < b:
            a, b = b, a
        if a < c:
            a, c = c, a
        return a * APPROX_LENGTH_MAJOR_WEIGHT + (b + c) * APPROX_LENGTH_MINOR_WEIGHT

    def approximate_normalize(self) -> float:
        """Divide by the approximate length; returns that length."""
        length = self.approximate_length()
        if length != 0.0:
            self._v /= DTYPE(length)
        return length

    def set_barycentric(self, barycentric: Vector3, v0: Vector3, v1: Vector3, v2: Vector3) -> None:
        """Set to ``v0 * b[0] + v1 * b[1] + v2 * b[2]``."""
        b = self._other(barycentric)
        result = self._other(v0) * b[0] + self._other(v1) * b[1] + self._other(v2) * b[2]
        self._v[:] = result._v

    def get_closest_axis(self) -> Vector3:
        """
        Return the signed principal axis with the largest dot product.

        Axes are scanned in the order +X, -X, +Y, -Y, +Z, -Z and only a
        strictly larger dot product replaces the current best, so ties go to
        the earlier axis.
        """
        best_axis = Vector3()
        best = CLOSEST_AXIS_FLOOR
        for index in range(3):
            for direction in (1.0, -1.0):
                d = direction * float(self._v[index])
                if d > best:
                    best = d
                    best_axis = Vector3()
                    best_axis[index] = direction
        return best_axis


class Vector4(_Vector):
    """
    Four-component float vector, typically a homogeneous point.

    Example:
        >>> Vector4(2, 4, 6, 2).get_real()
        Vector3(1, 2, 3)
    """

    __slots__ = ()
    _SIZE = 4

    @property
    def z(self) -> float:
        return float(self._v[2])

    @z.setter
    def z(self, value: float) -> None:
        self._v[2] = value

    @property
    def w(self) -> float:
        return float(self._v[3])

    @w.setter
    def w(self, value: float) -> None:
        self._v[3] = value

    def get_real(self) -> Vector3:
        """Return the real 3D point ``(x/w, y/w, z/w)``."""
        return Vector3(self._v[:3] / self._v[3])
