"""
Transform: a 4x3 affine matrix in the row-vector convention.

Rows 0-2 hold the linear (rotation, scale and shear) block and row 3 holds
the translation; the fourth column is implicitly [0, 0, 0, 1]. A point p
maps to ``p * M[:3] + M[3]`` and ``a * b`` applies a first, then b.

Key Features:
- Composition with identity fast paths (mult_right, mult_left, ``*``)
- Affine inverse with a singular-matrix fallback to the original matrix
- Polar factorization through Jacobi eigen-decomposition (factor)
- Conversion to and from translation/rotation/scale/scale-orientation (+ center)
- Fixed-axis Euler rotation (Z, then Y, then X) helpers
"""

from __future__ import annotations

import logging
import math
from typing import Any, TypeAlias, Self

import numpy as np

from mlmath.constants import DTYPE, FACTOR_SINGULAR_EPSILON, TRANSFORM_SHAPE
from mlmath.transform.api import (
    _apply_euler_numpy,
    _identity_matrix_numpy,
    _matrix_to_euler_numpy,
    _quaternion_to_matrix_numpy,
    transform_directions,
    transform_points,
)
from mlmath.transform.kernels import (
    affine_inverse_numba,
    affine_multiply_numba,
    det3_numba,
    jacobi3_numba,
)
from mlmath.transform.rotation import Rotation
from mlmath.validators import (
    check_shape,
    validate_components,
    validate_non_negative,
    validate_type,
)
from mlmath.vector import Vector3, _is_number

logger = logging.getLogger(__name__)

# Type aliases for better readability
ArrayLike: TypeAlias = np.ndarray | tuple | list

_ACCEPTED_SHAPES = [TRANSFORM_SHAPE, (4, 4)]


class Transform:
    """
    4x3 affine transformation matrix.

    ``Transform()`` is the all-zero matrix, which several algorithms treat as
    a distinguished "unset" value. Use ``Transform.identity()`` for the
    identity.

    Example:
        >>> m = Transform.identity()
        >>> m.set_euler_transform([1, 2, 3], [0, 90, 0], [2, 2, 2])
        >>> m.mult_vec_matrix([1, 0, 0])
        Vector3(1, 2, 1)
    """

    __slots__ = ("_m",)

    def __init__(self, *values: Any):
        """
        Initialize the matrix.

        Args:
            *values: Nothing (zero matrix), 12 scalars in row order, a 4x3 or
                4x4 array-like (the fourth column is dropped), or a Transform
        """
        self._m = np.zeros(TRANSFORM_SHAPE, dtype=DTYPE)
        if values:
            self.set_value(*values)

    @classmethod
    def identity(cls) -> Self:
        """Return a new identity matrix."""
        return cls._new(_identity_matrix_numpy())

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    def get_value(self) -> np.ndarray:
        """Return a float32 copy of the 4x3 matrix."""
        return self._m.copy()

    def set_value(self, *values: Any) -> None:
        """
        Set every entry.

        Raises:
            TypeError: If a single non-array argument is given
            ValueError: If the shape is not 4x3 or 4x4 (or not 12 scalars)
        """
        if len(values) == 1:
            source = values[0]
            if isinstance(source, Transform):
                source = source._m
            check_shape(source, _ACCEPTED_SHAPES, "matrix")
            self._m[:] = np.asarray(source, dtype=DTYPE)[:, :3]
            return

        if len(values) != 12:
            raise ValueError(f"Transform takes 12 scalars or one 4x3/4x4 array, got {len(values)} arguments.")
        self._m[:] = np.asarray(values, dtype=DTYPE).reshape(TRANSFORM_SHAPE)

    def make_identity(self) -> None:
        """Overwrite with the identity matrix."""
        self._m[:] = _identity_matrix_numpy()

    def set_zero(self) -> None:
        """Overwrite with the all-zero matrix."""
        self._m[:] = 0.0

    def is_identity(self) -> bool:
        """True if the matrix is exactly the identity."""
        return bool(np.array_equal(self._m, _identity_matrix_numpy()))

    def is_zero(self) -> bool:
        """True if every entry is exactly zero."""
        return not self._m.any()

    def __getitem__(self, index: Any) -> Any:
        value = self._m[index]
        if np.ndim(value) == 0:
            return float(value)
        return value

    def __setitem__(self, index: Any, value: Any) -> None:
        self._m[index] = value

    def __array__(self, dtype: Any = None, copy: bool | None = None) -> np.ndarray:
        if dtype is None:
            return self._m.copy()
        return self._m.astype(dtype)

    # -------------------------------------------------------------------------
    # Comparison
    # -------------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        """Exact entry-wise equality."""
        if not isinstance(other, Transform):
            return NotImplemented
        return bool(np.array_equal(self._m, other._m))

    __hash__ = None  # mutable

    @validate_non_negative("tolerance", 2)
    def equals(self, m: Transform, tolerance: float) -> bool:
        """True if no entry differs from ``m`` by more than ``tolerance``."""
        diff = np.abs(self._m.astype(np.float64) - np.asarray(m, dtype=np.float64))
        return bool(np.all(diff <= tolerance))

    # -------------------------------------------------------------------------
    # Determinant / decomposition
    # -------------------------------------------------------------------------

    def det3(self, r1: int = 0, r2: int = 1, r3: int = 2) -> float:
        """
        Determinant of the 3x3 matrix built from three rows.

        Raises:
            ValueError: If a row index is outside 0..3
        """
        for row in (r1, r2, r3):
            if row not in range(4):
                raise ValueError(f"row index {row} is out of range. Use 0-2 (linear block) or 3 (translation).")
        return float(det3_numba(self._m, r1, r2, r3))

    def det(self) -> float:
        """Determinant of the linear block."""
        return self.det3(0, 1, 2)

    def jacobi3(self) -> tuple[np.ndarray, np.ndarray, int]:
        """
        Diagonalize the (assumed symmetric) linear block.

        Returns:
            Tuple of (evalues [3], evectors [3, 3] with column k pairing with
            evalues[k], number of (p, q) rotation pairs visited)
        """
        evalues = np.empty(3, dtype=DTYPE)
        evectors = np.empty((3, 3), dtype=DTYPE)
        rots = jacobi3_numba(self._m, evalues, evectors)
        logger.debug("[Transform] Jacobi visited %d rotation pairs", rots)
        return evalues, evectors, int(rots)

    def factor(self) -> tuple[Transform, Vector3, Transform, Vector3, Transform] | None:
        """
        Factor the matrix as ``r * diag(s) * r^T * u`` followed by translation ``t``.

        ``r`` and ``u`` are rotations, ``s`` holds the per-axis scale
        (negated when the linear block mirrors) and ``proj`` is always the
        identity.

        Returns:
            Tuple of (r, s, u, t, proj), or None when the linear block is singular

        Example:
            >>> m = Transform.identity()
            >>> m.set_scale([2, 3, 4])
            >>> r, s, u, t, proj = m.factor()
        """
        a = self.copy()
        a._m[3] = 0.0
        t = Vector3(self._m[3])

        det = a.det()
        det_sign = -1.0 if det < 0.0 else 1.0
        if det_sign * det < FACTOR_SINGULAR_EPSILON:
            logger.debug("[Transform] factor: singular matrix (det=%g)", det)
            return None

        block = a._m[:3, :3].astype(np.float64)
        b = Transform()
        b._m[:3, :3] = block @ block.T

        evalues, evectors, _ = b.jacobi3()

        r = Transform()
        r._m[:3, :3] = evectors

        s = Vector3([det_sign * math.sqrt(max(float(e), 0.0)) for e in evalues])

        si = Transform()
        for i in range(3):
            si._m[i, i] = 1.0 / s[i]

        u = r * si * r.transpose() * a
        return r, s, u, t, Transform.identity()

    # -------------------------------------------------------------------------
    # Inverse / transpose / composition
    # -------------------------------------------------------------------------

    def inverse(self) -> Transform:
        """
        Return the affine inverse.

        A singular linear block cannot be inverted; a copy of this matrix is
        returned unchanged in that case.
        """
        if self.is_identity():
            return Transform.identity()

        out = np.empty(TRANSFORM_SHAPE, dtype=DTYPE)
        if not affine_inverse_numba(self._m, out):
            logger.debug("[Transform] inverse: singular matrix, returning original")
            return self.copy()
        return Transform._new(out)

    def transpose(self) -> Transform:
        """Return the transposed linear block with zero translation."""
        result = Transform()
        result._m[:3, :3] = self._m[:3, :3].T
        return result

    def mult_right(self, m: Transform) -> Self:
        """Post-multiply in place: ``self = self * m`` (self applied first)."""
        m = _as_transform(m)
        if m.is_identity():
            return self
        if self.is_identity():
            self._m[:] = m._m
            return self
        affine_multiply_numba(self._m, m._m, self._m)
        return self

    def mult_left(self, m: Transform) -> Self:
        """Pre-multiply in place: ``self = m * self`` (m applied first)."""
        m = _as_transform(m)
        if m.is_identity():
            return self
        if self.is_identity():
            self._m[:] = m._m
            return self
        affine_multiply_numba(m._m, self._m, self._m)
        return self

    def __mul__(self, m: Transform) -> Transform:
        if not isinstance(m, Transform):
            return NotImplemented
        return self.copy().mult_right(m)

    def __imul__(self, m: Transform) -> Self:
        if not isinstance(m, Transform):
            return NotImplemented
        return self.mult_right(m)

    # -------------------------------------------------------------------------
    # Vector transforms
    # -------------------------------------------------------------------------

    @validate_components(3, "v")
    def mult_matrix_vec(self, v: Any) -> Vector3:
        """Multiply a column vector by the linear block (``M[:3] @ v``, no translation)."""
        return Vector3(self._m[:3, :3] @ np.asarray(v, dtype=DTYPE))

    @validate_components(3, "v")
    def mult_vec_matrix(self, v: Any) -> Vector3:
        """Transform a point as a row vector (``v * M[:3] + M[3]``)."""
        return Vector3(transform_points(np.asarray(v, dtype=DTYPE), self._m))

    @validate_components(3, "v")
    def mult_dir_matrix(self, v: Any) -> Vector3:
        """Transform a direction as a row vector (``v * M[:3]``, no translation)."""
        return Vector3(transform_directions(np.asarray(v, dtype=DTYPE), self._m))

    # -------------------------------------------------------------------------
    # Translation
    # -------------------------------------------------------------------------

    def get_translation(self) -> Vector3:
        return Vector3(self._m[3])

    @validate_components(3, "translation")
    def set_translation(self, translation: Any) -> None:
        """Overwrite with a pure translation."""
        self.make_identity()
        self._m[3] = np.asarray(translation, dtype=DTYPE)

    @validate_components(3, "translation")
    def set_translation_only(self, translation: Any) -> None:
        """Replace the translation row, keeping the linear block."""
        self._m[3] = np.asarray(translation, dtype=DTYPE)

    @validate_components(3, "translation")
    def apply_translation(self, translation: Any) -> None:
        """Add to the translation row."""
        self._m[3] += np.asarray(translation, dtype=DTYPE)

    # -------------------------------------------------------------------------
    # Rotation
    # -------------------------------------------------------------------------

    def get_rotation(self) -> Rotation:
        """Return the rotation part as a quaternion."""
        return Rotation(self)

    def get_euler_rotation(self) -> Vector3:
        """
        Return fixed-axis Euler angles (X, Y, Z) in degrees, each in [0, 360).

        Rows are normalized first so scale does not affect the result. Near
        gimbal lock (row2.x close to 1) the rotation is expressed about X
        alone and Z is 0.
        """
        return Vector3(_matrix_to_euler_numpy(self._m))

    @validate_type(Rotation, "rotation")
    def set_rotation(self, rotation: Rotation) -> None:
        """Overwrite with the rotation matrix (zero translation)."""
        self._m[:] = _quaternion_to_matrix_numpy(rotation.get_value())

    def set_rotation_only(self, rotation: Rotation | ArrayLike) -> None:
        """Replace the rotation (a Rotation or Euler degrees), keeping translation and scale."""
        translation = self.get_translation()
        scale = self.get_scale()
        if isinstance(rotation, Rotation):
            self.set_transform(translation, rotation, scale)
        else:
            self.set_euler_transform(translation, rotation, scale)

    def apply_rotation(self, rotation: Rotation | ArrayLike) -> None:
        """
        Post-multiply by a rotation.

        Args:
            rotation: A Rotation, or Euler degrees about X, Y, Z [3] applied
                Z first, then Y, then X (zero angles are skipped)
        """
        if isinstance(rotation, Rotation):
            self.mult_right(rotation.get_matrix())
            return
        check_shape(rotation, (3,), "rotation")
        _apply_euler_numpy(self._m, np.asarray(rotation, dtype=DTYPE))

    # -------------------------------------------------------------------------
    # Scale
    # -------------------------------------------------------------------------

    def get_scale(self) -> Vector3:
        """Return the length of each row of the linear block."""
        block = self._m[:3].astype(np.float64)
        return Vector3(np.sqrt(np.sum(block * block, axis=1)))

    def set_scale(self, scale: float | ArrayLike) -> None:
        """Overwrite with a diagonal scale matrix (uniform scalar or per-axis [3])."""
        if _is_number(scale):
            scale = (scale, scale, scale)
        check_shape(scale, (3,), "scale")
        self._m[:] = 0.0
        self._m[(0, 1, 2), (0, 1, 2)] = np.asarray(scale, dtype=DTYPE)

    @validate_components(3, "scale")
    def set_scale_only(self, scale: Any) -> None:
        """Replace the scale, keeping translation and Euler rotation."""
        translation = self.get_translation()
        euler = self.get_euler_rotation()
        self.set_euler_transform(translation, euler, scale)

    # -------------------------------------------------------------------------
    # Translation / rotation / scale composition
    # -------------------------------------------------------------------------

    def get_transform(
        self, center: ArrayLike | None = None
    ) -> tuple[Vector3, Rotation, Vector3, Rotation] | None:
        """
        Decompose into translation, rotation, scale and scale orientation.

        Args:
            center: Optional pivot the rotation and scale were applied about

        Returns:
            Tuple of (translation, rotation, scale_factor, scale_orientation)
            such that ``set_transform`` rebuilds this matrix, or None when the
            linear block is singular
        """
        center = Vector3() if center is None else Vector3(center)

        if center.is_zero():
            m = self
        else:
            m = Transform()
            m.set_translation(-center)
            m.mult_left(self)
            m.mult_left(_translation(center))

        factors = m.factor()
        if factors is None:
            return None
        so, scale_factor, rot, translation, _ = factors

        # factor yields the transpose of the scale orientation
        scale_orientation = Rotation(so.transpose())
        rotation = Rotation(rot)
        return translation, rotation, scale_factor, scale_orientation

    def set_transform(
        self,
        translation: ArrayLike,
        rotation: Rotation,
        scale_factor: ArrayLike,
        scale_orientation: Rotation | None = None,
        center: ArrayLike | None = None,
    ) -> None:
        """
        Compose ``T(-c) * SO^-1 * S * SO * R * T(c) * T(t)``.

        Each factor is skipped when it would be the identity. ``center`` and
        ``scale_orientation`` default to none.

        Example:
            >>> m = Transform()
            >>> m.set_transform([0, 0, 5], Rotation([0, 1, 0], np.pi), [1, 2, 1])
        """
        translation = Vector3(translation)
        scale_factor = Vector3(scale_factor)
        center = Vector3() if center is None else Vector3(center)
        if not isinstance(rotation, Rotation):
            raise TypeError(f"rotation must be Rotation, got {type(rotation).__name__}")
        if scale_orientation is None:
            scale_orientation = Rotation.identity()

        self.make_identity()

        if not translation.is_zero():
            self.mult_left(_translation(translation))

        if not center.is_zero():
            self.mult_left(_translation(center))

        if rotation != Rotation.identity():
            self.mult_left(rotation.get_matrix())

        if scale_factor != Vector3(1.0, 1.0, 1.0):
            has_orientation = scale_orientation != Rotation.identity()
            if has_orientation:
                self.mult_left(scale_orientation.get_matrix())

            m = Transform()
            m.set_scale(scale_factor)
            self.mult_left(m)

            if has_orientation:
                self.mult_left(scale_orientation.inverse().get_matrix())

        if not center.is_zero():
            self.mult_left(_translation(-center))

    @validate_components(3, "translation")
    @validate_components(3, "euler_degrees", 2)
    def set_euler_transform(
        self,
        translation: ArrayLike,
        euler_degrees: ArrayLike,
        scale: ArrayLike,
        uniform_scale: float | None = None,
    ) -> None:
        """
        Overwrite with scale, then Euler rotation, then translation.

        Args:
            translation: Translation [3]
            euler_degrees: Rotation about X, Y, Z in degrees [3]
            scale: Per-axis scale [3]
            uniform_scale: Optional factor multiplied into every axis of ``scale``
        """
        scale = Vector3(scale)
        if uniform_scale is not None:
            scale *= uniform_scale
        self.set_scale(scale)
        self.apply_rotation(euler_degrees)
        self.set_translation_only(translation)

    # -------------------------------------------------------------------------
    # Copy / repr
    # -------------------------------------------------------------------------

    def copy(self) -> Transform:
        """Return an independent copy."""
        return Transform._new(self._m)

    def __copy__(self) -> Transform:
        return self.copy()

    def __deepcopy__(self, memo: dict[int, Any]) -> Transform:
        return self.copy()

    def __repr__(self) -> str:
        rows = ", ".join("[" + ", ".join(f"{float(c):.6g}" for c in row) + "]" for row in self._m)
        return f"Transform({rows})"

    @classmethod
    def _new(cls, m: np.ndarray) -> Self:
        obj = cls.__new__(cls)
        obj._m = np.array(m, dtype=DTYPE)
        return obj


def _as_transform(m: Any) -> Transform:
    if isinstance(m, Transform):
        return m
    if isinstance(m, Rotation):
        raise TypeError("m must be Transform, got Rotation. Use rotation.get_matrix().")
    return Transform(m)


def _translation(t: Vector3) -> Transform:
    m = Transform()
    m.set_translation(t)
    return m
