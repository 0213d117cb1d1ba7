"""
mlmath - Linear algebra for 3D scene graphs

Small fixed-size vectors, quaternion rotations and 4x3 affine transforms,
CPU-optimized with NumPy and Numba.

Features:
- Vector2, Vector3, Vector4 value types with in-place and pure arithmetic
- Rotation: unit quaternion (x, y, z, w) with axis-angle, matrix and
  rotate-between-vectors construction, composition, inversion and slerp
- Transform: 4x3 row-vector affine matrix with composition, inverse,
  polar factorization and translation/rotation/scale decomposition
- Fixed-axis Euler helpers (degrees, Z then Y then X)
- Normalized angle unit (a full turn = 1.0) with conversions and trigonometry
- Array-level functions and batch point/direction kernels (Numba parallel)

Example - Rotations:
    >>> from mlmath import Rotation, Vector3
    >>>
    >>> r = Rotation.from_vectors(Vector3(1, 0, 0), Vector3(0, 1, 0))
    >>> v = r.mult_vec(Vector3(1, 0, 0))

Example - Transforms:
    >>> from mlmath import Rotation, Transform
    >>>
    >>> m = Transform()
    >>> m.set_transform([1, 2, 3], Rotation([0, 0, 1], 0.5), [2, 2, 2])
    >>> translation, rotation, scale, scale_orientation = m.get_transform()
    >>> inv = m.inverse()
"""

__version__ = "0.1.0"

# Angle units
from mlmath.angle import (
    acos_angle,
    angle_to_degrees,
    angle_to_radians,
    asin_angle,
    atan2_angle,
    cos_angle,
    degrees_to_angle,
    radians_to_angle,
    sin_angle,
    tan_angle,
)

# Constants
from mlmath.constants import (
    ANGLE_PI,
    ANGLE_PI_FOURTH,
    ANGLE_PI_HALF,
    ANGLE_TWO_PI,
    ANGLE_ZERO,
    SCALAR_EPSILON,
    SCALAR_HALF,
    SCALAR_MAX,
    SCALAR_ONE,
    SCALAR_PI,
    SCALAR_PI_FOURTH,
    SCALAR_PI_HALF,
    SCALAR_TWO,
    SCALAR_TWO_PI,
    SCALAR_ZERO,
)

# Scalar helpers
from mlmath.scalar import equal_abs_err, pow_int, sign

# Rotation and transform
from mlmath.transform import (
    Rotation,
    Transform,
    axis_angle_to_quaternion,
    euler_to_matrix,
    get_numba_status,
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

# Vector types
from mlmath.vector import Vector2, Vector3, Vector4

__all__ = [
    # Version
    "__version__",
    # Core types
    "Vector2",
    "Vector3",
    "Vector4",
    "Rotation",
    "Transform",
    # Angle units
    "angle_to_degrees",
    "angle_to_radians",
    "degrees_to_angle",
    "radians_to_angle",
    "sin_angle",
    "cos_angle",
    "tan_angle",
    "asin_angle",
    "acos_angle",
    "atan2_angle",
    # Scalar helpers
    "sign",
    "equal_abs_err",
    "pow_int",
    # Constants
    "SCALAR_ZERO",
    "SCALAR_ONE",
    "SCALAR_HALF",
    "SCALAR_TWO",
    "SCALAR_PI",
    "SCALAR_TWO_PI",
    "SCALAR_PI_HALF",
    "SCALAR_PI_FOURTH",
    "SCALAR_EPSILON",
    "SCALAR_MAX",
    "ANGLE_ZERO",
    "ANGLE_TWO_PI",
    "ANGLE_PI",
    "ANGLE_PI_HALF",
    "ANGLE_PI_FOURTH",
    # Array-level utilities
    "quaternion_normalize",
    "quaternion_multiply",
    "quaternion_invert",
    "quaternion_to_matrix",
    "matrix_to_quaternion",
    "axis_angle_to_quaternion",
    "quaternion_to_axis_angle",
    "quaternion_from_vectors",
    "quaternion_slerp",
    "euler_to_matrix",
    "matrix_to_euler",
    "transform_points",
    "transform_directions",
    # Numba
    "get_numba_status",
]
