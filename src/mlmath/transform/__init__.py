"""
Rotation and affine transform module.

Provides the quaternion Rotation type, the 4x3 affine Transform type and the
array-level functions both are built on.
"""

from mlmath.transform.affine import Transform
from mlmath.transform.api import (
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
from mlmath.transform.kernels import get_numba_status, warmup_transform_kernels
from mlmath.transform.rotation import Rotation

__all__ = [
    "Rotation",
    "Transform",
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
    "get_numba_status",
    "warmup_transform_kernels",
]
