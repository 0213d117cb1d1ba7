"""
Validation decorators for mlmath types.

Provides reusable argument checking for vector, rotation and transform
operations. Only malformed arguments are rejected here; numeric degeneracies
(zero vectors, singular matrices) are handled by each algorithm's own policy.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Any, TypeAlias

import numpy as np

# Type alias for callables
F: TypeAlias = Callable[..., Any]


def _get_argument(args: tuple, kwargs: dict, param_name: str, param_index: int) -> tuple[bool, Any]:
    """Fetch a parameter from positional or keyword arguments."""
    if len(args) > param_index:
        return True, args[param_index]
    if param_name in kwargs:
        return True, kwargs[param_name]
    return False, None


def check_shape(value: Any, shapes: tuple[int, ...] | list[tuple[int, ...]], param_name: str = "value") -> None:
    """
    Raise if an array-like value does not have one of the accepted shapes.

    Args:
        value: Array-like value to check
        shapes: Accepted shape, or list of accepted shapes
        param_name: Name of parameter for error messages

    Raises:
        TypeError: If value is a scalar or string
        ValueError: If value has a different shape
    """
    accepted = [shapes] if isinstance(shapes, tuple) else list(shapes)

    if isinstance(value, (str, bytes)) or np.ndim(value) == 0:
        raise TypeError(
            f"{param_name} must be array-like, got {type(value).__name__}. "
            f"Provide a list, tuple, ndarray or mlmath value."
        )

    shape = np.shape(value)
    if shape not in accepted:
        expected = " or ".join(str(s) for s in accepted)
        raise ValueError(f"{param_name} has shape {shape}, expected {expected}.")


def validate_shape(
    shapes: tuple[int, ...] | list[tuple[int, ...]],
    param_name: str = "value",
    param_index: int = 1,
) -> Callable[[F], F]:
    """
    Decorator for validating the shape of array-like parameters.

    Args:
        shapes: Accepted shape, or list of accepted shapes
        param_name: Name of parameter for error messages
        param_index: Position of parameter in function signature (default: 1 = first arg after self)

    Returns:
        Decorated function with shape validation

    Example:
        >>> @validate_shape([(4, 3), (4, 4)], 'matrix')
        ... def set_value(self, matrix) -> None:
        ...     ...
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            found, value = _get_argument(args, kwargs, param_name, param_index)
            if found and value is not None:
                check_shape(value, shapes, param_name)
            return func(*args, **kwargs)

        return wrapper  # type: ignore

    return decorator


def validate_components(count: int, param_name: str = "value", param_index: int = 1) -> Callable[[F], F]:
    """
    Decorator for validating fixed-size vector parameters.

    Args:
        count: Required number of components
        param_name: Name of parameter for error messages
        param_index: Position of parameter in function signature

    Returns:
        Decorated function with component-count validation

    Example:
        >>> @validate_components(3, 'translation')
        ... def set_translation(self, translation) -> None:
        ...     ...
    """
    return validate_shape((count,), param_name, param_index)


def validate_non_negative(param_name: str = "value", param_index: int = 1) -> Callable[[F], F]:
    """
    Decorator for validating non-negative numeric parameters.

    Args:
        param_name: Name of parameter for error messages
        param_index: Position of parameter in function signature

    Returns:
        Decorated function with non-negative validation

    Example:
        >>> @validate_non_negative('tolerance', 2)
        ... def equals(self, other, tolerance: float) -> bool:
        ...     ...
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            found, value = _get_argument(args, kwargs, param_name, param_index)
            if not found:
                return func(*args, **kwargs)

            if isinstance(value, bool) or not isinstance(value, (int, float, np.floating, np.integer)):
                raise TypeError(
                    f"{param_name} must be a number, got {type(value).__name__}. "
                    f"Provide a numeric value (int or float)."
                )

            if value < 0:
                suggestion = ""
                if "tolerance" in param_name:
                    suggestion = " Use 0.0 for exact comparison, a small positive bound otherwise."
                raise ValueError(f"{param_name}={value} must be non-negative (>= 0).{suggestion}")

            return func(*args, **kwargs)

        return wrapper  # type: ignore

    return decorator


def validate_type(
    expected_type: type | tuple[type, ...],
    param_name: str = "value",
    param_index: int = 1,
) -> Callable[[F], F]:
    """
    Decorator for validating parameter types.

    Args:
        expected_type: Expected type or tuple of types
        param_name: Name of parameter for error messages
        param_index: Position of parameter in function signature

    Returns:
        Decorated function with type validation

    Example:
        >>> @validate_type(Rotation, 'rotation')
        ... def apply_rotation(self, rotation: Rotation) -> None:
        ...     ...
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            found, value = _get_argument(args, kwargs, param_name, param_index)
            if not found:
                return func(*args, **kwargs)

            if not isinstance(value, expected_type):
                if isinstance(expected_type, tuple):
                    type_names = ", ".join(t.__name__ for t in expected_type)
                    raise TypeError(
                        f"{param_name} must be one of ({type_names}), got {type(value).__name__}"
                    )
                else:
                    raise TypeError(
                        f"{param_name} must be {expected_type.__name__}, got {type(value).__name__}"
                    )

            return func(*args, **kwargs)

        return wrapper  # type: ignore

    return decorator
