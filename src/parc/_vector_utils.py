"""Utility functions for control point, parameter and vector handling.

Vectors are NumPy arrays whose last axis is the vector dimension (1 to 4).
Batches of vectors stack along the leading axes.
"""

import numpy as np
from numpy import typing as npt

_MIN_DIMENSION = 1
_MAX_DIMENSION = 4


def _as_float_array(values: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
    """Convert input to an array of dtype float32 or float64.

    Types different from float32 or float64 are converted to float64.
    """
    arr = np.asarray(values)
    if arr.dtype not in (np.float32, np.float64):
        arr = arr.astype(np.float64)
    return arr


def _check_dimension(dim: int) -> None:
    """Check that a vector dimension is supported.

    Raises:
        ValueError: If dim is not between 1 and 4.
    """
    if not _MIN_DIMENSION <= dim <= _MAX_DIMENSION:
        raise ValueError(
            f"Vector dimension must be between {_MIN_DIMENSION} and {_MAX_DIMENSION}. Got {dim}"
        )


def _as_vector(value: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
    """Normalize a single vector (or a scalar, read as a 1D vector) to shape (D,).

    Raises:
        TypeError: If the value has more than one dimension.
        ValueError: If the vector dimension is not supported.
    """
    arr = _as_float_array(value)
    if arr.ndim == 0:
        arr = arr.reshape(1)
    elif arr.ndim > 1:
        raise TypeError(f"A vector must be a scalar or a 1D array. Got {arr.ndim} dimensions")
    _check_dimension(arr.shape[0])
    return arr


def _as_points(
    points: npt.ArrayLike,
    count: int | None = None,
    min_count: int | None = None,
) -> npt.NDArray[np.float32 | np.float64]:
    """Normalize control points to a 2D float array of shape (n, D).

    A 1D input of length n is read as n scalar (1D) points.

    Args:
        points (npt.ArrayLike): Control points.
        count (int | None): If given, the exact number of points required.
        min_count (int | None): If given, the minimum number of points required.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Array of shape (n, D), with the
            input dtype if it is float32 or float64, and float64 otherwise.

    Raises:
        TypeError: If the points array has more than two dimensions.
        ValueError: If the vector dimension is not supported or the number
            of points does not match the requirement.
    """
    arr = _as_float_array(points)
    if arr.ndim <= 1:
        arr = arr.reshape(-1, 1)
    elif arr.ndim > 2:  # noqa: PLR2004
        raise TypeError(f"Points must be a 1D or 2D array. Got {arr.ndim} dimensions")

    _check_dimension(arr.shape[1])

    if count is not None and arr.shape[0] != count:
        raise ValueError(f"Expected {count} points. Got {arr.shape[0]}")
    if min_count is not None and arr.shape[0] < min_count:
        raise ValueError(f"Expected at least {min_count} points. Got {arr.shape[0]}")
    return arr


def _stack_vectors(*vectors: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
    """Stack individual vectors into an (n, D) array.

    Raises:
        ValueError: If the vectors do not share the same dimension.
    """
    arrs = [_as_vector(v) for v in vectors]
    dims = {a.shape[0] for a in arrs}
    if len(dims) != 1:
        raise ValueError(f"All points must have the same dimension. Got {sorted(dims)}")
    return np.stack(arrs)


def _as_params(t: npt.ArrayLike) -> tuple[npt.NDArray[np.float32 | np.float64], tuple[int, ...]]:
    """Flatten curve parameters into a 1D float array.

    Returns:
        tuple[npt.NDArray[np.float32 | np.float64], tuple[int, ...]]: The
            flattened parameters and the original input shape (empty for scalar
            input).
    """
    arr = _as_float_array(t)
    return np.ravel(arr), arr.shape


def _restore_shape(
    values: npt.NDArray[np.float32 | np.float64], input_shape: tuple[int, ...]
) -> npt.NDArray[np.float32 | np.float64]:
    """Reshape (m, D) evaluation results to (*input_shape, D).

    Scalar input gives a single vector of shape (D,).
    """
    return values.reshape(*input_shape, values.shape[-1])


def _restore_scalar_shape(
    values: npt.NDArray[np.float32 | np.float64], input_shape: tuple[int, ...]
) -> npt.NDArray[np.float32 | np.float64]:
    """Reshape (m,) evaluation results to the input shape.

    Scalar input gives a NumPy scalar.
    """
    return values.reshape(input_shape)[()]


def _readonly(arr: npt.NDArray[np.float32 | np.float64]) -> npt.NDArray[np.float32 | np.float64]:
    """Mark an array as read-only and return it."""
    arr.flags.writeable = False
    return arr


def _lerp(
    a: npt.ArrayLike, b: npt.ArrayLike, t: npt.ArrayLike
) -> npt.NDArray[np.float32 | np.float64]:
    """Linear interpolation, unclamped."""
    a_arr = np.asarray(a)
    return a_arr + (np.asarray(b) - a_arr) * t


def _inverse_lerp(
    a: npt.ArrayLike, b: npt.ArrayLike, value: npt.ArrayLike
) -> npt.NDArray[np.float32 | np.float64]:
    """Inverse of the linear interpolation, unclamped."""
    a_arr = np.asarray(a)
    return (np.asarray(value) - a_arr) / (np.asarray(b) - a_arr)


def _norm(v: npt.NDArray[np.float32 | np.float64]) -> npt.NDArray[np.float32 | np.float64]:
    """Euclidean norm along the last axis."""
    return np.sqrt(np.sum(v * v, axis=-1))


def _normalize(v: npt.NDArray[np.float32 | np.float64]) -> npt.NDArray[np.float32 | np.float64]:
    """Normalize vectors along the last axis. Zero vectors stay zero."""
    length = _norm(v)[..., np.newaxis]
    return np.divide(v, length, out=np.zeros_like(v), where=length > 0.0)


def _rotate90_ccw(v: npt.NDArray[np.float32 | np.float64]) -> npt.NDArray[np.float32 | np.float64]:
    """Rotate 2D vectors by 90 degrees counter-clockwise."""
    return np.stack([-v[..., 1], v[..., 0]], axis=-1)


def _determinant_2d(
    a: npt.NDArray[np.float32 | np.float64], b: npt.NDArray[np.float32 | np.float64]
) -> npt.NDArray[np.float32 | np.float64]:
    """2D cross product (determinant of the 2x2 matrix [a, b])."""
    return a[..., 0] * b[..., 1] - a[..., 1] * b[..., 0]


def _cross(
    a: npt.NDArray[np.float32 | np.float64], b: npt.NDArray[np.float32 | np.float64]
) -> npt.NDArray[np.float32 | np.float64]:
    """3D cross product along the last axis."""
    return np.cross(a, b)


def _dot(
    a: npt.NDArray[np.float32 | np.float64], b: npt.NDArray[np.float32 | np.float64]
) -> npt.NDArray[np.float32 | np.float64]:
    """Dot product along the last axis."""
    return np.sum(a * b, axis=-1)


def _safe_divide(
    num: npt.NDArray[np.float32 | np.float64], den: npt.NDArray[np.float32 | np.float64]
) -> npt.NDArray[np.float32 | np.float64]:
    """Elementwise division that gives 0 where the denominator is 0."""
    num, den = np.broadcast_arrays(num, den)
    out = np.zeros(num.shape, dtype=np.result_type(num, den))
    return np.divide(num, den, out=out, where=den != 0.0)
