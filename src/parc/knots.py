"""Knot vector generation and validation for B-splines and NURBS.

The uniform knot vectors used by :class:`parc.bspline.Bspline` count in unit
steps (``0, 1, 2, ...``), optionally clamped so that the first and last
``degree + 1`` knots repeat. Open knot vectors over an arbitrary domain with
configurable interior continuity are also available.
"""

import numpy as np
import numpy.typing as npt

from ._vector_utils import _as_float_array


def _check_dtype(dtype: npt.DTypeLike) -> np.dtype[np.float32 | np.float64]:
    """Validate that dtype is float32 or float64.

    Raises:
        ValueError: If dtype is not float32 or float64.
    """
    dtype_obj = np.dtype(dtype)
    if dtype_obj not in (np.dtype(np.float32), np.dtype(np.float64)):
        raise ValueError("dtype must be float32 or float64")
    return dtype_obj


def get_bspline_knot_count(point_count: int, degree: int) -> int:
    """Number of knots of a B-spline: ``point_count + degree + 1``.

    Args:
        point_count (int): Number of control points.
        degree (int): B-spline degree.

    Returns:
        int: Required knot vector length.
    """
    return point_count + degree + 1


def check_knot_vector(
    knots: npt.ArrayLike,
    degree: int,
    point_count: int | None = None,
) -> npt.NDArray[np.float32 | np.float64]:
    """Validate a knot vector against a degree and, optionally, a point count.

    Args:
        knots (npt.ArrayLike): Knot vector.
        degree (int): B-spline degree. Must be non-negative.
        point_count (int | None): Number of control points. If given, the knot
            vector must have exactly ``point_count + degree + 1`` entries.

    Returns:
        npt.NDArray[np.float32 | np.float64]: The knot vector as a float array.

    Raises:
        TypeError: If the knot vector is not one-dimensional.
        ValueError: If degree is negative, the knot count does not match, or
            the knots are decreasing somewhere.
    """
    knots_arr = _as_float_array(knots)
    if knots_arr.ndim != 1:
        raise TypeError("knots must be a 1D array")
    if degree < 0:
        raise ValueError("degree must be non-negative")
    if point_count is not None:
        expected = get_bspline_knot_count(point_count, degree)
        if knots_arr.size != expected:
            raise ValueError(
                f"The knots array has to be of length (degree+pointCount+1). "
                f"Got an array of {knots_arr.size} knots, expected {expected}"
            )
    if np.any(np.diff(knots_arr) < 0.0):
        raise ValueError("knots must be non-decreasing")
    return knots_arr


def create_uniform_knot_vector(
    degree: int,
    point_count: int,
    open: bool = False,  # noqa: A002
    dtype: npt.DTypeLike = np.float64,
) -> npt.NDArray[np.float32 | np.float64]:
    """Create a unit-spaced knot vector for a B-spline.

    A closed (floating) knot vector is ``0, 1, ..., point_count + degree``.
    An open one repeats its first and last value ``degree + 1`` times, so the
    curve passes through its first and last control points.

    Args:
        degree (int): B-spline degree. Must be non-negative.
        point_count (int): Number of control points. Must be at least degree+1.
        open (bool): Whether to clamp the ends. Defaults to False.
        dtype (npt.DTypeLike): float32 or float64. Defaults to float64.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Knot vector of length
            ``point_count + degree + 1``.

    Raises:
        ValueError: If degree is negative, there are too few points, or the
            dtype is not supported.

    Example:
        >>> create_uniform_knot_vector(2, 4)
        array([0., 1., 2., 3., 4., 5., 6.])
        >>> create_uniform_knot_vector(2, 4, open=True)
        array([0., 0., 0., 1., 2., 2., 2.])
    """
    if degree < 0:
        raise ValueError("degree must be non-negative")
    if point_count < degree + 1:
        raise ValueError(f"point_count must be at least degree+1 ({degree + 1}). Got {point_count}")
    dtype_obj = _check_dtype(dtype)

    knot_count = get_bspline_knot_count(point_count, degree)
    knots = np.arange(knot_count, dtype=dtype_obj)
    if open:
        knots = np.clip(knots - degree, 0, knot_count - 2 * degree - 1)
    return knots


def create_uniform_open_knot_vector(
    num_intervals: int,
    degree: int,
    continuity: int | None = None,
    domain: tuple[float, float] = (0.0, 1.0),
    dtype: npt.DTypeLike = np.float64,
) -> npt.NDArray[np.float32 | np.float64]:
    """Create an open knot vector with evenly spaced breakpoints over a domain.

    The end knots are repeated (degree+1) times and every interior breakpoint
    ``degree - continuity`` times.

    Args:
        num_intervals (int): Number of non-empty knot spans. Must be at least 1.
        degree (int): B-spline degree. Must be non-negative.
        continuity (int | None): Continuity at interior breakpoints, between -1
            and degree-1. Defaults to degree-1 (maximum continuity).
        domain (tuple[float, float]): Domain as (start, end). Defaults to (0, 1).
        dtype (npt.DTypeLike): float32 or float64. Defaults to float64.

    Returns:
        npt.NDArray[np.float32 | np.float64]: The open knot vector.

    Raises:
        ValueError: If any parameter is invalid.

    Example:
        >>> create_uniform_open_knot_vector(2, 2)
        array([0. , 0. , 0. , 0.5, 1. , 1. , 1. ])
    """
    start, end = domain
    if start >= end:
        raise ValueError("domain[0] must be less than domain[1]")
    if num_intervals < 1:
        raise ValueError("num_intervals must be at least 1")
    if degree < 0:
        raise ValueError("degree must be non-negative")
    continuity = degree - 1 if continuity is None else continuity
    if continuity < -1 or continuity >= degree:
        raise ValueError(f"Continuity must be between -1 and {degree - 1} for degree {degree}.")
    dtype_obj = _check_dtype(dtype)

    breakpoints = np.linspace(start, end, num_intervals + 1, dtype=dtype_obj)
    multiplicities = np.full(num_intervals + 1, degree - continuity)
    multiplicities[0] = multiplicities[-1] = degree + 1
    return np.repeat(breakpoints, multiplicities)
