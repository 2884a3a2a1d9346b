"""Catmull-Rom interpolation through a sequence of points."""

import numpy as np
from numpy import typing as npt

from ._vector_utils import _as_points
from .segments import CatRomCubic


def catmull_rom(
    p0: npt.ArrayLike,
    p1: npt.ArrayLike,
    p2: npt.ArrayLike,
    p3: npt.ArrayLike,
    t: npt.ArrayLike,
) -> npt.NDArray[np.float32 | np.float64]:
    """Evaluate the uniform Catmull-Rom segment between p1 and p2.

    Args:
        p0 (npt.ArrayLike): Point before the segment start.
        p1 (npt.ArrayLike): Segment start.
        p2 (npt.ArrayLike): Segment end.
        p3 (npt.ArrayLike): Point after the segment end.
        t (npt.ArrayLike): Parameter value(s); 0 gives p1 and 1 gives p2.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Point(s) on the segment.

    Example:
        >>> catmull_rom(0.0, 1.0, 2.0, 4.0, 0.0)
        array([1.])
    """
    return CatRomCubic(p0, p1, p2, p3).eval(t)


def interpolate_catmull_rom(
    points: npt.ArrayLike,
    num_interpolated_points: int,
) -> npt.NDArray[np.float32 | np.float64]:
    """Densify a polyline with Catmull-Rom segments.

    Every consecutive pair of input points is joined by a Catmull-Rom segment,
    sampled at ``t = j / num_interpolated_points`` for ``j`` in
    ``range(num_interpolated_points)``. The neighbour before the first point
    and after the last point is the endpoint itself. The final input point is
    appended as-is.

    Args:
        points (npt.ArrayLike): Input points of shape (n, D), n >= 1. A single
            point is returned unchanged as a (1, D) array.
        num_interpolated_points (int): Samples per segment. Must be at least 1.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Array of shape
            ((n - 1) * num_interpolated_points + 1, D) whose every
            ``num_interpolated_points``-th row is an input point.

    Raises:
        ValueError: If num_interpolated_points < 1 or no points are given.

    Example:
        >>> interpolate_catmull_rom([0.0, 1.0, 2.0], 2).ravel()
        array([0.    , 0.4375, 1.    , 1.5625, 2.    ])
    """
    if num_interpolated_points < 1:
        raise ValueError("num_interpolated_points must be at least 1")

    pts = _as_points(points, min_count=1)
    n = pts.shape[0]
    if n == 1:
        return pts.copy()
    num = num_interpolated_points
    t = np.arange(num, dtype=pts.dtype) / pts.dtype.type(num)

    chunks = []
    for i in range(n - 1):
        p0 = pts[i - 1] if i > 0 else pts[i]
        p3 = pts[i + 2] if i < n - 2 else pts[i + 1]  # noqa: PLR2004
        chunks.append(CatRomCubic(p0, pts[i], pts[i + 1], p3).eval(t))
    chunks.append(pts[-1:])
    return np.concatenate(chunks)
