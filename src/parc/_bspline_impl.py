"""Numba-backed core implementations for B-spline evaluation.

The kernels here expect pre-validated, contiguous inputs. Validation and
shape handling live in :mod:`parc.bspline`.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

import numba as nb
import numpy as np
import numpy.typing as npt

F = TypeVar("F", bound=Callable[..., Any])

if TYPE_CHECKING:
    # During type-checking, make the decorator a no-op that preserves types.
    def nb_jit(*args: object, **kwargs: object) -> Callable[[F], F]:
        def decorator(func: F) -> F:
            return func

        return decorator
else:
    # At runtime, use the real Numba decorator.
    nb_jit = nb.jit  # type: ignore[attr-defined]


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _find_knot_spans_core(
    knots: npt.NDArray[np.float32 | np.float64],
    degree: int,
    us: npt.NDArray[np.float32 | np.float64],
    out: npt.NDArray[np.int64],
) -> None:
    """Find the knot span index of each parameter value.

    The span of ``u`` is the index ``j`` in the internal knot range with
    ``knots[j] <= u < knots[j+1]``. Values at or beyond the last internal knot
    use the last internal span, and values before the first internal knot use
    the first one.

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): Knot vector.
        degree (int): B-spline degree.
        us (npt.NDArray[np.float32 | np.float64]): 1D array of knot values.
        out (npt.NDArray[np.int64]): Output array of shape (len(us),).
    """
    start = degree
    end = knots.shape[0] - degree - 1
    for idx in range(us.shape[0]):
        u = us[idx]
        span = end - 1
        if u < knots[start]:
            span = start
        elif u < knots[end]:
            for j in range(start, end):
                if knots[j] <= u and u < knots[j + 1]:
                    span = j
                    break
        out[idx] = span


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _de_boor_core(
    points: npt.NDArray[np.float32 | np.float64],
    knots: npt.NDArray[np.float32 | np.float64],
    degree: int,
    spans: npt.NDArray[np.int64],
    us: npt.NDArray[np.float32 | np.float64],
    buf: npt.NDArray[np.float32 | np.float64],
    out: npt.NDArray[np.float32 | np.float64],
) -> None:
    """Evaluate B-spline points with De Boor's algorithm.

    For each ``(k, u)`` pair, the ``degree + 1`` control points
    ``points[k-degree .. k]`` are blended level by level:
    ``alpha = (u - knots[j+k-degree]) / (knots[j+1+k-r] - knots[j+k-degree])``
    (0 for a zero denominator) and ``buf[j] = lerp(buf[j-1], buf[j], alpha)``
    for ``r = 1..degree`` and ``j = degree..r``. The point is ``buf[degree]``.

    Args:
        points (npt.NDArray[np.float32 | np.float64]): Control points (n, D).
        knots (npt.NDArray[np.float32 | np.float64]): Knot vector.
        degree (int): B-spline degree.
        spans (npt.NDArray[np.int64]): Knot span index for each value, within
            [degree, n-1].
        us (npt.NDArray[np.float32 | np.float64]): Knot values.
        buf (npt.NDArray[np.float32 | np.float64]): Scratch buffer of shape
            (degree+1, D), overwritten on each evaluation.
        out (npt.NDArray[np.float32 | np.float64]): Output array of shape
            (len(us), D).
    """
    dim = points.shape[1]
    for idx in range(us.shape[0]):
        k = spans[idx]
        u = us[idx]
        for i in range(degree + 1):
            for d in range(dim):
                buf[i, d] = points[i + k - degree, d]

        for r in range(1, degree + 1):
            for j in range(degree, r - 1, -1):
                left = knots[j + k - degree]
                den = knots[j + 1 + k - r] - left
                alpha = 0.0 if den == 0.0 else (u - left) / den
                for d in range(dim):
                    buf[j, d] = buf[j - 1, d] + (buf[j, d] - buf[j - 1, d]) * alpha

        for d in range(dim):
            out[idx, d] = buf[degree, d]


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _derivative_points_core(
    points: npt.NDArray[np.float32 | np.float64],
    knots: npt.NDArray[np.float32 | np.float64],
    degree: int,
    out: npt.NDArray[np.float32 | np.float64],
) -> None:
    """Compute the control points of the derivative B-spline.

    ``out[i] = degree * (points[i+1] - points[i]) / (knots[i+degree+1] - knots[i+1])``,
    with 0 where the denominator vanishes.

    Args:
        points (npt.NDArray[np.float32 | np.float64]): Control points (n, D).
        knots (npt.NDArray[np.float32 | np.float64]): Knot vector.
        degree (int): B-spline degree (>= 1).
        out (npt.NDArray[np.float32 | np.float64]): Output array of shape
            (n-1, D).
    """
    for i in range(points.shape[0] - 1):
        den = knots[i + degree + 1] - knots[i + 1]
        scale = 0.0 if den == 0.0 else degree / den
        for d in range(points.shape[1]):
            out[i, d] = (points[i + 1, d] - points[i, d]) * scale


def _knot_ratio(knots: npt.NDArray[np.float32 | np.float64], i: int, k: int, u: float) -> float:
    """Knot-ratio blend ``(u - knots[i]) / (knots[i+k] - knots[i])``, 0 for a zero span."""
    den = knots[i + k] - knots[i]
    return 0.0 if den == 0.0 else float((u - knots[i]) / den)


def _cox_de_boor_impl(
    knots: npt.NDArray[np.float32 | np.float64], point: int, order: int, u: float
) -> float:
    """Evaluate the basis function of ``point`` with the given order at ``u``.

    Cox-de Boor recursion on the order. At order 1 the basis function is the
    indicator of ``[knots[p], knots[p+1])``, closed on the right for the very
    last index so that the end of the knot vector is covered.

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): Knot vector.
        point (int): Index of the basis function.
        order (int): Basis order (degree + 1).
        u (float): Knot value.

    Returns:
        float: Basis function value.
    """
    k = order - 1
    if k == 0:
        # TODO: check the closed interval against knot vectors with interior
        # knots of full multiplicity at the end of the domain.
        if point == knots.shape[0] - 2:
            return 1.0 if knots[point] <= u <= knots[point + 1] else 0.0
        return 1.0 if knots[point] <= u < knots[point + 1] else 0.0

    return _knot_ratio(knots, point, k, u) * _cox_de_boor_impl(knots, point, k, u) + (
        1.0 - _knot_ratio(knots, point + 1, k, u)
    ) * _cox_de_boor_impl(knots, point + 1, k, u)
