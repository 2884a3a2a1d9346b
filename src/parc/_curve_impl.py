"""Numba-backed kernels shared by the curve sampling utilities."""

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
def _cumulative_chord_lengths_core(
    points: npt.NDArray[np.float32 | np.float64],
    out: npt.NDArray[np.float32 | np.float64],
) -> None:
    """Accumulate the Euclidean distances between consecutive points.

    Writes ``out[0] = 0`` and ``out[i] = out[i-1] + |points[i] - points[i-1]|``.

    Args:
        points (npt.NDArray[np.float32 | np.float64]): Contiguous array of shape
            (n, D) with n >= 1.
        out (npt.NDArray[np.float32 | np.float64]): Output array of shape (n,).
            No validation is performed inside this numba-compiled function.
    """
    out[0] = 0.0
    for i in range(1, points.shape[0]):
        dist_sq = 0.0
        for d in range(points.shape[1]):
            diff = points[i, d] - points[i - 1, d]
            dist_sq += diff * diff
        out[i] = out[i - 1] + np.sqrt(dist_sq)


def _cumulative_chord_lengths_impl(
    points: npt.NDArray[np.float32 | np.float64],
) -> npt.NDArray[np.float32 | np.float64]:
    """Cumulative chord lengths of a polyline given as an (n, D) array."""
    pts = np.ascontiguousarray(points)
    out = np.empty(pts.shape[0], dtype=pts.dtype)
    _cumulative_chord_lengths_core(pts, out)
    return out
