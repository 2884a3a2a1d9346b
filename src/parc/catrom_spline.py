"""Multi-segment Catmull-Rom splines with one knot per point.

A :class:`CatRomSpline` strings non-uniform Catmull-Rom segments through a
sequence of points. Segment ``i`` runs from point ``i`` to point ``i + 1`` and
uses the points on either side as neighbours. The endpoint mode decides what
happens at the ends of the sequence, where one neighbour is missing:

* ``NONE``: the first and last points only serve as neighbours, and the
  curve runs from the second point to the second-to-last.
* ``EXTRAPOLATE``: the missing neighbour is mirrored through the endpoint.
* ``COLLAPSE``: the missing neighbour is the endpoint itself.

The spline is evaluated at knot values with :meth:`CatRomSpline.get_point`, or
at a normalized parameter in [0, 1] with :meth:`CatRomSpline.eval`.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import ClassVar

import numpy as np
from numpy import typing as npt

from ._vector_utils import (
    _as_float_array,
    _as_params,
    _as_points,
    _lerp,
    _readonly,
    _restore_shape,
)
from .nonuniform import CatRomType, NUCatRomCubic, _alpha_value, _knot_intervals

logger = logging.getLogger(__name__)

_MIN_POINTS = 2
_MIN_POINTS_WITHOUT_ENDPOINTS = 4


class EndpointMode(Enum):
    """How a Catmull-Rom spline treats its first and last points."""

    NONE = "none"
    EXTRAPOLATE = "extrapolate"
    COLLAPSE = "collapse"


class CatRomSpline:
    """A Catmull-Rom spline through a sequence of points.

    Instances are immutable. Every segment is built once at construction as a
    :class:`~parc.nonuniform.NUCatRomCubic` whose knots are relative to the
    knot of its start point.

    Attributes:
        degree (ClassVar[int]): Polynomial degree, always 3.
        _points (npt.NDArray[np.float32 | np.float64]): Read-only points (n, D).
        _knots (npt.NDArray[np.float32 | np.float64]): Read-only knots, one per
            point.
        _alpha (float | None): Exponent the knots were computed with, or None
            for explicit knots.
        _endpoint_mode (EndpointMode): Treatment of the ends.
        _segments (tuple[NUCatRomCubic, ...]): One segment per curve.
    """

    degree: ClassVar[int] = 3

    _points: npt.NDArray[np.float32 | np.float64]
    _knots: npt.NDArray[np.float32 | np.float64]
    _alpha: float | None
    _endpoint_mode: EndpointMode
    _segments: tuple[NUCatRomCubic, ...]

    def __init__(
        self,
        points: npt.ArrayLike,
        knots: npt.ArrayLike | None = None,
        alpha: float | CatRomType = CatRomType.UNIFORM,
        endpoint_mode: EndpointMode = EndpointMode.NONE,
    ) -> None:
        """Initialize the spline.

        Args:
            points (npt.ArrayLike): Points of shape (n, D), or (n,) for a 1D
                spline.
            knots (npt.ArrayLike | None): Strictly increasing knots, one per
                point. If None, they are computed from the points: the first
                knot is 0 and each following one adds ``|P[i] - P[i-1]|^alpha``
                (or 1 for coincident points).
            alpha (float | CatRomType): Parametrization exponent used when no
                knots are given. Defaults to uniform.
            endpoint_mode (EndpointMode): Treatment of the ends. Defaults to
                ``EndpointMode.NONE``.

        Raises:
            ValueError: If there are fewer than 2 points (4 with
                ``EndpointMode.NONE``), or the knots do not match the points or
                do not increase.
        """
        self._endpoint_mode = EndpointMode(endpoint_mode)
        min_count = (
            _MIN_POINTS_WITHOUT_ENDPOINTS
            if self._endpoint_mode is EndpointMode.NONE
            else _MIN_POINTS
        )
        pts = _as_points(points, min_count=min_count)
        n = pts.shape[0]

        if knots is None:
            self._alpha = _alpha_value(alpha)
            intervals = _knot_intervals(pts, self._alpha)
            knots_arr = np.concatenate([np.zeros(1, dtype=pts.dtype), np.cumsum(intervals)])
        else:
            self._alpha = None
            knots_arr = np.ravel(_as_float_array(knots)).astype(pts.dtype)
            if knots_arr.shape[0] != n:
                raise ValueError(
                    f"Got {knots_arr.shape[0]} knots for {n} points. They must have the same count"
                )
            if np.any(np.diff(knots_arr) <= 0.0):
                raise ValueError(f"Knots must be strictly increasing. Got {knots_arr.tolist()}")

        self._points = _readonly(pts.copy())
        self._knots = _readonly(knots_arr.copy())
        self._segments = tuple(self._build_segment(i) for i in range(self.curve_count))
        logger.debug(
            "Built Catmull-Rom spline: points=%d, curves=%d, endpoint_mode=%s",
            n,
            self.curve_count,
            self._endpoint_mode.name,
        )

    def _build_segment(self, curve: int) -> NUCatRomCubic:
        i = self._index_start + curve
        indices = range(i - 1, i + 3)
        origin = self._knots[i]
        return NUCatRomCubic(
            *(self.get_control_point(j) for j in indices),
            knots=[self.get_knot(j) - origin for j in indices],
        )

    @property
    def _include_endpoints(self) -> bool:
        return self._endpoint_mode is not EndpointMode.NONE

    @property
    def _index_start(self) -> int:
        return 0 if self._include_endpoints else 1

    @property
    def _index_end(self) -> int:
        return self.point_count - (1 if self._include_endpoints else 2)

    @property
    def points(self) -> npt.NDArray[np.float32 | np.float64]:
        """Read-only points of shape (n, D)."""
        return self._points

    @property
    def knots(self) -> npt.NDArray[np.float32 | np.float64]:
        """Read-only knots, one per point."""
        return self._knots

    @property
    def alpha(self) -> float | None:
        """Parametrization exponent, or None for explicit knots."""
        return self._alpha

    @property
    def endpoint_mode(self) -> EndpointMode:
        """Treatment of the first and last points."""
        return self._endpoint_mode

    @property
    def point_count(self) -> int:
        """Number of points."""
        return int(self._points.shape[0])

    @property
    def curve_count(self) -> int:
        """Number of segments the curve is made of."""
        return self._index_end - self._index_start

    @property
    def dimension(self) -> int:
        """Vector dimension of the points."""
        return int(self._points.shape[1])

    @property
    def segments(self) -> tuple[NUCatRomCubic, ...]:
        """The segments, with knots relative to their start point."""
        return self._segments

    @property
    def knot_start(self) -> float:
        """Knot value where the curve starts."""
        return float(self._knots[self._index_start])

    @property
    def knot_end(self) -> float:
        """Knot value where the curve ends."""
        return float(self._knots[self._index_end])

    @property
    def knot_range(self) -> float:
        """Length of the knot interval covered by the curve."""
        return self.knot_end - self.knot_start

    @property
    def start_point(self) -> npt.NDArray[np.float32 | np.float64]:
        """The point where the curve starts."""
        return self._points[self._index_start]

    @property
    def end_point(self) -> npt.NDArray[np.float32 | np.float64]:
        """The point where the curve ends."""
        return self._points[self._index_end]

    def get_control_point(self, index: int) -> npt.NDArray[np.float32 | np.float64]:
        """Get a point, including the virtual neighbours past either end.

        Index -1 is the point before the first one and ``point_count`` the one
        after the last. They mirror the second and second-to-last points
        through the endpoints, except with ``EndpointMode.COLLAPSE`` where they
        are the endpoints themselves.

        Raises:
            IndexError: If index is outside [-1, point_count].
        """
        n = self.point_count
        if not -1 <= index <= n:
            raise IndexError(f"Point index must be between -1 and {n}. Got {index}")
        if self._endpoint_mode is EndpointMode.COLLAPSE:
            index = min(max(index, 0), n - 1)
        if index == -1:
            return 2.0 * self._points[0] - self._points[1]
        if index == n:
            return 2.0 * self._points[n - 1] - self._points[n - 2]
        return self._points[index]

    def get_knot(self, index: int) -> float:
        """Get a knot, including the extrapolated knots at -1 and ``point_count``.

        Raises:
            IndexError: If index is outside [-1, point_count].
        """
        n = self.point_count
        if not -1 <= index <= n:
            raise IndexError(f"Knot index must be between -1 and {n}. Got {index}")
        if index == -1:
            return float(2.0 * self._knots[0] - self._knots[1])
        if index == n:
            return float(2.0 * self._knots[n - 1] - self._knots[n - 2])
        return float(self._knots[index])

    def get_knot_value(self, t: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Map a normalized parameter in [0, 1] to a knot value. Not clamped."""
        return _lerp(
            self._knots[self._index_start], self._knots[self._index_end], _as_float_array(t)
        )

    def clamp_to_knot_range(self, u: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Clamp knot value(s) to [knot_start, knot_end]."""
        return np.clip(_as_float_array(u), self.knot_start, self.knot_end)

    def _interval_indices(
        self, us: npt.NDArray[np.float32 | np.float64]
    ) -> npt.NDArray[np.intp]:
        inner = self._knots[self._index_start + 1 : self._index_end]
        return np.searchsorted(inner, us, side="right")

    def get_interval_index(self, u: npt.ArrayLike) -> npt.NDArray[np.intp]:
        """Find the curve containing each knot value.

        The last knot closes the last curve, so ``knot_end`` belongs to curve
        ``curve_count - 1``. Values outside the knot range are clamped first.

        Args:
            u (npt.ArrayLike): Knot value(s).

        Returns:
            npt.NDArray[np.intp]: Curve index(es) in [0, curve_count), with the
                shape of ``u``.
        """
        us, input_shape = _as_params(u)
        return self._interval_indices(self.clamp_to_knot_range(us)).reshape(input_shape)[()]

    def _eval_knot_value(self, u: npt.ArrayLike, n: int) -> npt.NDArray[np.float32 | np.float64]:
        us, input_shape = _as_params(u)
        us = self.clamp_to_knot_range(us)
        curves = self._interval_indices(us)
        out = np.empty((us.shape[0], self.dimension), dtype=np.result_type(self._points, us))
        for curve in np.unique(curves):
            mask = curves == curve
            origin = self._knots[self._index_start + curve]
            out[mask] = self._segments[curve].curve.eval_nth(us[mask] - origin, n)
        return _restore_shape(out, input_shape)

    def get_point(self, u: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the spline at knot value(s), clamped to the knot range.

        Args:
            u (npt.ArrayLike): Knot value(s).

        Returns:
            npt.NDArray[np.float32 | np.float64]: Point(s) of shape (D,) for
                scalar input, or (*u.shape, D) otherwise.
        """
        return self._eval_knot_value(u, 0)

    def get_derivative(self, u: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the velocity with respect to the knot value, clamped to the knot range."""
        return self._eval_knot_value(u, 1)

    def get_second_derivative(self, u: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the acceleration with respect to the knot value, clamped to the knot range."""
        return self._eval_knot_value(u, 2)

    def get_third_derivative(self, u: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the third derivative with respect to the knot value (constant per curve)."""
        return self._eval_knot_value(u, 3)

    def _eval_segment(
        self, curve: int, t: npt.ArrayLike, n: int
    ) -> npt.NDArray[np.float32 | np.float64]:
        if not 0 <= curve < self.curve_count:
            raise IndexError(
                f"Curve index must be between 0 and {self.curve_count - 1}. Got {curve}"
            )
        i = self._index_start + curve
        local = _lerp(0.0, self._knots[i + 1] - self._knots[i], _as_float_array(t))
        return self._segments[curve].curve.eval_nth(local, n)

    def get_segment_point(
        self, curve: int, t: npt.ArrayLike
    ) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate a single curve of the spline.

        Args:
            curve (int): Curve index in [0, curve_count).
            t (npt.ArrayLike): Local parameter(s), 0 at the curve start and 1
                at its end. Not clamped.

        Returns:
            npt.NDArray[np.float32 | np.float64]: Point(s) of shape (D,) for
                scalar input, or (*t.shape, D) otherwise.

        Raises:
            IndexError: If curve is out of range.
        """
        return self._eval_segment(curve, t, 0)

    def get_segment_derivative(
        self, curve: int, t: npt.ArrayLike
    ) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the velocity of a single curve with respect to the knot value.

        Raises:
            IndexError: If curve is out of range.
        """
        return self._eval_segment(curve, t, 1)

    def get_segment_second_derivative(
        self, curve: int, t: npt.ArrayLike
    ) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the acceleration of a single curve with respect to the knot value.

        Raises:
            IndexError: If curve is out of range.
        """
        return self._eval_segment(curve, t, 2)

    def _eval_nth(self, t: npt.ArrayLike, n: int) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the n-th derivative with respect to the normalized parameter."""
        values = self._eval_knot_value(self.get_knot_value(t), n)
        return values * np.asarray(self.knot_range**n, dtype=values.dtype)

    def eval(self, t: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the spline at normalized parameter(s) in [0, 1] (clamped)."""
        return self._eval_nth(t, 0)

    def eval_derivative(self, t: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the first derivative with respect to the normalized parameter."""
        return self._eval_nth(t, 1)

    def eval_second_derivative(self, t: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the second derivative with respect to the normalized parameter."""
        return self._eval_nth(t, 2)

    def eval_third_derivative(self, t: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the third derivative with respect to the normalized parameter."""
        return self._eval_nth(t, 3)

    def __repr__(self) -> str:
        return (
            f"CatRomSpline(point_count={self.point_count}, curve_count={self.curve_count}, "
            f"endpoint_mode={self._endpoint_mode.name}, knots={self._knots.tolist()})"
        )
