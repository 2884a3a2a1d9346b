"""B-spline curves with arbitrary degree and knot vector.

A :class:`Bspline` of degree ``p`` with ``n`` control points has
``n + p + 1`` knots. The curve is defined over the internal knot range
``[knots[p], knots[n]]``, which :meth:`Bspline.get_point` maps to ``[0, 1]``.
"""

from __future__ import annotations

import logging

import numpy as np
from numpy import typing as npt

from ._bspline_impl import (
    _cox_de_boor_impl,
    _de_boor_core,
    _derivative_points_core,
    _find_knot_spans_core,
)
from ._vector_utils import (
    _as_float_array,
    _as_params,
    _as_points,
    _lerp,
    _readonly,
    _restore_scalar_shape,
    _restore_shape,
)
from .knots import check_knot_vector, create_uniform_knot_vector

logger = logging.getLogger(__name__)


class Bspline:
    """A non-rational B-spline curve.

    Instances are immutable: the control points and knots are stored as
    read-only arrays. Evaluation allocates its scratch space per call, so a
    single instance can be shared between threads.

    Attributes:
        _points (npt.NDArray[np.float32 | np.float64]): Control points (n, D).
        _knots (npt.NDArray[np.float32 | np.float64]): Knot vector of length
            ``n + degree + 1``.
        _degree (int): Polynomial degree.
    """

    _points: npt.NDArray[np.float32 | np.float64]
    _knots: npt.NDArray[np.float32 | np.float64]
    _degree: int

    def __init__(self, points: npt.ArrayLike, knots: npt.ArrayLike, degree: int = 3) -> None:
        """Initialize a B-spline.

        Args:
            points (npt.ArrayLike): Control points of shape (n, D), or (n,) for
                a 1D curve.
            knots (npt.ArrayLike): Non-decreasing knot vector of length
                ``n + degree + 1``.
            degree (int): Polynomial degree. Defaults to 3.

        Raises:
            TypeError: If the points or knots have the wrong number of
                dimensions.
            ValueError: If degree is negative, there are fewer than
                ``degree + 1`` points, or the knot vector has the wrong length
                or is decreasing.
        """
        pts = _as_points(points, min_count=max(degree, 0) + 1)
        knots_arr = check_knot_vector(knots, degree, pts.shape[0])

        self._points = _readonly(pts.copy())
        self._knots = _readonly(knots_arr.copy())
        self._degree = degree

    @classmethod
    def uniform(
        cls,
        points: npt.ArrayLike,
        degree: int = 3,
        open: bool = False,  # noqa: A002
    ) -> Bspline:
        """Create a B-spline with a unit-spaced knot vector.

        Args:
            points (npt.ArrayLike): Control points of shape (n, D).
            degree (int): Polynomial degree. Values below 1 are raised to 1.
                Defaults to 3.
            open (bool): Whether to clamp the knot vector so that the curve
                starts and ends at the first and last control points.
                Defaults to False.

        Returns:
            Bspline: The B-spline.

        Raises:
            ValueError: If there are fewer than ``degree + 1`` points.

        Example:
            >>> spline = Bspline.uniform([[0.0, 0.0], [1.0, 2.0], [2.0, 0.0]], degree=2, open=True)
            >>> spline.get_point(0.0)
            array([0., 0.])
        """
        pts = _as_points(points)
        degree = max(degree, 1)
        knots = create_uniform_knot_vector(degree, pts.shape[0], open=open)
        logger.debug(
            "Creating uniform B-spline: degree=%d, points=%d, open=%s",
            degree,
            pts.shape[0],
            open,
        )
        return cls(pts, knots, degree)

    @property
    def degree(self) -> int:
        """The polynomial degree."""
        return self._degree

    @property
    def order(self) -> int:
        """The order, ``degree + 1``."""
        return self._degree + 1

    @property
    def points(self) -> npt.NDArray[np.float32 | np.float64]:
        """Read-only control points of shape (n, D)."""
        return self._points

    @property
    def knots(self) -> npt.NDArray[np.float32 | np.float64]:
        """Read-only knot vector."""
        return self._knots

    @property
    def point_count(self) -> int:
        """Number of control points."""
        return int(self._points.shape[0])

    @property
    def knot_count(self) -> int:
        """Number of knots, ``point_count + degree + 1``."""
        return int(self._knots.shape[0])

    @property
    def dimension(self) -> int:
        """The dimension of the control points."""
        return int(self._points.shape[1])

    @property
    def dtype(self) -> np.dtype[np.float32 | np.float64]:
        """The floating dtype of the evaluated points."""
        return np.result_type(self._points, self._knots)

    @property
    def internal_knot_index_start(self) -> int:
        """Index of the first knot of the curve domain."""
        return self._degree

    @property
    def internal_knot_index_end(self) -> int:
        """Index of the last knot of the curve domain."""
        return self.knot_count - self._degree - 1

    @property
    def internal_knot_count(self) -> int:
        """Number of knots in the curve domain, both ends included."""
        return self.knot_count - 2 * self._degree

    @property
    def segment_count(self) -> int:
        """Number of knot spans in the curve domain, empty ones included."""
        return self.internal_knot_count - 1

    @property
    def internal_knot_value_start(self) -> float:
        """Knot value where the curve domain starts."""
        return float(self._knots[self.internal_knot_index_start])

    @property
    def internal_knot_value_end(self) -> float:
        """Knot value where the curve domain ends."""
        return float(self._knots[self.internal_knot_index_end])

    @property
    def is_open(self) -> bool:
        """Whether the first and last ``degree + 1`` knots are repeated."""
        k = self._knots
        kc = self.knot_count
        return all(k[i] == k[i + 1] and k[kc - 1 - i] == k[kc - 2 - i] for i in range(self._degree))

    def get_knot_value_at(self, t: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Map a normalized parameter in [0, 1] to a knot value in the curve domain.

        Args:
            t (npt.ArrayLike): Normalized parameter(s). Not clamped.

        Returns:
            npt.NDArray[np.float32 | np.float64]: Knot value(s), with the shape
                of ``t``.
        """
        return _lerp(
            self._knots[self.internal_knot_index_start],
            self._knots[self.internal_knot_index_end],
            _as_float_array(t),
        )

    def _find_spans(self, us: npt.NDArray[np.float32 | np.float64]) -> npt.NDArray[np.int64]:
        spans = np.empty(us.shape[0], dtype=np.int64)
        _find_knot_spans_core(self._knots, self._degree, us, spans)
        return spans

    def _de_boor(
        self, spans: npt.NDArray[np.int64], us: npt.NDArray[np.float32 | np.float64]
    ) -> npt.NDArray[np.float32 | np.float64]:
        dtype = np.result_type(self._points, self._knots, us)
        buf = np.empty((self._degree + 1, self.dimension), dtype=dtype)
        out = np.empty((us.shape[0], self.dimension), dtype=dtype)
        _de_boor_core(self._points, self._knots, self._degree, spans, us, buf, out)
        return out

    def find_knot_span(self, u: npt.ArrayLike) -> npt.NDArray[np.int64]:
        """Find the knot span index containing each knot value.

        The span of ``u`` is the index ``k`` in
        ``[internal_knot_index_start, internal_knot_index_end - 1]`` with
        ``knots[k] <= u < knots[k+1]``. Values past the end of the domain fall
        in the last span and values before its start in the first one.

        Args:
            u (npt.ArrayLike): Knot value(s).

        Returns:
            npt.NDArray[np.int64]: Span index(es), with the shape of ``u``.
        """
        us, input_shape = _as_params(u)
        return self._find_spans(np.ascontiguousarray(us)).reshape(input_shape)[()]

    def eval_de_boor(
        self, knot_index: int, u: npt.ArrayLike
    ) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the curve at knot value(s) with De Boor's algorithm on a given span.

        Args:
            knot_index (int): Knot span used for the evaluation, in
                ``[internal_knot_index_start, internal_knot_index_end - 1]``.
            u (npt.ArrayLike): Knot value(s). Values outside the span
                extrapolate its polynomial piece.

        Returns:
            npt.NDArray[np.float32 | np.float64]: Point(s) of shape (D,) for
                scalar input, or (*u.shape, D) otherwise.

        Raises:
            IndexError: If knot_index is outside the curve domain.
        """
        start = self.internal_knot_index_start
        end = self.internal_knot_index_end
        if not start <= knot_index < end:
            raise IndexError(f"Knot index must be between {start} and {end - 1}. Got {knot_index}")
        us, input_shape = _as_params(u)
        us = np.ascontiguousarray(us)
        spans = np.full(us.shape[0], knot_index, dtype=np.int64)
        return _restore_shape(self._de_boor(spans, us), input_shape)

    def get_point_by_knot_value(self, u: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the curve at knot value(s).

        Args:
            u (npt.ArrayLike): Knot value(s). Values outside the curve domain
                extrapolate the first or last polynomial piece.

        Returns:
            npt.NDArray[np.float32 | np.float64]: Point(s) of shape (D,) for
                scalar input, or (*u.shape, D) otherwise.
        """
        us, input_shape = _as_params(u)
        us = np.ascontiguousarray(us)
        return _restore_shape(self._de_boor(self._find_spans(us), us), input_shape)

    def get_point(self, t: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the curve at normalized parameter(s) in [0, 1].

        Args:
            t (npt.ArrayLike): Normalized parameter(s). Not clamped.

        Returns:
            npt.NDArray[np.float32 | np.float64]: Point(s) of shape (D,) for
                scalar input, or (*t.shape, D) otherwise.
        """
        return self.get_point_by_knot_value(self.get_knot_value_at(_as_float_array(t)))

    def get_point_by_knot_index(self, index: int) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the curve at the value of a knot.

        Knots outside the curve domain are evaluated on the closest internal
        span, so they extrapolate the first or last polynomial piece.

        Args:
            index (int): Knot index in [0, knot_count).

        Returns:
            npt.NDArray[np.float32 | np.float64]: Point of shape (D,).

        Raises:
            IndexError: If index is out of range.
        """
        if not 0 <= index < self.knot_count:
            raise IndexError(
                f"Knot index must be between 0 and {self.knot_count - 1}. Got {index}"
            )
        span = min(
            max(index, self.internal_knot_index_start),
            self.internal_knot_index_end - 1,
        )
        return self.eval_de_boor(span, self._knots[index])

    def get_segment_point(
        self, segment: int, t: npt.ArrayLike
    ) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate a single knot span of the curve.

        Args:
            segment (int): Segment index in [0, segment_count).
            t (npt.ArrayLike): Local parameter(s), 0 at the segment start and 1
                at its end. Not clamped.

        Returns:
            npt.NDArray[np.float32 | np.float64]: Point(s) of shape (D,) for
                scalar input, or (*t.shape, D) otherwise.

        Raises:
            IndexError: If segment is out of range.
        """
        if not 0 <= segment < self.segment_count:
            raise IndexError(
                f"Segment index must be between 0 and {self.segment_count - 1}. Got {segment}"
            )
        span = self._degree + segment
        u = _lerp(self._knots[span], self._knots[span + 1], _as_float_array(t))
        return self.eval_de_boor(span, u)

    def get_point_weight_at_knot_value(
        self, point: int, u: npt.ArrayLike
    ) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the basis function of a control point at knot value(s).

        Args:
            point (int): Control point index in [0, point_count).
            u (npt.ArrayLike): Knot value(s).

        Returns:
            npt.NDArray[np.float32 | np.float64]: Basis value(s), with the shape
                of ``u``.

        Raises:
            IndexError: If point is out of range.

        Example:
            >>> spline = Bspline.uniform([0.0, 1.0, 2.0], degree=1, open=True)
            >>> float(spline.get_point_weight_at_knot_value(1, 1.0))
            1.0
        """
        if not 0 <= point < self.point_count:
            raise IndexError(
                f"Point index must be between 0 and {self.point_count - 1}. Got {point}"
            )
        us, input_shape = _as_params(u)
        weights = np.array(
            [_cox_de_boor_impl(self._knots, point, self.order, ui) for ui in us],
            dtype=np.result_type(self._knots, us),
        )
        return _restore_scalar_shape(weights, input_shape)

    def get_point_knot_and_weight_by_local_span(
        self, point: int, t: npt.ArrayLike
    ) -> tuple[npt.NDArray[np.float32 | np.float64], npt.NDArray[np.float32 | np.float64]]:
        """Evaluate the basis function of a control point over its own support.

        Args:
            point (int): Control point index in [0, point_count).
            t (npt.ArrayLike): Local parameter(s) over the support
                ``[knots[point], knots[point + degree + 1]]``.

        Returns:
            tuple[npt.NDArray[np.float32 | np.float64], npt.NDArray[np.float32 | np.float64]]:
                The knot value(s) and the basis value(s) there.

        Raises:
            IndexError: If point is out of range.
        """
        if not 0 <= point < self.point_count:
            raise IndexError(
                f"Point index must be between 0 and {self.point_count - 1}. Got {point}"
            )
        u = _lerp(self._knots[point], self._knots[point + self._degree + 1], _as_float_array(t))
        return u, self.get_point_weight_at_knot_value(point, u)

    def differentiate(self) -> Bspline:
        """Compute the derivative B-spline with respect to the knot value.

        The derivative has degree ``degree - 1``, control points
        ``degree * (P[i+1] - P[i]) / (knots[i+degree+1] - knots[i+1])`` (zero
        where the knots coincide) and the knot vector without its first and
        last entries, so it shares the curve domain.

        Returns:
            Bspline: The derivative curve.

        Raises:
            ValueError: If the degree is 0.
        """
        if self._degree == 0:
            raise ValueError("Cannot differentiate a B-spline of degree 0")
        out = np.empty(
            (self.point_count - 1, self.dimension),
            dtype=np.result_type(self._points, self._knots),
        )
        _derivative_points_core(self._points, self._knots, self._degree, out)
        logger.debug("Differentiating B-spline of degree %d", self._degree)
        return Bspline(out, self._knots[1:-1], self._degree - 1)

    def _eval_nth(self, t: npt.ArrayLike, n: int) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the n-th derivative with respect to the normalized parameter."""
        u = self.get_knot_value_at(_as_float_array(t))
        if n > self._degree:
            return np.zeros((*np.shape(u), self.dimension), dtype=self.dtype)
        curve = self
        for _ in range(n):
            curve = curve.differentiate()
        scale = (self.internal_knot_value_end - self.internal_knot_value_start) ** n
        return curve.get_point_by_knot_value(u) * np.asarray(scale, dtype=self.dtype)

    def eval(self, t: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the curve at normalized parameter(s). Same as :meth:`get_point`."""
        return self.get_point(t)

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
            f"Bspline(degree={self._degree}, point_count={self.point_count}, "
            f"dimension={self.dimension}, knots={self._knots.tolist()})"
        )
