"""Non-uniform rational B-splines (NURBS).

Points are evaluated as the sum of the control points weighted by their
Cox-de Boor basis functions. With weights the sum is normalized by the total
weighted basis, which makes the curve rational.
"""

from __future__ import annotations

import numpy as np
from numpy import typing as npt

from ._bspline_impl import _cox_de_boor_impl
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


class Nurbs:
    """A NURBS curve of arbitrary degree.

    Instances are immutable. Without weights the curve is a plain
    (non-rational) B-spline.

    Attributes:
        _points (npt.NDArray[np.float32 | np.float64]): Control points (n, D).
        _knots (npt.NDArray[np.float32 | np.float64]): Knot vector of length
            ``n + degree + 1``.
        _weights (npt.NDArray[np.float32 | np.float64] | None): Per-point
            weights, or None for a non-rational curve.
        _degree (int): Polynomial degree.
    """

    _points: npt.NDArray[np.float32 | np.float64]
    _knots: npt.NDArray[np.float32 | np.float64]
    _weights: npt.NDArray[np.float32 | np.float64] | None
    _degree: int

    def __init__(
        self,
        points: npt.ArrayLike,
        knots: npt.ArrayLike,
        weights: npt.ArrayLike | None = None,
        degree: int = 3,
    ) -> None:
        """Initialize a NURBS curve.

        Args:
            points (npt.ArrayLike): Control points of shape (n, D), or (n,) for
                a 1D curve.
            knots (npt.ArrayLike): Non-decreasing knot vector of length
                ``n + degree + 1``.
            weights (npt.ArrayLike | None): One weight per control point, or
                None for a non-rational curve. Defaults to None.
            degree (int): Polynomial degree. Defaults to 3.

        Raises:
            TypeError: If the knots or weights are not one-dimensional.
            ValueError: If the weights or knots have the wrong length, or the
                degree is negative.
        """
        pts = _as_points(points)
        if weights is not None:
            weights_arr = _as_float_array(weights)
            if weights_arr.ndim != 1:
                raise TypeError("weights must be a 1D array")
            if weights_arr.size != pts.shape[0]:
                raise ValueError(
                    f"The weights array has to match the number of points. "
                    f"Got an array of {weights_arr.size} weights, expected {pts.shape[0]}"
                )
            self._weights = _readonly(weights_arr.copy())
        else:
            self._weights = None

        self._points = _readonly(pts.copy())
        self._knots = _readonly(check_knot_vector(knots, degree, pts.shape[0]).copy())
        self._degree = degree

    @classmethod
    def uniform_bspline(
        cls,
        points: npt.ArrayLike,
        degree: int = 3,
        open: bool = True,  # noqa: A002
    ) -> Nurbs:
        """Create a non-rational curve with a unit-spaced knot vector.

        Args:
            points (npt.ArrayLike): Control points of shape (n, D).
            degree (int): Polynomial degree. Defaults to 3.
            open (bool): Whether to clamp the ends of the knot vector. Defaults
                to True.

        Returns:
            Nurbs: The curve, without weights.
        """
        pts = _as_points(points)
        return cls(pts, create_uniform_knot_vector(degree, pts.shape[0], open=open), None, degree)

    @staticmethod
    def unweighted_weights(count: int) -> npt.NDArray[np.float64]:
        """Weights that leave a curve unchanged: ``count`` ones."""
        return np.ones(count, dtype=np.float64)

    @property
    def points(self) -> npt.NDArray[np.float32 | np.float64]:
        """Read-only control points of shape (n, D)."""
        return self._points

    @property
    def knots(self) -> npt.NDArray[np.float32 | np.float64]:
        """Read-only knot vector."""
        return self._knots

    @property
    def weights(self) -> npt.NDArray[np.float32 | np.float64] | None:
        """Read-only weights, or None for a non-rational curve."""
        return self._weights

    @property
    def degree(self) -> int:
        """The polynomial degree."""
        return self._degree

    @property
    def is_rational(self) -> bool:
        """Whether the curve has weights."""
        return self._weights is not None

    @property
    def order(self) -> int:
        """The order, ``degree + 1``."""
        return self._degree + 1

    @property
    def point_count(self) -> int:
        """Number of control points."""
        return int(self._points.shape[0])

    @property
    def knot_count(self) -> int:
        """Number of knots, ``point_count + degree + 1``."""
        return self.point_count + self._degree + 1

    @property
    def segment_count(self) -> int:
        """Number of knot spans in the curve domain."""
        return self.knot_count - 2 * self._degree - 1

    @property
    def dimension(self) -> int:
        """The dimension of the control points."""
        return int(self._points.shape[1])

    def get_basis(self, index: int, order: int, u: float) -> float:
        """Evaluate the Cox-de Boor basis function ``N(index, order)`` at a knot value.

        Args:
            index (int): Basis function index.
            order (int): Basis order (degree + 1).
            u (float): Knot value.

        Returns:
            float: Basis function value.
        """
        return _cox_de_boor_impl(self._knots, index, order, u)

    def _basis_row(self, u: float) -> npt.NDArray[np.float64]:
        """Basis values of every control point at u, multiplied by the weights if any."""
        basis = np.array([self.get_basis(i, self.order, u) for i in range(self.point_count)])
        if self._weights is not None:
            basis = basis * self._weights
        return basis

    def get_weighted_basis(self, index: int, u: npt.ArrayLike) -> npt.NDArray[np.float64]:
        """Evaluate the contribution of one control point, normalized by the total.

        Args:
            index (int): Control point index in [0, point_count).
            u (npt.ArrayLike): Knot value(s).

        Returns:
            npt.NDArray[np.float64]: Normalized basis value(s), with the shape
                of ``u``.

        Raises:
            IndexError: If index is out of range.
        """
        if not 0 <= index < self.point_count:
            raise IndexError(
                f"Point index must be between 0 and {self.point_count - 1}. Got {index}"
            )
        us, input_shape = _as_params(u)
        values = np.empty(us.shape[0], dtype=np.float64)
        for j, uj in enumerate(us):
            row = self._basis_row(uj)
            total = row.sum()
            values[j] = 0.0 if total == 0.0 else row[index] / total
        return _restore_scalar_shape(values, input_shape)

    def get_point_by_knot_value(self, u: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the curve at knot value(s).

        Args:
            u (npt.ArrayLike): Knot value(s).

        Returns:
            npt.NDArray[np.float32 | np.float64]: Point(s) of shape (D,) for
                scalar input, or (*u.shape, D) otherwise.
        """
        us, input_shape = _as_params(u)
        rows = np.array([self._basis_row(uj) for uj in us]).reshape(us.shape[0], self.point_count)
        values = rows @ self._points
        if self._weights is not None:
            values = values / rows.sum(axis=1)[:, np.newaxis]
        return _restore_shape(values.astype(self._points.dtype, copy=False), input_shape)

    def get_point(self, t: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the curve at normalized parameter(s) in [0, 1].

        The parameter is mapped linearly onto ``[knots[degree], knots[-degree-1]]``.
        """
        u = _lerp(
            self._knots[self._degree],
            self._knots[self.knot_count - self._degree - 1],
            _as_float_array(t),
        )
        return self.get_point_by_knot_value(u)

    def eval(self, t: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the curve at normalized parameter(s). Same as :meth:`get_point`."""
        return self.get_point(t)

    def smooth(self, iterations: int = 1) -> Nurbs:
        """Smooth the control polygon by repeated neighbour averaging.

        Each iteration replaces every interior control point by
        ``0.5 * P[i] + 0.25 * (P[i-1] + P[i+1])``. The end points are kept.

        Args:
            iterations (int): Number of smoothing passes. Defaults to 1.

        Returns:
            Nurbs: A new curve with the same knots, weights and degree.

        Raises:
            ValueError: If iterations is smaller than 1.
        """
        if iterations < 1:
            raise ValueError("Number of iterations must be at least 1.")
        pts = self._points.copy()
        for _ in range(iterations):
            smoothed = pts.copy()
            smoothed[1:-1] = 0.5 * pts[1:-1] + 0.25 * (pts[:-2] + pts[2:])
            pts = smoothed
        weights = None if self._weights is None else self._weights.copy()
        return Nurbs(pts, self._knots.copy(), weights, self._degree)

    def __repr__(self) -> str:
        return (
            f"Nurbs(degree={self._degree}, point_count={self.point_count}, "
            f"rational={self.is_rational})"
        )
