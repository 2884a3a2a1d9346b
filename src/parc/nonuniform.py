"""Non-uniform cubic segments parametrized by knot values.

A non-uniform segment is evaluated at a knot value ``u`` rather than at a
normalized parameter. The Catmull-Rom segment runs from ``p1`` at knot ``k1``
to ``p2`` at knot ``k2``; the outer knots ``k0`` and ``k3`` set how strongly
the neighbours ``p0`` and ``p3`` pull on the tangents.

Knots are either given explicitly or computed from the distances between
consecutive points raised to the power ``alpha``:

* ``alpha = 0`` (uniform) spaces the knots evenly, like :class:`~parc.segments.CatRomCubic`.
* ``alpha = 0.5`` (centripetal) avoids cusps and self-intersections within a segment.
* ``alpha = 1`` (chordal) spaces the knots by chord length.
"""

from __future__ import annotations

from enum import Enum
from typing import ClassVar

import numpy as np
from numpy import typing as npt

from ._vector_utils import (
    _as_float_array,
    _as_params,
    _as_points,
    _inverse_lerp,
    _lerp,
    _readonly,
    _restore_scalar_shape,
    _stack_vectors,
)
from .polynomial import Polynomial

_MIN_KNOT_INTERVAL = 1e-5
_NUM_CATROM_POINTS = 4


class CatRomType(Enum):
    """Named knot parametrizations of Catmull-Rom curves."""

    UNIFORM = "uniform"
    CENTRIPETAL = "centripetal"
    CHORDAL = "chordal"

    @property
    def alpha(self) -> float:
        """Exponent applied to the distance between consecutive points."""
        return _CATROM_ALPHAS[self]


_CATROM_ALPHAS = {
    CatRomType.UNIFORM: 0.0,
    CatRomType.CENTRIPETAL: 0.5,
    CatRomType.CHORDAL: 1.0,
}


class KnotCalcMode(Enum):
    """How the knots of a non-uniform Catmull-Rom segment were obtained."""

    MANUAL = "manual"
    AUTO = "auto"
    AUTO_UNIT_INTERVAL = "auto_unit_interval"


def _alpha_value(alpha: float | CatRomType) -> float:
    return alpha.alpha if isinstance(alpha, CatRomType) else float(alpha)


def _knot_intervals(
    points: npt.NDArray[np.float32 | np.float64], alpha: float
) -> npt.NDArray[np.float32 | np.float64]:
    """Knot spacing between consecutive points, ``|P[i+1] - P[i]|^alpha``.

    Intervals shorter than 1e-5 are replaced with 1.
    """
    sq_dist = np.sum(np.diff(points, axis=0) ** 2, axis=-1)
    intervals = sq_dist ** (0.5 * alpha)
    return np.where(intervals < _MIN_KNOT_INTERVAL, 1.0, intervals).astype(points.dtype)


def calc_catrom_knot(prev_knot: float, sq_dist: float, alpha: float | CatRomType) -> float:
    """Compute the knot following ``prev_knot``.

    Args:
        prev_knot (float): Knot of the previous point.
        sq_dist (float): Squared distance between the previous point and this one.
        alpha (float | CatRomType): Parametrization exponent.

    Returns:
        float: ``prev_knot + sq_dist^(alpha / 2)``, with intervals shorter than
            1e-5 replaced with 1 so that coincident points still get distinct
            knots.

    Example:
        >>> calc_catrom_knot(1.0, 16.0, CatRomType.CENTRIPETAL)
        3.0
    """
    interval = sq_dist ** (0.5 * _alpha_value(alpha))
    if interval < _MIN_KNOT_INTERVAL:
        interval = 1.0
    return prev_knot + interval


def calc_catrom_knots(
    points: npt.ArrayLike, alpha: float | CatRomType, unit_interval: bool = True
) -> npt.NDArray[np.float32 | np.float64]:
    """Compute the four knots of a Catmull-Rom segment from its points.

    Args:
        points (npt.ArrayLike): The points p0..p3, shape (4, D).
        alpha (float | CatRomType): Parametrization exponent.
        unit_interval (bool): Whether to scale and shift the knots so that the
            segment between p1 and p2 spans [0, 1]. Otherwise the first knot is
            0 and the others accumulate the intervals. Defaults to True.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Strictly increasing knots k0..k3.

    Raises:
        ValueError: If there are not exactly 4 points.
    """
    pts = _as_points(points, count=_NUM_CATROM_POINTS)
    i01, i12, i23 = _knot_intervals(pts, _alpha_value(alpha))
    if unit_interval:
        return np.array([-i01 / i12, 0.0, 1.0, 1.0 + i23 / i12], dtype=pts.dtype)
    return np.array([0.0, i01, i01 + i12, i01 + i12 + i23], dtype=pts.dtype)


def _as_knots(
    knots: npt.ArrayLike, count: int, dtype: np.dtype[np.float32 | np.float64]
) -> npt.NDArray[np.float32 | np.float64]:
    """Validate a strictly increasing knot vector of a given length.

    Raises:
        ValueError: If the length is wrong or the knots do not increase.
    """
    arr = np.ravel(_as_float_array(knots)).astype(dtype)
    if arr.shape[0] != count:
        raise ValueError(f"Expected {count} knots. Got {arr.shape[0]}")
    if np.any(np.diff(arr) <= 0.0):
        raise ValueError(f"Knots must be strictly increasing. Got {arr.tolist()}")
    return arr


def calculate_hermite_curve(
    p0: npt.ArrayLike,
    v0: npt.ArrayLike,
    p1: npt.ArrayLike,
    v1: npt.ArrayLike,
    k0: float = 0.0,
    k1: float = 1.0,
) -> Polynomial:
    """Build the cubic Hermite polynomial over the knot interval [k0, k1].

    The result ``P`` satisfies ``P(k0) = p0``, ``P(k1) = p1``, ``P'(k0) = v0``
    and ``P'(k1) = v1``, with derivatives taken with respect to the knot value.

    Args:
        p0 (npt.ArrayLike): Start position.
        v0 (npt.ArrayLike): Start velocity.
        p1 (npt.ArrayLike): End position.
        v1 (npt.ArrayLike): End velocity.
        k0 (float): Start knot. Defaults to 0.
        k1 (float): End knot. Defaults to 1.

    Returns:
        Polynomial: The Hermite polynomial in the knot value.

    Raises:
        ValueError: If k0 and k1 coincide, or the vectors have different
            dimensions.
    """
    h = k1 - k0
    if h == 0.0:
        raise ValueError(f"The knots of a Hermite curve must differ. Got {k0} twice")
    p0_, v0_, p1_, v1_ = _stack_vectors(p0, v0, p1, v1)
    chord = (p1_ - p0_) / h
    c2 = (3.0 * chord - 2.0 * v0_ - v1_) / h
    c3 = (v0_ + v1_ - 2.0 * chord) / (h * h)
    return Polynomial(p0_, v0_, c2, c3).compose(-k0, 1.0)


def calculate_catrom_curve(points: npt.ArrayLike, knots: npt.ArrayLike) -> Polynomial:
    """Build the non-uniform Catmull-Rom polynomial between p1 and p2.

    The tangents at p1 and p2 are those of the Barry-Goldman pyramid, so the
    polynomial is the Hermite curve over ``[k1, k2]`` with

    * ``v1 = (p1-p0)/(k1-k0) - (p2-p0)/(k2-k0) + (p2-p1)/(k2-k1)``
    * ``v2 = (p2-p1)/(k2-k1) - (p3-p1)/(k3-k1) + (p3-p2)/(k3-k2)``

    Args:
        points (npt.ArrayLike): The points p0..p3, shape (4, D).
        knots (npt.ArrayLike): Strictly increasing knots k0..k3.

    Returns:
        Polynomial: The segment polynomial in the knot value.

    Raises:
        ValueError: If there are not exactly 4 points or 4 increasing knots.
    """
    pts = _as_points(points, count=_NUM_CATROM_POINTS)
    k0, k1, k2, k3 = (float(k) for k in _as_knots(knots, _NUM_CATROM_POINTS, pts.dtype))
    p0, p1, p2, p3 = pts
    v1 = (p1 - p0) / (k1 - k0) - (p2 - p0) / (k2 - k0) + (p2 - p1) / (k2 - k1)
    v2 = (p2 - p1) / (k2 - k1) - (p3 - p1) / (k3 - k1) + (p3 - p2) / (k3 - k2)
    return calculate_hermite_curve(p1, v1, p2, v2, k1, k2)


class _KnotSegment:
    """Common storage and evaluation of the non-uniform cubic segments.

    Attributes:
        degree (ClassVar[int]): Polynomial degree, always 3.
        _points (npt.NDArray[np.float32 | np.float64]): Read-only control
            points of shape (4, D).
        _knots (npt.NDArray[np.float32 | np.float64]): Read-only knots.
        _curve (Polynomial): The segment polynomial in the knot value.
    """

    degree: ClassVar[int] = 3

    _points: npt.NDArray[np.float32 | np.float64]
    _knots: npt.NDArray[np.float32 | np.float64]
    _curve: Polynomial

    @property
    def point_matrix(self) -> npt.NDArray[np.float32 | np.float64]:
        """Read-only control points of shape (4, D)."""
        return self._points

    @property
    def knots(self) -> npt.NDArray[np.float32 | np.float64]:
        """Read-only knot values."""
        return self._knots

    @property
    def curve(self) -> Polynomial:
        """The segment polynomial, with the knot value as parameter."""
        return self._curve

    @property
    def dimension(self) -> int:
        """Vector dimension of the control points."""
        return int(self._points.shape[1])

    def __getitem__(self, index: int) -> npt.NDArray[np.float32 | np.float64]:
        """Get control point ``index``.

        Raises:
            IndexError: If index is outside [0, 3].
        """
        if not 0 <= index <= self.degree:
            raise IndexError(
                f"{type(self).__name__} point index must be between 0 and {self.degree}. "
                f"Got {index}"
            )
        return self._points[index]

    def eval(self, u: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the segment at knot value(s) u. Values outside the knots extrapolate."""
        return self._curve.eval(u)

    def eval_derivative(self, u: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the velocity with respect to the knot value."""
        return self._curve.eval_derivative(u)

    def eval_second_derivative(self, u: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the acceleration with respect to the knot value."""
        return self._curve.eval_second_derivative(u)

    def eval_third_derivative(self, u: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the third derivative with respect to the knot value (constant)."""
        return self._curve.eval_third_derivative(u)


class NUCatRomCubic(_KnotSegment):
    """Non-uniform Catmull-Rom segment running from p1 to p2.

    Without explicit knots, the knots are computed from the points with the
    exponent ``alpha``. With ``unit_interval`` (the default) they are placed so
    that the segment runs over ``u`` in [0, 1].

    Example:
        >>> seg = NUCatRomCubic([0.0, 0.0], [1.0, 1.0], [1.1, 1.0], [2.0, 0.0])
        >>> seg.eval(0.0), seg.eval(1.0)
        (array([1., 1.]), array([1.1, 1. ]))
    """

    _knot_calc_mode: KnotCalcMode
    _alpha: float | None

    def __init__(
        self,
        p0: npt.ArrayLike,
        p1: npt.ArrayLike,
        p2: npt.ArrayLike,
        p3: npt.ArrayLike,
        knots: npt.ArrayLike | None = None,
        alpha: float | CatRomType = CatRomType.CENTRIPETAL,
        unit_interval: bool = True,
    ) -> None:
        """Initialize the segment.

        Args:
            p0 (npt.ArrayLike): Point before the segment.
            p1 (npt.ArrayLike): Start point.
            p2 (npt.ArrayLike): End point.
            p3 (npt.ArrayLike): Point after the segment.
            knots (npt.ArrayLike | None): Strictly increasing knots k0..k3. If
                given, ``alpha`` and ``unit_interval`` are ignored.
            alpha (float | CatRomType): Parametrization exponent used when no
                knots are given. Defaults to centripetal.
            unit_interval (bool): Whether automatic knots map the segment to
                [0, 1]. Defaults to True.

        Raises:
            ValueError: If the points have different dimensions, or the knots
                are not 4 strictly increasing values.
        """
        self._points = _readonly(_stack_vectors(p0, p1, p2, p3))
        if knots is not None:
            self._knot_calc_mode = KnotCalcMode.MANUAL
            self._alpha = None
            knot_arr = _as_knots(knots, _NUM_CATROM_POINTS, self._points.dtype)
        else:
            self._knot_calc_mode = (
                KnotCalcMode.AUTO_UNIT_INTERVAL if unit_interval else KnotCalcMode.AUTO
            )
            self._alpha = _alpha_value(alpha)
            knot_arr = calc_catrom_knots(self._points, self._alpha, unit_interval)
        self._knots = _readonly(knot_arr)
        self._curve = calculate_catrom_curve(self._points, self._knots)

    @classmethod
    def from_point_matrix(
        cls,
        points: npt.ArrayLike,
        knots: npt.ArrayLike | None = None,
        alpha: float | CatRomType = CatRomType.CENTRIPETAL,
        unit_interval: bool = True,
    ) -> NUCatRomCubic:
        """Create a segment from a (4, D) array of points."""
        return cls(*_as_points(points, count=_NUM_CATROM_POINTS), knots, alpha, unit_interval)

    @property
    def knot_calc_mode(self) -> KnotCalcMode:
        """Whether the knots were given or computed."""
        return self._knot_calc_mode

    @property
    def alpha(self) -> float | None:
        """Parametrization exponent, or None for explicit knots."""
        return self._alpha

    @property
    def knot_start(self) -> float:
        """Knot value of p1, where the segment starts."""
        return float(self._knots[1])

    @property
    def knot_end(self) -> float:
        """Knot value of p2, where the segment ends."""
        return float(self._knots[2])

    def get_knot_value(self, t: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Map a normalized parameter in [0, 1] to a knot value in [k1, k2]."""
        return _lerp(self._knots[1], self._knots[2], _as_float_array(t))

    def get_point_weight_at_knot_value(
        self, index: int, u: npt.ArrayLike
    ) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the weight of a control point at knot value(s).

        The segment point is the weighted sum of p0..p3 with these weights,
        which add up to one.

        Args:
            index (int): Control point index in [0, 3].
            u (npt.ArrayLike): Knot value(s).

        Returns:
            npt.NDArray[np.float32 | np.float64]: Weight(s), with the shape of ``u``.

        Raises:
            IndexError: If index is outside [0, 3].
        """
        if not 0 <= index <= self.degree:
            raise IndexError(f"Catmull-Rom point index must be between 0 and 3. Got {index}")
        us, input_shape = _as_params(u)
        k0, k1, k2, k3 = self._knots
        a = _inverse_lerp(k0, k1, us)
        b = _inverse_lerp(k1, k2, us)
        c = _inverse_lerp(k2, k3, us)
        d = _inverse_lerp(k0, k2, us)
        g = _inverse_lerp(k1, k3, us)
        if index == 0:
            weights = (1 - a) * (1 - b) * (1 - d)
        elif index == 1:
            weights = (b - 1) * (a * d - a + b * (d + g - 1) - d)
        elif index == 2:  # noqa: PLR2004
            weights = -b * (b * (d + g - 1) + g * (c - 1) - d)
        else:
            weights = b * c * g
        return _restore_scalar_shape(weights, input_shape)

    def __repr__(self) -> str:
        return (
            f"NUCatRomCubic(points={self._points.tolist()}, knots={self._knots.tolist()}, "
            f"knot_calc_mode={self._knot_calc_mode.name})"
        )


class NUHermiteCubic(_KnotSegment):
    """Cubic Hermite segment over an arbitrary knot interval.

    The velocities are derivatives with respect to the knot value, so the
    same positions and velocities give a different shape for a different knot
    interval.
    """

    def __init__(
        self,
        p0: npt.ArrayLike,
        v0: npt.ArrayLike,
        p1: npt.ArrayLike,
        v1: npt.ArrayLike,
        knots: tuple[float, float] = (0.0, 1.0),
    ) -> None:
        """Initialize the segment.

        Args:
            p0 (npt.ArrayLike): Start position.
            v0 (npt.ArrayLike): Start velocity.
            p1 (npt.ArrayLike): End position.
            v1 (npt.ArrayLike): End velocity.
            knots (tuple[float, float]): Start and end knots. Defaults to (0, 1).

        Raises:
            ValueError: If the knots are not 2 strictly increasing values, or
                the vectors have different dimensions.
        """
        self._points = _readonly(_stack_vectors(p0, v0, p1, v1))
        self._knots = _readonly(_as_knots(knots, 2, self._points.dtype))
        k0, k1 = (float(k) for k in self._knots)
        self._curve = calculate_hermite_curve(*self._points, k0, k1)

    def __repr__(self) -> str:
        return f"NUHermiteCubic(points={self._points.tolist()}, knots={self._knots.tolist()})"
