"""Uniform spline segments defined by a characteristic matrix.

Each segment stores its control points and the polynomial obtained as
``characteristic_matrix @ points``. The polynomial is computed once at
construction and every evaluation goes through it.
"""

from __future__ import annotations

from abc import ABC
from typing import ClassVar, TypeVar

import numpy as np
from numpy import typing as npt

from ._vector_utils import _as_points, _lerp, _readonly, _stack_vectors
from .characteristic import (
    SplineBasis,
    get_characteristic_matrix,
    get_conversion_matrix,
    get_inverse_characteristic_matrix,
)
from .polynomial import Polynomial

S = TypeVar("S", bound="UniformSegment")
C = TypeVar("C", bound="CubicSegment")


def _de_casteljau_split(
    points: npt.NDArray[np.float32 | np.float64], t: float
) -> tuple[npt.NDArray[np.float32 | np.float64], npt.NDArray[np.float32 | np.float64]]:
    """Split Bezier control points at t.

    Returns:
        tuple: Control points of the left and right sub-curves.
    """
    left = [points[0]]
    right = [points[-1]]
    work = points
    for _ in range(points.shape[0] - 1):
        work = work[:-1] + (work[1:] - work[:-1]) * t
        left.append(work[0])
        right.append(work[-1])
    return np.stack(left), np.stack(right[::-1])


class UniformSegment(ABC):
    """Base class of the uniform spline segments.

    Subclasses define the basis (and therefore the characteristic matrix) and
    the constructor signature naming their control points.

    Attributes:
        basis (ClassVar[SplineBasis]): Spline basis of the segment type.
        degree (ClassVar[int]): Polynomial degree of the segment type.
        _points (npt.NDArray[np.float32 | np.float64]): Read-only control
            points of shape (degree+1, D).
        _curve (Polynomial): The segment polynomial.
    """

    basis: ClassVar[SplineBasis]
    degree: ClassVar[int]

    _points: npt.NDArray[np.float32 | np.float64]
    _curve: Polynomial

    def __init__(self, *points: npt.ArrayLike) -> None:
        """Initialize the segment from its control points.

        Args:
            *points (npt.ArrayLike): Exactly degree+1 vectors of the same
                dimension (1 to 4).

        Raises:
            ValueError: If the number of points is wrong or their dimensions
                differ or are not supported.
        """
        if len(points) != self.degree + 1:
            raise ValueError(
                f"{type(self).__name__} requires {self.degree + 1} points. Got {len(points)}"
            )
        self._points = _readonly(_stack_vectors(*points))
        matrix = get_characteristic_matrix(self.basis).astype(self._points.dtype)
        self._curve = Polynomial.from_coefficients(matrix @ self._points)

    @classmethod
    def from_point_matrix(cls: type[S], points: npt.ArrayLike) -> S:
        """Create a segment from a (degree+1, D) array of control points."""
        return cls(*_as_points(points, count=cls.degree + 1))

    @classmethod
    def from_polynomial(cls: type[S], curve: Polynomial) -> S:
        """Create the segment whose polynomial is ``curve``.

        Args:
            curve (Polynomial): Target polynomial.

        Returns:
            The segment reproducing ``curve``.

        Raises:
            ValueError: If the polynomial degree exceeds the segment degree.
        """
        if curve.degree > cls.degree:
            raise ValueError(
                f"Cannot represent a degree {curve.degree} polynomial as a "
                f"degree {cls.degree} {cls.__name__}"
            )
        inverse = get_inverse_characteristic_matrix(cls.basis).astype(curve.dtype)
        return cls(*(inverse @ curve.coefficients[: cls.degree + 1]))

    @classmethod
    def lerp(cls: type[S], a: S, b: S, t: float) -> S:
        """Linearly interpolate the control points of two segments."""
        return cls(*_lerp(a.point_matrix, b.point_matrix, t))

    @property
    def point_matrix(self) -> npt.NDArray[np.float32 | np.float64]:
        """Read-only control points of shape (degree+1, D)."""
        return self._points

    @property
    def curve(self) -> Polynomial:
        """The polynomial of the segment."""
        return self._curve

    @property
    def dimension(self) -> int:
        """Vector dimension of the control points."""
        return int(self._points.shape[1])

    def __getitem__(self, index: int) -> npt.NDArray[np.float32 | np.float64]:
        """Get control point ``index``.

        Raises:
            IndexError: If index is outside [0, degree].
        """
        if not 0 <= index <= self.degree:
            raise IndexError(
                f"{type(self).__name__} point index must be between 0 and {self.degree}. "
                f"Got {index}"
            )
        return self._points[index]

    def eval(self, t: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the segment at t. Values outside [0, 1] extrapolate."""
        return self._curve.eval(t)

    def eval_derivative(self, t: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the velocity at t."""
        return self._curve.eval_derivative(t)

    def eval_second_derivative(self, t: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the acceleration at t."""
        return self._curve.eval_second_derivative(t)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(points={self._points.tolist()})"


class CubicSegment(UniformSegment):
    """Base class of the cubic segments, which also expose the jerk."""

    degree: ClassVar[int] = 3

    def eval_third_derivative(self, t: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the third derivative at t (constant)."""
        return self._curve.eval_third_derivative(t)

    def convert(self, target: type[C]) -> C:
        """Express the same curve as another cubic segment type.

        Args:
            target (type[CubicSegment]): Target segment class.

        Returns:
            CubicSegment: A segment of type ``target`` with identical polynomial.

        Raises:
            TypeError: If target is not a cubic segment class.

        Example:
            >>> seg = BezierCubic(0.0, 1.0, 2.0, 3.0)
            >>> seg.convert(HermiteCubic).point_matrix.ravel()
            array([0., 3., 3., 3.])
        """
        if not (isinstance(target, type) and issubclass(target, CubicSegment)):
            raise TypeError("target must be a cubic segment class")
        conversion = get_conversion_matrix(
            get_characteristic_matrix(self.basis), get_characteristic_matrix(target.basis)
        ).astype(self._points.dtype)
        return target(*(conversion @ self._points))


class BezierQuad(UniformSegment):
    """Quadratic Bezier segment through p0 and p2, pulled towards p1."""

    basis = SplineBasis.QUADRATIC_BEZIER
    degree = 2

    def __init__(self, p0: npt.ArrayLike, p1: npt.ArrayLike, p2: npt.ArrayLike) -> None:
        super().__init__(p0, p1, p2)

    def split(self, t: float) -> tuple[BezierQuad, BezierQuad]:
        """Split the segment at t using De Casteljau's algorithm."""
        left, right = _de_casteljau_split(self._points, t)
        return BezierQuad(*left), BezierQuad(*right)


class BezierCubic(CubicSegment):
    """Cubic Bezier segment through p0 and p3, with handles p1 and p2.

    Example:
        >>> seg = BezierCubic([0.0, 0.0], [0.0, 1.0], [1.0, 1.0], [1.0, 0.0])
        >>> seg.eval(0.5)
        array([0.5 , 0.75])
    """

    basis = SplineBasis.CUBIC_BEZIER

    def __init__(
        self, p0: npt.ArrayLike, p1: npt.ArrayLike, p2: npt.ArrayLike, p3: npt.ArrayLike
    ) -> None:
        super().__init__(p0, p1, p2, p3)

    def split(self, t: float) -> tuple[BezierCubic, BezierCubic]:
        """Split the segment at t using De Casteljau's algorithm.

        Args:
            t (float): Split parameter.

        Returns:
            tuple[BezierCubic, BezierCubic]: Segments covering [0, t] and [t, 1]
                of the original curve.
        """
        left, right = _de_casteljau_split(self._points, t)
        return BezierCubic(*left), BezierCubic(*right)


class HermiteCubic(CubicSegment):
    """Cubic Hermite segment from positions p0, p1 and velocities v0, v1."""

    basis = SplineBasis.CUBIC_HERMITE

    def __init__(
        self, p0: npt.ArrayLike, v0: npt.ArrayLike, p1: npt.ArrayLike, v1: npt.ArrayLike
    ) -> None:
        super().__init__(p0, v0, p1, v1)


class CatRomCubic(CubicSegment):
    """Uniform Catmull-Rom segment running from p1 to p2."""

    basis = SplineBasis.CUBIC_CATMULL_ROM

    def __init__(
        self, p0: npt.ArrayLike, p1: npt.ArrayLike, p2: npt.ArrayLike, p3: npt.ArrayLike
    ) -> None:
        super().__init__(p0, p1, p2, p3)


class UBSCubic(CubicSegment):
    """Uniform cubic B-spline segment. It approximates, rather than passes through, its points."""

    basis = SplineBasis.CUBIC_UNIFORM_BSPLINE

    def __init__(
        self, p0: npt.ArrayLike, p1: npt.ArrayLike, p2: npt.ArrayLike, p3: npt.ArrayLike
    ) -> None:
        super().__init__(p0, p1, p2, p3)
