"""Cubic polynomials with vector-valued coefficients.

A polynomial ``P(t) = c0 + c1*t + c2*t^2 + c3*t^3`` is stored as a read-only
array of shape (4, D), where row ``i`` is the coefficient of ``t^i``. Every
spline segment in the package is evaluated through one of these.
"""

from __future__ import annotations

import numpy as np
from numpy import typing as npt

from ._vector_utils import (
    _as_float_array,
    _as_params,
    _check_dimension,
    _readonly,
    _restore_shape,
)
from .tolerance import is_almost_zero

_NUM_COEFFICIENTS = 4


class Polynomial:
    """A polynomial of degree at most 3 with vector coefficients.

    Instances are immutable. Arithmetic and calculus operations return new
    polynomials.

    Attributes:
        _coefficients (npt.NDArray[np.float32 | np.float64]): Read-only array of
            shape (4, D) holding the coefficients c0..c3.
    """

    _coefficients: npt.NDArray[np.float32 | np.float64]

    def __init__(
        self,
        c0: npt.ArrayLike,
        c1: npt.ArrayLike,
        c2: npt.ArrayLike | None = None,
        c3: npt.ArrayLike | None = None,
    ) -> None:
        """Initialize a polynomial from its coefficients.

        Scalar coefficients are broadcast to the dimension of the vector ones,
        so ``Polynomial([1, 2], [0, 1])`` is a 2D line.

        Args:
            c0 (npt.ArrayLike): Constant coefficient.
            c1 (npt.ArrayLike): Linear coefficient.
            c2 (npt.ArrayLike | None): Quadratic coefficient. Defaults to zero.
            c3 (npt.ArrayLike | None): Cubic coefficient. Defaults to zero.

        Raises:
            ValueError: If the coefficients have incompatible dimensions.
        """
        given = [np.atleast_1d(_as_float_array(c)) for c in (c0, c1)]
        zero = np.zeros(1, dtype=np.result_type(*given))
        coeffs = given + [
            zero if c is None else np.atleast_1d(_as_float_array(c)) for c in (c2, c3)
        ]
        if any(c.ndim != 1 for c in coeffs):
            raise ValueError("Polynomial coefficients must be scalars or 1D vectors")
        dim = max(c.shape[0] for c in coeffs)
        if any(c.shape[0] not in (1, dim) for c in coeffs):
            raise ValueError(
                f"Polynomial coefficients must share the same dimension. "
                f"Got {[c.shape[0] for c in coeffs]}"
            )
        _check_dimension(dim)
        dtype = np.result_type(*coeffs)
        table = np.empty((_NUM_COEFFICIENTS, dim), dtype=dtype)
        for i, c in enumerate(coeffs):
            table[i] = c
        self._coefficients = _readonly(table)

    @classmethod
    def from_coefficients(cls, coefficients: npt.ArrayLike) -> Polynomial:
        """Create a polynomial from a coefficient table.

        Args:
            coefficients (npt.ArrayLike): Array of shape (k, D), or (k,) for a
                1D polynomial, with 1 <= k <= 4. Row ``i`` is the coefficient of
                ``t^i``. Missing higher-order rows are zero.

        Returns:
            Polynomial: The polynomial.

        Raises:
            ValueError: If the table is empty or has more than 4 rows.

        Example:
            >>> Polynomial.from_coefficients([[0.0, 1.0], [1.0, 0.0]]).eval(2.0)
            array([2., 1.])
        """
        table = _as_float_array(coefficients)
        if table.ndim == 1:
            table = table.reshape(-1, 1)
        num_rows = table.shape[0]
        if not 1 <= num_rows <= _NUM_COEFFICIENTS:
            raise ValueError(f"Expected between 1 and 4 coefficients. Got {num_rows}")
        zeros = np.zeros(table.shape[1], dtype=table.dtype)
        rows = [table[i] if i < num_rows else zeros for i in range(_NUM_COEFFICIENTS)]
        return cls(*rows)

    @property
    def coefficients(self) -> npt.NDArray[np.float32 | np.float64]:
        """Read-only coefficient table of shape (4, D)."""
        return self._coefficients

    @property
    def dimension(self) -> int:
        """The dimension of the vector space the polynomial maps into."""
        return int(self._coefficients.shape[1])

    @property
    def dtype(self) -> np.dtype[np.float32 | np.float64]:
        """The floating dtype of the coefficients."""
        return self._coefficients.dtype

    @property
    def degree(self) -> int:
        """Effective degree: index of the highest coefficient that is not almost zero.

        Coefficients are compared relative to the largest coefficient
        magnitude, so the result does not depend on the scale of the curve.
        A constant (or the zero polynomial) has degree 0.
        """
        scale = float(np.max(np.abs(self._coefficients)))
        if scale == 0.0:
            return 0
        for i in range(_NUM_COEFFICIENTS - 1, 0, -1):
            if not np.all(is_almost_zero(self._coefficients[i] / scale, self.dtype)):
                return i
        return 0

    def get_coefficient(self, index: int) -> npt.NDArray[np.float32 | np.float64]:
        """Get the coefficient of ``t^index``.

        Raises:
            IndexError: If index is not in [0, 3].
        """
        if not 0 <= index < _NUM_COEFFICIENTS:
            raise IndexError(f"Polynomial coefficient index must be between 0 and 3. Got {index}")
        return self._coefficients[index]

    def eval(self, t: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the polynomial using Horner's scheme.

        Args:
            t (npt.ArrayLike): Parameter value(s). Not clamped.

        Returns:
            npt.NDArray[np.float32 | np.float64]: Array of shape (D,) for scalar
                input, or (*t.shape, D) otherwise.
        """
        pts, input_shape = _as_params(t)
        c = self._coefficients
        u = pts[:, np.newaxis]
        values = ((c[3] * u + c[2]) * u + c[1]) * u + c[0]
        return _restore_shape(values, input_shape)

    def eval_derivative(self, t: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the first derivative at t."""
        return self.differentiate(1).eval(t)

    def eval_second_derivative(self, t: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the second derivative at t."""
        return self.differentiate(2).eval(t)

    def eval_third_derivative(self, t: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the third derivative at t. It is constant and equal to ``6*c3``."""
        return self.differentiate(3).eval(t)

    def eval_fourth_derivative(self, t: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the fourth derivative at t, which is always zero."""
        return self.differentiate(4).eval(t)

    def eval_nth(self, t: npt.ArrayLike, n: int) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the n-th derivative at t (n = 0 evaluates the polynomial)."""
        return self.differentiate(n).eval(t)

    def differentiate(self, n: int = 1) -> Polynomial:
        """Differentiate the polynomial n times.

        Args:
            n (int): Derivative order. Orders of 4 or higher give the zero
                polynomial. Defaults to 1.

        Returns:
            Polynomial: The n-th derivative.

        Raises:
            ValueError: If n is negative.

        Example:
            >>> Polynomial(0.0, 0.0, 0.0, 1.0).differentiate(2).coefficients.ravel()
            array([0., 6., 0., 0.])
        """
        if n < 0:
            raise ValueError("derivative order must be non-negative")
        c = self._coefficients
        for _ in range(min(n, _NUM_COEFFICIENTS)):
            c = np.stack([c[1], 2.0 * c[2], 3.0 * c[3], np.zeros_like(c[0])])
        return Polynomial(*c)

    def scale_parameter_space(self, factor: float) -> Polynomial:
        """Stretch the parameter space by a factor.

        The result ``Q`` satisfies ``Q(factor * t) == P(t)``.

        Args:
            factor (float): Non-zero scale factor.

        Returns:
            Polynomial: The reparametrised polynomial.
        """
        c = self._coefficients
        return Polynomial(c[0], c[1] / factor, c[2] / factor**2, c[3] / factor**3)

    def compose(self, g0: float, g1: float) -> Polynomial:
        """Substitute the linear map ``t -> g0 + g1*t`` into the polynomial.

        Args:
            g0 (float): Offset of the linear map.
            g1 (float): Slope of the linear map.

        Returns:
            Polynomial: ``Q(t) = P(g0 + g1*t)``.
        """
        c0, c1, c2, c3 = self._coefficients
        g0_sq = g0 * g0
        g1_sq = g1 * g1
        return Polynomial(
            c0 + c1 * g0 + c2 * g0_sq + c3 * g0_sq * g0,
            g1 * (c1 + 2.0 * c2 * g0 + 3.0 * c3 * g0_sq),
            g1_sq * (c2 + 3.0 * c3 * g0),
            c3 * g1_sq * g1,
        )

    def split01(self, u: float) -> tuple[Polynomial, Polynomial]:
        """Split the unit interval at u.

        Args:
            u (float): Split parameter.

        Returns:
            tuple[Polynomial, Polynomial]: Polynomials reparametrised so that
                ``t in [0, 1]`` covers ``[0, u]`` and ``[u, 1]`` of the
                original, respectively.
        """
        return self.compose(0.0, u), self.compose(u, 1.0 - u)

    @staticmethod
    def lerp(a: Polynomial, b: Polynomial, t: float) -> Polynomial:
        """Linearly interpolate the coefficients of two polynomials."""
        return Polynomial(*(a.coefficients + (b.coefficients - a.coefficients) * t))

    def __add__(self, other: Polynomial) -> Polynomial:
        if not isinstance(other, Polynomial):
            return NotImplemented
        return Polynomial(*(self._coefficients + other.coefficients))

    def __sub__(self, other: Polynomial) -> Polynomial:
        if not isinstance(other, Polynomial):
            return NotImplemented
        return Polynomial(*(self._coefficients - other.coefficients))

    def __mul__(self, scalar: float) -> Polynomial:
        if isinstance(scalar, Polynomial):
            return NotImplemented
        return Polynomial(*(self._coefficients * scalar))

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> Polynomial:
        if isinstance(scalar, Polynomial):
            return NotImplemented
        return Polynomial(*(self._coefficients / scalar))

    def __neg__(self) -> Polynomial:
        return Polynomial(*(-self._coefficients))

    def __repr__(self) -> str:
        return f"Polynomial(coefficients={self._coefficients.tolist()})"
