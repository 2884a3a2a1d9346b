"""Capability protocols for parametric curves.

Each protocol adds one capability: evaluation, or a derivative of a given
order. Curves satisfy them structurally, so a function bound to
``ParamCurve2Diff`` accepts polynomials, cubic or quadratic segments,
B-splines, and any user type providing ``degree``, ``eval``,
``eval_derivative`` and ``eval_second_derivative``.
"""

from typing import Protocol, runtime_checkable

import numpy as np
from numpy import typing as npt


@runtime_checkable
class HasEval(Protocol):
    """A curve that can be evaluated at parameter values."""

    @property
    def degree(self) -> int:
        """Polynomial degree of the curve."""
        ...

    def eval(self, t: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the curve at t."""
        ...


@runtime_checkable
class HasDerivative(Protocol):
    """A curve exposing its first derivative (velocity)."""

    def eval_derivative(self, t: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the first derivative at t."""
        ...


@runtime_checkable
class HasSecondDerivative(Protocol):
    """A curve exposing its second derivative (acceleration)."""

    def eval_second_derivative(self, t: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the second derivative at t."""
        ...


@runtime_checkable
class HasThirdDerivative(Protocol):
    """A curve exposing its third derivative (jerk)."""

    def eval_third_derivative(self, t: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the third derivative at t."""
        ...


@runtime_checkable
class HasFourthDerivative(Protocol):
    """A curve exposing its fourth derivative."""

    def eval_fourth_derivative(self, t: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the fourth derivative at t."""
        ...


@runtime_checkable
class ParamCurve(HasEval, Protocol):
    """A parametric curve."""


@runtime_checkable
class ParamCurve1Diff(HasEval, HasDerivative, Protocol):
    """A parametric curve with a first derivative."""


@runtime_checkable
class ParamCurve2Diff(HasEval, HasDerivative, HasSecondDerivative, Protocol):
    """A parametric curve with first and second derivatives."""


@runtime_checkable
class ParamCurve3Diff(HasEval, HasDerivative, HasSecondDerivative, HasThirdDerivative, Protocol):
    """A parametric curve with derivatives up to the third order."""


@runtime_checkable
class ParamCurve4Diff(
    HasEval,
    HasDerivative,
    HasSecondDerivative,
    HasThirdDerivative,
    HasFourthDerivative,
    Protocol,
):
    """A parametric curve with derivatives up to the fourth order."""
