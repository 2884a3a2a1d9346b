"""Tolerance presets for near-zero checks on curve quantities.

Curvature, effective polynomial degree and sampler tables all need to decide
when a value is "numerically zero". The thresholds depend on the working
precision, so they are looked up per floating dtype and per preset:

* ``"strict"``: for values computed in one or two operations.
* ``"default"``: the threshold used throughout the package.
* ``"conservative"``: for values carrying accumulated round-off, such as
  coefficients obtained through several matrix products.
"""

from functools import cache
from typing import Final, Literal, TypedDict

import numpy as np
from numpy import typing as npt

ToleranceKind = Literal["default", "strict", "conservative"]

_TOLERANCES: Final[dict[str, dict[str, float]]] = {
    "float32": {"strict": 1e-7, "default": 1e-6, "conservative": 1e-5},
    "float64": {"strict": 1e-15, "default": 1e-12, "conservative": 1e-10},
}


@cache
def _check_dtype_name(name: str) -> str:
    if name not in _TOLERANCES:
        raise ValueError(f"Unsupported dtype: {name}. Expected float32 or float64")
    return name


def _dtype_name(dtype: npt.DTypeLike) -> str:
    """Canonical name of a supported floating dtype.

    Raises:
        ValueError: If dtype is neither float32 nor float64.
    """
    return _check_dtype_name(np.dtype(dtype).name)


def get_tolerance(dtype: npt.DTypeLike, kind: ToleranceKind = "default") -> float:
    """Get a tolerance preset for a floating dtype.

    Args:
        dtype (npt.DTypeLike): float32 or float64, as a dtype, scalar type or
            name.
        kind (ToleranceKind): Preset name. Defaults to "default".

    Returns:
        float: Tolerance value.

    Raises:
        ValueError: If dtype is not supported or kind is not a preset name.

    Example:
        >>> get_tolerance(np.float32, "conservative")
        1e-05
    """
    presets = _TOLERANCES[_dtype_name(dtype)]
    if kind not in presets:
        raise ValueError(f"Unknown tolerance preset: {kind!r}")
    return presets[kind]


def get_default_tolerance(dtype: npt.DTypeLike) -> float:
    """Get the tolerance used for near-zero checks throughout the package.

    Example:
        >>> get_default_tolerance(np.float32)
        1e-06
        >>> get_default_tolerance("float64")
        1e-12
    """
    return get_tolerance(dtype, "default")


def get_strict_tolerance(dtype: npt.DTypeLike) -> float:
    """Get the tolerance for values computed in few operations."""
    return get_tolerance(dtype, "strict")


def get_conservative_tolerance(dtype: npt.DTypeLike) -> float:
    """Get the tolerance for values carrying accumulated round-off."""
    return get_tolerance(dtype, "conservative")


def get_machine_epsilon(dtype: npt.DTypeLike) -> float:
    """Get machine epsilon for float32 or float64.

    Raises:
        ValueError: If dtype is not supported.
    """
    return float(np.finfo(_dtype_name(dtype)).eps)


def is_almost_zero(
    value: npt.ArrayLike,
    dtype: npt.DTypeLike | None = None,
    kind: ToleranceKind = "default",
) -> npt.NDArray[np.bool_]:
    """Check elementwise whether values are within a tolerance of zero.

    Args:
        value (npt.ArrayLike): Scalar or array of values to check.
        dtype (npt.DTypeLike | None): Floating dtype whose tolerance is used.
            If None, it is taken from `value` (float64 for non-float input).
        kind (ToleranceKind): Preset name. Defaults to "default".

    Returns:
        npt.NDArray[np.bool_]: Boolean array (0-D for scalar input).

    Raises:
        ValueError: If dtype is not a supported floating-point type.

    Example:
        >>> is_almost_zero(1e-14)
        array(True)
    """
    arr = np.asarray(value)
    if dtype is None:
        dtype = arr.dtype if arr.dtype.name in _TOLERANCES else np.float64
    return np.abs(arr) <= get_tolerance(dtype, kind)


class ToleranceInfo(TypedDict):
    """Precision summary of a floating dtype."""

    dtype: str
    machine_epsilon: float
    default_tolerance: float
    strict_tolerance: float
    conservative_tolerance: float
    precision_decimals: int


def get_tolerance_info(dtype: npt.DTypeLike) -> ToleranceInfo:
    """Summarize the presets and precision of a floating dtype.

    Args:
        dtype (npt.DTypeLike): float32 or float64.

    Returns:
        ToleranceInfo: Canonical dtype name, machine epsilon, the three
            presets and the number of reliable decimal digits.

    Raises:
        ValueError: If dtype is not supported.
    """
    name = _dtype_name(dtype)
    presets = _TOLERANCES[name]
    return {
        "dtype": name,
        "machine_epsilon": get_machine_epsilon(name),
        "default_tolerance": presets["default"],
        "strict_tolerance": presets["strict"],
        "conservative_tolerance": presets["conservative"],
        "precision_decimals": int(np.finfo(name).precision),
    }
