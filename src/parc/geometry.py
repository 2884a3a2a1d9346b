"""Geometric quantities along parametric curves.

All functions are written against the minimal curve capability they need
(see :mod:`parc.curves`) and work for any curve type providing it. Parameters
``t`` may be scalars or arrays. Vector results have shape (D,) for scalar input
and (*t.shape, D) otherwise, and scalar results follow the shape of ``t``.

Frames and matrices use the row-vector convention: the rows of a 4x4 matrix
are the X, Y and Z axes followed by the position.
"""

from __future__ import annotations

import logging
from typing import NamedTuple

import numpy as np
from numpy import typing as npt
from scipy.spatial.transform import Rotation

from ._curve_impl import _cumulative_chord_lengths_impl
from ._vector_utils import (
    _as_params,
    _as_vector,
    _cross,
    _determinant_2d,
    _dot,
    _norm,
    _normalize,
    _restore_scalar_shape,
    _restore_shape,
    _rotate90_ccw,
    _safe_divide,
)
from .curves import ParamCurve, ParamCurve1Diff, ParamCurve2Diff, ParamCurve3Diff
from .tolerance import is_almost_zero

logger = logging.getLogger(__name__)

_DEFAULT_UP = (0.0, 1.0, 0.0)


class Bivector3(NamedTuple):
    """A 3D bivector, stored by its components on the yz, zx and xy planes.

    The curvature bivector of a 3D curve has the curvature as magnitude and
    the osculating plane as plane. Its dual vector ``(yz, zx, xy)`` is the
    axis of curvature.
    """

    yz: npt.NDArray[np.float32 | np.float64]
    zx: npt.NDArray[np.float32 | np.float64]
    xy: npt.NDArray[np.float32 | np.float64]

    @property
    def magnitude(self) -> npt.NDArray[np.float32 | np.float64]:
        """Magnitude of the bivector."""
        return np.sqrt(self.yz**2 + self.zx**2 + self.xy**2)

    @property
    def normal(self) -> npt.NDArray[np.float32 | np.float64]:
        """Unit normal of the bivector plane (zero for a zero bivector)."""
        return _normalize(np.stack([self.yz, self.zx, self.xy], axis=-1))


class Circle(NamedTuple):
    """An osculating circle.

    Attributes:
        center: Circle center(s).
        radius: Circle radius (``inf`` where the curvature is zero).
        axis: Unit axis of the circle plane for 3D curves, None for 2D curves.
    """

    center: npt.NDArray[np.float32 | np.float64]
    radius: npt.NDArray[np.float32 | np.float64]
    axis: npt.NDArray[np.float32 | np.float64] | None


class Pose(NamedTuple):
    """A position together with an orientation."""

    position: npt.NDArray[np.float32 | np.float64]
    rotation: Rotation


def _eval_flat(
    curve: ParamCurve, t: npt.ArrayLike, orders: tuple[int, ...]
) -> tuple[list[npt.NDArray[np.float32 | np.float64]], tuple[int, ...]]:
    """Evaluate the requested derivative orders at flattened parameters.

    Returns:
        tuple: List of (m, D) arrays, one per order, and the input shape of t.
    """
    pts, input_shape = _as_params(t)
    methods = {
        0: "eval",
        1: "eval_derivative",
        2: "eval_second_derivative",
        3: "eval_third_derivative",
    }
    values = []
    for order in orders:
        res = np.asarray(getattr(curve, methods[order])(pts))
        values.append(res.reshape(pts.shape[0], -1))
    return values, input_shape


def _require_dimension(values: npt.NDArray[np.float32 | np.float64], *dims: int) -> int:
    dim = int(values.shape[-1])
    if dim not in dims:
        expected = " or ".join(map(str, dims))
        raise ValueError(f"Operation requires a curve of dimension {expected}. Got {dim}")
    return dim


def _look_frame(
    forward: npt.NDArray[np.float32 | np.float64], up: npt.NDArray[np.float32 | np.float64]
) -> tuple[npt.NDArray[np.float32 | np.float64], ...]:
    """Right-handed frame with Z along forward and Y as close to up as possible.

    Where ``up`` vanishes or is parallel to ``forward``, the world axis least
    aligned with ``forward`` takes its place. Where ``forward`` vanishes the
    frame is the identity.
    """
    z = _normalize(forward)
    up_dir = _normalize(np.broadcast_to(up, z.shape))
    parallel = is_almost_zero(_norm(_cross(up_dir, z)), z.dtype)
    if np.any(parallel):
        fallback = np.eye(3, dtype=z.dtype)[np.argmin(np.abs(z), axis=-1)]
        up_dir = np.where(parallel[:, np.newaxis], fallback, up_dir)
    x = _normalize(_cross(up_dir, z))
    y = _cross(z, x)
    still = _norm(z) < 0.5  # noqa: PLR2004
    if np.any(still):
        logger.debug("Zero velocity at %d parameter(s); using the identity frame", still.sum())
        identity = np.eye(3, dtype=z.dtype)
        x[still], y[still], z[still] = identity
    return x, y, z


def _frame_matrix(
    x: npt.NDArray[np.float32 | np.float64],
    y: npt.NDArray[np.float32 | np.float64],
    z: npt.NDArray[np.float32 | np.float64],
    position: npt.NDArray[np.float32 | np.float64],
) -> npt.NDArray[np.float32 | np.float64]:
    """Assemble (m, 4, 4) matrices whose rows are x, y, z and the position."""
    num = x.shape[0]
    mat = np.zeros((num, 4, 4), dtype=np.result_type(x, position))
    mat[:, 0, :3] = x
    mat[:, 1, :3] = y
    mat[:, 2, :3] = z
    mat[:, 3, :3] = position
    mat[:, 3, 3] = 1.0
    return mat


def _frame_rotation(
    x: npt.NDArray[np.float32 | np.float64],
    y: npt.NDArray[np.float32 | np.float64],
    z: npt.NDArray[np.float32 | np.float64],
    input_shape: tuple[int, ...],
) -> Rotation:
    """Rotation mapping the local axes to the frame axes."""
    matrices = np.stack([x, y, z], axis=-1).astype(np.float64)
    return Rotation.from_matrix(matrices[0] if input_shape == () else matrices)


def _restore_matrix_shape(
    mat: npt.NDArray[np.float32 | np.float64], input_shape: tuple[int, ...]
) -> npt.NDArray[np.float32 | np.float64]:
    return mat.reshape(*input_shape, 4, 4)


def eval_tangent(curve: ParamCurve1Diff, t: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
    """Evaluate the unit tangent direction.

    Where the velocity vanishes the tangent is the zero vector.
    """
    (vel,), input_shape = _eval_flat(curve, t, (1,))
    return _restore_shape(_normalize(vel), input_shape)


def eval_normal(
    curve: ParamCurve1Diff, t: npt.ArrayLike, up: npt.ArrayLike | None = None
) -> npt.NDArray[np.float32 | np.float64]:
    """Evaluate the normal direction of a 2D or 3D curve.

    In 2D the normal is the tangent rotated 90 degrees counter-clockwise. In 3D
    it is perpendicular to both the curve and the reference up vector.

    Args:
        curve (ParamCurve1Diff): A 2D or 3D curve.
        t (npt.ArrayLike): Parameter value(s).
        up (npt.ArrayLike | None): Reference up vector for 3D curves. Defaults
            to +Y. Ignored for 2D curves.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Unit normal(s).

    Raises:
        ValueError: If the curve is neither 2D nor 3D.
    """
    (vel,), input_shape = _eval_flat(curve, t, (1,))
    dim = _require_dimension(vel, 2, 3)
    if dim == 2:  # noqa: PLR2004
        normal = _rotate90_ccw(_normalize(vel))
    else:
        up_vec = _as_vector(_DEFAULT_UP if up is None else up)
        normal = _look_frame(vel, up_vec)[0]
    return _restore_shape(normal, input_shape)


def eval_binormal(
    curve: ParamCurve1Diff, t: npt.ArrayLike, up: npt.ArrayLike | None = None
) -> npt.NDArray[np.float32 | np.float64]:
    """Evaluate the binormal of a 3D curve relative to a reference up vector.

    The binormal is perpendicular to the curve and as aligned with ``up`` as
    possible.

    Raises:
        ValueError: If the curve is not 3D.
    """
    (vel,), input_shape = _eval_flat(curve, t, (1,))
    _require_dimension(vel, 3)
    up_vec = _as_vector(_DEFAULT_UP if up is None else up)
    return _restore_shape(_look_frame(vel, up_vec)[1], input_shape)


def eval_angle(curve: ParamCurve1Diff, t: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
    """Evaluate the direction angle, in radians, of a 2D curve.

    Raises:
        ValueError: If the curve is not 2D.
    """
    (vel,), input_shape = _eval_flat(curve, t, (1,))
    _require_dimension(vel, 2)
    return _restore_scalar_shape(np.arctan2(vel[:, 1], vel[:, 0]), input_shape)


def eval_orientation(
    curve: ParamCurve1Diff, t: npt.ArrayLike, up: npt.ArrayLike | None = None
) -> Rotation:
    """Evaluate the orientation of the curve.

    For 3D curves the local Z axis is tangent to the curve and the Y axis is as
    aligned with ``up`` as possible. Where the velocity is parallel to ``up``
    the world axis least aligned with it is used as up, and where the velocity
    vanishes the orientation is the identity. For 2D curves the result is the
    rotation about Z by :func:`eval_angle`.

    Args:
        curve (ParamCurve1Diff): A 2D or 3D curve.
        t (npt.ArrayLike): Parameter value(s).
        up (npt.ArrayLike | None): Reference up vector for 3D curves. Defaults
            to +Y.

    Returns:
        Rotation: A single rotation for scalar t, or a stack of rotations over
            the flattened parameters.

    Raises:
        ValueError: If the curve is neither 2D nor 3D.
    """
    (vel,), input_shape = _eval_flat(curve, t, (1,))
    dim = _require_dimension(vel, 2, 3)
    if dim == 2:  # noqa: PLR2004
        angles = np.arctan2(vel[:, 1], vel[:, 0]).astype(np.float64)
        return Rotation.from_euler("z", angles[0] if input_shape == () else angles)
    up_vec = _as_vector(_DEFAULT_UP if up is None else up)
    return _frame_rotation(*_look_frame(vel, up_vec), input_shape)


def eval_pose(curve: ParamCurve1Diff, t: npt.ArrayLike, up: npt.ArrayLike | None = None) -> Pose:
    """Evaluate position and orientation together. See :func:`eval_orientation`."""
    (pos,), input_shape = _eval_flat(curve, t, (0,))
    return Pose(_restore_shape(pos, input_shape), eval_orientation(curve, t, up))


def eval_matrix(
    curve: ParamCurve1Diff, t: npt.ArrayLike, up: npt.ArrayLike | None = None
) -> npt.NDArray[np.float32 | np.float64]:
    """Evaluate position and orientation as 4x4 matrices.

    For 3D curves the rows are the normal, the binormal, the tangent and the
    position. For 2D curves the rows are the tangent, the normal, +Z and the
    position.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Array of shape (4, 4) for scalar
            t, or (*t.shape, 4, 4).

    Raises:
        ValueError: If the curve is neither 2D nor 3D.
    """
    (pos, vel), input_shape = _eval_flat(curve, t, (0, 1))
    dim = _require_dimension(vel, 2, 3)
    if dim == 2:  # noqa: PLR2004
        tangent = np.zeros((vel.shape[0], 3), dtype=vel.dtype)
        tangent[:, :2] = _normalize(vel)
        normal = np.zeros_like(tangent)
        normal[:, :2] = _rotate90_ccw(tangent[:, :2])
        z_axis = np.zeros_like(tangent)
        z_axis[:, 2] = 1.0
        position = np.zeros_like(tangent)
        position[:, :2] = pos
        mat = _frame_matrix(tangent, normal, z_axis, position)
    else:
        up_vec = _as_vector(_DEFAULT_UP if up is None else up)
        mat = _frame_matrix(*_look_frame(vel, up_vec), pos)
    return _restore_matrix_shape(mat, input_shape)


def eval_curvature(
    curve: ParamCurve2Diff, t: npt.ArrayLike
) -> npt.NDArray[np.float32 | np.float64] | Bivector3:
    """Evaluate the curvature of a 2D or 3D curve.

    For 2D curves the result is the signed curvature
    ``(x'y'' - y'x'') / |v|^3``, positive when the curve turns counter-clockwise.
    For 3D curves it is the bivector ``(v ^ a) / |v|^3``, whose magnitude is
    the curvature and whose plane is the osculating plane. Where the velocity
    vanishes the curvature is zero.

    Args:
        curve (ParamCurve2Diff): A 2D or 3D curve.
        t (npt.ArrayLike): Parameter value(s).

    Returns:
        npt.NDArray[np.float32 | np.float64] | Bivector3: Signed curvature in
            2D, curvature bivector in 3D.

    Raises:
        ValueError: If the curve is neither 2D nor 3D.

    Example:
        >>> from parc.polynomial import Polynomial
        >>> parabola = Polynomial([0.0, 0.0], [1.0, 0.0], [0.0, 1.0])
        >>> float(eval_curvature(parabola, 0.0))
        2.0
    """
    (vel, acc), input_shape = _eval_flat(curve, t, (1, 2))
    dim = _require_dimension(vel, 2, 3)
    speed_cubed = _norm(vel) ** 3
    if dim == 2:  # noqa: PLR2004
        det = _determinant_2d(vel, acc)
        kappa = _safe_divide(det, speed_cubed)
        return _restore_scalar_shape(kappa, input_shape)

    wedge = _cross(vel, acc)
    scaled = _safe_divide(wedge, speed_cubed[:, np.newaxis])
    return Bivector3(
        _restore_scalar_shape(scaled[:, 0], input_shape),
        _restore_scalar_shape(scaled[:, 1], input_shape),
        _restore_scalar_shape(scaled[:, 2], input_shape),
    )


def eval_osculating_circle(curve: ParamCurve2Diff, t: npt.ArrayLike) -> Circle:
    """Evaluate the osculating circle of a 2D or 3D curve.

    The circle passes through the curve point with radius ``1/|curvature|``,
    its center offset along the curvature normal. Where the curvature is zero
    (straight segments, inflection points) the circle is undefined: the radius
    is ``inf`` and the center is not finite. Callers should check
    :func:`eval_curvature` against a tolerance before relying on the result.

    Args:
        curve (ParamCurve2Diff): A 2D or 3D curve.
        t (npt.ArrayLike): Parameter value(s).

    Returns:
        Circle: Center, radius and (3D only) axis of the osculating circle.

    Raises:
        ValueError: If the curve is neither 2D nor 3D.
    """
    (pos, vel, acc), input_shape = _eval_flat(curve, t, (0, 1, 2))
    dim = _require_dimension(vel, 2, 3)
    speed_cubed = _norm(vel) ** 3
    axis = None
    if dim == 2:  # noqa: PLR2004
        det = _determinant_2d(vel, acc)
        kappa = _safe_divide(det, speed_cubed)
        normal = _rotate90_ccw(_normalize(vel))
    else:
        wedge = _cross(vel, acc)
        kappa = _safe_divide(_norm(wedge), speed_cubed)
        normal = _normalize(_cross(vel, _cross(acc, vel)))
        axis = _restore_shape(_normalize(wedge), input_shape)

    if np.any(is_almost_zero(kappa)):
        logger.warning("Osculating circle requested at zero curvature; radius is infinite")

    with np.errstate(divide="ignore", invalid="ignore"):
        inv_kappa = 1.0 / kappa
        center = pos + normal * inv_kappa[:, np.newaxis]
    return Circle(
        _restore_shape(center, input_shape),
        _restore_scalar_shape(np.abs(inv_kappa), input_shape),
        axis,
    )


def eval_arc_normal(
    curve: ParamCurve2Diff, t: npt.ArrayLike
) -> npt.NDArray[np.float32 | np.float64]:
    """Evaluate the Frenet normal of a 3D curve, pointing towards the center of curvature.

    Raises:
        ValueError: If the curve is not 3D.
    """
    (vel, acc), input_shape = _eval_flat(curve, t, (1, 2))
    _require_dimension(vel, 3)
    return _restore_shape(_normalize(_cross(_cross(vel, acc), vel)), input_shape)


def eval_arc_binormal(
    curve: ParamCurve2Diff, t: npt.ArrayLike
) -> npt.NDArray[np.float32 | np.float64]:
    """Evaluate the Frenet binormal of a 3D curve.

    Raises:
        ValueError: If the curve is not 3D.
    """
    (vel, acc), input_shape = _eval_flat(curve, t, (1, 2))
    _require_dimension(vel, 3)
    return _restore_shape(_normalize(_cross(vel, acc)), input_shape)


def eval_arc_orientation(curve: ParamCurve2Diff, t: npt.ArrayLike) -> Rotation:
    """Evaluate the Frenet orientation of a 3D curve.

    The local Z axis is the tangent, X points towards the center of curvature
    and Y is the binormal. Where the curvature vanishes the world axis least
    aligned with the tangent stands in for the binormal direction, and where
    the velocity vanishes the frame is the identity.

    Raises:
        ValueError: If the curve is not 3D.
    """
    (vel, acc), input_shape = _eval_flat(curve, t, (1, 2))
    _require_dimension(vel, 3)
    return _frame_rotation(*_look_frame(vel, _cross(vel, acc)), input_shape)


def eval_arc_pose(curve: ParamCurve2Diff, t: npt.ArrayLike) -> Pose:
    """Evaluate position and Frenet orientation. See :func:`eval_arc_orientation`."""
    (pos,), input_shape = _eval_flat(curve, t, (0,))
    return Pose(_restore_shape(pos, input_shape), eval_arc_orientation(curve, t))


def eval_arc_matrix(
    curve: ParamCurve2Diff, t: npt.ArrayLike
) -> npt.NDArray[np.float32 | np.float64]:
    """Evaluate the Frenet frame of a 3D curve as 4x4 matrices.

    Rows are the normal, the binormal, the tangent and the position.

    Raises:
        ValueError: If the curve is not 3D.
    """
    (pos, vel, acc), input_shape = _eval_flat(curve, t, (0, 1, 2))
    _require_dimension(vel, 3)
    frame = _look_frame(vel, _cross(vel, acc))
    return _restore_matrix_shape(_frame_matrix(*frame, pos), input_shape)


def eval_torsion(curve: ParamCurve3Diff, t: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
    """Evaluate the torsion of a 3D curve.

    ``tau = ((v x a) . j) / |v x a|^2``, the rate at which the curve twists out
    of its osculating plane. Zero where ``v x a`` vanishes.

    Raises:
        ValueError: If the curve is not 3D.
    """
    (vel, acc, jerk), input_shape = _eval_flat(curve, t, (1, 2, 3))
    _require_dimension(vel, 3)
    wedge = _cross(vel, acc)
    den = _dot(wedge, wedge)
    return _restore_scalar_shape(_safe_divide(_dot(wedge, jerk), den), input_shape)


def get_arc_length(
    curve: ParamCurve,
    interval: tuple[float, float] = (0.0, 1.0),
    accuracy: int = 8,
) -> float:
    """Approximate the arc length over a parameter interval.

    Sums the chord lengths between ``accuracy`` evenly spaced samples. This
    underestimates the length of curved segments and converges as accuracy
    grows.

    Args:
        curve (ParamCurve): Any evaluable curve.
        interval (tuple[float, float]): Parameter interval. Defaults to (0, 1).
        accuracy (int): Number of samples. Values below 2 are raised to 2.
            Defaults to 8.

    Returns:
        float: Approximate arc length.

    Example:
        >>> from parc.segments import BezierQuad
        >>> get_arc_length(BezierQuad([0.0, 0.0], [1.0, 0.0], [2.0, 0.0]))
        2.0
    """
    accuracy = max(int(accuracy), 2)
    start, end = interval
    ts = start + (end - start) * (np.arange(accuracy, dtype=np.float64) / (accuracy - 1))
    (pos,), _ = _eval_flat(curve, ts, (0,))
    return float(_cumulative_chord_lengths_impl(pos)[-1])
