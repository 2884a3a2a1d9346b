"""Arc-length reparametrisation of curves through a cumulative distance table.

:class:`UniformCurveSampler` samples a curve at evenly spaced parameters,
accumulates the chord lengths between the samples, and inverts that table to
map travelled distances back to curve parameters. Sampling the curve at
``uniform_t_to_param(t)`` for evenly spaced ``t`` gives points roughly evenly
spaced along the curve.
"""

import logging

import numpy as np
from numpy import typing as npt

from ._curve_impl import _cumulative_chord_lengths_impl
from ._vector_utils import _as_float_array, _as_params, _inverse_lerp, _restore_scalar_shape
from .curves import ParamCurve

logger = logging.getLogger(__name__)

_MIN_RESOLUTION = 2


class UniformCurveSampler:
    """Map distances along a curve to curve parameters.

    The table is only refreshed by :meth:`recalculate`; it does not track
    later changes of the curve. Queries and :meth:`recalculate` must not run
    concurrently on the same instance.

    Attributes:
        _resolution (int): Number of samples in the table.
        _cumulative_distances (npt.NDArray[np.float32 | np.float64]):
            Cumulative chord lengths, starting at 0.
        _interval (tuple[float, float]): Curve parameter interval covered by
            the table.
    """

    _resolution: int
    _cumulative_distances: npt.NDArray[np.float32 | np.float64]
    _interval: tuple[float, float]

    def __init__(
        self,
        curve: ParamCurve,
        interval: tuple[float, float] = (0.0, 1.0),
        resolution: int = 12,
    ) -> None:
        """Initialize the sampler and build its distance table.

        Args:
            curve (ParamCurve): Any evaluable curve.
            interval (tuple[float, float]): Parameter interval to sample.
                Defaults to (0, 1).
            resolution (int): Number of samples. Defaults to 12.

        Raises:
            ValueError: If resolution is smaller than 2.
        """
        if resolution < _MIN_RESOLUTION:
            raise ValueError(f"Resolution must be at least {_MIN_RESOLUTION}. Got {resolution}")
        self._resolution = resolution
        self.recalculate(curve, interval)

    def recalculate(self, curve: ParamCurve, interval: tuple[float, float] = (0.0, 1.0)) -> None:
        """Rebuild the distance table for a curve and interval.

        Args:
            curve (ParamCurve): Any evaluable curve.
            interval (tuple[float, float]): Parameter interval to sample.
                Defaults to (0, 1).
        """
        start, end = float(interval[0]), float(interval[1])
        self._interval = (start, end)
        ts = start + (end - start) * (
            np.arange(self._resolution, dtype=np.float64) / (self._resolution - 1)
        )
        points = np.asarray(curve.eval(ts)).reshape(self._resolution, -1)
        self._cumulative_distances = _cumulative_chord_lengths_impl(points)

        length = self.curve_interval_length
        logger.debug(
            "Recalculated sampler table: resolution=%d, interval=%s, length=%g",
            self._resolution,
            self._interval,
            length,
        )
        if length == 0.0:
            logger.warning("Sampled curve has zero length; all distances map to %g", start)

    @property
    def resolution(self) -> int:
        """Number of samples in the distance table."""
        return self._resolution

    @property
    def cumulative_distances(self) -> npt.NDArray[np.float32 | np.float64]:
        """A copy of the cumulative distance table."""
        return self._cumulative_distances.copy()

    @property
    def curve_interval_length(self) -> float:
        """Approximate length of the curve over the parameter interval."""
        return float(self._cumulative_distances[-1])

    @property
    def param_interval(self) -> tuple[float, float]:
        """The parameter interval covered by the table."""
        return self._interval

    def distance_to_param(self, distance: npt.ArrayLike) -> npt.NDArray[np.float64]:
        """Convert distance(s) along the curve to curve parameter(s).

        Distances inside ``(0, length)`` are located in the table and
        interpolated linearly between the two bracketing samples. Other
        distances extrapolate linearly over the whole interval.

        Args:
            distance (npt.ArrayLike): Distance(s) from the start of the interval.

        Returns:
            npt.NDArray[np.float64]: Curve parameter(s), with the shape of
                ``distance``.

        Example:
            >>> from parc.polynomial import Polynomial
            >>> sampler = UniformCurveSampler(Polynomial([0.0, 0.0], [2.0, 0.0]))
            >>> float(sampler.distance_to_param(1.0))
            0.5
        """
        ds, input_shape = _as_params(distance)
        ds = ds.astype(np.float64, copy=False)
        table = self._cumulative_distances.astype(np.float64, copy=False)
        length = self.curve_interval_length
        start, end = self._interval
        last = self._resolution - 1

        if length == 0.0:
            return _restore_scalar_shape(np.full(ds.shape, start), input_shape)

        fractions = ds / length
        inside = (ds > 0.0) & (ds < length)
        if np.any(inside):
            d_in = ds[inside]
            i = np.clip(np.searchsorted(table, d_in, side="right") - 1, 0, last - 1)
            dist_prev = table[i]
            dist_next = table[i + 1]
            local = (d_in - dist_prev) / (dist_next - dist_prev)
            fractions[inside] = (i + local) / last

        return _restore_scalar_shape(start + (end - start) * fractions, input_shape)

    def uniform_t_to_param(self, t: npt.ArrayLike) -> npt.NDArray[np.float64]:
        """Convert a fraction of the curve length to curve parameter(s)."""
        return self.distance_to_param(_as_float_array(t) * self.curve_interval_length)

    def uniform_param_to_param(self, u: npt.ArrayLike) -> npt.NDArray[np.float64]:
        """Convert a parameter taken as uniform along the interval to the curve parameter."""
        start, end = self._interval
        return self.uniform_t_to_param(_inverse_lerp(start, end, _as_float_array(u)))

    def get_param_at_segment_t_value(self, t: npt.ArrayLike) -> npt.NDArray[np.float64]:
        """Normalize a curve parameter to the table interval, 0 at its start and 1 at its end."""
        start, end = self._interval
        return _inverse_lerp(start, end, _as_float_array(t))

    def __repr__(self) -> str:
        return (
            f"UniformCurveSampler(resolution={self._resolution}, "
            f"interval={self._interval}, length={self.curve_interval_length:g})"
        )
