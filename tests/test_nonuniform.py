"""Tests for the non-uniform Catmull-Rom and Hermite segments."""

from __future__ import annotations

import numpy as np
import numpy.testing as nptest
import numpy.typing as npt
import pytest

from parc.curves import ParamCurve3Diff
from parc.nonuniform import (
    CatRomType,
    KnotCalcMode,
    NUCatRomCubic,
    NUHermiteCubic,
    calc_catrom_knot,
    calc_catrom_knots,
    calculate_catrom_curve,
    calculate_hermite_curve,
)
from parc.segments import CatRomCubic, HermiteCubic

# p1 and p2 are close together while the neighbours are far away: a uniform
# Catmull-Rom segment loops back between them.
OVERSHOOT_POINTS = np.array([[0.0, 0.0], [1.0, 1.0], [1.1, 1.0], [2.0, 0.0]])
POINTS_3D = np.array([[0.0, 0.0, 0.0], [1.0, 2.0, 0.5], [3.0, 2.5, -1.0], [4.0, 0.0, 2.0]])


def _barry_goldman(
    points: npt.NDArray[np.float64], knots: npt.NDArray[np.float64], u: npt.NDArray[np.float64]
) -> npt.NDArray[np.float64]:
    """Reference evaluation through the Barry-Goldman pyramid of linear interpolations."""
    p0, p1, p2, p3 = points
    t0, t1, t2, t3 = knots
    u = u[:, np.newaxis]
    a1 = (t1 - u) / (t1 - t0) * p0 + (u - t0) / (t1 - t0) * p1
    a2 = (t2 - u) / (t2 - t1) * p1 + (u - t1) / (t2 - t1) * p2
    a3 = (t3 - u) / (t3 - t2) * p2 + (u - t2) / (t3 - t2) * p3
    b1 = (t2 - u) / (t2 - t0) * a1 + (u - t0) / (t2 - t0) * a2
    b2 = (t3 - u) / (t3 - t1) * a2 + (u - t1) / (t3 - t1) * a3
    return (t2 - u) / (t2 - t1) * b1 + (u - t1) / (t2 - t1) * b2


class TestKnots:
    """Tests for the knot calculation."""

    @pytest.mark.parametrize(
        ("alpha", "expected"),
        [(CatRomType.UNIFORM, 2.0), (CatRomType.CENTRIPETAL, 3.0), (CatRomType.CHORDAL, 5.0)],
    )
    def test_calc_catrom_knot(self, alpha: CatRomType, expected: float) -> None:
        """The interval is the distance raised to alpha."""
        assert calc_catrom_knot(1.0, 16.0, alpha) == pytest.approx(expected)

    def test_coincident_points(self) -> None:
        """Coincident points are one knot apart."""
        assert calc_catrom_knot(2.0, 0.0, 0.5) == 3.0  # noqa: PLR2004

    def test_alpha_values(self) -> None:
        """The named parametrizations map to their exponents."""
        assert CatRomType.UNIFORM.alpha == 0.0
        assert CatRomType.CENTRIPETAL.alpha == 0.5  # noqa: PLR2004
        assert CatRomType.CHORDAL.alpha == 1.0

    def test_uniform_unit_interval(self) -> None:
        """Uniform knots on the unit interval are -1, 0, 1, 2."""
        knots = calc_catrom_knots(POINTS_3D, CatRomType.UNIFORM)
        nptest.assert_allclose(knots, [-1.0, 0.0, 1.0, 2.0])

    def test_cumulative(self) -> None:
        """Without the unit interval the knots accumulate the intervals from 0."""
        dist = np.linalg.norm(np.diff(OVERSHOOT_POINTS, axis=0), axis=-1)
        knots = calc_catrom_knots(OVERSHOOT_POINTS, 0.5, unit_interval=False)
        nptest.assert_allclose(knots, np.concatenate([[0.0], np.cumsum(np.sqrt(dist))]))

    def test_unit_interval_is_rescaled_cumulative(self) -> None:
        """The unit interval knots are the cumulative ones shifted and scaled."""
        cumulative = calc_catrom_knots(OVERSHOOT_POINTS, 1.0, unit_interval=False)
        unit = calc_catrom_knots(OVERSHOOT_POINTS, 1.0)
        expected = (cumulative - cumulative[1]) / (cumulative[2] - cumulative[1])
        nptest.assert_allclose(unit, expected)

    def test_wrong_point_count(self) -> None:
        """Exactly four points are needed."""
        with pytest.raises(ValueError, match="Expected 4 points"):
            calc_catrom_knots(OVERSHOOT_POINTS[:3], 0.5)


class TestCatRomCurve:
    """Tests for the non-uniform Catmull-Rom segment."""

    @pytest.mark.parametrize("alpha", [0.0, 0.5, 1.0])
    def test_interpolates_inner_points(self, alpha: float) -> None:
        """The segment starts at p1 for u = 0 and ends at p2 for u = 1."""
        seg = NUCatRomCubic(*OVERSHOOT_POINTS, alpha=alpha)
        nptest.assert_allclose(seg.eval(0.0), OVERSHOOT_POINTS[1], atol=1e-12)
        nptest.assert_allclose(seg.eval(1.0), OVERSHOOT_POINTS[2], atol=1e-12)

    def test_centripetal_is_default(self) -> None:
        """Without knots or alpha the segment is centripetal on the unit interval."""
        seg = NUCatRomCubic(*OVERSHOOT_POINTS)
        assert seg.alpha == 0.5  # noqa: PLR2004
        assert seg.knot_calc_mode is KnotCalcMode.AUTO_UNIT_INTERVAL
        assert seg.knot_start == 0.0
        assert seg.knot_end == 1.0

    def test_uniform_matches_uniform_segment(self) -> None:
        """Uniform knots reproduce the uniform Catmull-Rom polynomial."""
        seg = NUCatRomCubic(*POINTS_3D, alpha=CatRomType.UNIFORM)
        uniform = CatRomCubic(*POINTS_3D)
        nptest.assert_allclose(seg.curve.coefficients, uniform.curve.coefficients, atol=1e-12)

    def test_manual_uniform_knots(self) -> None:
        """Explicit knots -1, 0, 1, 2 are the uniform case."""
        seg = NUCatRomCubic(*POINTS_3D, knots=[-1.0, 0.0, 1.0, 2.0])
        assert seg.knot_calc_mode is KnotCalcMode.MANUAL
        assert seg.alpha is None
        nptest.assert_allclose(
            seg.curve.coefficients, CatRomCubic(*POINTS_3D).curve.coefficients, atol=1e-12
        )

    @pytest.mark.parametrize("alpha", [0.5, 1.0])
    def test_matches_barry_goldman(self, alpha: float) -> None:
        """The polynomial agrees with the pyramid of linear interpolations."""
        seg = NUCatRomCubic(*POINTS_3D, alpha=alpha, unit_interval=False)
        assert seg.knot_calc_mode is KnotCalcMode.AUTO
        us = np.linspace(seg.knot_start, seg.knot_end, 9)
        nptest.assert_allclose(seg.eval(us), _barry_goldman(POINTS_3D, seg.knots, us), atol=1e-12)

    def test_manual_knots_pass_through(self) -> None:
        """With explicit knots the segment runs between the knots of p1 and p2."""
        knots = np.array([-0.5, 2.0, 3.0, 7.0])
        seg = NUCatRomCubic(*POINTS_3D, knots=knots)
        nptest.assert_allclose(seg.eval(2.0), POINTS_3D[1], atol=1e-12)
        nptest.assert_allclose(seg.eval(3.0), POINTS_3D[2], atol=1e-12)
        us = np.linspace(2.0, 3.0, 5)
        nptest.assert_allclose(seg.eval(us), _barry_goldman(POINTS_3D, knots, us), atol=1e-12)

    def test_centripetal_has_no_loop(self) -> None:
        """Centripetal knots keep the overshoot example moving forward."""
        centripetal = NUCatRomCubic(*OVERSHOOT_POINTS, alpha=CatRomType.CENTRIPETAL)
        uniform = NUCatRomCubic(*OVERSHOOT_POINTS, alpha=CatRomType.UNIFORM)
        us = np.linspace(0.0, 1.0, 101)
        assert np.all(centripetal.eval_derivative(us)[:, 0] > 0.0)
        assert np.all(np.linalg.norm(centripetal.eval_derivative(us), axis=-1) > 0.0)
        assert np.any(uniform.eval_derivative(us)[:, 0] < 0.0)

    def test_derivatives(self) -> None:
        """Derivatives follow the polynomial in the knot value."""
        seg = NUCatRomCubic(*POINTS_3D, alpha=0.5, unit_interval=False)
        u = 0.5 * (seg.knot_start + seg.knot_end)
        h = 1e-6
        numeric = (seg.eval(u + h) - seg.eval(u - h)) / (2.0 * h)
        nptest.assert_allclose(seg.eval_derivative(u), numeric, rtol=1e-6, atol=1e-8)
        nptest.assert_allclose(seg.eval_second_derivative(u), seg.curve.eval_nth(u, 2))
        nptest.assert_allclose(seg.eval_third_derivative(0.0), seg.eval_third_derivative(1.0))

    def test_get_knot_value(self) -> None:
        """Normalized parameters map to [k1, k2]."""
        seg = NUCatRomCubic(*POINTS_3D, knots=[0.0, 1.0, 3.0, 4.0])
        nptest.assert_allclose(seg.get_knot_value([0.0, 0.5, 1.0]), [1.0, 2.0, 3.0])

    def test_from_point_matrix(self) -> None:
        """Building from a matrix equals building from separate points."""
        seg = NUCatRomCubic.from_point_matrix(POINTS_3D, alpha=1.0)
        nptest.assert_array_equal(seg.point_matrix, POINTS_3D)
        nptest.assert_array_equal(seg[3], POINTS_3D[3])
        assert seg.dimension == 3  # noqa: PLR2004

    def test_read_only(self) -> None:
        """Points and knots cannot be modified."""
        seg = NUCatRomCubic(*POINTS_3D)
        assert not seg.point_matrix.flags.writeable
        assert not seg.knots.flags.writeable

    def test_protocol(self) -> None:
        """Non-uniform segments are evaluable curves."""
        assert isinstance(NUCatRomCubic(*POINTS_3D), ParamCurve3Diff)
        assert NUCatRomCubic.degree == 3  # noqa: PLR2004

    def test_calculate_catrom_curve(self) -> None:
        """The free function builds the same polynomial as the segment."""
        knots = [-1.0, 0.0, 2.0, 2.5]
        seg = NUCatRomCubic(*POINTS_3D, knots=knots)
        curve = calculate_catrom_curve(POINTS_3D, knots)
        nptest.assert_allclose(curve.coefficients, seg.curve.coefficients)

    @pytest.mark.parametrize(
        "knots", [[0.0, 1.0, 1.0, 2.0], [0.0, 2.0, 1.0, 3.0], [0.0, 1.0, 2.0]]
    )
    def test_invalid_knots(self, knots: list[float]) -> None:
        """Knots must be four strictly increasing values."""
        with pytest.raises(ValueError, match="knots|Knots"):
            NUCatRomCubic(*POINTS_3D, knots=knots)

    @pytest.mark.parametrize("index", [-1, 4])
    def test_index_out_of_range(self, index: int) -> None:
        """Control point indices outside [0, 3] raise IndexError."""
        seg = NUCatRomCubic(*POINTS_3D)
        with pytest.raises(IndexError):
            seg[index]

    def test_repr(self) -> None:
        """The representation lists the points, knots and knot mode."""
        seg = NUCatRomCubic(0.0, 1.0, 2.0, 3.0, knots=[-1.0, 0.0, 1.0, 2.0])
        assert repr(seg) == (
            "NUCatRomCubic(points=[[0.0], [1.0], [2.0], [3.0]], "
            "knots=[-1.0, 0.0, 1.0, 2.0], knot_calc_mode=MANUAL)"
        )


class TestPointWeights:
    """Tests for the per-point weights of the non-uniform Catmull-Rom segment."""

    @pytest.mark.parametrize("alpha", [0.0, 0.5, 1.0])
    def test_partition_of_unity(self, alpha: float) -> None:
        """The four weights add up to one."""
        seg = NUCatRomCubic(*POINTS_3D, alpha=alpha, unit_interval=False)
        us = np.linspace(seg.knot_start, seg.knot_end, 7)
        total = sum(seg.get_point_weight_at_knot_value(i, us) for i in range(4))
        nptest.assert_allclose(total, 1.0)

    @pytest.mark.parametrize("alpha", [0.0, 0.5, 1.0])
    def test_weighted_sum_is_point(self, alpha: float) -> None:
        """Weighting the control points gives the curve point."""
        seg = NUCatRomCubic(*POINTS_3D, alpha=alpha)
        us = np.linspace(0.0, 1.0, 7)
        weights = np.stack([seg.get_point_weight_at_knot_value(i, us) for i in range(4)], axis=-1)
        nptest.assert_allclose(weights @ POINTS_3D, seg.eval(us), atol=1e-12)

    def test_endpoints(self) -> None:
        """At k1 only p1 contributes and at k2 only p2 does."""
        seg = NUCatRomCubic(*OVERSHOOT_POINTS)
        nptest.assert_allclose(
            [seg.get_point_weight_at_knot_value(i, 0.0) for i in range(4)],
            [0.0, 1.0, 0.0, 0.0],
            atol=1e-12,
        )
        nptest.assert_allclose(
            [seg.get_point_weight_at_knot_value(i, 1.0) for i in range(4)],
            [0.0, 0.0, 1.0, 0.0],
            atol=1e-12,
        )

    def test_scalar_shape(self) -> None:
        """Scalar knot values give scalar weights."""
        seg = NUCatRomCubic(*POINTS_3D)
        assert np.ndim(seg.get_point_weight_at_knot_value(1, 0.5)) == 0

    @pytest.mark.parametrize("index", [-1, 4])
    def test_index_out_of_range(self, index: int) -> None:
        """Only points 0 to 3 have weights."""
        seg = NUCatRomCubic(*POINTS_3D)
        with pytest.raises(IndexError, match="between 0 and 3"):
            seg.get_point_weight_at_knot_value(index, 0.5)


class TestHermite:
    """Tests for the non-uniform Hermite segment."""

    def test_end_conditions(self) -> None:
        """Positions and velocities are met at the two knots."""
        p0, v0, p1, v1 = [0.0, 1.0], [2.0, 0.0], [3.0, -1.0], [0.0, -4.0]
        seg = NUHermiteCubic(p0, v0, p1, v1, knots=(2.0, 4.5))
        nptest.assert_allclose(seg.eval(2.0), p0, atol=1e-12)
        nptest.assert_allclose(seg.eval(4.5), p1, atol=1e-12)
        nptest.assert_allclose(seg.eval_derivative(2.0), v0, atol=1e-12)
        nptest.assert_allclose(seg.eval_derivative(4.5), v1, atol=1e-12)

    def test_unit_knots_match_uniform_hermite(self) -> None:
        """Knots 0 and 1 give the uniform Hermite polynomial."""
        seg = NUHermiteCubic(*POINTS_3D)
        nptest.assert_allclose(
            seg.curve.coefficients, HermiteCubic(*POINTS_3D).curve.coefficients, atol=1e-12
        )
        nptest.assert_array_equal(seg.knots, [0.0, 1.0])

    def test_knot_interval_scales_velocities(self) -> None:
        """The same velocities over a longer interval bend the curve more."""
        short = NUHermiteCubic([0.0, 0.0], [0.0, 1.0], [1.0, 0.0], [0.0, -1.0])
        long = NUHermiteCubic([0.0, 0.0], [0.0, 1.0], [1.0, 0.0], [0.0, -1.0], knots=(0.0, 3.0))
        assert long.eval(1.5)[1] > short.eval(0.5)[1]

    def test_calculate_hermite_curve(self) -> None:
        """The free function builds the same polynomial as the segment."""
        curve = calculate_hermite_curve(1.0, 0.0, 2.0, 1.0, -1.0, 1.0)
        seg = NUHermiteCubic(1.0, 0.0, 2.0, 1.0, knots=(-1.0, 1.0))
        nptest.assert_allclose(curve.coefficients, seg.curve.coefficients)

    def test_coincident_knots(self) -> None:
        """A zero-length knot interval is rejected."""
        with pytest.raises(ValueError, match="must differ"):
            calculate_hermite_curve(0.0, 1.0, 1.0, 1.0, 2.0, 2.0)
        with pytest.raises(ValueError, match="strictly increasing"):
            NUHermiteCubic(0.0, 1.0, 1.0, 1.0, knots=(2.0, 2.0))

    def test_repr(self) -> None:
        """The representation lists the points and knots."""
        seg = NUHermiteCubic(0.0, 1.0, 2.0, 3.0)
        assert repr(seg) == "NUHermiteCubic(points=[[0.0], [1.0], [2.0], [3.0]], knots=[0.0, 1.0])"
