"""Tests for NURBS curves."""

from __future__ import annotations

import numpy as np
import numpy.testing as nptest
import pytest

from parc.bspline import Bspline
from parc.curves import ParamCurve
from parc.nurbs import Nurbs

POINTS_5 = np.array([[0.0, 0.0], [1.0, 2.0], [2.0, -1.0], [3.0, 3.0], [4.0, 0.0]])
QUARTER_CIRCLE_POINTS = np.array([[1.0, 0.0], [1.0, 1.0], [0.0, 1.0]])
QUARTER_CIRCLE_KNOTS = np.array([0.0, 0.0, 0.0, 1.0, 1.0, 1.0])
QUARTER_CIRCLE_WEIGHTS = np.array([1.0, np.sqrt(2.0) / 2.0, 1.0])


@pytest.fixture
def open_cubic() -> Nurbs:
    """Non-rational open cubic with five 2D points."""
    return Nurbs.uniform_bspline(POINTS_5, degree=3)


@pytest.fixture
def quarter_circle() -> Nurbs:
    """Rational quadratic tracing the unit quarter circle."""
    return Nurbs(QUARTER_CIRCLE_POINTS, QUARTER_CIRCLE_KNOTS, QUARTER_CIRCLE_WEIGHTS, degree=2)


class TestConstruction:
    """Tests for building NURBS curves."""

    def test_properties(self, open_cubic: Nurbs) -> None:
        """Counts follow the points and degree."""
        assert open_cubic.degree == 3  # noqa: PLR2004
        assert open_cubic.order == 4  # noqa: PLR2004
        assert open_cubic.point_count == 5  # noqa: PLR2004
        assert open_cubic.knot_count == 9  # noqa: PLR2004
        assert open_cubic.segment_count == 2  # noqa: PLR2004
        assert open_cubic.dimension == 2  # noqa: PLR2004
        assert not open_cubic.is_rational
        assert open_cubic.weights is None

    def test_uniform_knots(self, open_cubic: Nurbs) -> None:
        """The uniform factory clamps the knot vector by default."""
        nptest.assert_array_equal(open_cubic.knots, [0, 0, 0, 0, 1, 2, 2, 2, 2])

    def test_rational(self, quarter_circle: Nurbs) -> None:
        """Curves with weights are rational and keep a read-only copy of them."""
        assert quarter_circle.is_rational
        assert quarter_circle.weights is not None
        nptest.assert_allclose(quarter_circle.weights, QUARTER_CIRCLE_WEIGHTS)
        assert not quarter_circle.weights.flags.writeable
        assert not quarter_circle.points.flags.writeable
        assert not quarter_circle.knots.flags.writeable

    def test_weights_not_1d(self) -> None:
        """Weights must be a flat array."""
        with pytest.raises(TypeError, match="weights must be a 1D array"):
            Nurbs(QUARTER_CIRCLE_POINTS, QUARTER_CIRCLE_KNOTS, np.ones((3, 1)), degree=2)

    def test_weights_wrong_length(self) -> None:
        """There must be one weight per point."""
        with pytest.raises(ValueError, match="Got an array of 2 weights, expected 3"):
            Nurbs(QUARTER_CIRCLE_POINTS, QUARTER_CIRCLE_KNOTS, [1.0, 1.0], degree=2)

    def test_wrong_knot_count(self) -> None:
        """The knot vector length must match the points and degree."""
        with pytest.raises(ValueError, match="knots"):
            Nurbs(QUARTER_CIRCLE_POINTS, [0.0, 0.0, 1.0, 1.0], degree=2)

    def test_unweighted_weights(self) -> None:
        """Neutral weights are ones."""
        weights = Nurbs.unweighted_weights(4)
        nptest.assert_array_equal(weights, np.ones(4))
        assert weights.dtype == np.float64

    def test_protocol(self, open_cubic: Nurbs) -> None:
        """NURBS curves are evaluable curves."""
        assert isinstance(open_cubic, ParamCurve)

    def test_repr(self, open_cubic: Nurbs, quarter_circle: Nurbs) -> None:
        """The representation names the degree, point count and rationality."""
        assert repr(open_cubic) == "Nurbs(degree=3, point_count=5, rational=False)"
        assert repr(quarter_circle) == "Nurbs(degree=2, point_count=3, rational=True)"


class TestEvaluation:
    """Tests for evaluating NURBS curves."""

    def test_matches_bspline(self, open_cubic: Nurbs) -> None:
        """Without weights the curve is the B-spline with the same knots."""
        spline = Bspline.uniform(POINTS_5, degree=3, open=True)
        ts = np.linspace(0.0, 1.0, 9)
        nptest.assert_allclose(open_cubic.eval(ts), spline.eval(ts), atol=1e-12)

    def test_endpoints(self, open_cubic: Nurbs) -> None:
        """Open curves interpolate their end points."""
        nptest.assert_allclose(open_cubic.get_point(0.0), POINTS_5[0], atol=1e-12)
        nptest.assert_allclose(open_cubic.get_point(1.0), POINTS_5[-1], atol=1e-12)

    def test_equal_weights_cancel(self) -> None:
        """Scaling every weight by the same factor leaves the curve unchanged."""
        plain = Nurbs.uniform_bspline(POINTS_5, degree=3)
        weighted = Nurbs(POINTS_5, plain.knots, np.full(5, 2.5), degree=3)
        ts = np.linspace(0.0, 1.0, 7)
        nptest.assert_allclose(weighted.eval(ts), plain.eval(ts), atol=1e-12)

    def test_quarter_circle(self, quarter_circle: Nurbs) -> None:
        """A rational quadratic reproduces a circular arc exactly."""
        points = quarter_circle.eval(np.linspace(0.0, 1.0, 11))
        nptest.assert_allclose(np.linalg.norm(points, axis=-1), 1.0, atol=1e-12)
        nptest.assert_allclose(quarter_circle.eval(0.5), [np.sqrt(0.5), np.sqrt(0.5)])

    def test_shapes(self, open_cubic: Nurbs) -> None:
        """Scalar parameters give one vector and arrays keep their shape."""
        assert open_cubic.eval(0.3).shape == (2,)
        assert open_cubic.eval(np.zeros((2, 3))).shape == (2, 3, 2)

    def test_get_basis(self, open_cubic: Nurbs) -> None:
        """The first basis function of an open knot vector is 1 at the start."""
        assert open_cubic.get_basis(0, 4, 0.0) == 1.0
        assert open_cubic.get_basis(1, 4, 0.0) == 0.0

    def test_weighted_basis_partition(self, quarter_circle: Nurbs) -> None:
        """Normalized contributions sum to one."""
        us = np.linspace(0.0, 1.0, 5)
        total = sum(quarter_circle.get_weighted_basis(i, us) for i in range(3))
        nptest.assert_allclose(total, 1.0)

    def test_weighted_basis_scalar(self, quarter_circle: Nurbs) -> None:
        """At the start only the first point contributes."""
        assert quarter_circle.get_weighted_basis(0, 0.0) == pytest.approx(1.0)
        assert quarter_circle.get_weighted_basis(2, 0.0) == pytest.approx(0.0)

    def test_weighted_basis_index(self, quarter_circle: Nurbs) -> None:
        """Point indices outside the control polygon are rejected."""
        with pytest.raises(IndexError, match="between 0 and 2"):
            quarter_circle.get_weighted_basis(3, 0.5)


class TestSmooth:
    """Tests for control polygon smoothing."""

    def test_single_pass(self, open_cubic: Nurbs) -> None:
        """Interior points are averaged with their neighbours and ends are kept."""
        smoothed = open_cubic.smooth()
        expected = POINTS_5.copy()
        expected[1:-1] = 0.5 * POINTS_5[1:-1] + 0.25 * (POINTS_5[:-2] + POINTS_5[2:])
        nptest.assert_allclose(smoothed.points, expected)
        nptest.assert_array_equal(smoothed.knots, open_cubic.knots)
        assert smoothed.degree == open_cubic.degree

    def test_original_unchanged(self, open_cubic: Nurbs) -> None:
        """Smoothing builds a new curve."""
        open_cubic.smooth(3)
        nptest.assert_array_equal(open_cubic.points, POINTS_5)

    def test_iterations_flatten(self, open_cubic: Nurbs) -> None:
        """More passes bring the interior closer to the chord."""
        once = open_cubic.smooth(1)
        many = open_cubic.smooth(50)
        assert np.abs(many.points[1:-1, 1]).max() < np.abs(once.points[1:-1, 1]).max()
        nptest.assert_array_equal(many.points[[0, -1]], POINTS_5[[0, -1]])

    def test_keeps_weights(self, quarter_circle: Nurbs) -> None:
        """Weights are carried over."""
        smoothed = quarter_circle.smooth()
        assert smoothed.weights is not None
        nptest.assert_array_equal(smoothed.weights, QUARTER_CIRCLE_WEIGHTS)

    def test_invalid_iterations(self, open_cubic: Nurbs) -> None:
        """At least one pass is required."""
        with pytest.raises(ValueError, match="at least 1"):
            open_cubic.smooth(0)


class TestRandomWeights:
    """Tests with randomly drawn positive weights."""

    def test_partition_of_unity(self, rng: np.random.Generator) -> None:
        """Normalized contributions sum to one for any positive weights."""
        weights = rng.uniform(0.2, 3.0, size=5)
        plain = Nurbs.uniform_bspline(POINTS_5, degree=3)
        curve = Nurbs(POINTS_5, plain.knots, weights, degree=3)
        us = rng.uniform(0.0, 2.0, size=8)
        total = sum(curve.get_weighted_basis(i, us) for i in range(5))
        nptest.assert_allclose(total, 1.0)

    def test_convex_hull(self, rng: np.random.Generator) -> None:
        """Points stay inside the bounding box of the control points."""
        weights = rng.uniform(0.2, 3.0, size=5)
        plain = Nurbs.uniform_bspline(POINTS_5, degree=3)
        curve = Nurbs(POINTS_5, plain.knots, weights, degree=3)
        points = curve.eval(rng.uniform(0.0, 1.0, size=20))
        assert np.all(points >= POINTS_5.min(axis=0) - 1e-12)
        assert np.all(points <= POINTS_5.max(axis=0) + 1e-12)
