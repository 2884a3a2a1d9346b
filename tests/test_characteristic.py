"""Tests for characteristic matrices and basis conversion."""

from __future__ import annotations

import numpy as np
import numpy.testing as nptest
import pytest

from parc.characteristic import (
    CUBIC_BEZIER,
    CUBIC_CATMULL_ROM,
    CUBIC_CATMULL_ROM_BASIS_FUNCTIONS,
    CUBIC_HERMITE,
    CUBIC_HERMITE_POSITION_BASIS_FUNCTIONS,
    CUBIC_HERMITE_VELOCITY_BASIS_FUNCTIONS,
    CUBIC_UNIFORM_BSPLINE,
    QUADRATIC_BEZIER,
    SplineBasis,
    convert_control_points,
    get_basis_function,
    get_characteristic_matrix,
    get_conversion_matrix,
    get_inverse_characteristic_matrix,
)

CUBIC_BASES = [
    SplineBasis.CUBIC_BEZIER,
    SplineBasis.CUBIC_HERMITE,
    SplineBasis.CUBIC_CATMULL_ROM,
    SplineBasis.CUBIC_UNIFORM_BSPLINE,
]


class TestCharacteristicMatrices:
    """Tests for the matrix constants."""

    def test_scaled_matrices(self) -> None:
        """Catmull-Rom is scaled by 1/2 and the uniform B-spline by 1/6."""
        nptest.assert_allclose(CUBIC_CATMULL_ROM[0], [0.0, 1.0, 0.0, 0.0])
        nptest.assert_allclose(CUBIC_UNIFORM_BSPLINE[0], [1 / 6, 4 / 6, 1 / 6, 0.0])

    @pytest.mark.parametrize("basis", list(SplineBasis))
    def test_inverse(self, basis: SplineBasis) -> None:
        """Each matrix times its inverse is the identity."""
        matrix = get_characteristic_matrix(basis)
        inverse = get_inverse_characteristic_matrix(basis)
        nptest.assert_allclose(matrix @ inverse, np.eye(matrix.shape[0]), atol=1e-12)

    @pytest.mark.parametrize("basis", list(SplineBasis))
    def test_matrices_are_read_only(self, basis: SplineBasis) -> None:
        """The constants cannot be modified."""
        with pytest.raises(ValueError, match="read-only"):
            get_characteristic_matrix(basis)[0, 0] = 2.0

    def test_sizes(self) -> None:
        """The quadratic matrix is 3x3 and the cubic ones are 4x4."""
        assert QUADRATIC_BEZIER.shape == (3, 3)
        for basis in CUBIC_BASES:
            assert get_characteristic_matrix(basis).shape == (4, 4)

    def test_not_a_basis(self) -> None:
        """Passing anything but a SplineBasis raises TypeError."""
        with pytest.raises(TypeError, match="SplineBasis"):
            get_characteristic_matrix("cubic_bezier")  # type: ignore[arg-type]
        with pytest.raises(TypeError, match="SplineBasis"):
            get_inverse_characteristic_matrix(3)  # type: ignore[arg-type]

    @pytest.mark.parametrize(
        "basis",
        [SplineBasis.QUADRATIC_BEZIER, SplineBasis.CUBIC_BEZIER, SplineBasis.CUBIC_UNIFORM_BSPLINE],
    )
    def test_partition_of_unity(self, basis: SplineBasis) -> None:
        """Bezier and B-spline basis functions sum to one."""
        matrix = get_characteristic_matrix(basis)
        t = np.linspace(0.0, 1.0, 7)
        total = sum(get_basis_function(matrix, i).eval(t) for i in range(matrix.shape[1]))
        nptest.assert_allclose(total, np.ones((7, 1)))


class TestBasisFunctions:
    """Tests for `get_basis_function` and the precomputed tuples."""

    def test_bezier_basis(self) -> None:
        """The cubic Bezier basis is the Bernstein basis."""
        t = 0.3
        expected = [(1 - t) ** 3, 3 * t * (1 - t) ** 2, 3 * t**2 * (1 - t), t**3]
        values = [get_basis_function(CUBIC_BEZIER, i).eval(t)[0] for i in range(4)]
        nptest.assert_allclose(values, expected)

    @pytest.mark.parametrize("index", [-1, 4])
    def test_index_out_of_range(self, index: int) -> None:
        """Column indices outside the matrix raise IndexError."""
        with pytest.raises(IndexError, match="between 0 and 3"):
            get_basis_function(CUBIC_BEZIER, index)

    def test_hermite_tuples(self) -> None:
        """Position functions interpolate the ends and velocity functions vanish there."""
        h00, h01 = CUBIC_HERMITE_POSITION_BASIS_FUNCTIONS
        h10, h11 = CUBIC_HERMITE_VELOCITY_BASIS_FUNCTIONS
        nptest.assert_allclose(h00.eval([0.0, 1.0]).ravel(), [1.0, 0.0])
        nptest.assert_allclose(h01.eval([0.0, 1.0]).ravel(), [0.0, 1.0])
        nptest.assert_allclose(h10.eval([0.0, 1.0]).ravel(), [0.0, 0.0], atol=1e-15)
        nptest.assert_allclose(h10.eval_derivative(0.0), [1.0])
        nptest.assert_allclose(h11.eval_derivative(1.0), [1.0])

    def test_catmull_rom_tuple(self) -> None:
        """The Catmull-Rom tuple holds the four columns of the matrix."""
        assert len(CUBIC_CATMULL_ROM_BASIS_FUNCTIONS) == 4  # noqa: PLR2004
        for i, func in enumerate(CUBIC_CATMULL_ROM_BASIS_FUNCTIONS):
            nptest.assert_allclose(func.coefficients.ravel(), CUBIC_CATMULL_ROM[:, i])


class TestConversion:
    """Tests for converting control points between bases."""

    def test_conversion_matrix_identity(self) -> None:
        """Converting a basis to itself is the identity."""
        nptest.assert_allclose(
            get_conversion_matrix(CUBIC_HERMITE, CUBIC_HERMITE), np.eye(4), atol=1e-12
        )

    def test_conversion_size_mismatch(self) -> None:
        """Matrices of different sizes cannot be converted."""
        with pytest.raises(ValueError, match="same size"):
            get_conversion_matrix(QUADRATIC_BEZIER, CUBIC_BEZIER)

    def test_conversion_non_square(self) -> None:
        """Non-square matrices are rejected."""
        with pytest.raises(ValueError, match="square"):
            get_conversion_matrix(np.ones((3, 4)), np.ones((3, 4)))

    @pytest.mark.parametrize("from_basis", CUBIC_BASES)
    @pytest.mark.parametrize("to_basis", CUBIC_BASES)
    def test_converted_points_describe_same_curve(
        self, from_basis: SplineBasis, to_basis: SplineBasis
    ) -> None:
        """The converted points give identical polynomial coefficients."""
        points = np.array([[0.0, 0.0], [1.0, 2.0], [3.0, 2.5], [4.0, 0.0]])
        converted = convert_control_points(points, from_basis, to_basis)
        nptest.assert_allclose(
            get_characteristic_matrix(to_basis) @ converted,
            get_characteristic_matrix(from_basis) @ points,
            atol=1e-12,
        )

    def test_bezier_to_hermite(self) -> None:
        """A straight Bezier has Hermite velocities three times its handle offsets."""
        converted = convert_control_points(
            [[0.0], [1.0], [2.0], [3.0]], SplineBasis.CUBIC_BEZIER, SplineBasis.CUBIC_HERMITE
        )
        nptest.assert_allclose(converted.ravel(), [0.0, 3.0, 3.0, 3.0], atol=1e-12)

    def test_float32_preserved(self) -> None:
        """Float32 points stay float32."""
        points = np.zeros((4, 3), dtype=np.float32)
        converted = convert_control_points(
            points, SplineBasis.CUBIC_BEZIER, SplineBasis.CUBIC_UNIFORM_BSPLINE
        )
        assert converted.dtype == np.float32

    def test_wrong_point_count(self) -> None:
        """The number of points must match the basis size."""
        with pytest.raises(ValueError, match="Expected 4 points"):
            convert_control_points(
                np.zeros((3, 2)), SplineBasis.CUBIC_BEZIER, SplineBasis.CUBIC_HERMITE
            )
