"""Characteristic matrices of the uniform spline bases.

A characteristic matrix ``M`` maps the control points ``P`` of a segment to the
coefficients of its polynomial: ``coefficients = M @ P``. Row ``r`` of ``M``
holds the coefficient of ``t^r``, and column ``i`` is the basis function
weighting control point ``i``.

All matrices and their inverses are read-only float64 constants computed at
import time.
"""

from enum import Enum

import numpy as np
from numpy import typing as npt

from ._vector_utils import _as_points, _readonly
from .polynomial import Polynomial


class SplineBasis(Enum):
    """Available uniform spline bases."""

    QUADRATIC_BEZIER = "quadratic_bezier"
    CUBIC_BEZIER = "cubic_bezier"
    CUBIC_HERMITE = "cubic_hermite"
    CUBIC_CATMULL_ROM = "cubic_catmull_rom"
    CUBIC_UNIFORM_BSPLINE = "cubic_uniform_bspline"


def _constant(rows: list[list[float]], scale: float = 1.0) -> npt.NDArray[np.float64]:
    return _readonly(np.array(rows, dtype=np.float64) * scale)


def _inverse(matrix: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    return _readonly(np.linalg.inv(matrix))


QUADRATIC_BEZIER = _constant(
    [
        [1, 0, 0],
        [-2, 2, 0],
        [1, -2, 1],
    ]
)

CUBIC_BEZIER = _constant(
    [
        [1, 0, 0, 0],
        [-3, 3, 0, 0],
        [3, -6, 3, 0],
        [-1, 3, -3, 1],
    ]
)

# Control point order: p0, v0, p1, v1.
CUBIC_HERMITE = _constant(
    [
        [1, 0, 0, 0],
        [0, 1, 0, 0],
        [-3, -2, 3, -1],
        [2, 1, -2, 1],
    ]
)

CUBIC_CATMULL_ROM = _constant(
    [
        [0, 2, 0, 0],
        [-1, 0, 1, 0],
        [2, -5, 4, -1],
        [-1, 3, -3, 1],
    ],
    scale=0.5,
)

CUBIC_UNIFORM_BSPLINE = _constant(
    [
        [1, 4, 1, 0],
        [-3, 0, 3, 0],
        [3, -6, 3, 0],
        [-1, 3, -3, 1],
    ],
    scale=1.0 / 6.0,
)

QUADRATIC_BEZIER_INVERSE = _inverse(QUADRATIC_BEZIER)
CUBIC_BEZIER_INVERSE = _inverse(CUBIC_BEZIER)
CUBIC_HERMITE_INVERSE = _inverse(CUBIC_HERMITE)
CUBIC_CATMULL_ROM_INVERSE = _inverse(CUBIC_CATMULL_ROM)
CUBIC_UNIFORM_BSPLINE_INVERSE = _inverse(CUBIC_UNIFORM_BSPLINE)

_MATRICES = {
    SplineBasis.QUADRATIC_BEZIER: (QUADRATIC_BEZIER, QUADRATIC_BEZIER_INVERSE),
    SplineBasis.CUBIC_BEZIER: (CUBIC_BEZIER, CUBIC_BEZIER_INVERSE),
    SplineBasis.CUBIC_HERMITE: (CUBIC_HERMITE, CUBIC_HERMITE_INVERSE),
    SplineBasis.CUBIC_CATMULL_ROM: (CUBIC_CATMULL_ROM, CUBIC_CATMULL_ROM_INVERSE),
    SplineBasis.CUBIC_UNIFORM_BSPLINE: (CUBIC_UNIFORM_BSPLINE, CUBIC_UNIFORM_BSPLINE_INVERSE),
}


def get_characteristic_matrix(basis: SplineBasis) -> npt.NDArray[np.float64]:
    """Get the characteristic matrix of a spline basis.

    Args:
        basis (SplineBasis): The spline basis.

    Returns:
        npt.NDArray[np.float64]: Read-only square matrix of size degree+1.

    Raises:
        TypeError: If basis is not a SplineBasis.
    """
    if not isinstance(basis, SplineBasis):
        raise TypeError(f"basis must be a SplineBasis. Got {type(basis).__name__}")
    return _MATRICES[basis][0]


def get_inverse_characteristic_matrix(basis: SplineBasis) -> npt.NDArray[np.float64]:
    """Get the inverse characteristic matrix of a spline basis.

    The inverse maps polynomial coefficients back to control points.

    Args:
        basis (SplineBasis): The spline basis.

    Returns:
        npt.NDArray[np.float64]: Read-only square matrix of size degree+1.

    Raises:
        TypeError: If basis is not a SplineBasis.
    """
    if not isinstance(basis, SplineBasis):
        raise TypeError(f"basis must be a SplineBasis. Got {type(basis).__name__}")
    return _MATRICES[basis][1]


def get_basis_function(matrix: npt.ArrayLike, index: int) -> Polynomial:
    """Extract the basis function of a control point from a characteristic matrix.

    Args:
        matrix (npt.ArrayLike): Characteristic matrix of size 3 or 4.
        index (int): Control point index.

    Returns:
        Polynomial: 1D polynomial built from column ``index``.

    Raises:
        IndexError: If index is outside [0, size).

    Example:
        >>> get_basis_function(CUBIC_BEZIER, 0).eval(0.0)
        array([1.])
    """
    mat = np.asarray(matrix)
    size = mat.shape[1]
    if not 0 <= index < size:
        raise IndexError(f"Basis function index must be between 0 and {size - 1}. Got {index}")
    return Polynomial.from_coefficients(mat[:, index])


def get_conversion_matrix(
    from_matrix: npt.ArrayLike, to_matrix: npt.ArrayLike
) -> npt.NDArray[np.float64]:
    """Get the matrix converting control points between two bases.

    The conversion ``C = inv(to_matrix) @ from_matrix`` satisfies
    ``to_matrix @ (C @ P) == from_matrix @ P``, so the converted control points
    describe exactly the same curve.

    Args:
        from_matrix (npt.ArrayLike): Characteristic matrix of the source basis.
        to_matrix (npt.ArrayLike): Characteristic matrix of the target basis.

    Returns:
        npt.NDArray[np.float64]: The conversion matrix.

    Raises:
        ValueError: If the matrices are not square or do not share the same size.
    """
    source = np.asarray(from_matrix, dtype=np.float64)
    target = np.asarray(to_matrix, dtype=np.float64)
    is_square = source.ndim == 2 and source.shape[0] == source.shape[1]  # noqa: PLR2004
    if not is_square or source.shape != target.shape:
        raise ValueError(
            f"Conversion requires square matrices of the same size. "
            f"Got {source.shape} and {target.shape}"
        )
    return np.linalg.inv(target) @ source


def convert_control_points(
    points: npt.ArrayLike, from_basis: SplineBasis, to_basis: SplineBasis
) -> npt.NDArray[np.float32 | np.float64]:
    """Convert segment control points from one basis to another.

    Args:
        points (npt.ArrayLike): Control points of shape (degree+1, D).
        from_basis (SplineBasis): Basis the points are expressed in.
        to_basis (SplineBasis): Target basis.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Converted control points with the
            dtype of the input.

    Raises:
        ValueError: If the bases have different degrees or the number of
            points does not match.

    Example:
        >>> convert_control_points(
        ...     [[0.0], [1.0], [2.0], [3.0]], SplineBasis.CUBIC_BEZIER, SplineBasis.CUBIC_HERMITE
        ... ).ravel()
        array([0., 3., 3., 3.])
    """
    conversion = get_conversion_matrix(
        get_characteristic_matrix(from_basis), get_characteristic_matrix(to_basis)
    )
    pts = _as_points(points, count=conversion.shape[0])
    return (conversion.astype(pts.dtype) @ pts).astype(pts.dtype, copy=False)


CUBIC_HERMITE_POSITION_BASIS_FUNCTIONS = (
    get_basis_function(CUBIC_HERMITE, 0),
    get_basis_function(CUBIC_HERMITE, 2),
)
CUBIC_HERMITE_VELOCITY_BASIS_FUNCTIONS = (
    get_basis_function(CUBIC_HERMITE, 1),
    get_basis_function(CUBIC_HERMITE, 3),
)
CUBIC_CATMULL_ROM_BASIS_FUNCTIONS = tuple(
    get_basis_function(CUBIC_CATMULL_ROM, i) for i in range(CUBIC_CATMULL_ROM.shape[1])
)
