"""Smoke tests for package metadata.

Validates public attributes exposed via the package API.
"""

from __future__ import annotations

import importlib
import logging
from typing import Final

import parc


def test_package_all_exports() -> None:
    """Ensure all expected symbols are exported."""
    expected_metadata: Final[set[str]] = {"__version__", "__license__", "__author__"}
    assert expected_metadata.issubset(set(parc.__all__))

    expected_public_api: Final[set[str]] = {
        # Polynomials and characteristic matrices
        "Polynomial",
        "SplineBasis",
        "convert_control_points",
        "get_basis_function",
        "get_characteristic_matrix",
        "get_conversion_matrix",
        "get_inverse_characteristic_matrix",
        # Segments and interpolation
        "BezierCubic",
        "BezierQuad",
        "CatRomCubic",
        "CubicSegment",
        "HermiteCubic",
        "UBSCubic",
        "UniformSegment",
        "catmull_rom",
        "interpolate_catmull_rom",
        # Non-uniform Catmull-Rom segments and splines
        "CatRomSpline",
        "CatRomType",
        "EndpointMode",
        "KnotCalcMode",
        "NUCatRomCubic",
        "NUHermiteCubic",
        "calc_catrom_knot",
        "calc_catrom_knots",
        "calculate_catrom_curve",
        "calculate_hermite_curve",
        # Curve capabilities
        "HasDerivative",
        "HasEval",
        "HasFourthDerivative",
        "HasSecondDerivative",
        "HasThirdDerivative",
        "ParamCurve",
        "ParamCurve1Diff",
        "ParamCurve2Diff",
        "ParamCurve3Diff",
        "ParamCurve4Diff",
        # Geometry
        "Bivector3",
        "Circle",
        "Pose",
        "eval_angle",
        "eval_arc_binormal",
        "eval_arc_matrix",
        "eval_arc_normal",
        "eval_arc_orientation",
        "eval_arc_pose",
        "eval_binormal",
        "eval_curvature",
        "eval_matrix",
        "eval_normal",
        "eval_orientation",
        "eval_osculating_circle",
        "eval_pose",
        "eval_tangent",
        "eval_torsion",
        "get_arc_length",
        # B-splines, NURBS and knots
        "Bspline",
        "Nurbs",
        "check_knot_vector",
        "create_uniform_knot_vector",
        "create_uniform_open_knot_vector",
        "get_bspline_knot_count",
        # Sampling
        "UniformCurveSampler",
        # Tolerance
        "ToleranceInfo",
        "get_conservative_tolerance",
        "get_default_tolerance",
        "get_machine_epsilon",
        "get_strict_tolerance",
        "get_tolerance",
        "get_tolerance_info",
        "is_almost_zero",
    }

    assert expected_public_api.issubset(set(parc.__all__))

    # Only metadata (__version__, __author__, __license__) may start with _
    private_in_all = {name for name in parc.__all__ if name.startswith("_")}
    assert private_in_all.issubset(expected_metadata)

    assert set(parc.__all__) == expected_metadata | expected_public_api
    assert list(parc.__all__) == sorted(parc.__all__)


def test_package_metadata_values() -> None:
    """Validate the package metadata constants."""
    assert parc.__version__ == "0.1.0"
    assert parc.__license__ == "MIT"
    assert parc.__author__ == "Pablo Antolin <pablo.antolin@epfl.ch>"


def test_metadata_import_stability() -> None:
    """Verify metadata survives module reloads."""
    module = importlib.reload(parc)
    assert module.__version__ == "0.1.0"


def test_package_logger_has_null_handler() -> None:
    """The package logger never emits unless the application configures logging."""
    handlers = logging.getLogger("parc").handlers
    assert any(isinstance(h, logging.NullHandler) for h in handlers)
