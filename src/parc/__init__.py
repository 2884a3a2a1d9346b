"""Public API surface for PaRC.

Defines package metadata and exported interfaces.
"""

import logging
from typing import Final

# Private API imports (accessible but not in __all__)
# Users can access private functions via: parc._bspline_impl._function_name, etc.
from . import (
    _bspline_impl,  # noqa: F401
    _curve_impl,  # noqa: F401
    _vector_utils,  # noqa: F401
)

# Public API imports
from .bspline import Bspline
from .catrom_spline import CatRomSpline, EndpointMode
from .characteristic import (
    SplineBasis,
    convert_control_points,
    get_basis_function,
    get_characteristic_matrix,
    get_conversion_matrix,
    get_inverse_characteristic_matrix,
)
from .curves import (
    HasDerivative,
    HasEval,
    HasFourthDerivative,
    HasSecondDerivative,
    HasThirdDerivative,
    ParamCurve,
    ParamCurve1Diff,
    ParamCurve2Diff,
    ParamCurve3Diff,
    ParamCurve4Diff,
)
from .geometry import (
    Bivector3,
    Circle,
    Pose,
    eval_angle,
    eval_arc_binormal,
    eval_arc_matrix,
    eval_arc_normal,
    eval_arc_orientation,
    eval_arc_pose,
    eval_binormal,
    eval_curvature,
    eval_matrix,
    eval_normal,
    eval_orientation,
    eval_osculating_circle,
    eval_pose,
    eval_tangent,
    eval_torsion,
    get_arc_length,
)
from .interpolation import catmull_rom, interpolate_catmull_rom
from .knots import (
    check_knot_vector,
    create_uniform_knot_vector,
    create_uniform_open_knot_vector,
    get_bspline_knot_count,
)
from .nonuniform import (
    CatRomType,
    KnotCalcMode,
    NUCatRomCubic,
    NUHermiteCubic,
    calc_catrom_knot,
    calc_catrom_knots,
    calculate_catrom_curve,
    calculate_hermite_curve,
)
from .nurbs import Nurbs
from .polynomial import Polynomial
from .sampler import UniformCurveSampler
from .segments import (
    BezierCubic,
    BezierQuad,
    CatRomCubic,
    CubicSegment,
    HermiteCubic,
    UBSCubic,
    UniformSegment,
)
from .tolerance import (
    ToleranceInfo,
    get_conservative_tolerance,
    get_default_tolerance,
    get_machine_epsilon,
    get_strict_tolerance,
    get_tolerance,
    get_tolerance_info,
    is_almost_zero,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Package metadata
__version__: Final[str] = "0.1.0"
__license__: Final[str] = "MIT"
__author__: Final[str] = "Pablo Antolin <pablo.antolin@epfl.ch>"

# Public interface: only functions/classes that don't start with _
__all__ = [
    "BezierCubic",
    "BezierQuad",
    "Bivector3",
    "Bspline",
    "CatRomCubic",
    "CatRomSpline",
    "CatRomType",
    "Circle",
    "CubicSegment",
    "EndpointMode",
    "HasDerivative",
    "HasEval",
    "HasFourthDerivative",
    "HasSecondDerivative",
    "HasThirdDerivative",
    "HermiteCubic",
    "KnotCalcMode",
    "NUCatRomCubic",
    "NUHermiteCubic",
    "Nurbs",
    "ParamCurve",
    "ParamCurve1Diff",
    "ParamCurve2Diff",
    "ParamCurve3Diff",
    "ParamCurve4Diff",
    "Polynomial",
    "Pose",
    "SplineBasis",
    "ToleranceInfo",
    "UBSCubic",
    "UniformCurveSampler",
    "UniformSegment",
    "__author__",
    "__license__",
    "__version__",
    "calc_catrom_knot",
    "calc_catrom_knots",
    "calculate_catrom_curve",
    "calculate_hermite_curve",
    "catmull_rom",
    "check_knot_vector",
    "convert_control_points",
    "create_uniform_knot_vector",
    "create_uniform_open_knot_vector",
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
    "get_basis_function",
    "get_bspline_knot_count",
    "get_characteristic_matrix",
    "get_conservative_tolerance",
    "get_conversion_matrix",
    "get_default_tolerance",
    "get_inverse_characteristic_matrix",
    "get_machine_epsilon",
    "get_strict_tolerance",
    "get_tolerance",
    "get_tolerance_info",
    "interpolate_catmull_rom",
    "is_almost_zero",
]
