"""
Core math modules

Fixed-point арифметика (масштаб 10^18) и численное ядро без float.
"""

# Fixed-point
from src.core.math.fixed_point import (
    BPS,
    BPS_DENOMINATOR,
    INT256_MAX,
    INT256_MIN,
    PERCENT,
    SCALE,
    bps_to_fixed,
    check_bounds,
    clamp,
    div,
    format_fixed,
    mul,
    mul_div,
    tdiv,
    to_fixed,
    validate_non_negative,
    validate_positive,
)

# Numerical kernel
from src.core.math.kernel import (
    CDF_SATURATION_LIMIT,
    EXP_INPUT_LIMIT,
    EXP_MAX_TERMS,
    exp,
    isqrt,
    ln,
    normal_cdf,
    normal_pdf,
    sqrt,
)

__all__ = [
    # Fixed-point
    "BPS",
    "BPS_DENOMINATOR",
    "INT256_MAX",
    "INT256_MIN",
    "PERCENT",
    "SCALE",
    "bps_to_fixed",
    "check_bounds",
    "clamp",
    "div",
    "format_fixed",
    "mul",
    "mul_div",
    "tdiv",
    "to_fixed",
    "validate_non_negative",
    "validate_positive",
    # Kernel
    "CDF_SATURATION_LIMIT",
    "EXP_INPUT_LIMIT",
    "EXP_MAX_TERMS",
    "exp",
    "isqrt",
    "ln",
    "normal_cdf",
    "normal_pdf",
    "sqrt",
]
