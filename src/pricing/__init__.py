"""
Pricing — Black-Scholes премия и Greeks в fixed-point арифметике.
"""

from src.pricing.black_scholes import (
    DAYS_PER_YEAR,
    DEFAULT_COLLATERAL_RATIO_PCT,
    SECONDS_PER_DAY,
    SECONDS_PER_YEAR,
    ModelTerms,
    black_scholes_price,
    compute_model_terms,
    intrinsic_value,
    option_price_for_spec,
    required_collateral,
    years_from_seconds,
)
from src.pricing.greeks import GreeksCalculator

__all__ = [
    # Constants
    "DAYS_PER_YEAR",
    "DEFAULT_COLLATERAL_RATIO_PCT",
    "SECONDS_PER_DAY",
    "SECONDS_PER_YEAR",
    # Types
    "ModelTerms",
    "GreeksCalculator",
    # Functions
    "black_scholes_price",
    "compute_model_terms",
    "intrinsic_value",
    "option_price_for_spec",
    "required_collateral",
    "years_from_seconds",
]
