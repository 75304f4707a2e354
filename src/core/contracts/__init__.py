"""
Contract Validation Module

JSON Schema контракты для документов, которые risk engine отдаёт наружу.
"""

from .validators import (
    ContractValidator,
    LiquidationRequestValidator,
    PortfolioRiskValidator,
    PositionRiskValidator,
    SchemaLoader,
    validate_liquidation_request,
    validate_portfolio_risk,
    validate_position_risk,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "PositionRiskValidator",
    "PortfolioRiskValidator",
    "LiquidationRequestValidator",
    # Functions
    "validate_position_risk",
    "validate_portfolio_risk",
    "validate_liquidation_request",
]
