"""
Domain models and value objects.

Immutable pydantic модели опционного risk-ядра: спецификация опциона,
Greeks, риск позиции и портфеля, лимиты, рыночные условия.
"""

from src.core.domain.greeks import Greeks
from src.core.domain.liquidation import LiquidationReason, LiquidationRequest
from src.core.domain.market_conditions import (
    CALM_MARKET,
    HIGH_VOLATILITY_VIX,
    MARKET_STRESS_LIQUIDITY,
    MarketConditions,
)
from src.core.domain.option import AssetClass, OptionSpec, OptionStyle, OptionType
from src.core.domain.portfolio_risk import PortfolioRisk
from src.core.domain.position_risk import (
    CRITICAL_SCORE_THRESHOLD,
    HIGH_SCORE_THRESHOLD,
    MAX_RISK_SCORE,
    MEDIUM_SCORE_THRESHOLD,
    PositionRisk,
    RiskLevel,
    risk_level_from_score,
)
from src.core.domain.risk_config import DEFAULT_RISK_LIMITS, AssetRiskConfig, RiskLimits

__all__ = [
    # Option
    "AssetClass",
    "OptionSpec",
    "OptionStyle",
    "OptionType",
    "Greeks",
    # Risk
    "CRITICAL_SCORE_THRESHOLD",
    "HIGH_SCORE_THRESHOLD",
    "MAX_RISK_SCORE",
    "MEDIUM_SCORE_THRESHOLD",
    "PortfolioRisk",
    "PositionRisk",
    "RiskLevel",
    "risk_level_from_score",
    # Configuration
    "DEFAULT_RISK_LIMITS",
    "AssetRiskConfig",
    "RiskLimits",
    # Market
    "CALM_MARKET",
    "HIGH_VOLATILITY_VIX",
    "MARKET_STRESS_LIQUIDITY",
    "MarketConditions",
    # Liquidation
    "LiquidationReason",
    "LiquidationRequest",
]
