"""
Risk — оценка риска позиций и агрегирование портфеля.
"""

from src.risk.context import DEFAULT_EMERGENCY_MULTIPLIER, RiskContext
from src.risk.portfolio_aggregator import (
    DEFAULT_DAILY_VOLATILITY,
    DEFAULT_VOL_OF_VOL,
    DRAWDOWN_DELTA_SHOCK,
    VAR_Z_95,
    PortfolioRiskAggregator,
)
from src.risk.position_evaluator import (
    DEFAULT_IMPLIED_VOLATILITY,
    DEFAULT_RISK_FREE_RATE,
    PositionRiskEvaluator,
    RiskScoreBreakdown,
    compute_risk_score,
)

__all__ = [
    # Context
    "DEFAULT_EMERGENCY_MULTIPLIER",
    "RiskContext",
    # Position
    "DEFAULT_IMPLIED_VOLATILITY",
    "DEFAULT_RISK_FREE_RATE",
    "PositionRiskEvaluator",
    "RiskScoreBreakdown",
    "compute_risk_score",
    # Portfolio
    "DEFAULT_DAILY_VOLATILITY",
    "DEFAULT_VOL_OF_VOL",
    "DRAWDOWN_DELTA_SHOCK",
    "VAR_Z_95",
    "PortfolioRiskAggregator",
]
