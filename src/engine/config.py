"""
EngineConfig — параметры RiskEngine

Все значения fixed-point (масштаб 10^18), кроме интервалов в секундах.
"""

from dataclasses import dataclass

from src.core.math.fixed_point import validate_non_negative, validate_positive
from src.pricing.black_scholes import SECONDS_PER_YEAR
from src.risk.context import DEFAULT_EMERGENCY_MULTIPLIER
from src.risk.portfolio_aggregator import DEFAULT_DAILY_VOLATILITY, DEFAULT_VOL_OF_VOL
from src.risk.position_evaluator import DEFAULT_IMPLIED_VOLATILITY, DEFAULT_RISK_FREE_RATE

# Котировка старше часа считается устаревшей
DEFAULT_MAX_PRICE_AGE_SEC = 3600


@dataclass(frozen=True)
class EngineConfig:
    """Конфигурация движка.

    - default_implied_volatility: σ для активов без base_volatility (80%)
    - default_risk_free_rate: r для активов без risk_free_rate (5%)
    - emergency_risk_multiplier: множитель risk score в emergency mode (2×)
    - daily_volatility / vol_of_vol: параметры VaR (2% / 20%)
    - max_price_age_sec: граница устаревания котировки
    - seconds_per_year: база годовой доли времени (365 дней)
    """

    default_implied_volatility: int = DEFAULT_IMPLIED_VOLATILITY
    default_risk_free_rate: int = DEFAULT_RISK_FREE_RATE
    emergency_risk_multiplier: int = DEFAULT_EMERGENCY_MULTIPLIER
    daily_volatility: int = DEFAULT_DAILY_VOLATILITY
    vol_of_vol: int = DEFAULT_VOL_OF_VOL
    max_price_age_sec: int = DEFAULT_MAX_PRICE_AGE_SEC
    seconds_per_year: int = SECONDS_PER_YEAR

    def __post_init__(self):
        validate_positive(self.default_implied_volatility, "default_implied_volatility")
        validate_non_negative(self.default_risk_free_rate, "default_risk_free_rate")
        validate_positive(self.emergency_risk_multiplier, "emergency_risk_multiplier")
        validate_non_negative(self.daily_volatility, "daily_volatility")
        validate_non_negative(self.vol_of_vol, "vol_of_vol")
        validate_positive(self.max_price_age_sec, "max_price_age_sec")
        validate_positive(self.seconds_per_year, "seconds_per_year")
