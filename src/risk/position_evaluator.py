"""
Position Risk Evaluator — risk score и уровень риска позиции

Risk score — сумма независимо ограниченных компонент (каждая 0-2000),
затем общий cap 10000:

    time        <7d → 2000, <30d → 1000, иначе 500
    moneyness   max(S/K, K/S) >110% → 1500, >105% → 1000, иначе 500
    volatility  σ >100% → 2000, >50% → 1000, иначе 500
    greeks      +500 за |delta|>0.5, |gamma|>1.0, |vega|>10 (до 1500)
    market      +1000 high volatility, +1000 market stress
    size        notional >$1M → 1000, >$100K → 500, иначе 0

В emergency mode сумма умножается на мультипликатор контекста до cap.
risk_level — детерминированный бакет итогового score.
"""

import logging
from dataclasses import dataclass
from typing import Final, Optional

from src.core.domain.greeks import Greeks
from src.core.domain.market_conditions import MarketConditions
from src.core.domain.option import OptionSpec
from src.core.domain.position_risk import MAX_RISK_SCORE, PositionRisk
from src.core.domain.risk_config import AssetRiskConfig
from src.core.math.fixed_point import PERCENT, SCALE, div, mul, validate_positive
from src.pricing.black_scholes import SECONDS_PER_DAY
from src.pricing.greeks import GreeksCalculator
from src.risk.context import RiskContext

logger = logging.getLogger(__name__)

# =============================================================================
# ПАРАМЕТРЫ ПО УМОЛЧАНИЮ
# =============================================================================

DEFAULT_IMPLIED_VOLATILITY: Final[int] = 80 * PERCENT
DEFAULT_RISK_FREE_RATE: Final[int] = 5 * PERCENT

# =============================================================================
# ПОРОГИ КОМПОНЕНТ
# =============================================================================

SHORT_EXPIRY_SEC: Final[int] = 7 * SECONDS_PER_DAY
MEDIUM_EXPIRY_SEC: Final[int] = 30 * SECONDS_PER_DAY

MONEYNESS_FAR: Final[int] = 110 * PERCENT
MONEYNESS_NEAR: Final[int] = 105 * PERCENT

VOLATILITY_EXTREME: Final[int] = 100 * PERCENT
VOLATILITY_HIGH: Final[int] = 50 * PERCENT

DELTA_EXPOSURE_THRESHOLD: Final[int] = SCALE // 2
GAMMA_EXPOSURE_THRESHOLD: Final[int] = SCALE
VEGA_EXPOSURE_THRESHOLD: Final[int] = 10 * SCALE

NOTIONAL_LARGE: Final[int] = 1_000_000 * SCALE
NOTIONAL_MEDIUM: Final[int] = 100_000 * SCALE


# =============================================================================
# КОМПОНЕНТЫ SCORE
# =============================================================================


def time_risk_component(time_to_expiry: int) -> int:
    if time_to_expiry < SHORT_EXPIRY_SEC:
        return 2000
    if time_to_expiry < MEDIUM_EXPIRY_SEC:
        return 1000
    return 500


def moneyness_risk_component(spot: int, strike: int) -> int:
    """Удалённость от страйка в любую сторону (отношение всегда >= 1)."""
    ratio = div(spot, strike) if spot >= strike else div(strike, spot)
    if ratio > MONEYNESS_FAR:
        return 1500
    if ratio > MONEYNESS_NEAR:
        return 1000
    return 500


def volatility_risk_component(volatility: int) -> int:
    if volatility > VOLATILITY_EXTREME:
        return 2000
    if volatility > VOLATILITY_HIGH:
        return 1000
    return 500


def greeks_risk_component(greeks: Greeks) -> int:
    score = 0
    if abs(greeks.delta) > DELTA_EXPOSURE_THRESHOLD:
        score += 500
    if abs(greeks.gamma) > GAMMA_EXPOSURE_THRESHOLD:
        score += 500
    if abs(greeks.vega) > VEGA_EXPOSURE_THRESHOLD:
        score += 500
    return score


def market_risk_component(market: MarketConditions) -> int:
    score = 0
    if market.is_high_volatility:
        score += 1000
    if market.is_market_stress:
        score += 1000
    return score


def size_risk_component(notional: int) -> int:
    if notional > NOTIONAL_LARGE:
        return 1000
    if notional > NOTIONAL_MEDIUM:
        return 500
    return 0


@dataclass(frozen=True)
class RiskScoreBreakdown:
    """Разложение risk score по компонентам (для диагностики)."""

    time_component: int
    moneyness_component: int
    volatility_component: int
    greeks_component: int
    market_component: int
    size_component: int

    raw_total: int
    emergency_applied: bool
    total: int  # После emergency мультипликатора и cap


def compute_risk_score(
    time_to_expiry: int,
    spot: int,
    strike: int,
    volatility: int,
    greeks: Greeks,
    notional: int,
    context: RiskContext,
) -> RiskScoreBreakdown:
    """
    Risk score позиции с разложением по компонентам.

    Args:
        time_to_expiry: Секунд до экспирации
        spot: Текущая цена underlying
        strike: Страйк
        volatility: Implied volatility
        greeks: Greeks позиции
        notional: Notional позиции
        context: Глобальный контекст (рынок, emergency)

    Returns:
        RiskScoreBreakdown с итоговым score в [0, 10000]
    """
    components = (
        time_risk_component(time_to_expiry),
        moneyness_risk_component(spot, strike),
        volatility_risk_component(volatility),
        greeks_risk_component(greeks),
        market_risk_component(context.market),
        size_risk_component(notional),
    )
    raw_total = sum(components)

    total = raw_total
    if context.emergency_active:
        total = mul(raw_total, context.emergency_multiplier)

    return RiskScoreBreakdown(
        time_component=components[0],
        moneyness_component=components[1],
        volatility_component=components[2],
        greeks_component=components[3],
        market_component=components[4],
        size_component=components[5],
        raw_total=raw_total,
        emergency_applied=context.emergency_active,
        total=min(total, MAX_RISK_SCORE),
    )


# =============================================================================
# EVALUATOR
# =============================================================================


class PositionRiskEvaluator:
    """
    Оценка риска позиции: Greeks + risk score + уровень.

    Не хранит состояния; все глобальные условия приходят через RiskContext.
    """

    def __init__(
        self,
        greeks_calculator: Optional[GreeksCalculator] = None,
        default_implied_volatility: int = DEFAULT_IMPLIED_VOLATILITY,
        default_risk_free_rate: int = DEFAULT_RISK_FREE_RATE,
    ):
        self.greeks_calculator = greeks_calculator or GreeksCalculator()
        self.default_implied_volatility = default_implied_volatility
        self.default_risk_free_rate = default_risk_free_rate

    def resolve_parameters(self, asset_config: Optional[AssetRiskConfig]) -> tuple[int, int]:
        """(implied_volatility, risk_free_rate): override актива или значения по умолчанию."""
        volatility = self.default_implied_volatility
        rate = self.default_risk_free_rate
        if asset_config is not None:
            if asset_config.base_volatility is not None:
                volatility = asset_config.base_volatility
            if asset_config.risk_free_rate is not None:
                rate = asset_config.risk_free_rate
        return volatility, rate

    def evaluate(
        self,
        position_id: str,
        owner: str,
        spec: OptionSpec,
        notional: int,
        current_price: int,
        now: int,
        context: RiskContext,
        asset_config: Optional[AssetRiskConfig] = None,
    ) -> PositionRisk:
        """
        Полный расчёт PositionRisk.

        Raises:
            InvalidInput: notional/цена/страйк невалидны
            DivisionByZero: нулевая волатильность при t > 0
        """
        validate_positive(notional, "notional")

        time_to_expiry = spec.time_to_expiry(now)
        volatility, rate = self.resolve_parameters(asset_config)

        greeks = self.greeks_calculator.calculate_for_spec(
            spec, current_price, time_to_expiry, volatility, rate
        )
        breakdown = compute_risk_score(
            time_to_expiry=time_to_expiry,
            spot=current_price,
            strike=spec.strike_price,
            volatility=volatility,
            greeks=greeks,
            notional=notional,
            context=context,
        )
        logger.debug(
            "risk score %s: time=%d moneyness=%d vol=%d greeks=%d market=%d size=%d "
            "raw=%d emergency=%s total=%d",
            position_id,
            breakdown.time_component,
            breakdown.moneyness_component,
            breakdown.volatility_component,
            breakdown.greeks_component,
            breakdown.market_component,
            breakdown.size_component,
            breakdown.raw_total,
            breakdown.emergency_applied,
            breakdown.total,
        )

        return PositionRisk(
            position_id=position_id,
            owner=owner,
            spec=spec,
            notional_value=notional,
            current_price=current_price,
            time_to_expiry=time_to_expiry,
            implied_volatility=volatility,
            greeks=greeks,
            risk_score=breakdown.total,
            last_update=now,
        )
