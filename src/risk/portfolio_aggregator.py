"""
Portfolio Risk Aggregator — агрегированный риск портфеля владельца

Портфель всегда пересчитывается с нуля по текущему набору активных позиций:
инкрементальных патчей нет, поэтому агрегаты не дрейфуют.

ФОРМУЛЫ:
    deltaVaR = |Σdelta| · daily_volatility
    vegaVaR  = |Σvega|  · vol_of_vol
    VaR_95   = 1.645 · √(deltaVaR² + vegaVaR² + deltaVaR·vegaVaR)
    drawdown = |Σtheta| + |Σdelta| · 4%
    score    = среднее risk score позиций

Sharpe ratio не вычисляется: для него нужна история доходностей, которой
у движка нет.
"""

import logging
from typing import Final, Iterable

from src.core.domain.greeks import Greeks
from src.core.domain.portfolio_risk import PortfolioRisk
from src.core.domain.position_risk import PositionRisk
from src.core.errors import InvalidInput
from src.core.math.fixed_point import PERCENT, mul, validate_non_negative
from src.core.math.kernel import sqrt

logger = logging.getLogger(__name__)

# z-квантиль 95% одностороннего доверительного интервала
VAR_Z_95: Final[int] = 1_645_000_000_000_000_000

DEFAULT_DAILY_VOLATILITY: Final[int] = 2 * PERCENT
DEFAULT_VOL_OF_VOL: Final[int] = 20 * PERCENT

# Шок underlying для proxy просадки
DRAWDOWN_DELTA_SHOCK: Final[int] = 4 * PERCENT


class PortfolioRiskAggregator:
    """Полный пересчёт PortfolioRisk по позициям владельца."""

    def __init__(
        self,
        daily_volatility: int = DEFAULT_DAILY_VOLATILITY,
        vol_of_vol: int = DEFAULT_VOL_OF_VOL,
    ):
        validate_non_negative(daily_volatility, "daily_volatility")
        validate_non_negative(vol_of_vol, "vol_of_vol")
        self.daily_volatility = daily_volatility
        self.vol_of_vol = vol_of_vol

    def value_at_risk(self, total_delta: int, total_vega: int) -> int:
        """
        Упрощённый 1-day VaR 95%.

        Неотрицателен и монотонно не убывает по |Σdelta| и |Σvega|.
        """
        delta_var = mul(abs(total_delta), self.daily_volatility)
        vega_var = mul(abs(total_vega), self.vol_of_vol)
        combined = mul(delta_var, delta_var) + mul(vega_var, vega_var) + mul(delta_var, vega_var)
        return mul(VAR_Z_95, sqrt(combined))

    @staticmethod
    def drawdown_proxy(total_theta: int, total_delta: int) -> int:
        """Оценка просадки: дневной распад + 4% шок по delta."""
        return abs(total_theta) + mul(abs(total_delta), DRAWDOWN_DELTA_SHOCK)

    def aggregate(
        self,
        owner: str,
        positions: Iterable[PositionRisk],
        now: int,
    ) -> PortfolioRisk:
        """
        Агрегат по позициям владельца.

        Args:
            owner: Владелец портфеля
            positions: Активные позиции владельца
            now: Время расчёта (unix, секунды)

        Raises:
            InvalidInput: Если позиция принадлежит другому владельцу
        """
        total_greeks = Greeks()
        total_notional = 0
        score_sum = 0
        count = 0

        for position in positions:
            if position.owner != owner:
                raise InvalidInput(
                    f"position {position.position_id} belongs to {position.owner}, not {owner}"
                )
            total_greeks = total_greeks + position.greeks
            total_notional += position.notional_value
            score_sum += position.risk_score
            count += 1

        average_score = score_sum // count if count else 0

        portfolio = PortfolioRisk(
            owner=owner,
            position_count=count,
            total_notional=total_notional,
            greeks=total_greeks,
            portfolio_var=self.value_at_risk(total_greeks.delta, total_greeks.vega),
            max_drawdown=self.drawdown_proxy(total_greeks.theta, total_greeks.delta),
            portfolio_risk_score=average_score,
            last_update=now,
        )
        logger.debug(
            "portfolio %s: positions=%d notional=%d var=%d score=%d",
            owner,
            count,
            total_notional,
            portfolio.portfolio_var,
            average_score,
        )
        return portfolio
