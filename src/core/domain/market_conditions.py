"""
MarketConditions — глобальное состояние рынка

Единственная запись на процесс; изменяется только авторизованным
market-data коллаборатором. Производные флаги вычисляются из показаний и
никогда не задаются вручную.
"""

from typing import Final

from pydantic import BaseModel, Field, computed_field

from src.core.math.fixed_point import PERCENT, SCALE

# VIX выше 30% → высокая волатильность
HIGH_VOLATILITY_VIX: Final[int] = 30 * PERCENT

# Ликвидность ниже 50% → рыночный стресс
MARKET_STRESS_LIQUIDITY: Final[int] = 50 * PERCENT


class MarketConditions(BaseModel):
    """Снапшот рыночных условий."""

    vix: int = Field(..., ge=0, description="Индекс волатильности (fixed-point доля)")
    market_trend: int = Field(0, description="Тренд рынка (знаковый fixed-point)")
    liquidity_score: int = Field(
        ..., ge=0, le=SCALE, description="Оценка ликвидности (fixed-point, 0-1)"
    )
    last_update: int = Field(0, ge=0, description="Время обновления (unix, секунды)")

    model_config = {"frozen": True}

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_high_volatility(self) -> bool:
        return self.vix > HIGH_VOLATILITY_VIX

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_market_stress(self) -> bool:
        return self.liquidity_score < MARKET_STRESS_LIQUIDITY


CALM_MARKET = MarketConditions(vix=20 * PERCENT, market_trend=0, liquidity_score=SCALE)
