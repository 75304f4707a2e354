"""
PortfolioRisk — агрегированный риск портфеля владельца

Immutable Pydantic модель. Пересчитывается целиком (никогда не патчится
инкрементально) при каждом изменении любой позиции владельца.
Не хранит объекты позиций: только агрегаты по индексу position_id владельца.
"""

from pydantic import BaseModel, Field, computed_field

from .greeks import Greeks
from .position_risk import MAX_RISK_SCORE, RiskLevel, risk_level_from_score


class PortfolioRisk(BaseModel):
    """
    Снапшот риска портфеля.

    Sharpe ratio намеренно отсутствует: без истории доходностей он не
    вычислим, а константа вместо метрики вводила бы в заблуждение.
    """

    owner: str = Field(..., min_length=1, description="Владелец портфеля")
    position_count: int = Field(0, ge=0, description="Число активных позиций")

    total_notional: int = Field(0, ge=0, description="Суммарный notional")
    greeks: Greeks = Field(default_factory=Greeks, description="Сумма Greeks позиций")

    portfolio_var: int = Field(0, ge=0, description="1-day VaR 95% (fixed-point)")
    max_drawdown: int = Field(0, ge=0, description="Proxy просадки: |Σθ| + |Σδ|·4%")
    portfolio_risk_score: int = Field(
        0, ge=0, le=MAX_RISK_SCORE, description="Средний risk score позиций"
    )

    last_update: int = Field(..., ge=0, description="Время расчёта (unix, секунды)")

    model_config = {"frozen": True}

    @computed_field  # type: ignore[prop-decorator]
    @property
    def risk_level(self) -> RiskLevel:
        return risk_level_from_score(self.portfolio_risk_score)
