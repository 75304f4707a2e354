"""
PositionRisk — риск открытой опционной позиции

Immutable Pydantic модель. Пересчёт риска создаёт новый экземпляр;
запись удаляется из реестра при закрытии или ликвидации позиции.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. risk_score ∈ [0, 10000]
2. risk_level — детерминированная функция risk_score, никогда не задаётся отдельно
"""

from enum import Enum
from typing import Final

from pydantic import BaseModel, Field, computed_field

from .greeks import Greeks
from .option import OptionSpec


# =============================================================================
# RISK LEVEL
# =============================================================================

MAX_RISK_SCORE: Final[int] = 10_000

CRITICAL_SCORE_THRESHOLD: Final[int] = 8_000
HIGH_SCORE_THRESHOLD: Final[int] = 6_000
MEDIUM_SCORE_THRESHOLD: Final[int] = 3_000


class RiskLevel(str, Enum):
    """Дискретный уровень риска"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


def risk_level_from_score(score: int) -> RiskLevel:
    """
    Бакет risk score → RiskLevel.

    Examples:
        >>> risk_level_from_score(7999)
        <RiskLevel.HIGH: 'high'>
        >>> risk_level_from_score(8000)
        <RiskLevel.CRITICAL: 'critical'>
    """
    if score >= CRITICAL_SCORE_THRESHOLD:
        return RiskLevel.CRITICAL
    if score >= HIGH_SCORE_THRESHOLD:
        return RiskLevel.HIGH
    if score >= MEDIUM_SCORE_THRESHOLD:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


# =============================================================================
# POSITION RISK MODEL
# =============================================================================


class PositionRisk(BaseModel):
    """
    Снапшот риска позиции.

    Создаётся при регистрации позиции, заменяется новым экземпляром при
    каждом пересчёте.
    """

    # Идентификация
    position_id: str = Field(..., min_length=1, description="Идентификатор позиции")
    owner: str = Field(..., min_length=1, description="Владелец позиции")
    spec: OptionSpec = Field(..., description="Собственная копия спецификации опциона")

    # Рыночные параметры
    notional_value: int = Field(..., gt=0, description="Notional (fixed-point, USD)")
    current_price: int = Field(..., gt=0, description="Цена underlying на момент расчёта")
    time_to_expiry: int = Field(..., ge=0, description="Секунд до экспирации (clamp 0)")
    implied_volatility: int = Field(..., ge=0, description="Implied volatility (fixed-point)")

    # Риск
    greeks: Greeks = Field(default_factory=Greeks, description="Greeks позиции")
    risk_score: int = Field(..., ge=0, le=MAX_RISK_SCORE, description="Risk score 0-10000")

    last_update: int = Field(..., ge=0, description="Время расчёта (unix, секунды)")

    model_config = {"frozen": True}

    @computed_field  # type: ignore[prop-decorator]
    @property
    def risk_level(self) -> RiskLevel:
        return risk_level_from_score(self.risk_score)

    @property
    def underlying(self) -> str:
        return self.spec.underlying
