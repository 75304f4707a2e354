"""
LiquidationRequest — запрос на ликвидацию позиции для custody коллаборатора

Создаётся только после подтверждённого check_liquidation. Custody обязан
подтвердить исполнение, прежде чем запись позиции будет удалена.
"""

from enum import Enum

from pydantic import BaseModel, Field

from .position_risk import MAX_RISK_SCORE


class LiquidationReason(str, Enum):
    """Условие, обосновывающее ликвидацию."""

    CRITICAL_RISK = "critical_risk"
    VAR_LIMIT = "var_limit"
    DELTA_LIMIT = "delta_limit"
    GAMMA_LIMIT = "gamma_limit"
    VEGA_LIMIT = "vega_limit"


class LiquidationRequest(BaseModel):
    """Запрос {position_id, reason} с контекстом решения."""

    position_id: str = Field(..., min_length=1, description="Ликвидируемая позиция")
    owner: str = Field(..., min_length=1, description="Владелец позиции")
    reason: LiquidationReason = Field(..., description="Основная причина")
    reasons: tuple[LiquidationReason, ...] = Field(
        ..., min_length=1, description="Все выполненные условия"
    )
    risk_score: int = Field(..., ge=0, le=MAX_RISK_SCORE, description="Risk score на момент решения")
    requested_at: int = Field(..., ge=0, description="Время запроса (unix, секунды)")

    model_config = {"frozen": True}
