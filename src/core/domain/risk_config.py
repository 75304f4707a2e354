"""
Risk Configuration — лимиты владельцев и параметры риска по активам

Записи задаёт внешний оператор; ядро только читает их. Каждое обновление
заменяет запись целиком (модели immutable).
"""

from typing import Optional

from pydantic import BaseModel, Field

from src.core.math.fixed_point import BPS_DENOMINATOR, PERCENT, SCALE


# =============================================================================
# RISK LIMITS
# =============================================================================


class RiskLimits(BaseModel):
    """
    Риск-лимиты владельца.

    max_delta / max_gamma / max_vega сравниваются по модулю агрегата.
    Неактивная запись (is_active=False) означает откат на лимиты по умолчанию.
    """

    max_position_size: int = Field(..., gt=0, description="Max notional одной позиции")
    max_portfolio_size: int = Field(..., gt=0, description="Max суммарный notional")
    max_delta: int = Field(..., description="Лимит |Σdelta|")
    max_gamma: int = Field(..., description="Лимит |Σgamma|")
    max_vega: int = Field(..., description="Лимит |Σvega|")
    max_var: int = Field(..., ge=0, description="Лимит портфельного VaR")
    concentration_limit_bps: int = Field(
        ..., ge=0, le=BPS_DENOMINATOR, description="Max доля одного underlying (bps)"
    )
    is_active: bool = Field(True, description="Запись действует")

    model_config = {"frozen": True}


DEFAULT_RISK_LIMITS = RiskLimits(
    max_position_size=1_000_000 * SCALE,
    max_portfolio_size=10_000_000 * SCALE,
    max_delta=1_000 * SCALE,
    max_gamma=100 * SCALE,
    max_vega=10_000 * SCALE,
    max_var=100 * SCALE,
    concentration_limit_bps=5_000,
)


# =============================================================================
# ASSET RISK CONFIG
# =============================================================================


class AssetRiskConfig(BaseModel):
    """
    Параметры риска для одного underlying.

    base_volatility / risk_free_rate = None → используются значения движка
    по умолчанию. max_leverage = 0 отключает проверку плеча.
    """

    base_volatility: Optional[int] = Field(
        None, gt=0, description="Implied volatility override (fixed-point)"
    )
    risk_free_rate: Optional[int] = Field(
        None, ge=0, description="Безрисковая ставка override (fixed-point)"
    )
    max_leverage: int = Field(0, ge=0, description="Max notional / (strike·size), 0 = без лимита")
    liquidation_threshold_bps: int = Field(
        8_000,
        ge=0,
        le=BPS_DENOMINATOR,
        description="Доля маржинального требования, ниже которой позиция ликвидируема",
    )
    correlation_factor: int = Field(
        SCALE, ge=0, le=SCALE, description="Корреляция с рыночным фактором (справочно)"
    )
    requires_margin: bool = Field(False, description="Актив требует маржи")
    margin_multiplier: int = Field(
        20 * PERCENT, ge=0, description="Маржинальное требование как доля notional"
    )

    model_config = {"frozen": True}
