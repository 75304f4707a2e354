"""
OptionSpec — Спецификация опционного контракта

Immutable Pydantic модель. Позиция получает собственную копию спецификации
при регистрации; после этого спецификация не меняется.
Все цены и размеры — fixed-point int (масштаб 10^18).
"""

from enum import Enum

from pydantic import BaseModel, Field


# =============================================================================
# ENUMS
# =============================================================================


class AssetClass(str, Enum):
    """Класс базового актива"""

    CRYPTO = "crypto"
    FOREX = "forex"
    EQUITY = "equity"


class OptionType(str, Enum):
    """Тип опциона"""

    CALL = "call"
    PUT = "put"


class OptionStyle(str, Enum):
    """Стиль исполнения"""

    EUROPEAN = "european"
    AMERICAN = "american"


# =============================================================================
# OPTION SPEC MODEL
# =============================================================================


class OptionSpec(BaseModel):
    """
    Спецификация опциона.

    Immutable модель (frozen=True): изменение контракта = новая позиция.
    """

    asset_class: AssetClass = Field(..., description="Класс актива (crypto/forex/equity)")
    underlying: str = Field(..., min_length=1, description="Символ базового актива (например, 'ETH')")
    option_type: OptionType = Field(..., description="Call / Put")
    style: OptionStyle = Field(OptionStyle.EUROPEAN, description="European / American")

    strike_price: int = Field(..., gt=0, description="Страйк (fixed-point, 18 знаков)")
    expiry_time: int = Field(..., ge=0, description="Экспирация (unix, секунды)")
    contract_size: int = Field(..., gt=0, description="Размер контракта (fixed-point)")

    price_feed_id: str = Field(
        "", description="Идентификатор price feed (пусто = символ underlying)"
    )

    model_config = {"frozen": True}

    @property
    def feed_key(self) -> str:
        """Ключ для запроса цены у price feed."""
        return self.price_feed_id or self.underlying

    @property
    def is_call(self) -> bool:
        return self.option_type == OptionType.CALL

    def time_to_expiry(self, now: int) -> int:
        """Время до экспирации в секундах, не меньше нуля."""
        return max(0, self.expiry_time - now)
