"""
Интерфейсы внешних коллабораторов RiskEngine

- PriceFeed: источник цен underlying (блокирующий синхронный вызов)
- CustodyExecutor: исполнитель ликвидаций, обязан подтвердить перевод средств
"""

from dataclasses import dataclass
from typing import Protocol

from src.core.domain.liquidation import LiquidationRequest


@dataclass(frozen=True)
class PriceQuote:
    """Котировка: цена (fixed-point) и время (unix, секунды)."""

    price: int
    as_of: int


class PriceFeed(Protocol):
    def get_price(self, symbol: str) -> PriceQuote:
        """Текущая котировка; любое исключение трактуется как PriceUnavailable."""
        ...


class CustodyExecutor(Protocol):
    def execute_liquidation(self, request: LiquidationRequest) -> bool:
        """Исполнить ликвидацию; True = подтверждено."""
        ...
