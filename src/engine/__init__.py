"""
Engine — фасад risk-ядра и интерфейсы внешних коллабораторов.
"""

from src.engine.config import DEFAULT_MAX_PRICE_AGE_SEC, EngineConfig
from src.engine.interfaces import CustodyExecutor, PriceFeed, PriceQuote
from src.engine.risk_engine import BatchUpdateResult, RiskEngine

__all__ = [
    "BatchUpdateResult",
    "CustodyExecutor",
    "DEFAULT_MAX_PRICE_AGE_SEC",
    "EngineConfig",
    "PriceFeed",
    "PriceQuote",
    "RiskEngine",
]
