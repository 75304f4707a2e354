"""
RiskContext — явный контекст пересчёта риска

Глобальные флаги (emergency mode, рыночные условия, остановленные активы)
передаются в каждый пересчёт как параметр, а не читаются из скрытого
глобального состояния. Функции оценки остаются чистыми и тестируемыми.
"""

from dataclasses import dataclass, field
from typing import Final

from src.core.domain.market_conditions import CALM_MARKET, MarketConditions
from src.core.math.fixed_point import SCALE

# Мультипликатор risk score в emergency mode по умолчанию (2×)
DEFAULT_EMERGENCY_MULTIPLIER: Final[int] = 2 * SCALE


@dataclass(frozen=True)
class RiskContext:
    """Снапшот глобальных условий для одного пересчёта."""

    market: MarketConditions = CALM_MARKET
    emergency_active: bool = False
    emergency_multiplier: int = DEFAULT_EMERGENCY_MULTIPLIER
    halted_assets: frozenset[str] = field(default_factory=frozenset)

    def is_asset_halted(self, underlying: str) -> bool:
        return underlying in self.halted_assets
