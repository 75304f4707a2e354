"""GATE 0: Emergency Halt

Первый gate admission-цепочки:
- Блокирует любые новые позиции при активном процессном emergency-флаге
- Блокирует новые позиции по underlying, остановленному оператором

Gate не выполняет emergency transitions (это делает EmergencyRiskMonitor),
а только читает флаги из RiskContext.
"""

from dataclasses import dataclass

from src.core.domain.option import OptionSpec
from src.risk.context import RiskContext


@dataclass(frozen=True)
class Gate00Result:
    """Результат GATE 0."""

    entry_allowed: bool
    block_reason: str

    limit_name: str
    limit_value: int
    actual_value: int

    # Входные параметры для диагностики
    emergency_active: bool
    asset_halted: bool
    underlying: str

    details: str


class Gate00EmergencyHalt:
    """GATE 0: процессный и per-asset emergency halt.

    Порядок проверок:
    1. Процессный emergency-флаг → блокировка
    2. Per-asset halt → блокировка
    """

    def evaluate(self, spec: OptionSpec, context: RiskContext) -> Gate00Result:
        """Оценка GATE 0.

        Args:
            spec: спецификация открываемого опциона
            context: текущий контекст риска (emergency-флаги)

        Returns:
            Gate00Result с решением о допуске
        """
        underlying = spec.underlying
        asset_halted = context.is_asset_halted(underlying)

        if context.emergency_active:
            return Gate00Result(
                entry_allowed=False,
                block_reason="emergency_mode_active",
                limit_name="emergency_halt",
                limit_value=0,
                actual_value=1,
                emergency_active=True,
                asset_halted=asset_halted,
                underlying=underlying,
                details="Process-wide emergency flag is set: new positions halted",
            )

        if asset_halted:
            return Gate00Result(
                entry_allowed=False,
                block_reason="asset_emergency_halt",
                limit_name="asset_emergency_halt",
                limit_value=0,
                actual_value=1,
                emergency_active=False,
                asset_halted=True,
                underlying=underlying,
                details=f"Underlying {underlying} halted by operator",
            )

        return Gate00Result(
            entry_allowed=True,
            block_reason="",
            limit_name="",
            limit_value=0,
            actual_value=0,
            emergency_active=False,
            asset_halted=False,
            underlying=underlying,
            details=f"PASS: no emergency for {underlying}",
        )
