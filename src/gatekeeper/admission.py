"""Admission Gatekeeper — цепочка GATE 0-3 для can_open_position.

Порядок:
    GATE 0  emergency halt (процессный / per-asset)
    GATE 1  размер позиции и портфеля
    GATE 2  плечо по активу
    GATE 3  концентрация по underlying

Каждый gate получает результат предыдущего; блокировка распространяется
по цепочке, а итог несёт причину и параметры первого заблокировавшего gate.
"""

from dataclasses import dataclass
from typing import Any, Optional

from src.core.domain.option import OptionSpec
from src.core.domain.risk_config import AssetRiskConfig, RiskLimits
from src.core.errors import LimitExceeded
from src.core.math.fixed_point import validate_positive
from src.gatekeeper.gates.gate_00_emergency_halt import Gate00EmergencyHalt
from src.gatekeeper.gates.gate_01_position_size import ExposureSnapshot, Gate01PositionSize
from src.gatekeeper.gates.gate_02_leverage import Gate02Leverage
from src.gatekeeper.gates.gate_03_concentration import Gate03Concentration
from src.risk.context import RiskContext


@dataclass(frozen=True)
class AdmissionResult:
    """Итог admission-проверки."""

    allowed: bool
    block_reason: str

    limit_name: str
    limit_value: int
    actual_value: int

    details: str

    # Результаты всех gates (GATE 0..3) для диагностики
    gate_results: tuple[Any, ...]

    @property
    def excess(self) -> int:
        return self.actual_value - self.limit_value if not self.allowed else 0

    def to_error(self) -> LimitExceeded:
        """LimitExceeded с параметрами нарушенного лимита."""
        return LimitExceeded(
            self.limit_name,
            self.limit_value,
            self.actual_value,
            details=self.block_reason,
        )


class AdmissionGatekeeper:
    """Оркестратор admission gates."""

    def __init__(self):
        self.gate00 = Gate00EmergencyHalt()
        self.gate01 = Gate01PositionSize()
        self.gate02 = Gate02Leverage()
        self.gate03 = Gate03Concentration()

    def evaluate(
        self,
        spec: OptionSpec,
        notional: int,
        exposure: ExposureSnapshot,
        limits: RiskLimits,
        context: RiskContext,
        asset_config: Optional[AssetRiskConfig] = None,
    ) -> AdmissionResult:
        """Прогон цепочки gates для новой позиции.

        Raises:
            InvalidInput: notional <= 0
        """
        validate_positive(notional, "notional")

        r0 = self.gate00.evaluate(spec, context)
        r1 = self.gate01.evaluate(r0, notional, exposure, limits)
        r2 = self.gate02.evaluate(r1, spec, notional, asset_config)
        r3 = self.gate03.evaluate(r2, spec, notional, exposure, limits)
        results = (r0, r1, r2, r3)

        for result in results:
            if not result.entry_allowed:
                return AdmissionResult(
                    allowed=False,
                    block_reason=result.block_reason,
                    limit_name=result.limit_name,
                    limit_value=result.limit_value,
                    actual_value=result.actual_value,
                    details=result.details,
                    gate_results=results,
                )

        return AdmissionResult(
            allowed=True,
            block_reason="",
            limit_name="",
            limit_value=0,
            actual_value=0,
            details=r3.details,
            gate_results=results,
        )
