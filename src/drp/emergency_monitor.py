"""Emergency Risk Monitor — процессный флаг emergency-риска.

Переходы:
- NORMAL + экстремальные показания (VIX > 50% или ликвидность < 25%) → EMERGENCY
- EMERGENCY остаётся EMERGENCY при любых показаниях (флаг защёлкивается)
- EMERGENCY → NORMAL только через явный сброс оператором

Монитор не хранит состояние: текущее состояние передаётся на вход,
результат перехода возвращается вызывающему (RiskEngine), который
переносит флаг в RiskContext следующих пересчётов.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from src.core.domain.market_conditions import MarketConditions
from src.core.math.fixed_point import PERCENT, format_fixed


class EmergencyState(str, Enum):
    """Состояние emergency-флага."""
    NORMAL = "NORMAL"
    EMERGENCY = "EMERGENCY"


class EmergencyCause(str, Enum):
    """Причина перехода в EMERGENCY."""
    EXTREME_VOLATILITY = "EXTREME_VOLATILITY"
    LIQUIDITY_CRISIS = "LIQUIDITY_CRISIS"


@dataclass(frozen=True)
class EmergencyMonitorConfig:
    """Пороги экстремальных показаний.

    - vix_emergency_threshold: VIX строго выше → EMERGENCY (50%)
    - liquidity_emergency_threshold: ликвидность строго ниже → EMERGENCY (25%)
    """
    vix_emergency_threshold: int = 50 * PERCENT
    liquidity_emergency_threshold: int = 25 * PERCENT


@dataclass(frozen=True)
class EmergencyTransitionResult:
    """Результат оценки emergency-состояния."""

    new_state: EmergencyState
    previous_state: EmergencyState
    transition_occurred: bool
    transition_reason: str
    cause: Optional[EmergencyCause]

    # Для отладки
    details: str

    @property
    def emergency_active(self) -> bool:
        return self.new_state == EmergencyState.EMERGENCY


class EmergencyRiskMonitor:
    """Монитор экстремальных рыночных условий."""

    def __init__(self, config: Optional[EmergencyMonitorConfig] = None):
        """
        Args:
            config: пороги экстремальных показаний (default EmergencyMonitorConfig())
        """
        self.config = config or EmergencyMonitorConfig()

    def detect_cause(self, conditions: MarketConditions) -> Optional[EmergencyCause]:
        """Причина emergency для показаний или None, если показания не экстремальны."""
        if conditions.vix > self.config.vix_emergency_threshold:
            return EmergencyCause.EXTREME_VOLATILITY
        if conditions.liquidity_score < self.config.liquidity_emergency_threshold:
            return EmergencyCause.LIQUIDITY_CRISIS
        return None

    def evaluate_transition(
        self,
        current_state: EmergencyState,
        conditions: MarketConditions,
    ) -> EmergencyTransitionResult:
        """Оценка перехода по новым рыночным показаниям.

        Args:
            current_state: текущее состояние флага
            conditions: новые рыночные условия

        Returns:
            EmergencyTransitionResult с новым состоянием
        """
        if current_state == EmergencyState.EMERGENCY:
            # Защёлка: выход только через reset()
            return EmergencyTransitionResult(
                new_state=EmergencyState.EMERGENCY,
                previous_state=current_state,
                transition_occurred=False,
                transition_reason="emergency_latched",
                cause=self.detect_cause(conditions),
                details="EMERGENCY persists until operator reset",
            )

        cause = self.detect_cause(conditions)
        if cause is None:
            return EmergencyTransitionResult(
                new_state=EmergencyState.NORMAL,
                previous_state=current_state,
                transition_occurred=False,
                transition_reason="normal_conditions",
                cause=None,
                details=(
                    f"vix={format_fixed(conditions.vix, 4)} "
                    f"liquidity={format_fixed(conditions.liquidity_score, 4)}"
                ),
            )

        return EmergencyTransitionResult(
            new_state=EmergencyState.EMERGENCY,
            previous_state=current_state,
            transition_occurred=True,
            transition_reason=f"extreme_reading_{cause.value.lower()}",
            cause=cause,
            details=(
                f"NORMAL → EMERGENCY: vix={format_fixed(conditions.vix, 4)} "
                f"liquidity={format_fixed(conditions.liquidity_score, 4)}"
            ),
        )

    def reset(self, current_state: EmergencyState) -> EmergencyTransitionResult:
        """Ручной сброс флага оператором."""
        return EmergencyTransitionResult(
            new_state=EmergencyState.NORMAL,
            previous_state=current_state,
            transition_occurred=current_state != EmergencyState.NORMAL,
            transition_reason="operator_reset",
            cause=None,
            details=f"{current_state.value} → NORMAL by operator",
        )
