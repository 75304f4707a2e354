"""DRP (Disaster Recovery Protocol) — процессный emergency-флаг риска.

- Экстремальные рыночные показания переводят систему в EMERGENCY
- EMERGENCY защёлкивается до ручного сброса оператором
- Флаг передаётся в пересчёты через RiskContext
"""

from .emergency_monitor import (
    EmergencyCause,
    EmergencyMonitorConfig,
    EmergencyRiskMonitor,
    EmergencyState,
    EmergencyTransitionResult,
)

__all__ = [
    "EmergencyCause",
    "EmergencyMonitorConfig",
    "EmergencyRiskMonitor",
    "EmergencyState",
    "EmergencyTransitionResult",
]
