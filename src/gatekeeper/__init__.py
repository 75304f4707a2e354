"""Gatekeeper — допуск новых позиций и решения о ликвидации.

- Admission: GATE 0-3 с фиксированным порядком (emergency, size, leverage, concentration)
- Liquidation: условия ликвидации и margin call по актуальному риску
"""

from .admission import AdmissionGatekeeper, AdmissionResult
from .gates import ExposureSnapshot
from .liquidation import LiquidationDecision, LiquidationDecisionEngine, MarginDecision

__all__ = [
    "AdmissionGatekeeper",
    "AdmissionResult",
    "ExposureSnapshot",
    "LiquidationDecision",
    "LiquidationDecisionEngine",
    "MarginDecision",
]
