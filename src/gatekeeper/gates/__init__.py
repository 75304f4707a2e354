"""Admission gates (GATE 0-3)."""

from src.gatekeeper.gates.gate_00_emergency_halt import Gate00EmergencyHalt, Gate00Result
from src.gatekeeper.gates.gate_01_position_size import (
    ExposureSnapshot,
    Gate01PositionSize,
    Gate01Result,
)
from src.gatekeeper.gates.gate_02_leverage import Gate02Leverage, Gate02Result, compute_leverage
from src.gatekeeper.gates.gate_03_concentration import (
    Gate03Concentration,
    Gate03Result,
    post_trade_concentration_bps,
)

__all__ = [
    "ExposureSnapshot",
    "Gate00EmergencyHalt",
    "Gate00Result",
    "Gate01PositionSize",
    "Gate01Result",
    "Gate02Leverage",
    "Gate02Result",
    "Gate03Concentration",
    "Gate03Result",
    "compute_leverage",
    "post_trade_concentration_bps",
]
