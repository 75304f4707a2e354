"""GATE 3: Underlying Concentration

Post-trade доля одного underlying в портфеле владельца (bps):

    concentration = (notional_in_underlying + notional) · 10000 / (total + notional)

Пустой портфель не проверяется: первая позиция всегда занимает 100%
и иначе блокировалась бы любым лимитом ниже 10000 bps.
"""

from dataclasses import dataclass

from src.core.domain.option import OptionSpec
from src.core.domain.risk_config import RiskLimits
from src.core.math.fixed_point import BPS_DENOMINATOR, mul_div
from src.gatekeeper.gates.gate_01_position_size import ExposureSnapshot
from src.gatekeeper.gates.gate_02_leverage import Gate02Result


@dataclass(frozen=True)
class Gate03Result:
    """Результат GATE 3."""

    entry_allowed: bool
    block_reason: str

    limit_name: str
    limit_value: int
    actual_value: int

    concentration_bps: int

    details: str


def post_trade_concentration_bps(
    exposure: ExposureSnapshot, underlying: str, notional: int
) -> int:
    """Доля underlying после сделки в bps (0 для пустого пост-трейд портфеля)."""
    post_total = exposure.total_notional + notional
    if post_total == 0:
        return 0
    return mul_div(exposure.notional_in(underlying) + notional, BPS_DENOMINATOR, post_total)


class Gate03Concentration:
    """GATE 3: лимит концентрации по underlying."""

    def evaluate(
        self,
        gate02_result: Gate02Result,
        spec: OptionSpec,
        notional: int,
        exposure: ExposureSnapshot,
        limits: RiskLimits,
    ) -> Gate03Result:
        if not gate02_result.entry_allowed:
            return Gate03Result(
                entry_allowed=False,
                block_reason=gate02_result.block_reason,
                limit_name=gate02_result.limit_name,
                limit_value=gate02_result.limit_value,
                actual_value=gate02_result.actual_value,
                concentration_bps=0,
                details=f"GATE 2 blocked: {gate02_result.block_reason}",
            )

        if exposure.position_count == 0:
            return Gate03Result(
                entry_allowed=True,
                block_reason="",
                limit_name="",
                limit_value=0,
                actual_value=0,
                concentration_bps=BPS_DENOMINATOR,
                details="PASS: empty portfolio, concentration not checked",
            )

        concentration = post_trade_concentration_bps(exposure, spec.underlying, notional)
        if concentration > limits.concentration_limit_bps:
            return Gate03Result(
                entry_allowed=False,
                block_reason="concentration_exceeded",
                limit_name="concentration_limit_bps",
                limit_value=limits.concentration_limit_bps,
                actual_value=concentration,
                concentration_bps=concentration,
                details=(
                    f"{spec.underlying} concentration {concentration} bps > "
                    f"limit {limits.concentration_limit_bps} bps"
                ),
            )

        return Gate03Result(
            entry_allowed=True,
            block_reason="",
            limit_name="",
            limit_value=0,
            actual_value=0,
            concentration_bps=concentration,
            details=f"PASS: {spec.underlying} concentration {concentration} bps",
        )
