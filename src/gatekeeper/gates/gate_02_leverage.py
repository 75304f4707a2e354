"""GATE 2: Asset Leverage

leverage = notional / (strike · contract_size)

Проверка выполняется только если для underlying задан AssetRiskConfig
с max_leverage > 0; иначе gate пропускает позицию.
"""

from dataclasses import dataclass
from typing import Optional

from src.core.domain.option import OptionSpec
from src.core.domain.risk_config import AssetRiskConfig
from src.core.math.fixed_point import div, format_fixed, mul
from src.gatekeeper.gates.gate_01_position_size import Gate01Result


@dataclass(frozen=True)
class Gate02Result:
    """Результат GATE 2."""

    entry_allowed: bool
    block_reason: str

    limit_name: str
    limit_value: int
    actual_value: int

    leverage: int  # 0 если проверка не выполнялась

    details: str


def compute_leverage(spec: OptionSpec, notional: int) -> int:
    """Плечо позиции относительно номинала контракта (fixed-point)."""
    return div(notional, mul(spec.strike_price, spec.contract_size))


class Gate02Leverage:
    """GATE 2: лимит плеча по активу."""

    def evaluate(
        self,
        gate01_result: Gate01Result,
        spec: OptionSpec,
        notional: int,
        asset_config: Optional[AssetRiskConfig],
    ) -> Gate02Result:
        if not gate01_result.entry_allowed:
            return Gate02Result(
                entry_allowed=False,
                block_reason=gate01_result.block_reason,
                limit_name=gate01_result.limit_name,
                limit_value=gate01_result.limit_value,
                actual_value=gate01_result.actual_value,
                leverage=0,
                details=f"GATE 1 blocked: {gate01_result.block_reason}",
            )

        if asset_config is None or asset_config.max_leverage == 0:
            return Gate02Result(
                entry_allowed=True,
                block_reason="",
                limit_name="",
                limit_value=0,
                actual_value=0,
                leverage=0,
                details=f"PASS: no leverage limit for {spec.underlying}",
            )

        leverage = compute_leverage(spec, notional)
        if leverage > asset_config.max_leverage:
            return Gate02Result(
                entry_allowed=False,
                block_reason="leverage_exceeded",
                limit_name="max_leverage",
                limit_value=asset_config.max_leverage,
                actual_value=leverage,
                leverage=leverage,
                details=(
                    f"leverage {format_fixed(leverage, 4)} > "
                    f"max_leverage {format_fixed(asset_config.max_leverage, 4)}"
                ),
            )

        return Gate02Result(
            entry_allowed=True,
            block_reason="",
            limit_name="",
            limit_value=0,
            actual_value=0,
            leverage=leverage,
            details=f"PASS: leverage {format_fixed(leverage, 4)}",
        )
