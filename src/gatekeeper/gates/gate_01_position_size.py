"""GATE 1: Position / Portfolio Size

Проверяет notional новой позиции против лимитов владельца:
- notional > max_position_size → блокировка
- текущий суммарный notional + notional > max_portfolio_size → блокировка

Экспозиция портфеля передаётся снапшотом (ExposureSnapshot), собранным
движком из активных позиций владельца.
"""

from dataclasses import dataclass, field
from typing import Mapping

from src.core.domain.risk_config import RiskLimits
from src.core.math.fixed_point import format_fixed
from src.gatekeeper.gates.gate_00_emergency_halt import Gate00Result


@dataclass(frozen=True)
class ExposureSnapshot:
    """Текущая экспозиция владельца по активным позициям."""

    total_notional: int = 0
    notional_by_underlying: Mapping[str, int] = field(default_factory=dict)
    position_count: int = 0

    def notional_in(self, underlying: str) -> int:
        return self.notional_by_underlying.get(underlying, 0)


@dataclass(frozen=True)
class Gate01Result:
    """Результат GATE 1."""

    entry_allowed: bool
    block_reason: str

    limit_name: str
    limit_value: int
    actual_value: int

    # Post-trade значения
    notional: int
    post_trade_portfolio_notional: int

    details: str


class Gate01PositionSize:
    """GATE 1: лимиты размера позиции и портфеля."""

    def evaluate(
        self,
        gate00_result: Gate00Result,
        notional: int,
        exposure: ExposureSnapshot,
        limits: RiskLimits,
    ) -> Gate01Result:
        """Оценка GATE 1.

        Args:
            gate00_result: результат GATE 0
            notional: notional новой позиции
            exposure: текущая экспозиция владельца
            limits: действующие лимиты владельца

        Returns:
            Gate01Result с решением о допуске
        """
        post_trade = exposure.total_notional + notional

        if not gate00_result.entry_allowed:
            return Gate01Result(
                entry_allowed=False,
                block_reason=f"gate00_blocked: {gate00_result.block_reason}",
                limit_name=gate00_result.limit_name,
                limit_value=gate00_result.limit_value,
                actual_value=gate00_result.actual_value,
                notional=notional,
                post_trade_portfolio_notional=post_trade,
                details=f"GATE 0 blocked: {gate00_result.block_reason}",
            )

        if notional > limits.max_position_size:
            return Gate01Result(
                entry_allowed=False,
                block_reason="position_size_exceeded",
                limit_name="max_position_size",
                limit_value=limits.max_position_size,
                actual_value=notional,
                notional=notional,
                post_trade_portfolio_notional=post_trade,
                details=(
                    f"notional {format_fixed(notional, 2)} > "
                    f"max_position_size {format_fixed(limits.max_position_size, 2)}"
                ),
            )

        if post_trade > limits.max_portfolio_size:
            return Gate01Result(
                entry_allowed=False,
                block_reason="portfolio_size_exceeded",
                limit_name="max_portfolio_size",
                limit_value=limits.max_portfolio_size,
                actual_value=post_trade,
                notional=notional,
                post_trade_portfolio_notional=post_trade,
                details=(
                    f"post-trade portfolio {format_fixed(post_trade, 2)} > "
                    f"max_portfolio_size {format_fixed(limits.max_portfolio_size, 2)}"
                ),
            )

        return Gate01Result(
            entry_allowed=True,
            block_reason="",
            limit_name="",
            limit_value=0,
            actual_value=0,
            notional=notional,
            post_trade_portfolio_notional=post_trade,
            details=f"PASS: post-trade portfolio {format_fixed(post_trade, 2)}",
        )
