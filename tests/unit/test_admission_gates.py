"""Тесты admission gates (GATE 0-3) и AdmissionGatekeeper.

Покрытие:
- GATE 0: процессный emergency и per-asset halt
- GATE 1: лимиты позиции и портфеля
- GATE 2: плечо по активу (только при max_leverage > 0)
- GATE 3: концентрация, пропуск для пустого портфеля
- Распространение блокировки по цепочке
- AdmissionResult.to_error → LimitExceeded
"""

import pytest

from src.core.domain.option import AssetClass, OptionSpec, OptionType
from src.core.domain.risk_config import DEFAULT_RISK_LIMITS, AssetRiskConfig
from src.core.errors import InvalidInput, LimitExceeded
from src.core.math.fixed_point import SCALE
from src.gatekeeper import AdmissionGatekeeper, ExposureSnapshot
from src.gatekeeper.gates import (
    Gate00EmergencyHalt,
    Gate01PositionSize,
    Gate02Leverage,
    Gate03Concentration,
    compute_leverage,
    post_trade_concentration_bps,
)
from src.risk.context import RiskContext

NOTIONAL = 150_000 * SCALE


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def eth_call():
    return OptionSpec(
        asset_class=AssetClass.CRYPTO,
        underlying="ETH",
        option_type=OptionType.CALL,
        strike_price=3000 * SCALE,
        expiry_time=1_800_000_000,
        contract_size=SCALE,
    )


@pytest.fixture
def empty_exposure():
    return ExposureSnapshot()


@pytest.fixture
def eth_heavy_exposure():
    """Портфель: $300K ETH, $100K BTC."""
    return ExposureSnapshot(
        total_notional=400_000 * SCALE,
        notional_by_underlying={"ETH": 300_000 * SCALE, "BTC": 100_000 * SCALE},
        position_count=3,
    )


@pytest.fixture
def gate00_pass(eth_call):
    return Gate00EmergencyHalt().evaluate(eth_call, RiskContext())


# =============================================================================
# GATE 0
# =============================================================================


class TestGate00EmergencyHalt:
    def test_pass_without_emergency(self, gate00_pass):
        assert gate00_pass.entry_allowed
        assert gate00_pass.block_reason == ""

    def test_process_emergency_blocks(self, eth_call):
        result = Gate00EmergencyHalt().evaluate(eth_call, RiskContext(emergency_active=True))
        assert not result.entry_allowed
        assert result.block_reason == "emergency_mode_active"
        assert result.limit_name == "emergency_halt"

    def test_asset_halt_blocks(self, eth_call):
        context = RiskContext(halted_assets=frozenset({"ETH"}))
        result = Gate00EmergencyHalt().evaluate(eth_call, context)
        assert not result.entry_allowed
        assert result.block_reason == "asset_emergency_halt"
        assert result.asset_halted

    def test_other_asset_halt_ignored(self, eth_call):
        context = RiskContext(halted_assets=frozenset({"BTC"}))
        assert Gate00EmergencyHalt().evaluate(eth_call, context).entry_allowed


# =============================================================================
# GATE 1
# =============================================================================


class TestGate01PositionSize:
    def test_pass(self, gate00_pass, empty_exposure):
        result = Gate01PositionSize().evaluate(
            gate00_pass, NOTIONAL, empty_exposure, DEFAULT_RISK_LIMITS
        )
        assert result.entry_allowed
        assert result.post_trade_portfolio_notional == NOTIONAL

    def test_position_limit_is_inclusive(self, gate00_pass, empty_exposure):
        """notional == max_position_size допустим."""
        result = Gate01PositionSize().evaluate(
            gate00_pass, 1_000_000 * SCALE, empty_exposure, DEFAULT_RISK_LIMITS
        )
        assert result.entry_allowed

    def test_position_limit_exceeded(self, gate00_pass, empty_exposure):
        result = Gate01PositionSize().evaluate(
            gate00_pass, 2_000_000 * SCALE, empty_exposure, DEFAULT_RISK_LIMITS
        )
        assert not result.entry_allowed
        assert result.block_reason == "position_size_exceeded"
        assert result.limit_name == "max_position_size"
        assert result.actual_value == 2_000_000 * SCALE

    def test_portfolio_limit_exceeded(self, gate00_pass):
        exposure = ExposureSnapshot(
            total_notional=9_900_000 * SCALE,
            notional_by_underlying={"ETH": 9_900_000 * SCALE},
            position_count=10,
        )
        result = Gate01PositionSize().evaluate(
            gate00_pass, 200_000 * SCALE, exposure, DEFAULT_RISK_LIMITS
        )
        assert not result.entry_allowed
        assert result.block_reason == "portfolio_size_exceeded"
        assert result.actual_value == 10_100_000 * SCALE

    def test_gate00_block_propagates(self, eth_call, empty_exposure):
        gate00 = Gate00EmergencyHalt().evaluate(eth_call, RiskContext(emergency_active=True))
        result = Gate01PositionSize().evaluate(gate00, NOTIONAL, empty_exposure, DEFAULT_RISK_LIMITS)
        assert not result.entry_allowed
        assert result.block_reason == "gate00_blocked: emergency_mode_active"


# =============================================================================
# GATE 2
# =============================================================================


class TestGate02Leverage:
    @pytest.fixture
    def gate01_pass(self, gate00_pass, empty_exposure):
        return Gate01PositionSize().evaluate(
            gate00_pass, NOTIONAL, empty_exposure, DEFAULT_RISK_LIMITS
        )

    def test_leverage_value(self, eth_call):
        """$150K / (3000 · 1) = 50×."""
        assert compute_leverage(eth_call, NOTIONAL) == 50 * SCALE

    def test_no_config_passes(self, gate01_pass, eth_call):
        result = Gate02Leverage().evaluate(gate01_pass, eth_call, NOTIONAL, None)
        assert result.entry_allowed
        assert result.leverage == 0

    def test_zero_limit_disables_check(self, gate01_pass, eth_call):
        result = Gate02Leverage().evaluate(gate01_pass, eth_call, NOTIONAL, AssetRiskConfig())
        assert result.entry_allowed

    def test_leverage_exceeded(self, gate01_pass, eth_call):
        config = AssetRiskConfig(max_leverage=10 * SCALE)
        result = Gate02Leverage().evaluate(gate01_pass, eth_call, NOTIONAL, config)
        assert not result.entry_allowed
        assert result.block_reason == "leverage_exceeded"
        assert result.limit_value == 10 * SCALE
        assert result.actual_value == 50 * SCALE

    def test_leverage_within_limit(self, gate01_pass, eth_call):
        config = AssetRiskConfig(max_leverage=100 * SCALE)
        result = Gate02Leverage().evaluate(gate01_pass, eth_call, NOTIONAL, config)
        assert result.entry_allowed
        assert result.leverage == 50 * SCALE


# =============================================================================
# GATE 3
# =============================================================================


class TestGate03Concentration:
    def test_concentration_value(self, eth_heavy_exposure):
        """(300K + 100K) / (400K + 100K) = 80%."""
        assert post_trade_concentration_bps(eth_heavy_exposure, "ETH", 100_000 * SCALE) == 8000
        assert post_trade_concentration_bps(eth_heavy_exposure, "SOL", 100_000 * SCALE) == 2000

    def test_empty_portfolio_skipped(self, gatekeeper_chain, eth_call, empty_exposure):
        gate02 = gatekeeper_chain(eth_call, empty_exposure)
        result = Gate03Concentration().evaluate(
            gate02, eth_call, NOTIONAL, empty_exposure, DEFAULT_RISK_LIMITS
        )
        assert result.entry_allowed
        assert result.concentration_bps == 10_000

    def test_concentration_exceeded(self, gatekeeper_chain, eth_call, eth_heavy_exposure):
        gate02 = gatekeeper_chain(eth_call, eth_heavy_exposure)
        result = Gate03Concentration().evaluate(
            gate02, eth_call, 100_000 * SCALE, eth_heavy_exposure, DEFAULT_RISK_LIMITS
        )
        assert not result.entry_allowed
        assert result.block_reason == "concentration_exceeded"
        assert result.limit_value == 5000
        assert result.actual_value == 8000


@pytest.fixture
def gatekeeper_chain():
    """GATE 0-2 PASS результат для заданного spec / exposure."""

    def run(spec, exposure):
        gate00 = Gate00EmergencyHalt().evaluate(spec, RiskContext())
        gate01 = Gate01PositionSize().evaluate(gate00, NOTIONAL, exposure, DEFAULT_RISK_LIMITS)
        return Gate02Leverage().evaluate(gate01, spec, NOTIONAL, None)

    return run


# =============================================================================
# ADMISSION GATEKEEPER
# =============================================================================


class TestAdmissionGatekeeper:
    @pytest.fixture
    def gatekeeper(self):
        return AdmissionGatekeeper()

    def test_allowed(self, gatekeeper, eth_call, empty_exposure):
        result = gatekeeper.evaluate(
            eth_call, NOTIONAL, empty_exposure, DEFAULT_RISK_LIMITS, RiskContext()
        )
        assert result.allowed
        assert len(result.gate_results) == 4
        assert result.excess == 0

    def test_first_blocking_gate_reported(self, gatekeeper, eth_call, empty_exposure):
        """Emergency блокирует раньше размера позиции."""
        result = gatekeeper.evaluate(
            eth_call,
            5_000_000 * SCALE,
            empty_exposure,
            DEFAULT_RISK_LIMITS,
            RiskContext(emergency_active=True),
        )
        assert not result.allowed
        assert result.block_reason == "emergency_mode_active"
        assert all(not r.entry_allowed for r in result.gate_results)

    def test_to_error_carries_limit(self, gatekeeper, eth_call, empty_exposure):
        result = gatekeeper.evaluate(
            eth_call, 1_500_000 * SCALE, empty_exposure, DEFAULT_RISK_LIMITS, RiskContext()
        )
        error = result.to_error()
        assert isinstance(error, LimitExceeded)
        assert error.limit_name == "max_position_size"
        assert error.excess == 500_000 * SCALE
        assert result.excess == 500_000 * SCALE

    def test_invalid_notional(self, gatekeeper, eth_call, empty_exposure):
        with pytest.raises(InvalidInput):
            gatekeeper.evaluate(eth_call, 0, empty_exposure, DEFAULT_RISK_LIMITS, RiskContext())
