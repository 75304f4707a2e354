"""Тесты LiquidationDecisionEngine.

Покрытие:
- CRITICAL risk_level → ликвидация
- VaR и Greeks лимиты портфеля (по модулю)
- Все выполненные условия в решении
- build_request: только для обоснованного решения
- Margin: требование, margin call, порог ликвидации
"""

import pytest

from src.core.domain.greeks import Greeks
from src.core.domain.liquidation import LiquidationReason
from src.core.domain.option import AssetClass, OptionSpec, OptionType
from src.core.domain.portfolio_risk import PortfolioRisk
from src.core.domain.position_risk import PositionRisk, RiskLevel
from src.core.domain.risk_config import DEFAULT_RISK_LIMITS, AssetRiskConfig
from src.core.errors import InvalidInput, LiquidationNotJustified
from src.core.math.fixed_point import PERCENT, SCALE
from src.gatekeeper.liquidation import LiquidationDecisionEngine

NOW = 1_700_000_000


def make_position(score=3500, owner="alice", notional=150_000 * SCALE):
    return PositionRisk(
        position_id="pos-1",
        owner=owner,
        spec=OptionSpec(
            asset_class=AssetClass.CRYPTO,
            underlying="ETH",
            option_type=OptionType.CALL,
            strike_price=3000 * SCALE,
            expiry_time=NOW + 86_400,
            contract_size=SCALE,
        ),
        notional_value=notional,
        current_price=3200 * SCALE,
        time_to_expiry=86_400,
        implied_volatility=60 * PERCENT,
        greeks=Greeks(delta=SCALE // 2),
        risk_score=score,
        last_update=NOW,
    )


def make_portfolio(owner="alice", greeks=None, var=0):
    return PortfolioRisk(
        owner=owner,
        position_count=1,
        total_notional=150_000 * SCALE,
        greeks=greeks or Greeks(delta=SCALE // 2),
        portfolio_var=var,
        max_drawdown=0,
        portfolio_risk_score=3500,
        last_update=NOW,
    )


@pytest.fixture
def engine():
    return LiquidationDecisionEngine()


# =============================================================================
# CHECK LIQUIDATION
# =============================================================================


class TestCheckLiquidation:
    def test_no_condition(self, engine):
        decision = engine.check_liquidation(make_position(), make_portfolio(), DEFAULT_RISK_LIMITS)
        assert not decision.should_liquidate
        assert decision.reasons == ()
        assert decision.primary_reason is None
        assert decision.risk_level == RiskLevel.MEDIUM

    def test_critical_position(self, engine):
        decision = engine.check_liquidation(
            make_position(score=8000), make_portfolio(), DEFAULT_RISK_LIMITS
        )
        assert decision.should_liquidate
        assert decision.reasons == (LiquidationReason.CRITICAL_RISK,)

    def test_high_is_not_critical(self, engine):
        decision = engine.check_liquidation(
            make_position(score=7999), make_portfolio(), DEFAULT_RISK_LIMITS
        )
        assert not decision.should_liquidate

    def test_var_limit(self, engine):
        decision = engine.check_liquidation(
            make_position(), make_portfolio(var=101 * SCALE), DEFAULT_RISK_LIMITS
        )
        assert decision.reasons == (LiquidationReason.VAR_LIMIT,)

    def test_var_at_limit_not_breached(self, engine):
        decision = engine.check_liquidation(
            make_position(), make_portfolio(var=100 * SCALE), DEFAULT_RISK_LIMITS
        )
        assert not decision.should_liquidate

    def test_negative_delta_compared_by_absolute_value(self, engine):
        portfolio = make_portfolio(greeks=Greeks(delta=-1001 * SCALE))
        decision = engine.check_liquidation(make_position(), portfolio, DEFAULT_RISK_LIMITS)
        assert decision.reasons == (LiquidationReason.DELTA_LIMIT,)

    def test_gamma_and_vega_limits(self, engine):
        portfolio = make_portfolio(greeks=Greeks(gamma=101 * SCALE, vega=-10_001 * SCALE))
        decision = engine.check_liquidation(make_position(), portfolio, DEFAULT_RISK_LIMITS)
        assert decision.reasons == (LiquidationReason.GAMMA_LIMIT, LiquidationReason.VEGA_LIMIT)

    def test_all_conditions_reported(self, engine):
        portfolio = make_portfolio(greeks=Greeks(delta=2000 * SCALE), var=500 * SCALE)
        decision = engine.check_liquidation(
            make_position(score=9000), portfolio, DEFAULT_RISK_LIMITS
        )
        assert decision.primary_reason == LiquidationReason.CRITICAL_RISK
        assert decision.reasons == (
            LiquidationReason.CRITICAL_RISK,
            LiquidationReason.VAR_LIMIT,
            LiquidationReason.DELTA_LIMIT,
        )

    def test_foreign_portfolio_rejected(self, engine):
        with pytest.raises(InvalidInput):
            engine.check_liquidation(
                make_position(), make_portfolio(owner="bob"), DEFAULT_RISK_LIMITS
            )


class TestBuildRequest:
    def test_request_from_justified_decision(self, engine):
        decision = engine.check_liquidation(
            make_position(score=8500), make_portfolio(), DEFAULT_RISK_LIMITS
        )
        request = engine.build_request(decision, NOW)
        assert request.position_id == "pos-1"
        assert request.owner == "alice"
        assert request.reason == LiquidationReason.CRITICAL_RISK
        assert request.risk_score == 8500
        assert request.requested_at == NOW

    def test_unjustified_decision_rejected(self, engine):
        decision = engine.check_liquidation(make_position(), make_portfolio(), DEFAULT_RISK_LIMITS)
        with pytest.raises(LiquidationNotJustified, match="pos-1") as exc_info:
            engine.build_request(decision, NOW)
        assert exc_info.value.decision is decision


# =============================================================================
# MARGIN
# =============================================================================


class TestEvaluateMargin:
    @pytest.fixture
    def margin_config(self):
        return AssetRiskConfig(
            requires_margin=True,
            margin_multiplier=20 * PERCENT,
            liquidation_threshold_bps=8000,
        )

    def test_asset_without_margin(self, engine):
        decision = engine.evaluate_margin(make_position(), AssetRiskConfig(), 0)
        assert not decision.requires_margin
        assert not decision.margin_call
        assert decision.required_margin == 0

    def test_no_config(self, engine):
        assert not engine.evaluate_margin(make_position(), None, 0).margin_call

    def test_sufficient_collateral(self, engine, margin_config):
        """Требование: $150K · 20% = $30K."""
        decision = engine.evaluate_margin(make_position(), margin_config, 30_000 * SCALE)
        assert decision.required_margin == 30_000 * SCALE
        assert not decision.margin_call
        assert decision.shortfall == 0

    def test_margin_call_above_liquidation_threshold(self, engine, margin_config):
        """$25K: margin call, но выше порога ликвидации $24K."""
        decision = engine.evaluate_margin(make_position(), margin_config, 25_000 * SCALE)
        assert decision.margin_call
        assert not decision.below_liquidation_threshold
        assert decision.shortfall == 5_000 * SCALE

    def test_below_liquidation_threshold(self, engine, margin_config):
        decision = engine.evaluate_margin(make_position(), margin_config, 20_000 * SCALE)
        assert decision.margin_call
        assert decision.below_liquidation_threshold

    def test_negative_collateral_rejected(self, engine, margin_config):
        with pytest.raises(InvalidInput, match="posted_collateral"):
            engine.evaluate_margin(make_position(), margin_config, -1)
