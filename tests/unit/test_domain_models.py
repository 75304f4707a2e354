"""Тесты доменных моделей risk-ядра.

Покрытие:
- risk_level как детерминированный бакет risk_score (границы)
- Immutability (frozen)
- Валидация полей на границе (pydantic)
- Производные флаги MarketConditions
- Greeks сложение
"""

import pytest
from pydantic import ValidationError

from src.core.domain import (
    CALM_MARKET,
    DEFAULT_RISK_LIMITS,
    AssetClass,
    AssetRiskConfig,
    Greeks,
    LiquidationReason,
    LiquidationRequest,
    MarketConditions,
    OptionSpec,
    OptionStyle,
    OptionType,
    PortfolioRisk,
    PositionRisk,
    RiskLevel,
    RiskLimits,
    risk_level_from_score,
)
from src.core.math.fixed_point import PERCENT, SCALE

NOW = 1_700_000_000


@pytest.fixture
def spec():
    return OptionSpec(
        asset_class=AssetClass.CRYPTO,
        underlying="ETH",
        option_type=OptionType.CALL,
        strike_price=3000 * SCALE,
        expiry_time=NOW + 86_400,
        contract_size=SCALE,
    )


def position(spec, score):
    return PositionRisk(
        position_id="pos-1",
        owner="alice",
        spec=spec,
        notional_value=100_000 * SCALE,
        current_price=3200 * SCALE,
        time_to_expiry=86_400,
        implied_volatility=60 * PERCENT,
        risk_score=score,
        last_update=NOW,
    )


# =============================================================================
# RISK LEVEL
# =============================================================================


class TestRiskLevel:
    @pytest.mark.parametrize(
        "score,level",
        [
            (0, RiskLevel.LOW),
            (2999, RiskLevel.LOW),
            (3000, RiskLevel.MEDIUM),
            (5999, RiskLevel.MEDIUM),
            (6000, RiskLevel.HIGH),
            (7999, RiskLevel.HIGH),
            (8000, RiskLevel.CRITICAL),
            (10_000, RiskLevel.CRITICAL),
        ],
    )
    def test_bucket_boundaries(self, score, level):
        assert risk_level_from_score(score) == level

    def test_position_level_derived(self, spec):
        assert position(spec, 7999).risk_level == RiskLevel.HIGH
        assert position(spec, 8000).risk_level == RiskLevel.CRITICAL

    def test_risk_level_in_dump(self, spec):
        assert position(spec, 3500).model_dump()["risk_level"] == RiskLevel.MEDIUM


# =============================================================================
# VALIDATION
# =============================================================================


class TestPositionRiskValidation:
    def test_score_above_max_rejected(self, spec):
        with pytest.raises(ValidationError):
            position(spec, 10_001)

    def test_negative_score_rejected(self, spec):
        with pytest.raises(ValidationError):
            position(spec, -1)

    def test_frozen(self, spec):
        risk = position(spec, 3000)
        with pytest.raises(ValidationError):
            risk.risk_score = 9000

    def test_underlying_shortcut(self, spec):
        assert position(spec, 0).underlying == "ETH"


class TestOptionSpec:
    def test_defaults(self, spec):
        assert spec.style == OptionStyle.EUROPEAN
        assert spec.feed_key == "ETH"
        assert spec.is_call

    def test_price_feed_override(self):
        spec = OptionSpec(
            asset_class=AssetClass.FOREX,
            underlying="EURUSD",
            option_type=OptionType.PUT,
            strike_price=SCALE,
            expiry_time=NOW,
            contract_size=SCALE,
            price_feed_id="fx:EURUSD",
        )
        assert spec.feed_key == "fx:EURUSD"
        assert not spec.is_call

    def test_time_to_expiry_clamped(self, spec):
        assert spec.time_to_expiry(NOW) == 86_400
        assert spec.time_to_expiry(NOW + 100_000) == 0

    def test_zero_strike_rejected(self):
        with pytest.raises(ValidationError):
            OptionSpec(
                asset_class=AssetClass.EQUITY,
                underlying="AAPL",
                option_type=OptionType.CALL,
                strike_price=0,
                expiry_time=NOW,
                contract_size=SCALE,
            )

    def test_empty_underlying_rejected(self):
        with pytest.raises(ValidationError):
            OptionSpec(
                asset_class=AssetClass.EQUITY,
                underlying="",
                option_type=OptionType.CALL,
                strike_price=SCALE,
                expiry_time=NOW,
                contract_size=SCALE,
            )


# =============================================================================
# MARKET / GREEKS / CONFIG
# =============================================================================


class TestMarketConditions:
    def test_calm_market_flags(self):
        assert not CALM_MARKET.is_high_volatility
        assert not CALM_MARKET.is_market_stress

    def test_flags_strict_thresholds(self):
        boundary = MarketConditions(vix=30 * PERCENT, liquidity_score=50 * PERCENT)
        assert not boundary.is_high_volatility
        assert not boundary.is_market_stress

        stressed = MarketConditions(vix=31 * PERCENT, liquidity_score=49 * PERCENT)
        assert stressed.is_high_volatility
        assert stressed.is_market_stress

    def test_liquidity_above_one_rejected(self):
        with pytest.raises(ValidationError):
            MarketConditions(vix=0, liquidity_score=SCALE + 1)


class TestGreeks:
    def test_addition(self):
        total = Greeks(delta=SCALE, theta=-SCALE) + Greeks(delta=-SCALE, vega=2 * SCALE)
        assert total == Greeks(theta=-SCALE, vega=2 * SCALE)

    def test_is_zero(self):
        assert Greeks().is_zero()
        assert not Greeks(rho=1).is_zero()


class TestRiskConfig:
    def test_default_limits(self):
        assert DEFAULT_RISK_LIMITS.max_position_size == 1_000_000 * SCALE
        assert DEFAULT_RISK_LIMITS.concentration_limit_bps == 5000
        assert DEFAULT_RISK_LIMITS.is_active

    def test_concentration_above_100_percent_rejected(self):
        with pytest.raises(ValidationError):
            RiskLimits(
                max_position_size=SCALE,
                max_portfolio_size=SCALE,
                max_delta=SCALE,
                max_gamma=SCALE,
                max_vega=SCALE,
                max_var=SCALE,
                concentration_limit_bps=10_001,
            )

    def test_asset_config_defaults(self):
        config = AssetRiskConfig()
        assert config.base_volatility is None
        assert config.max_leverage == 0
        assert config.liquidation_threshold_bps == 8000
        assert not config.requires_margin


class TestPortfolioAndLiquidationModels:
    def test_portfolio_level(self):
        portfolio = PortfolioRisk(owner="alice", portfolio_risk_score=6000, last_update=NOW)
        assert portfolio.risk_level == RiskLevel.HIGH
        assert portfolio.greeks.is_zero()

    def test_liquidation_request_requires_reason(self):
        with pytest.raises(ValidationError):
            LiquidationRequest(
                position_id="pos-1",
                owner="alice",
                reason=LiquidationReason.CRITICAL_RISK,
                reasons=(),
                risk_score=9000,
                requested_at=NOW,
            )
