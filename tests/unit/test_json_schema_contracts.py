"""
Tests for JSON Schema Contract Validators

Комплексное тестирование JSON Schema валидаторов:
- Валидность самих схем
- Валидация документов, полученных из Pydantic моделей
- Детекция нарушений required полей, типов и constraints
"""

import pytest
from jsonschema import ValidationError

from src.core.contracts import (
    LiquidationRequestValidator,
    PortfolioRiskValidator,
    PositionRiskValidator,
    SchemaLoader,
    validate_liquidation_request,
    validate_portfolio_risk,
    validate_position_risk,
)
from src.core.domain import (
    AssetClass,
    Greeks,
    LiquidationReason,
    LiquidationRequest,
    OptionSpec,
    OptionType,
    PortfolioRisk,
    PositionRisk,
)
from src.core.math.fixed_point import PERCENT, SCALE

NOW = 1_700_000_000


# =============================================================================
# FIXTURES - VALID DATA SAMPLES
# =============================================================================


@pytest.fixture
def valid_position_risk():
    """Валидный position_risk документ из Pydantic модели."""
    risk = PositionRisk(
        position_id="pos-1",
        owner="alice",
        spec=OptionSpec(
            asset_class=AssetClass.CRYPTO,
            underlying="ETH",
            option_type=OptionType.CALL,
            strike_price=3000 * SCALE,
            expiry_time=NOW + 30 * 86_400,
            contract_size=SCALE,
        ),
        notional_value=150_000 * SCALE,
        current_price=3200 * SCALE,
        time_to_expiry=30 * 86_400,
        implied_volatility=60 * PERCENT,
        greeks=Greeks(delta=686 * PERCENT // 1000, gamma=1, theta=-SCALE, vega=3 * SCALE, rho=SCALE),
        risk_score=3500,
        last_update=NOW,
    )
    return risk.model_dump(mode="json")


@pytest.fixture
def valid_portfolio_risk():
    portfolio = PortfolioRisk(
        owner="alice",
        position_count=2,
        total_notional=300_000 * SCALE,
        greeks=Greeks(delta=SCALE),
        portfolio_var=32_900_000_000_000_000,
        max_drawdown=40 * PERCENT,
        portfolio_risk_score=4000,
        last_update=NOW,
    )
    return portfolio.model_dump(mode="json")


@pytest.fixture
def valid_liquidation_request():
    request = LiquidationRequest(
        position_id="pos-1",
        owner="alice",
        reason=LiquidationReason.CRITICAL_RISK,
        reasons=(LiquidationReason.CRITICAL_RISK, LiquidationReason.VAR_LIMIT),
        risk_score=9000,
        requested_at=NOW,
    )
    return request.model_dump(mode="json")


# =============================================================================
# SCHEMA LOADING
# =============================================================================


class TestSchemaLoader:
    @pytest.mark.parametrize("name", ["position_risk", "portfolio_risk", "liquidation_request"])
    def test_schemas_load_and_pass_meta_validation(self, name):
        schema = SchemaLoader().load_schema(name)
        assert schema["$schema"] == "https://json-schema.org/draft/2020-12/schema"

    def test_schema_cached(self):
        loader = SchemaLoader()
        assert loader.load_schema("position_risk") is loader.load_schema("position_risk")

    def test_missing_schema(self):
        with pytest.raises(FileNotFoundError):
            SchemaLoader().load_schema("does_not_exist")

    def test_missing_directory(self, tmp_path):
        with pytest.raises(RuntimeError, match="Schema directory not found"):
            SchemaLoader(tmp_path / "nope")

    def test_invalid_schema_rejected(self, tmp_path):
        (tmp_path / "broken.json").write_text('{"type": 42}', encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid JSON Schema"):
            SchemaLoader(tmp_path).load_schema("broken")


# =============================================================================
# POSITION RISK
# =============================================================================


class TestPositionRiskContract:
    def test_valid(self, valid_position_risk):
        validate_position_risk(valid_position_risk)
        assert valid_position_risk["risk_level"] == "medium"

    def test_missing_required(self, valid_position_risk):
        del valid_position_risk["greeks"]
        with pytest.raises(ValidationError):
            validate_position_risk(valid_position_risk)

    def test_score_out_of_range(self, valid_position_risk):
        valid_position_risk["risk_score"] = 10_001
        assert not PositionRiskValidator().is_valid(valid_position_risk)

    def test_float_rejected(self, valid_position_risk):
        """Fixed-point значения — только целые."""
        valid_position_risk["current_price"] = 3200.5
        with pytest.raises(ValidationError):
            validate_position_risk(valid_position_risk)

    def test_unknown_option_type(self, valid_position_risk):
        valid_position_risk["spec"]["option_type"] = "straddle"
        errors = list(PositionRiskValidator().iter_errors(valid_position_risk))
        assert len(errors) == 1

    def test_additional_property_rejected(self, valid_position_risk):
        valid_position_risk["sharpe_ratio"] = 1
        with pytest.raises(ValidationError):
            validate_position_risk(valid_position_risk)


# =============================================================================
# PORTFOLIO RISK
# =============================================================================


class TestPortfolioRiskContract:
    def test_valid(self, valid_portfolio_risk):
        validate_portfolio_risk(valid_portfolio_risk)

    def test_negative_var_rejected(self, valid_portfolio_risk):
        valid_portfolio_risk["portfolio_var"] = -1
        assert not PortfolioRiskValidator().is_valid(valid_portfolio_risk)

    def test_level_enum(self, valid_portfolio_risk):
        valid_portfolio_risk["risk_level"] = "extreme"
        with pytest.raises(ValidationError):
            validate_portfolio_risk(valid_portfolio_risk)


# =============================================================================
# LIQUIDATION REQUEST
# =============================================================================


class TestLiquidationRequestContract:
    def test_valid(self, valid_liquidation_request):
        validate_liquidation_request(valid_liquidation_request)
        assert valid_liquidation_request["reasons"] == ["critical_risk", "var_limit"]

    def test_unknown_reason(self, valid_liquidation_request):
        valid_liquidation_request["reason"] = "manual"
        with pytest.raises(ValidationError):
            validate_liquidation_request(valid_liquidation_request)

    def test_empty_reasons(self, valid_liquidation_request):
        valid_liquidation_request["reasons"] = []
        assert not LiquidationRequestValidator().is_valid(valid_liquidation_request)

    def test_duplicate_reasons(self, valid_liquidation_request):
        valid_liquidation_request["reasons"] = ["var_limit", "var_limit"]
        assert not LiquidationRequestValidator().is_valid(valid_liquidation_request)
