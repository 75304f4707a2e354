"""Liquidation Decision Engine — решения о ликвидации и margin call.

check_liquidation истинно, если выполнено хотя бы одно условие:
- risk_level позиции == CRITICAL
- VaR портфеля владельца > max_var
- |Σdelta| > max_delta, |Σgamma| > max_gamma или |Σvega| > max_vega

Решение возвращает ВСЕ выполненные условия, а не только первое: custody
и оператор видят полный контекст.

Margin (только для активов с requires_margin):
    required = notional · margin_multiplier
    margin_call                  ⇔ posted < required
    below_liquidation_threshold  ⇔ posted < required · liquidation_threshold_bps / 10000
"""

from dataclasses import dataclass
from typing import Optional

from src.core.domain.liquidation import LiquidationReason, LiquidationRequest
from src.core.domain.portfolio_risk import PortfolioRisk
from src.core.domain.position_risk import PositionRisk, RiskLevel
from src.core.domain.risk_config import AssetRiskConfig, RiskLimits
from src.core.errors import InvalidInput, LiquidationNotJustified
from src.core.math.fixed_point import BPS_DENOMINATOR, mul, mul_div, validate_non_negative


@dataclass(frozen=True)
class LiquidationDecision:
    """Результат check_liquidation."""

    position_id: str
    owner: str
    should_liquidate: bool
    reasons: tuple[LiquidationReason, ...]

    risk_level: RiskLevel
    risk_score: int
    portfolio_var: int

    details: str

    @property
    def primary_reason(self) -> Optional[LiquidationReason]:
        return self.reasons[0] if self.reasons else None


@dataclass(frozen=True)
class MarginDecision:
    """Результат проверки маржи позиции."""

    position_id: str
    requires_margin: bool
    required_margin: int
    posted_collateral: int
    margin_call: bool
    below_liquidation_threshold: bool

    @property
    def shortfall(self) -> int:
        return max(self.required_margin - self.posted_collateral, 0)


class LiquidationDecisionEngine:
    """Stateless решения по ликвидации; данные приходят от RiskEngine."""

    def check_liquidation(
        self,
        position: PositionRisk,
        portfolio: PortfolioRisk,
        limits: RiskLimits,
    ) -> LiquidationDecision:
        """Проверка условий ликвидации позиции.

        Args:
            position: актуальный риск позиции
            portfolio: актуальный агрегат портфеля владельца
            limits: действующие лимиты владельца

        Raises:
            InvalidInput: портфель принадлежит другому владельцу
        """
        if portfolio.owner != position.owner:
            raise InvalidInput(
                f"portfolio of {portfolio.owner} passed for position of {position.owner}"
            )

        reasons: list[LiquidationReason] = []
        if position.risk_level == RiskLevel.CRITICAL:
            reasons.append(LiquidationReason.CRITICAL_RISK)
        if portfolio.portfolio_var > limits.max_var:
            reasons.append(LiquidationReason.VAR_LIMIT)

        greeks = portfolio.greeks
        if abs(greeks.delta) > abs(limits.max_delta):
            reasons.append(LiquidationReason.DELTA_LIMIT)
        if abs(greeks.gamma) > abs(limits.max_gamma):
            reasons.append(LiquidationReason.GAMMA_LIMIT)
        if abs(greeks.vega) > abs(limits.max_vega):
            reasons.append(LiquidationReason.VEGA_LIMIT)

        if reasons:
            details = "conditions: " + ", ".join(reason.value for reason in reasons)
        else:
            details = f"no liquidation condition (risk_level={position.risk_level.value})"

        return LiquidationDecision(
            position_id=position.position_id,
            owner=position.owner,
            should_liquidate=bool(reasons),
            reasons=tuple(reasons),
            risk_level=position.risk_level,
            risk_score=position.risk_score,
            portfolio_var=portfolio.portfolio_var,
            details=details,
        )

    @staticmethod
    def build_request(decision: LiquidationDecision, requested_at: int) -> LiquidationRequest:
        """Запрос для custody по подтверждённому решению.

        Raises:
            LiquidationNotJustified: решение не обосновывает ликвидацию
        """
        if not decision.should_liquidate:
            raise LiquidationNotJustified(decision.position_id, decision)
        return LiquidationRequest(
            position_id=decision.position_id,
            owner=decision.owner,
            reason=decision.reasons[0],
            reasons=decision.reasons,
            risk_score=decision.risk_score,
            requested_at=requested_at,
        )

    def evaluate_margin(
        self,
        position: PositionRisk,
        asset_config: Optional[AssetRiskConfig],
        posted_collateral: int,
    ) -> MarginDecision:
        """Маржинальное требование и margin call для позиции.

        Raises:
            InvalidInput: posted_collateral < 0
        """
        validate_non_negative(posted_collateral, "posted_collateral")

        if asset_config is None or not asset_config.requires_margin:
            return MarginDecision(
                position_id=position.position_id,
                requires_margin=False,
                required_margin=0,
                posted_collateral=posted_collateral,
                margin_call=False,
                below_liquidation_threshold=False,
            )

        required = mul(position.notional_value, asset_config.margin_multiplier)
        liquidation_level = mul_div(
            required, asset_config.liquidation_threshold_bps, BPS_DENOMINATOR
        )
        return MarginDecision(
            position_id=position.position_id,
            requires_margin=True,
            required_margin=required,
            posted_collateral=posted_collateral,
            margin_call=posted_collateral < required,
            below_liquidation_threshold=posted_collateral < liquidation_level,
        )
