"""
RiskEngine — реестр позиций и фасад risk-ядра

Ответственность:
- Реестр PositionRisk и индекс owner → position_id
- Полный пересчёт PortfolioRisk владельца при любом изменении его позиций
- Admission (can_open_position), ликвидация и margin через gatekeeper
- Emergency-флаг (через EmergencyRiskMonitor) и per-asset halt
- Экспорт документов по JSON Schema контрактам

Конкурентность:
- Мутации одного владельца сериализуются его RLock; lock владельца
  живёт, пока его кто-то удерживает или у владельца есть позиции
- Реестр (словари) защищён отдельным коротким lock; порядок захвата
  всегда owner lock → registry lock
- Все вычисления выполняются до коммита: ошибка не оставляет частично
  обновлённого состояния
"""

import contextlib
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator, Optional

from src.core.contracts import (
    validate_liquidation_request,
    validate_portfolio_risk,
    validate_position_risk,
)
from src.core.domain.liquidation import LiquidationRequest
from src.core.domain.market_conditions import CALM_MARKET, MarketConditions
from src.core.domain.option import OptionSpec
from src.core.domain.portfolio_risk import PortfolioRisk
from src.core.domain.position_risk import PositionRisk, RiskLevel
from src.core.domain.risk_config import DEFAULT_RISK_LIMITS, AssetRiskConfig, RiskLimits
from src.core.errors import (
    DuplicateId,
    LiquidationNotAcknowledged,
    LiquidationNotJustified,
    NotFound,
    PriceUnavailable,
    RiskEngineError,
)
from src.core.math.fixed_point import format_fixed, validate_positive
from src.drp.emergency_monitor import (
    EmergencyRiskMonitor,
    EmergencyState,
    EmergencyTransitionResult,
)
from src.engine.config import EngineConfig
from src.engine.interfaces import CustodyExecutor, PriceFeed
from src.gatekeeper.admission import AdmissionGatekeeper, AdmissionResult
from src.gatekeeper.gates.gate_01_position_size import ExposureSnapshot
from src.gatekeeper.liquidation import (
    LiquidationDecision,
    LiquidationDecisionEngine,
    MarginDecision,
)
from src.pricing.greeks import GreeksCalculator
from src.risk.context import RiskContext
from src.risk.portfolio_aggregator import PortfolioRiskAggregator
from src.risk.position_evaluator import PositionRiskEvaluator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchUpdateResult:
    """Итог пакетного пересчёта: владельцы обрабатываются независимо."""

    updated: dict[str, PortfolioRisk] = field(default_factory=dict)
    failed: dict[str, RiskEngineError] = field(default_factory=dict)

    @property
    def all_succeeded(self) -> bool:
        return not self.failed


class RiskEngine:
    """Фасад risk-ядра для order matching, custody и операторского UI."""

    def __init__(
        self,
        price_feed: PriceFeed,
        config: Optional[EngineConfig] = None,
        clock: Optional[Callable[[], int]] = None,
        emergency_monitor: Optional[EmergencyRiskMonitor] = None,
    ):
        """
        Args:
            price_feed: источник цен underlying
            config: параметры движка (default EngineConfig())
            clock: текущее время в unix-секундах (default time.time)
            emergency_monitor: монитор экстремальных рыночных условий
        """
        self.config = config or EngineConfig()
        self._price_feed = price_feed
        self._clock = clock or (lambda: int(time.time()))

        self._evaluator = PositionRiskEvaluator(
            greeks_calculator=GreeksCalculator(self.config.seconds_per_year),
            default_implied_volatility=self.config.default_implied_volatility,
            default_risk_free_rate=self.config.default_risk_free_rate,
        )
        self._aggregator = PortfolioRiskAggregator(
            daily_volatility=self.config.daily_volatility,
            vol_of_vol=self.config.vol_of_vol,
        )
        self._admission = AdmissionGatekeeper()
        self._liquidation = LiquidationDecisionEngine()
        self._emergency_monitor = emergency_monitor or EmergencyRiskMonitor()

        # Реестр
        self._positions: dict[str, PositionRisk] = {}
        self._owner_index: dict[str, set[str]] = {}
        self._portfolios: dict[str, PortfolioRisk] = {}
        self._candidates: dict[str, LiquidationDecision] = {}

        # Конфигурация оператора
        self._default_limits: RiskLimits = DEFAULT_RISK_LIMITS
        self._owner_limits: dict[str, RiskLimits] = {}
        self._asset_configs: dict[str, AssetRiskConfig] = {}
        self._market: MarketConditions = CALM_MARKET
        self._emergency_state = EmergencyState.NORMAL
        self._halted_assets: set[str] = set()

        self._registry_lock = threading.RLock()
        self._owner_locks: dict[str, threading.RLock] = {}
        self._owner_lock_users: dict[str, int] = {}

    # =========================================================================
    # ВНУТРЕННИЕ ХЕЛПЕРЫ
    # =========================================================================

    @contextlib.contextmanager
    def _owner_lock(self, owner: str) -> Iterator[None]:
        """Захват lock владельца со счётчиком пользователей.

        Lock удаляется, когда его никто не держит и не ждёт, а у владельца
        не осталось позиций.
        """
        with self._registry_lock:
            lock = self._owner_locks.get(owner)
            if lock is None:
                lock = threading.RLock()
                self._owner_locks[owner] = lock
            self._owner_lock_users[owner] = self._owner_lock_users.get(owner, 0) + 1

        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._registry_lock:
                users = self._owner_lock_users[owner] - 1
                if users == 0 and owner not in self._owner_index:
                    del self._owner_lock_users[owner]
                    del self._owner_locks[owner]
                else:
                    self._owner_lock_users[owner] = users

    def _owner_of(self, position_id: str) -> str:
        with self._registry_lock:
            position = self._positions.get(position_id)
            if position is None:
                raise NotFound(f"position {position_id} not found")
            return position.owner

    def _require_position(self, position_id: str) -> PositionRisk:
        with self._registry_lock:
            position = self._positions.get(position_id)
        if position is None:
            raise NotFound(f"position {position_id} not found")
        return position

    def _owner_positions(self, owner: str) -> list[PositionRisk]:
        with self._registry_lock:
            ids = sorted(self._owner_index.get(owner, ()))
            return [self._positions[position_id] for position_id in ids]

    def _context(self) -> RiskContext:
        return RiskContext(
            market=self._market,
            emergency_active=self._emergency_state == EmergencyState.EMERGENCY,
            emergency_multiplier=self.config.emergency_risk_multiplier,
            halted_assets=frozenset(self._halted_assets),
        )

    def _fetch_price(self, spec: OptionSpec, now: int) -> int:
        """Цена underlying с проверкой источника, знака и возраста котировки.

        Raises:
            PriceUnavailable: ошибка источника, цена <= 0, устаревшая котировка
                или котировка из будущего
        """
        symbol = spec.feed_key
        try:
            quote = self._price_feed.get_price(symbol)
        except PriceUnavailable:
            logger.warning("price lookup failed for %s", symbol)
            raise
        except Exception as exc:
            logger.warning("price lookup failed for %s: %s", symbol, exc)
            raise PriceUnavailable(symbol, f"feed error: {exc}") from exc

        if quote.price <= 0:
            logger.warning("non-positive price for %s: %d", symbol, quote.price)
            raise PriceUnavailable(symbol, f"non-positive price {quote.price}")

        age = now - quote.as_of
        if age < 0:
            logger.warning("price for %s is dated in the future: age=%ds", symbol, age)
            raise PriceUnavailable(
                symbol, f"quote from the future: as_of {quote.as_of} > now {now}"
            )
        if age > self.config.max_price_age_sec:
            logger.warning("stale price for %s: age=%ds", symbol, age)
            raise PriceUnavailable(
                symbol, f"stale quote: age {age}s > {self.config.max_price_age_sec}s"
            )
        return quote.price

    def _evaluate(
        self,
        position_id: str,
        owner: str,
        spec: OptionSpec,
        notional: int,
        now: int,
        context: RiskContext,
    ) -> PositionRisk:
        price = self._fetch_price(spec, now)
        return self._evaluator.evaluate(
            position_id=position_id,
            owner=owner,
            spec=spec,
            notional=notional,
            current_price=price,
            now=now,
            context=context,
            asset_config=self._asset_configs.get(spec.underlying),
        )

    def _commit_owner(
        self,
        owner: str,
        recomputed: Iterable[PositionRisk],
        portfolio: Optional[PortfolioRisk],
        removed_id: Optional[str] = None,
    ) -> None:
        """Атомарная запись пересчитанных позиций и портфеля владельца."""
        with self._registry_lock:
            if removed_id is not None:
                self._positions.pop(removed_id, None)
                self._candidates.pop(removed_id, None)
                self._owner_index.get(owner, set()).discard(removed_id)
            for position in recomputed:
                self._positions[position.position_id] = position
                self._owner_index.setdefault(owner, set()).add(position.position_id)
            if portfolio is None or portfolio.position_count == 0:
                self._portfolios.pop(owner, None)
                self._owner_index.pop(owner, None)
            else:
                self._portfolios[owner] = portfolio

    def _review_liquidation(
        self, recomputed: Iterable[PositionRisk], portfolio: PortfolioRisk
    ) -> None:
        """Critical пересчёт → check_liquidation и запись кандидата."""
        limits = self.limits_for(portfolio.owner)
        for position in recomputed:
            if position.risk_level != RiskLevel.CRITICAL:
                with self._registry_lock:
                    self._candidates.pop(position.position_id, None)
                continue

            logger.warning(
                "position %s of %s recomputed as CRITICAL (score=%d)",
                position.position_id,
                position.owner,
                position.risk_score,
            )
            decision = self._liquidation.check_liquidation(position, portfolio, limits)
            if decision.should_liquidate:
                with self._registry_lock:
                    self._candidates[position.position_id] = decision

    def _recompute_owner(self, owner: str, now: int) -> tuple[list[PositionRisk], PortfolioRisk]:
        """Пересчёт всех позиций владельца без коммита."""
        context = self._context()
        recomputed = [
            self._evaluate(
                position.position_id,
                owner,
                position.spec,
                position.notional_value,
                now,
                context,
            )
            for position in self._owner_positions(owner)
        ]
        portfolio = self._aggregator.aggregate(owner, recomputed, now)
        return recomputed, portfolio

    def _exposure(self, owner: str) -> ExposureSnapshot:
        by_underlying: dict[str, int] = {}
        total = 0
        positions = self._owner_positions(owner)
        for position in positions:
            by_underlying[position.underlying] = (
                by_underlying.get(position.underlying, 0) + position.notional_value
            )
            total += position.notional_value
        return ExposureSnapshot(
            total_notional=total,
            notional_by_underlying=by_underlying,
            position_count=len(positions),
        )

    # =========================================================================
    # РЕЕСТР ПОЗИЦИЙ
    # =========================================================================

    def add_position(
        self,
        position_id: str,
        owner: str,
        spec: OptionSpec,
        notional: int,
    ) -> PositionRisk:
        """Регистрация позиции и пересчёт портфеля владельца.

        Admission здесь не выполняется: order matching вызывает
        can_open_position до регистрации.

        Raises:
            DuplicateId: позиция с таким id уже есть
            InvalidInput: notional <= 0
            PriceUnavailable: цена underlying недоступна
        """
        validate_positive(notional, "notional")

        with self._owner_lock(owner):
            with self._registry_lock:
                if position_id in self._positions:
                    raise DuplicateId(f"position {position_id} already registered")

            now = self._clock()
            position = self._evaluate(position_id, owner, spec, notional, now, self._context())
            portfolio = self._aggregator.aggregate(
                owner, self._owner_positions(owner) + [position], now
            )

            with self._registry_lock:
                if position_id in self._positions:
                    raise DuplicateId(f"position {position_id} already registered")
                self._commit_owner(owner, [position], portfolio)

            logger.info(
                "position %s registered for %s: %s %s strike=%s notional=%s level=%s",
                position_id,
                owner,
                spec.underlying,
                spec.option_type.value,
                format_fixed(spec.strike_price, 2),
                format_fixed(notional, 2),
                position.risk_level.value,
            )
            self._review_liquidation([position], portfolio)
            return position

    def update_position_risk(self, position_id: str) -> PositionRisk:
        """Пересчёт риска одной позиции и полного портфеля владельца.

        Raises:
            NotFound: позиция не зарегистрирована
            PriceUnavailable: цена underlying недоступна
        """
        owner = self._owner_of(position_id)
        with self._owner_lock(owner):
            current = self._require_position(position_id)
            now = self._clock()
            position = self._evaluate(
                position_id,
                owner,
                current.spec,
                current.notional_value,
                now,
                self._context(),
            )
            others = [p for p in self._owner_positions(owner) if p.position_id != position_id]
            portfolio = self._aggregator.aggregate(owner, others + [position], now)

            self._commit_owner(owner, [position], portfolio)
            self._review_liquidation([position], portfolio)
            return position

    def update_owner_risk(self, owner: str) -> PortfolioRisk:
        """Пересчёт всех позиций владельца.

        Raises:
            NotFound: у владельца нет активных позиций
            PriceUnavailable: цена любого underlying недоступна (ничего не записано)
        """
        with self._owner_lock(owner):
            if not self._owner_positions(owner):
                raise NotFound(f"owner {owner} has no active positions")
            recomputed, portfolio = self._recompute_owner(owner, self._clock())
            self._commit_owner(owner, recomputed, portfolio)
            self._review_liquidation(recomputed, portfolio)
            return portfolio

    def update_risk_for_owners(self, owners: Iterable[str]) -> BatchUpdateResult:
        """Пакетный пересчёт; ошибка одного владельца не прерывает остальных."""
        result = BatchUpdateResult()
        for owner in owners:
            try:
                result.updated[owner] = self.update_owner_risk(owner)
            except RiskEngineError as exc:
                logger.warning("risk update failed for %s: %s", owner, exc)
                result.failed[owner] = exc
        return result

    def remove_position(self, position_id: str) -> PositionRisk:
        """Закрытие позиции: запись удаляется, портфель пересчитывается.

        Raises:
            NotFound: позиция не зарегистрирована
        """
        owner = self._owner_of(position_id)
        with self._owner_lock(owner):
            removed = self._remove_locked(position_id, owner)
        logger.info("position %s of %s removed", position_id, owner)
        return removed

    def _remove_locked(self, position_id: str, owner: str) -> PositionRisk:
        removed = self._require_position(position_id)
        remaining = [p for p in self._owner_positions(owner) if p.position_id != position_id]
        portfolio = self._aggregator.aggregate(owner, remaining, self._clock())
        self._commit_owner(owner, [], portfolio, removed_id=position_id)
        return removed

    # =========================================================================
    # ЗАПРОСЫ
    # =========================================================================

    def get_position_risk(self, position_id: str) -> PositionRisk:
        return self._require_position(position_id)

    def get_portfolio_risk(self, owner: str) -> PortfolioRisk:
        """
        Raises:
            NotFound: у владельца нет активных позиций
        """
        with self._registry_lock:
            portfolio = self._portfolios.get(owner)
        if portfolio is None:
            raise NotFound(f"no portfolio for owner {owner}")
        return portfolio

    def positions_for_owner(self, owner: str) -> list[PositionRisk]:
        return self._owner_positions(owner)

    def liquidation_candidates(self) -> list[LiquidationDecision]:
        """Позиции, пересчитанные как CRITICAL с подтверждённым условием ликвидации."""
        with self._registry_lock:
            return [self._candidates[key] for key in sorted(self._candidates)]

    # =========================================================================
    # КОНФИГУРАЦИЯ ОПЕРАТОРА
    # =========================================================================

    def set_default_limits(self, limits: RiskLimits) -> None:
        with self._registry_lock:
            self._default_limits = limits

    def set_owner_limits(self, owner: str, limits: RiskLimits) -> None:
        with self._registry_lock:
            self._owner_limits[owner] = limits

    def limits_for(self, owner: str) -> RiskLimits:
        """Лимиты владельца; неактивная или отсутствующая запись → лимиты по умолчанию."""
        with self._registry_lock:
            limits = self._owner_limits.get(owner)
            if limits is None or not limits.is_active:
                return self._default_limits
        return limits

    def set_asset_config(self, underlying: str, config: AssetRiskConfig) -> None:
        with self._registry_lock:
            self._asset_configs[underlying] = config

    def update_market_conditions(self, conditions: MarketConditions) -> EmergencyTransitionResult:
        """Новые рыночные условия и оценка emergency-перехода.

        Пересчёт позиций не выполняется: вызывающий запускает
        update_risk_for_owners после обновления.
        """
        with self._registry_lock:
            self._market = conditions
            transition = self._emergency_monitor.evaluate_transition(
                self._emergency_state, conditions
            )
            self._emergency_state = transition.new_state

        logger.info(
            "market conditions updated: vix=%s liquidity=%s trend=%s",
            format_fixed(conditions.vix, 4),
            format_fixed(conditions.liquidity_score, 4),
            format_fixed(conditions.market_trend, 4),
        )
        if transition.transition_occurred:
            logger.info("emergency state %s: %s", transition.new_state.value, transition.details)
        return transition

    @property
    def market_conditions(self) -> MarketConditions:
        return self._market

    @property
    def emergency_active(self) -> bool:
        return self._emergency_state == EmergencyState.EMERGENCY

    def clear_emergency(self) -> EmergencyTransitionResult:
        """Ручной сброс emergency-флага оператором."""
        with self._registry_lock:
            transition = self._emergency_monitor.reset(self._emergency_state)
            self._emergency_state = transition.new_state
        if transition.transition_occurred:
            logger.info("emergency state %s: %s", transition.new_state.value, transition.details)
        return transition

    def set_asset_emergency(self, underlying: str, halted: bool) -> None:
        """Per-asset halt новых позиций по underlying."""
        with self._registry_lock:
            if halted:
                self._halted_assets.add(underlying)
            else:
                self._halted_assets.discard(underlying)
        logger.info("asset %s emergency halt %s", underlying, "set" if halted else "cleared")

    # =========================================================================
    # ADMISSION
    # =========================================================================

    def can_open_position(self, owner: str, spec: OptionSpec, notional: int) -> AdmissionResult:
        """Проверка допуска новой позиции (GATE 0-3).

        Raises:
            InvalidInput: notional <= 0
        """
        with self._owner_lock(owner):
            return self._admission.evaluate(
                spec=spec,
                notional=notional,
                exposure=self._exposure(owner),
                limits=self.limits_for(owner),
                context=self._context(),
                asset_config=self._asset_configs.get(spec.underlying),
            )

    def ensure_can_open_position(
        self, owner: str, spec: OptionSpec, notional: int
    ) -> AdmissionResult:
        """
        Raises:
            LimitExceeded: позиция не допущена (имя лимита и превышение в ошибке)
        """
        result = self.can_open_position(owner, spec, notional)
        if not result.allowed:
            raise result.to_error()
        return result

    # =========================================================================
    # ЛИКВИДАЦИЯ И МАРЖА
    # =========================================================================

    def check_liquidation(self, position_id: str) -> LiquidationDecision:
        """
        Raises:
            NotFound: позиция не зарегистрирована
        """
        owner = self._owner_of(position_id)
        with self._owner_lock(owner):
            position = self._require_position(position_id)
            return self._liquidation.check_liquidation(
                position, self.get_portfolio_risk(owner), self.limits_for(owner)
            )

    def should_liquidate(self, position_id: str) -> bool:
        return self.check_liquidation(position_id).should_liquidate

    def trigger_liquidation(
        self, position_id: str, custody: CustodyExecutor
    ) -> LiquidationRequest:
        """Повторная проверка, запрос в custody и удаление записи после подтверждения.

        Raises:
            NotFound: позиция не зарегистрирована
            LiquidationNotJustified: условие ликвидации не выполнено
            LiquidationNotAcknowledged: custody не подтвердил; запись сохранена
        """
        owner = self._owner_of(position_id)
        with self._owner_lock(owner):
            decision = self.check_liquidation(position_id)
            if not decision.should_liquidate:
                logger.warning("liquidation of %s refused: %s", position_id, decision.details)
                raise LiquidationNotJustified(position_id, decision)

            request = self._liquidation.build_request(decision, self._clock())
            validate_liquidation_request(request.model_dump(mode="json"))

            try:
                acknowledged = custody.execute_liquidation(request)
            except Exception as exc:
                logger.warning("custody failed to liquidate %s: %s", position_id, exc)
                raise LiquidationNotAcknowledged(
                    f"custody error while liquidating {position_id}: {exc}"
                ) from exc

            if not acknowledged:
                logger.warning("custody did not acknowledge liquidation of %s", position_id)
                raise LiquidationNotAcknowledged(
                    f"custody did not acknowledge liquidation of {position_id}"
                )

            self._remove_locked(position_id, owner)

        logger.info(
            "position %s of %s liquidated: %s",
            position_id,
            owner,
            ", ".join(reason.value for reason in request.reasons),
        )
        return request

    def evaluate_margin(self, position_id: str, posted_collateral: int) -> MarginDecision:
        """
        Raises:
            NotFound: позиция не зарегистрирована
            InvalidInput: posted_collateral < 0
        """
        position = self._require_position(position_id)
        return self._liquidation.evaluate_margin(
            position, self._asset_configs.get(position.underlying), posted_collateral
        )

    # =========================================================================
    # ЭКСПОРТ
    # =========================================================================

    def export_position_risk(self, position_id: str) -> dict:
        """PositionRisk как JSON-документ, проверенный по контракту position_risk."""
        data = self._require_position(position_id).model_dump(mode="json")
        validate_position_risk(data)
        return data

    def export_portfolio_risk(self, owner: str) -> dict:
        """PortfolioRisk как JSON-документ, проверенный по контракту portfolio_risk."""
        data = self.get_portfolio_risk(owner).model_dump(mode="json")
        validate_portfolio_risk(data)
        return data
