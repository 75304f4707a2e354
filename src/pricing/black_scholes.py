"""
Black-Scholes — премия, внутренняя стоимость и обеспечение в fixed-point

Общие промежуточные величины модели (t, √t, σ√t, d1, d2, e^{-rt})
вычисляются здесь один раз и используются GreeksCalculator.

ФОРМУЛЫ:
    t  = time_to_expiry · SCALE / seconds_per_year
    d1 = (ln(S/K) + (r + σ²/2)·t) / (σ·√t)
    d2 = d1 − σ·√t

    Call = S·N(d1) − K·e^{−rt}·N(d2)
    Put  = K·e^{−rt}·N(−d2) − S·N(−d1)

Все числа — int в масштабе SCALE; погрешность определяется ядром
(src.core.math.kernel).
"""

from dataclasses import dataclass
from typing import Final

from src.core.domain.option import OptionSpec, OptionType
from src.core.errors import DivisionByZero
from src.core.math.fixed_point import (
    SCALE,
    clamp,
    div,
    mul,
    mul_div,
    tdiv,
    validate_non_negative,
    validate_positive,
)
from src.core.math.kernel import exp, ln, normal_cdf, sqrt

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

SECONDS_PER_DAY: Final[int] = 86_400
DAYS_PER_YEAR: Final[int] = 365
SECONDS_PER_YEAR: Final[int] = DAYS_PER_YEAR * SECONDS_PER_DAY

# Коэффициент обеспечения для put по умолчанию (150%)
DEFAULT_COLLATERAL_RATIO_PCT: Final[int] = 150


# =============================================================================
# ПРОМЕЖУТОЧНЫЕ ВЕЛИЧИНЫ
# =============================================================================


@dataclass(frozen=True)
class ModelTerms:
    """Промежуточные величины Black-Scholes для одного набора входов."""

    t: int  # Время в годах
    sqrt_t: int  # √t
    vol_sqrt_t: int  # σ·√t
    d1: int
    d2: int
    discount: int  # e^{−rt}


def validate_pricing_inputs(
    spot: int,
    strike: int,
    time_to_expiry: int,
    volatility: int,
) -> None:
    """
    Валидация входов модели.

    Raises:
        InvalidInput: Если цена или страйк <= 0, время или волатильность < 0
    """
    validate_positive(spot, "spot price")
    validate_positive(strike, "strike price")
    validate_non_negative(time_to_expiry, "time_to_expiry")
    validate_non_negative(volatility, "volatility")


def years_from_seconds(time_to_expiry: int, seconds_per_year: int = SECONDS_PER_YEAR) -> int:
    """Секунды → доля года в fixed-point."""
    return mul_div(time_to_expiry, SCALE, seconds_per_year)


def compute_model_terms(
    spot: int,
    strike: int,
    time_to_expiry: int,
    volatility: int,
    rate: int,
    seconds_per_year: int = SECONDS_PER_YEAR,
) -> ModelTerms:
    """
    Вычисление d1, d2 и дисконт-фактора.

    Требует time_to_expiry > 0 (случай экспирации обрабатывается вызывающим).

    Raises:
        DivisionByZero: Если σ = 0 или √t = 0 при t > 0
    """
    t = years_from_seconds(time_to_expiry, seconds_per_year)
    sqrt_t = sqrt(t)
    vol_sqrt_t = mul(volatility, sqrt_t)
    if vol_sqrt_t == 0:
        raise DivisionByZero(
            f"σ·√t is zero (volatility={volatility}, sqrt_t={sqrt_t}) with non-zero time"
        )

    drift = rate + tdiv(mul(volatility, volatility), 2)
    d1 = div(ln(div(spot, strike)) + mul(drift, t), vol_sqrt_t)
    d2 = d1 - vol_sqrt_t
    discount = exp(-mul(rate, t))

    return ModelTerms(
        t=t,
        sqrt_t=sqrt_t,
        vol_sqrt_t=vol_sqrt_t,
        d1=d1,
        d2=d2,
        discount=discount,
    )


# =============================================================================
# ВНУТРЕННЯЯ СТОИМОСТЬ / ОБЕСПЕЧЕНИЕ
# =============================================================================


def intrinsic_value(
    option_type: OptionType,
    spot: int,
    strike: int,
    contract_size: int = SCALE,
) -> int:
    """
    Внутренняя стоимость опциона (payoff при немедленном исполнении).

    Examples:
        >>> intrinsic_value(OptionType.CALL, 3200 * SCALE, 3000 * SCALE) == 200 * SCALE
        True
        >>> intrinsic_value(OptionType.PUT, 3200 * SCALE, 3000 * SCALE)
        0
    """
    if option_type == OptionType.CALL:
        payoff = max(0, spot - strike)
    else:
        payoff = max(0, strike - spot)
    return mul(payoff, contract_size)


def required_collateral(
    spec: OptionSpec,
    collateral_ratio_pct: int = DEFAULT_COLLATERAL_RATIO_PCT,
) -> int:
    """
    Обеспечение, которое должен заблокировать продавец опциона.

    Call — поставка underlying: contract_size единиц актива.
    Put  — страйк · размер · коэффициент обеспечения.
    """
    if spec.option_type == OptionType.CALL:
        return spec.contract_size
    return mul_div(mul(spec.strike_price, spec.contract_size), collateral_ratio_pct, 100)


# =============================================================================
# ПРЕМИЯ
# =============================================================================


def black_scholes_price(
    option_type: OptionType,
    spot: int,
    strike: int,
    time_to_expiry: int,
    volatility: int,
    rate: int,
    contract_size: int = SCALE,
    seconds_per_year: int = SECONDS_PER_YEAR,
) -> int:
    """
    Премия европейского опциона по Black-Scholes.

    При time_to_expiry == 0 возвращает внутреннюю стоимость. Отрицательный
    результат (шум аппроксимации глубоко OTM) ограничивается нулём.

    Args:
        option_type: Call / Put
        spot: Цена underlying
        strike: Страйк
        time_to_expiry: Секунд до экспирации
        volatility: Implied volatility (доля, fixed-point)
        rate: Безрисковая ставка (доля, fixed-point)
        contract_size: Размер контракта
        seconds_per_year: Длина года в секундах

    Returns:
        Премия за контракт (fixed-point)

    Raises:
        InvalidInput: Невалидные цены/время/волатильность
        DivisionByZero: σ = 0 при t > 0
    """
    validate_pricing_inputs(spot, strike, time_to_expiry, volatility)
    validate_positive(contract_size, "contract_size")

    if time_to_expiry == 0:
        return intrinsic_value(option_type, spot, strike, contract_size)

    terms = compute_model_terms(spot, strike, time_to_expiry, volatility, rate, seconds_per_year)
    discounted_strike = mul(strike, terms.discount)

    if option_type == OptionType.CALL:
        premium = mul(spot, normal_cdf(terms.d1)) - mul(discounted_strike, normal_cdf(terms.d2))
    else:
        premium = mul(discounted_strike, normal_cdf(-terms.d2)) - mul(spot, normal_cdf(-terms.d1))

    return mul(clamp(premium, 0), contract_size)


def option_price_for_spec(
    spec: OptionSpec,
    spot: int,
    now: int,
    volatility: int,
    rate: int,
) -> int:
    """Премия для спецификации на момент now."""
    return black_scholes_price(
        option_type=spec.option_type,
        spot=spot,
        strike=spec.strike_price,
        time_to_expiry=spec.time_to_expiry(now),
        volatility=volatility,
        rate=rate,
        contract_size=spec.contract_size,
    )
