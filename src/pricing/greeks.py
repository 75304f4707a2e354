"""
Greeks Calculator — чувствительности Black-Scholes в fixed-point

ФОРМУЛЫ (φ = normal_pdf, N = normal_cdf):
    delta = N(d1)              (Call)
          = N(d1) − 1          (Put)
    gamma = φ(d1) / (S·σ·√t)
    theta = −S·φ(d1)·σ/(2√t) − r·K·e^{−rt}·N(d2)     (Call)
          = −S·φ(d1)·σ/(2√t) + r·K·e^{−rt}·N(−d2)    (Put)
            годовое значение делится на 365 → за календарный день
    vega  = S·φ(d1)·√t / 100                          (на 1% волатильности)
    rho   = ±K·t·e^{−rt}·N(±d2) / 100                 (на 1% ставки)

Все пять значений умножаются на contract_size / SCALE.

Экспирация (time_to_expiry == 0):
    delta = +contract_size для Call при S >= K, −contract_size для Put при S <= K,
    иначе 0; остальные Greeks = 0.
"""

from src.core.domain.greeks import Greeks
from src.core.domain.option import OptionSpec, OptionType
from src.core.errors import DivisionByZero
from src.core.math.fixed_point import SCALE, div, mul, tdiv, validate_positive
from src.core.math.kernel import normal_cdf, normal_pdf
from src.pricing.black_scholes import (
    DAYS_PER_YEAR,
    SECONDS_PER_YEAR,
    compute_model_terms,
    validate_pricing_inputs,
)


class GreeksCalculator:
    """Калькулятор Greeks (stateless, параметризуется длиной года)."""

    def __init__(self, seconds_per_year: int = SECONDS_PER_YEAR):
        self.seconds_per_year = seconds_per_year

    def calculate(
        self,
        option_type: OptionType,
        spot: int,
        strike: int,
        time_to_expiry: int,
        volatility: int,
        rate: int,
        contract_size: int = SCALE,
    ) -> Greeks:
        """
        Greeks опциона.

        Args:
            option_type: Call / Put
            spot: Цена underlying (fixed-point)
            strike: Страйк (fixed-point)
            time_to_expiry: Секунд до экспирации (>= 0)
            volatility: Implied volatility (fixed-point доля)
            rate: Безрисковая ставка (fixed-point доля)
            contract_size: Размер контракта (fixed-point)

        Returns:
            Greeks, умноженные на contract_size / SCALE

        Raises:
            InvalidInput: Цена/страйк <= 0, время/волатильность < 0
            DivisionByZero: σ = 0 (или σ·√t = 0) при t > 0
        """
        validate_pricing_inputs(spot, strike, time_to_expiry, volatility)
        validate_positive(contract_size, "contract_size")

        if time_to_expiry == 0:
            return self._expiry_greeks(option_type, spot, strike, contract_size)

        if volatility == 0:
            raise DivisionByZero("volatility is zero with non-zero time to expiry")

        terms = compute_model_terms(
            spot, strike, time_to_expiry, volatility, rate, self.seconds_per_year
        )
        pdf_d1 = normal_pdf(terms.d1)
        spot_pdf = mul(spot, pdf_d1)

        gamma = div(pdf_d1, mul(spot, terms.vol_sqrt_t))
        time_decay = -div(mul(spot_pdf, volatility), 2 * terms.sqrt_t)
        vega = tdiv(mul(spot_pdf, terms.sqrt_t), 100)
        discounted_strike = mul(strike, terms.discount)

        if option_type == OptionType.CALL:
            n_d2 = normal_cdf(terms.d2)
            delta = normal_cdf(terms.d1)
            carry = -mul(mul(rate, discounted_strike), n_d2)
            rho = tdiv(mul(mul(discounted_strike, terms.t), n_d2), 100)
        else:
            n_minus_d2 = normal_cdf(-terms.d2)
            delta = normal_cdf(terms.d1) - SCALE
            carry = mul(mul(rate, discounted_strike), n_minus_d2)
            rho = -tdiv(mul(mul(discounted_strike, terms.t), n_minus_d2), 100)

        theta = tdiv(time_decay + carry, DAYS_PER_YEAR)

        return Greeks(
            delta=mul(delta, contract_size),
            gamma=mul(gamma, contract_size),
            theta=mul(theta, contract_size),
            vega=mul(vega, contract_size),
            rho=mul(rho, contract_size),
        )

    def calculate_for_spec(
        self,
        spec: OptionSpec,
        spot: int,
        time_to_expiry: int,
        volatility: int,
        rate: int,
    ) -> Greeks:
        """Greeks для спецификации опциона."""
        return self.calculate(
            option_type=spec.option_type,
            spot=spot,
            strike=spec.strike_price,
            time_to_expiry=time_to_expiry,
            volatility=volatility,
            rate=rate,
            contract_size=spec.contract_size,
        )

    @staticmethod
    def _expiry_greeks(
        option_type: OptionType,
        spot: int,
        strike: int,
        contract_size: int,
    ) -> Greeks:
        """Производная payoff в момент экспирации: только delta."""
        if option_type == OptionType.CALL:
            delta = contract_size if spot >= strike else 0
        else:
            delta = -contract_size if spot <= strike else 0
        return Greeks(delta=delta)
