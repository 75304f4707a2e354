"""
Fixed-Point Arithmetic — целочисленная арифметика с масштабом 10^18

Модуль задаёт единственное представление вещественных чисел в системе:
целое число x означает значение x / SCALE. Float не участвует ни в одном
расчёте, поэтому результаты воспроизводимы бит-в-бит на любой платформе.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Любое промежуточное произведение проверяется на знаковый 256-битный диапазон
   (FixedPointOverflow вместо тихого wrap-around)
2. Знаковое деление усекается к нулю (как в реализациях фиксированной ширины)
3. Деление на ноль → DivisionByZero, никогда fallback
4. Все операции детерминированы и воспроизводимы
"""

from decimal import Decimal, localcontext
from typing import Final

from src.core.errors import DivisionByZero, FixedPointOverflow, InvalidInput

# =============================================================================
# КОНСТАНТЫ МАСШТАБА
# =============================================================================

# 1.0 в fixed-point представлении
SCALE: Final[int] = 10**18

# 1% и 1 bps в fixed-point
PERCENT: Final[int] = SCALE // 100
BPS: Final[int] = SCALE // 10_000

# Знаменатель базисных пунктов (10000 bps = 100%)
BPS_DENOMINATOR: Final[int] = 10_000

# Границы знакового 256-битного слова
INT256_MAX: Final[int] = 2**255 - 1
INT256_MIN: Final[int] = -(2**255)


# =============================================================================
# ПРОВЕРКА ДИАПАЗОНА
# =============================================================================


def check_bounds(value: int, name: str = "intermediate") -> int:
    """
    Проверка, что значение помещается в знаковое 256-битное слово.

    Args:
        value: Проверяемое значение
        name: Имя величины (для сообщения об ошибке)

    Returns:
        value без изменений

    Raises:
        FixedPointOverflow: Если value вне [INT256_MIN, INT256_MAX]
    """
    if value > INT256_MAX or value < INT256_MIN:
        raise FixedPointOverflow(
            f"{name} does not fit int256 ({value.bit_length()} bits)"
        )
    return value


# =============================================================================
# БАЗОВЫЕ ОПЕРАЦИИ
# =============================================================================


def tdiv(numerator: int, denominator: int) -> int:
    """
    Целочисленное деление с усечением к нулю.

    Python `//` округляет к -inf; для знаковых fixed-point величин это дало бы
    асимметрию mul(-a, b) != -mul(a, b).

    Examples:
        >>> tdiv(7, 2)
        3
        >>> tdiv(-7, 2)
        -3
    """
    if denominator == 0:
        raise DivisionByZero("fixed-point division by zero")
    quotient = abs(numerator) // abs(denominator)
    if (numerator < 0) != (denominator < 0):
        return -quotient
    return quotient


def mul(a: int, b: int) -> int:
    """Fixed-point произведение: a * b / SCALE."""
    return tdiv(check_bounds(a * b, "mul"), SCALE)


def div(a: int, b: int) -> int:
    """Fixed-point частное: a * SCALE / b."""
    return tdiv(check_bounds(a * SCALE, "div"), b)


def mul_div(a: int, b: int, denominator: int) -> int:
    """a * b / denominator с проверкой промежуточного произведения."""
    return tdiv(check_bounds(a * b, "mul_div"), denominator)


# =============================================================================
# КОНВЕРСИИ
# =============================================================================


def to_fixed(value: int | str | Decimal) -> int:
    """
    Конверсия десятичной записи в fixed-point.

    Принимает int или точную десятичную строку/Decimal (float запрещён,
    чтобы исключить двоичную погрешность на входе).

    Examples:
        >>> to_fixed("0.05")
        50000000000000000
        >>> to_fixed(3000) == 3000 * SCALE
        True

    Raises:
        InvalidInput: Если значение не представимо точно с 18 знаками
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise InvalidInput(f"float/bool is not accepted as fixed-point input: {value!r}")
    if isinstance(value, int):
        return value * SCALE

    with localcontext() as ctx:
        ctx.prec = 96
        scaled = Decimal(value) * SCALE
    if scaled != scaled.to_integral_value():
        raise InvalidInput(f"{value} has more than 18 decimal places")
    return int(scaled)


def bps_to_fixed(bps: int) -> int:
    """Базисные пункты → fixed-point доля (10000 bps = SCALE)."""
    return bps * BPS


def format_fixed(value: int, places: int = 6) -> str:
    """Человекочитаемое представление fixed-point значения (для логов)."""
    sign = "-" if value < 0 else ""
    whole, frac = divmod(abs(value), SCALE)
    frac_str = str(frac).rjust(18, "0")[:places]
    return f"{sign}{whole}.{frac_str}" if places > 0 else f"{sign}{whole}"


# =============================================================================
# ВАЛИДАЦИЯ
# =============================================================================


def validate_positive(value: int, name: str) -> None:
    """
    Валидация, что значение строго положительное.

    Raises:
        InvalidInput: Если value <= 0
    """
    if value <= 0:
        raise InvalidInput(f"{name} must be positive, got {value}")


def validate_non_negative(value: int, name: str) -> None:
    """
    Валидация, что значение неотрицательное.

    Raises:
        InvalidInput: Если value < 0
    """
    if value < 0:
        raise InvalidInput(f"{name} must be non-negative, got {value}")


def clamp(value: int, min_value: int | None = None, max_value: int | None = None) -> int:
    """
    Ограничение значения диапазоном [min_value, max_value].

    Examples:
        >>> clamp(15, 0, 10)
        10
        >>> clamp(-1, 0, 10)
        0
    """
    result = value
    if min_value is not None:
        result = max(result, min_value)
    if max_value is not None:
        result = min(result, max_value)
    return result
