"""
Numerical Kernel — sqrt / exp / ln / нормальное распределение в fixed-point

Единственный источник численной аппроксимации в системе: бюджет погрешности
Greeks, risk score и VaR целиком определяется функциями этого модуля.
Все функции чистые, без состояния, принимают и возвращают int в масштабе SCALE.

ПОЛИТИКА ТОЧНОСТИ:
1. isqrt/sqrt — точны для полных квадратов, floor иначе
2. exp — ряд Тейлора, максимум EXP_MAX_TERMS членов или до члена < SCALE/1000;
   вход ограничен ±EXP_INPUT_LIMIT. Для больших |x| относительная погрешность
   растёт (усечение ряда), вызывающий код обязан это допускать
3. ln — ряд ln(1+y) из LN_SERIES_TERMS членов; точен около SCALE, деградирует
   при удалении от SCALE (практическая граница точности ≈ [SCALE/2, 2·SCALE]).
   Это задокументированная граница, а не ошибка
4. normal_cdf — Abramowitz–Stegun 26.2.17; закон отражения CDF(-x) = SCALE - CDF(x)
   выполняется точно, CDF(0) = SCALE/2 точно
"""

from typing import Final

from src.core.errors import InvalidInput
from src.core.math.fixed_point import (
    SCALE,
    check_bounds,
    clamp,
    div,
    mul,
    mul_div,
    tdiv,
)

# =============================================================================
# ПАРАМЕТРЫ РЯДОВ
# =============================================================================

# Максимальное число членов ряда exp (включая ведущую единицу)
EXP_MAX_TERMS: Final[int] = 10

# Член ряда exp меньше этого порога завершает суммирование (0.001)
EXP_TERM_THRESHOLD: Final[int] = SCALE // 1000

# |x| > 20 ограничивается для защиты от переполнения
EXP_INPUT_LIMIT: Final[int] = 20 * SCALE

# Число членов ряда ln(1+y)
LN_SERIES_TERMS: Final[int] = 10

# |x| > 6 → CDF насыщается до 0 или SCALE
CDF_SATURATION_LIMIT: Final[int] = 6 * SCALE

# При |x| > 7 показатель x²/2 заведомо превышает EXP_INPUT_LIMIT
PDF_TAIL_CUTOFF: Final[int] = 7 * SCALE

# 1/√(2π)
INV_SQRT_2PI: Final[int] = 398942280401432678

# =============================================================================
# КОЭФФИЦИЕНТЫ ABRAMOWITZ–STEGUN 26.2.17
# =============================================================================

AS_P: Final[int] = 231641900000000000
AS_B1: Final[int] = 319381530000000000
AS_B2: Final[int] = -356563782000000000
AS_B3: Final[int] = 1781477937000000000
AS_B4: Final[int] = -1821255978000000000
AS_B5: Final[int] = 1330274429000000000


# =============================================================================
# КВАДРАТНЫЙ КОРЕНЬ
# =============================================================================


def isqrt(x: int) -> int:
    """
    Целочисленный квадратный корень методом Ньютона (floor).

    Итерация z_{n+1} = (x/z_n + z_n)/2 строго убывает до сходимости,
    поэтому ограничение на число итераций не требуется (O(log x) шагов).

    Examples:
        >>> isqrt(0)
        0
        >>> isqrt(144)
        12
        >>> isqrt(150)
        12

    Raises:
        InvalidInput: Если x < 0
    """
    if x < 0:
        raise InvalidInput(f"sqrt of negative value: {x}")
    if x == 0:
        return 0

    z = (x + 1) // 2
    y = x
    while z < y:
        y = z
        z = (x // z + z) // 2
    return y


def sqrt(x: int) -> int:
    """
    Fixed-point квадратный корень: sqrt(x / SCALE) в масштабе SCALE.

    Examples:
        >>> sqrt(4 * SCALE) == 2 * SCALE
        True
    """
    return isqrt(check_bounds(x * SCALE, "sqrt"))


# =============================================================================
# ЭКСПОНЕНТА
# =============================================================================


def _exp_series(ax: int, max_terms: int) -> int:
    """Усечённый ряд Тейлора exp(ax) для ax >= 0."""
    total = SCALE
    term = SCALE
    for n in range(1, max_terms):
        term = mul_div(term, ax, n * SCALE)
        total += term
        if term < EXP_TERM_THRESHOLD:
            break
    return total


def exp(x: int, max_terms: int = EXP_MAX_TERMS) -> int:
    """
    Экспонента e^x в fixed-point.

    Ряд вычисляется для |x|; отрицательный аргумент даёт обратную величину
    SCALE² / exp(|x|). Вход ограничен ±EXP_INPUT_LIMIT: большие положительные x
    возвращают ограниченный максимум, большие отрицательные — значение около нуля.

    Args:
        x: Знаковый аргумент в масштабе SCALE
        max_terms: Максимальное число членов ряда

    Returns:
        e^x в масштабе SCALE (всегда > 0)

    Examples:
        >>> exp(0) == SCALE
        True
    """
    if x == 0:
        return SCALE

    bounded = clamp(x, -EXP_INPUT_LIMIT, EXP_INPUT_LIMIT)
    positive = _exp_series(abs(bounded), max_terms)

    if bounded < 0:
        return tdiv(SCALE * SCALE, positive)
    return positive


# =============================================================================
# НАТУРАЛЬНЫЙ ЛОГАРИФМ
# =============================================================================


def _ln_one_plus(y: int) -> int:
    """Ряд y - y²/2 + y³/3 - … (LN_SERIES_TERMS членов), y >= 0."""
    total = 0
    power = y
    for n in range(1, LN_SERIES_TERMS + 1):
        term = tdiv(power, n)
        total = total + term if n % 2 == 1 else total - term
        if n < LN_SERIES_TERMS:
            power = mul(power, y)
    return total


def ln(x: int) -> int:
    """
    Натуральный логарифм ln(x / SCALE) в fixed-point.

    x > SCALE: ln(1 + y), y = x/SCALE - 1.
    x < SCALE: -ln(SCALE/x) через обратное преобразование.

    Точность деградирует при удалении x от SCALE (ряд из 10 членов);
    вне ≈ [SCALE/2, 2·SCALE] результат является грубой оценкой.

    Examples:
        >>> ln(SCALE)
        0

    Raises:
        InvalidInput: Если x <= 0
    """
    if x <= 0:
        raise InvalidInput(f"ln domain violation: x={x} must be positive")
    if x == SCALE:
        return 0
    if x < SCALE:
        reciprocal = div(SCALE, x)
        return -_ln_one_plus(reciprocal - SCALE)
    return _ln_one_plus(x - SCALE)


# =============================================================================
# СТАНДАРТНОЕ НОРМАЛЬНОЕ РАСПРЕДЕЛЕНИЕ
# =============================================================================


def normal_pdf(x: int) -> int:
    """
    Плотность стандартного нормального распределения φ(x) = exp(-x²/2)/√(2π).

    Использует exp ядра; для |x| > PDF_TAIL_CUTOFF показатель сразу берётся
    на границе EXP_INPUT_LIMIT (результат около нуля, без переполнения x²).
    """
    if abs(x) > PDF_TAIL_CUTOFF:
        half_square = EXP_INPUT_LIMIT
    else:
        half_square = tdiv(mul(x, x), 2)
    return mul(exp(-half_square), INV_SQRT_2PI)


def normal_cdf(x: int) -> int:
    """
    Функция распределения стандартного нормального закона N(x).

    Abramowitz–Stegun 26.2.17:
        t = 1 / (1 + p·|x|)
        N(|x|) = 1 - φ(|x|)·(b1·t + b2·t² + b3·t³ + b4·t⁴ + b5·t⁵)

    Гарантии:
        - N(0) = SCALE/2 точно
        - N(x) + N(-x) = SCALE точно для любого x
        - |x| > 6 → насыщение до 0 / SCALE
        - результат всегда в [0, SCALE]
    """
    if x == 0:
        return SCALE // 2

    ax = abs(x)
    if ax > CDF_SATURATION_LIMIT:
        upper = SCALE
    else:
        t = div(SCALE, SCALE + mul(AS_P, ax))
        poly = AS_B5
        for coefficient in (AS_B4, AS_B3, AS_B2, AS_B1):
            poly = mul(poly, t) + coefficient
        poly = mul(poly, t)
        upper = clamp(SCALE - mul(normal_pdf(ax), poly), 0, SCALE)

    if x > 0:
        return upper
    return SCALE - upper
