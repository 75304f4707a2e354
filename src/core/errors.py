"""
Errors — таксономия исключений risk engine

Все ошибки ядра наследуются от RiskEngineError, чтобы внешние коллабораторы
(order matching, custody, операторский UI) могли ловить их одной веткой.
Арифметические ошибки дополнительно наследуют стандартные исключения Python
(ValueError, ZeroDivisionError, OverflowError) для совместимости с кодом,
который ловит именно их.

Политика:
- Ошибка поднимается в точке нарушения и пропагирует наверх
- Внутри ядра нет автоматических повторов (retry — ответственность вызывающего)
- Ни одна ошибка не оставляет частично обновлённое состояние
"""

from typing import Any


class RiskEngineError(Exception):
    """Базовое исключение risk engine."""


class InvalidInput(RiskEngineError, ValueError):
    """Невалидный вход: нулевая/отрицательная цена, страйк, волатильность, notional."""


class DivisionByZero(RiskEngineError, ZeroDivisionError):
    """Деление на ноль в fixed-point арифметике (σ = 0 или √t = 0 при t > 0)."""


class FixedPointOverflow(RiskEngineError, OverflowError):
    """
    Промежуточный результат вышел за пределы знакового 256-битного диапазона.

    Python int не переполняется, поэтому граница проверяется явно: результат
    обязан совпадать с реализацией на фиксированной ширине слова.
    """


class PriceUnavailable(RiskEngineError):
    """Price feed вернул ошибку, неположительную цену или устаревшую котировку."""

    def __init__(self, symbol: str, reason: str):
        self.symbol = symbol
        self.reason = reason
        super().__init__(f"price unavailable for {symbol}: {reason}")


class DuplicateId(RiskEngineError):
    """Позиция с таким id уже зарегистрирована."""


class NotFound(RiskEngineError):
    """Позиция (или портфель) не найдена."""


class LimitExceeded(RiskEngineError):
    """
    Нарушение риск-лимита при admission.

    Несёт имя лимита, его значение, фактическое значение и превышение, чтобы
    вызывающий мог принять решение без повторного расчёта.
    """

    def __init__(
        self,
        limit_name: str,
        limit_value: int,
        actual_value: int,
        details: str = "",
    ):
        self.limit_name = limit_name
        self.limit_value = limit_value
        self.actual_value = actual_value
        self.excess = actual_value - limit_value
        message = (
            f"{limit_name} exceeded: actual={actual_value} limit={limit_value} "
            f"excess={self.excess}"
        )
        if details:
            message = f"{message} ({details})"
        super().__init__(message)


class LiquidationNotJustified(RiskEngineError):
    """Попытка ликвидации без выполненного условия check_liquidation."""

    def __init__(self, position_id: str, decision: Any = None):
        self.position_id = position_id
        self.decision = decision
        super().__init__(f"liquidation of {position_id} is not justified")


class LiquidationNotAcknowledged(RiskEngineError):
    """Custody коллаборатор не подтвердил ликвидацию; запись позиции сохранена."""
