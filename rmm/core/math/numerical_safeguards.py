"""
Numerical Safeguards — целочисленная арифметика и epsilon-защиты

Модуль фиксирует семантику округления, общую для всего engine:
- Целочисленное деление ВСЕГДА усекает к нулю (как EVM `sdiv`/`div`),
  в отличие от Python `//`, который округляет к -inf
- Saturating деление: неположительный делитель → 0 (parity quirk эталона)
- NaN/Inf валидация входов float-функций
- Epsilon-допуски для проверок инварианта и цен

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. div_trunc(a, b) == int(a / b) для любых int без потери точности
2. saturating_div никогда не поднимает исключение
3. checked_div поднимает DivisionByZeroError на b <= 0
4. Все операции детерминированы и воспроизводимы
"""

import math
from typing import Final

from rmm.core.errors import DivisionByZeroError

# =============================================================================
# EPSILON-ПАРАМЕТРЫ
# =============================================================================

# Толерантность сравнения цен (marginal price vs reference)
EPS_PRICE: Final[float] = 1e-8

# Толерантность уменьшения инварианта (float шум после truncation)
EPS_INVARIANT: Final[float] = 1e-12


# =============================================================================
# ЦЕЛОЧИСЛЕННОЕ ДЕЛЕНИЕ
# =============================================================================


def div_trunc(numerator: int, denominator: int) -> int:
    """
    Целочисленное деление с усечением к нулю.

    Python `//` округляет к -inf: -7 // 2 == -4. EVM и эталонный ledger
    усекают к нулю: -7 / 2 == -3. Все деления engine идут через эту функцию.

    Args:
        numerator: Числитель
        denominator: Знаменатель (!= 0)

    Returns:
        Частное, усечённое к нулю

    Raises:
        DivisionByZeroError: Если denominator == 0

    Examples:
        >>> div_trunc(7, 2)
        3
        >>> div_trunc(-7, 2)
        -3
        >>> div_trunc(7, -2)
        -3
    """
    if denominator == 0:
        raise DivisionByZeroError("Integer division by zero")

    quotient = abs(numerator) // abs(denominator)
    if (numerator < 0) != (denominator < 0):
        return -quotient
    return quotient


def saturating_div(numerator: int, denominator: int) -> int:
    """
    Saturating деление: неположительный делитель → 0.

    Воспроизводит поведение эталонного Wei.div для parity-тестов.
    Скрывает ошибки вызывающего кода, поэтому внутри engine используется
    checked_div.

    Examples:
        >>> saturating_div(10, 3)
        3
        >>> saturating_div(10, 0)
        0
        >>> saturating_div(10, -5)
        0
    """
    if denominator <= 0:
        return 0
    return div_trunc(numerator, denominator)


def checked_div(numerator: int, denominator: int) -> int:
    """
    Деление на строго положительный делитель.

    Raises:
        DivisionByZeroError: Если denominator <= 0
    """
    if denominator <= 0:
        raise DivisionByZeroError(
            f"Divisor must be positive, got {denominator}"
        )
    return div_trunc(numerator, denominator)


def mul_div(a: int, b: int, denominator: int) -> int:
    """
    (a * b) / denominator с усечением к нулю и полной точностью промежутка.

    Raises:
        DivisionByZeroError: Если denominator <= 0
    """
    return checked_div(a * b, denominator)


# =============================================================================
# NaN/Inf ВАЛИДАЦИЯ
# =============================================================================


def is_valid_float(value: float) -> bool:
    """Проверка, что float конечен (не NaN, не Inf)."""
    return math.isfinite(value)


# =============================================================================
# ОГРАНИЧЕНИЕ ДИАПАЗОНА
# =============================================================================


def clamp(
    value: float,
    min_value: float | None = None,
    max_value: float | None = None,
) -> float:
    """
    Ограничение значения диапазоном [min_value, max_value].

    Examples:
        >>> clamp(1.5, 0.0, 1.0)
        1.0
        >>> clamp(-0.5, 0.0)
        0.0
    """
    result = value

    if min_value is not None:
        result = max(result, min_value)

    if max_value is not None:
        result = min(result, max_value)

    return result


# =============================================================================
# ВАЛИДАЦИЯ
# =============================================================================


def validate_positive(value: float, name: str) -> None:
    """
    Валидация, что значение строго положительное и конечное.

    Raises:
        ValueError: Если value <= 0 или NaN/Inf
    """
    if not is_valid_float(value):
        raise ValueError(f"{name} must be a valid float (not NaN/Inf), got {value}")

    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")


def validate_non_negative(value: float, name: str) -> None:
    """
    Валидация, что значение неотрицательное и конечное.

    Raises:
        ValueError: Если value < 0 или NaN/Inf
    """
    if not is_valid_float(value):
        raise ValueError(f"{name} must be a valid float (not NaN/Inf), got {value}")

    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")
