"""
Bisection — поиск корня монотонной функции на отрезке

Остановка по ширине bracket (tolerance). Число итераций ограничено:
по умолчанию ceil(log2((upper - lower)/tolerance)) + BISECTION_EXTRA_ITERATIONS.
Превышение лимита или NaN в значении функции → NoConvergenceError.
"""

import math
from typing import Callable, Final, Optional

from rmm.core.errors import NoConvergenceError

# Ширина bracket, при которой поиск останавливается
BISECTION_TOLERANCE: Final[float] = 1e-3

# Запас итераций сверх теоретического log2((b - a)/tol)
BISECTION_EXTRA_ITERATIONS: Final[int] = 8


def default_max_iterations(lower: float, upper: float, tolerance: float) -> int:
    """
    ceil(log2((upper - lower)/tolerance)) + BISECTION_EXTRA_ITERATIONS.

    Examples:
        >>> default_max_iterations(0.0, 1.0, 1e-3)
        18
    """
    width = upper - lower
    if width <= tolerance:
        return BISECTION_EXTRA_ITERATIONS
    return math.ceil(math.log2(width / tolerance)) + BISECTION_EXTRA_ITERATIONS


def brackets(f_lower: float, f_upper: float) -> bool:
    """Значения на концах отрезка разных знаков (или одно из них — корень)."""
    return f_lower * f_upper <= 0.0


def _evaluate(fn: Callable[[float], float], x: float) -> float:
    value = fn(x)
    if math.isnan(value):
        raise NoConvergenceError(f"Objective evaluated to NaN at {x}")
    return value


def bisection(
    fn: Callable[[float], float],
    lower: float,
    upper: float,
    tolerance: float = BISECTION_TOLERANCE,
    max_iterations: Optional[int] = None,
) -> float:
    """
    Корень fn на [lower, upper].

    Args:
        fn: Непрерывная функция, меняющая знак на отрезке
        lower: Левая граница
        upper: Правая граница (> lower)
        tolerance: Ширина bracket для остановки
        max_iterations: Лимит итераций; None — default_max_iterations

    Returns:
        Середина финального bracket (или точный корень, если найден)

    Raises:
        ValueError: Если upper <= lower или tolerance <= 0
        NoConvergenceError: Если корень не в bracket, лимит итераций
            исчерпан или fn вернула NaN
    """
    if upper <= lower:
        raise ValueError(f"upper {upper} must be greater than lower {lower}")
    if tolerance <= 0:
        raise ValueError(f"tolerance must be positive, got {tolerance}")
    if max_iterations is None:
        max_iterations = default_max_iterations(lower, upper, tolerance)

    f_lower = _evaluate(fn, lower)
    f_upper = _evaluate(fn, upper)
    if f_lower == 0.0:
        return lower
    if f_upper == 0.0:
        return upper
    if not brackets(f_lower, f_upper):
        raise NoConvergenceError(
            f"Root is not bracketed: f({lower})={f_lower}, f({upper})={f_upper}"
        )

    iterations = 0
    while upper - lower > tolerance:
        if iterations >= max_iterations:
            raise NoConvergenceError(
                f"Bisection did not converge in {max_iterations} iterations, "
                f"bracket [{lower}, {upper}]"
            )
        iterations += 1

        middle = (lower + upper) / 2.0
        f_middle = _evaluate(fn, middle)
        if f_middle == 0.0:
            return middle
        if (f_middle < 0.0) == (f_lower < 0.0):
            lower, f_lower = middle, f_middle
        else:
            upper = middle

    return (lower + upper) / 2.0
