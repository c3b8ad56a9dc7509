"""
Errors — Таксономия исключений RMM engine

Все исключения поднимаются в точке обнаружения и пропагируют без изменений
через ReplicationMath → Pool → Arbitrageur. Ни один компонент не подменяет
чужую domain ошибку значением по умолчанию.

Иерархия:
    RMMError
    ├── DomainError               (ValueError)        Φ⁻¹ / quantile вне (0, 1)
    ├── PrecisionMismatchError    (ValueError)        Wei разной точности
    ├── FixedPointOverflowError   (OverflowError)     выход за int128
    ├── DivisionByZeroError       (ZeroDivisionError) checked_div на <= 0
    ├── NegativeAmountError       (ValueError)        отрицательный swap input
    ├── TimestampRegressionError  (ValueError)        last_timestamp назад
    ├── PoolExpiredError                              swap после grace window
    ├── NoConvergenceError                            bisection без сходимости
    └── InvariantViolationError   (AssertionError)    инвариант уменьшился
"""


class RMMError(Exception):
    """Базовое исключение RMM engine."""


class DomainError(RMMError, ValueError):
    """
    Аргумент вне области определения.

    Поднимается inverse_std_n_cdf / quantile_prime для p ∉ (0, 1) и
    trading functions для резерва на единицу ликвидности вне [0, 1].
    Никогда не clamp'ится молча.
    """


class PrecisionMismatchError(RMMError, ValueError):
    """Арифметика между Wei разной точности без явного rescale."""


class FixedPointOverflowError(RMMError, OverflowError):
    """Значение не помещается в signed 128-bit 64.64 представление."""


class DivisionByZeroError(RMMError, ZeroDivisionError):
    """Деление на неположительный делитель там, где требуется положительный."""


class NegativeAmountError(RMMError, ValueError):
    """Отрицательный input на мутирующем swap path."""


class TimestampRegressionError(RMMError, ValueError):
    """Попытка сдвинуть last_timestamp калибровки назад."""


class PoolExpiredError(RMMError):
    """Swap на пуле, истёкшем дольше grace window."""


class NoConvergenceError(RMMError):
    """
    Bisection не сошлась за лимит итераций.

    Также поднимается, если целевая функция вернула NaN.
    """


class InvariantViolationError(RMMError, AssertionError):
    """
    Инвариант уменьшился после fee-bearing swap.

    Это дефект вычислений, а не пользовательская ошибка: в strict режиме
    поднимается, в release режиме логируется как critical.
    """
