"""
CumulativeNormal — аппроксимации стандартного нормального распределения

Детерминированные приближения с ограниченной ошибкой:
- std_n_cdf(x)          Φ(x), Abramowitz-Stegun 7.1.26 для erf, |err| <= 1.5e-7
- std_n_pdf(x)          φ(x), точная плотность
- inverse_std_n_cdf(p)  Φ⁻¹(p), central rational (|err| ~ 1.2e-4 на
                        [0.025, 0.975]) + tail rational по sqrt(-2 ln p)
                        (|err| << 2.5e-5)
- quantile_prime(p)     d/dp Φ⁻¹(p) = 1 / φ(Φ⁻¹(p))

Функции работают на float (не на 64.64); конверсия происходит на границе
пула.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. std_n_cdf(-x) == 1 - std_n_cdf(x) (симметрия erf по построению)
2. inverse_std_n_cdf / quantile_prime для p ∉ (0, 1) → DomainError,
   никогда не ±inf
"""

import math
from typing import Final

from rmm.core.errors import DomainError

# =============================================================================
# КОЭФФИЦИЕНТЫ erf (Abramowitz-Stegun 7.1.26)
# =============================================================================

ERF_P: Final[float] = 0.3275911
ERF_A1: Final[float] = 0.254829592
ERF_A2: Final[float] = -0.284496736
ERF_A3: Final[float] = 1.421413741
ERF_A4: Final[float] = -1.453152027
ERF_A5: Final[float] = 1.061405429

# =============================================================================
# КОЭФФИЦИЕНТЫ Φ⁻¹: центральная область
# =============================================================================

INV_A0: Final[float] = 0.151015506
INV_A1: Final[float] = -0.530357263
INV_A2: Final[float] = 1.365020123
INV_B0: Final[float] = 0.132089632
INV_B1: Final[float] = -0.760732499

# Границы центральной области
LOW_TAIL: Final[float] = 0.025
HIGH_TAIL: Final[float] = 0.975

# =============================================================================
# КОЭФФИЦИЕНТЫ Φ⁻¹: хвосты (rational по q = sqrt(-2 ln p))
# =============================================================================

TAIL_C: Final[tuple[float, ...]] = (
    -7.784894002430293e-03,
    -3.223964580411365e-01,
    -2.400758277161838e00,
    -2.549732539343734e00,
    4.374664141464968e00,
    2.938163982698783e00,
)
TAIL_D: Final[tuple[float, ...]] = (
    7.784695709041462e-03,
    3.224671290700398e-01,
    2.445134137142996e00,
    3.754408661907416e00,
)

_INV_SQRT_2PI: Final[float] = 1.0 / math.sqrt(2.0 * math.pi)


# =============================================================================
# Φ И φ
# =============================================================================


def erf(x: float) -> float:
    """
    Приближение erf(x), Abramowitz-Stegun 7.1.26.

    Нечётна по построению: erf(-x) == -erf(x).
    """
    if x == 0.0:
        return 0.0

    sign = 1.0 if x > 0 else -1.0
    x = abs(x)

    t = 1.0 / (1.0 + ERF_P * x)
    poly = ((((ERF_A5 * t + ERF_A4) * t + ERF_A3) * t + ERF_A2) * t + ERF_A1) * t
    y = 1.0 - poly * math.exp(-x * x)
    return sign * y


def cdf(x: float, mean: float = 0.0, variance: float = 1.0) -> float:
    """Нормальная CDF с параметрами (mean, variance)."""
    if variance <= 0:
        raise DomainError(f"variance must be positive, got {variance}")
    return 0.5 * (1.0 + erf((x - mean) / math.sqrt(2.0 * variance)))


def std_n_cdf(x: float) -> float:
    """
    Стандартная нормальная CDF Φ(x).

    Examples:
        >>> std_n_cdf(0.0)
        0.5
    """
    return cdf(x, 0.0, 1.0)


def std_n_pdf(x: float) -> float:
    """Стандартная нормальная плотность φ(x)."""
    return _INV_SQRT_2PI * math.exp(-0.5 * x * x)


# =============================================================================
# Φ⁻¹
# =============================================================================


def _check_probability(p: float) -> None:
    # NaN не проходит ни одно сравнение, поэтому проверка через not
    if not (0.0 < p < 1.0):
        raise DomainError(f"Probability must be in (0, 1), got {p}")


def _inverse_central(p: float) -> float:
    q = p - 0.5
    r = q * q
    numerator = INV_A1 * r + INV_A0
    denominator = r * r + INV_B1 * r + INV_B0
    return q * (INV_A2 + numerator / denominator)


def _inverse_lower_tail(p: float) -> float:
    c1, c2, c3, c4, c5, c6 = TAIL_C
    d1, d2, d3, d4 = TAIL_D
    q = math.sqrt(-2.0 * math.log(p))
    numerator = ((((c1 * q + c2) * q + c3) * q + c4) * q + c5) * q + c6
    denominator = (((d1 * q + d2) * q + d3) * q + d4) * q + 1.0
    return numerator / denominator


def inverse_std_n_cdf(p: float) -> float:
    """
    Приближение Φ⁻¹(p).

    Для p в [LOW_TAIL, HIGH_TAIL] — центральная rational аппроксимация,
    иначе — tail аппроксимация (верхний хвост через симметрию).

    Args:
        p: Вероятность в (0, 1)

    Returns:
        x такой, что Φ(x) ≈ p

    Raises:
        DomainError: Если p <= 0, p >= 1 или NaN

    Examples:
        >>> inverse_std_n_cdf(0.5)
        0.0
    """
    _check_probability(p)

    if p < LOW_TAIL:
        return _inverse_lower_tail(p)
    if p > HIGH_TAIL:
        return -_inverse_lower_tail(1.0 - p)
    return _inverse_central(p)


def quantile_prime(p: float) -> float:
    """
    Quantile density: производная Φ⁻¹ по p.

    d/dp Φ⁻¹(p) = 1 / φ(Φ⁻¹(p)). Используется только формулами
    marginal price.

    Raises:
        DomainError: Если p ∉ (0, 1)
    """
    return 1.0 / std_n_pdf(inverse_std_n_cdf(p))
