"""
BlackScholes — covered call helpers

Используются для калибровки пула по spot цене и для теоретической
стоимости LP позиции в симуляции:
- calculate_d1:  d1 = (ln(S/K) + σ²τ/2) / (σ√τ)
- call_delta:    Φ(d1); риск-резерв реплицирующего пула равен 1 - delta
- call_premium:  S·Φ(d1) - K·Φ(d1 - σ√τ)
"""

import math

from rmm.core.math.cumulative_normal import std_n_cdf
from rmm.core.math.numerical_safeguards import validate_positive


def moneyness(strike: float, spot: float) -> float:
    """ln(S / K)."""
    validate_positive(strike, "strike")
    validate_positive(spot, "spot")
    return math.log(spot / strike)


def calculate_d1(strike: float, sigma: float, tau: float, spot: float) -> float:
    """
    d1 Black-Scholes.

    Для истёкшей опции (tau <= 0) или нулевой волатильности возвращает 0.
    """
    if tau <= 0 or sigma <= 0:
        return 0.0
    return (moneyness(strike, spot) + (sigma**2 / 2.0) * tau) / (sigma * math.sqrt(tau))


def call_delta(strike: float, sigma: float, tau: float, spot: float) -> float:
    """Delta колл-опции: Φ(d1)."""
    return std_n_cdf(calculate_d1(strike, sigma, tau, spot))


def call_premium(strike: float, sigma: float, tau: float, spot: float) -> float:
    """
    Премия колл-опции.

    При tau <= 0 — внутренняя стоимость max(S - K, 0).
    """
    if tau <= 0 or sigma <= 0:
        return max(spot - strike, 0.0)
    d1 = calculate_d1(strike, sigma, tau, spot)
    d2 = d1 - sigma * math.sqrt(tau)
    return spot * std_n_cdf(d1) - strike * std_n_cdf(d2)
