"""
ReplicationMath — trading function covered call RMM

Формулы, связывающие резервы пула с кривой репликации:

    vol        = σ·√τ
    R2         = L·K·Φ(Φ⁻¹(1 - R1/L) - vol) + k          (trading function)
    R1         = L·(1 - Φ(Φ⁻¹((R2 - k)/(L·K)) + vol))    (inverse)
    k          = R2 - trading_function(0, R1, L, ...)     (invariant)
    spot       = K·exp(Φ⁻¹(1 - R1/L)·vol - vol²/2)        (marginal price, γ = 1)

Forward направление численно надёжное: ошибка определяется только
ошибками Φ и Φ⁻¹. Inverse направление менее точное (цепочка Φ⁻¹ → Φ
накапливает ошибку, до ~1-2% относительной у краёв домена); опция
refine=True уточняет closed-form оценку методом Ньютона по forward функции,
так что trading_function(inverse(R2)) совпадает с R2 до float точности.

Edge cases:
- vol <= 0 (истёкший пул): forward → k, inverse → 0
- R1/L == 0 → L·K + k; R1/L == 1 → k
- R1/L ∉ [0, 1] или (R2 - k)/(L·K) ∉ [0, 1] → DomainError
"""

import math
from typing import Final

from rmm.core.errors import DomainError
from rmm.core.math.cumulative_normal import (
    inverse_std_n_cdf,
    quantile_prime,
    std_n_cdf,
    std_n_pdf,
)
from rmm.core.math.numerical_safeguards import is_valid_float

# =============================================================================
# ПАРАМЕТРЫ NEWTON REFINEMENT
# =============================================================================

# Максимум итераций уточнения inverse trading function
NEWTON_MAX_ITERATIONS: Final[int] = 32

# Порог остановки по величине шага (в единицах R1/L)
NEWTON_STEP_TOLERANCE: Final[float] = 1e-15


# =============================================================================
# ВОЛАТИЛЬНОСТЬ
# =============================================================================


def get_proportional_volatility(sigma: float, tau: float) -> float:
    """
    Пропорциональная волатильность σ·√τ.

    Args:
        sigma: Implied volatility (1.0 == 100%)
        tau: Время до экспирации в годах

    Returns:
        σ·√τ, либо 0 при tau <= 0
    """
    if tau <= 0:
        return 0.0
    return sigma * math.sqrt(tau)


def _validate_liquidity(liquidity: float) -> None:
    if not liquidity > 0:
        raise DomainError(f"liquidity must be positive, got {liquidity}")


def _validate_strike(strike: float) -> None:
    if not strike > 0:
        raise DomainError(f"strike must be positive, got {strike}")


# =============================================================================
# PER-UNIT КРИВАЯ (L = 1)
# =============================================================================


def get_stable_given_risky(
    risky_per_liquidity: float,
    strike: float,
    sigma: float,
    tau: float,
    invariant: float = 0.0,
) -> float:
    """
    Стабильный резерв на единицу ликвидности по рисковому резерву.

    R2/L = K·Φ(Φ⁻¹(1 - x) - vol) + k

    Raises:
        DomainError: Если x ∉ [0, 1] или strike <= 0
    """
    _validate_strike(strike)
    vol = get_proportional_volatility(sigma, tau)
    if vol <= 0:
        return invariant

    if not 0.0 <= risky_per_liquidity <= 1.0:
        raise DomainError(
            f"Risky reserve per liquidity must be in [0, 1], got {risky_per_liquidity}"
        )

    # p в float может совпасть с границей даже при x строго внутри (0, 1)
    p = 1.0 - risky_per_liquidity
    if p >= 1.0:
        return strike + invariant
    if p <= 0.0:
        return invariant

    return strike * std_n_cdf(inverse_std_n_cdf(p) - vol) + invariant


def _risky_closed_form(stable_fraction: float, vol: float) -> float:
    return 1.0 - std_n_cdf(inverse_std_n_cdf(stable_fraction) + vol)


def _refine_risky(
    estimate: float,
    target_stable: float,
    strike: float,
    sigma: float,
    tau: float,
    vol: float,
) -> float:
    """
    Safeguarded Newton по forward функции: g(x) = K·Φ(Φ⁻¹(1 - x) - vol) - target.

    g'(x) = -K·φ(Φ⁻¹(1 - x) - vol)·(Φ⁻¹)'(1 - x)

    g убывает по x. Bracket [lower, upper] с g(lower) > 0 >= g(upper)
    сужается на каждой итерации; шаг Ньютона за пределы bracket
    заменяется бисекцией. Результат всегда удовлетворяет g(x) <= 0:
    рисковый резерв не меньше точного решения, поэтому swap по
    уточнённой inverse функции не уменьшает инвариант (в том числе на
    стыке центральной и tail аппроксимаций Φ⁻¹, где g имеет скачок).
    """

    def residual(x: float) -> float:
        return get_stable_given_risky(x, strike, sigma, tau) - target_stable

    lower, upper = 0.0, 1.0
    x = estimate
    g = residual(x)

    for _ in range(NEWTON_MAX_ITERATIONS):
        if g > 0.0:
            lower = x
        else:
            upper = x
        if g == 0.0 or upper - lower <= NEWTON_STEP_TOLERANCE:
            break

        p = 1.0 - x
        slope = -strike * std_n_pdf(inverse_std_n_cdf(p) - vol) * quantile_prime(p)
        candidate = x - g / slope if slope < 0.0 and is_valid_float(slope) else upper
        if not lower < candidate < upper:
            candidate = (lower + upper) / 2.0

        step = abs(candidate - x)
        x = candidate
        g = residual(x)
        if step < NEWTON_STEP_TOLERANCE:
            break

    if g <= 0.0:
        return x

    # Последняя точка по другую сторону корня: шаги к upper с удвоением
    step = NEWTON_STEP_TOLERANCE
    while x < upper:
        x = min(x + step, upper)
        if residual(x) <= 0.0:
            return x
        step *= 2.0
    return upper


def get_risky_given_stable(
    stable_per_liquidity: float,
    strike: float,
    sigma: float,
    tau: float,
    invariant: float = 0.0,
    refine: bool = False,
) -> float:
    """
    Рисковый резерв на единицу ликвидности по стабильному резерву.

    R1/L = 1 - Φ(Φ⁻¹((R2/L - k)/K) + vol)

    Args:
        refine: Уточнить closed-form оценку методом Ньютона

    Raises:
        DomainError: Если (R2/L - k)/K ∉ [0, 1] или strike <= 0
    """
    _validate_strike(strike)
    vol = get_proportional_volatility(sigma, tau)
    if vol <= 0:
        return 0.0

    target = stable_per_liquidity - invariant
    stable_fraction = target / strike
    if not 0.0 <= stable_fraction <= 1.0:
        raise DomainError(
            f"Stable reserve per liquidity net of invariant must be in [0, strike], "
            f"got {target} for strike {strike}"
        )
    if stable_fraction <= 0.0:
        return 1.0
    if stable_fraction >= 1.0:
        return 0.0

    risky = _risky_closed_form(stable_fraction, vol)
    if refine and 0.0 < risky < 1.0:
        risky = _refine_risky(risky, target, strike, sigma, tau, vol)
    return risky


# =============================================================================
# TRADING FUNCTION (с ликвидностью)
# =============================================================================


def trading_function(
    invariant: float,
    reserve_risky: float,
    liquidity: float,
    strike: float,
    sigma: float,
    tau: float,
) -> float:
    """
    Forward trading function: стабильный резерв по рисковому.

    reserve_stable = L·K·Φ(Φ⁻¹(1 - R1/L) - vol) + invariant

    Args:
        invariant: Инвариант (в единицах stable, для всей ликвидности)
        reserve_risky: Рисковый резерв
        liquidity: Общая ликвидность (> 0)
        strike: Strike (> 0)
        sigma: Implied volatility
        tau: Время до экспирации в годах

    Returns:
        Стабильный резерв

    Raises:
        DomainError: Если R1/L ∉ [0, 1], liquidity <= 0 или strike <= 0
    """
    _validate_liquidity(liquidity)
    per_unit = get_stable_given_risky(reserve_risky / liquidity, strike, sigma, tau)
    return liquidity * per_unit + invariant


def inverse_trading_function(
    invariant: float,
    reserve_stable: float,
    liquidity: float,
    strike: float,
    sigma: float,
    tau: float,
    refine: bool = False,
) -> float:
    """
    Inverse trading function: рисковый резерв по стабильному.

    reserve_risky = L·(1 - Φ(Φ⁻¹((R2 - invariant)/(L·K)) + vol))

    Closed form. Точность ниже, чем у trading_function: не предполагайте
    симметрию ошибок. refine=True включает Newton уточнение.

    Raises:
        DomainError: Если (R2 - invariant)/(L·K) ∉ [0, 1]
    """
    _validate_liquidity(liquidity)
    per_unit = get_risky_given_stable(
        (reserve_stable - invariant) / liquidity,
        strike,
        sigma,
        tau,
        refine=refine,
    )
    return liquidity * per_unit


def calc_invariant(
    reserve_risky: float,
    reserve_stable: float,
    liquidity: float,
    strike: float,
    sigma: float,
    tau: float,
) -> float:
    """
    Инвариант состояния резервов.

    invariant = R2 - trading_function(0, R1, L, K, σ, τ)

    После fee-bearing swap инвариант не может уменьшиться; уменьшение —
    дефект вычислений (проверяется в пуле).
    """
    return reserve_stable - trading_function(0.0, reserve_risky, liquidity, strike, sigma, tau)


# =============================================================================
# SPOT PRICE
# =============================================================================


def get_spot_price(
    risky_per_liquidity: float,
    strike: float,
    sigma: float,
    tau: float,
) -> float:
    """
    Spot price кривой (marginal price при размере сделки → 0, γ = 1).

    spot = K·φ(Φ⁻¹(1 - x) - vol)·(Φ⁻¹)'(1 - x) = K·exp(Φ⁻¹(1 - x)·vol - vol²/2)

    Closed form выбран каноническим: численный градиент инварианта по
    резервам даёт то же значение с ошибкой конечных разностей.

    Raises:
        DomainError: Если x ∉ (0, 1)
    """
    _validate_strike(strike)
    vol = get_proportional_volatility(sigma, tau)
    phi = inverse_std_n_cdf(1.0 - risky_per_liquidity)
    return strike * math.exp(phi * vol - vol**2 / 2.0)
