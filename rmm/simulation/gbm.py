"""
Geometric Brownian Motion price path

S(t+dt) = S(t)·exp((μ - σ²/2)·dt + σ·√dt·Z), Z ~ N(0, 1).

Вся случайность через numpy Generator (default_rng(seed)) для
воспроизводимости.
"""

import numpy as np

from rmm.core.math.numerical_safeguards import validate_non_negative, validate_positive


def generate_gbm(
    s0: float,
    mu: float,
    sigma: float,
    horizon_years: float,
    steps: int,
    seed: int = 0,
) -> np.ndarray:
    """
    Ценовой путь GBM.

    Args:
        s0: Начальная цена (> 0)
        mu: Годовой drift
        sigma: Годовая волатильность (>= 0)
        horizon_years: Горизонт в годах (> 0)
        steps: Число шагов (> 0)
        seed: Seed numpy Generator

    Returns:
        np.ndarray длины steps + 1, path[0] == s0
    """
    validate_positive(s0, "s0")
    validate_non_negative(sigma, "sigma")
    validate_positive(horizon_years, "horizon_years")
    if steps <= 0:
        raise ValueError(f"steps must be positive, got {steps}")

    rng = np.random.default_rng(seed)
    dt = horizon_years / steps
    z = rng.standard_normal(steps)
    log_returns = (mu - 0.5 * sigma**2) * dt + sigma * np.sqrt(dt) * z

    path = np.empty(steps + 1, dtype=float)
    path[0] = s0
    path[1:] = s0 * np.exp(np.cumsum(log_returns))
    return path
