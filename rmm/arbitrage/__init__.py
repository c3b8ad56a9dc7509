"""Arbitrage — сведение цены пула к внешней референсной цене."""

from .arbitrageur import (
    ArbitrageConfig,
    ArbitrageDirection,
    Arbitrageur,
    ArbitrageResult,
)
from .bisection import bisection, brackets, default_max_iterations

__all__ = [
    "Arbitrageur",
    "ArbitrageConfig",
    "ArbitrageDirection",
    "ArbitrageResult",
    "bisection",
    "brackets",
    "default_max_iterations",
]
