"""
SwapResult — Результат симуляции swap
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from rmm.core.domain.units import Wei
from rmm.core.math.fixed_point import FixedPointX64

if TYPE_CHECKING:
    from rmm.pool.virtual_pool import VirtualPool


class SwapDirection(str, Enum):
    """Какой токен поступает в пул"""

    RISKY_IN = "risky_in"
    STABLE_IN = "stable_in"


@dataclass(frozen=True)
class SwapResult:
    """
    Результат swap.

    pool — клон для virtual swap, сам пул для мутирующего swap.
    effective_price — stable за один risky, 18 знаков.
    """

    direction: SwapDirection
    delta_in: Wei
    delta_out: Wei
    pool: "VirtualPool"
    effective_price: Wei

    # Диагностика
    invariant_before: FixedPointX64
    invariant_after: FixedPointX64
    delta_in_with_fee: Wei

    @property
    def invariant_growth(self) -> float:
        return self.invariant_after.parsed - self.invariant_before.parsed
