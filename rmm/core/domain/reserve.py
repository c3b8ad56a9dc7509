"""
Reserve — Состояние резервов пула

reserve_risky/reserve_stable в точности своих токенов, liquidity — 18
знаков, invariant — 64.64 на единицу ликвидности.

Границы кривой:
- reserve_risky / liquidity  ∈ [0, 1]
- reserve_stable / liquidity ∈ [0, strike] (с поправкой на invariant)
"""

from dataclasses import dataclass
from typing import Any, Dict

from rmm.core.domain.units import DEFAULT_DECIMALS, Wei
from rmm.core.errors import DomainError
from rmm.core.math.fixed_point import ZERO, FixedPointX64


@dataclass(frozen=True)
class Reserve:
    """Снапшот резервов. Пул заменяет его целиком после каждого swap."""

    reserve_risky: Wei
    reserve_stable: Wei
    liquidity: Wei
    invariant: FixedPointX64 = ZERO

    def __post_init__(self) -> None:
        if self.liquidity.decimals != DEFAULT_DECIMALS:
            raise DomainError(
                f"liquidity must have {DEFAULT_DECIMALS} decimals, got {self.liquidity.decimals}"
            )
        if self.liquidity.raw <= 0:
            raise DomainError(f"liquidity must be positive, got {self.liquidity}")
        for name in ("reserve_risky", "reserve_stable"):
            if getattr(self, name).is_negative():
                raise DomainError(f"{name} must be non-negative, got {getattr(self, name)}")

    @property
    def risky_per_liquidity(self) -> float:
        return self.reserve_risky.float / self.liquidity.float

    @property
    def stable_per_liquidity(self) -> float:
        return self.reserve_stable.float / self.liquidity.float

    def check_bounds(self, strike: float) -> None:
        """
        Проверка границ кривой.

        Raises:
            DomainError: Если резервы на единицу ликвидности вне кривой
        """
        if not 0.0 <= self.risky_per_liquidity <= 1.0:
            raise DomainError(
                f"reserve_risky/liquidity {self.risky_per_liquidity} outside [0, 1]"
            )
        stable_offset = self.stable_per_liquidity - self.invariant.parsed
        if not 0.0 <= stable_offset <= strike:
            raise DomainError(
                f"reserve_stable/liquidity {self.stable_per_liquidity} outside [0, {strike}]"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reserve_risky": str(self.reserve_risky.raw),
            "reserve_stable": str(self.reserve_stable.raw),
            "liquidity": str(self.liquidity.raw),
            "invariant": str(self.invariant.raw),
        }
