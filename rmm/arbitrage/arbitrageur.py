"""
Arbitrageur — сведение цены пула к референсной

Алгоритм arbitrage_exactly(reference_price, pool):
1. sell = marginal_price_swap_risky_in(0), buy = marginal_price_swap_stable_in(0)
   (на границах кривой: предельные значения)
2. sell > reference + ε: ищем x ∈ [ε, max_risky_in - ε] с
   marginal_price_swap_risky_in(x) == reference (bisection, если концы
   bracket-ят корень, иначе верхняя граница)
3. buy < reference - ε: симметрично по marginal_price_swap_stable_in
4. Виртуальный swap; commit только при profit > 0
   (sell: delta_out - x·reference; buy: delta_out·reference - y)
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Final, Optional, Tuple

import structlog

from rmm.arbitrage.bisection import BISECTION_TOLERANCE, bisection, brackets
from rmm.core.domain.units import parse_wei
from rmm.core.math.numerical_safeguards import EPS_PRICE
from rmm.pool.virtual_pool import VirtualPool

logger = structlog.get_logger(__name__)

# Допуск сравнения цен и отступ от границ поиска
ARBITRAGE_EPSILON: Final[float] = EPS_PRICE


class ArbitrageDirection(str, Enum):
    """Направление сделки арбитражёра"""

    NONE = "none"
    SELL_RISKY = "sell_risky"  # risky in, stable out
    BUY_RISKY = "buy_risky"  # stable in, risky out


@dataclass(frozen=True)
class ArbitrageConfig:
    """Конфигурация поиска.

    max_iterations — лимит bisection; None — по ширине отрезка.
    """

    epsilon: float = ARBITRAGE_EPSILON
    tolerance: float = BISECTION_TOLERANCE
    max_iterations: Optional[int] = None


@dataclass(frozen=True)
class ArbitrageResult:
    """Результат одного вызова arbitrage_exactly."""

    direction: ArbitrageDirection
    amount_in: float
    delta_out: float
    profit: float
    executed: bool
    reason: str


def _no_trade(reason: str) -> ArbitrageResult:
    return ArbitrageResult(
        direction=ArbitrageDirection.NONE,
        amount_in=0.0,
        delta_out=0.0,
        profit=0.0,
        executed=False,
        reason=reason,
    )


def _quote(pool: VirtualPool) -> Tuple[float, float]:
    """
    Цены продажи и покупки risky при нулевом входе.

    На границах кривой Φ⁻¹ не определена, берутся пределы: пустой
    рисковый резерв — (∞, ∞), полный — (0, 0). Направление, уводящее
    резервы за границу, так никогда не выбирается. Истёкший пул
    покупает risky за 0 и продаёт по K/γ.
    """
    if pool.tau <= 0:
        return 0.0, pool.calibration.strike / pool.calibration.gamma.float
    risky_fraction = pool.reserve.risky_per_liquidity
    if risky_fraction <= 0.0:
        return math.inf, math.inf
    if risky_fraction >= 1.0:
        return 0.0, 0.0
    return (
        pool.get_marginal_price_swap_risky_in(0.0),
        pool.get_marginal_price_swap_stable_in(0.0),
    )


class Arbitrageur:
    """Арбитражёр с бесконечным внешним рынком по reference_price."""

    def __init__(self, config: Optional[ArbitrageConfig] = None):
        self.config = config or ArbitrageConfig()

    def _search(self, objective: Callable[[float], float], upper: float) -> float:
        """Размер сделки: корень objective на [ε, upper] или upper без bracket."""
        lower = self.config.epsilon
        if not brackets(objective(lower), objective(upper)):
            return upper
        return bisection(
            objective,
            lower,
            upper,
            tolerance=self.config.tolerance,
            max_iterations=self.config.max_iterations,
        )

    def arbitrage_exactly(self, reference_price: float, pool: VirtualPool) -> ArbitrageResult:
        """
        Найти и, если прибыльно, исполнить сделку к reference_price.

        Args:
            reference_price: Цена risky во внешнем рынке (stable за risky)
            pool: Пул; изменяется только при executed=True

        Returns:
            ArbitrageResult

        Raises:
            NoConvergenceError: Если bisection не сошлась
            PoolExpiredError: Если пул за пределами grace window
        """
        epsilon = self.config.epsilon
        sell_price, buy_price = _quote(pool)

        if sell_price > reference_price + epsilon:
            upper = pool.get_max_delta_in(True).float - epsilon
            if upper <= epsilon:
                return _no_trade("risky reserve at bound")

            amount = self._search(
                lambda x: pool.get_marginal_price_swap_risky_in(x) - reference_price, upper
            )
            delta_in = parse_wei(amount, pool.calibration.decimals_risky)
            simulated = pool.virtual_swap_amount_in_risky(delta_in)
            profit = simulated.delta_out.float - delta_in.float * reference_price
            direction = ArbitrageDirection.SELL_RISKY
            execute = pool.swap_amount_in_risky

        elif buy_price < reference_price - epsilon:
            upper = pool.get_max_delta_in(False).float - epsilon
            if upper <= epsilon:
                return _no_trade("stable reserve at bound")

            amount = self._search(
                lambda y: pool.get_marginal_price_swap_stable_in(y) - reference_price, upper
            )
            delta_in = parse_wei(amount, pool.calibration.decimals_stable)
            simulated = pool.virtual_swap_amount_in_stable(delta_in)
            profit = simulated.delta_out.float * reference_price - delta_in.float
            direction = ArbitrageDirection.BUY_RISKY
            execute = pool.swap_amount_in_stable

        else:
            return _no_trade("pool price within no-arbitrage band")

        executed = profit > 0
        if executed:
            execute(delta_in)

        logger.debug(
            "arbitrage_decision",
            direction=direction.value,
            reference_price=reference_price,
            sell_price=sell_price,
            buy_price=buy_price,
            amount_in=delta_in.float,
            profit=profit,
            executed=executed,
        )
        return ArbitrageResult(
            direction=direction,
            amount_in=delta_in.float,
            delta_out=simulated.delta_out.float,
            profit=profit,
            executed=executed,
            reason="profitable" if executed else "not profitable",
        )
