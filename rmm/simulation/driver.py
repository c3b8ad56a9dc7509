"""
Simulation driver — GBM путь через арбитраж и time decay

На каждом шаге (день):
1. каждые tau_update_frequency шагов — сдвиг часов пула (tau, invariant),
   запись spot price
2. arbitrage_exactly к цене пути
3. запись min/max marginal price, теоретической стоимости LP
   (Black-Scholes реплицирующие резервы) и фактической стоимости LP

Persistence результатов — забота вызывающего: run_fee_sweep возвращает
{seed: {fee: SimulationResult.to_dict()}}.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Final, List, Optional, Sequence

import structlog

from rmm.arbitrage.arbitrageur import ArbitrageConfig, Arbitrageur
from rmm.core.contracts.validators import validate_simulation_result
from rmm.core.domain.calibration import Calibration
from rmm.core.domain.units import parse_wei, years_to_time
from rmm.core.math.black_scholes import call_delta
from rmm.core.math.replication import get_stable_given_risky
from rmm.pool.virtual_pool import VirtualPool
from rmm.simulation.gbm import generate_gbm

logger = structlog.get_logger(__name__)

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Календарных дней в году для шагов пути
DAYS_PER_YEAR: Final[int] = 365

# Сетка комиссий fee sweep
DEFAULT_FEES: Final[tuple[float, ...]] = (
    0.0,
    0.005,
    0.01,
    0.015,
    0.02,
    0.025,
    0.03,
    0.035,
    0.04,
    0.045,
    0.05,
)

DEFAULT_SEEDS: Final[tuple[int, ...]] = (5,)


@dataclass(frozen=True)
class SimulationConfig:
    """Параметры одного прогона.

    volatility — годовая волатильность GBM пути; None — sigma/√maturity_years.
    """

    strike: float = 1100.0
    sigma: float = 1.0
    maturity_years: float = 1.0
    fee: float = 0.0
    initial_risky: float = 0.5
    liquidity: float = 1.0
    initial_price: float = 1000.0
    drift: float = 0.00003
    volatility: Optional[float] = None
    horizon_days: int = 365
    step_days: int = 1
    tau_update_frequency: int = 1
    seed: int = 5
    arbitrage: ArbitrageConfig = field(default_factory=ArbitrageConfig)

    def __post_init__(self) -> None:
        if self.step_days <= 0 or self.horizon_days < self.step_days:
            raise ValueError(
                f"horizon_days {self.horizon_days} must cover at least one step of {self.step_days} days"
            )
        if self.tau_update_frequency <= 0:
            raise ValueError(
                f"tau_update_frequency must be positive, got {self.tau_update_frequency}"
            )
        last_day = (self.steps - 1) * self.step_days
        if last_day >= self.maturity_years * DAYS_PER_YEAR:
            raise ValueError(
                f"horizon of {self.horizon_days} days reaches maturity of {self.maturity_years} years"
            )

    @property
    def steps(self) -> int:
        return self.horizon_days // self.step_days

    @property
    def path_volatility(self) -> float:
        if self.volatility is not None:
            return self.volatility
        return self.sigma / math.sqrt(self.maturity_years)


@dataclass
class SimulationResult:
    """Временные ряды одного прогона."""

    seed: int
    fee: float
    spot_price: List[float] = field(default_factory=list)
    min_marginal_price: List[float] = field(default_factory=list)
    max_marginal_price: List[float] = field(default_factory=list)
    theoretical_lp: List[float] = field(default_factory=list)
    effective_lp: List[float] = field(default_factory=list)
    trades_executed: int = 0

    @property
    def steps(self) -> int:
        return len(self.effective_lp)

    def to_dict(self) -> Dict[str, Any]:
        """
        Сериализация по контракту simulation_result.

        Raises:
            ValidationError: Если ряды не соответствуют схеме
        """
        data = {
            "seed": self.seed,
            "fee": self.fee,
            "steps": self.steps,
            "spot_price": list(self.spot_price),
            "min_marginal_price": list(self.min_marginal_price),
            "max_marginal_price": list(self.max_marginal_price),
            "theoretical_lp": list(self.theoretical_lp),
            "effective_lp": list(self.effective_lp),
            "trades_executed": self.trades_executed,
        }
        validate_simulation_result(data)
        return data


def theoretical_lp_value(strike: float, sigma: float, tau: float, spot: float) -> float:
    """
    Стоимость единицы LP, реплицирующей колл при spot.

    risky = 1 - delta, stable = trading function(risky), value = risky·spot + stable.
    """
    risky = 1.0 - call_delta(strike, sigma, tau, spot)
    stable = get_stable_given_risky(risky, strike, sigma, tau)
    return risky * spot + stable


def run_simulation(config: SimulationConfig) -> SimulationResult:
    """
    Прогон GBM пути через пул с арбитражёром.

    Returns:
        SimulationResult с рядами длины config.steps
        (spot_price — по одному значению на обновление tau)
    """
    calibration = Calibration.from_tau(
        config.strike, config.sigma, config.maturity_years, fee=config.fee
    )
    liquidity = parse_wei(config.liquidity)
    pool = VirtualPool(calibration, parse_wei(config.initial_risky), liquidity)
    arbitrageur = Arbitrageur(config.arbitrage)

    path = generate_gbm(
        config.initial_price,
        config.drift,
        config.path_volatility,
        config.horizon_days / DAYS_PER_YEAR,
        config.steps,
        seed=config.seed,
    )
    result = SimulationResult(seed=config.seed, fee=config.fee)

    logger.info(
        "simulation_started",
        seed=config.seed,
        fee=config.fee,
        steps=config.steps,
        path_volatility=config.path_volatility,
    )

    for step in range(config.steps):
        elapsed_years = step * config.step_days / DAYS_PER_YEAR
        theoretical_tau = config.maturity_years - elapsed_years
        reference = float(path[step])

        if step % config.tau_update_frequency == 0:
            pool.update_timestamp(calibration.last_timestamp + years_to_time(elapsed_years).raw)
            result.spot_price.append(pool.spot_price)

        arbitrage = arbitrageur.arbitrage_exactly(reference, pool)
        if arbitrage.executed:
            result.trades_executed += 1

        result.max_marginal_price.append(pool.get_marginal_price_swap_stable_in(0.0))
        result.min_marginal_price.append(pool.get_marginal_price_swap_risky_in(0.0))
        result.theoretical_lp.append(
            theoretical_lp_value(config.strike, config.sigma, theoretical_tau, reference)
            * config.liquidity
        )
        result.effective_lp.append(
            pool.reserve_risky.float * reference + pool.reserve_stable.float
        )

    logger.info(
        "simulation_finished",
        seed=config.seed,
        fee=config.fee,
        trades_executed=result.trades_executed,
        final_effective_lp=result.effective_lp[-1],
        final_theoretical_lp=result.theoretical_lp[-1],
    )
    return result


def run_fee_sweep(
    config: SimulationConfig,
    fees: Sequence[float] = DEFAULT_FEES,
    seeds: Sequence[int] = DEFAULT_SEEDS,
) -> Dict[int, Dict[float, Dict[str, Any]]]:
    """Сетка прогонов seed × fee: {seed: {fee: result_dict}}."""
    results: Dict[int, Dict[float, Dict[str, Any]]] = {}
    for seed in seeds:
        results[seed] = {}
        for fee in fees:
            run = run_simulation(replace(config, fee=fee, seed=seed))
            results[seed][fee] = run.to_dict()
    return results
