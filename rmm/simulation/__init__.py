"""Simulation — GBM путь через арбитраж и time decay пула."""

from .driver import (
    DEFAULT_FEES,
    SimulationConfig,
    SimulationResult,
    run_fee_sweep,
    run_simulation,
    theoretical_lp_value,
)
from .gbm import generate_gbm

__all__ = [
    "SimulationConfig",
    "SimulationResult",
    "DEFAULT_FEES",
    "generate_gbm",
    "run_simulation",
    "run_fee_sweep",
    "theoretical_lp_value",
]
