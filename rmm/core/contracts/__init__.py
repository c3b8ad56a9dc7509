"""
Contract Validation Module

Валидация JSON контрактов RMM engine (pool snapshot, simulation result).
"""

from .validators import (
    ContractValidator,
    PoolSnapshotValidator,
    SchemaLoader,
    SimulationResultValidator,
    validate_pool_snapshot,
    validate_simulation_result,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "PoolSnapshotValidator",
    "SimulationResultValidator",
    # Functions
    "validate_pool_snapshot",
    "validate_simulation_result",
]
