"""Pool — covered call пул и его lifecycle.

- VirtualPool: swaps (мутирующие и виртуальные), marginal/spot цены, границы
- PoolLifecycle: фазы ACTIVE/EXPIRED с grace window
"""

from .lifecycle import LifecycleConfig, PhaseEvaluation, PoolLifecycle, PoolPhase
from .virtual_pool import PoolConfig, VirtualPool

__all__ = [
    "VirtualPool",
    "PoolConfig",
    "PoolLifecycle",
    "PoolPhase",
    "PhaseEvaluation",
    "LifecycleConfig",
]
