"""Pool Lifecycle — фазы пула относительно maturity.

Фазы:
- ACTIVE:  now < maturity (tau > 0), swaps разрешены
- EXPIRED: now >= maturity (tau == 0); в пределах grace window swaps идут
  по вырожденной кривой, после окна любой swap → PoolExpiredError

ACTIVE → EXPIRED происходит только с ходом часов, отдельной операции нет.
Обратного перехода нет: время пула монотонно.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import structlog

logger = structlog.get_logger(__name__)


class PoolPhase(str, Enum):
    """Фаза пула."""

    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"


@dataclass(frozen=True)
class LifecycleConfig:
    """Конфигурация lifecycle.

    grace_period_sec — сколько секунд после maturity пул ещё принимает swaps.
    """

    grace_period_sec: int = 120


@dataclass(frozen=True)
class PhaseEvaluation:
    """Результат оценки фазы пула."""

    phase: PoolPhase
    previous_phase: PoolPhase
    swaps_allowed: bool
    seconds_to_maturity: int

    # Диагностика
    transition_occurred: bool
    reason: str
    details: str


class PoolLifecycle:
    """Отслеживание фазы одного пула.

    Экземпляр принадлежит пулу; клоны пула получают копию через clone().
    """

    def __init__(
        self,
        config: Optional[LifecycleConfig] = None,
        phase: PoolPhase = PoolPhase.ACTIVE,
    ):
        self.config = config or LifecycleConfig()
        self._phase = phase

    @property
    def phase(self) -> PoolPhase:
        return self._phase

    def clone(self) -> "PoolLifecycle":
        return PoolLifecycle(self.config, self._phase)

    def evaluate(self, maturity: int, now: int) -> PhaseEvaluation:
        """Оценка фазы на момент now.

        Args:
            maturity: Время экспирации (секунды)
            now: Текущее время (секунды), может быть позже maturity

        Returns:
            PhaseEvaluation с фазой и признаком допустимости swaps
        """
        previous = self._phase
        seconds_to_maturity = maturity - now

        if seconds_to_maturity > 0:
            phase = PoolPhase.ACTIVE
            swaps_allowed = True
            reason = "ACTIVE"
            details = f"{seconds_to_maturity}s to maturity"
        else:
            phase = PoolPhase.EXPIRED
            overdue = -seconds_to_maturity
            swaps_allowed = overdue <= self.config.grace_period_sec
            if swaps_allowed:
                reason = "EXPIRED_IN_GRACE"
            else:
                reason = "EXPIRED_PAST_GRACE"
            details = (
                f"{overdue}s past maturity, grace window {self.config.grace_period_sec}s"
            )

        transition_occurred = phase != previous
        if transition_occurred:
            logger.info(
                "pool_phase_transition",
                previous_phase=previous.value,
                phase=phase.value,
                maturity=maturity,
                now=now,
            )
        self._phase = phase

        return PhaseEvaluation(
            phase=phase,
            previous_phase=previous,
            swaps_allowed=swaps_allowed,
            seconds_to_maturity=seconds_to_maturity,
            transition_occurred=transition_occurred,
            reason=reason,
            details=details,
        )
