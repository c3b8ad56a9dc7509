"""
VirtualPool — один откалиброванный covered call пул

Swap вычисляется на единицу ликвидности:
1. delta_in_with_fee = delta_in * gamma (усечение)
2. новый резерв входного токена с учётом fee → trading function (или
   inverse) → новый резерв выходного токена
3. delta_out = старый резерв - новый, усечение к нулю (округление
   никогда не в пользу трейдера)
4. резерв входного токена растёт на полный delta_in
5. invariant_after >= invariant_before - tolerance, иначе дефект

Каждая операция имеет мутирующий (swap_amount_in_*) и виртуальный
(virtual_swap_amount_in_*) вариант; виртуальный возвращает клон пула.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. reserve_risky/liquidity ∈ [0, 1], reserve_stable/liquidity - invariant ∈ [0, strike]
2. Invariant не убывает на fee-bearing swap (tolerance PoolConfig)
3. После grace window swaps запрещены (PoolExpiredError)
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

import structlog

from rmm.core.contracts.validators import validate_pool_snapshot
from rmm.core.domain.calibration import Calibration
from rmm.core.domain.reserve import Reserve
from rmm.core.domain.swap import SwapDirection, SwapResult
from rmm.core.domain.units import DEFAULT_DECIMALS, PERCENTAGE_MANTISSA, Wei, parse_wei
from rmm.core.errors import (
    InvariantViolationError,
    NegativeAmountError,
    PoolExpiredError,
    PrecisionMismatchError,
    TimestampRegressionError,
)
from rmm.core.math.black_scholes import call_delta
from rmm.core.math.cumulative_normal import inverse_std_n_cdf, quantile_prime, std_n_pdf
from rmm.core.math.fixed_point import FixedPointX64, to_fixed
from rmm.core.math.numerical_safeguards import EPS_INVARIANT, clamp, div_trunc, mul_div
from rmm.core.math.replication import (
    calc_invariant,
    get_proportional_volatility,
    get_risky_given_stable,
    get_spot_price,
    get_stable_given_risky,
)
from rmm.pool.lifecycle import LifecycleConfig, PhaseEvaluation, PoolLifecycle, PoolPhase

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PoolConfig:
    """Конфигурация проверок пула.

    strict_invariant — поднимать InvariantViolationError при убывании
    инварианта (иначе только CRITICAL лог).
    invariant_tolerance — допустимое убывание на единицу strike.
    refine_inverse — Newton уточнение inverse trading function в stable-in swap.
    """

    strict_invariant: bool = __debug__
    invariant_tolerance: float = EPS_INVARIANT
    refine_inverse: bool = True


def _effective_price(stable: Wei, risky: Wei) -> Wei:
    """stable/risky с DEFAULT_DECIMALS знаками; 0 при нулевом risky."""
    if risky.raw == 0:
        return Wei(0)
    numerator = stable.raw * 10**risky.decimals * 10**DEFAULT_DECIMALS
    denominator = risky.raw * 10**stable.decimals
    return Wei(div_trunc(numerator, denominator))


class VirtualPool:
    """
    Пул с резервами на covered call кривой.

    Пул принадлежит одному владельцу: мутирующие операции применяются
    в порядке вызова. Виртуальные операции не трогают receiver.
    """

    def __init__(
        self,
        calibration: Calibration,
        reserve_risky: Wei,
        liquidity: Wei,
        reserve_stable: Optional[Wei] = None,
        config: Optional[PoolConfig] = None,
        lifecycle_config: Optional[LifecycleConfig] = None,
        now: Optional[int] = None,
    ):
        """
        Args:
            calibration: Параметры кривой
            reserve_risky: Начальный рисковый резерв (точность decimals_risky)
            liquidity: Общая ликвидность (18 знаков)
            reserve_stable: Стабильный резерв; None — вычислить по кривой
            config: Конфигурация проверок
            lifecycle_config: Конфигурация grace window
            now: Текущее время; None — calibration.last_timestamp
        """
        if reserve_risky.decimals != calibration.decimals_risky:
            raise PrecisionMismatchError(
                f"reserve_risky has {reserve_risky.decimals} decimals, "
                f"calibration expects {calibration.decimals_risky}"
            )
        if reserve_stable is not None and reserve_stable.decimals != calibration.decimals_stable:
            raise PrecisionMismatchError(
                f"reserve_stable has {reserve_stable.decimals} decimals, "
                f"calibration expects {calibration.decimals_stable}"
            )
        now = calibration.last_timestamp if now is None else now
        if now < calibration.last_timestamp:
            raise TimestampRegressionError(
                f"now {now} is before last_timestamp {calibration.last_timestamp}"
            )

        self.calibration = calibration
        self.config = config or PoolConfig()
        self._lifecycle = PoolLifecycle(lifecycle_config)
        self._now = now

        if reserve_stable is None:
            per_unit = get_stable_given_risky(
                reserve_risky.float / liquidity.float,
                calibration.strike,
                calibration.sigma,
                calibration.tau,
            )
            reserve_stable = parse_wei(per_unit * liquidity.float, calibration.decimals_stable)

        reserve = Reserve(reserve_risky, reserve_stable, liquidity)
        self._reserve = replace(reserve, invariant=self._compute_invariant(reserve))
        self._reserve.check_bounds(calibration.strike)
        self._lifecycle.evaluate(calibration.maturity, now)

    # =========================================================================
    # CONSTRUCTORS
    # =========================================================================

    @classmethod
    def from_spot(
        cls, calibration: Calibration, spot: float, liquidity: Wei, **kwargs: Any
    ) -> "VirtualPool":
        """
        Пул, чья кривая реплицирует колл при данной spot цене.

        reserve_risky/liquidity = 1 - delta (Black-Scholes).
        """
        risky_per_unit = 1.0 - call_delta(
            calibration.strike, calibration.sigma, calibration.tau, spot
        )
        reserve_risky = parse_wei(risky_per_unit * liquidity.float, calibration.decimals_risky)
        return cls(calibration, reserve_risky, liquidity, **kwargs)

    @classmethod
    def from_snapshot(cls, data: Dict[str, Any], **kwargs: Any) -> "VirtualPool":
        """
        Пул из pool_snapshot контракта ledger.

        Invariant пересчитывается по резервам; поле invariant снапшота
        информационное.

        Raises:
            ValidationError: Если data не соответствует pool_snapshot.json
        """
        validate_pool_snapshot(data)
        calibration = Calibration(**data["calibration"])
        reserve = data["reserve"]
        return cls(
            calibration,
            Wei(int(reserve["reserve_risky"]), calibration.decimals_risky),
            Wei(int(reserve["liquidity"])),
            reserve_stable=Wei(int(reserve["reserve_stable"]), calibration.decimals_stable),
            now=data.get("now"),
            **kwargs,
        )

    def to_snapshot(self) -> Dict[str, Any]:
        snapshot = {
            "calibration": self.calibration.model_dump(),
            "reserve": self._reserve.to_dict(),
            "now": self._now,
        }
        validate_pool_snapshot(snapshot)
        return snapshot

    def clone(self) -> "VirtualPool":
        return self._with_reserve(self._reserve)

    def _with_reserve(self, reserve: Reserve) -> "VirtualPool":
        pool = VirtualPool.__new__(VirtualPool)
        pool.calibration = self.calibration
        pool.config = self.config
        pool._lifecycle = self._lifecycle.clone()
        pool._now = self._now
        pool._reserve = reserve
        return pool

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def reserve(self) -> Reserve:
        return self._reserve

    @property
    def reserve_risky(self) -> Wei:
        return self._reserve.reserve_risky

    @property
    def reserve_stable(self) -> Wei:
        return self._reserve.reserve_stable

    @property
    def liquidity(self) -> Wei:
        return self._reserve.liquidity

    @property
    def invariant(self) -> FixedPointX64:
        """Инвариант на единицу ликвидности."""
        return self._reserve.invariant

    @property
    def now(self) -> int:
        return self._now

    @property
    def tau(self) -> float:
        return self.calibration.tau

    @property
    def phase(self) -> PoolPhase:
        return self._lifecycle.phase

    def _compute_invariant(self, reserve: Reserve) -> FixedPointX64:
        cal = self.calibration
        total = calc_invariant(
            reserve.reserve_risky.float,
            reserve.reserve_stable.float,
            reserve.liquidity.float,
            cal.strike,
            cal.sigma,
            cal.tau,
        )
        return to_fixed(total / reserve.liquidity.float)

    # =========================================================================
    # TIME
    # =========================================================================

    def update_timestamp(self, now: int) -> PhaseEvaluation:
        """
        Time decay: сдвиг часов пула, пересчёт tau и инварианта.

        Raises:
            TimestampRegressionError: Если now раньше текущего времени пула
        """
        if now < self._now:
            raise TimestampRegressionError(f"now {now} is before pool time {self._now}")

        self.calibration = self.calibration.advance(now)
        self._now = now
        self._reserve = replace(self._reserve, invariant=self._compute_invariant(self._reserve))
        evaluation = self._lifecycle.evaluate(self.calibration.maturity, now)

        logger.debug(
            "pool_timestamp_updated",
            now=now,
            tau=self.tau,
            invariant=self.invariant.parsed,
            phase=evaluation.phase.value,
        )
        return evaluation

    def _ensure_tradeable(self) -> None:
        evaluation = self._lifecycle.evaluate(self.calibration.maturity, self._now)
        if not evaluation.swaps_allowed:
            raise PoolExpiredError(f"Pool expired: {evaluation.details}")

    # =========================================================================
    # SWAPS
    # =========================================================================

    def _check_input(self, delta_in: Wei, decimals: int) -> None:
        if not isinstance(delta_in, Wei):
            raise TypeError(f"delta_in must be Wei, got {type(delta_in).__name__}")
        if delta_in.decimals != decimals:
            raise PrecisionMismatchError(
                f"delta_in has {delta_in.decimals} decimals, expected {decimals}"
            )
        if delta_in.is_negative():
            raise NegativeAmountError(f"delta_in must be non-negative, got {delta_in}")

    def _fee_adjusted(self, delta_in: Wei) -> Wei:
        gamma = self.calibration.gamma.raw
        return Wei(mul_div(delta_in.raw, gamma, PERCENTAGE_MANTISSA), delta_in.decimals)

    @staticmethod
    def _truncated_out(amount: float, available: Wei) -> Wei:
        # Шум float на нулевом входе даёт отрицательный amount
        out = parse_wei(clamp(amount, 0.0), available.decimals)
        return out if out.raw <= available.raw else available

    def _check_invariant(
        self, before: FixedPointX64, after: FixedPointX64, direction: SwapDirection
    ) -> None:
        # Допуск масштабируется strike
        tolerance = self.config.invariant_tolerance * max(1.0, self.calibration.strike)
        if after.parsed >= before.parsed - tolerance:
            return
        logger.critical(
            "invariant_decreased",
            direction=direction.value,
            invariant_before=before.parsed,
            invariant_after=after.parsed,
            tolerance=tolerance,
        )
        if self.config.strict_invariant:
            raise InvariantViolationError(
                f"Invariant decreased on {direction.value} swap: "
                f"{before.parsed} -> {after.parsed}"
            )

    def _settle(
        self,
        direction: SwapDirection,
        delta_in: Wei,
        delta_in_with_fee: Wei,
        delta_out: Wei,
        reserve: Reserve,
    ) -> SwapResult:
        invariant_before = self.invariant
        invariant_after = self._compute_invariant(reserve)
        self._check_invariant(invariant_before, invariant_after, direction)

        if direction is SwapDirection.RISKY_IN:
            price = _effective_price(stable=delta_out, risky=delta_in)
        else:
            price = _effective_price(stable=delta_in, risky=delta_out)

        return SwapResult(
            direction=direction,
            delta_in=delta_in,
            delta_out=delta_out,
            pool=self._with_reserve(replace(reserve, invariant=invariant_after)),
            effective_price=price,
            invariant_before=invariant_before,
            invariant_after=invariant_after,
            delta_in_with_fee=delta_in_with_fee,
        )

    def virtual_swap_amount_in_risky(self, delta_in: Wei) -> SwapResult:
        """
        Симуляция продажи risky в пул без изменения пула.

        Raises:
            NegativeAmountError: Если delta_in < 0
            PrecisionMismatchError: Если точность delta_in != decimals_risky
            PoolExpiredError: Если пул за пределами grace window
            DomainError: Если новый рисковый резерв вне кривой
        """
        self._ensure_tradeable()
        cal = self.calibration
        self._check_input(delta_in, cal.decimals_risky)

        with_fee = self._fee_adjusted(delta_in)
        liquidity = self.liquidity.float
        risky_per_unit = (self.reserve_risky + with_fee).float / liquidity
        stable_per_unit = get_stable_given_risky(
            risky_per_unit, cal.strike, cal.sigma, cal.tau, invariant=self.invariant.parsed
        )
        delta_out = self._truncated_out(
            self.reserve_stable.float - stable_per_unit * liquidity, self.reserve_stable
        )

        reserve = Reserve(
            self.reserve_risky + delta_in,
            self.reserve_stable - delta_out,
            self.liquidity,
        )
        return self._settle(SwapDirection.RISKY_IN, delta_in, with_fee, delta_out, reserve)

    def virtual_swap_amount_in_stable(self, delta_in: Wei) -> SwapResult:
        """
        Симуляция покупки risky за stable без изменения пула.

        Использует inverse trading function (с Newton уточнением при
        config.refine_inverse). В grace window после экспирации кривая
        вырождена: risky отдаётся по strike, не больше резерва.

        Raises:
            NegativeAmountError: Если delta_in < 0
            PrecisionMismatchError: Если точность delta_in != decimals_stable
            PoolExpiredError: Если пул за пределами grace window
            DomainError: Если новый стабильный резерв вне кривой
        """
        self._ensure_tradeable()
        cal = self.calibration
        self._check_input(delta_in, cal.decimals_stable)

        with_fee = self._fee_adjusted(delta_in)
        if get_proportional_volatility(cal.sigma, cal.tau) <= 0:
            # Истёкшая кривая: risky продаётся по strike
            delta_out = self._truncated_out(with_fee.float / cal.strike, self.reserve_risky)
        else:
            liquidity = self.liquidity.float
            stable_per_unit = (self.reserve_stable + with_fee).float / liquidity
            risky_per_unit = get_risky_given_stable(
                stable_per_unit,
                cal.strike,
                cal.sigma,
                cal.tau,
                invariant=self.invariant.parsed,
                refine=self.config.refine_inverse,
            )
            delta_out = self._truncated_out(
                self.reserve_risky.float - risky_per_unit * liquidity, self.reserve_risky
            )

        reserve = Reserve(
            self.reserve_risky - delta_out,
            self.reserve_stable + delta_in,
            self.liquidity,
        )
        return self._settle(SwapDirection.STABLE_IN, delta_in, with_fee, delta_out, reserve)

    def _commit(self, result: SwapResult) -> SwapResult:
        self._reserve = result.pool.reserve
        logger.debug(
            "swap_executed",
            direction=result.direction.value,
            delta_in=result.delta_in.float,
            delta_out=result.delta_out.float,
            invariant_after=result.invariant_after.parsed,
        )
        return replace(result, pool=self)

    def swap_amount_in_risky(self, delta_in: Wei) -> SwapResult:
        """Продажа risky в пул; пул изменяется."""
        return self._commit(self.virtual_swap_amount_in_risky(delta_in))

    def swap_amount_in_stable(self, delta_in: Wei) -> SwapResult:
        """Покупка risky за stable; пул изменяется."""
        return self._commit(self.virtual_swap_amount_in_stable(delta_in))

    # =========================================================================
    # PRICES
    # =========================================================================

    @property
    def spot_price(self) -> float:
        """
        Spot price (stable за risky) в closed form.

        Raises:
            DomainError: Если reserve_risky/liquidity на границе [0, 1]
        """
        cal = self.calibration
        return get_spot_price(self._reserve.risky_per_liquidity, cal.strike, cal.sigma, cal.tau)

    def get_marginal_price_swap_risky_in(self, amount_in: float) -> float:
        """
        Предельная цена продажи risky после входа amount_in.

        γ·K·φ(Φ⁻¹(s) - vol)·(Φ⁻¹)'(s), s = 1 - (R1 + γ·amount_in)/L.
        Для amount_in < 0 возвращает 0.
        """
        if amount_in < 0:
            return 0.0
        cal = self.calibration
        gamma = cal.gamma.float
        vol = get_proportional_volatility(cal.sigma, cal.tau)
        s = 1.0 - (self.reserve_risky.float + gamma * amount_in) / self.liquidity.float
        return gamma * cal.strike * std_n_pdf(inverse_std_n_cdf(s) - vol) * quantile_prime(s)

    def get_marginal_price_swap_stable_in(self, amount_in: float) -> float:
        """
        Предельная цена покупки risky (stable за risky) после входа amount_in.

        K / (γ·φ(Φ⁻¹(s) + vol)·(Φ⁻¹)'(s)), s = ((R2 + γ·amount_in)/L - k)/K.
        Для amount_in < 0 возвращает 0.
        """
        if amount_in < 0:
            return 0.0
        cal = self.calibration
        gamma = cal.gamma.float
        vol = get_proportional_volatility(cal.sigma, cal.tau)
        stable_per_unit = (self.reserve_stable.float + gamma * amount_in) / self.liquidity.float
        s = (stable_per_unit - self.invariant.parsed) / cal.strike
        return cal.strike / (gamma * std_n_pdf(inverse_std_n_cdf(s) + vol) * quantile_prime(s))

    # =========================================================================
    # BOUNDS & CURVE QUERIES
    # =========================================================================

    def get_max_delta_in(self, risky_for_stable: bool) -> Wei:
        """
        Максимальный вход, оставляющий резервы на кривой.

        risky: (1 - R1/L)·L, но не дальше точки, где стабильный резерв
        кривой обнуляется (при k < 0 это x* < 1; вход с fee, поэтому /γ);
        stable: (K + k - R2/L)·L.
        """
        if risky_for_stable:
            bound = self.liquidity.scale_to(self.calibration.decimals_risky)
            reserve = self.reserve_risky
            exhausted = self._stable_exhausted_delta_in()
            if exhausted is not None and exhausted.raw < (bound - reserve).raw:
                return exhausted
        else:
            per_unit = self.calibration.strike + self.invariant.parsed
            bound = parse_wei(max(per_unit * self.liquidity.float, 0.0), self.calibration.decimals_stable)
            reserve = self.reserve_stable
        delta = bound - reserve
        return delta if delta.raw > 0 else Wei(0, delta.decimals)

    def _stable_exhausted_delta_in(self) -> Optional[Wei]:
        """Risky вход, при котором стабильный резерв кривой достигает 0; None, если недостижимо."""
        cal = self.calibration
        invariant = self.invariant.parsed
        if invariant >= 0 or get_proportional_volatility(cal.sigma, cal.tau) <= 0:
            return None

        risky_per_unit = get_risky_given_stable(
            0.0,
            cal.strike,
            cal.sigma,
            cal.tau,
            invariant=invariant,
            refine=self.config.refine_inverse,
        )
        with_fee = risky_per_unit * self.liquidity.float - self.reserve_risky.float
        return parse_wei(max(with_fee / cal.gamma.float, 0.0), cal.decimals_risky)

    def get_max_delta_out(self, risky_for_stable: bool) -> Wei:
        """Максимальный выход: весь резерв выходного токена."""
        return self.reserve_stable if risky_for_stable else self.reserve_risky

    def get_stable_given_risky(self, reserve_risky: Wei) -> Wei:
        """Стабильный резерв кривой (с текущим инвариантом) при данном рисковом."""
        cal = self.calibration
        liquidity = self.liquidity.float
        per_unit = get_stable_given_risky(
            reserve_risky.float / liquidity,
            cal.strike,
            cal.sigma,
            cal.tau,
            invariant=self.invariant.parsed,
        )
        return parse_wei(max(per_unit * liquidity, 0.0), cal.decimals_stable)

    def get_risky_given_stable(self, reserve_stable: Wei) -> Wei:
        """Рисковый резерв кривой (с текущим инвариантом) при данном стабильном."""
        cal = self.calibration
        liquidity = self.liquidity.float
        per_unit = get_risky_given_stable(
            reserve_stable.float / liquidity,
            cal.strike,
            cal.sigma,
            cal.tau,
            invariant=self.invariant.parsed,
            refine=self.config.refine_inverse,
        )
        return parse_wei(per_unit * liquidity, cal.decimals_risky)

    def __repr__(self) -> str:
        return (
            f"VirtualPool(risky={self.reserve_risky.float}, stable={self.reserve_stable.float}, "
            f"liquidity={self.liquidity.float}, invariant={self.invariant.parsed}, tau={self.tau})"
        )
