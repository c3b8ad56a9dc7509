"""
Calibration — Параметры кривой пула

Immutable Pydantic модель: strike, sigma, maturity, fee и точности токенов
фиксируются при создании пула. Единственное изменяемое поле —
last_timestamp, и меняется оно только через advance(), который
возвращает новый экземпляр.

tau = (maturity - last_timestamp) / YEAR_IN_SECONDS, tau >= 0.
tau == 0 — пул истёк, trading function вырождается.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from rmm.core.domain.units import (
    MAX_DECIMALS,
    MIN_DECIMALS,
    PERCENTAGE_MANTISSA,
    Percentage,
    Time,
    Wei,
    parse_percentage,
    parse_wei,
    years_to_time,
)
from rmm.core.errors import TimestampRegressionError
from rmm.core.math.black_scholes import call_delta, call_premium


class Calibration(BaseModel):
    """
    Калибровка covered call кривой.

    sigma задаётся долей (1.0 == 100%) с точностью 4 знака; fee — доля
    комиссии, gamma = 1 - fee.
    """

    strike: float = Field(..., gt=0, description="Strike (stable за один risky)")
    sigma: float = Field(..., gt=0, description="Implied volatility (1.0 == 100%)")
    maturity: int = Field(..., ge=0, description="Время экспирации (секунды)")
    last_timestamp: int = Field(0, ge=0, description="Текущее время пула (секунды)")
    fee: float = Field(0.0015, ge=0, lt=1, description="Комиссия swap (доля)")
    decimals_risky: int = Field(
        18, ge=MIN_DECIMALS, le=MAX_DECIMALS, description="Точность risky токена"
    )
    decimals_stable: int = Field(
        18, ge=MIN_DECIMALS, le=MAX_DECIMALS, description="Точность stable токена"
    )
    spot: Optional[float] = Field(
        None, gt=0, description="Референсная spot цена для delta/premium (nullable)"
    )

    model_config = {"frozen": True}

    @field_validator("sigma", "fee")
    @classmethod
    def truncate_to_percentage(cls, v: float) -> float:
        """Проценты хранятся с 4 знаками: лишние разряды усекаются."""
        return parse_percentage(v).float

    @model_validator(mode="after")
    def validate_timestamps(self) -> "Calibration":
        if self.last_timestamp > self.maturity:
            raise ValueError(
                f"last_timestamp {self.last_timestamp} is after maturity {self.maturity}"
            )
        return self

    @classmethod
    def from_tau(cls, strike: float, sigma: float, tau_years: float, **kwargs: Any) -> "Calibration":
        """
        Калибровка с maturity = last_timestamp + tau_years.

        Examples:
            >>> Calibration.from_tau(10, 1, 1).tau
            1.0
        """
        last_timestamp = kwargs.pop("last_timestamp", 0)
        maturity = last_timestamp + years_to_time(tau_years).raw
        return cls(
            strike=strike,
            sigma=sigma,
            maturity=maturity,
            last_timestamp=last_timestamp,
            **kwargs,
        )

    # ----- derived -----

    @property
    def time_remaining(self) -> Time:
        return Time(self.maturity - self.last_timestamp)

    @property
    def tau(self) -> float:
        """Время до экспирации в годах."""
        return self.time_remaining.years

    @property
    def expired(self) -> bool:
        return self.time_remaining.raw <= 0

    @property
    def gamma(self) -> Percentage:
        """1 - fee в процентных единицах (fee 0.15% → 9985)."""
        return Percentage(PERCENTAGE_MANTISSA - parse_percentage(self.fee).raw)

    @property
    def sigma_percentage(self) -> Percentage:
        return parse_percentage(self.sigma)

    @property
    def strike_wei(self) -> Wei:
        return parse_wei(self.strike, self.decimals_stable)

    # ----- Black-Scholes по референсной цене -----

    @property
    def delta(self) -> Optional[float]:
        """Delta колл-опции при spot, None если spot не задан."""
        if self.spot is None:
            return None
        return call_delta(self.strike, self.sigma, self.tau, self.spot)

    @property
    def premium(self) -> Optional[float]:
        if self.spot is None:
            return None
        return call_premium(self.strike, self.sigma, self.tau, self.spot)

    @property
    def in_the_money(self) -> Optional[bool]:
        if self.spot is None:
            return None
        return self.spot >= self.strike

    # ----- time -----

    def advance(self, timestamp: int) -> "Calibration":
        """
        Новая калибровка с last_timestamp = min(timestamp, maturity).

        Raises:
            TimestampRegressionError: Если timestamp < last_timestamp
        """
        if timestamp < self.last_timestamp:
            raise TimestampRegressionError(
                f"timestamp {timestamp} is before last_timestamp {self.last_timestamp}"
            )
        return self.model_copy(update={"last_timestamp": min(timestamp, self.maturity)})
