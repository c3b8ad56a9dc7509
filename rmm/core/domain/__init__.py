"""
Domain models and value objects.

Contains unit types (Wei, Percentage, Time), Calibration, Reserve, SwapResult.
"""

from rmm.core.domain.calibration import Calibration
from rmm.core.domain.reserve import Reserve
from rmm.core.domain.swap import SwapDirection, SwapResult
from rmm.core.domain.units import (
    DEFAULT_DECIMALS,
    PERCENTAGE_MANTISSA,
    YEAR_IN_SECONDS,
    Percentage,
    Time,
    Wei,
    parse_percentage,
    parse_wei,
    years_to_time,
)

__all__ = [
    # Units module
    "DEFAULT_DECIMALS",
    "PERCENTAGE_MANTISSA",
    "YEAR_IN_SECONDS",
    "Wei",
    "Percentage",
    "Time",
    "parse_wei",
    "parse_percentage",
    "years_to_time",
    # Calibration model
    "Calibration",
    # Reserve state
    "Reserve",
    # Swap result
    "SwapResult",
    "SwapDirection",
]
