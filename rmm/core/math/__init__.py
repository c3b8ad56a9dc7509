"""
Core math modules для RMM engine

Fixed point, нормальное распределение, Black-Scholes и trading function.
"""

# Numerical Safeguards
from rmm.core.math.numerical_safeguards import (
    # Epsilon constants
    EPS_INVARIANT,
    EPS_PRICE,
    # Integer division
    checked_div,
    div_trunc,
    mul_div,
    saturating_div,
    # NaN/Inf validation
    is_valid_float,
    # Comparisons
    clamp,
    # Validation
    validate_non_negative,
    validate_positive,
)

# Fixed point 64.64
from rmm.core.math.fixed_point import (
    DENOMINATOR,
    MANTISSA,
    ZERO,
    FixedPointX64,
    parse_fixed_point,
    to_decimal,
    to_fixed,
)

# Cumulative normal
from rmm.core.math.cumulative_normal import (
    inverse_std_n_cdf,
    quantile_prime,
    std_n_cdf,
    std_n_pdf,
)

# Black-Scholes
from rmm.core.math.black_scholes import (
    calculate_d1,
    call_delta,
    call_premium,
    moneyness,
)

# Replication
from rmm.core.math.replication import (
    calc_invariant,
    get_proportional_volatility,
    get_risky_given_stable,
    get_spot_price,
    get_stable_given_risky,
    inverse_trading_function,
    trading_function,
)

__all__ = [
    # Numerical Safeguards
    "EPS_PRICE",
    "EPS_INVARIANT",
    "div_trunc",
    "saturating_div",
    "checked_div",
    "mul_div",
    "is_valid_float",
    "clamp",
    "validate_positive",
    "validate_non_negative",
    # Fixed point
    "DENOMINATOR",
    "MANTISSA",
    "ZERO",
    "FixedPointX64",
    "to_fixed",
    "to_decimal",
    "parse_fixed_point",
    # Cumulative normal
    "std_n_cdf",
    "std_n_pdf",
    "inverse_std_n_cdf",
    "quantile_prime",
    # Black-Scholes
    "moneyness",
    "calculate_d1",
    "call_delta",
    "call_premium",
    # Replication
    "get_proportional_volatility",
    "trading_function",
    "inverse_trading_function",
    "calc_invariant",
    "get_stable_given_risky",
    "get_risky_given_stable",
    "get_spot_price",
]
