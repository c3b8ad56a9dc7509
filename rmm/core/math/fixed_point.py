"""
FixedPointX64 — signed 64.64 fixed-point представление

Значение хранится как целый числитель со знаменателем 2^64 в диапазоне
signed int128, как int128 значения ledger контракта.

Семантика округления:
- to_fixed: rational → numerator * 2^64, усечение к нулю (никогда не к
  ближайшему), как целочисленное деление ledger
- to_decimal: numerator / 2^64 с MANTISSA (1e9) десятичными знаками,
  дальнейшие разряды усекаются
- mul/div: промежуточный результат точный (Python int), затем усечение

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. INT128_MIN <= raw <= INT128_MAX, иначе FixedPointOverflowError
2. to_fixed(x) * sign(x) <= |x| * 2^64 (усечение не увеличивает модуль)
"""

from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction
from typing import Final, Union

from rmm.core.errors import FixedPointOverflowError
from rmm.core.math.numerical_safeguards import checked_div, div_trunc, is_valid_float

# =============================================================================
# КОНСТАНТЫ ПРЕДСТАВЛЕНИЯ
# =============================================================================

# Количество дробных бит
FRACTIONAL_BITS: Final[int] = 64

# Знаменатель всех 64.64 значений
DENOMINATOR: Final[int] = 1 << FRACTIONAL_BITS

# Границы signed int128
INT128_MAX: Final[int] = (1 << 127) - 1
INT128_MIN: Final[int] = -(1 << 127)

# Десятичная мантисса вывода: 9 знаков после точки
MANTISSA: Final[int] = 10**9

# Мантисса процентов (sigma, gamma)
PERCENTAGE_MANTISSA: Final[int] = 10**4

Rational = Union[int, float, str, Decimal, Fraction]


def _to_fraction(value: Rational) -> Fraction:
    if isinstance(value, bool):
        raise TypeError("bool is not a rational value")
    if isinstance(value, float):
        # Fraction(float) точен, NaN/Inf отвергаются
        if not is_valid_float(value):
            raise ValueError(f"Cannot encode non-finite value {value}")
    return Fraction(value)


def _check_range(raw: int) -> int:
    if raw > INT128_MAX or raw < INT128_MIN:
        raise FixedPointOverflowError(
            f"Fixed-point numerator {raw} exceeds signed 128-bit range"
        )
    return raw


# =============================================================================
# VALUE TYPE
# =============================================================================


@dataclass(frozen=True, order=True)
class FixedPointX64:
    """
    Signed 64.64 fixed-point число.

    Сравнения и хеш идут по raw числителю.
    """

    raw: int

    def __post_init__(self) -> None:
        if not isinstance(self.raw, int) or isinstance(self.raw, bool):
            raise TypeError(f"raw must be int, got {type(self.raw).__name__}")
        _check_range(self.raw)

    # ----- views -----

    @property
    def parsed(self) -> float:
        """raw / 2^64 без потери (до точности float)."""
        return float(Fraction(self.raw, DENOMINATOR))

    @property
    def integer(self) -> int:
        """Значение * MANTISSA, усечённое к нулю."""
        return div_trunc(self.raw * MANTISSA, DENOMINATOR)

    @property
    def float(self) -> float:
        """Значение с MANTISSA десятичными знаками (усечение)."""
        return self.integer / MANTISSA

    @property
    def percentage(self) -> float:
        """Значение в процентных единицах (float / 1e4)."""
        return self.float / PERCENTAGE_MANTISSA

    # ----- arithmetic -----

    def __add__(self, other: "FixedPointX64") -> "FixedPointX64":
        return FixedPointX64(self.raw + other.raw)

    def __sub__(self, other: "FixedPointX64") -> "FixedPointX64":
        return FixedPointX64(self.raw - other.raw)

    def __neg__(self) -> "FixedPointX64":
        return FixedPointX64(-self.raw)

    def mul(self, other: "FixedPointX64") -> "FixedPointX64":
        """Произведение с усечением к нулю."""
        return FixedPointX64(div_trunc(self.raw * other.raw, DENOMINATOR))

    def div(self, other: "FixedPointX64") -> "FixedPointX64":
        """
        Частное с усечением к нулю.

        Raises:
            DivisionByZeroError: Если делитель <= 0
        """
        if other.raw < 0:
            return FixedPointX64(-checked_div(self.raw * DENOMINATOR, -other.raw))
        return FixedPointX64(checked_div(self.raw * DENOMINATOR, other.raw))

    def __repr__(self) -> str:
        return f"FixedPointX64(raw={self.raw}, parsed={self.parsed!r})"


ZERO: Final[FixedPointX64] = FixedPointX64(0)


# =============================================================================
# КОНВЕРТЕРЫ
# =============================================================================


def to_fixed(value: Rational) -> FixedPointX64:
    """
    Кодирование rational в 64.64.

    numerator = trunc(value * 2^64), усечение к нулю.

    Args:
        value: int, float, str, Decimal или Fraction

    Returns:
        FixedPointX64

    Raises:
        FixedPointOverflowError: Если |value| * 2^64 вне int128
        ValueError: Если value NaN/Inf

    Examples:
        >>> to_fixed(1).raw == 2**64
        True
        >>> to_fixed(-0.5).raw == -(2**63)
        True
    """
    fraction = _to_fraction(value) * DENOMINATOR
    return FixedPointX64(div_trunc(fraction.numerator, fraction.denominator))


def to_decimal(fp: FixedPointX64, mantissa: int = MANTISSA) -> float:
    """
    Декодирование 64.64 в десятичное значение.

    Сохраняет log10(mantissa) знаков после точки, остальные усекаются
    (не округляются).

    Examples:
        >>> to_decimal(to_fixed("0.1234567891234"))
        0.123456789
    """
    if mantissa <= 0:
        raise ValueError(f"mantissa must be positive, got {mantissa}")
    return div_trunc(fp.raw * mantissa, DENOMINATOR) / mantissa


def parse_fixed_point(value: Rational) -> FixedPointX64:
    """
    Целая часть value как 64.64: trunc(value) * 2^64.

    Аналог parseInt64x64 ledger SDK: дробная часть отбрасывается.
    """
    fraction = _to_fraction(value)
    integer = div_trunc(fraction.numerator, fraction.denominator)
    return FixedPointX64(_check_range(integer * DENOMINATOR))
