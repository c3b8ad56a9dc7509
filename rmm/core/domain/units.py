"""
Units — Единицы величин RMM engine

Единственный допустимый способ представления:
- Wei        — целые количества токена с явной десятичной точностью (6-18)
- Percentage — проценты, масштабированные на 1e4 (sigma, gamma)
- Time       — целые секунды, с конверсией в годы

ЗАПРЕЩЕНО смешивать Wei разной точности без явного scale_to():
любая такая операция поднимает PrecisionMismatchError.

Все конверсии float → целое усекают к нулю.
"""

from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction
from typing import Final, Union

from rmm.core.errors import PrecisionMismatchError
from rmm.core.math.numerical_safeguards import checked_div, div_trunc, saturating_div

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Точность по умолчанию (ETH-подобные токены, liquidity)
DEFAULT_DECIMALS: Final[int] = 18

# Допустимый диапазон точности токенов
MIN_DECIMALS: Final[int] = 1
MAX_DECIMALS: Final[int] = 18

# Мантисса процентов: 1.0 (100%) == 10_000
PERCENTAGE_MANTISSA: Final[int] = 10**4

# Год в секундах (52 недели), как в ledger контракте
YEAR_IN_SECONDS: Final[int] = 31_449_600

Numeric = Union[int, float, str, Decimal, Fraction]


def _exact(value: Numeric) -> Fraction:
    """Точное rational значение; float берётся по его кратчайшему repr."""
    if isinstance(value, bool):
        raise TypeError("bool is not a numeric amount")
    if isinstance(value, float):
        return Fraction(repr(value))
    return Fraction(value)


def _validate_decimals(decimals: int) -> None:
    if not MIN_DECIMALS <= decimals <= MAX_DECIMALS:
        raise ValueError(
            f"decimals must be in [{MIN_DECIMALS}, {MAX_DECIMALS}], got {decimals}"
        )


# =============================================================================
# WEI
# =============================================================================


@dataclass(frozen=True)
class Wei:
    """
    Целое количество токена с тегом точности.

    raw — количество минимальных единиц (value * 10^decimals).
    """

    raw: int
    decimals: int = DEFAULT_DECIMALS

    def __post_init__(self) -> None:
        if not isinstance(self.raw, int) or isinstance(self.raw, bool):
            raise TypeError(f"raw must be int, got {type(self.raw).__name__}")
        _validate_decimals(self.decimals)

    # ----- views -----

    @property
    def float(self) -> float:
        """Значение в единицах токена."""
        return self.raw / 10**self.decimals

    @property
    def parsed(self) -> str:
        """Точное десятичное представление."""
        return str(Decimal(self.raw).scaleb(-self.decimals))

    @property
    def unit(self) -> int:
        """Количество минимальных единиц в одном токене."""
        return 10**self.decimals

    def is_negative(self) -> bool:
        return self.raw < 0

    # ----- precision -----

    def _coerce(self, other: Union["Wei", int]) -> int:
        if isinstance(other, Wei):
            if other.decimals != self.decimals:
                raise PrecisionMismatchError(
                    f"Cannot combine Wei with {self.decimals} and {other.decimals} decimals "
                    f"without explicit scale_to()"
                )
            return other.raw
        if isinstance(other, bool) or not isinstance(other, int):
            raise TypeError(f"Expected Wei or int, got {type(other).__name__}")
        return other

    def scale_to(self, decimals: int) -> "Wei":
        """
        Явный rescale к другой точности (усечение к нулю при уменьшении).

        Examples:
            >>> Wei(1_500_000, 6).scale_to(18).raw
            1500000000000000000
        """
        _validate_decimals(decimals)
        if decimals >= self.decimals:
            return Wei(self.raw * 10 ** (decimals - self.decimals), decimals)
        return Wei(div_trunc(self.raw, 10 ** (self.decimals - decimals)), decimals)

    # ----- arithmetic -----

    def add(self, other: Union["Wei", int]) -> "Wei":
        return Wei(self.raw + self._coerce(other), self.decimals)

    def sub(self, other: Union["Wei", int]) -> "Wei":
        return Wei(self.raw - self._coerce(other), self.decimals)

    def mul(self, other: Union["Wei", int]) -> "Wei":
        """Умножение raw значений (размерность не отслеживается)."""
        return Wei(self.raw * self._coerce(other), self.decimals)

    def div(self, other: Union["Wei", int]) -> "Wei":
        """
        Деление raw значений с saturating поведением.

        Неположительный делитель возвращает 0 (parity с эталонным SDK).
        Внутри engine используйте checked_div.
        """
        return Wei(saturating_div(self.raw, self._coerce(other)), self.decimals)

    def checked_div(self, other: Union["Wei", int]) -> "Wei":
        """
        Деление raw значений.

        Raises:
            DivisionByZeroError: Если делитель <= 0
        """
        return Wei(checked_div(self.raw, self._coerce(other)), self.decimals)

    def __add__(self, other: Union["Wei", int]) -> "Wei":
        return self.add(other)

    def __sub__(self, other: Union["Wei", int]) -> "Wei":
        return self.sub(other)

    # ----- comparisons -----

    def __lt__(self, other: "Wei") -> bool:
        return self.raw < self._coerce(other)

    def __le__(self, other: "Wei") -> bool:
        return self.raw <= self._coerce(other)

    def __gt__(self, other: "Wei") -> bool:
        return self.raw > self._coerce(other)

    def __ge__(self, other: "Wei") -> bool:
        return self.raw >= self._coerce(other)

    def __repr__(self) -> str:
        return f"Wei({self.parsed}, decimals={self.decimals})"


def parse_wei(value: Numeric, decimals: int = DEFAULT_DECIMALS) -> Wei:
    """
    Конверсия value (в единицах токена) в Wei.

    value * 10^decimals, усечение к нулю.

    Examples:
        >>> parse_wei(0.3).raw
        300000000000000000
        >>> parse_wei("1.2345678", 6).raw
        1234567
    """
    _validate_decimals(decimals)
    scaled = _exact(value) * 10**decimals
    return Wei(div_trunc(scaled.numerator, scaled.denominator), decimals)


# =============================================================================
# PERCENTAGE
# =============================================================================


@dataclass(frozen=True)
class Percentage:
    """
    Процент, масштабированный на PERCENTAGE_MANTISSA.

    raw = 10_000 соответствует 1.0 (100%).
    """

    raw: int

    def __post_init__(self) -> None:
        if not isinstance(self.raw, int) or isinstance(self.raw, bool):
            raise TypeError(f"raw must be int, got {type(self.raw).__name__}")

    @property
    def float(self) -> float:
        return self.raw / PERCENTAGE_MANTISSA


def parse_percentage(value: Numeric) -> Percentage:
    """
    Конверсия доли в Percentage (усечение до 4 знаков).

    Examples:
        >>> parse_percentage(0.0015).raw
        15
        >>> parse_percentage(1).raw
        10000
    """
    scaled = _exact(value) * PERCENTAGE_MANTISSA
    return Percentage(div_trunc(scaled.numerator, scaled.denominator))


# =============================================================================
# TIME
# =============================================================================


@dataclass(frozen=True, order=True)
class Time:
    """Целое количество секунд."""

    raw: int

    def __post_init__(self) -> None:
        if not isinstance(self.raw, int) or isinstance(self.raw, bool):
            raise TypeError(f"raw must be int, got {type(self.raw).__name__}")

    @property
    def seconds(self) -> int:
        return self.raw

    @property
    def years(self) -> float:
        return self.raw / YEAR_IN_SECONDS

    def sub(self, other: Union["Time", int]) -> "Time":
        other_raw = other.raw if isinstance(other, Time) else int(other)
        return Time(self.raw - other_raw)


def years_to_time(years: float) -> Time:
    """Годы → Time (секунды, floor к нулю)."""
    return Time(int(years * YEAR_IN_SECONDS))
