"""
Тесты аппроксимаций нормального распределения

Проверяет:
1. Ошибку Φ относительно math.erf
2. Симметрию Φ
3. Ошибку Φ⁻¹ в центре и хвостах
4. DomainError вне (0, 1)
"""

import math
from statistics import NormalDist

import pytest

from rmm.core.errors import DomainError
from rmm.core.math.cumulative_normal import (
    HIGH_TAIL,
    LOW_TAIL,
    cdf,
    erf,
    inverse_std_n_cdf,
    quantile_prime,
    std_n_cdf,
    std_n_pdf,
)

_REFERENCE = NormalDist()


def _grid(start: float, stop: float, count: int) -> list:
    step = (stop - start) / (count - 1)
    return [start + i * step for i in range(count)]


class TestCdf:
    """Тесты для erf / std_n_cdf / cdf"""

    def test_center(self) -> None:
        assert erf(0.0) == 0.0
        assert std_n_cdf(0.0) == 0.5

    def test_erf_is_odd(self) -> None:
        for x in (0.1, 0.5, 1.0, 2.5):
            assert erf(-x) == -erf(x)

    def test_symmetry(self) -> None:
        for x in _grid(-5.0, 5.0, 41):
            assert std_n_cdf(-x) == pytest.approx(1.0 - std_n_cdf(x), abs=1e-9)

    def test_error_bound(self) -> None:
        for x in _grid(-6.0, 6.0, 121):
            exact = 0.5 * (1.0 + math.erf(x / math.sqrt(2.0)))
            assert abs(std_n_cdf(x) - exact) <= 1.5e-7

    def test_monotone(self) -> None:
        values = [std_n_cdf(x) for x in _grid(-4.0, 4.0, 81)]
        assert values == sorted(values)

    def test_general_cdf(self) -> None:
        assert cdf(3.0, mean=3.0, variance=4.0) == 0.5
        assert cdf(5.0, mean=3.0, variance=4.0) == pytest.approx(std_n_cdf(1.0))

    def test_non_positive_variance(self) -> None:
        with pytest.raises(DomainError):
            cdf(0.0, variance=0.0)


class TestPdf:
    """Тесты для std_n_pdf"""

    def test_peak(self) -> None:
        assert std_n_pdf(0.0) == pytest.approx(1.0 / math.sqrt(2.0 * math.pi))

    def test_matches_reference(self) -> None:
        for x in (-2.0, -0.5, 1.0, 3.0):
            assert std_n_pdf(x) == pytest.approx(_REFERENCE.pdf(x), rel=1e-12)


class TestInverseCdf:
    """Тесты для inverse_std_n_cdf"""

    def test_median(self) -> None:
        assert inverse_std_n_cdf(0.5) == 0.0

    def test_central_error_bound(self) -> None:
        for p in _grid(LOW_TAIL, HIGH_TAIL, 96):
            assert abs(inverse_std_n_cdf(p) - _REFERENCE.inv_cdf(p)) <= 2e-4

    @pytest.mark.parametrize("p", [1e-10, 1e-6, 1e-3, 0.01, 0.02, 0.98, 0.999, 1 - 1e-6])
    def test_tail_error_bound(self, p: float) -> None:
        assert inverse_std_n_cdf(p) == pytest.approx(_REFERENCE.inv_cdf(p), abs=1e-6)

    def test_antisymmetry_in_tails(self) -> None:
        for p in (1e-4, 0.001, 0.01):
            assert inverse_std_n_cdf(1.0 - p) == pytest.approx(-inverse_std_n_cdf(p), abs=1e-9)

    def test_round_trip_with_cdf(self) -> None:
        for p in (0.1, 0.3, 0.7, 0.9):
            assert std_n_cdf(inverse_std_n_cdf(p)) == pytest.approx(p, abs=2e-4)

    @pytest.mark.parametrize("p", [0.0, 1.0, -0.1, 1.5, math.nan])
    def test_outside_open_interval(self, p: float) -> None:
        with pytest.raises(DomainError):
            inverse_std_n_cdf(p)


class TestQuantilePrime:
    """Тесты для quantile_prime"""

    def test_median(self) -> None:
        assert quantile_prime(0.5) == pytest.approx(math.sqrt(2.0 * math.pi))

    def test_positive(self) -> None:
        for p in (0.001, 0.2, 0.8, 0.999):
            assert quantile_prime(p) > 0

    @pytest.mark.parametrize("p", [0.0, 1.0, math.nan])
    def test_domain(self, p: float) -> None:
        with pytest.raises(DomainError):
            quantile_prime(p)
