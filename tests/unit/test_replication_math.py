"""
Тесты ReplicationMath и Black-Scholes helpers

Проверяет:
1. Trading function на эталонной точке и краях домена
2. Вырождение при tau == 0
3. Inverse trading function (closed form и Newton refinement)
4. Инвариант и spot price
5. d1 / delta / premium
"""

import math

import pytest

from rmm.core.errors import DomainError
from rmm.core.math.black_scholes import call_delta, call_premium, calculate_d1, moneyness
from rmm.core.math.cumulative_normal import std_n_cdf
from rmm.core.math.replication import (
    calc_invariant,
    get_proportional_volatility,
    get_risky_given_stable,
    get_spot_price,
    get_stable_given_risky,
    inverse_trading_function,
    trading_function,
)

STRIKE = 10.0
SIGMA = 1.0
TAU = 1.0


def _tf(reserve_risky: float, invariant: float = 0.0, liquidity: float = 1.0) -> float:
    return trading_function(invariant, reserve_risky, liquidity, STRIKE, SIGMA, TAU)


class TestProportionalVolatility:
    def test_value(self) -> None:
        assert get_proportional_volatility(0.8, 0.25) == pytest.approx(0.4)

    def test_expired(self) -> None:
        assert get_proportional_volatility(1.0, 0.0) == 0.0
        assert get_proportional_volatility(1.0, -1.0) == 0.0


class TestTradingFunction:
    """Тесты для trading_function"""

    def test_reference_point(self) -> None:
        """R1 = 1 - Φ(0.5) → R2 = K·Φ(-0.5)"""
        assert _tf(0.3085375387) == pytest.approx(3.0853753, rel=1e-3)

    def test_empty_risky_gives_strike(self) -> None:
        assert _tf(0.0) == STRIKE

    def test_full_risky_gives_invariant(self) -> None:
        assert _tf(1.0, invariant=0.25) == 0.25

    def test_invariant_is_additive(self) -> None:
        assert _tf(0.4, invariant=0.5) == pytest.approx(_tf(0.4) + 0.5)

    def test_scales_with_liquidity(self) -> None:
        assert _tf(0.6, liquidity=2.0) == pytest.approx(2.0 * _tf(0.3))

    def test_decreasing_in_risky(self) -> None:
        values = [_tf(x / 20.0) for x in range(21)]
        assert values == sorted(values, reverse=True)

    def test_expired_returns_invariant(self) -> None:
        assert trading_function(0.7, 0.0, 1.0, STRIKE, SIGMA, 0.0) == 0.7

    @pytest.mark.parametrize("reserve_risky", [-0.1, 1.1])
    def test_out_of_domain(self, reserve_risky: float) -> None:
        with pytest.raises(DomainError):
            _tf(reserve_risky)

    def test_non_positive_liquidity(self) -> None:
        with pytest.raises(DomainError):
            _tf(0.5, liquidity=0.0)

    def test_non_positive_strike(self) -> None:
        with pytest.raises(DomainError):
            get_stable_given_risky(0.5, 0.0, SIGMA, TAU)


class TestInverseTradingFunction:
    """Тесты для inverse_trading_function / get_risky_given_stable"""

    @pytest.mark.parametrize("reserve_risky", [0.1, 0.3, 0.5, 0.7, 0.9])
    def test_closed_form_round_trip(self, reserve_risky: float) -> None:
        stable = _tf(reserve_risky)
        recovered = inverse_trading_function(0.0, stable, 1.0, STRIKE, SIGMA, TAU)
        assert recovered == pytest.approx(reserve_risky, abs=5e-3)

    @pytest.mark.parametrize("reserve_risky", [0.1, 0.3, 0.5, 0.7, 0.9])
    def test_refined_round_trip(self, reserve_risky: float) -> None:
        """Newton refinement восстанавливает R1 до float точности"""
        stable = _tf(reserve_risky)
        recovered = inverse_trading_function(0.0, stable, 1.0, STRIKE, SIGMA, TAU, refine=True)
        assert abs(recovered - reserve_risky) <= 1e-9
        assert _tf(recovered) == pytest.approx(stable, rel=1e-9)

    @pytest.mark.parametrize("reserve_risky", [0.05, 0.2, 0.5, 0.8, 0.97])
    def test_refined_never_overshoots_stable(self, reserve_risky: float) -> None:
        """trading_function(refined) <= target: инвариант не уменьшается"""
        stable = _tf(reserve_risky)
        recovered = get_risky_given_stable(stable, STRIKE, SIGMA, TAU, refine=True)
        assert _tf(recovered) <= stable

    def test_with_invariant(self) -> None:
        stable = _tf(0.3, invariant=0.25)
        recovered = inverse_trading_function(0.25, stable, 1.0, STRIKE, SIGMA, TAU)
        assert recovered == pytest.approx(0.3, abs=5e-3)

    def test_edges(self) -> None:
        assert get_risky_given_stable(0.0, STRIKE, SIGMA, TAU) == 1.0
        assert get_risky_given_stable(STRIKE, STRIKE, SIGMA, TAU) == 0.0

    def test_expired_returns_zero(self) -> None:
        assert inverse_trading_function(0.0, 3.0, 1.0, STRIKE, SIGMA, 0.0) == 0.0

    @pytest.mark.parametrize("stable", [-0.5, STRIKE + 0.5])
    def test_out_of_domain(self, stable: float) -> None:
        with pytest.raises(DomainError):
            get_risky_given_stable(stable, STRIKE, SIGMA, TAU)


class TestInvariantAndSpot:
    """Тесты для calc_invariant / get_spot_price"""

    def test_invariant_zero_on_curve(self) -> None:
        assert calc_invariant(0.3, _tf(0.3), 1.0, STRIKE, SIGMA, TAU) == 0.0

    def test_invariant_grows_with_extra_stable(self) -> None:
        invariant = calc_invariant(0.3, _tf(0.3) + 0.01, 1.0, STRIKE, SIGMA, TAU)
        assert invariant == pytest.approx(0.01)

    def test_spot_at_half(self) -> None:
        assert get_spot_price(0.5, STRIKE, SIGMA, TAU) == pytest.approx(STRIKE * math.exp(-0.5))

    def test_spot_decreasing_in_risky(self) -> None:
        prices = [get_spot_price(x / 10.0, STRIKE, SIGMA, TAU) for x in range(1, 10)]
        assert prices == sorted(prices, reverse=True)

    def test_spot_without_volatility_is_strike(self) -> None:
        assert get_spot_price(0.3, STRIKE, SIGMA, 0.0) == STRIKE

    @pytest.mark.parametrize("reserve_risky", [0.0, 1.0])
    def test_spot_at_bounds_raises(self, reserve_risky: float) -> None:
        with pytest.raises(DomainError):
            get_spot_price(reserve_risky, STRIKE, SIGMA, TAU)


class TestBlackScholes:
    """Тесты для d1 / delta / premium"""

    def test_d1_at_the_money(self) -> None:
        assert calculate_d1(10.0, 1.0, 1.0, 10.0) == pytest.approx(0.5)

    def test_d1_expired(self) -> None:
        assert calculate_d1(10.0, 1.0, 0.0, 12.0) == 0.0

    def test_delta(self) -> None:
        assert call_delta(10.0, 1.0, 1.0, 10.0) == pytest.approx(std_n_cdf(0.5))

    def test_premium_at_the_money(self) -> None:
        assert call_premium(10.0, 1.0, 1.0, 10.0) == pytest.approx(3.829249, rel=1e-5)

    def test_premium_expired_is_intrinsic(self) -> None:
        assert call_premium(10.0, 1.0, 0.0, 12.0) == 2.0
        assert call_premium(10.0, 1.0, 0.0, 8.0) == 0.0

    def test_pool_risky_matches_one_minus_delta(self) -> None:
        """Пул, откалиброванный по spot, лежит на кривой с spot ценой ≈ spot"""
        risky = 1.0 - call_delta(STRIKE, SIGMA, TAU, 8.0)
        assert get_spot_price(risky, STRIKE, SIGMA, TAU) == pytest.approx(8.0, rel=2e-3)

    def test_moneyness_validation(self) -> None:
        with pytest.raises(ValueError):
            moneyness(10.0, 0.0)
