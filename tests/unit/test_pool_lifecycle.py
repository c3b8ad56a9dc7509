"""
Тесты Pool Lifecycle

Проверяет:
1. ACTIVE до maturity
2. EXPIRED с grace window
3. Фиксацию переходов и логирование
"""

from structlog.testing import capture_logs

from rmm.pool.lifecycle import LifecycleConfig, PoolLifecycle, PoolPhase

MATURITY = 1_000


class TestPhaseEvaluation:
    """Тесты evaluate()"""

    def test_active_before_maturity(self):
        evaluation = PoolLifecycle().evaluate(MATURITY, 400)
        assert evaluation.phase == PoolPhase.ACTIVE
        assert evaluation.swaps_allowed
        assert evaluation.seconds_to_maturity == 600
        assert evaluation.reason == "ACTIVE"
        assert not evaluation.transition_occurred

    def test_expired_at_maturity(self):
        lifecycle = PoolLifecycle()
        evaluation = lifecycle.evaluate(MATURITY, MATURITY)
        assert evaluation.phase == PoolPhase.EXPIRED
        assert evaluation.previous_phase == PoolPhase.ACTIVE
        assert evaluation.transition_occurred
        assert evaluation.swaps_allowed
        assert evaluation.reason == "EXPIRED_IN_GRACE"
        assert lifecycle.phase == PoolPhase.EXPIRED

    def test_grace_window_boundary(self):
        lifecycle = PoolLifecycle()
        assert lifecycle.evaluate(MATURITY, MATURITY + 120).swaps_allowed
        evaluation = lifecycle.evaluate(MATURITY, MATURITY + 121)
        assert not evaluation.swaps_allowed
        assert evaluation.reason == "EXPIRED_PAST_GRACE"
        assert evaluation.seconds_to_maturity == -121

    def test_zero_grace(self):
        lifecycle = PoolLifecycle(LifecycleConfig(grace_period_sec=0))
        assert lifecycle.evaluate(MATURITY, MATURITY).swaps_allowed
        assert not lifecycle.evaluate(MATURITY, MATURITY + 1).swaps_allowed

    def test_transition_only_once(self):
        lifecycle = PoolLifecycle()
        assert lifecycle.evaluate(MATURITY, MATURITY).transition_occurred
        assert not lifecycle.evaluate(MATURITY, MATURITY + 10).transition_occurred

    def test_details_mention_grace_window(self):
        evaluation = PoolLifecycle().evaluate(MATURITY, MATURITY + 30)
        assert "30s past maturity" in evaluation.details
        assert "120s" in evaluation.details


class TestLifecycleState:
    """Тесты clone() и логирования"""

    def test_clone_is_independent(self):
        lifecycle = PoolLifecycle()
        copy = lifecycle.clone()
        copy.evaluate(MATURITY, MATURITY)
        assert copy.phase == PoolPhase.EXPIRED
        assert lifecycle.phase == PoolPhase.ACTIVE

    def test_clone_keeps_config(self):
        config = LifecycleConfig(grace_period_sec=5)
        assert PoolLifecycle(config).clone().config is config

    def test_transition_logged(self):
        with capture_logs() as logs:
            PoolLifecycle().evaluate(MATURITY, MATURITY + 1)
        events = [entry for entry in logs if entry["event"] == "pool_phase_transition"]
        assert len(events) == 1
        assert events[0]["log_level"] == "info"
        assert events[0]["phase"] == "EXPIRED"
        assert events[0]["previous_phase"] == "ACTIVE"

    def test_no_log_without_transition(self):
        with capture_logs() as logs:
            PoolLifecycle().evaluate(MATURITY, 0)
        assert logs == []
