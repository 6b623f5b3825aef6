"""Unit tests for TickTimer, driven by a fake clock."""

import pytest

from models.timer import TickTimer
from tests.fixtures.core.sessions import FakeClock


@pytest.fixture
def timer(fake_clock):
    return TickTimer(interval_ms=100, clock=fake_clock)


class TestTickTimer:
    """Test deadline bookkeeping."""

    def test_inactive_by_default(self, timer):
        assert not timer.is_active
        assert timer.seconds_until_due() is None
        assert not timer.is_due()

    def test_start_arms_one_interval_ahead(self, timer, fake_clock):
        timer.start()
        assert timer.is_active
        assert timer.seconds_until_due() == pytest.approx(0.1)
        fake_clock.advance(0.05)
        assert not timer.is_due()
        fake_clock.advance(0.06)
        assert timer.is_due()

    def test_start_with_interval(self, timer):
        timer.start(interval_ms=250)
        assert timer.interval_ms == 250
        assert timer.seconds_until_due() == pytest.approx(0.25)

    def test_stop(self, timer, fake_clock):
        timer.start()
        timer.stop()
        fake_clock.advance(1)
        assert not timer.is_due()
        assert timer.next_due is None

    def test_mark_fired_schedules_next(self, timer, fake_clock):
        timer.start()
        fake_clock.advance(0.1)
        timer.mark_fired()
        assert not timer.is_due()
        assert timer.seconds_until_due() == pytest.approx(0.1)

    def test_missed_ticks_not_replayed(self, timer, fake_clock):
        timer.start()
        fake_clock.advance(1.0)
        timer.mark_fired()
        # One tick due now, not nine queued up
        assert timer.is_due()
        timer.mark_fired()
        assert timer.seconds_until_due() == pytest.approx(0.1)

    def test_restart_while_active(self, timer, fake_clock):
        timer.start()
        fake_clock.advance(0.08)
        timer.restart(500)
        assert timer.interval_ms == 500
        assert timer.seconds_until_due() == pytest.approx(0.5)

    def test_restart_while_inactive_keeps_timer_off(self, timer):
        timer.restart(20)
        assert timer.interval_ms == 20
        assert not timer.is_active

    def test_mark_fired_when_inactive_is_noop(self, timer):
        timer.mark_fired()
        assert timer.next_due is None

    def test_interval_seconds(self):
        assert TickTimer(interval_ms=50, clock=FakeClock()).interval_seconds == 0.05
