"""Tests for the named timer registry."""
from apex_logger import TimerRegistry


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestTimerRegistry:
    """Tests for TimerRegistry."""

    def test_stop_returns_elapsed_ms(self):
        clock = FakeClock()
        timers = TimerRegistry(clock)
        timers.start("load")
        clock.now = 0.25
        assert timers.stop("load") == 250.0
        assert "load" not in timers

    def test_stop_unknown_unit(self):
        assert TimerRegistry(FakeClock()).stop("never") is None

    def test_second_stop_returns_none(self):
        timers = TimerRegistry(FakeClock())
        timers.start("load")
        timers.stop("load")
        assert timers.stop("load") is None

    def test_restart_resets_start_time(self):
        clock = FakeClock()
        timers = TimerRegistry(clock)
        timers.start("load")
        clock.now = 1.0
        timers.start("load")
        clock.now = 1.5
        assert timers.stop("load") == 500.0

    def test_start_sweeps_oldest_units(self):
        timers = TimerRegistry(FakeClock())
        for unit in ("a", "b", "c", "d"):
            timers.start(unit, max_units=3)
        assert len(timers) == 3
        assert "a" not in timers
        assert "d" in timers

    def test_restarted_unit_counts_as_newest(self):
        timers = TimerRegistry(FakeClock())
        for unit in ("a", "b", "c"):
            timers.start(unit)
        timers.start("a")
        assert timers.sweep(2) == 1
        assert "b" not in timers
        assert "a" in timers

    def test_sweep_under_limit(self):
        timers = TimerRegistry(FakeClock())
        timers.start("a")
        assert timers.sweep(5) == 0
        assert len(timers) == 1

    def test_clear(self):
        timers = TimerRegistry(FakeClock())
        timers.start("a")
        timers.clear()
        assert len(timers) == 0
