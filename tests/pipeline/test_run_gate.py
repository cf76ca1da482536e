"""Tests for RunGate."""

from trust_system.pipeline import RunGate


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestRunGate:
    """Tests for the minimum-interval gate."""

    def test_first_run_allowed(self):
        gate = RunGate(min_interval_seconds=60, clock=FakeClock())
        assert gate.try_acquire("collect") is True

    def test_second_run_too_soon(self):
        clock = FakeClock()
        gate = RunGate(min_interval_seconds=60, clock=clock)
        gate.try_acquire("collect")

        clock.now += 30

        assert gate.try_acquire("collect") is False
        assert gate.seconds_until_allowed("collect") == 30

    def test_allowed_after_interval(self):
        clock = FakeClock()
        gate = RunGate(min_interval_seconds=60, clock=clock)
        gate.try_acquire("collect")

        clock.now += 60

        assert gate.try_acquire("collect") is True

    def test_refused_run_does_not_extend_window(self):
        clock = FakeClock()
        gate = RunGate(min_interval_seconds=60, clock=clock)
        gate.try_acquire("collect")
        clock.now += 50
        gate.try_acquire("collect")

        clock.now += 10

        assert gate.try_acquire("collect") is True

    def test_keys_independent(self):
        gate = RunGate(min_interval_seconds=60, clock=FakeClock())
        gate.try_acquire("collect")

        assert gate.try_acquire("retention") is True
        assert gate.seconds_until_allowed("never-run") == 0.0
