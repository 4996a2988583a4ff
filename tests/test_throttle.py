"""Tests for BlogEnhancer.Throttle."""

from typing import List

from BlogEnhancer import Fetcher, Throttle as throttle_module
from BlogEnhancer.Throttle import Throttle


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class TestThrottle:
    def test_first_wait_never_sleeps(self) -> None:
        clock = FakeClock()
        throttle = Throttle(5.0, clock=clock, sleep=clock.sleep)
        assert throttle.wait() == 0.0
        assert clock.sleeps == []

    def test_sleeps_remaining_interval(self) -> None:
        clock = FakeClock()
        throttle = Throttle(5.0, clock=clock, sleep=clock.sleep)
        throttle.wait()
        clock.now += 2.0
        assert throttle.wait() == 3.0
        assert clock.sleeps == [3.0]

    def test_no_sleep_when_interval_already_passed(self) -> None:
        clock = FakeClock()
        throttle = Throttle(2.0, clock=clock, sleep=clock.sleep)
        throttle.wait()
        clock.now += 10.0
        assert throttle.wait() == 0.0
        assert clock.sleeps == []

    def test_reset_forgets_previous_call(self) -> None:
        clock = FakeClock()
        throttle = Throttle(5.0, clock=clock, sleep=clock.sleep)
        throttle.wait()
        throttle.reset()
        assert throttle.wait() == 0.0

    def test_zero_interval(self) -> None:
        clock = FakeClock()
        throttle = Throttle(0, clock=clock, sleep=clock.sleep)
        throttle.wait()
        throttle.wait()
        assert clock.sleeps == []


class TestModuleHeaders:
    def test_module_docstrings_name_the_module(self) -> None:
        assert throttle_module.__doc__.strip().startswith("Throttle Module:")
        assert Fetcher.__doc__.strip().startswith("Fetcher Module:")
