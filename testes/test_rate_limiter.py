import os
import sys

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from wp_contentful.migrators.contentful_migrator import RateLimiter


class FakeClock:
    def __init__(self):
        self.now = 100.0
        self.sleeps = []

    def time(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


def test_first_call_does_not_sleep():
    clock = FakeClock()
    RateLimiter(rpm=12).wait(time_fn=clock.time, sleep_fn=clock.sleep)
    assert clock.sleeps == []


def test_calls_are_spaced_by_interval():
    clock = FakeClock()
    limiter = RateLimiter(rpm=12)
    assert limiter.interval == 5.0

    limiter.wait(time_fn=clock.time, sleep_fn=clock.sleep)
    clock.now += 2.0
    limiter.wait(time_fn=clock.time, sleep_fn=clock.sleep)
    assert clock.sleeps == [3.0]


def test_no_sleep_when_enough_time_passed():
    clock = FakeClock()
    limiter = RateLimiter(rpm=60)
    limiter.wait(time_fn=clock.time, sleep_fn=clock.sleep)
    clock.now += 1.5
    limiter.wait(time_fn=clock.time, sleep_fn=clock.sleep)
    assert clock.sleeps == []
