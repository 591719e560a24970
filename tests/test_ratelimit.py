"""Tests for the fixed-interval rate limiter."""

import threading
import time

import pytest

import reconnbench.ratelimit as ratelimit_module
from reconnbench.ratelimit import RateLimiter


class TestRateLimiter:
    @pytest.mark.parametrize("rate", [0, -1, -0.5])
    def test_unbounded_never_pauses(self, rate):
        limiter = RateLimiter(rate)
        assert not limiter.is_bounded
        assert limiter.interval_seconds == 0.0
        started = time.monotonic()
        for _ in range(1000):
            assert limiter.pause() is False
        assert time.monotonic() - started < 0.5
        assert limiter.total_paused_seconds == 0.0

    def test_interval(self):
        assert RateLimiter(10).interval_seconds == pytest.approx(0.1)
        assert RateLimiter(0.5).interval_seconds == pytest.approx(2.0)

    def test_hundred_pauses_at_ten_per_second(self, monkeypatch: pytest.MonkeyPatch):
        sleeps: list[float] = []
        monkeypatch.setattr(ratelimit_module.time, "sleep", lambda d: sleeps.append(d))

        limiter = RateLimiter(10)
        for _ in range(100):
            limiter.pause()

        assert len(sleeps) == 100
        assert 9.9 <= sum(sleeps) <= 10.5

    def test_real_pauses_accumulate(self):
        limiter = RateLimiter(200)
        started = time.monotonic()
        for _ in range(20):
            limiter.pause(threading.Event())
        elapsed = time.monotonic() - started
        assert elapsed >= 0.099
        assert limiter.total_paused_seconds >= 0.099

    def test_cancel_interrupts_pause(self):
        limiter = RateLimiter(0.1)  # 10 second interval
        cancel = threading.Event()
        timer = threading.Timer(0.05, cancel.set)
        timer.start()
        started = time.monotonic()
        try:
            interrupted = limiter.pause(cancel)
        finally:
            timer.cancel()
        assert interrupted is True
        assert time.monotonic() - started < 5.0
