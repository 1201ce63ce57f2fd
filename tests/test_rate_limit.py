# tests/test_rate_limit.py

import threading

import pytest

from cryptofiend.connection.rate_limiter import RateLimiter


def test_budget_admits_then_refuses(fake_clock):
    limiter = RateLimiter(window_seconds=90, clock=fake_clock)

    assert [limiter.try_acquire("GETapi/v3/openOrders", 3) for _ in range(4)] == [True, True, True, False]


def test_window_resets_only_after_threshold(fake_clock):
    limiter = RateLimiter(window_seconds=90, clock=fake_clock)
    for _ in range(3):
        limiter.try_acquire("key", 3)

    fake_clock.advance(60)
    assert not limiter.try_acquire("key", 3)
    fake_clock.advance(30)
    # Exactly at the threshold the window is still the same one.
    assert not limiter.try_acquire("key", 3)
    fake_clock.advance(0.5)
    assert limiter.try_acquire("key", 3)
    assert limiter.remaining("key", 3) == 2


def test_refused_calls_do_not_extend_the_window(fake_clock):
    limiter = RateLimiter(window_seconds=90, clock=fake_clock)
    limiter.try_acquire("key", 1)

    for _ in range(10):
        fake_clock.advance(9)
        assert not limiter.try_acquire("key", 1)

    fake_clock.advance(1)
    assert limiter.try_acquire("key", 1)


def test_keys_are_independent(fake_clock):
    limiter = RateLimiter(clock=fake_clock)

    assert limiter.try_acquire("GETa", 1)
    assert not limiter.try_acquire("GETa", 1)
    assert limiter.try_acquire("POSTa", 1)


def test_reset(fake_clock):
    limiter = RateLimiter(clock=fake_clock)
    limiter.try_acquire("a", 1)
    limiter.try_acquire("b", 1)

    limiter.reset("a")
    assert limiter.try_acquire("a", 1)
    assert not limiter.try_acquire("b", 1)

    limiter.reset()
    assert limiter.try_acquire("b", 1)


def test_concurrent_admission_never_exceeds_budget():
    limiter = RateLimiter(window_seconds=3600)
    admitted = []
    lock = threading.Lock()

    def worker():
        for _ in range(50):
            if limiter.try_acquire("key", 25):
                with lock:
                    admitted.append(1)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(admitted) == 25


def test_rate_limiter_init_with_zero_window():
    with pytest.raises(ValueError):
        RateLimiter(0)
    with pytest.raises(ValueError):
        RateLimiter(-1)
