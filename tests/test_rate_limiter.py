from support_chat.services.rate_limiter import FixedWindowRateLimiter


def test_allows_up_to_cap_then_denies(clock):
    limiter = FixedWindowRateLimiter(max_requests=20, window_seconds=60, clock=clock)

    results = [limiter.check("1.2.3.4") for _ in range(21)]

    assert results[:20] == [True] * 20
    assert results[20] is False


def test_denied_requests_do_not_extend_window(clock):
    limiter = FixedWindowRateLimiter(max_requests=20, window_seconds=60, clock=clock)
    for _ in range(20):
        limiter.check("1.2.3.4")

    for _ in range(5):
        clock.advance(10)
        assert limiter.check("1.2.3.4") is False

    clock.advance(10.5)
    assert limiter.check("1.2.3.4") is True


def test_window_resets_only_after_full_window(clock):
    limiter = FixedWindowRateLimiter(max_requests=2, window_seconds=60, clock=clock)
    assert limiter.check("a")
    assert limiter.check("a")

    clock.advance(60)
    # Exactly at the boundary the window is still open
    assert limiter.check("a") is False

    clock.advance(0.001)
    assert limiter.check("a") is True
    assert limiter.check("a") is True
    assert limiter.check("a") is False


def test_burst_allowed_right_after_boundary(clock):
    limiter = FixedWindowRateLimiter(max_requests=3, window_seconds=60, clock=clock)
    limiter.check("a")
    clock.advance(59)
    assert limiter.check("a")
    assert limiter.check("a")

    clock.advance(2)
    assert [limiter.check("a") for _ in range(3)] == [True, True, True]


def test_identities_are_counted_separately(clock):
    limiter = FixedWindowRateLimiter(max_requests=1, window_seconds=60, clock=clock)

    assert limiter.check("a")
    assert limiter.check("a") is False
    assert limiter.check("b")


def test_reset_clears_counters(clock):
    limiter = FixedWindowRateLimiter(max_requests=1, window_seconds=60, clock=clock)
    limiter.check("a")

    limiter.reset()

    assert limiter.check("a")
