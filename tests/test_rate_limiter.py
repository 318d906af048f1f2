import pytest

from tools.web.rate_limiter import DEFAULT_LIMITS, RateLimiter, limits_from_env


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


def test_refuses_once_limit_reached_inside_window():
    clock = FakeClock()
    limiter = RateLimiter({"web": 2}, clock=clock)

    assert limiter.try_acquire("web") is True
    clock.now = 30.0
    assert limiter.try_acquire("web") is True
    assert limiter.try_acquire("web") is False
    assert limiter.remaining("web") == 0


def test_window_boundary_releases_oldest_request():
    clock = FakeClock()
    limiter = RateLimiter({"web": 2}, clock=clock)
    limiter.try_acquire("web")
    clock.now = 30.0
    limiter.try_acquire("web")

    clock.now = 59.999
    assert limiter.try_acquire("web") is False

    # the request at t=0 leaves the window at exactly t=60
    clock.now = 60.0
    assert limiter.try_acquire("web") is True
    assert limiter.try_acquire("web") is False

    clock.now = 90.0
    assert limiter.remaining("web") == 1
    assert limiter.try_acquire("web") is True


def test_refused_requests_do_not_extend_the_window():
    clock = FakeClock()
    limiter = RateLimiter({"reddit": 1}, clock=clock)
    limiter.try_acquire("reddit")
    for t in (10.0, 20.0, 50.0):
        clock.now = t
        assert limiter.try_acquire("reddit") is False
    clock.now = 60.0
    assert limiter.try_acquire("reddit") is True


def test_sources_are_counted_separately_and_case_insensitively():
    limiter = RateLimiter({"linkedin": 1, "reddit": 1}, clock=FakeClock())

    assert limiter.try_acquire("LinkedIn") is True
    assert limiter.try_acquire("linkedin ") is False
    assert limiter.try_acquire("Reddit") is True


def test_unlisted_source_is_never_throttled():
    limiter = RateLimiter({"web": 0}, clock=FakeClock())

    assert limiter.try_acquire("web") is False
    assert all(limiter.try_acquire("mastodon") for _ in range(50))
    assert limiter.remaining("mastodon") is None


def test_reset_clears_counts():
    limiter = RateLimiter({"together": 1}, clock=FakeClock())
    limiter.try_acquire("together")
    limiter.reset()
    assert limiter.remaining("together") == 1


def test_default_limits_cover_search_and_llm_providers():
    limiter = RateLimiter(clock=FakeClock())
    for source in ("web", "linkedin", "crunchbase", "together", "perplexity"):
        assert limiter.remaining(source) == DEFAULT_LIMITS[source]


def test_env_overrides_single_source(monkeypatch):
    monkeypatch.setenv("RATE_LIMIT_LINKEDIN", "3")
    monkeypatch.delenv("RATE_LIMIT_WEB", raising=False)

    limits = limits_from_env()

    assert limits["linkedin"] == 3
    assert limits["web"] == DEFAULT_LIMITS["web"]
