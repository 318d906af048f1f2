import asyncio

import pytest

from config.config import SearchMode
from orchestrator.source_aggregator import SourceAggregator, custom_url_domain
from tools.web.rate_limiter import RateLimiter
from tools.web.contracts import PlatformResults
from utils.errors import UpstreamAPIError
from conftest import make_result


class FakeSerper:
    def __init__(self, delay_s=0.0, fail=False):
        self.delay_s = delay_s
        self.fail = fail
        self.calls = []

    async def search(self, query, num=10, site=None, source="Web"):
        self.calls.append({"query": query, "site": site, "source": source})
        if self.delay_s:
            await asyncio.sleep(self.delay_s)
        if self.fail:
            raise UpstreamAPIError("serper", 502, "bad gateway")
        host = site or "web.example"
        return [
            make_result(title="web", url=f"https://{host}/1", source=source),
            make_result(title="dup", url="https://shared.example/", source=source),
        ]


class FakeDuckDuckGo:
    def __init__(self, fail=False):
        self.fail = fail

    async def search(self, query, limit=5):
        if self.fail:
            raise UpstreamAPIError("duckduckgo", 500, None)
        return [
            make_result(title="ddg", url="https://duckduckgo.com/x", source="DuckDuckGo"),
            make_result(title="dup", url="https://shared.example", source="DuckDuckGo"),
        ]


class FakeFetcher:
    def __init__(self, delay_s=0.0):
        self.delay_s = delay_s
        self.platforms = []

    async def fetch(self, query, platform):
        self.platforms.append(platform)
        await asyncio.sleep(self.delay_s)
        return PlatformResults(
            platform=platform,
            content=[make_result(url=f"https://{platform}.com/p", source=platform, weight=0.9)],
            urls=[f"https://{platform}.com/p"],
            confidence=0.9,
        )


def test_merges_sources_and_dedupes_by_url():
    aggregator = SourceAggregator(FakeSerper(), FakeDuckDuckGo(), FakeFetcher())
    gathered = asyncio.run(aggregator.gather("q", ["Web", "DuckDuckGo", "Reddit"], mode=SearchMode.OPEN))

    assert [r.url for r in gathered.results] == [
        "https://web.example/1",
        "https://shared.example/",
        "https://duckduckgo.com/x",
        "https://reddit.com/p",
    ]
    assert gathered.failed_sources == []
    assert gathered.queried_sources == ["Web", "DuckDuckGo", "Reddit"]


def test_failed_and_timed_out_sources_are_dropped_not_raised():
    aggregator = SourceAggregator(
        FakeSerper(fail=True), FakeDuckDuckGo(), FakeFetcher(delay_s=5.0), default_timeout_s=0.05
    )
    gathered = asyncio.run(aggregator.gather("q", ["Web", "DuckDuckGo", "LinkedIn"]))

    assert [r.source for r in gathered.results] == ["DuckDuckGo", "DuckDuckGo"]
    assert gathered.failed_sources == ["Web", "LinkedIn"]


def test_unknown_source_reported_as_failed():
    aggregator = SourceAggregator(FakeSerper(), FakeDuckDuckGo(), FakeFetcher())
    gathered = asyncio.run(aggregator.gather("q", ["Web", "Myspace"]))
    assert gathered.failed_sources == ["Myspace"]
    assert len(gathered.results) == 2


def test_verified_mode_restricts_web_search_to_curated_domains():
    serper = FakeSerper()
    aggregator = SourceAggregator(serper, FakeDuckDuckGo(), FakeFetcher())

    asyncio.run(aggregator.gather("q", ["Web"], mode=SearchMode.VERIFIED))
    asyncio.run(aggregator.gather("q", ["Web"], mode=SearchMode.OPEN))

    assert "site:reuters.com" in serper.calls[0]["query"]
    assert serper.calls[1]["query"] == "q"


def test_custom_urls_become_site_searches():
    serper = FakeSerper()
    aggregator = SourceAggregator(serper, FakeDuckDuckGo(), FakeFetcher())
    gathered = asyncio.run(
        aggregator.gather("q", [], custom_urls=["https://www.a16z.com/posts", "sequoiacap.com", "a16z.com"])
    )

    # empty source list falls back to the generic web source
    assert [c["site"] for c in serper.calls] == [None, "a16z.com", "sequoiacap.com"]
    assert gathered.queried_sources == ["Web", "a16z.com", "sequoiacap.com"]


def test_malformed_custom_url_rejected():
    with pytest.raises(ValueError):
        custom_url_domain("not a url")
    with pytest.raises(ValueError):
        custom_url_domain("ftp://files.example.com")
    assert custom_url_domain("https://WWW.Example.com/path") == "example.com"


def test_cancelling_gather_cancels_in_flight_fetches():
    cancelled = []

    class SlowSerper(FakeSerper):
        async def search(self, query, num=10, site=None, source="Web"):
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.append(source)
                raise

    async def scenario():
        aggregator = SourceAggregator(SlowSerper(), FakeDuckDuckGo(), FakeFetcher(), default_timeout_s=30)
        task = asyncio.create_task(aggregator.gather("q", ["Web"], custom_urls=["example.org"]))
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())
    assert sorted(cancelled) == ["Web", "example.org"]


def test_rate_limited_source_is_reported_failed_without_fetching():
    serper, fetcher = FakeSerper(), FakeFetcher()
    aggregator = SourceAggregator(
        serper, FakeDuckDuckGo(), fetcher, rate_limiter=RateLimiter({"web": 1, "reddit": 0})
    )

    first = asyncio.run(aggregator.gather("q", ["Web", "Reddit"], mode=SearchMode.OPEN))
    assert first.failed_sources == ["Reddit"]
    assert fetcher.platforms == []
    assert len(serper.calls) == 1

    second = asyncio.run(aggregator.gather("q", ["Web", "DuckDuckGo"], mode=SearchMode.OPEN))
    assert second.failed_sources == ["Web"]
    assert [r.source for r in second.results] == ["DuckDuckGo", "DuckDuckGo"]
    assert len(serper.calls) == 1


def test_custom_domains_share_one_limit():
    serper = FakeSerper()
    aggregator = SourceAggregator(serper, FakeDuckDuckGo(), FakeFetcher(), rate_limiter=RateLimiter({"custom": 1}))

    gathered = asyncio.run(aggregator.gather("q", ["Web"], ["a16z.com", "sequoiacap.com"], mode=SearchMode.OPEN))

    assert gathered.failed_sources == ["sequoiacap.com"]
    assert [c["site"] for c in serper.calls] == [None, "a16z.com"]
