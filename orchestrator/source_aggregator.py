"""
SourceAggregator - concurrent fan-out of one query across search sources.

Each source (generic web, DuckDuckGo, a platform fetcher, or a custom domain)
runs as its own coroutine under a per-fetch timeout, after a per-source rate
limit check. Failures are logged and dropped; the caller gets whatever
succeeded plus the names that failed.
"""

import asyncio
import uuid
from collections.abc import Awaitable, Callable
from urllib.parse import urlparse

from config.config import SearchMode
from tools.web.contracts import AggregatedResults, SearchResult
from tools.web.duckduckgo_client import DuckDuckGoClient
from tools.web.factory import get_rate_limiter
from tools.web.rate_limiter import RateLimiter
from tools.web.serper_client import SerperClient
from tools.web.source_fetchers import SourceFetcher, is_platform
from utils.logger import get_logger

logger = get_logger(__name__)

WEB_SOURCE = "Web"
DUCKDUCKGO_SOURCE = "DuckDuckGo"
DEFAULT_SOURCES = (WEB_SOURCE,)
CUSTOM_LIMIT_KEY = "custom"

# "verified" mode keeps the generic web search on these domains
VERIFIED_DOMAINS = (
    "reuters.com",
    "bloomberg.com",
    "wsj.com",
    "ft.com",
    "cnbc.com",
    "forbes.com",
    "techcrunch.com",
    "crunchbase.com",
    "pitchbook.com",
    "sec.gov",
    "hbr.org",
    "mckinsey.com",
)


def custom_url_domain(url: str) -> str:
    """
    Domain a custom URL restricts searches to.

    Raises:
        ValueError: not an http(s) URL with a host
    """
    candidate = (url or "").strip()
    if candidate and "://" not in candidate:
        candidate = f"https://{candidate}"
    parsed = urlparse(candidate)
    if parsed.scheme not in ("http", "https") or not parsed.hostname or "." not in parsed.hostname:
        raise ValueError(f"Invalid URL format: {url}")
    host = parsed.hostname.lower()
    return host[4:] if host.startswith("www.") else host


def verified_query(query: str) -> str:
    sites = " OR ".join(f"site:{d}" for d in VERIFIED_DOMAINS)
    return f"{query} ({sites})"


class SourceAggregator:
    """
    Fans one query out to every requested source concurrently.

    Example usage:
        aggregator = SourceAggregator(serper, duckduckgo, fetcher)
        gathered = await aggregator.gather("AI chip startups", ["Web", "LinkedIn"])
        for result in gathered.results:
            print(result.source, result.url)
    """

    def __init__(
        self,
        serper: SerperClient,
        duckduckgo: DuckDuckGoClient,
        fetcher: SourceFetcher,
        default_timeout_s: float = 10.0,
        web_results: int = 10,
        rate_limiter: RateLimiter | None = None,
    ):
        """
        Args:
            serper: Serper client for web and custom-domain searches
            duckduckgo: DuckDuckGo client
            fetcher: Per-platform fetcher
            default_timeout_s: Per-fetch timeout in seconds
            web_results: Results requested from the generic web search
            rate_limiter: Per-source request limiter (defaults to the process-wide one)
        """
        self.serper = serper
        self.duckduckgo = duckduckgo
        self.fetcher = fetcher
        self.default_timeout_s = default_timeout_s
        self.web_results = web_results
        self.rate_limiter = rate_limiter or get_rate_limiter()

    def _fetch_for(
        self, source: str, query: str, mode: SearchMode
    ) -> Callable[[], Awaitable[list[SearchResult]]] | None:
        key = source.strip().lower()
        if key == WEB_SOURCE.lower():
            web_query = verified_query(query) if mode == SearchMode.VERIFIED else query
            return lambda: self.serper.search(web_query, num=self.web_results, source=WEB_SOURCE)
        if key == DUCKDUCKGO_SOURCE.lower():
            return lambda: self.duckduckgo.search(query)
        if is_platform(key):

            async def platform_fetch() -> list[SearchResult]:
                fetched = await self.fetcher.fetch(query, key)
                return fetched.content

            return platform_fetch
        return None

    async def _safe_fetch(
        self,
        label: str,
        limit_key: str,
        fetch: Callable[[], Awaitable[list[SearchResult]]],
        timeout_s: float,
    ) -> list[SearchResult] | None:
        """
        Run one fetch under the timeout; None stands for a failed source.
        """
        if not self.rate_limiter.try_acquire(limit_key):
            logger.warning(
                f"Source {label} skipped: rate limit reached",
                extra={"extra_fields": {"source": label, "limit_key": limit_key}},
            )
            return None
        try:
            return await asyncio.wait_for(fetch(), timeout=timeout_s)
        except asyncio.TimeoutError:
            logger.warning(
                f"Source {label} timed out",
                extra={"extra_fields": {"source": label, "timeout_s": timeout_s}},
            )
            return None
        except Exception as e:
            logger.warning(
                f"Source {label} failed: {e}",
                extra={"extra_fields": {"source": label, "error_type": type(e).__name__}},
            )
            return None

    async def gather(
        self,
        query: str,
        sources: list[str] | None = None,
        custom_urls: list[str] | None = None,
        mode: SearchMode = SearchMode.VERIFIED,
        timeout_s: float | None = None,
    ) -> AggregatedResults:
        """
        Fetch every source concurrently and merge the survivors.

        Args:
            query: Search query
            sources: Source names ("Web", "DuckDuckGo", platform names)
            custom_urls: URLs whose domains get a site-restricted search each
            mode: VERIFIED restricts the generic web search to curated domains
            timeout_s: Per-fetch timeout (defaults to self.default_timeout_s)

        Returns:
            AggregatedResults with URL-deduplicated results in source order

        Raises:
            ValueError: a custom URL is malformed
        """
        timeout = timeout_s or self.default_timeout_s
        group_id = str(uuid.uuid4())
        requested = list(dict.fromkeys(s for s in (sources or DEFAULT_SOURCES) if s and s.strip()))

        labels: list[str] = []
        limit_keys: list[str] = []
        fetches: list[Callable[[], Awaitable[list[SearchResult]]]] = []
        failed: list[str] = []

        for source in requested:
            fetch = self._fetch_for(source, query, mode)
            if fetch is None:
                logger.warning(f"Unknown source '{source}' skipped")
                failed.append(source)
                continue
            labels.append(source)
            limit_keys.append(source.strip().lower())
            fetches.append(fetch)

        for domain in dict.fromkeys(custom_url_domain(u) for u in custom_urls or []):
            labels.append(domain)
            limit_keys.append(CUSTOM_LIMIT_KEY)
            fetches.append(
                lambda d=domain: self.serper.search(query, num=self.web_results, site=d, source=d)
            )

        logger.info(
            f"Fetching {len(fetches)} sources",
            extra={
                "extra_fields": {
                    "request_group_id": group_id,
                    "sources": labels,
                    "mode": mode.value,
                    "timeout_s": timeout,
                }
            },
        )

        # cancelling this task cancels every child fetch
        outcomes = await asyncio.gather(
            *(
                self._safe_fetch(label, key, fetch, timeout)
                for label, key, fetch in zip(labels, limit_keys, fetches)
            )
        )

        results: list[SearchResult] = []
        seen: set[str] = set()
        for label, outcome in zip(labels, outcomes):
            if outcome is None:
                failed.append(label)
                continue
            for result in outcome:
                key = result.url.rstrip("/").lower()
                if key in seen:
                    continue
                seen.add(key)
                results.append(result)

        logger.info(
            f"Fetch complete: {len(results)} results, {len(failed)} failed sources",
            extra={
                "extra_fields": {
                    "request_group_id": group_id,
                    "result_count": len(results),
                    "failed_sources": failed,
                }
            },
        )
        return AggregatedResults(results=results, failed_sources=failed, queried_sources=labels)

