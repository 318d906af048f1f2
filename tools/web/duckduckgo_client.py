"""DuckDuckGo Instant Answer client (no API key required)."""

import httpx

from utils.logger import get_logger

from .cache import SearchCache
from .contracts import SearchResult
from .http import request_json

logger = get_logger(__name__)

DUCKDUCKGO_URL = "https://api.duckduckgo.com/"
DEFAULT_LIMIT = 5


def _flatten_topics(topics: list) -> list[dict]:
    """RelatedTopics mixes plain entries with {"Name", "Topics": [...]} groups."""
    flat: list[dict] = []
    for topic in topics or []:
        if not isinstance(topic, dict):
            continue
        if "Topics" in topic:
            flat.extend(_flatten_topics(topic.get("Topics") or []))
        else:
            flat.append(topic)
    return flat


class DuckDuckGoClient:
    provider_name = "duckduckgo"

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient | None = None,
        cache: SearchCache | None = None,
        timeout_s: float = 10.0,
    ):
        self.http_client = http_client
        self.cache = cache
        self.timeout_s = timeout_s

    async def search(self, query: str, limit: int = DEFAULT_LIMIT) -> list[SearchResult]:
        """
        Query the Instant Answer API and keep related topics with a URL and text.

        Raises:
            UpstreamAPIError: non-2xx or transport failure
        """
        if self.cache is not None:
            cached = self.cache.get(self.provider_name, query, limit)
            if cached is not None:
                return cached

        data = await request_json(
            self.provider_name,
            "GET",
            DUCKDUCKGO_URL,
            client=self.http_client,
            timeout_s=self.timeout_s,
            params={"q": query, "format": "json", "no_html": 1},
        )
        topics = _flatten_topics((data or {}).get("RelatedTopics") if isinstance(data, dict) else [])

        results: list[SearchResult] = []
        for topic in topics:
            url = topic.get("FirstURL")
            text = topic.get("Text")
            if not url or not text:
                continue
            results.append(
                SearchResult(
                    title=text.split(" - ")[0],
                    url=url,
                    snippet=text,
                    source="DuckDuckGo",
                )
            )
            if len(results) >= limit:
                break

        logger.info(f"DuckDuckGo returned {len(results)} results for '{query[:50]}'")
        if self.cache is not None:
            self.cache.set(results, self.provider_name, query, limit)
        return results
