"""Serper (Google Search) client.

One POST per query to https://google.serper.dev/search; organic results are
normalized to SearchResult. Site-restricted queries back the per-platform
fetchers and the custom-URL searches.
"""

import os

import httpx

from utils.errors import UpstreamAPIError
from utils.logger import get_logger, mask_secret

from .cache import SearchCache
from .contracts import SearchResult
from .http import request_json

logger = get_logger(__name__)

SERPER_SEARCH_URL = "https://google.serper.dev/search"
DEFAULT_NUM_RESULTS = 10


class SerperClient:
    """
    Google search through the Serper API.
    """

    provider_name = "serper"

    def __init__(
        self,
        api_key: str | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        cache: SearchCache | None = None,
        timeout_s: float = 10.0,
    ):
        """
        Args:
            api_key: Serper API key (defaults to SERPER_API_KEY env var)
            http_client: Optional shared client (tests inject a MockTransport here)
            cache: Optional TTL cache for raw results
            timeout_s: Per-request timeout when no client is injected
        """
        self.api_key = api_key or os.getenv("SERPER_API_KEY")
        self.http_client = http_client
        self.cache = cache
        self.timeout_s = timeout_s

    async def search(
        self,
        query: str,
        num: int = DEFAULT_NUM_RESULTS,
        site: str | None = None,
        source: str = "Web",
    ) -> list[SearchResult]:
        """
        Search Google via Serper.

        Args:
            query: Search query
            num: Number of organic results to request (1-100)
            site: Optional domain; the query becomes ``site:<domain> <query>``
            source: Source label stamped on every result

        Returns:
            List of SearchResult in provider order

        Raises:
            UpstreamAPIError: missing key, non-2xx or transport failure
        """
        if not self.api_key:
            raise UpstreamAPIError(
                self.provider_name, 500, None, "SERPER_API_KEY is not configured"
            )

        q = f"site:{site} {query}" if site else query

        if self.cache is not None:
            cached = self.cache.get(self.provider_name, q, num, source)
            if cached is not None:
                logger.debug(f"Serper cache hit for '{q[:50]}'")
                return cached

        payload = {"q": q, "gl": "us", "hl": "en", "num": min(max(num, 1), 100)}
        logger.info(
            "Serper search",
            extra={"extra_fields": {"query": q[:100], "num": payload["num"], "key": mask_secret(self.api_key)}},
        )

        data = await request_json(
            self.provider_name,
            "POST",
            SERPER_SEARCH_URL,
            client=self.http_client,
            timeout_s=self.timeout_s,
            headers={"X-API-KEY": self.api_key, "Content-Type": "application/json"},
            json=payload,
        )

        results = self._normalize(data if isinstance(data, dict) else {}, source)
        if self.cache is not None:
            self.cache.set(results, self.provider_name, q, num, source)
        return results

    @staticmethod
    def _normalize(data: dict, source: str) -> list[SearchResult]:
        results: list[SearchResult] = []
        for item in data.get("organic") or []:
            url = str(item.get("link") or "").strip()
            if not url:
                continue
            results.append(
                SearchResult(
                    title=str(item.get("title") or "").strip() or url,
                    url=url,
                    snippet=str(item.get("snippet") or "").strip(),
                    source=source,
                    metadata={"position": item.get("position")} if item.get("position") else {},
                )
            )
        return results
