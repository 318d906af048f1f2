"""Factory for search clients built from environment configuration."""

import os

import httpx

from config.config import Config
from utils.logger import get_logger

from .cache import SearchCache
from .duckduckgo_client import DuckDuckGoClient
from .rate_limiter import RateLimiter, limits_from_env
from .serper_client import SerperClient

logger = get_logger(__name__)

# Singleton instances (process-shared)
_cache_instance: SearchCache | None = None
_rate_limiter_instance: RateLimiter | None = None


def get_search_cache() -> SearchCache:
    """
    Process-wide provider cache.

    Environment variables:
        SEARCH_CACHE_TTL_SECONDS: Cache TTL in seconds (default: 600, 0 disables)
    """
    global _cache_instance
    if _cache_instance is None:
        _cache_instance = SearchCache(ttl_seconds=Config().SEARCH_CACHE_TTL_SECONDS)
    return _cache_instance


def get_rate_limiter() -> RateLimiter:
    """
    Process-wide per-source rate limiter.

    Environment variables:
        RATE_LIMIT_<SOURCE>: Requests per minute for one source (see rate_limiter.DEFAULT_LIMITS)
    """
    global _rate_limiter_instance
    if _rate_limiter_instance is None:
        limits = limits_from_env()
        _rate_limiter_instance = RateLimiter(limits)
        logger.debug("Rate limiter configured", extra={"extra_fields": {"limits": limits}})
    return _rate_limiter_instance


def create_serper_client_from_env(http_client: httpx.AsyncClient | None = None) -> SerperClient:
    """
    Environment variables:
        SERPER_API_KEY: Serper API key (checked per request, not here)
        SOURCE_FETCH_TIMEOUT_SECONDS: Per-request timeout (default: 10)
    """
    timeout = float(os.getenv("SOURCE_FETCH_TIMEOUT_SECONDS", "10"))
    if not os.getenv("SERPER_API_KEY"):
        logger.warning("SERPER_API_KEY not set; Serper-backed sources will fail")
    return SerperClient(http_client=http_client, cache=get_search_cache(), timeout_s=timeout)


def create_duckduckgo_client_from_env(http_client: httpx.AsyncClient | None = None) -> DuckDuckGoClient:
    timeout = float(os.getenv("SOURCE_FETCH_TIMEOUT_SECONDS", "10"))
    return DuckDuckGoClient(http_client=http_client, cache=get_search_cache(), timeout_s=timeout)
