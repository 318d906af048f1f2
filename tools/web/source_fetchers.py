"""Per-platform fetchers weighted by a fixed content-priority table.

Each platform searches its primary and secondary content categories at the
same time (site-restricted Serper queries), stamps every hit with the weight of
the category that found it, and folds the hits into one PlatformResults.
"""

import asyncio
from dataclasses import dataclass
from urllib.parse import urlparse

from utils.logger import get_logger

from .contracts import PlatformResults, SearchResult
from .serper_client import SerperClient

logger = get_logger(__name__)


@dataclass(frozen=True)
class PlatformProfile:
    name: str
    domain: str
    primary: dict[str, float]
    secondary: dict[str, float]

    @property
    def categories(self) -> dict[str, float]:
        return {**self.primary, **self.secondary}


PLATFORMS: dict[str, PlatformProfile] = {
    "linkedin": PlatformProfile(
        name="LinkedIn",
        domain="linkedin.com",
        primary={"VC_INSIGHTS": 1.0, "MARKET_ANALYSIS": 0.9, "FOUNDER_POSTS": 0.8},
        secondary={"COMPANY_UPDATES": 0.7, "INDUSTRY_NEWS": 0.6},
    ),
    "twitter": PlatformProfile(
        name="Twitter",
        domain="twitter.com",
        primary={"VC_THREADS": 1.0, "FOUNDER_INSIGHTS": 0.9, "MARKET_UPDATES": 0.8},
        secondary={"TECH_DISCUSSIONS": 0.7, "INDUSTRY_TRENDS": 0.6},
    ),
    "reddit": PlatformProfile(
        name="Reddit",
        domain="reddit.com",
        primary={"STARTUP_DISCUSSIONS": 1.0, "VC_SUBREDDITS": 0.9, "FOUNDER_STORIES": 0.8},
        secondary={"TECH_DISCUSSIONS": 0.7, "MARKET_ANALYSIS": 0.6},
    ),
    "substack": PlatformProfile(
        name="Substack",
        domain="substack.com",
        primary={"VC_NEWSLETTERS": 1.0, "MARKET_RESEARCH": 0.9, "INDUSTRY_ANALYSIS": 0.8},
        secondary={"FOUNDER_INTERVIEWS": 0.7, "TECH_TRENDS": 0.6},
    ),
    "medium": PlatformProfile(
        name="Medium",
        domain="medium.com",
        primary={"VC_PUBLICATIONS": 1.0, "STARTUP_ADVICE": 0.9, "MARKET_INSIGHTS": 0.8},
        secondary={"TECH_DEEP_DIVES": 0.7, "FOUNDER_LESSONS": 0.6},
    ),
    "crunchbase": PlatformProfile(
        name="Crunchbase",
        domain="crunchbase.com",
        primary={"COMPANY_DATA": 1.0, "FUNDING_ROUNDS": 0.9, "INVESTOR_PROFILES": 0.8},
        secondary={"MARKET_SIGNALS": 0.7, "INDUSTRY_METRICS": 0.6},
    ),
    "pitchbook": PlatformProfile(
        name="Pitchbook",
        domain="pitchbook.com",
        primary={"DEAL_DATA": 1.0, "MARKET_RESEARCH": 0.9, "INVESTOR_ANALYSIS": 0.8},
        secondary={"INDUSTRY_REPORTS": 0.7, "COMPANY_PROFILES": 0.6},
    ),
}

# abbreviations that read badly when lower-cased into search terms
_TERM_OVERRIDES = {"VC": "venture capital"}


def category_terms(category: str) -> str:
    """VC_INSIGHTS -> 'venture capital insights'."""
    words = [_TERM_OVERRIDES.get(part, part.lower()) for part in category.split("_")]
    return " ".join(words)


def get_platform(name: str) -> PlatformProfile:
    key = (name or "").strip().lower()
    if key in ("x", "x.com"):
        key = "twitter"
    profile = PLATFORMS.get(key)
    if profile is None:
        raise ValueError(f"Unknown platform '{name}'. Supported: {', '.join(sorted(PLATFORMS))}")
    return profile


def is_platform(name: str) -> bool:
    try:
        get_platform(name)
        return True
    except ValueError:
        return False


def _is_valid_url(url: str) -> bool:
    parsed = urlparse(url or "")
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def combine_results(batches: list[list[SearchResult]]) -> list[SearchResult]:
    """Merge category batches, keeping the highest-weight copy of each URL."""
    best: dict[str, SearchResult] = {}
    order: list[str] = []
    for batch in batches:
        for result in batch:
            key = result.url.rstrip("/").lower()
            if key not in best:
                order.append(key)
                best[key] = result
            elif result.weight > best[key].weight:
                best[key] = result
    merged = [best[k] for k in order]
    # stable: equal weights keep discovery order
    return sorted(merged, key=lambda r: r.weight, reverse=True)


def calculate_confidence(results: list[SearchResult], succeeded: int, attempted: int) -> float:
    if not results or attempted == 0:
        return 0.0
    mean_weight = sum(r.weight for r in results) / len(results)
    return round(mean_weight * (succeeded / attempted), 3)


class SourceFetcher:
    """
    Fetches one platform's content through site-restricted searches.
    """

    def __init__(self, serper: SerperClient, per_category_results: int = 5):
        self.serper = serper
        self.per_category_results = per_category_results

    async def _search_category(
        self, query: str, profile: PlatformProfile, category: str, weight: float
    ) -> list[SearchResult]:
        hits = await self.serper.search(
            f"{query} {category_terms(category)}",
            num=self.per_category_results,
            site=profile.domain,
            source=profile.name,
        )
        return [
            SearchResult(
                title=h.title,
                url=h.url,
                snippet=h.snippet,
                source=profile.name,
                weight=weight,
                metadata={**h.metadata, "platform": profile.name, "content_category": category},
            )
            for h in hits
        ]

    async def fetch(self, query: str, platform: str) -> PlatformResults:
        """
        Search a platform's primary and secondary content categories concurrently.

        Individual category searches that fail are logged and skipped; the
        fetch only raises when every category search failed.

        Raises:
            ValueError: unknown platform
        """
        profile = get_platform(platform)
        categories = list(profile.categories.items())

        outcomes = await asyncio.gather(
            *(self._search_category(query, profile, cat, weight) for cat, weight in categories),
            return_exceptions=True,
        )

        batches: list[list[SearchResult]] = []
        errors: list[BaseException] = []
        for (category, _), outcome in zip(categories, outcomes):
            if isinstance(outcome, BaseException):
                if isinstance(outcome, asyncio.CancelledError):
                    raise outcome
                errors.append(outcome)
                logger.warning(
                    f"{profile.name} {category} search failed: {outcome}",
                    extra={"extra_fields": {"platform": profile.name, "category": category}},
                )
                continue
            batches.append(outcome)

        if errors and not batches:
            raise errors[0]

        content = combine_results(batches)
        urls = [r.url for r in content if _is_valid_url(r.url)]
        confidence = calculate_confidence(content, len(batches), len(categories))

        logger.info(
            f"{profile.name} fetch complete",
            extra={
                "extra_fields": {
                    "platform": profile.name,
                    "results": len(content),
                    "confidence": confidence,
                    "failed_categories": len(errors),
                }
            },
        )
        return PlatformResults(platform=profile.name, content=content, urls=urls, confidence=confidence)
