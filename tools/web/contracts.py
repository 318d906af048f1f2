"""Data contracts for the web search module."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class SearchResult:
    """Result from a search provider or source fetcher."""

    title: str
    url: str
    snippet: str = ""
    source: str = "Web"
    weight: float = 1.0  # platform priority weight, 1.0 for plain web results
    metadata: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def text(self) -> str:
        return f"{self.title} {self.snippet}".strip()

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "url": self.url,
            "snippet": self.snippet,
            "source": self.source,
        }


@dataclass(frozen=True)
class PlatformResults:
    """Weighted, de-duplicated results from one platform fetch."""

    platform: str
    content: list[SearchResult] = field(default_factory=list)
    urls: list[str] = field(default_factory=list)
    confidence: float = 0.0


@dataclass
class AggregatedResults:
    """Fan-in of every source fetched for one search."""

    results: list[SearchResult] = field(default_factory=list)
    failed_sources: list[str] = field(default_factory=list)
    queried_sources: list[str] = field(default_factory=list)
