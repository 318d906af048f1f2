"""Sub-score heuristics for category classification.

Every score is on a 0-100 scale. The classifier only relies on the Scorer
protocol, so a model-backed scorer can replace HeuristicScorer without
touching selection logic.
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Iterable, Sequence
from functools import lru_cache
from typing import Protocol
from urllib.parse import urlparse

from models.category import Category
from tools.web.contracts import SearchResult

from .registry import CATEGORIES

RELEVANCE_SATURATION = 4  # matched keywords needed for the full keyword share
QUERY_MATCH_BONUS = 20.0
NEUTRAL_ACCURACY = 75.0
DEFAULT_REPUTATION = 65.0

DOMAIN_REPUTATION: dict[str, float] = {
    "sec.gov": 100.0,
    "reuters.com": 95.0,
    "bloomberg.com": 95.0,
    "wsj.com": 95.0,
    "ft.com": 95.0,
    "economist.com": 92.0,
    "nytimes.com": 90.0,
    "cnbc.com": 88.0,
    "forbes.com": 85.0,
    "pitchbook.com": 88.0,
    "crunchbase.com": 85.0,
    "techcrunch.com": 82.0,
    "hbr.org": 90.0,
    "mckinsey.com": 90.0,
    "statista.com": 85.0,
    "wikipedia.org": 75.0,
    "linkedin.com": 72.0,
    "substack.com": 65.0,
    "medium.com": 62.0,
    "twitter.com": 58.0,
    "x.com": 58.0,
    "reddit.com": 55.0,
    "duckduckgo.com": 60.0,
}

_TOPICAL = tuple(c for c in CATEGORIES if not c.is_special)

_SUFFIX_REPUTATION = {".gov": 95.0, ".edu": 90.0}

_FIGURE = re.compile(r"(?<![\w.])[$€£]?\d[\d,]*(?:\.\d+)?\s?(?:%|[kmb]n?\b|billion|million|thousand)?", re.I)


class Scorer(Protocol):
    def relevance(self, category: Category, content: str, query: str) -> float: ...

    def credibility(self, category: Category, sources: Sequence[SearchResult]) -> float: ...

    def accuracy(self, category: Category, content: str, sources: Sequence[SearchResult]) -> float: ...


@lru_cache(maxsize=512)
def _keyword_pattern(keyword: str) -> re.Pattern:
    return re.compile(rf"\b{re.escape(keyword.lower())}\b")


def keyword_hits(keywords: Iterable[str], text: str) -> list[str]:
    """Keywords that occur in text as whole words, in keyword order."""
    lowered = (text or "").lower()
    return [k for k in keywords if _keyword_pattern(k).search(lowered)]


def domain_of(url: str) -> str:
    host = (urlparse(url or "").hostname or "").lower()
    return host[4:] if host.startswith("www.") else host


def domain_reputation(url: str) -> float:
    host = domain_of(url)
    if not host:
        return DEFAULT_REPUTATION
    for domain, score in DOMAIN_REPUTATION.items():
        if host == domain or host.endswith("." + domain):
            return score
    for suffix, score in _SUFFIX_REPUTATION.items():
        if host.endswith(suffix):
            return score
    return DEFAULT_REPUTATION


def extract_figures(text: str) -> set[str]:
    """Numeric figures normalized for comparison ("$1,200M" -> "1200m")."""
    figures = set()
    for match in _FIGURE.finditer(text or ""):
        raw = match.group(0).strip().lower()
        normalized = re.sub(r"[\s,$€£]", "", raw)
        # bare small integers (list markers, days) carry no signal
        if normalized.isdigit() and len(normalized) < 3:
            continue
        figures.add(normalized)
    return figures


def _clamp(value: float) -> float:
    return round(max(0.0, min(100.0, value)), 2)


class HeuristicScorer:
    """
    Keyword, reputation and cross-source agreement heuristics.
    """

    def relevance(self, category: Category, content: str, query: str) -> float:
        if not (content or "").strip():
            return 0.0
        if category.is_special:
            # insights are as relevant as the strongest topical match
            return _clamp(max((self._topical(c, content, query) for c in _TOPICAL), default=0.0))
        return self._topical(category, content, query)

    @staticmethod
    def _topical(category: Category, content: str, query: str) -> float:
        hits = keyword_hits(category.keywords, f"{content} {query}")
        share = min(len(hits), RELEVANCE_SATURATION) / RELEVANCE_SATURATION
        score = share * (100.0 - QUERY_MATCH_BONUS)
        if keyword_hits(category.keywords, query):
            score += QUERY_MATCH_BONUS
        return _clamp(score)

    def credibility(self, category: Category, sources: Sequence[SearchResult]) -> float:
        if not sources:
            return 0.0
        reputations = [domain_reputation(s.url) for s in sources]
        mean = sum(reputations) / len(reputations)
        distinct = len({domain_of(s.url) for s in sources if domain_of(s.url)})
        diversity_bonus = min(15.0, 3.0 * max(distinct - 1, 0))
        return _clamp(mean + diversity_bonus)

    def accuracy(self, category: Category, content: str, sources: Sequence[SearchResult]) -> float:
        if not sources:
            return 0.0
        per_source = [extract_figures(s.text) for s in sources]
        counts = Counter(f for figures in per_source for f in figures)
        if not counts:
            return NEUTRAL_ACCURACY
        corroborated = sum(1 for n in counts.values() if n >= 2)
        return _clamp(65.0 + 35.0 * corroborated / len(counts) + (10.0 if corroborated else 0.0))

