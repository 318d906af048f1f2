"""Category selection over scored content.

A category qualifies when relevance, credibility and accuracy all reach the
threshold (70, relaxed to 65 when fewer than three categories qualify). Key
Insights leads when it qualifies; up to five other categories follow by
weighted score.
"""

from collections.abc import Sequence

from models.category import Category, CategorizedResult, CategoryScore, SubScores
from tools.web.contracts import SearchResult
from utils.logger import get_logger

from .metrics import calculate_category_metrics
from .registry import ALL_RESULTS_ID, CATEGORIES
from .scoring import HeuristicScorer, Scorer, keyword_hits

logger = get_logger(__name__)

THRESHOLD = 70.0
FALLBACK_THRESHOLD = 65.0
MIN_QUALIFYING = 3
MAX_OTHER_CATEGORIES = 5
KEY_INSIGHTS_RESULTS = 5
MAX_KEY_TERMS = 5


def weighted_score(scores: SubScores) -> float:
    return (scores.relevance * 2.0 + scores.credibility + scores.accuracy) / 4.0


def score_categories(
    content: str,
    query: str,
    sources: Sequence[SearchResult],
    scorer: Scorer | None = None,
    categories: Sequence[Category] = CATEGORIES,
) -> list[CategoryScore]:
    scorer = scorer or HeuristicScorer()
    scored = []
    for category in categories:
        sub = SubScores(
            relevance=float(scorer.relevance(category, content, query)),
            credibility=float(scorer.credibility(category, sources)),
            accuracy=float(scorer.accuracy(category, content, sources)),
        )
        scored.append(CategoryScore(category=category, scores=sub, weighted_score=weighted_score(sub)))
    return scored


def select_categories(scored: Sequence[CategoryScore]) -> list[CategoryScore]:
    """Apply the threshold filter and the Key-Insights-first ordering."""
    passing = [s for s in scored if s.scores.all_at_least(THRESHOLD)]
    if len(passing) < MIN_QUALIFYING:
        passing = [s for s in scored if s.scores.all_at_least(FALLBACK_THRESHOLD)]

    special = [s for s in passing if s.category.is_special]
    others = sorted(
        (s for s in passing if not s.category.is_special),
        key=lambda s: (-s.weighted_score, s.category.priority),
    )
    return special[:1] + others[:MAX_OTHER_CATEGORIES]


def classify(
    content: str | None,
    query: str,
    sources: Sequence[SearchResult] | None,
    scorer: Scorer | None = None,
) -> list[CategoryScore]:
    """
    Score every registry category and return the selected ones in display order.

    Args:
        content: Text to classify; derived from the sources when omitted
        query: User query
        sources: Results the content came from
        scorer: Sub-score provider (defaults to HeuristicScorer)

    Returns:
        At most six CategoryScores; empty when there is nothing to classify
    """
    sources = list(sources or [])
    if content is None:
        content = "\n".join(s.text for s in sources)
    if not sources and not content.strip():
        return []

    selected = select_categories(score_categories(content, query, sources, scorer))
    logger.debug(
        "Categories selected",
        extra={
            "extra_fields": {
                "selected": {s.id: s.scores.to_dict() for s in selected},
                "sources": len(sources),
            }
        },
    )
    return selected


def _key_terms(category: Category, results: Sequence[SearchResult]) -> list[str]:
    text = " ".join(r.text for r in results)
    hits = keyword_hits(category.keywords, text)
    return (hits or list(category.keywords))[:MAX_KEY_TERMS]


def _results_for(category: Category, results: Sequence[SearchResult]) -> list[SearchResult]:
    if category.is_special:
        # sorted() is stable, so equal weights keep provider order
        return sorted(results, key=lambda r: r.weight, reverse=True)[:KEY_INSIGHTS_RESULTS]
    return [r for r in results if keyword_hits(category.keywords, r.text)]


def categorize(
    results: Sequence[SearchResult] | None,
    query: str,
    scorer: Scorer | None = None,
) -> list[CategorizedResult]:
    """
    Classify results and file them under the selected categories.

    Categories that end up with no matching results are dropped; order and
    the six-category cap come from classify().
    """
    results = list(results or [])
    if not results:
        return []

    bundles = []
    for score in classify(None, query, results, scorer):
        category = score.category
        content = _results_for(category, results)
        if not content:
            continue
        bundles.append(
            CategorizedResult(
                id=category.id,
                name=category.name,
                content=content,
                metrics=calculate_category_metrics(content, category.name, query),
                icon=category.icon,
                color=category.color,
                key_terms=_key_terms(category, content),
            )
        )
    return bundles


def all_results_category(results: Sequence[SearchResult], query: str = "") -> CategorizedResult:
    """Pseudo-category used when nothing qualified."""
    results = list(results)
    return CategorizedResult(
        id=ALL_RESULTS_ID,
        name="All Results",
        content=results,
        metrics=calculate_category_metrics(results, "All Results", query),
        icon="search",
        color="#4285F4",
        key_terms=["all", "results", "search"],
    )
