"""Display metrics (0-1 scale) attached to each categorized bundle."""

from collections.abc import Sequence

from models.category import CategorizedResult, CategoryMetrics
from tools.web.contracts import SearchResult

BASELINE = {"relevance": 0.8, "accuracy": 0.75, "credibility": 0.7}

# (name keywords, overrides); applied in order, later rules win on overlap
NAME_NUDGES: tuple[tuple[tuple[str, ...], dict[str, float]], ...] = (
    (("financial", "market", "investment"), {"accuracy": 0.85, "credibility": 0.9}),
    (("technology", "tech"), {"relevance": 0.85, "accuracy": 0.8}),
    (("news", "recent"), {"relevance": 0.9, "credibility": 0.75}),
    (("academic", "research"), {"accuracy": 0.9, "credibility": 0.85}),
)


def overall_score(relevance: float, accuracy: float, credibility: float) -> float:
    return round(relevance * 0.4 + accuracy * 0.35 + credibility * 0.25, 2)


def calculate_category_metrics(
    results: Sequence[SearchResult] | None, category_name: str, query: str = ""
) -> CategoryMetrics:
    """
    Baseline metrics nudged by words in the category name.

    Empty or missing results give all-zero metrics.
    """
    if not results:
        return CategoryMetrics.zero()

    values = dict(BASELINE)
    name = (category_name or "").lower()
    for words, overrides in NAME_NUDGES:
        if any(word in name for word in words):
            values.update(overrides)

    return CategoryMetrics(
        relevance=values["relevance"],
        accuracy=values["accuracy"],
        credibility=values["credibility"],
        overall=overall_score(values["relevance"], values["accuracy"], values["credibility"]),
    )


def aggregate_metrics(categories: Sequence[CategorizedResult]) -> CategoryMetrics:
    """Mean of the per-category metrics; all zero when there are none."""
    if not categories:
        return CategoryMetrics.zero()
    n = len(categories)

    def mean(attr: str) -> float:
        return round(sum(getattr(c.metrics, attr) for c in categories) / n, 2)

    return CategoryMetrics(
        relevance=mean("relevance"),
        accuracy=mean("accuracy"),
        credibility=mean("credibility"),
        overall=mean("overall"),
    )
