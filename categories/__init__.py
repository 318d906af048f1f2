"""Category registry, scoring and selection."""

from .classifier import all_results_category, categorize, classify, select_categories
from .metrics import aggregate_metrics, calculate_category_metrics
from .registry import CATEGORIES, KEY_INSIGHTS_ID, get_category
from .scoring import HeuristicScorer, Scorer

__all__ = [
    "CATEGORIES",
    "KEY_INSIGHTS_ID",
    "HeuristicScorer",
    "Scorer",
    "aggregate_metrics",
    "all_results_category",
    "calculate_category_metrics",
    "categorize",
    "classify",
    "get_category",
    "select_categories",
]
