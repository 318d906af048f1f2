"""
Models package for normalized responses and category bundles.
"""

from .answer import LLMAnswer
from .category import Category, CategorizedResult, CategoryMetrics, CategoryScore, SubScores
from .completion import CompletionResponse, NormalizedError, TokenUsage
from .search import SearchOutcome

__all__ = [
    "Category",
    "CategorizedResult",
    "CategoryMetrics",
    "CategoryScore",
    "CompletionResponse",
    "LLMAnswer",
    "NormalizedError",
    "SearchOutcome",
    "SubScores",
    "TokenUsage",
]
