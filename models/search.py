from dataclasses import dataclass, field
from typing import Any

from tools.web.contracts import SearchResult

from .answer import LLMAnswer
from .category import CategorizedResult, CategoryMetrics


@dataclass
class SearchOutcome:
    """Everything one run of the search pipeline produced."""

    query: str
    results: list[SearchResult] = field(default_factory=list)
    categories: list[CategorizedResult] = field(default_factory=list)
    llm_response: LLMAnswer | None = None
    metrics: CategoryMetrics = field(default_factory=CategoryMetrics)
    failed_sources: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
