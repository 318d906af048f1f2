from dataclasses import dataclass, field
from typing import Any

from tools.web.contracts import SearchResult


@dataclass(frozen=True)
class Category:
    """One entry of the fixed category registry."""

    id: str
    name: str
    priority: int  # lower sorts first when weighted scores tie
    color: str
    keywords: tuple[str, ...] = ()
    is_special: bool = False
    icon: str = "folder"
    description: str = ""


@dataclass(frozen=True)
class SubScores:
    relevance: float
    credibility: float
    accuracy: float

    def all_at_least(self, threshold: float) -> bool:
        return min(self.relevance, self.credibility, self.accuracy) >= threshold

    def to_dict(self) -> dict[str, float]:
        return {
            "relevance": self.relevance,
            "credibility": self.credibility,
            "accuracy": self.accuracy,
        }


@dataclass(frozen=True)
class CategoryScore:
    """Per-call score record produced by the classifier."""

    category: Category
    scores: SubScores
    weighted_score: float

    @property
    def id(self) -> str:
        return self.category.id

    @property
    def name(self) -> str:
        return self.category.name


@dataclass(frozen=True)
class CategoryMetrics:
    relevance: float = 0.0
    accuracy: float = 0.0
    credibility: float = 0.0
    overall: float = 0.0

    @classmethod
    def zero(cls) -> "CategoryMetrics":
        return cls()

    def to_dict(self) -> dict[str, float]:
        return {
            "relevance": self.relevance,
            "accuracy": self.accuracy,
            "credibility": self.credibility,
            "overall": self.overall,
        }


@dataclass
class CategorizedResult:
    """A category with the results filed under it, as rendered by the UI."""

    id: str
    name: str
    content: list[SearchResult] = field(default_factory=list)
    metrics: CategoryMetrics = field(default_factory=CategoryMetrics)
    icon: str = "folder"
    color: str = "#4285F4"
    key_terms: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "content": [r.to_dict() for r in self.content],
            "metrics": self.metrics.to_dict(),
            "icon": self.icon,
            "color": self.color,
            "keyTerms": list(self.key_terms),
        }
