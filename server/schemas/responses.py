"""Pydantic response models (DTOs) for FastAPI endpoints."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class SearchResultDTO(BaseModel):
    title: str
    url: str
    snippet: str
    source: str

    @classmethod
    def from_result(cls, r):
        return cls(title=r.title, url=r.url, snippet=r.snippet, source=r.source)


class MetricsDTO(BaseModel):
    relevance: float
    accuracy: float
    credibility: float
    overall: float

    @classmethod
    def from_metrics(cls, m):
        return cls(relevance=m.relevance, accuracy=m.accuracy, credibility=m.credibility, overall=m.overall)


class CategoryDTO(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    content: list[SearchResultDTO]
    metrics: MetricsDTO
    icon: str
    color: str
    key_terms: list[str] = Field(default_factory=list, alias="keyTerms")

    @classmethod
    def from_categorized(cls, c):
        return cls(
            id=c.id,
            name=c.name,
            content=[SearchResultDTO.from_result(r) for r in c.content],
            metrics=MetricsDTO.from_metrics(c.metrics),
            icon=c.icon,
            color=c.color,
            key_terms=list(c.key_terms),
        )


class LLMAnswerDTO(BaseModel):
    answer: str
    sources: list[SearchResultDTO]
    markdown: bool = True
    model: str = ""
    provider: str = ""
    synthesized: bool = False

    @classmethod
    def from_answer(cls, a):
        return cls(
            answer=a.answer,
            sources=[SearchResultDTO.from_result(s) for s in a.sources],
            markdown=a.markdown,
            model=a.model,
            provider=a.provider,
            synthesized=a.synthesized,
        )


class SearchResponseDTO(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    results: list[SearchResultDTO]
    categories: list[CategoryDTO]
    llm_response: Optional[LLMAnswerDTO] = Field(None, alias="llmResponse")
    metrics: MetricsDTO
    failed_sources: list[str] = Field(default_factory=list, alias="failedSources")
    metadata: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_outcome(cls, outcome):
        """Convert SearchOutcome to DTO."""
        return cls(
            results=[SearchResultDTO.from_result(r) for r in outcome.results],
            categories=[CategoryDTO.from_categorized(c) for c in outcome.categories],
            llm_response=LLMAnswerDTO.from_answer(outcome.llm_response) if outcome.llm_response else None,
            metrics=MetricsDTO.from_metrics(outcome.metrics),
            failed_sources=list(outcome.failed_sources),
            metadata=dict(outcome.metadata),
        )


class ChatResponseDTO(BaseModel):
    content: str
    model: str
    provider: str

    @classmethod
    def from_answer(cls, a):
        return cls(content=a.answer, model=a.model, provider=a.provider)


class ModelInfoDTO(BaseModel):
    id: str
    name: str
    description: str
    provider: str


class ModelListDTO(BaseModel):
    models: list[ModelInfoDTO]
    default: str


class AuthStatusDTO(BaseModel):
    authenticated: bool
    network: str


class LogoutResponseDTO(BaseModel):
    success: bool
    message: str


class ValidateUrlResponseDTO(BaseModel):
    valid: bool


class HealthResponseDTO(BaseModel):
    status: str
    timestamp: str
    version: str
    missing_keys: list[str] = Field(default_factory=list)
