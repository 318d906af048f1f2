from dataclasses import dataclass, field
from typing import Any

from tools.web.contracts import SearchResult


@dataclass
class LLMAnswer:
    """Completion text with resolved source links, plus the sources it cites."""

    answer: str
    sources: list[SearchResult] = field(default_factory=list)
    model: str = ""
    provider: str = ""
    markdown: bool = True
    synthesized: bool = False  # built locally, no completion call succeeded
    latency_ms: int = 0

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "answer": self.answer,
            "sources": [s.to_dict() for s in self.sources],
            "markdown": self.markdown,
            "model": self.model,
            "provider": self.provider,
        }
        if self.synthesized:
            payload["synthesized"] = True
        return payload


@dataclass(frozen=True)
class ChatMessage:
    role: str  # "user", "assistant" or "system"
    content: str
