import httpx
import pytest
from dotenv import load_dotenv

from api.base_client import BaseAIClient
from models.completion import CompletionResponse, NormalizedError, TokenUsage
from tools.web.contracts import SearchResult

# Load environment variables from .env file for tests
load_dotenv()

PROVIDER_ENV_VARS = [
    "SERPER_API_KEY",
    "TOGETHER_API_KEY",
    "PERPLEXITY_API_KEY",
    "LINKEDIN_CLIENT_ID",
    "LINKEDIN_CLIENT_SECRET",
    "LINKEDIN_REDIRECT_URI",
    "TWITTER_API_KEY",
    "TWITTER_CLIENT_ID",
    "TWITTER_CLIENT_SECRET",
    "TWITTER_REDIRECT_URI",
    "FACEBOOK_APP_ID",
    "FACEBOOK_APP_SECRET",
    "REDDIT_CLIENT_ID",
    "REDDIT_CLIENT_SECRET",
    "OAUTH_RELAY_TARGET",
    "NEXT_PUBLIC_BASE_URL",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every provider credential so tests never reach a real API."""
    for name in PROVIDER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SEARCH_CACHE_TTL_SECONDS", "0")
    return monkeypatch


def make_result(title="Result", url="https://example.com/a", snippet="", source="Web", weight=1.0):
    return SearchResult(title=title, url=url, snippet=snippet, source=source, weight=weight)


class RecordingTransport:
    """Wraps a handler in httpx.MockTransport and records every request."""

    def __init__(self, handler):
        self.handler = handler
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


class FakeCompletionClient(BaseAIClient):
    """Offline completion client returning a fixed text or a fixed error."""

    def __init__(self, text: str = "", error: NormalizedError | None = None, provider: str = "together"):
        super().__init__("test-key", model_name="fake-model")
        self.provider_name = provider
        self.text = text
        self.error = error
        self.calls: list[tuple[str, dict]] = []

    def get_completion(self, prompt: str, **kwargs) -> CompletionResponse:
        self.calls.append((prompt, kwargs))
        if self.error is not None:
            return self._create_error_response("req_fake", self.error, 5, model=kwargs.get("model"))
        return CompletionResponse(
            request_id="req_fake",
            text=self.text,
            provider=self.provider_name,
            model=kwargs.get("model") or "fake-model",
            latency_ms=5,
            token_usage=TokenUsage(prompt_tokens=10, completion_tokens=5),
            finish_reason="stop",
        )


class FixedScorer:
    """Returns (relevance, credibility, accuracy) per category id."""

    def __init__(self, table, default=(0.0, 0.0, 0.0)):
        self.table = table
        self.default = default

    def _row(self, category):
        return self.table.get(category.id, self.default)

    def relevance(self, category, content, query):
        return self._row(category)[0]

    def credibility(self, category, sources):
        return self._row(category)[1]

    def accuracy(self, category, content, sources):
        return self._row(category)[2]
