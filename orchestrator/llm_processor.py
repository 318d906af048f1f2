"""
LLMProcessor - turns a query plus search results into a cited markdown answer.

The prompt numbers every result as [Source N]; after the completion returns,
citations are rewritten into markdown links to the matching source URL.
Follow-up chat turns go through the same model resolution and completion path.
"""

import asyncio

from api.base_client import BaseAIClient
from api.perplexity_client import PerplexityClient
from api.together_client import TogetherClient
from config.config import Config
from models.answer import ChatMessage, LLMAnswer
from models.completion import CompletionResponse
from orchestrator.model_registry import ModelRegistry, ModelSpec, get_model_registry
from tools.web.citations import fix_source_links
from tools.web.contracts import SearchResult
from tools.web.factory import get_rate_limiter
from tools.web.prompt_builder import build_chat_prompt, build_prompt
from tools.web.rate_limiter import RateLimiter
from utils.errors import InvalidRequestError, UpstreamAPIError
from utils.logger import get_logger

logger = get_logger(__name__)

CLIENT_CLASSES: dict[str, type[BaseAIClient]] = {
    "together": TogetherClient,
    "perplexity": PerplexityClient,
}


class LLMProcessor:
    """
    Runs one completion per call against the model picked from the registry.

    Example usage:
        processor = LLMProcessor()
        answer = await processor.process("Who leads the EV market?", results, model="gemma")
        print(answer.answer)
    """

    def __init__(
        self,
        registry: ModelRegistry | None = None,
        config: Config | None = None,
        clients: dict[str, BaseAIClient] | None = None,
        timeout_s: float | None = None,
        rate_limiter: RateLimiter | None = None,
    ):
        """
        Args:
            registry: Model catalog (defaults to config/models.yaml)
            config: Source of provider API keys
            clients: Pre-built clients keyed by provider, used instead of building from keys
            timeout_s: Completion timeout in seconds (defaults to LLM_TIMEOUT_SECONDS)
            rate_limiter: Per-provider request limiter (defaults to the process-wide one)
        """
        self.registry = registry or get_model_registry()
        self.config = config or Config()
        self._clients: dict[str, BaseAIClient] = dict(clients or {})
        self.timeout_s = timeout_s or self.config.LLM_TIMEOUT_SECONDS
        self.rate_limiter = rate_limiter or get_rate_limiter()

    def resolve_model(self, model: str | None) -> ModelSpec:
        """
        Raises:
            InvalidRequestError: model is neither a registry id nor a known alias
        """
        spec = self.registry.get(model)
        if spec is None:
            raise InvalidRequestError(f"Unsupported model: {model}", field="model")
        return spec

    def _client_for(self, spec: ModelSpec) -> BaseAIClient:
        client = self._clients.get(spec.provider)
        if client is not None:
            return client
        api_key = self.config.api_key_for(spec.provider)
        if not api_key:
            raise UpstreamAPIError(
                spec.provider, 500, None, f"{spec.provider.upper()}_API_KEY is not configured"
            )
        client = CLIENT_CLASSES[spec.provider](api_key=api_key, model_name=spec.api_model)
        self._clients[spec.provider] = client
        return client

    async def _complete(self, spec: ModelSpec, prompt: str, log_fields: dict) -> CompletionResponse:
        """
        Run one completion; error responses and timeouts raise.

        Raises:
            UpstreamAPIError: provider over its rate limit, missing key, error response or timeout
        """
        if not self.rate_limiter.try_acquire(spec.provider):
            logger.warning(
                f"Rate limit reached for {spec.provider}",
                extra={"extra_fields": {"model": spec.id, "provider": spec.provider}},
            )
            raise UpstreamAPIError(spec.provider, 429, None, f"{spec.provider} rate limit exceeded")

        client = self._client_for(spec)
        params = self.registry.generation_defaults()
        params.update(model=spec.api_model, stop=spec.stop)

        logger.info(
            "Processing with LLM",
            extra={
                "extra_fields": {
                    "model": spec.id,
                    "provider": spec.provider,
                    "prompt_chars": len(prompt),
                    **log_fields,
                }
            },
        )

        try:
            response = await asyncio.wait_for(
                asyncio.to_thread(client.get_completion, prompt, **params),
                timeout=self.timeout_s,
            )
        except asyncio.TimeoutError as exc:
            logger.warning(
                f"LLM call timed out after {self.timeout_s}s",
                extra={"extra_fields": {"model": spec.id, "provider": spec.provider}},
            )
            raise UpstreamAPIError(
                spec.provider, 504, None, f"{spec.provider} completion timed out"
            ) from exc

        if response.is_error:
            error = response.error
            raise UpstreamAPIError(
                spec.provider,
                error.status_code or 500,
                error.details.get("body"),
                f"{spec.provider} API error: {error.message}",
            )
        return response

    async def process(
        self, query: str, search_results: list[SearchResult] | None, model: str | None = None
    ) -> LLMAnswer:
        """
        Answer the query from the search results.

        Args:
            query: Non-empty user query
            search_results: Results to cite; an empty list still produces a prompt
            model: Registry id or legacy alias (None means the default model)

        Returns:
            LLMAnswer with resolved [Source N](url) links

        Raises:
            InvalidRequestError: blank query or unknown model
            UpstreamAPIError: completion endpoint failed, timed out or is rate limited
        """
        if not isinstance(query, str) or not query.strip():
            raise InvalidRequestError("Query is required", field="query")
        spec = self.resolve_model(model)
        results = list(search_results or [])

        prompt = build_prompt(query.strip(), results)
        if spec.provider == "together":
            prompt = spec.format_prompt(prompt)

        response = await self._complete(spec, prompt, {"source_count": len(results)})
        return LLMAnswer(
            answer=fix_source_links(response.text.strip(), results),
            sources=results,
            model=spec.id,
            provider=spec.provider,
            latency_ms=response.latency_ms,
        )

    async def chat(self, messages: list[ChatMessage] | None, model: str | None = None) -> LLMAnswer:
        """
        Continue a conversation from its message history.

        Raises:
            InvalidRequestError: no usable messages or unknown model
            UpstreamAPIError: completion endpoint failed, timed out or is rate limited
        """
        turns = [m for m in messages or [] if m.content and m.content.strip()]
        if not turns:
            raise InvalidRequestError("Messages array is required", field="messages")
        spec = self.resolve_model(model)

        prompt = build_chat_prompt(turns)
        if spec.provider == "together":
            prompt = spec.format_prompt(prompt)

        response = await self._complete(spec, prompt, {"turns": len(turns)})
        return LLMAnswer(
            answer=response.text.strip(),
            model=spec.id,
            provider=spec.provider,
            latency_ms=response.latency_ms,
        )
