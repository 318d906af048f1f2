"""
SearchOrchestrator - Core business logic layer for the search service.

Key guarantees:
- API/CLI layers stay thin (no provider imports there)
- Input is validated before any provider call
- A failing source or LLM call never fails a combined search
"""

import time
import uuid
from dataclasses import dataclass

from categories import aggregate_metrics, all_results_category, categorize
from categories.scoring import Scorer
from config.config import Config, SearchMode
from models.answer import ChatMessage, LLMAnswer
from models.search import SearchOutcome
from orchestrator.fallback_synthesizer import synthesize_answer
from orchestrator.llm_processor import LLMProcessor
from orchestrator.model_registry import ModelSpec
from orchestrator.source_aggregator import SourceAggregator, custom_url_domain
from tools.web.contracts import SearchResult
from tools.web.duckduckgo_client import DuckDuckGoClient
from tools.web.factory import (
    create_duckduckgo_client_from_env,
    create_serper_client_from_env,
)
from tools.web.source_fetchers import SourceFetcher
from utils.errors import InvalidRequestError, UpstreamAPIError
from utils.logger import get_logger

logger = get_logger(__name__)

UPLOAD_SOURCE = "upload"
UPLOAD_SNIPPET_CHARS = 1000


@dataclass(frozen=True)
class FileDescriptor:
    name: str
    content: str | None = None


def file_results(files: list[FileDescriptor] | None) -> list[SearchResult]:
    """Uploaded file text as extra results; descriptors without text are skipped."""
    results = []
    for f in files or []:
        text = (f.content or "").strip()
        if not f.name or not text:
            continue
        results.append(
            SearchResult(
                title=f.name,
                url=f"upload://{f.name}",
                snippet=text[:UPLOAD_SNIPPET_CHARS],
                source=UPLOAD_SOURCE,
            )
        )
    return results


class SearchOrchestrator:
    def __init__(
        self,
        aggregator: SourceAggregator | None = None,
        llm: LLMProcessor | None = None,
        duckduckgo: DuckDuckGoClient | None = None,
        scorer: Scorer | None = None,
        config: Config | None = None,
    ):
        self.config = config or Config()
        if aggregator is None:
            serper = create_serper_client_from_env()
            duckduckgo = duckduckgo or create_duckduckgo_client_from_env()
            aggregator = SourceAggregator(
                serper,
                duckduckgo,
                SourceFetcher(serper),
                default_timeout_s=self.config.SOURCE_FETCH_TIMEOUT_SECONDS,
            )
        self.aggregator = aggregator
        self.duckduckgo = duckduckgo or aggregator.duckduckgo
        self.llm = llm or LLMProcessor(config=self.config)
        self.scorer = scorer

    # ---------- validation ----------

    @staticmethod
    def _require_query(query: str) -> str:
        if not isinstance(query, str) or not query.strip():
            raise InvalidRequestError("Query is required", field="query")
        return query.strip()

    @staticmethod
    def _validate_custom_urls(custom_urls: list[str] | None) -> list[str]:
        urls = [u for u in (custom_urls or []) if u and u.strip()]
        for url in urls:
            try:
                custom_url_domain(url)
            except ValueError as exc:
                raise InvalidRequestError(str(exc), field="customUrls") from exc
        return urls

    def list_models(self) -> list[ModelSpec]:
        return self.llm.registry.list_models()

    # ---------- pipeline ----------

    async def search(
        self,
        query: str,
        *,
        mode: SearchMode = SearchMode.VERIFIED,
        model: str | None = None,
        sources: list[str] | None = None,
        custom_urls: list[str] | None = None,
        files: list[FileDescriptor] | None = None,
        use_llm: bool = True,
    ) -> SearchOutcome:
        """
        Run the full pipeline: fetch sources, answer with the LLM, categorize.

        Raises:
            InvalidRequestError: blank query, unknown model, malformed custom URL
        """
        query = self._require_query(query)
        spec = self.llm.resolve_model(model)
        urls = self._validate_custom_urls(custom_urls)

        search_id = f"search_{uuid.uuid4().hex[:12]}"
        start = time.time()

        gathered = await self.aggregator.gather(query, sources, urls, mode)
        results = gathered.results + file_results(files)

        llm_response: LLMAnswer | None = None
        llm_error: dict | None = None
        if use_llm and results:
            try:
                llm_response = await self.llm.process(query, results, spec.id)
            except UpstreamAPIError as e:
                logger.warning(
                    f"LLM failed, using synthesized answer: {e.message}",
                    extra={"extra_fields": {"search_id": search_id, "provider": e.provider, "status": e.status_code}},
                )
                llm_error = e.to_dict()
                llm_response = synthesize_answer(query, results, model=spec.id)

        categories = categorize(results, query, self.scorer)
        if not categories and results:
            categories = [all_results_category(results, query)]

        metadata = {
            "searchId": search_id,
            "query": query,
            "mode": mode.value,
            "model": spec.id,
            "sources": gathered.queried_sources,
            "resultCount": len(results),
            "categoryCount": len(categories),
            "durationMs": int((time.time() - start) * 1000),
        }
        if llm_error:
            metadata["llmError"] = llm_error

        logger.info(
            "Search complete",
            extra={"extra_fields": {k: v for k, v in metadata.items() if k != "llmError"}},
        )

        return SearchOutcome(
            query=query,
            results=results,
            categories=categories,
            llm_response=llm_response,
            metrics=aggregate_metrics(categories),
            failed_sources=gathered.failed_sources,
            metadata=metadata,
        )

    async def web_answer(self, query: str, model: str | None = None) -> LLMAnswer:
        """
        DuckDuckGo results answered by the LLM; upstream errors propagate.

        Raises:
            InvalidRequestError: blank query or unknown model
            UpstreamAPIError: DuckDuckGo or the completion endpoint failed
        """
        query = self._require_query(query)
        spec = self.llm.resolve_model(model)
        results = await self.duckduckgo.search(query)
        return await self.llm.process(query, results, spec.id)

    async def chat(self, messages: list[ChatMessage], model: str | None = None) -> LLMAnswer:
        """
        Follow-up turn on a conversation; upstream errors propagate.

        Raises:
            InvalidRequestError: empty history or unknown model
            UpstreamAPIError: the completion endpoint failed
        """
        return await self.llm.chat(messages, model)
