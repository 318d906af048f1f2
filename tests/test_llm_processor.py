import asyncio
import time

import pytest

from models.answer import ChatMessage
from models.completion import CompletionResponse, NormalizedError
from orchestrator.llm_processor import LLMProcessor
from tools.web.rate_limiter import RateLimiter
from utils.errors import InvalidRequestError, UpstreamAPIError
from conftest import FakeCompletionClient, make_result


SOURCES = [
    make_result(title="Alpha", url="https://alpha.example/report", snippet="Alpha raised $20 million"),
    make_result(title="Beta", url="https://beta.example/post", snippet="Beta expanded to Europe"),
]


def _processor(client=None, perplexity=None, **kwargs):
    clients = {"together": client or FakeCompletionClient(text="ok")}
    if perplexity is not None:
        clients["perplexity"] = perplexity
    return LLMProcessor(clients=clients, **kwargs)


def test_default_model_wraps_prompt_in_gemma_template():
    client = FakeCompletionClient(text="Answer [Source 1]")
    answer = asyncio.run(_processor(client).process("funding news", SOURCES))

    prompt, params = client.calls[0]
    assert prompt.startswith("<start_of_turn>user\n")
    assert prompt.endswith("<start_of_turn>assistant\n")
    assert "[Source 2]\nTitle: Beta\nURL: https://beta.example/post" in prompt
    assert params["model"] == "google/gemma-2-9b-it"
    assert params["stop"] == ["<end_of_turn>"]
    assert params["temperature"] == 0.7
    assert params["max_tokens"] == 1024
    assert answer.model == "gemma"
    assert answer.provider == "together"
    assert answer.answer == "Answer [Source 1](https://alpha.example/report)"
    assert answer.sources == SOURCES


def test_legacy_alias_resolves_to_mixtral():
    client = FakeCompletionClient(text="x")
    answer = asyncio.run(_processor(client).process("q", SOURCES, model="mistral"))

    prompt, params = client.calls[0]
    assert prompt.startswith("<s>[INST] ")
    assert prompt.endswith(" [/INST]")
    assert params["model"] == "mistralai/Mixtral-8x7B-Instruct-v0.1"
    assert params["stop"] == ["</s>", "[/INST]"]
    assert answer.model == "mixtral"


def test_perplexity_receives_unwrapped_prompt():
    together = FakeCompletionClient(text="unused")
    perplexity = FakeCompletionClient(text="See Source 2.", provider="perplexity")
    answer = asyncio.run(_processor(together, perplexity).process("q", SOURCES, model="sonar"))

    prompt, params = perplexity.calls[0]
    assert prompt.startswith('Please analyze the following web search results for the query: "q"')
    assert params["model"] == "sonar"
    assert together.calls == []
    assert answer.provider == "perplexity"
    assert answer.answer == "See [Source 2](https://beta.example/post)."


def test_empty_results_still_produce_a_prompt():
    client = FakeCompletionClient(text="Nothing to cite.")
    answer = asyncio.run(_processor(client).process("q", []))

    prompt, _ = client.calls[0]
    assert "(no search results were found)" in prompt
    assert "(1-0)" in prompt
    assert answer.answer == "Nothing to cite."
    assert answer.sources == []


@pytest.mark.parametrize("model", ["gpt-4", "claude"])
def test_unknown_model_rejected(model):
    client = FakeCompletionClient(text="x")
    with pytest.raises(InvalidRequestError) as exc_info:
        asyncio.run(_processor(client).process("q", SOURCES, model=model))
    assert exc_info.value.field == "model"
    assert client.calls == []


@pytest.mark.parametrize("query", ["", "   ", None])
def test_blank_query_rejected(query):
    with pytest.raises(InvalidRequestError):
        asyncio.run(_processor().process(query, SOURCES))


def test_error_response_becomes_upstream_error():
    error = NormalizedError(
        code="rate_limit",
        message="Too many requests",
        provider="together",
        retryable=True,
        status_code=429,
        details={"body": {"error": "slow down"}},
    )
    with pytest.raises(UpstreamAPIError) as exc_info:
        asyncio.run(_processor(FakeCompletionClient(error=error)).process("q", SOURCES))

    exc = exc_info.value
    assert exc.provider == "together"
    assert exc.status_code == 429
    assert exc.body == {"error": "slow down"}
    assert "Too many requests" in str(exc)


def test_error_without_status_maps_to_500():
    error = NormalizedError(code="unknown", message="boom", provider="together")
    with pytest.raises(UpstreamAPIError) as exc_info:
        asyncio.run(_processor(FakeCompletionClient(error=error)).process("q", SOURCES))
    assert exc_info.value.status_code == 500


def test_missing_api_key_is_upstream_500(clean_env):
    processor = LLMProcessor()
    with pytest.raises(UpstreamAPIError) as exc_info:
        asyncio.run(processor.process("q", SOURCES))
    assert exc_info.value.status_code == 500
    assert "TOGETHER_API_KEY" in str(exc_info.value)


def test_slow_completion_times_out_as_504():
    class SlowClient(FakeCompletionClient):
        def get_completion(self, prompt, **kwargs) -> CompletionResponse:
            time.sleep(0.3)
            return super().get_completion(prompt, **kwargs)

    with pytest.raises(UpstreamAPIError) as exc_info:
        asyncio.run(_processor(SlowClient(text="late"), timeout_s=0.05).process("q", SOURCES))
    assert exc_info.value.status_code == 504


def test_rate_limited_provider_raises_429_without_calling_client():
    client = FakeCompletionClient(text="ok")
    processor = _processor(client, rate_limiter=RateLimiter({"together": 1}))

    asyncio.run(processor.process("q", SOURCES))
    with pytest.raises(UpstreamAPIError) as exc_info:
        asyncio.run(processor.process("q", SOURCES))

    assert exc_info.value.status_code == 429
    assert exc_info.value.provider == "together"
    assert len(client.calls) == 1


HISTORY = [
    ChatMessage(role="system", content="Answer briefly."),
    ChatMessage(role="user", content="How big is the EV market?"),
    ChatMessage(role="assistant", content="About $500B."),
    ChatMessage(role="user", content="Who leads it?"),
]


def test_chat_flattens_history_into_model_template():
    client = FakeCompletionClient(text="  Tesla and BYD.  ")
    answer = asyncio.run(_processor(client).chat(HISTORY, model="mixtral-8x7b"))

    prompt, params = client.calls[0]
    assert prompt.startswith("<s>[INST] You are a helpful AI assistant")
    assert "Answer briefly.\n\nHuman: How big is the EV market?\nAssistant: About $500B.\nHuman: Who leads it?\nAssistant:" in prompt
    assert params["stop"] == ["</s>", "[/INST]"]
    assert answer.answer == "Tesla and BYD."
    assert answer.model == "mixtral"
    assert answer.sources == []


def test_chat_rejects_empty_history_and_unknown_model():
    client = FakeCompletionClient(text="x")
    processor = _processor(client)

    with pytest.raises(InvalidRequestError) as exc_info:
        asyncio.run(processor.chat([ChatMessage(role="user", content="  ")]))
    assert exc_info.value.field == "messages"

    with pytest.raises(InvalidRequestError) as exc_info:
        asyncio.run(processor.chat(HISTORY, model="gpt-4"))
    assert exc_info.value.field == "model"
    assert client.calls == []
