from types import SimpleNamespace

import httpx
import openai
import pytest

from api.perplexity_client import PerplexityClient
from api.together_client import TogetherClient


TOGETHER_URL = "https://api.together.xyz/v1/completions"


def _api_error(cls, status, body):
    request = httpx.Request("POST", TOGETHER_URL)
    response = httpx.Response(status, request=request, json=body)
    return cls(f"Error code: {status}", response=response, body=body)


class StubCompletions:
    def __init__(self, result=None, exc=None):
        self.result = result
        self.exc = exc
        self.kwargs = None

    def create(self, **kwargs):
        self.kwargs = kwargs
        if self.exc is not None:
            raise self.exc
        return self.result


def _together(result=None, exc=None):
    client = TogetherClient(api_key="test-key")
    stub = StubCompletions(result, exc)
    client.client = SimpleNamespace(completions=stub)
    return client, stub


def test_together_success_reads_text_and_usage():
    result = SimpleNamespace(
        choices=[SimpleNamespace(text=" Answer text", finish_reason="eos")],
        usage=SimpleNamespace(prompt_tokens=12, completion_tokens=3, total_tokens=15),
    )
    client, stub = _together(result=result)

    response = client.get_completion("prompt", model="mistralai/Mixtral-8x7B-Instruct-v0.1", stop=["</s>"])

    assert not response.is_error
    assert response.text == " Answer text"
    assert response.model == "mistralai/Mixtral-8x7B-Instruct-v0.1"
    assert response.finish_reason == "stop"
    assert response.token_usage.total_tokens == 15
    assert stub.kwargs["stop"] == ["</s>"]
    assert stub.kwargs["temperature"] == 0.7
    assert stub.kwargs["top_p"] == 0.9
    assert stub.kwargs["max_tokens"] == 1024


def test_together_empty_stop_list_sent_as_none():
    result = SimpleNamespace(choices=[SimpleNamespace(text="x", finish_reason="length")], usage=None)
    client, stub = _together(result=result)

    response = client.get_completion("prompt", stop=[])

    assert stub.kwargs["stop"] is None
    assert stub.kwargs["model"] == "google/gemma-2-9b-it"
    assert response.finish_reason == "length"


@pytest.mark.parametrize(
    "cls, status, code, retryable",
    [
        (openai.RateLimitError, 429, "rate_limit", True),
        (openai.AuthenticationError, 401, "auth", False),
        (openai.BadRequestError, 400, "bad_request", False),
        (openai.InternalServerError, 503, "provider_error", True),
    ],
)
def test_together_api_errors_are_normalized(cls, status, code, retryable):
    body = {"error": {"message": "nope"}}
    client, _ = _together(exc=_api_error(cls, status, body))

    response = client.get_completion("prompt")

    assert response.is_error
    assert response.finish_reason == "error"
    assert response.text == ""
    assert response.error.code == code
    assert response.error.retryable is retryable
    assert response.error.status_code == status
    assert response.error.details["body"] == body
    assert response.error.provider == "together"


def test_timeout_is_normalized():
    exc = openai.APITimeoutError(request=httpx.Request("POST", TOGETHER_URL))
    client, _ = _together(exc=exc)

    error = client.get_completion("prompt").error

    assert error.code == "timeout"
    assert error.retryable is True


@pytest.mark.parametrize(
    "message, code",
    [
        ("429 Too Many Requests", "rate_limit"),
        ("401 Unauthorized", "auth"),
        ("Service Unavailable", "provider_error"),
        ("something odd", "unknown"),
    ],
)
def test_message_sniffing_without_status(message, code):
    client, _ = _together(exc=RuntimeError(message))
    error = client.get_completion("prompt").error
    assert error.code == code
    assert error.status_code is None
    assert error.details["exception_type"] == "RuntimeError"


def test_perplexity_sends_system_and_user_turns():
    result = SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content="Hi"), finish_reason="stop")],
        usage=SimpleNamespace(prompt_tokens=4, completion_tokens=1, total_tokens=5),
        citations=["https://a.example"],
    )
    client = PerplexityClient(api_key="test-key")
    stub = StubCompletions(result=result)
    client.client = SimpleNamespace(chat=SimpleNamespace(completions=stub))

    response = client.get_completion("question")

    assert response.text == "Hi"
    assert response.provider == "perplexity"
    assert response.metadata["citations"] == ["https://a.example"]
    assert [m["role"] for m in stub.kwargs["messages"]] == ["system", "user"]
    assert stub.kwargs["messages"][1]["content"] == "question"
    assert stub.kwargs["model"] == "sonar"


def test_error_response_serializes_normalized_error():
    client, _ = _together(exc=_api_error(openai.RateLimitError, 429, {"error": "slow"}))
    payload = client.get_completion("prompt").to_dict()
    assert payload["finish_reason"] == "error"
    assert payload["error"]["code"] == "rate_limit"
    assert payload["error"]["status_code"] == 429
    assert payload["token_usage"] == {"prompt_tokens": 0, "completion_tokens": 0, "total_tokens": 0}
