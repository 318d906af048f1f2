import time
import uuid
from abc import ABC, abstractmethod
from typing import Any

from models.completion import CompletionResponse, NormalizedError, TokenUsage


class BaseAIClient(ABC):
    """
    Abstract base class for hosted completion clients.

    Subclasses implement get_completion and must never raise from it: failures
    come back as a CompletionResponse carrying a NormalizedError.
    """

    provider_name: str = "unknown"

    @abstractmethod
    def __init__(self, api_key: str, **kwargs):
        """
        Args:
            api_key: API key for the provider
            **kwargs: Additional model-specific parameters
        """
        self.api_key = api_key
        self.model_name = kwargs.get('model_name')

    @abstractmethod
    def get_completion(self, prompt: str, **kwargs) -> CompletionResponse:
        """
        Get a completion from the hosted model.

        Args:
            prompt: Fully formatted prompt text
            **kwargs: Per-call overrides (model, temperature, max_tokens, top_p, stop)

        Returns:
            CompletionResponse, with error set instead of raising
        """

    @staticmethod
    def _generate_request_id() -> str:
        return f"req_{uuid.uuid4().hex[:16]}"

    @staticmethod
    def _measure_latency(start_time: float) -> int:
        return int((time.time() - start_time) * 1000)

    @staticmethod
    def _status_code_of(exc: Exception) -> int | None:
        status = getattr(exc, "status_code", None)
        if isinstance(status, int):
            return status
        response = getattr(exc, "response", None)
        status = getattr(response, "status_code", None)
        return status if isinstance(status, int) else None

    @staticmethod
    def _body_of(exc: Exception) -> Any:
        body = getattr(exc, "body", None)
        if body is not None:
            return body
        response = getattr(exc, "response", None)
        if response is None:
            return None
        try:
            return response.json()
        except Exception:
            return getattr(response, "text", None)

    def _normalize_error(self, exc: Exception, provider: str) -> NormalizedError:
        """
        Map an SDK/transport exception onto the shared error codes.

        Status codes win over message sniffing; the message is only consulted
        when the exception carries no HTTP status.
        """
        status = self._status_code_of(exc)
        message = str(exc) or type(exc).__name__
        lowered = message.lower()
        details: dict[str, Any] = {"exception_type": type(exc).__name__}
        body = self._body_of(exc)
        if body is not None:
            details["body"] = body

        if isinstance(exc, TimeoutError) or "timed out" in lowered or "timeout" in type(exc).__name__.lower():
            code, retryable = "timeout", True
        elif status in (401, 403) or (status is None and ("401" in lowered or "unauthorized" in lowered)):
            code, retryable = "auth", False
        elif status == 429 or (status is None and ("429" in lowered or "rate limit" in lowered or "too many requests" in lowered)):
            code, retryable = "rate_limit", True
        elif status in (400, 404, 422) or (status is None and ("400" in lowered or "bad request" in lowered)):
            code, retryable = "bad_request", False
        elif (status is not None and status >= 500) or (
            status is None and any(s in lowered for s in ("500", "502", "503", "504", "unavailable"))
        ):
            code, retryable = "provider_error", True
        else:
            code, retryable = "unknown", False

        return NormalizedError(
            code=code,
            message=message,
            provider=provider,
            retryable=retryable,
            status_code=status,
            details=details,
        )

    def _create_error_response(
        self, request_id: str, error: NormalizedError, latency_ms: int, model: str | None = None
    ) -> CompletionResponse:
        return CompletionResponse(
            request_id=request_id,
            text="",
            provider=self.provider_name,
            model=model or self.model_name or "unknown",
            latency_ms=latency_ms,
            token_usage=TokenUsage(),
            finish_reason="error",
            error=error,
            metadata={},
        )

    @staticmethod
    def _normalize_finish_reason(reason: str | None) -> str | None:
        if reason in (None, "", "null"):
            return None
        if reason in ("stop", "eos", "stop_sequence", "end_turn"):
            return "stop"
        if reason in ("length", "max_tokens"):
            return "length"
        return reason
