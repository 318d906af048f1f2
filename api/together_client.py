import time

import openai

from models.completion import CompletionResponse, TokenUsage
from utils.logger import get_logger

from .base_client import BaseAIClient

logger = get_logger(__name__)

TOGETHER_BASE_URL = "https://api.together.xyz/v1"


class TogetherClient(BaseAIClient):
    """
    Together AI text-completion client.

    Together exposes an OpenAI-compatible /v1/completions endpoint, so the
    OpenAI SDK is pointed at it with a custom base URL. The prompt is sent
    already wrapped in the model's chat template.
    """

    provider_name = "together"

    def __init__(self, api_key: str, model_name: str = "google/gemma-2-9b-it", **kwargs):
        """
        Args:
            api_key: Together API key
            model_name: Together model path, e.g. "mistralai/Mixtral-8x7B-Instruct-v0.1"
            **kwargs: timeout (seconds) for the underlying HTTP client
        """
        super().__init__(api_key, model_name=model_name, **kwargs)
        self.client = openai.OpenAI(
            api_key=api_key,
            base_url=TOGETHER_BASE_URL,
            timeout=kwargs.get("timeout", 60.0),
            max_retries=0,
        )
        self.model_name = model_name

    def get_completion(self, prompt: str, **kwargs) -> CompletionResponse:
        """
        Run one text completion.

        Args:
            prompt: Template-wrapped prompt
            **kwargs:
                - model: Override the default model for this call
                - temperature (default 0.7), top_p (default 0.9), max_tokens (default 1024)
                - stop: Stop sequences for the model's template

        Returns:
            CompletionResponse; never raises
        """
        request_id = self._generate_request_id()
        start_time = time.time()

        model = kwargs.get("model") or self.model_name
        temperature = kwargs.get("temperature", 0.7)
        top_p = kwargs.get("top_p", 0.9)
        max_tokens = kwargs.get("max_tokens", 1024)
        stop = kwargs.get("stop") or None

        try:
            response = self.client.completions.create(
                model=model,
                prompt=prompt,
                max_tokens=max_tokens,
                temperature=temperature,
                top_p=top_p,
                stop=stop,
            )
            latency_ms = self._measure_latency(start_time)

            choice = response.choices[0] if response.choices else None
            text = (choice.text if choice else "") or ""

            usage = getattr(response, "usage", None)
            token_usage = TokenUsage(
                prompt_tokens=getattr(usage, "prompt_tokens", 0) or 0,
                completion_tokens=getattr(usage, "completion_tokens", 0) or 0,
                total_tokens=getattr(usage, "total_tokens", 0) or 0,
            )

            logger.info(
                "Together completion successful",
                extra={
                    "extra_fields": {
                        "request_id": request_id,
                        "model": model,
                        "latency_ms": latency_ms,
                        "tokens": token_usage.total_tokens,
                    }
                },
            )

            return CompletionResponse(
                request_id=request_id,
                text=text,
                provider=self.provider_name,
                model=model,
                latency_ms=latency_ms,
                token_usage=token_usage,
                finish_reason=self._normalize_finish_reason(choice.finish_reason if choice else None),
            )

        except Exception as e:
            latency_ms = self._measure_latency(start_time)
            error = self._normalize_error(e, provider=self.provider_name)

            logger.error(
                f"Together completion failed: {error.code}",
                extra={
                    "extra_fields": {
                        "request_id": request_id,
                        "model": model,
                        "error_code": error.code,
                        "status_code": error.status_code,
                        "retryable": error.retryable,
                    }
                },
            )
            return self._create_error_response(
                request_id=request_id, error=error, latency_ms=latency_ms, model=model
            )
