import time

import openai

from models.completion import CompletionResponse, TokenUsage
from utils.logger import get_logger

from .base_client import BaseAIClient

logger = get_logger(__name__)

PERPLEXITY_BASE_URL = "https://api.perplexity.ai"
SYSTEM_PROMPT = "You are a helpful AI assistant."


class PerplexityClient(BaseAIClient):
    """
    Perplexity chat-completions client (OpenAI-compatible API).
    """

    provider_name = "perplexity"

    def __init__(self, api_key: str, model_name: str = "sonar", **kwargs):
        super().__init__(api_key, model_name=model_name, **kwargs)
        self.client = openai.OpenAI(
            api_key=api_key,
            base_url=PERPLEXITY_BASE_URL,
            timeout=kwargs.get("timeout", 60.0),
            max_retries=0,
        )
        self.model_name = model_name

    def get_completion(self, prompt: str, **kwargs) -> CompletionResponse:
        """
        Send the prompt as a single user turn under a fixed system message.

        Returns:
            CompletionResponse; never raises
        """
        request_id = self._generate_request_id()
        start_time = time.time()

        model = kwargs.get("model") or self.model_name
        temperature = kwargs.get("temperature", 0.7)
        top_p = kwargs.get("top_p", 0.9)
        max_tokens = kwargs.get("max_tokens", 1024)

        try:
            response = self.client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=temperature,
                top_p=top_p,
                max_tokens=max_tokens,
            )
            latency_ms = self._measure_latency(start_time)

            choice = response.choices[0] if response.choices else None
            text = (choice.message.content if choice else "") or ""

            usage = getattr(response, "usage", None)
            token_usage = TokenUsage(
                prompt_tokens=getattr(usage, "prompt_tokens", 0) or 0,
                completion_tokens=getattr(usage, "completion_tokens", 0) or 0,
                total_tokens=getattr(usage, "total_tokens", 0) or 0,
            )

            logger.info(
                "Perplexity completion successful",
                extra={
                    "extra_fields": {
                        "request_id": request_id,
                        "model": model,
                        "latency_ms": latency_ms,
                        "tokens": token_usage.total_tokens,
                    }
                },
            )

            metadata = {}
            citations = getattr(response, "citations", None)
            if citations:
                metadata["citations"] = list(citations)

            return CompletionResponse(
                request_id=request_id,
                text=text,
                provider=self.provider_name,
                model=model,
                latency_ms=latency_ms,
                token_usage=token_usage,
                finish_reason=self._normalize_finish_reason(choice.finish_reason if choice else None),
                metadata=metadata,
            )

        except Exception as e:
            latency_ms = self._measure_latency(start_time)
            error = self._normalize_error(e, provider=self.provider_name)

            logger.error(
                f"Perplexity completion failed: {error.code}",
                extra={
                    "extra_fields": {
                        "request_id": request_id,
                        "model": model,
                        "error_code": error.code,
                        "status_code": error.status_code,
                    }
                },
            )
            return self._create_error_response(
                request_id=request_id, error=error, latency_ms=latency_ms, model=model
            )
