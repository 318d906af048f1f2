"""Error types shared by the providers, the pipeline and the HTTP layer."""

from typing import Any


class UpstreamAPIError(Exception):
    """A search, LLM or OAuth provider answered non-2xx or could not be reached."""

    def __init__(
        self,
        provider: str,
        status_code: int | None = None,
        body: Any = None,
        message: str | None = None,
    ):
        self.provider = provider
        self.status_code = status_code
        self.body = body
        self.message = message or f"{provider} API responded with status {status_code}"
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "provider": self.provider,
            "status": self.status_code,
            "details": self.body,
        }


class AuthRequiredError(Exception):
    """An OAuth access token is missing or was rejected by the provider."""

    def __init__(self, provider: str, message: str | None = None):
        self.provider = provider
        self.message = message or f"Not authenticated with {provider}"
        super().__init__(self.message)

    @property
    def reauth_url(self) -> str:
        return f"/api/auth/{self.provider}"


class InvalidRequestError(ValueError):
    """Request input rejected before any provider call (blank query, unknown model, bad URL)."""

    def __init__(self, message: str, field: str | None = None):
        self.message = message
        self.field = field
        super().__init__(message)
