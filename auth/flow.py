from dataclasses import dataclass
from enum import Enum
from urllib.parse import quote


class OAuthStage(str, Enum):
    """Progress of one authorization-code flow, in order."""

    UNAUTHENTICATED = "unauthenticated"
    CODE_RECEIVED = "code_received"
    TOKEN_EXCHANGED = "token_exchanged"
    PROFILE_FETCHED = "profile_fetched"
    SESSION_COOKIE_SET = "session_cookie_set"


@dataclass(frozen=True)
class AuthorizationRequest:
    url: str
    state: str
    code_verifier: str | None = None


@dataclass
class OAuthFlowResult:
    provider: str
    stage: OAuthStage = OAuthStage.UNAUTHENTICATED
    error: str | None = None
    access_token: str | None = None
    refresh_token: str | None = None
    expires_in: int | None = None
    user_id: str | None = None

    @property
    def redirect_url(self) -> str:
        return success_redirect(self.provider) if self.error is None else error_redirect(self.error)


def error_redirect(message: str) -> str:
    return f"/network?error={quote(message)}"


def success_redirect(provider: str) -> str:
    return f"/network?auth={provider}_success"
