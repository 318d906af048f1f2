"""Cookie names and writers for the OAuth session."""

from fastapi import Response

from .flow import OAuthFlowResult, OAuthStage

REFRESH_TOKEN_MAX_AGE = 30 * 24 * 60 * 60
FLOW_COOKIE_MAX_AGE = 10 * 60


def access_token_cookie(provider: str) -> str:
    return f"{provider}_access_token"


def user_id_cookie(provider: str) -> str:
    return f"{provider}_user_id"


def refresh_token_cookie(provider: str) -> str:
    return f"{provider}_refresh_token"


def state_cookie(provider: str) -> str:
    return f"{provider}_auth_state"


def code_verifier_cookie(provider: str) -> str:
    return f"{provider}_code_verifier"


def set_flow_cookies(
    response: Response, provider: str, state: str, code_verifier: str | None, secure: bool = False
) -> None:
    response.set_cookie(
        state_cookie(provider), state, max_age=FLOW_COOKIE_MAX_AGE, path="/",
        httponly=True, samesite="lax", secure=secure,
    )
    if code_verifier:
        response.set_cookie(
            code_verifier_cookie(provider), code_verifier, max_age=FLOW_COOKIE_MAX_AGE, path="/",
            httponly=True, samesite="lax", secure=secure,
        )


def set_session_cookies(response: Response, result: OAuthFlowResult, secure: bool = False) -> None:
    """Write the token cookies and mark the flow as finished."""
    provider = result.provider
    response.set_cookie(
        access_token_cookie(provider), result.access_token or "", max_age=result.expires_in, path="/",
        httponly=True, samesite="lax", secure=secure,
    )
    if result.user_id:
        response.set_cookie(
            user_id_cookie(provider), result.user_id, max_age=result.expires_in, path="/",
            samesite="lax", secure=secure,
        )
    if result.refresh_token:
        response.set_cookie(
            refresh_token_cookie(provider), result.refresh_token, max_age=REFRESH_TOKEN_MAX_AGE, path="/",
            httponly=True, samesite="lax", secure=secure,
        )
    response.delete_cookie(state_cookie(provider), path="/")
    response.delete_cookie(code_verifier_cookie(provider), path="/")
    result.stage = OAuthStage.SESSION_COOKIE_SET


def clear_session_cookies(response: Response, provider: str) -> None:
    for name in (
        access_token_cookie(provider),
        user_id_cookie(provider),
        refresh_token_cookie(provider),
        state_cookie(provider),
        code_verifier_cookie(provider),
    ):
        response.delete_cookie(name, path="/")
