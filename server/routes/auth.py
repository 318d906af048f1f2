"""OAuth endpoints: start, callback, logout and status per network."""

import json
from urllib.parse import parse_qsl

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse, RedirectResponse

from auth.cookies import (
    access_token_cookie,
    clear_session_cookies,
    code_verifier_cookie,
    set_flow_cookies,
    set_session_cookies,
    state_cookie,
)
from auth.flow import error_redirect
from auth.providers import OAuthProvider, get_provider
from auth.service import OAuthConfigError, OAuthService
from config.config import Config
from server.dependencies import get_config, get_oauth_service
from server.schemas.responses import AuthStatusDTO, LogoutResponseDTO
from utils.logger import get_logger

router = APIRouter(prefix="/api/auth", tags=["Auth"])
logger = get_logger(__name__)


def resolve_provider(provider: str) -> OAuthProvider:
    found = get_provider(provider)
    if found is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown provider: {provider}")
    return found


async def _callback_params(request: Request) -> dict[str, str]:
    params = dict(request.query_params)
    if request.method != "POST":
        return params
    raw = await request.body()
    if not raw:
        return params
    content_type = request.headers.get("content-type", "")
    if "application/json" in content_type:
        body = json.loads(raw)
        if isinstance(body, dict):
            params.update({k: str(v) for k, v in body.items() if v is not None})
    else:
        params.update(dict(parse_qsl(raw.decode("utf-8"))))
    return params


@router.get("/{provider}")
async def start_auth(
    provider: str,
    oauth: OAuthService = Depends(get_oauth_service),
    config: Config = Depends(get_config),
):
    """Redirect to the provider's consent screen."""
    spec = resolve_provider(provider)
    try:
        auth_request = oauth.authorization_request(spec)
    except OAuthConfigError as exc:
        logger.error(f"{spec.display_name} OAuth not configured")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Configuration error", "details": str(exc)},
        )

    response = RedirectResponse(auth_request.url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
    set_flow_cookies(response, spec.name, auth_request.state, auth_request.code_verifier, config.COOKIE_SECURE)
    return response


@router.api_route("/{provider}/callback", methods=["GET", "POST"])
async def auth_callback(
    provider: str,
    request: Request,
    oauth: OAuthService = Depends(get_oauth_service),
    config: Config = Depends(get_config),
):
    spec = resolve_provider(provider)
    try:
        params = await _callback_params(request)
    except (ValueError, UnicodeDecodeError):
        return RedirectResponse(error_redirect("Malformed callback request"), status_code=status.HTTP_303_SEE_OTHER)

    result = await oauth.complete(
        spec,
        params,
        stored_state=request.cookies.get(state_cookie(spec.name)),
        code_verifier=request.cookies.get(code_verifier_cookie(spec.name)),
    )
    response = RedirectResponse(result.redirect_url, status_code=status.HTTP_303_SEE_OTHER)
    if result.error is None:
        set_session_cookies(response, result, config.COOKIE_SECURE)
        logger.info(
            f"{spec.display_name} session established",
            extra={"extra_fields": {"provider": spec.name, "stage": result.stage.value}},
        )
    return response


@router.get("/{provider}/logout", response_model=LogoutResponseDTO)
async def logout(provider: str):
    spec = resolve_provider(provider)
    response = JSONResponse(
        content=LogoutResponseDTO(success=True, message=f"Logged out from {spec.display_name}").model_dump()
    )
    clear_session_cookies(response, spec.name)
    return response


@router.get("/{provider}/status", response_model=AuthStatusDTO)
async def auth_status(provider: str, request: Request):
    spec = resolve_provider(provider)
    return AuthStatusDTO(
        authenticated=bool(request.cookies.get(access_token_cookie(spec.name))), network=spec.name
    )
