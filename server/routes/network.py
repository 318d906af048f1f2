"""Profile pass-through for authenticated networks."""

from fastapi import APIRouter, Depends, Request

from auth.cookies import access_token_cookie
from auth.service import OAuthService
from server.dependencies import get_oauth_service
from server.routes.auth import resolve_provider

router = APIRouter(prefix="/api/network", tags=["Network"])


@router.get("/{provider}/profile")
async def profile(
    provider: str,
    request: Request,
    oauth: OAuthService = Depends(get_oauth_service),
):
    """401 (with a re-auth URL) when the token cookie is missing or rejected."""
    spec = resolve_provider(provider)
    data = await oauth.fetch_profile(spec, request.cookies.get(access_token_cookie(spec.name)))
    return {"network": spec.name, "profile": data}
