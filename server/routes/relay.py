"""OAuth relay: forwards a provider callback to another deployment."""

from html import escape
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse

from config.config import Config
from server.dependencies import get_config
from server.routes.auth import resolve_provider

router = APIRouter(prefix="/api/relay", tags=["Relay"])

RELAY_PAGE = """<!DOCTYPE html>
<html lang="en">
<head><meta charset="UTF-8"><title>{title} OAuth Relay</title></head>
<body>
  <h1>{title} OAuth Relay</h1>
  <p>Code: {code}</p>
  <p>State: {state}</p>
  <p><a href="{link}">Continue to {callback_path}</a></p>
</body>
</html>
"""


@router.get("/{provider}")
async def relay(provider: str, request: Request, config: Config = Depends(get_config)):
    spec = resolve_provider(provider)
    forwarded = {k: request.query_params[k] for k in ("code", "state") if request.query_params.get(k)}
    query = f"?{urlencode(forwarded)}" if forwarded else ""
    callback_path = f"/api/auth/{spec.name}/callback"

    if config.OAUTH_RELAY_TARGET:
        return RedirectResponse(
            f"{config.OAUTH_RELAY_TARGET}{callback_path}{query}",
            status_code=status.HTTP_307_TEMPORARY_REDIRECT,
        )

    code = forwarded.get("code")
    return HTMLResponse(
        RELAY_PAGE.format(
            title=escape(spec.display_name),
            code=escape(code[:10] + "...") if code else "None",
            state=escape(forwarded.get("state", "None")),
            link=escape(f"{callback_path}{query}"),
            callback_path=escape(callback_path),
        )
    )
