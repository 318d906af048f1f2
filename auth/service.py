"""
OAuthService - authorization-code exchange for the supported networks.

The service never touches HTTP responses; routes turn an OAuthFlowResult into
cookies and a redirect. No call is retried.
"""

import base64
import hashlib
import secrets
from typing import Any
from urllib.parse import urlencode

import httpx

from config.config import Config
from tools.web.http import request_json
from utils.errors import AuthRequiredError, UpstreamAPIError
from utils.logger import get_logger, mask_secret

from .flow import AuthorizationRequest, OAuthFlowResult, OAuthStage
from .providers import OAuthProvider

logger = get_logger(__name__)

USER_AGENT = "search-aggregator/0.1"
DEFAULT_EXPIRES_IN = 3600


class OAuthConfigError(Exception):
    """Client id (or secret) for a provider is not configured."""


def pkce_pair() -> tuple[str, str]:
    """Return (code_verifier, S256 code_challenge)."""
    verifier = secrets.token_urlsafe(64)[:96]
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    challenge = base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")
    return verifier, challenge


def _error_details(body: Any, fallback: str) -> str:
    if isinstance(body, dict):
        for key in ("error_description", "message", "error"):
            value = body.get(key)
            if isinstance(value, dict):
                value = value.get("message")
            if value:
                return str(value)
    if isinstance(body, str) and body.strip():
        return body.strip()[:200]
    return fallback


def _expires_in(value: Any) -> int:
    """Token lifetime in seconds; missing or non-numeric values get the default."""
    try:
        return int(value) if value else DEFAULT_EXPIRES_IN
    except (TypeError, ValueError):
        return DEFAULT_EXPIRES_IN


class OAuthService:
    def __init__(
        self,
        config: Config | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout_s: float = 10.0,
    ):
        self.config = config or Config()
        self.http_client = http_client
        self.timeout_s = timeout_s

    def authorization_request(self, provider: OAuthProvider) -> AuthorizationRequest:
        """
        Build the provider authorize URL with a fresh state (and PKCE pair for Twitter).

        Raises:
            OAuthConfigError: client id is not configured
        """
        client_id = provider.client_id()
        if not client_id:
            raise OAuthConfigError(f"{provider.display_name} client ID is not configured.")

        state = secrets.token_urlsafe(16)
        params = {
            "response_type": "code",
            "client_id": client_id,
            "redirect_uri": provider.redirect_uri(self.config),
            "state": state,
            "scope": provider.scope_separator.join(provider.scopes),
        }
        params.update(dict(provider.extra_authorize_params))

        verifier = None
        if provider.use_pkce:
            verifier, challenge = pkce_pair()
            params["code_challenge"] = challenge
            params["code_challenge_method"] = "S256"

        logger.info(
            f"Starting {provider.display_name} OAuth",
            extra={"extra_fields": {"provider": provider.name, "client_id": mask_secret(client_id)}},
        )
        return AuthorizationRequest(
            url=f"{provider.authorize_url}?{urlencode(params)}", state=state, code_verifier=verifier
        )

    async def _exchange_code(self, provider: OAuthProvider, code: str, code_verifier: str | None) -> dict:
        client_id = provider.client_id()
        client_secret = provider.client_secret()
        form = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": provider.redirect_uri(self.config),
        }
        headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
        auth = None

        if provider.use_pkce:
            form["code_verifier"] = code_verifier or ""
            form["client_id"] = client_id
        if provider.basic_auth and client_secret:
            auth = httpx.BasicAuth(client_id, client_secret)
        else:
            form["client_id"] = client_id
            if client_secret:
                form["client_secret"] = client_secret

        if provider.token_method == "GET":
            form.pop("grant_type")
            kwargs: dict[str, Any] = {"params": form}
        else:
            kwargs = {"data": form}
        if auth is not None:
            kwargs["auth"] = auth

        data = await request_json(
            provider.name,
            provider.token_method,
            provider.token_url,
            client=self.http_client,
            timeout_s=self.timeout_s,
            headers=headers,
            **kwargs,
        )
        if not isinstance(data, dict) or not data.get("access_token"):
            raise UpstreamAPIError(provider.name, 200, data, "No access token in token response")
        return data

    async def fetch_profile(self, provider: OAuthProvider, access_token: str | None) -> dict:
        """
        Raises:
            AuthRequiredError: no token, or the provider rejected it
            UpstreamAPIError: any other provider failure
        """
        if not access_token:
            raise AuthRequiredError(provider.name)
        try:
            data = await request_json(
                provider.name,
                "GET",
                provider.profile_url,
                client=self.http_client,
                timeout_s=self.timeout_s,
                headers={"Authorization": f"Bearer {access_token}", "User-Agent": USER_AGENT},
            )
        except UpstreamAPIError as e:
            if e.status_code == 401:
                raise AuthRequiredError(provider.name, f"{provider.display_name} session expired") from e
            raise
        return data if isinstance(data, dict) else {"data": data}

    async def complete(
        self,
        provider: OAuthProvider,
        params: dict[str, str],
        stored_state: str | None = None,
        code_verifier: str | None = None,
    ) -> OAuthFlowResult:
        """
        Drive a callback through code exchange and profile fetch.

        Args:
            provider: Provider the callback belongs to
            params: Callback parameters (code, state, error, error_description)
            stored_state: Value of the state cookie, if any
            code_verifier: PKCE verifier cookie, if any

        Returns:
            OAuthFlowResult; error is set when the flow stopped early
        """
        result = OAuthFlowResult(provider=provider.name)

        if params.get("error"):
            logger.warning(
                f"{provider.display_name} auth error: {params.get('error')}",
                extra={"extra_fields": {"provider": provider.name}},
            )
            result.error = params.get("error_description") or "Authentication failed"
            return result

        code = params.get("code")
        if not code:
            result.error = "No authorization code received"
            return result
        result.stage = OAuthStage.CODE_RECEIVED

        if stored_state and params.get("state") != stored_state:
            logger.warning("Invalid state parameter", extra={"extra_fields": {"provider": provider.name}})
            result.error = "Invalid state parameter"
            return result

        if not provider.client_id() or (not provider.use_pkce and not provider.client_secret()):
            result.error = f"{provider.display_name} API credentials not configured"
            return result

        try:
            token = await self._exchange_code(provider, code, code_verifier)
            result.stage = OAuthStage.TOKEN_EXCHANGED
            result.access_token = token["access_token"]
            result.refresh_token = token.get("refresh_token")
            result.expires_in = _expires_in(token.get("expires_in"))

            profile = await self.fetch_profile(provider, result.access_token)
            result.stage = OAuthStage.PROFILE_FETCHED
            result.user_id = provider.user_id_from(profile)
        except (UpstreamAPIError, AuthRequiredError) as e:
            body = getattr(e, "body", None)
            details = _error_details(body, e.message)
            logger.error(
                f"{provider.display_name} token exchange failed",
                extra={"extra_fields": {"provider": provider.name, "status": getattr(e, "status_code", None)}},
            )
            result.error = f"Failed to authenticate with {provider.display_name}: {details}"
            return result

        logger.info(
            f"{provider.display_name} authentication complete",
            extra={"extra_fields": {"provider": provider.name, "stage": result.stage.value}},
        )
        return result
