"""Shared async HTTP call used by every outbound provider adapter."""

from typing import Any

import httpx

from utils.errors import UpstreamAPIError
from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT_S = 10.0


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


async def request_json(
    provider: str,
    method: str,
    url: str,
    *,
    client: httpx.AsyncClient | None = None,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    **kwargs,
) -> Any:
    """
    Send one request and return the decoded JSON body.

    Raises:
        UpstreamAPIError: non-2xx status (body attached) or transport failure
    """
    try:
        if client is not None:
            response = await client.request(method, url, **kwargs)
        else:
            async with httpx.AsyncClient(timeout=timeout_s) as owned:
                response = await owned.request(method, url, **kwargs)
    except httpx.TimeoutException as exc:
        raise UpstreamAPIError(provider, None, None, f"{provider} request timed out") from exc
    except httpx.RequestError as exc:
        raise UpstreamAPIError(
            provider, None, None, f"{provider} request failed: {type(exc).__name__}"
        ) from exc

    if response.is_error:
        body = _response_body(response)
        logger.warning(
            f"{provider} responded with status {response.status_code}",
            extra={"extra_fields": {"provider": provider, "status": response.status_code}},
        )
        raise UpstreamAPIError(provider, response.status_code, body)

    if not response.content:
        return {}
    return _response_body(response)
