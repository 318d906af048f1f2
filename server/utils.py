"""Shared utilities for FastAPI routes."""

import asyncio
from collections.abc import Awaitable, Mapping
from typing import TypeVar

from fastapi import Request

T = TypeVar("T")

SENSITIVE_HEADERS = {"x-api-key", "authorization", "cookie", "set-cookie"}
DISCONNECT_POLL_INTERVAL_S = 0.5


class ClientDisconnectedError(Exception):
    """The client went away before the response was ready."""


def redact_sensitive_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """
    Redact auth-bearing headers before logging.
    """
    redacted: dict[str, str] = {}
    for key, value in headers.items():
        if key.lower() in SENSITIVE_HEADERS and value:
            redacted[key] = "[REDACTED]"
        else:
            redacted[key] = value
    return redacted


async def cancel_on_disconnect(
    request: Request, work: Awaitable[T], poll_interval_s: float = DISCONNECT_POLL_INTERVAL_S
) -> T:
    """
    Await work, cancelling it if the client disconnects first.

    Raises:
        ClientDisconnectedError: the client disconnected and the work was cancelled
    """
    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_interval_s)
            if done:
                return task.result()
            if await request.is_disconnected():
                task.cancel()
                await asyncio.gather(task, return_exceptions=True)
                raise ClientDisconnectedError()
    except asyncio.CancelledError:
        task.cancel()
        raise
