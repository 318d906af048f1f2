"""Request-scoped middleware."""

import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from server.utils import redact_sensitive_headers
from utils.logger import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Echo or mint an X-Request-ID and log one line per request."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        start = time.time()
        logger.debug(
            "Request headers",
            extra={"extra_fields": {"request_id": request_id, "headers": redact_sensitive_headers(request.headers)}},
        )

        response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code}",
            extra={
                "extra_fields": {
                    "request_id": request_id,
                    "status": response.status_code,
                    "duration_ms": int((time.time() - start) * 1000),
                }
            },
        )
        return response
