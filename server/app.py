"""FastAPI application factory."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from server.dependencies import get_config
from server.middleware import RequestIDMiddleware
from server.routes import auth, chat, health, network, relay, search, websearch
from utils.errors import AuthRequiredError, InvalidRequestError, UpstreamAPIError
from utils.logger import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup/shutdown logic."""
    logger.info("FastAPI server starting up")

    missing = get_config().missing_keys()
    if missing:
        logger.warning(f"Missing environment variables: {missing}")

    yield

    logger.info("FastAPI server shutting down")


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


async def upstream_error_handler(request: Request, exc: UpstreamAPIError):
    logger.error(
        f"Upstream {exc.provider} error: {exc.message}",
        extra={"extra_fields": {"request_id": _request_id(request), "provider": exc.provider, "status": exc.status_code}},
    )
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=exc.to_dict())


async def invalid_request_handler(request: Request, exc: InvalidRequestError):
    logger.warning(
        f"Rejected request: {exc.message}",
        extra={"extra_fields": {"request_id": _request_id(request), "field": exc.field}},
    )
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"Invalid {location}: {first.get('msg')}" if location else "Invalid request body"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": message, "errors": [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in errors]},
    )


async def auth_required_handler(request: Request, exc: AuthRequiredError):
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"message": exc.message, "provider": exc.provider, "reauth_url": exc.reauth_url},
    )


def create_app() -> FastAPI:
    """Factory function to create FastAPI application."""
    app = FastAPI(
        title="Search Aggregator API",
        description="Multi-source search with LLM answers and category ranking",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(RequestIDMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(UpstreamAPIError, upstream_error_handler)
    app.add_exception_handler(InvalidRequestError, invalid_request_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(AuthRequiredError, auth_required_handler)

    app.include_router(health.router)
    app.include_router(search.router)
    app.include_router(websearch.router)
    app.include_router(chat.router)
    app.include_router(auth.router)
    app.include_router(network.router)
    app.include_router(relay.router)

    return app
