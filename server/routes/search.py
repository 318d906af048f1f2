"""POST /api/search and its mode-specific variants."""

from fastapi import APIRouter, Depends, Request, Response

from config.config import SearchMode
from orchestrator.core import FileDescriptor, SearchOrchestrator
from orchestrator.source_aggregator import custom_url_domain
from server.dependencies import get_orchestrator
from server.schemas.requests import SearchRequest, ValidateUrlRequest
from server.schemas.responses import SearchResponseDTO, ValidateUrlResponseDTO
from server.utils import ClientDisconnectedError, cancel_on_disconnect
from utils.errors import InvalidRequestError
from utils.logger import get_logger

router = APIRouter(prefix="/api", tags=["Search"])
logger = get_logger(__name__)

CLIENT_CLOSED_REQUEST = 499


async def _run_search(
    http_request: Request,
    body: SearchRequest,
    mode: SearchMode,
    orchestrator: SearchOrchestrator,
):
    request_id = getattr(http_request.state, "request_id", "unknown")
    logger.info(
        "Search request",
        extra={
            "extra_fields": {
                "request_id": request_id,
                "mode": mode.value,
                "model": body.model,
                "sources": body.sources,
                "custom_urls": len(body.custom_urls),
                "use_llm": body.use_llm,
            }
        },
    )
    try:
        outcome = await cancel_on_disconnect(
            http_request,
            orchestrator.search(
                body.query,
                mode=mode,
                model=body.model,
                sources=body.sources,
                custom_urls=body.custom_urls,
                files=[FileDescriptor(name=f.name, content=f.content) for f in body.files],
                use_llm=body.use_llm,
            ),
        )
    except ClientDisconnectedError:
        logger.info("Client disconnected; search cancelled", extra={"extra_fields": {"request_id": request_id}})
        return Response(status_code=CLIENT_CLOSED_REQUEST)
    return SearchResponseDTO.from_outcome(outcome)


@router.post("/search", response_model=SearchResponseDTO)
async def search(
    http_request: Request,
    body: SearchRequest,
    orchestrator: SearchOrchestrator = Depends(get_orchestrator),
):
    """Aggregate sources, answer with the LLM and categorize the results."""
    return await _run_search(http_request, body, SearchMode(body.mode), orchestrator)


@router.post("/search/verified", response_model=SearchResponseDTO)
async def verified_search(
    http_request: Request,
    body: SearchRequest,
    orchestrator: SearchOrchestrator = Depends(get_orchestrator),
):
    return await _run_search(http_request, body, SearchMode.VERIFIED, orchestrator)


@router.post("/search/open", response_model=SearchResponseDTO)
async def open_search(
    http_request: Request,
    body: SearchRequest,
    orchestrator: SearchOrchestrator = Depends(get_orchestrator),
):
    return await _run_search(http_request, body, SearchMode.OPEN, orchestrator)


@router.post("/validate-url", response_model=ValidateUrlResponseDTO)
async def validate_url(body: ValidateUrlRequest):
    try:
        custom_url_domain(body.url)
    except ValueError as exc:
        raise InvalidRequestError("Invalid URL format", field="url") from exc
    return ValidateUrlResponseDTO(valid=True)
