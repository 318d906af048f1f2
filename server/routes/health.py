"""Health check endpoint."""

from datetime import datetime

from fastapi import APIRouter, Depends

from config.config import Config
from server.dependencies import get_config
from server.schemas.responses import HealthResponseDTO

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponseDTO)
async def health_check(config: Config = Depends(get_config)):
    """Health check endpoint."""
    return HealthResponseDTO(
        status="healthy",
        timestamp=datetime.utcnow().isoformat() + "Z",
        version="1.0.0",
        missing_keys=config.missing_keys(),
    )
