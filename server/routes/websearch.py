"""POST /api/websearch - DuckDuckGo results answered by the selected model."""

from fastapi import APIRouter, Depends

from orchestrator.core import SearchOrchestrator
from server.dependencies import get_orchestrator
from server.schemas.requests import WebSearchRequest
from server.schemas.responses import LLMAnswerDTO, ModelInfoDTO, ModelListDTO

router = APIRouter(prefix="/api", tags=["WebSearch"])


@router.post("/websearch", response_model=LLMAnswerDTO)
async def websearch(
    body: WebSearchRequest,
    orchestrator: SearchOrchestrator = Depends(get_orchestrator),
):
    """
    Upstream failures are not softened here: the app-level handler returns
    500 with the provider's status and body.
    """
    answer = await orchestrator.web_answer(body.query, body.model)
    return LLMAnswerDTO.from_answer(answer)


@router.get("/models", response_model=ModelListDTO)
async def list_models(orchestrator: SearchOrchestrator = Depends(get_orchestrator)):
    return ModelListDTO(
        models=[ModelInfoDTO(**m.to_dict()) for m in orchestrator.list_models()],
        default=orchestrator.llm.registry.default_model,
    )
