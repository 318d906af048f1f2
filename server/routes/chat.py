"""POST /api/chat - follow-up turns on a search conversation."""

from fastapi import APIRouter, Depends

from models.answer import ChatMessage
from orchestrator.core import SearchOrchestrator
from server.dependencies import get_orchestrator
from server.schemas.requests import ChatRequest
from server.schemas.responses import ChatResponseDTO

router = APIRouter(prefix="/api", tags=["Chat"])


@router.post("/chat", response_model=ChatResponseDTO)
async def chat(
    body: ChatRequest,
    orchestrator: SearchOrchestrator = Depends(get_orchestrator),
):
    """Unknown models are rejected with 400; upstream failures surface as 500."""
    messages = [ChatMessage(role=m.role, content=m.content) for m in body.messages]
    answer = await orchestrator.chat(messages, body.model)
    return ChatResponseDTO.from_answer(answer)
