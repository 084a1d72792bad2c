import logging
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel
from slowapi import Limiter
from slowapi.util import get_remote_address

from config import settings
from services import chat_service
from services.chat_service import ChatValidationError
from services.store import Store
from routers.dependencies import get_llm_client, get_store
from utils.errors import LLMError
from utils.llm_client import LLMClient

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])

limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class DestinationChatRequest(BaseModel):
    destination_id: str
    messages: list[ChatMessage]


class TravelGuideRequest(BaseModel):
    messages: list[ChatMessage]


class ChatResponse(BaseModel):
    message: str


async def _reply(coro) -> ChatResponse:
    try:
        return ChatResponse(message=await coro)
    except ChatValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LLMError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.post("/chat", response_model=ChatResponse)
@limiter.limit("30/minute")
async def destination_chat(
    request: Request,
    req: DestinationChatRequest,
    store: Store = Depends(get_store),
    llm: LLMClient = Depends(get_llm_client),
):
    if not req.destination_id.strip() or not req.messages:
        raise HTTPException(status_code=400, detail="destination_id and messages are required")

    destination = await store.find_unique("destinations", {"id": req.destination_id})
    if destination is None:
        raise HTTPException(status_code=404, detail="Destination not found")

    messages = [m.model_dump() for m in req.messages]
    return await _reply(chat_service.destination_chat(llm, destination, messages))


@router.post("/travel-guide", response_model=ChatResponse)
@limiter.limit("30/minute")
async def travel_guide(
    request: Request,
    req: TravelGuideRequest,
    llm: LLMClient = Depends(get_llm_client),
):
    messages = [m.model_dump() for m in req.messages]
    return await _reply(chat_service.general_travel_chat(llm, messages))
