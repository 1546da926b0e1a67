"""Conversation API controller with FastAPI endpoints."""

import logging

from fastapi import APIRouter, Body, Depends, Path

from app.core.dependencies import (
    get_conversation_store,
    get_current_user_id,
    get_inference_provider,
    get_optional_user_id,
)
from app.domains.conversation.service import ConversationService
from app.domains.conversation.store import ConversationStore
from app.inference.base import InferenceProvider
from app.schemas.conversation import (
    ChatRequest,
    ChatResponse,
    ConversationDetailResponse,
    ConversationListResponse,
)


logger = logging.getLogger(__name__)

router = APIRouter(tags=["conversations"])


@router.post("/chat", response_model=ChatResponse)
async def submit_chat_turn(
    chat_request: ChatRequest = Body(...),
    user_id: str | None = Depends(get_optional_user_id),
    provider: InferenceProvider = Depends(get_inference_provider),
    store: ConversationStore = Depends(get_conversation_store),
):
    """Send the conversation so far and get the assistant's reply.

    Signed-in callers get the turn persisted and a conversation ID back.
    Anonymous callers get the reply only.
    """
    service = ConversationService(store, provider)
    return await service.submit_turn(
        caller_id=user_id,
        messages=chat_request.messages,
        conversation_id=chat_request.conversation_id,
    )


@router.get("/conversations", response_model=ConversationListResponse)
async def list_conversations(
    user_id: str = Depends(get_current_user_id),
    store: ConversationStore = Depends(get_conversation_store),
):
    """Get all conversations for the current user, most recent first."""
    service = ConversationService(store)
    return await service.list_conversations(user_id)


@router.get("/conversations/{conversation_id}", response_model=ConversationDetailResponse)
async def get_conversation(
    conversation_id: str = Path(..., min_length=1, description="Conversation ID"),
    user_id: str = Depends(get_current_user_id),
    store: ConversationStore = Depends(get_conversation_store),
):
    """Get a specific conversation with all messages."""
    service = ConversationService(store)
    return await service.get_conversation(user_id, conversation_id)
