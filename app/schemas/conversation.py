"""Conversation schemas for request/response serialization."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field

from models.message import MessageRole

from .base import BaseSchema


class ChatMessage(BaseSchema):
    """A role/content turn as exchanged with the browser and the model API."""

    role: MessageRole = Field(..., description="system, user or assistant")
    content: str = Field(..., description="Turn text")


class ChatRequest(BaseSchema):
    """Schema for a submitted turn."""

    messages: list[ChatMessage] = Field(..., min_length=1, description="Full ordered history")
    conversation_id: str | None = Field(None, description="Existing conversation ID, null for new")


class ChatReply(BaseSchema):
    """Normalized model reply."""

    role: Literal["assistant"] = "assistant"
    content: str


class ChatResponse(BaseSchema):
    """Schema for the reply to a submitted turn."""

    reply: ChatReply
    conversation_id: str | None = None


class ConversationSummary(BaseSchema):
    """Schema for a conversation list entry."""

    id: str
    title: str
    created_at: datetime
    updated_at: datetime


class ConversationResponse(ConversationSummary):
    """Schema for a conversation with its owner."""

    user_id: str


class MessageResponse(BaseSchema):
    """Schema for a message.

    The synthesized system prompt has no id, conversation or timestamp.
    """

    id: str | None = None
    conversation_id: str | None = None
    role: MessageRole
    content: str
    created_at: datetime | None = None


class ConversationListResponse(BaseSchema):
    """Schema for the caller's conversations."""

    conversations: list[ConversationSummary] = Field(default_factory=list)


class ConversationDetailResponse(BaseSchema):
    """Schema for a conversation and its messages."""

    conversation: ConversationResponse
    messages: list[MessageResponse] = Field(default_factory=list)


ConversationDetailResponse.model_rebuild()
ChatResponse.model_rebuild()
