"""
Message model for conversation turns.
"""

import enum

from sqlalchemy import Column, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from .base import BaseModel


class MessageRole(str, enum.Enum):
    """Message role enumeration."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """
    Represents one append-only turn of a conversation.
    """

    __tablename__ = "messages"
    __table_args__ = (Index("idx_messages_conversation_position", "conversation_id", "position"),)

    conversation_id = Column(String(36), ForeignKey("conversations.id"), nullable=False)
    role = Column(
        Enum(MessageRole, name="messagerole", values_callable=lambda roles: [r.value for r in roles]),
        nullable=False,
    )
    content = Column(Text, nullable=False)
    position = Column(Integer, nullable=False)  # 0-based order within the conversation

    # Relationships
    conversation = relationship("Conversation", back_populates="messages")
