"""
Conversation model for chat sessions.
"""

from sqlalchemy import Column, ForeignKey, Index, String
from sqlalchemy.orm import relationship

from .base import BaseModel


class Conversation(BaseModel):
    """
    Represents a conversation owned by exactly one user.
    """

    __tablename__ = "conversations"
    __table_args__ = (Index("idx_conversations_user_updated", "user_id", "updated_at"),)

    user_id = Column(String(255), ForeignKey("users.id"), nullable=False)
    title = Column(String(255), nullable=False)  # Derived from first user turn

    # Relationships
    user = relationship("User", back_populates="conversations")
    messages = relationship(
        "Message",
        back_populates="conversation",
        order_by="Message.position",
    )
