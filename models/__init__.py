"""
Models package initialization.
"""

from .base import Base, BaseModel
from .conversation import Conversation
from .message import Message, MessageRole
from .user import User

__all__ = [
    "Base",
    "BaseModel",
    "User",
    "Conversation",
    "Message",
    "MessageRole",
]
