"""
Provides the User model for the application's database schema.

Users are written by the identity provider's adapter when someone signs in.
This service only reads them to confirm that a session's subject is known.
"""

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from .base import BaseModel


class User(BaseModel):
    """
    Represents a signed-in user.

    :ivar id: Opaque identifier issued by the identity provider.
    :type id: str
    :ivar email: Email address of the user, unique when present.
    :type email: str
    :ivar name: Display name.
    :type name: str
    :ivar image: Avatar URL.
    :type image: str
    """

    __tablename__ = "users"

    id = Column(String(255), primary_key=True)
    email = Column(String(255), unique=True)
    name = Column(String(255))
    image = Column(String(1024))

    conversations = relationship("Conversation", back_populates="user")
