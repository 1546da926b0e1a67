"""Conversation store backed by SQLAlchemy async sessions."""

import logging
from collections.abc import Iterable

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import Database
from app.exceptions.base import StorageError
from models import Conversation, Message, MessageRole, User
from models.base import utcnow


logger = logging.getLogger(__name__)


class ConversationStore:
    """Durable record of conversations and their ordered messages.

    A store is bound to one request. The underlying session is opened on the
    first operation, so code paths that never persist anything never connect.
    Every write commits on its own: a message appended before a failing step
    stays appended.
    """

    def __init__(self, database: Database):
        self.database = database
        self._session: AsyncSession | None = None

    @property
    def session_opened(self) -> bool:
        return self._session is not None

    def _get_session(self) -> AsyncSession:
        if self._session is None:
            self._session = self.database.session_factory()
        return self._session

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def get_user(self, user_id: str) -> User | None:
        """Get a user by identity-provider ID."""
        session = self._get_session()
        try:
            return await session.get(User, user_id)
        except SQLAlchemyError as e:
            logger.error("Failed to load user %s: %s", user_id, str(e))
            raise StorageError("Failed to load user") from e

    async def create_conversation(
        self,
        owner_id: str,
        title: str,
        initial_messages: Iterable[tuple[MessageRole, str]] = (),
    ) -> Conversation:
        """Create a conversation and its initial messages in one transaction."""
        session = self._get_session()
        conversation = Conversation(user_id=owner_id, title=title)
        try:
            session.add(conversation)
            await session.flush()
            for position, (role, content) in enumerate(initial_messages):
                session.add(
                    Message(conversation_id=conversation.id, role=role, content=content, position=position)
                )
            await session.flush()
            await session.commit()
            await session.refresh(conversation)
            return conversation
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error("Failed to create conversation for %s: %s", owner_id, str(e))
            raise StorageError("Failed to create conversation") from e

    async def get_conversation(self, conversation_id: str) -> Conversation | None:
        session = self._get_session()
        try:
            return await session.get(Conversation, conversation_id)
        except SQLAlchemyError as e:
            logger.error("Failed to load conversation %s: %s", conversation_id, str(e))
            raise StorageError("Failed to load conversation") from e

    async def append_message(self, conversation_id: str, role: MessageRole, content: str) -> Message:
        """Append a message after the last one and bump the conversation's updated_at."""
        session = self._get_session()
        try:
            position = await session.scalar(
                select(func.coalesce(func.max(Message.position) + 1, 0)).where(
                    Message.conversation_id == conversation_id
                )
            )
            message = Message(conversation_id=conversation_id, role=role, content=content, position=position)
            session.add(message)
            await session.execute(
                update(Conversation)
                .where(Conversation.id == conversation_id)
                .values(updated_at=utcnow())
            )
            await session.commit()
            await session.refresh(message)
            return message
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error("Failed to append %s message to %s: %s", role.value, conversation_id, str(e))
            raise StorageError("Failed to save message") from e

    async def list_conversations(self, owner_id: str) -> list[Conversation]:
        """Conversations owned by a user, most recently updated first."""
        session = self._get_session()
        query = (
            select(Conversation)
            .where(Conversation.user_id == owner_id)
            .order_by(Conversation.updated_at.desc())
        )
        try:
            result = await session.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Failed to list conversations for %s: %s", owner_id, str(e))
            raise StorageError("Failed to list conversations") from e

    async def list_messages(self, conversation_id: str) -> list[Message]:
        """Messages of a conversation in creation order."""
        session = self._get_session()
        query = (
            select(Message)
            .where(Message.conversation_id == conversation_id)
            .order_by(Message.position, Message.created_at)
        )
        try:
            result = await session.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Failed to list messages for %s: %s", conversation_id, str(e))
            raise StorageError("Failed to load messages") from e
