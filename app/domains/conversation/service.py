"""Conversation service: turn submission and the conversation read path."""

import logging
from collections.abc import Sequence
from typing import Any

from app.domains.conversation.store import ConversationStore
from app.exceptions.base import (
    AuthenticationRequired,
    ForbiddenError,
    NotFoundError,
    StorageError,
)
from app.exceptions.inference import InferenceConfigurationError, InferenceProviderError
from app.inference.base import InferenceProvider
from app.schemas.conversation import (
    ChatMessage,
    ChatReply,
    ChatResponse,
    ConversationDetailResponse,
    ConversationListResponse,
    ConversationResponse,
    ConversationSummary,
    MessageResponse,
)
from models import Conversation, MessageRole


logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant."
DEFAULT_CONVERSATION_TITLE = "New conversation"
TITLE_MAX_LENGTH = 30


def find_latest_unanswered_user_message(messages: Sequence[ChatMessage]) -> ChatMessage | None:
    """Return the last user turn that no assistant turn follows, if any."""
    for message in reversed(messages):
        if message.role == MessageRole.ASSISTANT:
            return None
        if message.role == MessageRole.USER:
            return message
    return None


def derive_conversation_title(messages: Sequence[ChatMessage]) -> str:
    """Title a new conversation after its first user turn.

    The ellipsis is appended even when nothing was cut off.
    """
    for message in messages:
        if message.role == MessageRole.USER:
            return f"{message.content[:TITLE_MAX_LENGTH]}..."
    return DEFAULT_CONVERSATION_TITLE


def normalize_reply(raw: Any) -> ChatReply:
    """Reduce whatever the provider returned to an assistant role/content pair."""
    if isinstance(raw, dict):
        content = raw.get("content")
    else:
        content = getattr(raw, "content", None)
    return ChatReply(role="assistant", content="" if content is None else str(content))


def with_system_prompt(messages: list[MessageResponse]) -> list[MessageResponse]:
    """Prepend the default system prompt when no system message is present."""
    if any(message.role == MessageRole.SYSTEM for message in messages):
        return messages
    return [MessageResponse(role=MessageRole.SYSTEM, content=DEFAULT_SYSTEM_PROMPT), *messages]


class ConversationService:
    """Orchestrates chat turns against the store and the inference provider."""

    def __init__(self, store: ConversationStore, provider: InferenceProvider | None = None):
        """Initialize the service.

        Args:
            store: Request-scoped conversation store.
            provider: Inference provider, only needed to submit turns.
        """
        self.store = store
        self.provider = provider

    async def submit_turn(
        self,
        caller_id: str | None,
        messages: Sequence[ChatMessage],
        conversation_id: str | None = None,
    ) -> ChatResponse:
        """Answer a chat turn, persisting it for signed-in callers.

        Args:
            caller_id: Session user ID, None for anonymous callers
            messages: Full ordered history as sent by the client
            conversation_id: Existing conversation ID, None to start one

        Returns:
            ChatResponse with the assistant reply and the conversation ID
        """
        if caller_id is None:
            # Anonymous exchanges are stateless
            reply = await self._complete(messages)
            return ChatResponse(reply=reply, conversation_id=None)

        conversation = await self._resolve_conversation(caller_id, conversation_id, messages)

        pending = find_latest_unanswered_user_message(messages)
        if pending is not None:
            await self.store.append_message(conversation.id, MessageRole.USER, pending.content)

        reply = await self._complete(messages)
        await self._save_reply(conversation.id, reply)

        return ChatResponse(reply=reply, conversation_id=conversation.id)

    async def list_conversations(self, caller_id: str | None) -> ConversationListResponse:
        """Get the caller's conversations, most recently updated first."""
        if caller_id is None:
            raise AuthenticationRequired()

        conversations = await self.store.list_conversations(caller_id)
        return ConversationListResponse(
            conversations=[ConversationSummary.model_validate(conv) for conv in conversations]
        )

    async def get_conversation(self, caller_id: str | None, conversation_id: str) -> ConversationDetailResponse:
        """Get a conversation with its messages in creation order.

        Raises:
            AuthenticationRequired: No session
            NotFoundError: Unknown conversation
            ForbiddenError: Conversation owned by someone else
        """
        if caller_id is None:
            raise AuthenticationRequired()

        conversation = await self._get_owned_conversation(caller_id, conversation_id)
        messages = await self.store.list_messages(conversation.id)

        return ConversationDetailResponse(
            conversation=ConversationResponse.model_validate(conversation),
            messages=with_system_prompt([MessageResponse.model_validate(msg) for msg in messages]),
        )

    # Private helper methods

    async def _resolve_conversation(
        self, caller_id: str, conversation_id: str | None, messages: Sequence[ChatMessage]
    ) -> Conversation:
        """Get the caller's conversation or start a new one."""
        if conversation_id:
            return await self._get_owned_conversation(caller_id, conversation_id)

        user = await self.store.get_user(caller_id)
        if user is None:
            raise NotFoundError("User not found")

        conversation = await self.store.create_conversation(
            owner_id=caller_id,
            title=derive_conversation_title(messages),
            initial_messages=[
                (MessageRole.SYSTEM, msg.content) for msg in messages if msg.role == MessageRole.SYSTEM
            ],
        )
        logger.info("Created conversation %s for user %s", conversation.id, caller_id)
        return conversation

    async def _get_owned_conversation(self, caller_id: str, conversation_id: str) -> Conversation:
        conversation = await self.store.get_conversation(conversation_id)
        if conversation is None:
            raise NotFoundError("Conversation not found")
        if conversation.user_id != caller_id:
            raise ForbiddenError("You do not have permission to access this conversation")
        return conversation

    async def _complete(self, messages: Sequence[ChatMessage]) -> ChatReply:
        """Call the inference provider. Failures propagate."""
        if self.provider is None:
            raise InferenceConfigurationError()

        payload = [{"role": msg.role.value, "content": msg.content} for msg in messages]
        try:
            raw = await self.provider.complete(payload)
        except InferenceProviderError:
            raise
        except Exception as e:
            logger.error("Inference provider %s failed: %s", self.provider.name, str(e))
            raise InferenceProviderError(
                upstream_message=str(e),
                upstream_type=type(e).__name__,
            ) from e
        return normalize_reply(raw)

    async def _save_reply(self, conversation_id: str, reply: ChatReply) -> None:
        """Persist the assistant reply. Failures are logged, never raised."""
        try:
            await self.store.append_message(conversation_id, MessageRole.ASSISTANT, reply.content)
        except StorageError as e:
            logger.error("Failed to save assistant reply to %s: %s", conversation_id, e.message)
