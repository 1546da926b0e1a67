# app/core/dependencies.py
import logging
from collections.abc import AsyncGenerator

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import InvalidTokenError

from app.core.config import Settings
from app.core.security import SessionAuthenticator
from app.database import Database
from app.domains.conversation.store import ConversationStore
from app.exceptions.base import AuthenticationRequired
from app.inference.base import InferenceProvider
from app.inference.registry import create_inference_provider

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


async def get_inference_provider(request: Request) -> InferenceProvider:
    """Get the app's inference provider, building it on first use.

    Raises:
        InferenceConfigurationError: If the provider's API key is missing
    """
    provider = getattr(request.app.state, "inference_provider", None)
    if provider is None:
        provider = create_inference_provider(request.app.state.settings)
        request.app.state.inference_provider = provider
    return provider


async def get_conversation_store(
    database: Database = Depends(get_database),
) -> AsyncGenerator[ConversationStore, None]:
    store = ConversationStore(database)
    try:
        yield store
    finally:
        await store.close()


def _session_token(request: Request, credentials: HTTPAuthorizationCredentials | None) -> str | None:
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(request.app.state.settings.session_cookie_name)


async def validate_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> dict | None:
    """Decode the session token from the Authorization header or session cookie.

    Returns:
        dict | None: Decoded token payload, None when no valid token was sent
    """
    token = _session_token(request, credentials)
    if not token:
        return None

    try:
        return SessionAuthenticator(request.app.state.settings).verify_token(token)
    except InvalidTokenError as e:
        logger.warning("Session token rejected: %s", str(e))
        return None


async def get_optional_user_id(
    request: Request,
    payload: dict | None = Depends(validate_token),
) -> str | None:
    """Get current user ID if authenticated, otherwise return None.

    Used for endpoints that also serve anonymous callers.
    """
    if not payload:
        return None

    user_id = payload["sub"]
    request.state.user_id = user_id
    return user_id


async def get_current_user_id(
    user_id: str | None = Depends(get_optional_user_id),
) -> str:
    """Get current user ID from the session.

    Raises:
        AuthenticationRequired: If no valid session is present
    """
    if not user_id:
        raise AuthenticationRequired()
    return user_id
