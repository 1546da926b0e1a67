"""Security related functions."""

import logging
from datetime import UTC, datetime, timedelta

import jwt
from jwt import InvalidTokenError

from app.core.config import Settings

logger = logging.getLogger(__name__)


class SessionAuthenticator:
    """
    Verifies session tokens issued for signed-in users.

    Tokens are JWTs signed with the shared session secret. The ``sub`` claim is
    the user's identifier at the identity provider.

    :ivar secret_key: The secret used to sign and verify tokens.
    :type secret_key: str
    :ivar algorithm: The JWT signing algorithm.
    :type algorithm: str
    """

    def __init__(self, config: Settings):
        self.secret_key = config.session_secret
        self.algorithm = config.algorithm
        self.expire_minutes = config.access_token_expire_minutes

    def create_token(self, user_id: str, **claims) -> str:
        """Issue a session token for ``user_id``."""
        now = datetime.now(UTC)
        payload = {
            **claims,
            "sub": user_id,
            "iat": now,
            "exp": now + timedelta(minutes=self.expire_minutes),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> dict:
        """
        Decode and verify a session token.

        :param token: The encoded JWT.
        :return: The decoded payload.
        :raises InvalidTokenError: If the signature, expiry or subject is invalid.
        """
        payload = jwt.decode(
            token,
            self.secret_key,
            algorithms=[self.algorithm],
            options={"require": ["sub", "exp"]},
        )
        if not isinstance(payload.get("sub"), str) or not payload["sub"]:
            raise InvalidTokenError("Token subject is missing")
        return payload


def create_session_token(config: Settings, user_id: str, **claims) -> str:
    return SessionAuthenticator(config).create_token(user_id, **claims)
