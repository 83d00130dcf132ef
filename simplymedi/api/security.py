"""
Access token issuing and verification.

Access tokens are HS256 JWTs signed with `settings.jwt_secret` and carry
the user id in the `userId` claim, the format the SimplyMedi auth service
issues.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from simplymedi.config import settings
from simplymedi.utils.logger import get_logger

logger = get_logger("security")

USER_ID_CLAIM = "userId"


class AuthenticationError(Exception):
    """Raised when an access token cannot be trusted."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def create_access_token(user_id: str, expires_in: Optional[int] = None) -> str:
    """Sign an access token for a user."""
    now = datetime.now(timezone.utc)
    lifetime = settings.jwt_expires_in_seconds if expires_in is None else expires_in
    payload = {
        USER_ID_CLAIM: user_id,
        "iat": now,
        "exp": now + timedelta(seconds=lifetime),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_access_token(token: str) -> str:
    """
    Verify an access token and return its user id.

    Raises:
        AuthenticationError: The token is expired, badly signed, malformed
            or has no user id
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp", USER_ID_CLAIM]},
        )
    except jwt.ExpiredSignatureError as e:
        logger.info("Access token expired")
        raise AuthenticationError("Token expired") from e
    except jwt.PyJWTError as e:
        logger.warning("Access token rejected", error=str(e))
        raise AuthenticationError("Invalid token") from e

    user_id = str(payload[USER_ID_CLAIM]).strip()
    if not user_id:
        raise AuthenticationError("Invalid token")
    return user_id
