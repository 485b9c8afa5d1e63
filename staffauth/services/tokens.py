"""Token issuer: mint access/refresh JWTs for a user and store them on the user record."""

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from staffauth.core.security import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    create_token,
    decode_token,
)
from staffauth.services.directory import UserDirectory
from staffauth.services.errors import StorageError, UserServiceError

if TYPE_CHECKING:
    from staffauth.core.config import Settings

logger = logging.getLogger(__name__)


class TokenIssuer:
    """Signs tokens with the process-wide JWT settings."""

    def __init__(self, settings: "Settings") -> None:
        self.settings = settings

    @property
    def _secret(self) -> str:
        return self.settings.JWT_SECRET.get_secret_value()

    def issue_tokens(
        self,
        email: str,
        name: str,
        staff_no: str,
        user_type: str,
        user_id: str,
    ) -> tuple[str, str]:
        """Return (access_token, refresh_token) carrying the user's identity claims."""
        claims: dict[str, Any] = {
            "email": email,
            "name": name,
            "staff_no": staff_no,
            "user_type": user_type,
            "uid": user_id,
        }
        access_token = create_token(
            claims,
            ACCESS_TOKEN_TYPE,
            self.settings.ACCESS_TOKEN_EXPIRE_MINUTES,
            self._secret,
            self.settings.JWT_ALGORITHM,
        )
        refresh_token = create_token(
            claims,
            REFRESH_TOKEN_TYPE,
            self.settings.REFRESH_TOKEN_EXPIRE_MINUTES,
            self._secret,
            self.settings.JWT_ALGORITHM,
        )
        return access_token, refresh_token

    def persist_tokens(
        self,
        directory: UserDirectory,
        access_token: str,
        refresh_token: str,
        user_id: str,
    ) -> None:
        """Write the token pair and a fresh updated_at onto the user. Failures are logged and re-raised."""
        try:
            directory.update_tokens(
                user_id,
                access_token,
                refresh_token,
                updated_at=datetime.now(UTC),
            )
        except UserServiceError as e:
            logger.error("Failed to persist tokens for user_id=%s: %s", user_id, e.message)
            if isinstance(e, StorageError):
                raise
            raise StorageError("could not save the new tokens", cause=e) from e

    def decode_access_token(self, token: str) -> dict[str, Any]:
        """Validate an access token and return its claims. Raises jwt.PyJWTError."""
        return decode_token(
            token,
            self._secret,
            self.settings.JWT_ALGORITHM,
            expected_type=ACCESS_TOKEN_TYPE,
        )
