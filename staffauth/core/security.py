"""Password hashing and JWT creation/verification for authentication."""

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

from staffauth.services.errors import CredentialHashError

logger = logging.getLogger(__name__)

# Work factor used when no setting is supplied.
BCRYPT_ROUNDS = 14

# Shared by unknown staff number and wrong password so neither is revealed.
INCORRECT_CREDENTIALS_MESSAGE = "staff number or password is incorrect"

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def hash_password(plain_password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Hash a plain-text password for storage. Raises CredentialHashError if bcrypt fails."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=rounds)).decode("utf-8")
    except (ValueError, TypeError) as e:
        logger.error("Password hashing failed: %s", e)
        raise CredentialHashError("could not hash password", cause=e) from e


def verify_password(hashed: str, plain_password: str) -> tuple[bool, str]:
    """
    Verify a supplied plain password against a stored hash.

    Returns (True, "") on match, otherwise (False, generic message). A malformed
    stored hash counts as a mismatch.
    """
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        if bcrypt.checkpw(pw_bytes, hashed.encode("utf-8")):
            return True, ""
    except (ValueError, TypeError):
        pass
    return False, INCORRECT_CREDENTIALS_MESSAGE


def create_token(
    claims: dict[str, Any],
    token_type: str,
    expire_minutes: int,
    secret: str,
    algorithm: str,
) -> str:
    """Create a signed JWT carrying `claims` plus typ, iat and exp."""
    now = datetime.now(UTC)
    payload: dict[str, Any] = {
        **claims,
        "typ": token_type,
        "iat": now,
        "exp": now + timedelta(minutes=expire_minutes),
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_token(
    token: str,
    secret: str,
    algorithm: str,
    expected_type: str = ACCESS_TOKEN_TYPE,
) -> dict[str, Any]:
    """
    Decode and validate JWT; return its payload.
    Raises jwt.PyJWTError on invalid or expired token, or when the token type does not match.
    """
    payload = jwt.decode(token, secret, algorithms=[algorithm])
    if payload.get("typ") != expected_type:
        raise jwt.InvalidTokenError(f"expected a {expected_type} token")
    return payload
