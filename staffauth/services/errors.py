"""Error types raised by the user services and mapped to HTTP statuses by the API layer."""


class UserServiceError(Exception):
    """Base error for user management; carries the HTTP status it maps to."""

    status_code = 500

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


class DuplicateUserError(UserServiceError):
    """Email or staff number already registered."""

    status_code = 400


class AuthenticationError(UserServiceError):
    """Missing, invalid or expired bearer token."""

    status_code = 401


class InvalidCredentialsError(UserServiceError):
    """Staff number / password pair did not match."""

    status_code = 401


class AuthorizationError(UserServiceError):
    """Caller is neither the target user nor holds the required role."""

    status_code = 400


class NotFoundError(UserServiceError):
    status_code = 404


class StorageError(UserServiceError):
    """Database unreachable, timed out or rejected the operation."""

    status_code = 500


class CredentialHashError(UserServiceError):
    """The password hashing primitive failed."""

    status_code = 500
