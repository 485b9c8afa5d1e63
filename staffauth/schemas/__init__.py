"""Pydantic request/response schemas."""

from staffauth.schemas.health import HealthResponse
from staffauth.schemas.user import (
    ApiResponse,
    Caller,
    EditUserRequest,
    LoginRequest,
    SignupRequest,
    SignupResult,
    UserResponse,
    UsersPage,
)

__all__ = [
    "ApiResponse",
    "Caller",
    "EditUserRequest",
    "HealthResponse",
    "LoginRequest",
    "SignupRequest",
    "SignupResult",
    "UserResponse",
    "UsersPage",
]
