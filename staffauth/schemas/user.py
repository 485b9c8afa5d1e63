"""Request/response schemas for user endpoints."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

UserType = Literal["ADMIN", "USER"]

# Deliberately loose: one "@", no spaces, a dot in the domain.
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class SignupRequest(BaseModel):
    """Body for POST /users/signup."""

    name: str = Field(..., min_length=2, max_length=100, description="Full name")
    staff_no: str = Field(..., min_length=1, max_length=64, description="Staff number")
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN, description="Email address")
    password: str = Field(..., min_length=6, max_length=128, description="Password")
    user_type: UserType = Field(..., description="ADMIN or USER")


class LoginRequest(BaseModel):
    """Credentials for login."""

    staff_no: str = Field(..., min_length=1, max_length=64, description="Staff number")
    password: str = Field(..., min_length=1, max_length=128, description="Password")


class EditUserRequest(BaseModel):
    """Body for PATCH /users/edit."""

    name: str = Field(..., min_length=2, max_length=100, description="New name")


class UserResponse(BaseModel):
    """Stored user record as returned by the API (password hash omitted)."""

    user_id: str
    name: str
    staff_no: str
    email: str
    user_type: str
    token: str | None = None
    refresh_token: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class SignupResult(BaseModel):
    """Reference to the record created by signup."""

    inserted_id: str


class UsersPage(BaseModel):
    """One page of the admin user listing plus the total number of users."""

    total_count: int
    user_items: list[UserResponse]


class Caller(BaseModel):
    """Identity claims of the authenticated caller, taken from the access token."""

    user_id: str
    user_type: str
    email: str | None = None
    name: str | None = None
    staff_no: str | None = None


class ApiResponse(BaseModel):
    """Envelope shared by every response, success or error."""

    status: int
    message: Literal["success", "error"]
    data: Any = None
