"""User endpoints: signup, signin, fetch, edit and admin listing."""

from typing import Annotated, Any

import jwt
from fastapi import APIRouter, Depends, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from staffauth.core.config import Settings, get_settings
from staffauth.core.database import get_db
from staffauth.schemas.user import (
    ApiResponse,
    Caller,
    EditUserRequest,
    LoginRequest,
    SignupRequest,
)
from staffauth.services.directory import UserDirectory
from staffauth.services.errors import AuthenticationError
from staffauth.services.tokens import TokenIssuer
from staffauth.services.users import UserService

router = APIRouter()
# Mounted only when USER_ADMIN_ROUTES_ENABLED is set.
admin_router = APIRouter()
security = HTTPBearer(auto_error=False)


def _ok(status_code: int, data: Any) -> ApiResponse:
    if hasattr(data, "model_dump"):
        data = data.model_dump(mode="json")
    return ApiResponse(status=status_code, message="success", data=data)


def get_token_issuer(
    settings: Annotated[Settings, Depends(get_settings)],
) -> TokenIssuer:
    return TokenIssuer(settings)


def get_user_service(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> UserService:
    """Service bound to the request's session with the general DB budget."""
    directory = UserDirectory(db, settings.DB_TIMEOUT_SEC)
    return UserService(directory, issuer, bcrypt_rounds=settings.BCRYPT_ROUNDS)


def get_signup_service(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> UserService:
    """Service bound to the request's session with the shorter signup budget."""
    directory = UserDirectory(db, settings.SIGNUP_DB_TIMEOUT_SEC)
    return UserService(directory, issuer, bcrypt_rounds=settings.BCRYPT_ROUNDS)


def get_current_caller(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> Caller:
    """Dependency: require a valid Bearer access token and return its identity claims."""
    if credentials is None:
        raise AuthenticationError("No Authorization header provided")
    try:
        payload = issuer.decode_access_token(credentials.credentials)
    except jwt.PyJWTError as e:
        raise AuthenticationError("Invalid or expired token", cause=e) from e
    uid = payload.get("uid")
    user_type = payload.get("user_type")
    if not uid or not user_type:
        raise AuthenticationError("Invalid token payload")
    return Caller(
        user_id=uid,
        user_type=user_type,
        email=payload.get("email"),
        name=payload.get("name"),
        staff_no=payload.get("staff_no"),
    )


@router.post("/signup", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
def signup(
    body: SignupRequest,
    service: Annotated[UserService, Depends(get_signup_service)],
) -> ApiResponse:
    """Register a user; returns the id of the created record."""
    result = service.signup(body)
    return _ok(status.HTTP_201_CREATED, result)


@router.post("/signin", response_model=ApiResponse)
def signin(
    body: LoginRequest,
    service: Annotated[UserService, Depends(get_user_service)],
) -> ApiResponse:
    """
    Authenticate with staff number and password; returns the user record with a fresh token pair.
    Send the access token on later calls as: Authorization: Bearer <token>
    """
    return _ok(status.HTTP_200_OK, service.login(body))


@router.get("/{user_id}", response_model=ApiResponse)
def get_user(
    user_id: str,
    caller: Annotated[Caller, Depends(get_current_caller)],
    service: Annotated[UserService, Depends(get_user_service)],
) -> ApiResponse:
    """Return one user. Allowed for that user and for admins."""
    return _ok(status.HTTP_200_OK, service.get_user(caller, user_id))


@admin_router.patch("/edit", response_model=ApiResponse)
def edit_user(
    body: EditUserRequest,
    caller: Annotated[Caller, Depends(get_current_caller)],
    service: Annotated[UserService, Depends(get_user_service)],
    internal_id: Annotated[str | None, Query(alias="id")] = None,
) -> ApiResponse:
    """Rename the user whose internal id is given in ?id=."""
    return _ok(status.HTTP_200_OK, service.edit_user(caller, internal_id, body))


@admin_router.get("", response_model=ApiResponse)
def get_users(
    caller: Annotated[Caller, Depends(get_current_caller)],
    service: Annotated[UserService, Depends(get_user_service)],
    page: Annotated[str | None, Query()] = None,
    record_per_page: Annotated[str | None, Query(alias="recordPerPage")] = None,
    start_index: Annotated[str | None, Query(alias="startIndex")] = None,
) -> ApiResponse:
    """List users a page at a time (admin only)."""
    result = service.get_users(caller, page, record_per_page, start_index)
    return _ok(status.HTTP_200_OK, result)
