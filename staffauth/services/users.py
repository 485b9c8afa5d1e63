"""
User service: signup, login, fetch, edit and admin listing.

Framework-free; the API layer resolves the caller and request values, and
translates UserServiceError subclasses into HTTP responses.
"""

import logging
import re
import uuid
from datetime import UTC, datetime
from functools import lru_cache

from staffauth.core.security import (
    BCRYPT_ROUNDS,
    INCORRECT_CREDENTIALS_MESSAGE,
    hash_password,
    verify_password,
)
from staffauth.models import User
from staffauth.schemas.user import (
    Caller,
    EditUserRequest,
    LoginRequest,
    SignupRequest,
    SignupResult,
    UserResponse,
    UsersPage,
)
from staffauth.services.directory import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    UserDirectory,
)
from staffauth.services.errors import (
    DuplicateUserError,
    InvalidCredentialsError,
    NotFoundError,
)
from staffauth.services.guard import ADMIN_ROLE, require_role, require_self_or_role
from staffauth.services.tokens import TokenIssuer

logger = logging.getLogger(__name__)

EDIT_SUCCESS_MESSAGE = "Successfully Updated User's Details"

_USER_ID_RE = re.compile(r"^[0-9a-f]{32}$")


def new_user_id() -> str:
    return uuid.uuid4().hex


@lru_cache
def _placeholder_hash(rounds: int) -> str:
    """Hash checked when the staff number is unknown, so both failures cost one bcrypt run."""
    return hash_password(uuid.uuid4().hex, rounds)


def _parse_positive(raw: str | None, default: int, maximum: int | None = None) -> int:
    """Parse a query value as an int >= 1, falling back to `default` and clamping to `maximum`."""
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    if value < 1:
        return default
    if maximum is not None and value > maximum:
        return maximum
    return value


class UserService:
    """Orchestrates hasher, token issuer, guard and directory for each user operation."""

    def __init__(
        self,
        directory: UserDirectory,
        issuer: TokenIssuer,
        bcrypt_rounds: int = BCRYPT_ROUNDS,
    ) -> None:
        self.directory = directory
        self.issuer = issuer
        self.bcrypt_rounds = bcrypt_rounds

    def signup(self, body: SignupRequest) -> SignupResult:
        """Register a new user. Raises DuplicateUserError if email or staff number is taken."""
        if self.directory.email_exists(body.email) > 0:
            raise DuplicateUserError("this email already exists")
        if self.directory.staff_number_exists(body.staff_no) > 0:
            raise DuplicateUserError("this user already exists")

        password_hash = hash_password(body.password, self.bcrypt_rounds)
        now = datetime.now(UTC)
        user_id = new_user_id()
        token, refresh_token = self.issuer.issue_tokens(
            body.email, body.name, body.staff_no, body.user_type, user_id
        )
        user = User(
            id=user_id,
            user_id=user_id,
            name=body.name,
            staff_no=body.staff_no,
            email=body.email,
            password=password_hash,
            user_type=body.user_type,
            token=token,
            refresh_token=refresh_token,
            created_at=now,
            updated_at=now,
        )
        inserted_id = self.directory.insert(user)
        logger.info("Signed up user_id=%s user_type=%s", inserted_id, body.user_type)
        return SignupResult(inserted_id=inserted_id)

    def login(self, body: LoginRequest) -> UserResponse:
        """
        Check credentials, rotate the token pair and return the refreshed record.
        Unknown staff number and wrong password raise the same InvalidCredentialsError.
        """
        try:
            found = self.directory.find_by_staff_number(body.staff_no)
        except NotFoundError as e:
            verify_password(_placeholder_hash(self.bcrypt_rounds), body.password)
            raise InvalidCredentialsError(INCORRECT_CREDENTIALS_MESSAGE) from e

        is_valid, msg = verify_password(found.password, body.password)
        if not is_valid:
            raise InvalidCredentialsError(msg)

        token, refresh_token = self.issuer.issue_tokens(
            found.email, found.name, found.staff_no, found.user_type, found.user_id
        )
        self.issuer.persist_tokens(self.directory, token, refresh_token, found.user_id)
        refreshed = self.directory.find_by_id(found.user_id)
        logger.info("Login succeeded for user_id=%s", refreshed.user_id)
        return UserResponse.model_validate(refreshed)

    def get_user(self, caller: Caller, user_id: str) -> UserResponse:
        """Fetch one user; callers may read themselves, admins anyone."""
        require_self_or_role(caller.user_id, caller.user_type, user_id, ADMIN_ROLE)
        return UserResponse.model_validate(self.directory.find_by_id(user_id))

    def edit_user(self, caller: Caller, raw_id: str | None, body: EditUserRequest) -> str:
        """Rename a user addressed by internal id; callers may edit themselves, admins anyone."""
        internal_id = (raw_id or "").strip()
        if not internal_id:
            raise NotFoundError("Invalid")
        if not _USER_ID_RE.match(internal_id):
            raise NotFoundError(f"malformed user id: {internal_id}")
        require_self_or_role(caller.user_id, caller.user_type, internal_id, ADMIN_ROLE)
        self.directory.update_name(internal_id, body.name)
        logger.info("Renamed user id=%s", internal_id)
        return EDIT_SUCCESS_MESSAGE

    def get_users(
        self,
        caller: Caller,
        page: str | None = None,
        record_per_page: str | None = None,
        start_index: str | None = None,
    ) -> UsersPage:
        """Admin-only page of users with the total count."""
        require_role(caller.user_type, ADMIN_ROLE)
        page_size = _parse_positive(record_per_page, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE)
        page_number = _parse_positive(page, DEFAULT_PAGE)
        total, users = self.directory.list_page(page_number, page_size, start_index)
        return UsersPage(
            total_count=total,
            user_items=[UserResponse.model_validate(u) for u in users],
        )
