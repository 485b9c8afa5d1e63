"""User directory: data access over the users table."""

import logging
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from staffauth.core.database import apply_statement_timeout
from staffauth.models import User
from staffauth.services.errors import DuplicateUserError, NotFoundError, StorageError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
DEFAULT_PAGE = 1
MAX_PAGE_SIZE = 1000


def _escape_like(pattern: str) -> str:
    """Escape LIKE wildcards so the pattern matches literally."""
    return pattern.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def resolve_start_index(page: int, page_size: int, start_index_override: str | None) -> int:
    """
    Zero-based offset of the requested page.

    An explicit start index wins when it parses to a non-negative integer;
    otherwise the offset is (page - 1) * page_size.
    """
    if start_index_override is not None and start_index_override.strip():
        try:
            start = int(start_index_override.strip())
        except ValueError:
            start = -1
        if start >= 0:
            return start
    return (page - 1) * page_size


class UserDirectory:
    """Create, look up, update and page through users within one DB session."""

    def __init__(self, session: Session, timeout_seconds: float) -> None:
        self.session = session
        self.timeout_seconds = timeout_seconds

    def _bound(self) -> None:
        apply_statement_timeout(self.session, self.timeout_seconds)

    def _storage_error(self, action: str, exc: SQLAlchemyError) -> StorageError:
        self.session.rollback()
        if isinstance(exc, OperationalError) and "statement timeout" in str(exc.orig):
            logger.warning("Timed out while %s after %ss", action, self.timeout_seconds)
            return StorageError("database operation timed out", cause=exc)
        logger.error("Database error while %s: %s", action, exc)
        return StorageError(f"error occurred while {action}", cause=exc)

    def _count_containing(self, column, pattern: str, action: str) -> int:
        try:
            self._bound()
            count = (
                self.session.query(func.count(User.id))
                .filter(column.ilike(f"%{_escape_like(pattern)}%", escape="\\"))
                .scalar()
            )
        except SQLAlchemyError as e:
            raise self._storage_error(action, e) from e
        return int(count or 0)

    def email_exists(self, pattern: str) -> int:
        """Number of users whose email contains `pattern`, case-insensitively."""
        return self._count_containing(User.email, pattern, "checking for the email")

    def staff_number_exists(self, pattern: str) -> int:
        """Number of users whose staff number contains `pattern`, case-insensitively."""
        return self._count_containing(User.staff_no, pattern, "checking for the staff number")

    def insert(self, user: User) -> str:
        """Persist a new user and return its user_id."""
        try:
            self._bound()
            self.session.add(user)
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise DuplicateUserError("this user already exists", cause=e) from e
        except SQLAlchemyError as e:
            raise self._storage_error("creating the user", e) from e
        return user.user_id

    def _find_one(self, criterion, action: str) -> User:
        try:
            self._bound()
            user = self.session.query(User).filter(criterion).first()
        except SQLAlchemyError as e:
            raise self._storage_error(action, e) from e
        if user is None:
            raise NotFoundError("user not found")
        return user

    def find_by_staff_number(self, staff_no: str) -> User:
        return self._find_one(User.staff_no == staff_no, "looking up the staff number")

    def find_by_id(self, user_id: str) -> User:
        return self._find_one(User.user_id == user_id, "looking up the user")

    def update_name(self, internal_id: str, name: str) -> None:
        """Set the user's name. updated_at is left untouched."""
        try:
            self._bound()
            matched = (
                self.session.query(User)
                .filter(User.id == internal_id)
                .update({User.name: name}, synchronize_session=False)
            )
            self.session.commit()
        except SQLAlchemyError as e:
            raise self._storage_error("updating the user", e) from e
        if matched == 0:
            raise NotFoundError("user not found")

    def update_tokens(
        self,
        user_id: str,
        token: str,
        refresh_token: str,
        updated_at: datetime,
    ) -> None:
        try:
            self._bound()
            matched = (
                self.session.query(User)
                .filter(User.user_id == user_id)
                .update(
                    {
                        User.token: token,
                        User.refresh_token: refresh_token,
                        User.updated_at: updated_at,
                    },
                    synchronize_session=False,
                )
            )
            self.session.commit()
        except SQLAlchemyError as e:
            raise self._storage_error("saving the tokens", e) from e
        if matched == 0:
            raise NotFoundError("user not found")

    def list_page(
        self,
        page: int = DEFAULT_PAGE,
        page_size: int = DEFAULT_PAGE_SIZE,
        start_index_override: str | None = None,
    ) -> tuple[int, list[User]]:
        """
        Return (total user count, users in [start, start + page_size)).

        Users are ordered by creation time. An empty table gives (0, []).
        """
        start = resolve_start_index(page, page_size, start_index_override)
        try:
            self._bound()
            total = self.session.query(func.count(User.id)).scalar() or 0
            if total == 0 or start >= total:
                return int(total), []
            users = (
                self.session.query(User)
                .order_by(User.created_at, User.id)
                .offset(start)
                .limit(page_size)
                .all()
            )
        except SQLAlchemyError as e:
            raise self._storage_error("listing user items", e) from e
        return int(total), users
