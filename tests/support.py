"""Shared fixtures for tests: in-memory SQLite database, settings and sample users."""

from datetime import UTC, datetime, timedelta

from sqlalchemy.orm import sessionmaker

from staffauth.core.config import Settings
from staffauth.core.database import build_engine
from staffauth.core.security import hash_password
from staffauth.models import Base, User
from staffauth.schemas.user import SignupRequest

TEST_PASSWORD = "correct-horse"


def make_engine():
    """Fresh in-memory SQLite engine with the users table created."""
    engine = build_engine("sqlite://")
    Base.metadata.create_all(engine)
    return engine


def make_session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def make_settings(**overrides: object) -> Settings:
    """Settings with a cheap bcrypt cost and a fixed secret."""
    values: dict[str, object] = {
        "BCRYPT_ROUNDS": 4,
        "JWT_SECRET": "test-secret",
        "DATABASE_URL": "sqlite://",
    }
    values.update(overrides)
    return Settings(**values)


def signup_body(n: int = 1, **overrides: object) -> SignupRequest:
    """Build a valid SignupRequest; n keeps email and staff number unique."""
    values: dict[str, object] = {
        "name": f"User {n}",
        "staff_no": f"STAFF-{n:04d}",
        "email": f"user{n:04d}@example.com",
        "password": TEST_PASSWORD,
        "user_type": "USER",
    }
    values.update(overrides)
    return SignupRequest(**values)


def make_user(n: int = 1, user_type: str = "USER", **overrides: object) -> User:
    """Build a User row directly (no service), created n minutes after a fixed epoch."""
    created = datetime(2026, 1, 1, tzinfo=UTC) + timedelta(minutes=n)
    user_id = f"{n:032x}"
    values: dict[str, object] = {
        "id": user_id,
        "user_id": user_id,
        "name": f"User {n}",
        "staff_no": f"STAFF-{n:04d}",
        "email": f"user{n:04d}@example.com",
        "password": hash_password(TEST_PASSWORD, rounds=4),
        "user_type": user_type,
        "created_at": created,
        "updated_at": created,
    }
    values.update(overrides)
    return User(**values)
