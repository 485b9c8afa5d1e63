"""Engine and per-request sessions for the users database."""

from collections.abc import Generator

from sqlalchemy import Engine, create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from staffauth.core.config import settings


def build_engine(url: str, echo: bool = False) -> Engine:
    """
    Create the engine for DATABASE_URL.

    SQLite connections are shared with FastAPI's threadpool, and an in-memory
    SQLite database lives on a single connection so every session sees it.
    """
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True, echo=echo)
    kwargs: dict = {"connect_args": {"check_same_thread": False}, "echo": echo}
    if url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Request-scoped session; closed once the response is sent."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def database_reachable(db: Session) -> bool:
    """True when the users database answers a trivial query."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        db.rollback()
        return False
    return True


def apply_statement_timeout(db: Session, seconds: float) -> None:
    """
    Bound every statement of the current transaction to `seconds`.

    PostgreSQL cancels the running statement once the budget is spent and the
    driver raises OperationalError. Other dialects have no equivalent; no-op.
    """
    if db.get_bind().dialect.name != "postgresql":
        return
    db.execute(text(f"SET LOCAL statement_timeout = {int(seconds * 1000)}"))
