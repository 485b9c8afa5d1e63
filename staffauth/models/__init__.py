"""SQLAlchemy ORM models."""

from staffauth.models.base import Base
from staffauth.models.user import User

__all__ = ["Base", "User"]
