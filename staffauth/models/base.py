"""SQLAlchemy declarative Base and shared model configuration."""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

# Index names match those created by the Alembic migrations.
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
}


class Base(DeclarativeBase):
    """Declarative base for the users schema."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)
