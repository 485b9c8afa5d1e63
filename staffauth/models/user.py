"""ORM model for staff user accounts (auth and RBAC)."""

from sqlalchemy import Column, DateTime, String, Text, func

from staffauth.models.base import Base


class User(Base):
    """
    Staff user account with its current JWT pair.

    id is generated by the service at signup and duplicated into user_id, which
    is what tokens and API paths refer to.
    user_type: 'ADMIN' or 'USER'
    """

    __tablename__ = "users"

    id = Column(String(32), primary_key=True)
    user_id = Column(String(32), nullable=False, unique=True, index=True)
    name = Column(String(100), nullable=False)
    staff_no = Column(String(64), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password = Column(String(255), nullable=False)
    user_type = Column(String(16), nullable=False, default="USER")
    token = Column(Text, nullable=True)
    refresh_token = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
