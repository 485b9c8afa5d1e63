"""Core app configuration and database."""

from staffauth.core.config import get_settings, settings
from staffauth.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
