"""Health check endpoint with database connectivity check."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from staffauth.core.config import Settings, get_settings
from staffauth.core.database import database_reachable, get_db
from staffauth.schemas.health import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def get_health(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> HealthResponse:
    """Report process status and whether the users database answers."""
    db_status = "connected" if database_reachable(db) else "disconnected"
    return HealthResponse(environment=settings.APP_ENV, database=db_status)
