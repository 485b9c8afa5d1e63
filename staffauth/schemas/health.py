"""Pydantic schemas for health check responses."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Body returned by GET /health."""

    status: Literal["ok"] = "ok"
    environment: str = Field(description="APP_ENV the process runs with")
    database: Literal["connected", "disconnected"] = Field(
        description="Result of a trivial query against the users database",
    )
