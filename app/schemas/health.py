"""Pydantic schemas for health check responses."""

from typing import Literal

from pydantic import Field

from app.schemas.common import CamelModel


class HealthResponse(CamelModel):
    """Response body for the health check endpoint."""

    status: Literal["ok", "degraded"] = Field(default="ok", description="Service status")
    environment: str = Field(description="Current app environment (dev or prod)")
    database: Literal["connected", "disconnected"] = Field(
        description="Database connectivity at the time of the check",
    )
