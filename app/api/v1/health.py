"""Liveness plus database reachability. Public."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.api.deps import SettingsDep
from app.core.database import check_db_connected, get_db
from app.core.limiter import rate_limited
from app.schemas.health import HealthResponse

router = APIRouter()


@router.get("", name="health.get", response_model=HealthResponse)
@rate_limited
def get_health(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    settings: SettingsDep,
) -> HealthResponse:
    """Report "degraded" rather than failing when the database is unreachable."""
    connected = check_db_connected(db)
    return HealthResponse(
        status="ok" if connected else "degraded",
        environment=settings.APP_ENV,
        database="connected" if connected else "disconnected",
    )
