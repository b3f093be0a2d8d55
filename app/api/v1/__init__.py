"""API v1 routes. Every route passes the auth gate (see app.api.access)."""

from fastapi import APIRouter, Depends

from app.api.deps import enforce_route_access
from app.api.v1 import auth, health, users

router = APIRouter(dependencies=[Depends(enforce_route_access)])
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
