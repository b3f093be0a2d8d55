"""Admin-only user lookup (read-only)."""

from fastapi import APIRouter, Query, Request

from app.api.deps import UserRepositoryDep
from app.core.limiter import rate_limited
from app.schemas.auth import UserIdentity
from app.schemas.common import ErrorEnvelope
from app.schemas.users import UsersPage
from app.services.errors import NotFoundError

router = APIRouter()

_ERRORS = {
    401: {"model": ErrorEnvelope, "description": "Not authenticated"},
    403: {"model": ErrorEnvelope, "description": "ADMIN role required"},
}


@router.get("", name="users.list", response_model=UsersPage, responses=_ERRORS)
@rate_limited
def list_users(
    request: Request,
    users: UserRepositoryDep,
    page: int = Query(default=1, ge=1, description="Page number"),
    limit: int = Query(default=10, ge=1, le=100, description="Items per page"),
) -> UsersPage:
    """List users, newest first (ADMIN only)."""
    rows = users.list_users(offset=(page - 1) * limit, limit=limit)
    return UsersPage(
        items=[UserIdentity.model_validate(u) for u in rows],
        total=users.count_users(),
        page=page,
        limit=limit,
    )


@router.get(
    "/{user_id}",
    name="users.get",
    response_model=UserIdentity,
    responses={**_ERRORS, 404: {"model": ErrorEnvelope, "description": "User not found"}},
)
@rate_limited
def get_user(request: Request, user_id: str, users: UserRepositoryDep) -> UserIdentity:
    """Fetch one user by id (ADMIN only)."""
    user = users.get_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return UserIdentity.model_validate(user)
