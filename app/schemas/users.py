"""Response schemas for admin user listing."""

from app.schemas.auth import UserIdentity
from app.schemas.common import CamelModel


class UsersPage(CamelModel):
    """Response for GET /users (admin only)."""

    items: list[UserIdentity]
    total: int
    page: int
    limit: int
