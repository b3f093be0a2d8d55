"""Access rule per v1 route name. Routes missing here require authentication."""

from app.models.user import UserRole
from app.services.auth_gate import AUTHENTICATED, PUBLIC, RouteAccess

ADMIN_ONLY = RouteAccess.for_roles(UserRole.ADMIN)

ROUTE_ACCESS: dict[str, RouteAccess] = {
    "health.get": PUBLIC,
    "auth.register": PUBLIC,
    "auth.login": PUBLIC,
    "auth.refresh": PUBLIC,
    "auth.logout": AUTHENTICATED,
    "auth.me": AUTHENTICATED,
    "users.list": ADMIN_ONLY,
    "users.get": ADMIN_ONLY,
}


def access_for_route(route_name: str | None) -> RouteAccess:
    if route_name is None:
        return AUTHENTICATED
    return ROUTE_ACCESS.get(route_name, AUTHENTICATED)
