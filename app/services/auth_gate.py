"""
Per-request guard: access-token check, identity load and role check.

Each route is described by a RouteAccess. Public routes are admitted without
looking at the request. Everything else needs a valid access token whose
subject still exists and is active (loaded fresh, so deactivation and role
changes apply immediately). When the route names roles, the user's role must
be one of them.
"""

import logging
from dataclasses import dataclass, field

from app.models.user import UserRole
from app.repositories.users import UserRepository
from app.schemas.auth import UserIdentity
from app.services.errors import AuthenticationError, AuthorizationError, InvalidTokenError
from app.services.tokens import TokenIssuer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouteAccess:
    """Access rule for one route: public, or authenticated with optional role set."""

    public: bool = False
    roles: frozenset[UserRole] = field(default_factory=frozenset)

    @classmethod
    def for_roles(cls, *roles: UserRole) -> "RouteAccess":
        return cls(public=False, roles=frozenset(roles))


PUBLIC = RouteAccess(public=True)
AUTHENTICATED = RouteAccess()


class AuthGate:
    """Admit or reject a request given its route's RouteAccess and bearer token."""

    def __init__(self, *, issuer: TokenIssuer, users: UserRepository) -> None:
        self._issuer = issuer
        self._users = users

    def admit(self, access: RouteAccess, bearer_token: str | None) -> UserIdentity | None:
        """
        Return the identity to attach to the request (None for public routes).

        Raises AuthenticationError (401) or AuthorizationError (403).
        """
        if access.public:
            return None
        identity = self.authenticate(bearer_token)
        self.authorize(identity, access)
        return identity

    def authenticate(self, bearer_token: str | None) -> UserIdentity:
        if not bearer_token:
            raise AuthenticationError("Authentication required")
        claims = self._issuer.verify_access(bearer_token)
        user = self._users.get_by_id(claims["sub"])
        if user is None or not user.is_active:
            logger.info("Access token rejected: user missing or inactive")
            raise InvalidTokenError("Invalid or expired token")
        return UserIdentity.model_validate(user)

    @staticmethod
    def authorize(identity: UserIdentity, access: RouteAccess) -> None:
        if access.roles and identity.role not in access.roles:
            logger.info(
                "Access denied: role not permitted",
                extra={"user_id": identity.id, "role": identity.role.value},
            )
            raise AuthorizationError("Insufficient permissions")
