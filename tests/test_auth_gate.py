"""Unit tests for app.services.auth_gate and the route access table."""

import unittest
from datetime import timedelta

from app.api.access import ADMIN_ONLY, ROUTE_ACCESS, access_for_route
from app.models.user import UserRole
from app.services.auth_gate import AUTHENTICATED, PUBLIC, AuthGate, RouteAccess
from app.services.errors import AuthenticationError, AuthorizationError, InvalidTokenError
from app.services.tokens import TokenIssuer
from tests.fakes import (
    ACCESS_SECRET,
    REFRESH_SECRET,
    FakeClock,
    InMemoryUserRepository,
    add_user,
)


class TestAuthGate(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = FakeClock()
        self.repo = InMemoryUserRepository()
        self.issuer = TokenIssuer(
            access_secret=ACCESS_SECRET,
            refresh_secret=REFRESH_SECRET,
            access_ttl=timedelta(minutes=15),
            clock=self.clock,
        )
        self.gate = AuthGate(issuer=self.issuer, users=self.repo)
        self.customer = add_user(self.repo, "carol")
        self.admin = add_user(self.repo, "root", role=UserRole.ADMIN)

    def _access_token(self, user) -> str:
        return self.issuer.issue_pair(user).access_token

    def test_public_route_admits_without_token(self) -> None:
        self.assertIsNone(self.gate.admit(PUBLIC, None))
        self.assertIsNone(self.gate.admit(PUBLIC, "garbage"))

    def test_missing_token_is_authentication_required(self) -> None:
        with self.assertRaises(AuthenticationError) as ctx:
            self.gate.admit(AUTHENTICATED, None)
        self.assertNotIsInstance(ctx.exception, InvalidTokenError)
        self.assertEqual(ctx.exception.message, "Authentication required")

    def test_valid_token_attaches_fresh_identity(self) -> None:
        identity = self.gate.admit(AUTHENTICATED, self._access_token(self.customer))
        self.assertEqual(identity.id, self.customer.id)
        self.assertEqual(identity.username, "carol")

    def test_invalid_token(self) -> None:
        with self.assertRaises(InvalidTokenError):
            self.gate.admit(AUTHENTICATED, "not-a-token")

    def test_refresh_token_not_accepted_as_bearer(self) -> None:
        refresh_token = self.issuer.issue_pair(self.customer).refresh_token
        with self.assertRaises(InvalidTokenError):
            self.gate.admit(AUTHENTICATED, refresh_token)

    def test_expired_token(self) -> None:
        token = self._access_token(self.customer)
        self.clock.advance(minutes=15)
        with self.assertRaises(InvalidTokenError):
            self.gate.admit(AUTHENTICATED, token)

    def test_deactivated_user_rejected_with_still_valid_token(self) -> None:
        token = self._access_token(self.customer)
        self.customer.is_active = False
        with self.assertRaises(InvalidTokenError):
            self.gate.admit(AUTHENTICATED, token)

    def test_deleted_user_rejected(self) -> None:
        token = self._access_token(self.customer)
        del self.repo._users[self.customer.id]
        with self.assertRaises(InvalidTokenError):
            self.gate.admit(AUTHENTICATED, token)

    def test_role_not_permitted(self) -> None:
        with self.assertRaises(AuthorizationError) as ctx:
            self.gate.admit(ADMIN_ONLY, self._access_token(self.customer))
        self.assertEqual(ctx.exception.status_code, 403)

    def test_role_permitted(self) -> None:
        identity = self.gate.admit(ADMIN_ONLY, self._access_token(self.admin))
        self.assertEqual(identity.role, UserRole.ADMIN)

    def test_role_change_applies_before_token_expiry(self) -> None:
        token = self._access_token(self.admin)
        self.admin.role = UserRole.CUSTOMER
        with self.assertRaises(AuthorizationError):
            self.gate.admit(ADMIN_ONLY, token)

    def test_multiple_roles(self) -> None:
        vendor = add_user(self.repo, "vic", role=UserRole.VENDOR)
        access = RouteAccess.for_roles(UserRole.ADMIN, UserRole.VENDOR)
        self.assertEqual(self.gate.admit(access, self._access_token(vendor)).id, vendor.id)
        with self.assertRaises(AuthorizationError):
            self.gate.admit(access, self._access_token(self.customer))


class TestRouteAccessTable(unittest.TestCase):
    def test_unknown_route_requires_authentication(self) -> None:
        self.assertEqual(access_for_route("no.such.route"), AUTHENTICATED)
        self.assertEqual(access_for_route(None), AUTHENTICATED)

    def test_auth_entry_points_are_public(self) -> None:
        for name in ("auth.register", "auth.login", "auth.refresh", "health.get"):
            with self.subTest(route=name):
                self.assertTrue(ROUTE_ACCESS[name].public)

    def test_user_management_is_admin_only(self) -> None:
        self.assertEqual(ROUTE_ACCESS["users.list"].roles, frozenset({UserRole.ADMIN}))
        self.assertEqual(ROUTE_ACCESS["users.get"].roles, frozenset({UserRole.ADMIN}))


if __name__ == "__main__":
    unittest.main()
