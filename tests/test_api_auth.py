"""End-to-end tests: the HTTP auth flow through the full application."""

import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from app.core.config import get_settings
from app.core.database import SessionLocal, engine, get_db
from app.core.limiter import limiter
from app.core.security import hash_password
from app.main import app
from app.models import Base, UserRole
from app.repositories.users import UserRepository
from tests.fakes import FAST_ROUNDS

PREFIX = "/api/v1"
PASSWORD = "correct-horse-1"


def _registration(username: str = "alice", email: str | None = None) -> dict[str, str]:
    return {
        "email": email or f"{username}@example.com",
        "username": username,
        "password": PASSWORD,
        "firstName": "Alice",
        "lastName": "Liddell",
    }


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class ApiTestCase(unittest.TestCase):
    def setUp(self) -> None:
        Base.metadata.create_all(bind=engine)
        self.client = TestClient(app)

    def tearDown(self) -> None:
        self.client.close()
        Base.metadata.drop_all(bind=engine)

    def register(self, username: str = "alice", email: str | None = None):
        return self.client.post(f"{PREFIX}/auth/register", json=_registration(username, email))

    def create_user(self, username: str, role: UserRole) -> None:
        db = SessionLocal()
        try:
            UserRepository(db).create(
                username=username,
                email=f"{username}@example.com",
                password_hash=hash_password(PASSWORD, rounds=FAST_ROUNDS),
                first_name="Admin",
                last_name="User",
                role=role,
            )
        finally:
            db.close()

    def login(self, username: str) -> str:
        response = self.client.post(
            f"{PREFIX}/auth/login", json={"username": username, "password": PASSWORD}
        )
        self.assertEqual(response.status_code, 200, response.text)
        return response.json()["accessToken"]


class TestAuthFlow(ApiTestCase):
    def test_register_login_refresh_me(self) -> None:
        registered = self.register()
        self.assertEqual(registered.status_code, 201, registered.text)
        self.assertEqual(registered.json()["user"]["role"], "CUSTOMER")
        self.assertIn("refresh_token", registered.cookies)

        access_token = self.login("alice")
        self.assertTrue(access_token)

        refreshed = self.client.post(f"{PREFIX}/auth/refresh")
        self.assertEqual(refreshed.status_code, 200, refreshed.text)
        new_access = refreshed.json()["accessToken"]

        me = self.client.get(f"{PREFIX}/auth/me", headers=_bearer(new_access))
        self.assertEqual(me.status_code, 200, me.text)
        body = me.json()
        self.assertEqual(body["username"], "alice")
        self.assertEqual(body["firstName"], "Alice")
        for key in ("password", "passwordHash", "refreshTokenHash"):
            self.assertNotIn(key, body)

    def test_refresh_cookie_attributes(self) -> None:
        response = self.register()
        cookie = response.headers["set-cookie"].lower()
        self.assertIn("httponly", cookie)
        self.assertIn(f"path={PREFIX}/auth/refresh", cookie)
        self.assertIn("samesite=lax", cookie)

    def test_rotated_refresh_token_cannot_be_replayed(self) -> None:
        self.register()
        old_cookie = self.client.cookies.get("refresh_token")
        self.assertEqual(self.client.post(f"{PREFIX}/auth/refresh").status_code, 200)

        response = TestClient(app).post(
            f"{PREFIX}/auth/refresh", headers={"Cookie": f"refresh_token={old_cookie}"}
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["error"]["message"], "Invalid refresh token")

    def test_refresh_without_cookie(self) -> None:
        response = self.client.post(f"{PREFIX}/auth/refresh")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["error"]["message"], "Refresh token missing")

    def test_duplicate_registration_conflict(self) -> None:
        self.register()
        response = self.register()
        self.assertEqual(response.status_code, 409)
        fields = [d["field"] for d in response.json()["error"]["details"]]
        self.assertEqual(fields, ["email", "username"])

    def test_invalid_registration_is_400(self) -> None:
        payload = _registration()
        payload["password"] = "short"
        response = self.client.post(f"{PREFIX}/auth/register", json=payload)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["code"], "VALIDATION_ERROR")

    def test_wrong_password_is_401(self) -> None:
        self.register()
        response = self.client.post(
            f"{PREFIX}/auth/login", json={"username": "alice", "password": "wrong-password"}
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["error"]["message"], "Invalid credentials")

    def test_logout_twice_then_refresh_fails(self) -> None:
        self.register()
        token = self.login("alice")
        cookie = self.client.cookies.get("refresh_token")
        for _ in range(2):
            response = self.client.post(f"{PREFIX}/auth/logout", headers=_bearer(token))
            self.assertEqual(response.status_code, 200, response.text)
            self.assertEqual(response.json(), {"success": True})

        response = TestClient(app).post(
            f"{PREFIX}/auth/refresh", headers={"Cookie": f"refresh_token={cookie}"}
        )
        self.assertEqual(response.status_code, 401)


class TestAccessControl(ApiTestCase):
    def test_missing_token_is_401(self) -> None:
        response = self.client.get(f"{PREFIX}/auth/me")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.headers["WWW-Authenticate"], "Bearer")
        self.assertEqual(response.json()["error"]["code"], "UNAUTHORIZED")

    def test_garbage_token_is_401(self) -> None:
        response = self.client.get(f"{PREFIX}/auth/me", headers=_bearer("garbage"))
        self.assertEqual(response.status_code, 401)

    def test_customer_cannot_list_users(self) -> None:
        self.register()
        token = self.login("alice")
        response = self.client.get(f"{PREFIX}/users", headers=_bearer(token))
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["error"]["code"], "FORBIDDEN")

    def test_admin_lists_and_fetches_users(self) -> None:
        customer_id = self.register().json()["user"]["id"]
        self.create_user("root", UserRole.ADMIN)
        token = self.login("root")

        listing = self.client.get(f"{PREFIX}/users", headers=_bearer(token))
        self.assertEqual(listing.status_code, 200, listing.text)
        self.assertEqual(listing.json()["total"], 2)

        fetched = self.client.get(f"{PREFIX}/users/{customer_id}", headers=_bearer(token))
        self.assertEqual(fetched.status_code, 200)
        self.assertEqual(fetched.json()["username"], "alice")

        missing = self.client.get(f"{PREFIX}/users/nope", headers=_bearer(token))
        self.assertEqual(missing.status_code, 404)

    def test_unauthenticated_request_rejected_before_query_validation(self) -> None:
        response = self.client.get(f"{PREFIX}/users", params={"limit": 1000})
        self.assertEqual(response.status_code, 401)


class TestHealthAndRequestId(ApiTestCase):
    def test_health_is_public(self) -> None:
        response = self.client.get(f"{PREFIX}/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["database"], "connected")

    def test_request_id_echoed(self) -> None:
        request_id = "3f2c1a9e-1111-4222-8333-944455556666"
        response = self.client.get(f"{PREFIX}/auth/me", headers={"X-Request-ID": request_id})
        self.assertEqual(response.headers["X-Request-ID"], request_id)
        self.assertEqual(response.json()["meta"]["requestId"], request_id)

    def test_unhandled_error_keeps_request_id_and_is_logged(self) -> None:
        def unavailable_db():
            raise RuntimeError("connection pool exhausted")

        request_id = "9b1c2d3e-aaaa-4bbb-8ccc-0123456789ab"
        app.dependency_overrides[get_db] = unavailable_db
        try:
            client = TestClient(app, raise_server_exceptions=False)
            with self.assertLogs("app", level="INFO") as logs:
                response = client.get(f"{PREFIX}/health", headers={"X-Request-ID": request_id})
        finally:
            app.dependency_overrides.pop(get_db, None)

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.headers["X-Request-ID"], request_id)
        self.assertEqual(response.json()["meta"]["requestId"], request_id)
        self.assertNotIn("pool exhausted", response.text)
        self.assertTrue(any("/health 500 " in line for line in logs.output), logs.output)


class TestRateLimiting(ApiTestCase):
    """Every route is throttled by the configured default limit."""

    def setUp(self) -> None:
        super().setUp()
        for patcher in (
            patch.object(limiter, "enabled", True),
            patch.object(get_settings(), "RATE_LIMIT_DEFAULT", "3/minute"),
        ):
            patcher.start()
            self.addCleanup(patcher.stop)
        limiter.reset()
        self.addCleanup(limiter.reset)

    def test_login_throttled_after_limit(self) -> None:
        body = {"username": "nobody", "password": "wrong-password"}
        statuses = [
            self.client.post(f"{PREFIX}/auth/login", json=body).status_code for _ in range(3)
        ]
        self.assertEqual(statuses, [401, 401, 401])

        response = self.client.post(f"{PREFIX}/auth/login", json=body)
        self.assertEqual(response.status_code, 429)
        self.assertEqual(response.headers["Retry-After"], "60")
        self.assertIn("X-Request-ID", response.headers)
        envelope = response.json()
        self.assertIs(envelope["success"], False)
        self.assertEqual(envelope["error"]["code"], "TOO_MANY_REQUESTS")
        self.assertEqual(envelope["meta"]["statusCode"], 429)

    def test_limits_are_counted_per_route(self) -> None:
        for _ in range(3):
            self.client.get(f"{PREFIX}/health")
        self.assertEqual(self.client.get(f"{PREFIX}/health").status_code, 429)
        self.assertEqual(self.client.get("/").status_code, 200)


if __name__ == "__main__":
    unittest.main()
