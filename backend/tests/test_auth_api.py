from datetime import datetime

import pytest

from blog.auth.dependencies import check_roles
from blog.auth.service import issue_token
from blog.exceptions import AppError
from blog.users.models import Role, User


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def parse_ts(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


USER_DATA = {"username": "testuser", "email": "test@example.com", "password": "Password123"}


class TestRegister:
    async def test_register_success(self, client):
        res = await client.post("/api/auth/register", json=USER_DATA)
        assert res.status_code == 201
        body = res.json()
        assert body["success"] is True
        assert body["token"]
        assert body["user"]["username"] == "testuser"
        assert body["user"]["email"] == "test@example.com"
        assert body["user"]["role"] == "user"
        assert len(body["user"]["id"]) == 24
        assert "password" not in body["user"]
        assert "hashedPassword" not in body["user"]

    async def test_missing_fields(self, client):
        res = await client.post("/api/auth/register", json={"username": "testuser"})
        assert res.status_code == 400
        assert res.json() == {"success": False, "error": "Please provide all required fields"}

    async def test_empty_fields(self, client):
        res = await client.post("/api/auth/register", json={**USER_DATA, "password": ""})
        assert res.status_code == 400

    async def test_invalid_email(self, client):
        res = await client.post("/api/auth/register", json={**USER_DATA, "email": "invalid-email"})
        assert res.status_code == 400
        assert res.json()["error"] == "Please provide a valid email"

    @pytest.mark.parametrize(
        "second",
        [
            {"username": "other", "email": "test@example.com", "password": "Password123"},
            {"username": "testuser", "email": "other@example.com", "password": "Password123"},
        ],
    )
    async def test_duplicate_email_or_username(self, client, second):
        first = await client.post("/api/auth/register", json=USER_DATA)
        assert first.status_code == 201
        res = await client.post("/api/auth/register", json=second)
        assert res.status_code == 400
        assert res.json()["success"] is False
        assert "already exists" in res.json()["error"]


class TestLogin:
    async def test_login_success(self, client, make_user):
        await make_user("testuser", "test@example.com", "Password123")
        res = await client.post("/api/auth/login", json={"email": "test@example.com", "password": "Password123"})
        assert res.status_code == 200
        body = res.json()
        assert body["success"] is True
        assert body["token"]
        assert body["user"]["username"] == "testuser"

    async def test_wrong_password(self, client, make_user):
        await make_user("testuser", "test@example.com", "Password123")
        res = await client.post("/api/auth/login", json={"email": "test@example.com", "password": "wrong"})
        assert res.status_code == 401
        assert "Invalid credentials" in res.json()["error"]

    async def test_unknown_email(self, client):
        res = await client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "Password123"})
        assert res.status_code == 401
        assert res.json()["error"] == "Invalid credentials"

    async def test_missing_fields(self, client):
        res = await client.post("/api/auth/login", json={"email": "test@example.com"})
        assert res.status_code == 400

    async def test_inactive_account(self, client, make_user):
        await make_user("sleepy", "sleepy@example.com", "Password123", is_active=False)
        res = await client.post("/api/auth/login", json={"email": "sleepy@example.com", "password": "Password123"})
        assert res.status_code == 401
        assert res.json()["error"] == "Account is inactive"


class TestAuthentication:
    async def test_me(self, client, make_user):
        _, token = await make_user("testuser")
        res = await client.get("/api/auth/me", headers=bearer(token))
        assert res.status_code == 200
        user = res.json()["user"]
        assert user["username"] == "testuser"
        assert user["isActive"] is True
        assert "createdAt" in user
        assert "hashedPassword" not in user

    async def test_no_token(self, client):
        res = await client.get("/api/auth/me")
        assert res.status_code == 401
        assert res.json() == {"success": False, "error": "Access denied. No token provided."}

    async def test_wrong_scheme(self, client, make_user):
        _, token = await make_user("testuser")
        res = await client.get("/api/auth/me", headers={"Authorization": f"Token {token}"})
        assert res.status_code == 401
        assert "No token provided" in res.json()["error"]

    async def test_invalid_token(self, client):
        res = await client.get("/api/auth/me", headers=bearer("invalid-token"))
        assert res.status_code == 401
        assert res.json()["error"] == "Invalid or expired token."

    async def test_user_not_found(self, client):
        token = issue_token({"id": "0" * 24, "username": "ghost", "email": "ghost@example.com", "role": "user"})
        res = await client.get("/api/auth/me", headers=bearer(token))
        assert res.status_code == 401
        assert res.json()["error"] == "Invalid token. User not found."

    async def test_inactive_user(self, client, make_user):
        _, token = await make_user("sleepy", is_active=False)
        res = await client.get("/api/auth/me", headers=bearer(token))
        assert res.status_code == 401
        assert res.json()["error"] == "Account is inactive."


class TestProfile:
    async def test_update_profile(self, client, make_user):
        _, token = await make_user("testuser")
        res = await client.put(
            "/api/auth/me",
            json={"username": "updateduser", "email": "updated@example.com"},
            headers=bearer(token),
        )
        assert res.status_code == 200
        assert res.json()["user"]["username"] == "updateduser"
        assert res.json()["user"]["email"] == "updated@example.com"

    async def test_update_only_provided_fields(self, client, make_user):
        _, token = await make_user("testuser", "test@example.com")
        res = await client.put("/api/auth/me", json={"username": "renamed"}, headers=bearer(token))
        assert res.status_code == 200
        assert res.json()["user"]["email"] == "test@example.com"

    async def test_update_invalid_email(self, client, make_user):
        _, token = await make_user("testuser")
        res = await client.put("/api/auth/me", json={"email": "not-an-email"}, headers=bearer(token))
        assert res.status_code == 400

    async def test_update_taken_username(self, client, make_user):
        await make_user("bob")
        _, token = await make_user("alice")
        res = await client.put("/api/auth/me", json={"username": "bob"}, headers=bearer(token))
        assert res.status_code == 400
        assert "already exists" in res.json()["error"]

    async def test_update_refreshes_updated_at(self, client, make_user):
        _, token = await make_user("testuser")
        before = (await client.get("/api/auth/me", headers=bearer(token))).json()["user"]["updatedAt"]
        res = await client.put("/api/auth/me", json={"username": "renamed"}, headers=bearer(token))
        assert parse_ts(res.json()["user"]["updatedAt"]) > parse_ts(before)

    async def test_update_requires_auth(self, client):
        res = await client.put("/api/auth/me", json={"username": "x"})
        assert res.status_code == 401


class TestChangePassword:
    async def test_change_password(self, client, make_user):
        await make_user("testuser", "test@example.com", "Password123")
        login = await client.post("/api/auth/login", json={"email": "test@example.com", "password": "Password123"})
        token = login.json()["token"]

        res = await client.put(
            "/api/auth/password",
            json={"currentPassword": "Password123", "newPassword": "NewPassword456"},
            headers=bearer(token),
        )
        assert res.status_code == 200
        assert res.json() == {"success": True, "message": "Password updated successfully"}

        old = await client.post("/api/auth/login", json={"email": "test@example.com", "password": "Password123"})
        assert old.status_code == 401
        new = await client.post("/api/auth/login", json={"email": "test@example.com", "password": "NewPassword456"})
        assert new.status_code == 200

    async def test_wrong_current_password(self, client, make_user):
        _, token = await make_user("testuser", password="Password123")
        res = await client.put(
            "/api/auth/password",
            json={"currentPassword": "nope", "newPassword": "NewPassword456"},
            headers=bearer(token),
        )
        assert res.status_code == 401
        assert res.json()["error"] == "Current password is incorrect"

    async def test_missing_fields(self, client, make_user):
        _, token = await make_user("testuser")
        res = await client.put("/api/auth/password", json={"currentPassword": "Password123"}, headers=bearer(token))
        assert res.status_code == 400

    async def test_change_password_refreshes_updated_at(self, client, make_user):
        _, token = await make_user("testuser", password="Password123")
        before = (await client.get("/api/auth/me", headers=bearer(token))).json()["user"]["updatedAt"]
        await client.put(
            "/api/auth/password",
            json={"currentPassword": "Password123", "newPassword": "NewPassword456"},
            headers=bearer(token),
        )
        after = (await client.get("/api/auth/me", headers=bearer(token))).json()["user"]["updatedAt"]
        assert parse_ts(after) > parse_ts(before)


class TestCheckRoles:
    def _user(self, role: Role) -> User:
        return User(id="a" * 24, username="u", email="u@example.com", role=role, is_active=True)

    def test_missing_identity(self):
        with pytest.raises(AppError) as exc:
            check_roles(None, [Role.ADMIN])
        assert exc.value.status_code == 401

    def test_role_not_permitted(self):
        with pytest.raises(AppError) as exc:
            check_roles(self._user(Role.USER), [Role.ADMIN])
        assert exc.value.status_code == 403

    def test_role_permitted(self):
        check_roles(self._user(Role.ADMIN), [Role.ADMIN])
        check_roles(self._user(Role.USER), ["user", "admin"])


class TestRequireRoles:
    @pytest.fixture()
    async def gated_client(self):
        from fastapi import Depends, FastAPI
        from httpx import ASGITransport, AsyncClient

        from blog.auth.dependencies import require_admin
        from blog.exceptions import setup_exception_handlers
        from blog.main import app as main_app

        gated = FastAPI()
        setup_exception_handlers(gated)
        gated.dependency_overrides = main_app.dependency_overrides

        @gated.get("/admin-only", dependencies=[Depends(require_admin)])
        async def admin_only():
            return {"success": True}

        async with AsyncClient(transport=ASGITransport(app=gated), base_url="http://test") as ac:
            yield ac

    async def test_admin_allowed(self, gated_client, make_user):
        _, token = await make_user("root", role=Role.ADMIN)
        res = await gated_client.get("/admin-only", headers=bearer(token))
        assert res.status_code == 200

    async def test_user_forbidden(self, gated_client, make_user):
        _, token = await make_user("plain")
        res = await gated_client.get("/admin-only", headers=bearer(token))
        assert res.status_code == 403
        assert res.json()["error"] == "Access denied. Insufficient permissions."

    async def test_anonymous_rejected(self, gated_client):
        res = await gated_client.get("/admin-only")
        assert res.status_code == 401
