"""Tests for user account endpoints."""

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from authcore.models.user import User


class TestDeleteMe:
    """Tests for self-delete."""

    def test_delete_me(self, client: TestClient, test_user: dict, db_session: Session):
        """The account is removed and its token stops working."""
        response = client.delete("/api/v1/users/me", headers=test_user["headers"])
        assert response.status_code == 204

        db_session.expire_all()
        assert db_session.get(User, test_user["id"]) is None

        me = client.get("/api/v1/auth/me", headers=test_user["headers"])
        assert me.status_code == 401

    def test_delete_me_requires_auth(self, client: TestClient):
        """Self-delete requires a token."""
        response = client.delete("/api/v1/users/me")
        assert response.status_code == 401

    def test_email_free_after_delete(self, client: TestClient, test_user: dict):
        """A deleted account's email can be registered again."""
        client.delete("/api/v1/users/me", headers=test_user["headers"])
        response = client.post(
            "/api/v1/auth/register", json={"email": "test@example.com", "password": "password123"}
        )
        assert response.status_code == 201


class TestAdminLookup:
    """Tests for admin-only account lookup."""

    def test_list_users(self, client: TestClient, test_user: dict, admin_user: dict):
        """Admins see every account, without password data."""
        response = client.get("/api/v1/users/", headers=admin_user["headers"])
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert {u["email"] for u in data["items"]} == {"test@example.com", "admin@example.com"}
        assert all("password_hash" not in u for u in data["items"])

    def test_get_user(self, client: TestClient, test_user: dict, admin_user: dict):
        """Admins can fetch a single account."""
        response = client.get(f"/api/v1/users/{test_user['id']}", headers=admin_user["headers"])
        assert response.status_code == 200
        assert response.json()["email"] == "test@example.com"

    def test_get_user_not_found(self, client: TestClient, admin_user: dict):
        """Unknown ids are a 404."""
        response = client.get("/api/v1/users/does-not-exist", headers=admin_user["headers"])
        assert response.status_code == 404
        assert response.json()["code"] == "not_found"

    def test_get_user_forbidden_for_users(self, client: TestClient, test_user: dict, admin_user: dict):
        """Plain users cannot look up other accounts."""
        response = client.get(f"/api/v1/users/{admin_user['id']}", headers=test_user["headers"])
        assert response.status_code == 403
