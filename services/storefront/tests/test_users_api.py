"""
Tests for account endpoints and the auth dependencies.
"""
from storefront.config import settings
from storefront.models import User
from storefront.services.user_service import UserService


class TestRegisterAndLogin:

    def test_register_returns_token(self, client):
        response = client.post("/api/users/register", json={
            "email": "Mariama@Example.com",
            "password": "secret123",
            "first_name": "Mariama",
            "last_name": "Ba",
        })

        assert response.status_code == 201
        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["expires_in"] == settings.jwt_expires_minutes * 60
        assert body["user"]["email"] == "mariama@example.com"
        assert body["user"]["role"] == "customer"

    def test_duplicate_email_is_case_insensitive(self, client, customer):
        response = client.post("/api/users/register", json={
            "email": "AWA@example.com",
            "password": "secret123",
        })

        assert response.status_code == 409

    def test_short_password_rejected(self, client):
        response = client.post("/api/users/register", json={
            "email": "short@example.com",
            "password": "123",
        })

        assert response.status_code == 422

    def test_login(self, client, customer):
        response = client.post("/api/users/login", json={
            "email": "awa@example.com",
            "password": "secret123",
        })

        assert response.status_code == 200
        token = response.json()["access_token"]
        me = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["id"] == customer.id

    def test_login_wrong_password(self, client, customer):
        response = client.post("/api/users/login", json={
            "email": "awa@example.com",
            "password": "wrong-password",
        })

        assert response.status_code == 401

    def test_login_unknown_email(self, client):
        response = client.post("/api/users/login", json={
            "email": "nobody@example.com",
            "password": "secret123",
        })

        assert response.status_code == 401


class TestAuthentication:

    def test_me_requires_token(self, client):
        assert client.get("/api/users/me").status_code == 401

    def test_garbage_token(self, client):
        response = client.get("/api/users/me", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401

    def test_token_for_deleted_user(self, client, db, customer, customer_headers):
        db.delete(customer)
        db.commit()

        assert client.get("/api/users/me", headers=customer_headers).status_code == 401

    def test_admin_only_endpoint_forbidden_for_customer(self, client, customer_headers):
        assert client.get("/api/products/all", headers=customer_headers).status_code == 403


class TestEnsureAdmin:

    def test_creates_admin_when_configured(self, db, monkeypatch):
        monkeypatch.setattr(settings, "admin_password", "admin-secret")

        admin = UserService(db).ensure_admin()

        assert admin.role == "admin"
        assert admin.email == settings.admin_email

    def test_existing_admin_is_kept(self, db, admin, monkeypatch):
        monkeypatch.setattr(settings, "admin_password", "admin-secret")

        assert UserService(db).ensure_admin().id == admin.id
        assert db.query(User).filter(User.role == "admin").count() == 1

    def test_skipped_without_password(self, db, monkeypatch):
        monkeypatch.setattr(settings, "admin_password", None)

        assert UserService(db).ensure_admin() is None
        assert db.query(User).count() == 0
