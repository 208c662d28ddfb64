"""
Authentication and authorization tests for the labor tracker.

Tests cover tenant registration, login, JWT token handling and the
tenant checks applied to every business endpoint.
"""
from datetime import timedelta
from uuid import uuid4

from fastapi import status

from labor_tracker.auth.jwt_handler import (
    decode_access_token, encode_token, hash_password, issue_access_token, verify_password
)

from .conftest import API, register_tenant
from .test_base import BaseAPITest

REGISTRATION = {
    "email": "owner@acme.example.com",
    "password": "secure_password123",
    "display_name": "Owner",
    "tenant_name": "Acme"
}


class TestAuthentication(BaseAPITest):
    """Test cases for registration and login."""

    def test_registration_success(self, client):
        """Registering creates a tenant and its admin and returns a token."""
        response = client.post(f"{API}/auth/register", json=REGISTRATION)

        self.assert_success_response(response, status.HTTP_201_CREATED)
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["access_token"]
        assert data["user"]["email"] == REGISTRATION["email"]
        assert data["user"]["role"] == "admin"
        assert data["tenant"]["name"] == "Acme"
        assert data["user"]["tenant_id"] == data["tenant"]["id"]

    def test_registration_duplicate_email(self, client):
        client.post(f"{API}/auth/register", json=REGISTRATION)
        response = client.post(f"{API}/auth/register", json={**REGISTRATION, "tenant_name": "Other"})
        self.assert_conflict(response)

    def test_registration_duplicate_tenant_name(self, client):
        client.post(f"{API}/auth/register", json=REGISTRATION)
        response = client.post(f"{API}/auth/register",
                               json={**REGISTRATION, "email": "second@acme.example.com"})
        self.assert_conflict(response)

    def test_registration_invalid_email(self, client):
        response = client.post(f"{API}/auth/register", json={**REGISTRATION, "email": "invalid-email"})
        self.assert_validation_error(response, "email")

    def test_registration_weak_password(self, client):
        response = client.post(f"{API}/auth/register", json={**REGISTRATION, "password": "123"})
        self.assert_validation_error(response, "password")

    def test_login_success(self, client):
        client.post(f"{API}/auth/register", json=REGISTRATION)

        response = client.post(f"{API}/auth/login", json={
            "email": REGISTRATION["email"], "password": REGISTRATION["password"]
        })

        self.assert_success_response(response)
        data = response.json()
        assert data["access_token"]
        assert data["tenant"]["name"] == "Acme"

    def test_login_invalid_credentials(self, client):
        client.post(f"{API}/auth/register", json=REGISTRATION)
        response = client.post(f"{API}/auth/login", json={
            "email": REGISTRATION["email"], "password": "wrong_password"
        })
        self.assert_unauthorized(response)

    def test_login_unknown_user(self, client):
        response = client.post(f"{API}/auth/login", json={
            "email": "nobody@acme.example.com", "password": "whatever123"
        })
        self.assert_unauthorized(response)

    def test_get_current_user(self, client):
        headers = register_tenant(client, "Acme", "owner@acme.example.com")
        response = client.get(f"{API}/auth/me", headers=headers)

        self.assert_success_response(response)
        assert response.json()["email"] == "owner@acme.example.com"


class TestTokenHandling(BaseAPITest):
    """Bearer token checks on tenant-scoped endpoints."""

    def test_access_without_token(self, client):
        self.assert_not_authenticated(client.get(f"{API}/employees/"))

    def test_access_with_invalid_token(self, client):
        response = client.get(f"{API}/employees/", headers={"Authorization": "Bearer garbage"})
        self.assert_unauthorized(response)

    def test_access_with_expired_token(self, client):
        token = encode_token(
            {"sub": str(uuid4()), "tenant_id": str(uuid4()), "type": "access"},
            expires_delta=timedelta(minutes=-5)
        )
        response = client.get(f"{API}/employees/", headers={"Authorization": f"Bearer {token}"})
        self.assert_unauthorized(response)

    def test_token_without_tenant(self, client):
        token = encode_token({"sub": str(uuid4()), "type": "access"})
        response = client.get(f"{API}/employees/", headers={"Authorization": f"Bearer {token}"})
        self.assert_error_response(response, status.HTTP_401_UNAUTHORIZED, expected_kind="unauthenticated")

    def test_token_for_unknown_tenant(self, client):
        token = issue_access_token(uuid4(), uuid4(), "ghost@acme.example.com", "admin")
        response = client.get(f"{API}/employees/", headers={"Authorization": f"Bearer {token}"})
        self.assert_error_response(response, status.HTTP_401_UNAUTHORIZED, "Tenant not found")


class TestTokensAndPasswords:

    def test_hash_and_verify(self):
        hashed = hash_password("secure_password123")
        assert hashed != "secure_password123"
        assert verify_password("secure_password123", hashed)
        assert not verify_password("wrong_password", hashed)

    def test_access_token_claims(self):
        user_id, tenant_id = uuid4(), uuid4()
        claims = decode_access_token(issue_access_token(user_id, tenant_id, "owner@acme.example.com", "admin"))

        assert claims.user_id == user_id
        assert claims.tenant_id == tenant_id
        assert claims.email == "owner@acme.example.com"
        assert claims.is_admin

    def test_unreadable_tokens_decode_to_none(self):
        assert decode_access_token("garbage") is None
        assert decode_access_token(encode_token({"sub": str(uuid4()), "type": "reset"})) is None
        assert decode_access_token(encode_token({"sub": "not-a-uuid", "type": "access"})) is None
        assert decode_access_token(encode_token({"type": "access"})) is None
