"""
Test the authentication flow pipeline.
"""
from datetime import timedelta

import pytest
from fastapi import status

from backend.security import create_access_token


class TestAuthenticationFlow:
    """Test the complete authentication pipeline."""

    def test_user_registration_success(self, test_client, test_user_data):
        """Test successful user registration."""
        response = test_client.post("/api/auth/register", json=test_user_data)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["email"] == test_user_data["email"]
        assert data["full_name"] == test_user_data["full_name"]
        assert data["is_active"] is True
        assert "id" in data
        assert "hashed_password" not in data  # Password should not be returned

    def test_user_registration_duplicate_email(self, test_client, test_user_data):
        """Test registration with duplicate email fails."""
        response = test_client.post("/api/auth/register", json=test_user_data)
        assert response.status_code == status.HTTP_200_OK

        # Same address in different case
        duplicate = dict(test_user_data, email=test_user_data["email"].upper())
        response = test_client.post("/api/auth/register", json=duplicate)
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "already registered" in response.json()["detail"]

    def test_registration_rejects_short_password(self, test_client, test_user_data):
        response = test_client.post("/api/auth/register", json=dict(test_user_data, password="short"))
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_user_login_success(self, test_client, test_user_data):
        """Test successful user login."""
        test_client.post("/api/auth/register", json=test_user_data)

        login_data = {
            "username": test_user_data["email"],
            "password": test_user_data["password"]
        }
        response = test_client.post("/api/auth/login", data=login_data)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert "access_token" in data
        assert data["token_type"] == "bearer"

    def test_user_login_invalid_credentials(self, test_client, test_user_data):
        """Test login with invalid credentials fails."""
        test_client.post("/api/auth/register", json=test_user_data)

        login_data = {
            "username": test_user_data["email"],
            "password": "wrongpassword"
        }
        response = test_client.post("/api/auth/login", data=login_data)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert "Incorrect email or password" in response.json()["detail"]

    @pytest.mark.parametrize("path", ["/api/applications/", "/api/resumes/", "/api/analytics/"])
    def test_protected_endpoint_without_token(self, test_client, path):
        """Test accessing protected endpoints without authentication token."""
        response = test_client.get(path)
        assert response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)

    def test_protected_endpoint_with_valid_token(self, test_client, auth_headers):
        """Test accessing protected endpoint with valid token."""
        response = test_client.get("/api/auth/me", headers=auth_headers)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["email"] == "test@example.com"

    def test_protected_endpoint_with_invalid_token(self, test_client):
        """Test accessing protected endpoint with invalid token."""
        headers = {"Authorization": "Bearer invalid-token"}
        response = test_client.get("/api/applications/", headers=headers)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_expired_token_is_rejected(self, test_client, test_user_data):
        test_client.post("/api/auth/register", json=test_user_data)
        token = create_access_token({"sub": test_user_data["email"]}, expires_delta=timedelta(minutes=-1))

        response = test_client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_token_for_unknown_user_is_rejected(self, test_client):
        token = create_access_token({"sub": "nobody@example.com"})
        response = test_client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
