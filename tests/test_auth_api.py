"""
Authentication API Tests
========================

Tests for registration, login and bearer-token handling.
"""

import uuid

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from conftest import DEFAULT_PASSWORD, register
from todolist.core.security import create_token_for_user, decode_token
from todolist.models.user import User


class TestRegister:
    """POST /api/auth/register"""

    @pytest.mark.asyncio
    async def test_register_returns_token(self, client: AsyncClient):
        response = await client.post(
            "/api/auth/register",
            json={"name": "A", "email": "a@x.com", "password": "secret123"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["token"]
        assert data["tokenType"] == "bearer"
        assert data["expiresIn"] > 0

        payload = decode_token(data["token"])
        assert payload["sub"] == "a@x.com"
        assert payload["type"] == "access"

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts_without_write(
        self, client: AsyncClient, session_maker
    ):
        await register(client, email="a@x.com", name="A")

        response = await client.post(
            "/api/auth/register",
            json={"name": "Other", "email": "A@X.com", "password": "secret123"},
        )

        assert response.status_code == 409
        data = response.json()
        assert data["code"] == "AUTH_004"
        assert data["status"] == 409

        async with session_maker() as session:
            count = (await session.execute(select(func.count()).select_from(User))).scalar_one()
        assert count == 1

    @pytest.mark.asyncio
    async def test_stores_email_lower_cased_and_password_hashed(
        self, client: AsyncClient, session_maker
    ):
        await register(client, email="Mixed@Example.COM")

        async with session_maker() as session:
            user = (await session.execute(select(User))).scalar_one()
        assert user.email == "mixed@example.com"
        assert user.password_hash != DEFAULT_PASSWORD
        assert user.password_hash.startswith("$2")

    @pytest.mark.asyncio
    async def test_validation_errors_are_grouped_by_field(self, client: AsyncClient):
        response = await client.post(
            "/api/auth/register",
            json={"name": "   ", "email": "not-an-email", "password": "short"},
        )

        assert response.status_code == 400
        data = response.json()
        assert data["code"] == "VALIDATION_ERROR"
        assert data["message"] == "Validation failed"
        assert data["errors"]["name"] == "Name cannot be blank"
        assert data["errors"]["email"] == "Email should be valid"
        assert data["errors"]["password"] == "Password must be at least 8 characters"

    @pytest.mark.asyncio
    async def test_missing_fields_are_reported_blank(self, client: AsyncClient):
        response = await client.post("/api/auth/register", json={})

        assert response.status_code == 400
        errors = response.json()["errors"]
        assert errors == {
            "name": "Name cannot be blank",
            "email": "Email cannot be blank",
            "password": "Password cannot be blank",
        }

    @pytest.mark.asyncio
    async def test_multiple_problems_on_one_field_are_joined(self, client: AsyncClient):
        long_local = "x" * 260
        response = await client.post(
            "/api/auth/register",
            json={"name": "A", "email": f"{long_local}@bad", "password": "secret123"},
        )

        assert response.status_code == 400
        assert response.json()["errors"]["email"] == (
            "Email cannot exceed 255 characters; Email should be valid"
        )


class TestLogin:
    """POST /api/auth/login"""

    @pytest.mark.asyncio
    async def test_login_with_valid_credentials(self, client: AsyncClient):
        await register(client, email="user@example.com")

        response = await client.post(
            "/api/auth/login",
            json={"email": "USER@example.com", "password": DEFAULT_PASSWORD},
        )

        assert response.status_code == 200
        assert decode_token(response.json()["token"])["sub"] == "user@example.com"

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_email_look_the_same(
        self, client: AsyncClient
    ):
        await register(client, email="user@example.com")

        wrong_password = await client.post(
            "/api/auth/login",
            json={"email": "user@example.com", "password": "not-the-password"},
        )
        unknown_email = await client.post(
            "/api/auth/login",
            json={"email": "nobody@example.com", "password": DEFAULT_PASSWORD},
        )

        for response in (wrong_password, unknown_email):
            assert response.status_code == 401
            data = response.json()
            assert data["code"] == "AUTH_001"
            assert data["message"] == "Invalid email or password"

    @pytest.mark.asyncio
    async def test_blank_login_fields_are_rejected(self, client: AsyncClient):
        response = await client.post("/api/auth/login", json={"email": "", "password": ""})

        assert response.status_code == 400
        assert set(response.json()["errors"]) == {"email", "password"}


class TestBearerToken:
    """Token handling on protected routes."""

    @pytest.mark.asyncio
    async def test_missing_token_is_unauthorized(self, client: AsyncClient):
        response = await client.get("/api/tasks")

        assert response.status_code == 401
        assert response.json()["code"] == "AUTH_002"
        assert response.headers["www-authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_garbage_token_is_unauthorized(self, client: AsyncClient):
        response = await client.get(
            "/api/tasks",
            headers={"Authorization": "Bearer not-a-jwt"},
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_valid_token_for_missing_user_is_an_internal_fault(
        self, client: AsyncClient
    ):
        token = create_token_for_user(uuid.uuid4(), "ghost@example.com")["token"]

        response = await client.get(
            "/api/tasks",
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 500
        data = response.json()
        assert data["code"] == "INTERNAL_ERROR"
        assert "ghost" not in data["message"]
