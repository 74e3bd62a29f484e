"""Auth API tests.

Learn: Tests cover:
1. Registration + case-insensitive duplicate prevention
2. Login → session token, with one uniform failure for bad credentials
3. The protected /me endpoint
4. Account deletion through DELETE /me
"""

import pytest

from conftest import PASSWORD, auth_headers, register, unique_email


# ═══════════════════════════════════════════════════════════
# Registration
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_register_user(client):
    """Register a new account; the response carries a usable token."""
    email = unique_email("reg")
    r = await client.post(
        "/api/v1/auth/register",
        json={
            "email": email,
            "name": "Test User",
            "password": "secure_password_123",
            "role": "student",
        },
    )
    assert r.status_code == 201
    user = r.json()
    assert user["email"] == email
    assert user["name"] == "Test User"
    assert user["role"] == "student"
    assert "id" in user
    assert user["token"]
    assert "password_hash" not in user
    assert "password" not in user


@pytest.mark.asyncio
async def test_register_lowercases_email(client):
    session = await register(client, "instructor", email="Ann.Lee@Example.COM")
    assert session["email"] == "ann.lee@example.com"


@pytest.mark.asyncio
async def test_register_duplicate_email_ignores_case(client):
    """Can't register the same email twice, whatever its casing."""
    email = unique_email("dup")
    await register(client, "student", email=email)

    r = await client.post(
        "/api/v1/auth/register",
        json={
            "email": email.upper(),
            "name": "Someone Else",
            "password": "password_123",
            "role": "instructor",
        },
    )
    assert r.status_code == 409
    assert r.json()["detail"]["code"] == "email_taken"


@pytest.mark.asyncio
async def test_register_short_password(client):
    """Password must be at least 8 characters."""
    r = await client.post(
        "/api/v1/auth/register",
        json={
            "email": unique_email("short"),
            "name": "Short",
            "password": "abc",
            "role": "student",
        },
    )
    assert r.status_code == 422  # validation error


@pytest.mark.asyncio
@pytest.mark.parametrize("role", ["admin", "", None])
async def test_register_rejects_unknown_role(client, role):
    r = await client.post(
        "/api/v1/auth/register",
        json={
            "email": unique_email("role"),
            "name": "Role",
            "password": "password_123",
            "role": role,
        },
    )
    assert r.status_code == 422


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "email",
    ["not-an-email", "a@b", "two words@example.com", "ann@example..com", "ann@-example.com"],
)
async def test_register_rejects_malformed_email(client, email):
    r = await client.post(
        "/api/v1/auth/register",
        json={"email": email, "name": "X", "password": "password_123", "role": "student"},
    )
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_register_rejects_blank_name(client):
    r = await client.post(
        "/api/v1/auth/register",
        json={
            "email": unique_email("blank"),
            "name": "   ",
            "password": "password_123",
            "role": "student",
        },
    )
    assert r.status_code == 422


# ═══════════════════════════════════════════════════════════
# Login
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_login_success(client):
    """Login with valid credentials returns a token for the same account."""
    email = unique_email("login")
    created = await register(client, "instructor", name="Login User", email=email)

    r = await client.post(
        "/api/v1/auth/login",
        json={"email": email.upper(), "password": PASSWORD},
    )
    assert r.status_code == 200
    session = r.json()
    assert session["id"] == created["id"]
    assert session["role"] == "instructor"
    assert session["token"]

    me = await client.get("/api/v1/auth/me", headers=auth_headers(session["token"]))
    assert me.status_code == 200
    assert me.json()["email"] == email


@pytest.mark.asyncio
async def test_login_failures_are_indistinguishable(client):
    """Wrong password and unknown email produce the same response."""
    email = unique_email("wrong")
    await register(client, "student", email=email)

    wrong_password = await client.post(
        "/api/v1/auth/login",
        json={"email": email, "password": "wrong_password"},
    )
    unknown_email = await client.post(
        "/api/v1/auth/login",
        json={"email": unique_email("nobody"), "password": PASSWORD},
    )

    assert wrong_password.status_code == 401
    assert unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json()
    assert wrong_password.json()["detail"]["code"] == "invalid_credentials"


# ═══════════════════════════════════════════════════════════
# Protected /me
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_me_with_token(client):
    session = await register(client, "student", name="Me User")

    r = await client.get("/api/v1/auth/me", headers=auth_headers(session["token"]))
    assert r.status_code == 200
    me = r.json()
    assert me["id"] == session["id"]
    assert me["name"] == "Me User"
    assert me["role"] == "student"
    assert "password_hash" not in me


@pytest.mark.asyncio
async def test_me_without_token(client):
    r = await client.get("/api/v1/auth/me")
    assert r.status_code == 401
    assert r.json()["detail"]["code"] == "unauthorized"
    assert r.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_me_with_invalid_token(client):
    r = await client.get("/api/v1/auth/me", headers=auth_headers("not.a.token"))
    assert r.status_code == 401
    assert r.json()["detail"]["code"] == "invalid_token"


@pytest.mark.asyncio
async def test_me_with_non_bearer_scheme(client):
    session = await register(client, "student")
    r = await client.get(
        "/api/v1/auth/me", headers={"Authorization": f"Basic {session['token']}"}
    )
    assert r.status_code == 401


# ═══════════════════════════════════════════════════════════
# Account deletion
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_delete_me(client):
    email = unique_email("gone")
    session = await register(client, "student", email=email)
    headers = auth_headers(session["token"])

    r = await client.delete("/api/v1/auth/me", headers=headers)
    assert r.status_code == 200
    assert r.json() == {"deleted": True}

    # The token is still well-formed, but the account behind it is gone.
    me = await client.get("/api/v1/auth/me", headers=headers)
    assert me.status_code == 401

    again = await client.delete("/api/v1/auth/me", headers=headers)
    assert again.status_code == 401

    login = await client.post("/api/v1/auth/login", json={"email": email, "password": PASSWORD})
    assert login.status_code == 401

    # The email is free again.
    await register(client, "instructor", email=email)


@pytest.mark.asyncio
async def test_delete_me_requires_token(client):
    r = await client.delete("/api/v1/auth/me")
    assert r.status_code == 401
