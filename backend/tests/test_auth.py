import pytest
from jose import jwt
from sqlalchemy import select

from edusphere.config import settings
from edusphere.models.user import User

URL = "/api/v1/auth"


async def test_signup_creates_user(client, session_factory):
    response = await client.post(
        URL,
        json={
            "action": "signup",
            "clerk_id": "user_erin",
            "email": "erin@example.com",
            "first_name": "Erin",
            "last_name": "Moss",
        },
    )
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["clerk_id"] == "user_erin"
    assert body["message"] == "Signup successful"

    async with session_factory() as session:
        user = (await session.execute(select(User).where(User.clerk_id == "user_erin"))).scalar_one()
    assert (user.email, user.first_name, user.last_name) == ("erin@example.com", "Erin", "Moss")


async def test_signup_requires_names(client):
    response = await client.post(
        URL, json={"action": "signup", "clerk_id": "user_erin", "email": "erin@example.com"}
    )
    assert response.status_code == 400
    assert "first_name, last_name required for signup" in response.json()["message"]


async def test_login_refreshes_email_and_keeps_names(client, session_factory):
    response = await client.post(
        URL, json={"action": "login", "clerk_id": "user_alice", "email": "alice@school.example"}
    )
    assert response.status_code == 200
    assert response.json()["message"] == "Login successful"

    async with session_factory() as session:
        user = (await session.execute(select(User).where(User.clerk_id == "user_alice"))).scalar_one()
    assert user.email == "alice@school.example"
    assert (user.first_name, user.last_name) == ("Alice", "Ng")


@pytest.mark.parametrize(
    "body",
    [
        {"action": "login", "clerk_id": "user_alice", "email": "not-an-email"},
        {"action": "register", "clerk_id": "user_alice", "email": "alice@example.com"},
        {"action": "login", "clerk_id": "", "email": "alice@example.com"},
    ],
)
async def test_malformed_auth_requests_are_rejected(client, body):
    response = await client.post(URL, json=body)
    assert response.status_code == 400
    assert response.json()["error"] == "Validation failed"


# ─── Bearer tokens ───────────────────────────────────────────────────────────

async def test_bearer_token_identifies_caller(client, monkeypatch):
    monkeypatch.setattr(settings, "SUPABASE_JWT_SECRET", "test-secret")
    token = jwt.encode({"sub": "user_alice"}, "test-secret", algorithm="HS256")

    response = await client.post(
        "/api/v1/realtime",
        json={"action": "get_user_progress"},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 200
    assert response.json()["progress"] == []


async def test_bearer_token_with_wrong_secret_is_unauthorized(client, monkeypatch):
    monkeypatch.setattr(settings, "SUPABASE_JWT_SECRET", "test-secret")
    token = jwt.encode({"sub": "user_alice"}, "other-secret", algorithm="HS256")

    response = await client.post(
        "/api/v1/realtime",
        json={"action": "get_user_progress"},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 401


async def test_bearer_token_ignored_without_secret(client, monkeypatch):
    monkeypatch.setattr(settings, "SUPABASE_JWT_SECRET", None)
    token = jwt.encode({"sub": "user_alice"}, "test-secret", algorithm="HS256")

    response = await client.post(
        "/api/v1/realtime",
        json={"action": "get_user_progress"},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 401


async def test_user_header_wins_over_bearer_token(client, monkeypatch):
    monkeypatch.setattr(settings, "SUPABASE_JWT_SECRET", "test-secret")
    token = jwt.encode({"sub": "user_nobody"}, "test-secret", algorithm="HS256")

    response = await client.post(
        "/api/v1/realtime",
        json={"action": "get_user_progress"},
        headers={"Authorization": f"Bearer {token}", "X-User-ID": "user_bob"},
    )
    assert response.status_code == 200
