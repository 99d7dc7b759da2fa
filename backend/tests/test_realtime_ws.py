import asyncio

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from starlette.websockets import WebSocketDisconnect

import edusphere.api.realtime as realtime_api
from edusphere.database import Base, get_db
from edusphere.main import app
from edusphere.models.user import User
import edusphere.models  # noqa: F401

from conftest import SEED_USERS, as_user

URL = "/api/v1/realtime"


def feed_url(session_id: str, **params) -> str:
    query = "&".join(f"{key}={value}" for key, value in params.items())
    return f"{URL}/sessions/{session_id}/ws" + (f"?{query}" if query else "")


@pytest.fixture
def live_client(tmp_path, monkeypatch):
    """
    TestClient over a file-backed SQLite database. HTTP calls and WebSocket
    sessions share the client's event loop, so published changes reach the
    open feeds.
    """
    url = f"sqlite+aiosqlite:///{tmp_path / 'live.db'}"

    async def prepare():
        setup_engine = create_async_engine(url, poolclass=NullPool)
        async with setup_engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        factory = async_sessionmaker(setup_engine, class_=AsyncSession, expire_on_commit=False)
        async with factory() as session:
            for clerk_id, email, first_name, last_name in SEED_USERS.values():
                session.add(User(clerk_id=clerk_id, email=email, first_name=first_name, last_name=last_name))
            await session.commit()
        await setup_engine.dispose()

    asyncio.run(prepare())

    engine = create_async_engine(url, poolclass=NullPool)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)

    async def override_get_db():
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    monkeypatch.setattr(realtime_api, "AsyncSessionLocal", factory)

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


def create_session(client, user="alice") -> str:
    response = client.post(URL, json={"action": "create_session", "session_type": "coding"}, headers=as_user(user))
    assert response.status_code == 200, response.text
    return response.json()["session_id"]


def rejection_code(client, url: str) -> int:
    with pytest.raises(WebSocketDisconnect) as excinfo:
        with client.websocket_connect(url) as ws:
            ws.receive_json()
    return excinfo.value.code


def test_feed_requires_identity(live_client):
    session_id = create_session(live_client)
    assert rejection_code(live_client, feed_url(session_id)) == 4401


def test_feed_for_unknown_session_is_rejected(live_client):
    assert rejection_code(live_client, feed_url("no-such-session", user_id="user_alice")) == 4404


def test_feed_for_non_participant_is_rejected(live_client):
    session_id = create_session(live_client)
    assert rejection_code(live_client, feed_url(session_id, user_id="user_carol")) == 4403


def test_host_feed_greets_answers_ping_and_streams_updates(live_client):
    session_id = create_session(live_client)

    with live_client.websocket_connect(feed_url(session_id, user_id="user_alice")) as ws:
        hello = ws.receive_json()
        assert hello == {
            "type": "connected",
            "session_id": session_id,
            "tables": ["chat_messages", "live_sessions", "session_participants"],
        }

        ws.send_json({"type": "ping"})
        assert ws.receive_json() == {"type": "pong"}

        ws.send_json({"type": "shout"})
        assert ws.receive_json() == {"type": "error", "detail": "Unsupported message type"}

        response = live_client.post(
            URL,
            json={"action": "update_code", "session_id": session_id, "code": "x = 1"},
            headers=as_user("alice"),
        )
        assert response.status_code == 200

        change = ws.receive_json()
        assert change["type"] == "postgres_changes"
        assert (change["table"], change["event"]) == ("live_sessions", "UPDATE")
        assert change["session_id"] == session_id
        assert change["record"]["code"] == "x = 1"


def test_feed_honours_table_filter(live_client):
    session_id = create_session(live_client)
    live_client.post(URL, json={"action": "join_session", "session_id": session_id}, headers=as_user("bob"))

    with live_client.websocket_connect(feed_url(session_id, user_id="user_bob", tables="chat_messages,bogus")) as ws:
        assert ws.receive_json()["tables"] == ["chat_messages"]

        live_client.post(
            URL,
            json={"action": "update_code", "session_id": session_id, "code": "ignored"},
            headers=as_user("alice"),
        )
        live_client.post(
            URL,
            json={"action": "send_message", "session_id": session_id, "message": "hello"},
            headers=as_user("alice"),
        )

        change = ws.receive_json()
        assert (change["table"], change["event"]) == ("chat_messages", "INSERT")
        assert change["record"]["message"] == "hello"
