import pytest
from sqlalchemy import update

from edusphere.config import settings
from edusphere.models.user import User
from edusphere.services.realtime_hub import ChangeHub, ChangeSubscriber, change_hub

from conftest import FakeWebSocket, as_user

URL = "/api/v1/realtime"


async def create_session(client, user="alice", **fields):
    body = {"action": "create_session", "session_type": "coding", **fields}
    response = await client.post(URL, json=body, headers=as_user(user))
    assert response.status_code == 200, response.text
    return response.json()


async def join(client, session_id, user, **fields):
    body = {"action": "join_session", "session_id": session_id, **fields}
    return await client.post(URL, json=body, headers=as_user(user))


# ─── Identity and request parsing ────────────────────────────────────────────

async def test_missing_user_header_is_unauthorized(client):
    response = await client.post(URL, json={"action": "get_user_progress"})
    assert response.status_code == 401
    assert response.json()["error"] == "User ID required"


async def test_unknown_user_is_unauthorized(client):
    response = await client.post(
        URL, json={"action": "get_user_progress"}, headers={"X-User-ID": "user_nobody"}
    )
    assert response.status_code == 401
    assert response.json()["error"] == "User not found"


async def test_unknown_action_is_rejected(client):
    response = await client.post(URL, json={"action": "explode"}, headers=as_user("alice"))
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Invalid action"
    assert body["message"] == "Action 'explode' is not supported"


async def test_missing_action_is_rejected(client):
    response = await client.post(URL, json={"session_id": "x"}, headers=as_user("alice"))
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid action"


async def test_missing_required_field_is_rejected(client):
    response = await client.post(URL, json={"action": "create_session"}, headers=as_user("alice"))
    assert response.status_code == 400
    assert "session_type" in response.json()["message"]


# ─── Session lifecycle ───────────────────────────────────────────────────────

async def test_create_session_defaults_and_host(client):
    created = await create_session(client)
    session = created["session"]

    assert created["success"] is True
    assert created["message"] == "Session created successfully"
    assert session["id"] == created["session_id"]
    assert session["title"] == "New Live Session"
    assert session["code"] == ""
    assert session["max_participants"] == settings.DEFAULT_MAX_PARTICIPANTS
    assert session["created_by"] == "user_alice"

    response = await client.post(
        URL,
        json={"action": "get_participants", "session_id": created["session_id"]},
        headers=as_user("alice"),
    )
    participants = response.json()["participants"]
    assert [(p["user_id"], p["role"]) for p in participants] == [("user_alice", "host")]
    assert participants[0]["user_name"] == "Alice Ng"


async def test_join_unknown_session_is_not_found(client):
    response = await join(client, "no-such-session", "bob")
    assert response.status_code == 404
    assert response.json()["error"] == "Session not found or inactive"


async def test_full_session_rejects_new_participant(client):
    created = await create_session(client, max_participants=2)
    session_id = created["session_id"]

    assert (await join(client, session_id, "bob", user_name="Bobby")).status_code == 200

    response = await join(client, session_id, "carol")
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Session is full"
    assert body["message"] == "Session has reached maximum capacity of 2 participants"


async def test_rejoin_by_active_participant_does_not_take_a_slot(client):
    created = await create_session(client, max_participants=2)
    session_id = created["session_id"]
    await join(client, session_id, "bob", user_name="Bobby")

    response = await join(client, session_id, "bob", user_name="Robert")
    assert response.status_code == 200

    participants = (
        await client.post(
            URL, json={"action": "get_participants", "session_id": session_id}, headers=as_user("bob")
        )
    ).json()["participants"]
    assert len(participants) == 2
    assert {p["user_id"]: p["user_name"] for p in participants}["user_bob"] == "Robert"


async def test_join_without_name_defaults_to_anonymous(client):
    created = await create_session(client)
    await join(client, created["session_id"], "carol")

    participants = (
        await client.post(
            URL,
            json={"action": "get_participants", "session_id": created["session_id"]},
            headers=as_user("carol"),
        )
    ).json()["participants"]
    carol = next(p for p in participants if p["user_id"] == "user_carol")
    assert carol["user_name"] == "Anonymous"
    assert carol["role"] == "participant"
    assert carol["is_active"] is True


async def test_update_code_last_write_wins(client):
    created = await create_session(client, initial_code="print(1)")
    session_id = created["session_id"]
    await join(client, session_id, "bob")

    for user, code in (("alice", "print(2)"), ("bob", "print(3)")):
        response = await client.post(
            URL, json={"action": "update_code", "session_id": session_id, "code": code}, headers=as_user(user)
        )
        assert response.status_code == 200
        assert response.json()["message"] == "Code updated successfully"

    response = await join(client, session_id, "bob")
    assert response.json()["session"]["code"] == "print(3)"


@pytest.mark.parametrize(
    "action,extra",
    [
        ("update_code", {"code": "x = 1"}),
        ("send_message", {"message": "hi"}),
        ("get_participants", {}),
        ("get_messages", {}),
    ],
)
async def test_non_participant_is_forbidden(client, action, extra):
    created = await create_session(client)
    response = await client.post(
        URL,
        json={"action": action, "session_id": created["session_id"], **extra},
        headers=as_user("carol"),
    )
    assert response.status_code == 403
    assert response.json()["error"] == "Not a participant of this session"


# ─── Chat ────────────────────────────────────────────────────────────────────

async def test_send_message_trims_and_resolves_name(client):
    created = await create_session(client)
    session_id = created["session_id"]
    await join(client, session_id, "bob", user_name="Bobby")

    sent = await client.post(
        URL,
        json={"action": "send_message", "session_id": session_id, "message": "  hello there  "},
        headers=as_user("bob"),
    )
    assert sent.status_code == 200
    assert isinstance(sent.json()["message_id"], int)

    await client.post(
        URL,
        json={"action": "send_message", "session_id": session_id, "message": "hi", "user_name": "Teacher"},
        headers=as_user("alice"),
    )

    messages = (
        await client.post(URL, json={"action": "get_messages", "session_id": session_id}, headers=as_user("alice"))
    ).json()["messages"]
    assert [(m["message"], m["user_name"]) for m in messages] == [
        ("hello there", "Bobby"),
        ("hi", "Teacher"),
    ]


async def test_blank_message_is_rejected(client):
    created = await create_session(client)
    response = await client.post(
        URL,
        json={"action": "send_message", "session_id": created["session_id"], "message": "   "},
        headers=as_user("alice"),
    )
    assert response.status_code == 400


async def test_get_messages_returns_oldest_first_up_to_limit(client, monkeypatch):
    monkeypatch.setattr(settings, "CHAT_HISTORY_LIMIT", 3)
    created = await create_session(client)
    session_id = created["session_id"]

    for i in range(5):
        await client.post(
            URL,
            json={"action": "send_message", "session_id": session_id, "message": f"m{i}"},
            headers=as_user("alice"),
        )

    messages = (
        await client.post(URL, json={"action": "get_messages", "session_id": session_id}, headers=as_user("alice"))
    ).json()["messages"]
    assert [m["message"] for m in messages] == ["m0", "m1", "m2"]


# ─── Learning records through the realtime handler ──────────────────────────

async def test_user_progress_upsert_and_listing(client):
    for subject, attempted in (("math", 4), ("physics", 2), ("math", 6)):
        response = await client.post(
            URL,
            json={
                "action": "update_user_progress",
                "subject": subject,
                "grade": "grade7-9",
                "total_attempted": attempted,
                "total_correct": 1,
            },
            headers=as_user("alice"),
        )
        assert response.status_code == 200

    rows = (
        await client.post(URL, json={"action": "get_user_progress"}, headers=as_user("alice"))
    ).json()["progress"]
    assert len(rows) == 2
    assert rows[0]["subject"] == "math"
    assert rows[0]["total_attempted"] == 6


async def test_user_preferences_null_then_defaults_filled(client):
    response = await client.post(URL, json={"action": "get_user_preferences"}, headers=as_user("bob"))
    assert response.json()["preferences"] is None

    response = await client.post(
        URL,
        json={"action": "update_user_preferences", "preferred_subject": "physics"},
        headers=as_user("bob"),
    )
    preferences = response.json()["preferences"]
    assert preferences["preferred_subject"] == "physics"
    assert preferences["preferred_difficulty"] == 2
    assert preferences["preferred_language"] == "en"
    assert preferences["learning_style"] == "visual"
    assert preferences["daily_goal_minutes"] == 30


# ─── Change feed ─────────────────────────────────────────────────────────────

async def test_committed_writes_are_published_in_order(client):
    created = await create_session(client)
    session_id = created["session_id"]

    socket = FakeWebSocket()
    await change_hub.add(session_id, ChangeSubscriber(socket, "user_alice"))
    try:
        await join(client, session_id, "bob")
        await client.post(
            URL,
            json={"action": "update_code", "session_id": session_id, "code": "x = 2"},
            headers=as_user("alice"),
        )
        await client.post(
            URL,
            json={"action": "send_message", "session_id": session_id, "message": "done"},
            headers=as_user("bob"),
        )
        await client.post(URL, json={"action": "get_messages", "session_id": session_id}, headers=as_user("bob"))
    finally:
        await change_hub.remove(session_id, socket)

    assert [(e["table"], e["event"]) for e in socket.sent] == [
        ("session_participants", "INSERT"),
        ("live_sessions", "UPDATE"),
        ("chat_messages", "INSERT"),
    ]
    assert all(e["type"] == "postgres_changes" and e["session_id"] == session_id for e in socket.sent)
    assert socket.sent[1]["record"]["code"] == "x = 2"
    assert socket.sent[2]["record"]["message"] == "done"


async def test_rejected_write_publishes_nothing(client):
    created = await create_session(client)
    session_id = created["session_id"]

    socket = FakeWebSocket()
    await change_hub.add(session_id, ChangeSubscriber(socket, "user_alice"))
    try:
        await client.post(
            URL,
            json={"action": "update_code", "session_id": session_id, "code": "nope"},
            headers=as_user("carol"),
        )
    finally:
        await change_hub.remove(session_id, socket)

    assert socket.sent == []


async def test_hub_filters_tables_and_drops_dead_sockets():
    hub = ChangeHub()
    chat_only = FakeWebSocket()
    everything = FakeWebSocket()
    dead = FakeWebSocket(fail=True)

    await hub.add("s1", ChangeSubscriber(chat_only, "a", ["chat_messages"]))
    await hub.add("s1", ChangeSubscriber(everything, "b"))
    await hub.add("s1", ChangeSubscriber(dead, "c"))
    await hub.add("s2", ChangeSubscriber(FakeWebSocket(), "d"))

    delivered = await hub.publish("live_sessions", "UPDATE", "s1", {"id": "s1"})
    assert delivered == 1
    assert chat_only.sent == []
    assert everything.sent[0]["table"] == "live_sessions"

    remaining = await hub.list("s1")
    assert [s.user_id for s in remaining] == ["a", "b"]

    await hub.publish("chat_messages", "INSERT", "s1", {"id": 1})
    assert len(chat_only.sent) == 1
    assert len(everything.sent) == 2


async def test_long_email_host_name_is_clipped(client, session_factory):
    long_email = "a" * 200 + "@example.com"
    async with session_factory() as session:
        await session.execute(update(User).where(User.clerk_id == "user_dave").values(email=long_email))
        await session.commit()

    created = await create_session(client, user="dave")
    participants = (
        await client.post(
            URL,
            json={"action": "get_participants", "session_id": created["session_id"]},
            headers=as_user("dave"),
        )
    ).json()["participants"]
    assert [p["role"] for p in participants] == ["host"]
    assert participants[0]["user_name"] == long_email[:120]


async def test_progress_action_resets_omitted_counters(client):
    base = {"action": "update_user_progress", "subject": "physics", "grade": "matric"}
    await client.post(
        URL,
        json={**base, "total_attempted": 9, "total_correct": 5, "streak_days": 2},
        headers=as_user("carol"),
    )
    response = await client.post(URL, json={**base, "total_correct": 6}, headers=as_user("carol"))
    progress = response.json()["progress"]
    assert (progress["total_attempted"], progress["total_correct"], progress["streak_days"]) == (0, 6, 0)
