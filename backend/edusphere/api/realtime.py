"""
Realtime collaboration API routes.

Routes:
    POST   /api/v1/realtime                          — Session and learning-record actions
    WS     /api/v1/realtime/sessions/{session_id}/ws — Row-change feed for one session
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from fastapi import APIRouter, Body, Depends, WebSocket, WebSocketDisconnect
from pydantic import TypeAdapter
from sqlalchemy.ext.asyncio import AsyncSession

from edusphere.database import get_db, AsyncSessionLocal
from edusphere.errors import parse_action
from edusphere.middleware.identity import get_current_user
from edusphere.models.user import User
from edusphere.schemas.realtime import (
    RealtimeRequest,
    CreateSessionRequest,
    JoinSessionRequest,
    UpdateCodeRequest,
    SendMessageRequest,
    GetParticipantsRequest,
    GetMessagesRequest,
    GetUserProgressRequest,
    UpdateUserProgressRequest,
    GetUserPreferencesRequest,
    UpdateUserPreferencesRequest,
    LiveSessionResponse,
    ParticipantResponse,
    ChatMessageResponse,
    UserProgressResponse,
    UserPreferencesResponse,
    CreateSessionResponse,
    JoinSessionResponse,
    ActionResponse,
    SendMessageResponse,
    ParticipantListResponse,
    MessageListResponse,
    ProgressListResponse,
    ProgressResponse,
    PreferencesResponse,
)
from edusphere.services import progress_service, session_service
from edusphere.services.auth_service import subject_from_token
from edusphere.services.realtime_hub import BROADCAST_TABLES, ChangeSubscriber, change_hub

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/realtime", tags=["Realtime"])

realtime_request_adapter = TypeAdapter(RealtimeRequest)

# (table, event, session_id, record) published once the transaction commits
Change = Tuple[str, str, str, Dict[str, Any]]
HandlerResult = Tuple[Any, List[Change]]


def _record(schema, row) -> Dict[str, Any]:
    return schema.model_validate(row).model_dump(mode="json")


# ─── Action handlers ─────────────────────────────────────────────────────────

async def _create_session(db: AsyncSession, user: User, body: CreateSessionRequest) -> HandlerResult:
    session, host = await session_service.create_session(
        db,
        user_id=user.clerk_id,
        session_type=body.session_type,
        title=body.title,
        initial_code=body.initial_code,
        max_participants=body.max_participants,
        host_name=user.display_name,
    )
    changes: List[Change] = [
        ("live_sessions", "INSERT", session.id, _record(LiveSessionResponse, session)),
    ]
    if host is not None:
        changes.append(("session_participants", "INSERT", session.id, _record(ParticipantResponse, host)))

    response = CreateSessionResponse(
        session_id=session.id,
        session=LiveSessionResponse.model_validate(session),
    )
    return response, changes


async def _join_session(db: AsyncSession, user: User, body: JoinSessionRequest) -> HandlerResult:
    session, participant, created = await session_service.join_session(
        db, body.session_id, user.clerk_id, body.user_name
    )
    event = "INSERT" if created else "UPDATE"
    changes = [("session_participants", event, session.id, _record(ParticipantResponse, participant))]
    return JoinSessionResponse(session=LiveSessionResponse.model_validate(session)), changes


async def _update_code(db: AsyncSession, user: User, body: UpdateCodeRequest) -> HandlerResult:
    session = await session_service.update_code(db, body.session_id, user.clerk_id, body.code)
    changes = [("live_sessions", "UPDATE", session.id, _record(LiveSessionResponse, session))]
    return ActionResponse(message="Code updated successfully"), changes


async def _send_message(db: AsyncSession, user: User, body: SendMessageRequest) -> HandlerResult:
    chat = await session_service.send_message(
        db, body.session_id, user.clerk_id, body.message, body.user_name
    )
    changes = [("chat_messages", "INSERT", chat.session_id, _record(ChatMessageResponse, chat))]
    return SendMessageResponse(message_id=chat.id), changes


async def _get_participants(db: AsyncSession, user: User, body: GetParticipantsRequest) -> HandlerResult:
    participants = await session_service.list_participants(db, body.session_id, user.clerk_id)
    response = ParticipantListResponse(
        participants=[ParticipantResponse.model_validate(p) for p in participants]
    )
    return response, []


async def _get_messages(db: AsyncSession, user: User, body: GetMessagesRequest) -> HandlerResult:
    messages = await session_service.list_messages(db, body.session_id, user.clerk_id)
    response = MessageListResponse(messages=[ChatMessageResponse.model_validate(m) for m in messages])
    return response, []


async def _get_user_progress(db: AsyncSession, user: User, body: GetUserProgressRequest) -> HandlerResult:
    rows = await progress_service.list_progress(db, user.clerk_id)
    return ProgressListResponse(progress=[UserProgressResponse.model_validate(r) for r in rows]), []


async def _update_user_progress(
    db: AsyncSession, user: User, body: UpdateUserProgressRequest
) -> HandlerResult:
    progress = await progress_service.upsert_progress(
        db,
        user.clerk_id,
        body.subject,
        body.grade,
        total_attempted=body.total_attempted,
        total_correct=body.total_correct,
        streak_days=body.streak_days,
    )
    return ProgressResponse(progress=UserProgressResponse.model_validate(progress)), []


async def _get_user_preferences(
    db: AsyncSession, user: User, body: GetUserPreferencesRequest
) -> HandlerResult:
    preferences = await progress_service.get_preferences(db, user.clerk_id)
    if preferences is None:
        return PreferencesResponse(preferences=None), []
    return PreferencesResponse(preferences=UserPreferencesResponse.model_validate(preferences)), []


async def _update_user_preferences(
    db: AsyncSession, user: User, body: UpdateUserPreferencesRequest
) -> HandlerResult:
    preferences = await progress_service.upsert_preferences(
        db,
        user.clerk_id,
        preferred_subject=body.preferred_subject,
        preferred_difficulty=body.preferred_difficulty,
        preferred_language=body.preferred_language,
        learning_style=body.learning_style,
        daily_goal_minutes=body.daily_goal_minutes,
    )
    response = PreferencesResponse(
        preferences=UserPreferencesResponse.model_validate(preferences),
        message="User preferences updated successfully",
    )
    return response, []


ACTION_HANDLERS: Dict[type, Callable[[AsyncSession, User, Any], Awaitable[HandlerResult]]] = {
    CreateSessionRequest: _create_session,
    JoinSessionRequest: _join_session,
    UpdateCodeRequest: _update_code,
    SendMessageRequest: _send_message,
    GetParticipantsRequest: _get_participants,
    GetMessagesRequest: _get_messages,
    GetUserProgressRequest: _get_user_progress,
    UpdateUserProgressRequest: _update_user_progress,
    GetUserPreferencesRequest: _get_user_preferences,
    UpdateUserPreferencesRequest: _update_user_preferences,
}


@router.post("")
async def realtime_action(
    payload: Any = Body(...),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Dispatch one realtime action for the caller.
    Writes are committed before their change events are published.
    """
    body = parse_action(realtime_request_adapter, payload)
    handler = ACTION_HANDLERS[type(body)]

    response, changes = await handler(db, current_user, body)

    if changes:
        await db.commit()
        for table, event, session_id, record in changes:
            await change_hub.publish(table, event, session_id, record)

    return response.model_dump(mode="json")


# ─── Change feed ─────────────────────────────────────────────────────────────

def _requested_tables(raw: Optional[str]) -> List[str]:
    if not raw:
        return sorted(BROADCAST_TABLES)
    tables = [name.strip() for name in raw.split(",") if name.strip() in BROADCAST_TABLES]
    return sorted(set(tables)) or sorted(BROADCAST_TABLES)


def _resolve_ws_caller(websocket: WebSocket) -> Optional[str]:
    user_id = (websocket.query_params.get("user_id") or "").strip()
    if user_id:
        return user_id
    token = websocket.query_params.get("token")
    if token:
        return subject_from_token(token)
    return None


@router.websocket("/sessions/{session_id}/ws")
async def session_change_feed(websocket: WebSocket, session_id: str):
    caller_id = _resolve_ws_caller(websocket)
    if not caller_id:
        await websocket.close(code=4401, reason="Authentication required")
        return

    async with AsyncSessionLocal() as db:
        session = await session_service.get_active_session(db, session_id)
        if not session:
            await websocket.close(code=4404, reason="Session not found or inactive")
            return
        participant = await session_service.get_participant(db, session_id, caller_id)
        if not participant or not participant.is_active:
            await websocket.close(code=4403, reason="Not a participant of this session")
            return

    tables = _requested_tables(websocket.query_params.get("tables"))

    await websocket.accept()
    subscriber = ChangeSubscriber(websocket, caller_id, tables)
    await change_hub.add(session_id, subscriber)
    logger.info(f"Session {session_id}: {caller_id} subscribed to {', '.join(tables)}")

    try:
        await websocket.send_json({"type": "connected", "session_id": session_id, "tables": tables})
        while True:
            try:
                payload = await websocket.receive_json()
            except ValueError:
                await websocket.send_json({"type": "error", "detail": "Invalid JSON payload"})
                continue

            message_type = str(payload.get("type") or "").strip().lower() if isinstance(payload, dict) else ""
            if message_type == "ping":
                await websocket.send_json({"type": "pong"})
            else:
                await websocket.send_json({"type": "error", "detail": "Unsupported message type"})
    except WebSocketDisconnect:
        pass
    finally:
        await change_hub.remove(session_id, websocket)
        logger.info(f"Session {session_id}: {caller_id} unsubscribed")
