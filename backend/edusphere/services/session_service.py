"""Live session service: creation, membership, shared code and chat."""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from edusphere.config import settings
from edusphere.errors import AppError
from edusphere.models.session import (
    LiveSession,
    SessionParticipant,
    ChatMessage,
    ParticipantRole,
)

logger = logging.getLogger(__name__)

# Matches the width of session_participants.user_name
USER_NAME_MAX_LENGTH = 120


def _now() -> datetime:
    return datetime.now(timezone.utc)


async def get_active_session(
    db: AsyncSession,
    session_id: str,
    for_update: bool = False,
) -> Optional[LiveSession]:
    query = select(LiveSession).where(
        LiveSession.id == session_id,
        LiveSession.is_active.is_(True),
    )
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def get_participant(
    db: AsyncSession,
    session_id: str,
    user_id: str,
) -> Optional[SessionParticipant]:
    result = await db.execute(
        select(SessionParticipant).where(
            SessionParticipant.session_id == session_id,
            SessionParticipant.user_id == user_id,
        )
    )
    return result.scalar_one_or_none()


async def require_active_participant(
    db: AsyncSession,
    session_id: str,
    user_id: str,
    purpose: str,
) -> SessionParticipant:
    """Point lookup of the caller's membership; 403 unless it exists and is active."""
    participant = await get_participant(db, session_id, user_id)
    if not participant or not participant.is_active:
        raise AppError.forbidden(
            "Not a participant of this session",
            f"You must be an active participant to {purpose}",
        )
    return participant


async def count_active_participants(db: AsyncSession, session_id: str) -> int:
    result = await db.execute(
        select(func.count(SessionParticipant.id)).where(
            SessionParticipant.session_id == session_id,
            SessionParticipant.is_active.is_(True),
        )
    )
    return result.scalar() or 0


async def create_session(
    db: AsyncSession,
    user_id: str,
    session_type: str,
    title: Optional[str] = None,
    initial_code: Optional[str] = None,
    max_participants: Optional[int] = None,
    host_name: Optional[str] = None,
) -> Tuple[LiveSession, Optional[SessionParticipant]]:
    """
    Create a session and add its creator as host.
    The host row is best effort: if it cannot be written the session still
    stands and the host is returned as None.
    """
    session = LiveSession(
        session_type=session_type,
        title=title or "New Live Session",
        code=initial_code or "",
        created_by=user_id,
        max_participants=max_participants or settings.DEFAULT_MAX_PARTICIPANTS,
        is_active=True,
    )
    db.add(session)
    await db.flush()
    await db.refresh(session)

    host: Optional[SessionParticipant] = None
    try:
        async with db.begin_nested():
            host = SessionParticipant(
                session_id=session.id,
                user_id=user_id,
                user_name=host_name[:USER_NAME_MAX_LENGTH] if host_name else None,
                role=ParticipantRole.HOST.value,
                is_active=True,
            )
            db.add(host)
        await db.refresh(host)
    except SQLAlchemyError as e:
        logger.warning(f"Session {session.id}: could not add host {user_id}: {e}")
        host = None

    logger.info(f"Session {session.id} ({session_type}) created by {user_id}")
    return session, host


async def join_session(
    db: AsyncSession,
    session_id: str,
    user_id: str,
    user_name: Optional[str] = None,
) -> Tuple[LiveSession, SessionParticipant, bool]:
    """
    Add the caller to a session, or refresh their membership.
    Returns (session, participant, created).

    The session row is locked for the rest of the transaction, so the
    capacity check and the participant write cannot interleave with another
    join of the same session. A caller who is already an active participant
    does not take a new slot.
    """
    session = await get_active_session(db, session_id, for_update=True)
    if not session:
        raise AppError.not_found(
            "Session not found or inactive",
            "The requested session does not exist or is no longer active",
        )

    participant = await get_participant(db, session_id, user_id)
    already_active = participant is not None and participant.is_active

    if not already_active:
        count = await count_active_participants(db, session_id)
        if count >= session.max_participants:
            raise AppError.conflict(
                "Session is full",
                f"Session has reached maximum capacity of {session.max_participants} participants",
            )

    now = _now()
    created = participant is None
    if created:
        participant = SessionParticipant(
            session_id=session_id,
            user_id=user_id,
            role=ParticipantRole.PARTICIPANT.value,
            joined_at=now,
        )
        db.add(participant)

    participant.user_name = user_name or participant.user_name or "Anonymous"
    participant.is_active = True
    participant.last_active_at = now

    await db.flush()
    await db.refresh(participant)
    logger.info(f"Session {session_id}: {user_id} joined")
    return session, participant, created


async def update_code(
    db: AsyncSession,
    session_id: str,
    user_id: str,
    code: Optional[str],
) -> LiveSession:
    """Replace the shared code buffer. Last write wins."""
    participant = await require_active_participant(db, session_id, user_id, "update session code")

    session = await get_active_session(db, session_id)
    if not session:
        raise AppError.not_found(
            "Session not found or inactive",
            "The requested session does not exist or is no longer active",
        )

    now = _now()
    session.code = code or ""
    session.updated_at = now
    participant.last_active_at = now
    await db.flush()
    await db.refresh(session)
    return session


async def send_message(
    db: AsyncSession,
    session_id: str,
    user_id: str,
    message: str,
    user_name: Optional[str] = None,
) -> ChatMessage:
    participant = await require_active_participant(db, session_id, user_id, "send messages")

    chat = ChatMessage(
        session_id=session_id,
        user_id=user_id,
        user_name=user_name or participant.user_name or "Anonymous",
        message=message.strip(),
        created_at=_now(),
    )
    participant.last_active_at = chat.created_at
    db.add(chat)
    await db.flush()
    await db.refresh(chat)
    return chat


async def list_participants(
    db: AsyncSession,
    session_id: str,
    user_id: str,
) -> List[SessionParticipant]:
    await require_active_participant(db, session_id, user_id, "view session participants")
    result = await db.execute(
        select(SessionParticipant)
        .where(
            SessionParticipant.session_id == session_id,
            SessionParticipant.is_active.is_(True),
        )
        .order_by(SessionParticipant.joined_at.asc(), SessionParticipant.id.asc())
    )
    return list(result.scalars().all())


async def list_messages(
    db: AsyncSession,
    session_id: str,
    user_id: str,
    limit: Optional[int] = None,
) -> List[ChatMessage]:
    """The first `limit` messages of the session, oldest first."""
    await require_active_participant(db, session_id, user_id, "view session messages")
    result = await db.execute(
        select(ChatMessage)
        .where(ChatMessage.session_id == session_id)
        .order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc())
        .limit(limit or settings.CHAT_HISTORY_LIMIT)
    )
    return list(result.scalars().all())
