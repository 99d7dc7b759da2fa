"""Live collaborative session models: sessions, participants and chat."""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from edusphere.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ParticipantRole(str, enum.Enum):
    HOST = "host"
    PARTICIPANT = "participant"


class LiveSession(Base):
    __tablename__ = "live_sessions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    session_type = Column(String(50), nullable=False, index=True)
    title = Column(String(200), nullable=False, default="New Live Session")
    code = Column(Text, nullable=False, default="")
    created_by = Column(String(255), nullable=False, index=True)
    max_participants = Column(Integer, nullable=False, default=10)
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    participants = relationship("SessionParticipant", back_populates="session", cascade="all, delete-orphan")
    messages = relationship("ChatMessage", back_populates="session", cascade="all, delete-orphan")


class SessionParticipant(Base):
    __tablename__ = "session_participants"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(String(36), ForeignKey("live_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(255), nullable=False, index=True)
    user_name = Column(String(120), nullable=True)
    role = Column(String(20), nullable=False, default=ParticipantRole.PARTICIPANT.value)
    is_active = Column(Boolean, nullable=False, default=True)

    joined_at = Column(DateTime(timezone=True), default=_utcnow)
    last_active_at = Column(DateTime(timezone=True), default=_utcnow)

    session = relationship("LiveSession", back_populates="participants")

    __table_args__ = (
        UniqueConstraint("session_id", "user_id", name="uq_session_participant"),
        Index("ix_session_participants_session_active", "session_id", "is_active"),
    )


class ChatMessage(Base):
    __tablename__ = "chat_messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(String(36), ForeignKey("live_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(255), nullable=False)
    user_name = Column(String(120), nullable=False, default="Anonymous")
    message = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, index=True)

    session = relationship("LiveSession", back_populates="messages")

    __table_args__ = (
        Index("ix_chat_messages_session_created", "session_id", "created_at"),
    )
