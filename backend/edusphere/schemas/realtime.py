"""Pydantic schemas for the realtime session handler."""

from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from edusphere.config import settings


# ─── Requests: one model per action ──────────────────────────────────────────

class CreateSessionRequest(BaseModel):
    action: Literal["create_session"]
    session_type: str = Field(..., min_length=1, max_length=50)
    title: Optional[str] = Field(None, max_length=200)
    initial_code: Optional[str] = None
    max_participants: int = Field(default_factory=lambda: settings.DEFAULT_MAX_PARTICIPANTS, ge=1)


class JoinSessionRequest(BaseModel):
    action: Literal["join_session"]
    session_id: str = Field(..., min_length=1)
    user_name: Optional[str] = Field(None, max_length=120)


class UpdateCodeRequest(BaseModel):
    action: Literal["update_code"]
    session_id: str = Field(..., min_length=1)
    code: Optional[str] = None


class SendMessageRequest(BaseModel):
    action: Literal["send_message"]
    session_id: str = Field(..., min_length=1)
    message: str
    user_name: Optional[str] = Field(None, max_length=120)

    @field_validator("message")
    @classmethod
    def message_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("message is required")
        return value


class GetParticipantsRequest(BaseModel):
    action: Literal["get_participants"]
    session_id: str = Field(..., min_length=1)


class GetMessagesRequest(BaseModel):
    action: Literal["get_messages"]
    session_id: str = Field(..., min_length=1)


class GetUserProgressRequest(BaseModel):
    action: Literal["get_user_progress"]


class UpdateUserProgressRequest(BaseModel):
    action: Literal["update_user_progress"]
    subject: str = Field(..., min_length=1, max_length=50)
    grade: str = Field(..., min_length=1, max_length=50)
    total_attempted: Optional[int] = Field(None, ge=0)
    total_correct: Optional[int] = Field(None, ge=0)
    streak_days: Optional[int] = Field(None, ge=0)


class GetUserPreferencesRequest(BaseModel):
    action: Literal["get_user_preferences"]


class UpdateUserPreferencesRequest(BaseModel):
    action: Literal["update_user_preferences"]
    preferred_subject: Optional[str] = None
    preferred_difficulty: Optional[int] = Field(None, ge=1, le=5)
    preferred_language: Optional[str] = None
    learning_style: Optional[str] = None
    daily_goal_minutes: Optional[int] = Field(None, ge=1)


RealtimeRequest = Annotated[
    Union[
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
    ],
    Field(discriminator="action"),
]


# ─── Rows ────────────────────────────────────────────────────────────────────

class LiveSessionResponse(BaseModel):
    id: str
    session_type: str
    title: str
    code: str
    created_by: str
    max_participants: int
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ParticipantResponse(BaseModel):
    id: int
    session_id: str
    user_id: str
    user_name: Optional[str] = None
    role: str
    is_active: bool
    joined_at: datetime
    last_active_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ChatMessageResponse(BaseModel):
    id: int
    session_id: str
    user_id: str
    user_name: str
    message: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserProgressResponse(BaseModel):
    id: int
    user_id: str
    subject: str
    grade: str
    total_attempted: int
    total_correct: int
    streak_days: int
    last_activity: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class UserPreferencesResponse(BaseModel):
    id: Optional[int] = None
    user_id: str
    preferred_subject: str
    preferred_difficulty: int
    preferred_language: str
    learning_style: str
    daily_goal_minutes: int
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# ─── Envelopes ───────────────────────────────────────────────────────────────

class CreateSessionResponse(BaseModel):
    success: bool = True
    session_id: str
    session: LiveSessionResponse
    message: str = "Session created successfully"


class JoinSessionResponse(BaseModel):
    success: bool = True
    session: LiveSessionResponse
    message: str = "Joined session successfully"


class ActionResponse(BaseModel):
    success: bool = True
    message: str


class SendMessageResponse(BaseModel):
    success: bool = True
    message_id: int
    message: str = "Message sent successfully"


class ParticipantListResponse(BaseModel):
    success: bool = True
    participants: List[ParticipantResponse]


class MessageListResponse(BaseModel):
    success: bool = True
    messages: List[ChatMessageResponse]


class ProgressListResponse(BaseModel):
    success: bool = True
    progress: List[UserProgressResponse]


class ProgressResponse(BaseModel):
    success: bool = True
    progress: UserProgressResponse
    message: str = "User progress updated successfully"


class PreferencesResponse(BaseModel):
    success: bool = True
    preferences: Optional[UserPreferencesResponse] = None
    message: Optional[str] = None


class ChangeEvent(BaseModel):
    """A row change fanned out to realtime subscribers."""

    type: Literal["postgres_changes"] = "postgres_changes"
    table: str
    event: Literal["INSERT", "UPDATE"]
    session_id: str
    record: Dict[str, Any]
    commit_timestamp: datetime
