"""Pydantic schemas for learning records and authored content."""

from datetime import datetime
from typing import Optional, List, Dict, Any

from pydantic import BaseModel, Field, ConfigDict


# ─── Learning records ────────────────────────────────────────────────────────

class PreferencesUpsert(BaseModel):
    user_id: str = Field(..., min_length=1)
    preferred_subject: Optional[str] = "math"
    preferred_difficulty: Optional[int] = Field(2, ge=1, le=5)
    preferred_language: Optional[str] = "en"
    learning_style: Optional[str] = "visual"
    daily_goal_minutes: Optional[int] = Field(30, ge=1)


class ProgressUpsert(BaseModel):
    user_id: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1, max_length=50)
    grade: str = Field(..., min_length=1, max_length=50)
    total_attempted: Optional[int] = Field(None, ge=0)
    total_correct: Optional[int] = Field(None, ge=0)
    streak_days: Optional[int] = Field(None, ge=0)


class AchievementCreate(BaseModel):
    user_id: str = Field(..., min_length=1)
    badge_name: str = Field(..., min_length=1, max_length=120)
    badge_description: Optional[str] = None
    badge_icon: Optional[str] = None
    points: int = Field(0, ge=0)
    category: Optional[str] = None


class AchievementResponse(AchievementCreate):
    id: int
    earned_date: datetime

    model_config = ConfigDict(from_attributes=True)


class SharedContentCreate(BaseModel):
    user_id: str = Field(..., min_length=1)
    content_type: str = Field(..., min_length=1, max_length=50)
    content_title: str = Field(..., min_length=1, max_length=200)
    share_url: str = Field(..., min_length=1, max_length=500)
    thumbnail_url: Optional[str] = None
    description: Optional[str] = None
    views: int = Field(0, ge=0)
    likes: int = Field(0, ge=0)


class SharedContentResponse(SharedContentCreate):
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ─── Authored content ────────────────────────────────────────────────────────

class TutorScriptCreate(BaseModel):
    tone: str = Field(..., min_length=1, max_length=50)
    script: str = Field(..., min_length=1)
    grade: str = Field(..., min_length=1, max_length=50)
    subject: str = Field(..., min_length=1, max_length=50)
    topic: str = Field(..., min_length=1, max_length=200)
    duration_minutes: Optional[int] = Field(None, ge=1)
    voice_settings: Optional[Dict[str, Any]] = None


class TutorScriptResponse(TutorScriptCreate):
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CodingProblemCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    difficulty: str = Field(..., min_length=1, max_length=20)
    language: str = Field(..., min_length=1, max_length=30)
    starter_code: Optional[str] = None
    solution: Optional[str] = None
    test_cases: Optional[List[Dict[str, Any]]] = None


class CodingProblemResponse(CodingProblemCreate):
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ARProblemCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1, max_length=50)
    grade: str = Field(..., min_length=1, max_length=50)
    difficulty: int = Field(1, ge=1)
    ar_data: Optional[Dict[str, Any]] = None
    answer: Optional[str] = None
    hints: Optional[List[str]] = None


class ARProblemResponse(ARProblemCreate):
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class StoryCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    language: str = "en"
    grade_level: Optional[str] = None
    subject: Optional[str] = None
    audio_url: Optional[str] = None
    images: Optional[List[str]] = None
    is_premium: bool = False


class StoryResponse(StoryCreate):
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class VoiceQuizCreate(BaseModel):
    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)
    alternative_answers: Optional[List[str]] = None
    hint: Optional[str] = None
    language: str = "en"
    difficulty: str = "medium"
    grade_level: Optional[str] = None
    subject: Optional[str] = None


class VoiceQuizResponse(VoiceQuizCreate):
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
