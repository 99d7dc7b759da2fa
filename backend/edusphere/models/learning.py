"""Per-user learning records: progress, preferences, achievements and shared content."""

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, DateTime, UniqueConstraint

from edusphere.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserProgress(Base):
    __tablename__ = "user_progress"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False, index=True)
    subject = Column(String(50), nullable=False)
    grade = Column(String(50), nullable=False)
    total_attempted = Column(Integer, nullable=False, default=0)
    total_correct = Column(Integer, nullable=False, default=0)
    streak_days = Column(Integer, nullable=False, default=0)
    last_activity = Column(DateTime(timezone=True), default=_utcnow)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "subject", "grade", name="uq_user_progress_subject_grade"),
    )


class UserPreferences(Base):
    __tablename__ = "user_preferences"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False, unique=True, index=True)
    preferred_subject = Column(String(50), nullable=False, default="math")
    preferred_difficulty = Column(Integer, nullable=False, default=2)
    preferred_language = Column(String(10), nullable=False, default="en")
    learning_style = Column(String(30), nullable=False, default="visual")
    daily_goal_minutes = Column(Integer, nullable=False, default=30)

    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


class UserAchievement(Base):
    __tablename__ = "user_achievements"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False, index=True)
    badge_name = Column(String(120), nullable=False)
    badge_description = Column(Text, nullable=True)
    badge_icon = Column(String(255), nullable=True)
    points = Column(Integer, nullable=False, default=0)
    category = Column(String(50), nullable=True)
    earned_date = Column(DateTime(timezone=True), default=_utcnow)


class SharedContent(Base):
    __tablename__ = "shared_content"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False, index=True)
    content_type = Column(String(50), nullable=False)
    content_title = Column(String(200), nullable=False)
    share_url = Column(String(500), nullable=False)
    thumbnail_url = Column(String(500), nullable=True)
    description = Column(Text, nullable=True)
    views = Column(Integer, nullable=False, default=0)
    likes = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=_utcnow, index=True)
