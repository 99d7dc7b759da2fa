"""Learning records service: progress, preferences, achievements and shared content."""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from edusphere.models.learning import (
    UserProgress,
    UserPreferences,
    UserAchievement,
    SharedContent,
)

logger = logging.getLogger(__name__)

DEFAULT_PREFERENCES = {
    "preferred_subject": "math",
    "preferred_difficulty": 2,
    "preferred_language": "en",
    "learning_style": "visual",
    "daily_goal_minutes": 30,
}

SHARED_CONTENT_LIMIT = 20


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ─── Progress ────────────────────────────────────────────────────────────────

async def list_progress(
    db: AsyncSession,
    user_id: str,
    subject: Optional[str] = None,
    grade: Optional[str] = None,
) -> List[UserProgress]:
    query = select(UserProgress).where(UserProgress.user_id == user_id)
    if subject:
        query = query.where(UserProgress.subject == subject)
    if grade:
        query = query.where(UserProgress.grade == grade)
    query = query.order_by(UserProgress.updated_at.desc(), UserProgress.id.desc())
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_progress(db: AsyncSession, user_id: str, subject: str, grade: str) -> Optional[UserProgress]:
    result = await db.execute(
        select(UserProgress).where(
            UserProgress.user_id == user_id,
            UserProgress.subject == subject,
            UserProgress.grade == grade,
        )
    )
    return result.scalar_one_or_none()


async def upsert_progress(
    db: AsyncSession,
    user_id: str,
    subject: str,
    grade: str,
    total_attempted: Optional[int] = None,
    total_correct: Optional[int] = None,
    streak_days: Optional[int] = None,
) -> UserProgress:
    """
    Write the counters for (user, subject, grade).
    Every call overwrites all three counters; omitted ones are written as zero.
    """
    progress = await get_progress(db, user_id, subject, grade)
    if progress is None:
        progress = UserProgress(
            user_id=user_id,
            subject=subject,
            grade=grade,
        )
        db.add(progress)

    progress.total_attempted = total_attempted or 0
    progress.total_correct = total_correct or 0
    progress.streak_days = streak_days or 0

    now = _now()
    progress.last_activity = now
    progress.updated_at = now
    await db.flush()
    await db.refresh(progress)
    return progress


async def record_attempt(
    db: AsyncSession,
    user_id: str,
    subject: str,
    grade: str,
    correct: bool,
) -> UserProgress:
    """
    Count one answered problem.
    The streak grows on the first attempt of a new consecutive day and
    restarts at 1 after a gap.
    """
    progress = await get_progress(db, user_id, subject, grade)
    now = _now()
    if progress is None:
        progress = UserProgress(
            user_id=user_id,
            subject=subject,
            grade=grade,
            total_attempted=0,
            total_correct=0,
            streak_days=1,
        )
        db.add(progress)
    else:
        last = _as_utc(progress.last_activity)
        days_since = (now.date() - last.date()).days if last else None
        if days_since == 1:
            progress.streak_days = (progress.streak_days or 0) + 1
        elif days_since is None or days_since > 1:
            progress.streak_days = 1

    progress.total_attempted = (progress.total_attempted or 0) + 1
    if correct:
        progress.total_correct = (progress.total_correct or 0) + 1
    progress.last_activity = now
    progress.updated_at = now

    await db.flush()
    await db.refresh(progress)
    logger.info(f"Attempt recorded for {user_id}: {subject}/{grade} correct={correct}")
    return progress


# ─── Preferences ─────────────────────────────────────────────────────────────

async def get_preferences(db: AsyncSession, user_id: str) -> Optional[UserPreferences]:
    result = await db.execute(select(UserPreferences).where(UserPreferences.user_id == user_id))
    return result.scalar_one_or_none()


def default_preferences(user_id: str) -> dict:
    return {"user_id": user_id, **DEFAULT_PREFERENCES}


async def upsert_preferences(
    db: AsyncSession,
    user_id: str,
    preferred_subject: Optional[str] = None,
    preferred_difficulty: Optional[int] = None,
    preferred_language: Optional[str] = None,
    learning_style: Optional[str] = None,
    daily_goal_minutes: Optional[int] = None,
) -> UserPreferences:
    """Replace the user's preferences; omitted fields fall back to the defaults."""
    preferences = await get_preferences(db, user_id)
    if preferences is None:
        preferences = UserPreferences(user_id=user_id)
        db.add(preferences)

    preferences.preferred_subject = preferred_subject or DEFAULT_PREFERENCES["preferred_subject"]
    preferences.preferred_difficulty = preferred_difficulty or DEFAULT_PREFERENCES["preferred_difficulty"]
    preferences.preferred_language = preferred_language or DEFAULT_PREFERENCES["preferred_language"]
    preferences.learning_style = learning_style or DEFAULT_PREFERENCES["learning_style"]
    preferences.daily_goal_minutes = daily_goal_minutes or DEFAULT_PREFERENCES["daily_goal_minutes"]
    preferences.updated_at = _now()

    await db.flush()
    await db.refresh(preferences)
    return preferences


# ─── Achievements and shared content ─────────────────────────────────────────

async def list_achievements(db: AsyncSession, user_id: str) -> List[UserAchievement]:
    result = await db.execute(
        select(UserAchievement)
        .where(UserAchievement.user_id == user_id)
        .order_by(UserAchievement.earned_date.desc(), UserAchievement.id.desc())
    )
    return list(result.scalars().all())


async def add_achievement(db: AsyncSession, **fields) -> UserAchievement:
    achievement = UserAchievement(**fields, earned_date=_now())
    db.add(achievement)
    await db.flush()
    await db.refresh(achievement)
    return achievement


async def list_shared_content(db: AsyncSession, limit: int = SHARED_CONTENT_LIMIT) -> List[SharedContent]:
    result = await db.execute(
        select(SharedContent)
        .order_by(SharedContent.created_at.desc(), SharedContent.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def add_shared_content(db: AsyncSession, **fields) -> SharedContent:
    content = SharedContent(**fields, created_at=_now())
    db.add(content)
    await db.flush()
    await db.refresh(content)
    return content
