"""Authored content lookup and creation."""

from typing import Any, Dict, List, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from edusphere.database import Base
from edusphere.models.content import TutorScript, CodingProblem, ARProblem, Story, VoiceQuiz

ModelT = TypeVar("ModelT", bound=Base)


async def _list_filtered(
    db: AsyncSession,
    model: Type[ModelT],
    filters: Dict[str, Optional[Any]],
) -> List[ModelT]:
    """Rows of `model` matching every non-empty filter, newest first."""
    query = select(model)
    for column, value in filters.items():
        if value is not None and value != "":
            query = query.where(getattr(model, column) == value)
    query = query.order_by(model.created_at.desc(), model.id.desc())
    result = await db.execute(query)
    return list(result.scalars().all())


async def _create(db: AsyncSession, model: Type[ModelT], fields: Dict[str, Any]) -> ModelT:
    row = model(**fields)
    db.add(row)
    await db.flush()
    await db.refresh(row)
    return row


async def list_tutor_scripts(
    db: AsyncSession,
    tone: Optional[str] = None,
    grade: Optional[str] = None,
    subject: Optional[str] = None,
) -> List[TutorScript]:
    return await _list_filtered(db, TutorScript, {"tone": tone, "grade": grade, "subject": subject})


async def create_tutor_script(db: AsyncSession, fields: Dict[str, Any]) -> TutorScript:
    return await _create(db, TutorScript, fields)


async def list_coding_problems(
    db: AsyncSession,
    language: Optional[str] = None,
    difficulty: Optional[str] = None,
) -> List[CodingProblem]:
    return await _list_filtered(db, CodingProblem, {"language": language, "difficulty": difficulty})


async def create_coding_problem(db: AsyncSession, fields: Dict[str, Any]) -> CodingProblem:
    return await _create(db, CodingProblem, fields)


async def list_ar_problems(
    db: AsyncSession,
    subject: Optional[str] = None,
    grade: Optional[str] = None,
) -> List[ARProblem]:
    return await _list_filtered(db, ARProblem, {"subject": subject, "grade": grade})


async def create_ar_problem(db: AsyncSession, fields: Dict[str, Any]) -> ARProblem:
    return await _create(db, ARProblem, fields)


async def list_stories(
    db: AsyncSession,
    language: Optional[str] = None,
    grade_level: Optional[str] = None,
) -> List[Story]:
    return await _list_filtered(db, Story, {"language": language, "grade_level": grade_level})


async def create_story(db: AsyncSession, fields: Dict[str, Any]) -> Story:
    return await _create(db, Story, fields)


async def list_voice_quizzes(
    db: AsyncSession,
    language: Optional[str] = None,
    difficulty: Optional[str] = None,
    subject: Optional[str] = None,
) -> List[VoiceQuiz]:
    return await _list_filtered(
        db, VoiceQuiz, {"language": language, "difficulty": difficulty, "subject": subject}
    )


async def create_voice_quiz(db: AsyncSession, fields: Dict[str, Any]) -> VoiceQuiz:
    return await _create(db, VoiceQuiz, fields)
