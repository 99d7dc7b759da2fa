"""
Learning content API routes.

Routes:
    GET    /api/v1/user-preferences/{user_id}   — Preferences, or defaults when none are stored
    POST   /api/v1/user-preferences             — Create or replace preferences
    GET    /api/v1/user-progress/{user_id}      — Progress rows (filters: subject, grade)
    POST   /api/v1/user-progress                — Create or update a progress row
    GET    /api/v1/user-achievements/{user_id}  — Earned badges
    POST   /api/v1/user-achievements            — Award a badge
    GET    /api/v1/shared-content               — Latest shared content
    POST   /api/v1/shared-content               — Share content
    GET    /api/v1/tutor-scripts                — Tutor scripts (filters: tone, grade, subject)
    GET    /api/v1/coding-problems              — Coding problems (filters: language, difficulty)
    GET    /api/v1/ar-problems                  — AR problems (filters: subject, grade)
    GET    /api/v1/stories                      — Stories (filters: language, grade_level)
    GET    /api/v1/voice-quizzes                — Voice quizzes (filters: language, difficulty, subject)
    Each authored-content list also accepts POST to add an item.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from edusphere.database import get_db
from edusphere.schemas.content import (
    PreferencesUpsert,
    ProgressUpsert,
    AchievementCreate,
    AchievementResponse,
    SharedContentCreate,
    SharedContentResponse,
    TutorScriptCreate,
    TutorScriptResponse,
    CodingProblemCreate,
    CodingProblemResponse,
    ARProblemCreate,
    ARProblemResponse,
    StoryCreate,
    StoryResponse,
    VoiceQuizCreate,
    VoiceQuizResponse,
)
from edusphere.schemas.realtime import UserPreferencesResponse, UserProgressResponse
from edusphere.services import content_service, progress_service

router = APIRouter(prefix="/api/v1", tags=["Content"])


# ─── Learning records ────────────────────────────────────────────────────────

@router.get("/user-preferences/{user_id}", response_model=UserPreferencesResponse)
async def get_user_preferences(user_id: str, db: AsyncSession = Depends(get_db)):
    preferences = await progress_service.get_preferences(db, user_id)
    if preferences is None:
        return UserPreferencesResponse(**progress_service.default_preferences(user_id))
    return UserPreferencesResponse.model_validate(preferences)


@router.post("/user-preferences", response_model=UserPreferencesResponse)
async def save_user_preferences(body: PreferencesUpsert, db: AsyncSession = Depends(get_db)):
    preferences = await progress_service.upsert_preferences(db, **body.model_dump())
    return UserPreferencesResponse.model_validate(preferences)


@router.get("/user-progress/{user_id}", response_model=List[UserProgressResponse])
async def get_user_progress(
    user_id: str,
    subject: Optional[str] = Query(None),
    grade: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    rows = await progress_service.list_progress(db, user_id, subject=subject, grade=grade)
    return [UserProgressResponse.model_validate(row) for row in rows]


@router.post("/user-progress", response_model=UserProgressResponse)
async def save_user_progress(body: ProgressUpsert, db: AsyncSession = Depends(get_db)):
    progress = await progress_service.upsert_progress(db, **body.model_dump())
    return UserProgressResponse.model_validate(progress)


@router.get("/user-achievements/{user_id}", response_model=List[AchievementResponse])
async def get_user_achievements(user_id: str, db: AsyncSession = Depends(get_db)):
    rows = await progress_service.list_achievements(db, user_id)
    return [AchievementResponse.model_validate(row) for row in rows]


@router.post("/user-achievements", response_model=AchievementResponse, status_code=status.HTTP_201_CREATED)
async def award_achievement(body: AchievementCreate, db: AsyncSession = Depends(get_db)):
    achievement = await progress_service.add_achievement(db, **body.model_dump())
    return AchievementResponse.model_validate(achievement)


@router.get("/shared-content", response_model=List[SharedContentResponse])
async def get_shared_content(db: AsyncSession = Depends(get_db)):
    rows = await progress_service.list_shared_content(db)
    return [SharedContentResponse.model_validate(row) for row in rows]


@router.post("/shared-content", response_model=SharedContentResponse, status_code=status.HTTP_201_CREATED)
async def share_content(body: SharedContentCreate, db: AsyncSession = Depends(get_db)):
    content = await progress_service.add_shared_content(db, **body.model_dump())
    return SharedContentResponse.model_validate(content)


# ─── Authored content ────────────────────────────────────────────────────────

@router.get("/tutor-scripts", response_model=List[TutorScriptResponse])
async def get_tutor_scripts(
    tone: Optional[str] = Query(None),
    grade: Optional[str] = Query(None),
    subject: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    rows = await content_service.list_tutor_scripts(db, tone=tone, grade=grade, subject=subject)
    return [TutorScriptResponse.model_validate(row) for row in rows]


@router.post("/tutor-scripts", response_model=TutorScriptResponse, status_code=status.HTTP_201_CREATED)
async def add_tutor_script(body: TutorScriptCreate, db: AsyncSession = Depends(get_db)):
    row = await content_service.create_tutor_script(db, body.model_dump())
    return TutorScriptResponse.model_validate(row)


@router.get("/coding-problems", response_model=List[CodingProblemResponse])
async def get_coding_problems(
    language: Optional[str] = Query(None),
    difficulty: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    rows = await content_service.list_coding_problems(db, language=language, difficulty=difficulty)
    return [CodingProblemResponse.model_validate(row) for row in rows]


@router.post("/coding-problems", response_model=CodingProblemResponse, status_code=status.HTTP_201_CREATED)
async def add_coding_problem(body: CodingProblemCreate, db: AsyncSession = Depends(get_db)):
    row = await content_service.create_coding_problem(db, body.model_dump())
    return CodingProblemResponse.model_validate(row)


@router.get("/ar-problems", response_model=List[ARProblemResponse])
async def get_ar_problems(
    subject: Optional[str] = Query(None),
    grade: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    rows = await content_service.list_ar_problems(db, subject=subject, grade=grade)
    return [ARProblemResponse.model_validate(row) for row in rows]


@router.post("/ar-problems", response_model=ARProblemResponse, status_code=status.HTTP_201_CREATED)
async def add_ar_problem(body: ARProblemCreate, db: AsyncSession = Depends(get_db)):
    row = await content_service.create_ar_problem(db, body.model_dump())
    return ARProblemResponse.model_validate(row)


@router.get("/stories", response_model=List[StoryResponse])
async def get_stories(
    language: Optional[str] = Query(None),
    grade_level: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    rows = await content_service.list_stories(db, language=language, grade_level=grade_level)
    return [StoryResponse.model_validate(row) for row in rows]


@router.post("/stories", response_model=StoryResponse, status_code=status.HTTP_201_CREATED)
async def add_story(body: StoryCreate, db: AsyncSession = Depends(get_db)):
    row = await content_service.create_story(db, body.model_dump())
    return StoryResponse.model_validate(row)


@router.get("/voice-quizzes", response_model=List[VoiceQuizResponse])
async def get_voice_quizzes(
    language: Optional[str] = Query(None),
    difficulty: Optional[str] = Query(None),
    subject: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    rows = await content_service.list_voice_quizzes(
        db, language=language, difficulty=difficulty, subject=subject
    )
    return [VoiceQuizResponse.model_validate(row) for row in rows]


@router.post("/voice-quizzes", response_model=VoiceQuizResponse, status_code=status.HTTP_201_CREATED)
async def add_voice_quiz(body: VoiceQuizCreate, db: AsyncSession = Depends(get_db)):
    row = await content_service.create_voice_quiz(db, body.model_dump())
    return VoiceQuizResponse.model_validate(row)
