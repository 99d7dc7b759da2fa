"""
Practice problem API routes.

Routes:
    GET    /api/v1/problems        — Generate a problem for a subject and grade
    POST   /api/v1/problems/check  — Check an answer, recording it for known callers
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from edusphere.database import get_db
from edusphere.middleware.identity import get_optional_user
from edusphere.models.user import User
from edusphere.schemas.problem import (
    Subject,
    Grade,
    ProblemResponse,
    AnswerCheckRequest,
    AnswerCheckResponse,
)
from edusphere.services.problem_generator import generate_problem, check_answer
from edusphere.services.progress_service import record_attempt

router = APIRouter(prefix="/api/v1/problems", tags=["Problems"])


@router.get("", response_model=ProblemResponse)
async def new_problem(
    subject: Subject = Query(...),
    grade: Grade = Query(...),
):
    return ProblemResponse(subject=subject, grade=grade, problem=generate_problem(subject, grade))


@router.post("/check", response_model=AnswerCheckResponse)
async def check_problem_answer(
    body: AnswerCheckRequest,
    db: AsyncSession = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    """Anonymous callers get the verdict only; known users also get a progress update."""
    correct = check_answer(body.subject, body.user_answer, body.correct_answer)
    if current_user is None:
        return AnswerCheckResponse(correct=correct)

    await record_attempt(db, current_user.clerk_id, body.subject.value, body.grade.value, correct)
    return AnswerCheckResponse(correct=correct, recorded=True)
