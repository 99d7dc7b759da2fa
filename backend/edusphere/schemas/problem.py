"""Pydantic schemas for generated practice problems."""

import enum
from typing import List, Optional

from pydantic import BaseModel, Field


class Subject(str, enum.Enum):
    MATH = "math"
    PHYSICS = "physics"
    SCIENCE = "science"
    ENGLISH = "english"
    HISTORY = "history"
    GEOGRAPHY = "geography"
    CODING = "coding"


class Grade(str, enum.Enum):
    KINDERGARTEN = "kindergarten"
    PRIMARY = "grade1-6"
    MIDDLE = "grade7-9"
    HIGH = "grade10-12"
    MATRIC = "matric"


class Problem(BaseModel):
    id: str
    question: str
    answer: str
    options: Optional[List[str]] = None
    hint: Optional[str] = None


class ProblemResponse(BaseModel):
    success: bool = True
    subject: Subject
    grade: Grade
    problem: Problem


class AnswerCheckRequest(BaseModel):
    subject: Subject
    grade: Grade
    user_answer: str = Field(..., max_length=500)
    correct_answer: str = Field(..., max_length=500)


class AnswerCheckResponse(BaseModel):
    success: bool = True
    correct: bool
    recorded: bool = False
