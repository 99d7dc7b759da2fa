"""Authored learning content: tutor scripts, coding and AR problems, stories, voice quizzes."""

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, JSON

from edusphere.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TutorScript(Base):
    __tablename__ = "tutor_scripts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tone = Column(String(50), nullable=False, index=True)
    script = Column(Text, nullable=False)
    grade = Column(String(50), nullable=False, index=True)
    subject = Column(String(50), nullable=False, index=True)
    topic = Column(String(200), nullable=False)
    duration_minutes = Column(Integer, nullable=True)
    voice_settings = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)


class CodingProblem(Base):
    __tablename__ = "coding_problems"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    difficulty = Column(String(20), nullable=False, index=True)
    language = Column(String(30), nullable=False, index=True)
    starter_code = Column(Text, nullable=True)
    solution = Column(Text, nullable=True)
    test_cases = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)


class ARProblem(Base):
    __tablename__ = "ar_problems"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    subject = Column(String(50), nullable=False, index=True)
    grade = Column(String(50), nullable=False, index=True)
    difficulty = Column(Integer, nullable=False, default=1)
    ar_data = Column(JSON, nullable=True)
    answer = Column(Text, nullable=True)
    hints = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)


class Story(Base):
    __tablename__ = "stories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    language = Column(String(10), nullable=False, default="en", index=True)
    grade_level = Column(String(50), nullable=True, index=True)
    subject = Column(String(50), nullable=True)
    audio_url = Column(String(500), nullable=True)
    images = Column(JSON, nullable=True)
    is_premium = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)


class VoiceQuiz(Base):
    __tablename__ = "voice_quizzes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    question = Column(Text, nullable=False)
    answer = Column(Text, nullable=False)
    alternative_answers = Column(JSON, nullable=True)
    hint = Column(Text, nullable=True)
    language = Column(String(10), nullable=False, default="en", index=True)
    difficulty = Column(String(20), nullable=False, default="medium", index=True)
    grade_level = Column(String(50), nullable=True)
    subject = Column(String(50), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
