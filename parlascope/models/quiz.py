"""Candidate-matching quiz models."""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import (
    Boolean, DateTime, Float, ForeignKey, Integer, JSON, String, Text, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from parlascope.database import Base


class QuestionType(str, Enum):
    DILEMMA = "dilemma"
    SLIDER = "slider"
    RANKING = "ranking"
    CITATION = "citation"


class SessionStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


class Question(Base):
    """Quiz question and its axis weights.

    ``axis_weights`` maps an axis name to the multiplier applied to the
    answer's impact on that axis.
    """

    __tablename__ = "quiz_questions"

    id: Mapped[int] = mapped_column(primary_key=True)
    order: Mapped[int] = mapped_column(Integer, unique=True)
    type: Mapped[str] = mapped_column(String(20))
    text: Mapped[str] = mapped_column(Text)
    context: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    option_a: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    option_b: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    label_left: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    label_right: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    options: Mapped[list] = mapped_column(JSON, default=list)
    citation: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    citation_author: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    citation_score: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    axis_weights: Mapped[dict] = mapped_column(JSON, default=dict)
    active: Mapped[bool] = mapped_column(Boolean, default=True)


class QuizSession(Base):
    """One citizen's run through the quiz, addressed by an opaque token."""

    __tablename__ = "quiz_sessions"

    id: Mapped[int] = mapped_column(primary_key=True)
    token: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    status: Mapped[str] = mapped_column(
        String(20), default=SessionStatus.IN_PROGRESS.value, index=True
    )

    # Optional self-declared demographics
    age_bracket: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    situation: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    profile: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    axis_scores: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    priorities: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)


class Answer(Base):
    """Answer to one question; re-answering replaces the stored value."""

    __tablename__ = "quiz_answers"

    __table_args__ = (
        UniqueConstraint("session_id", "question_id", name="uq_answer_session_question"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    session_id: Mapped[int] = mapped_column(Integer, ForeignKey("quiz_sessions.id"), index=True)
    question_id: Mapped[int] = mapped_column(Integer, ForeignKey("quiz_questions.id"))
    value: Mapped[dict] = mapped_column(JSON)
    response_time_ms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class MatchResult(Base):
    """Match between a completed session and one published candidate."""

    __tablename__ = "match_results"

    __table_args__ = (
        UniqueConstraint("session_id", "candidate_id", name="uq_result_session_candidate"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    session_id: Mapped[int] = mapped_column(Integer, ForeignKey("quiz_sessions.id"), index=True)
    candidate_id: Mapped[int] = mapped_column(Integer, ForeignKey("candidates.id"))
    match_score: Mapped[float] = mapped_column(Float)
    axis_similarity: Mapped[dict] = mapped_column(JSON)
    strengths: Mapped[list] = mapped_column(JSON, default=list)
    divergences: Mapped[list] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    candidate: Mapped["Candidate"] = relationship(lazy="selectin")


from parlascope.models.candidate import Candidate
