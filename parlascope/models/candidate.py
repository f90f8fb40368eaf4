"""2027 presidential candidate models."""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from parlascope.database import Base


class IngestionStatus(str, Enum):
    """Publication workflow of a candidate profile."""

    PENDING = "pending"
    PROCESSING = "processing"
    READY = "ready"
    PUBLISHED = "published"


class ScoreType(str, Enum):
    """Whether axis scores rest on enough analyzed votes."""

    ESTIMATED = "estimated"
    VERIFIED = "verified"


class PositionSource(str, Enum):
    PROGRAMME = "programme"
    DECLARATION = "declaration"
    VOTE = "vote"


class Candidate(Base):
    """Candidate profile matched against quiz answers.

    The eight ``score_*`` columns hold the candidate's axis vector, each in
    [-100, 100]. A candidate may be linked to at most one legislator, whose
    votes then drive the scores.
    """

    __tablename__ = "candidates"

    id: Mapped[int] = mapped_column(primary_key=True)
    slug: Mapped[str] = mapped_column(String(120), unique=True, index=True)
    first_name: Mapped[str] = mapped_column(String(100))
    last_name: Mapped[str] = mapped_column(String(100))
    party: Mapped[str] = mapped_column(String(100), index=True)
    photo_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    programme_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    legislator_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("legislators.id"), unique=True, nullable=True
    )

    score_economie: Mapped[float] = mapped_column(Float, default=0)
    score_social: Mapped[float] = mapped_column(Float, default=0)
    score_ecologie: Mapped[float] = mapped_column(Float, default=0)
    score_securite: Mapped[float] = mapped_column(Float, default=0)
    score_europe: Mapped[float] = mapped_column(Float, default=0)
    score_immigration: Mapped[float] = mapped_column(Float, default=0)
    score_institutions: Mapped[float] = mapped_column(Float, default=0)
    score_international: Mapped[float] = mapped_column(Float, default=0)

    score_type: Mapped[str] = mapped_column(String(20), default=ScoreType.ESTIMATED.value)
    coherence_score: Mapped[float] = mapped_column(Float, default=0)
    ingestion_status: Mapped[str] = mapped_column(
        String(20), default=IngestionStatus.PENDING.value, index=True
    )
    active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    legislator: Mapped[Optional["Legislator"]] = relationship(lazy="selectin")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Position(Base):
    """Stance declared by a candidate on a subject, tied to one axis."""

    __tablename__ = "candidate_positions"

    id: Mapped[int] = mapped_column(primary_key=True)
    candidate_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("candidates.id"), index=True
    )
    axis: Mapped[str] = mapped_column(String(20), index=True)
    subject: Mapped[str] = mapped_column(String(200))
    stance: Mapped[str] = mapped_column(Text)
    score: Mapped[float] = mapped_column(Float)
    source_type: Mapped[str] = mapped_column(String(20))
    source_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    coherent: Mapped[bool] = mapped_column(Boolean, default=True)
    explanation: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    candidate: Mapped["Candidate"] = relationship(lazy="selectin")


class IngestionLog(Base):
    """Audit trail of a scoring run for one candidate."""

    __tablename__ = "ingestion_logs"

    id: Mapped[int] = mapped_column(primary_key=True)
    candidate_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("candidates.id"), index=True
    )
    type: Mapped[str] = mapped_column(String(30), index=True)
    status: Mapped[str] = mapped_column(String(20))
    details: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    started_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)


from parlascope.models.legislator import Legislator
