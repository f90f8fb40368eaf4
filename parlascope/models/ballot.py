"""Ballot (scrutin) and individual vote models."""

import json
from datetime import datetime, date
from enum import Enum
from typing import Optional

from sqlalchemy import (
    Boolean, Date, DateTime, ForeignKey, Integer, JSON, String, Text, UniqueConstraint, cast,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from parlascope.database import Base


class VoteChoice(str, Enum):
    """Position recorded for one legislator on one ballot."""

    FOR = "pour"
    AGAINST = "contre"
    ABSTAIN = "abstention"
    ABSENT = "absent"


class Ballot(Base):
    """Recorded vote event of a chamber.

    Aggregate counts and tags come from the source documents at ingestion
    time and are never recomputed from the ``votes`` rows.
    """

    __tablename__ = "ballots"

    __table_args__ = (
        UniqueConstraint("number", "chamber", name="uq_ballot_number_chamber"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    chamber: Mapped[str] = mapped_column(String(20), index=True)
    number: Mapped[int] = mapped_column(Integer)
    vote_date: Mapped[date] = mapped_column(Date, index=True)
    title: Mapped[str] = mapped_column(Text)
    outcome: Mapped[str] = mapped_column(String(20))
    vote_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    for_count: Mapped[int] = mapped_column(Integer, default=0)
    against_count: Mapped[int] = mapped_column(Integer, default=0)
    abstain_count: Mapped[int] = mapped_column(Integer, default=0)
    total_count: Mapped[int] = mapped_column(Integer, default=0)

    tags: Mapped[list] = mapped_column(JSON, default=list)
    importance: Mapped[int] = mapped_column(Integer, default=1)

    cached_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    @classmethod
    def has_tag(cls, tag: str):
        """SQL condition: the ballot is tagged with ``tag``."""
        # JSON arrays are stored as serialized text
        return cast(cls.tags, String).contains(json.dumps(tag), autoescape=True)


class Vote(Base):
    """How a specific legislator voted on a ballot."""

    __tablename__ = "votes"

    __table_args__ = (
        UniqueConstraint("legislator_id", "ballot_id", name="uq_vote_legislator_ballot"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    legislator_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("legislators.id"), index=True
    )
    ballot_id: Mapped[int] = mapped_column(Integer, ForeignKey("ballots.id"), index=True)
    position: Mapped[str] = mapped_column(String(20), index=True)
    delegated: Mapped[bool] = mapped_column(Boolean, default=False)

    # Relationships
    ballot: Mapped["Ballot"] = relationship(lazy="selectin")
