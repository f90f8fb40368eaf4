"""Legislator database model."""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from parlascope.database import Base


class Chamber(str, Enum):
    """Parliamentary chambers."""

    ASSEMBLY = "assemblee"
    SENATE = "senat"


class Legislator(Base):
    """Deputy or senator synced from government open data.

    Legislators are never deleted: members who leave office are kept with
    ``active=False`` so their vote history stays attached.
    """

    __tablename__ = "legislators"

    id: Mapped[int] = mapped_column(primary_key=True)
    slug: Mapped[str] = mapped_column(String(120), unique=True, index=True)
    source_uid: Mapped[Optional[str]] = mapped_column(String(30), unique=True, nullable=True)
    chamber: Mapped[str] = mapped_column(String(20), index=True)
    first_name: Mapped[str] = mapped_column(String(100))
    last_name: Mapped[str] = mapped_column(String(100))
    photo_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    group_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("political_groups.id"), nullable=True, index=True
    )
    constituency_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("constituencies.id"), nullable=True
    )

    active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)

    cached_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    group: Mapped[Optional["PoliticalGroup"]] = relationship(lazy="selectin")
    constituency: Mapped[Optional["Constituency"]] = relationship(lazy="selectin")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


# Import at bottom to avoid circular imports
from parlascope.models.group import Constituency, PoliticalGroup
