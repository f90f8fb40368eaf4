"""Registered interest representatives and their declared lobbying actions."""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from sqlalchemy import Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from parlascope.database import Base


class LobbyistType(str, Enum):
    COMPANY = "entreprise"
    ASSOCIATION = "association"
    CONSULTANCY = "cabinet"
    UNION = "syndicat"
    PROFESSIONAL_BODY = "organisation_pro"


class LobbyTarget(str, Enum):
    """Who a lobbying action was aimed at."""

    LEGISLATOR = "depute"
    MINISTER = "ministre"
    ADMINISTRATION = "administration"


class Lobbyist(Base):
    """Organisation listed in the public register of interest representatives."""

    __tablename__ = "lobbyists"

    id: Mapped[int] = mapped_column(primary_key=True)
    siren: Mapped[Optional[str]] = mapped_column(String(20), unique=True, nullable=True)
    name: Mapped[str] = mapped_column(String(300), index=True)
    type: Mapped[Optional[str]] = mapped_column(String(30), nullable=True, index=True)
    sector: Mapped[Optional[str]] = mapped_column(String(200), nullable=True, index=True)

    # Declared yearly lobbying spend in euros, and people doing it
    annual_budget: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    staff_count: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    website: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    cached_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class LobbyAction(Base):
    """One declared influence action, optionally aimed at a sitting legislator."""

    __tablename__ = "lobby_actions"

    id: Mapped[int] = mapped_column(primary_key=True)
    lobbyist_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("lobbyists.id"), index=True
    )
    legislator_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("legislators.id"), nullable=True, index=True
    )

    description: Mapped[str] = mapped_column(Text)
    target: Mapped[Optional[str]] = mapped_column(String(30), nullable=True, index=True)
    target_name: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)
    bill_reference: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    bill_title: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    started_on: Mapped[Optional[date]] = mapped_column(Date, nullable=True, index=True)
    ended_on: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Relationships
    lobbyist: Mapped["Lobbyist"] = relationship(lazy="selectin")
    legislator: Mapped[Optional["Legislator"]] = relationship(lazy="selectin")


# Import at bottom to avoid circular imports
from parlascope.models.legislator import Legislator
