"""Political group and constituency models."""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from parlascope.database import Base


class PoliticalGroup(Base):
    """Parliamentary group (party or caucus) of one chamber."""

    __tablename__ = "political_groups"

    # The same acronym can exist in both chambers
    __table_args__ = (
        UniqueConstraint("slug", "chamber", name="uq_group_slug_chamber"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    slug: Mapped[str] = mapped_column(String(50), index=True)
    chamber: Mapped[str] = mapped_column(String(20), index=True)
    name: Mapped[str] = mapped_column(String(100))
    full_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    color: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    position: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    order: Mapped[int] = mapped_column(Integer, default=0)
    active: Mapped[bool] = mapped_column(Boolean, default=True)

    cached_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class Constituency(Base):
    """Electoral district (circonscription) or department for senators."""

    __tablename__ = "constituencies"

    id: Mapped[int] = mapped_column(primary_key=True)
    department: Mapped[str] = mapped_column(String(5), index=True)
    number: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    name: Mapped[str] = mapped_column(String(200))
