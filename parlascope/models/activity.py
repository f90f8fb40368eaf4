"""Parliamentary activity models counted in legislator statistics."""

from datetime import date
from typing import Optional

from sqlalchemy import Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from parlascope.database import Base


class Intervention(Base):
    """Speech or written/oral question in the chamber."""

    __tablename__ = "interventions"

    id: Mapped[int] = mapped_column(primary_key=True)
    legislator_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("legislators.id"), index=True
    )
    delivered_on: Mapped[date] = mapped_column(Date)
    type: Mapped[str] = mapped_column(String(30), index=True)
    summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class Amendment(Base):
    """Amendment filed by a legislator."""

    __tablename__ = "amendments"

    id: Mapped[int] = mapped_column(primary_key=True)
    uid: Mapped[str] = mapped_column(String(60), unique=True)
    legislator_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("legislators.id"), nullable=True, index=True
    )
    filed_at: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    status: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
