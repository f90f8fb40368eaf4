"""Look-aside cache storage."""

from datetime import datetime

from sqlalchemy import DateTime, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from parlascope.database import Base


class CacheEntry(Base):
    """Computed payload stored under a string key.

    Freshness is decided by the reader from ``cached_at`` and the TTL of
    the data type, see ``parlascope.services.cache_config``.
    """

    __tablename__ = "cache_entries"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    payload: Mapped[dict] = mapped_column(JSON)
    cached_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
