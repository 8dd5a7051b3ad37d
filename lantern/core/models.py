"""
Core DB model: the key-value blob table behind the persistent store.
"""
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, JSON

from lantern.core.db import Base


def _utc_now() -> datetime:
    """UTC now as naive datetime for DateTime(timezone=False) columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class StoreEntry(Base):
    """One logical collection (profile, settings, records, ...) stored as a JSON document."""
    __tablename__ = "store_entries"

    key = Column(String(255), primary_key=True)
    value = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=False), default=_utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=False), default=_utc_now, onupdate=_utc_now, nullable=False)
