"""
Persistent store: synchronous get/set/clear of JSON documents keyed by string.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from lantern.core.db import session_scope
from lantern.core.errors import PersistenceFailure
from lantern.core.models import StoreEntry, _utc_now

logger = logging.getLogger(__name__)

PROFILE_KEY = "ramadhan_profile"
SETTINGS_KEY = "ramadhan_settings"
RECORDS_KEY = "ramadhan_records"
REMINDERS_KEY = "ramadhan_reminders"
PRAYER_CACHE_KEY = "ramadhan_prayer_cache"
MOTIVATION_CACHE_KEY = "ramadhan_motivation"


class PersistentStore(ABC):
    """Key-value blob store. No transactions, no schema beyond what callers impose."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        pass

    @abstractmethod
    def set(self, key: str, document: Any) -> None:
        pass

    @abstractmethod
    def clear(self) -> None:
        """Wipe every key."""
        pass


class SqlStore(PersistentStore):
    """Store backed by the store_entries table. Requires init_db() to have run."""

    def get(self, key: str) -> Optional[Any]:
        try:
            with session_scope() as session:
                row = session.execute(
                    select(StoreEntry).where(StoreEntry.key == key)
                ).scalars().first()
                return row.value if row else None
        except (SQLAlchemyError, RuntimeError) as e:
            raise PersistenceFailure(f"Failed to read {key}: {e}") from e

    def set(self, key: str, document: Any) -> None:
        try:
            with session_scope() as session:
                row = session.execute(
                    select(StoreEntry).where(StoreEntry.key == key)
                ).scalars().first()
                now = _utc_now()
                if row:
                    row.value = document
                    row.updated_at = now
                else:
                    session.add(StoreEntry(key=key, value=document, created_at=now, updated_at=now))
        except (SQLAlchemyError, RuntimeError) as e:
            raise PersistenceFailure(f"Failed to write {key}: {e}") from e

    def clear(self) -> None:
        try:
            with session_scope() as session:
                session.execute(delete(StoreEntry))
            logger.info("Store cleared")
        except (SQLAlchemyError, RuntimeError) as e:
            raise PersistenceFailure(f"Failed to clear store: {e}") from e
