from datetime import datetime
import logging
from typing import Any, Callable, Dict, Optional

from lantern.core.errors import PersistenceFailure
from lantern.core.store import PersistentStore

logger = logging.getLogger(__name__)


class CacheHelper:
    """Per-calendar-day cache kept as one collection document in the persistent store.

    Entries are stored as {"<YYYY-MM-DD>_<key>": {"date", "key", "content"}}, so the
    same key fetched on another day gets a new entry and older days stay around as
    fallback material.
    """

    def __init__(self, store: PersistentStore, collection_key: str,
                 clock: Callable[[], datetime] = datetime.now):
        self.store = store
        self.collection_key = collection_key
        self.clock = clock

    def _today(self) -> str:
        return self.clock().strftime('%Y-%m-%d')

    def _load(self) -> Dict[str, Any]:
        try:
            entries = self.store.get(self.collection_key)
        except PersistenceFailure as e:
            logger.error(f"Error reading cache {self.collection_key}: {e}")
            return {}
        return entries if isinstance(entries, dict) else {}

    def get_cached_content(self, key: str) -> Optional[Any]:
        """Get cached content if it exists and is from today"""
        entry = self._load().get(f"{self._today()}_{key}")
        if isinstance(entry, dict) and entry.get('date') == self._today():
            return entry.get('content')
        return None

    def get_latest_content(self, key: Optional[str] = None) -> Optional[Any]:
        """Most recent entry for key (any day); falls back to the most recent entry of any key"""
        entries = [e for e in self._load().values() if isinstance(e, dict) and 'date' in e]
        if not entries:
            return None
        matching = [e for e in entries if e.get('key') == key] if key is not None else []
        latest = max(matching or entries, key=lambda e: e['date'])
        return latest.get('content')

    def save_to_cache(self, key: str, content: Any) -> None:
        """Save content to cache with today's date"""
        entries = self._load()
        today = self._today()
        entries[f"{today}_{key}"] = {
            'date': today,
            'key': key,
            'content': content,
        }
        try:
            self.store.set(self.collection_key, entries)
        except PersistenceFailure as e:
            logger.error(f"Error saving to cache: {e}")
