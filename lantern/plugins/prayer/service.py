"""
Service layer: today's prayer schedule, cache-first, with fallback to the latest cached day.
"""
import logging
from typing import Optional

from pydantic import ValidationError

from lantern.core.cache_helper import CacheHelper
from lantern.core.errors import FetchFailure
from lantern.plugins.prayer.models import PrayerSchedule
from lantern.plugins.prayer.prayer_base import PrayerBackend

logger = logging.getLogger(__name__)

OFFLINE_NOTICE = "Offline mode: the prayer schedule may be out of date."


class PrayerScheduleService:
    def __init__(self, backend: PrayerBackend, cache: CacheHelper):
        self.backend = backend
        self.cache = cache
        self.notice: Optional[str] = None

    def get_today_schedule(self, city: str, country: str) -> Optional[PrayerSchedule]:
        """Cached schedule for today and location, else fetch and cache, else the latest cached one."""
        location = f"{city}, {country}"
        self.notice = None
        cached = self._validate(self.cache.get_cached_content(location))
        if cached:
            logger.info(f"Prayer schedule for {location} served from cache")
            return cached

        try:
            schedule = self.backend.fetch(city, country)
        except FetchFailure as e:
            logger.error(f"Prayer fetch failed: {e}")
            self.notice = OFFLINE_NOTICE
            fallback = self._validate(self.cache.get_latest_content(location))
            if fallback:
                logger.warning(f"Using cached prayer schedule from {fallback.date} ({fallback.city})")
            return fallback

        self.cache.save_to_cache(location, schedule.model_dump(mode="json"))
        return schedule

    @staticmethod
    def _validate(content) -> Optional[PrayerSchedule]:
        if content is None:
            return None
        try:
            return PrayerSchedule.model_validate(content)
        except ValidationError as e:
            logger.warning(f"Ignoring malformed cached prayer schedule: {e}")
            return None
