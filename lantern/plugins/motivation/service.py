"""
Service layer: today's motivation content, cached per calendar day.
"""
import logging

from pydantic import ValidationError

from lantern.core.cache_helper import CacheHelper
from lantern.core.errors import FetchFailure
from lantern.plugins.motivation.models import MotivationContent
from lantern.plugins.motivation.motivation_base import MotivationBackend

logger = logging.getLogger(__name__)

CACHE_KEY = "daily"


class MotivationService:
    def __init__(self, backend: MotivationBackend, cache: CacheHelper):
        self.backend = backend
        self.cache = cache

    def get_today(self) -> MotivationContent:
        """Cached content for today, else fetch both parts. Only a complete fetch is cached."""
        cached = self.cache.get_cached_content(CACHE_KEY)
        if cached is not None:
            try:
                return MotivationContent.model_validate(cached)
            except ValidationError as e:
                logger.warning(f"Ignoring malformed cached motivation: {e}")

        content = MotivationContent()
        complete = True
        try:
            content.quote = self.backend.fetch_quote()
        except FetchFailure as e:
            logger.warning(f"Motivation quote unavailable, using default: {e}")
            complete = False
        try:
            content.excerpt_original, content.excerpt_translation = self.backend.fetch_excerpt()
        except FetchFailure as e:
            logger.warning(f"Motivation excerpt unavailable: {e}")
            complete = False

        if complete:
            self.cache.save_to_cache(CACHE_KEY, content.model_dump())
        return content
