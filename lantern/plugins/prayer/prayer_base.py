import requests
from datetime import datetime
from typing import Dict, Any, Callable
import logging
from abc import ABC, abstractmethod

from lantern.core.errors import FetchFailure
from lantern.plugins.prayer.models import HijriDate, PrayerSchedule, TIMING_NAMES

DEFAULT_TIMEOUT = 10


class PrayerBackend(ABC):
    """Base class for prayer schedule lookups"""

    def __init__(self, config: Dict[str, Any], clock: Callable[[], datetime] = datetime.now):
        self.config = config
        self.clock = clock
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def fetch(self, city: str, country: str) -> PrayerSchedule:
        """Fetch today's schedule for city/country
        Raises:
            FetchFailure: on any network, HTTP or payload error
        """
        pass


class AladhanBackend(PrayerBackend):
    """Prayer times backend using api.aladhan.com timingsByCity"""

    BASE_URL = "https://api.aladhan.com/v1/timingsByCity"

    def fetch(self, city: str, country: str) -> PrayerSchedule:
        params = {
            'city': city,
            'country': country,
            'method': self.config.get('method', 11),
        }
        timeout = self.config.get('timeout', DEFAULT_TIMEOUT)
        self.logger.info(f"Making API request to {self.BASE_URL} with params {params}")
        try:
            response = requests.get(self.BASE_URL, params=params, timeout=timeout)
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            raise FetchFailure(f"Prayer times request failed: {e}") from e
        return self.parse(payload, city, country)

    def parse(self, payload: Any, city: str, country: str = "") -> PrayerSchedule:
        """Turn an Aladhan response body into a PrayerSchedule"""
        if not isinstance(payload, dict) or payload.get('code') != 200:
            code = payload.get('code') if isinstance(payload, dict) else None
            raise FetchFailure(f"Prayer times API returned code {code}")
        try:
            data = payload['data']
            timings = data['timings']
            hijri = data['date']['hijri']
            schedule = PrayerSchedule(
                date=self.clock().strftime('%Y-%m-%d'),
                city=city,
                country=country,
                timings={name: timings[name] for name in TIMING_NAMES if name in timings},
                hijri=HijriDate(
                    day=int(hijri['day']),
                    month_name=hijri['month']['en'],
                    month_number=int(hijri['month']['number']),
                    year=int(hijri['year']),
                ),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise FetchFailure(f"Unexpected prayer times payload: {e}") from e
        self.logger.info(f"Final prayer times: {schedule.timings}")
        return schedule
