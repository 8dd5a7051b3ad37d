from datetime import datetime

import pytest

from lantern.core.config import Config
from lantern.core.db import dispose_db, init_db
from lantern.core.errors import FetchFailure
from lantern.core.store import SqlStore
from lantern.plugins.prayer.models import HijriDate, PrayerSchedule

TIMINGS = {
    "Imsak": "04:40",
    "Fajr": "04:50",
    "Sunrise": "06:05",
    "Dhuhr": "12:00",
    "Asr": "15:15",
    "Maghrib": "18:00",
    "Isha": "19:10",
}


class FixedClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class FakeScheduler:
    """Records scheduled callbacks instead of starting timers."""

    def __init__(self) -> None:
        self.tasks = {}
        self.cancelled = []

    def schedule_task(self, name, callback, delay, one_time=True):
        if name in self.tasks:
            self.cancelled.append(name)
        self.tasks[name] = (callback, delay)

    def cancel_task(self, name):
        if self.tasks.pop(name, None) is None:
            return False
        self.cancelled.append(name)
        return True

    def fire(self, name):
        callback, _ = self.tasks.pop(name)
        callback()

    def stop(self):
        self.tasks.clear()


class FakePrayerBackend:
    def __init__(self, clock, timings=None, month_number=9, fail=False) -> None:
        self.clock = clock
        self.timings = dict(timings or TIMINGS)
        self.month_number = month_number
        self.fail = fail
        self.calls = []

    def fetch(self, city, country):
        self.calls.append((city, country))
        if self.fail:
            raise FetchFailure("offline")
        return PrayerSchedule(
            date=self.clock().strftime("%Y-%m-%d"),
            city=city,
            country=country,
            timings=self.timings,
            hijri=HijriDate(day=5, month_name="Ramadan", month_number=self.month_number, year=1447),
        )


class FakeMotivationBackend:
    quote_url = "https://quotes.test/kata"
    excerpt_url = "https://quotes.test/motivasi"

    def __init__(self, fail=False) -> None:
        self.fail = fail
        self.quote_calls = 0

    def fetch_raw(self, url):
        if self.fail:
            raise FetchFailure("offline")
        return {"result": {"message": f"from {url}"}}

    def fetch_quote(self):
        self.quote_calls += 1
        if self.fail:
            raise FetchFailure("offline")
        return "Sabar itu indah"

    def fetch_excerpt(self):
        if self.fail:
            raise FetchFailure("offline")
        return "إِنَّ مَعَ الْعُسْرِ يُسْرًا", "Sesungguhnya bersama kesulitan ada kemudahan"


@pytest.fixture
def clock():
    return FixedClock(datetime(2026, 3, 1, 4, 49, 30))


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def store(tmp_path):
    init_db(db_url=f"sqlite:///{tmp_path / 'lantern.db'}")
    yield SqlStore()
    dispose_db()


@pytest.fixture
def config(tmp_path):
    return Config(config_path=str(tmp_path / "config.yaml"))
