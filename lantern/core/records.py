"""
Typed documents for the tracker state: daily records, profile, settings, reminders.
Stored shapes are validated and default-filled on load.
"""
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

PRAYER_NAMES = ("fajr", "dhuhr", "asr", "maghrib", "isha")

# Record prayer name -> key in the fetched timings
PRAYER_TIMINGS = {
    "fajr": "Fajr",
    "dhuhr": "Dhuhr",
    "asr": "Asr",
    "maghrib": "Maghrib",
    "isha": "Isha",
}

FASTING_NONE = "none"
FASTING_STATUSES = (
    FASTING_NONE,
    "fasting",
    "excused-sick",
    "excused-travel",
    "excused-menstruation",
    "excused-other",
)


class PrayerEntry(BaseModel):
    done: bool = False
    completed_at: Optional[datetime] = None


class FastingEntry(BaseModel):
    status: str = FASTING_NONE
    reason: str = ""

    @field_validator("status", mode="before")
    @classmethod
    def _known_status(cls, value: Any) -> str:
        if value not in FASTING_STATUSES:
            logger.warning(f"Unknown fasting status {value!r} in stored record; using {FASTING_NONE!r}")
            return FASTING_NONE
        return value


class SunnahEntry(BaseModel):
    night_prayer_done: bool = False
    quran_pages_read: int = Field(default=0, ge=0)


def _default_prayers() -> Dict[str, PrayerEntry]:
    return {name: PrayerEntry() for name in PRAYER_NAMES}


class DailyRecord(BaseModel):
    """Everything logged for one calendar day."""

    fasting: FastingEntry = Field(default_factory=FastingEntry)
    prayers: Dict[str, PrayerEntry] = Field(default_factory=_default_prayers)
    sunnah: SunnahEntry = Field(default_factory=SunnahEntry)
    updated_at: datetime = Field(default_factory=datetime.now)

    @field_validator("prayers", mode="before")
    @classmethod
    def _fixed_prayer_set(cls, value: Any) -> Dict[str, Any]:
        # Exactly the five prayers: extras dropped, missing ones filled
        value = value if isinstance(value, dict) else {}
        return {name: value.get(name) or {} for name in PRAYER_NAMES}

    @property
    def prayers_done(self) -> int:
        return sum(1 for entry in self.prayers.values() if entry.done)

    @property
    def is_fasting(self) -> bool:
        return self.fasting.status == "fasting"


def load_record(date_key: str, document: Any, now: datetime) -> DailyRecord:
    """Validate a stored record; an unusable document becomes a fresh default record."""
    try:
        return DailyRecord.model_validate(document)
    except ValidationError as e:
        logger.warning(f"Discarding malformed record for {date_key}: {e}")
        return DailyRecord(updated_at=now)


class Avatar(BaseModel):
    type: str = "preset"
    data_url: str = "https://i.top4top.io/p_3698bfuyh0.png"


class Goals(BaseModel):
    quran_pages_per_day: int = Field(default=5, ge=0)
    tarawih_rakaat_target: int = Field(default=8, ge=0)


class Profile(BaseModel):
    name: str = "User"
    username: str = "user123"
    bio: str = "Target Ramadhan: Konsisten!"
    avatar: Avatar = Field(default_factory=Avatar)
    goals: Goals = Field(default_factory=Goals)
    created_at: datetime = Field(default_factory=datetime.now)


class Settings(BaseModel):
    theme: str = "light"
    location_mode: str = "auto"
    manual_city: str = "Jakarta"
    country: str = "Indonesia"

    @field_validator("theme", mode="before")
    @classmethod
    def _known_theme(cls, value: Any) -> str:
        return value if value in ("light", "dark") else "light"


class Reminders(BaseModel):
    enable_sahur_reminder: bool = True


class AggregateStats(BaseModel):
    total_days: int = 0
    fasting_days: int = 0
    prayers_completed: int = 0
    quran_pages: int = 0


class HistoryEntry(BaseModel):
    date: str
    fasting: bool
    fasting_status: str
    prayers_done: int
    prayers_total: int = len(PRAYER_NAMES)
    quran_pages: int
    night_prayer_done: bool
