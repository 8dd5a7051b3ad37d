"""
Prayer schedule for one day as fetched from the timings API.
"""
from typing import Dict

from pydantic import BaseModel, Field

RAMADAN_MONTH = 9

TIMING_NAMES = ("Imsak", "Fajr", "Sunrise", "Dhuhr", "Asr", "Maghrib", "Isha")


class HijriDate(BaseModel):
    day: int
    month_name: str
    month_number: int
    year: int

    @property
    def is_ramadan(self) -> bool:
        return self.month_number == RAMADAN_MONTH

    def describe(self) -> str:
        if self.is_ramadan:
            return f"Ramadhan day {self.day}"
        return f"{self.day} {self.month_name}"

    def __str__(self) -> str:
        return f"{self.day} {self.month_name} {self.year}"


class PrayerSchedule(BaseModel):
    """timings: name -> "HH:MM" for Imsak, Fajr, Sunrise, Dhuhr, Asr, Maghrib, Isha."""

    date: str
    city: str
    country: str = ""
    timings: Dict[str, str] = Field(default_factory=dict)
    hijri: HijriDate
