"""
Per-plugin API for the prayer schedule. Mounted at /api/components/prayer/.
"""
from typing import Dict, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from .models import HijriDate

COMPONENT_NAME = "Prayer Times"


class PrayerScheduleResponse(BaseModel):
    """Today's schedule plus the derived Ramadan flag."""

    date: str
    city: str
    timings: Dict[str, str]
    hijri: HijriDate
    hijri_label: str
    is_ramadan: bool
    notice: Optional[str] = None


def get_router(tracker_app) -> Optional[APIRouter]:
    """Return router for this plugin; mounted with prefix /api/components/prayer."""
    router = APIRouter(tags=[COMPONENT_NAME])

    @router.get("/data", response_model=PrayerScheduleResponse)
    def get_data() -> PrayerScheduleResponse:
        """Return today's prayer schedule (imsakiyah table)."""
        schedule = tracker_app.today_schedule
        if schedule is None:
            raise HTTPException(status_code=404, detail="No prayer times data available")
        return PrayerScheduleResponse(
            date=schedule.date,
            city=schedule.city,
            timings=schedule.timings,
            hijri=schedule.hijri,
            hijri_label=schedule.hijri.describe(),
            is_ramadan=schedule.hijri.is_ramadan,
            notice=tracker_app.prayer_service.notice,
        )

    return router
