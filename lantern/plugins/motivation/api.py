"""
Per-plugin API for daily motivation. Mounted at /api/components/motivation/.
"""
from typing import Optional

from fastapi import APIRouter

from .models import MotivationContent


def get_router(tracker_app) -> Optional[APIRouter]:
    """Return router for this plugin; mounted with prefix /api/components/motivation."""
    router = APIRouter(tags=["Motivation"])

    @router.get("/data", response_model=MotivationContent)
    def get_data() -> MotivationContent:
        """Return today's motivation, loading it on first request."""
        if tracker_app.motivation is None:
            tracker_app.refresh_motivation()
        return tracker_app.motivation

    return router
