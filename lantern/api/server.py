"""
FastAPI server for the tracker API. run_api_server(app) blocks serving with uvicorn.
Central endpoints live here; per-plugin routes are mounted from
lantern.plugins.<package>.api (get_router(tracker_app)) under /api/components/<package>/.
Docs: http://<host>:<port>/docs
"""
import importlib
import logging
import pkgutil
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from lantern.core.errors import GateClosed, InvalidInput, FetchFailure
from lantern.core.records import AggregateStats, DailyRecord, HistoryEntry, Profile, Settings

logger = logging.getLogger(__name__)


class RecordResponse(BaseModel):
    date: str
    record: DailyRecord
    warning: Optional[str] = None


class TodayResponse(BaseModel):
    """Dashboard view for the current date."""

    date: str
    record: DailyRecord
    timings: Dict[str, str] = Field(default_factory=dict)
    locks: Dict[str, bool]
    hijri_date: Optional[str] = None
    ramadan_status: Optional[str] = None
    is_ramadan: bool = False
    manual_unlock: bool = False
    unlock_expires_at: Optional[datetime] = None
    notices: List[str] = Field(default_factory=list)


class FastingRequest(BaseModel):
    status: str
    reason: str = ""


class QuranRequest(BaseModel):
    pages: int


class UnlockRequest(BaseModel):
    confirm: bool = False


class UnlockResponse(BaseModel):
    manual_unlock: bool
    unlock_expires_at: Optional[datetime] = None


class SettingsRequest(BaseModel):
    theme: Optional[str] = None
    location_mode: Optional[str] = None
    manual_city: Optional[str] = None
    country: Optional[str] = None


class ResetRequest(BaseModel):
    confirmation: str = ""


class ProfileResponse(BaseModel):
    profile: Profile
    stats: AggregateStats


def create_app(tracker_app: Any) -> FastAPI:
    """Create FastAPI app with routes that use the given TrackerApp instance."""
    app = FastAPI(title="Ramadhan Lantern API", description="Daily prayer, fasting and Quran log")
    records = tracker_app.records

    @app.exception_handler(GateClosed)
    def gate_closed_handler(request: Request, exc: GateClosed) -> JSONResponse:
        return JSONResponse(
            status_code=409,
            content={"error": "not_yet_time", "detail": str(exc), "prayer": exc.event_name},
        )

    @app.exception_handler(InvalidInput)
    def invalid_input_handler(request: Request, exc: InvalidInput) -> JSONResponse:
        return JSONResponse(status_code=422, content={"error": "invalid_input", "detail": str(exc)})

    def _record_response(day: str, record: DailyRecord) -> RecordResponse:
        return RecordResponse(date=day, record=record, warning=records.persistence_warning)

    @app.get("/api/today", response_model=TodayResponse)
    def today() -> TodayResponse:
        day = tracker_app.today()
        schedule = tracker_app.today_schedule
        notices = [n for n in (
            tracker_app.prayer_service.notice,
            records.persistence_warning,
            tracker_app.persistence_warning,
        ) if n]
        return TodayResponse(
            date=day,
            record=records.get_record(day),
            timings=dict(schedule.timings) if schedule else {},
            locks=tracker_app.prayer_locks(),
            hijri_date=str(schedule.hijri) if schedule else None,
            ramadan_status=schedule.hijri.describe() if schedule else None,
            is_ramadan=tracker_app.is_ramadan,
            manual_unlock=tracker_app.gate.manual_unlock,
            unlock_expires_at=tracker_app.gate.unlock_expires_at,
            notices=notices,
        )

    @app.get("/api/records/{day}", response_model=RecordResponse)
    def get_record(day: str) -> RecordResponse:
        return _record_response(day, records.get_record(day))

    @app.post("/api/records/{day}/prayers/{prayer}/toggle", response_model=RecordResponse)
    def toggle_prayer(day: str, prayer: str) -> RecordResponse:
        return _record_response(day, records.toggle_prayer_completion(day, prayer))

    @app.put("/api/records/{day}/fasting", response_model=RecordResponse)
    def set_fasting(day: str, body: FastingRequest) -> RecordResponse:
        return _record_response(day, records.set_fasting_status(day, body.status, body.reason))

    @app.put("/api/records/{day}/quran", response_model=RecordResponse)
    def set_quran(day: str, body: QuranRequest) -> RecordResponse:
        return _record_response(day, records.record_quran_pages(day, body.pages))

    @app.post("/api/records/{day}/night-prayer/toggle", response_model=RecordResponse)
    def toggle_night_prayer(day: str) -> RecordResponse:
        return _record_response(day, records.toggle_night_prayer(day))

    @app.get("/api/history", response_model=List[HistoryEntry])
    def history() -> List[HistoryEntry]:
        return records.history()

    @app.get("/api/stats", response_model=AggregateStats)
    def stats() -> AggregateStats:
        return records.stats()

    @app.get("/api/profile", response_model=ProfileResponse)
    def profile() -> ProfileResponse:
        return ProfileResponse(profile=tracker_app.state.profile, stats=records.stats())

    @app.post("/api/unlock", response_model=UnlockResponse)
    def unlock(body: UnlockRequest) -> UnlockResponse:
        tracker_app.enable_manual_unlock(body.confirm)
        return UnlockResponse(
            manual_unlock=tracker_app.gate.manual_unlock,
            unlock_expires_at=tracker_app.gate.unlock_expires_at,
        )

    @app.post("/api/settings/theme/toggle", response_model=Settings)
    def toggle_theme() -> Settings:
        return tracker_app.toggle_theme()

    @app.put("/api/settings", response_model=Settings)
    def update_settings(body: SettingsRequest) -> Settings:
        return tracker_app.update_settings(**body.model_dump(exclude_none=True))

    @app.post("/api/reset")
    def reset(body: ResetRequest) -> Dict[str, str]:
        tracker_app.reset(body.confirmation)
        return {"status": "reset"}

    # Pass-through proxies for the motivation sources
    def _relay(url: str) -> JSONResponse:
        headers = {"Access-Control-Allow-Origin": "*"}
        try:
            data = tracker_app.motivation_service.backend.fetch_raw(url)
        except FetchFailure as e:
            logger.warning(f"Proxy fetch failed: {e}")
            return JSONResponse(status_code=500, content={"error": "Failed to fetch data"}, headers=headers)
        return JSONResponse(status_code=200, content=data, headers=headers)

    @app.get("/api/kataislami")
    def kataislami() -> JSONResponse:
        return _relay(tracker_app.motivation_service.backend.quote_url)

    @app.get("/api/motivasi-islam")
    def motivasi_islam() -> JSONResponse:
        return _relay(tracker_app.motivation_service.backend.excerpt_url)

    # Mount per-plugin API routers from lantern.plugins.<name>.api (get_router(tracker_app))
    plugins_pkg = importlib.import_module("lantern.plugins")
    for _mod, name, is_pkg in pkgutil.iter_modules(plugins_pkg.__path__):
        if not is_pkg:
            continue
        try:
            api_module = importlib.import_module(f"lantern.plugins.{name}.api")
        except ImportError:
            continue
        if not callable(getattr(api_module, "get_router", None)):
            continue
        router = api_module.get_router(tracker_app)
        if router is not None:
            app.include_router(router, prefix=f"/api/components/{name}")
            logger.debug(f"Mounted API router for plugin {name}")

    return app


def run_api_server(tracker_app: Any) -> None:
    """
    Serve the API with uvicorn until interrupted.
    Reads api.host (default 127.0.0.1) and api.port (default 8765) from config.
    """
    import uvicorn

    api_config = tracker_app.config.get_section("api")
    host = api_config.get("host", "127.0.0.1")
    port = int(api_config.get("port", 8765))
    fastapi_app = create_app(tracker_app)
    logger.info(f"API server listening at http://{host}:{port} (docs at /docs)")
    uvicorn.run(fastapi_app, host=host, port=port, log_config=None)
