from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional, Tuple
import logging
import sys
from pathlib import Path

from .cache_helper import CacheHelper
from .config import Config
from .errors import InvalidInput, PersistenceFailure
from .record_manager import RecordManager
from .records import PRAYER_NAMES, PRAYER_TIMINGS, Profile, Reminders, Settings
from .state import AppState, load_state, save_state
from .store import MOTIVATION_CACHE_KEY, PRAYER_CACHE_KEY, PersistentStore, SqlStore
from .task_manager import TaskManager
from .time_gate import TimeGate
from lantern.plugins.motivation.models import MotivationContent
from lantern.plugins.motivation.motivation_base import MotivationBackend
from lantern.plugins.motivation.service import MotivationService
from lantern.plugins.prayer.models import PrayerSchedule
from lantern.plugins.prayer.prayer_base import AladhanBackend, PrayerBackend
from lantern.plugins.prayer.service import PrayerScheduleService

RESET_CONFIRMATION = "RESET"
TIME_CHECK_TASK = "time-checks"
TIME_CHECK_INTERVAL = 60  # seconds


class TrackerApp:
    """Coordinates state, services and the time gate for one user."""

    def __init__(
        self,
        config: Config,
        store: Optional[PersistentStore] = None,
        task_manager: Optional[TaskManager] = None,
        prayer_backend: Optional[PrayerBackend] = None,
        motivation_backend: Optional[MotivationBackend] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.config = config
        self.config.register_change_callback(self.handle_config_change)
        self.clock = clock

        self.store = store or SqlStore()
        self.task_manager = task_manager or TaskManager()
        self.gate = TimeGate(self.task_manager, clock=clock)
        self.state: AppState = load_state(self.store, clock)

        fetch_timeout = config.get_section("fetch").get("timeout", 10)
        location = config.get_section("location")
        self.prayer_service = PrayerScheduleService(
            prayer_backend or AladhanBackend(
                {"method": location.get("method", 11), "timeout": fetch_timeout}, clock=clock
            ),
            CacheHelper(self.store, PRAYER_CACHE_KEY, clock),
        )
        self.motivation_service = MotivationService(
            motivation_backend or MotivationBackend(
                {**config.get_section("motivation"), "timeout": fetch_timeout}
            ),
            CacheHelper(self.store, MOTIVATION_CACHE_KEY, clock),
        )
        self.records = RecordManager(self.state, self.store, self.gate, self.today_timings, clock)

        self.today_schedule: Optional[PrayerSchedule] = None
        self.motivation: Optional[MotivationContent] = None
        self.persistence_warning: Optional[str] = None
        self._lock_states: Dict[str, bool] = {}

    # --- lifecycle ---

    def setup_logging(self) -> None:
        """Configure logging to write to both file and stdout"""
        log_config = self.config.get_section("logging")
        root_logger = logging.getLogger()
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
        root_logger.setLevel(getattr(logging, str(log_config.get("level", "INFO")).upper(), logging.INFO))

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
        )

        log_file = log_config.get("file")
        if log_file:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        logging.info("Ramadhan Lantern starting...")

    def start(self) -> None:
        """Load today's data and start the minute tick."""
        self.refresh_prayer_schedule()
        self.refresh_motivation()
        self.update_time_checks()
        self.task_manager.schedule_task(
            TIME_CHECK_TASK, self.update_time_checks, TIME_CHECK_INTERVAL, one_time=False
        )

    def shutdown(self) -> None:
        self.task_manager.stop()
        self.config.cleanup()

    def run(self) -> None:
        from lantern.api import run_api_server

        self.setup_logging()
        try:
            self.start()
            run_api_server(self)
        finally:
            self.shutdown()

    # --- external data ---

    def location(self) -> Tuple[str, str]:
        """City and country: user settings in manual mode, config otherwise."""
        settings = self.state.settings
        if settings.location_mode == "manual":
            return settings.manual_city, settings.country
        location = self.config.get_section("location")
        return location.get("city", settings.manual_city), location.get("country", settings.country)

    def refresh_prayer_schedule(self) -> Optional[PrayerSchedule]:
        city, country = self.location()
        self.today_schedule = self.prayer_service.get_today_schedule(city, country)
        if self.today_schedule:
            self.logger.info(
                f"Hijri date {self.today_schedule.hijri} (Ramadan: {self.today_schedule.hijri.is_ramadan})"
            )
        return self.today_schedule

    def refresh_motivation(self) -> MotivationContent:
        self.motivation = self.motivation_service.get_today()
        return self.motivation

    def today(self) -> str:
        return self.clock().date().isoformat()

    def today_timings(self) -> Optional[Mapping[str, str]]:
        """Timings for the current date only; a schedule from another day gates nothing."""
        schedule = self.today_schedule
        if schedule is None or schedule.date != self.today():
            return None
        return schedule.timings

    @property
    def is_ramadan(self) -> bool:
        return bool(self.today_schedule and self.today_schedule.hijri.is_ramadan)

    # --- time checks ---

    def prayer_locks(self) -> Dict[str, bool]:
        """Prayer name -> True while its toggle is still locked."""
        timings = self.today_timings()
        return {name: not self.gate.is_open(PRAYER_TIMINGS[name], timings) for name in PRAYER_NAMES}

    def update_time_checks(self) -> None:
        """Minute tick: refresh a missing or stale schedule, log lock transitions. Mutates no record."""
        if self.today_schedule is None or self.today_schedule.date != self.today():
            self.logger.info("No schedule for today; refreshing prayer schedule")
            self.refresh_prayer_schedule()
        locks = self.prayer_locks()
        for name, locked in locks.items():
            previous = self._lock_states.get(name)
            if previous is not None and previous != locked:
                self.logger.info(f"{name} is now {'locked' if locked else 'open'}")
        self._lock_states = locks

    def enable_manual_unlock(self, confirmed: bool) -> bool:
        return self.gate.activate_manual_unlock(confirmed)

    # --- settings, profile, reset ---

    def save(self) -> None:
        try:
            save_state(self.store, self.state)
            self.persistence_warning = None
        except PersistenceFailure as e:
            self.persistence_warning = "Data could not be saved; changes are kept for this session only."
            self.logger.warning(f"Saving state failed, continuing in memory: {e}")

    def toggle_theme(self) -> Settings:
        settings = self.state.settings
        settings.theme = "light" if settings.theme == "dark" else "dark"
        self.save()
        return settings

    def update_settings(self, **changes: Any) -> Settings:
        """Apply settings changes; a location change refreshes today's schedule."""
        if "theme" in changes and changes["theme"] not in ("light", "dark"):
            raise InvalidInput(f"Unknown theme {changes['theme']!r}")
        try:
            updated = Settings.model_validate({**self.state.settings.model_dump(), **changes})
        except ValueError as e:
            raise InvalidInput(f"Invalid settings: {e}")
        if updated.location_mode not in ("auto", "manual"):
            raise InvalidInput(f"Unknown location mode {updated.location_mode!r}")
        old_location = self.location()
        self.state.settings = updated
        self.save()
        if self.location() != old_location:
            self.refresh_prayer_schedule()
        return updated

    def reset(self, confirmation: str) -> None:
        """Wipe every stored collection. Only the exact confirmation literal is accepted."""
        if confirmation != RESET_CONFIRMATION:
            raise InvalidInput(f"Type {RESET_CONFIRMATION!r} to delete all data")
        try:
            self.store.clear()
        except PersistenceFailure as e:
            self.persistence_warning = "Stored data could not be wiped."
            self.logger.warning(f"Reset could not clear the store: {e}")
        self.gate.reset()
        self.state.profile = Profile()
        self.state.settings = Settings()
        self.state.reminders = Reminders()
        self.state.records.clear()
        self._lock_states = {}
        self.logger.info("All data reset")
        # Offline with a wiped cache: keep gating on the schedule already in memory.
        previous = self.today_schedule
        if self.refresh_prayer_schedule() is None:
            self.today_schedule = previous
        self.refresh_motivation()

    def handle_config_change(self, new_config: Dict[str, Any]) -> None:
        """Config reload: refresh the schedule when the configured location changed."""
        self.logger.info("Handling config change")
        schedule = self.today_schedule
        if schedule is None or (schedule.city, schedule.country) != self.location():
            self.refresh_prayer_schedule()
