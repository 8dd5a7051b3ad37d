"""
Time gate for prayer logging: an action is allowed once its scheduled clock time
has passed today, or while a manual unlock is active.
"""
import logging
import re
from datetime import datetime, time, timedelta
from typing import Callable, Mapping, Optional

logger = logging.getLogger(__name__)

MANUAL_UNLOCK_SECONDS = 600
UNLOCK_TASK_NAME = "manual-unlock-expiry"

# Aladhan may append a zone label, e.g. "04:50 (WIB)"
_CLOCK_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})")


def parse_clock_time(value: Optional[str]) -> Optional[time]:
    """Parse a leading "HH:MM"; None when missing or unparseable."""
    if not isinstance(value, str):
        return None
    match = _CLOCK_RE.match(value)
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return time(hour, minute)


def is_permitted(scheduled_time: Optional[str], now: datetime, manual_unlock_active: bool) -> bool:
    """Decide whether a time-gated action is permitted at `now`.

    Unknown or unparseable schedule times fail open.
    """
    if manual_unlock_active:
        return True
    parsed = parse_clock_time(scheduled_time)
    if parsed is None:
        return True
    scheduled = now.replace(hour=parsed.hour, minute=parsed.minute, second=0, microsecond=0)
    return now >= scheduled


class TimeGate:
    """Holds the process-wide manual unlock flag and answers gate checks against it.

    scheduler must provide schedule_task(name, callback, delay) and cancel_task(name);
    TaskManager does.
    """

    def __init__(self, scheduler, clock: Callable[[], datetime] = datetime.now,
                 unlock_seconds: int = MANUAL_UNLOCK_SECONDS):
        self.scheduler = scheduler
        self.clock = clock
        self.unlock_seconds = unlock_seconds
        self.manual_unlock = False
        self.unlock_expires_at: Optional[datetime] = None

    def is_open(self, event_name: str, timings: Optional[Mapping[str, str]]) -> bool:
        scheduled = timings.get(event_name) if timings else None
        return is_permitted(scheduled, self.clock(), self.manual_unlock)

    def activate_manual_unlock(self, confirmed: bool) -> bool:
        """Open the gate for every event for the unlock window. Needs explicit confirmation."""
        if not confirmed:
            logger.info("Manual unlock requested without confirmation; ignored")
            return False
        self.manual_unlock = True
        self.unlock_expires_at = self.clock() + timedelta(seconds=self.unlock_seconds)
        # Re-arming replaces any pending expiry
        self.scheduler.schedule_task(UNLOCK_TASK_NAME, self.deactivate_manual_unlock, self.unlock_seconds)
        logger.info(f"Manual unlock active until {self.unlock_expires_at:%H:%M:%S}")
        return True

    def deactivate_manual_unlock(self) -> None:
        if self.manual_unlock:
            logger.info("Manual unlock expired")
        self.manual_unlock = False
        self.unlock_expires_at = None

    def reset(self) -> None:
        """Drop the unlock and its pending expiry."""
        self.scheduler.cancel_task(UNLOCK_TASK_NAME)
        self.manual_unlock = False
        self.unlock_expires_at = None
