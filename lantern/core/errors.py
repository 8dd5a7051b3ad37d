"""
Error kinds raised by the tracker. None of them is fatal to the process.
"""


class LanternError(Exception):
    """Base for all tracker errors."""


class GateClosed(LanternError):
    """A time-gated action was attempted before its scheduled time without a manual unlock."""

    def __init__(self, event_name: str, scheduled_time: str):
        self.event_name = event_name
        self.scheduled_time = scheduled_time
        super().__init__(f"Not yet time for {event_name} (scheduled {scheduled_time})")


class InvalidInput(LanternError):
    """Caller supplied a value the record manager refuses; prior state is kept."""


class FetchFailure(LanternError):
    """External data could not be fetched; callers degrade to cache or defaults."""


class PersistenceFailure(LanternError):
    """The persistent store is unavailable; the app keeps running in memory."""
