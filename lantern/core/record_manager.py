"""
Daily record manager: owns date -> DailyRecord and mediates every mutation.
Prayer completion toggles go through the time gate; everything else is ungated.
"""
import logging
from datetime import date, datetime
from typing import Callable, List, Mapping, Optional, Union

from lantern.core.errors import GateClosed, InvalidInput, PersistenceFailure
from lantern.core.records import (
    FASTING_STATUSES,
    PRAYER_NAMES,
    PRAYER_TIMINGS,
    AggregateStats,
    DailyRecord,
    HistoryEntry,
)
from lantern.core.state import AppState, save_records
from lantern.core.store import PersistentStore
from lantern.core.time_gate import TimeGate

DateLike = Union[date, str]


def date_key(value: DateLike) -> str:
    """ISO YYYY-MM-DD key for a date or date string."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    try:
        return date.fromisoformat(str(value)).isoformat()
    except ValueError:
        raise InvalidInput(f"Not a YYYY-MM-DD date: {value!r}")


def compute_aggregate_stats(records: Mapping[str, DailyRecord]) -> AggregateStats:
    """Totals over the full record mapping."""
    return AggregateStats(
        total_days=len(records),
        fasting_days=sum(1 for r in records.values() if r.is_fasting),
        prayers_completed=sum(r.prayers_done for r in records.values()),
        quran_pages=sum(r.sunnah.quran_pages_read for r in records.values()),
    )


class RecordManager:
    def __init__(
        self,
        state: AppState,
        store: PersistentStore,
        gate: TimeGate,
        timings_provider: Callable[[], Optional[Mapping[str, str]]],
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.state = state
        self.store = store
        self.gate = gate
        self.timings_provider = timings_provider
        self.clock = clock
        self.persistence_warning: Optional[str] = None
        self.logger = logging.getLogger(self.__class__.__name__)

    def get_record(self, day: DateLike) -> DailyRecord:
        """Existing record for day, or a fresh default one stored in the mapping."""
        key = date_key(day)
        record = self.state.records.get(key)
        if record is None:
            record = DailyRecord(updated_at=self.clock())
            self.state.records[key] = record
            self.logger.debug(f"Created default record for {key}")
        return record

    def toggle_prayer_completion(self, day: DateLike, prayer_name: str) -> DailyRecord:
        if prayer_name not in PRAYER_NAMES:
            raise InvalidInput(f"Unknown prayer {prayer_name!r}; expected one of {', '.join(PRAYER_NAMES)}")
        timings = self.timings_provider()
        timing_name = PRAYER_TIMINGS.get(prayer_name, prayer_name)
        if not self.gate.is_open(timing_name, timings):
            raise GateClosed(prayer_name, timings.get(timing_name, "") if timings else "")

        record = self.get_record(day)
        now = self.clock()
        entry = record.prayers[prayer_name]
        entry.done = not entry.done
        entry.completed_at = now
        record.updated_at = now
        self.logger.info(f"{date_key(day)}: {prayer_name} done={entry.done}")
        self._persist()
        return record

    def set_fasting_status(self, day: DateLike, status: str, reason: str = "") -> DailyRecord:
        if status not in FASTING_STATUSES:
            raise InvalidInput(f"Unknown fasting status {status!r}")
        record = self.get_record(day)
        record.fasting.status = status
        record.fasting.reason = reason or ""
        record.updated_at = self.clock()
        self._persist()
        return record

    def record_quran_pages(self, day: DateLike, pages: int) -> DailyRecord:
        if isinstance(pages, bool) or not isinstance(pages, int) or pages < 0:
            raise InvalidInput(f"Quran pages must be a non-negative integer, got {pages!r}")
        record = self.get_record(day)
        record.sunnah.quran_pages_read = pages
        record.updated_at = self.clock()
        self._persist()
        return record

    def toggle_night_prayer(self, day: DateLike) -> DailyRecord:
        record = self.get_record(day)
        record.sunnah.night_prayer_done = not record.sunnah.night_prayer_done
        record.updated_at = self.clock()
        self._persist()
        return record

    def history(self) -> List[HistoryEntry]:
        """One summary line per logged day, newest first."""
        return [
            HistoryEntry(
                date=key,
                fasting=record.is_fasting,
                fasting_status=record.fasting.status,
                prayers_done=record.prayers_done,
                quran_pages=record.sunnah.quran_pages_read,
                night_prayer_done=record.sunnah.night_prayer_done,
            )
            for key, record in sorted(self.state.records.items(), reverse=True)
        ]

    def stats(self) -> AggregateStats:
        return compute_aggregate_stats(self.state.records)

    def _persist(self) -> None:
        try:
            save_records(self.store, self.state)
            self.persistence_warning = None
        except PersistenceFailure as e:
            self.persistence_warning = "Data could not be saved; changes are kept for this session only."
            self.logger.warning(f"Persisting records failed, continuing in memory: {e}")
