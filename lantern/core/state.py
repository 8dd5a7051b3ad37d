"""
Application state: every collection the tracker keeps, loaded from and saved to the store.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from lantern.core.errors import PersistenceFailure
from lantern.core.records import DailyRecord, Profile, Reminders, Settings, load_record
from lantern.core.store import (
    PROFILE_KEY,
    RECORDS_KEY,
    REMINDERS_KEY,
    SETTINGS_KEY,
    PersistentStore,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass
class AppState:
    profile: Profile = field(default_factory=Profile)
    settings: Settings = field(default_factory=Settings)
    records: Dict[str, DailyRecord] = field(default_factory=dict)
    reminders: Reminders = field(default_factory=Reminders)


def _load_model(store: PersistentStore, key: str, model: Type[ModelT]) -> ModelT:
    document = store.get(key)
    if document is None:
        return model()
    try:
        return model.model_validate(document)
    except ValidationError as e:
        logger.warning(f"Stored {key} is malformed, using defaults: {e}")
        return model()


def load_state(store: PersistentStore, clock: Callable[[], datetime] = datetime.now) -> AppState:
    """Read every collection from the store. A store failure yields defaults for this session."""
    try:
        state = AppState(
            profile=_load_model(store, PROFILE_KEY, Profile),
            settings=_load_model(store, SETTINGS_KEY, Settings),
            reminders=_load_model(store, REMINDERS_KEY, Reminders),
        )
        raw_records: Optional[Any] = store.get(RECORDS_KEY)
    except PersistenceFailure as e:
        logger.warning(f"Store unavailable, starting with empty in-memory state: {e}")
        return AppState()

    if isinstance(raw_records, dict):
        now = clock()
        state.records = {
            date_key: load_record(date_key, document, now)
            for date_key, document in raw_records.items()
        }
    elif raw_records is not None:
        logger.warning(f"Stored {RECORDS_KEY} is not a mapping; ignoring it")
    logger.info(f"Loaded state: {len(state.records)} daily records")
    return state


def dump_records(records: Dict[str, DailyRecord]) -> Dict[str, Any]:
    return {date_key: record.model_dump(mode="json") for date_key, record in records.items()}


def save_records(store: PersistentStore, state: AppState) -> None:
    """Raises PersistenceFailure."""
    store.set(RECORDS_KEY, dump_records(state.records))


def save_state(store: PersistentStore, state: AppState) -> None:
    """Write every collection. Raises PersistenceFailure."""
    store.set(PROFILE_KEY, state.profile.model_dump(mode="json"))
    store.set(SETTINGS_KEY, state.settings.model_dump(mode="json"))
    store.set(REMINDERS_KEY, state.reminders.model_dump(mode="json"))
    save_records(store, state)
