from datetime import datetime, timedelta, timezone
from typing import Optional

from app.db.models import Attendee
from app.db.store import CheckInRecord, InMemoryRecordStore, RecordStore, SqlRecordStore

# Fixed base time so creation order is deterministic
BASE_TIME = datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc)


def seed_record(
    store: RecordStore,
    record_id: str = "u1",
    name: str = "Alice",
    order: int = 0,
    **fields,
) -> Optional[CheckInRecord]:
    """Insert a roster entry with a known id into either store implementation.

    Args:
        store: SqlRecordStore or InMemoryRecordStore
        record_id: Badge identifier
        name: Display name
        order: Offset in minutes from BASE_TIME for created_at
        **fields: Any other CheckInRecord field (title, scanned, scanned_times, ...)
    """
    created_at = BASE_TIME + timedelta(minutes=order)

    if isinstance(store, SqlRecordStore):
        store.db.add(Attendee(id=record_id, name=name, created_at=created_at, **fields))
        store.db.commit()
    elif isinstance(store, InMemoryRecordStore):
        store.add(CheckInRecord(id=record_id, name=name, created_at=created_at, **fields))
    else:
        raise TypeError(f"Cannot seed {type(store).__name__}")

    return store.find_by_id(record_id)
