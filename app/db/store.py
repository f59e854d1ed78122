"""
Record store for roster entries.

The check-in engine only talks to the ``RecordStore`` interface. Its one
non-trivial method is ``conditional_update``: a compare-and-set on the
``scanned`` flag that also bumps the scan counter, so exactly one caller
can win the unscanned -> scanned transition for a given identifier.

Two implementations share the contract:

- ``SqlRecordStore``: a single ``UPDATE ... WHERE scanned = :expected
  RETURNING ...`` statement per attempt, counter incremented in SQL.
- ``InMemoryRecordStore``: dict storage with one lock per record, for tests
  and local tooling.
"""
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.constants import (
    CHECKIN_FAILED_MESSAGE,
    CREATE_FAILED_MESSAGE,
    DELETE_FAILED_MESSAGE,
    EDITABLE_FIELDS,
    LIST_FAILED_MESSAGE,
    UPDATE_FAILED_MESSAGE,
)
from app.core.exceptions import StorageError
from app.core.logging_config import get_logger
from app.core.utils import new_record_id, to_utc_or_none, utcnow
from app.db.models import Attendee

logger = get_logger(__name__)

# Fields conditional_update may assign; scanned_times is always incremented by the store
CHECKIN_FIELDS = ("scanned", "scan_time")


@dataclass(frozen=True)
class CheckInRecord:
    """Immutable snapshot of one roster entry."""

    id: str
    name: str
    title: Optional[str] = None
    district: Optional[str] = None
    region: Optional[str] = None
    scanned: bool = False
    scan_time: Optional[datetime] = None
    scanned_times: int = 0
    created_at: Optional[datetime] = None


class UpdateStatus(Enum):
    APPLIED = "applied"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class UpdateResult:
    status: UpdateStatus
    record: Optional[CheckInRecord] = None


class RecordStore(ABC):
    """Storage interface for roster records."""

    @abstractmethod
    def find_by_id(self, record_id: str) -> Optional[CheckInRecord]:
        """Return the current snapshot, or None if the id is unknown."""

    @abstractmethod
    def conditional_update(
        self,
        record_id: str,
        expected_scanned: bool,
        new_fields: Optional[Mapping[str, Any]] = None,
    ) -> UpdateResult:
        """
        Atomically apply a check-in write if ``scanned`` still equals
        ``expected_scanned``.

        On match, assigns ``new_fields`` (restricted to CHECKIN_FIELDS),
        increments ``scanned_times`` by one and returns APPLIED with the
        post-update snapshot. Otherwise returns CONFLICT (record exists,
        flag differs) or NOT_FOUND.

        Raises:
            StorageError: If the backing store fails or times out
        """

    @abstractmethod
    def list_all(self) -> List[CheckInRecord]:
        """All records in creation order."""

    @abstractmethod
    def create_many(self, rows: Iterable[Mapping[str, Any]]) -> List[CheckInRecord]:
        """Insert new unscanned records in one all-or-nothing batch."""

    @abstractmethod
    def update_by_id(self, record_id: str, fields: Mapping[str, Any]) -> Optional[CheckInRecord]:
        """Update descriptive fields; None if the id is unknown."""

    @abstractmethod
    def delete_by_id(self, record_id: str) -> bool:
        """Delete a record; False if the id is unknown."""


def _check_checkin_fields(new_fields: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    values = dict(new_fields or {})
    unexpected = set(values) - set(CHECKIN_FIELDS)
    if unexpected:
        raise ValueError(f"Fields not allowed in a check-in update: {sorted(unexpected)}")
    return values


def _check_editable_fields(fields: Mapping[str, Any]) -> Dict[str, Any]:
    values = dict(fields)
    unexpected = set(values) - set(EDITABLE_FIELDS)
    if unexpected:
        raise ValueError(f"Fields not editable: {sorted(unexpected)}")
    return values


def _stamped(rows: Iterable[Mapping[str, Any]]):
    """Pair rows with strictly increasing creation times so a batch keeps its input order."""
    now = utcnow()
    for offset, row in enumerate(rows):
        yield now + timedelta(microseconds=offset), row


class SqlRecordStore(RecordStore):
    """Record store backed by a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def _to_record(row) -> CheckInRecord:
        return CheckInRecord(
            id=row.id,
            name=row.name,
            title=row.title,
            district=row.district,
            region=row.region,
            scanned=bool(row.scanned),
            scan_time=to_utc_or_none(row.scan_time),
            scanned_times=row.scanned_times,
            created_at=to_utc_or_none(row.created_at),
        )

    def _fail(self, exc: SQLAlchemyError, event: str, message: str, **context) -> StorageError:
        self.db.rollback()
        logger.error(event, error=str(exc), error_type=type(exc).__name__, **context)
        return StorageError(message)

    def find_by_id(self, record_id: str) -> Optional[CheckInRecord]:
        try:
            # populate_existing: a retry must see the row as committed, not the identity map copy
            attendee = self.db.execute(
                select(Attendee)
                .where(Attendee.id == record_id)
                .execution_options(populate_existing=True)
            ).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise self._fail(exc, "store_read_failed", CHECKIN_FAILED_MESSAGE, record_id=record_id)
        return self._to_record(attendee) if attendee else None

    def conditional_update(self, record_id, expected_scanned, new_fields=None) -> UpdateResult:
        values = _check_checkin_fields(new_fields)
        values["scanned_times"] = Attendee.scanned_times + 1

        stmt = (
            update(Attendee)
            .where(Attendee.id == record_id, Attendee.scanned == expected_scanned)
            .values(**values)
            .returning(*Attendee.__table__.columns)
            .execution_options(synchronize_session=False)
        )
        try:
            row = self.db.execute(stmt).first()
            self.db.commit()
            if row is not None:
                return UpdateResult(UpdateStatus.APPLIED, self._to_record(row))

            exists = self.db.execute(
                select(Attendee.id).where(Attendee.id == record_id)
            ).first()
            self.db.commit()
        except SQLAlchemyError as exc:
            raise self._fail(exc, "store_conditional_update_failed", CHECKIN_FAILED_MESSAGE,
                             record_id=record_id, expected_scanned=expected_scanned)

        if exists is None:
            return UpdateResult(UpdateStatus.NOT_FOUND)
        return UpdateResult(UpdateStatus.CONFLICT)

    def list_all(self) -> List[CheckInRecord]:
        try:
            attendees = self.db.execute(
                select(Attendee).order_by(Attendee.created_at.asc(), Attendee.id.asc())
            ).scalars().all()
        except SQLAlchemyError as exc:
            raise self._fail(exc, "store_list_failed", LIST_FAILED_MESSAGE)
        return [self._to_record(a) for a in attendees]

    def create_many(self, rows) -> List[CheckInRecord]:
        created = []
        try:
            for created_at, row in _stamped(rows):
                attendee = Attendee(
                    id=new_record_id(),
                    scanned=False,
                    scan_time=None,
                    scanned_times=0,
                    created_at=created_at,
                    **_check_editable_fields(row),
                )
                self.db.add(attendee)
                created.append(attendee)
            self.db.commit()
            for attendee in created:
                self.db.refresh(attendee)
        except SQLAlchemyError as exc:
            raise self._fail(exc, "store_create_failed", CREATE_FAILED_MESSAGE, count=len(created))
        return [self._to_record(a) for a in created]

    def update_by_id(self, record_id, fields) -> Optional[CheckInRecord]:
        values = _check_editable_fields(fields)
        try:
            attendee = self.db.get(Attendee, record_id, populate_existing=True)
            if attendee is None:
                return None
            for key, value in values.items():
                setattr(attendee, key, value)
            self.db.commit()
            self.db.refresh(attendee)
        except SQLAlchemyError as exc:
            raise self._fail(exc, "store_update_failed", UPDATE_FAILED_MESSAGE, record_id=record_id)
        return self._to_record(attendee)

    def delete_by_id(self, record_id) -> bool:
        try:
            result = self.db.execute(delete(Attendee).where(Attendee.id == record_id))
            self.db.commit()
        except SQLAlchemyError as exc:
            raise self._fail(exc, "store_delete_failed", DELETE_FAILED_MESSAGE, record_id=record_id)
        return result.rowcount > 0


class InMemoryRecordStore(RecordStore):
    """
    Thread-safe in-memory store with the same conditional-update contract.

    Each record has its own lock, so check-ins for different identifiers
    never wait on each other. The registry lock only guards the id -> record
    mapping itself.
    """

    def __init__(self, records: Optional[Iterable[CheckInRecord]] = None):
        self._records: Dict[str, CheckInRecord] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()
        for record in records or ():
            self.add(record)

    def add(self, record: CheckInRecord) -> None:
        """Insert a record as-is (fixtures, imports with pre-printed badge ids)."""
        with self._registry_lock:
            self._records[record.id] = record
            self._locks[record.id] = threading.Lock()

    def _lock_for(self, record_id: str) -> Optional[threading.Lock]:
        with self._registry_lock:
            return self._locks.get(record_id)

    def find_by_id(self, record_id):
        with self._registry_lock:
            return self._records.get(record_id)

    def conditional_update(self, record_id, expected_scanned, new_fields=None):
        values = _check_checkin_fields(new_fields)
        lock = self._lock_for(record_id)
        if lock is None:
            return UpdateResult(UpdateStatus.NOT_FOUND)

        with lock:
            current = self.find_by_id(record_id)
            if current is None:
                return UpdateResult(UpdateStatus.NOT_FOUND)
            if current.scanned != expected_scanned:
                return UpdateResult(UpdateStatus.CONFLICT)

            updated = replace(current, scanned_times=current.scanned_times + 1, **values)
            with self._registry_lock:
                self._records[record_id] = updated
            return UpdateResult(UpdateStatus.APPLIED, updated)

    def list_all(self):
        with self._registry_lock:
            records = list(self._records.values())
        return sorted(records, key=lambda r: (r.created_at or utcnow(), r.id))

    def create_many(self, rows):
        created = [
            CheckInRecord(id=new_record_id(), created_at=created_at, **_check_editable_fields(row))
            for created_at, row in _stamped(rows)
        ]
        with self._registry_lock:
            for record in created:
                self._records[record.id] = record
                self._locks[record.id] = threading.Lock()
        return created

    def update_by_id(self, record_id, fields):
        values = _check_editable_fields(fields)
        lock = self._lock_for(record_id)
        if lock is None:
            return None
        with lock:
            with self._registry_lock:
                current = self._records.get(record_id)
                if current is None:
                    return None
                updated = replace(current, **values)
                self._records[record_id] = updated
        return updated

    def delete_by_id(self, record_id):
        with self._registry_lock:
            self._locks.pop(record_id, None)
            return self._records.pop(record_id, None) is not None
