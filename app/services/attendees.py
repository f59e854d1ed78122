"""Roster management business logic."""
import csv
import io
from typing import Any, Dict, Iterable, List, Mapping

from app.core.constants import EDITABLE_FIELDS, EXPORT_COLUMNS
from app.core.exceptions import RecordNotFoundError
from app.core.logging_config import get_logger
from app.core.utils import isoformat_utc
from app.db.store import CheckInRecord, RecordStore

logger = get_logger(__name__)


def list_attendees(store: RecordStore) -> List[CheckInRecord]:
    """All roster entries in import order."""
    return store.list_all()


def get_attendee(store: RecordStore, record_id: str) -> CheckInRecord:
    record = store.find_by_id(record_id)
    if record is None:
        raise RecordNotFoundError(record_id)
    return record


def create_attendees(store: RecordStore, rows: Iterable[Mapping[str, Any]]) -> List[CheckInRecord]:
    """
    Bulk-create roster entries (one row per spreadsheet line).

    New entries start unscanned with a zero scan counter and a fresh
    identifier. The batch is all-or-nothing.
    """
    payload = [_editable(row) for row in rows]
    created = store.create_many(payload)
    logger.info("attendees_created", count=len(created))
    return created


def update_attendee(store: RecordStore, record_id: str, fields: Mapping[str, Any]) -> CheckInRecord:
    """Edit descriptive fields. Check-in state cannot be changed here."""
    changes = _editable(fields)
    if changes.get("name") is None:
        # name is required; a null in the edit form means "unchanged"
        changes.pop("name", None)
    updated = store.update_by_id(record_id, changes)
    if updated is None:
        raise RecordNotFoundError(record_id)
    logger.info("attendee_updated", record_id=record_id)
    return updated


def delete_attendee(store: RecordStore, record_id: str) -> None:
    if not store.delete_by_id(record_id):
        raise RecordNotFoundError(record_id)
    logger.info("attendee_deleted", record_id=record_id)


def _editable(fields: Mapping[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in fields.items() if key in EDITABLE_FIELDS}


def export_attendees_csv(store: RecordStore) -> str:
    """Render the roster, including check-in state, as CSV text."""
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(EXPORT_COLUMNS)
    for record in store.list_all():
        writer.writerow([
            record.id,
            record.name,
            record.title or "",
            record.district or "",
            record.region or "",
            "true" if record.scanned else "false",
            isoformat_utc(record.scan_time),
            record.scanned_times,
            isoformat_utc(record.created_at),
        ])
    return buffer.getvalue()


def attendance_summary(store: RecordStore, alert_threshold: int) -> Dict[str, Any]:
    """
    Attendance totals for the operator dashboard.

    Badges presented more than ``alert_threshold`` times are listed under
    ``flagged``, most-scanned first; these are candidates for shared or
    copied badges.
    """
    records = store.list_all()
    checked_in = [r for r in records if r.scanned]
    total_scans = sum(r.scanned_times for r in records)
    flagged = sorted(
        (r for r in records if r.scanned_times > alert_threshold),
        key=lambda r: r.scanned_times,
        reverse=True,
    )
    return {
        "total": len(records),
        "checked_in": len(checked_in),
        "not_checked_in": len(records) - len(checked_in),
        "total_scans": total_scans,
        # Every scan after the first accepted one is a duplicate
        "duplicate_scans": total_scans - len(checked_in),
        "flagged": flagged,
    }
