"""Check-in business logic."""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from app.core.config import settings
from app.core.constants import CHECKIN_FAILED_MESSAGE, MISSING_FIELDS_MESSAGE
from app.core.exceptions import InvalidRequestError, RecordNotFoundError, StorageError
from app.core.logging_config import get_logger
from app.core.utils import to_utc, utcnow
from app.db.store import RecordStore, UpdateStatus

logger = get_logger(__name__)


class CheckinStatus(str, Enum):
    """Successful outcomes of a scan. Values are the wire ``status`` strings."""

    CHECKED_IN = "success"
    ALREADY_CHECKED_IN = "already_scanned"


@dataclass(frozen=True)
class CheckinOutcome:
    status: CheckinStatus
    name: str
    scan_time: Optional[datetime]
    scanned_times: int

    @property
    def is_duplicate(self) -> bool:
        return self.status is CheckinStatus.ALREADY_CHECKED_IN


def resolve_scan_time(claimed_scan_time: Optional[datetime]) -> datetime:
    """Use the scanner's timestamp when given, else the server clock (UTC)."""
    if claimed_scan_time is None:
        return utcnow()
    return to_utc(claimed_scan_time)


def attempt_checkin(
    store: RecordStore,
    record_id: Optional[str],
    claimed_scan_time: Optional[datetime] = None,
    max_attempts: Optional[int] = None,
) -> CheckinOutcome:
    """
    Register one presentation of a badge.

    The first accepted scan flips ``scanned`` and fixes ``scan_time``; every
    later scan only increments ``scanned_times``, so the arrival time stays
    stable while repeated presentations remain visible to operators.

    The decision is made against a snapshot and committed with a conditional
    update on the ``scanned`` flag. If another scanner won the race the
    update reports a conflict and the decision is re-made from a fresh read,
    which lands the loser on the duplicate branch.

    Args:
        store: Record store holding the roster
        record_id: Identifier decoded from the QR code
        claimed_scan_time: Timestamp reported by the scanner, if any
        max_attempts: Decision attempts before giving up (default from settings)

    Returns:
        CheckinOutcome with status CHECKED_IN or ALREADY_CHECKED_IN

    Raises:
        InvalidRequestError: record_id missing or blank (store not touched)
        RecordNotFoundError: record_id not in the roster
        StorageError: store failure, timeout, or unresolved conflicts
    """
    if not record_id or not record_id.strip():
        raise InvalidRequestError(MISSING_FIELDS_MESSAGE)

    record_id = record_id.strip()
    scan_time = resolve_scan_time(claimed_scan_time)
    attempts = max_attempts or settings.CHECKIN_MAX_ATTEMPTS

    for attempt in range(1, attempts + 1):
        record = store.find_by_id(record_id)
        if record is None:
            logger.info("checkin_unknown_id", record_id=record_id)
            raise RecordNotFoundError(record_id)

        if record.scanned:
            result = store.conditional_update(record_id, expected_scanned=True)
            status = CheckinStatus.ALREADY_CHECKED_IN
        else:
            result = store.conditional_update(
                record_id,
                expected_scanned=False,
                new_fields={"scanned": True, "scan_time": scan_time},
            )
            status = CheckinStatus.CHECKED_IN

        if result.status is UpdateStatus.APPLIED:
            updated = result.record
            if status is CheckinStatus.CHECKED_IN:
                logger.info("checkin_accepted", record_id=record_id,
                            scan_time=updated.scan_time.isoformat())
            else:
                logger.info("checkin_duplicate", record_id=record_id,
                            scanned_times=updated.scanned_times)
            return CheckinOutcome(
                status=status,
                name=updated.name,
                scan_time=updated.scan_time,
                scanned_times=updated.scanned_times,
            )

        if result.status is UpdateStatus.NOT_FOUND:
            # Deleted between the read and the write
            logger.info("checkin_unknown_id", record_id=record_id, attempt=attempt)
            raise RecordNotFoundError(record_id)

        logger.info("checkin_conflict_retry", record_id=record_id, attempt=attempt)

    logger.error("checkin_conflict_exhausted", record_id=record_id, attempts=attempts)
    raise StorageError(CHECKIN_FAILED_MESSAGE)
