from .attendees import (
    attendance_summary,
    create_attendees,
    delete_attendee,
    export_attendees_csv,
    get_attendee,
    list_attendees,
    update_attendee,
)
from .checkin import CheckinOutcome, CheckinStatus, attempt_checkin, resolve_scan_time

__all__ = [
    # check-in
    "CheckinOutcome",
    "CheckinStatus",
    "attempt_checkin",
    "resolve_scan_time",
    # roster
    "attendance_summary",
    "create_attendees",
    "delete_attendee",
    "export_attendees_csv",
    "get_attendee",
    "list_attendees",
    "update_attendee",
]
