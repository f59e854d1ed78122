"""Roster endpoints."""
from typing import List
from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from app.api.deps import get_record_store
from app.core.config import settings
from app.core.rate_limit import limiter, RATE_LIMITS
from app.db.store import CheckInRecord, RecordStore
from app.schemas import (
    AttendanceSummary,
    AttendeeCreate,
    AttendeeResponse,
    AttendeeUpdate,
    ErrorResponse,
    SuccessResponse,
)
from app.services.attendees import (
    attendance_summary,
    create_attendees,
    delete_attendee,
    export_attendees_csv,
    get_attendee,
    list_attendees,
    update_attendee,
)

router = APIRouter()

NOT_FOUND = {404: {"model": ErrorResponse, "description": "User not found"}}


def to_response(record: CheckInRecord) -> AttendeeResponse:
    return AttendeeResponse(
        id=record.id,
        name=record.name,
        title=record.title,
        district=record.district,
        region=record.region,
        scanned=record.scanned,
        scan_time=record.scan_time,
        scanned_times=record.scanned_times,
        created_at=record.created_at,
    )


@router.get("", response_model=List[AttendeeResponse])
@limiter.limit(RATE_LIMITS["roster_read"])
async def list_attendees_endpoint(request: Request, store: RecordStore = Depends(get_record_store)):
    """List the whole roster with check-in state, oldest import first."""
    return [to_response(r) for r in list_attendees(store)]


@router.post("/bulk", response_model=List[AttendeeResponse], status_code=201)
@limiter.limit(RATE_LIMITS["roster_write"])
async def bulk_create_endpoint(
    request: Request,
    attendees: List[AttendeeCreate],
    store: RecordStore = Depends(get_record_store),
):
    """
    Import roster rows (as parsed from the spreadsheet by the admin UI).

    Every row gets a new identifier to print on its badge. Either all rows
    are created or none are.
    """
    created = create_attendees(store, [a.model_dump() for a in attendees])
    return [to_response(r) for r in created]


@router.get("/export", response_class=Response)
@limiter.limit(RATE_LIMITS["roster_read"])
async def export_endpoint(request: Request, store: RecordStore = Depends(get_record_store)):
    """Download the roster with check-in state as CSV."""
    content = export_attendees_csv(store)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="attendees_export.csv"'},
    )


@router.get("/summary", response_model=AttendanceSummary)
@limiter.limit(RATE_LIMITS["roster_read"])
async def summary_endpoint(request: Request, store: RecordStore = Depends(get_record_store)):
    """
    Attendance totals and badges scanned suspiciously often.

    The flag threshold is DUPLICATE_SCAN_ALERT_THRESHOLD scans.
    """
    summary = attendance_summary(store, settings.DUPLICATE_SCAN_ALERT_THRESHOLD)
    summary["flagged"] = [to_response(r) for r in summary["flagged"]]
    return AttendanceSummary(**summary)


@router.get("/{record_id}", response_model=AttendeeResponse, responses=NOT_FOUND)
async def get_attendee_endpoint(record_id: str, store: RecordStore = Depends(get_record_store)):
    return to_response(get_attendee(store, record_id))


@router.put("/{record_id}", response_model=AttendeeResponse, responses=NOT_FOUND)
@limiter.limit(RATE_LIMITS["roster_write"])
async def update_attendee_endpoint(
    request: Request,
    record_id: str,
    changes: AttendeeUpdate,
    store: RecordStore = Depends(get_record_store),
):
    """Edit name, title, district or region. Check-in fields are not editable."""
    updated = update_attendee(store, record_id, changes.model_dump(exclude_unset=True))
    return to_response(updated)


@router.delete(
    "/{record_id}", response_model=SuccessResponse, response_model_exclude_none=True, responses=NOT_FOUND
)
@limiter.limit(RATE_LIMITS["roster_write"])
async def delete_attendee_endpoint(
    request: Request,
    record_id: str,
    store: RecordStore = Depends(get_record_store),
):
    delete_attendee(store, record_id)
    return SuccessResponse(success=True)
