"""Check-in endpoint."""
from fastapi import APIRouter, Depends, Request, Response
from starlette.concurrency import run_in_threadpool

from app.api.deps import get_record_store
from app.core.config import settings
from app.core.constants import CHECKIN_DUPLICATE_MESSAGE, CHECKIN_SUCCESS_MESSAGE
from app.core.rate_limit import limiter, RATE_LIMITS
from app.db.store import RecordStore
from app.schemas import CheckinRequest, CheckinResponse, ErrorResponse, ScannedUser
from app.services.checkin import CheckinOutcome, attempt_checkin

router = APIRouter()


def _to_response(outcome: CheckinOutcome) -> CheckinResponse:
    return CheckinResponse(
        status=outcome.status.value,
        message=CHECKIN_DUPLICATE_MESSAGE if outcome.is_duplicate else CHECKIN_SUCCESS_MESSAGE,
        user=ScannedUser(
            name=outcome.name,
            scan_time=outcome.scan_time,
            scanned_times=outcome.scanned_times,
        ),
    )


@router.post(
    "",
    response_model=CheckinResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing id or malformed body"},
        404: {"model": ErrorResponse, "description": "Badge not registered"},
        409: {"model": CheckinResponse, "description": "Badge already scanned"},
        500: {"model": ErrorResponse, "description": "Check-in not durably recorded"},
    },
)
@limiter.limit(RATE_LIMITS["check_in"])
async def checkin_endpoint(
    request: Request,
    response: Response,
    checkin_request: CheckinRequest,
    store: RecordStore = Depends(get_record_store),
):
    """
    Mark the badge holder as checked in.

    Scanner apps post the identifier decoded from a badge QR code, plus the
    time the scan happened on the device if they track it.

    Example:
        Request:
            POST /api/v1/checkin
            {
                "id": "0b7c3c1e-5d2f-4a8e-9b43-2f6f0d6f1a10",
                "scanTime": "2024-01-01T10:00:00Z"
            }

        Response (200, first scan):
            {
                "status": "success",
                "message": "Successfully scanned",
                "user": {"name": "Alice", "scanTime": "2024-01-01T10:00:00Z", "scannedTimes": 1}
            }

        Response (409, badge presented again):
            {
                "status": "already_scanned",
                "message": "User already scanned",
                "user": {"name": "Alice", "scanTime": "2024-01-01T10:00:00Z", "scannedTimes": 2}
            }

        Response (404):
            {"error": "User not found"}

    Duplicates:
        - scanTime always reports the first accepted scan
        - scannedTimes counts every presentation, duplicates included
        - Concurrent scans of one badge yield exactly one 200

    Errors (400/404/500) are rendered by the RollcallError handler in app.main.
    A 500 means the outcome is unknown; retrying is safe because a check-in
    that did commit comes back as a 409.
    """
    # Blocking DB work runs in the threadpool; a client disconnect does not
    # cancel it, so a committed check-in is never rolled back.
    outcome = await run_in_threadpool(
        attempt_checkin,
        store,
        checkin_request.id,
        checkin_request.scan_time,
        settings.CHECKIN_MAX_ATTEMPTS,
    )

    if outcome.is_duplicate:
        response.status_code = 409

    return _to_response(outcome)
