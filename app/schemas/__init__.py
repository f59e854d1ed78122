"""Pydantic schemas for request/response validation."""
from app.schemas.attendee import (
    AttendanceSummary,
    AttendeeCreate,
    AttendeeResponse,
    AttendeeUpdate,
)
from app.schemas.checkin import CheckinRequest, CheckinResponse, ScannedUser
from app.schemas.common import SuccessResponse, ErrorResponse

__all__ = [
    "AttendanceSummary",
    "AttendeeCreate",
    "AttendeeResponse",
    "AttendeeUpdate",
    "CheckinRequest",
    "CheckinResponse",
    "ScannedUser",
    "SuccessResponse",
    "ErrorResponse",
]
