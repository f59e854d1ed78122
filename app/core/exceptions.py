"""
Exception taxonomy for the check-in service.

Services raise these; the API layer turns any ``RollcallError`` into an
``{"error": message}`` body with the matching HTTP status. A duplicate scan
is not an error and has no exception here.
"""
from typing import Optional

from app.core.constants import (
    CHECKIN_FAILED_MESSAGE,
    MISSING_FIELDS_MESSAGE,
    USER_NOT_FOUND_MESSAGE,
)


class RollcallError(Exception):
    """
    Base exception for the check-in service.

    Attributes:
        message: Operator-facing message, returned verbatim to clients
        error_code: Stable code for programmatic handling and logs
        status_code: HTTP status the API layer responds with
    """

    status_code = 500
    default_code = "ROLLCALL_ERROR"

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


class InvalidRequestError(RollcallError):
    """Malformed caller input. No state was read or written."""

    status_code = 400
    default_code = "INVALID_REQUEST"

    def __init__(self, message: str = MISSING_FIELDS_MESSAGE):
        super().__init__(message)


class RecordNotFoundError(RollcallError):
    """The identifier is not registered in the roster."""

    status_code = 404
    default_code = "NOT_FOUND"

    def __init__(self, record_id: str, message: str = USER_NOT_FOUND_MESSAGE):
        super().__init__(message)
        self.record_id = record_id


class StorageError(RollcallError):
    """
    The record store failed or timed out, or conflicts were not resolved.

    The outcome of the attempted write is unknown to the caller. Retrying the
    whole request is safe: a check-in that did commit is counted as a
    duplicate scan on retry.
    """

    status_code = 500
    default_code = "STORAGE_ERROR"

    def __init__(self, message: str = CHECKIN_FAILED_MESSAGE):
        super().__init__(message)
